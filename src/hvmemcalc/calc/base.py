"""Core data types and exception hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

# --- Exceptions ---


class HvmemcalcError(Exception):
    """Base exception for all hvmemcalc errors."""


class ParseError(HvmemcalcError):
    """Malformed size text or unknown unit."""


class InvalidMethodError(HvmemcalcError):
    """Method token is not one of auto, legacy or ratio."""


class GuestBelowMinimumError(HvmemcalcError):
    """The reservation would leave the guest less than the admission minimum."""

    def __init__(self, guest_bytes: int, minimum_bytes: int) -> None:
        self.guest_bytes = guest_bytes
        self.minimum_bytes = minimum_bytes
        super().__init__(
            f"guest memory would be {guest_bytes} bytes, "
            f"below the minimum of {minimum_bytes} bytes"
        )


class NonConvergenceError(HvmemcalcError):
    """Reverse ratio solve hit its iteration cap below the desired guest size."""

    def __init__(self, desired_bytes: int, vm_bytes: int, iterations: int) -> None:
        self.desired_bytes = desired_bytes
        self.vm_bytes = vm_bytes
        self.iterations = iterations
        super().__init__(
            f"no VM size found for {desired_bytes} bytes of guest memory "
            f"after {iterations} iterations (last tried {vm_bytes} bytes)"
        )


class ConfigError(HvmemcalcError):
    """Configuration loading or validation failure."""


# --- Methods ---


class Method(Enum):
    AUTO = "auto"
    LEGACY = "legacy"
    RATIO = "ratio"

    @classmethod
    def parse(cls, token: str) -> Method:
        try:
            return cls(token.strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise InvalidMethodError(
                f"Invalid method: {token!r} (choose from {choices})"
            ) from None


class MethodUsed(Enum):
    """Branch a calculation actually took. Auto always resolves to one of these."""

    LEGACY = "legacy"
    RATIO = "ratio-based"

    @property
    def label(self) -> str:
        if self is MethodUsed.LEGACY:
            return "legacy (100MiB fixed)"
        return "ratio-based"


# --- Data Types (frozen, slotted) ---


@dataclass(frozen=True, slots=True)
class Reservation:
    """Bytes withheld from the guest for a given VM size."""

    reserved_bytes: int
    method_used: MethodUsed
    ratio: Decimal  # ratio bracket of the VM size, even for legacy


@dataclass(frozen=True, slots=True)
class CalculationResult:
    """Full breakdown of a VM's memory into reserved and guest parts."""

    vm_memory_bytes: int
    reserved_bytes: int
    guest_memory_bytes: int
    method_used: MethodUsed
    overhead_percent: Decimal
    ratio: Decimal
    legacy_reserved_bytes: int
    ratio_reserved_bytes: int
    desired_guest_bytes: int | None = None  # reverse calculations only
    iterations: int = 0

    def __post_init__(self) -> None:
        if self.reserved_bytes + self.guest_memory_bytes != self.vm_memory_bytes:
            msg = "reserved and guest memory must add up to the VM memory"
            raise ValueError(msg)
