"""Overhead policy: how much of a VM's memory is reserved from the guest.

Two reservation schemes exist:

* legacy -- a flat 100 MiB regardless of VM size;
* ratio  -- a share of the VM size that grows with the VM, from 1% for
  VMs up to 1 GiB to 5% above 8 GiB.

``auto`` picks ratio for VMs of 4 GiB and up (compared in raw bytes) and
legacy below that.  The ratio bracket itself is looked up with the VM size in
GiB truncated to two places, so the two thresholds are not the same
comparison.
"""

from __future__ import annotations

import logging
from decimal import ROUND_DOWN, Decimal, localcontext

from hvmemcalc.calc.base import (
    CalculationResult,
    GuestBelowMinimumError,
    Method,
    MethodUsed,
    Reservation,
)
from hvmemcalc.calc.sizes import GIB, MIB, decimal_precision

logger = logging.getLogger(__name__)

LEGACY_RESERVED_BYTES = 100 * MIB
AUTO_THRESHOLD_BYTES = 4 * GIB
MIN_GUEST_BYTES = 10 * MIB

# (upper bound in GiB, inclusive) -> ratio; anything larger gets _TOP_RATIO.
_RATIO_TABLE: tuple[tuple[Decimal, Decimal], ...] = (
    (Decimal(1), Decimal("0.01")),
    (Decimal(2), Decimal("0.02")),
    (Decimal(4), Decimal("0.03")),
    (Decimal(8), Decimal("0.04")),
)
_TOP_RATIO = Decimal("0.05")

_TWO_PLACES = Decimal("0.01")
_ONE_PLACE = Decimal("0.1")


def ratio_for(vm_bytes: int) -> Decimal:
    """Return the reservation ratio bracket for a VM of *vm_bytes*."""
    with localcontext() as ctx:
        ctx.prec = decimal_precision(vm_bytes)
        vm_gib = (Decimal(vm_bytes) / GIB).quantize(_TWO_PLACES, rounding=ROUND_DOWN)
    for upper_gib, ratio in _RATIO_TABLE:
        if vm_gib <= upper_gib:
            return ratio
    return _TOP_RATIO


def ratio_reserved_bytes(vm_bytes: int, ratio: Decimal) -> int:
    with localcontext() as ctx:
        ctx.prec = decimal_precision(vm_bytes)
        return int(Decimal(vm_bytes) * ratio)


def resolve_method(vm_bytes: int, method: Method) -> MethodUsed:
    """Collapse ``auto`` into the branch it selects for *vm_bytes*."""
    if method is Method.LEGACY:
        return MethodUsed.LEGACY
    if method is Method.RATIO:
        return MethodUsed.RATIO
    if vm_bytes >= AUTO_THRESHOLD_BYTES:
        return MethodUsed.RATIO
    return MethodUsed.LEGACY


def reserve(vm_bytes: int, method: Method) -> Reservation:
    """Determine how many bytes of *vm_bytes* are reserved under *method*."""
    ratio = ratio_for(vm_bytes)
    method_used = resolve_method(vm_bytes, method)
    if method_used is MethodUsed.RATIO:
        reserved = ratio_reserved_bytes(vm_bytes, ratio)
    else:
        reserved = LEGACY_RESERVED_BYTES
    return Reservation(reserved_bytes=reserved, method_used=method_used, ratio=ratio)


def overhead_percent(reserved_bytes: int, vm_bytes: int) -> Decimal:
    """Reserved share of the VM in percent, truncated to one decimal place."""
    with localcontext() as ctx:
        ctx.prec = decimal_precision(reserved_bytes * 100)
        percent = Decimal(reserved_bytes) * 100 / Decimal(vm_bytes)
        return percent.quantize(_ONE_PLACE, rounding=ROUND_DOWN)


def calculate(vm_bytes: int, method: Method) -> CalculationResult:
    """Forward calculation: split *vm_bytes* into reserved and guest memory.

    Raises :class:`GuestBelowMinimumError` if the reservation would leave
    the guest with less than :data:`MIN_GUEST_BYTES`.
    """
    if vm_bytes < 0:
        msg = f"VM memory must be non-negative, got {vm_bytes}"
        raise ValueError(msg)

    reservation = reserve(vm_bytes, method)
    guest_bytes = vm_bytes - reservation.reserved_bytes
    if guest_bytes < MIN_GUEST_BYTES:
        raise GuestBelowMinimumError(guest_bytes, MIN_GUEST_BYTES)

    logger.debug(
        "vm=%d method=%s -> reserved=%d (%s, ratio %s)",
        vm_bytes,
        method.value,
        reservation.reserved_bytes,
        reservation.method_used.value,
        reservation.ratio,
    )

    return CalculationResult(
        vm_memory_bytes=vm_bytes,
        reserved_bytes=reservation.reserved_bytes,
        guest_memory_bytes=guest_bytes,
        method_used=reservation.method_used,
        overhead_percent=overhead_percent(reservation.reserved_bytes, vm_bytes),
        ratio=reservation.ratio,
        legacy_reserved_bytes=LEGACY_RESERVED_BYTES,
        ratio_reserved_bytes=ratio_reserved_bytes(vm_bytes, reservation.ratio),
    )
