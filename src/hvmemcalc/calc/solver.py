"""Reverse calculation: VM size needed to give the guest a desired amount."""

from __future__ import annotations

import dataclasses
import logging
from decimal import Decimal, localcontext

from hvmemcalc.calc.base import (
    CalculationResult,
    Method,
    MethodUsed,
    NonConvergenceError,
)
from hvmemcalc.calc.policy import (
    AUTO_THRESHOLD_BYTES,
    LEGACY_RESERVED_BYTES,
    calculate,
    ratio_for,
)
from hvmemcalc.calc.sizes import decimal_precision

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 10

# Seed assumes a 3% reservation; each retry grows the VM by 1%.
_SEED_DIVISOR = Decimal("0.97")
_GROWTH = Decimal("1.01")


def solve(
    desired_guest_bytes: int,
    method: Method,
    *,
    max_iterations: int = MAX_ITERATIONS,
) -> CalculationResult:
    """Find a VM size whose guest memory is at least *desired_guest_bytes*.

    The returned result is the forward calculation for the chosen VM size,
    so its guest memory may exceed the desired amount.

    Raises :class:`NonConvergenceError` if the ratio search runs out of
    iterations, and :class:`GuestBelowMinimumError` for guest sizes too
    small to admit.
    """
    if desired_guest_bytes < 0:
        msg = f"guest memory must be non-negative, got {desired_guest_bytes}"
        raise ValueError(msg)

    method_used = _resolve_reverse_method(desired_guest_bytes, method)

    if method_used is MethodUsed.LEGACY:
        vm_bytes = desired_guest_bytes + LEGACY_RESERVED_BYTES
        result = calculate(vm_bytes, Method.LEGACY)
        return dataclasses.replace(result, desired_guest_bytes=desired_guest_bytes)

    vm_bytes, iterations = _search_ratio(desired_guest_bytes, max_iterations)
    result = calculate(vm_bytes, Method.RATIO)
    if result.guest_memory_bytes < desired_guest_bytes:
        logger.warning(
            "Ratio search did not converge for guest=%d after %d iterations (vm=%d)",
            desired_guest_bytes,
            iterations,
            vm_bytes,
        )
        raise NonConvergenceError(desired_guest_bytes, vm_bytes, iterations)

    return dataclasses.replace(
        result, desired_guest_bytes=desired_guest_bytes, iterations=iterations
    )


def _resolve_reverse_method(desired_guest_bytes: int, method: Method) -> MethodUsed:
    # Auto decides on the guest size here, not on the (unknown) VM size.
    if method is Method.LEGACY:
        return MethodUsed.LEGACY
    if method is Method.RATIO or desired_guest_bytes >= AUTO_THRESHOLD_BYTES:
        return MethodUsed.RATIO
    return MethodUsed.LEGACY


def _search_ratio(desired_guest_bytes: int, max_iterations: int) -> tuple[int, int]:
    """Grow the VM size geometrically until the ratio bracket leaves enough.

    Returns ``(vm_bytes, iterations)``.  The answer is the first size in the
    growth sequence that fits, not necessarily the smallest possible one.
    """
    with localcontext() as ctx:
        ctx.prec = decimal_precision(desired_guest_bytes)
        vm_bytes = int(Decimal(desired_guest_bytes) / _SEED_DIVISOR)
        for iteration in range(max_iterations):
            ratio = ratio_for(vm_bytes)
            candidate = int(Decimal(vm_bytes) * (1 - ratio))
            logger.debug(
                "iteration %d: vm=%d ratio=%s guest=%d (want %d)",
                iteration,
                vm_bytes,
                ratio,
                candidate,
                desired_guest_bytes,
            )
            if candidate >= desired_guest_bytes:
                return vm_bytes, iteration
            vm_bytes = int(Decimal(vm_bytes) * _GROWTH)
    return vm_bytes, max_iterations
