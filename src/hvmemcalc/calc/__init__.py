"""Memory reservation engine: size parsing, overhead policy, reverse solver."""

from __future__ import annotations

from hvmemcalc.calc.base import (
    CalculationResult,
    ConfigError,
    GuestBelowMinimumError,
    HvmemcalcError,
    InvalidMethodError,
    Method,
    MethodUsed,
    NonConvergenceError,
    ParseError,
    Reservation,
)
from hvmemcalc.calc.policy import calculate, ratio_for, reserve
from hvmemcalc.calc.sizes import format_size, parse_size
from hvmemcalc.calc.solver import solve

__all__ = [
    "CalculationResult",
    "ConfigError",
    "GuestBelowMinimumError",
    "HvmemcalcError",
    "InvalidMethodError",
    "Method",
    "MethodUsed",
    "NonConvergenceError",
    "ParseError",
    "Reservation",
    "calculate",
    "format_size",
    "parse_size",
    "ratio_for",
    "reserve",
    "solve",
]
