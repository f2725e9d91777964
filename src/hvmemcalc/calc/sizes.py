"""Memory size parsing and human-readable formatting."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, localcontext

from hvmemcalc.calc.base import ParseError

KIB = 1024
MIB = KIB**2
GIB = KIB**3
TIB = KIB**4

# K/M/G/T and their B forms are binary here, same as Ki/Mi/Gi/Ti.
_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "K": KIB,
    "KB": KIB,
    "KI": KIB,
    "M": MIB,
    "MB": MIB,
    "MI": MIB,
    "G": GIB,
    "GB": GIB,
    "GI": GIB,
    "T": TIB,
    "TB": TIB,
    "TI": TIB,
}

_SIZE_WITH_UNIT_RE = re.compile(r"^([0-9]+(?:\.[0-9]+)?)([A-Za-z]+)$")
_BARE_INTEGER_RE = re.compile(r"^[0-9]+$")

_UNITS = ("B", "Ki", "Mi", "Gi", "Ti")
_TWO_PLACES = Decimal("0.01")

# Largest size accepted from text: 1024 Ti.
MAX_SIZE_BYTES = 1024 * TIB

# Longest numeric literal accepted; anything longer is far past MAX_SIZE_BYTES.
_MAX_LITERAL_LENGTH = 32


def decimal_precision(n: int) -> int:
    """Decimal context precision that keeps *n* and two extra places exact."""
    return max(50, len(str(abs(n))) + 10)


def parse_size(text: str) -> int:
    """Parse ``"4Gi"``, ``"512mb"``, ``"1.5G"`` or ``"1048576"`` into bytes.

    Fractional quantities are truncated toward zero after scaling.
    Raises :class:`ParseError` on bad grammar, an unknown unit, or a size
    above :data:`MAX_SIZE_BYTES`.
    """
    value = text.strip()

    if _BARE_INTEGER_RE.match(value):
        number, multiplier = value, 1
    else:
        match = _SIZE_WITH_UNIT_RE.match(value)
        if match is None:
            raise ParseError(f"Invalid size format: {text!r}")
        number = match.group(1)
        multiplier = _MULTIPLIERS.get(match.group(2).upper())
        if multiplier is None:
            raise ParseError(f"Unknown unit: {match.group(2)!r}")

    if len(number) > _MAX_LITERAL_LENGTH:
        raise ParseError(f"Size too large: {text!r} (maximum is 1024Ti)")

    with localcontext() as ctx:
        ctx.prec = 50
        n = int(Decimal(number) * multiplier)

    if n > MAX_SIZE_BYTES:
        raise ParseError(f"Size too large: {text!r} (maximum is 1024Ti)")
    return n


def format_size(n: int) -> str:
    """Render a byte count with the largest binary unit up to ``Ti``.

    The running value is rounded to two places after every division, so a
    value just under a unit boundary can round up into the next unit.
    """
    size = Decimal(n)
    unit_index = 0
    with localcontext() as ctx:
        ctx.prec = decimal_precision(n)
        while size >= KIB and unit_index < len(_UNITS) - 1:
            size = (size / KIB).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
            unit_index += 1

    if unit_index == 0:
        return f"{n} B"
    return f"{size:.2f} {_UNITS[unit_index]}"
