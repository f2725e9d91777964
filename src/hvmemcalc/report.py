"""Text rendering of calculation results.

Label text and column widths are scraped by downstream tooling; keep them
stable.
"""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import TYPE_CHECKING

from hvmemcalc.calc.policy import LEGACY_RESERVED_BYTES, overhead_percent
from hvmemcalc.calc.sizes import decimal_precision, format_size
from hvmemcalc.config import DEFAULT_ANNOTATION_KEY

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hvmemcalc.calc.base import CalculationResult

_RULE = "=" * 40
_WIDE_RULE = "=" * 60


def _ratio_percent(ratio: Decimal) -> str:
    return f"{ratio * 100:.2f}"


def render_annotation(
    result: CalculationResult, annotation_key: str = DEFAULT_ANNOTATION_KEY
) -> str:
    """Single ``key: "bytes"`` line for pasting into a VM manifest."""
    return f'{annotation_key}: "{result.reserved_bytes}"'


def render_forward(
    result: CalculationResult,
    *,
    verbose: bool = False,
    annotation_key: str = DEFAULT_ANNOTATION_KEY,
) -> str:
    lines = [
        "FORWARD CALCULATION: VM Size -> Reserved Memory",
        _RULE,
        f"VM Memory:       {format_size(result.vm_memory_bytes)}",
        f"Reserved:        {format_size(result.reserved_bytes)}",
        f"Guest Memory:    {format_size(result.guest_memory_bytes)}",
        f"Method:          {result.method_used.label}",
        f"Overhead:        {result.overhead_percent}%",
        f"Ratio:           {_ratio_percent(result.ratio)}%",
    ]

    if verbose:
        ratio_overhead = overhead_percent(
            result.ratio_reserved_bytes, result.vm_memory_bytes
        )
        lines += [
            "",
            "Detailed Information:",
            f"VM Memory Bytes: {result.vm_memory_bytes:,}",
            f"Reserved Bytes:  {result.reserved_bytes:,}",
            f"Guest Bytes:     {result.guest_memory_bytes:,}",
            "",
            "Alternative Methods:",
            f"  Legacy:  {format_size(result.legacy_reserved_bytes)} (100MiB fixed)",
            f"  Ratio:   {format_size(result.ratio_reserved_bytes)} "
            f"({ratio_overhead}% overhead)",
        ]

    lines += [
        "",
        "YAML Annotation:",
        "  annotations:",
        f"    {render_annotation(result, annotation_key)}",
    ]
    return "\n".join(lines)


def render_reverse(
    result: CalculationResult,
    *,
    verbose: bool = False,
    annotation_key: str = DEFAULT_ANNOTATION_KEY,
) -> str:
    desired = result.desired_guest_bytes
    if desired is None:
        msg = "render_reverse needs a result produced by solve()"
        raise ValueError(msg)

    vm_formatted = format_size(result.vm_memory_bytes)
    lines = [
        "REVERSE CALCULATION: Desired Guest Memory -> VM Size",
        _RULE,
        f"Desired Guest:   {format_size(desired)}",
        f"Required VM:     {vm_formatted}",
        f"Reserved:        {format_size(result.reserved_bytes)}",
        f"Actual Guest:    {format_size(result.guest_memory_bytes)}",
        f"Method:          {result.method_used.label}",
        f"Overhead:        {result.overhead_percent}%",
        f"Ratio:           {_ratio_percent(result.ratio)}%",
    ]

    if verbose:
        with localcontext() as ctx:
            ctx.prec = decimal_precision(desired)
            ratio_vm = int(Decimal(desired) / (1 - result.ratio))
        lines += [
            "",
            "Detailed Information:",
            f"Desired Guest Bytes: {desired:,}",
            f"VM Memory Bytes:     {result.vm_memory_bytes:,}",
            f"Reserved Bytes:      {result.reserved_bytes:,}",
            f"Actual Guest Bytes:  {result.guest_memory_bytes:,}",
            "",
            "Alternative Methods:",
            f"  Legacy:  VM {format_size(desired + LEGACY_RESERVED_BYTES)} (100MiB fixed)",
            f"  Ratio:   VM {format_size(ratio_vm)} "
            f"({result.ratio * 100:.1f}% overhead)",
        ]

    lines += [
        "",
        "YAML Configuration:",
        f"  memory: {vm_formatted}",
        "  annotations:",
        f"    {render_annotation(result, annotation_key)}",
    ]
    return "\n".join(lines)


def render_common(rows: Iterable[tuple[str, CalculationResult]]) -> str:
    """Summary table of ``(size label, result)`` pairs."""
    lines = ["Common VM Sizes Calculation:", _WIDE_RULE]
    for label, result in rows:
        reserved = format_size(result.reserved_bytes)
        guest = format_size(result.guest_memory_bytes)
        lines.append(f"  {label:<5} -> Reserved: {reserved:<8} -> Guest: {guest:<8}")
    return "\n".join(lines)
