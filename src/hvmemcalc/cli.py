"""CLI entry point for hvmemcalc."""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import TYPE_CHECKING

from hvmemcalc import __version__
from hvmemcalc.calc.base import HvmemcalcError, Method

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hvmemcalc.config import HvmemcalcConfig

logger = logging.getLogger(__name__)

_EPILOG = textwrap.dedent(
    """\
    forward calculation (VM size -> reserved memory):
      hvmemcalc 4Gi                    auto method
      hvmemcalc 8GB --method legacy    fixed 100MiB reservation
      hvmemcalc 2Gi --method ratio     ratio-based reservation
      hvmemcalc 512Mi --verbose        byte counts and alternatives
      hvmemcalc 16G --annotation       annotation line only

    reverse calculation (guest memory -> VM size):
      hvmemcalc --guest 24Gi
      hvmemcalc --guest 8GB --method legacy
      hvmemcalc --guest 4Gi --annotation
    """
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hvmemcalc",
        description=(
            "Calculate reserved memory for Harvester virtual machines, "
            "or the VM size needed for a desired guest memory."
        ),
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"hvmemcalc {__version__}",
    )
    parser.add_argument(
        "vm_memory",
        nargs="?",
        default=None,
        help="VM memory size (examples: 4Gi, 8GB, 512Mi, 2G)",
    )
    parser.add_argument(
        "--guest",
        default=None,
        metavar="MEMORY",
        help="Calculate VM size needed for desired guest memory",
    )
    parser.add_argument(
        "--method",
        default=None,
        metavar="METHOD",
        help="Calculation method: auto, legacy, or ratio (default: auto)",
    )
    parser.add_argument(
        "--annotation",
        action="store_true",
        default=False,
        help="Show only the annotation for YAML files",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Show detailed information",
    )
    parser.add_argument(
        "--list-common",
        action="store_true",
        default=False,
        help="Show calculations for common VM sizes",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to config TOML file",
    )
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _run(args: argparse.Namespace, config: HvmemcalcConfig) -> str:
    """Perform the requested calculation and return the text to print."""
    from hvmemcalc.calc.policy import calculate
    from hvmemcalc.calc.sizes import parse_size
    from hvmemcalc.calc.solver import solve
    from hvmemcalc.report import (
        render_annotation,
        render_common,
        render_forward,
        render_reverse,
    )

    annotation_key = config.output.annotation_key

    if args.list_common:
        rows = [
            (size, calculate(parse_size(size), Method.AUTO))
            for size in config.output.common_sizes
        ]
        return render_common(rows)

    method = Method.parse(args.method if args.method is not None else config.defaults.method)
    verbose = config.defaults.verbose if args.verbose is None else args.verbose

    if args.guest is not None:
        result = solve(parse_size(args.guest), method)
        if args.annotation:
            return render_annotation(result, annotation_key)
        return render_reverse(result, verbose=verbose, annotation_key=annotation_key)

    result = calculate(parse_size(args.vm_memory), method)
    if args.annotation:
        return render_annotation(result, annotation_key)
    return render_forward(result, verbose=verbose, annotation_key=annotation_key)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the hvmemcalc CLI."""
    from hvmemcalc.config import load_config

    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.list_common:
        if args.vm_memory is not None and args.guest is not None:
            parser.error("Multiple memory sizes provided")
        if args.vm_memory is None and args.guest is None:
            parser.error("No memory size provided")

    try:
        config = load_config(args.config)
    except HvmemcalcError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from None

    _configure_logging(config.logging.level)

    try:
        output = _run(args, config)
    except HvmemcalcError as exc:
        logger.debug("Calculation failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from None

    print(output)
