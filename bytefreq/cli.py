"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys

from .api import dump_listing, frequency_report, load_image
from .config import ReportConfig
from .errors import BytecodeError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytefreq",
        description="Count instruction frequencies in a stack-machine bytecode file",
    )
    parser.add_argument("file", help="Bytecode file to analyse")
    parser.add_argument(
        "--top",
        "-n",
        type=int,
        default=0,
        help="Only print the N most frequent instructions (default: all)",
    )
    parser.add_argument(
        "--listing",
        action="store_true",
        help="Print a linear instruction listing instead of frequencies",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log progress to stderr"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.top < 0:
        parser.error(f"--top must be 0 or greater, got {args.top}")
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    config = ReportConfig(top=args.top, listing=args.listing)

    try:
        image = load_image(args.file)
        output = dump_listing(image) if config.listing else frequency_report(image, config)
    except OSError as exc:
        print(f"error: cannot read {args.file}: {exc.strerror or exc}", file=sys.stderr)
        return 1
    except BytecodeError as exc:
        print(f"error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    if output:
        print(output)
    return 0
