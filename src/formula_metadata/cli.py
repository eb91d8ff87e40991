"""
Command-line adapter for formula metadata extraction.

Usage:
    formula-metadata Formula/l/libpng.rb
    formula-metadata Formula/a/*.rb --indent 2
    formula-metadata libpng.rb zlib.rb --verbose

Prints a JSON array of records to stdout. Files that fail are reported on
stderr and skipped; the exit code is 1 if any file failed.
"""

import argparse
import json
import logging
import sys

from formula_metadata import __version__
from formula_metadata.parser import FormulaParser


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="formula-metadata",
        description="Extract package metadata from formula scripts without running them.",
    )

    parser.add_argument(
        "paths",
        nargs="+",
        help="Formula files to parse",
    )

    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Pretty-print JSON output with this indent",
    )

    parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Encoding used to read formula files (default: utf-8)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 = every file parsed, 1 = at least one failed)
    """
    args = create_parser().parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    records, failures = FormulaParser(encoding=args.encoding).parse_many(args.paths)

    print(json.dumps([record.to_dict() for record in records], indent=args.indent))

    for path, error in failures:
        print(f"error: {path}: {error.message}", file=sys.stderr)

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
