#!/usr/bin/env python3
"""
Breaker Sizing Command Line
Size a circuit breaker from a circuit description file.

Usage:
    breaker-sizing --input circuit.yaml --output result.yaml
    breaker-sizing -i circuit.yaml --format json --standard IEC

Exit status: 0 on success, 1 on file or settings errors, 2 on invalid input.
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .config import load_settings
from .engine import CalculationEngine
from .errors import ConfigError, ValidationFailed
from .logging_setup import init_logging
from .report import dump_json, dump_yaml
from .standards_tables import StandardsTable
from .validation import parse_design

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FILE_ERROR = 1
EXIT_INVALID_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="breaker-sizing",
        description="Size a circuit breaker per NEC or IEC from a circuit description"
    )
    parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Path to circuit description (YAML or JSON)"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output path for the result (default: stdout)"
    )
    parser.add_argument(
        "--format", "-f",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)"
    )
    parser.add_argument(
        "--settings", "-s",
        type=Path,
        help="Engine settings YAML overriding advisory thresholds"
    )
    parser.add_argument(
        "--standard",
        choices=["NEC", "IEC"],
        help="Override the standard given in the input file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log each calculation stage"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(logging.DEBUG if args.verbose else logging.WARNING)

    # Validate inputs
    if not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return EXIT_FILE_ERROR

    try:
        settings = load_settings(args.settings)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    try:
        with open(args.input, encoding="utf-8") as f:
            record = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"Error: Could not parse {args.input}: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    if not isinstance(record, dict):
        print(f"Error: {args.input} must contain a mapping of circuit fields", file=sys.stderr)
        return EXIT_FILE_ERROR
    if args.standard:
        record["standard"] = args.standard

    table = StandardsTable.load()
    try:
        design = parse_design(record, table=table, settings=settings)
    except ValidationFailed as e:
        print(f"Invalid input in {args.input}:", file=sys.stderr)
        for error in e.errors:
            print(f"  {error.field}: {error.message}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    result = CalculationEngine(table, settings).calculate(design)
    dump = dump_json if args.format == "json" else dump_yaml

    if args.output is None:
        sys.stdout.write(dump(result))
        if args.format == "json":
            sys.stdout.write("\n")
    else:
        # Create output directory if needed
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            dump(result, f)

        # Print summary
        print(f"Breaker sizing written to {args.output}")
        print(f"  Load current: {result.load_current_a:.1f} A")
        print(f"  Breaker: {result.recommended_rating_a:g} A {result.breaker.trip_characteristic}")
        print(f"  Interrupting rating: {result.breaker.interrupting_rating_ka:g} kA")
        print(f"  Warnings: {len(result.warnings)}")

    for w in result.warnings:
        logger.warning("[%s] %s: %s", w.severity.value, w.code, w.message)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
