"""
Generate a water-quality report from a CSV file on the command line.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from app.services.csv_ingestion_service import DatasetError
from app.services.report_service import get_report_service
from standards.profiles import UnknownStandardsProfile


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{text!r} is not an integer") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"{value} must be >= 0")
    return value


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute HPI, HEI and CI for a sampling table.")
    parser.add_argument("--input", dest="input", required=True, help="Path to the input CSV file.")
    parser.add_argument(
        "--unit",
        dest="unit",
        default=None,
        help='Unit of the metal columns, "µg/L" or "mg/L". Defaults to configuration.',
    )
    parser.add_argument(
        "--profile",
        dest="profile",
        default=None,
        help="Standards profile key or label. Defaults to configuration.",
    )
    parser.add_argument(
        "--strict",
        dest="strict",
        action="store_true",
        default=None,
        help="Fail when any metal cell is not a valid non-negative decimal.",
    )
    parser.add_argument(
        "--output",
        dest="output",
        default=None,
        help="Optional path for the export CSV with index columns.",
    )
    parser.add_argument(
        "--decimals",
        dest="decimals",
        type=_non_negative_int,
        default=None,
        help="Round index columns in the export CSV.",
    )
    args = parser.parse_args(argv)

    raw_text = Path(args.input).read_text(encoding="utf-8")
    service = get_report_service()
    try:
        analysis = service.analyze(raw_text, input_unit=args.unit, profile=args.profile, strict=args.strict)
    except DatasetError as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return 2
    except (UnknownStandardsProfile, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    if args.output:
        Path(args.output).write_text(
            service.export_csv(analysis, decimals=args.decimals),
            encoding="utf-8",
            newline="",
        )

    print(json.dumps(analysis.summary.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
