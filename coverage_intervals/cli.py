"""
Command-line interface for the coverage intervals tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .aggregation import aggregate_records
from .exceptions import CoverageIntervalsError
from .loaders import load_periods, load_usage_records
from .models import ReportWindow
from .reconciler import IntervalReconciler
from .reporting import (
    aggregated_rows_to_frame,
    aggregated_rows_to_json,
    export_intervals_csv,
    export_intervals_worksheet,
    intervals_to_json,
    print_summary,
    save_intervals_json,
)
from .time_utils import REFERENCE_ZONE_CANDIDATES, parse_instant, resolve_reference_zone


logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_INPUT_NOT_FOUND = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coverage-intervals",
        description="Split a reporting window at every change in contract coverage",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    intervals = subparsers.add_parser(
        "intervals",
        help="Build report intervals from a contracts file",
        epilog=(
            "Example: coverage-intervals intervals hr-contracts.json "
            "2022-06-15T00:00:00+02:00 2023-04-30T00:00:00+02:00 --out intervals.json"
        ),
    )
    intervals.add_argument("contracts", help="JSON file with BEGIN/END contract periods")
    intervals.add_argument("report_begin", help="Report window begin (ISO 8601 with offset)")
    intervals.add_argument("report_end", help="Report window end (ISO 8601 with offset)")
    intervals.add_argument(
        "--out",
        default=None,
        help="Also write the result to this file"
    )
    intervals.add_argument(
        "--format",
        choices=["json", "csv", "xlsx"],
        default="json",
        help="Format of the --out file. Default: json"
    )
    intervals.add_argument(
        "--timezone",
        default=None,
        help=f"Reference time zone. Default: {REFERENCE_ZONE_CANDIDATES[0]}"
    )

    aggregate = subparsers.add_parser(
        "aggregate",
        help="Sum usage records into hourly buckets",
    )
    aggregate.add_argument("input", help="JSON file with usage records, or - for stdin")
    aggregate.add_argument(
        "output",
        nargs="?",
        default="-",
        help="Output file, or - for stdout. Default: -"
    )
    aggregate.add_argument(
        "--format",
        choices=["json", "csv"],
        default="json",
        help="Output format. Default: json"
    )
    aggregate.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar"
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _run_intervals(args: argparse.Namespace) -> int:
    try:
        window = ReportWindow(
            begin=parse_instant(args.report_begin, field="reportBegin"),
            end=parse_instant(args.report_end, field="reportEnd"),
        )
    except CoverageIntervalsError as e:
        print(f"Error parsing report dates: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        if args.timezone:
            zone = resolve_reference_zone((args.timezone,), fallback=None)
        else:
            zone = resolve_reference_zone()
    except CoverageIntervalsError as e:
        print(f"Error resolving time zone: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        periods = load_periods(args.contracts)
    except (OSError, ValueError) as e:
        print(f"Error loading contracts file '{args.contracts}': {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        intervals = IntervalReconciler(zone).build(window, periods)
    except CoverageIntervalsError as e:
        print(f"Error building intervals: {e}", file=sys.stderr)
        return EXIT_ERROR

    print_summary(window, intervals, len(periods), str(zone))
    output = intervals_to_json(intervals)
    print(output)

    if args.out:
        out_path = Path(args.out)
        try:
            if args.format == "csv":
                export_intervals_csv(intervals, out_path)
            elif args.format == "xlsx":
                export_intervals_worksheet(intervals, out_path)
            else:
                save_intervals_json(intervals, out_path)
        except OSError as e:
            print(f"Warning: could not write output file '{args.out}': {e}", file=sys.stderr)
        else:
            logger.info("Intervals saved to: %s", out_path)

    return 0


def _run_aggregate(args: argparse.Namespace) -> int:
    if args.input != "-" and not Path(args.input).exists():
        print(f"Input file not found: {args.input}", file=sys.stderr)
        return EXIT_INPUT_NOT_FOUND

    try:
        records = load_usage_records(args.input)
        rows = aggregate_records(records, progress=args.progress)
    except (OSError, ValueError) as e:
        print(f"Error aggregating usage records: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.format == "csv":
        if args.output == "-":
            aggregated_rows_to_frame(rows).to_csv(sys.stdout, index=False)
        else:
            aggregated_rows_to_frame(rows).to_csv(args.output, index=False)
        return 0

    output = aggregated_rows_to_json(rows)
    if args.output == "-":
        print(output)
    else:
        Path(args.output).write_text(output, encoding="utf-8")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "intervals":
        return _run_intervals(args)
    return _run_aggregate(args)


if __name__ == "__main__":
    sys.exit(main())
