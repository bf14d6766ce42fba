#!/usr/bin/env python3
"""
Example script showing how to use the coverage-intervals tool.
"""

from pathlib import Path

from coverage_intervals import CoveragePeriod, ReportWindow, build_intervals
from coverage_intervals.aggregation import aggregate_json
from coverage_intervals.reporting import (
    aggregated_rows_to_json,
    export_intervals_worksheet,
    intervals_to_pairs,
)
from coverage_intervals.time_utils import parse_instant


def example_no_contracts():
    """Example: A window with no coverage at all."""
    print("="*60)
    print("Example 1: No Contracts")
    print("="*60)

    window = ReportWindow(
        begin=parse_instant("2022-06-15T00:00:00+02:00"),
        end=parse_instant("2023-04-30T00:00:00+02:00"),
    )

    for begin, end in intervals_to_pairs(build_intervals(window, [])):
        print(f"  [{begin}, {end})")


def example_contracts():
    """Example: Closed and open-ended contracts."""
    print("\n" + "="*60)
    print("Example 2: Closed and Open-Ended Contracts")
    print("="*60)

    window = ReportWindow(
        begin=parse_instant("2022-01-01T00:00:00+01:00"),
        end=parse_instant("2022-02-01T00:00:00+01:00"),
    )
    periods = [
        CoveragePeriod(
            begin=parse_instant("2022-01-10T00:00:00+01:00"),
            end=parse_instant("2022-01-20T00:00:00+01:00"),
        ),
        # Open-ended: clipped at the window end
        CoveragePeriod(begin=parse_instant("2022-01-20T00:00:00+01:00")),
    ]

    intervals = build_intervals(window, periods)
    for begin, end in intervals_to_pairs(intervals):
        print(f"  [{begin}, {end})")

    excel_file = export_intervals_worksheet(intervals, Path("./output/example2/intervals.xlsx"))
    print(f"\nWorksheet saved to: {excel_file}")


def example_hourly_usage():
    """Example: Hourly usage aggregation."""
    print("\n" + "="*60)
    print("Example 3: Hourly Usage")
    print("="*60)

    rows = aggregate_json(
        '[{"TIMESTAMP": "2023-04-13 00:38:00+09:00", "FLOUR": 150, "GROAT": 1234, "MILK": 500, "EGG": 2},'
        ' {"TIMESTAMP": "2023-04-12 17:05:00+02:00", "FLOUR": 50, "MILK": 250, "EGG": 1}]'
    )
    print(aggregated_rows_to_json(rows))


if __name__ == "__main__":
    import sys

    print("Coverage Intervals - Example Usage")
    print("="*60)

    try:
        example_no_contracts()
        example_contracts()
        example_hourly_usage()

        print("\n" + "="*60)
        print("Examples completed successfully!")
        print("="*60)

    except Exception as e:
        print(f"\nError running examples: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
