"""
Reporting and export utilities.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from .models import AggregatedRow, ReportInterval, ReportWindow
from .time_utils import format_iso


logger = logging.getLogger(__name__)

INTERVAL_COLUMNS = ["begin", "end", "duration_hours"]


def print_summary(
    window: ReportWindow,
    intervals: Sequence[ReportInterval],
    num_periods: int,
    zone_name: str,
) -> None:
    logger.info("=" * 60)
    logger.info("COVERAGE INTERVALS")
    logger.info("=" * 60)
    logger.info("Window: %s to %s", format_iso(window.begin), format_iso(window.end))
    logger.info("Reference zone: %s", zone_name)
    logger.info("Contract periods: %d", num_periods)
    logger.info("Intervals: %d", len(intervals))
    logger.info("=" * 60)


def intervals_to_pairs(intervals: Iterable[ReportInterval]) -> List[List[str]]:
    """Render intervals as ``[begin, end]`` ISO 8601 string pairs."""
    return [[format_iso(iv.begin), format_iso(iv.end)] for iv in intervals]


def intervals_to_frame(intervals: Iterable[ReportInterval]) -> pd.DataFrame:
    rows = [
        {
            "begin": format_iso(iv.begin),
            "end": format_iso(iv.end),
            "duration_hours": iv.duration.total_seconds() / 3600,
        }
        for iv in intervals
    ]
    return pd.DataFrame(rows, columns=INTERVAL_COLUMNS)


def intervals_to_json(intervals: Iterable[ReportInterval]) -> str:
    return json.dumps(intervals_to_pairs(intervals), indent=2)


def save_intervals_json(intervals: Iterable[ReportInterval], output_file: Path) -> Path:
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w', encoding="utf-8") as f:
        f.write(intervals_to_json(intervals))
    return output_file


def export_intervals_csv(intervals: Iterable[ReportInterval], output_file: Path) -> Path:
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    intervals_to_frame(intervals).to_csv(output_file, index=False)
    return output_file


def export_intervals_worksheet(
    intervals: Iterable[ReportInterval],
    output_file: Path,
    sheet_name: str = "intervals",
) -> Path:
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_file, engine='openpyxl') as writer:
        # Excel sheet names have a 31 character limit
        intervals_to_frame(intervals).to_excel(writer, sheet_name=sheet_name[:31], index=False)
    return output_file


def aggregated_rows_to_records(rows: Iterable[AggregatedRow]) -> List[Dict]:
    """Rows as JSON-ready dicts using the upper-case output field names."""
    return [
        {
            "TIMESTAMP": row.timestamp,
            "FLOUR_KG": float(row.flour_kg),
            "GROAT_KG": float(row.groat_kg),
            "MILK_L": float(row.milk_l),
            "EGG_PCS": float(row.egg_pcs),
        }
        for row in rows
    ]


def aggregated_rows_to_frame(rows: Iterable[AggregatedRow]) -> pd.DataFrame:
    return pd.DataFrame(
        aggregated_rows_to_records(rows),
        columns=["TIMESTAMP", "FLOUR_KG", "GROAT_KG", "MILK_L", "EGG_PCS"],
    )


def aggregated_rows_to_json(rows: Iterable[AggregatedRow], indent: int | None = 2) -> str:
    return json.dumps(aggregated_rows_to_records(rows), indent=indent)
