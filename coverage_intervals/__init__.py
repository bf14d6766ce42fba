"""
Coverage Intervals Tool

Splits a reporting window into the half-open intervals at which contract
coverage changes, with a companion hourly usage aggregation.
"""

__version__ = "0.1.0"

from .exceptions import (
    CoverageIntervalsError,
    InvalidRecord,
    InvalidWindow,
    TimezoneResolutionFailure,
    UnparsableInstant,
)
from .models import CoveragePeriod, ReportInterval, ReportWindow
from .reconciler import IntervalReconciler, build_intervals
from .time_utils import resolve_reference_zone, to_reference
from .cli import main

__all__ = [
    "CoverageIntervalsError",
    "CoveragePeriod",
    "IntervalReconciler",
    "InvalidRecord",
    "InvalidWindow",
    "ReportInterval",
    "ReportWindow",
    "TimezoneResolutionFailure",
    "UnparsableInstant",
    "build_intervals",
    "main",
    "resolve_reference_zone",
    "to_reference",
]
