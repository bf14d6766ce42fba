"""
Reconcile coverage periods against a reporting window.

The result is the sorted list of half-open intervals that partitions the
window at every instant where coverage could change, including spans with
no coverage at all.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Iterable, List, Optional

from .exceptions import InvalidWindow
from .models import CoveragePeriod, ReportInterval, ReportWindow
from .time_utils import (
    build_intervals as pair_boundaries,
    ensure_aware,
    resolve_reference_zone,
    to_reference,
    utc_key,
)


logger = logging.getLogger(__name__)


class IntervalReconciler:
    """Build report intervals in a single reference zone."""

    def __init__(self, zone: Optional[tzinfo] = None):
        """Initialize reconciler.

        Args:
            zone: Reference zone for the emitted intervals. Defaults to the
                resolved reference zone (Europe/Warsaw with fallbacks).
        """
        self.zone = zone if zone is not None else resolve_reference_zone()

    def build(
        self,
        window: ReportWindow,
        periods: Iterable[CoveragePeriod],
    ) -> List[ReportInterval]:
        """Partition the window at every coverage boundary.

        Args:
            window: Reporting window, must end strictly after it begins
            periods: Coverage periods with offset-aware instants

        Returns:
            Contiguous, ascending intervals covering exactly the window

        Raises:
            InvalidWindow: if the window end is not after its begin
            UnparsableInstant: if any instant is missing its UTC offset
        """
        ensure_aware(window.begin, field="window.begin")
        ensure_aware(window.end, field="window.end")
        if utc_key(window.end) <= utc_key(window.begin):
            raise InvalidWindow(window.begin, window.end)

        window_begin = to_reference(window.begin, self.zone)
        window_end = to_reference(window.end, self.zone)
        lower, upper = utc_key(window_begin), utc_key(window_end)

        boundaries: List[datetime] = []
        skipped = 0
        for period in periods:
            begin = to_reference(period.begin, self.zone)
            # Open-ended periods run to the report horizon, never past it
            end = to_reference(period.end, self.zone) if period.end is not None else window_end

            if period.is_degenerate:
                skipped += 1
                continue
            if utc_key(end) <= lower or utc_key(begin) >= upper:
                skipped += 1
                continue

            if utc_key(begin) < lower:
                begin = window_begin
            if utc_key(end) > upper:
                end = window_end

            boundaries.append(begin)
            boundaries.append(end)

        intervals = [
            ReportInterval(begin=begin, end=end)
            for begin, end in pair_boundaries(boundaries, window_begin, window_end)
        ]
        logger.debug(
            "Built %d intervals from %d period boundaries (%d periods skipped)",
            len(intervals),
            len(boundaries),
            skipped,
        )
        return intervals


def build_intervals(
    window: ReportWindow,
    periods: Iterable[CoveragePeriod],
    zone: Optional[tzinfo] = None,
) -> List[ReportInterval]:
    """Convenience wrapper around :meth:`IntervalReconciler.build`."""
    return IntervalReconciler(zone).build(window, periods)
