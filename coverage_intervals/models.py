"""
Core data models for coverage reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class CoveragePeriod:
    """One contiguous span of coverage, open-ended when ``end`` is None."""

    begin: datetime
    end: Optional[datetime] = None

    @property
    def is_open_ended(self) -> bool:
        return self.end is None

    @property
    def is_degenerate(self) -> bool:
        """True when the period ends at or before it begins."""
        if self.end is None:
            return False
        return self.end.astimezone(timezone.utc) <= self.begin.astimezone(timezone.utc)


@dataclass(frozen=True)
class ReportWindow:
    """The reporting horizon, half-open ``[begin, end)``."""

    begin: datetime
    end: datetime


@dataclass(frozen=True)
class ReportInterval:
    """A half-open ``[begin, end)`` slice of the report window."""

    begin: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        # Subtract in UTC; same-zone subtraction ignores DST shifts
        return self.end.astimezone(timezone.utc) - self.begin.astimezone(timezone.utc)


@dataclass(frozen=True)
class UsageRecord:
    """Raw usage measurement as read from input.

    Quantities are in source units: flour in decagrams, groats in grams,
    milk in millilitres and eggs in pieces.
    """

    timestamp: str
    flour: Decimal = Decimal("0")
    groat: Decimal = Decimal("0")
    milk: Decimal = Decimal("0")
    egg: Decimal = Decimal("0")


@dataclass(frozen=True)
class AggregatedRow:
    """Hourly usage summary in target units."""

    timestamp: str
    flour_kg: Decimal
    groat_kg: Decimal
    milk_l: Decimal
    egg_pcs: Decimal
