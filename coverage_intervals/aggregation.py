"""
Hourly usage aggregation.

Sums usage quantities into buckets keyed by the record timestamp floored to
the top of the hour in the reference zone.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from tqdm import tqdm

from .loaders import QUANTITY_FIELDS, parse_usage_json
from .models import AggregatedRow, UsageRecord
from .time_utils import (
    floor_to_hour,
    format_bucket,
    parse_timestamp,
    resolve_reference_zone,
    utc_key,
)


logger = logging.getLogger(__name__)

# Source unit -> target unit divisors, in QUANTITY_FIELDS order
UNIT_DIVISORS: Dict[str, Decimal] = {
    "flour": Decimal("100"),   # dkg -> kg
    "groat": Decimal("1000"),  # g -> kg
    "milk": Decimal("1000"),   # ml -> l
    "egg": Decimal("1"),       # pcs
}

TWO_PLACES = Decimal("0.01")


def round_half_away(value: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def aggregate_records(
    records: Iterable[UsageRecord],
    zone: Optional[tzinfo] = None,
    progress: bool = False,
) -> List[AggregatedRow]:
    """Aggregate usage records per reference-zone hour.

    Args:
        records: Usage records with textual timestamps
        zone: Reference zone for bucketing, defaults to the resolved zone
        progress: Show a progress bar

    Returns:
        One row per non-empty hour, ascending by bucket start
    """
    if zone is None:
        zone = resolve_reference_zone()

    buckets: Dict[datetime, Tuple[datetime, List[Decimal]]] = {}
    skipped = 0
    for record in tqdm(records, desc="Aggregating", unit="record", disable=not progress):
        instant = parse_timestamp(record.timestamp)
        if instant is None:
            logger.warning("Skipping invalid timestamp: %s", record.timestamp)
            skipped += 1
            continue

        hour_start = floor_to_hour(instant.astimezone(zone))
        # Keyed by absolute time so both hours of a DST fall-back stay apart
        key = utc_key(hour_start)
        if key not in buckets:
            buckets[key] = (hour_start, [Decimal("0")] * len(QUANTITY_FIELDS))
        totals = buckets[key][1]
        for i, field in enumerate(QUANTITY_FIELDS):
            totals[i] += getattr(record, field)

    rows = []
    for key in sorted(buckets):
        hour_start, totals = buckets[key]
        flour, groat, milk, egg = (
            round_half_away(total / UNIT_DIVISORS[field])
            for field, total in zip(QUANTITY_FIELDS, totals)
        )
        rows.append(
            AggregatedRow(
                timestamp=format_bucket(hour_start),
                flour_kg=flour,
                groat_kg=groat,
                milk_l=milk,
                egg_pcs=egg,
            )
        )

    if skipped:
        logger.info("Skipped %d records with invalid timestamps", skipped)
    logger.debug("Aggregated records into %d hourly buckets", len(rows))
    return rows


def aggregate_json(text: str, zone: Optional[tzinfo] = None) -> List[AggregatedRow]:
    """Parse a JSON array of usage records and aggregate it."""
    return aggregate_records(parse_usage_json(text), zone=zone)
