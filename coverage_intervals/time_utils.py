"""
Shared datetime helpers.

Every instant handled by the package is offset-aware. Instants are
re-expressed in a single reference zone before they are compared, but the
comparison itself always runs on the absolute (UTC) value: two datetimes
sharing a ``tzinfo`` are compared by their wall-clock fields, which would
merge the two distinct instants of a DST fall-back hour.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import TimezoneResolutionFailure, UnparsableInstant


logger = logging.getLogger(__name__)

# Preferred IANA name first, then a known alias of the same civil zone.
REFERENCE_ZONE_CANDIDATES: Tuple[str, ...] = ("Europe/Warsaw", "Poland")
FALLBACK_ZONE = "UTC"


def resolve_reference_zone(
    candidates: Sequence[str] = REFERENCE_ZONE_CANDIDATES,
    fallback: Optional[str] = FALLBACK_ZONE,
) -> tzinfo:
    """Return the reference zone, falling back to an alias and then to UTC.

    The lookup is cached, so every caller in the process shares the same
    immutable zone object. Pass ``fallback=None`` to make an unknown zone
    an error instead of silently using UTC.

    Raises:
        TimezoneResolutionFailure: if no candidate resolves and there is no
            fallback
    """
    return _resolve_zone(tuple(candidates), fallback)


@lru_cache(maxsize=None)
def _resolve_zone(candidates: Tuple[str, ...], fallback: Optional[str]) -> tzinfo:
    for name in candidates:
        try:
            zone = ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("Time zone %s not available on this host", name)
            continue
        if name != candidates[0]:
            logger.warning("Time zone %s not found, using alias %s", candidates[0], name)
        return zone

    if fallback is None:
        raise TimezoneResolutionFailure(
            f"Unable to resolve any of the time zones {list(candidates)}"
        )
    if candidates:
        logger.warning(
            "None of the time zones %s are available, falling back to %s",
            ", ".join(candidates),
            fallback,
        )
    try:
        return ZoneInfo(fallback)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def utc_key(dt: datetime) -> datetime:
    """Absolute-time key used for ordering, equality and hashing."""
    return dt.astimezone(timezone.utc)


def ensure_aware(dt: datetime, field: Optional[str] = None) -> datetime:
    """Reject naive datetimes instead of guessing their offset."""
    if not isinstance(dt, datetime):
        raise UnparsableInstant(dt, "not a datetime", field=field)
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise UnparsableInstant(dt, "missing UTC offset", field=field)
    return dt


def to_reference(dt: datetime, zone: Optional[tzinfo] = None) -> datetime:
    """Express the same absolute instant in the reference zone."""
    if zone is None:
        zone = resolve_reference_zone()
    return ensure_aware(dt).astimezone(zone)


def parse_instant(
    value,
    field: Optional[str] = None,
    index: Optional[int] = None,
) -> datetime:
    """Parse an ISO 8601 instant that carries an explicit UTC offset.

    Args:
        value: Text such as ``2022-06-15T00:00:00+02:00``. A trailing ``Z``
            and a space instead of ``T`` are accepted. Aware datetimes are
            passed through unchanged.
        field: Name of the field being parsed, used in error messages
        index: Position of the record being parsed, used in error messages

    Returns:
        Offset-aware datetime

    Raises:
        UnparsableInstant: if the text is empty, malformed or has no offset
    """
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise UnparsableInstant(value, "missing UTC offset", field, index)
        return value
    if not isinstance(value, str) or not value.strip():
        raise UnparsableInstant(value, "empty or not text", field, index)

    text = value.strip()
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise UnparsableInstant(value, "not a valid ISO 8601 instant", field, index) from None
    if parsed.tzinfo is None:
        raise UnparsableInstant(value, "missing UTC offset", field, index)
    return parsed


def parse_timestamp(value) -> Optional[datetime]:
    """Lenient variant of :func:`parse_instant` returning None on failure."""
    try:
        return parse_instant(value)
    except UnparsableInstant:
        return None


def floor_to_hour(dt: datetime) -> datetime:
    """Truncate to the top of the hour on the datetime's own wall clock."""
    return dt.replace(minute=0, second=0, microsecond=0)


def _format_offset(dt: datetime) -> str:
    """``±HH:MM``, or ``±HH:MM:SS`` for historical offsets with seconds."""
    total = int(dt.utcoffset().total_seconds())
    sign = "-" if total < 0 else "+"
    minutes, seconds = divmod(abs(total), 60)
    hours, minutes = divmod(minutes, 60)
    if seconds:
        return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_iso(dt: datetime) -> str:
    """Format as ``2022-06-15T00:00:00+02:00`` (offset always numeric)."""
    ensure_aware(dt)
    return f"{dt:%Y-%m-%dT%H:%M:%S}{_format_offset(dt)}"


def format_bucket(dt: datetime) -> str:
    """Format as ``2023-04-13 00:00:00 +02:00``."""
    ensure_aware(dt)
    return f"{dt:%Y-%m-%d %H:%M:%S} {_format_offset(dt)}"


def build_intervals(
    dates: Iterable[datetime],
    start: datetime,
    end: datetime,
) -> List[Tuple[datetime, datetime]]:
    """Build contiguous [start, end) intervals from unique instants.

    Instants are deduplicated and sorted by absolute time; the first
    representation seen for an instant is kept, window edges first.
    """
    unique = {}
    for dt in (start, end, *dates):
        unique.setdefault(utc_key(dt), dt)
    ordered = [unique[key] for key in sorted(unique)]
    return [
        (begin, finish)
        for begin, finish in zip(ordered[:-1], ordered[1:])
        if utc_key(finish) > utc_key(begin)
    ]
