"""
Readers for contract periods and usage records.
"""

from __future__ import annotations

import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import json5

from .exceptions import InvalidRecord, UnparsableInstant
from .models import CoveragePeriod, UsageRecord
from .time_utils import parse_instant


logger = logging.getLogger(__name__)

QUANTITY_FIELDS = ("flour", "groat", "milk", "egg")


def _lookup(record: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Case-insensitive key lookup on a JSON object."""
    for name, value in record.items():
        if name.lower() == key:
            return value
    return default


def _decode(text: str) -> Any:
    """Decode JSON that may carry comments, trailing commas or a BOM."""
    return json5.loads(text.lstrip("\ufeff"), parse_float=Decimal)


def _read_json(source: Union[str, Path]) -> Any:
    if str(source) == "-":
        return _decode(sys.stdin.read())
    with open(source, "r", encoding="utf-8-sig") as f:
        return _decode(f.read())


def _expect_list(payload: Any, what: str) -> List[Any]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array of {what}, got {type(payload).__name__}")
    return payload


def parse_periods(payload: Any) -> List[CoveragePeriod]:
    """Turn decoded JSON into coverage periods.

    Each element must be an object with a ``BEGIN`` instant and an optional
    ``END`` instant. A null, empty or blank ``END`` makes the period
    open-ended. Any instant that cannot be parsed fails the whole batch.

    Raises:
        UnparsableInstant: naming the record index and the field
    """
    periods = []
    for index, record in enumerate(_expect_list(payload, "contract periods")):
        if not isinstance(record, dict):
            raise UnparsableInstant(record, "record is not an object", index=index)
        begin = parse_instant(_lookup(record, "begin", ""), field="BEGIN", index=index)
        end_text = _lookup(record, "end")
        if end_text is None or (isinstance(end_text, str) and not end_text.strip()):
            end = None
        else:
            end = parse_instant(end_text, field="END", index=index)
        periods.append(CoveragePeriod(begin=begin, end=end))
    logger.debug("Parsed %d contract periods", len(periods))
    return periods


def load_periods(path: Union[str, Path]) -> List[CoveragePeriod]:
    """Load coverage periods from a JSON file."""
    return parse_periods(_read_json(path))


def _to_decimal(value: Any, index: int, field: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidRecord(index, field, value)
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidRecord(index, field, value) from None
        if parsed.is_finite():
            return parsed
    raise InvalidRecord(index, field, value)


def parse_usage_records(payload: Any) -> List[UsageRecord]:
    """Turn decoded JSON into usage records.

    Timestamps are kept as text so that a bad timestamp only skips its own
    record during aggregation. Quantities may be numbers or numeric strings
    and default to zero when absent.

    Raises:
        InvalidRecord: if a quantity is present but not numeric
    """
    records = []
    for index, record in enumerate(_expect_list(payload, "usage records")):
        if not isinstance(record, dict):
            raise InvalidRecord(index, "record", record)
        timestamp = _lookup(record, "timestamp", "")
        quantities = {
            field: _to_decimal(_lookup(record, field, 0), index, field.upper())
            for field in QUANTITY_FIELDS
        }
        records.append(
            UsageRecord(
                timestamp="" if timestamp is None else str(timestamp),
                **quantities,
            )
        )
    return records


def load_usage_records(source: Union[str, Path]) -> List[UsageRecord]:
    """Load usage records from a JSON file, or stdin when ``source`` is ``-``."""
    return parse_usage_records(_read_json(source))


def parse_usage_json(text: Optional[str]) -> List[UsageRecord]:
    if not text or not text.strip():
        return []
    return parse_usage_records(_decode(text))
