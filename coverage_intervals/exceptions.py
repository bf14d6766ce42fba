"""
Error types raised by the interval reconciler and its collaborators.
"""

from __future__ import annotations

from typing import Any, Optional


class CoverageIntervalsError(Exception):
    """Base class for all errors raised by this package."""


class InvalidWindow(CoverageIntervalsError, ValueError):
    """The reporting window does not end strictly after it begins."""

    def __init__(self, begin: Any, end: Any) -> None:
        self.begin = begin
        self.end = end
        super().__init__(
            f"Report end must be after report begin (begin={begin}, end={end})"
        )


class UnparsableInstant(CoverageIntervalsError, ValueError):
    """A textual instant could not be turned into an offset-aware datetime."""

    def __init__(
        self,
        value: Any,
        reason: str = "not a valid ISO 8601 instant",
        field: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        self.value = value
        self.reason = reason
        self.field = field
        self.index = index
        location = ""
        if index is not None:
            location += f"record {index}"
        if field:
            location += f"{' ' if location else ''}field {field}"
        prefix = f"{location}: " if location else ""
        super().__init__(f"{prefix}cannot parse {value!r} ({reason})")


class TimezoneResolutionFailure(CoverageIntervalsError, LookupError):
    """No reference time zone could be resolved, not even UTC."""


class InvalidRecord(CoverageIntervalsError, ValueError):
    """A usage record carries a quantity that is not a number."""

    def __init__(self, index: int, field: str, value: Any) -> None:
        self.index = index
        self.field = field
        self.value = value
        super().__init__(f"record {index}: field {field} is not numeric: {value!r}")
