"""
Date helpers shared by the earnings chart and the statement filter.

Backend timestamps are ISO-8601 strings, either a bare date
(``2024-03-05``) or a full timestamp (``2024-03-05T10:15:00.123Z``).
Parsing never guesses: anything that is not ISO-8601 raises
``InvalidDateError`` so callers decide whether to skip the record.
"""

from datetime import date, datetime
from typing import Optional, Union


class InvalidDateError(ValueError):
    pass


Bound = Optional[Union[date, datetime]]


def parse_iso(value: Optional[str]) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"Expected an ISO-8601 string, got {value!r}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidDateError(f"Invalid ISO-8601 date: {value!r}") from e


def format_display(value: Optional[str]) -> str:
    """Render an ISO timestamp as zero-padded ``DD-MM-YYYY``."""
    return parse_iso(value).strftime("%d-%m-%Y")


def month_index_of(value: Optional[str]) -> int:
    # Wall-clock month of the timestamp itself, no timezone conversion.
    return parse_iso(value).month - 1


def _calendar_date(bound: Union[date, datetime]) -> date:
    return bound.date() if isinstance(bound, datetime) else bound


def in_range(value: Optional[str], start: Bound, end: Bound) -> bool:
    """True when ``value`` falls within ``[start, end]`` by calendar date.

    A missing bound means the range is not applied at all, so the value is
    not parsed and the result is True.
    """
    if start is None or end is None:
        return True
    day = parse_iso(value).date()
    return _calendar_date(start) <= day <= _calendar_date(end)
