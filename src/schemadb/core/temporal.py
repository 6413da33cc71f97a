"""Temporal value helpers.

A temporal value remembers whether it came from a date-only or a
date-time source by its Python type: ``datetime.date`` for date-only,
``datetime.datetime`` for date-time. Storing and reading back a date
therefore never grows a ``00:00:00`` time of day.

Free-form strings are parsed with ``dateutil``; ISO-8601 and the
``MM-DD-YYYY`` / ``MM/DD/YYYY`` family are accepted, plus the keywords
``now``, ``today``, ``yesterday`` and ``tomorrow``.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone

from dateutil import parser as dateutil_parser

Temporal = date | datetime

# A time of day somewhere in the text: "10:30", "T10", "10am".
_TIME_RE = re.compile(r"\d{1,2}:\d{2}|T\d{1,2}|\d\s*[ap]\.?m\b", re.IGNORECASE)

_KEYWORDS = {
    "now": lambda: datetime.now().replace(microsecond=0),
    "today": lambda: date.today(),
    "yesterday": lambda: date.today() - timedelta(days=1),
    "tomorrow": lambda: date.today() + timedelta(days=1),
}


def from_timestamp(value: int | float) -> datetime:
    """Naive UTC datetime for a Unix timestamp; fractional seconds are kept."""
    return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)


def is_date_only(value: object) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


def parse_temporal(text: str) -> Temporal:
    """Parse a free-form date or date-time expression.

    Raises:
        ValueError: If ``text`` is not a recognisable date.
    """
    stripped = text.strip()
    keyword = _KEYWORDS.get(stripped.lower())
    if keyword is not None:
        return keyword()
    if not stripped:
        raise ValueError("empty date string")

    try:
        parsed = dateutil_parser.isoparse(stripped)
    except ValueError:
        try:
            parsed = dateutil_parser.parse(stripped, dayfirst=False, yearfirst=False)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"unrecognised date: {text!r}") from e

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)

    if not _TIME_RE.search(stripped):
        return parsed.date()
    return parsed


def format_temporal(value: Temporal) -> str:
    """Wire format used when binding a temporal value as a string."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        if value.microsecond:
            return value.strftime("%Y-%m-%d %H:%M:%S.%f")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return value.strftime("%Y-%m-%d")


__all__ = [
    "Temporal",
    "from_timestamp",
    "is_date_only",
    "parse_temporal",
    "format_temporal",
]
