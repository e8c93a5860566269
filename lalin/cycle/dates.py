"""Calendar-date helpers for the cycle engine.

All dates crossing the engine boundary are ``YYYY-MM-DD`` strings.  They are
timezone-naive calendar days; arithmetic is whole days only.
"""

from __future__ import annotations

import re
from datetime import date, timedelta

# Strict ISO calendar date, no time component
ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
_ISO_DATE_RE = re.compile(ISO_DATE_PATTERN)

DEFAULT_ENUMERATION_LIMIT = 400


def parse_iso_date(value: str | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` string, returning None if it isn't a real date.

    Never raises.  ``"2024-02-30"``, ``""`` and ``None`` all give None.
    """
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def to_iso_date_string(d: date) -> str:
    return d.isoformat()


def add_days(value: str, days: int) -> str:
    """Shift an ISO date string by a whole number of days.

    Raises:
        ValueError: If ``value`` is not a valid calendar date.
    """
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"Not a valid YYYY-MM-DD date: {value!r}")
    return to_iso_date_string(parsed + timedelta(days=days))


def days_between(later: date, earlier: date) -> int:
    """Calendar-day difference ``later - earlier`` (negative if reversed)."""
    return (later - earlier).days


def enumerate_iso_dates(
    start: str,
    end: str,
    limit: int = DEFAULT_ENUMERATION_LIMIT,
) -> list[str]:
    """List every date from ``start`` through ``end`` inclusive.

    Returns an empty list when either bound is unparseable and a single date
    when ``end`` is not after ``start``.  At most ``limit`` dates are
    produced.
    """
    start_date = parse_iso_date(start)
    end_date = parse_iso_date(end)
    if start_date is None or end_date is None:
        return []

    dates: list[str] = []
    cursor = start_date
    for _ in range(limit):
        dates.append(to_iso_date_string(cursor))
        if end_date <= cursor:
            break
        cursor += timedelta(days=1)
    return dates
