from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from ..core.exceptions import InvalidTimeFormat

logger = logging.getLogger(__name__)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_hhmm(value: Optional[str], *, strict: bool = False) -> int:
    """Convert "HH:MM" (seconds tolerated) to minute-of-day.

    Lenient mode maps anything unparsable to 0 so reports keep working;
    strict mode raises InvalidTimeFormat instead.
    """

    text = (value or "").strip()
    if not text:
        if strict:
            raise InvalidTimeFormat("Empty time value")
        return 0

    parts = text.split(":")
    try:
        hours = int(parts[0] or "0")
        minutes = int(parts[1] or "0") if len(parts) > 1 else 0
    except ValueError:
        if strict:
            raise InvalidTimeFormat(f"Invalid time (HH:MM): {value!r}")
        logger.warning("Malformed time %r treated as 00:00", value)
        return 0

    if strict and not (0 <= hours < 24 and 0 <= minutes < 60):
        raise InvalidTimeFormat(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    """485 -> "08:05"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def ranges_overlap(s1: int, e1: int, s2: int, e2: int) -> bool:
    """Strict half-open intersection of [s1, e1) and [s2, e2)."""
    return s1 < e2 and s2 < e1


def iso_weekday(day: date) -> int:
    """Monday=1 ... Sunday=7."""
    return day.isoweekday()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every date from start to end inclusive (nothing when start > end)."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def format_minutes(total: int) -> str:
    """120 -> '2h00'."""
    total = max(int(total), 0)
    return f"{total // 60}h{total % 60:02d}"
