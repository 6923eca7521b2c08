"""Calendar-day helpers.

Practice days are plain local calendar dates formatted ``YYYY-MM-DD``. They are
never derived from UTC timestamps, so a late-evening session stays on the day the
user practised.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional


def local_iso(value: date | datetime) -> str:
    """Format a date (or a naive/local datetime) as ``YYYY-MM-DD``."""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def today_local() -> date:
    return datetime.now().date()


def parse_local_date(value: str) -> date:
    """Parse ``YYYY-MM-DD`` as a local calendar date."""
    parts = value.split("-")
    if len(parts) != 3:
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}")
    year, month, day = (int(part) for part in parts)
    return date(year, month, day)


def last_n_dates(n: int, today: Optional[date] = None) -> List[str]:
    """Return the last ``n`` days ending today, newest first."""
    anchor = today or today_local()
    return [local_iso(anchor - timedelta(days=offset)) for offset in range(n)]


def week_start(value: date) -> date:
    # Monday = 0, Sunday = 6
    return value - timedelta(days=value.weekday())
