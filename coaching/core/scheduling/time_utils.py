"""
Time helpers for the scheduling engine.

All engine arithmetic happens on timezone-aware UTC instants. Naive values
(e.g. read back from SQLite) are interpreted as UTC.

Dependencies: datetime (stdlib)
System role: Clock and duration helpers
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC instant."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime, treating naive input as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """Whole minutes between start_time and end_time, rounded to nearest."""
    seconds = (as_utc(end_time) - as_utc(start_time)).total_seconds()
    return round(seconds / 60)
