"""
Derived-view calculator.

Read-only projections of a session computed from its current fields and
the caller's clock. Nothing here is persisted.
"""

from dataclasses import dataclass
from datetime import datetime

from coaching.boundary.db.models import ClassSessionModel
from coaching.core.scheduling.enums import SessionStatus
from coaching.core.scheduling.time_utils import as_utc

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR


@dataclass(frozen=True)
class SessionView:
    """Computed fields attached to a session on read paths."""

    is_full: bool
    can_enroll: bool
    available_spots: int | None
    time_until_start: str
    progress: int


def is_full(session: ClassSessionModel) -> bool:
    if session.max_students is None:
        return False
    return session.current_students >= session.max_students


def can_enroll(session: ClassSessionModel) -> bool:
    return session.status == SessionStatus.SCHEDULED and not is_full(session)


def available_spots(session: ClassSessionModel) -> int | None:
    """Remaining seats, or None when capacity is unlimited."""
    if session.max_students is None:
        return None
    return max(0, session.max_students - session.current_students)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def time_until_start(session: ClassSessionModel, now: datetime) -> str:
    """
    Human-readable time until start.

    Returns "Started" once now >= start_time, otherwise the largest whole
    unit among days, hours and minutes ("2 days", "1 hour", "0 minutes").
    """
    remaining = (as_utc(session.start_time) - as_utc(now)).total_seconds()
    if remaining <= 0:
        return "Started"

    days = int(remaining // _DAY)
    if days > 0:
        return _plural(days, "day")
    hours = int(remaining // _HOUR)
    if hours > 0:
        return _plural(hours, "hour")
    return _plural(int(remaining // _MINUTE), "minute")


def progress(session: ClassSessionModel, now: datetime) -> int:
    """
    Completion percentage in [0, 100].

    Completed sessions are 100, cancelled or postponed ones 0; otherwise the
    position of now between start_time and end_time.
    """
    if session.status == SessionStatus.COMPLETED:
        return 100
    if session.status in (SessionStatus.CANCELLED, SessionStatus.POSTPONED):
        return 0

    start = as_utc(session.start_time)
    total = (as_utc(session.end_time) - start).total_seconds()
    elapsed = (as_utc(now) - start).total_seconds()

    if elapsed <= 0:
        return 0
    if elapsed >= total:
        return 100
    return min(100, max(0, round(elapsed / total * 100)))


def build_view(session: ClassSessionModel, now: datetime) -> SessionView:
    return SessionView(
        is_full=is_full(session),
        can_enroll=can_enroll(session),
        available_spots=available_spots(session),
        time_until_start=time_until_start(session, now),
        progress=progress(session, now),
    )
