"""
Mutation and deletion guards.

Preconditions evaluated before a session is edited or deleted.
"""

from datetime import datetime
from typing import Iterable

from coaching.boundary.db.models import ClassSessionModel
from coaching.core.exceptions import InvalidTimeRangeError, MutationAfterStartError, ValidationError
from coaching.core.scheduling.enums import SessionStatus
from coaching.core.scheduling.time_utils import as_utc

# Fields that stay editable once the session has started.
POST_START_FIELDS = frozenset({"notes", "recording"})


def has_started(session: ClassSessionModel, now: datetime) -> bool:
    return as_utc(now) >= as_utc(session.start_time)


def validate_time_range(start_time: datetime, end_time: datetime) -> None:
    if as_utc(end_time) <= as_utc(start_time):
        raise InvalidTimeRangeError(
            "End time must be after start time",
            {"start_time": start_time.isoformat(), "end_time": end_time.isoformat()},
        )


def validate_capacity(max_students: int | None, current_students: int) -> None:
    if max_students is None:
        return
    if max_students < 1:
        raise ValidationError("Maximum students must be at least 1", field="max_students")
    if max_students < current_students:
        raise ValidationError(
            f"Cannot set capacity ({max_students}) below current enrollment ({current_students})",
            field="max_students",
        )


def ensure_editable(session: ClassSessionModel, fields: Iterable[str], now: datetime) -> None:
    """
    Reject edits to schedule fields once the session is no longer pending.

    Schedule fields require status scheduled and now before start_time;
    POST_START_FIELDS are always editable.

    Raises:
        MutationAfterStartError: A restricted field is being changed too late
    """
    restricted = sorted(set(fields) - POST_START_FIELDS)
    if not restricted:
        return
    if session.status != SessionStatus.SCHEDULED or has_started(session, now):
        raise MutationAfterStartError(
            "Cannot update a class that has already started",
            {"session_id": str(session.id), "fields": restricted},
        )


def ensure_deletable(session: ClassSessionModel, now: datetime) -> None:
    """Sessions can be deleted only before start_time, whatever their status."""
    if has_started(session, now):
        raise MutationAfterStartError(
            "Cannot delete a class that has already started",
            {"session_id": str(session.id)},
        )
