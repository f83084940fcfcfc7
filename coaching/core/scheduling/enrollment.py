"""
Enrollment manager.

Mutates a session roster. Every check runs before the roster is touched and
the cached head count is recomputed from the roster by a single helper, so
roster and counter always move together.

Dependencies: coaching.boundary.db.models, coaching.core.exceptions
System role: Roster mutation rules
"""

from datetime import datetime
from uuid import UUID

from coaching.boundary.db.models import ClassSessionModel, RosterEntryModel
from coaching.core.exceptions import (
    AlreadyEnrolledError,
    NotEnrollableError,
    NotEnrolledError,
    SessionAlreadyStartedError,
    SessionFullError,
)
from coaching.core.scheduling.derived import is_full
from coaching.core.scheduling.enums import Grade, RosterStatus, SessionStatus
from coaching.core.scheduling.time_utils import as_utc


def find_roster_entry(session: ClassSessionModel, learner_id: UUID) -> RosterEntryModel | None:
    """Return the learner's roster entry, or None if not rostered."""
    for entry in session.roster:
        if entry.learner_id == learner_id:
            return entry
    return None


def sync_headcount(session: ClassSessionModel) -> int:
    """Store len(roster) into current_students and return it."""
    session.current_students = len(session.roster)
    return session.current_students


def enroll(session: ClassSessionModel, learner_id: UUID, now: datetime) -> RosterEntryModel:
    """
    Add a learner to the roster.

    Args:
        session: Session aggregate with roster loaded
        learner_id: Acting learner
        now: Current instant, stamped as enrolled_at

    Returns:
        RosterEntryModel: The appended entry

    Raises:
        NotEnrollableError: Session is not scheduled
        AlreadyEnrolledError: Learner already on the roster
        SessionFullError: max_students reached
    """
    details = {"session_id": str(session.id), "learner_id": str(learner_id)}

    if session.status != SessionStatus.SCHEDULED:
        raise NotEnrollableError(
            "This class is not open for enrollment",
            {**details, "status": SessionStatus(session.status).value},
        )
    if find_roster_entry(session, learner_id) is not None:
        raise AlreadyEnrolledError("Learner is already enrolled in this class", details)
    if is_full(session):
        raise SessionFullError(
            "Class is full",
            {**details, "max_students": session.max_students},
        )

    entry = RosterEntryModel(
        learner_id=learner_id,
        enrolled_at=now,
        status=RosterStatus.ENROLLED,
    )
    session.roster.append(entry)
    sync_headcount(session)
    return entry


def unenroll(session: ClassSessionModel, learner_id: UUID, now: datetime) -> None:
    """
    Remove a learner from the roster before the session starts.

    Raises:
        SessionAlreadyStartedError: now is at or after start_time
        NotEnrolledError: Learner not on the roster
    """
    details = {"session_id": str(session.id), "learner_id": str(learner_id)}

    if as_utc(now) >= as_utc(session.start_time):
        raise SessionAlreadyStartedError(
            "Cannot unenroll from a class that has already started", details
        )
    entry = find_roster_entry(session, learner_id)
    if entry is None:
        raise NotEnrolledError("Learner is not enrolled in this class", details)

    session.roster.remove(entry)
    sync_headcount(session)


def record_outcome(
    session: ClassSessionModel,
    learner_id: UUID,
    status: RosterStatus,
    grade: Grade | None = None,
    feedback: str | None = None,
) -> RosterEntryModel:
    """
    Update a roster entry's standing, grade and feedback.

    Roster membership and head count are unchanged.

    Raises:
        NotEnrolledError: Learner not on the roster
    """
    entry = find_roster_entry(session, learner_id)
    if entry is None:
        raise NotEnrolledError(
            "Learner is not enrolled in this class",
            {"session_id": str(session.id), "learner_id": str(learner_id)},
        )
    entry.status = status
    entry.grade = grade
    entry.feedback = feedback
    return entry
