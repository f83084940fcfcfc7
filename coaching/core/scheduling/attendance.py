"""
Attendance recorder.

Upserts per-learner attendance on a session. Independent of roster
mutation and callable before, during or after the session.

Dependencies: coaching.boundary.db.models, coaching.core.exceptions
System role: Attendance log mutation rules
"""

from datetime import datetime
from uuid import UUID

from coaching.boundary.db.models import AttendanceRecordModel, ClassSessionModel
from coaching.core.exceptions import NotEnrolledError
from coaching.core.scheduling.enrollment import find_roster_entry
from coaching.core.scheduling.enums import AttendanceStatus


def find_attendance(session: ClassSessionModel, learner_id: UUID) -> AttendanceRecordModel | None:
    """Return the learner's attendance entry, or None."""
    for record in session.attendance:
        if record.learner_id == learner_id:
            return record
    return None


def is_attendance_eligible(session: ClassSessionModel, learner_id: UUID) -> bool:
    """
    Whether attendance may be recorded for the learner.

    True for learners currently on the roster and for learners that already
    hold an attendance entry (those were rostered when it was created).
    """
    return (
        find_roster_entry(session, learner_id) is not None
        or find_attendance(session, learner_id) is not None
    )


def mark_attendance(
    session: ClassSessionModel,
    learner_id: UUID,
    status: AttendanceStatus,
    notes: str | None,
    now: datetime,
) -> AttendanceRecordModel:
    """
    Create or overwrite the learner's attendance entry.

    joined_at is stamped the first time the learner is marked present and is
    never overwritten afterwards.

    Args:
        session: Session aggregate with attendance loaded
        learner_id: Learner being marked
        status: New attendance status
        notes: Free-form notes, replaces any previous notes
        now: Current instant

    Returns:
        AttendanceRecordModel: The created or updated entry
    """
    record = find_attendance(session, learner_id)

    if record is None:
        record = AttendanceRecordModel(
            learner_id=learner_id,
            status=status,
            notes=notes,
            joined_at=now if status == AttendanceStatus.PRESENT else None,
        )
        session.attendance.append(record)
        return record

    record.status = status
    record.notes = notes
    if status == AttendanceStatus.PRESENT and record.joined_at is None:
        record.joined_at = now
    return record


def record_departure(session: ClassSessionModel, learner_id: UUID, now: datetime) -> AttendanceRecordModel:
    """
    Stamp left_at on the learner's attendance entry.

    Raises:
        NotEnrolledError: No attendance entry exists for the learner
    """
    record = find_attendance(session, learner_id)
    if record is None:
        raise NotEnrolledError(
            "No attendance recorded for this learner",
            {"session_id": str(session.id), "learner_id": str(learner_id)},
        )
    record.left_at = now
    return record
