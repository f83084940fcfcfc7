"""
Lifecycle controller.

Status changes for a class session. The active TransitionPolicy decides
which edges are accepted; the permissive policy (default) accepts any of
the five statuses from any status, the strict one only forward edges.

Dependencies: coaching.boundary.db.models, coaching.core.exceptions
System role: Session state machine
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from coaching.boundary.db.models import ClassSessionModel
from coaching.core.exceptions import InvalidTransitionError
from coaching.core.scheduling.attendance import find_attendance, mark_attendance
from coaching.core.scheduling.enums import AttendanceStatus, RosterStatus, SessionStatus

TERMINAL_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED})


@dataclass(frozen=True)
class TransitionPolicy:
    """Allowed status edges keyed by source status."""

    name: str
    transitions: dict[SessionStatus, frozenset[SessionStatus]]

    def allows(self, current: SessionStatus, target: SessionStatus) -> bool:
        return target in self.transitions.get(current, frozenset())


PERMISSIVE_POLICY = TransitionPolicy(
    name="permissive",
    transitions={status: frozenset(SessionStatus) for status in SessionStatus},
)

STRICT_POLICY = TransitionPolicy(
    name="strict",
    transitions={
        SessionStatus.SCHEDULED: frozenset(
            {SessionStatus.IN_PROGRESS, SessionStatus.CANCELLED, SessionStatus.POSTPONED}
        ),
        SessionStatus.IN_PROGRESS: frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED}),
        SessionStatus.POSTPONED: frozenset({SessionStatus.SCHEDULED, SessionStatus.CANCELLED}),
        SessionStatus.COMPLETED: frozenset(),
        SessionStatus.CANCELLED: frozenset(),
    },
)


def get_policy(strict: bool) -> TransitionPolicy:
    return STRICT_POLICY if strict else PERMISSIVE_POLICY


def default_absentees(session: ClassSessionModel, now: datetime) -> list[UUID]:
    """
    Record absent for every still-enrolled learner with no attendance entry.

    Attendance must be marked present explicitly; existing entries are left
    as they are.
    """
    defaulted = []
    for entry in session.roster:
        if entry.status != RosterStatus.ENROLLED:
            continue
        if find_attendance(session, entry.learner_id) is not None:
            continue
        mark_attendance(session, entry.learner_id, AttendanceStatus.ABSENT, None, now)
        defaulted.append(entry.learner_id)
    return defaulted


def transition_status(
    session: ClassSessionModel,
    new_status: SessionStatus,
    now: datetime,
    policy: TransitionPolicy = PERMISSIVE_POLICY,
) -> list[UUID]:
    """
    Move a session to new_status.

    Args:
        session: Session aggregate with roster and attendance loaded
        new_status: Target status
        now: Current instant
        policy: Transition table to enforce

    Returns:
        list[UUID]: Learners defaulted to absent (only when entering in-progress)

    Raises:
        InvalidTransitionError: policy rejects the edge
    """
    current = SessionStatus(session.status)
    target = SessionStatus(new_status)

    if not policy.allows(current, target):
        raise InvalidTransitionError(
            f"Cannot move class from {current.value} to {target.value}",
            {"session_id": str(session.id), "policy": policy.name},
        )

    session.status = target
    if target == SessionStatus.IN_PROGRESS:
        return default_absentees(session, now)
    return []
