"""
Caller capabilities.

Authentication is handled upstream; the engine only consumes the caller's
identity and role and answers relationship questions about a session.

Dependencies: coaching.boundary.db.models, coaching.core.exceptions
System role: Authorization predicates for session operations
"""

import enum
from dataclasses import dataclass
from uuid import UUID

from coaching.boundary.db.models import ClassSessionModel, CourseModel
from coaching.core.exceptions import ForbiddenError


class Role(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Authenticated caller."""

    user_id: UUID
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class VisibilityScope:
    """Row filter derived from the caller's role; None means unrestricted."""

    learner_id: UUID | None = None
    instructor_id: UUID | None = None


def visible_scope(actor: Actor) -> VisibilityScope:
    """Students see sessions they are rostered in, teachers their own, admins all."""
    if actor.role == Role.STUDENT:
        return VisibilityScope(learner_id=actor.user_id)
    if actor.role == Role.TEACHER:
        return VisibilityScope(instructor_id=actor.user_id)
    return VisibilityScope()


def can_manage_session(actor: Actor, session: ClassSessionModel) -> bool:
    return actor.is_admin or session.instructor_id == actor.user_id


def can_view_session(actor: Actor, session: ClassSessionModel) -> bool:
    if actor.role == Role.STUDENT:
        return any(entry.learner_id == actor.user_id for entry in session.roster)
    return can_manage_session(actor, session)


def require_session_manager(actor: Actor, session: ClassSessionModel, action: str) -> None:
    if not can_manage_session(actor, session):
        raise ForbiddenError(
            f"You can only {action} your own classes",
            {"session_id": str(session.id), "user_id": str(actor.user_id)},
        )


def require_session_viewer(actor: Actor, session: ClassSessionModel) -> None:
    if not can_view_session(actor, session):
        message = (
            "You are not enrolled in this class"
            if actor.role == Role.STUDENT
            else "You can only view your own classes"
        )
        raise ForbiddenError(message, {"session_id": str(session.id), "user_id": str(actor.user_id)})


def require_instructor_role(actor: Actor) -> None:
    if actor.role not in (Role.TEACHER, Role.ADMIN):
        raise ForbiddenError("Only teachers and admins can schedule classes", {"role": actor.role.value})


def require_course_owner(actor: Actor, course: CourseModel) -> None:
    if not actor.is_admin and course.instructor_id != actor.user_id:
        raise ForbiddenError(
            "You can only create classes for your own courses",
            {"course_id": str(course.id), "user_id": str(actor.user_id)},
        )
