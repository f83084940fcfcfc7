"""
Class session service orchestrator.

Coordinates class scheduling use cases: loads the session aggregate, applies
access checks and the pure scheduling rules, then persists the aggregate in
one version-checked write.

Dependencies: coaching.boundary.db, coaching.core, coaching.configs
System role: Class session use case orchestration
"""

import logging
import math
from datetime import date
from typing import Awaitable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from coaching.boundary.db.CRUD.class_session_crud import ClassSessionFilters, class_session_crud
from coaching.boundary.db.CRUD.course_crud import course_crud
from coaching.boundary.db.models import ClassSessionModel
from coaching.configs.scheduling import SchedulingSettings
from coaching.core.access import (
    Actor,
    require_course_owner,
    require_instructor_role,
    require_session_manager,
    require_session_viewer,
    visible_scope,
)
from coaching.core.exceptions import (
    CourseNotFoundError,
    NotEnrolledError,
    SessionNotFoundError,
    StorageConflictError,
    ValidationError,
)
from coaching.core.scheduling import attendance, enrollment, guards, lifecycle
from coaching.core.scheduling.derived import build_view
from coaching.core.scheduling.enums import (
    AttendanceStatus,
    Grade,
    RosterStatus,
    SessionStatus,
)
from coaching.core.scheduling.recurrence import expand_occurrences
from coaching.core.scheduling.statistics import attendance_statistics
from coaching.core.scheduling.time_utils import Clock, as_utc, utc_now
from coaching.models.class_session import ClassSessionPatch, CreateClassSessionRequest

logger = logging.getLogger(__name__)

# Patch fields stored as JSON payloads
_JSON_FIELDS = frozenset({"materials", "recording", "homework", "settings"})

# Patch fields backed by NOT NULL columns
_REQUIRED_FIELDS = frozenset(
    {"title", "description", "start_time", "end_time", "meeting_platform", "materials", "tags", "settings"}
)


def session_to_dict(session: ClassSessionModel, now) -> dict:
    """Flatten a loaded aggregate plus its derived view into response data."""
    view = build_view(session, now)
    return {
        "id": session.id,
        "title": session.title,
        "description": session.description,
        "course_id": session.course_id,
        "instructor_id": session.instructor_id,
        "start_time": as_utc(session.start_time),
        "end_time": as_utc(session.end_time),
        "duration": session.duration,
        "max_students": session.max_students,
        "current_students": session.current_students,
        "status": session.status,
        "meeting_link": session.meeting_link,
        "meeting_password": session.meeting_password,
        "meeting_platform": session.meeting_platform,
        "materials": session.materials or [],
        "recording": session.recording,
        "notes": session.notes,
        "homework": session.homework,
        "tags": session.tags or [],
        "settings": session.settings or {},
        "is_recurring": session.is_recurring,
        "recurrence": session.recurrence,
        "roster": [
            {
                "learner_id": entry.learner_id,
                "enrolled_at": as_utc(entry.enrolled_at),
                "status": entry.status,
                "grade": entry.grade,
                "feedback": entry.feedback,
            }
            for entry in session.roster
        ],
        "attendance": [
            {
                "learner_id": record.learner_id,
                "status": record.status,
                "joined_at": as_utc(record.joined_at) if record.joined_at else None,
                "left_at": as_utc(record.left_at) if record.left_at else None,
                "notes": record.notes,
            }
            for record in session.attendance
        ],
        "is_full": view.is_full,
        "can_enroll": view.can_enroll,
        "available_spots": view.available_spots,
        "time_until_start": view.time_until_start,
        "progress": view.progress,
        "created_at": as_utc(session.created_at),
        "updated_at": as_utc(session.updated_at),
    }


class ClassSessionService:
    """Class session service orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        settings: SchedulingSettings | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """
        Initialize class session service.

        Args:
            db: Async SQLAlchemy session
            settings: Scheduling configuration (defaults loaded from environment)
            clock: Source of the current instant
        """
        self.db = db
        self.settings = settings or SchedulingSettings()
        self.clock = clock

    def _now(self):
        return as_utc(self.clock())

    async def _load(self, session_id: UUID) -> ClassSessionModel:
        session = await class_session_crud.get_aggregate(self.db, session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def _commit(
        self,
        session_id: UUID | None,
        operation: str,
        pending: Awaitable | None = None,
    ) -> None:
        """
        Commit pending changes; a lost version race becomes StorageConflictError.

        `pending` is a CRUD write that flushes on its own; it is awaited inside
        the same guard. The transaction is rolled back before raising so the
        caller can reload and retry.
        """
        try:
            if pending is not None:
                await pending
            await self.db.commit()
        except (StaleDataError, IntegrityError) as e:
            await self.db.rollback()
            logger.warning(
                "Concurrent write rejected",
                extra={
                    "session_id": str(session_id) if session_id else None,
                    "operation": operation,
                    "error": str(e),
                },
            )
            raise StorageConflictError(
                "Class was modified by another request, reload and retry",
                {"session_id": str(session_id) if session_id else None, "operation": operation},
            ) from e

    def _touch(self, session: ClassSessionModel, now) -> None:
        """Mark the parent row dirty so child-only writes are version-checked."""
        session.updated_at = now
        # An unchanged timestamp would otherwise skip the UPDATE
        flag_modified(session, "updated_at")

    async def create_session(self, actor: Actor, request: CreateClassSessionRequest) -> dict:
        """
        Schedule a class, or a whole recurring series.

        Args:
            actor: Caller (becomes instructor-of-record)
            request: Validated creation payload

        Returns:
            dict: First session data plus series_ids for every created session

        Raises:
            ForbiddenError: Caller is not a teacher/admin or does not own the course
            CourseNotFoundError: Course does not exist
            InvalidTimeRangeError: end_time is not after start_time
            ValidationError: Recurrence template is unusable
        """
        require_instructor_role(actor)

        course = await course_crud.get_by_id(self.db, request.course_id)
        if course is None:
            raise CourseNotFoundError(request.course_id)
        require_course_owner(actor, course)

        start_time = as_utc(request.start_time)
        end_time = as_utc(request.end_time)
        guards.validate_time_range(start_time, end_time)

        if request.recurrence is not None:
            windows = expand_occurrences(
                start_time,
                end_time,
                request.recurrence,
                self.settings.max_recurring_occurrences,
            )
            recurrence = request.recurrence.model_dump(mode="json")
        else:
            windows = [(start_time, end_time)]
            recurrence = None

        base_row = {
            "title": request.title,
            "description": request.description,
            "course_id": request.course_id,
            "instructor_id": actor.user_id,
            "max_students": request.max_students,
            "current_students": 0,
            "status": SessionStatus.SCHEDULED,
            "meeting_link": request.meeting_link,
            "meeting_password": request.meeting_password,
            "meeting_platform": request.meeting_platform,
            "materials": [m.model_dump(mode="json") for m in request.materials],
            "homework": request.homework.model_dump(mode="json") if request.homework else None,
            "notes": request.notes,
            "tags": list(request.tags),
            "settings": request.settings.model_dump(mode="json"),
            "is_recurring": recurrence is not None,
            "recurrence": recurrence,
        }
        rows = [{**base_row, "start_time": start, "end_time": end} for start, end in windows]

        try:
            created = await class_session_crud.create_many(self.db, rows)
        except IntegrityError as e:
            await self.db.rollback()
            raise StorageConflictError(
                "Class could not be stored", {"course_id": str(request.course_id)}
            ) from e
        await self._commit(created[0].id, "create")

        logger.info(
            "Class scheduled",
            extra={
                "session_id": str(created[0].id),
                "course_id": str(request.course_id),
                "instructor_id": str(actor.user_id),
                "occurrences": len(created),
            },
        )

        data = session_to_dict(created[0], self._now())
        data["series_ids"] = [s.id for s in created]
        return data

    async def get_session(self, actor: Actor, session_id: UUID) -> dict:
        """
        Get a class visible to the caller.

        Raises:
            SessionNotFoundError: Class does not exist
            ForbiddenError: Class is outside the caller's scope
        """
        session = await self._load(session_id)
        require_session_viewer(actor, session)
        return session_to_dict(session, self._now())

    def _scoped(self, actor: Actor, filters: ClassSessionFilters) -> ClassSessionFilters:
        """Apply the caller's visibility scope on top of requested filters."""
        scope = visible_scope(actor)
        if scope.learner_id is not None:
            filters.learner_id = scope.learner_id
        if scope.instructor_id is not None:
            filters.instructor_id = scope.instructor_id
        return filters

    async def list_sessions(
        self,
        actor: Actor,
        instructor_id: UUID | None = None,
        course_id: UUID | None = None,
        learner_id: UUID | None = None,
        status: SessionStatus | None = None,
        on_date: date | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> dict:
        """
        Filtered, paginated class listing ordered by start_time.

        Returns:
            dict: items, total, page, limit, pages
        """
        page = max(page, 1)
        limit = limit or self.settings.default_page_size
        limit = max(1, min(limit, self.settings.max_page_size))

        filters = self._scoped(
            actor,
            ClassSessionFilters(
                instructor_id=instructor_id,
                course_id=course_id,
                learner_id=learner_id,
                status=status,
                on_date=on_date,
            ),
        )
        items, total = await class_session_crud.query(
            self.db, filters, limit=limit, offset=(page - 1) * limit
        )

        now = self._now()
        return {
            "items": [session_to_dict(s, now) for s in items],
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        }

    async def list_upcoming(self, actor: Actor, limit: int | None = None) -> list[dict]:
        """Scheduled classes starting after now, soonest first, within scope."""
        limit = limit or self.settings.default_upcoming_limit
        limit = max(1, min(limit, self.settings.max_page_size))
        now = self._now()

        sessions = await class_session_crud.get_upcoming(
            self.db, now, limit, self._scoped(actor, ClassSessionFilters())
        )
        return [session_to_dict(s, now) for s in sessions]

    async def update_session(self, actor: Actor, session_id: UUID, patch: ClassSessionPatch) -> dict:
        """
        Apply a typed patch.

        Only fields explicitly set on the patch are written.

        Raises:
            SessionNotFoundError: Class does not exist
            ForbiddenError: Caller does not manage the class
            MutationAfterStartError: Schedule fields changed after start
            InvalidTimeRangeError: Resulting window is empty
            ValidationError: Capacity below current enrollment
        """
        session = await self._load(session_id)
        require_session_manager(actor, session, "update")

        fields = patch.model_dump(exclude_unset=True)
        now = self._now()
        guards.ensure_editable(session, fields.keys(), now)

        start_time = as_utc(fields.get("start_time") or session.start_time)
        end_time = as_utc(fields.get("end_time") or session.end_time)
        guards.validate_time_range(start_time, end_time)
        if "max_students" in fields:
            guards.validate_capacity(fields["max_students"], session.current_students)

        updates = {}
        for name in fields:
            value = getattr(patch, name)
            if value is None and name in _REQUIRED_FIELDS:
                raise ValidationError(f"{name} cannot be cleared", field=name)
            if name == "materials":
                value = [m.model_dump(mode="json") for m in value]
            elif name in _JSON_FIELDS and value is not None:
                value = value.model_dump(mode="json")
            updates[name] = value
        if "start_time" in updates:
            updates["start_time"] = start_time
        if "end_time" in updates:
            updates["end_time"] = end_time

        await self._commit(
            session_id, "update", class_session_crud.update_fields(self.db, session, **updates)
        )

        logger.info(
            "Class updated",
            extra={"session_id": str(session_id), "fields": sorted(updates)},
        )
        return session_to_dict(session, now)

    async def delete_session(self, actor: Actor, session_id: UUID) -> None:
        """
        Delete a class that has not started yet.

        Raises:
            SessionNotFoundError: Class does not exist
            ForbiddenError: Caller does not manage the class
            MutationAfterStartError: Class has already started
        """
        session = await self._load(session_id)
        require_session_manager(actor, session, "delete")
        guards.ensure_deletable(session, self._now())

        await self._commit(session_id, "delete", class_session_crud.delete_instance(self.db, session))
        logger.info("Class deleted", extra={"session_id": str(session_id)})

    async def enroll(self, actor: Actor, session_id: UUID) -> dict:
        """Enroll the caller in a class."""
        session = await self._load(session_id)
        now = self._now()

        enrollment.enroll(session, actor.user_id, now)
        await self._commit(session_id, "enroll")

        logger.info(
            "Learner enrolled",
            extra={
                "session_id": str(session_id),
                "learner_id": str(actor.user_id),
                "current_students": session.current_students,
            },
        )
        return session_to_dict(session, now)

    async def unenroll(self, actor: Actor, session_id: UUID) -> dict:
        """Remove the caller from a class that has not started."""
        session = await self._load(session_id)
        now = self._now()

        enrollment.unenroll(session, actor.user_id, now)
        await self._commit(session_id, "unenroll")

        logger.info(
            "Learner unenrolled",
            extra={
                "session_id": str(session_id),
                "learner_id": str(actor.user_id),
                "current_students": session.current_students,
            },
        )
        return session_to_dict(session, now)

    async def mark_attendance(
        self,
        actor: Actor,
        session_id: UUID,
        learner_id: UUID,
        status: AttendanceStatus,
        notes: str | None = None,
    ) -> dict:
        """
        Record attendance for a rostered learner.

        Raises:
            ForbiddenError: Caller does not manage the class
            NotEnrolledError: Learner was never on the roster
        """
        session = await self._load(session_id)
        require_session_manager(actor, session, "mark attendance for")

        if not attendance.is_attendance_eligible(session, learner_id):
            raise NotEnrolledError(
                "Learner is not enrolled in this class",
                {"session_id": str(session_id), "learner_id": str(learner_id)},
            )

        now = self._now()
        attendance.mark_attendance(session, learner_id, status, notes, now)
        self._touch(session, now)
        await self._commit(session_id, "mark_attendance")

        logger.info(
            "Attendance marked",
            extra={
                "session_id": str(session_id),
                "learner_id": str(learner_id),
                "status": status.value,
            },
        )
        return session_to_dict(session, now)

    async def record_departure(self, actor: Actor, session_id: UUID, learner_id: UUID) -> dict:
        """Stamp left_at on a learner's attendance entry."""
        session = await self._load(session_id)
        require_session_manager(actor, session, "mark attendance for")

        now = self._now()
        attendance.record_departure(session, learner_id, now)
        self._touch(session, now)
        await self._commit(session_id, "record_departure")

        logger.info(
            "Departure recorded",
            extra={"session_id": str(session_id), "learner_id": str(learner_id)},
        )
        return session_to_dict(session, now)

    async def record_outcome(
        self,
        actor: Actor,
        session_id: UUID,
        learner_id: UUID,
        status: RosterStatus,
        grade: Grade | None = None,
        feedback: str | None = None,
    ) -> dict:
        """Set a rostered learner's standing, grade and feedback."""
        session = await self._load(session_id)
        require_session_manager(actor, session, "grade learners in")

        now = self._now()
        enrollment.record_outcome(session, learner_id, status, grade, feedback)
        self._touch(session, now)
        await self._commit(session_id, "record_outcome")

        logger.info(
            "Roster outcome recorded",
            extra={
                "session_id": str(session_id),
                "learner_id": str(learner_id),
                "status": status.value,
                "grade": grade.value if grade else None,
            },
        )
        return session_to_dict(session, now)

    async def transition_status(self, actor: Actor, session_id: UUID, status: SessionStatus) -> dict:
        """
        Move a class to a new status under the configured policy.

        Raises:
            ForbiddenError: Caller does not manage the class
            InvalidTransitionError: Policy rejects the edge
        """
        session = await self._load(session_id)
        require_session_manager(actor, session, "update")

        previous = SessionStatus(session.status)
        policy = lifecycle.get_policy(self.settings.strict_transitions)
        now = self._now()

        defaulted = lifecycle.transition_status(session, status, now, policy)
        self._touch(session, now)
        await self._commit(session_id, "transition_status")

        logger.info(
            "Class status changed",
            extra={
                "session_id": str(session_id),
                "from_status": previous.value,
                "to_status": SessionStatus(status).value,
                "defaulted_absent": len(defaulted),
            },
        )
        return session_to_dict(session, now)

    async def get_statistics(self, actor: Actor, session_id: UUID) -> dict:
        """Attendance statistics for a class the caller manages."""
        session = await self._load(session_id)
        require_session_manager(actor, session, "view statistics for")

        stats = attendance_statistics(session)
        return {
            "class_id": session.id,
            "title": session.title,
            "total_students": stats.total_students,
            "attendance": {
                "present": stats.present,
                "absent": stats.absent,
                "late": stats.late,
                "excused": stats.excused,
                "rate": stats.rate,
            },
            "status": session.status,
            "start_time": as_utc(session.start_time),
            "end_time": as_utc(session.end_time),
        }
