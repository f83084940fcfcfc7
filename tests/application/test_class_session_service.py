"""
Test suite for ClassSessionService.

Exercises the use cases end to end against in-memory SQLite with a frozen
clock: scheduling, enrollment, attendance, lifecycle, guards, scoped
listings and the concurrent-write conflict path.

System role: Verification of class session use case orchestration
"""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coaching.application.services.class_session_service import ClassSessionService
from coaching.boundary.db.CRUD.course_crud import course_crud
from coaching.boundary.db.models import ClassSessionModel, CourseModel
from coaching.configs.scheduling import SchedulingSettings
from coaching.core.access import Actor, Role
from coaching.core.exceptions import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    ForbiddenError,
    InvalidTimeRangeError,
    InvalidTransitionError,
    MutationAfterStartError,
    NotEnrollableError,
    NotEnrolledError,
    SessionAlreadyStartedError,
    SessionFullError,
    SessionNotFoundError,
    StorageConflictError,
    ValidationError,
)
from coaching.core.scheduling.enums import (
    AttendanceStatus,
    Grade,
    RecurrenceFrequency,
    RosterStatus,
    SessionStatus,
)
from coaching.core.scheduling.recurrence import RecurrenceTemplate
from coaching.models.class_session import ClassSessionPatch, CreateClassSessionRequest, Recording


def _learner() -> Actor:
    return Actor(user_id=uuid.uuid4(), role=Role.STUDENT)


@pytest.fixture
def service(test_async_db: AsyncSession, clock) -> ClassSessionService:
    """Provide ClassSessionService with permissive transitions and frozen clock."""
    return ClassSessionService(test_async_db, SchedulingSettings(strict_transitions=False), clock)


@pytest.fixture
async def course(test_async_db: AsyncSession, teacher: Actor) -> CourseModel:
    """Provide a course owned by the teacher fixture."""
    course = await course_crud.create(
        test_async_db,
        title="JEE Physics",
        instructor_id=teacher.user_id,
        course_metadata={},
    )
    await test_async_db.commit()
    return course


@pytest.fixture
def make_request(course: CourseModel, now):
    """Factory for creation requests starting one day after now."""
    def _make(**overrides) -> CreateClassSessionRequest:
        start_time = overrides.pop("start_time", now + timedelta(days=1))
        fields = {
            "title": "Kinematics",
            "description": "Motion in one and two dimensions",
            "course_id": course.id,
            "start_time": start_time,
            "end_time": start_time + timedelta(minutes=90),
        }
        fields.update(overrides)
        return CreateClassSessionRequest(**fields)

    return _make


async def _count_sessions(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(ClassSessionModel.id)))).scalar_one()


class TestCreateSession:
    """Test suite for ClassSessionService.create_session()."""

    @pytest.mark.asyncio
    async def test_create_should_schedule_with_caller_as_instructor(
        self, service, teacher, make_request
    ) -> None:
        """Test a teacher schedules a class for their own course."""
        # Act
        data = await service.create_session(teacher, make_request(max_students=20))

        # Assert
        assert data["status"] == SessionStatus.SCHEDULED
        assert data["instructor_id"] == teacher.user_id
        assert data["duration"] == 90
        assert data["current_students"] == 0
        assert data["available_spots"] == 20
        assert data["time_until_start"] == "1 day"
        assert data["series_ids"] == [data["id"]]

    @pytest.mark.asyncio
    async def test_inverted_window_is_rejected_before_persistence(
        self, service, teacher, make_request, test_async_db, now
    ) -> None:
        """Test start 10:00, end 09:00 raises InvalidTimeRangeError and stores nothing."""
        # Arrange
        start = now + timedelta(days=1, hours=1)
        request = make_request(start_time=start, end_time=start - timedelta(hours=1))

        # Act / Assert
        with pytest.raises(InvalidTimeRangeError):
            await service.create_session(teacher, request)
        assert await _count_sessions(test_async_db) == 0

    @pytest.mark.asyncio
    async def test_student_cannot_schedule(self, service, student, make_request) -> None:
        with pytest.raises(ForbiddenError):
            await service.create_session(student, make_request())

    @pytest.mark.asyncio
    async def test_teacher_cannot_schedule_for_foreign_course(
        self, service, other_teacher, make_request
    ) -> None:
        with pytest.raises(ForbiddenError):
            await service.create_session(other_teacher, make_request())

    @pytest.mark.asyncio
    async def test_admin_can_schedule_for_any_course(self, service, admin, make_request) -> None:
        data = await service.create_session(admin, make_request())

        assert data["instructor_id"] == admin.user_id

    @pytest.mark.asyncio
    async def test_unknown_course_is_not_found(self, service, teacher, make_request) -> None:
        with pytest.raises(CourseNotFoundError):
            await service.create_session(teacher, make_request(course_id=uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_recurring_series_is_persisted(
        self, service, teacher, make_request, test_async_db
    ) -> None:
        """Test a weekly template creates every occurrence as its own row."""
        # Arrange
        request = make_request(
            recurrence=RecurrenceTemplate(frequency=RecurrenceFrequency.WEEKLY, max_occurrences=4)
        )

        # Act
        data = await service.create_session(teacher, request)

        # Assert
        assert len(data["series_ids"]) == 4
        assert data["is_recurring"] is True
        assert data["recurrence"]["frequency"] == "weekly"
        assert await _count_sessions(test_async_db) == 4
        starts = [
            (await service.get_session(teacher, sid))["start_time"] for sid in data["series_ids"]
        ]
        assert [b - a for a, b in zip(starts, starts[1:])] == [timedelta(weeks=1)] * 3


class TestEnrollment:
    """Enrollment scenarios through the service."""

    @pytest.mark.asyncio
    async def test_two_seat_class_rejects_third_learner(self, service, teacher, make_request) -> None:
        """Test A and B enroll, the class is full, C gets SessionFullError."""
        # Arrange
        created = await service.create_session(teacher, make_request(max_students=2))
        a, b, c = _learner(), _learner(), _learner()

        # Act
        await service.enroll(a, created["id"])
        data = await service.enroll(b, created["id"])

        # Assert
        assert data["current_students"] == 2
        assert data["is_full"] is True
        assert data["can_enroll"] is False
        with pytest.raises(SessionFullError):
            await service.enroll(c, created["id"])

    @pytest.mark.asyncio
    async def test_unenroll_then_reenroll(self, service, teacher, make_request) -> None:
        """Test a freed seat can be taken again by the same learner."""
        # Arrange
        created = await service.create_session(teacher, make_request(max_students=1))
        a = _learner()
        await service.enroll(a, created["id"])

        # Act
        after_unenroll = await service.unenroll(a, created["id"])
        after_reenroll = await service.enroll(a, created["id"])

        # Assert
        assert after_unenroll["current_students"] == 0
        assert after_reenroll["current_students"] == 1
        assert [e["learner_id"] for e in after_reenroll["roster"]] == [a.user_id]

    @pytest.mark.asyncio
    async def test_unenroll_after_start_is_refused(
        self, service, teacher, make_request, clock
    ) -> None:
        """Test unenroll one minute after start fails while still scheduled."""
        # Arrange
        created = await service.create_session(teacher, make_request())
        a = _learner()
        await service.enroll(a, created["id"])
        clock.advance(timedelta(days=1, minutes=1))

        # Act / Assert
        with pytest.raises(SessionAlreadyStartedError):
            await service.unenroll(a, created["id"])

    @pytest.mark.asyncio
    async def test_double_enroll_is_rejected(self, service, teacher, make_request) -> None:
        created = await service.create_session(teacher, make_request())
        a = _learner()
        await service.enroll(a, created["id"])

        with pytest.raises(AlreadyEnrolledError):
            await service.enroll(a, created["id"])

    @pytest.mark.asyncio
    async def test_cancelled_class_is_not_enrollable(self, service, teacher, make_request) -> None:
        created = await service.create_session(teacher, make_request())
        await service.transition_status(teacher, created["id"], SessionStatus.CANCELLED)

        with pytest.raises(NotEnrollableError):
            await service.enroll(_learner(), created["id"])

    @pytest.mark.asyncio
    async def test_enroll_unknown_class_is_not_found(self, service) -> None:
        with pytest.raises(SessionNotFoundError):
            await service.enroll(_learner(), uuid.uuid4())


class TestAttendanceAndLifecycle:
    """Attendance marking and status transitions through the service."""

    @pytest.mark.asyncio
    async def test_start_defaults_enrolled_learners_to_absent(
        self, service, teacher, make_request
    ) -> None:
        """Test roster [A, B] yields [A absent, B absent] on start."""
        # Arrange
        created = await service.create_session(teacher, make_request())
        a, b = _learner(), _learner()
        await service.enroll(a, created["id"])
        await service.enroll(b, created["id"])

        # Act
        data = await service.transition_status(teacher, created["id"], SessionStatus.IN_PROGRESS)

        # Assert
        assert data["status"] == SessionStatus.IN_PROGRESS
        assert sorted((r["learner_id"], r["status"]) for r in data["attendance"]) == sorted(
            [(a.user_id, AttendanceStatus.ABSENT), (b.user_id, AttendanceStatus.ABSENT)]
        )

    @pytest.mark.asyncio
    async def test_present_then_absent_keeps_joined_at(
        self, service, teacher, make_request, clock
    ) -> None:
        """Test joined_at from the first present mark survives a correction."""
        # Arrange
        created = await service.create_session(teacher, make_request())
        a = _learner()
        await service.enroll(a, created["id"])
        first_mark = clock()

        # Act
        await service.mark_attendance(teacher, created["id"], a.user_id, AttendanceStatus.PRESENT)
        clock.advance(timedelta(minutes=10))
        data = await service.mark_attendance(teacher, created["id"], a.user_id, AttendanceStatus.ABSENT)

        # Assert
        assert len(data["attendance"]) == 1
        record = data["attendance"][0]
        assert record["status"] == AttendanceStatus.ABSENT
        assert record["joined_at"] == first_mark

    @pytest.mark.asyncio
    async def test_attendance_for_unrostered_learner_is_refused(
        self, service, teacher, make_request
    ) -> None:
        created = await service.create_session(teacher, make_request())

        with pytest.raises(NotEnrolledError):
            await service.mark_attendance(teacher, created["id"], uuid.uuid4(), AttendanceStatus.PRESENT)

    @pytest.mark.asyncio
    async def test_only_managers_mark_attendance(
        self, service, teacher, other_teacher, make_request
    ) -> None:
        # Arrange
        created = await service.create_session(teacher, make_request())
        a = _learner()
        await service.enroll(a, created["id"])

        # Act / Assert
        with pytest.raises(ForbiddenError):
            await service.mark_attendance(a, created["id"], a.user_id, AttendanceStatus.PRESENT)
        with pytest.raises(ForbiddenError):
            await service.mark_attendance(other_teacher, created["id"], a.user_id, AttendanceStatus.PRESENT)

    @pytest.mark.asyncio
    async def test_departure_and_outcome(self, service, teacher, make_request, clock) -> None:
        # Arrange
        created = await service.create_session(teacher, make_request())
        a = _learner()
        await service.enroll(a, created["id"])
        await service.mark_attendance(teacher, created["id"], a.user_id, AttendanceStatus.PRESENT)
        clock.advance(timedelta(minutes=75))

        # Act
        departed = await service.record_departure(teacher, created["id"], a.user_id)
        graded = await service.record_outcome(
            teacher, created["id"], a.user_id, RosterStatus.COMPLETED, Grade.B_PLUS, "Good work"
        )

        # Assert
        assert departed["attendance"][0]["left_at"] == clock()
        entry = graded["roster"][0]
        assert entry["status"] == RosterStatus.COMPLETED
        assert entry["grade"] == Grade.B_PLUS
        assert graded["current_students"] == 1

    @pytest.mark.asyncio
    async def test_strict_policy_rejects_reopening(
        self, test_async_db, clock, teacher, make_request
    ) -> None:
        """Test strict transitions refuse completed -> scheduled."""
        # Arrange
        strict = ClassSessionService(test_async_db, SchedulingSettings(strict_transitions=True), clock)
        created = await strict.create_session(teacher, make_request())
        await strict.transition_status(teacher, created["id"], SessionStatus.IN_PROGRESS)
        await strict.transition_status(teacher, created["id"], SessionStatus.COMPLETED)

        # Act / Assert
        with pytest.raises(InvalidTransitionError):
            await strict.transition_status(teacher, created["id"], SessionStatus.SCHEDULED)

    @pytest.mark.asyncio
    async def test_permissive_policy_allows_reopening(self, service, teacher, make_request) -> None:
        created = await service.create_session(teacher, make_request())
        await service.transition_status(teacher, created["id"], SessionStatus.COMPLETED)

        data = await service.transition_status(teacher, created["id"], SessionStatus.SCHEDULED)

        assert data["status"] == SessionStatus.SCHEDULED

    @pytest.mark.asyncio
    async def test_statistics(self, service, teacher, make_request) -> None:
        # Arrange
        created = await service.create_session(teacher, make_request())
        learners = [_learner() for _ in range(4)]
        for learner in learners:
            await service.enroll(learner, created["id"])
        await service.transition_status(teacher, created["id"], SessionStatus.IN_PROGRESS)
        await service.mark_attendance(teacher, created["id"], learners[0].user_id, AttendanceStatus.PRESENT)
        await service.mark_attendance(teacher, created["id"], learners[1].user_id, AttendanceStatus.LATE)

        # Act
        stats = await service.get_statistics(teacher, created["id"])

        # Assert
        assert stats["total_students"] == 4
        assert stats["attendance"] == {
            "present": 1,
            "absent": 2,
            "late": 1,
            "excused": 0,
            "rate": 25.0,
        }

    @pytest.mark.asyncio
    async def test_statistics_require_manager(self, service, teacher, make_request) -> None:
        created = await service.create_session(teacher, make_request())

        with pytest.raises(ForbiddenError):
            await service.get_statistics(_learner(), created["id"])


class TestUpdateAndDelete:
    """Mutation guards through the service."""

    @pytest.mark.asyncio
    async def test_update_before_start_recomputes_duration(
        self, service, teacher, make_request, now
    ) -> None:
        # Arrange
        created = await service.create_session(teacher, make_request())
        new_end = created["start_time"] + timedelta(minutes=120)

        # Act
        data = await service.update_session(
            teacher, created["id"], ClassSessionPatch(title="Projectile motion", end_time=new_end)
        )

        # Assert
        assert data["title"] == "Projectile motion"
        assert data["duration"] == 120

    @pytest.mark.asyncio
    async def test_update_after_start_is_refused(
        self, service, teacher, make_request, clock
    ) -> None:
        # Arrange
        created = await service.create_session(teacher, make_request())
        clock.advance(timedelta(days=1))

        # Act / Assert
        with pytest.raises(MutationAfterStartError):
            await service.update_session(teacher, created["id"], ClassSessionPatch(title="Too late"))

    @pytest.mark.asyncio
    async def test_notes_and_recording_editable_after_start(
        self, service, teacher, make_request, clock
    ) -> None:
        # Arrange
        created = await service.create_session(teacher, make_request())
        await service.transition_status(teacher, created["id"], SessionStatus.IN_PROGRESS)
        clock.advance(timedelta(days=1, hours=2))
        patch = ClassSessionPatch(
            notes="Covered chapters 3 and 4",
            recording=Recording(url="https://recordings.example.com/abc"),
        )

        # Act
        data = await service.update_session(teacher, created["id"], patch)

        # Assert
        assert data["notes"] == "Covered chapters 3 and 4"
        assert data["recording"]["url"] == "https://recordings.example.com/abc"

    @pytest.mark.asyncio
    async def test_inverted_window_on_update_is_rejected(
        self, service, teacher, make_request
    ) -> None:
        created = await service.create_session(teacher, make_request())
        patch = ClassSessionPatch(end_time=created["start_time"] - timedelta(minutes=1))

        with pytest.raises(InvalidTimeRangeError):
            await service.update_session(teacher, created["id"], patch)

    @pytest.mark.asyncio
    async def test_capacity_below_enrollment_is_rejected(
        self, service, teacher, make_request
    ) -> None:
        # Arrange
        created = await service.create_session(teacher, make_request(max_students=5))
        for _ in range(3):
            await service.enroll(_learner(), created["id"])

        # Act / Assert
        with pytest.raises(ValidationError):
            await service.update_session(teacher, created["id"], ClassSessionPatch(max_students=2))

    @pytest.mark.asyncio
    async def test_clearing_required_field_is_rejected(self, service, teacher, make_request) -> None:
        created = await service.create_session(teacher, make_request())

        with pytest.raises(ValidationError):
            await service.update_session(teacher, created["id"], ClassSessionPatch(title=None))

    @pytest.mark.asyncio
    async def test_only_managers_update(self, service, teacher, other_teacher, make_request) -> None:
        created = await service.create_session(teacher, make_request())

        with pytest.raises(ForbiddenError):
            await service.update_session(other_teacher, created["id"], ClassSessionPatch(title="Mine now"))

    @pytest.mark.asyncio
    async def test_delete_before_start(self, service, teacher, make_request) -> None:
        # Arrange
        created = await service.create_session(teacher, make_request())
        await service.enroll(_learner(), created["id"])

        # Act
        await service.delete_session(teacher, created["id"])

        # Assert
        with pytest.raises(SessionNotFoundError):
            await service.get_session(teacher, created["id"])

    @pytest.mark.asyncio
    async def test_delete_after_start_is_refused(
        self, service, teacher, make_request, clock
    ) -> None:
        created = await service.create_session(teacher, make_request())
        clock.advance(timedelta(days=1, seconds=1))

        with pytest.raises(MutationAfterStartError):
            await service.delete_session(teacher, created["id"])


class TestScopedQueries:
    """Listing and upcoming views respect the caller's scope."""

    @pytest.mark.asyncio
    async def test_list_scopes_by_role(
        self, service, teacher, other_teacher, admin, make_request, test_async_db
    ) -> None:
        # Arrange
        foreign_course = await course_crud.create(
            test_async_db, title="Chemistry", instructor_id=other_teacher.user_id, course_metadata={}
        )
        await test_async_db.commit()
        mine = await service.create_session(teacher, make_request())
        await service.create_session(teacher, make_request(title="Dynamics"))
        theirs = await service.create_session(other_teacher, make_request(course_id=foreign_course.id))
        a = _learner()
        await service.enroll(a, mine["id"])
        await service.enroll(a, theirs["id"])

        # Act
        as_teacher = await service.list_sessions(teacher, instructor_id=other_teacher.user_id)
        as_student = await service.list_sessions(a)
        as_admin = await service.list_sessions(admin)

        # Assert
        assert as_teacher["total"] == 2
        assert all(item["instructor_id"] == teacher.user_id for item in as_teacher["items"])
        assert {item["id"] for item in as_student["items"]} == {mine["id"], theirs["id"]}
        assert as_admin["total"] == 3

    @pytest.mark.asyncio
    async def test_list_paginates(self, service, admin, make_request, now) -> None:
        # Arrange
        for hours in range(5):
            await service.create_session(
                admin, make_request(start_time=now + timedelta(days=1, hours=hours))
            )

        # Act
        page = await service.list_sessions(admin, page=2, limit=2)

        # Assert
        assert page["total"] == 5
        assert page["pages"] == 3
        assert page["page"] == 2
        assert len(page["items"]) == 2

    @pytest.mark.asyncio
    async def test_list_filters_by_date(self, service, admin, make_request, now) -> None:
        await service.create_session(admin, make_request(start_time=now + timedelta(days=1)))
        await service.create_session(admin, make_request(start_time=now + timedelta(days=2)))

        page = await service.list_sessions(admin, on_date=(now + timedelta(days=2)).date())

        assert page["total"] == 1

    @pytest.mark.asyncio
    async def test_upcoming_view(self, service, teacher, make_request, now) -> None:
        # Arrange
        later = await service.create_session(teacher, make_request(start_time=now + timedelta(days=3)))
        sooner = await service.create_session(teacher, make_request(start_time=now + timedelta(hours=2)))
        cancelled = await service.create_session(teacher, make_request(start_time=now + timedelta(hours=1)))
        await service.transition_status(teacher, cancelled["id"], SessionStatus.CANCELLED)

        # Act
        upcoming = await service.list_upcoming(teacher)

        # Assert
        assert [item["id"] for item in upcoming] == [sooner["id"], later["id"]]

    @pytest.mark.asyncio
    async def test_student_cannot_view_unrostered_class(self, service, teacher, make_request) -> None:
        created = await service.create_session(teacher, make_request())

        with pytest.raises(ForbiddenError):
            await service.get_session(_learner(), created["id"])


class TestConcurrentWrites:
    """Lost version races surface as StorageConflictError."""

    @pytest.mark.asyncio
    async def test_enroll_against_outdated_version_conflicts(
        self, service, teacher, make_request, test_async_db
    ) -> None:
        """Test a row changed behind the loaded aggregate rejects the enroll."""
        # Arrange
        created = await service.create_session(teacher, make_request(max_students=1))
        table = ClassSessionModel.__table__
        await test_async_db.execute(
            update(table).where(table.c.id == created["id"]).values(version=table.c.version + 1)
        )

        # Act / Assert
        with pytest.raises(StorageConflictError):
            await service.enroll(_learner(), created["id"])

    @pytest.mark.asyncio
    async def test_update_against_outdated_version_conflicts(
        self, service, teacher, make_request, test_async_db
    ) -> None:
        """Test the patch flush itself is guarded, not only the commit."""
        # Arrange
        created = await service.create_session(teacher, make_request())
        table = ClassSessionModel.__table__
        await test_async_db.execute(
            update(table).where(table.c.id == created["id"]).values(version=table.c.version + 1)
        )

        # Act / Assert
        with pytest.raises(StorageConflictError):
            await service.update_session(teacher, created["id"], ClassSessionPatch(title="Renamed class"))

    @pytest.mark.asyncio
    async def test_attendance_against_outdated_version_conflicts(
        self, service, teacher, make_request, test_async_db
    ) -> None:
        """Test an attendance-only write is guarded even when the clock has not moved."""
        # Arrange
        created = await service.create_session(teacher, make_request())
        learner = _learner()
        await service.enroll(learner, created["id"])
        table = ClassSessionModel.__table__
        await test_async_db.execute(
            update(table).where(table.c.id == created["id"]).values(version=table.c.version + 1)
        )

        # Act / Assert
        with pytest.raises(StorageConflictError):
            await service.mark_attendance(
                teacher, created["id"], learner.user_id, AttendanceStatus.PRESENT
            )
