"""
Class session ORM models.

The class session aggregate: one scheduled teaching occurrence together with
its roster and attendance log. The parent row carries a version counter so
every write of the aggregate is a compare-and-swap against the version read.

Dependencies: sqlalchemy, coaching.boundary.db.base, coaching.core.scheduling
System role: Class session persistence
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coaching.boundary.db.base import Base, UUIDMixin, TimestampMixin
from coaching.core.scheduling.enums import (
    AttendanceStatus,
    Grade,
    MeetingPlatform,
    RosterStatus,
    SessionStatus,
)
from coaching.core.scheduling.time_utils import duration_minutes


class ClassSessionModel(Base, UUIDMixin, TimestampMixin):
    """
    Class session ORM model (aggregate root).

    Attributes:
        id: UUID primary key (auto-generated)
        title, description: Display fields
        course_id: Parent course (required)
        instructor_id: Instructor-of-record, fixed at creation
        start_time, end_time: Scheduled window (end strictly after start)
        duration: Minutes between start and end, recomputed on every flush
        max_students: Capacity, NULL for unlimited
        current_students: Cached roster size
        status: Lifecycle state
        meeting_link, meeting_password, meeting_platform: Joining details
        materials, recording, homework, tags, settings: JSON payloads
        notes: Free-form instructor notes
        is_recurring, recurrence: Recurrence template the session was spawned from
        version: Optimistic concurrency counter
        roster: RosterEntryModel rows (cascading delete)
        attendance: AttendanceRecordModel rows (cascading delete)
    """

    __tablename__ = "class_sessions"

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)

    course_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    instructor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0, doc="Minutes")

    max_students: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
    current_students: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SessionStatus.SCHEDULED,
        index=True,
    )

    meeting_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    meeting_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meeting_platform: Mapped[MeetingPlatform] = mapped_column(
        Enum(MeetingPlatform, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=MeetingPlatform.ZOOM,
    )

    materials: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    recording: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    homework: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    recurrence: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    course = relationship("CourseModel", back_populates="sessions", foreign_keys=[course_id])
    roster: Mapped[list["RosterEntryModel"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="RosterEntryModel.enrolled_at",
        lazy="selectin",
    )
    attendance: Mapped[list["AttendanceRecordModel"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_class_sessions_time_range"),
        CheckConstraint("current_students >= 0", name="ck_class_sessions_students_nonneg"),
        CheckConstraint(
            "max_students IS NULL OR current_students <= max_students",
            name="ck_class_sessions_capacity",
        ),
        Index("ix_class_sessions_status_start", "status", "start_time"),
    )

    def __repr__(self) -> str:
        return f"<ClassSession {self.id} {self.title!r} {self.status}>"


class RosterEntryModel(Base, UUIDMixin):
    """One learner's enrollment in a class session."""

    __tablename__ = "class_roster"

    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("class_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    learner_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    status: Mapped[RosterStatus] = mapped_column(
        Enum(RosterStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RosterStatus.ENROLLED,
    )
    grade: Mapped[Grade | None] = mapped_column(
        Enum(Grade, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
        default=None,
    )
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    session: Mapped[ClassSessionModel] = relationship(back_populates="roster")

    __table_args__ = (
        UniqueConstraint("session_id", "learner_id", name="uq_class_roster_learner"),
    )


class AttendanceRecordModel(Base, UUIDMixin):
    """One learner's attendance for a class session."""

    __tablename__ = "class_attendance"

    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("class_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    learner_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(AttendanceStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AttendanceStatus.ABSENT,
    )
    joined_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    left_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(200), nullable=True)

    session: Mapped[ClassSessionModel] = relationship(back_populates="attendance")

    __table_args__ = (
        UniqueConstraint("session_id", "learner_id", name="uq_class_attendance_learner"),
    )


@event.listens_for(ClassSessionModel, "before_insert")
@event.listens_for(ClassSessionModel, "before_update")
def _recompute_duration(mapper, connection, target: ClassSessionModel) -> None:
    """Derive duration from the time window on every save."""
    if target.start_time is not None and target.end_time is not None:
        target.duration = duration_minutes(target.start_time, target.end_time)
