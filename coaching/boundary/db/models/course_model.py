"""
Course ORM model.

Represents a course that owns scheduled class sessions. Only the fields the
scheduling engine consults are kept: title, description and the
instructor-of-record used for ownership checks.

Dependencies: sqlalchemy, coaching.boundary.db.base
System role: Course persistence for session ownership
"""

import uuid

from sqlalchemy import JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coaching.boundary.db.base import Base, UUIDMixin, TimestampMixin


class CourseModel(Base, UUIDMixin, TimestampMixin):
    """
    Course ORM model.

    Attributes:
        id: UUID primary key (auto-generated)
        title: Course title (100 char limit)
        description: Optional course description (up to 1000 chars)
        instructor_id: Owning instructor's user ID
        course_metadata: JSON field storing course-specific data (category, level)
        sessions: Class sessions scheduled under this course
        created_at: Course creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """

    __tablename__ = "courses"

    title: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Course title",
    )

    description: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
        default=None,
        doc="Course description",
    )

    instructor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
        doc="Instructor who owns the course",
    )

    course_metadata: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        doc="Course metadata (category, level, tags, etc.)",
    )

    sessions = relationship(
        "ClassSessionModel",
        back_populates="course",
        foreign_keys="ClassSessionModel.course_id",
    )
