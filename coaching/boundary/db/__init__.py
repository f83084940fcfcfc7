"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - CourseModel, ClassSessionModel, RosterEntryModel, AttendanceRecordModel: Domain entities
  - course_crud, class_session_crud: CRUD operation singletons

Dependencies: sqlalchemy, coaching.configs
System role: Database adapter providing persistent storage for courses
and class sessions.
"""

from coaching.boundary.db.base import Base, TimestampMixin, UUIDMixin
from coaching.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from coaching.boundary.db.models import (
    AttendanceRecordModel,
    ClassSessionModel,
    CourseModel,
    RosterEntryModel,
)
from coaching.boundary.db.CRUD import (
    BaseCRUD,
    ClassSessionCRUD,
    ClassSessionFilters,
    CourseCRUD,
    class_session_crud,
    course_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "AttendanceRecordModel",
    "ClassSessionModel",
    "CourseModel",
    "RosterEntryModel",
    # CRUD classes
    "BaseCRUD",
    "ClassSessionCRUD",
    "ClassSessionFilters",
    "CourseCRUD",
    # CRUD singletons
    "class_session_crud",
    "course_crud",
]
