"""
Database models package.

Exports:
  - CourseModel: Course ORM model
  - ClassSessionModel, RosterEntryModel, AttendanceRecordModel: Class session aggregate

Dependencies: sqlalchemy, coaching.boundary.db.base
System role: Database model definitions for domain entities
"""

from coaching.boundary.db.models.course_model import CourseModel
from coaching.boundary.db.models.class_session_model import (
    AttendanceRecordModel,
    ClassSessionModel,
    RosterEntryModel,
)

__all__ = [
    "AttendanceRecordModel",
    "ClassSessionModel",
    "CourseModel",
    "RosterEntryModel",
]
