"""Application services: use case orchestration over the database boundary."""

from .class_session_service import ClassSessionService
from .course_service import CourseService

__all__ = ["ClassSessionService", "CourseService"]
