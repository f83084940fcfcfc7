"""API-specific dependencies."""

from .dependencies import (
    get_class_session_service,
    get_clock,
    get_course_service,
    get_current_actor,
    get_settings_dependency,
)

__all__ = [
    "get_class_session_service",
    "get_clock",
    "get_course_service",
    "get_current_actor",
    "get_settings_dependency",
]
