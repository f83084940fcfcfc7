"""
Exception hierarchy for the class scheduling engine.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging, plus a
stable error_code the API layer uses to render responses.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any
from uuid import UUID


class SchedulingException(Exception):
    """Base exception for all scheduling engine errors."""

    error_code = "scheduling_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(SchedulingException):
    """Raised when input validation fails."""

    error_code = "validation_error"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFoundError(SchedulingException):
    """Raised when a referenced entity does not exist."""

    error_code = "not_found"


class SessionNotFoundError(NotFoundError):
    """Raised when a class session cannot be found."""

    def __init__(self, session_id: UUID | str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["session_id"] = str(session_id)
        super().__init__(f"Class session not found: {session_id}", details)


class CourseNotFoundError(NotFoundError):
    """Raised when a course cannot be found."""

    def __init__(self, course_id: UUID | str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["course_id"] = str(course_id)
        super().__init__(f"Course not found: {course_id}", details)


class ForbiddenError(SchedulingException):
    """Raised when the caller lacks the required relationship to a resource."""

    error_code = "forbidden"


class InvalidTimeRangeError(SchedulingException):
    """Raised when end_time is not strictly after start_time."""

    error_code = "invalid_time_range"


class AlreadyEnrolledError(SchedulingException):
    """Raised when a learner is already on the roster."""

    error_code = "already_enrolled"


class NotEnrollableError(SchedulingException):
    """Raised when a session is not open for enrollment."""

    error_code = "not_enrollable"


class SessionFullError(NotEnrollableError):
    """Raised when a session has reached max_students."""

    error_code = "session_full"


class NotEnrolledError(SchedulingException):
    """Raised when a learner is not on the roster."""

    error_code = "not_enrolled"


class SessionAlreadyStartedError(SchedulingException):
    """Raised when unenrolling from a session that has already begun."""

    error_code = "session_already_started"


class MutationAfterStartError(SchedulingException):
    """Raised when editing or deleting a session that has started or left scheduled."""

    error_code = "mutation_after_start"


class InvalidTransitionError(SchedulingException):
    """Raised when the active transition policy rejects a status change."""

    error_code = "invalid_transition"


class StorageConflictError(SchedulingException):
    """Raised when a concurrent write to the same session wins the race."""

    error_code = "storage_conflict"
