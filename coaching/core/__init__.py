"""
Core business logic module.

Contains the scheduling engine, the exception hierarchy and the
capability predicates consumed by the service layer.
"""

from coaching.core.exceptions import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    ForbiddenError,
    InvalidTimeRangeError,
    InvalidTransitionError,
    MutationAfterStartError,
    NotEnrollableError,
    NotEnrolledError,
    NotFoundError,
    SchedulingException,
    SessionAlreadyStartedError,
    SessionFullError,
    SessionNotFoundError,
    StorageConflictError,
    ValidationError,
)

__all__ = [
    "AlreadyEnrolledError",
    "CourseNotFoundError",
    "ForbiddenError",
    "InvalidTimeRangeError",
    "InvalidTransitionError",
    "MutationAfterStartError",
    "NotEnrollableError",
    "NotEnrolledError",
    "NotFoundError",
    "SchedulingException",
    "SessionAlreadyStartedError",
    "SessionFullError",
    "SessionNotFoundError",
    "StorageConflictError",
    "ValidationError",
]
