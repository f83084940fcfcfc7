"""
Scheduling error handling utilities.

Provides a decorator for consistent error handling across class and course
endpoints: domain exceptions are logged with context and rendered as
{"error": <code>, "message": <text>, "details": {...}} with a matching
HTTP status.

Dependencies: fastapi, coaching.core.exceptions
System role: Domain error to HTTP response translation
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from coaching.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    SchedulingException,
    StorageConflictError,
)
from coaching.models.common import ErrorResponse

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def status_for(exc: SchedulingException) -> int:
    """HTTP status for a domain exception; preconditions default to 400."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ForbiddenError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, StorageConflictError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def error_response(exc: SchedulingException) -> JSONResponse:
    body = ErrorResponse(error=exc.error_code, message=exc.message, details=exc.details or None)
    return JSONResponse(status_code=status_for(exc), content=body.model_dump())


def handle_scheduling_errors(func: F) -> F:
    """
    Decorator to turn scheduling errors into JSON error responses.

    This centralizes:
    - Logging of errors with context (error code, details)
    - Mapping exception kinds to HTTP status codes
    - Ensuring uniform error response formats
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except SchedulingException as e:
            log = logger.error if isinstance(e, StorageConflictError) else logger.warning
            log(
                "Scheduling request rejected",
                extra={"error_code": e.error_code, "error": e.message, "details": e.details},
            )
            return error_response(e)

        except HTTPException:
            raise

        except Exception as e:
            logger.exception(
                "Unexpected failure in scheduling operation",
                extra={"error": str(e)}
            )
            body = ErrorResponse(
                error="internal_error",
                message="An internal error occurred while processing the request",
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=body.model_dump(),
            )

    return wrapper  # type: ignore
