"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: coaching.configs, coaching.application, coaching.boundary
System role: DI container for service injection
"""

from functools import lru_cache
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from coaching.application.services import ClassSessionService, CourseService
from coaching.boundary.db import get_async_db
from coaching.configs import Settings, get_settings
from coaching.core.access import Actor, Role
from coaching.core.scheduling.time_utils import Clock, utc_now


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_clock() -> Clock:
    """Clock used by services; overridden in tests."""
    return utc_now


def get_current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    """
    Resolve the caller from identity headers set by the upstream auth layer.

    Args:
        x_user_id: Caller's user UUID (X-User-ID)
        x_user_role: Caller's role (X-User-Role): student, teacher or admin

    Returns:
        Actor: Authenticated caller

    Raises:
        HTTPException(401): Header missing or malformed
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-ID or X-User-Role header",
        )
    try:
        return Actor(user_id=UUID(x_user_id), role=Role(x_user_role.lower()))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed X-User-ID or X-User-Role header",
        )


def get_class_session_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
    clock: Clock = Depends(get_clock),
) -> ClassSessionService:
    """
    Get class session service instance.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings (injected)
        clock: Current-time source (injected)

    Returns:
        ClassSessionService: Class session service instance
    """
    return ClassSessionService(db=db, settings=settings.scheduling, clock=clock)


def get_course_service(db: AsyncSession = Depends(get_async_db)) -> CourseService:
    """
    Get course service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        CourseService: Course service instance
    """
    return CourseService(db=db)
