"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory database sessions, fixed clocks, actors and transient
class session factories
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from coaching.boundary.db.models import ClassSessionModel, CourseModel
from coaching.core.access import Actor, Role
from coaching.core.scheduling.enums import MeetingPlatform, SessionStatus

FIXED_NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Settable clock for services under test."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
    from sqlalchemy.pool import StaticPool
    from coaching.boundary.db.base import Base

    # Use SQLite in-memory database for tests
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Create session factory
    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    # Create session for test
    async with async_session() as session:
        yield session
        await session.rollback()

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant (Monday 2026-03-02 09:00 UTC)."""
    return FIXED_NOW


@pytest.fixture
def clock() -> FrozenClock:
    """Mutable clock starting at FIXED_NOW."""
    return FrozenClock(FIXED_NOW)


@pytest.fixture
def teacher() -> Actor:
    return Actor(user_id=uuid.uuid4(), role=Role.TEACHER)


@pytest.fixture
def other_teacher() -> Actor:
    return Actor(user_id=uuid.uuid4(), role=Role.TEACHER)


@pytest.fixture
def student() -> Actor:
    return Actor(user_id=uuid.uuid4(), role=Role.STUDENT)


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id=uuid.uuid4(), role=Role.ADMIN)


@pytest.fixture
def make_session() -> Callable[..., ClassSessionModel]:
    """
    Factory for transient ClassSessionModel instances.

    Column defaults only apply on flush, so every field the engine reads is
    set explicitly. The default window starts one day after FIXED_NOW and
    lasts 90 minutes.

    Returns:
        Callable: make_session(**overrides) -> ClassSessionModel
    """
    def _make(**overrides) -> ClassSessionModel:
        start_time = overrides.pop("start_time", FIXED_NOW + timedelta(days=1))
        fields = {
            "id": uuid.uuid4(),
            "title": "Algebra revision",
            "description": "Quadratic equations and factorisation",
            "course_id": uuid.uuid4(),
            "instructor_id": uuid.uuid4(),
            "start_time": start_time,
            "end_time": start_time + timedelta(minutes=90),
            "duration": 90,
            "max_students": None,
            "current_students": 0,
            "status": SessionStatus.SCHEDULED,
            "meeting_platform": MeetingPlatform.ZOOM,
            "materials": [],
            "tags": [],
            "settings": {},
            "is_recurring": False,
            "roster": [],
            "attendance": [],
        }
        fields.update(overrides)
        return ClassSessionModel(**fields)

    return _make


@pytest.fixture
def make_course() -> Callable[..., CourseModel]:
    """Factory for transient CourseModel instances."""
    def _make(**overrides) -> CourseModel:
        fields = {
            "id": uuid.uuid4(),
            "title": "JEE Mathematics",
            "description": "Two-year mathematics programme",
            "instructor_id": uuid.uuid4(),
            "course_metadata": {},
        }
        fields.update(overrides)
        return CourseModel(**fields)

    return _make
