"""
Class session CRUD operations.

Provides persistence for the class session aggregate: loading with roster
and attendance, filtered listing, the upcoming view and batch creation of
recurring series.

Dependencies: sqlalchemy, coaching.boundary.db.models
System role: Class session persistence operations
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coaching.boundary.db.models.class_session_model import ClassSessionModel, RosterEntryModel
from coaching.boundary.db.CRUD.base_crud import BaseCRUD
from coaching.core.scheduling.enums import SessionStatus


@dataclass
class ClassSessionFilters:
    """
    Listing filters; every field left as None is ignored.

    on_date selects sessions whose start_time falls in [date 00:00, date+1 00:00) UTC.
    """

    instructor_id: UUID | None = None
    course_id: UUID | None = None
    learner_id: UUID | None = None
    status: SessionStatus | None = None
    on_date: date | None = None
    starts_after: datetime | None = None


def _day_bounds(on_date: date) -> tuple[datetime, datetime]:
    day_start = datetime.combine(on_date, time.min, tzinfo=timezone.utc)
    return day_start, day_start + timedelta(days=1)


class ClassSessionCRUD(BaseCRUD[ClassSessionModel]):
    """
    CRUD operations for ClassSessionModel.

    Roster and attendance are mapped with selectin loading, so every session
    returned here is a complete aggregate.
    """

    def __init__(self) -> None:
        """Initialize ClassSessionCRUD with ClassSessionModel."""
        super().__init__(ClassSessionModel)

    def _apply_filters(self, stmt: Select, filters: ClassSessionFilters) -> Select:
        if filters.instructor_id is not None:
            stmt = stmt.where(ClassSessionModel.instructor_id == filters.instructor_id)
        if filters.course_id is not None:
            stmt = stmt.where(ClassSessionModel.course_id == filters.course_id)
        if filters.status is not None:
            stmt = stmt.where(ClassSessionModel.status == filters.status)
        if filters.learner_id is not None:
            stmt = stmt.where(
                ClassSessionModel.roster.any(RosterEntryModel.learner_id == filters.learner_id)
            )
        if filters.on_date is not None:
            day_start, day_end = _day_bounds(filters.on_date)
            stmt = stmt.where(
                ClassSessionModel.start_time >= day_start,
                ClassSessionModel.start_time < day_end,
            )
        if filters.starts_after is not None:
            stmt = stmt.where(ClassSessionModel.start_time > filters.starts_after)
        return stmt

    async def get_aggregate(self, session: AsyncSession, id: UUID) -> ClassSessionModel | None:
        """
        Retrieve a session with roster and attendance populated.

        Args:
            session: Async database session
            id: Class session UUID

        Returns:
            ClassSessionModel if found, None otherwise
        """
        return await self.get_by_id(session, id)

    async def query(
        self,
        session: AsyncSession,
        filters: ClassSessionFilters,
        limit: int,
        offset: int = 0,
    ) -> tuple[Sequence[ClassSessionModel], int]:
        """
        Filtered, paginated listing ordered by start_time.

        Args:
            session: Async database session
            filters: Listing filters
            limit: Page size
            offset: Number of sessions to skip

        Returns:
            tuple: (page of sessions, total matching sessions)
        """
        base = self._apply_filters(select(ClassSessionModel), filters)

        count_stmt = select(func.count()).select_from(base.subquery())
        total = (await session.execute(count_stmt)).scalar_one()

        stmt = base.order_by(ClassSessionModel.start_time).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all(), total

    async def get_upcoming(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int,
        filters: ClassSessionFilters | None = None,
    ) -> Sequence[ClassSessionModel]:
        """
        Scheduled sessions starting after now, soonest first.

        Args:
            session: Async database session
            now: Reference instant
            limit: Maximum number of sessions
            filters: Additional scope filters

        Returns:
            Sequence of ClassSessionModels
        """
        filters = replace(
            filters or ClassSessionFilters(),
            status=SessionStatus.SCHEDULED,
            starts_after=now,
        )
        stmt = (
            self._apply_filters(select(ClassSessionModel), filters)
            .order_by(ClassSessionModel.start_time)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def create_many(
        self,
        session: AsyncSession,
        rows: list[dict],
    ) -> list[ClassSessionModel]:
        """
        Insert a batch of sessions in a single flush.

        Args:
            session: Async database session
            rows: Field values for each session

        Returns:
            list[ClassSessionModel]: Created sessions in input order
        """
        instances = [ClassSessionModel(roster=[], attendance=[], **row) for row in rows]
        session.add_all(instances)
        await session.flush()
        return instances

    async def delete_instance(self, session: AsyncSession, instance: ClassSessionModel) -> None:
        """Delete a loaded session; roster and attendance rows cascade."""
        await session.delete(instance)
        await session.flush()


class_session_crud = ClassSessionCRUD()
