"""
Course CRUD operations.

Provides Create, Read, Update, Delete operations for CourseModel
with course-specific query methods.

Dependencies: sqlalchemy, coaching.boundary.db.models
System role: Course persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coaching.boundary.db.models.course_model import CourseModel
from coaching.boundary.db.models.class_session_model import ClassSessionModel
from coaching.boundary.db.CRUD.base_crud import BaseCRUD


class CourseCRUD(BaseCRUD[CourseModel]):
    """
    CRUD operations for CourseModel.

    Extends BaseCRUD with instructor lookups and session counts.
    """

    def __init__(self) -> None:
        """Initialize CourseCRUD with CourseModel."""
        super().__init__(CourseModel)

    async def get_by_instructor(
        self,
        session: AsyncSession,
        instructor_id: UUID,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[CourseModel]:
        """
        Retrieve courses owned by an instructor.

        Args:
            session: Async database session
            instructor_id: Owning instructor's user ID
            limit: Maximum number of courses to return
            offset: Number of courses to skip

        Returns:
            Sequence of CourseModels ordered by creation time
        """
        stmt = (
            select(CourseModel)
            .where(CourseModel.instructor_id == instructor_id)
            .order_by(CourseModel.created_at)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_sessions(self, session: AsyncSession, course_id: UUID) -> int:
        """Number of class sessions scheduled under the course."""
        stmt = select(func.count(ClassSessionModel.id)).where(
            ClassSessionModel.course_id == course_id
        )
        result = await session.execute(stmt)
        return result.scalar_one()


course_crud = CourseCRUD()
