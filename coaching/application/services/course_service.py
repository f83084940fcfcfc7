"""
Course service orchestrator.

Coordinates course lifecycle operations. Courses are owned by an instructor;
only the owner or an admin may change them.

Dependencies: coaching.boundary.db.CRUD, coaching.core
System role: Course use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from coaching.boundary.db.CRUD.course_crud import course_crud
from coaching.boundary.db.models import CourseModel
from coaching.core.access import Actor, require_instructor_role
from coaching.core.exceptions import CourseNotFoundError, ForbiddenError, ValidationError

logger = logging.getLogger(__name__)


def course_to_dict(course: CourseModel, session_count: int | None = None) -> dict:
    data = {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "instructor_id": course.instructor_id,
        "metadata": course.course_metadata,
        "created_at": course.created_at,
        "updated_at": course.updated_at,
    }
    if session_count is not None:
        data["session_count"] = session_count
    return data


class CourseService:
    """Course service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize course service with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    async def _load_owned(self, actor: Actor, course_id: UUID) -> CourseModel:
        course = await course_crud.get_by_id(self.db, course_id)
        if not course:
            raise CourseNotFoundError(course_id)
        if not actor.is_admin and course.instructor_id != actor.user_id:
            raise ForbiddenError(
                "You can only manage your own courses",
                {"course_id": str(course_id), "user_id": str(actor.user_id)},
            )
        return course

    async def create_course(
        self,
        actor: Actor,
        title: str,
        description: str | None = None,
        metadata: dict | None = None,
        instructor_id: UUID | None = None,
    ) -> dict:
        """
        Create a course owned by the caller.

        Admins may create a course on behalf of another instructor.

        Args:
            actor: Caller (teacher or admin)
            title: Course title
            description: Course description (optional)
            metadata: Course metadata dict (optional)
            instructor_id: Owning instructor, admins only

        Returns:
            dict: Created course data

        Raises:
            ForbiddenError: Caller is a student, or a teacher assigning another owner
        """
        require_instructor_role(actor)
        if instructor_id is not None and instructor_id != actor.user_id and not actor.is_admin:
            raise ForbiddenError(
                "Only admins can create courses for other instructors",
                {"user_id": str(actor.user_id)},
            )

        try:
            course = await course_crud.create(
                self.db,
                title=title,
                description=description,
                instructor_id=instructor_id or actor.user_id,
                course_metadata=metadata or {},
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to create course",
                extra={"error": str(e), "course_title": title}
            )
            raise

        logger.info(
            "Course created",
            extra={"course_id": str(course.id), "course_title": title}
        )
        return course_to_dict(course)

    async def get_course(self, course_id: UUID) -> dict:
        """
        Get course by ID with its class count.

        Raises:
            CourseNotFoundError: If course not found
        """
        course = await course_crud.get_by_id(self.db, course_id)
        if not course:
            raise CourseNotFoundError(course_id)

        session_count = await course_crud.count_sessions(self.db, course_id)
        return course_to_dict(course, session_count)

    async def get_all_courses(
        self,
        instructor_id: UUID | None = None,
        limit: int | None = None,
        offset: int = 0
    ) -> list[dict]:
        """
        Get courses with pagination, optionally for one instructor.

        Args:
            instructor_id: Restrict to courses owned by this instructor
            limit: Maximum number of courses to return
            offset: Number of courses to skip

        Returns:
            list[dict]: List of course dicts
        """
        if instructor_id is not None:
            courses = await course_crud.get_by_instructor(
                self.db, instructor_id, limit=limit, offset=offset
            )
        else:
            courses = await course_crud.get_all(self.db, limit=limit, offset=offset)
        return [course_to_dict(c) for c in courses]

    async def update_course(
        self,
        actor: Actor,
        course_id: UUID,
        title: str | None = None,
        description: str | None = None,
        metadata: dict | None = None,
    ) -> dict:
        """
        Update course fields that were provided.

        Raises:
            CourseNotFoundError: If course not found
            ForbiddenError: Caller does not own the course
        """
        course = await self._load_owned(actor, course_id)

        updates = {}
        if title is not None:
            updates["title"] = title
        if description is not None:
            updates["description"] = description
        if metadata is not None:
            updates["course_metadata"] = metadata

        if not updates:
            return course_to_dict(course)

        await course_crud.update_fields(self.db, course, **updates)
        await self.db.commit()

        logger.info(
            "Course updated",
            extra={"course_id": str(course_id), "updates": list(updates.keys())}
        )
        return course_to_dict(course)

    async def delete_course(self, actor: Actor, course_id: UUID) -> bool:
        """
        Delete a course that has no classes.

        Raises:
            CourseNotFoundError: If course not found
            ForbiddenError: Caller does not own the course
            ValidationError: Classes are still scheduled under the course
        """
        await self._load_owned(actor, course_id)

        session_count = await course_crud.count_sessions(self.db, course_id)
        if session_count > 0:
            raise ValidationError(
                "Cannot delete a course that still has classes",
                field="course_id",
                details={"course_id": str(course_id), "session_count": session_count},
            )

        await course_crud.delete_by_id(self.db, course_id)
        await self.db.commit()

        logger.info("Course deleted", extra={"course_id": str(course_id)})
        return True
