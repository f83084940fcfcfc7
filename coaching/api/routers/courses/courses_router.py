"""
Course API endpoints.

Routes:
- POST /courses - Create new course
- GET /courses - List courses
- GET /courses/{id} - Get single course
- PUT /courses/{id} - Update course
- DELETE /courses/{id} - Delete course without classes

Dependencies: coaching.application.services, coaching.models
System role: Course management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from coaching.api.deps.dependencies import get_course_service, get_current_actor
from coaching.api.routers.router_utils import handle_scheduling_errors
from coaching.application.services.course_service import CourseService
from coaching.core.access import Actor
from coaching.models.course import (
    CourseDetailResponse,
    CourseResponse,
    CreateCourseRequest,
    UpdateCourseRequest,
)

from .course_responses import (
    map_course_detail_to_response,
    map_course_to_response,
    map_courses_to_response,
)
from .course_validators import validate_course_creation, validate_course_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.post("", response_model=CourseResponse, status_code=201)
@handle_scheduling_errors
async def create_course(
    request: CreateCourseRequest,
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service),
) -> CourseResponse:
    """
    Create new course owned by the caller.

    Args:
        request: CreateCourseRequest with title, description, metadata
        actor: Authenticated caller (teacher or admin)
        course_service: Injected CourseService

    Returns:
        CourseResponse: Created course

    Raises:
        HTTPException(400): Invalid request
        HTTPException(403): Caller may not create courses
    """
    validate_course_creation(request)

    logger.info(
        "Creating new course",
        extra={"course_title": request.title, "has_description": bool(request.description)}
    )

    course_data = await course_service.create_course(
        actor,
        title=request.title,
        description=request.description,
        metadata=request.metadata,
        instructor_id=request.instructor_id,
    )

    logger.info(
        "Course created successfully",
        extra={"course_id": str(course_data["id"]), "course_title": request.title}
    )

    return map_course_to_response(course_data)


@router.get("", response_model=list[CourseResponse])
@handle_scheduling_errors
async def list_courses(
    instructor: UUID | None = None,
    limit: int = Query(100, ge=1),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service),
) -> list[CourseResponse]:
    """
    List courses with pagination, optionally for one instructor.

    Args:
        instructor: Filter by owning instructor
        limit: Maximum number of courses (default 100)
        offset: Number to skip (default 0)
    """
    logger.info(
        "Listing courses",
        extra={"limit": limit, "offset": offset}
    )

    courses = await course_service.get_all_courses(
        instructor_id=instructor, limit=limit, offset=offset
    )
    return map_courses_to_response(courses)


@router.get("/{course_id}", response_model=CourseDetailResponse)
@handle_scheduling_errors
async def get_course(
    course_id: UUID,
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service),
) -> CourseDetailResponse:
    """
    Get single course by ID with its class count.

    Raises:
        HTTPException(404): Course not found
    """
    course_data = await course_service.get_course(course_id)
    return map_course_detail_to_response(course_data)


@router.put("/{course_id}", response_model=CourseResponse)
@handle_scheduling_errors
async def update_course(
    course_id: UUID,
    request: UpdateCourseRequest,
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service),
) -> CourseResponse:
    """
    Update course by ID.

    Raises:
        HTTPException(400): Invalid request
        HTTPException(403): Caller does not own the course
        HTTPException(404): Course not found
    """
    validate_course_update(request)

    logger.info(
        "Updating course",
        extra={
            "course_id": str(course_id),
            "updating_title": request.title is not None,
            "updating_description": request.description is not None
        }
    )

    course_data = await course_service.update_course(
        actor,
        course_id,
        title=request.title,
        description=request.description,
        metadata=request.metadata,
    )
    return map_course_to_response(course_data)


@router.delete("/{course_id}", status_code=204)
@handle_scheduling_errors
async def delete_course(
    course_id: UUID,
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service),
) -> None:
    """
    Delete course by ID; refused while classes are scheduled under it.

    Raises:
        HTTPException(400): Course still has classes
        HTTPException(403): Caller does not own the course
        HTTPException(404): Course not found
    """
    logger.info(
        "Deleting course",
        extra={"course_id": str(course_id)}
    )

    await course_service.delete_course(actor, course_id)
