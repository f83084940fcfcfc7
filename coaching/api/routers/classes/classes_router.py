"""
Class API endpoints.

Routes:
- POST /classes - Schedule a class (optionally a recurring series)
- GET /classes - List visible classes with filters and pagination
- GET /classes/upcoming - Next scheduled classes
- GET /classes/{id} - Get single class
- PUT /classes/{id} - Update class
- DELETE /classes/{id} - Delete class before it starts
- POST /classes/{id}/enroll - Enroll caller
- DELETE /classes/{id}/enroll - Unenroll caller
- POST /classes/{id}/attendance - Mark attendance
- POST /classes/{id}/attendance/{learner_id}/departure - Record departure
- PUT /classes/{id}/roster/{learner_id} - Grade a rostered learner
- PATCH /classes/{id}/status - Change class status
- GET /classes/{id}/stats - Attendance statistics

Dependencies: coaching.application.services, coaching.models
System role: Class scheduling HTTP API
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from coaching.api.deps.dependencies import get_class_session_service, get_current_actor
from coaching.api.routers.router_utils import handle_scheduling_errors
from coaching.application.services.class_session_service import ClassSessionService
from coaching.core.access import Actor
from coaching.core.scheduling.enums import SessionStatus
from coaching.models.class_session import (
    AttendanceRequest,
    ClassSessionCreatedResponse,
    ClassSessionPatch,
    ClassSessionResponse,
    ClassStatisticsResponse,
    CreateClassSessionRequest,
    RosterOutcomeRequest,
    StatusTransitionRequest,
    UpcomingClassesResponse,
)
from coaching.models.common import PaginatedResponse

from .class_responses import (
    map_class_page_to_response,
    map_class_to_response,
    map_created_class_to_response,
    map_statistics_to_response,
    map_upcoming_to_response,
)
from .class_validators import validate_class_creation, validate_class_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classes", tags=["classes"])


@router.post("", response_model=ClassSessionCreatedResponse, status_code=201)
@handle_scheduling_errors
async def create_class(
    request: CreateClassSessionRequest,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionCreatedResponse:
    """
    Schedule a class for a course the caller owns.

    When a recurrence template is supplied the whole series is created and
    series_ids lists every class in it.

    Raises:
        HTTPException(400): Invalid request or time range
        HTTPException(403): Caller may not schedule for this course
        HTTPException(404): Course not found
    """
    validate_class_creation(request)

    logger.info(
        "Scheduling class",
        extra={
            "course_id": str(request.course_id),
            "instructor_id": str(actor.user_id),
            "recurring": request.recurrence is not None,
        },
    )

    class_data = await service.create_session(actor, request)
    return map_created_class_to_response(class_data)


@router.get("", response_model=PaginatedResponse[ClassSessionResponse])
@handle_scheduling_errors
async def list_classes(
    instructor: UUID | None = None,
    course: UUID | None = None,
    learner: UUID | None = None,
    status: SessionStatus | None = None,
    on_date: date | None = Query(None, alias="date"),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> PaginatedResponse[ClassSessionResponse]:
    """
    List classes visible to the caller, ordered by start time.

    Students only see classes they are enrolled in and teachers only their
    own, whatever filters are requested.
    """
    logger.info(
        "Listing classes",
        extra={"user_id": str(actor.user_id), "page": page, "limit": limit}
    )

    page_data = await service.list_sessions(
        actor,
        instructor_id=instructor,
        course_id=course,
        learner_id=learner,
        status=status,
        on_date=on_date,
        page=page,
        limit=limit,
    )
    return map_class_page_to_response(page_data)


@router.get("/upcoming", response_model=UpcomingClassesResponse)
@handle_scheduling_errors
async def list_upcoming_classes(
    limit: int | None = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> UpcomingClassesResponse:
    """Next scheduled classes visible to the caller, soonest first."""
    classes = await service.list_upcoming(actor, limit=limit)
    return map_upcoming_to_response(classes)


@router.get("/{class_id}", response_model=ClassSessionResponse)
@handle_scheduling_errors
async def get_class(
    class_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    """
    Get single class by ID.

    Raises:
        HTTPException(403): Class outside the caller's scope
        HTTPException(404): Class not found
    """
    class_data = await service.get_session(actor, class_id)
    return map_class_to_response(class_data)


@router.put("/{class_id}", response_model=ClassSessionResponse)
@handle_scheduling_errors
async def update_class(
    class_id: UUID,
    patch: ClassSessionPatch,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    """
    Update class fields provided in the body.

    Raises:
        HTTPException(400): Class already started, invalid range or capacity
        HTTPException(403): Caller does not manage the class
        HTTPException(404): Class not found
        HTTPException(409): Concurrent modification
    """
    validate_class_update(patch)

    logger.info(
        "Updating class",
        extra={"class_id": str(class_id), "fields": sorted(patch.model_fields_set)}
    )

    class_data = await service.update_session(actor, class_id, patch)
    return map_class_to_response(class_data)


@router.delete("/{class_id}", status_code=204)
@handle_scheduling_errors
async def delete_class(
    class_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> None:
    """
    Delete a class that has not started.

    Raises:
        HTTPException(400): Class already started
        HTTPException(403): Caller does not manage the class
        HTTPException(404): Class not found
    """
    logger.info("Deleting class", extra={"class_id": str(class_id)})
    await service.delete_session(actor, class_id)


@router.post("/{class_id}/enroll", response_model=ClassSessionResponse)
@handle_scheduling_errors
async def enroll_in_class(
    class_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    """
    Enroll the caller.

    Raises:
        HTTPException(400): Already enrolled, class full or not open
        HTTPException(404): Class not found
        HTTPException(409): Concurrent modification
    """
    class_data = await service.enroll(actor, class_id)
    return map_class_to_response(class_data)


@router.delete("/{class_id}/enroll", response_model=ClassSessionResponse)
@handle_scheduling_errors
async def unenroll_from_class(
    class_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    """
    Unenroll the caller before the class starts.

    Raises:
        HTTPException(400): Not enrolled or class already started
        HTTPException(404): Class not found
    """
    class_data = await service.unenroll(actor, class_id)
    return map_class_to_response(class_data)


@router.post("/{class_id}/attendance", response_model=ClassSessionResponse)
@handle_scheduling_errors
async def mark_attendance(
    class_id: UUID,
    request: AttendanceRequest,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    """
    Mark a learner's attendance (instructor or admin).

    Raises:
        HTTPException(400): Learner not enrolled
        HTTPException(403): Caller does not manage the class
        HTTPException(404): Class not found
    """
    class_data = await service.mark_attendance(
        actor,
        class_id,
        learner_id=request.learner_id,
        status=request.status,
        notes=request.notes,
    )
    return map_class_to_response(class_data)


@router.post("/{class_id}/attendance/{learner_id}/departure", response_model=ClassSessionResponse)
@handle_scheduling_errors
async def record_departure(
    class_id: UUID,
    learner_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    """Stamp the time a learner left the class."""
    class_data = await service.record_departure(actor, class_id, learner_id)
    return map_class_to_response(class_data)


@router.put("/{class_id}/roster/{learner_id}", response_model=ClassSessionResponse)
@handle_scheduling_errors
async def record_outcome(
    class_id: UUID,
    learner_id: UUID,
    request: RosterOutcomeRequest,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    """Set a rostered learner's status, grade and feedback."""
    class_data = await service.record_outcome(
        actor,
        class_id,
        learner_id,
        status=request.status,
        grade=request.grade,
        feedback=request.feedback,
    )
    return map_class_to_response(class_data)


@router.patch("/{class_id}/status", response_model=ClassSessionResponse)
@handle_scheduling_errors
async def change_class_status(
    class_id: UUID,
    request: StatusTransitionRequest,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    """
    Change class status.

    Entering in-progress records every enrolled learner without attendance
    as absent.

    Raises:
        HTTPException(400): Transition rejected by policy
        HTTPException(403): Caller does not manage the class
        HTTPException(404): Class not found
    """
    logger.info(
        "Changing class status",
        extra={"class_id": str(class_id), "status": request.status.value}
    )
    class_data = await service.transition_status(actor, class_id, request.status)
    return map_class_to_response(class_data)


@router.get("/{class_id}/stats", response_model=ClassStatisticsResponse)
@handle_scheduling_errors
async def get_class_statistics(
    class_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: ClassSessionService = Depends(get_class_session_service),
) -> ClassStatisticsResponse:
    """Attendance statistics (instructor or admin)."""
    stats = await service.get_statistics(actor, class_id)
    return map_statistics_to_response(stats)
