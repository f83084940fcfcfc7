"""
Class response mapping utilities.

Transforms service dictionaries into Pydantic response models.

Dependencies: coaching.models.class_session
System role: Class response transformation
"""

from typing import Any

from coaching.models.class_session import (
    ClassSessionCreatedResponse,
    ClassSessionResponse,
    ClassStatisticsResponse,
    UpcomingClassesResponse,
)
from coaching.models.common import PaginatedResponse


def map_class_to_response(class_data: dict[str, Any]) -> ClassSessionResponse:
    """
    Transform class data dictionary into ClassSessionResponse.

    Args:
        class_data: Session fields plus derived view fields

    Returns:
        ClassSessionResponse: Pydantic model for API response
    """
    return ClassSessionResponse(**class_data)


def map_created_class_to_response(class_data: dict[str, Any]) -> ClassSessionCreatedResponse:
    return ClassSessionCreatedResponse(**class_data)


def map_class_page_to_response(page_data: dict[str, Any]) -> PaginatedResponse[ClassSessionResponse]:
    """
    Transform a paginated listing into PaginatedResponse.

    Args:
        page_data: Dictionary with items, total, page, limit, pages

    Returns:
        PaginatedResponse[ClassSessionResponse]: Page of classes
    """
    return PaginatedResponse[ClassSessionResponse](
        items=[map_class_to_response(item) for item in page_data["items"]],
        total=page_data["total"],
        page=page_data["page"],
        limit=page_data["limit"],
        pages=page_data["pages"],
    )


def map_upcoming_to_response(classes_data: list[dict[str, Any]]) -> UpcomingClassesResponse:
    items = [map_class_to_response(item) for item in classes_data]
    return UpcomingClassesResponse(items=items, count=len(items))


def map_statistics_to_response(stats_data: dict[str, Any]) -> ClassStatisticsResponse:
    return ClassStatisticsResponse(**stats_data)
