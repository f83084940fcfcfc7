"""
Course response mapping utilities.

Transforms service dictionaries into Pydantic response models.

Dependencies: coaching.models.course
System role: Course response transformation
"""

from typing import Any

from coaching.models.course import CourseDetailResponse, CourseResponse


def map_course_to_response(course_data: dict[str, Any]) -> CourseResponse:
    """
    Transform course data dictionary into CourseResponse.

    Args:
        course_data: Dictionary containing course fields
            Expected keys: id, title, description, instructor_id, metadata, created_at, updated_at

    Returns:
        CourseResponse: Pydantic model for API response
    """
    return CourseResponse(**course_data)


def map_course_detail_to_response(course_data: dict[str, Any]) -> CourseDetailResponse:
    return CourseDetailResponse(**course_data)


def map_courses_to_response(courses_data: list[dict[str, Any]]) -> list[CourseResponse]:
    """
    Transform list of course dictionaries into list of CourseResponse.

    Args:
        courses_data: List of course dictionaries

    Returns:
        list[CourseResponse]: List of Pydantic models for API response
    """
    return [map_course_to_response(course) for course in courses_data]
