"""
Course validation utilities.

Business logic validation not covered by Pydantic models.

Dependencies: coaching.models.course, coaching.core.exceptions
System role: Course business logic validation
"""

from coaching.core.exceptions import ValidationError
from coaching.models.course import CreateCourseRequest, UpdateCourseRequest


class CourseValidationError(ValidationError):
    """Raised when course validation fails."""


def validate_course_creation(request: CreateCourseRequest) -> None:
    """
    Validate course creation request with business rules.

    Args:
        request: CreateCourseRequest with title, description, metadata

    Raises:
        CourseValidationError: If business validation fails
    """
    if not request.title.strip():
        raise CourseValidationError("Course title cannot be empty or whitespace-only", field="title")

    if len(request.title.strip()) < 2:
        raise CourseValidationError("Course title must be at least 2 characters", field="title")

    # Limit metadata size to prevent abuse
    if request.metadata and len(str(request.metadata)) > 10000:
        raise CourseValidationError("Metadata payload too large", field="metadata")


def validate_course_update(request: UpdateCourseRequest) -> None:
    """
    Validate course update request with business rules.

    Raises:
        CourseValidationError: If business validation fails
    """
    if request.title is None and request.description is None and request.metadata is None:
        raise CourseValidationError("At least one field must be provided for update")

    if request.title is not None:
        if not request.title.strip():
            raise CourseValidationError("Course title cannot be empty or whitespace-only", field="title")

        if len(request.title.strip()) < 2:
            raise CourseValidationError("Course title must be at least 2 characters", field="title")

    if request.metadata and len(str(request.metadata)) > 10000:
        raise CourseValidationError("Metadata payload too large", field="metadata")
