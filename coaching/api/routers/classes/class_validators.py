"""
Class validation utilities.

Business logic validation not covered by Pydantic models.

Dependencies: coaching.models.class_session, coaching.core.exceptions
System role: Class request validation
"""

from coaching.core.exceptions import ValidationError
from coaching.core.scheduling.enums import MaterialType
from coaching.models.class_session import (
    ClassSessionPatch,
    CreateClassSessionRequest,
    Material,
)

MAX_TAGS = 20


class ClassValidationError(ValidationError):
    """Raised when class request validation fails."""


def _validate_materials(materials: list[Material]) -> None:
    for material in materials:
        if not material.file_url and not material.external_url:
            raise ClassValidationError(
                f"Material '{material.title}' needs a file_url or an external_url",
                field="materials",
            )
        if material.type == MaterialType.LINK and not material.external_url:
            raise ClassValidationError(
                f"Link material '{material.title}' needs an external_url",
                field="materials",
            )


def _validate_tags(tags: list[str]) -> None:
    if len(tags) > MAX_TAGS:
        raise ClassValidationError(f"A class can have at most {MAX_TAGS} tags", field="tags")
    if any(not tag.strip() for tag in tags):
        raise ClassValidationError("Tags cannot be empty", field="tags")


def validate_class_creation(request: CreateClassSessionRequest) -> None:
    """
    Validate class creation request with business rules.

    Args:
        request: CreateClassSessionRequest

    Raises:
        ClassValidationError: If business validation fails
    """
    if not request.title.strip():
        raise ClassValidationError("Class title cannot be whitespace-only", field="title")
    if not request.description.strip():
        raise ClassValidationError("Class description cannot be whitespace-only", field="description")

    _validate_materials(request.materials)
    _validate_tags(request.tags)


def validate_class_update(patch: ClassSessionPatch) -> None:
    """
    Validate class update request with business rules.

    Raises:
        ClassValidationError: If business validation fails
    """
    if not patch.model_fields_set:
        raise ClassValidationError("At least one field must be provided for update")

    if patch.title is not None and not patch.title.strip():
        raise ClassValidationError("Class title cannot be whitespace-only", field="title")
    if patch.materials is not None:
        _validate_materials(patch.materials)
    if patch.tags is not None:
        _validate_tags(patch.tags)
