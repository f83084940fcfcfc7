"""
Common response models and utilities.

Generic response wrappers and error schemas.

Dependencies: pydantic
System role: Common API response structures
"""

from typing import Generic, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(description="Stable error code")
    message: str = Field(description="Human-readable error message")
    details: dict | None = Field(default=None, description="Additional error context")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic page-number paginated response wrapper."""

    items: list[T]
    total: int
    page: int
    limit: int
    pages: int
