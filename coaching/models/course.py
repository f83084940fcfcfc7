"""
Course domain models and schemas.

Request/response schemas for course operations.

Dependencies: pydantic
System role: Course API contracts
"""

from pydantic import BaseModel, ConfigDict, Field
import uuid
from datetime import datetime


class CreateCourseRequest(BaseModel):
    """Request schema for creating a new course."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=100, description="Course title")
    description: str | None = Field(None, max_length=1000, description="Course description")
    instructor_id: uuid.UUID | None = Field(
        None,
        description="Owning instructor; admins only, defaults to the caller",
    )
    metadata: dict = Field(default_factory=dict, description="Optional course metadata")


class UpdateCourseRequest(BaseModel):
    """Request schema for updating a course."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=100, description="Course title")
    description: str | None = Field(None, max_length=1000, description="Course description")
    metadata: dict | None = Field(None, description="Replacement course metadata")


class CourseResponse(BaseModel):
    """Response schema for course operations."""

    id: uuid.UUID
    title: str
    description: str | None
    instructor_id: uuid.UUID
    metadata: dict
    created_at: datetime
    updated_at: datetime


class CourseDetailResponse(CourseResponse):
    """Response schema for course with session count."""

    session_count: int
