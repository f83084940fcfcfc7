"""
Class session domain models and schemas.

Request/response schemas for class scheduling, enrollment, attendance and
status operations. Request models forbid unknown fields: derived values such
as duration or current_students cannot be supplied by callers.

Dependencies: pydantic, coaching.core.scheduling
System role: Class session API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from coaching.core.scheduling.enums import (
    AttendanceStatus,
    Grade,
    MaterialType,
    MeetingPlatform,
    RosterStatus,
    SessionStatus,
)
from coaching.core.scheduling.recurrence import RecurrenceTemplate
from coaching.core.scheduling.time_utils import utc_now


class Material(BaseModel):
    """Learning material attached to a class (file or external link)."""

    title: str = Field(..., min_length=1, max_length=200)
    type: MaterialType
    file_url: str | None = None
    external_url: str | None = None
    description: str | None = Field(None, max_length=1000)
    uploaded_at: datetime = Field(default_factory=utc_now)


class Recording(BaseModel):
    url: str | None = None
    password: str | None = None
    available_until: datetime | None = None
    uploaded_at: datetime | None = None


class Homework(BaseModel):
    title: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=2000)
    due_date: datetime | None = None
    max_points: int | None = Field(None, ge=0)


class SessionSettings(BaseModel):
    allow_late_join: bool = True
    require_approval: bool = False
    auto_record: bool = False
    chat_enabled: bool = True
    screen_share_enabled: bool = True


class CreateClassSessionRequest(BaseModel):
    """Request schema for scheduling a class (and optionally its recurring series)."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=3, max_length=100, description="Class title")
    description: str = Field(..., min_length=10, max_length=500, description="Class description")
    course_id: uuid.UUID = Field(..., description="Parent course")
    start_time: datetime = Field(..., description="Start instant (naive values are read as UTC)")
    end_time: datetime = Field(..., description="End instant, strictly after start_time")
    max_students: int | None = Field(None, ge=1, description="Capacity, omitted for unlimited")
    meeting_link: str | None = Field(None, max_length=2048)
    meeting_password: str | None = Field(None, max_length=255)
    meeting_platform: MeetingPlatform = MeetingPlatform.ZOOM
    materials: list[Material] = Field(default_factory=list)
    homework: Homework | None = None
    notes: str | None = Field(None, max_length=1000)
    tags: list[str] = Field(default_factory=list)
    settings: SessionSettings = Field(default_factory=SessionSettings)
    recurrence: RecurrenceTemplate | None = Field(
        None,
        description="When present, sibling classes are generated from this template",
    )


class ClassSessionPatch(BaseModel):
    """
    Typed update for a class session.

    Only fields explicitly present in the request are applied. notes and
    recording remain editable after the class starts; everything else is
    locked once the class has started or left the scheduled status.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=3, max_length=100)
    description: str | None = Field(None, min_length=10, max_length=500)
    start_time: datetime | None = None
    end_time: datetime | None = None
    max_students: int | None = Field(None, ge=1)
    meeting_link: str | None = Field(None, max_length=2048)
    meeting_password: str | None = Field(None, max_length=255)
    meeting_platform: MeetingPlatform | None = None
    materials: list[Material] | None = None
    homework: Homework | None = None
    notes: str | None = Field(None, max_length=1000)
    recording: Recording | None = None
    tags: list[str] | None = None
    settings: SessionSettings | None = None


class AttendanceRequest(BaseModel):
    """Request schema for marking a learner's attendance."""

    model_config = ConfigDict(extra="forbid")

    learner_id: uuid.UUID
    status: AttendanceStatus
    notes: str | None = Field(None, max_length=200)


class StatusTransitionRequest(BaseModel):
    """Request schema for changing a class status."""

    model_config = ConfigDict(extra="forbid")

    status: SessionStatus


class RosterOutcomeRequest(BaseModel):
    """Request schema for grading a rostered learner."""

    model_config = ConfigDict(extra="forbid")

    status: RosterStatus
    grade: Grade | None = None
    feedback: str | None = Field(None, max_length=1000)


class RosterEntryResponse(BaseModel):
    learner_id: uuid.UUID
    enrolled_at: datetime
    status: RosterStatus
    grade: Grade | None = None
    feedback: str | None = None


class AttendanceRecordResponse(BaseModel):
    learner_id: uuid.UUID
    status: AttendanceStatus
    joined_at: datetime | None = None
    left_at: datetime | None = None
    notes: str | None = None


class ClassSessionResponse(BaseModel):
    """Response schema for class session operations, including derived views."""

    id: uuid.UUID
    title: str
    description: str
    course_id: uuid.UUID
    instructor_id: uuid.UUID
    start_time: datetime
    end_time: datetime
    duration: int
    max_students: int | None
    current_students: int
    status: SessionStatus
    meeting_link: str | None = None
    meeting_password: str | None = None
    meeting_platform: MeetingPlatform
    materials: list[dict] = Field(default_factory=list)
    recording: dict | None = None
    notes: str | None = None
    homework: dict | None = None
    tags: list[str] = Field(default_factory=list)
    settings: dict = Field(default_factory=dict)
    is_recurring: bool = False
    recurrence: dict | None = None
    roster: list[RosterEntryResponse] = Field(default_factory=list)
    attendance: list[AttendanceRecordResponse] = Field(default_factory=list)
    is_full: bool
    can_enroll: bool
    available_spots: int | None
    time_until_start: str
    progress: int
    created_at: datetime
    updated_at: datetime


class ClassSessionCreatedResponse(ClassSessionResponse):
    """First class of a newly scheduled series plus the IDs of every class in it."""

    series_ids: list[uuid.UUID]


class AttendanceCounts(BaseModel):
    present: int
    absent: int
    late: int
    excused: int
    rate: float = Field(description="present / roster size * 100, two decimals")


class ClassStatisticsResponse(BaseModel):
    """Attendance statistics for one class."""

    class_id: uuid.UUID
    title: str
    total_students: int
    attendance: AttendanceCounts
    status: SessionStatus
    start_time: datetime
    end_time: datetime


class UpcomingClassesResponse(BaseModel):
    items: list[ClassSessionResponse]
    count: int
