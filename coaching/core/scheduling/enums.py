"""
Scheduling enumerations.

Status and classification enums shared by the ORM models, the engine
and the API contracts.

Dependencies: enum (stdlib)
System role: Vocabulary of the class scheduling domain
"""

import enum


class SessionStatus(str, enum.Enum):
    """
    Class session lifecycle states.

    SCHEDULED: Created, open for enrollment and edits until start
    IN_PROGRESS: Teaching has begun; attendance defaults to absent
    COMPLETED: Finished (terminal)
    CANCELLED: Called off (terminal)
    POSTPONED: Awaiting a manual re-schedule
    """

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class RosterStatus(str, enum.Enum):
    """Learner standing on a session roster."""

    ENROLLED = "enrolled"
    ATTENDED = "attended"
    COMPLETED = "completed"
    DROPPED = "dropped"


class AttendanceStatus(str, enum.Enum):
    """Per-learner presence for a session."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class RecurrenceFrequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Weekday(str, enum.Enum):
    """Day names; index matches datetime.weekday()."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def index(self) -> int:
        return list(Weekday).index(self)


class MeetingPlatform(str, enum.Enum):
    ZOOM = "zoom"
    GOOGLE_MEET = "google-meet"
    TEAMS = "teams"
    SKYPE = "skype"
    OTHER = "other"


class MaterialType(str, enum.Enum):
    DOCUMENT = "document"
    VIDEO = "video"
    AUDIO = "audio"
    LINK = "link"
    OTHER = "other"


class Grade(str, enum.Enum):
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D_PLUS = "D+"
    D = "D"
    F = "F"
    PASS = "P"
    NO_PASS = "NP"
