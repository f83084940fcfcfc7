"""Attendance statistics for a single session."""

from dataclasses import dataclass

from coaching.boundary.db.models import ClassSessionModel
from coaching.core.scheduling.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceStatistics:
    total_students: int
    present: int
    absent: int
    late: int
    excused: int
    rate: float


def attendance_statistics(session: ClassSessionModel) -> AttendanceStatistics:
    """Count attendance by status; rate is present over roster size, in percent."""
    counts = {status: 0 for status in AttendanceStatus}
    for record in session.attendance:
        counts[AttendanceStatus(record.status)] += 1

    total = len(session.roster)
    present = counts[AttendanceStatus.PRESENT]
    rate = round(present / total * 100, 2) if total > 0 else 0.0

    return AttendanceStatistics(
        total_students=total,
        present=present,
        absent=counts[AttendanceStatus.ABSENT],
        late=counts[AttendanceStatus.LATE],
        excused=counts[AttendanceStatus.EXCUSED],
        rate=rate,
    )
