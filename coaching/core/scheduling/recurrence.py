"""
Recurring session expansion.

Turns a recurrence template into the list of (start, end) windows of the
series. The first window is always the session being created; siblings
follow in chronological order. Arithmetic is done on UTC instants with no
daylight-saving adjustment.

Dependencies: pydantic, coaching.core.exceptions
System role: Recurring-session generation at creation time
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator

from pydantic import BaseModel, Field

from coaching.core.exceptions import ValidationError
from coaching.core.scheduling.enums import RecurrenceFrequency, Weekday
from coaching.core.scheduling.time_utils import as_utc


class RecurrenceTemplate(BaseModel):
    """How sibling sessions are spawned from the first one."""

    frequency: RecurrenceFrequency = RecurrenceFrequency.WEEKLY
    interval: int = Field(default=1, ge=1, description="Step between occurrences in frequency units")
    days_of_week: list[Weekday] = Field(
        default_factory=list,
        description="Weekly only; defaults to the first session's weekday",
    )
    end_date: date | None = Field(default=None, description="Last date (inclusive) an occurrence may start on")
    max_occurrences: int | None = Field(default=None, ge=1, description="Series length including the first session")


def _add_months(value: datetime, months: int) -> datetime | None:
    """Same day-of-month `months` later, or None when that month is too short."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    if value.day > calendar.monthrange(year, month)[1]:
        return None
    return value.replace(year=year, month=month)


def _candidate_starts(first: datetime, template: RecurrenceTemplate) -> Iterator[datetime]:
    yield first

    step = template.interval
    if template.frequency == RecurrenceFrequency.DAILY:
        k = 1
        while True:
            yield first + timedelta(days=k * step)
            k += 1

    elif template.frequency == RecurrenceFrequency.WEEKLY:
        weekdays = sorted({day.index for day in template.days_of_week} or {first.weekday()})
        week_start = first - timedelta(days=first.weekday())
        k = 0
        while True:
            for weekday in weekdays:
                candidate = week_start + timedelta(days=k * step * 7 + weekday)
                if candidate > first:
                    yield candidate
            k += 1

    else:
        k = 1
        while True:
            candidate = _add_months(first, k * step)
            if candidate is not None:
                yield candidate
            k += 1


def expand_occurrences(
    start_time: datetime,
    end_time: datetime,
    template: RecurrenceTemplate,
    horizon_limit: int,
) -> list[tuple[datetime, datetime]]:
    """
    Expand a template into session windows.

    Args:
        start_time: First session start
        end_time: First session end; every sibling keeps the same length
        template: Recurrence template
        horizon_limit: Hard cap on the series length, also the length used
            when the template has neither end_date nor max_occurrences

    Returns:
        list[tuple[datetime, datetime]]: Windows in chronological order, first included

    Raises:
        ValidationError: end_date falls before the first session, or the
            interval steps past the last representable date
    """
    first = as_utc(start_time)
    length = as_utc(end_time) - first

    if template.end_date is not None and template.end_date < first.date():
        raise ValidationError(
            "Recurrence end date cannot be before the first class", field="recurrence.end_date"
        )

    limit = min(template.max_occurrences or horizon_limit, horizon_limit)

    windows: list[tuple[datetime, datetime]] = []
    candidates = _candidate_starts(first, template)
    while len(windows) < limit:
        try:
            candidate = next(candidates)
        except (OverflowError, ValueError) as exc:
            # Past year 9999 is necessarily past any end_date
            if template.end_date is not None:
                break
            raise ValidationError(
                "Recurrence interval runs past the supported date range",
                field="recurrence.interval",
            ) from exc
        if template.end_date is not None and candidate.date() > template.end_date:
            break
        windows.append((candidate, candidate + length))
    return windows
