"""
Test suite for recurring session expansion.

System role: Verification of daily/weekly/monthly series generation
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from coaching.core.exceptions import ValidationError
from coaching.core.scheduling.enums import RecurrenceFrequency, Weekday
from coaching.core.scheduling.recurrence import RecurrenceTemplate, expand_occurrences

# Monday
FIRST_START = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
FIRST_END = FIRST_START + timedelta(minutes=90)


def _starts(windows: list[tuple[datetime, datetime]]) -> list[datetime]:
    return [start for start, _ in windows]


class TestDaily:
    """Test suite for daily recurrence."""

    def test_interval_steps_days(self) -> None:
        # Arrange
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.DAILY, interval=2, max_occurrences=3
        )

        # Act
        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        # Assert
        assert _starts(windows) == [
            FIRST_START,
            FIRST_START + timedelta(days=2),
            FIRST_START + timedelta(days=4),
        ]

    def test_end_date_is_inclusive(self) -> None:
        """Test a series ending on 5 March includes the 5 March class."""
        # Arrange
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.DAILY, end_date=date(2026, 3, 5)
        )

        # Act
        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        # Assert
        assert len(windows) == 4
        assert windows[-1][0].date() == date(2026, 3, 5)

    def test_every_window_keeps_first_duration(self) -> None:
        template = RecurrenceTemplate(frequency=RecurrenceFrequency.DAILY, max_occurrences=5)

        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        assert all(end - start == timedelta(minutes=90) for start, end in windows)


class TestWeekly:
    """Test suite for weekly recurrence."""

    def test_listed_weekdays_within_each_week(self) -> None:
        """Test Monday/Wednesday series starting on a Monday."""
        # Arrange
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.WEEKLY,
            days_of_week=[Weekday.MONDAY, Weekday.WEDNESDAY],
            max_occurrences=4,
        )

        # Act
        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        # Assert
        assert [s.date() for s in _starts(windows)] == [
            date(2026, 3, 2),
            date(2026, 3, 4),
            date(2026, 3, 9),
            date(2026, 3, 11),
        ]
        assert all(s.time() == FIRST_START.time() for s in _starts(windows))

    def test_defaults_to_first_weekday_with_interval(self) -> None:
        """Test fortnightly series on the first session's weekday."""
        # Arrange
        template = RecurrenceTemplate(interval=2, max_occurrences=3)

        # Act
        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        # Assert
        assert [s.date() for s in _starts(windows)] == [
            date(2026, 3, 2),
            date(2026, 3, 16),
            date(2026, 3, 30),
        ]

    def test_days_before_first_start_are_skipped_in_first_week(self) -> None:
        """Test a Wednesday start with Mon/Wed/Fri continues Friday then Monday."""
        # Arrange
        wednesday = FIRST_START + timedelta(days=2)
        template = RecurrenceTemplate(
            days_of_week=[Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY],
            max_occurrences=4,
        )

        # Act
        windows = expand_occurrences(wednesday, wednesday + timedelta(hours=1), template, horizon_limit=52)

        # Assert
        assert [s.date() for s in _starts(windows)] == [
            date(2026, 3, 4),
            date(2026, 3, 6),
            date(2026, 3, 9),
            date(2026, 3, 11),
        ]

    def test_horizon_limit_applies_without_bounds(self) -> None:
        """Test a template without end_date or max_occurrences stops at the horizon."""
        # Arrange
        template = RecurrenceTemplate()

        # Act
        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        # Assert
        assert len(windows) == 52
        assert windows[-1][0] == FIRST_START + timedelta(weeks=51)


class TestMonthly:
    """Test suite for monthly recurrence."""

    def test_short_months_are_skipped(self) -> None:
        """Test a 31st-of-month series skips February and April."""
        # Arrange
        start = datetime(2026, 1, 31, 16, 0, tzinfo=timezone.utc)
        template = RecurrenceTemplate(frequency=RecurrenceFrequency.MONTHLY, max_occurrences=3)

        # Act
        windows = expand_occurrences(start, start + timedelta(hours=2), template, horizon_limit=52)

        # Assert
        assert [s.date() for s in _starts(windows)] == [
            date(2026, 1, 31),
            date(2026, 3, 31),
            date(2026, 5, 31),
        ]

    def test_interval_crosses_year_boundary(self) -> None:
        # Arrange
        start = datetime(2026, 11, 15, 8, 0, tzinfo=timezone.utc)
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.MONTHLY, interval=3, max_occurrences=3
        )

        # Act
        windows = expand_occurrences(start, start + timedelta(hours=1), template, horizon_limit=52)

        # Assert
        assert [s.date() for s in _starts(windows)] == [
            date(2026, 11, 15),
            date(2027, 2, 15),
            date(2027, 5, 15),
        ]


class TestTemplateValidation:
    """Test suite for template validation."""

    def test_end_date_before_first_session_is_rejected(self) -> None:
        template = RecurrenceTemplate(end_date=date(2026, 3, 1))

        with pytest.raises(ValidationError) as exc_info:
            expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)
        assert exc_info.value.details["field"] == "recurrence.end_date"

    def test_end_date_on_first_day_yields_single_window(self) -> None:
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.DAILY, end_date=FIRST_START.date()
        )

        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        assert windows == [(FIRST_START, FIRST_END)]

    @pytest.mark.parametrize("payload", [{"interval": 0}, {"max_occurrences": 0}])
    def test_non_positive_bounds_are_rejected(self, payload) -> None:
        with pytest.raises(PydanticValidationError):
            RecurrenceTemplate(**payload)


class TestSeriesLimits:
    """Test suite for the horizon cap and out-of-range intervals."""

    def test_max_occurrences_is_capped_by_horizon(self) -> None:
        # Arrange
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.DAILY, max_occurrences=200000
        )

        # Act
        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        # Assert
        assert len(windows) == 52
        assert windows[-1][0] == FIRST_START + timedelta(days=51)

    def test_far_end_date_is_capped_by_horizon(self) -> None:
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.DAILY, end_date=date(2099, 12, 31)
        )

        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        assert len(windows) == 52

    def test_smaller_max_occurrences_wins_over_horizon(self) -> None:
        template = RecurrenceTemplate(max_occurrences=4)

        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        assert len(windows) == 4

    @pytest.mark.parametrize(
        "frequency, interval",
        [
            (RecurrenceFrequency.DAILY, 200000),
            (RecurrenceFrequency.WEEKLY, 40000),
            (RecurrenceFrequency.MONTHLY, 5000),
        ],
    )
    def test_interval_past_supported_range_is_rejected(self, frequency, interval) -> None:
        """Test a step beyond year 9999 is a validation error, not a crash."""
        template = RecurrenceTemplate(frequency=frequency, interval=interval)

        with pytest.raises(ValidationError) as exc_info:
            expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)
        assert exc_info.value.details["field"] == "recurrence.interval"

    def test_huge_interval_with_end_date_keeps_first_window(self) -> None:
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.DAILY, interval=200000, end_date=date(2026, 12, 31)
        )

        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        assert windows == [(FIRST_START, FIRST_END)]

    def test_huge_interval_single_occurrence_is_allowed(self) -> None:
        template = RecurrenceTemplate(
            frequency=RecurrenceFrequency.MONTHLY, interval=5000, max_occurrences=1
        )

        windows = expand_occurrences(FIRST_START, FIRST_END, template, horizon_limit=52)

        assert windows == [(FIRST_START, FIRST_END)]
