"""
Test suite for derived session views.

System role: Verification of is_full, can_enroll, time_until_start and progress
"""

import uuid
from datetime import timedelta

import pytest

from coaching.core.scheduling.derived import (
    available_spots,
    build_view,
    can_enroll,
    is_full,
    progress,
    time_until_start,
)
from coaching.core.scheduling.enrollment import enroll
from coaching.core.scheduling.enums import SessionStatus


class TestCapacityViews:
    """Test suite for is_full, can_enroll and available_spots."""

    def test_two_seat_class_fills_up(self, make_session, now) -> None:
        """Test a 2-seat class is full after two enrollments."""
        # Arrange
        session = make_session(max_students=2)

        # Act
        enroll(session, uuid.uuid4(), now)
        enroll(session, uuid.uuid4(), now)

        # Assert
        assert is_full(session)
        assert not can_enroll(session)
        assert available_spots(session) == 0

    def test_unlimited_class_is_never_full(self, make_session) -> None:
        session = make_session(max_students=None, current_students=500)

        assert not is_full(session)
        assert can_enroll(session)
        assert available_spots(session) is None

    def test_cannot_enroll_when_not_scheduled(self, make_session) -> None:
        session = make_session(status=SessionStatus.POSTPONED, max_students=10)

        assert not is_full(session)
        assert not can_enroll(session)

    def test_available_spots_counts_remaining(self, make_session) -> None:
        session = make_session(max_students=10, current_students=3)

        assert available_spots(session) == 7


class TestTimeUntilStart:
    """Test suite for time_until_start()."""

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(days=2, hours=5), "2 days"),
            (timedelta(days=1), "1 day"),
            (timedelta(hours=23, minutes=59), "23 hours"),
            (timedelta(hours=1), "1 hour"),
            (timedelta(minutes=59, seconds=59), "59 minutes"),
            (timedelta(minutes=1), "1 minute"),
            (timedelta(seconds=30), "0 minutes"),
        ],
    )
    def test_largest_whole_unit(self, make_session, now, delta, expected) -> None:
        session = make_session(start_time=now + delta)

        assert time_until_start(session, now) == expected

    @pytest.mark.parametrize("delta", [timedelta(0), timedelta(minutes=-5)])
    def test_started(self, make_session, now, delta) -> None:
        session = make_session(start_time=now + delta)

        assert time_until_start(session, now) == "Started"


class TestProgress:
    """Test suite for progress()."""

    def test_progress_is_zero_at_start_and_hundred_at_end(self, make_session, now) -> None:
        """Test exact boundary values."""
        # Arrange
        session = make_session(start_time=now, end_time=now + timedelta(minutes=60))

        # Act / Assert
        assert progress(session, now) == 0
        assert progress(session, now + timedelta(minutes=60)) == 100

    def test_progress_is_monotonic_between_bounds(self, make_session, now) -> None:
        """Test progress never decreases minute by minute."""
        # Arrange
        session = make_session(start_time=now, end_time=now + timedelta(minutes=90))

        # Act
        values = [progress(session, now + timedelta(minutes=m)) for m in range(-10, 101)]

        # Assert
        assert values == sorted(values)
        assert all(0 <= v <= 100 for v in values)
        assert progress(session, now + timedelta(minutes=45)) == 50

    def test_completed_is_always_hundred(self, make_session, now) -> None:
        session = make_session(status=SessionStatus.COMPLETED)

        assert progress(session, now) == 100

    @pytest.mark.parametrize("status", [SessionStatus.CANCELLED, SessionStatus.POSTPONED])
    def test_cancelled_and_postponed_are_zero(self, make_session, now, status) -> None:
        session = make_session(status=status, start_time=now - timedelta(hours=1))

        assert progress(session, now) == 0


def test_build_view_collects_all_fields(make_session, now) -> None:
    """Test build_view mirrors the individual calculators."""
    # Arrange
    session = make_session(max_students=3, current_students=1, start_time=now + timedelta(hours=3))

    # Act
    view = build_view(session, now)

    # Assert
    assert view.is_full is False
    assert view.can_enroll is True
    assert view.available_spots == 2
    assert view.time_until_start == "3 hours"
    assert view.progress == 0
