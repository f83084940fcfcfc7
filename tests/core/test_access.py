"""
Test suite for caller capability checks.

System role: Verification of role and ownership predicates
"""

import uuid

import pytest

from coaching.core.access import (
    Actor,
    Role,
    can_manage_session,
    can_view_session,
    require_course_owner,
    require_instructor_role,
    require_session_manager,
    require_session_viewer,
    visible_scope,
)
from coaching.core.exceptions import ForbiddenError
from coaching.core.scheduling.enrollment import enroll


class TestVisibleScope:
    """Test suite for visible_scope()."""

    def test_student_scope_is_own_roster(self, student) -> None:
        scope = visible_scope(student)

        assert scope.learner_id == student.user_id
        assert scope.instructor_id is None

    def test_teacher_scope_is_own_classes(self, teacher) -> None:
        scope = visible_scope(teacher)

        assert scope.instructor_id == teacher.user_id
        assert scope.learner_id is None

    def test_admin_scope_is_unrestricted(self, admin) -> None:
        scope = visible_scope(admin)

        assert scope.instructor_id is None
        assert scope.learner_id is None


class TestSessionCapabilities:
    """Test suite for session manage/view checks."""

    def test_instructor_of_record_manages(self, make_session, teacher) -> None:
        session = make_session(instructor_id=teacher.user_id)

        assert can_manage_session(teacher, session)
        require_session_manager(teacher, session, "update")

    def test_other_teacher_is_forbidden(self, make_session, teacher, other_teacher) -> None:
        # Arrange
        session = make_session(instructor_id=teacher.user_id)

        # Act / Assert
        assert not can_manage_session(other_teacher, session)
        with pytest.raises(ForbiddenError, match="update your own classes"):
            require_session_manager(other_teacher, session, "update")

    def test_admin_manages_any_session(self, make_session, admin) -> None:
        session = make_session()

        assert can_manage_session(admin, session)

    def test_student_views_only_rostered_sessions(self, make_session, student, now) -> None:
        # Arrange
        session = make_session()

        # Act / Assert
        assert not can_view_session(student, session)
        with pytest.raises(ForbiddenError, match="not enrolled"):
            require_session_viewer(student, session)

        enroll(session, student.user_id, now)
        assert can_view_session(student, session)

    def test_student_cannot_manage_rostered_session(self, make_session, student, now) -> None:
        session = make_session()
        enroll(session, student.user_id, now)

        assert not can_manage_session(student, session)


class TestRoleChecks:
    """Test suite for role and course ownership checks."""

    def test_student_cannot_schedule(self, student) -> None:
        with pytest.raises(ForbiddenError):
            require_instructor_role(student)

    @pytest.mark.parametrize("role", [Role.TEACHER, Role.ADMIN])
    def test_teachers_and_admins_can_schedule(self, role) -> None:
        require_instructor_role(Actor(user_id=uuid.uuid4(), role=role))

    def test_course_owner_check(self, make_course, teacher, other_teacher, admin) -> None:
        # Arrange
        course = make_course(instructor_id=teacher.user_id)

        # Act / Assert
        require_course_owner(teacher, course)
        require_course_owner(admin, course)
        with pytest.raises(ForbiddenError):
            require_course_owner(other_teacher, course)
