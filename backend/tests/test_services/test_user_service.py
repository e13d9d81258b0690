"""
Unit tests for UserService.
"""

import pytest

import models.schemas as schemas
import repositories.db_models as db_models
from authentication.auth import verify_password
from models.exceptions import (
    InvalidCredentialsException,
    PasswordValidationException,
    UserNotFoundException,
)
from services.user_service import UserService
from tests.conftest import TEST_PASSWORD


class TestProfile:
    """Tests for profile reads and updates."""

    def test_student_profile(self, student_user):
        profile = UserService.get_profile(student_user)

        assert profile.user.email == "student@example.com"
        assert profile.student_profile is not None
        assert profile.instructor_profile is None

    def test_student_update_ignores_instructor_fields(self, db_session, student_user):
        profile = UserService.update_profile(
            db_session,
            student_user,
            schemas.ProfileUpdate(
                name="<i>Stu</i>",
                education="BSc",
                interests=["  AI ", "", "Web"],
                bio="Not mine",
            ),
        )

        assert profile.user.name == "Stu"
        assert profile.student_profile.education == "BSc"
        assert profile.student_profile.interests == ["AI", "Web"]
        assert profile.instructor_profile is None

    def test_instructor_update(self, db_session, instructor_user):
        profile = UserService.update_profile(
            db_session,
            instructor_user,
            schemas.ProfileUpdate(
                bio="Teaching since 2010",
                expertise=["Python"],
                experience=12,
            ),
        )

        assert profile.instructor_profile.bio == "Teaching since 2010"
        assert profile.instructor_profile.expertise == ["Python"]
        assert profile.instructor_profile.experience == 12

    def test_unset_fields_are_kept(self, db_session, student_user):
        student_user.phone_no = "+1 555 0100"
        db_session.commit()

        profile = UserService.update_profile(
            db_session, student_user, schemas.ProfileUpdate(education="MSc")
        )

        assert profile.user.phone_no == "+1 555 0100"


class TestChangePassword:
    """Tests for UserService.change_password"""

    def test_change_password(self, db_session, student_user):
        UserService.change_password(
            db_session, student_user, TEST_PASSWORD, "N3w!Password"
        )

        assert verify_password("N3w!Password", student_user.hashed_password)

    def test_wrong_current_password(self, db_session, student_user):
        with pytest.raises(InvalidCredentialsException):
            UserService.change_password(
                db_session, student_user, "Wrong!Pass1", "N3w!Password"
            )

    def test_weak_new_password(self, db_session, student_user):
        with pytest.raises(PasswordValidationException):
            UserService.change_password(db_session, student_user, TEST_PASSWORD, "weak")


class TestAdminUserQueries:
    """Tests for the admin user listing."""

    def test_filter_by_role(
        self, db_session, student_user, other_student, instructor_user
    ):
        result = UserService.list_users(db_session, role=db_models.UserRole.STUDENT)

        assert result.total == 2
        assert {u.email for u in result.users} == {
            "student@example.com",
            "student2@example.com",
        }

    def test_search_by_name(self, db_session, student_user, instructor_user):
        result = UserService.list_users(db_session, search="instructor")

        assert [u.id for u in result.users] == [instructor_user.id]

    def test_user_detail_counts(
        self, db_session, instructor_user, free_course, paid_course
    ):
        detail = UserService.get_user_detail(db_session, instructor_user.id)

        assert detail.course_count == 2
        assert detail.enrollment_count == 0

    def test_missing_user(self, db_session):
        with pytest.raises(UserNotFoundException):
            UserService.get_user_detail(db_session, 999)
