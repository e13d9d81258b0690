"""
Unit tests for AuthService and PasswordResetService.
"""

import pytest

import models.schemas as schemas
import repositories.db_models as db_models
from authentication.auth import decode_token
from models.exceptions import (
    InactiveUserException,
    InsufficientPermissionsException,
    InvalidCredentialsException,
    InvalidOtpException,
    InvalidResetTokenException,
    PasswordValidationException,
    UserAlreadyExistsException,
    UserNotFoundException,
)
from services.auth_service import AuthService
from services.password_reset_service import PasswordResetService
from tests.conftest import TEST_PASSWORD


def _registration(**overrides) -> schemas.UserCreate:
    data = {
        "name": "New Learner",
        "email": "New.Learner@Example.com",
        "password": TEST_PASSWORD,
    }
    data.update(overrides)
    return schemas.UserCreate(**data)


class TestRegister:
    """Tests for AuthService.register"""

    def test_student_gets_profile(self, db_session):
        user = AuthService.register(db_session, _registration())

        assert user.email == "new.learner@example.com"
        assert user.role == db_models.UserRole.STUDENT
        assert user.student_profile is not None
        assert user.instructor_profile is None

    def test_instructor_gets_profile(self, db_session):
        user = AuthService.register(
            db_session, _registration(role=db_models.UserRole.INSTRUCTOR)
        )

        assert user.instructor_profile is not None

    def test_admin_cannot_self_register(self, db_session):
        with pytest.raises(InsufficientPermissionsException):
            AuthService.register(
                db_session, _registration(role=db_models.UserRole.ADMIN)
            )

    def test_duplicate_email_any_case(self, db_session, student_user):
        with pytest.raises(UserAlreadyExistsException):
            AuthService.register(
                db_session, _registration(email="STUDENT@example.com")
            )

    @pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "NoDigits!!"])
    def test_weak_password(self, db_session, password):
        with pytest.raises(PasswordValidationException):
            AuthService.register(db_session, _registration(password=password))


class TestLogin:
    """Tests for AuthService.login"""

    def test_login_returns_token_for_user(self, db_session, student_user):
        token = AuthService.login(db_session, "student@example.com", TEST_PASSWORD)

        assert token.token_type == "bearer"
        assert token.user.id == student_user.id
        payload = decode_token(token.access_token)
        assert payload["sub"] == "student@example.com"

    def test_wrong_password(self, db_session, student_user):
        with pytest.raises(InvalidCredentialsException):
            AuthService.login(db_session, "student@example.com", "Wrong!Pass1")

    def test_unknown_email(self, db_session):
        with pytest.raises(InvalidCredentialsException):
            AuthService.login(db_session, "nobody@example.com", TEST_PASSWORD)

    def test_inactive_user(self, db_session, student_user):
        student_user.is_active = False
        db_session.commit()

        with pytest.raises(InactiveUserException):
            AuthService.login(db_session, "student@example.com", TEST_PASSWORD)


class TestCreateAdmin:
    """Tests for AuthService.create_admin"""

    def test_admin_has_no_role_profile(self, db_session, admin_user):
        user = AuthService.create_admin(
            db_session,
            schemas.AdminCreate(
                name="Second Admin",
                email="admin2@example.com",
                password=TEST_PASSWORD,
            ),
            admin_user,
        )

        assert user.role == db_models.UserRole.ADMIN
        assert user.student_profile is None
        assert user.instructor_profile is None


class TestPasswordReset:
    """Tests for the OTP password reset flow."""

    @pytest.fixture
    def fixed_otp(self, monkeypatch):
        monkeypatch.setattr(
            PasswordResetService,
            "generate_otp",
            staticmethod(lambda length=None: "123456"),
        )
        return "123456"

    def test_generate_otp_is_numeric(self):
        otp = PasswordResetService.generate_otp()

        assert len(otp) == 6
        assert otp.isdigit()

    def test_unknown_email(self, db_session):
        with pytest.raises(UserNotFoundException):
            PasswordResetService.send_otp(db_session, "nobody@example.com")

    def test_token_never_contains_code(self, db_session, student_user, fixed_otp):
        token, expires_in = PasswordResetService.send_otp(
            db_session, "student@example.com"
        )

        payload = decode_token(token)
        assert expires_in > 0
        assert fixed_otp not in str(payload)

    def test_full_flow(self, db_session, student_user, fixed_otp):
        token, _ = PasswordResetService.send_otp(db_session, "student@example.com")
        reset_token = PasswordResetService.verify_otp(db_session, token, fixed_otp)

        PasswordResetService.reset_password(db_session, reset_token, "N3w!Password")

        login = AuthService.login(db_session, "student@example.com", "N3w!Password")
        assert login.user.id == student_user.id

    def test_wrong_code(self, db_session, student_user, fixed_otp):
        token, _ = PasswordResetService.send_otp(db_session, "student@example.com")

        with pytest.raises(InvalidOtpException):
            PasswordResetService.verify_otp(db_session, token, "654321")

    def test_otp_token_cannot_reset(self, db_session, student_user, fixed_otp):
        token, _ = PasswordResetService.send_otp(db_session, "student@example.com")

        with pytest.raises(InvalidResetTokenException):
            PasswordResetService.reset_password(db_session, token, "N3w!Password")

    def test_reset_token_is_single_use(self, db_session, student_user, fixed_otp):
        token, _ = PasswordResetService.send_otp(db_session, "student@example.com")
        reset_token = PasswordResetService.verify_otp(db_session, token, fixed_otp)
        PasswordResetService.reset_password(db_session, reset_token, "N3w!Password")

        with pytest.raises(InvalidResetTokenException):
            PasswordResetService.reset_password(
                db_session, reset_token, "An0ther!Pass"
            )

    def test_garbage_token(self, db_session):
        with pytest.raises(InvalidResetTokenException):
            PasswordResetService.verify_otp(db_session, "not-a-token", "123456")
