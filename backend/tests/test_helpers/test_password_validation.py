"""Tests for the password policy helper."""

import pytest

from helpers.password_validation import (
    PasswordRequirements,
    check_password,
    get_password_strength_message,
    validate_password_complexity,
)


class TestValidatePasswordComplexity:
    """Tests for validate_password_complexity"""

    def test_strong_password(self):
        is_valid, errors = validate_password_complexity("Str0ng!Pass")

        assert is_valid is True
        assert errors == []

    @pytest.mark.parametrize(
        "password,fragment",
        [
            ("Sh0rt!", "at least 8 characters"),
            ("lowercase1!", "uppercase letter"),
            ("UPPERCASE1!", "lowercase letter"),
            ("NoDigits!!", "digit"),
            ("NoSpecial11", "special character"),
        ],
    )
    def test_single_rule_failures(self, password, fragment):
        is_valid, errors = validate_password_complexity(password)

        assert is_valid is False
        assert len(errors) == 1
        assert fragment in errors[0]

    def test_reports_every_failure(self):
        _, errors = validate_password_complexity("abc")

        assert len(errors) == 4

    def test_too_long(self):
        _, errors = validate_password_complexity("Aa1!" * 40)

        assert any("at most 128" in e for e in errors)

    def test_relaxed_requirements(self):
        relaxed = PasswordRequirements(
            min_length=4,
            require_uppercase=False,
            require_digit=False,
            require_special=False,
        )

        assert validate_password_complexity("abcd", relaxed) == (True, [])


class TestCheckPassword:
    """Tests for check_password"""

    def test_common_password_is_rejected(self):
        errors = check_password("P@ssw0rd")

        assert errors == ["Password is too common"]

    def test_acceptable_password(self):
        assert check_password("Learn!X2024") == []


def test_strength_message_lists_every_rule():
    message = get_password_strength_message()

    assert message.startswith("Password must contain at least 8 characters")
    assert message.endswith("and one special character")
