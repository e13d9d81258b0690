"""
Password strength policy for registration, password change and reset.
"""

import re
from dataclasses import dataclass
from typing import List


@dataclass
class PasswordRequirements:
    """Password complexity requirements configuration."""

    min_length: int = 8
    max_length: int = 128
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_special: bool = True
    special_characters: str = "!@#$%^&*()_+-=[]{}|;:,.<>?"


DEFAULT_REQUIREMENTS = PasswordRequirements()


def validate_password_complexity(
    password: str,
    requirements: PasswordRequirements = DEFAULT_REQUIREMENTS,
) -> tuple[bool, List[str]]:
    """
    Validate password against complexity requirements.

    Args:
        password: Password to validate
        requirements: Password requirements configuration

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors: List[str] = []

    if len(password) < requirements.min_length:
        errors.append(
            f"Password must be at least {requirements.min_length} characters long"
        )
    # bcrypt only looks at the first 72 bytes; cap well past that
    if len(password) > requirements.max_length:
        errors.append(
            f"Password must be at most {requirements.max_length} characters long"
        )

    if requirements.require_uppercase and not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if requirements.require_lowercase and not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if requirements.require_digit and not re.search(r"\d", password):
        errors.append("Password must contain at least one digit")

    if requirements.require_special:
        special_pattern = re.escape(requirements.special_characters)
        if not re.search(f"[{special_pattern}]", password):
            errors.append("Password must contain at least one special character")

    return len(errors) == 0, errors


def get_password_strength_message() -> str:
    """Describe the default policy in one sentence for form hints."""
    req = DEFAULT_REQUIREMENTS
    parts = [f"at least {req.min_length} characters"]

    if req.require_uppercase:
        parts.append("one uppercase letter")
    if req.require_lowercase:
        parts.append("one lowercase letter")
    if req.require_digit:
        parts.append("one digit")
    if req.require_special:
        parts.append("one special character")

    if len(parts) == 1:
        return f"Password must be {parts[0]}"

    return f"Password must contain {', '.join(parts[:-1])}, and {parts[-1]}"


# Passwords rejected outright, compared case-insensitively
COMMON_PASSWORDS = {
    "password",
    "password1",
    "password123",
    "passw0rd",
    "p@ssw0rd",
    "p@ssword1",
    "qwerty123",
    "welcome1",
    "welcome123",
    "admin123",
    "letmein1",
    "iloveyou1",
    "abc12345",
    "12345678",
    "123456789",
}


def check_password(password: str) -> List[str]:
    """
    Run the full policy: complexity rules plus the common password list.

    Returns:
        Error messages; empty when the password is acceptable
    """
    _, errors = validate_password_complexity(password)
    if password.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common")
    return errors
