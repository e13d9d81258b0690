"""
Password reset by emailed one-time code.

The flow is stateless: every step hands the client a short-lived signed
token, so nothing is stored server-side until the password changes.

1. send_otp: email a numeric code; return a token carrying the email and
   the bcrypt hash of the code (never the code itself).
2. verify_otp: check the code against that token; return a reset token
   with purpose "password_reset".
3. reset_password: set the new password. The reset token is bound to a
   fingerprint of the current password hash, so it stops working once
   the password has changed.
"""

import hashlib
import secrets
import string
from datetime import timedelta

import bcrypt
import jwt
from loguru import logger
from sqlalchemy.orm import Session

from authentication.auth import create_access_token, decode_token, get_password_hash
from helpers.password_validation import check_password
from models.config import settings
from models.exceptions import (
    InvalidOtpException,
    InvalidResetTokenException,
    PasswordValidationException,
    UserNotFoundException,
)
from repositories.user_repository import UserRepository
from services.email_service import EmailService

OTP_PURPOSE = "password_reset_otp"
RESET_PURPOSE = "password_reset"


class PasswordResetService:
    """Service for the OTP password reset flow."""

    @staticmethod
    def _hash_email_for_logging(email: str) -> str:
        """Hash email for logging (don't log full emails)."""
        return hashlib.sha256(email.lower().encode()).hexdigest()[:16]

    @staticmethod
    def _password_fingerprint(hashed_password: str) -> str:
        return hashlib.sha256(hashed_password.encode()).hexdigest()[:16]

    @staticmethod
    def generate_otp(length: int | None = None) -> str:
        """Generate a numeric one-time code with a CSPRNG."""
        length = length or settings.OTP_LENGTH
        return "".join(secrets.choice(string.digits) for _ in range(length))

    @staticmethod
    def _decode(token: str, purpose: str) -> dict:
        try:
            payload = decode_token(token)
        except jwt.exceptions.InvalidTokenError:
            raise InvalidResetTokenException()
        if payload.get("purpose") != purpose or not payload.get("sub"):
            raise InvalidResetTokenException()
        return payload

    @staticmethod
    def send_otp(db: Session, email: str) -> tuple[str, int]:
        """
        Email a reset code to a registered address.

        Args:
            db: Database session
            email: Account email

        Returns:
            Tuple of (OTP token, lifetime in seconds)

        Raises:
            UserNotFoundException: If no account uses this email
        """
        user = UserRepository(db).get_by_email(email)
        if user is None:
            raise UserNotFoundException("No account found with this email")

        otp = PasswordResetService.generate_otp()
        otp_hash = bcrypt.hashpw(otp.encode(), bcrypt.gensalt()).decode()
        expires_in = settings.OTP_EXPIRE_MINUTES * 60
        token = create_access_token(
            data={"sub": user.email, "otp_hash": otp_hash, "purpose": OTP_PURPOSE},
            expires_delta=timedelta(seconds=expires_in),
        )

        sent = EmailService.send_password_reset_otp(
            to_email=user.email,
            otp=otp,
            name=user.name,
            expires_minutes=settings.OTP_EXPIRE_MINUTES,
        )
        if not sent:
            logger.warning(
                f"Password reset code email not delivered "
                f"(email_hash={PasswordResetService._hash_email_for_logging(email)})"
            )
        else:
            logger.info(
                f"Password reset code sent "
                f"(email_hash={PasswordResetService._hash_email_for_logging(email)})"
            )
        return token, expires_in

    @staticmethod
    def verify_otp(db: Session, token: str, otp: str) -> str:
        """
        Exchange a correct code for a reset token.

        Args:
            db: Database session
            token: Token returned by send_otp
            otp: Code the user typed

        Returns:
            Reset token valid for RESET_TOKEN_EXPIRE_MINUTES

        Raises:
            InvalidResetTokenException: If the token is invalid or expired
            InvalidOtpException: If the code does not match
        """
        payload = PasswordResetService._decode(token, OTP_PURPOSE)
        otp_hash = str(payload.get("otp_hash", ""))
        try:
            matches = bcrypt.checkpw(otp.strip().encode(), otp_hash.encode())
        except ValueError:
            # Malformed hash inside a validly signed token
            raise InvalidResetTokenException()
        if not matches:
            raise InvalidOtpException()

        user = UserRepository(db).get_by_email(str(payload["sub"]))
        if user is None:
            raise InvalidResetTokenException()

        return create_access_token(
            data={
                "sub": user.email,
                "purpose": RESET_PURPOSE,
                "fp": PasswordResetService._password_fingerprint(user.hashed_password),
            },
            expires_delta=timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        )

    @staticmethod
    def reset_password(db: Session, reset_token: str, new_password: str) -> None:
        """
        Set a new password using a reset token.

        Raises:
            InvalidResetTokenException: If the token is invalid, expired,
                of the wrong purpose or already used
            PasswordValidationException: If the password fails the policy
        """
        payload = PasswordResetService._decode(reset_token, RESET_PURPOSE)

        user_repo = UserRepository(db)
        user = user_repo.get_by_email(str(payload["sub"]))
        if user is None:
            raise InvalidResetTokenException()
        if payload.get("fp") != PasswordResetService._password_fingerprint(
            user.hashed_password
        ):
            raise InvalidResetTokenException()

        errors = check_password(new_password)
        if errors:
            raise PasswordValidationException(errors)

        user.hashed_password = get_password_hash(new_password)
        user_repo.commit()
        logger.info(f"Password reset completed for user {user.id}")
