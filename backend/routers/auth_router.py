"""Authentication router endpoints."""

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.rate_limiter import (
    LOGIN_LIMIT,
    OTP_SEND_LIMIT,
    OTP_VERIFY_LIMIT,
    REGISTER_LIMIT,
    limiter,
)
from models.exceptions import ValidationException
from repositories.database import get_db
from services.auth_service import AuthService
from services.password_reset_service import PasswordResetService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=schemas.User, status_code=201)
@limiter.limit(REGISTER_LIMIT)
def register(
    request: Request, user: schemas.UserCreate, db: Session = Depends(get_db)
) -> db_models.User:
    """
    Register a student or instructor account.

    Rate limited to 5 per minute.
    """
    return AuthService.register(db, user)


async def _read_credentials(request: Request) -> schemas.UserLogin:
    """Accept an OAuth2 password form (username = email) or a JSON body."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            return schemas.UserLogin.model_validate(await request.json())
        form = await request.form()
        return schemas.UserLogin(
            email=str(form.get("username") or form.get("email") or ""),
            password=str(form.get("password") or ""),
        )
    except (ValidationError, ValueError):
        raise ValidationException("A valid email and password are required")


@router.post("/login", response_model=schemas.Token)
@limiter.limit(LOGIN_LIMIT)
async def login(request: Request, db: Session = Depends(get_db)) -> schemas.Token:
    """
    Login with email and password. Rate limited to 10 per minute.

    Accepts the OAuth2 password form used by the docs "Authorize" button as
    well as a JSON body {email, password}.

    Domain exceptions are caught by centralized exception handlers.
    """
    credentials = await _read_credentials(request)
    return await run_in_threadpool(
        AuthService.login, db, credentials.email, credentials.password
    )


@router.get("/me", response_model=schemas.User)
async def read_users_me(
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> db_models.User:
    """Get current user."""
    return current_user


@router.post("/send-otp", response_model=schemas.OtpSentResponse)
@limiter.limit(OTP_SEND_LIMIT)
def send_otp(
    request: Request,
    payload: schemas.SendOtpRequest,
    db: Session = Depends(get_db),
) -> schemas.OtpSentResponse:
    """
    Email a password reset code.

    Returns a short-lived token that must be sent back with the code.
    """
    token, expires_in = PasswordResetService.send_otp(db, payload.email)
    return schemas.OtpSentResponse(
        message="OTP sent to your email", token=token, expires_in=expires_in
    )


@router.post("/verify-otp", response_model=schemas.ResetTokenResponse)
@limiter.limit(OTP_VERIFY_LIMIT)
def verify_otp(
    request: Request,
    payload: schemas.VerifyOtpRequest,
    db: Session = Depends(get_db),
) -> schemas.ResetTokenResponse:
    """Exchange a valid code for a password reset token."""
    reset_token = PasswordResetService.verify_otp(db, payload.token, payload.otp)
    return schemas.ResetTokenResponse(
        message="OTP verified", reset_token=reset_token
    )


@router.post("/reset-password", response_model=schemas.MessageResponse)
@limiter.limit(OTP_VERIFY_LIMIT)
def reset_password(
    request: Request,
    payload: schemas.ResetPasswordRequest,
    db: Session = Depends(get_db),
) -> schemas.MessageResponse:
    """Set a new password using a reset token."""
    PasswordResetService.reset_password(
        db, payload.reset_token, payload.new_password
    )
    return schemas.MessageResponse(message="Password reset successfully")
