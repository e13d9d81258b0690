from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import bcrypt
from fastapi import Depends
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBearer,
    OAuth2PasswordBearer,
)
import jwt
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InactiveUserException,
    InsufficientPermissionsException,
)
from repositories.database import get_db

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")
optional_oauth2_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def create_user_token(user: db_models.User) -> str:
    """Issue a login token for a user, carrying their role."""
    return create_access_token(
        data={"sub": user.email, "role": user.role.value},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def decode_token(token: str) -> dict:
    """
    Decode and verify a signed token.

    Raises:
        jwt.exceptions.InvalidTokenError: If the signature or expiry is invalid.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def authenticate_user(db: Session, email: str, password: str) -> db_models.User | None:
    user = (
        db.query(db_models.User)
        .filter(db_models.User.email == email.lower())
        .first()
    )
    if not user:
        return None
    if not verify_password(password, str(user.hashed_password)):
        return None
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> db_models.User:
    """
    Get the current authenticated user from the JWT token.

    Raises:
        AuthenticationException: If credentials are invalid or user not found.
    """
    try:
        payload = decode_token(token)
        email_value = payload.get("sub")
        if email_value is None or payload.get("purpose"):
            # Reset tokens carry a purpose and are not login tokens
            raise AuthenticationException("Could not validate credentials")
        email: str = str(email_value)
        token_data = schemas.TokenData(email=email)
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")

    user = (
        db.query(db_models.User)
        .filter(db_models.User.email == token_data.email)
        .first()
    )
    if user is None:
        raise AuthenticationException("Could not validate credentials")
    return user


async def get_current_active_user(
    current_user: db_models.User = Depends(get_current_user),
) -> db_models.User:
    """
    Get the current user and verify the account is active.

    Raises:
        InactiveUserException: If the user account has been deactivated.
    """
    if not bool(current_user.is_active):
        raise InactiveUserException("Account has been deactivated")
    return current_user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        optional_oauth2_scheme
    ),
    db: Session = Depends(get_db),
) -> Optional[db_models.User]:
    """
    Get current user if authenticated, otherwise return None.

    If no credentials are provided, returns None (anonymous access).
    If credentials are provided but expired, raises AuthenticationException
    so the user knows to re-login (returns 401).
    If credentials are malformed or invalid, returns None.
    """
    if credentials is None:
        return None

    try:
        payload = decode_token(credentials.credentials)
        email_value = payload.get("sub")
        if email_value is None or payload.get("purpose"):
            return None
        email: str = str(email_value)
        user = db.query(db_models.User).filter(db_models.User.email == email).first()
        if user is not None and not bool(user.is_active):
            return None
        return user
    except jwt.exceptions.ExpiredSignatureError:
        # Token was provided but expired - user should re-login
        raise AuthenticationException("Session expired. Please log in again.")
    except jwt.exceptions.InvalidTokenError:
        # Other JWT errors (malformed token, etc.) - treat as anonymous
        return None


def require_roles(*roles: db_models.UserRole) -> Callable:
    """
    Build a dependency that admits only the given roles.

    Usage:
        Depends(require_roles(UserRole.ADMIN, UserRole.INSTRUCTOR))
    """
    allowed = set(roles)

    async def _dependency(
        current_user: db_models.User = Depends(get_current_active_user),
    ) -> db_models.User:
        if current_user.role not in allowed:
            raise InsufficientPermissionsException("Not enough permissions")
        return current_user

    return _dependency


async def get_admin_user(
    current_user: db_models.User = Depends(get_current_active_user),
) -> db_models.User:
    """
    Require admin permissions.

    Raises:
        InsufficientPermissionsException: If user is not an admin.
    """
    if current_user.role != db_models.UserRole.ADMIN:
        raise InsufficientPermissionsException("Not enough permissions")
    return current_user


async def get_instructor_user(
    current_user: db_models.User = Depends(get_current_active_user),
) -> db_models.User:
    """
    Require instructor permissions.

    Admins pass as well; ownership checks in the services still apply.

    Raises:
        InsufficientPermissionsException: If user is neither instructor nor admin.
    """
    if current_user.role not in (
        db_models.UserRole.INSTRUCTOR,
        db_models.UserRole.ADMIN,
    ):
        raise InsufficientPermissionsException("Instructor permissions required")
    return current_user


async def get_student_user(
    current_user: db_models.User = Depends(get_current_active_user),
) -> db_models.User:
    """
    Require a student account.

    Raises:
        InsufficientPermissionsException: If user is not a student.
    """
    if current_user.role != db_models.UserRole.STUDENT:
        raise InsufficientPermissionsException("Only students can do this")
    return current_user
