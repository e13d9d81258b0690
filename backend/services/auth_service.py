"""
Authentication Service

Registration, login and administrator provisioning.
"""

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from authentication.auth import (
    authenticate_user,
    create_user_token,
    get_password_hash,
)
from helpers.password_validation import check_password
from helpers.sanitization import sanitize_plain_text
from models.exceptions import (
    InactiveUserException,
    InsufficientPermissionsException,
    InvalidCredentialsException,
    PasswordValidationException,
    UserAlreadyExistsException,
)
from repositories.user_repository import UserRepository


class AuthService:
    """Service for authentication business logic."""

    @staticmethod
    def _create_user(
        db: Session,
        name: str,
        email: str,
        password: str,
        role: db_models.UserRole,
        phone_no: str | None = None,
    ) -> db_models.User:
        user_repo = UserRepository(db)
        if user_repo.email_exists(email):
            raise UserAlreadyExistsException()

        errors = check_password(password)
        if errors:
            raise PasswordValidationException(errors)

        user = db_models.User(
            name=sanitize_plain_text(name) or name,
            email=email.lower(),
            hashed_password=get_password_hash(password),
            role=role,
            phone_no=phone_no,
        )
        # Every student and instructor gets a matching profile row
        if role == db_models.UserRole.STUDENT:
            user.student_profile = db_models.StudentProfile()
        elif role == db_models.UserRole.INSTRUCTOR:
            user.instructor_profile = db_models.InstructorProfile()

        return user_repo.create(user)

    @staticmethod
    def register(db: Session, user_data: schemas.UserCreate) -> db_models.User:
        """
        Register a student or instructor account.

        Args:
            db: Database session
            user_data: Registration form

        Returns:
            Created user

        Raises:
            InsufficientPermissionsException: If the admin role is requested
            UserAlreadyExistsException: If the email is taken
            PasswordValidationException: If the password fails the policy
        """
        if user_data.role == db_models.UserRole.ADMIN:
            raise InsufficientPermissionsException(
                "Admin accounts cannot be self-registered"
            )

        user = AuthService._create_user(
            db,
            name=user_data.name,
            email=user_data.email,
            password=user_data.password,
            role=user_data.role,
            phone_no=user_data.phone_no,
        )
        logger.info(f"User registered: id={user.id} role={user.role.value}")
        return user

    @staticmethod
    def login(db: Session, email: str, password: str) -> schemas.Token:
        """
        Authenticate a user and create an access token.

        Args:
            db: Database session
            email: User email
            password: User password

        Returns:
            Token with the user it was issued for

        Raises:
            InvalidCredentialsException: If email or password is incorrect
            InactiveUserException: If the account has been deactivated
        """
        user = authenticate_user(db, email, password)
        if not user:
            raise InvalidCredentialsException()
        if not bool(user.is_active):
            raise InactiveUserException("Account has been deactivated")

        access_token = create_user_token(user)
        # nosec B106: "bearer" is OAuth2 token type, not a password
        return schemas.Token(
            access_token=access_token,
            token_type="bearer",  # nosec B106
            user=schemas.User.model_validate(user),
        )

    @staticmethod
    def create_admin(
        db: Session, admin_data: schemas.AdminCreate, created_by: db_models.User
    ) -> db_models.User:
        """
        Create another administrator account.

        Args:
            db: Database session
            admin_data: New admin's name, email and password
            created_by: Admin performing the action

        Returns:
            Created admin user
        """
        user = AuthService._create_user(
            db,
            name=admin_data.name,
            email=admin_data.email,
            password=admin_data.password,
            role=db_models.UserRole.ADMIN,
        )
        logger.info(f"Admin {created_by.id} created admin account {user.id}")
        return user
