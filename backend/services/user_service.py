"""
User Service

Profiles, password changes and the admin user directory.
"""

from typing import Optional

from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.password_validation import check_password
from helpers.sanitization import sanitize_plain_text, sanitize_url
from models.exceptions import (
    InvalidCredentialsException,
    PasswordValidationException,
    UserNotFoundException,
)
from repositories.course_repository import CourseRepository
from repositories.enrollment_repository import EnrollmentRepository
from repositories.user_repository import UserRepository


def _clean_list(values: list[str]) -> list[str]:
    """Strip markup and blanks from free-form tag lists."""
    cleaned = []
    for value in values:
        text = sanitize_plain_text(value) or ""
        if text and text not in cleaned:
            cleaned.append(text[:100])
    return cleaned


class UserService:
    """Service for accounts and role profiles."""

    @staticmethod
    def get_profile(user: db_models.User) -> schemas.Profile:
        """Build the profile view of a user with their role profile."""
        return schemas.Profile(
            user=schemas.User.model_validate(user),
            student_profile=(
                schemas.StudentProfile.model_validate(user.student_profile)
                if user.student_profile
                else None
            ),
            instructor_profile=(
                schemas.InstructorProfile.model_validate(user.instructor_profile)
                if user.instructor_profile
                else None
            ),
        )

    @staticmethod
    def update_profile(
        db: Session, user: db_models.User, data: schemas.ProfileUpdate
    ) -> schemas.Profile:
        """
        Update account fields and the profile matching the user's role.

        Fields that belong to the other role's profile are ignored.

        Args:
            db: Database session
            user: Current user
            data: Fields to change; unset fields are kept

        Returns:
            Updated profile
        """
        updates = data.model_dump(exclude_unset=True)

        if "name" in updates and updates["name"]:
            user.name = sanitize_plain_text(updates["name"]) or user.name
        if "phone_no" in updates:
            user.phone_no = updates["phone_no"]
        if updates.get("profile_pic"):
            user.profile_pic = sanitize_url(updates["profile_pic"]) or user.profile_pic

        if user.role == db_models.UserRole.STUDENT:
            profile = user.student_profile or db_models.StudentProfile()
            if "education" in updates:
                profile.education = sanitize_plain_text(updates["education"])
            if updates.get("interests") is not None:
                profile.interests = _clean_list(updates["interests"])
            user.student_profile = profile
        elif user.role == db_models.UserRole.INSTRUCTOR:
            profile = user.instructor_profile or db_models.InstructorProfile()
            if "bio" in updates:
                profile.bio = sanitize_plain_text(updates["bio"])
            if updates.get("expertise") is not None:
                profile.expertise = _clean_list(updates["expertise"])
            if updates.get("qualifications") is not None:
                profile.qualifications = _clean_list(updates["qualifications"])
            if "experience" in updates:
                profile.experience = updates["experience"]
            user.instructor_profile = profile

        UserRepository(db).update(user)
        return UserService.get_profile(user)

    @staticmethod
    def change_password(
        db: Session, user: db_models.User, current_password: str, new_password: str
    ) -> None:
        """
        Change a password after verifying the current one.

        Raises:
            InvalidCredentialsException: If current_password is wrong
            PasswordValidationException: If the new password fails the policy
        """
        if not auth.verify_password(current_password, user.hashed_password):
            raise InvalidCredentialsException("Current password is incorrect")

        errors = check_password(new_password)
        if errors:
            raise PasswordValidationException(errors)

        user.hashed_password = auth.get_password_hash(new_password)
        UserRepository(db).commit()

    @staticmethod
    def list_users(
        db: Session,
        role: Optional[db_models.UserRole] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> schemas.UserListResponse:
        users, total = UserRepository(db).get_users_filtered(
            role=role, search=search, skip=skip, limit=limit
        )
        return schemas.UserListResponse(
            users=[schemas.User.model_validate(u) for u in users],
            total=total,
            skip=skip,
            limit=limit,
        )

    @staticmethod
    def get_user_detail(db: Session, user_id: int) -> schemas.UserDetail:
        """
        Admin view of one account.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(f"User with ID {user_id} not found")

        profile = UserService.get_profile(user)
        return schemas.UserDetail(
            **profile.model_dump(),
            enrollment_count=len(EnrollmentRepository(db).get_by_student(user_id)),
            course_count=len(CourseRepository(db).get_ids_by_instructor(user_id)),
        )
