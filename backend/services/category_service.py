"""
Category Service

Admin-managed categories plus the instructor suggestion workflow.
"""

from typing import List

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.exceptions import (
    CategoryInUseException,
    CategoryNotFoundException,
    DuplicateCategoryException,
)
from repositories.category_repository import CategoryRepository


class CategoryService:
    """Service for category business logic."""

    @staticmethod
    def _clean_name(name: str) -> str:
        return " ".join((sanitize_plain_text(name) or "").split())

    @staticmethod
    def _get_or_raise(db: Session, category_id: int) -> db_models.Category:
        category = CategoryRepository(db).get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundException(category_id)
        return category

    @staticmethod
    def get_approved_categories(db: Session) -> List[db_models.Category]:
        return CategoryRepository(db).get_by_status(db_models.CategoryStatus.APPROVED)

    @staticmethod
    def get_pending_categories(db: Session) -> List[db_models.Category]:
        return CategoryRepository(db).get_by_status(db_models.CategoryStatus.PENDING)

    @staticmethod
    def get_my_requests(db: Session, user_id: int) -> List[db_models.Category]:
        return CategoryRepository(db).get_by_suggester(user_id)

    @staticmethod
    def check_name(db: Session, name: str) -> schemas.CategoryCheck:
        """Report whether a name is taken and, if so, its status."""
        category = CategoryRepository(db).get_by_name(CategoryService._clean_name(name))
        if category is None:
            return schemas.CategoryCheck(exists=False)
        return schemas.CategoryCheck(exists=True, status=category.status)

    @staticmethod
    def create_category(
        db: Session,
        name: str,
        user: db_models.User,
    ) -> db_models.Category:
        """
        Create a category.

        Admins create approved categories; instructors create pending
        suggestions for review.

        Args:
            db: Database session
            name: Category name
            user: Creating user

        Returns:
            Created category

        Raises:
            DuplicateCategoryException: If the name exists in any status
        """
        repo = CategoryRepository(db)
        clean = CategoryService._clean_name(name)
        if repo.get_by_name(clean) is not None:
            raise DuplicateCategoryException(clean)

        is_admin = user.is_admin
        category = db_models.Category(
            name=clean,
            status=(
                db_models.CategoryStatus.APPROVED
                if is_admin
                else db_models.CategoryStatus.PENDING
            ),
            suggested_by=None if is_admin else user.id,
        )
        category = repo.create(category)
        logger.info(
            f"Category {category.id} created with status {category.status.value} "
            f"by user {user.id}"
        )
        return category

    @staticmethod
    def set_status(
        db: Session, category_id: int, status: db_models.CategoryStatus
    ) -> db_models.Category:
        """Approve or reject a category."""
        category = CategoryService._get_or_raise(db, category_id)
        category.status = status
        return CategoryRepository(db).update(category)

    @staticmethod
    def rename_category(db: Session, category_id: int, name: str) -> db_models.Category:
        """
        Rename a category.

        Raises:
            CategoryNotFoundException: If the category does not exist
            DuplicateCategoryException: If another category has the name
        """
        repo = CategoryRepository(db)
        category = CategoryService._get_or_raise(db, category_id)
        clean = CategoryService._clean_name(name)
        existing = repo.get_by_name(clean)
        if existing is not None and existing.id != category.id:
            raise DuplicateCategoryException(clean)
        category.name = clean
        return repo.update(category)

    @staticmethod
    def delete_category(db: Session, category_id: int) -> None:
        """
        Delete a category no course uses.

        Raises:
            CategoryNotFoundException: If the category does not exist
            CategoryInUseException: If courses still reference it
        """
        repo = CategoryRepository(db)
        category = CategoryService._get_or_raise(db, category_id)
        if repo.count_courses(category_id) > 0:
            raise CategoryInUseException()
        repo.delete(category)
