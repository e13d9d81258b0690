"""
Category repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class CategoryRepository(BaseRepository[db_models.Category]):
    """Repository for Category entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Category, db)

    def get_by_name(self, name: str) -> Optional[db_models.Category]:
        """
        Find a category by name, ignoring case and surrounding spaces.

        Args:
            name: Category name

        Returns:
            Category if found, None otherwise
        """
        return (
            self.db.query(db_models.Category)
            .filter(func.lower(db_models.Category.name) == name.strip().lower())
            .first()
        )

    def get_by_status(
        self, status: db_models.CategoryStatus
    ) -> List[db_models.Category]:
        """Return categories with the given status, alphabetically."""
        return (
            self.db.query(db_models.Category)
            .filter(db_models.Category.status == status)
            .order_by(db_models.Category.name)
            .all()
        )

    def get_by_suggester(self, user_id: int) -> List[db_models.Category]:
        """Return categories suggested by an instructor, newest first."""
        return (
            self.db.query(db_models.Category)
            .filter(db_models.Category.suggested_by == user_id)
            .order_by(db_models.Category.created_at.desc())
            .all()
        )

    def count_courses(self, category_id: int) -> int:
        """Number of courses filed under a category."""
        return (
            self.db.query(func.count(db_models.Course.id))
            .filter(db_models.Course.category_id == category_id)
            .scalar()
            or 0
        )
