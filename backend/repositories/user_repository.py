"""
User repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize user repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.User, db)

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email (emails are stored lower-cased).

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.email == email.lower())
            .first()
        )

    def email_exists(self, email: str) -> bool:
        """
        Check if email already exists.

        Args:
            email: Email to check

        Returns:
            True if a user holds this email
        """
        return self.get_by_email(email) is not None

    def get_users_filtered(
        self,
        role: Optional[db_models.UserRole] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[List[db_models.User], int]:
        """
        List users for the admin panel, newest first.

        Args:
            role: Restrict to one role
            search: Case-insensitive match on name or email
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (users, total matching count)
        """
        query = self.db.query(db_models.User)
        if role is not None:
            query = query.filter(db_models.User.role == role)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(db_models.User.name).like(pattern),
                    func.lower(db_models.User.email).like(pattern),
                )
            )

        total = query.count()
        users = (
            query.order_by(db_models.User.created_at.desc(), db_models.User.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return users, total

    def count_by_role(self) -> dict[str, int]:
        """Return {role value: count} for every role, zero-filled."""
        rows = (
            self.db.query(db_models.User.role, func.count(db_models.User.id))
            .group_by(db_models.User.role)
            .all()
        )
        counts = {role.value: 0 for role in db_models.UserRole}
        for role, count in rows:
            counts[role.value] = count
        return counts
