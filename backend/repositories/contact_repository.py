"""
Repository for contact form messages.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import ContactMessage, ContactStatus


class ContactMessageRepository(BaseRepository[ContactMessage]):
    """Repository for contact message data access."""

    def __init__(self, db: Session):
        super().__init__(ContactMessage, db)

    def get_newest_first(
        self,
        status: Optional[ContactStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ContactMessage]:
        """
        List messages for the admin inbox.

        Args:
            status: Filter by status
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Messages, newest first
        """
        query = self.db.query(ContactMessage)
        if status is not None:
            query = query.filter(ContactMessage.status == status)
        return (
            query.order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
