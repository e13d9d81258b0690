"""
Repository for forum replies.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from repositories.base import BaseRepository
from repositories.db_models import ForumReply


class ForumReplyRepository(BaseRepository[ForumReply]):
    """Repository for reply data access."""

    def __init__(self, db: Session):
        """
        Initialize reply repository.

        Args:
            db: Database session
        """
        super().__init__(ForumReply, db)

    def get_visible_for_question(
        self,
        question_id: int,
        answer_id: Optional[int] = None,
    ) -> List[ForumReply]:
        """
        Get non-deleted replies of a question in thread order.

        Ordered by (answer_id, created_at), matching the compound index.

        Args:
            question_id: ID of the question
            answer_id: Restrict to replies under one answer

        Returns:
            List of replies with their authors loaded
        """
        query = (
            self.db.query(ForumReply)
            .options(joinedload(ForumReply.user))
            .filter(
                ForumReply.question_id == question_id,
                ForumReply.is_deleted == False,  # noqa: E712
            )
        )
        if answer_id is not None:
            query = query.filter(ForumReply.answer_id == answer_id)
        return query.order_by(
            ForumReply.answer_id, ForumReply.created_at, ForumReply.id
        ).all()

    def get_ids_by_question(self, question_id: int) -> List[int]:
        """IDs of every reply of a question, deleted ones included."""
        return [
            row[0]
            for row in self.db.query(ForumReply.id)
            .filter(ForumReply.question_id == question_id)
            .all()
        ]
