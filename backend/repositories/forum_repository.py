"""
Repositories for forum questions, answers and answer upvotes.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class ForumQuestionRepository(BaseRepository[db_models.ForumQuestion]):
    """Repository for forum questions."""

    def __init__(self, db: Session):
        super().__init__(db_models.ForumQuestion, db)

    def _with_answer_stats(self):
        """
        Base query yielding (question, answer_count, answer_upvotes).

        Answer statistics come from a grouped subquery so questions without
        answers still appear with zero counts.
        """
        stats = (
            self.db.query(
                db_models.ForumAnswer.question_id.label("question_id"),
                func.count(db_models.ForumAnswer.id).label("answer_count"),
                func.coalesce(func.sum(db_models.ForumAnswer.upvotes), 0).label(
                    "answer_upvotes"
                ),
            )
            .group_by(db_models.ForumAnswer.question_id)
            .subquery()
        )
        return (
            self.db.query(
                db_models.ForumQuestion,
                func.coalesce(stats.c.answer_count, 0),
                func.coalesce(stats.c.answer_upvotes, 0),
            )
            .outerjoin(stats, stats.c.question_id == db_models.ForumQuestion.id)
            .options(
                joinedload(db_models.ForumQuestion.user),
                joinedload(db_models.ForumQuestion.course),
            )
        )

    def get_by_course_with_stats(self, course_id: int) -> list:
        """
        Questions of a course, most recently active first.

        Returns:
            List of (question, answer_count, answer_upvotes)
        """
        return (
            self._with_answer_stats()
            .filter(db_models.ForumQuestion.course_id == course_id)
            .order_by(
                db_models.ForumQuestion.last_activity_at.desc(),
                db_models.ForumQuestion.id.desc(),
            )
            .all()
        )

    def get_for_courses_with_stats(
        self,
        course_ids: Optional[List[int]] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list:
        """
        Moderation panel listing, newest first.

        Args:
            course_ids: Restrict to these courses; None means every course

        Returns:
            List of (question, answer_count, answer_upvotes)
        """
        query = self._with_answer_stats()
        if course_ids is not None:
            if not course_ids:
                return []
            query = query.filter(db_models.ForumQuestion.course_id.in_(course_ids))
        return (
            query.order_by(
                db_models.ForumQuestion.created_at.desc(),
                db_models.ForumQuestion.id.desc(),
            )
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_course(self, course_id: int) -> int:
        return (
            self.db.query(func.count(db_models.ForumQuestion.id))
            .filter(db_models.ForumQuestion.course_id == course_id)
            .scalar()
            or 0
        )

    def delete_thread(self, question_id: int) -> None:
        """
        Remove a question with its answers, upvotes and replies.

        Bulk deletes, children first; the caller commits.
        """
        answer_ids = [
            row[0]
            for row in self.db.query(db_models.ForumAnswer.id)
            .filter(db_models.ForumAnswer.question_id == question_id)
            .all()
        ]
        if answer_ids:
            self.db.query(db_models.ForumAnswerUpvote).filter(
                db_models.ForumAnswerUpvote.answer_id.in_(answer_ids)
            ).delete(synchronize_session=False)
        self.db.query(db_models.ForumReply).filter(
            db_models.ForumReply.question_id == question_id
        ).delete(synchronize_session=False)
        self.db.query(db_models.ForumAnswer).filter(
            db_models.ForumAnswer.question_id == question_id
        ).delete(synchronize_session=False)
        self.db.query(db_models.ForumQuestion).filter(
            db_models.ForumQuestion.id == question_id
        ).delete(synchronize_session=False)


class ForumAnswerRepository(BaseRepository[db_models.ForumAnswer]):
    """Repository for forum answers."""

    def __init__(self, db: Session):
        super().__init__(db_models.ForumAnswer, db)

    def get_by_question(self, question_id: int) -> List[db_models.ForumAnswer]:
        """Answers of a question: the verified one first, then oldest first."""
        return (
            self.db.query(db_models.ForumAnswer)
            .options(joinedload(db_models.ForumAnswer.user))
            .filter(db_models.ForumAnswer.question_id == question_id)
            .order_by(
                db_models.ForumAnswer.is_verified.desc(),
                db_models.ForumAnswer.created_at.asc(),
                db_models.ForumAnswer.id.asc(),
            )
            .all()
        )

    def get_ids_by_question(self, question_id: int) -> List[int]:
        return [
            row[0]
            for row in self.db.query(db_models.ForumAnswer.id)
            .filter(db_models.ForumAnswer.question_id == question_id)
            .all()
        ]

    def clear_verified(self, question_id: int, keep_answer_id: int) -> None:
        """Unverify every answer of a question except one (no commit)."""
        self.db.query(db_models.ForumAnswer).filter(
            db_models.ForumAnswer.question_id == question_id,
            db_models.ForumAnswer.id != keep_answer_id,
        ).update({db_models.ForumAnswer.is_verified: False}, synchronize_session=False)


class ForumAnswerUpvoteRepository(BaseRepository[db_models.ForumAnswerUpvote]):
    """Repository for answer upvotes (one per user and answer)."""

    def __init__(self, db: Session):
        super().__init__(db_models.ForumAnswerUpvote, db)

    def get(
        self, answer_id: int, user_id: int
    ) -> Optional[db_models.ForumAnswerUpvote]:
        return (
            self.db.query(db_models.ForumAnswerUpvote)
            .filter(
                db_models.ForumAnswerUpvote.answer_id == answer_id,
                db_models.ForumAnswerUpvote.user_id == user_id,
            )
            .first()
        )

    def get_upvoted_answer_ids(self, user_id: int, answer_ids: List[int]) -> set[int]:
        """Subset of answer_ids the user has upvoted."""
        if not answer_ids:
            return set()
        return {
            row[0]
            for row in self.db.query(db_models.ForumAnswerUpvote.answer_id)
            .filter(
                db_models.ForumAnswerUpvote.user_id == user_id,
                db_models.ForumAnswerUpvote.answer_id.in_(answer_ids),
            )
            .all()
        }
