"""
Forum Reply Service

Replies under forum answers and their soft deletion by authors and
moderators.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from helpers.time_utils import utc_now
from models.exceptions import (
    AnswerNotFoundException,
    AnswerQuestionMismatchException,
    InsufficientPermissionsException,
    InvalidReplyParentException,
    QuestionNotFoundException,
    ReplyAlreadyDeletedException,
    ReplyNotFoundException,
)
from repositories.forum_reply_repository import ForumReplyRepository
from repositories.forum_repository import (
    ForumAnswerRepository,
    ForumQuestionRepository,
)
from services.course_service import CourseService
from services.forum_access import ForumAccess
from services.forum_service import clean_forum_text


def soft_delete_reply(
    reply: db_models.ForumReply, deleted_by: int, reason: str = ""
) -> None:
    """Flag a reply as deleted and record who did it and why (no commit)."""
    if reply.is_deleted:
        raise ReplyAlreadyDeletedException()
    reply.is_deleted = True
    reply.deleted_at = utc_now()
    reply.deleted_by = deleted_by
    reply.delete_reason = sanitize_plain_text(reason) or ""


class ForumReplyService:
    """Service for forum replies."""

    @staticmethod
    def to_schema(reply: db_models.ForumReply) -> schemas.Reply:
        return schemas.Reply(
            id=reply.id,
            question_id=reply.question_id,
            answer_id=reply.answer_id,
            parent_id=reply.parent_id,
            user_id=reply.user_id,
            user_name=reply.user.name if reply.user else "",
            reply_text=reply.reply_text,
            created_at=reply.created_at,
        )

    @staticmethod
    def create_reply(
        db: Session, data: schemas.ReplyCreate, user: db_models.User
    ) -> schemas.Reply:
        """
        Reply to an answer, or to another reply under the same answer.

        Args:
            db: Database session
            data: Target question and answer, text and optional parent reply
            user: Author

        Returns:
            Created reply

        Raises:
            QuestionNotFoundException: If the question does not exist
            QuestionLockedException: If the discussion is locked
            AnswerNotFoundException: If the answer does not exist
            AnswerQuestionMismatchException: If the answer belongs to another
                question
            InvalidReplyParentException: If the parent is missing, deleted, or
                under a different question or answer
        """
        question, _ = ForumAccess.get_question(db, data.question_id, user)
        ForumAccess.require_unlocked(question)

        answer = ForumAnswerRepository(db).get_by_id(data.answer_id)
        if answer is None:
            raise AnswerNotFoundException(data.answer_id)
        if answer.question_id != question.id:
            raise AnswerQuestionMismatchException()

        repo = ForumReplyRepository(db)
        if data.parent_id is not None:
            parent = repo.get_by_id(data.parent_id)
            if (
                parent is None
                or parent.is_deleted
                or parent.question_id != question.id
                or parent.answer_id != answer.id
            ):
                raise InvalidReplyParentException()

        reply = db_models.ForumReply(
            question_id=question.id,
            answer_id=answer.id,
            parent_id=data.parent_id,
            user_id=user.id,
            reply_text=clean_forum_text(data.reply_text, "Reply"),
        )
        repo.add(reply)
        question.last_activity_at = utc_now()
        repo.commit()
        repo.refresh(reply)
        return ForumReplyService.to_schema(reply)

    @staticmethod
    def list_replies(
        db: Session,
        question_id: int,
        user: db_models.User,
        answer_id: Optional[int] = None,
    ) -> List[schemas.Reply]:
        """Visible replies of a question in (answer, created) order."""
        ForumAccess.get_question(db, question_id, user)
        replies = ForumReplyRepository(db).get_visible_for_question(
            question_id, answer_id
        )
        return [ForumReplyService.to_schema(r) for r in replies]

    @staticmethod
    def delete_reply(
        db: Session, reply_id: int, user: db_models.User, reason: str = ""
    ) -> db_models.ForumReply:
        """
        Soft delete a reply; the row and its text are kept for audit.

        Allowed for the author, the course instructor and admins.

        Raises:
            ReplyNotFoundException: If the reply does not exist
            InsufficientPermissionsException: For anyone else
            ReplyAlreadyDeletedException: If it was already deleted
        """
        repo = ForumReplyRepository(db)
        reply = repo.get_by_id(reply_id)
        if reply is None:
            raise ReplyNotFoundException(reply_id)

        question = ForumQuestionRepository(db).get_by_id(reply.question_id)
        if question is None:
            raise QuestionNotFoundException(reply.question_id)
        course = CourseService.get_course_or_raise(db, question.course_id)
        if reply.user_id != user.id and not ForumAccess.is_moderator(course, user):
            raise InsufficientPermissionsException(
                "Only the author or a moderator can delete this reply"
            )

        soft_delete_reply(reply, deleted_by=user.id, reason=reason)
        reply = repo.update(reply)
        logger.info(f"Forum reply {reply_id} soft-deleted by user {user.id}")
        return reply
