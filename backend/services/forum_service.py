"""
Forum Service

Course discussion questions and answers: asking, answering, upvoting,
marking the verified answer, locking, and the moderation panels.

Access to a course's forum is decided by ForumAccess; every entry point
checks it before touching content.
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
    CannotUpvoteOwnAnswerException,
    QuestionNotFoundException,
    ValidationException,
)
from repositories.course_repository import CourseRepository
from repositories.forum_reply_repository import ForumReplyRepository
from repositories.forum_report_repository import ForumReportRepository
from repositories.forum_repository import (
    ForumAnswerRepository,
    ForumAnswerUpvoteRepository,
    ForumQuestionRepository,
)
from services.forum_access import ForumAccess


def clean_forum_text(text: str, field: str) -> str:
    """Strip markup from forum text; nothing may be left empty."""
    cleaned = sanitize_plain_text(text) or ""
    if not cleaned:
        raise ValidationException(f"{field} cannot be empty")
    return cleaned


class ForumService:
    """Service for forum questions and answers."""

    @staticmethod
    def _question_item(
        question: db_models.ForumQuestion,
        answer_count: int = 0,
        answer_upvotes: int = 0,
    ) -> dict:
        return {
            "id": question.id,
            "course_id": question.course_id,
            "user_id": question.user_id,
            "user_name": question.user.name if question.user else "",
            "title": question.title,
            "description": question.description,
            "is_solved": bool(question.is_solved),
            "is_locked": bool(question.is_locked),
            "verified_answer_id": question.verified_answer_id,
            "upvotes": question.upvotes or 0,
            "answer_count": int(answer_count or 0),
            "answer_upvotes": int(answer_upvotes or 0),
            "last_activity_at": question.last_activity_at,
            "created_at": question.created_at,
        }

    @staticmethod
    def _answer_item(
        answer: db_models.ForumAnswer,
        user: db_models.User,
        liked_ids: set[int],
    ) -> schemas.Answer:
        return schemas.Answer(
            id=answer.id,
            question_id=answer.question_id,
            user_id=answer.user_id,
            user_name=answer.user.name if answer.user else "",
            answer_text=answer.answer_text,
            is_verified=bool(answer.is_verified),
            upvotes=answer.upvotes or 0,
            has_liked=answer.id in liked_ids,
            is_owner=answer.user_id == user.id,
            created_at=answer.created_at,
        )

    @staticmethod
    def count_questions(db: Session, course_id: int) -> schemas.ForumCount:
        return schemas.ForumCount(
            course_id=course_id,
            count=ForumQuestionRepository(db).count_by_course(course_id),
        )

    @staticmethod
    def create_question(
        db: Session, data: schemas.QuestionCreate, user: db_models.User
    ) -> schemas.QuestionListItem:
        """
        Ask a question in a course's forum.

        Raises:
            CourseNotFoundException: If the course does not exist
            NotEnrolledException: If a student is not enrolled
        """
        ForumAccess.check_course(db, data.course_id, user)
        now = utc_now()
        question = db_models.ForumQuestion(
            course_id=data.course_id,
            user_id=user.id,
            title=clean_forum_text(data.title, "Title"),
            description=clean_forum_text(data.description, "Description"),
            last_activity_at=now,
        )
        question = ForumQuestionRepository(db).create(question)
        logger.info(f"Forum question {question.id} asked in course {data.course_id}")
        return schemas.QuestionListItem(**ForumService._question_item(question))

    @staticmethod
    def list_course_questions(
        db: Session, course_id: int, user: db_models.User
    ) -> List[schemas.QuestionListItem]:
        ForumAccess.check_course(db, course_id, user)
        rows = ForumQuestionRepository(db).get_by_course_with_stats(course_id)
        return [
            schemas.QuestionListItem(
                **ForumService._question_item(question, count, upvotes)
            )
            for question, count, upvotes in rows
        ]

    @staticmethod
    def get_question_detail(
        db: Session, question_id: int, user: db_models.User
    ) -> schemas.QuestionDetail:
        """Question with its answers, verified first then oldest first."""
        question, _ = ForumAccess.get_question(db, question_id, user)
        answers = ForumAnswerRepository(db).get_by_question(question.id)
        liked = ForumAnswerUpvoteRepository(db).get_upvoted_answer_ids(
            user.id, [a.id for a in answers]
        )
        item = ForumService._question_item(
            question,
            answer_count=len(answers),
            answer_upvotes=sum(a.upvotes or 0 for a in answers),
        )
        return schemas.QuestionDetail(
            **item,
            is_owner=question.user_id == user.id,
            answers=[ForumService._answer_item(a, user, liked) for a in answers],
        )

    @staticmethod
    def create_answer(
        db: Session, data: schemas.AnswerCreate, user: db_models.User
    ) -> schemas.Answer:
        """
        Answer a question.

        Raises:
            QuestionNotFoundException: If the question does not exist
            QuestionLockedException: If the discussion is locked
        """
        question, _ = ForumAccess.get_question(db, data.question_id, user)
        ForumAccess.require_unlocked(question)

        answer = db_models.ForumAnswer(
            question_id=question.id,
            user_id=user.id,
            answer_text=clean_forum_text(data.answer_text, "Answer"),
        )
        repo = ForumAnswerRepository(db)
        repo.add(answer)
        question.last_activity_at = utc_now()
        repo.commit()
        repo.refresh(answer)
        return ForumService._answer_item(answer, user, set())

    @staticmethod
    def _get_answer(db: Session, answer_id: int) -> db_models.ForumAnswer:
        answer = ForumAnswerRepository(db).get_by_id(answer_id)
        if answer is None:
            raise AnswerNotFoundException(answer_id)
        return answer

    @staticmethod
    def toggle_upvote(
        db: Session, answer_id: int, user: db_models.User
    ) -> schemas.UpvoteResponse:
        """
        Add or remove the user's upvote on an answer.

        Raises:
            AnswerNotFoundException: If the answer does not exist
            CannotUpvoteOwnAnswerException: If the user wrote the answer
        """
        answer = ForumService._get_answer(db, answer_id)
        ForumAccess.get_question(db, answer.question_id, user)
        if answer.user_id == user.id:
            raise CannotUpvoteOwnAnswerException()

        upvote_repo = ForumAnswerUpvoteRepository(db)
        existing = upvote_repo.get(answer.id, user.id)
        if existing is not None:
            db.delete(existing)
            answer.upvotes = max(0, (answer.upvotes or 0) - 1)
            liked = False
        else:
            upvote_repo.add(
                db_models.ForumAnswerUpvote(answer_id=answer.id, user_id=user.id)
            )
            answer.upvotes = (answer.upvotes or 0) + 1
            liked = True
        upvote_repo.commit()

        return schemas.UpvoteResponse(
            answer_id=answer.id, upvotes=answer.upvotes, has_liked=liked
        )

    @staticmethod
    def mark_solved(
        db: Session, question_id: int, answer_id: int, user: db_models.User
    ) -> schemas.QuestionDetail:
        """
        Mark one answer as the verified solution.

        Raises:
            InsufficientPermissionsException: Unless course instructor or admin
            AnswerQuestionMismatchException: If the answer is from another
                question
        """
        question, course = ForumAccess.get_question(db, question_id, user)
        ForumAccess.require_moderator(course, user)

        answer = ForumService._get_answer(db, answer_id)
        if answer.question_id != question.id:
            raise AnswerQuestionMismatchException()

        answer_repo = ForumAnswerRepository(db)
        answer_repo.clear_verified(question.id, keep_answer_id=answer.id)
        answer.is_verified = True
        question.is_solved = True
        question.verified_answer_id = answer.id
        answer_repo.commit()
        db.expire_all()
        return ForumService.get_question_detail(db, question_id, user)

    @staticmethod
    def set_locked(
        db: Session, question_id: int, is_locked: bool, user: db_models.User
    ) -> schemas.QuestionListItem:
        question, course = ForumAccess.get_question(db, question_id, user)
        ForumAccess.require_moderator(course, user)
        question.is_locked = is_locked
        question = ForumQuestionRepository(db).update(question)
        return schemas.QuestionListItem(**ForumService._question_item(question))

    @staticmethod
    def delete_question(db: Session, question_id: int, admin: db_models.User) -> None:
        """
        Remove a question thread and close reports against it.

        Pending reports on the question, its answers or its replies are
        resolved with the note "Content deleted".
        """
        question_repo = ForumQuestionRepository(db)
        question = question_repo.get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundException(question_id)

        answer_ids = ForumAnswerRepository(db).get_ids_by_question(question_id)
        reply_ids = ForumReplyRepository(db).get_ids_by_question(question_id)
        report_repo = ForumReportRepository(db)
        now = utc_now()
        targets = [
            (db_models.ReportTargetType.QUESTION, [question_id]),
            (db_models.ReportTargetType.ANSWER, answer_ids),
            (db_models.ReportTargetType.REPLY, reply_ids),
        ]
        for target_type, ids in targets:
            for report in report_repo.get_pending_for_targets(target_type, ids):
                report.status = db_models.ReportStatus.RESOLVED
                report.action_by = admin.id
                report.action_at = now
                report.action_note = "Content deleted"

        db.flush()
        question_repo.delete_thread(question_id)
        question_repo.commit()
        db.expire_all()
        logger.info(f"Forum question {question_id} deleted by admin {admin.id}")

    @staticmethod
    def _panel(rows: list) -> List[schemas.PanelQuestion]:
        return [
            schemas.PanelQuestion(
                **ForumService._question_item(question, count, upvotes),
                course_title=question.course.title if question.course else "",
            )
            for question, count, upvotes in rows
        ]

    @staticmethod
    def list_panel_questions(
        db: Session,
        user: db_models.User,
        skip: int = 0,
        limit: int = 50,
    ) -> List[schemas.PanelQuestion]:
        """
        Moderation panel: every question for admins, own courses for
        instructors.
        """
        course_ids: Optional[List[int]] = None
        if not user.is_admin:
            course_ids = CourseRepository(db).get_ids_by_instructor(user.id)
        rows = ForumQuestionRepository(db).get_for_courses_with_stats(
            course_ids, skip=skip, limit=limit
        )
        return ForumService._panel(rows)
