"""
Unit tests for ForumReplyService.
"""

import pytest

import models.schemas as schemas
from models.exceptions import (
    AnswerQuestionMismatchException,
    InsufficientPermissionsException,
    InvalidReplyParentException,
    ReplyAlreadyDeletedException,
)
from services.forum_reply_service import ForumReplyService
from services.forum_service import ForumService
from tests.conftest import make_enrollment


@pytest.fixture
def thread(db_session, student_user, instructor_user, enrollment):
    """A question with one instructor answer."""
    question = ForumService.create_question(
        db_session,
        schemas.QuestionCreate(
            course_id=enrollment.course_id,
            title="Why use virtualenv?",
            description="What does it isolate?",
        ),
        student_user,
    )
    answer = ForumService.create_answer(
        db_session,
        schemas.AnswerCreate(question_id=question.id, answer_text="Dependencies."),
        instructor_user,
    )
    return question, answer


def _reply(question, answer, text="Thanks!", parent_id=None):
    return schemas.ReplyCreate(
        question_id=question.id,
        answer_id=answer.id,
        reply_text=text,
        parent_id=parent_id,
    )


class TestCreateReply:
    """Tests for ForumReplyService.create_reply"""

    def test_reply_to_answer(self, db_session, student_user, thread):
        question, answer = thread

        reply = ForumReplyService.create_reply(
            db_session, _reply(question, answer), student_user
        )

        assert reply.parent_id is None
        assert reply.user_name == "Student One"
        assert reply.reply_text == "Thanks!"

    def test_nested_reply(self, db_session, student_user, instructor_user, thread):
        question, answer = thread
        parent = ForumReplyService.create_reply(
            db_session, _reply(question, answer), student_user
        )

        child = ForumReplyService.create_reply(
            db_session,
            _reply(question, answer, "You are welcome", parent_id=parent.id),
            instructor_user,
        )

        assert child.parent_id == parent.id

    def test_parent_must_exist(self, db_session, student_user, thread):
        question, answer = thread

        with pytest.raises(InvalidReplyParentException):
            ForumReplyService.create_reply(
                db_session, _reply(question, answer, parent_id=9999), student_user
            )

    def test_deleted_parent_is_rejected(self, db_session, student_user, thread):
        question, answer = thread
        parent = ForumReplyService.create_reply(
            db_session, _reply(question, answer), student_user
        )
        ForumReplyService.delete_reply(db_session, parent.id, student_user)

        with pytest.raises(InvalidReplyParentException):
            ForumReplyService.create_reply(
                db_session, _reply(question, answer, parent_id=parent.id), student_user
            )

    def test_answer_must_belong_to_question(
        self, db_session, student_user, instructor_user, thread
    ):
        question, _ = thread
        other = ForumService.create_question(
            db_session,
            schemas.QuestionCreate(
                course_id=question.course_id, title="Other thread", description="?"
            ),
            student_user,
        )
        other_answer = ForumService.create_answer(
            db_session,
            schemas.AnswerCreate(question_id=other.id, answer_text="Elsewhere"),
            instructor_user,
        )

        with pytest.raises(AnswerQuestionMismatchException):
            ForumReplyService.create_reply(
                db_session, _reply(question, other_answer), student_user
            )


class TestDeleteReply:
    """Tests for soft deletion of replies."""

    def test_author_soft_deletes(self, db_session, student_user, thread):
        question, answer = thread
        reply = ForumReplyService.create_reply(
            db_session, _reply(question, answer), student_user
        )

        deleted = ForumReplyService.delete_reply(
            db_session, reply.id, student_user, reason="typo"
        )

        assert deleted.is_deleted is True
        assert deleted.deleted_by == student_user.id
        assert deleted.deleted_at is not None
        assert deleted.delete_reason == "typo"
        # Text is kept for audit
        assert deleted.reply_text == "Thanks!"

    def test_deleted_replies_are_hidden(self, db_session, student_user, thread):
        question, answer = thread
        kept = ForumReplyService.create_reply(
            db_session, _reply(question, answer, "Keep me"), student_user
        )
        gone = ForumReplyService.create_reply(
            db_session, _reply(question, answer, "Remove me"), student_user
        )
        ForumReplyService.delete_reply(db_session, gone.id, student_user)

        replies = ForumReplyService.list_replies(db_session, question.id, student_user)

        assert [r.id for r in replies] == [kept.id]

    def test_moderator_can_delete(
        self, db_session, student_user, instructor_user, thread
    ):
        question, answer = thread
        reply = ForumReplyService.create_reply(
            db_session, _reply(question, answer), student_user
        )

        deleted = ForumReplyService.delete_reply(
            db_session, reply.id, instructor_user, reason="off topic"
        )

        assert deleted.deleted_by == instructor_user.id

    def test_other_student_cannot_delete(
        self, db_session, student_user, other_student, free_course, thread
    ):
        make_enrollment(db_session, other_student, free_course)
        question, answer = thread
        reply = ForumReplyService.create_reply(
            db_session, _reply(question, answer), student_user
        )

        with pytest.raises(InsufficientPermissionsException):
            ForumReplyService.delete_reply(db_session, reply.id, other_student)

    def test_double_delete_conflicts(self, db_session, student_user, thread):
        question, answer = thread
        reply = ForumReplyService.create_reply(
            db_session, _reply(question, answer), student_user
        )
        ForumReplyService.delete_reply(db_session, reply.id, student_user)

        with pytest.raises(ReplyAlreadyDeletedException):
            ForumReplyService.delete_reply(db_session, reply.id, student_user)
