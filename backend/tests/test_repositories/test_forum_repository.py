"""
Unit tests for forum repositories.
"""

from datetime import datetime

import pytest

import repositories.db_models as db_models
from repositories.forum_repository import (
    ForumAnswerRepository,
    ForumAnswerUpvoteRepository,
    ForumQuestionRepository,
)


def _question(db_session, course, user, title, active=datetime(2024, 1, 1)):
    question = db_models.ForumQuestion(
        course_id=course.id,
        user_id=user.id,
        title=title,
        description="details",
        last_activity_at=active,
    )
    db_session.add(question)
    db_session.commit()
    return question


def _answer(db_session, question, user, text="answer", upvotes=0, verified=False):
    answer = db_models.ForumAnswer(
        question_id=question.id,
        user_id=user.id,
        answer_text=text,
        upvotes=upvotes,
        is_verified=verified,
    )
    db_session.add(answer)
    db_session.commit()
    return answer


@pytest.fixture
def questions(db_session, free_course, student_user, other_student):
    older = _question(
        db_session, free_course, student_user, "Older", datetime(2024, 1, 1)
    )
    newer = _question(
        db_session, free_course, student_user, "Newer", datetime(2024, 2, 1)
    )
    _answer(db_session, older, other_student, upvotes=2)
    _answer(db_session, older, other_student, upvotes=3)
    return older, newer


class TestForumQuestionRepository:
    """Test cases for ForumQuestionRepository."""

    def test_course_listing_with_stats(self, db_session, free_course, questions):
        older, newer = questions
        repo = ForumQuestionRepository(db_session)

        rows = repo.get_by_course_with_stats(free_course.id)

        assert [(q.id, count, upvotes) for q, count, upvotes in rows] == [
            (newer.id, 0, 0),
            (older.id, 2, 5),
        ]

    def test_panel_listing_scoped_to_courses(
        self, db_session, free_course, paid_course, questions
    ):
        repo = ForumQuestionRepository(db_session)

        assert len(repo.get_for_courses_with_stats([free_course.id])) == 2
        assert repo.get_for_courses_with_stats([paid_course.id]) == []
        assert repo.get_for_courses_with_stats([]) == []
        assert len(repo.get_for_courses_with_stats(None)) == 2

    def test_count_by_course(self, db_session, free_course, questions):
        assert ForumQuestionRepository(db_session).count_by_course(free_course.id) == 2

    def test_delete_thread_removes_children(
        self, db_session, student_user, questions
    ):
        older, newer = questions
        answer_ids = ForumAnswerRepository(db_session).get_ids_by_question(older.id)
        db_session.add(
            db_models.ForumAnswerUpvote(
                answer_id=answer_ids[0], user_id=student_user.id
            )
        )
        db_session.add(
            db_models.ForumReply(
                question_id=older.id,
                answer_id=answer_ids[0],
                user_id=student_user.id,
                reply_text="thanks",
            )
        )
        db_session.commit()
        repo = ForumQuestionRepository(db_session)

        repo.delete_thread(older.id)
        db_session.commit()

        assert db_session.query(db_models.ForumQuestion).count() == 1
        assert db_session.query(db_models.ForumAnswer).count() == 0
        assert db_session.query(db_models.ForumAnswerUpvote).count() == 0
        assert db_session.query(db_models.ForumReply).count() == 0
        assert repo.get_by_id(newer.id) is not None


class TestForumAnswerRepository:
    """Test cases for answers and upvotes."""

    def test_verified_answer_first(
        self, db_session, student_user, other_student, free_course
    ):
        question = _question(db_session, free_course, student_user, "Order?")
        first = _answer(db_session, question, other_student, "first")
        verified = _answer(db_session, question, student_user, "best", verified=True)
        repo = ForumAnswerRepository(db_session)

        answers = repo.get_by_question(question.id)

        assert [a.id for a in answers] == [verified.id, first.id]

    def test_clear_verified_keeps_one(
        self, db_session, student_user, other_student, free_course
    ):
        question = _question(db_session, free_course, student_user, "Which?")
        a = _answer(db_session, question, other_student, verified=True)
        b = _answer(db_session, question, student_user, verified=True)
        repo = ForumAnswerRepository(db_session)

        repo.clear_verified(question.id, keep_answer_id=b.id)
        db_session.commit()
        db_session.refresh(a)
        db_session.refresh(b)

        assert a.is_verified is False
        assert b.is_verified is True

    def test_upvote_lookup(self, db_session, student_user, questions):
        older, _ = questions
        answer_ids = ForumAnswerRepository(db_session).get_ids_by_question(older.id)
        db_session.add(
            db_models.ForumAnswerUpvote(
                answer_id=answer_ids[1], user_id=student_user.id
            )
        )
        db_session.commit()
        repo = ForumAnswerUpvoteRepository(db_session)

        assert repo.get(answer_ids[1], student_user.id) is not None
        assert repo.get(answer_ids[0], student_user.id) is None
        assert repo.get_upvoted_answer_ids(student_user.id, answer_ids) == {
            answer_ids[1]
        }
