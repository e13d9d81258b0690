"""
Unit tests for ExamService: authoring, scoring and attempts.
"""

from unittest.mock import patch

import pytest

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    InvalidExamException,
    MaxExamAttemptsException,
    NotCourseOwnerException,
    NotEnrolledException,
)
from services.email_service import EmailService
from services.exam_service import ExamService, score_attempt, validate_questions
from services.lesson_service import LessonService
from tests.conftest import make_enrollment


def _question(text="Capital of France?", options=None, answer="Paris", marks=1):
    return schemas.ExamQuestionCreate(
        question_text=text,
        options=options if options is not None else ["Paris", "Rome"],
        correct_answer=answer,
        marks=marks,
    )


def _answers(exam: db_models.Exam, correct: bool = True) -> schemas.ExamSubmit:
    answers = []
    for question in exam.questions:
        if correct:
            option = question.correct_answer
        else:
            option = next(o for o in question.options if o != question.correct_answer)
        answers.append(
            schemas.ExamAnswer(question_id=question.id, selected_option=option)
        )
    return schemas.ExamSubmit(answers=answers)


class TestValidateQuestions:
    """Tests for validate_questions"""

    def test_valid_questions_pass(self):
        validate_questions(
            [_question(), _question(text="2 + 2?", options=["4", "5"], answer="4")]
        )

    def test_empty_exam_is_rejected(self):
        with pytest.raises(InvalidExamException):
            validate_questions([])

    def test_answer_must_be_an_option(self):
        with pytest.raises(InvalidExamException) as exc:
            validate_questions([_question(), _question(answer="Berlin")])

        assert "Question 2" in exc.value.message

    @pytest.mark.parametrize("options", [["Paris"], ["Paris", " "]])
    def test_options_need_two_values(self, options):
        with pytest.raises(InvalidExamException):
            validate_questions([_question(options=options)])


class TestScoreAttempt:
    """Tests for score_attempt"""

    def test_weighted_by_marks(self, course_exam):
        first, second = course_exam.questions
        second.marks = 3
        answers = [
            schemas.ExamAnswer(question_id=second.id, selected_option="language")
        ]

        assert score_attempt(course_exam.questions, answers) == 75

    def test_unanswered_scores_zero(self, course_exam):
        assert score_attempt(course_exam.questions, []) == 0

    def test_no_marks_scores_zero(self):
        assert score_attempt([], []) == 0


class TestExamAuthoring:
    """Tests for creating and editing exams."""

    def test_create_exam(self, db_session, instructor_user, free_course):
        data = schemas.ExamCreate(
            title="Final", duration=30, questions=[_question(marks=2), _question()]
        )

        exam = ExamService.create_exam(
            db_session, free_course.id, data, instructor_user
        )

        assert exam.total_marks == 3
        assert [q.position for q in exam.questions] == [0, 1]

    def test_other_instructor_cannot_create(
        self, db_session, other_instructor, free_course
    ):
        data = schemas.ExamCreate(title="Final", duration=30, questions=[_question()])

        with pytest.raises(NotCourseOwnerException):
            ExamService.create_exam(db_session, free_course.id, data, other_instructor)

    def test_update_replaces_questions(
        self, db_session, instructor_user, course_exam
    ):
        data = schemas.ExamUpdate(title="Renamed", questions=[_question()])

        exam = ExamService.update_exam(
            db_session, course_exam.id, data, instructor_user
        )

        assert exam.title == "Renamed"
        assert len(exam.questions) == 1
        assert db_session.query(db_models.ExamQuestion).count() == 1

    def test_adding_exam_lowers_progress(
        self, db_session, instructor_user, student_user, course_lessons, enrollment
    ):
        LessonService.mark_watched(db_session, course_lessons[0].id, student_user)
        data = schemas.ExamCreate(title="Final", duration=30, questions=[_question()])

        ExamService.create_exam(db_session, enrollment.course_id, data, instructor_user)

        db_session.refresh(enrollment)
        assert enrollment.progress == 33

    def test_student_view_hides_answers(
        self, db_session, student_user, instructor_user, course_exam, enrollment
    ):
        student_view = ExamService.get_exam(db_session, course_exam.id, student_user)
        owner_view = ExamService.get_exam(db_session, course_exam.id, instructor_user)

        assert isinstance(student_view, schemas.ExamDetail)
        assert "correct_answer" not in student_view.model_dump()["questions"][0]
        assert owner_view.questions[0].correct_answer == "4"

    def test_unenrolled_student_cannot_view(
        self, db_session, other_student, course_exam
    ):
        with pytest.raises(NotEnrolledException):
            ExamService.get_exam(db_session, course_exam.id, other_student)


class TestSubmitExam:
    """Tests for ExamService.submit_exam"""

    def test_passing_attempt(self, db_session, student_user, course_exam, enrollment):
        result = ExamService.submit_exam(
            db_session, course_exam.id, _answers(course_exam), student_user
        )

        assert result.score == 100
        assert result.passed is True
        assert result.attempt_number == 1
        assert result.attempts_left == settings.EXAM_MAX_ATTEMPTS - 1
        assert result.is_completed is True
        # Exam is the only item in the course
        assert result.course_progress == 100
        assert result.enrollment_status == db_models.EnrollmentStatus.COMPLETED
        assert result.certificate is not None

    def test_failing_attempt_keeps_progress(
        self, db_session, student_user, course_exam, enrollment
    ):
        result = ExamService.submit_exam(
            db_session,
            course_exam.id,
            _answers(course_exam, correct=False),
            student_user,
        )

        assert result.score == 0
        assert result.passed is False
        assert result.is_completed is False
        assert result.course_progress == 0

    def test_best_score_is_kept(
        self, db_session, student_user, course_exam, enrollment
    ):
        ExamService.submit_exam(
            db_session, course_exam.id, _answers(course_exam), student_user
        )
        second = ExamService.submit_exam(
            db_session,
            course_exam.id,
            _answers(course_exam, correct=False),
            student_user,
        )

        assert second.score == 0
        assert second.best_score == 100
        assert second.is_completed is True

    def test_attempt_limit(self, db_session, student_user, course_exam, enrollment):
        for _ in range(settings.EXAM_MAX_ATTEMPTS):
            ExamService.submit_exam(
                db_session,
                course_exam.id,
                _answers(course_exam, correct=False),
                student_user,
            )

        with pytest.raises(MaxExamAttemptsException):
            ExamService.submit_exam(
                db_session, course_exam.id, _answers(course_exam), student_user
            )
        assert db_session.query(db_models.ExamResult).count() == (
            settings.EXAM_MAX_ATTEMPTS
        )

    def test_requires_current_enrollment(
        self, db_session, student_user, free_course, course_exam
    ):
        make_enrollment(db_session, student_user, free_course, expires_in_days=-1)

        with pytest.raises(NotEnrolledException):
            ExamService.submit_exam(
                db_session, course_exam.id, _answers(course_exam), student_user
            )

    def test_lessons_and_exam_complete_course(
        self, db_session, student_user, course_lessons, course_exam, enrollment
    ):
        with patch.object(EmailService, "send_course_completion") as send:
            for lesson in course_lessons:
                LessonService.mark_watched(db_session, lesson.id, student_user)
            send.assert_not_called()

            result = ExamService.submit_exam(
                db_session, course_exam.id, _answers(course_exam), student_user
            )

        assert result.course_progress == 100
        assert result.enrollment_status == db_models.EnrollmentStatus.COMPLETED
        send.assert_called_once()
        assert send.call_args.kwargs["to_email"] == student_user.email
        assert send.call_args.kwargs["certificate_path"] == result.certificate


class TestExamReadback:
    """Tests for results and per-course exam progress."""

    def test_result_before_any_attempt(
        self, db_session, student_user, course_exam, enrollment
    ):
        result = ExamService.get_result(db_session, course_exam.id, student_user)

        assert result.score == 0
        assert result.attempt_number == 0
        assert result.attempts_left == settings.EXAM_MAX_ATTEMPTS

    def test_progress_lists_unattempted_exams(
        self, db_session, student_user, course_exam, enrollment
    ):
        items = ExamService.get_progress(db_session, enrollment.course_id, student_user)

        assert len(items) == 1
        assert items[0].exam_title == "Basics Quiz"
        assert items[0].attempts == 0

    def test_progress_requires_enrollment(
        self, db_session, other_student, free_course, course_exam
    ):
        with pytest.raises(NotEnrolledException):
            ExamService.get_progress(db_session, free_course.id, other_student)

    def test_instructor_results(
        self,
        db_session,
        instructor_user,
        student_user,
        course_exam,
        enrollment,
    ):
        ExamService.submit_exam(
            db_session,
            course_exam.id,
            _answers(course_exam, correct=False),
            student_user,
        )
        ExamService.submit_exam(
            db_session, course_exam.id, _answers(course_exam), student_user
        )

        rows = ExamService.get_exam_results(db_session, course_exam.id, instructor_user)

        assert len(rows) == 1
        assert rows[0].student_email == "student@example.com"
        assert rows[0].best_score == 100
        assert rows[0].attempts == 2
        assert rows[0].passed is True
