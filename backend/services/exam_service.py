"""
Exam Service

Exam authoring, server-side scoring of attempts, and per-student exam
progress.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import (
    CourseNotFoundException,
    ExamNotFoundException,
    InvalidExamException,
    MaxExamAttemptsException,
    NotEnrolledException,
)
from repositories.enrollment_repository import (
    EnrollmentRepository,
    ExamProgressRepository,
)
from repositories.exam_repository import ExamRepository, ExamResultRepository
from services.course_service import CourseService
from services.progress_service import ProgressService


def validate_questions(questions: List[schemas.ExamQuestionCreate]) -> None:
    """
    Check an exam's questions, naming the first offending one.

    Raises:
        InvalidExamException: If there are no questions, a question has
            no text or fewer than two options, or its correct answer is not
            one of its options
    """
    if not questions:
        raise InvalidExamException("An exam needs at least one question")
    for number, question in enumerate(questions, start=1):
        options = [o.strip() for o in question.options]
        if (
            not question.question_text.strip()
            or len(options) < 2
            or any(not o for o in options)
        ):
            raise InvalidExamException(f"Question {number} is invalid")
        if question.correct_answer.strip() not in options:
            raise InvalidExamException(
                f"Question {number}: Correct answer must be one of the options"
            )


def score_attempt(
    questions: List[db_models.ExamQuestion], answers: List[schemas.ExamAnswer]
) -> int:
    """Percent of marks earned, rounded; unanswered questions earn nothing."""
    selected = {a.question_id: a.selected_option for a in answers}
    total = sum(q.marks or 0 for q in questions)
    if total == 0:
        return 0
    earned = sum(
        q.marks or 0 for q in questions if selected.get(q.id) == q.correct_answer
    )
    return round(100 * earned / total)


class ExamService:
    """Service for exam business logic."""

    @staticmethod
    def _build_questions(
        questions: List[schemas.ExamQuestionCreate],
    ) -> List[db_models.ExamQuestion]:
        return [
            db_models.ExamQuestion(
                question_text=sanitize_plain_text(q.question_text),
                options=[o.strip() for o in q.options],
                correct_answer=q.correct_answer.strip(),
                marks=q.marks,
                position=position,
            )
            for position, q in enumerate(questions)
        ]

    @staticmethod
    def to_summary(exam: db_models.Exam) -> schemas.ExamSummary:
        return schemas.ExamSummary(
            id=exam.id,
            course_id=exam.course_id,
            title=exam.title,
            duration=exam.duration,
            question_count=len(exam.questions),
            total_marks=exam.total_marks,
        )

    @staticmethod
    def to_detail(exam: db_models.Exam, with_answers: bool):
        summary = ExamService.to_summary(exam).model_dump()
        if with_answers:
            return schemas.ExamDetailWithAnswers(
                **summary,
                questions=[
                    schemas.ExamQuestionWithAnswer.model_validate(q)
                    for q in exam.questions
                ],
            )
        return schemas.ExamDetail(
            **summary,
            questions=[schemas.ExamQuestion.model_validate(q) for q in exam.questions],
        )

    @staticmethod
    def _get_exam(db: Session, exam_id: int) -> db_models.Exam:
        exam = ExamRepository(db).get_with_questions(exam_id)
        if exam is None:
            raise ExamNotFoundException(exam_id)
        return exam

    @staticmethod
    def _get_owned_exam(
        db: Session, exam_id: int, user: db_models.User
    ) -> db_models.Exam:
        exam = ExamService._get_exam(db, exam_id)
        CourseService.get_owned_course(db, exam.course_id, user)
        return exam

    # Instructor operations

    @staticmethod
    def list_course_exams_for_owner(
        db: Session, course_id: int, user: db_models.User
    ) -> List[schemas.ExamDetailWithAnswers]:
        CourseService.get_owned_course(db, course_id, user)
        return [
            ExamService.to_detail(exam, with_answers=True)
            for exam in ExamRepository(db).get_by_course(course_id)
        ]

    @staticmethod
    def create_exam(
        db: Session,
        course_id: int,
        data: schemas.ExamCreate,
        user: db_models.User,
    ) -> db_models.Exam:
        """
        Add an exam to an owned course.

        Raises:
            InvalidExamException: If a question is malformed
        """
        CourseService.get_owned_course(db, course_id, user)
        validate_questions(data.questions)

        exam = db_models.Exam(
            course_id=course_id,
            title=sanitize_plain_text(data.title),
            duration=data.duration,
        )
        exam.questions = ExamService._build_questions(data.questions)
        repo = ExamRepository(db)
        repo.add(exam)
        newly_completed = ProgressService.recalculate_course(db, course_id)
        repo.commit()
        ProgressService.notify_completed(newly_completed)
        repo.refresh(exam)
        logger.info(f"Exam {exam.id} created for course {course_id}")
        return exam

    @staticmethod
    def update_exam(
        db: Session,
        exam_id: int,
        data: schemas.ExamUpdate,
        user: db_models.User,
    ) -> db_models.Exam:
        """Update an exam; a given question list replaces the old one."""
        exam = ExamService._get_owned_exam(db, exam_id, user)
        if data.title is not None:
            exam.title = sanitize_plain_text(data.title)
        if data.duration is not None:
            exam.duration = data.duration
        if data.questions is not None:
            validate_questions(data.questions)
            exam.questions = ExamService._build_questions(data.questions)

        repo = ExamRepository(db)
        repo.commit()
        repo.refresh(exam)
        return exam

    @staticmethod
    def delete_exam(db: Session, exam_id: int, user: db_models.User) -> None:
        """Delete an exam with its results and progress rows."""
        exam = ExamService._get_owned_exam(db, exam_id, user)
        course_id = exam.course_id
        repo = ExamRepository(db)
        db.delete(exam)
        newly_completed = ProgressService.recalculate_course(db, course_id)
        repo.commit()
        ProgressService.notify_completed(newly_completed)
        logger.info(f"Exam {exam_id} deleted by user {user.id}")

    @staticmethod
    def get_exam_results(
        db: Session, exam_id: int, user: db_models.User
    ) -> List[schemas.ExamStudentResult]:
        """Per student best score for an owned exam, best first."""
        ExamService._get_owned_exam(db, exam_id, user)
        rows = ExamResultRepository(db).get_best_by_student(exam_id)
        return [
            schemas.ExamStudentResult(
                student_id=student_id,
                student_name=name,
                student_email=email,
                best_score=best or 0,
                attempts=attempts,
                passed=(best or 0) >= settings.EXAM_PASS_SCORE,
                last_attempt_at=last_at,
            )
            for student_id, name, email, best, attempts, last_at in rows
        ]

    # Student operations

    @staticmethod
    def list_course_exams(
        db: Session, course_id: int, viewer: db_models.User
    ) -> List[schemas.ExamSummary]:
        course = CourseService.get_course_or_raise(db, course_id)
        if course.status != db_models.CourseStatus.APPROVED and not (
            CourseService.can_manage(course, viewer)
        ):
            raise CourseNotFoundException(course_id)
        return [
            ExamService.to_summary(exam)
            for exam in ExamRepository(db).get_by_course(course_id)
        ]

    @staticmethod
    def get_exam(db: Session, exam_id: int, viewer: db_models.User):
        """
        Exam with its questions.

        The course's instructor and admins see correct answers; students
        need a current enrollment and never see them.

        Raises:
            ExamNotFoundException: If the exam does not exist
            NotEnrolledException: If a student is not enrolled
        """
        exam = ExamService._get_exam(db, exam_id)
        course = CourseService.get_course_or_raise(db, exam.course_id)
        if CourseService.can_manage(course, viewer):
            return ExamService.to_detail(exam, with_answers=True)

        ProgressService.require_current_enrollment(db, viewer.id, exam.course_id)
        return ExamService.to_detail(exam, with_answers=False)

    @staticmethod
    def submit_exam(
        db: Session,
        exam_id: int,
        data: schemas.ExamSubmit,
        student: db_models.User,
    ) -> schemas.ExamSubmitResponse:
        """
        Score an attempt and update exam and course progress.

        Args:
            db: Database session
            exam_id: Exam being taken
            data: Selected option per question
            student: Student taking the exam

        Returns:
            Score, attempt bookkeeping and the resulting course progress

        Raises:
            ExamNotFoundException: If the exam does not exist
            NotEnrolledException: If the student has no current enrollment
            MaxExamAttemptsException: If all attempts are used
        """
        exam = ExamService._get_exam(db, exam_id)
        enrollment = ProgressService.require_current_enrollment(
            db, student.id, exam.course_id
        )

        result_repo = ExamResultRepository(db)
        previous = result_repo.count_attempts(exam.id, student.id)
        if previous >= settings.EXAM_MAX_ATTEMPTS:
            raise MaxExamAttemptsException()

        score = score_attempt(exam.questions, data.answers)
        passed = score >= settings.EXAM_PASS_SCORE
        attempt_number = previous + 1

        result_repo.add(
            db_models.ExamResult(
                exam_id=exam.id,
                student_id=student.id,
                answers=[a.model_dump() for a in data.answers],
                score=score,
                attempt_number=attempt_number,
            )
        )

        progress_repo = ExamProgressRepository(db)
        progress = progress_repo.get(enrollment.id, exam.id)
        if progress is None:
            progress = db_models.ExamProgress(
                enrollment_id=enrollment.id,
                exam_id=exam.id,
                attempts=0,
                best_score=0,
                is_completed=False,
            )
            progress_repo.add(progress)
        progress.attempts = attempt_number
        progress.best_score = max(progress.best_score or 0, score)
        progress.last_attempt_at = utc_now()
        progress.is_completed = bool(progress.is_completed) or passed
        db.flush()

        just_completed = ProgressService.recalculate(db, enrollment)
        result_repo.commit()
        if just_completed:
            ProgressService.notify_completed([enrollment])
        logger.info(
            f"Exam {exam.id} attempt {attempt_number} by student {student.id}: "
            f"score={score}"
        )

        return schemas.ExamSubmitResponse(
            score=score,
            passed=passed,
            attempt_number=attempt_number,
            attempts_left=max(0, settings.EXAM_MAX_ATTEMPTS - attempt_number),
            best_score=progress.best_score,
            is_completed=progress.is_completed,
            course_progress=enrollment.progress,
            enrollment_status=enrollment.status,
            certificate=enrollment.certificate,
        )

    @staticmethod
    def _get_enrollment(
        db: Session, student_id: int, course_id: int
    ) -> Optional[db_models.Enrollment]:
        return EnrollmentRepository(db).get_by_student_and_course(
            student_id, course_id
        )

    @staticmethod
    def get_result(
        db: Session, exam_id: int, student: db_models.User
    ) -> schemas.ExamResultResponse:
        """Latest attempt and best score; zeros when never attempted."""
        exam = ExamService._get_exam(db, exam_id)
        result_repo = ExamResultRepository(db)
        latest = result_repo.get_latest(exam.id, student.id)
        attempts = result_repo.count_attempts(exam.id, student.id)

        progress = None
        enrollment = ExamService._get_enrollment(db, student.id, exam.course_id)
        if enrollment is not None:
            progress = ExamProgressRepository(db).get(enrollment.id, exam.id)

        return schemas.ExamResultResponse(
            score=latest.score if latest else 0,
            attempt_number=latest.attempt_number if latest else 0,
            best_score=progress.best_score if progress else 0,
            is_completed=bool(progress.is_completed) if progress else False,
            attempts_left=max(0, settings.EXAM_MAX_ATTEMPTS - attempts),
        )

    @staticmethod
    def get_progress(
        db: Session, course_id: int, student: db_models.User
    ) -> List[schemas.ExamProgress]:
        """
        Progress for every exam of a course, including unattempted ones.

        Raises:
            NotEnrolledException: If the student was never enrolled
        """
        enrollment = ExamService._get_enrollment(db, student.id, course_id)
        if enrollment is None:
            raise NotEnrolledException()

        rows = {
            row.exam_id: row
            for row in ExamProgressRepository(db).get_for_enrollment(enrollment.id)
        }
        items = []
        for exam in ExamRepository(db).get_by_course(course_id):
            row = rows.get(exam.id)
            items.append(
                schemas.ExamProgress(
                    exam_id=exam.id,
                    exam_title=exam.title,
                    attempts=row.attempts if row else 0,
                    best_score=row.best_score if row else 0,
                    is_completed=bool(row.is_completed) if row else False,
                    last_attempt_at=row.last_attempt_at if row else None,
                )
            )
        return items
