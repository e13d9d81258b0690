"""
Repositories for exams and submitted exam attempts.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

import repositories.db_models as db_models
from .base import BaseRepository


class ExamRepository(BaseRepository[db_models.Exam]):
    """Repository for Exam entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Exam, db)

    def get_with_questions(self, exam_id: int) -> Optional[db_models.Exam]:
        return (
            self.db.query(db_models.Exam)
            .options(selectinload(db_models.Exam.questions))
            .filter(db_models.Exam.id == exam_id)
            .first()
        )

    def get_by_course(self, course_id: int) -> List[db_models.Exam]:
        """Return a course's exams with their questions, oldest first."""
        return (
            self.db.query(db_models.Exam)
            .options(selectinload(db_models.Exam.questions))
            .filter(db_models.Exam.course_id == course_id)
            .order_by(db_models.Exam.id)
            .all()
        )

    def count_by_course(self, course_id: int) -> int:
        return (
            self.db.query(func.count(db_models.Exam.id))
            .filter(db_models.Exam.course_id == course_id)
            .scalar()
            or 0
        )


class ExamResultRepository(BaseRepository[db_models.ExamResult]):
    """Repository for exam attempt rows."""

    def __init__(self, db: Session):
        super().__init__(db_models.ExamResult, db)

    def count_attempts(self, exam_id: int, student_id: int) -> int:
        return (
            self.db.query(func.count(db_models.ExamResult.id))
            .filter(
                db_models.ExamResult.exam_id == exam_id,
                db_models.ExamResult.student_id == student_id,
            )
            .scalar()
            or 0
        )

    def get_latest(
        self, exam_id: int, student_id: int
    ) -> Optional[db_models.ExamResult]:
        """Most recent attempt of a student at an exam."""
        return (
            self.db.query(db_models.ExamResult)
            .filter(
                db_models.ExamResult.exam_id == exam_id,
                db_models.ExamResult.student_id == student_id,
            )
            .order_by(
                db_models.ExamResult.attempt_number.desc(),
                db_models.ExamResult.id.desc(),
            )
            .first()
        )

    def get_best_by_student(self, exam_id: int) -> list:
        """
        Best score and attempt count per student for one exam.

        Returns:
            List of (student_id, student_name, student_email, best_score,
            attempts, last_attempt_at), best score first
        """
        best = func.max(db_models.ExamResult.score).label("best_score")
        return (
            self.db.query(
                db_models.ExamResult.student_id,
                db_models.User.name,
                db_models.User.email,
                best,
                func.count(db_models.ExamResult.id),
                func.max(db_models.ExamResult.created_at),
            )
            .join(db_models.User, db_models.ExamResult.student_id == db_models.User.id)
            .filter(db_models.ExamResult.exam_id == exam_id)
            .group_by(
                db_models.ExamResult.student_id,
                db_models.User.name,
                db_models.User.email,
            )
            .order_by(best.desc(), db_models.User.name)
            .all()
        )
