"""
Repositories for enrollments and the per-enrollment progress rows.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class EnrollmentRepository(BaseRepository[db_models.Enrollment]):
    """Repository for Enrollment entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Enrollment, db)

    def get_by_student_and_course(
        self, student_id: int, course_id: int
    ) -> Optional[db_models.Enrollment]:
        """
        Get the (unique) enrollment of a student in a course.

        Args:
            student_id: Student user ID
            course_id: Course ID

        Returns:
            Enrollment if one exists, whatever its status
        """
        return (
            self.db.query(db_models.Enrollment)
            .filter(
                db_models.Enrollment.student_id == student_id,
                db_models.Enrollment.course_id == course_id,
            )
            .first()
        )

    def get_by_student(self, student_id: int) -> List[db_models.Enrollment]:
        """Return a student's enrollments with course details, newest first."""
        return (
            self.db.query(db_models.Enrollment)
            .options(
                joinedload(db_models.Enrollment.course).joinedload(
                    db_models.Course.instructor
                )
            )
            .filter(db_models.Enrollment.student_id == student_id)
            .order_by(db_models.Enrollment.created_at.desc())
            .all()
        )

    def get_expired_active(self, now: datetime) -> List[db_models.Enrollment]:
        """
        Find active enrollments whose access window has passed.

        Args:
            now: Reference time (UTC)

        Returns:
            Enrollments to cancel
        """
        return (
            self.db.query(db_models.Enrollment)
            .filter(
                db_models.Enrollment.status == db_models.EnrollmentStatus.ACTIVE,
                db_models.Enrollment.expiry_date < now,
            )
            .all()
        )

    def get_by_courses(
        self,
        course_ids: List[int],
        skip: int = 0,
        limit: int = 100,
    ) -> List[db_models.Enrollment]:
        """Return enrollments in the given courses with student and course loaded."""
        if not course_ids:
            return []
        return (
            self.db.query(db_models.Enrollment)
            .options(
                joinedload(db_models.Enrollment.student),
                joinedload(db_models.Enrollment.course),
            )
            .filter(db_models.Enrollment.course_id.in_(course_ids))
            .order_by(db_models.Enrollment.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_course(self, course_id: int) -> List[db_models.Enrollment]:
        return (
            self.db.query(db_models.Enrollment)
            .filter(db_models.Enrollment.course_id == course_id)
            .all()
        )

    def count_by_course(self, course_id: int) -> int:
        return (
            self.db.query(func.count(db_models.Enrollment.id))
            .filter(db_models.Enrollment.course_id == course_id)
            .scalar()
            or 0
        )


class CompletedLessonRepository(BaseRepository[db_models.CompletedLesson]):
    """Repository for lessons an enrollment has completed."""

    def __init__(self, db: Session):
        super().__init__(db_models.CompletedLesson, db)

    def get(
        self, enrollment_id: int, lesson_id: int
    ) -> Optional[db_models.CompletedLesson]:
        return (
            self.db.query(db_models.CompletedLesson)
            .filter(
                db_models.CompletedLesson.enrollment_id == enrollment_id,
                db_models.CompletedLesson.lesson_id == lesson_id,
            )
            .first()
        )

    def get_lesson_ids(self, enrollment_id: int) -> List[int]:
        return [
            row[0]
            for row in self.db.query(db_models.CompletedLesson.lesson_id)
            .filter(db_models.CompletedLesson.enrollment_id == enrollment_id)
            .order_by(db_models.CompletedLesson.lesson_id)
            .all()
        ]

    def count_for_enrollment(self, enrollment_id: int) -> int:
        """Completed lessons that still exist in the course."""
        return (
            self.db.query(func.count(db_models.CompletedLesson.id))
            .join(
                db_models.Lesson,
                db_models.CompletedLesson.lesson_id == db_models.Lesson.id,
            )
            .filter(db_models.CompletedLesson.enrollment_id == enrollment_id)
            .scalar()
            or 0
        )

    def get_lesson_ids_for_student(self, student_id: int) -> List[int]:
        """Distinct completed lesson IDs across all of a student's enrollments."""
        return [
            row[0]
            for row in self.db.query(db_models.CompletedLesson.lesson_id)
            .join(
                db_models.Enrollment,
                db_models.CompletedLesson.enrollment_id == db_models.Enrollment.id,
            )
            .filter(db_models.Enrollment.student_id == student_id)
            .distinct()
            .order_by(db_models.CompletedLesson.lesson_id)
            .all()
        ]


class LessonProgressRepository(BaseRepository[db_models.LessonProgress]):
    """Repository for watch progress of individual lessons."""

    def __init__(self, db: Session):
        super().__init__(db_models.LessonProgress, db)

    def get(
        self, enrollment_id: int, lesson_id: int
    ) -> Optional[db_models.LessonProgress]:
        return (
            self.db.query(db_models.LessonProgress)
            .filter(
                db_models.LessonProgress.enrollment_id == enrollment_id,
                db_models.LessonProgress.lesson_id == lesson_id,
            )
            .first()
        )


class ExamProgressRepository(BaseRepository[db_models.ExamProgress]):
    """Repository for per-enrollment exam progress."""

    def __init__(self, db: Session):
        super().__init__(db_models.ExamProgress, db)

    def get(self, enrollment_id: int, exam_id: int) -> Optional[db_models.ExamProgress]:
        return (
            self.db.query(db_models.ExamProgress)
            .filter(
                db_models.ExamProgress.enrollment_id == enrollment_id,
                db_models.ExamProgress.exam_id == exam_id,
            )
            .first()
        )

    def get_for_enrollment(self, enrollment_id: int) -> List[db_models.ExamProgress]:
        return (
            self.db.query(db_models.ExamProgress)
            .filter(db_models.ExamProgress.enrollment_id == enrollment_id)
            .order_by(db_models.ExamProgress.exam_id)
            .all()
        )

    def count_completed(self, enrollment_id: int) -> int:
        return (
            self.db.query(func.count(db_models.ExamProgress.id))
            .filter(
                db_models.ExamProgress.enrollment_id == enrollment_id,
                db_models.ExamProgress.is_completed == True,  # noqa: E712
            )
            .scalar()
            or 0
        )
