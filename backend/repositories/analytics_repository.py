"""
Analytics repository - aggregate queries for the admin and instructor
dashboards.

Read-only aggregations across users, courses, enrollments, exams and the
forum, so it does not extend BaseRepository; every method is static and
takes the session explicitly.
"""

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import case, func, literal_column
from sqlalchemy.orm import Session

from models.config import settings
from repositories.db_models import (
    Course,
    Enrollment,
    EnrollmentStatus,
    Exam,
    ExamProgress,
    User,
)


def _is_postgresql() -> bool:
    """Check if the database is PostgreSQL."""
    return settings.DATABASE_URL.startswith("postgresql")


def _format_month(column: Any) -> Any:
    """
    Format a datetime column as year-month string (YYYY-MM).

    Uses to_char for PostgreSQL and strftime for SQLite.
    """
    if _is_postgresql():
        return func.to_char(column, literal_column("'YYYY-MM'"))
    return func.strftime("%Y-%m", column)


class AnalyticsRepository:
    """Aggregations for dashboards."""

    @staticmethod
    def count_enrollments_by_status(db: Session) -> dict[str, int]:
        counts = {status.value: 0 for status in EnrollmentStatus}
        rows = (
            db.query(Enrollment.status, func.count(Enrollment.id))
            .group_by(Enrollment.status)
            .all()
        )
        for status, count in rows:
            counts[status.value] = count
        return counts

    @staticmethod
    def get_monthly_enrollment_counts(
        db: Session,
        since: datetime,
        course_ids: Optional[List[int]] = None,
    ) -> dict[str, int]:
        """
        Count new enrollments per month.

        Args:
            db: Database session
            since: Only enrollments created at or after this time
            course_ids: Restrict to these courses; None means every course

        Returns:
            {"YYYY-MM": count}
        """
        month = _format_month(Enrollment.created_at)
        query = db.query(month, func.count(Enrollment.id)).filter(
            Enrollment.created_at >= since
        )
        if course_ids is not None:
            if not course_ids:
                return {}
            query = query.filter(Enrollment.course_id.in_(course_ids))
        return {period: count for period, count in query.group_by(month).all()}

    @staticmethod
    def get_top_courses_by_enrollments(db: Session, limit: int = 5) -> list[dict]:
        """Courses with the most enrollments, ties broken by title."""
        enrollments = func.count(Enrollment.id).label("enrollments")
        rows = (
            db.query(Course.id, Course.title, enrollments)
            .join(Enrollment, Enrollment.course_id == Course.id)
            .group_by(Course.id, Course.title)
            .order_by(enrollments.desc(), Course.title)
            .limit(limit)
            .all()
        )
        return [
            {"course_id": course_id, "title": title, "enrollments": count}
            for course_id, title, count in rows
        ]

    @staticmethod
    def get_course_enrollment_stats(
        db: Session, course_ids: Optional[List[int]] = None
    ) -> dict[int, dict[str, int]]:
        """
        Enrollment, completion and active counts per course.

        Returns:
            {course_id: {"enrollments", "completed", "active"}}
        """
        query = db.query(
            Enrollment.course_id,
            func.count(Enrollment.id),
            func.sum(
                case((Enrollment.status == EnrollmentStatus.COMPLETED, 1), else_=0)
            ),
            func.sum(case((Enrollment.status == EnrollmentStatus.ACTIVE, 1), else_=0)),
        )
        if course_ids is not None:
            if not course_ids:
                return {}
            query = query.filter(Enrollment.course_id.in_(course_ids))
        return {
            course_id: {
                "enrollments": total,
                "completed": int(completed or 0),
                "active": int(active or 0),
            }
            for course_id, total, completed, active in query.group_by(
                Enrollment.course_id
            ).all()
        }

    @staticmethod
    def get_average_best_exam_score_by_course(db: Session) -> dict[int, float]:
        """
        Average of students' best exam scores per course.

        Only exams that were attempted at least once are counted.
        """
        rows = (
            db.query(Exam.course_id, func.avg(ExamProgress.best_score))
            .join(ExamProgress, ExamProgress.exam_id == Exam.id)
            .filter(ExamProgress.attempts > 0)
            .group_by(Exam.course_id)
            .all()
        )
        return {course_id: round(float(avg or 0.0), 2) for course_id, avg in rows}

    @staticmethod
    def get_courses_with_instructor(db: Session) -> list:
        """Return (course_id, title, status, instructor_name) for every course."""
        return (
            db.query(Course.id, Course.title, Course.status, User.name)
            .join(User, Course.instructor_id == User.id)
            .order_by(Course.title)
            .all()
        )

    @staticmethod
    def count_active_students(db: Session, course_ids: List[int]) -> int:
        """Distinct students with an active enrollment in any of the courses."""
        if not course_ids:
            return 0
        return (
            db.query(func.count(func.distinct(Enrollment.student_id)))
            .filter(
                Enrollment.course_id.in_(course_ids),
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
            .scalar()
            or 0
        )
