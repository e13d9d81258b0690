"""
Instructor Service

Dashboard, earnings and student views for an instructor's own courses.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import month_label, utc_now
from repositories.analytics_repository import AnalyticsRepository
from repositories.course_repository import CourseRepository, LessonRepository
from repositories.enrollment_repository import (
    CompletedLessonRepository,
    EnrollmentRepository,
    ExamProgressRepository,
)
from repositories.exam_repository import ExamRepository
from repositories.payment_repository import PaymentRepository
from services.analytics_service import (
    AnalyticsService,
    build_enrollment_chart,
    to_transaction,
)


class InstructorService:
    """Service for instructor analytics."""

    @staticmethod
    def get_dashboard(
        db: Session, instructor: db_models.User
    ) -> schemas.InstructorDashboard:
        course_repo = CourseRepository(db)
        counts = course_repo.count_by_status(instructor_id=instructor.id)
        course_ids = course_repo.get_ids_by_instructor(instructor.id)

        return schemas.InstructorDashboard(
            total_courses=sum(counts.values()),
            approved_courses=counts[db_models.CourseStatus.APPROVED.value],
            pending_courses=counts[db_models.CourseStatus.PENDING_APPROVAL.value],
            active_students=AnalyticsRepository.count_active_students(db, course_ids),
            enrollment_chart=build_enrollment_chart(db, course_ids),
        )

    @staticmethod
    def get_earnings(
        db: Session, instructor: db_models.User, year: Optional[int] = None
    ) -> schemas.InstructorEarnings:
        """
        Earnings of one year by month, with the most recent sale.

        Args:
            db: Database session
            instructor: Instructor
            year: Calendar year (defaults to the current one)
        """
        year = year or utc_now().year
        repo = PaymentRepository(db)
        monthly_totals = repo.get_monthly_totals(year, instructor_id=instructor.id)

        monthly = [
            schemas.MonthlyEarning(
                month=month,
                label=month_label(year, month),
                amount=round(monthly_totals.get(month, (0.0, 0.0))[1], 2),
            )
            for month in range(1, 13)
        ]
        latest = repo.get_latest_for_instructor(instructor.id)
        return schemas.InstructorEarnings(
            year=year,
            total=round(sum(m.amount for m in monthly), 2),
            monthly=monthly,
            last_payout=to_transaction(latest) if latest else None,
        )

    @staticmethod
    def get_payouts(
        db: Session, instructor: db_models.User, skip: int = 0, limit: int = 50
    ) -> schemas.TransactionListResponse:
        return AnalyticsService.get_transactions(
            db, skip=skip, limit=limit, instructor_id=instructor.id
        )

    @staticmethod
    def get_course_analytics(
        db: Session, instructor: db_models.User
    ) -> List[schemas.CourseAnalytics]:
        courses = CourseRepository(db).get_by_instructor(instructor.id)
        course_ids = [c.id for c in courses]
        stats = AnalyticsRepository.get_course_enrollment_stats(db, course_ids)
        revenue = PaymentRepository(db).get_revenue_by_course(course_ids)

        items = []
        for course in courses:
            course_stats = stats.get(course.id, {})
            students = course_stats.get("enrollments", 0)
            completed = course_stats.get("completed", 0)
            items.append(
                schemas.CourseAnalytics(
                    course_id=course.id,
                    title=course.title,
                    status=course.status,
                    total_students=students,
                    completed=completed,
                    revenue=round(revenue.get(course.id, 0.0), 2),
                    completion_rate=(
                        round(completed / students * 100, 2) if students else 0.0
                    ),
                )
            )
        return items

    @staticmethod
    def _student_fields(enrollment: db_models.Enrollment) -> dict:
        return {
            "enrollment_id": enrollment.id,
            "student_id": enrollment.student_id,
            "student_name": enrollment.student.name,
            "student_email": enrollment.student.email,
            "course_id": enrollment.course_id,
            "course_title": enrollment.course.title,
            "status": enrollment.status,
            "progress": enrollment.progress or 0,
            "enrolled_at": enrollment.created_at,
            "expiry_date": enrollment.expiry_date,
        }

    @staticmethod
    def get_students(
        db: Session, instructor: db_models.User, skip: int = 0, limit: int = 100
    ) -> List[schemas.InstructorStudent]:
        course_ids = CourseRepository(db).get_ids_by_instructor(instructor.id)
        enrollments = EnrollmentRepository(db).get_by_courses(
            course_ids, skip=skip, limit=limit
        )
        return [
            schemas.InstructorStudent(**InstructorService._student_fields(e))
            for e in enrollments
        ]

    @staticmethod
    def get_students_progress(
        db: Session, instructor: db_models.User, skip: int = 0, limit: int = 100
    ) -> List[schemas.StudentProgress]:
        """Enrollments in own courses with lesson and exam completion counts."""
        course_ids = CourseRepository(db).get_ids_by_instructor(instructor.id)
        enrollments = EnrollmentRepository(db).get_by_courses(
            course_ids, skip=skip, limit=limit
        )

        lesson_repo = LessonRepository(db)
        exam_repo = ExamRepository(db)
        completed_repo = CompletedLessonRepository(db)
        exam_progress_repo = ExamProgressRepository(db)
        lesson_totals: dict[int, int] = {}
        exam_totals: dict[int, int] = {}

        items = []
        for enrollment in enrollments:
            course_id = enrollment.course_id
            if course_id not in lesson_totals:
                lesson_totals[course_id] = lesson_repo.count_by_course(course_id)
                exam_totals[course_id] = exam_repo.count_by_course(course_id)
            items.append(
                schemas.StudentProgress(
                    **InstructorService._student_fields(enrollment),
                    completed_lessons=completed_repo.count_for_enrollment(
                        enrollment.id
                    ),
                    total_lessons=lesson_totals[course_id],
                    completed_exams=exam_progress_repo.count_completed(enrollment.id),
                    total_exams=exam_totals[course_id],
                )
            )
        return items
