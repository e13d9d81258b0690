"""
Analytics Service - Business logic for the admin dashboards.

Counts, revenue split between instructors and the platform, enrollment
trends and per-course performance. Figures are computed on every request
from completed payments and enrollment rows.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import month_label, recent_months, utc_now
from repositories.analytics_repository import AnalyticsRepository
from repositories.course_repository import CourseRepository
from repositories.forum_report_repository import ForumReportRepository
from repositories.payment_repository import PaymentRepository
from repositories.user_repository import UserRepository

CHART_MONTHS = 6
TOP_COURSES = 5


def build_enrollment_chart(
    db: Session,
    course_ids: Optional[List[int]] = None,
    months: int = CHART_MONTHS,
    now: Optional[datetime] = None,
) -> schemas.ChartSeries:
    """
    New enrollments per month for the last `months` months, oldest first.

    Args:
        db: Database session
        course_ids: Restrict to these courses; None means every course
        months: Number of months, the current one included
        now: Reference time (defaults to now)

    Returns:
        Labels such as "Mar 2025" with zero-filled counts
    """
    periods = recent_months(months, now)
    first_year, first_month = periods[0]
    since = datetime(first_year, first_month, 1)
    counts = AnalyticsRepository.get_monthly_enrollment_counts(
        db, since, course_ids
    )
    return schemas.ChartSeries(
        labels=[month_label(y, m) for y, m in periods],
        values=[counts.get(f"{y:04d}-{m:02d}", 0) for y, m in periods],
    )


def growth_percent(values: List[int]) -> float:
    """Change of the last value against the one before, in percent."""
    if len(values) < 2:
        return 0.0
    previous, current = values[-2], values[-1]
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)


def to_transaction(payment: db_models.Payment) -> schemas.Transaction:
    return schemas.Transaction(
        id=payment.id,
        student_name=payment.student.name if payment.student else "",
        instructor_name=payment.instructor.name if payment.instructor else "",
        course_id=payment.course_id,
        course_title=payment.course.title if payment.course else "",
        amount=payment.amount,
        platform_commission=payment.platform_commission,
        instructor_earning=payment.instructor_earning,
        status=payment.status,
        payment_id=payment.payment_id,
        order_id=payment.order_id,
        payment_date=payment.payment_date,
        payment_method=payment.payment_method,
    )


class AnalyticsService:
    """Service for admin analytics."""

    @staticmethod
    def get_dashboard(db: Session) -> schemas.AdminDashboard:
        users_by_role = UserRepository(db).count_by_role()
        courses_by_status = CourseRepository(db).count_by_status()
        enrollments_by_status = AnalyticsRepository.count_enrollments_by_status(db)
        revenue, _ = PaymentRepository(db).get_totals()

        return schemas.AdminDashboard(
            users_by_role=users_by_role,
            courses_by_status=courses_by_status,
            enrollments_by_status=enrollments_by_status,
            total_users=sum(users_by_role.values()),
            total_courses=sum(courses_by_status.values()),
            total_enrollments=sum(enrollments_by_status.values()),
            total_revenue=round(revenue, 2),
            pending_reports=ForumReportRepository(db).count_pending(),
        )

    @staticmethod
    def get_revenue(db: Session, year: Optional[int] = None) -> schemas.RevenueReport:
        """
        Revenue of one year split into instructor earnings and commission.

        Args:
            db: Database session
            year: Calendar year (defaults to the current one)

        Returns:
            Yearly totals and all twelve months, zero-filled
        """
        year = year or utc_now().year
        monthly_totals = PaymentRepository(db).get_monthly_totals(year)

        monthly = []
        for month in range(1, 13):
            gross, earning = monthly_totals.get(month, (0.0, 0.0))
            monthly.append(
                schemas.MonthlyRevenue(
                    month=month,
                    label=month_label(year, month),
                    revenue=round(gross, 2),
                    instructor_earnings=round(earning, 2),
                    commission=round(gross - earning, 2),
                )
            )

        total = sum(m.revenue for m in monthly)
        earnings = sum(m.instructor_earnings for m in monthly)
        return schemas.RevenueReport(
            year=year,
            total_revenue=round(total, 2),
            instructor_earnings=round(earnings, 2),
            platform_commission=round(total - earnings, 2),
            monthly=monthly,
        )

    @staticmethod
    def get_payouts(db: Session) -> List[schemas.InstructorPayout]:
        rows = PaymentRepository(db).get_totals_by_instructor()
        return [
            schemas.InstructorPayout(
                instructor_id=instructor_id,
                name=name,
                email=email,
                gross=round(float(gross or 0.0), 2),
                earnings=round(float(earnings or 0.0), 2),
                sales=sales,
                last_payment_date=last_date,
            )
            for instructor_id, name, email, gross, earnings, sales, last_date in rows
        ]

    @staticmethod
    def get_transactions(
        db: Session,
        skip: int = 0,
        limit: int = 50,
        instructor_id: Optional[int] = None,
    ) -> schemas.TransactionListResponse:
        payments, total = PaymentRepository(db).get_transactions(
            skip=skip, limit=limit, instructor_id=instructor_id
        )
        return schemas.TransactionListResponse(
            transactions=[to_transaction(p) for p in payments],
            total=total,
            skip=skip,
            limit=limit,
        )

    @staticmethod
    def get_enrollment_stats(db: Session) -> schemas.EnrollmentStats:
        """Six month enrollment trend, month-over-month growth, top courses."""
        chart = build_enrollment_chart(db)
        top = AnalyticsRepository.get_top_courses_by_enrollments(db, TOP_COURSES)
        return schemas.EnrollmentStats(
            labels=chart.labels,
            values=chart.values,
            growth_percent=growth_percent(chart.values),
            top_courses=[schemas.TopCourse(**row) for row in top],
        )

    @staticmethod
    def get_course_performance(db: Session) -> List[schemas.CoursePerformance]:
        stats = AnalyticsRepository.get_course_enrollment_stats(db)
        scores = AnalyticsRepository.get_average_best_exam_score_by_course(db)

        items = []
        for course_id, title, status, instructor_name in (
            AnalyticsRepository.get_courses_with_instructor(db)
        ):
            course_stats = stats.get(course_id, {})
            enrollments = course_stats.get("enrollments", 0)
            completed = course_stats.get("completed", 0)
            items.append(
                schemas.CoursePerformance(
                    course_id=course_id,
                    title=title,
                    instructor_name=instructor_name,
                    status=status,
                    enrollments=enrollments,
                    completions=completed,
                    completion_rate=(
                        round(completed / enrollments * 100, 2) if enrollments else 0.0
                    ),
                    average_best_score=scores.get(course_id, 0.0),
                )
            )
        return items
