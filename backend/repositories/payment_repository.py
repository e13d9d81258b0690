"""
Repositories for checkout orders and completed payments.
"""

from typing import List, Optional

from sqlalchemy import extract, func
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class PaymentOrderRepository(BaseRepository[db_models.PaymentOrder]):
    """Repository for checkout orders."""

    def __init__(self, db: Session):
        super().__init__(db_models.PaymentOrder, db)

    def get_by_order_id(self, order_id: str) -> Optional[db_models.PaymentOrder]:
        return (
            self.db.query(db_models.PaymentOrder)
            .filter(db_models.PaymentOrder.order_id == order_id)
            .first()
        )

    def delete_by_course(self, course_id: int) -> int:
        """Delete every order for a course without committing."""
        return (
            self.db.query(db_models.PaymentOrder)
            .filter(db_models.PaymentOrder.course_id == course_id)
            .delete(synchronize_session=False)
        )


class PaymentRepository(BaseRepository[db_models.Payment]):
    """Repository for completed sales."""

    def __init__(self, db: Session):
        super().__init__(db_models.Payment, db)

    def _completed(self):
        return self.db.query(db_models.Payment).filter(
            db_models.Payment.status == db_models.PaymentStatus.COMPLETED
        )

    def get_transactions(
        self,
        skip: int = 0,
        limit: int = 50,
        instructor_id: Optional[int] = None,
    ) -> tuple[List[db_models.Payment], int]:
        """
        Page through payments, newest first, with names loaded.

        Args:
            skip: Pagination offset
            limit: Pagination limit
            instructor_id: Restrict to one instructor's sales

        Returns:
            Tuple of (payments, total count)
        """
        query = self.db.query(db_models.Payment)
        if instructor_id is not None:
            query = query.filter(db_models.Payment.instructor_id == instructor_id)
        total = query.count()
        payments = (
            query.options(
                joinedload(db_models.Payment.student),
                joinedload(db_models.Payment.instructor),
                joinedload(db_models.Payment.course),
            )
            .order_by(
                db_models.Payment.payment_date.desc(), db_models.Payment.id.desc()
            )
            .offset(skip)
            .limit(limit)
            .all()
        )
        return payments, total

    def get_totals(self, instructor_id: Optional[int] = None) -> tuple[float, float]:
        """
        Sum completed sales.

        Returns:
            Tuple of (gross amount, instructor earnings)
        """
        query = self.db.query(
            func.coalesce(func.sum(db_models.Payment.amount), 0.0),
            func.coalesce(func.sum(db_models.Payment.instructor_earning), 0.0),
        ).filter(db_models.Payment.status == db_models.PaymentStatus.COMPLETED)
        if instructor_id is not None:
            query = query.filter(db_models.Payment.instructor_id == instructor_id)
        amount, earning = query.one()
        return float(amount or 0.0), float(earning or 0.0)

    def get_monthly_totals(
        self, year: int, instructor_id: Optional[int] = None
    ) -> dict[int, tuple[float, float]]:
        """
        Completed sales of one year grouped by month.

        Returns:
            {month number: (gross amount, instructor earnings)}
        """
        month = extract("month", db_models.Payment.payment_date)
        query = self.db.query(
            month,
            func.sum(db_models.Payment.amount),
            func.sum(db_models.Payment.instructor_earning),
        ).filter(
            db_models.Payment.status == db_models.PaymentStatus.COMPLETED,
            extract("year", db_models.Payment.payment_date) == year,
        )
        if instructor_id is not None:
            query = query.filter(db_models.Payment.instructor_id == instructor_id)
        return {
            int(m): (float(amount or 0.0), float(earning or 0.0))
            for m, amount, earning in query.group_by(month).all()
        }

    def get_totals_by_instructor(self) -> list:
        """
        Per-instructor payout summary.

        Returns:
            List of (instructor_id, name, email, gross, earnings, sales,
            last_payment_date), highest earnings first
        """
        earnings = func.sum(db_models.Payment.instructor_earning).label("earnings")
        return (
            self.db.query(
                db_models.Payment.instructor_id,
                db_models.User.name,
                db_models.User.email,
                func.sum(db_models.Payment.amount),
                earnings,
                func.count(db_models.Payment.id),
                func.max(db_models.Payment.payment_date),
            )
            .join(db_models.User, db_models.Payment.instructor_id == db_models.User.id)
            .filter(db_models.Payment.status == db_models.PaymentStatus.COMPLETED)
            .group_by(
                db_models.Payment.instructor_id,
                db_models.User.name,
                db_models.User.email,
            )
            .order_by(earnings.desc())
            .all()
        )

    def get_latest_for_instructor(
        self, instructor_id: int
    ) -> Optional[db_models.Payment]:
        return (
            self._completed()
            .filter(db_models.Payment.instructor_id == instructor_id)
            .order_by(
                db_models.Payment.payment_date.desc(), db_models.Payment.id.desc()
            )
            .first()
        )

    def get_revenue_by_course(self, course_ids: List[int]) -> dict[int, float]:
        """Gross completed sales per course."""
        if not course_ids:
            return {}
        rows = (
            self.db.query(
                db_models.Payment.course_id, func.sum(db_models.Payment.amount)
            )
            .filter(
                db_models.Payment.status == db_models.PaymentStatus.COMPLETED,
                db_models.Payment.course_id.in_(course_ids),
            )
            .group_by(db_models.Payment.course_id)
            .all()
        )
        return {course_id: float(total or 0.0) for course_id, total in rows}
