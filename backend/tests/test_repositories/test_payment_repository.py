"""
Unit tests for PaymentOrderRepository and PaymentRepository.
"""

from datetime import datetime

import pytest

import repositories.db_models as db_models
from repositories.payment_repository import PaymentOrderRepository, PaymentRepository


def _order(db_session, student, course, order_id):
    order = db_models.PaymentOrder(
        order_id=order_id,
        student_id=student.id,
        course_id=course.id,
        amount=course.price,
        amount_minor=int(round(course.price * 100)),
        currency="INR",
        receipt=f"rcpt_{order_id}",
        status=db_models.PaymentOrderStatus.CREATED,
    )
    db_session.add(order)
    db_session.commit()
    return order


def _payment(db_session, student, course, amount, when, status=None):
    payment = db_models.Payment(
        student_id=student.id,
        instructor_id=course.instructor_id,
        course_id=course.id,
        amount=amount,
        platform_commission=20.0,
        instructor_earning=round(amount * 0.8, 2),
        status=status or db_models.PaymentStatus.COMPLETED,
        payment_id=f"pay_{student.id}_{when:%m%d}",
        order_id=f"order_{student.id}_{when:%m%d}",
        payment_date=when,
    )
    db_session.add(payment)
    db_session.commit()
    return payment


@pytest.fixture
def payments(db_session, student_user, other_student, paid_course):
    return [
        _payment(db_session, student_user, paid_course, 500.0, datetime(2024, 1, 5)),
        _payment(db_session, other_student, paid_course, 250.0, datetime(2024, 2, 9)),
        _payment(
            db_session,
            other_student,
            paid_course,
            999.0,
            datetime(2024, 2, 20),
            status=db_models.PaymentStatus.FAILED,
        ),
    ]


class TestPaymentOrderRepository:
    """Test cases for PaymentOrderRepository."""

    def test_get_by_order_id(self, db_session, student_user, paid_course):
        order = _order(db_session, student_user, paid_course, "order_abc")
        repo = PaymentOrderRepository(db_session)

        assert repo.get_by_order_id("order_abc").id == order.id
        assert repo.get_by_order_id("order_missing") is None

    def test_delete_by_course(
        self, db_session, student_user, other_student, paid_course
    ):
        _order(db_session, student_user, paid_course, "order_1")
        _order(db_session, other_student, paid_course, "order_2")
        repo = PaymentOrderRepository(db_session)

        deleted = repo.delete_by_course(paid_course.id)
        db_session.commit()

        assert deleted == 2
        assert repo.count() == 0


class TestPaymentRepository:
    """Test cases for PaymentRepository."""

    def test_totals_skip_failed_payments(self, db_session, payments):
        repo = PaymentRepository(db_session)

        gross, earnings = repo.get_totals()

        assert gross == 750.0
        assert earnings == 600.0

    def test_totals_per_instructor(self, db_session, payments, other_instructor):
        repo = PaymentRepository(db_session)

        assert repo.get_totals(instructor_id=other_instructor.id) == (0.0, 0.0)

    def test_monthly_totals(self, db_session, payments):
        repo = PaymentRepository(db_session)

        monthly = repo.get_monthly_totals(2024)

        assert monthly == {1: (500.0, 400.0), 2: (250.0, 200.0)}
        assert repo.get_monthly_totals(2023) == {}

    def test_transactions_newest_first(self, db_session, payments):
        """Every status is listed; names are loaded with the rows."""
        repo = PaymentRepository(db_session)

        rows, total = repo.get_transactions(skip=0, limit=2)

        assert total == 3
        assert [p.amount for p in rows] == [999.0, 250.0]
        assert rows[0].course.title == "Advanced SQL"

    def test_totals_by_instructor(self, db_session, payments, instructor_user):
        repo = PaymentRepository(db_session)

        rows = repo.get_totals_by_instructor()

        assert len(rows) == 1
        instructor_id, name, email, gross, earnings, sales, last = rows[0]
        assert instructor_id == instructor_user.id
        assert gross == 750.0
        assert sales == 2
        assert last == datetime(2024, 2, 9)

    def test_latest_for_instructor(self, db_session, payments, instructor_user):
        repo = PaymentRepository(db_session)

        latest = repo.get_latest_for_instructor(instructor_user.id)

        assert latest.amount == 250.0

    def test_revenue_by_course(self, db_session, payments, paid_course, free_course):
        repo = PaymentRepository(db_session)

        assert repo.get_revenue_by_course([paid_course.id, free_course.id]) == {
            paid_course.id: 750.0
        }
        assert repo.get_revenue_by_course([]) == {}
