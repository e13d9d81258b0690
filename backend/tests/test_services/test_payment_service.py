"""
Unit tests for PaymentService checkout and verification.
"""

import pytest

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    CourseNotAvailableException,
    InvalidPaymentSignatureException,
    OrderAlreadyPaidException,
    PaymentOrderNotFoundException,
)
from repositories.payment_repository import PaymentOrderRepository
from services.payment_service import (
    PaymentService,
    sign_payment,
    split_amount,
    verify_signature,
)


def _verify_request(order_id: str, payment_id: str = "pay_001", signature=None):
    return schemas.VerifyPaymentRequest(
        order_id=order_id,
        payment_id=payment_id,
        signature=signature or sign_payment(order_id, payment_id),
    )


class TestSignatures:
    """Tests for the checkout signature helpers."""

    def test_signature_round_trip(self):
        signature = sign_payment("order_1", "pay_1")

        assert len(signature) == 64
        assert verify_signature("order_1", "pay_1", signature)

    def test_signature_binds_both_ids(self):
        signature = sign_payment("order_1", "pay_1")

        assert not verify_signature("order_1", "pay_2", signature)
        assert not verify_signature("order_2", "pay_1", signature)

    def test_split_amount(self):
        assert split_amount(499.0, 20) == 399.2
        assert split_amount(100.0, 0) == 100.0


class TestCreateOrder:
    """Tests for PaymentService.create_order"""

    def test_create_order_for_paid_course(
        self, db_session, student_user, paid_course
    ):
        order = PaymentService.create_order(db_session, paid_course.id, student_user)

        assert order.key == "key_test_123"
        assert order.order_id.startswith("order_")
        assert order.amount == 49900
        assert order.currency == "INR"
        assert order.course_name == paid_course.title

        stored = PaymentOrderRepository(db_session).get_by_order_id(order.order_id)
        assert stored.status == db_models.PaymentOrderStatus.CREATED
        assert stored.student_id == student_user.id

    def test_free_course_has_no_checkout(
        self, db_session, student_user, free_course
    ):
        with pytest.raises(CourseNotAvailableException):
            PaymentService.create_order(db_session, free_course.id, student_user)


class TestVerifyPayment:
    """Tests for PaymentService.verify_payment"""

    def test_valid_payment_enrolls_student(
        self, db_session, student_user, paid_course
    ):
        order = PaymentService.create_order(db_session, paid_course.id, student_user)

        result = PaymentService.verify_payment(
            db_session, _verify_request(order.order_id), student_user
        )

        assert result.message == "Payment verified and enrolled"
        assert result.enrollment.status == db_models.EnrollmentStatus.ACTIVE
        assert result.enrollment.amount == 499.0

        payment = db_session.query(db_models.Payment).one()
        assert payment.instructor_id == paid_course.instructor_id
        assert payment.platform_commission == 20.0
        assert payment.instructor_earning == 399.2

        stored = PaymentOrderRepository(db_session).get_by_order_id(order.order_id)
        assert stored.status == db_models.PaymentOrderStatus.PAID
        assert stored.paid_at is not None

    def test_bad_signature_is_rejected(self, db_session, student_user, paid_course):
        order = PaymentService.create_order(db_session, paid_course.id, student_user)

        with pytest.raises(InvalidPaymentSignatureException):
            PaymentService.verify_payment(
                db_session,
                _verify_request(order.order_id, signature="0" * 64),
                student_user,
            )
        assert db_session.query(db_models.Payment).count() == 0

    def test_order_paid_twice_conflicts(self, db_session, student_user, paid_course):
        order = PaymentService.create_order(db_session, paid_course.id, student_user)
        PaymentService.verify_payment(
            db_session, _verify_request(order.order_id), student_user
        )

        with pytest.raises(OrderAlreadyPaidException):
            PaymentService.verify_payment(
                db_session, _verify_request(order.order_id), student_user
            )

    def test_other_students_order_is_not_found(
        self, db_session, student_user, other_student, paid_course
    ):
        order = PaymentService.create_order(db_session, paid_course.id, student_user)

        with pytest.raises(PaymentOrderNotFoundException):
            PaymentService.verify_payment(
                db_session, _verify_request(order.order_id), other_student
            )

    def test_unknown_order(self, db_session, student_user):
        with pytest.raises(PaymentOrderNotFoundException):
            PaymentService.verify_payment(
                db_session, _verify_request("order_missing"), student_user
            )
