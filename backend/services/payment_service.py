"""
Payment Service

Checkout orders and verification of completed payments. The checkout
widget returns a payment id and an HMAC signature over the order and
payment ids; a valid signature records the sale and enrolls the student.
"""

import hashlib
import hmac
import secrets

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import (
    CourseNotAvailableException,
    InvalidPaymentSignatureException,
    OrderAlreadyPaidException,
    PaymentOrderNotFoundException,
)
from repositories.payment_repository import PaymentOrderRepository, PaymentRepository
from services.course_service import CourseService
from services.enrollment_service import EnrollmentService


def sign_payment(order_id: str, payment_id: str) -> str:
    """Hex HMAC-SHA256 of ``"{order_id}|{payment_id}"`` keyed by the secret."""
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(
        settings.PAYMENT_KEY_SECRET.encode(), message, hashlib.sha256
    ).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str) -> bool:
    return hmac.compare_digest(sign_payment(order_id, payment_id), signature)


def split_amount(amount: float, commission_percent: float) -> float:
    """Instructor's share of a sale after platform commission."""
    return round(amount - amount * commission_percent / 100, 2)


class PaymentService:
    """Service for checkout and payment verification."""

    @staticmethod
    def create_order(
        db: Session, course_id: int, student: db_models.User
    ) -> schemas.OrderResponse:
        """
        Create a checkout order for a paid course.

        Args:
            db: Database session
            course_id: Course being bought
            student: Buying student

        Returns:
            Data the checkout widget needs (amount in minor units)

        Raises:
            CourseNotFoundException: If the course does not exist
            CourseNotAvailableException: If not approved or not priced
        """
        course = CourseService.get_course_or_raise(db, course_id)
        if course.status != db_models.CourseStatus.APPROVED:
            raise CourseNotAvailableException()
        if not course.price or course.price <= 0:
            raise CourseNotAvailableException("Course is free, enroll directly")

        order = db_models.PaymentOrder(
            order_id=f"order_{secrets.token_hex(12)}",
            student_id=student.id,
            course_id=course.id,
            amount=course.price,
            amount_minor=int(round(course.price * 100)),
            currency=settings.PAYMENT_CURRENCY,
            receipt=f"rcpt_{secrets.token_hex(8)}",
        )
        order = PaymentOrderRepository(db).create(order)
        logger.info(
            f"Payment order {order.order_id} created: student={student.id} "
            f"course={course.id}"
        )

        return schemas.OrderResponse(
            key=settings.PAYMENT_KEY_ID,
            order_id=order.order_id,
            amount=order.amount_minor,
            currency=order.currency,
            course_name=course.title,
        )

    @staticmethod
    def verify_payment(
        db: Session,
        data: schemas.VerifyPaymentRequest,
        student: db_models.User,
    ) -> schemas.VerifyPaymentResponse:
        """
        Verify a payment signature, record the sale and enroll the student.

        Raises:
            InvalidPaymentSignatureException: If the signature does not match
            PaymentOrderNotFoundException: If the order is unknown or not the
                caller's
            OrderAlreadyPaidException: If the order was already settled
        """
        if not verify_signature(data.order_id, data.payment_id, data.signature):
            logger.warning(f"Payment signature mismatch for order {data.order_id}")
            raise InvalidPaymentSignatureException()

        order_repo = PaymentOrderRepository(db)
        order = order_repo.get_by_order_id(data.order_id)
        if order is None or order.student_id != student.id:
            raise PaymentOrderNotFoundException(data.order_id)
        if order.status == db_models.PaymentOrderStatus.PAID:
            raise OrderAlreadyPaidException()

        course = CourseService.get_course_or_raise(db, order.course_id)
        commission = settings.PLATFORM_COMMISSION_PERCENT
        PaymentRepository(db).add(
            db_models.Payment(
                student_id=student.id,
                instructor_id=course.instructor_id,
                course_id=course.id,
                amount=order.amount,
                platform_commission=commission,
                instructor_earning=split_amount(order.amount, commission),
                status=db_models.PaymentStatus.COMPLETED,
                payment_id=data.payment_id,
                order_id=order.order_id,
            )
        )
        order.status = db_models.PaymentOrderStatus.PAID
        order.paid_at = utc_now()

        enrollment, changed = EnrollmentService.activate_enrollment(
            db,
            student.id,
            course,
            amount=order.amount,
            payment_id=data.payment_id,
            order_id=order.order_id,
        )
        order_repo.commit()
        order_repo.refresh(enrollment)

        logger.info(
            f"Payment {data.payment_id} verified for order {order.order_id}"
        )
        message = "Payment verified and enrolled" if changed else "Already enrolled"
        return schemas.VerifyPaymentResponse(
            message=message,
            enrollment=schemas.Enrollment.model_validate(enrollment),
        )
