"""
Enrollment Service

Enrolling in free courses, unenrolling, and the expiry sweep. Paid
enrollments are activated by the payment service through
``activate_enrollment``.
"""

from datetime import timedelta
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import ensure_utc, utc_now
from models.config import settings
from models.exceptions import (
    AlreadyEnrolledException,
    CourseNotAvailableException,
    EnrollmentNotFoundException,
    PaymentRequiredException,
)
from repositories.enrollment_repository import EnrollmentRepository
from services.course_service import CourseService, is_enrollment_current


class EnrollmentService:
    """Service for enrollment business logic."""

    @staticmethod
    def _new_expiry():
        return utc_now() + timedelta(days=settings.ENROLLMENT_VALIDITY_DAYS)

    @staticmethod
    def activate_enrollment(
        db: Session,
        student_id: int,
        course: db_models.Course,
        amount: float = 0.0,
        payment_id: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> Tuple[db_models.Enrollment, bool]:
        """
        Create or reactivate a student's enrollment in a course.

        A cancelled or expired enrollment is reused with a fresh expiry date;
        its progress rows are kept. Does not commit.

        Args:
            db: Database session
            student_id: Enrolling student
            course: Course to enroll in
            amount: Amount paid (0 for free courses)
            payment_id: Payment reference, when paid
            order_id: Checkout order, when paid

        Returns:
            Tuple of (enrollment, created_or_reactivated). The flag is False
            when the student already held a current enrollment, which is
            returned unchanged.
        """
        repo = EnrollmentRepository(db)
        enrollment = repo.get_by_student_and_course(student_id, course.id)
        if is_enrollment_current(enrollment):
            return enrollment, False

        now = utc_now()
        if enrollment is None:
            enrollment = db_models.Enrollment(
                student_id=student_id,
                course_id=course.id,
                progress=0,
            )
            repo.add(enrollment)

        # A renewed course that was already finished keeps its certificate
        enrollment.status = (
            db_models.EnrollmentStatus.COMPLETED
            if enrollment.certificate
            else db_models.EnrollmentStatus.ACTIVE
        )
        enrollment.amount = amount
        enrollment.payment_id = payment_id
        enrollment.order_id = order_id
        enrollment.payment_status = db_models.EnrollmentPaymentStatus.COMPLETE
        enrollment.payment_date = now
        enrollment.expiry_date = EnrollmentService._new_expiry()
        db.flush()
        return enrollment, True

    @staticmethod
    def enroll(
        db: Session, course_id: int, student: db_models.User
    ) -> db_models.Enrollment:
        """
        Enroll a student in a free course.

        Raises:
            CourseNotFoundException: If the course does not exist
            CourseNotAvailableException: If the course is not approved
            PaymentRequiredException: If the course has a price
            AlreadyEnrolledException: If a current enrollment exists
        """
        course = CourseService.get_course_or_raise(db, course_id)
        if course.status != db_models.CourseStatus.APPROVED:
            raise CourseNotAvailableException()
        if (course.price or 0) > 0:
            raise PaymentRequiredException()

        enrollment, changed = EnrollmentService.activate_enrollment(
            db, student.id, course
        )
        if not changed:
            raise AlreadyEnrolledException()

        repo = EnrollmentRepository(db)
        repo.commit()
        repo.refresh(enrollment)
        logger.info(f"Student {student.id} enrolled in course {course_id}")
        return enrollment

    @staticmethod
    def list_enrollments(
        db: Session, student_id: int
    ) -> List[schemas.EnrollmentWithCourse]:
        now = utc_now()
        items = []
        for enrollment in EnrollmentRepository(db).get_by_student(student_id):
            item = schemas.EnrollmentWithCourse(
                **schemas.Enrollment.model_validate(enrollment).model_dump(),
                course=CourseService.to_summary(enrollment.course),
                is_expired=ensure_utc(enrollment.expiry_date) <= now,
            )
            items.append(item)
        return items

    @staticmethod
    def get_enrollment(
        db: Session, course_id: int, student_id: int
    ) -> db_models.Enrollment:
        enrollment = EnrollmentRepository(db).get_by_student_and_course(
            student_id, course_id
        )
        if enrollment is None:
            raise EnrollmentNotFoundException()
        return enrollment

    @staticmethod
    def unenroll(
        db: Session, course_id: int, student: db_models.User
    ) -> db_models.Enrollment:
        """
        Cancel the student's enrollment in a course.

        Raises:
            EnrollmentNotFoundException: If the student is not enrolled
        """
        enrollment = EnrollmentService.get_enrollment(db, course_id, student.id)
        enrollment.status = db_models.EnrollmentStatus.CANCELLED
        enrollment = EnrollmentRepository(db).update(enrollment)
        logger.info(f"Student {student.id} unenrolled from course {course_id}")
        return enrollment

    @staticmethod
    def cancel_expired_enrollments(db: Session) -> int:
        """
        Cancel every active enrollment whose expiry date has passed.

        Args:
            db: Database session

        Returns:
            Number of enrollments cancelled
        """
        repo = EnrollmentRepository(db)
        expired = repo.get_expired_active(utc_now())
        for enrollment in expired:
            enrollment.status = db_models.EnrollmentStatus.CANCELLED
        if expired:
            repo.commit()
        return len(expired)
