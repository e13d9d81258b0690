"""
Progress Service

Course progress, completion and certificates for an enrollment. Shared by
lesson tracking and exam submission.
"""

import uuid
from typing import List

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import NotEnrolledException
from repositories.course_repository import LessonRepository
from repositories.enrollment_repository import (
    CompletedLessonRepository,
    EnrollmentRepository,
    ExamProgressRepository,
)
from repositories.exam_repository import ExamRepository
from services.course_service import is_enrollment_current
from services.email_service import EmailService


def compute_progress(
    completed_lessons: int,
    completed_exams: int,
    total_lessons: int,
    total_exams: int,
) -> int:
    """
    Percent of a course's lessons and exams that are complete.

    Returns:
        0..100; 0 when the course has neither lessons nor exams
    """
    total = total_lessons + total_exams
    if total == 0:
        return 0
    return min(100, round(100 * (completed_lessons + completed_exams) / total))


class ProgressService:
    """Service keeping enrollment progress and certificates up to date."""

    @staticmethod
    def require_current_enrollment(
        db: Session, student_id: int, course_id: int
    ) -> db_models.Enrollment:
        """
        Return the student's enrollment if it is active and unexpired.

        Raises:
            NotEnrolledException: Otherwise
        """
        enrollment = EnrollmentRepository(db).get_by_student_and_course(
            student_id, course_id
        )
        if not is_enrollment_current(enrollment):
            raise NotEnrolledException()
        return enrollment

    @staticmethod
    def recalculate(db: Session, enrollment: db_models.Enrollment) -> bool:
        """
        Recompute progress and complete the enrollment at 100 percent.

        Pending changes must be flushed first. Does not commit; pass the
        enrollment to notify_completed once the commit succeeded.

        Returns:
            True when this call completed the enrollment
        """
        course_id = enrollment.course_id
        progress = compute_progress(
            CompletedLessonRepository(db).count_for_enrollment(enrollment.id),
            ExamProgressRepository(db).count_completed(enrollment.id),
            LessonRepository(db).count_by_course(course_id),
            ExamRepository(db).count_by_course(course_id),
        )
        enrollment.progress = progress

        completed = db_models.EnrollmentStatus.COMPLETED
        if progress >= 100 and enrollment.status != completed:
            ProgressService._complete(enrollment)
            return True
        return False

    @staticmethod
    def _complete(enrollment: db_models.Enrollment) -> None:
        certificate_id = uuid.uuid4().hex
        base = settings.CERTIFICATE_BASE_PATH.rstrip("/")
        enrollment.status = db_models.EnrollmentStatus.COMPLETED
        enrollment.certificate = f"{base}/{certificate_id}.pdf"
        enrollment.updated_at = utc_now()
        logger.info(
            f"Enrollment {enrollment.id} completed, certificate {certificate_id}"
        )

    @staticmethod
    def notify_completed(enrollments: List[db_models.Enrollment]) -> None:
        """Send the completion email for enrollments already committed."""
        for enrollment in enrollments:
            student = enrollment.student
            course = enrollment.course
            if student is None or course is None:
                continue
            EmailService.send_course_completion(
                to_email=student.email,
                name=student.name,
                course_title=course.title,
                certificate_path=enrollment.certificate,
            )

    @staticmethod
    def recalculate_course(db: Session, course_id: int) -> List[db_models.Enrollment]:
        """
        Recompute every enrollment of a course after its lessons or exams
        changed. Cancelled enrollments are left alone. Does not commit.

        Returns:
            Enrollments completed by this call
        """
        db.flush()
        newly_completed = []
        for enrollment in EnrollmentRepository(db).get_by_course(course_id):
            if enrollment.status == db_models.EnrollmentStatus.CANCELLED:
                continue
            if ProgressService.recalculate(db, enrollment):
                newly_completed.append(enrollment)
        return newly_completed
