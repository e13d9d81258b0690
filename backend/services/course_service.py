"""
Course Service

Public catalogue, instructor authoring and admin review of courses.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_html, sanitize_plain_text, sanitize_url
from helpers.time_utils import ensure_utc, utc_now
from models.exceptions import (
    BusinessRuleException,
    CategoryNotFoundException,
    CourseNotFoundException,
    InvalidCourseStatusException,
    NotCourseOwnerException,
)
from repositories.category_repository import CategoryRepository
from repositories.course_repository import CourseRepository
from repositories.enrollment_repository import (
    CompletedLessonRepository,
    EnrollmentRepository,
)
from repositories.exam_repository import ExamRepository
from repositories.payment_repository import PaymentOrderRepository

# Statuses an instructor may set on their own course
INSTRUCTOR_STATUSES = {
    db_models.CourseStatus.DRAFT,
    db_models.CourseStatus.PENDING_APPROVAL,
}


def is_enrollment_current(enrollment: Optional[db_models.Enrollment]) -> bool:
    """True while access is open: not cancelled and not past its expiry date."""
    if enrollment is None:
        return False
    if enrollment.status == db_models.EnrollmentStatus.CANCELLED:
        return False
    return ensure_utc(enrollment.expiry_date) > utc_now()


class CourseService:
    """Service for course business logic."""

    @staticmethod
    def to_summary(course: db_models.Course) -> schemas.CourseSummary:
        return schemas.CourseSummary(
            id=course.id,
            title=course.title,
            description=course.description,
            level=course.level,
            price=course.price,
            thumbnail=course.thumbnail,
            status=course.status,
            total_duration=course.total_duration or 0,
            formatted_duration=course.formatted_duration,
            category_id=course.category_id,
            category_name=course.category.name if course.category else None,
            instructor_id=course.instructor_id,
            instructor_name=course.instructor.name if course.instructor else None,
            lesson_count=len(course.lessons),
            created_at=course.created_at,
        )

    @staticmethod
    def can_manage(course: db_models.Course, user: Optional[db_models.User]) -> bool:
        """Owners and admins may manage a course."""
        if user is None:
            return False
        return user.is_admin or course.instructor_id == user.id

    @staticmethod
    def get_course_or_raise(db: Session, course_id: int) -> db_models.Course:
        course = CourseRepository(db).get_with_relations(course_id)
        if course is None:
            raise CourseNotFoundException(course_id)
        return course

    @staticmethod
    def get_owned_course(
        db: Session, course_id: int, user: db_models.User
    ) -> db_models.Course:
        """
        Load a course the user may modify.

        Raises:
            CourseNotFoundException: If the course does not exist
            NotCourseOwnerException: If the user neither owns it nor is admin
        """
        course = CourseService.get_course_or_raise(db, course_id)
        if not CourseService.can_manage(course, user):
            raise NotCourseOwnerException()
        return course

    @staticmethod
    def list_public_courses(
        db: Session,
        category_id: Optional[int] = None,
        level: Optional[db_models.CourseLevel] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> schemas.CourseListResponse:
        courses, total = CourseRepository(db).get_public_courses(
            category_id=category_id, level=level, search=search, skip=skip, limit=limit
        )
        return schemas.CourseListResponse(
            courses=[CourseService.to_summary(c) for c in courses],
            total=total,
            skip=skip,
            limit=limit,
        )

    @staticmethod
    def get_course_detail(
        db: Session, course_id: int, viewer: Optional[db_models.User] = None
    ) -> schemas.CourseDetail:
        """
        Course page with lessons, exams and the viewer's enrollment state.

        Unapproved courses are visible only to their instructor and admins.
        Lesson files are hidden unless the lesson is a free preview or the
        viewer may manage the course or holds a current enrollment.

        Raises:
            CourseNotFoundException: If missing or not visible to the viewer
        """
        course = CourseService.get_course_or_raise(db, course_id)
        manager = CourseService.can_manage(course, viewer)
        if course.status != db_models.CourseStatus.APPROVED and not manager:
            raise CourseNotFoundException(course_id)

        enrollment = None
        if viewer is not None:
            enrollment = EnrollmentRepository(db).get_by_student_and_course(
                viewer.id, course_id
            )
        enrolled = is_enrollment_current(enrollment)

        lessons = []
        for lesson in course.lessons:
            unlocked = manager or enrolled or lesson.is_preview_free
            item = schemas.Lesson.model_validate(lesson)
            if not unlocked:
                item.file_url = None
                item.is_locked = True
            lessons.append(item)

        exams = [
            schemas.ExamSummary(
                id=exam.id,
                course_id=exam.course_id,
                title=exam.title,
                duration=exam.duration,
                question_count=len(exam.questions),
                total_marks=exam.total_marks,
            )
            for exam in ExamRepository(db).get_by_course(course_id)
        ]

        summary = CourseService.to_summary(course)
        return schemas.CourseDetail(
            **summary.model_dump(),
            lessons=lessons,
            exams=exams,
            is_enrolled=enrolled,
            enrollment_status=enrollment.status if enrollment else None,
            progress=enrollment.progress if enrollment else 0,
            completed_lesson_ids=(
                CompletedLessonRepository(db).get_lesson_ids(enrollment.id)
                if enrollment
                else []
            ),
        )

    @staticmethod
    def _require_approved_category(db: Session, category_id: int) -> None:
        category = CategoryRepository(db).get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundException(category_id)
        if category.status != db_models.CategoryStatus.APPROVED:
            raise BusinessRuleException("Category is not approved yet")

    @staticmethod
    def list_instructor_courses(
        db: Session,
        instructor_id: int,
        status: Optional[db_models.CourseStatus] = None,
    ) -> List[schemas.CourseSummary]:
        courses = CourseRepository(db).get_by_instructor(instructor_id, status)
        return [CourseService.to_summary(c) for c in courses]

    @staticmethod
    def create_course(
        db: Session, data: schemas.CourseCreate, instructor: db_models.User
    ) -> db_models.Course:
        """
        Create a course owned by the instructor.

        Raises:
            CategoryNotFoundException: If the category does not exist
            BusinessRuleException: If the category is not approved
            InvalidCourseStatusException: If the status is not draft or
                pendingApproval
        """
        CourseService._require_approved_category(db, data.category_id)
        if data.status not in INSTRUCTOR_STATUSES:
            raise InvalidCourseStatusException(
                "New courses must be draft or pending approval"
            )

        course = db_models.Course(
            title=sanitize_plain_text(data.title),
            description=sanitize_html(data.description),
            level=data.level,
            category_id=data.category_id,
            instructor_id=instructor.id,
            price=data.price,
            thumbnail=sanitize_url(data.thumbnail),
            status=data.status,
        )
        course = CourseRepository(db).create(course)
        logger.info(f"Course {course.id} created by instructor {instructor.id}")
        return course

    @staticmethod
    def update_course(
        db: Session,
        course_id: int,
        data: schemas.CourseUpdate,
        user: db_models.User,
    ) -> db_models.Course:
        course = CourseService.get_owned_course(db, course_id, user)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("category_id") is not None:
            CourseService._require_approved_category(db, updates["category_id"])
            course.category_id = updates["category_id"]
        if updates.get("title"):
            course.title = sanitize_plain_text(updates["title"])
        if "description" in updates:
            course.description = sanitize_html(updates["description"])
        if updates.get("level") is not None:
            course.level = updates["level"]
        if updates.get("price") is not None:
            course.price = updates["price"]
        if "thumbnail" in updates:
            course.thumbnail = sanitize_url(updates["thumbnail"])

        return CourseRepository(db).update(course)

    @staticmethod
    def set_instructor_status(
        db: Session,
        course_id: int,
        status: db_models.CourseStatus,
        user: db_models.User,
    ) -> db_models.Course:
        """
        Move an owned course between draft and pending approval.

        Rejected courses may be resubmitted; approved courses are left to
        admins.

        Raises:
            InvalidCourseStatusException: On any other transition
        """
        course = CourseService.get_owned_course(db, course_id, user)
        if status not in INSTRUCTOR_STATUSES:
            raise InvalidCourseStatusException(
                "Instructors can only set draft or pending approval"
            )
        if course.status == db_models.CourseStatus.APPROVED:
            raise InvalidCourseStatusException(
                "Approved courses cannot be moved back by the instructor"
            )
        course.status = status
        return CourseRepository(db).update(course)

    @staticmethod
    def delete_course(db: Session, course_id: int, user: db_models.User) -> None:
        """
        Delete a course with its lessons, exams and exam results.

        Raises:
            BusinessRuleException: If learners are enrolled
        """
        course = CourseService.get_owned_course(db, course_id, user)
        if EnrollmentRepository(db).count_by_course(course_id) > 0:
            raise BusinessRuleException(
                "Course has enrollments and cannot be deleted"
            )

        # Unpaid checkout orders are the only other rows pointing at it
        PaymentOrderRepository(db).delete_by_course(course_id)
        CourseRepository(db).delete(course)
        logger.info(f"Course {course_id} deleted by user {user.id}")

    @staticmethod
    def list_courses_for_review(
        db: Session,
        status: Optional[db_models.CourseStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[schemas.CourseSummary]:
        courses = CourseRepository(db).get_by_status(status, skip=skip, limit=limit)
        return [CourseService.to_summary(c) for c in courses]

    @staticmethod
    def review_course(
        db: Session,
        course_id: int,
        status: db_models.CourseStatus,
        admin: db_models.User,
    ) -> db_models.Course:
        """
        Approve or reject a submitted course.

        Raises:
            InvalidCourseStatusException: If the course is still a draft
        """
        course = CourseService.get_course_or_raise(db, course_id)
        if course.status == db_models.CourseStatus.DRAFT:
            raise InvalidCourseStatusException("Draft courses cannot be reviewed")
        course.status = status
        course = CourseRepository(db).update(course)
        logger.info(f"Course {course_id} set to {status.value} by admin {admin.id}")
        return course
