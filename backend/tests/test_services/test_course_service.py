"""
Unit tests for CourseService.
"""

import pytest

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    BusinessRuleException,
    CourseNotFoundException,
    InvalidCourseStatusException,
    NotCourseOwnerException,
)
from services.course_service import CourseService, is_enrollment_current
from tests.conftest import make_course, make_enrollment


def _course_data(category_id: int, **overrides) -> schemas.CourseCreate:
    data = {
        "title": "Intro to Rust",
        "description": "<p>Systems <b>programming</b></p><script>x()</script>",
        "level": db_models.CourseLevel.INTERMEDIATE,
        "category_id": category_id,
        "price": 199.0,
    }
    data.update(overrides)
    return schemas.CourseCreate(**data)


class TestIsEnrollmentCurrent:
    """Tests for is_enrollment_current"""

    def test_none(self):
        assert is_enrollment_current(None) is False

    def test_states(self, db_session, student_user, free_course, paid_course):
        active = make_enrollment(db_session, student_user, free_course)
        expired = make_enrollment(
            db_session, student_user, paid_course, expires_in_days=-1
        )

        assert is_enrollment_current(active) is True
        assert is_enrollment_current(expired) is False

        active.status = db_models.EnrollmentStatus.CANCELLED
        assert is_enrollment_current(active) is False

        active.status = db_models.EnrollmentStatus.COMPLETED
        assert is_enrollment_current(active) is True


class TestAuthoring:
    """Tests for instructor course management."""

    def test_create_sanitizes_and_defaults_to_draft(
        self, db_session, instructor_user, test_category
    ):
        course = CourseService.create_course(
            db_session, _course_data(test_category.id), instructor_user
        )

        assert course.status == db_models.CourseStatus.DRAFT
        assert course.instructor_id == instructor_user.id
        assert "<script>" not in course.description
        assert "<b>programming</b>" in course.description

    def test_create_cannot_self_approve(
        self, db_session, instructor_user, test_category
    ):
        with pytest.raises(InvalidCourseStatusException):
            CourseService.create_course(
                db_session,
                _course_data(
                    test_category.id, status=db_models.CourseStatus.APPROVED
                ),
                instructor_user,
            )

    def test_create_needs_approved_category(self, db_session, instructor_user):
        pending = db_models.Category(
            name="Robotics", status=db_models.CategoryStatus.PENDING
        )
        db_session.add(pending)
        db_session.commit()

        with pytest.raises(BusinessRuleException):
            CourseService.create_course(
                db_session, _course_data(pending.id), instructor_user
            )

    def test_update_by_other_instructor(
        self, db_session, other_instructor, free_course
    ):
        with pytest.raises(NotCourseOwnerException):
            CourseService.update_course(
                db_session,
                free_course.id,
                schemas.CourseUpdate(title="Hijacked"),
                other_instructor,
            )

    def test_admin_can_update_any_course(self, db_session, admin_user, free_course):
        course = CourseService.update_course(
            db_session, free_course.id, schemas.CourseUpdate(price=49.0), admin_user
        )

        assert course.price == 49.0
        assert course.title == "Python Basics"

    def test_submit_for_review(
        self, db_session, instructor_user, test_category
    ):
        draft = make_course(
            db_session,
            instructor_user,
            test_category,
            status=db_models.CourseStatus.DRAFT,
        )

        course = CourseService.set_instructor_status(
            db_session,
            draft.id,
            db_models.CourseStatus.PENDING_APPROVAL,
            instructor_user,
        )

        assert course.status == db_models.CourseStatus.PENDING_APPROVAL

    def test_approved_course_stays_approved(
        self, db_session, instructor_user, free_course
    ):
        with pytest.raises(InvalidCourseStatusException):
            CourseService.set_instructor_status(
                db_session,
                free_course.id,
                db_models.CourseStatus.DRAFT,
                instructor_user,
            )

    def test_delete_with_enrollments_is_refused(
        self, db_session, instructor_user, free_course, enrollment
    ):
        with pytest.raises(BusinessRuleException):
            CourseService.delete_course(db_session, free_course.id, instructor_user)

    def test_delete_removes_lessons_and_exams(
        self, db_session, instructor_user, free_course, course_lessons, course_exam
    ):
        CourseService.delete_course(db_session, free_course.id, instructor_user)

        assert db_session.query(db_models.Course).count() == 0
        assert db_session.query(db_models.Lesson).count() == 0
        assert db_session.query(db_models.Exam).count() == 0
        assert db_session.query(db_models.ExamQuestion).count() == 0


class TestReview:
    """Tests for admin review."""

    def test_approve_pending(
        self, db_session, admin_user, instructor_user, test_category
    ):
        pending = make_course(
            db_session,
            instructor_user,
            test_category,
            status=db_models.CourseStatus.PENDING_APPROVAL,
        )

        course = CourseService.review_course(
            db_session, pending.id, db_models.CourseStatus.APPROVED, admin_user
        )

        assert course.status == db_models.CourseStatus.APPROVED

    def test_draft_cannot_be_reviewed(
        self, db_session, admin_user, instructor_user, test_category
    ):
        draft = make_course(
            db_session,
            instructor_user,
            test_category,
            status=db_models.CourseStatus.DRAFT,
        )

        with pytest.raises(InvalidCourseStatusException):
            CourseService.review_course(
                db_session, draft.id, db_models.CourseStatus.APPROVED, admin_user
            )

    def test_review_queue_filters_status(
        self, db_session, instructor_user, test_category, free_course
    ):
        make_course(
            db_session,
            instructor_user,
            test_category,
            title="Waiting",
            status=db_models.CourseStatus.PENDING_APPROVAL,
        )

        pending = CourseService.list_courses_for_review(
            db_session, db_models.CourseStatus.PENDING_APPROVAL
        )

        assert [c.title for c in pending] == ["Waiting"]


class TestCatalogue:
    """Tests for the public catalogue and course page."""

    def test_only_approved_courses_are_listed(
        self, db_session, instructor_user, test_category, free_course, paid_course
    ):
        make_course(
            db_session,
            instructor_user,
            test_category,
            title="Unfinished",
            status=db_models.CourseStatus.DRAFT,
        )

        listing = CourseService.list_public_courses(db_session)

        assert listing.total == 2
        assert {c.title for c in listing.courses} == {"Python Basics", "Advanced SQL"}

    def test_search_by_title(self, db_session, free_course, paid_course):
        listing = CourseService.list_public_courses(db_session, search="sql")

        assert [c.title for c in listing.courses] == ["Advanced SQL"]

    def test_summary_formats_duration(self, db_session, free_course, course_lessons):
        db_session.refresh(free_course)

        summary = CourseService.to_summary(free_course)

        assert summary.formatted_duration == "7m"
        assert summary.lesson_count == 2
        assert summary.category_name == "Programming"

    def test_locked_lessons_hide_files(
        self, db_session, other_student, free_course, course_lessons
    ):
        detail = CourseService.get_course_detail(
            db_session, free_course.id, other_student
        )

        preview, locked = detail.lessons
        assert preview.file_url == "/uploads/lessons/intro.mp4"
        assert locked.file_url is None
        assert locked.is_locked is True
        assert detail.is_enrolled is False

    def test_enrolled_student_sees_everything(
        self, db_session, student_user, free_course, course_lessons, enrollment
    ):
        detail = CourseService.get_course_detail(
            db_session, free_course.id, student_user
        )

        assert all(lesson.file_url for lesson in detail.lessons)
        assert detail.is_enrolled is True
        assert detail.enrollment_status == db_models.EnrollmentStatus.ACTIVE

    def test_draft_is_hidden_from_public(
        self, db_session, instructor_user, test_category, student_user
    ):
        draft = make_course(
            db_session,
            instructor_user,
            test_category,
            status=db_models.CourseStatus.DRAFT,
        )

        with pytest.raises(CourseNotFoundException):
            CourseService.get_course_detail(db_session, draft.id, student_user)
        owner_view = CourseService.get_course_detail(
            db_session, draft.id, instructor_user
        )
        assert owner_view.status == db_models.CourseStatus.DRAFT
