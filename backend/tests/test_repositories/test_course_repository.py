"""
Unit tests for CourseRepository and LessonRepository.
"""

import repositories.db_models as db_models
from repositories.course_repository import CourseRepository, LessonRepository
from tests.conftest import make_course


class TestCourseRepository:
    """Test cases for CourseRepository."""

    def test_public_courses_are_approved_only(
        self, db_session, instructor_user, test_category, free_course
    ):
        make_course(
            db_session,
            instructor_user,
            test_category,
            title="Hidden Draft",
            status=db_models.CourseStatus.DRAFT,
        )
        repo = CourseRepository(db_session)

        courses, total = repo.get_public_courses()

        assert total == 1
        assert courses[0].id == free_course.id

    def test_public_courses_filters(self, db_session, free_course, paid_course):
        repo = CourseRepository(db_session)

        by_search, _ = repo.get_public_courses(search="SQL")
        by_level, level_total = repo.get_public_courses(
            level=db_models.CourseLevel.ADVANCED
        )

        assert [c.id for c in by_search] == [paid_course.id]
        assert level_total == 0

    def test_get_by_instructor(
        self, db_session, instructor_user, other_instructor, free_course
    ):
        repo = CourseRepository(db_session)

        assert [c.id for c in repo.get_by_instructor(instructor_user.id)] == [
            free_course.id
        ]
        assert repo.get_by_instructor(other_instructor.id) == []
        assert repo.get_ids_by_instructor(instructor_user.id) == [free_course.id]

    def test_count_by_status_zero_filled(
        self, db_session, instructor_user, free_course, paid_course
    ):
        repo = CourseRepository(db_session)

        counts = repo.count_by_status(instructor_id=instructor_user.id)

        assert counts == {
            "draft": 0,
            "pendingApproval": 0,
            "approved": 2,
            "rejected": 0,
        }


class TestLessonRepository:
    """Test cases for LessonRepository."""

    def test_lessons_in_position_order(self, db_session, free_course, course_lessons):
        course_lessons[0].position = 5
        db_session.commit()
        repo = LessonRepository(db_session)

        lessons = repo.get_by_course(free_course.id)

        assert [lesson.title for lesson in lessons] == ["Variables", "Introduction"]

    def test_next_position(self, db_session, free_course, paid_course, course_lessons):
        repo = LessonRepository(db_session)

        assert repo.get_next_position(free_course.id) == 2
        assert repo.get_next_position(paid_course.id) == 0

    def test_sum_duration(self, db_session, free_course, paid_course, course_lessons):
        repo = LessonRepository(db_session)

        assert repo.sum_duration(free_course.id) == 420
        assert repo.sum_duration(paid_course.id) == 0
        assert repo.count_by_course(free_course.id) == 2
