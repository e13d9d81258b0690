"""
Forum access rules shared by the question, reply and report services.
"""

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import (
    InsufficientPermissionsException,
    NotEnrolledException,
    QuestionLockedException,
    QuestionNotFoundException,
)
from repositories.enrollment_repository import EnrollmentRepository
from repositories.forum_repository import ForumQuestionRepository
from services.course_service import CourseService, is_enrollment_current


class ForumAccess:
    """Who may read and write a course's discussion."""

    @staticmethod
    def is_moderator(course: db_models.Course, user: db_models.User) -> bool:
        """Admins and the course's own instructor moderate its forum."""
        return CourseService.can_manage(course, user)

    @staticmethod
    def check_course(
        db: Session, course_id: int, user: db_models.User
    ) -> db_models.Course:
        """
        Require access to a course's forum.

        Admins always pass, instructors only on their own courses, everyone
        else needs a current enrollment.

        Raises:
            CourseNotFoundException: If the course does not exist
            InsufficientPermissionsException: For another instructor's course
            NotEnrolledException: If a student is not enrolled
        """
        course = CourseService.get_course_or_raise(db, course_id)
        if ForumAccess.is_moderator(course, user):
            return course
        if user.is_instructor:
            raise InsufficientPermissionsException(
                "Instructors can only access forums of their own courses"
            )
        enrollment = EnrollmentRepository(db).get_by_student_and_course(
            user.id, course_id
        )
        if not is_enrollment_current(enrollment):
            raise NotEnrolledException()
        return course

    @staticmethod
    def get_question(
        db: Session, question_id: int, user: db_models.User
    ) -> tuple[db_models.ForumQuestion, db_models.Course]:
        """Load a question the user may access, with its course."""
        question = ForumQuestionRepository(db).get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundException(question_id)
        course = ForumAccess.check_course(db, question.course_id, user)
        return question, course

    @staticmethod
    def require_moderator(course: db_models.Course, user: db_models.User) -> None:
        if not ForumAccess.is_moderator(course, user):
            raise InsufficientPermissionsException(
                "Only the course instructor or an admin can do this"
            )

    @staticmethod
    def require_unlocked(question: db_models.ForumQuestion) -> None:
        if question.is_locked:
            raise QuestionLockedException()
