"""
Lesson Service

Lesson authoring for instructors and watch tracking for students.
"""

from typing import List

from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_html, sanitize_plain_text, sanitize_url
from models.config import settings
from models.exceptions import (
    LessonNotFoundException,
    ValidationException,
)
from repositories.course_repository import CourseRepository, LessonRepository
from repositories.enrollment_repository import (
    CompletedLessonRepository,
    LessonProgressRepository,
)
from services.course_service import CourseService
from services.progress_service import ProgressService

# Content types that must point at an uploaded file
FILE_CONTENT_TYPES = {
    db_models.LessonContentType.VIDEO,
    db_models.LessonContentType.PDF,
}


class LessonService:
    """Service for lesson business logic."""

    @staticmethod
    def _validate_file(
        content_type: db_models.LessonContentType, file_url: str | None
    ) -> None:
        if content_type in FILE_CONTENT_TYPES and not file_url:
            raise ValidationException(
                f"A file is required for {content_type.value} lessons"
            )

    @staticmethod
    def _refresh_course(
        db: Session, course: db_models.Course
    ) -> List[db_models.Enrollment]:
        """Refresh the course duration and its enrollments' progress (no commit)."""
        db.flush()
        course.total_duration = LessonRepository(db).sum_duration(course.id)
        return ProgressService.recalculate_course(db, course.id)

    @staticmethod
    def _get_owned_lesson(
        db: Session, lesson_id: int, user: db_models.User
    ) -> db_models.Lesson:
        lesson = LessonRepository(db).get_by_id(lesson_id)
        if lesson is None:
            raise LessonNotFoundException(lesson_id)
        CourseService.get_owned_course(db, lesson.course_id, user)
        return lesson

    @staticmethod
    def list_lessons(
        db: Session, course_id: int, user: db_models.User
    ) -> List[db_models.Lesson]:
        CourseService.get_owned_course(db, course_id, user)
        return LessonRepository(db).get_by_course(course_id)

    @staticmethod
    def add_lesson(
        db: Session,
        course_id: int,
        data: schemas.LessonCreate,
        user: db_models.User,
    ) -> db_models.Lesson:
        """
        Append a lesson to an owned course.

        Raises:
            ValidationException: If a video or pdf lesson has no file
        """
        course = CourseService.get_owned_course(db, course_id, user)
        file_url = sanitize_url(data.file_url) or None
        LessonService._validate_file(data.content_type, file_url)

        repo = LessonRepository(db)
        lesson = db_models.Lesson(
            course_id=course.id,
            title=sanitize_plain_text(data.title),
            content_type=data.content_type,
            file_url=file_url,
            description=sanitize_html(data.description),
            is_preview_free=data.is_preview_free,
            duration=data.duration,
            position=repo.get_next_position(course.id),
        )
        repo.add(lesson)
        newly_completed = LessonService._refresh_course(db, course)
        repo.commit()
        ProgressService.notify_completed(newly_completed)
        repo.refresh(lesson)
        return lesson

    @staticmethod
    def update_lesson(
        db: Session,
        lesson_id: int,
        data: schemas.LessonUpdate,
        user: db_models.User,
    ) -> db_models.Lesson:
        lesson = LessonService._get_owned_lesson(db, lesson_id, user)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("title"):
            lesson.title = sanitize_plain_text(updates["title"])
        if updates.get("content_type") is not None:
            lesson.content_type = updates["content_type"]
        if "file_url" in updates:
            lesson.file_url = sanitize_url(updates["file_url"]) or None
        if "description" in updates:
            lesson.description = sanitize_html(updates["description"])
        if updates.get("is_preview_free") is not None:
            lesson.is_preview_free = updates["is_preview_free"]
        if updates.get("duration") is not None:
            lesson.duration = updates["duration"]

        LessonService._validate_file(lesson.content_type, lesson.file_url)

        course = CourseRepository(db).get_by_id(lesson.course_id)
        newly_completed = LessonService._refresh_course(db, course)
        repo = LessonRepository(db)
        repo.commit()
        ProgressService.notify_completed(newly_completed)
        repo.refresh(lesson)
        return lesson

    @staticmethod
    def delete_lesson(db: Session, lesson_id: int, user: db_models.User) -> None:
        lesson = LessonService._get_owned_lesson(db, lesson_id, user)
        course = CourseRepository(db).get_by_id(lesson.course_id)
        repo = LessonRepository(db)
        db.delete(lesson)
        newly_completed = LessonService._refresh_course(db, course)
        repo.commit()
        ProgressService.notify_completed(newly_completed)

    @staticmethod
    def reorder_lessons(
        db: Session,
        course_id: int,
        lesson_ids: List[int],
        user: db_models.User,
    ) -> List[db_models.Lesson]:
        """
        Reorder a course's lessons.

        Args:
            lesson_ids: Every lesson ID of the course, in the new order

        Raises:
            ValidationException: If the IDs are not exactly the course's lessons
        """
        CourseService.get_owned_course(db, course_id, user)
        repo = LessonRepository(db)
        lessons = repo.get_by_course(course_id)

        if len(lesson_ids) != len(set(lesson_ids)) or set(lesson_ids) != {
            lesson.id for lesson in lessons
        }:
            raise ValidationException(
                "lesson_ids must list every lesson of the course exactly once"
            )

        by_id = {lesson.id: lesson for lesson in lessons}
        for position, lesson_id in enumerate(lesson_ids):
            by_id[lesson_id].position = position
        repo.commit()
        return repo.get_by_course(course_id)

    @staticmethod
    def mark_watched(
        db: Session, lesson_id: int, student: db_models.User
    ) -> schemas.LessonProgressResponse:
        """
        Mark a lesson complete for the student's current enrollment.

        Raises:
            LessonNotFoundException: If the lesson does not exist
            NotEnrolledException: If the student has no current enrollment
        """
        lesson = LessonRepository(db).get_by_id(lesson_id)
        if lesson is None:
            raise LessonNotFoundException(lesson_id)
        enrollment = ProgressService.require_current_enrollment(
            db, student.id, lesson.course_id
        )

        progress_repo = LessonProgressRepository(db)
        row = progress_repo.get(enrollment.id, lesson.id)
        if row is None:
            row = db_models.LessonProgress(
                enrollment_id=enrollment.id, lesson_id=lesson.id
            )
            progress_repo.add(row)
        row.watched_percent = 100.0

        return LessonService._complete_and_respond(db, enrollment, lesson, row, True)

    @staticmethod
    def save_progress(
        db: Session,
        lesson_id: int,
        data: schemas.LessonProgressUpdate,
        student: db_models.User,
    ) -> schemas.LessonProgressResponse:
        """
        Store watch progress; the lesson completes at the configured percent.

        Watched percent never goes down; the last position always follows the
        player.
        """
        lesson = LessonRepository(db).get_by_id(lesson_id)
        if lesson is None:
            raise LessonNotFoundException(lesson_id)
        enrollment = ProgressService.require_current_enrollment(
            db, student.id, lesson.course_id
        )

        progress_repo = LessonProgressRepository(db)
        row = progress_repo.get(enrollment.id, lesson.id)
        if row is None:
            row = db_models.LessonProgress(
                enrollment_id=enrollment.id,
                lesson_id=lesson.id,
                watched_percent=0.0,
            )
            progress_repo.add(row)
        row.watched_percent = max(row.watched_percent or 0.0, data.watched_percent)
        row.last_position = data.last_position

        completed = row.watched_percent >= settings.LESSON_COMPLETION_PERCENT
        return LessonService._complete_and_respond(
            db, enrollment, lesson, row, completed
        )

    @staticmethod
    def _complete_and_respond(
        db: Session,
        enrollment: db_models.Enrollment,
        lesson: db_models.Lesson,
        row: db_models.LessonProgress,
        completed: bool,
    ) -> schemas.LessonProgressResponse:
        completed_repo = CompletedLessonRepository(db)
        already = completed_repo.get(enrollment.id, lesson.id) is not None
        if completed and not already:
            completed_repo.add(
                db_models.CompletedLesson(
                    enrollment_id=enrollment.id, lesson_id=lesson.id
                )
            )
        enrollment.last_lesson_id = lesson.id
        db.flush()

        just_completed = ProgressService.recalculate(db, enrollment)
        completed_repo.commit()
        if just_completed:
            ProgressService.notify_completed([enrollment])

        return schemas.LessonProgressResponse(
            lesson_id=lesson.id,
            watched_percent=row.watched_percent,
            last_position=row.last_position or 0.0,
            is_completed=completed or already,
            course_progress=enrollment.progress,
            enrollment_status=enrollment.status,
            certificate=enrollment.certificate,
        )

    @staticmethod
    def get_completed_lesson_ids(db: Session, student_id: int) -> List[int]:
        return CompletedLessonRepository(db).get_lesson_ids_for_student(student_id)
