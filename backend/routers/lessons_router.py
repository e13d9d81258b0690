"""Lesson authoring and watch tracking endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import LessonService

router = APIRouter(prefix="/lessons", tags=["lessons"])


@router.get("/completed", response_model=schemas.CompletedLessons)
def get_completed_lessons(
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
) -> schemas.CompletedLessons:
    """IDs of every lesson the student completed, across enrollments."""
    return schemas.CompletedLessons(
        lesson_ids=LessonService.get_completed_lesson_ids(db, current_user.id)
    )


@router.get("/course/{course_id}", response_model=List[schemas.Lesson])
def list_lessons(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """All lessons of an owned course, in order."""
    return LessonService.list_lessons(db, course_id, current_user)


@router.post("/course/{course_id}", response_model=schemas.Lesson, status_code=201)
def add_lesson(
    course_id: int,
    lesson: schemas.LessonCreate,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """
    Append a lesson to an owned course.

    Video and pdf lessons need a file_url.
    """
    return LessonService.add_lesson(db, course_id, lesson, current_user)


@router.put("/course/{course_id}/reorder", response_model=List[schemas.Lesson])
def reorder_lessons(
    course_id: int,
    payload: schemas.LessonReorder,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Reorder lessons; the list must hold every lesson ID of the course once."""
    return LessonService.reorder_lessons(
        db, course_id, payload.lesson_ids, current_user
    )


@router.put("/{lesson_id}", response_model=schemas.Lesson)
def update_lesson(
    lesson_id: int,
    lesson: schemas.LessonUpdate,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    return LessonService.update_lesson(db, lesson_id, lesson, current_user)


@router.delete("/{lesson_id}", response_model=schemas.MessageResponse)
def delete_lesson(
    lesson_id: int,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    LessonService.delete_lesson(db, lesson_id, current_user)
    return {"message": "Lesson deleted"}


@router.post("/{lesson_id}/watched", response_model=schemas.LessonProgressResponse)
def mark_watched(
    lesson_id: int,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
) -> schemas.LessonProgressResponse:
    """
    Mark a lesson as watched for the student's enrollment.

    Domain exceptions are caught by centralized exception handlers.
    """
    return LessonService.mark_watched(db, lesson_id, current_user)


@router.put("/{lesson_id}/progress", response_model=schemas.LessonProgressResponse)
def save_progress(
    lesson_id: int,
    progress: schemas.LessonProgressUpdate,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
) -> schemas.LessonProgressResponse:
    """Store watch progress; the lesson completes past the configured percent."""
    return LessonService.save_progress(db, lesson_id, progress, current_user)
