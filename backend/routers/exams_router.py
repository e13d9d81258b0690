"""Exam taking endpoints for students."""

from typing import List, Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import ExamService

router = APIRouter(prefix="/exams", tags=["exams"])


@router.get("/course/{course_id}", response_model=List[schemas.ExamSummary])
def list_course_exams(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    return ExamService.list_course_exams(db, course_id, current_user)


@router.get("/progress/{course_id}", response_model=List[schemas.ExamProgress])
def get_exam_progress(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
):
    """Per exam progress of the caller, unattempted exams included."""
    return ExamService.get_progress(db, course_id, current_user)


@router.get("/{exam_id}", response_model=None)
def get_exam(
    exam_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> Union[schemas.ExamDetailWithAnswers, schemas.ExamDetail]:
    """
    Get an exam with its questions.

    Correct answers are only included for the course's instructor and
    admins.
    """
    return ExamService.get_exam(db, exam_id, current_user)


@router.post("/{exam_id}/submit", response_model=schemas.ExamSubmitResponse)
def submit_exam(
    exam_id: int,
    submission: schemas.ExamSubmit,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
) -> schemas.ExamSubmitResponse:
    """
    Submit answers for scoring.

    Unanswered questions count as wrong. Limited to a fixed number of
    attempts per exam.
    """
    return ExamService.submit_exam(db, exam_id, submission, current_user)


@router.get("/{exam_id}/result", response_model=schemas.ExamResultResponse)
def get_exam_result(
    exam_id: int,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
) -> schemas.ExamResultResponse:
    return ExamService.get_result(db, exam_id, current_user)
