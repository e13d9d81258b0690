"""Student enrollment endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import EnrollmentService

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post("", response_model=schemas.Enrollment, status_code=201)
def enroll(
    payload: schemas.EnrollmentCreate,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
):
    """
    Enroll in a free course.

    Paid courses go through the payment checkout instead.
    """
    return EnrollmentService.enroll(db, payload.course_id, current_user)


@router.get("", response_model=List[schemas.EnrollmentWithCourse])
def list_my_enrollments(
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
) -> List[schemas.EnrollmentWithCourse]:
    return EnrollmentService.list_enrollments(db, current_user.id)


@router.put("/unenroll/{course_id}", response_model=schemas.Enrollment)
def unenroll(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
):
    return EnrollmentService.unenroll(db, course_id, current_user)


@router.get("/course/{course_id}", response_model=schemas.Enrollment)
def get_enrollment(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
):
    """The caller's enrollment in a course, 404 when there is none."""
    return EnrollmentService.get_enrollment(db, course_id, current_user.id)
