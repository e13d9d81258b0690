"""
Instructor endpoints: own courses, exams, analytics and students.

Every route requires an instructor (or admin) account; ownership of the
course is checked by the services.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services import CourseService, ExamService
from services.instructor_service import InstructorService

router = APIRouter(prefix="/instructor", tags=["instructor"])


# Courses


@router.get("/courses", response_model=List[schemas.CourseSummary])
def list_my_courses(
    status: Optional[db_models.CourseStatus] = None,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Courses owned by the current instructor, newest first."""
    return CourseService.list_instructor_courses(db, current_user.id, status)


@router.post("/courses", response_model=schemas.CourseSummary, status_code=201)
def create_course(
    course: schemas.CourseCreate,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """
    Create a course as draft or submitted for approval.

    The category must be approved.
    """
    created = CourseService.create_course(db, course, current_user)
    return CourseService.to_summary(created)


@router.put("/courses/{course_id}", response_model=schemas.CourseSummary)
def update_course(
    course_id: int,
    course: schemas.CourseUpdate,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    updated = CourseService.update_course(db, course_id, course, current_user)
    return CourseService.to_summary(updated)


@router.put("/courses/{course_id}/status", response_model=schemas.CourseSummary)
def set_course_status(
    course_id: int,
    payload: schemas.CourseStatusUpdate,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Move an owned course between draft and pending approval."""
    updated = CourseService.set_instructor_status(
        db, course_id, payload.status, current_user
    )
    return CourseService.to_summary(updated)


@router.delete("/courses/{course_id}", response_model=schemas.MessageResponse)
def delete_course(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """
    Delete an owned course with its lessons, exams and results.

    Refused while students are enrolled.
    """
    CourseService.delete_course(db, course_id, current_user)
    return {"message": "Course deleted"}


# Exams


@router.get(
    "/courses/{course_id}/exams", response_model=List[schemas.ExamDetailWithAnswers]
)
def list_course_exams(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    return ExamService.list_course_exams_for_owner(db, course_id, current_user)


@router.post(
    "/courses/{course_id}/exams",
    response_model=schemas.ExamDetailWithAnswers,
    status_code=201,
)
def create_exam(
    course_id: int,
    exam: schemas.ExamCreate,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """
    Add an exam to an owned course.

    Every question needs at least two options, one of which is the
    correct answer.
    """
    created = ExamService.create_exam(db, course_id, exam, current_user)
    return ExamService.to_detail(created, with_answers=True)


@router.put("/exams/{exam_id}", response_model=schemas.ExamDetailWithAnswers)
def update_exam(
    exam_id: int,
    exam: schemas.ExamUpdate,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Update an exam; a given question list replaces the existing one."""
    updated = ExamService.update_exam(db, exam_id, exam, current_user)
    return ExamService.to_detail(updated, with_answers=True)


@router.delete("/exams/{exam_id}", response_model=schemas.MessageResponse)
def delete_exam(
    exam_id: int,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    ExamService.delete_exam(db, exam_id, current_user)
    return {"message": "Exam deleted"}


@router.get("/exams/{exam_id}/results", response_model=List[schemas.ExamStudentResult])
def get_exam_results(
    exam_id: int,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Best score per student, highest first."""
    return ExamService.get_exam_results(db, exam_id, current_user)


# Analytics


@router.get("/dashboard", response_model=schemas.InstructorDashboard)
def get_dashboard(
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    return InstructorService.get_dashboard(db, current_user)


@router.get("/earnings", response_model=schemas.InstructorEarnings)
def get_earnings(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Earnings of one year (default: current) by month."""
    return InstructorService.get_earnings(db, current_user, year)


@router.get("/payouts", response_model=schemas.TransactionListResponse)
def get_payouts(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    return InstructorService.get_payouts(db, current_user, skip=skip, limit=limit)


@router.get("/course-analytics", response_model=List[schemas.CourseAnalytics])
def get_course_analytics(
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    return InstructorService.get_course_analytics(db, current_user)


@router.get("/students", response_model=List[schemas.InstructorStudent])
def get_students(
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 100,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Enrollments in the instructor's courses, newest first."""
    return InstructorService.get_students(db, current_user, skip=skip, limit=limit)


@router.get("/students-progress", response_model=List[schemas.StudentProgress])
def get_students_progress(
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 100,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    return InstructorService.get_students_progress(
        db, current_user, skip=skip, limit=limit
    )
