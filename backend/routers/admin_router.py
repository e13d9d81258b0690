"""
Administrator endpoints: admins, course review, analytics and users.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from core.scheduler import get_scheduler_status
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services import CourseService, UserService
from services.analytics_service import AnalyticsService
from services.auth_service import AuthService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/add-admin", response_model=schemas.User, status_code=201)
def add_admin(
    admin: schemas.AdminCreate,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Create another administrator account."""
    return AuthService.create_admin(db, admin, current_user)


# Course review


@router.get("/courses", response_model=List[schemas.CourseSummary])
def list_courses(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """All courses regardless of status."""
    return CourseService.list_courses_for_review(db, skip=skip, limit=limit)


@router.get("/courses/pending", response_model=List[schemas.CourseSummary])
def list_pending_courses(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return CourseService.list_courses_for_review(
        db, db_models.CourseStatus.PENDING_APPROVAL, skip=skip, limit=limit
    )


@router.get("/courses/rejected", response_model=List[schemas.CourseSummary])
def list_rejected_courses(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return CourseService.list_courses_for_review(
        db, db_models.CourseStatus.REJECTED, skip=skip, limit=limit
    )


@router.post("/courses/{course_id}/approve", response_model=schemas.CourseSummary)
def approve_course(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Publish a course in the catalogue."""
    course = CourseService.review_course(
        db, course_id, db_models.CourseStatus.APPROVED, current_user
    )
    return CourseService.to_summary(course)


@router.post("/courses/{course_id}/reject", response_model=schemas.CourseSummary)
def reject_course(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    course = CourseService.review_course(
        db, course_id, db_models.CourseStatus.REJECTED, current_user
    )
    return CourseService.to_summary(course)


# Analytics


@router.get("/dashboard", response_model=schemas.AdminDashboard)
def get_dashboard(
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Platform totals and the six month enrollment chart."""
    return AnalyticsService.get_dashboard(db)


@router.get("/revenue", response_model=schemas.RevenueReport)
def get_revenue(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return AnalyticsService.get_revenue(db, year)


@router.get("/payouts", response_model=List[schemas.InstructorPayout])
def get_payouts(
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return AnalyticsService.get_payouts(db)


@router.get("/transactions", response_model=schemas.TransactionListResponse)
def get_transactions(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Completed payments, newest first, with student and course names."""
    return AnalyticsService.get_transactions(db, skip=skip, limit=limit)


@router.get("/enrollment-stats", response_model=schemas.EnrollmentStats)
def get_enrollment_stats(
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return AnalyticsService.get_enrollment_stats(db)


@router.get("/course-performance", response_model=List[schemas.CoursePerformance])
def get_course_performance(
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return AnalyticsService.get_course_performance(db)


# Users


@router.get("/users", response_model=schemas.UserListResponse)
def list_users(
    role: Optional[db_models.UserRole] = None,
    search: Optional[str] = Query(None, max_length=100),
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """
    List accounts, optionally filtered by role and a name/email search.
    """
    return UserService.list_users(db, role=role, search=search, skip=skip, limit=limit)


@router.get("/instructors", response_model=schemas.UserListResponse)
def list_instructors(
    search: Optional[str] = Query(None, max_length=100),
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return UserService.list_users(
        db, role=db_models.UserRole.INSTRUCTOR, search=search, skip=skip, limit=limit
    )


@router.get("/students", response_model=schemas.UserListResponse)
def list_students(
    search: Optional[str] = Query(None, max_length=100),
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return UserService.list_users(
        db, role=db_models.UserRole.STUDENT, search=search, skip=skip, limit=limit
    )


@router.get("/users/{user_id}", response_model=schemas.UserDetail)
def get_user(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return UserService.get_user_detail(db, user_id)


@router.get("/scheduler", response_model=schemas.SchedulerStatus)
def scheduler_status(
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    """Background jobs and their next run times."""
    return get_scheduler_status()
