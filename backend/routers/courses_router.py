"""Public course catalogue endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationSkip
from repositories.database import get_db
from services import CourseService

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=schemas.CourseListResponse)
def list_courses(
    category_id: Optional[int] = None,
    level: Optional[db_models.CourseLevel] = None,
    search: Optional[str] = Query(None, max_length=100),
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 20,
    db: Session = Depends(get_db),
) -> schemas.CourseListResponse:
    """
    List approved courses.

    Filters by category, level and a title search.
    """
    return CourseService.list_public_courses(
        db,
        category_id=category_id,
        level=level,
        search=search,
        skip=skip,
        limit=limit,
    )


@router.get("/{course_id}", response_model=schemas.CourseDetail)
def get_course(
    course_id: int,
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
    db: Session = Depends(get_db),
) -> schemas.CourseDetail:
    """
    Get a course with its lessons and exams.

    Lesson files stay hidden unless the lesson is a free preview or the
    caller is enrolled, owns the course or is an admin.
    """
    return CourseService.get_course_detail(db, course_id, current_user)
