"""
Repositories for courses and their lessons.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class CourseRepository(BaseRepository[db_models.Course]):
    """Repository for Course entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Course, db)

    def get_with_relations(self, course_id: int) -> Optional[db_models.Course]:
        """Load a course with its category and instructor in one query."""
        return (
            self.db.query(db_models.Course)
            .options(
                joinedload(db_models.Course.category),
                joinedload(db_models.Course.instructor),
            )
            .filter(db_models.Course.id == course_id)
            .first()
        )

    def get_public_courses(
        self,
        category_id: Optional[int] = None,
        level: Optional[db_models.CourseLevel] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[List[db_models.Course], int]:
        """
        List approved courses for the catalogue, newest first.

        Args:
            category_id: Filter by category
            level: Filter by level
            search: Case-insensitive substring of the title
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (courses, total matching count)
        """
        query = self.db.query(db_models.Course).filter(
            db_models.Course.status == db_models.CourseStatus.APPROVED
        )
        if category_id is not None:
            query = query.filter(db_models.Course.category_id == category_id)
        if level is not None:
            query = query.filter(db_models.Course.level == level)
        if search:
            query = query.filter(
                func.lower(db_models.Course.title).like(f"%{search.lower()}%")
            )

        total = query.count()
        courses = (
            query.options(
                joinedload(db_models.Course.category),
                joinedload(db_models.Course.instructor),
            )
            .order_by(db_models.Course.created_at.desc(), db_models.Course.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return courses, total

    def get_by_instructor(
        self,
        instructor_id: int,
        status: Optional[db_models.CourseStatus] = None,
    ) -> List[db_models.Course]:
        """Return an instructor's courses, newest first."""
        query = self.db.query(db_models.Course).filter(
            db_models.Course.instructor_id == instructor_id
        )
        if status is not None:
            query = query.filter(db_models.Course.status == status)
        return query.order_by(db_models.Course.created_at.desc()).all()

    def get_ids_by_instructor(self, instructor_id: int) -> List[int]:
        return [
            row[0]
            for row in self.db.query(db_models.Course.id)
            .filter(db_models.Course.instructor_id == instructor_id)
            .all()
        ]

    def get_by_status(
        self,
        status: Optional[db_models.CourseStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[db_models.Course]:
        """Return courses for admin review, optionally by status."""
        query = self.db.query(db_models.Course).options(
            joinedload(db_models.Course.category),
            joinedload(db_models.Course.instructor),
        )
        if status is not None:
            query = query.filter(db_models.Course.status == status)
        return (
            query.order_by(db_models.Course.updated_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_status(self, instructor_id: Optional[int] = None) -> dict[str, int]:
        """Return {status value: count}, zero-filled, optionally per instructor."""
        query = self.db.query(db_models.Course.status, func.count(db_models.Course.id))
        if instructor_id is not None:
            query = query.filter(db_models.Course.instructor_id == instructor_id)
        counts = {status.value: 0 for status in db_models.CourseStatus}
        for status, count in query.group_by(db_models.Course.status).all():
            counts[status.value] = count
        return counts


class LessonRepository(BaseRepository[db_models.Lesson]):
    """Repository for Lesson entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Lesson, db)

    def get_by_course(self, course_id: int) -> List[db_models.Lesson]:
        """Return a course's lessons in display order."""
        return (
            self.db.query(db_models.Lesson)
            .filter(db_models.Lesson.course_id == course_id)
            .order_by(db_models.Lesson.position, db_models.Lesson.id)
            .all()
        )

    def count_by_course(self, course_id: int) -> int:
        return (
            self.db.query(func.count(db_models.Lesson.id))
            .filter(db_models.Lesson.course_id == course_id)
            .scalar()
            or 0
        )

    def get_next_position(self, course_id: int) -> int:
        """Position for a lesson appended at the end of the course."""
        current = (
            self.db.query(func.max(db_models.Lesson.position))
            .filter(db_models.Lesson.course_id == course_id)
            .scalar()
        )
        return 0 if current is None else current + 1

    def sum_duration(self, course_id: int) -> int:
        """Total lesson duration of a course in seconds."""
        return (
            self.db.query(func.coalesce(func.sum(db_models.Lesson.duration), 0))
            .filter(db_models.Lesson.course_id == course_id)
            .scalar()
            or 0
        )
