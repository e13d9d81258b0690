"""
Repository for forum content reports.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from repositories.base import BaseRepository
from repositories.db_models import (
    ForumReport,
    ReportReason,
    ReportStatus,
    ReportTargetType,
)


class ForumReportRepository(BaseRepository[ForumReport]):
    """Repository for report data access."""

    def __init__(self, db: Session):
        """
        Initialize report repository.

        Args:
            db: Database session
        """
        super().__init__(ForumReport, db)

    def get_pending_by_target_and_reporter(
        self,
        target_type: ReportTargetType,
        target_id: int,
        reporter_id: int,
    ) -> ForumReport | None:
        """
        Check if the user already has an open report on this content.

        Served by the (target_type, target_id, reporter_id, status) index.

        Args:
            target_type: Kind of content
            target_id: ID of the content
            reporter_id: ID of the reporting user

        Returns:
            Pending report if found, None otherwise
        """
        return (
            self.db.query(ForumReport)
            .filter(
                ForumReport.target_type == target_type,
                ForumReport.target_id == target_id,
                ForumReport.reporter_id == reporter_id,
                ForumReport.status == ReportStatus.PENDING,
            )
            .first()
        )

    def get_pending_for_targets(
        self,
        target_type: ReportTargetType,
        target_ids: List[int],
    ) -> List[ForumReport]:
        """Pending reports pointing at any of the given targets."""
        if not target_ids:
            return []
        return (
            self.db.query(ForumReport)
            .filter(
                ForumReport.target_type == target_type,
                ForumReport.target_id.in_(target_ids),
                ForumReport.status == ReportStatus.PENDING,
            )
            .all()
        )

    def get_filtered(
        self,
        status: Optional[ReportStatus] = None,
        reason: Optional[ReportReason] = None,
        course_ids: Optional[List[int]] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[List[ForumReport], int]:
        """
        Moderation queue, newest first.

        Args:
            status: Filter by status
            reason: Filter by reason
            course_ids: Restrict to these courses; None means every course
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (reports with reporter and target user loaded, total count)
        """
        query = self.db.query(ForumReport)
        if course_ids is not None:
            if not course_ids:
                return [], 0
            query = query.filter(ForumReport.course_id.in_(course_ids))
        if status is not None:
            query = query.filter(ForumReport.status == status)
        if reason is not None:
            query = query.filter(ForumReport.reason == reason)

        total = query.count()
        reports = (
            query.options(
                joinedload(ForumReport.reporter),
                joinedload(ForumReport.target_user),
                joinedload(ForumReport.course),
            )
            .order_by(ForumReport.created_at.desc(), ForumReport.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return reports, total

    def count_pending(self) -> int:
        return (
            self.db.query(func.count(ForumReport.id))
            .filter(ForumReport.status == ReportStatus.PENDING)
            .scalar()
            or 0
        )
