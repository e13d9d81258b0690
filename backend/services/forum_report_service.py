"""
Forum Report Service

Reports against forum questions, answers and replies, and their handling
by moderators.

A report's target is polymorphic (target_type names the table), so the
target is looked up and validated here when the report is filed.
"""

from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from helpers.time_utils import utc_now
from models.exceptions import (
    CannotReportOwnContentException,
    DuplicateReportException,
    InsufficientPermissionsException,
    ReportAlreadyActionedException,
    ReportNotFoundException,
    ReportTargetNotFoundException,
)
from repositories.course_repository import CourseRepository
from repositories.forum_reply_repository import ForumReplyRepository
from repositories.forum_report_repository import ForumReportRepository
from repositories.forum_repository import (
    ForumAnswerRepository,
    ForumQuestionRepository,
)
from services.forum_access import ForumAccess
from services.forum_reply_service import soft_delete_reply

ReportTarget = Tuple[int, int]  # (author user id, course id)


class ForumReportService:
    """Service for forum content reports."""

    @staticmethod
    def _resolve_target(
        db: Session, target_type: db_models.ReportTargetType, target_id: int
    ) -> ReportTarget:
        """
        Find the reported content and return its author and course.

        Raises:
            ReportTargetNotFoundException: If missing, or a deleted reply
        """
        question_repo = ForumQuestionRepository(db)
        not_found = ReportTargetNotFoundException(target_type.value, target_id)

        if target_type == db_models.ReportTargetType.QUESTION:
            question = question_repo.get_by_id(target_id)
            if question is None:
                raise not_found
            return question.user_id, question.course_id

        if target_type == db_models.ReportTargetType.ANSWER:
            answer = ForumAnswerRepository(db).get_by_id(target_id)
            if answer is None:
                raise not_found
            author_id, question_id = answer.user_id, answer.question_id
        else:
            reply = ForumReplyRepository(db).get_by_id(target_id)
            if reply is None or reply.is_deleted:
                raise not_found
            author_id, question_id = reply.user_id, reply.question_id

        question = question_repo.get_by_id(question_id)
        if question is None:
            raise not_found
        return author_id, question.course_id

    @staticmethod
    def to_schema(report: db_models.ForumReport) -> schemas.ReportWithNames:
        item = schemas.ReportWithNames.model_validate(report)
        item.reporter_name = report.reporter.name if report.reporter else None
        item.target_user_name = (
            report.target_user.name if report.target_user else None
        )
        item.course_title = report.course.title if report.course else None
        return item

    @staticmethod
    def create_report(
        db: Session, data: schemas.ReportCreate, user: db_models.User
    ) -> db_models.ForumReport:
        """
        File a report against forum content.

        Args:
            db: Database session
            data: Target, reason and optional note
            user: Reporting user

        Returns:
            The pending report

        Raises:
            ReportTargetNotFoundException: If the target does not exist
            CannotReportOwnContentException: If the user wrote the content
            DuplicateReportException: If the user already has a pending
                report on it
        """
        author_id, course_id = ForumReportService._resolve_target(
            db, data.target_type, data.target_id
        )
        ForumAccess.check_course(db, course_id, user)

        if author_id == user.id:
            raise CannotReportOwnContentException()

        repo = ForumReportRepository(db)
        if repo.get_pending_by_target_and_reporter(
            data.target_type, data.target_id, user.id
        ):
            raise DuplicateReportException()

        report = db_models.ForumReport(
            target_type=data.target_type,
            target_id=data.target_id,
            target_user_id=author_id,
            course_id=course_id,
            reporter_id=user.id,
            reason=data.reason,
            note=sanitize_plain_text(data.note) or "",
        )
        report = repo.create(report)
        logger.info(
            f"Forum report {report.id}: {data.target_type.value} {data.target_id} "
            f"reported by user {user.id} ({data.reason.value})"
        )
        return report

    @staticmethod
    def list_reports(
        db: Session,
        user: db_models.User,
        status: Optional[db_models.ReportStatus] = None,
        reason: Optional[db_models.ReportReason] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> schemas.ReportListResponse:
        """Moderation queue: everything for admins, own courses for instructors."""
        course_ids = None
        if not user.is_admin:
            course_ids = CourseRepository(db).get_ids_by_instructor(user.id)
        reports, total = ForumReportRepository(db).get_filtered(
            status=status,
            reason=reason,
            course_ids=course_ids,
            skip=skip,
            limit=limit,
        )
        return schemas.ReportListResponse(
            reports=[ForumReportService.to_schema(r) for r in reports],
            total=total,
        )

    @staticmethod
    def action_report(
        db: Session,
        report_id: int,
        data: schemas.ReportAction,
        moderator: db_models.User,
    ) -> schemas.ReportWithNames:
        """
        Resolve or reject a pending report.

        With ``delete_content`` on a resolved reply report, the reply is soft
        deleted in the same transaction.

        Raises:
            ReportNotFoundException: If the report does not exist
            InsufficientPermissionsException: Unless admin or the course's
                instructor
            ReportAlreadyActionedException: If the report is not pending
        """
        repo = ForumReportRepository(db)
        report = repo.get_by_id(report_id)
        if report is None:
            raise ReportNotFoundException(report_id)

        if not moderator.is_admin:
            course = (
                CourseRepository(db).get_by_id(report.course_id)
                if report.course_id is not None
                else None
            )
            if course is None or course.instructor_id != moderator.id:
                raise InsufficientPermissionsException(
                    "Only the course instructor or an admin can action this report"
                )

        if report.status != db_models.ReportStatus.PENDING:
            raise ReportAlreadyActionedException()

        note = sanitize_plain_text(data.action_note) or ""
        report.status = data.action
        report.action_by = moderator.id
        report.action_at = utc_now()
        report.action_note = note

        if (
            data.delete_content
            and data.action == db_models.ReportStatus.RESOLVED
            and report.target_type == db_models.ReportTargetType.REPLY
        ):
            reply = ForumReplyRepository(db).get_by_id(report.target_id)
            if reply is not None and not reply.is_deleted:
                soft_delete_reply(reply, deleted_by=moderator.id, reason=note)

        report = repo.update(report)
        logger.info(
            f"Forum report {report_id} {data.action.value} by user {moderator.id}"
        )
        return ForumReportService.to_schema(report)
