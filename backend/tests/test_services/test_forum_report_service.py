"""
Unit tests for ForumReportService.
"""

import pytest

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    CannotReportOwnContentException,
    DuplicateReportException,
    InsufficientPermissionsException,
    ReportAlreadyActionedException,
    ReportTargetNotFoundException,
)
from services.forum_reply_service import ForumReplyService
from services.forum_report_service import ForumReportService
from services.forum_service import ForumService
from tests.conftest import make_enrollment


@pytest.fixture
def reply(db_session, student_user, instructor_user, enrollment):
    """A student reply under an instructor answer."""
    question = ForumService.create_question(
        db_session,
        schemas.QuestionCreate(
            course_id=enrollment.course_id,
            title="Is this spam?",
            description="A question",
        ),
        student_user,
    )
    answer = ForumService.create_answer(
        db_session,
        schemas.AnswerCreate(question_id=question.id, answer_text="An answer"),
        instructor_user,
    )
    return ForumReplyService.create_reply(
        db_session,
        schemas.ReplyCreate(
            question_id=question.id, answer_id=answer.id, reply_text="Buy now!"
        ),
        student_user,
    )


@pytest.fixture
def reporter(db_session, other_student, free_course):
    make_enrollment(db_session, other_student, free_course)
    return other_student


def _report(target_id, target_type=db_models.ReportTargetType.REPLY):
    return schemas.ReportCreate(
        target_type=target_type,
        target_id=target_id,
        reason=db_models.ReportReason.SPAM,
        note="advertising",
    )


class TestCreateReport:
    """Tests for ForumReportService.create_report"""

    def test_report_starts_pending(self, db_session, reporter, reply, student_user):
        report = ForumReportService.create_report(
            db_session, _report(reply.id), reporter
        )

        assert report.status == db_models.ReportStatus.PENDING
        assert report.target_user_id == student_user.id
        assert report.course_id is not None

    def test_cannot_report_own_content(self, db_session, student_user, reply):
        with pytest.raises(CannotReportOwnContentException):
            ForumReportService.create_report(
                db_session, _report(reply.id), student_user
            )

    def test_duplicate_pending_report(self, db_session, reporter, reply):
        ForumReportService.create_report(db_session, _report(reply.id), reporter)

        with pytest.raises(DuplicateReportException):
            ForumReportService.create_report(db_session, _report(reply.id), reporter)

    def test_missing_target(self, db_session, reporter, enrollment):
        with pytest.raises(ReportTargetNotFoundException):
            ForumReportService.create_report(db_session, _report(404), reporter)

    def test_deleted_reply_cannot_be_reported(
        self, db_session, reporter, reply, student_user
    ):
        ForumReplyService.delete_reply(db_session, reply.id, student_user)

        with pytest.raises(ReportTargetNotFoundException):
            ForumReportService.create_report(db_session, _report(reply.id), reporter)


class TestActionReport:
    """Tests for ForumReportService.action_report"""

    def test_resolve_with_delete_content(
        self, db_session, reporter, reply, instructor_user
    ):
        report = ForumReportService.create_report(
            db_session, _report(reply.id), reporter
        )

        result = ForumReportService.action_report(
            db_session,
            report.id,
            schemas.ReportAction(
                action=db_models.ReportStatus.RESOLVED,
                action_note="Spam removed",
                delete_content=True,
            ),
            instructor_user,
        )

        assert result.status == db_models.ReportStatus.RESOLVED
        assert result.action_by == instructor_user.id
        stored = db_session.get(db_models.ForumReply, reply.id)
        assert stored.is_deleted is True
        assert stored.delete_reason == "Spam removed"

    def test_reject_keeps_content(self, db_session, reporter, reply, admin_user):
        report = ForumReportService.create_report(
            db_session, _report(reply.id), reporter
        )

        ForumReportService.action_report(
            db_session,
            report.id,
            schemas.ReportAction(
                action=db_models.ReportStatus.REJECTED, delete_content=True
            ),
            admin_user,
        )

        assert db_session.get(db_models.ForumReply, reply.id).is_deleted is False

    def test_cannot_action_twice(self, db_session, reporter, reply, admin_user):
        report = ForumReportService.create_report(
            db_session, _report(reply.id), reporter
        )
        action = schemas.ReportAction(action=db_models.ReportStatus.REJECTED)
        ForumReportService.action_report(db_session, report.id, action, admin_user)

        with pytest.raises(ReportAlreadyActionedException):
            ForumReportService.action_report(db_session, report.id, action, admin_user)

    def test_other_instructor_cannot_action(
        self, db_session, reporter, reply, other_instructor
    ):
        report = ForumReportService.create_report(
            db_session, _report(reply.id), reporter
        )

        with pytest.raises(InsufficientPermissionsException):
            ForumReportService.action_report(
                db_session,
                report.id,
                schemas.ReportAction(action=db_models.ReportStatus.RESOLVED),
                other_instructor,
            )

    def test_pending_is_not_an_action(self):
        with pytest.raises(ValueError):
            schemas.ReportAction(action=db_models.ReportStatus.PENDING)


class TestListReports:
    """Tests for the moderation queue."""

    def test_instructor_sees_own_course_reports(
        self, db_session, reporter, reply, instructor_user, other_instructor
    ):
        ForumReportService.create_report(db_session, _report(reply.id), reporter)

        own = ForumReportService.list_reports(db_session, instructor_user)
        other = ForumReportService.list_reports(db_session, other_instructor)

        assert own.total == 1
        assert own.reports[0].reporter_name == "Student Two"
        assert own.reports[0].course_title == "Python Basics"
        assert other.total == 0

    def test_filter_by_status(self, db_session, reporter, reply, admin_user):
        ForumReportService.create_report(db_session, _report(reply.id), reporter)

        resolved = ForumReportService.list_reports(
            db_session, admin_user, status=db_models.ReportStatus.RESOLVED
        )
        pending = ForumReportService.list_reports(
            db_session, admin_user, status=db_models.ReportStatus.PENDING
        )

        assert resolved.total == 0
        assert pending.total == 1
