"""
Course discussion forum: questions, answers, replies and reports.

Access to a course's forum requires a current enrollment, ownership of
the course or the admin role.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services import ForumReplyService, ForumReportService, ForumService

router = APIRouter(prefix="/forum", tags=["forum"])


# Questions


@router.get("/course/{course_id}/count", response_model=schemas.ForumCount)
def count_course_questions(course_id: int, db: Session = Depends(get_db)):
    return ForumService.count_questions(db, course_id)


@router.post("/question", response_model=schemas.QuestionListItem, status_code=201)
def create_question(
    question: schemas.QuestionCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    return ForumService.create_question(db, question, current_user)


@router.get("/course/{course_id}", response_model=List[schemas.QuestionListItem])
def list_course_questions(
    course_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    """Questions of a course, most recently active first."""
    return ForumService.list_course_questions(db, course_id, current_user)


@router.get("/question/{question_id}", response_model=schemas.QuestionDetail)
def get_question(
    question_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    """
    Question with its answers.

    The verified answer comes first, the rest oldest first.
    """
    return ForumService.get_question_detail(db, question_id, current_user)


@router.put("/question/{question_id}/solve", response_model=schemas.QuestionDetail)
def mark_solved(
    question_id: int,
    payload: schemas.SolveRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    """Verify one answer and mark the question solved (course moderators)."""
    return ForumService.mark_solved(
        db, question_id, payload.answer_id, current_user
    )


@router.put("/question/{question_id}/lock", response_model=schemas.QuestionListItem)
def set_locked(
    question_id: int,
    payload: schemas.LockRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    return ForumService.set_locked(db, question_id, payload.is_locked, current_user)


@router.delete("/question/{question_id}", response_model=schemas.MessageResponse)
def delete_question(
    question_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Remove a question with its answers, upvotes and replies."""
    ForumService.delete_question(db, question_id, current_user)
    return {"message": "Question deleted"}


@router.get("/instructor/questions", response_model=List[schemas.PanelQuestion])
def list_instructor_questions(
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 50,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    return ForumService.list_panel_questions(
        db, current_user, skip=skip, limit=limit
    )


@router.get("/admin/questions", response_model=List[schemas.PanelQuestion])
def list_admin_questions(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return ForumService.list_panel_questions(
        db, current_user, skip=skip, limit=limit
    )


# Answers


@router.post("/answer", response_model=schemas.Answer, status_code=201)
def create_answer(
    answer: schemas.AnswerCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    """Answer a question; locked questions refuse new answers."""
    return ForumService.create_answer(db, answer, current_user)


@router.put("/answer/upvote/{answer_id}", response_model=schemas.UpvoteResponse)
def toggle_upvote(
    answer_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    return ForumService.toggle_upvote(db, answer_id, current_user)


# Replies


@router.post("/reply", response_model=schemas.Reply, status_code=201)
def create_reply(
    reply: schemas.ReplyCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    """
    Reply to an answer or to another reply.

    A parent reply must belong to the same answer and not be deleted.
    """
    return ForumReplyService.create_reply(db, reply, current_user)


@router.get("/question/{question_id}/replies", response_model=List[schemas.Reply])
def list_replies(
    question_id: int,
    answer_id: Optional[int] = None,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    return ForumReplyService.list_replies(db, question_id, current_user, answer_id)


@router.delete("/reply/{reply_id}", response_model=schemas.ReplyModeration)
def delete_reply(
    reply_id: int,
    reason: str = Query("", max_length=500),
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    """
    Soft delete a reply.

    Allowed for the author and course moderators. The row is kept with
    who deleted it, when and why.
    """
    return ForumReplyService.delete_reply(db, reply_id, current_user, reason)


# Reports


@router.post("/report", response_model=schemas.ReportWithNames, status_code=201)
def create_report(
    report: schemas.ReportCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
):
    """
    Report a question, answer or reply for moderation.

    Reporting your own content is refused, as is a second pending report
    on the same target.
    """
    created = ForumReportService.create_report(db, report, current_user)
    return ForumReportService.to_schema(created)


@router.get("/admin/reports", response_model=schemas.ReportListResponse)
def list_admin_reports(
    status: Optional[db_models.ReportStatus] = None,
    reason: Optional[db_models.ReportReason] = None,
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return ForumReportService.list_reports(
        db, current_user, status=status, reason=reason, skip=skip, limit=limit
    )


@router.get("/instructor/reports", response_model=schemas.ReportListResponse)
def list_instructor_reports(
    status: Optional[db_models.ReportStatus] = None,
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 50,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Reports filed in the instructor's own courses."""
    return ForumReportService.list_reports(
        db, current_user, status=status, skip=skip, limit=limit
    )


@router.put("/report/{report_id}/action", response_model=schemas.ReportWithNames)
def action_report(
    report_id: int,
    action: schemas.ReportAction,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Resolve or reject a pending report."""
    return ForumReportService.action_report(db, report_id, action, current_user)
