"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .category_service import CategoryService
from .user_service import UserService
from .course_service import CourseService
from .lesson_service import LessonService
from .enrollment_service import EnrollmentService
from .payment_service import PaymentService
from .exam_service import ExamService
from .forum_service import ForumService
from .forum_reply_service import ForumReplyService
from .forum_report_service import ForumReportService

__all__ = [
    "CategoryService",
    "UserService",
    "CourseService",
    "LessonService",
    "EnrollmentService",
    "PaymentService",
    "ExamService",
    "ForumService",
    "ForumReplyService",
    "ForumReportService",
]
