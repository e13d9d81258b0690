"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .category_repository import CategoryRepository
from .contact_repository import ContactMessageRepository
from .course_repository import CourseRepository, LessonRepository
from .enrollment_repository import EnrollmentRepository
from .exam_repository import ExamRepository, ExamResultRepository
from .forum_reply_repository import ForumReplyRepository
from .forum_report_repository import ForumReportRepository
from .forum_repository import ForumAnswerRepository, ForumQuestionRepository
from .payment_repository import PaymentOrderRepository, PaymentRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "ContactMessageRepository",
    "CourseRepository",
    "EnrollmentRepository",
    "ExamRepository",
    "ExamResultRepository",
    "ForumAnswerRepository",
    "ForumQuestionRepository",
    "ForumReplyRepository",
    "ForumReportRepository",
    "LessonRepository",
    "PaymentOrderRepository",
    "PaymentRepository",
    "UserRepository",
]
