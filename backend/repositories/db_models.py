"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

Tables cover accounts and role profiles, the course catalogue (categories,
courses, lessons, exams), learner state (enrollments and their progress
rows, exam results), money (checkout orders and payments), the course
discussion forum with its moderation tables, and contact messages.
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    STUDENT = "student"


class CategoryStatus(str, enum.Enum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"


class CourseLevel(str, enum.Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class CourseStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pendingApproval"
    APPROVED = "approved"
    REJECTED = "rejected"


class LessonContentType(str, enum.Enum):
    VIDEO = "video"
    PDF = "pdf"
    TEXT = "text"


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EnrollmentPaymentStatus(str, enum.Enum):
    """Payment state recorded on the enrollment itself."""

    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


class PaymentOrderStatus(str, enum.Enum):
    CREATED = "created"
    PAID = "paid"
    FAILED = "failed"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# Forum moderation enums


class ReportTargetType(str, enum.Enum):
    """Kind of forum content a report points at."""

    QUESTION = "question"
    ANSWER = "answer"
    REPLY = "reply"


class ReportReason(str, enum.Enum):
    SPAM = "spam"
    ABUSE = "abuse"
    HARASSMENT = "harassment"
    MISINFORMATION = "misinformation"
    OTHER = "other"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ContactStatus(str, enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (Index("ix_users_role_active", "role", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole), nullable=False, default=UserRole.STUDENT
    )
    phone_no: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    profile_pic: Mapped[str] = mapped_column(
        String(500), nullable=False, default="/uploads/default.png"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    student_profile: Mapped[Optional["StudentProfile"]] = relationship(
        "StudentProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    instructor_profile: Mapped[Optional["InstructorProfile"]] = relationship(
        "InstructorProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    courses: Mapped[List["Course"]] = relationship(
        "Course", back_populates="instructor"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_instructor(self) -> bool:
        return self.role == UserRole.INSTRUCTOR


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    education: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    interests: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    user: Mapped["User"] = relationship("User", back_populates="student_profile")


class InstructorProfile(Base):
    __tablename__ = "instructor_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expertise: Mapped[list] = mapped_column(JSON, default=list)
    qualifications: Mapped[list] = mapped_column(JSON, default=list)
    experience: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )  # years
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    user: Mapped["User"] = relationship("User", back_populates="instructor_profile")


class Category(Base):
    """
    Course category.

    Admins create approved categories directly; instructors suggest new
    ones, which wait as pending until an admin approves or rejects them.
    """

    __tablename__ = "categories"
    __table_args__ = (Index("ix_categories_status", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    status: Mapped[CategoryStatus] = mapped_column(
        Enum(CategoryStatus), default=CategoryStatus.APPROVED, nullable=False
    )
    suggested_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    suggester: Mapped[Optional["User"]] = relationship("User")
    courses: Mapped[List["Course"]] = relationship(
        "Course", back_populates="category"
    )


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (
        Index("ix_courses_status_category", "status", "category_id"),
        Index("ix_courses_instructor_status", "instructor_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    level: Mapped[CourseLevel] = mapped_column(Enum(CourseLevel), nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False
    )
    instructor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[CourseStatus] = mapped_column(
        Enum(CourseStatus), default=CourseStatus.DRAFT, nullable=False
    )
    total_duration: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )  # seconds, sum of lesson durations
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    category: Mapped["Category"] = relationship("Category", back_populates="courses")
    instructor: Mapped["User"] = relationship("User", back_populates="courses")
    lessons: Mapped[List["Lesson"]] = relationship(
        "Lesson",
        back_populates="course",
        order_by="Lesson.position",
        cascade="all, delete-orphan",
    )
    exams: Mapped[List["Exam"]] = relationship(
        "Exam",
        back_populates="course",
        order_by="Exam.id",
        cascade="all, delete-orphan",
    )

    @property
    def formatted_duration(self) -> str:
        from helpers.time_utils import format_duration

        return format_duration(self.total_duration or 0)


class Lesson(Base):
    __tablename__ = "lessons"
    __table_args__ = (Index("ix_lessons_course_position", "course_id", "position"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content_type: Mapped[LessonContentType] = mapped_column(
        Enum(LessonContentType), nullable=False
    )
    file_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_preview_free: Mapped[bool] = mapped_column(Boolean, default=False)
    duration: Mapped[int] = mapped_column(Integer, default=0)  # seconds
    position: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    course: Mapped["Course"] = relationship("Course", back_populates="lessons")


class Exam(Base):
    __tablename__ = "exams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    course: Mapped["Course"] = relationship("Course", back_populates="exams")
    questions: Mapped[List["ExamQuestion"]] = relationship(
        "ExamQuestion",
        back_populates="exam",
        order_by="ExamQuestion.position",
        cascade="all, delete-orphan",
    )
    results: Mapped[List["ExamResult"]] = relationship(
        "ExamResult", back_populates="exam", cascade="all, delete-orphan"
    )
    progress_rows: Mapped[List["ExamProgress"]] = relationship(
        "ExamProgress", back_populates="exam", cascade="all, delete-orphan"
    )

    @property
    def total_marks(self) -> int:
        return sum(q.marks or 0 for q in self.questions)


class ExamQuestion(Base):
    __tablename__ = "exam_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    exam_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("exams.id", ondelete="CASCADE"), index=True
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    correct_answer: Mapped[str] = mapped_column(String(500), nullable=False)
    marks: Mapped[int] = mapped_column(Integer, default=1)
    position: Mapped[int] = mapped_column(Integer, default=0)

    exam: Mapped["Exam"] = relationship("Exam", back_populates="questions")


class ExamResult(Base):
    """One submitted exam attempt."""

    __tablename__ = "exam_results"
    __table_args__ = (
        Index("ix_exam_results_exam_student", "exam_id", "student_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    exam_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    answers: Mapped[list] = mapped_column(JSON, default=list)
    score: Mapped[int] = mapped_column(Integer, default=0)  # percent
    attempt_number: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    exam: Mapped["Exam"] = relationship("Exam", back_populates="results")
    student: Mapped["User"] = relationship("User")


class Enrollment(Base):
    """
    A student's access to one course.

    Unique per (student, course); re-enrolling after cancellation or
    expiry reactivates the same row with a fresh expiry date.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "course_id", name="uq_enrollment_student_course"
        ),
        Index("ix_enrollments_status_expiry", "status", "expiry_date"),
        Index("ix_enrollments_course_status", "course_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), nullable=False
    )
    amount: Mapped[float] = mapped_column(Float, default=0.0)
    payment_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payment_status: Mapped[EnrollmentPaymentStatus] = mapped_column(
        Enum(EnrollmentPaymentStatus),
        default=EnrollmentPaymentStatus.PENDING,
        nullable=False,
    )
    payment_date: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(EnrollmentStatus), default=EnrollmentStatus.ACTIVE, nullable=False
    )
    expiry_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    progress: Mapped[int] = mapped_column(Integer, default=0)  # 0..100
    certificate: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    last_lesson_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("lessons.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    student: Mapped["User"] = relationship("User")
    course: Mapped["Course"] = relationship("Course")
    completed_lessons: Mapped[List["CompletedLesson"]] = relationship(
        "CompletedLesson", back_populates="enrollment", cascade="all, delete-orphan"
    )
    lesson_progress: Mapped[List["LessonProgress"]] = relationship(
        "LessonProgress", back_populates="enrollment", cascade="all, delete-orphan"
    )
    exam_progress: Mapped[List["ExamProgress"]] = relationship(
        "ExamProgress", back_populates="enrollment", cascade="all, delete-orphan"
    )


class CompletedLesson(Base):
    __tablename__ = "completed_lessons"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "lesson_id", name="uq_completed_lesson"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    enrollment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False
    )
    lesson_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    completed_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    enrollment: Mapped["Enrollment"] = relationship(
        "Enrollment", back_populates="completed_lessons"
    )


class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "lesson_id", name="uq_lesson_progress"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    enrollment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False
    )
    lesson_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    watched_percent: Mapped[float] = mapped_column(Float, default=0.0)
    last_position: Mapped[float] = mapped_column(Float, default=0.0)  # seconds
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    enrollment: Mapped["Enrollment"] = relationship(
        "Enrollment", back_populates="lesson_progress"
    )


class ExamProgress(Base):
    __tablename__ = "exam_progress"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "exam_id", name="uq_exam_progress"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    enrollment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False
    )
    exam_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False
    )
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    best_score: Mapped[int] = mapped_column(Integer, default=0)
    last_attempt_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    enrollment: Mapped["Enrollment"] = relationship(
        "Enrollment", back_populates="exam_progress"
    )
    exam: Mapped["Exam"] = relationship("Exam", back_populates="progress_rows")


class PaymentOrder(Base):
    """Checkout order created before the learner pays."""

    __tablename__ = "payment_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    order_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), nullable=False
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    amount_minor: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    receipt: Mapped[str] = mapped_column(String(40), nullable=False)
    status: Mapped[PaymentOrderStatus] = mapped_column(
        Enum(PaymentOrderStatus), default=PaymentOrderStatus.CREATED, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    course: Mapped["Course"] = relationship("Course")


class Payment(Base):
    """A completed sale, split between the platform and the instructor."""

    __tablename__ = "payments"
    __table_args__ = (
        Index(
            "ix_payments_instructor_status_date",
            "instructor_id",
            "status",
            "payment_date",
        ),
        Index("ix_payments_status_date", "status", "payment_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    instructor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), nullable=False
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    platform_commission: Mapped[float] = mapped_column(
        Float, nullable=False
    )  # percent
    instructor_earning: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus), default=PaymentStatus.COMPLETED, nullable=False
    )
    payment_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    payment_date: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    payment_method: Mapped[str] = mapped_column(String(30), default="online")

    student: Mapped["User"] = relationship("User", foreign_keys=[student_id])
    instructor: Mapped["User"] = relationship("User", foreign_keys=[instructor_id])
    course: Mapped["Course"] = relationship("Course")


class ForumQuestion(Base):
    __tablename__ = "forum_questions"
    __table_args__ = (
        Index("ix_forum_questions_course_activity", "course_id", "last_activity_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    is_solved: Mapped[bool] = mapped_column(Boolean, default=False)
    # No FK: answers reference questions, and the verified answer is
    # always checked against this question before being stored.
    verified_answer_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    upvotes: Mapped[int] = mapped_column(Integer, default=0)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    last_activity_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    course: Mapped["Course"] = relationship("Course")
    user: Mapped["User"] = relationship("User")
    answers: Mapped[List["ForumAnswer"]] = relationship(
        "ForumAnswer", back_populates="question", cascade="all, delete-orphan"
    )
    replies: Mapped[List["ForumReply"]] = relationship(
        "ForumReply",
        back_populates="question",
        cascade="all, delete-orphan",
        foreign_keys="ForumReply.question_id",
    )


class ForumAnswer(Base):
    __tablename__ = "forum_answers"
    __table_args__ = (
        Index("ix_forum_answers_question_verified", "question_id", "is_verified"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("forum_questions.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    answer_text: Mapped[str] = mapped_column(Text, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    upvotes: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    question: Mapped["ForumQuestion"] = relationship(
        "ForumQuestion", back_populates="answers"
    )
    user: Mapped["User"] = relationship("User")
    upvoters: Mapped[List["ForumAnswerUpvote"]] = relationship(
        "ForumAnswerUpvote", back_populates="answer", cascade="all, delete-orphan"
    )


class ForumAnswerUpvote(Base):
    __tablename__ = "forum_answer_upvotes"
    __table_args__ = (
        UniqueConstraint("answer_id", "user_id", name="uq_answer_upvote_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    answer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("forum_answers.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    answer: Mapped["ForumAnswer"] = relationship(
        "ForumAnswer", back_populates="upvoters"
    )


class ForumReply(Base):
    """
    Reply under a forum answer (two levels: answer -> reply).

    parent_id stays null for a direct reply to the answer; when set it must
    name a reply under the same question and answer, which the service
    layer checks. Replies are soft-deleted by moderators and never removed
    individually.
    """

    __tablename__ = "forum_replies"
    __table_args__ = (
        Index("ix_forum_replies_question_id", "question_id"),
        Index("ix_forum_replies_answer_id", "answer_id"),
        Index("ix_forum_replies_parent_id", "parent_id"),
        Index("ix_forum_replies_user_id", "user_id"),
        Index("ix_forum_replies_is_deleted", "is_deleted"),
        Index(
            "ix_forum_replies_question_answer_created",
            "question_id",
            "answer_id",
            "created_at",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("forum_questions.id", ondelete="CASCADE"), nullable=False
    )
    answer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("forum_answers.id", ondelete="CASCADE"), nullable=False
    )
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("forum_replies.id", ondelete="SET NULL"), nullable=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    reply_text: Mapped[str] = mapped_column(Text, nullable=False)

    # Soft delete audit
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    deleted_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    delete_reason: Mapped[str] = mapped_column(Text, default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    question: Mapped["ForumQuestion"] = relationship(
        "ForumQuestion", back_populates="replies", foreign_keys=[question_id]
    )
    answer: Mapped["ForumAnswer"] = relationship(
        "ForumAnswer", backref="replies", foreign_keys=[answer_id]
    )
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    deleted_by_user: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[deleted_by]
    )


class ForumReport(Base):
    """
    A user's report against a forum question, answer or reply.

    target_id is polymorphic: target_type names the table it refers to, so
    there is no foreign key and existence is checked when the report is
    filed. target_user_id and course_id are copied from the target at that
    time for the moderation dashboards.
    """

    __tablename__ = "forum_reports"
    __table_args__ = (
        Index(
            "ix_forum_reports_target_user_reason_status",
            "target_user_id",
            "reason",
            "status",
        ),
        Index(
            "ix_forum_reports_course_status_created",
            "course_id",
            "status",
            "created_at",
        ),
        Index(
            "ix_forum_reports_target_reporter_status",
            "target_type",
            "target_id",
            "reporter_id",
            "status",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    target_type: Mapped[ReportTargetType] = mapped_column(
        Enum(ReportTargetType), nullable=False
    )
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    target_user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    course_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True
    )
    reporter_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    reason: Mapped[ReportReason] = mapped_column(Enum(ReportReason), nullable=False)
    note: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus), default=ReportStatus.PENDING, nullable=False
    )
    action_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    action_note: Mapped[str] = mapped_column(Text, default="", nullable=False)
    action_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    reporter: Mapped["User"] = relationship("User", foreign_keys=[reporter_id])
    target_user: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[target_user_id]
    )
    moderator: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[action_by]
    )
    course: Mapped[Optional["Course"]] = relationship("Course")


class ContactMessage(Base):
    __tablename__ = "contact_messages"
    __table_args__ = (Index("ix_contact_messages_status", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ContactStatus] = mapped_column(
        Enum(ContactStatus), default=ContactStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
