from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from datetime import datetime
from typing import Optional, List
from repositories.db_models import (
    CategoryStatus,
    ContactStatus,
    CourseLevel,
    CourseStatus,
    EnrollmentPaymentStatus,
    EnrollmentStatus,
    LessonContentType,
    PaymentStatus,
    ReportReason,
    ReportStatus,
    ReportTargetType,
    UserRole,
)


class MessageResponse(BaseModel):
    message: str


# User Schemas
class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    password: str
    role: UserRole = UserRole.STUDENT
    phone_no: Optional[str] = Field(None, max_length=30)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class User(UserBase):
    id: int
    role: UserRole
    phone_no: Optional[str] = None
    profile_pic: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminCreate(UserBase):
    password: str


class UserListResponse(BaseModel):
    """Paginated user list for the admin panel."""

    users: List[User]
    total: int
    skip: int
    limit: int


class StudentProfile(BaseModel):
    education: Optional[str] = None
    interests: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class InstructorProfile(BaseModel):
    bio: Optional[str] = None
    expertise: List[str] = []
    qualifications: List[str] = []
    experience: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class Profile(BaseModel):
    user: User
    student_profile: Optional[StudentProfile] = None
    instructor_profile: Optional[InstructorProfile] = None


class ProfileUpdate(BaseModel):
    """Editable account and role profile fields; unset fields are kept."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_no: Optional[str] = Field(None, max_length=30)
    profile_pic: Optional[str] = Field(None, max_length=500)
    # Student profile
    education: Optional[str] = Field(None, max_length=200)
    interests: Optional[List[str]] = None
    # Instructor profile
    bio: Optional[str] = Field(None, max_length=2000)
    expertise: Optional[List[str]] = None
    qualifications: Optional[List[str]] = None
    experience: Optional[int] = Field(None, ge=0, le=80)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str


class UserDetail(Profile):
    """Admin view of one account."""

    enrollment_count: int = 0
    course_count: int = 0


# Token Schemas
class Token(BaseModel):
    access_token: str
    token_type: str
    user: User


class TokenData(BaseModel):
    email: Optional[str] = None


# Password reset by OTP
class SendOtpRequest(BaseModel):
    email: EmailStr


class OtpSentResponse(BaseModel):
    message: str
    token: str
    expires_in: int  # seconds


class VerifyOtpRequest(BaseModel):
    token: str
    otp: str = Field(..., min_length=4, max_length=10)


class ResetTokenResponse(BaseModel):
    message: str
    reset_token: str


class ResetPasswordRequest(BaseModel):
    reset_token: str
    new_password: str


# Category Schemas
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)


class CategoryUpdate(CategoryCreate):
    pass


class Category(BaseModel):
    id: int
    name: str
    status: CategoryStatus
    suggested_by: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryCheck(BaseModel):
    exists: bool
    status: Optional[CategoryStatus] = None


# Course Schemas
class CourseCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=10000)
    level: CourseLevel
    category_id: int
    price: float = Field(0.0, ge=0)
    thumbnail: Optional[str] = Field(None, max_length=500)
    status: CourseStatus = CourseStatus.DRAFT


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=10000)
    level: Optional[CourseLevel] = None
    category_id: Optional[int] = None
    price: Optional[float] = Field(None, ge=0)
    thumbnail: Optional[str] = Field(None, max_length=500)


class CourseStatusUpdate(BaseModel):
    status: CourseStatus


class CourseSummary(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    level: CourseLevel
    price: float
    thumbnail: Optional[str] = None
    status: CourseStatus
    total_duration: int
    formatted_duration: str
    category_id: int
    category_name: Optional[str] = None
    instructor_id: int
    instructor_name: Optional[str] = None
    lesson_count: int = 0
    created_at: datetime


class CourseListResponse(BaseModel):
    courses: List[CourseSummary]
    total: int
    skip: int
    limit: int


# Lesson Schemas
class LessonCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content_type: LessonContentType
    file_url: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=10000)
    is_preview_free: bool = False
    duration: int = Field(0, ge=0)  # seconds


class LessonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content_type: Optional[LessonContentType] = None
    file_url: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=10000)
    is_preview_free: Optional[bool] = None
    duration: Optional[int] = Field(None, ge=0)


class LessonReorder(BaseModel):
    lesson_ids: List[int]


class Lesson(BaseModel):
    id: int
    course_id: int
    title: str
    content_type: LessonContentType
    # Hidden (None) for locked lessons
    file_url: Optional[str] = None
    description: Optional[str] = None
    is_preview_free: bool
    duration: int
    position: int
    is_locked: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LessonProgressUpdate(BaseModel):
    watched_percent: float = Field(..., ge=0, le=100)
    last_position: float = Field(0, ge=0)


class LessonProgressResponse(BaseModel):
    lesson_id: int
    watched_percent: float
    last_position: float
    is_completed: bool
    course_progress: int
    enrollment_status: EnrollmentStatus
    certificate: Optional[str] = None


class CompletedLessons(BaseModel):
    lesson_ids: List[int]


# Exam Schemas
class ExamQuestionCreate(BaseModel):
    question_text: str = Field(..., min_length=1, max_length=2000)
    options: List[str]
    correct_answer: str
    marks: int = Field(1, ge=1, le=100)


class ExamCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    duration: int = Field(..., gt=0, le=600)  # minutes
    questions: List[ExamQuestionCreate]


class ExamUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    duration: Optional[int] = Field(None, gt=0, le=600)
    # Replaces every question when given
    questions: Optional[List[ExamQuestionCreate]] = None


class ExamQuestion(BaseModel):
    id: int
    question_text: str
    options: List[str]
    marks: int
    position: int

    model_config = ConfigDict(from_attributes=True)


class ExamQuestionWithAnswer(ExamQuestion):
    correct_answer: str


class ExamSummary(BaseModel):
    id: int
    course_id: int
    title: str
    duration: int
    question_count: int
    total_marks: int


class ExamDetail(ExamSummary):
    """Exam as shown to a student taking it."""

    questions: List[ExamQuestion]


class ExamDetailWithAnswers(ExamSummary):
    """Exam as shown to its instructor."""

    questions: List[ExamQuestionWithAnswer]


class ExamAnswer(BaseModel):
    question_id: int
    selected_option: Optional[str] = None


class ExamSubmit(BaseModel):
    answers: List[ExamAnswer]


class ExamSubmitResponse(BaseModel):
    score: int
    passed: bool
    attempt_number: int
    attempts_left: int
    best_score: int
    is_completed: bool
    course_progress: int
    enrollment_status: EnrollmentStatus
    certificate: Optional[str] = None


class ExamResultResponse(BaseModel):
    score: int
    attempt_number: int
    best_score: int
    is_completed: bool
    attempts_left: int


class ExamProgress(BaseModel):
    exam_id: int
    exam_title: str
    attempts: int
    best_score: int
    is_completed: bool
    last_attempt_at: Optional[datetime] = None


class ExamStudentResult(BaseModel):
    student_id: int
    student_name: str
    student_email: str
    best_score: int
    attempts: int
    passed: bool
    last_attempt_at: Optional[datetime] = None


class CourseDetail(CourseSummary):
    lessons: List[Lesson]
    exams: List[ExamSummary]
    is_enrolled: bool = False
    enrollment_status: Optional[EnrollmentStatus] = None
    progress: int = 0
    completed_lesson_ids: List[int] = []


# Enrollment Schemas
class EnrollmentCreate(BaseModel):
    course_id: int


class Enrollment(BaseModel):
    id: int
    student_id: int
    course_id: int
    amount: float
    payment_status: EnrollmentPaymentStatus
    status: EnrollmentStatus
    expiry_date: datetime
    progress: int
    certificate: Optional[str] = None
    last_lesson_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EnrollmentWithCourse(Enrollment):
    course: CourseSummary
    is_expired: bool = False


# Payment Schemas
class CreateOrderRequest(BaseModel):
    course_id: int


class OrderResponse(BaseModel):
    key: str
    order_id: str
    amount: int  # minor currency units
    currency: str
    course_name: str


class VerifyPaymentRequest(BaseModel):
    order_id: str
    payment_id: str = Field(..., min_length=1, max_length=100)
    signature: str


class VerifyPaymentResponse(BaseModel):
    message: str
    enrollment: Enrollment


# Forum Schemas
class QuestionCreate(BaseModel):
    course_id: int
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)


class QuestionListItem(BaseModel):
    id: int
    course_id: int
    user_id: int
    user_name: str
    title: str
    description: str
    is_solved: bool
    is_locked: bool
    verified_answer_id: Optional[int] = None
    upvotes: int
    answer_count: int = 0
    answer_upvotes: int = 0
    last_activity_at: datetime
    created_at: datetime


class PanelQuestion(QuestionListItem):
    """Question row in the instructor and admin forum panels."""

    course_title: str


class AnswerCreate(BaseModel):
    question_id: int
    answer_text: str = Field(..., min_length=1, max_length=5000)


class Answer(BaseModel):
    id: int
    question_id: int
    user_id: int
    user_name: str
    answer_text: str
    is_verified: bool
    upvotes: int
    has_liked: bool = False
    is_owner: bool = False
    created_at: datetime


class QuestionDetail(QuestionListItem):
    is_owner: bool = False
    answers: List[Answer]


class UpvoteResponse(BaseModel):
    answer_id: int
    upvotes: int
    has_liked: bool


class SolveRequest(BaseModel):
    answer_id: int


class LockRequest(BaseModel):
    is_locked: bool


class ForumCount(BaseModel):
    course_id: int
    count: int


class ReplyCreate(BaseModel):
    question_id: int
    answer_id: int
    reply_text: str = Field(..., min_length=1, max_length=2000)
    parent_id: Optional[int] = None


class Reply(BaseModel):
    id: int
    question_id: int
    answer_id: int
    parent_id: Optional[int] = None
    user_id: int
    user_name: str
    reply_text: str
    created_at: datetime


class ReplyModeration(BaseModel):
    """Soft-delete audit fields of a reply."""

    id: int
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None
    delete_reason: str

    model_config = ConfigDict(from_attributes=True)


class ReportCreate(BaseModel):
    target_type: ReportTargetType
    target_id: int
    reason: ReportReason
    note: str = Field("", max_length=1000)


class Report(BaseModel):
    id: int
    target_type: ReportTargetType
    target_id: int
    target_user_id: Optional[int] = None
    course_id: Optional[int] = None
    reporter_id: int
    reason: ReportReason
    note: str
    status: ReportStatus
    action_by: Optional[int] = None
    action_note: str
    action_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportWithNames(Report):
    reporter_name: Optional[str] = None
    target_user_name: Optional[str] = None
    course_title: Optional[str] = None


class ReportListResponse(BaseModel):
    reports: List[ReportWithNames]
    total: int


class ReportAction(BaseModel):
    action: ReportStatus
    action_note: str = Field("", max_length=1000)
    # Resolved reply reports only
    delete_content: bool = False

    @field_validator("action")
    @classmethod
    def action_must_close_report(cls, v: ReportStatus) -> ReportStatus:
        if v == ReportStatus.PENDING:
            raise ValueError("action must be 'resolved' or 'rejected'")
        return v


# Analytics Schemas
class AdminDashboard(BaseModel):
    users_by_role: dict[str, int]
    courses_by_status: dict[str, int]
    enrollments_by_status: dict[str, int]
    total_users: int
    total_courses: int
    total_enrollments: int
    total_revenue: float
    pending_reports: int


class MonthlyRevenue(BaseModel):
    month: int
    label: str
    revenue: float
    instructor_earnings: float
    commission: float


class RevenueReport(BaseModel):
    year: int
    total_revenue: float
    instructor_earnings: float
    platform_commission: float
    monthly: List[MonthlyRevenue]


class InstructorPayout(BaseModel):
    instructor_id: int
    name: str
    email: str
    gross: float
    earnings: float
    sales: int
    last_payment_date: Optional[datetime] = None


class Transaction(BaseModel):
    id: int
    student_name: str
    instructor_name: str
    course_id: int
    course_title: str
    amount: float
    platform_commission: float
    instructor_earning: float
    status: PaymentStatus
    payment_id: Optional[str] = None
    order_id: Optional[str] = None
    payment_date: datetime
    payment_method: str


class TransactionListResponse(BaseModel):
    transactions: List[Transaction]
    total: int
    skip: int
    limit: int


class ChartSeries(BaseModel):
    labels: List[str]
    values: List[int]


class TopCourse(BaseModel):
    course_id: int
    title: str
    enrollments: int


class EnrollmentStats(ChartSeries):
    growth_percent: float
    top_courses: List[TopCourse]


class CoursePerformance(BaseModel):
    course_id: int
    title: str
    instructor_name: str
    status: CourseStatus
    enrollments: int
    completions: int
    completion_rate: float
    average_best_score: float


class InstructorDashboard(BaseModel):
    total_courses: int
    approved_courses: int
    pending_courses: int
    active_students: int
    enrollment_chart: ChartSeries


class MonthlyEarning(BaseModel):
    month: int
    label: str
    amount: float


class InstructorEarnings(BaseModel):
    year: int
    total: float
    monthly: List[MonthlyEarning]
    last_payout: Optional[Transaction] = None


class CourseAnalytics(BaseModel):
    course_id: int
    title: str
    status: CourseStatus
    total_students: int
    completed: int
    revenue: float
    completion_rate: float


class InstructorStudent(BaseModel):
    enrollment_id: int
    student_id: int
    student_name: str
    student_email: str
    course_id: int
    course_title: str
    status: EnrollmentStatus
    progress: int
    enrolled_at: datetime
    expiry_date: datetime


class StudentProgress(InstructorStudent):
    completed_lessons: int
    total_lessons: int
    completed_exams: int
    total_exams: int


class SchedulerJob(BaseModel):
    id: str
    name: str
    next_run_time: Optional[str] = None


class SchedulerStatus(BaseModel):
    running: bool
    jobs: List[SchedulerJob]


# Contact Schemas
class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


class ContactMessage(ContactCreate):
    id: int
    status: ContactStatus
    created_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
