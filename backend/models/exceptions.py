"""
Domain exceptions raised by the service layer.

Services and the authentication helpers raise these instead of HTTP errors;
the centralized handlers in main.py map each family to a status code and a
`{"detail", "correlation_id"}` body.

Families and their status codes:
- NotFoundException: 404
- PermissionDeniedException: 403
- ValidationException: 422
- ConflictException / AlreadyExistsException: 409
- AuthenticationException: 401
- BusinessRuleException: 400
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Request correlation ID (generated when none is bound).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class AlreadyExistsException(DomainException):
    """Raised when trying to create a resource that already exists."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


# --- Users and authentication ---


class UserNotFoundException(NotFoundException):
    """User not found."""

    pass


class UserAlreadyExistsException(AlreadyExistsException):
    """Raised when an email is already registered."""

    def __init__(self, message: str = "Email is already registered"):
        super().__init__(message)


class InvalidCredentialsException(AuthenticationException):
    """Invalid email or password."""

    def __init__(self, message: str = "Incorrect email or password"):
        super().__init__(message)


class InactiveUserException(PermissionDeniedException):
    """User account is inactive."""

    pass


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass


class PasswordValidationException(ValidationException):
    """Password does not satisfy the strength policy."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors) or "Password is too weak")


class InvalidOtpException(ValidationException):
    """Raised when the submitted reset code does not match."""

    def __init__(self, message: str = "Invalid OTP"):
        super().__init__(message)


class InvalidResetTokenException(AuthenticationException):
    """Raised when a reset token is malformed, expired or of the wrong purpose."""

    def __init__(self, message: str = "Reset token is invalid or has expired"):
        super().__init__(message)


# --- Catalogue ---


class CategoryNotFoundException(NotFoundException):
    """Category not found."""

    def __init__(self, category_id: int):
        super().__init__(f"Category with ID {category_id} not found")
        self.category_id = category_id


class DuplicateCategoryException(AlreadyExistsException):
    """Raised when a category name is already taken (case-insensitive)."""

    def __init__(self, name: str):
        super().__init__(f"Category '{name}' already exists")
        self.name = name


class CategoryInUseException(BusinessRuleException):
    """Raised when deleting a category that courses still reference."""

    def __init__(self, message: str = "Category is used by existing courses"):
        super().__init__(message)


class CourseNotFoundException(NotFoundException):
    """Course not found."""

    def __init__(self, course_id: int):
        super().__init__(f"Course with ID {course_id} not found")
        self.course_id = course_id


class CourseNotAvailableException(BusinessRuleException):
    """Raised when a course is not approved for enrollment or purchase."""

    def __init__(self, message: str = "Course not available"):
        super().__init__(message)


class NotCourseOwnerException(PermissionDeniedException):
    """Raised when an instructor acts on a course they do not own."""

    def __init__(self, message: str = "Not allowed for this course"):
        super().__init__(message)


class InvalidCourseStatusException(BusinessRuleException):
    """Raised for a course status change the caller may not perform."""

    pass


class LessonNotFoundException(NotFoundException):
    """Lesson not found."""

    def __init__(self, lesson_id: int):
        super().__init__(f"Lesson with ID {lesson_id} not found")
        self.lesson_id = lesson_id


# --- Enrollment and payments ---


class EnrollmentNotFoundException(NotFoundException):
    """Enrollment not found."""

    def __init__(self, message: str = "Enrollment not found"):
        super().__init__(message)


class AlreadyEnrolledException(ConflictException):
    """Raised when the student already holds an active enrollment."""

    def __init__(self, message: str = "Already enrolled and active"):
        super().__init__(message)


class NotEnrolledException(PermissionDeniedException):
    """Raised when an action requires an active enrollment."""

    def __init__(self, message: str = "You are not enrolled in this course"):
        super().__init__(message)


class PaymentRequiredException(BusinessRuleException):
    """Raised when a paid course is enrolled without checkout."""

    def __init__(self, message: str = "This course requires payment"):
        super().__init__(message)


class PaymentOrderNotFoundException(NotFoundException):
    """Payment order not found."""

    def __init__(self, order_id: str):
        super().__init__(f"Payment order {order_id} not found")
        self.order_id = order_id


class InvalidPaymentSignatureException(BusinessRuleException):
    """Raised when a checkout signature does not verify."""

    def __init__(self, message: str = "Invalid payment signature"):
        super().__init__(message)


class OrderAlreadyPaidException(ConflictException):
    """Raised when a paid order is verified a second time."""

    def __init__(self, message: str = "This order has already been paid"):
        super().__init__(message)


# --- Exams ---


class ExamNotFoundException(NotFoundException):
    """Exam not found."""

    def __init__(self, exam_id: int):
        super().__init__(f"Exam with ID {exam_id} not found")
        self.exam_id = exam_id


class InvalidExamException(ValidationException):
    """Raised when an exam definition is malformed."""

    pass


class MaxExamAttemptsException(BusinessRuleException):
    """Raised when all exam attempts are used up."""

    def __init__(self, message: str = "Maximum exam attempts reached."):
        super().__init__(message)


# --- Forum ---


class ForumException(DomainException):
    """Base exception for forum errors."""

    pass


class QuestionNotFoundException(ForumException, NotFoundException):
    """Forum question not found."""

    def __init__(self, question_id: int):
        super().__init__(f"Question with ID {question_id} not found")
        self.question_id = question_id


class AnswerNotFoundException(ForumException, NotFoundException):
    """Forum answer not found."""

    def __init__(self, answer_id: int):
        super().__init__(f"Answer with ID {answer_id} not found")
        self.answer_id = answer_id


class ReplyNotFoundException(ForumException, NotFoundException):
    """Forum reply not found."""

    def __init__(self, reply_id: int):
        super().__init__(f"Reply with ID {reply_id} not found")
        self.reply_id = reply_id


class AnswerQuestionMismatchException(ForumException, BusinessRuleException):
    """Raised when an answer does not belong to the given question."""

    def __init__(self, message: str = "Answer does not belong to this question"):
        super().__init__(message)


class InvalidReplyParentException(ForumException, BusinessRuleException):
    """Raised when a reply parent is missing, deleted or in another thread."""

    def __init__(
        self, message: str = "Parent reply must belong to the same question and answer"
    ):
        super().__init__(message)


class QuestionLockedException(ForumException, PermissionDeniedException):
    """Raised when posting to a locked discussion."""

    def __init__(self, message: str = "Discussion is locked"):
        super().__init__(message)


class CannotUpvoteOwnAnswerException(ForumException, PermissionDeniedException):
    """Raised when a user upvotes their own answer."""

    def __init__(self, message: str = "Cannot upvote your own answer"):
        super().__init__(message)


class ReplyAlreadyDeletedException(ForumException, ConflictException):
    """Raised when soft-deleting a reply twice."""

    def __init__(self, message: str = "Reply has already been deleted"):
        super().__init__(message)


class ReportNotFoundException(ForumException, NotFoundException):
    """Forum report not found."""

    def __init__(self, report_id: int):
        super().__init__(f"Report with ID {report_id} not found")
        self.report_id = report_id


class ReportTargetNotFoundException(ForumException, NotFoundException):
    """Raised when a report points at content that does not exist."""

    def __init__(self, target_type: str, target_id: int):
        super().__init__(f"Reported {target_type} with ID {target_id} not found")
        self.target_type = target_type
        self.target_id = target_id


class DuplicateReportException(ForumException, ConflictException):
    """Raised when the reporter already has a pending report on the target."""

    def __init__(self, message: str = "You have already reported this content"):
        super().__init__(message)


class CannotReportOwnContentException(ForumException, BusinessRuleException):
    """Raised when a user reports their own content."""

    def __init__(self, message: str = "You cannot report your own content"):
        super().__init__(message)


class ReportAlreadyActionedException(ForumException, ConflictException):
    """Raised when acting on a report that is no longer pending."""

    def __init__(self, message: str = "This report has already been actioned"):
        super().__init__(message)


# --- Contact ---


class ContactMessageNotFoundException(NotFoundException):
    """Contact message not found."""

    def __init__(self, message_id: int):
        super().__init__(f"Contact message with ID {message_id} not found")
        self.message_id = message_id
