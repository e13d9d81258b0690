"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["CORS_ORIGINS"] = '["http://localhost:5173"]'
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_PASSWORD"] = "TestAdmin123!"
os.environ["PAYMENT_KEY_ID"] = "key_test_123"
os.environ["PAYMENT_KEY_SECRET"] = "test-payment-secret"
os.environ["EMAIL_PROVIDER"] = "console"

from authentication.auth import create_user_token, get_password_hash  # noqa: E402
from helpers.time_utils import utc_now  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

TEST_PASSWORD = "Str0ng!Pass"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(
    db_session,
    email: str,
    role: db_models.UserRole = db_models.UserRole.STUDENT,
    name: str | None = None,
) -> db_models.User:
    """Insert a user with the profile row matching its role."""
    user = db_models.User(
        name=name or email.split("@")[0].title(),
        email=email,
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=role,
        is_active=True,
    )
    if role == db_models.UserRole.STUDENT:
        user.student_profile = db_models.StudentProfile()
    elif role == db_models.UserRole.INSTRUCTOR:
        user.instructor_profile = db_models.InstructorProfile()
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def student_user(db_session) -> db_models.User:
    return make_user(db_session, "student@example.com", name="Student One")


@pytest.fixture
def other_student(db_session) -> db_models.User:
    return make_user(db_session, "student2@example.com", name="Student Two")


@pytest.fixture
def instructor_user(db_session) -> db_models.User:
    return make_user(
        db_session,
        "instructor@example.com",
        db_models.UserRole.INSTRUCTOR,
        name="Instructor One",
    )


@pytest.fixture
def other_instructor(db_session) -> db_models.User:
    return make_user(
        db_session,
        "instructor2@example.com",
        db_models.UserRole.INSTRUCTOR,
        name="Instructor Two",
    )


@pytest.fixture
def admin_user(db_session) -> db_models.User:
    return make_user(
        db_session, "admin@example.com", db_models.UserRole.ADMIN, name="Admin"
    )


@pytest.fixture
def auth_headers():
    """Build bearer headers for any user."""

    def _headers(user: db_models.User) -> dict:
        return {"Authorization": f"Bearer {create_user_token(user)}"}

    return _headers


@pytest.fixture
def test_category(db_session) -> db_models.Category:
    category = db_models.Category(
        name="Programming", status=db_models.CategoryStatus.APPROVED
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


def make_course(
    db_session,
    instructor: db_models.User,
    category: db_models.Category,
    title: str = "Python Basics",
    price: float = 0.0,
    status: db_models.CourseStatus = db_models.CourseStatus.APPROVED,
) -> db_models.Course:
    course = db_models.Course(
        title=title,
        description="Learn Python from scratch",
        level=db_models.CourseLevel.BEGINNER,
        category_id=category.id,
        instructor_id=instructor.id,
        price=price,
        status=status,
    )
    db_session.add(course)
    db_session.commit()
    db_session.refresh(course)
    return course


@pytest.fixture
def free_course(db_session, instructor_user, test_category) -> db_models.Course:
    """Approved free course owned by instructor_user."""
    return make_course(db_session, instructor_user, test_category)


@pytest.fixture
def paid_course(db_session, instructor_user, test_category) -> db_models.Course:
    """Approved paid course owned by instructor_user."""
    return make_course(
        db_session, instructor_user, test_category, title="Advanced SQL", price=499.0
    )


@pytest.fixture
def course_lessons(db_session, free_course) -> list[db_models.Lesson]:
    """Two lessons; the first is a free preview."""
    lessons = [
        db_models.Lesson(
            course_id=free_course.id,
            title="Introduction",
            content_type=db_models.LessonContentType.VIDEO,
            file_url="/uploads/lessons/intro.mp4",
            is_preview_free=True,
            duration=120,
            position=0,
        ),
        db_models.Lesson(
            course_id=free_course.id,
            title="Variables",
            content_type=db_models.LessonContentType.VIDEO,
            file_url="/uploads/lessons/variables.mp4",
            duration=300,
            position=1,
        ),
    ]
    db_session.add_all(lessons)
    free_course.total_duration = 420
    db_session.commit()
    for lesson in lessons:
        db_session.refresh(lesson)
    return lessons


@pytest.fixture
def course_exam(db_session, free_course) -> db_models.Exam:
    """Exam with two one-mark questions."""
    exam = db_models.Exam(course_id=free_course.id, title="Basics Quiz", duration=10)
    exam.questions = [
        db_models.ExamQuestion(
            question_text="2 + 2?",
            options=["3", "4"],
            correct_answer="4",
            marks=1,
            position=0,
        ),
        db_models.ExamQuestion(
            question_text="Python is a...",
            options=["snake", "language"],
            correct_answer="language",
            marks=1,
            position=1,
        ),
    ]
    db_session.add(exam)
    db_session.commit()
    db_session.refresh(exam)
    return exam


def make_enrollment(
    db_session,
    student: db_models.User,
    course: db_models.Course,
    status: db_models.EnrollmentStatus = db_models.EnrollmentStatus.ACTIVE,
    expires_in_days: int = 30,
) -> db_models.Enrollment:
    enrollment = db_models.Enrollment(
        student_id=student.id,
        course_id=course.id,
        amount=course.price,
        payment_status=db_models.EnrollmentPaymentStatus.COMPLETE,
        status=status,
        expiry_date=utc_now() + timedelta(days=expires_in_days),
    )
    db_session.add(enrollment)
    db_session.commit()
    db_session.refresh(enrollment)
    return enrollment


@pytest.fixture
def enrollment(db_session, student_user, free_course) -> db_models.Enrollment:
    """Active enrollment of student_user in free_course."""
    return make_enrollment(db_session, student_user, free_course)
