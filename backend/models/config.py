import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Return the dotenv path to load, or None when it must be skipped.

    Local development reads `backend/.env` so secrets do not have to be
    exported by hand. Test runs and CI never read it, which keeps the
    "missing SECRET_KEY fails fast" behaviour observable.
    """
    if any("pytest" in str(arg) for arg in sys.argv if arg):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', 'production' or 'test'",
    )
    PROJECT_NAME: str = Field(
        default="LearnX",
        description="Platform name used in the API title and outgoing emails",
    )

    DATABASE_URL: str = "sqlite:///./data/learnx.db"
    SECRET_KEY: str = Field(
        ...,
        description="JWT signing key - must be set via SECRET_KEY environment variable",
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24,
        description="Lifetime of login tokens in minutes",
    )
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins (JSON list or comma-separated in env var)",
    )

    # Seed administrator, consumed by init_db.py
    ADMIN_EMAIL: str = Field(
        ...,
        description="Bootstrap admin email - must be set via ADMIN_EMAIL",
    )
    ADMIN_PASSWORD: str = Field(
        ...,
        description="Bootstrap admin password - must be set via ADMIN_PASSWORD",
    )

    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = Field(default=5, description="Persistent pool connections")
    DB_MAX_OVERFLOW: int = Field(
        default=10, description="Extra connections when the pool is exhausted"
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30, description="Seconds to wait for a pooled connection"
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800, description="Recycle connections after N seconds"
    )

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log a warning for requests slower than this (seconds)",
    )

    # Password reset by one-time code
    OTP_LENGTH: int = Field(default=6, description="Digits in a reset code")
    OTP_EXPIRE_MINUTES: int = Field(
        default=5, description="Minutes before an emailed reset code expires"
    )
    RESET_TOKEN_EXPIRE_MINUTES: int = Field(
        default=10,
        description="Minutes a verified reset token may be used to set a password",
    )

    # Enrollment lifecycle
    ENROLLMENT_VALIDITY_DAYS: int = Field(
        default=180, description="Days of access granted by one enrollment"
    )
    ENROLLMENT_EXPIRY_CRON_HOUR: int = Field(
        default=0, description="Hour of day the expiry sweep runs"
    )

    # Payments
    PAYMENT_KEY_ID: str = Field(
        default="", description="Public checkout key handed to the frontend"
    )
    PAYMENT_KEY_SECRET: str = Field(
        default="",
        description="Shared secret used to verify checkout signatures",
    )
    PAYMENT_CURRENCY: str = Field(default="INR", description="Checkout currency")
    PLATFORM_COMMISSION_PERCENT: float = Field(
        default=20.0,
        description="Share of each sale kept by the platform, in percent",
    )

    # Exams and progress
    EXAM_PASS_SCORE: int = Field(
        default=60, description="Minimum percentage needed to pass an exam"
    )
    EXAM_MAX_ATTEMPTS: int = Field(
        default=3, description="Attempts allowed per exam and enrollment"
    )
    LESSON_COMPLETION_PERCENT: int = Field(
        default=90,
        description="Watched percentage at which a lesson counts as completed",
    )
    CERTIFICATE_BASE_PATH: str = Field(
        default="/uploads/certificates",
        description="Public path prefix of issued certificates",
    )

    # Email delivery
    EMAIL_PROVIDER: str = Field(
        default="console",
        description="Email provider: 'smtp' or 'console'",
    )
    SMTP_HOST: str = Field(default="localhost", description="SMTP server hostname")
    SMTP_PORT: int = Field(default=587, description="SMTP server port")
    SMTP_USER: str = Field(default="", description="SMTP username")
    SMTP_PASSWORD: str = Field(default="", description="SMTP password")
    SMTP_FROM_EMAIL: str = Field(
        default="noreply@learnx.app", description="From email address"
    )
    SMTP_FROM_NAME: str = Field(default="LearnX", description="From display name")
    SMTP_USE_TLS: bool = Field(
        default=True, description="Use STARTTLS for SMTP connection (port 587)"
    )
    SMTP_USE_SSL: bool = Field(
        default=False, description="Use implicit SSL for SMTP connection (port 465)"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Raises pydantic.ValidationError at import time when a required secret is missing.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
