"""Tests for the background scheduler and the enrollment expiry job."""

from unittest.mock import patch

import pytest

import core.scheduler as scheduler_module
import repositories.db_models as db_models
from core.scheduler import (
    ENROLLMENT_EXPIRY_JOB_ID,
    enrollment_expiry_job,
    get_scheduler_status,
    setup_scheduler,
    shutdown_scheduler,
)
from tests.conftest import TestingSessionLocal, make_enrollment


@pytest.fixture(autouse=True)
def reset_scheduler():
    shutdown_scheduler()
    yield
    shutdown_scheduler()


class TestSchedulerLifecycle:
    """Tests for setup, status and shutdown."""

    def test_status_before_setup(self) -> None:
        assert get_scheduler_status() == {"running": False, "jobs": []}

    def test_setup_registers_expiry_job(self) -> None:
        setup_scheduler()

        status = get_scheduler_status()
        assert status["running"] is True
        assert [job["id"] for job in status["jobs"]] == [ENROLLMENT_EXPIRY_JOB_ID]
        assert status["jobs"][0]["next_run_time"] is not None

    def test_setup_is_idempotent(self) -> None:
        setup_scheduler()
        first = scheduler_module.scheduler

        setup_scheduler()

        assert scheduler_module.scheduler is first

    def test_shutdown_clears_scheduler(self) -> None:
        setup_scheduler()
        shutdown_scheduler()

        assert scheduler_module.scheduler is None
        assert get_scheduler_status()["running"] is False


class TestEnrollmentExpiryJob:
    """The job runs the sweep in its own session."""

    def test_cancels_expired_enrollments(
        self, db_session, student_user, free_course
    ) -> None:
        expired = make_enrollment(
            db_session, student_user, free_course, expires_in_days=-2
        )

        with patch.object(scheduler_module, "SessionLocal", TestingSessionLocal):
            cancelled = enrollment_expiry_job()

        assert cancelled == 1
        db_session.refresh(expired)
        assert expired.status == db_models.EnrollmentStatus.CANCELLED

    def test_failure_is_reraised(self) -> None:
        with (
            patch.object(scheduler_module, "SessionLocal", TestingSessionLocal),
            patch(
                "services.enrollment_service.EnrollmentService."
                "cancel_expired_enrollments",
                side_effect=RuntimeError("db down"),
            ),
        ):
            with pytest.raises(RuntimeError):
                enrollment_expiry_job()
