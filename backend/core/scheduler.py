"""
Background scheduler for recurring maintenance jobs.

Uses APScheduler's BackgroundScheduler. The only job today is the daily
enrollment expiry sweep, which cancels active enrollments whose access
window has passed.
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from models.config import settings
from repositories.database import SessionLocal

ENROLLMENT_EXPIRY_JOB_ID = "enrollment_expiry"

scheduler: BackgroundScheduler | None = None


def enrollment_expiry_job() -> int:
    """
    Cancel expired enrollments in a dedicated session.

    Returns:
        Number of enrollments cancelled.
    """
    from services.enrollment_service import EnrollmentService

    logger.info("Running scheduled enrollment expiry sweep")

    db = SessionLocal()
    try:
        cancelled = EnrollmentService.cancel_expired_enrollments(db)
        logger.info(f"Enrollment expiry sweep cancelled {cancelled} enrollment(s)")
        return cancelled
    except Exception as e:
        logger.error(f"Enrollment expiry sweep failed: {e}")
        raise
    finally:
        db.close()


def setup_scheduler() -> None:
    """Create, configure and start the scheduler (idempotent)."""
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        enrollment_expiry_job,
        CronTrigger(hour=settings.ENROLLMENT_EXPIRY_CRON_HOUR, minute=0),
        id=ENROLLMENT_EXPIRY_JOB_ID,
        name="Enrollment Expiry Sweep",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.start()
    logger.info(
        f"Background scheduler started; enrollment expiry runs daily at "
        f"{settings.ENROLLMENT_EXPIRY_CRON_HOUR:02d}:00 UTC"
    )


def shutdown_scheduler() -> None:
    """Stop the scheduler if it is running."""
    global scheduler

    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")
    scheduler = None


def get_scheduler_status() -> dict:
    """Describe the scheduler and its jobs for the admin API."""
    if scheduler is None:
        return {"running": False, "jobs": []}

    return {
        "running": scheduler.running,
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": (
                    job.next_run_time.isoformat() if job.next_run_time else None
                ),
            }
            for job in scheduler.get_jobs()
        ],
    }
