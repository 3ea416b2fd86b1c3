"""Background job scheduler for vote deadline reminders."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from app.core.config import settings
from app.core.database import engine
from app.core.notifications import send_vote_deadline_reminders
from app.core.store import DocumentStore

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def reminder_job():
    """Background reminder job."""
    try:
        with Session(engine) as session:
            stats = send_vote_deadline_reminders(DocumentStore(session))
            logger.info(f"Reminder run completed: {stats}")
    except Exception as e:
        logger.error(f"Reminder run failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        reminder_job,
        trigger=IntervalTrigger(minutes=settings.reminder_interval_minutes),
        id="vote_deadline_reminders",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, checking vote deadlines every "
        f"{settings.reminder_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
