"""Background job scheduler for pending confirmation reminders."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from caterstaff.core.clock import get_clock
from caterstaff.core.config import settings
from caterstaff.core.database import engine
from caterstaff.services.reminders import create_pending_reminders

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def pending_reminders_job():
    """Background reminder job."""
    try:
        with Session(engine) as session:
            created = create_pending_reminders(
                session,
                get_clock(),
                settings.reminder_delay_hours,
                account_id=settings.account_id,
            )
            logger.info(f"Reminder check completed: {created} new notification(s)")
    except Exception as e:
        logger.error(f"Reminder check failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        pending_reminders_job,
        trigger=IntervalTrigger(minutes=settings.reminder_interval_minutes),
        id="pending_reminders",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, checking pending confirmations every "
        f"{settings.reminder_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
