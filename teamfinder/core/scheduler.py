"""Background job scheduler for listing reconciliation."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from teamfinder.completions.lifecycle import reconcile_confirmed_listings
from teamfinder.core.config import settings
from teamfinder.core.database import engine

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def reconcile_job():
    """Background reconciliation job."""
    try:
        with Session(engine) as session:
            repaired = reconcile_confirmed_listings(session)
            logger.info(f"Listing reconciliation completed: {repaired} repaired")
    except Exception as e:
        logger.error(f"Listing reconciliation failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        reconcile_job,
        trigger=IntervalTrigger(minutes=settings.reconcile_interval_minutes),
        id="listing_reconcile",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, reconciling listings every "
        f"{settings.reconcile_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
