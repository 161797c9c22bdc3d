"""
Background job definitions using APScheduler.

Jobs include:
- Auto-settlement of old pending ledger entries (when enabled in settings)
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from commission_ledger.config import settings
from commission_ledger.db import AsyncSessionLocal
from commission_ledger.services.distributor import CommissionDistributor

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def auto_settle_job(days: int, session_factory=AsyncSessionLocal) -> int:
    """Mark paid every pending entry older than `days`."""
    logger.debug("Running auto-settle job")
    try:
        async with session_factory() as db:
            settled = await CommissionDistributor(db).settle_older_than(days)
    except SQLAlchemyError as e:
        logger.error(f"Auto-settle job error: {e}")
        return 0

    if settled:
        logger.info(f"Auto-settle job: marked {settled} ledger entries paid")
    return settled


def setup_scheduler() -> bool:
    """
    Configure and add all scheduled jobs.

    Called during application startup. Returns False when there is
    nothing to schedule.
    """
    if settings.auto_settle_after_days is None:
        logger.info("Auto-settlement disabled, scheduler has no jobs")
        return False

    scheduler.add_job(
        auto_settle_job,
        trigger=IntervalTrigger(hours=1),
        args=[settings.auto_settle_after_days],
        id="auto_settle",
        name="Settle old pending commission",
        replace_existing=True,
    )

    logger.info(
        f"Scheduler configured: auto-settle after {settings.auto_settle_after_days} days"
    )
    return True
