import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings

logger = logging.getLogger(__name__)

def create_scheduler(manager) -> AsyncIOScheduler:
    """
    Background jobs for one HabitManager.

    1. Autosave: writes pending changes once they have settled.
    2. Daily maintenance: recomputes streaks after the local day rolls over.
    """
    scheduler = AsyncIOScheduler()

    async def autosave():
        await manager.flush_if_due()

    async def run_daily_maintenance():
        try:
            await manager.refresh_streaks()
        except Exception as e:
            logger.error("Daily maintenance failed: %s", e)

    scheduler.add_job(
        autosave,
        IntervalTrigger(seconds=settings.AUTOSAVE_CHECK_SECONDS),
        id="autosave",
        max_instances=1,
        coalesce=True
    )
    # Check every hour to catch day rollovers without restart
    scheduler.add_job(
        run_daily_maintenance,
        IntervalTrigger(hours=settings.MAINTENANCE_INTERVAL_HOURS),
        id="daily_maintenance",
        coalesce=True
    )
    return scheduler
