"""APScheduler cron jobs (runs in-process with single uvicorn worker)."""
import logging
from datetime import date, datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import AsyncSessionLocal
from app.services import completion_service, recurrence_service

logger = logging.getLogger(__name__)
settings = get_settings()

scheduler = AsyncIOScheduler(timezone=settings.SCHEDULER_TIMEZONE)

DAY_ROLLOVER_JOB_ID = "day_rollover"


def scheduler_today(now: Optional[datetime] = None) -> date:
    """The calendar day in the scheduler's timezone, which may differ from the host's."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(scheduler.timezone).date()


async def roll_over_day(db: AsyncSession, as_of: Optional[date] = None) -> tuple[int, int]:
    """
    Close out yesterday, then open today.

    The snapshot runs first so yesterday's completed recurring tasks are
    counted as done before the reset flips them back to todo.
    Returns (snapshots written, tasks reset).
    """
    as_of = as_of or scheduler_today()
    snapshots = await completion_service.snapshot_yesterday(db, as_of)
    reset = await recurrence_service.reset_recurring_tasks(db, as_of)
    return snapshots, reset


async def _day_rollover():
    """Midnight – snapshot yesterday's completion, reset recurring tasks."""
    async with AsyncSessionLocal() as db:
        try:
            snapshots, reset = await roll_over_day(db, scheduler_today())
            logger.info(
                "Day rollover done: %d completion snapshot(s), %d recurring task(s) reset",
                snapshots,
                reset,
            )
        except Exception as exc:
            logger.error("Day rollover failed: %s", exc)
            await db.rollback()


def setup_scheduler():
    """Register all cron jobs. Call once at app startup."""
    scheduler.add_job(
        _day_rollover,
        CronTrigger(hour=settings.ROLLOVER_HOUR, minute=settings.ROLLOVER_MINUTE),
        id=DAY_ROLLOVER_JOB_ID,
        replace_existing=True,
    )
    logger.info("Scheduler jobs registered: %s", [j.id for j in scheduler.get_jobs()])
