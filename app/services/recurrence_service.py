"""Recurring task lifecycle: completion bookkeeping and the daily reset."""

import logging
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.tasks import crud_task
from app.models.task import Task, TaskStatus, WEEKDAYS

logger = logging.getLogger(__name__)


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def is_scheduled_on(task: Task, day: date) -> bool:
    """An empty recurring_days list means every day."""
    days = task.recurring_days or []
    return not days or weekday_name(day) in days


def apply_status_change(
    task: Task, new_status: TaskStatus, now: Optional[datetime] = None
) -> bool:
    """
    Set task.status, stamping completion fields on a transition into done.

    completed_at is set on every transition into done; last_completed_date
    only when the task is recurring. Returns True if the status changed.
    """
    if task.status == new_status:
        return False
    task.status = new_status
    if new_status == TaskStatus.done:
        now = now or datetime.now()
        task.completed_at = now
        if task.is_recurring:
            task.last_completed_date = now
    return True


def reset_task(task: Task, as_of: date) -> bool:
    """Flip a completed recurring task back to todo if as_of is one of its days."""
    if not (task.is_recurring and task.status == TaskStatus.done):
        return False
    if not is_scheduled_on(task, as_of):
        return False
    task.status = TaskStatus.todo
    task.completed_at = None
    return True


async def reset_recurring_tasks(db: AsyncSession, as_of: Optional[date] = None) -> int:
    """
    Reset recurring tasks completed before as_of whose schedule includes as_of.

    Each task is committed on its own; a failing task is logged, rolled back
    and skipped. Returns the number of tasks reset.
    """
    as_of = as_of or date.today()
    start_of_day = datetime.combine(as_of, time.min)
    candidate_ids = await crud_task.get_recurring_reset_candidate_ids(db, start_of_day)
    logger.info(
        "Found %d recurring task(s) completed before %s (%s)",
        len(candidate_ids),
        as_of,
        weekday_name(as_of),
    )

    reset_count = 0
    for task_id in candidate_ids:
        try:
            task = await crud_task.get(db, task_id)
            if task is None:
                continue
            if reset_task(task, as_of):
                await db.commit()
                reset_count += 1
                logger.debug("Reset recurring task %d (%s)", task.id, task.name)
        except Exception as exc:
            logger.error("Resetting recurring task %d failed: %s", task_id, exc)
            await db.rollback()

    logger.info("Recurring task reset complete: %d reset", reset_count)
    return reset_count
