"""Daily completion records, streaks and sparkline statistics."""

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Iterable, NamedTuple, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.daily_completions import crud_daily_completion
from app.crud.tasks import crud_task
from app.models.daily_completion import DailyCompletion
from app.models.task import Task, TaskStatus
from app.services.access_service import projects_accessible_by

logger = logging.getLogger(__name__)

CHART_DAYS = 7
SPARKLINE_DAYS = 30


class CompletionCounts(NamedTuple):
    tasks_selected: int
    tasks_completed: int
    is_fully_completed: bool


class ChartPoint(NamedTuple):
    date: date
    tasks_completed: int
    tasks_selected: int
    completion_percentage: int


class CompletionStats(NamedTuple):
    total_days: int
    fully_completed_days: int
    completion_rate: float
    average_tasks_completed: float
    current_streak: int
    longest_streak: int
    last_7_days_chart: list[ChartPoint]


class Sparklines(NamedTuple):
    creation_sparkline: list[tuple[date, int]]
    completion_sparkline: list[tuple[date, int]]


def compute_completion(tasks: Iterable[Task]) -> CompletionCounts:
    tasks = list(tasks)
    selected = len(tasks)
    completed = sum(1 for t in tasks if t.status == TaskStatus.done)
    return CompletionCounts(
        tasks_selected=selected,
        tasks_completed=completed,
        is_fully_completed=selected > 0 and selected == completed,
    )


def completion_percentage(tasks_completed: int, tasks_selected: int) -> int:
    if tasks_selected <= 0:
        return 0
    return round(tasks_completed / tasks_selected * 100)


async def upsert_completion(
    db: AsyncSession, user_id: int, day: date, counts: CompletionCounts
) -> DailyCompletion:
    """Overwrite (never accumulate) the record for (user_id, day)."""
    record = await crud_daily_completion.get_existing(db, user_id, day)
    if record is None:
        record = DailyCompletion(user_id=user_id, date=day)
        db.add(record)
    record.tasks_selected = counts.tasks_selected
    record.tasks_completed = counts.tasks_completed
    record.is_fully_completed = counts.is_fully_completed
    await db.flush()
    return record


async def update_today_completion(
    db: AsyncSession, user_id: int, today: Optional[date] = None
) -> DailyCompletion:
    """Recompute today's record from the user's currently selected tasks."""
    today = today or date.today()
    tasks = await crud_task.get_selected_by_creator(db, user_id)
    counts = compute_completion(tasks)
    record = await upsert_completion(db, user_id, today, counts)
    logger.info(
        "Daily completion for user %d on %s: %d/%d",
        user_id,
        today,
        counts.tasks_completed,
        counts.tasks_selected,
    )
    return record


async def snapshot_yesterday(db: AsyncSession, as_of: Optional[date] = None) -> int:
    """
    Stamp the current selection state of every user against yesterday's date.

    Runs at the day boundary before recurring tasks are reset. Each user is
    committed on its own; a failure is logged and the next user processed.
    Returns the number of records written.
    """
    as_of = as_of or date.today()
    yesterday = as_of - timedelta(days=1)

    by_user: dict[int, list[Task]] = defaultdict(list)
    for task in await crud_task.get_all_selected(db):
        by_user[task.user_id].append(task)

    # Counts are computed up front; a rollback expires the loaded tasks.
    counts_by_user = {user_id: compute_completion(tasks) for user_id, tasks in by_user.items()}

    written = 0
    for user_id, counts in counts_by_user.items():
        try:
            await upsert_completion(db, user_id, yesterday, counts)
            await db.commit()
            written += 1
            logger.info(
                "Snapshot for user %d on %s: %d/%d tasks completed",
                user_id,
                yesterday,
                counts.tasks_completed,
                counts.tasks_selected,
            )
        except Exception as exc:
            logger.error("Daily completion snapshot failed for user %d: %s", user_id, exc)
            await db.rollback()
    return written


def _streaks(records: Sequence[DailyCompletion], today: date) -> tuple[int, int]:
    """(current, longest) runs of consecutive fully-completed days."""
    full_days = sorted({r.date for r in records if r.is_fully_completed})

    longest = run = 0
    prev: Optional[date] = None
    for day in full_days:
        run = run + 1 if prev is not None and day == prev + timedelta(days=1) else 1
        longest = max(longest, run)
        prev = day

    full = set(full_days)
    # Today may not be finished yet; count back from yesterday in that case.
    cursor = today if today in full else today - timedelta(days=1)
    current = 0
    while cursor in full:
        current += 1
        cursor -= timedelta(days=1)
    return current, longest


async def completion_stats(
    db: AsyncSession, user_id: int, today: Optional[date] = None
) -> CompletionStats:
    today = today or date.today()
    records = await crud_daily_completion.get_by_user(db, user_id)

    total_days = len(records)
    fully_completed_days = sum(1 for r in records if r.is_fully_completed)
    if total_days:
        completion_rate = round(fully_completed_days * 100 / total_days, 1)
        average = round(sum(r.tasks_completed for r in records) / total_days, 1)
    else:
        completion_rate = 0.0
        average = 0.0

    chart_start = today - timedelta(days=CHART_DAYS - 1)
    last_7_days_chart = [
        ChartPoint(
            date=r.date,
            tasks_completed=r.tasks_completed,
            tasks_selected=r.tasks_selected,
            completion_percentage=completion_percentage(r.tasks_completed, r.tasks_selected),
        )
        for r in records
        if chart_start <= r.date <= today
    ]

    current_streak, longest_streak = _streaks(records, today)
    return CompletionStats(
        total_days=total_days,
        fully_completed_days=fully_completed_days,
        completion_rate=completion_rate,
        average_tasks_completed=average,
        current_streak=current_streak,
        longest_streak=longest_streak,
        last_7_days_chart=last_7_days_chart,
    )


async def task_sparklines(
    db: AsyncSession,
    user_id: int,
    today: Optional[date] = None,
    days: int = SPARKLINE_DAYS,
) -> Sparklines:
    """Tasks created / completed per day over the last `days` days."""
    today = today or date.today()
    start = today - timedelta(days=days - 1)
    accessible = await projects_accessible_by(db, user_id)
    active_ids = [p.id for p in accessible.all if not p.is_archived]
    tasks = await crud_task.get_visible_since(
        db, user_id, active_ids, datetime.combine(start, time.min)
    )

    created: dict[date, int] = {start + timedelta(days=i): 0 for i in range(days)}
    completed = dict(created)
    for task in tasks:
        if task.created_at and task.created_at.date() in created:
            created[task.created_at.date()] += 1
        if task.completed_at and task.completed_at.date() in completed:
            completed[task.completed_at.date()] += 1

    return Sparklines(
        creation_sparkline=sorted(created.items()),
        completion_sparkline=sorted(completed.items()),
    )
