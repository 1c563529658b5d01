"""Tests for recurring task completion bookkeeping and the daily reset."""

from datetime import date, datetime
from unittest.mock import patch

import pytest
import pytest_asyncio

from app.models import Task, TaskStatus
from app.services import recurrence_service
from app.services.recurrence_service import (
    apply_status_change,
    is_scheduled_on,
    reset_recurring_tasks,
    weekday_name,
)

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
SUNDAY_EVENING = datetime(2026, 10, 18, 21, 30)


def test_weekday_name():
    assert weekday_name(MONDAY) == "monday"
    assert weekday_name(TUESDAY) == "tuesday"


def test_empty_recurring_days_means_every_day():
    task = Task(is_recurring=True, recurring_days=[])
    assert is_scheduled_on(task, MONDAY)
    assert is_scheduled_on(task, TUESDAY)


def test_recurring_days_gate_schedule():
    task = Task(is_recurring=True, recurring_days=["monday", "wednesday"])
    assert is_scheduled_on(task, MONDAY)
    assert not is_scheduled_on(task, TUESDAY)


# ---------------------------------------------------------------------------
# apply_status_change
# ---------------------------------------------------------------------------


def test_completing_recurring_task_stamps_last_completed_date():
    now = datetime(2026, 10, 18, 9, 0)
    task = Task(status=TaskStatus.todo, is_recurring=True, recurring_days=[])
    assert apply_status_change(task, TaskStatus.done, now)
    assert task.completed_at == now
    assert task.last_completed_date == now


def test_completing_one_off_task_leaves_last_completed_date_alone():
    now = datetime(2026, 10, 18, 9, 0)
    task = Task(status=TaskStatus.in_progress, is_recurring=False, last_completed_date=None)
    apply_status_change(task, TaskStatus.done, now)
    assert task.completed_at == now
    assert task.last_completed_date is None


def test_same_status_is_a_no_op():
    earlier = datetime(2026, 10, 17, 9, 0)
    task = Task(status=TaskStatus.done, is_recurring=True, completed_at=earlier)
    assert not apply_status_change(task, TaskStatus.done, datetime(2026, 10, 18))
    assert task.completed_at == earlier


# ---------------------------------------------------------------------------
# reset_recurring_tasks
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def recurring(db, make_user, make_project, make_task):
    user = await make_user("Rita")
    project = await make_project(user)

    async def _make(name, recurring_days, last_completed=SUNDAY_EVENING, **kw):
        return await make_task(
            project,
            user,
            name,
            status=TaskStatus.done,
            is_recurring=True,
            recurring_days=recurring_days,
            last_completed_date=last_completed,
            completed_at=last_completed,
            **kw,
        )

    return _make


@pytest.mark.asyncio
async def test_reset_only_on_scheduled_weekday(db, recurring):
    mon_wed = await recurring("gym", ["monday", "wednesday"])

    assert await reset_recurring_tasks(db, TUESDAY) == 0
    await db.refresh(mon_wed)
    assert mon_wed.status == TaskStatus.done

    assert await reset_recurring_tasks(db, MONDAY) == 1
    await db.refresh(mon_wed)
    assert mon_wed.status == TaskStatus.todo
    assert mon_wed.completed_at is None
    assert mon_wed.last_completed_date == SUNDAY_EVENING


@pytest.mark.asyncio
async def test_every_day_task_resets_any_day(db, recurring):
    daily = await recurring("journal", [])
    assert await reset_recurring_tasks(db, TUESDAY) == 1
    await db.refresh(daily)
    assert daily.status == TaskStatus.todo


@pytest.mark.asyncio
async def test_reset_is_idempotent(db, recurring):
    await recurring("journal", [])
    assert await reset_recurring_tasks(db, MONDAY) == 1
    assert await reset_recurring_tasks(db, MONDAY) == 0


@pytest.mark.asyncio
async def test_completed_today_is_not_reset(db, recurring):
    this_morning = datetime(2026, 10, 19, 7, 0)
    task = await recurring("journal", [], last_completed=this_morning)
    assert await reset_recurring_tasks(db, MONDAY) == 0
    await db.refresh(task)
    assert task.status == TaskStatus.done


@pytest.mark.asyncio
async def test_non_recurring_done_task_is_untouched(db, make_user, make_project, make_task):
    user = await make_user("Otto")
    project = await make_project(user)
    task = await make_task(
        project, user, "one-off", status=TaskStatus.done, completed_at=SUNDAY_EVENING
    )
    assert await reset_recurring_tasks(db, MONDAY) == 0
    await db.refresh(task)
    assert task.status == TaskStatus.done


@pytest.mark.asyncio
async def test_failing_task_is_rolled_back_and_others_still_reset(db, recurring):
    first = await recurring("journal", [])
    broken = await recurring("gym", [])
    last = await recurring("read", [])
    await db.commit()
    broken_id = broken.id
    real_reset = recurrence_service.reset_task

    def flaky_reset(task, as_of):
        changed = real_reset(task, as_of)
        if task.id == broken_id:
            raise RuntimeError("lock wait timeout")
        return changed

    with patch("app.services.recurrence_service.reset_task", side_effect=flaky_reset):
        assert await reset_recurring_tasks(db, MONDAY) == 2

    for task in (first, broken, last):
        await db.refresh(task)
    assert first.status == TaskStatus.todo
    assert broken.status == TaskStatus.done
    assert last.status == TaskStatus.todo
