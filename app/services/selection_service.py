"""Daily Sacred Six selection: at most six tasks flagged for today per user."""

import logging
from typing import Iterable, Iterator, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.projects import crud_project
from app.crud.tasks import crud_task
from app.exceptions import ValidationError
from app.models.task import PRIORITY_RANK, Task
from app.services.access_service import can_select_task, projects_accessible_by

logger = logging.getLogger(__name__)

MAX_TODAY_TASKS = 6

TOO_MANY_TASKS = (
    f"Invalid task selection. You can select up to {MAX_TODAY_TASKS} tasks for today."
)


class TodaySelection:
    """Ordered set of task ids that never grows beyond MAX_TODAY_TASKS."""

    def __init__(self, task_ids: Iterable[int] = (), max_size: int = MAX_TODAY_TASKS):
        self.max_size = max_size
        self._ids: list[int] = []
        for task_id in task_ids:
            self.add(task_id)

    def add(self, task_id: int) -> None:
        if task_id in self._ids:
            return
        if len(self._ids) >= self.max_size:
            raise ValidationError(TOO_MANY_TASKS)
        self._ids.append(task_id)

    def discard(self, task_id: int) -> None:
        if task_id in self._ids:
            self._ids.remove(task_id)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._ids

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"TodaySelection({self._ids!r})"


def sort_today_tasks(tasks: Iterable[Task]) -> list[Task]:
    """high < medium < low, then oldest task first."""
    return sorted(tasks, key=lambda t: (PRIORITY_RANK[t.priority], t.id))


async def get_today_tasks(db: AsyncSession, user_id: int) -> list[Task]:
    """Selected tasks the user created or that sit in a project they can access."""
    accessible = await projects_accessible_by(db, user_id)
    tasks = await crud_task.get_selected_visible_to(db, user_id, accessible.ids)
    return sort_today_tasks(tasks)


async def set_today_selection(
    db: AsyncSession, user_id: int, requested_task_ids: Sequence[int]
) -> list[Task]:
    """
    Replace the user's today-selection with requested_task_ids.

    Clears tasks the user created or previously selected, then flags the
    requested ones. Unknown tasks, tasks the user has no relationship with
    and tasks that would push the user's visible today-set or the task
    creator's own selection past six are skipped without failing the
    request. Raises ValidationError for more than six ids before anything
    is written.
    """
    if len(requested_task_ids) > MAX_TODAY_TASKS:
        raise ValidationError(TOO_MANY_TASKS)
    selection = TodaySelection(requested_task_ids)

    cleared = await crud_task.clear_today_for_user(db, user_id)
    logger.debug("User %d: cleared %d previously selected task(s)", user_id, cleared)

    # Picks left by other users in shared projects stay and count toward the cap
    accessible = await projects_accessible_by(db, user_id)
    remaining = await crud_task.get_selected_visible_to(db, user_id, accessible.ids)
    visible = {t.id for t in remaining}

    for task_id in selection:
        task = await crud_task.get(db, task_id)
        if task is None:
            logger.debug("User %d: task %d not found, skipping", user_id, task_id)
            continue
        project = await crud_project.get(db, task.project_id)
        if project is None:
            logger.debug("User %d: task %d has no project, skipping", user_id, task_id)
            continue
        if not await can_select_task(db, user_id, task, project):
            logger.debug("User %d: not authorized for task %d, skipping", user_id, task_id)
            continue
        if task.id in visible:
            continue
        if len(visible) >= MAX_TODAY_TASKS:
            logger.debug("User %d: today-set full, skipping task %d", user_id, task_id)
            continue
        if await crud_task.count_selected_by_creator(db, task.user_id) >= MAX_TODAY_TASKS:
            logger.debug(
                "User %d: creator %d already has %d selected, skipping task %d",
                user_id,
                task.user_id,
                MAX_TODAY_TASKS,
                task_id,
            )
            continue
        task.is_selected_for_today = True
        task.selected_by_id = user_id
        db.add(task)
        visible.add(task.id)

    await db.flush()
    today = await get_today_tasks(db, user_id)
    logger.info(
        "User %d selected %d task(s) for today (%d requested)",
        user_id,
        len(today),
        len(selection),
    )
    return today
