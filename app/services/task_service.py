"""Single-task operations with access checks and completion bookkeeping."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.projects import crud_project
from app.crud.tasks import crud_task
from app.exceptions import AuthorizationError, NotFoundError
from app.models.project import Project
from app.models.task import Task, TaskStatus
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.access_service import (
    can_delete_task,
    can_edit_project,
    can_edit_task,
    can_view_project,
)
from app.services.recurrence_service import apply_status_change

logger = logging.getLogger(__name__)

# A null for these in an update body means "leave unchanged"
_NOT_NULL_FIELDS = ("name", "priority", "estimated_time", "is_recurring", "recurring_days")


async def _load(db: AsyncSession, task_id: int) -> tuple[Task, Project]:
    task = await crud_task.get(db, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    project = await crud_project.get(db, task.project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return task, project


async def create_task(
    db: AsyncSession, user_id: int, body: TaskCreate, now: Optional[datetime] = None
) -> Task:
    project = await crud_project.get(db, body.project_id)
    if project is None:
        raise NotFoundError("Project not found")
    if not await can_edit_project(db, user_id, project):
        raise AuthorizationError("Not authorized to create tasks in this project")

    is_recurring = body.is_recurring
    if is_recurring is None:
        is_recurring = project.default_tasks_recurring
    recurring_days = body.recurring_days
    if recurring_days is None:
        recurring_days = list(project.default_recurring_days or []) if is_recurring else []

    task = Task(
        project_id=project.id,
        user_id=user_id,
        name=body.name,
        description=body.description,
        priority=body.priority,
        status=TaskStatus.todo,
        estimated_time=body.estimated_time,
        due_date=body.due_date,
        is_recurring=is_recurring,
        recurring_days=recurring_days,
    )
    apply_status_change(task, body.status, now)
    db.add(task)
    await db.flush()
    await db.refresh(task)
    logger.info("User %d created task %d in project %d", user_id, task.id, project.id)
    return task


async def get_task(db: AsyncSession, user_id: int, task_id: int) -> Task:
    task, project = await _load(db, task_id)
    if task.user_id != user_id and not await can_view_project(db, user_id, project):
        raise AuthorizationError("Not authorized to view this task")
    return task


async def update_task(
    db: AsyncSession,
    user_id: int,
    task_id: int,
    body: TaskUpdate,
    now: Optional[datetime] = None,
) -> Task:
    task, project = await _load(db, task_id)
    if not await can_edit_task(db, user_id, task, project):
        raise AuthorizationError("Not authorized to update this task")

    data = body.model_dump(exclude_unset=True)
    new_status = data.pop("status", None)
    for field, value in data.items():
        if value is None and field in _NOT_NULL_FIELDS:
            continue
        setattr(task, field, value)

    # Status last so a task made recurring in the same update records last_completed_date
    if new_status is not None:
        previous = task.status
        if apply_status_change(task, new_status, now):
            logger.info(
                "Task %d status %s -> %s (by user %d)",
                task.id,
                previous.value,
                new_status.value,
                user_id,
            )

    db.add(task)
    await db.flush()
    await db.refresh(task)
    return task


async def delete_task(db: AsyncSession, user_id: int, task_id: int) -> None:
    task, project = await _load(db, task_id)
    if not await can_delete_task(db, user_id, task, project):
        raise AuthorizationError("Not authorized to delete this task")
    await crud_task.remove(db, db_obj=task)
    logger.info("User %d deleted task %d", user_id, task_id)
