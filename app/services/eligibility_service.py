"""Which tasks are candidates for today's selection."""

import logging
from typing import Iterable, NamedTuple, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.tasks import crud_task
from app.models.project import Project
from app.models.task import Task
from app.services.access_service import projects_accessible_by

logger = logging.getLogger(__name__)


class EligibleTasks(NamedTuple):
    tasks: list[Task]
    projects: list[Project]

    @property
    def project_names(self) -> dict[int, str]:
        return {p.id: p.name for p in self.projects}


def select_eligible_projects(projects: Iterable[Project]) -> list[Project]:
    """
    Drop archived projects, then keep only sacred ones.

    When none of the active projects is sacred, every active project stays
    eligible so there is always something to pick from.
    """
    active = [p for p in projects if not p.is_archived]
    sacred = [p for p in active if p.is_priority]
    return sacred or active


async def eligible_tasks_for(db: AsyncSession, user_id: int) -> EligibleTasks:
    accessible = await projects_accessible_by(db, user_id)
    projects = select_eligible_projects(accessible.all)
    logger.debug("User %d eligible projects: %s", user_id, [p.name for p in projects])
    tasks = await crud_task.get_open_in_projects(db, [p.id for p in projects])
    return EligibleTasks(tasks=list(tasks), projects=projects)


async def eligible_tasks(db: AsyncSession, user_id: int) -> Sequence[Task]:
    """Non-done tasks in the user's sacred projects (or all active ones)."""
    result = await eligible_tasks_for(db, user_id)
    return result.tasks
