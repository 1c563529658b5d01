"""Project access resolution: which projects a user may see, edit or select from."""

import logging
from typing import NamedTuple, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.projects import crud_project
from app.models.project import CollaboratorRole, Project
from app.models.task import Task

logger = logging.getLogger(__name__)

_EDIT_ROLES = (CollaboratorRole.editor, CollaboratorRole.admin)


class AccessibleProjects(NamedTuple):
    owned: list[Project]
    shared: list[Project]

    @property
    def all(self) -> list[Project]:
        return [*self.owned, *self.shared]

    @property
    def ids(self) -> list[int]:
        return [p.id for p in self.all]


async def projects_accessible_by(db: AsyncSession, user_id: int) -> AccessibleProjects:
    owned = await crud_project.get_owned(db, user_id)
    shared = await crud_project.get_shared(db, user_id)
    return AccessibleProjects(owned=list(owned), shared=list(shared))


async def _role(
    db: AsyncSession, user_id: int, project: Project
) -> Optional[CollaboratorRole]:
    return await crud_project.get_collaborator_role(db, project.id, user_id)


async def can_view_project(db: AsyncSession, user_id: int, project: Project) -> bool:
    if project.owner_id == user_id:
        return True
    return await _role(db, user_id, project) is not None


async def can_edit_project(db: AsyncSession, user_id: int, project: Project) -> bool:
    """Owner, or a collaborator with editor/admin role."""
    if project.owner_id == user_id:
        return True
    return await _role(db, user_id, project) in _EDIT_ROLES


async def can_edit_task(db: AsyncSession, user_id: int, task: Task, project: Project) -> bool:
    """Task creator, project owner, or editor/admin collaborator."""
    if task.user_id == user_id:
        return True
    return await can_edit_project(db, user_id, project)


async def can_delete_task(
    db: AsyncSession, user_id: int, task: Task, project: Project
) -> bool:
    """Task creator, project owner, or admin collaborator."""
    if task.user_id == user_id or project.owner_id == user_id:
        return True
    return await _role(db, user_id, project) == CollaboratorRole.admin


async def can_select_task(
    db: AsyncSession, user_id: int, task: Task, project: Project
) -> bool:
    """Today-selection is looser than editing: any collaborator role will do."""
    if task.user_id == user_id:
        return True
    return await can_view_project(db, user_id, project)
