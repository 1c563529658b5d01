from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.base import CRUDBase
from app.models.project import CollaboratorRole, Project, ProjectCollaborator


class CRUDProject(CRUDBase[Project]):
    async def get_owned(self, db: AsyncSession, user_id: int) -> Sequence[Project]:
        result = await db.execute(
            select(Project).where(Project.owner_id == user_id).order_by(Project.sort_order)
        )
        return result.scalars().all()

    async def get_shared(self, db: AsyncSession, user_id: int) -> Sequence[Project]:
        """Projects where the user is a collaborator (any role) but not the owner."""
        result = await db.execute(
            select(Project)
            .join(ProjectCollaborator, ProjectCollaborator.project_id == Project.id)
            .where(ProjectCollaborator.user_id == user_id, Project.owner_id != user_id)
            .order_by(Project.sort_order)
        )
        return result.scalars().all()

    async def get_collaborator_role(
        self, db: AsyncSession, project_id: int, user_id: int
    ) -> Optional[CollaboratorRole]:
        result = await db.execute(
            select(ProjectCollaborator.role).where(
                ProjectCollaborator.project_id == project_id,
                ProjectCollaborator.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()


crud_project = CRUDProject(Project)
