from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.base import CRUDBase
from app.models.task import Task, TaskStatus


class CRUDTask(CRUDBase[Task]):
    async def get_open_in_projects(
        self, db: AsyncSession, project_ids: Iterable[int]
    ) -> Sequence[Task]:
        """Non-done tasks in the given projects, project eagerly loaded."""
        project_ids = list(project_ids)
        if not project_ids:
            return []
        result = await db.execute(
            select(Task)
            .options(selectinload(Task.project))
            .where(Task.project_id.in_(project_ids), Task.status != TaskStatus.done)
        )
        return result.scalars().all()

    async def clear_today_for_user(self, db: AsyncSession, user_id: int) -> int:
        """Unset the today flag on every task the user created or selected."""
        result = await db.execute(
            update(Task)
            .where(
                or_(Task.user_id == user_id, Task.selected_by_id == user_id),
                Task.is_selected_for_today.is_(True),
            )
            .values(is_selected_for_today=False, selected_by_id=None)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def get_selected_visible_to(
        self, db: AsyncSession, user_id: int, project_ids: Iterable[int]
    ) -> Sequence[Task]:
        """Selected tasks the user created or that live in one of project_ids."""
        project_ids = list(project_ids)
        visible = Task.user_id == user_id
        if project_ids:
            visible = or_(visible, Task.project_id.in_(project_ids))
        result = await db.execute(
            select(Task).where(Task.is_selected_for_today.is_(True), visible)
        )
        return result.scalars().all()

    async def get_selected_by_creator(self, db: AsyncSession, user_id: int) -> Sequence[Task]:
        result = await db.execute(
            select(Task).where(Task.user_id == user_id, Task.is_selected_for_today.is_(True))
        )
        return result.scalars().all()

    async def count_selected_by_creator(self, db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count(Task.id)).where(
                Task.user_id == user_id, Task.is_selected_for_today.is_(True)
            )
        )
        return result.scalar_one()

    async def get_all_selected(self, db: AsyncSession) -> Sequence[Task]:
        result = await db.execute(select(Task).where(Task.is_selected_for_today.is_(True)))
        return result.scalars().all()

    async def get_recurring_reset_candidate_ids(
        self, db: AsyncSession, before: datetime
    ) -> list[int]:
        """Ids of done recurring tasks last completed strictly before `before`."""
        result = await db.execute(
            select(Task.id)
            .where(
                Task.is_recurring.is_(True),
                Task.status == TaskStatus.done,
                Task.last_completed_date < before,
            )
            .order_by(Task.id)
        )
        return list(result.scalars().all())

    async def get_visible_since(
        self, db: AsyncSession, user_id: int, project_ids: Iterable[int], since: datetime
    ) -> Sequence[Task]:
        """Tasks created by the user or in project_ids, touched at or after `since`."""
        project_ids = list(project_ids)
        visible = Task.user_id == user_id
        if project_ids:
            visible = or_(visible, Task.project_id.in_(project_ids))
        result = await db.execute(
            select(Task).where(
                visible,
                or_(Task.created_at >= since, Task.completed_at >= since),
            )
        )
        return result.scalars().all()


crud_task = CRUDTask(Task)
