from datetime import date
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.base import CRUDBase
from app.models.daily_completion import DailyCompletion


class CRUDDailyCompletion(CRUDBase[DailyCompletion]):
    async def get_existing(
        self, db: AsyncSession, user_id: int, day: date
    ) -> Optional[DailyCompletion]:
        result = await db.execute(
            select(DailyCompletion).where(
                DailyCompletion.user_id == user_id,
                DailyCompletion.date == day,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_user(self, db: AsyncSession, user_id: int) -> Sequence[DailyCompletion]:
        result = await db.execute(
            select(DailyCompletion)
            .where(DailyCompletion.user_id == user_id)
            .order_by(DailyCompletion.date)
        )
        return result.scalars().all()


crud_daily_completion = CRUDDailyCompletion(DailyCompletion)
