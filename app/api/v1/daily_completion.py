"""Daily completion endpoints."""

from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.api.v1.deps import require_user
from app.models.user import User
from app.schemas.daily_completion import (
    ChartPoint,
    CompletionStatsResponse,
    DailyCompletionResponse,
)
from app.services import completion_service

router = APIRouter(prefix="/daily-completion", tags=["daily-completion"])


@router.get("/stats", response_model=CompletionStatsResponse)
async def get_completion_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    stats = await completion_service.completion_stats(db, user.id)
    return CompletionStatsResponse(
        total_days=stats.total_days,
        fully_completed_days=stats.fully_completed_days,
        completion_rate=stats.completion_rate,
        average_tasks_completed=stats.average_tasks_completed,
        current_streak=stats.current_streak,
        longest_streak=stats.longest_streak,
        last_7_days_chart=[ChartPoint(**p._asdict()) for p in stats.last_7_days_chart],
    )


@router.post("/update", response_model=DailyCompletionResponse)
async def update_today_completion(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    return await completion_service.update_today_completion(db, user.id)
