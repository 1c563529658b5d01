"""Completion statistics MCP tools."""

from typing import Optional

from app.database import AsyncSessionLocal
from app.mcp.auth import resolve_user
from app.mcp.server import mcp
from app.services import completion_service


@mcp.tool()
async def get_completion_stats(x_user_id: Optional[int] = None) -> dict:
    """Completion rate, streaks and the last seven days of Sacred Six results."""
    async with AsyncSessionLocal() as db:
        user = await resolve_user(db, x_user_id)
        stats = await completion_service.completion_stats(db, user.id)
        return {
            "total_days": stats.total_days,
            "fully_completed_days": stats.fully_completed_days,
            "completion_rate": stats.completion_rate,
            "average_tasks_completed": stats.average_tasks_completed,
            "current_streak": stats.current_streak,
            "longest_streak": stats.longest_streak,
            "last_7_days_chart": [
                {**p._asdict(), "date": p.date.isoformat()} for p in stats.last_7_days_chart
            ],
        }


@mcp.tool()
async def update_today_completion(x_user_id: Optional[int] = None) -> dict:
    """Recompute today's completion record from the current selection."""
    async with AsyncSessionLocal() as db:
        user = await resolve_user(db, x_user_id)
        record = await completion_service.update_today_completion(db, user.id)
        result = {
            "date": record.date.isoformat(),
            "tasks_selected": record.tasks_selected,
            "tasks_completed": record.tasks_completed,
            "is_fully_completed": record.is_fully_completed,
        }
        await db.commit()
        return result
