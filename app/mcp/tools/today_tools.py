"""Today-selection MCP tools: eligibility, Sacred Six selection, AI recommendation."""

from typing import Optional

from app.database import AsyncSessionLocal
from app.mcp.auth import resolve_user
from app.mcp.server import mcp
from app.models.task import Task
from app.services import eligibility_service, recommendation_service, selection_service


def _task_dict(task: Task) -> dict:
    return {
        "id": task.id,
        "name": task.name,
        "project_id": task.project_id,
        "priority": task.priority.value,
        "status": task.status.value,
        "estimated_time": task.estimated_time,
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "is_recurring": task.is_recurring,
        "is_selected_for_today": task.is_selected_for_today,
    }


@mcp.tool()
async def list_eligible_tasks(x_user_id: Optional[int] = None) -> list[dict]:
    """List open tasks that can be picked for today."""
    async with AsyncSessionLocal() as db:
        user = await resolve_user(db, x_user_id)
        tasks = await eligibility_service.eligible_tasks(db, user.id)
        return [_task_dict(t) for t in sorted(tasks, key=lambda t: t.id)]


@mcp.tool()
async def list_today_tasks(x_user_id: Optional[int] = None) -> list[dict]:
    """List today's Sacred Six, highest priority first."""
    async with AsyncSessionLocal() as db:
        user = await resolve_user(db, x_user_id)
        tasks = await selection_service.get_today_tasks(db, user.id)
        return [_task_dict(t) for t in tasks]


@mcp.tool()
async def select_today_tasks(task_ids: list[int], x_user_id: Optional[int] = None) -> list[dict]:
    """Replace today's selection with up to six task ids."""
    async with AsyncSessionLocal() as db:
        user = await resolve_user(db, x_user_id)
        tasks = await selection_service.set_today_selection(db, user.id, task_ids)
        result = [_task_dict(t) for t in tasks]
        await db.commit()
        return result


@mcp.tool()
async def recommend_today_tasks(x_user_id: Optional[int] = None) -> dict:
    """Ask the AI for up to six task ids to focus on today. Does not select them."""
    async with AsyncSessionLocal() as db:
        user = await resolve_user(db, x_user_id)
        eligible = await eligibility_service.eligible_tasks_for(db, user.id)
        result = await recommendation_service.recommend(
            eligible.tasks, project_names=eligible.project_names
        )
        return {"task_ids": result.task_ids, "rationale": result.rationale}
