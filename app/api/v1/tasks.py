"""Task endpoints: CRUD, eligibility and the daily Sacred Six selection."""

from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.api.v1.deps import require_user
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate, TaskResponse, TodaySelectionRequest
from app.schemas.daily_completion import SparklinePoint, SparklineResponse
from app.services import completion_service, eligibility_service, selection_service, task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/eligible", response_model=list[TaskResponse])
async def list_eligible_tasks(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    tasks = await eligibility_service.eligible_tasks(db, user.id)
    return sorted(tasks, key=lambda t: t.id)


@router.get("/today", response_model=list[TaskResponse])
async def list_today_tasks(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    return await selection_service.get_today_tasks(db, user.id)


@router.put("/today/select", response_model=list[TaskResponse])
async def select_today_tasks(
    body: TodaySelectionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    return await selection_service.set_today_selection(db, user.id, body.task_ids)


@router.get("/stats/sparkline", response_model=SparklineResponse)
async def get_sparklines(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    lines = await completion_service.task_sparklines(db, user.id)
    return SparklineResponse(
        creation_sparkline=[SparklinePoint(date=d, count=c) for d, c in lines.creation_sparkline],
        completion_sparkline=[
            SparklinePoint(date=d, count=c) for d, c in lines.completion_sparkline
        ],
    )


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    body: TaskCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    return await task_service.create_task(db, user.id, body)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    return await task_service.get_task(db, user.id, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    return await task_service.update_task(db, user.id, task_id, body)


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    await task_service.delete_task(db, user.id, task_id)
    return {"message": "Task removed"}
