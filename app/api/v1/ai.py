"""AI-assisted recommendation endpoints."""

from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.api.v1.deps import require_user
from app.crud import crud_project
from app.models.user import User
from app.schemas.recommendation import (
    RecommendationResponse,
    SuggestTasksRequest,
    SuggestTasksResponse,
    TaskDraftResponse,
)
from app.schemas.task import TaskResponse
from app.services import eligibility_service, recommendation_service
from app.services.access_service import can_view_project

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/recommend-tasks", response_model=RecommendationResponse)
async def recommend_tasks(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    """Recommend up to six of today's eligible tasks. Does not change the selection."""
    eligible = await eligibility_service.eligible_tasks_for(db, user.id)
    result = await recommendation_service.recommend(
        eligible.tasks, project_names=eligible.project_names
    )
    by_id = {t.id: t for t in eligible.tasks}
    return RecommendationResponse(
        task_ids=result.task_ids,
        rationale=result.rationale,
        recommended_tasks=[TaskResponse.model_validate(by_id[i]) for i in result.task_ids],
    )


@router.post("/suggest-tasks", response_model=SuggestTasksResponse)
async def suggest_tasks(
    body: SuggestTasksRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_user)],
):
    project_name = None
    if body.project_id is not None:
        project = await crud_project.get(db, body.project_id)
        if project and await can_view_project(db, user.id, project):
            project_name = project.name
    drafts = await recommendation_service.suggest_task_drafts(
        body.title, body.description, body.current_tasks, project_name
    )
    return SuggestTasksResponse(
        suggested_tasks=[TaskDraftResponse(**d._asdict()) for d in drafts]
    )
