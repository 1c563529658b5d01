from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.task import TaskResponse


class RecommendationResponse(BaseModel):
    task_ids: list[int]
    rationale: str
    recommended_tasks: list[TaskResponse] = []


class SuggestTasksRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    current_tasks: list[str] = []
    project_id: Optional[int] = None


class TaskDraftResponse(BaseModel):
    name: str
    description: str
    estimated_time: float
    priority: str


class SuggestTasksResponse(BaseModel):
    suggested_tasks: list[TaskDraftResponse]
