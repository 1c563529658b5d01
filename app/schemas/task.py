from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.task import TaskPriority, TaskStatus, WEEKDAYS


def _normalise_days(days: Optional[list[str]]) -> Optional[list[str]]:
    if days is None:
        return None
    normalised = []
    for day in days:
        d = day.strip().lower()
        if d not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        if d not in normalised:
            normalised.append(d)
    return normalised


class TaskCreate(BaseModel):
    project_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.medium
    status: TaskStatus = TaskStatus.todo
    estimated_time: int = Field(0, ge=0)
    due_date: Optional[date] = None
    is_recurring: Optional[bool] = None  # None = inherit project default
    recurring_days: Optional[list[str]] = None

    @field_validator("recurring_days")
    @classmethod
    def check_days(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _normalise_days(v)


class TaskUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    estimated_time: Optional[int] = Field(None, ge=0)
    due_date: Optional[date] = None
    is_recurring: Optional[bool] = None
    recurring_days: Optional[list[str]] = None

    @field_validator("recurring_days")
    @classmethod
    def check_days(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _normalise_days(v)


class TaskResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    project_id: int
    user_id: int
    name: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    estimated_time: int
    due_date: Optional[date]
    is_selected_for_today: bool
    is_recurring: bool
    recurring_days: list[str]
    last_completed_date: Optional[datetime]
    completed_at: Optional[datetime]


class TodaySelectionRequest(BaseModel):
    task_ids: list[int]
