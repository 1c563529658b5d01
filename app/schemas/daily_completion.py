from datetime import date
from pydantic import BaseModel


class DailyCompletionResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    user_id: int
    date: date
    tasks_selected: int
    tasks_completed: int
    is_fully_completed: bool


class ChartPoint(BaseModel):
    date: date
    tasks_completed: int
    tasks_selected: int
    completion_percentage: int


class CompletionStatsResponse(BaseModel):
    total_days: int
    fully_completed_days: int
    completion_rate: float
    average_tasks_completed: float
    current_streak: int
    longest_streak: int
    last_7_days_chart: list[ChartPoint]


class SparklinePoint(BaseModel):
    date: date
    count: int


class SparklineResponse(BaseModel):
    creation_sparkline: list[SparklinePoint]
    completion_sparkline: list[SparklinePoint]
