from app.schemas.task import TaskCreate, TaskUpdate, TaskResponse, TodaySelectionRequest
from app.schemas.daily_completion import (
    DailyCompletionResponse,
    ChartPoint,
    CompletionStatsResponse,
    SparklinePoint,
    SparklineResponse,
)
from app.schemas.recommendation import (
    RecommendationResponse,
    SuggestTasksRequest,
    TaskDraftResponse,
    SuggestTasksResponse,
)
