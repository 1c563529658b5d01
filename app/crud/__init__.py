from app.crud.users import crud_user
from app.crud.projects import crud_project
from app.crud.tasks import crud_task
from app.crud.daily_completions import crud_daily_completion

__all__ = [
    "crud_user",
    "crud_project",
    "crud_task",
    "crud_daily_completion",
]
