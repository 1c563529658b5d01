from app.models.base import Base, TimestampMixin
from app.models.user import User
from app.models.project import Project, ProjectCollaborator, CollaboratorRole
from app.models.task import Task, TaskStatus, TaskPriority, PRIORITY_RANK, WEEKDAYS
from app.models.daily_completion import DailyCompletion

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Project",
    "ProjectCollaborator",
    "CollaboratorRole",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "PRIORITY_RANK",
    "WEEKDAYS",
    "DailyCompletion",
]
