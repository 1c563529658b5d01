"""Pytest fixtures for unit and integration tests."""
import os
from typing import AsyncGenerator

# Must be set before app.database builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import get_db
from app.main import app
from app.models import (
    Base,
    CollaboratorRole,
    Project,
    ProjectCollaborator,
    Task,
    TaskPriority,
    TaskStatus,
    User,
)

# Use in-memory SQLite for tests (aiomysql requires MariaDB)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Fresh schema per test; batch jobs commit so state must not leak between tests."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    TestSession = async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with TestSession() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with DB override."""
    app.dependency_overrides[get_db] = lambda: db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def make_user(db):
    async def _make(name: str, is_active: bool = True) -> User:
        user = User(name=name, email=f"{name.lower()}@example.com", is_active=is_active)
        db.add(user)
        await db.flush()
        return user

    return _make


@pytest_asyncio.fixture
async def make_project(db):
    async def _make(
        owner: User,
        name: str = "Project",
        is_sacred: bool = False,
        is_archived: bool = False,
        tags: list[str] | None = None,
        default_tasks_recurring: bool = False,
        default_recurring_days: list[str] | None = None,
        collaborators: dict[User, CollaboratorRole] | None = None,
    ) -> Project:
        project = Project(
            owner_id=owner.id,
            name=name,
            tags=tags or [],
            is_sacred=is_sacred,
            is_archived=is_archived,
            default_tasks_recurring=default_tasks_recurring,
            default_recurring_days=default_recurring_days or [],
            sort_order=0,
        )
        db.add(project)
        await db.flush()
        for user, role in (collaborators or {}).items():
            db.add(ProjectCollaborator(project_id=project.id, user_id=user.id, role=role))
        await db.flush()
        return project

    return _make


@pytest_asyncio.fixture
async def make_task(db):
    async def _make(
        project: Project,
        creator: User,
        name: str = "Task",
        status: TaskStatus = TaskStatus.todo,
        priority: TaskPriority = TaskPriority.medium,
        is_selected_for_today: bool = False,
        is_recurring: bool = False,
        recurring_days: list[str] | None = None,
        last_completed_date=None,
        completed_at=None,
        due_date=None,
    ) -> Task:
        task = Task(
            project_id=project.id,
            user_id=creator.id,
            name=name,
            description=None,
            status=status,
            priority=priority,
            estimated_time=30,
            due_date=due_date,
            is_selected_for_today=is_selected_for_today,
            is_recurring=is_recurring,
            recurring_days=recurring_days or [],
            last_completed_date=last_completed_date,
            completed_at=completed_at,
        )
        db.add(task)
        await db.flush()
        return task

    return _make
