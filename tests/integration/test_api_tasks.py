"""Integration tests for the REST API via the ASGI test client."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio

from app.models import DailyCompletion, TaskPriority, TaskStatus

CHAT = "app.services.recommendation_service.llm_service.chat_complete"


def _as(user) -> dict:
    return {"X-User-Id": str(user.id)}


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user("Alice")


@pytest_asyncio.fixture
async def project(make_project, alice):
    return await make_project(alice, "Sacred", is_sacred=True)


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["service"] == "sacred-six"


@pytest.mark.asyncio
async def test_missing_user_header_is_401(client):
    resp = await client.get("/api/v1/tasks/today")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_unknown_user_is_403(client):
    resp = await client.get("/api/v1/tasks/today", headers={"X-User-Id": "999"})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_select_seven_tasks_is_400(client, alice, project, make_task):
    tasks = [await make_task(project, alice, f"T{i}") for i in range(7)]
    resp = await client.put(
        "/api/v1/tasks/today/select",
        json={"task_ids": [t.id for t in tasks]},
        headers=_as(alice),
    )
    assert resp.status_code == 400
    assert "up to 6" in resp.json()["detail"]

    today = await client.get("/api/v1/tasks/today", headers=_as(alice))
    assert today.json() == []


@pytest.mark.asyncio
async def test_select_and_list_today(client, alice, project, make_task):
    low = await make_task(project, alice, "low", priority=TaskPriority.low)
    high = await make_task(project, alice, "high", priority=TaskPriority.high)
    resp = await client.put(
        "/api/v1/tasks/today/select",
        json={"task_ids": [low.id, high.id]},
        headers=_as(alice),
    )
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == [high.id, low.id]
    assert all(t["is_selected_for_today"] for t in resp.json())


@pytest.mark.asyncio
async def test_eligible_excludes_done(client, alice, project, make_task):
    open_task = await make_task(project, alice, "open")
    await make_task(project, alice, "closed", status=TaskStatus.done)
    resp = await client.get("/api/v1/tasks/eligible", headers=_as(alice))
    assert [t["id"] for t in resp.json()] == [open_task.id]


@pytest.mark.asyncio
async def test_create_then_complete_task(client, alice, project):
    resp = await client.post(
        "/api/v1/tasks",
        json={"project_id": project.id, "name": "Write tests", "priority": "high"},
        headers=_as(alice),
    )
    assert resp.status_code == 201
    task_id = resp.json()["id"]
    assert resp.json()["completed_at"] is None

    resp = await client.put(
        f"/api/v1/tasks/{task_id}", json={"status": "done"}, headers=_as(alice)
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "done"
    assert resp.json()["completed_at"] is not None


@pytest.mark.asyncio
async def test_get_missing_task_is_404(client, alice):
    resp = await client.get("/api/v1/tasks/4242", headers=_as(alice))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_completion_update_and_stats(client, db, alice, project, make_task):
    for status in (TaskStatus.done, TaskStatus.done, TaskStatus.done, TaskStatus.todo):
        await make_task(project, alice, status=status, is_selected_for_today=True)

    resp = await client.post("/api/v1/daily-completion/update", headers=_as(alice))
    assert resp.status_code == 200
    body = resp.json()
    assert (body["tasks_selected"], body["tasks_completed"]) == (4, 3)
    assert body["is_fully_completed"] is False

    db.add(
        DailyCompletion(
            user_id=alice.id,
            date=date.today() - timedelta(days=1),
            tasks_selected=2,
            tasks_completed=2,
            is_fully_completed=True,
        )
    )
    await db.flush()

    resp = await client.get("/api/v1/daily-completion/stats", headers=_as(alice))
    stats = resp.json()
    assert stats["total_days"] == 2
    assert stats["fully_completed_days"] == 1
    assert stats["completion_rate"] == 50.0
    assert stats["current_streak"] == 1
    assert len(stats["last_7_days_chart"]) == 2


@pytest.mark.asyncio
async def test_sparkline_covers_thirty_days(client, alice, project, make_task):
    await make_task(project, alice, "fresh")
    resp = await client.get("/api/v1/tasks/stats/sparkline", headers=_as(alice))
    assert resp.status_code == 200
    assert len(resp.json()["creation_sparkline"]) == 30
    assert len(resp.json()["completion_sparkline"]) == 30


@pytest.mark.asyncio
async def test_recommend_bad_model_reply_is_502(client, alice, project, make_task):
    for i in range(3):
        await make_task(project, alice, f"T{i}")
    with patch(CHAT, new_callable=AsyncMock, return_value=("not json at all", 1, 1)):
        resp = await client.post("/api/v1/ai/recommend-tasks", headers=_as(alice))
    assert resp.status_code == 502


@pytest.mark.asyncio
async def test_recommend_does_not_change_selection(client, alice, project, make_task):
    tasks = [await make_task(project, alice, f"T{i}") for i in range(3)]
    reply = f"[{tasks[2].id}, {tasks[0].id}]"
    with patch(CHAT, new_callable=AsyncMock, return_value=(reply, 1, 1)):
        resp = await client.post("/api/v1/ai/recommend-tasks", headers=_as(alice))
    assert resp.status_code == 200
    assert resp.json()["task_ids"] == [tasks[2].id, tasks[0].id]
    assert [t["id"] for t in resp.json()["recommended_tasks"]] == [tasks[2].id, tasks[0].id]

    today = await client.get("/api/v1/tasks/today", headers=_as(alice))
    assert today.json() == []


@pytest.mark.asyncio
async def test_recommend_with_no_tasks_is_404(client, alice, project):
    resp = await client.post("/api/v1/ai/recommend-tasks", headers=_as(alice))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_with_null_is_recurring_is_a_no_op(client, alice, project, make_task):
    task = await make_task(project, alice, "Stretch", is_recurring=True)
    resp = await client.put(
        f"/api/v1/tasks/{task.id}", json={"is_recurring": None}, headers=_as(alice)
    )
    assert resp.status_code == 200
    assert resp.json()["is_recurring"] is True
