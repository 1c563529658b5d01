"""AI-assisted task recommendation: prompt the suggestion model, validate its answer strictly."""

import asyncio
import json
import logging
import re
from datetime import date
from typing import Any, NamedTuple, Optional, Sequence

from app.config import get_settings
from app.exceptions import (
    NotFoundError,
    RecommendationBoundsError,
    RecommendationParseError,
    UpstreamError,
)
from app.models.task import Task, TaskPriority
from app.services import llm_service
from app.services.recurrence_service import is_scheduled_on, weekday_name
from app.services.selection_service import MAX_TODAY_TASKS

logger = logging.getLogger(__name__)
settings = get_settings()

RECOMMEND_SYSTEM = "You are a productivity AI assistant that helps users prioritize tasks."

RECOMMEND_PROMPT = """\
You are an AI productivity assistant for the Sacred Six methodology, which focuses on \
selecting the {max_tasks} most important tasks to complete each day.

Today is {today} and the current day of the week is {weekday}.

Here are the user's incomplete tasks:
{tasks_json}

Based on priority, due dates, recurring status, and estimated time, select up to \
{limit} tasks that the user should focus on today.
Consider the following criteria:
1. High priority tasks should generally be selected first
2. Tasks with closer due dates should be prioritized
3. Recurring tasks that are scheduled for today should be prioritized
4. Try to select a balanced mix of quick wins and important tasks
5. If possible, group related tasks from the same project

Return ONLY a JSON array of the selected task IDs (integers), with no additional text \
or explanation.
Format: [12, 7, 31]
"""

SUGGEST_SYSTEM = (
    "You are a helpful AI assistant that suggests tasks for projects. Always respond with "
    "valid JSON in the exact format requested. Do not include any explanatory text, markdown "
    "formatting, or code blocks around the JSON."
)

SUGGEST_PROMPT = """\
The user wants suggestions for tasks related to:
Title: {title}
{details}
Please suggest 5-10 specific, actionable tasks that would help the user accomplish their goal.
For each task, provide a clear task name, a brief description, an estimated time to \
complete (in hours) and a suggested priority (high, medium, or low).

Your entire response must be a JSON array with this structure:
[
  {{"name": "Task name", "description": "Task description", "estimatedTime": 2, "priority": "high"}}
]
"""

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class RecommendationResult(NamedTuple):
    task_ids: list[int]
    rationale: str


class TaskDraft(NamedTuple):
    name: str
    description: str
    estimated_time: float
    priority: str


def format_task(
    task: Task, today: date, project_names: Optional[dict[int, str]] = None
) -> dict[str, Any]:
    project_names = project_names or {}
    return {
        "id": task.id,
        "name": task.name,
        "description": task.description or "No description",
        "project": project_names.get(task.project_id, "No project"),
        "priority": task.priority.value,
        "dueDate": task.due_date.isoformat() if task.due_date else "No due date",
        "estimatedTime": task.estimated_time or 0,
        "isRecurring": bool(task.is_recurring),
        "recurringDays": list(task.recurring_days or []),
        "isScheduledForToday": bool(task.is_recurring) and is_scheduled_on(task, today),
    }


def build_recommend_prompt(
    tasks: Sequence[Task], today: date, project_names: Optional[dict[int, str]] = None
) -> str:
    formatted = [format_task(t, today, project_names) for t in tasks]
    return RECOMMEND_PROMPT.format(
        max_tasks=MAX_TODAY_TASKS,
        today=today.isoformat(),
        weekday=weekday_name(today),
        tasks_json=json.dumps(formatted, indent=2),
        limit=min(MAX_TODAY_TASKS, len(tasks)),
    )


def _load_json_array(text: str) -> Any:
    text = text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        match = _JSON_ARRAY.search(text)
        if not match:
            raise RecommendationParseError("AI response did not contain a JSON array")
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise RecommendationParseError(f"AI response is not valid JSON: {exc}") from exc


def _as_task_id(value: Any) -> int:
    if isinstance(value, bool):
        raise RecommendationParseError(f"Invalid task id in AI response: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise RecommendationParseError(f"Invalid task id in AI response: {value!r}")


def parse_recommendation(text: str, eligible_ids: Sequence[int]) -> list[int]:
    """
    Turn the model's answer into a list of eligible task ids.

    Raises RecommendationParseError for anything that is not an array of known
    ids, and RecommendationBoundsError when more than min(6, eligible) distinct
    ids come back. Duplicates collapse before the bound is checked; nothing is
    truncated.
    """
    data = _load_json_array(text)
    if not isinstance(data, list):
        raise RecommendationParseError("AI response is not a JSON array")

    known = set(eligible_ids)
    task_ids: list[int] = []
    for value in data:
        task_id = _as_task_id(value)
        if task_id not in known:
            raise RecommendationParseError(f"AI recommended unknown task id {task_id}")
        if task_id not in task_ids:
            task_ids.append(task_id)

    bound = min(MAX_TODAY_TASKS, len(eligible_ids))
    if len(task_ids) > bound:
        raise RecommendationBoundsError(
            f"AI recommended {len(task_ids)} tasks, at most {bound} allowed"
        )
    return task_ids


async def _ask(messages: list[dict[str, str]], temperature: float, max_tokens: int) -> str:
    try:
        content, input_tokens, output_tokens = await asyncio.wait_for(
            llm_service.chat_complete(
                messages=messages, temperature=temperature, max_tokens=max_tokens
            ),
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as exc:
        raise UpstreamError(
            f"AI suggestion source timed out after {settings.AI_TIMEOUT_SECONDS}s"
        ) from exc
    except Exception as exc:
        raise UpstreamError(f"AI suggestion source failed: {exc}") from exc
    logger.debug("AI call used %d input and %d output tokens", input_tokens, output_tokens)
    return content


async def recommend(
    eligible_tasks: Sequence[Task],
    today: Optional[date] = None,
    project_names: Optional[dict[int, str]] = None,
) -> RecommendationResult:
    """Ask the suggestion model for today's tasks. Never mutates the selection."""
    if not eligible_tasks:
        raise NotFoundError("No incomplete tasks found")
    today = today or date.today()

    prompt = build_recommend_prompt(eligible_tasks, today, project_names)
    content = await _ask(
        [
            {"role": "system", "content": RECOMMEND_SYSTEM},
            {"role": "user", "content": prompt},
        ],
        temperature=0.2,
        max_tokens=500,
    )

    try:
        task_ids = parse_recommendation(content, [t.id for t in eligible_tasks])
    except UpstreamError as exc:
        logger.error("Rejected AI recommendation: %s | raw=%r", exc, content[:500])
        raise
    logger.info("AI recommended %d of %d eligible tasks", len(task_ids), len(eligible_tasks))
    return RecommendationResult(task_ids=task_ids, rationale=content.strip())


def _normalise_draft(item: Any) -> TaskDraft:
    if not isinstance(item, dict):
        item = {}
    estimated = item.get("estimatedTime", item.get("estimated_time"))
    priority = item.get("priority")
    return TaskDraft(
        name=str(item.get("name") or "Unnamed Task"),
        description=str(item.get("description") or "No description provided"),
        estimated_time=float(estimated)
        if isinstance(estimated, (int, float)) and not isinstance(estimated, bool)
        else 1.0,
        priority=priority if priority in {p.value for p in TaskPriority} else "medium",
    )


async def suggest_task_drafts(
    title: str,
    description: Optional[str] = None,
    current_tasks: Sequence[str] = (),
    project_name: Optional[str] = None,
) -> list[TaskDraft]:
    """Brainstorm new task drafts for a project or goal."""
    details = []
    if description:
        details.append(f"Description: {description}")
    if project_name:
        details.append(f'This is for a project called "{project_name}".')
    if current_tasks:
        details.append("The user already has the following tasks:")
        details.extend(f"{i}. {name}" for i, name in enumerate(current_tasks, 1))

    content = await _ask(
        [
            {"role": "system", "content": SUGGEST_SYSTEM},
            {
                "role": "user",
                "content": SUGGEST_PROMPT.format(title=title, details="\n".join(details)),
            },
        ],
        temperature=0.7,
        max_tokens=1500,
    )

    data = _load_json_array(content)
    if not isinstance(data, list):
        raise RecommendationParseError("AI response is not a JSON array")
    return [_normalise_draft(item) for item in data]
