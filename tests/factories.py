"""Record factories shared by the HabitQuest tests."""

from typing import Any

from custom_components.habitquest import const

TODAY = "2026-01-10"


def make_task(
    task_id: str,
    difficulty: int = 3,
    category: str = const.TASK_CATEGORY_MANDATORY,
    repeatable: bool = False,
    name: str | None = None,
) -> dict[str, Any]:
    """Build a task record for tests."""
    return {
        const.DATA_TASK_ID: task_id,
        const.DATA_TASK_NAME: name or task_id.title(),
        const.DATA_TASK_DIFFICULTY: difficulty,
        const.DATA_TASK_CATEGORY: category,
        const.DATA_TASK_REPEATABLE: repeatable,
        const.DATA_TASK_CREATED_AT: "2026-01-01T08:00:00+00:00",
        const.DATA_TASK_UPDATED_AT: "2026-01-01T08:00:00+00:00",
    }


def make_completion(
    task_id: str,
    day: str,
    points: int = 30,
    time: str = "12:00:00+00:00",
    completion_id: str | None = None,
) -> dict[str, Any]:
    """Build a completion record on `day` for tests."""
    return {
        const.DATA_COMPLETION_ID: completion_id or f"{task_id}-{day}-{time[:2]}",
        const.DATA_COMPLETION_TASK_ID: task_id,
        const.DATA_COMPLETION_COMPLETED_AT: f"{day}T{time}",
        const.DATA_COMPLETION_POINTS: points,
    }


def make_document(
    tasks: list[dict[str, Any]] | None = None,
    completions: list[dict[str, Any]] | None = None,
    **user_overrides: Any,
) -> dict[str, Any]:
    """Build a stored snapshot document for tests."""
    user_data = {
        const.DATA_USER_TOTAL_POINTS: 0,
        const.DATA_USER_LEVEL: 1,
        const.DATA_USER_STREAK: 0,
        const.DATA_USER_HEALTH: 100,
        const.DATA_USER_MAX_HEALTH: 100,
        const.DATA_USER_LAST_PROCESSED_DATE: TODAY,
        const.DATA_USER_SETTINGS: dict(const.DEFAULT_SETTINGS),
    }
    user_data.update(user_overrides)
    return {
        const.DATA_TASKS: tasks or [],
        const.DATA_COMPLETIONS: completions or [],
        const.DATA_USER_DATA: user_data,
    }
