"""Record builders for the snapshot document.

This module is the SINGLE SOURCE OF TRUTH for:
- Task field defaults and validation
- Completion record construction
- Default progression state for fresh installs and resets

### Build Functions
Each record type has a `build_<record>()` function that:
- Takes input with DATA_* keys
- Generates an id (UUID) for new records
- Sets timestamps (createdAt, updatedAt)
- Applies field defaults
- Returns a complete record ready for storage

Consumers:
- managers/progression_manager.py (task catalog and completions)
- helpers/backup_helpers.py (normalizing imported documents)
"""

from __future__ import annotations

import copy
from typing import Any
import uuid

from . import const
from .type_defs import CompletionData, TaskData, UserData
from .utils.dt_utils import dt_now_utc

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(ValueError):
    """Validation error naming the field that failed.

    Attributes:
        field: The DATA_* key of the offending field
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize EntityValidationError.

        Args:
            field: The DATA_* key that failed validation
            message: Human-readable description
        """
        super().__init__(message)
        self.field = field


# ==============================================================================
# TASKS
# ==============================================================================


def validate_task_data(data: dict[str, Any]) -> None:
    """Validate the task fields present in `data`.

    Only keys that are present are checked, so the same function serves
    create and partial update.

    Raises:
        EntityValidationError: On an empty name, unknown difficulty or category
    """
    if const.DATA_TASK_NAME in data:
        name = data[const.DATA_TASK_NAME]
        if not isinstance(name, str) or not name.strip():
            raise EntityValidationError(const.DATA_TASK_NAME, "Task name is required")

    if const.DATA_TASK_DIFFICULTY in data:
        difficulty = data[const.DATA_TASK_DIFFICULTY]
        if isinstance(difficulty, bool) or difficulty not in const.DIFFICULTIES:
            raise EntityValidationError(
                const.DATA_TASK_DIFFICULTY,
                f"Difficulty must be one of {const.DIFFICULTIES}, got {difficulty!r}",
            )

    if const.DATA_TASK_CATEGORY in data:
        category = data[const.DATA_TASK_CATEGORY]
        if category not in const.TASK_CATEGORIES:
            raise EntityValidationError(
                const.DATA_TASK_CATEGORY,
                f"Category must be one of {const.TASK_CATEGORIES}, got {category!r}",
            )


def build_task(
    user_input: dict[str, Any],
    existing: TaskData | None = None,
) -> TaskData:
    """Build task data for create or update operations.

    One function handles both create (existing=None) and update
    (existing=TaskData). Fields absent from user_input keep their existing
    value in update mode and fall back to defaults in create mode.

    Args:
        user_input: Data with DATA_TASK_* keys (may have missing fields)
        existing: None for create, the stored TaskData for update

    Returns:
        Complete TaskData ready for storage

    Raises:
        EntityValidationError: If a provided field is invalid

    Examples:
        task = build_task({DATA_TASK_NAME: "Read", DATA_TASK_DIFFICULTY: 2})
        task = build_task({DATA_TASK_DIFFICULTY: 4}, existing=task)
    """
    if existing is None and const.DATA_TASK_NAME not in user_input:
        raise EntityValidationError(const.DATA_TASK_NAME, "Task name is required")
    validate_task_data(user_input)

    def get_field(data_key: str, default: Any) -> Any:
        """Get field value: user_input > existing > default."""
        if data_key in user_input:
            return user_input[data_key]
        if existing is not None:
            return existing.get(data_key, default)
        return default

    now_iso = dt_now_utc().isoformat()
    task: TaskData = {
        const.DATA_TASK_ID: (
            existing[const.DATA_TASK_ID] if existing is not None else str(uuid.uuid4())
        ),
        const.DATA_TASK_NAME: str(get_field(const.DATA_TASK_NAME, "")).strip(),
        const.DATA_TASK_DIFFICULTY: int(get_field(const.DATA_TASK_DIFFICULTY, 1)),
        const.DATA_TASK_CATEGORY: get_field(
            const.DATA_TASK_CATEGORY, const.TASK_CATEGORY_OPTIONAL
        ),
        const.DATA_TASK_REPEATABLE: bool(get_field(const.DATA_TASK_REPEATABLE, False)),
        const.DATA_TASK_CREATED_AT: (
            existing.get(const.DATA_TASK_CREATED_AT, now_iso)
            if existing is not None
            else now_iso
        ),
        const.DATA_TASK_UPDATED_AT: now_iso,
    }
    description = get_field(const.DATA_TASK_DESCRIPTION, None)
    if description:
        task[const.DATA_TASK_DESCRIPTION] = str(description)
    return task


# ==============================================================================
# COMPLETIONS
# ==============================================================================


def build_completion(task_id: str, points: int, completed_at: str) -> CompletionData:
    """Build an append-only completion record with its snapshotted points."""
    return {
        const.DATA_COMPLETION_ID: str(uuid.uuid4()),
        const.DATA_COMPLETION_TASK_ID: task_id,
        const.DATA_COMPLETION_COMPLETED_AT: completed_at,
        const.DATA_COMPLETION_POINTS: int(points),
    }


# ==============================================================================
# PROGRESSION STATE
# ==============================================================================


def default_settings() -> dict[str, Any]:
    """Return a fresh copy of the default user settings."""
    return copy.deepcopy(const.DEFAULT_SETTINGS)


def default_user_data(
    today: str, max_health: int = const.DEFAULT_MAX_HEALTH
) -> UserData:
    """Return the progression state for a fresh install or a reset.

    Args:
        today: Day key written as the initial lastProcessedDate
        max_health: Health ceiling (health starts full)
    """
    return {
        const.DATA_USER_TOTAL_POINTS: 0,
        const.DATA_USER_LEVEL: 1,
        const.DATA_USER_STREAK: 0,
        const.DATA_USER_HEALTH: max_health,
        const.DATA_USER_MAX_HEALTH: max_health,
        const.DATA_USER_LAST_PROCESSED_DATE: today,
        const.DATA_USER_SETTINGS: default_settings(),
    }


def default_app_data(
    today: str, max_health: int = const.DEFAULT_MAX_HEALTH
) -> dict[str, Any]:
    """Return the canonical empty snapshot document."""
    return {
        const.DATA_TASKS: [],
        const.DATA_COMPLETIONS: [],
        const.DATA_USER_DATA: default_user_data(today, max_health),
    }
