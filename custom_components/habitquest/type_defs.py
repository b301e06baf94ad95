"""Type definitions for HabitQuest data structures.

TypedDict for the STATIC structures of the snapshot document (task, completion,
user data) and for the result payloads returned by engines and the
ProgressionManager. The opaque `settings` sub-object stays `dict[str, Any]`
because unknown keys must round-trip unchanged.

The document keys mirror the persisted/exported JSON and are camelCase.

IMPORTANT: This file must NOT import from managers, helpers or the Home
Assistant layer to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime shape validation of
imported documents lives in helpers/backup_helpers.py.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

TaskId = str  # UUID string
CompletionId = str  # UUID string
DateKey = str  # Local calendar day "2026-01-18"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+08:00"

TaskData = TypedDict(
    "TaskData",
    {
        "id": TaskId,
        "name": str,
        "description": NotRequired[str],
        "difficulty": int,  # 1-5
        "category": str,  # mandatory | optional
        "repeatable": bool,
        "createdAt": ISODatetime,
        "updatedAt": ISODatetime,
    },
)

CompletionData = TypedDict(
    "CompletionData",
    {
        "id": CompletionId,
        "taskId": TaskId,
        "completedAt": ISODatetime,
        "points": int,  # Snapshotted award, never recomputed
    },
)

UserData = TypedDict(
    "UserData",
    {
        "totalPoints": int,
        "level": int,  # Written for readers; always recomputed from totalPoints
        "streak": int,
        "health": int,
        "maxHealth": int,
        "lastProcessedDate": DateKey,
        "settings": dict[str, Any],
    },
)


class AppData(TypedDict):
    """The full snapshot: catalog, completion log and progression."""

    tasks: list[TaskData]
    completions: list[CompletionData]
    userData: UserData


# =============================================================================
# Engine Results
# =============================================================================


class RewardDelta(TypedDict):
    """Points and health change for one task (award or penalty)."""

    points: int
    health_delta: int


class LevelInfo(TypedDict):
    """One row of the level table."""

    tier: int
    min_points: int
    max_points: float  # math.inf for the terminal tier
    label: str


class LevelProgress(TypedDict):
    """Progress inside the current level tier."""

    points_remaining: int
    percent_within_tier: float


class DayAssessment(TypedDict):
    """Pure evaluation of a single day's unmet mandatory tasks."""

    day: DateKey
    point_penalty: int
    health_penalty: int
    unmet_task_ids: list[TaskId]
    unmet_task_names: list[str]


class DailyHistoryEntry(TypedDict):
    """Points and completions recorded on one day."""

    date: DateKey
    points: int
    completions: int


class StatisticsSummary(TypedDict):
    """Aggregated statistics over the completion log."""

    total_completions: int
    completion_rate: float
    average_points_per_day: float
    best_streak: int
    current_streak: int
    mandatory_completions: int
    optional_completions: int
    mandatory_tasks: int
    optional_tasks: int
    points_history: list[DailyHistoryEntry]


# =============================================================================
# Manager Results
# =============================================================================


class CompletionResult(TypedDict):
    """Outcome of an accepted task completion (includes level-up payload)."""

    completion_id: CompletionId
    task_id: TaskId
    day: DateKey
    points: int
    health_recovered: int
    was_level_up: bool
    old_level: int
    new_level: int
    streak: int


class PenaltyResult(TypedDict):
    """Outcome of applying one day's mandatory-task penalty."""

    day: DateKey
    point_penalty: int
    health_lost: int
    unmet_task_names: list[str]


class ReconcileResult(TypedDict):
    """Outcome of a catch-up pass."""

    total_point_penalty: int
    total_health_lost: int
    days_processed: int
    penalized_days: list[DateKey]


class ProgressionSnapshot(TypedDict):
    """Externally observable progression state."""

    total_points: int
    level: int
    level_label: str
    points_to_next_level: int
    level_progress: float
    health: int
    max_health: int
    health_status: str
    health_critical: bool
    streak: int
    last_processed_date: DateKey
    selected_day: DateKey
    task_count: int
    completion_count: int
    storage_available: bool
    settings: dict[str, Any]
    statistics: StatisticsSummary
