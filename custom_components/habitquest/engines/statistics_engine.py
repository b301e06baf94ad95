"""Statistics Engine - Aggregations over the completion log.

Design Principles:
    - Stateless: operates on the catalog and log passed in
    - Consistent: every per-day figure is bucketed through dt_utils.day_key
    - Uses snapshotted completion points, never recomputed task rewards
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import calculate_percentage
from .completion_index import completions_by_day
from .streak_engine import StreakEngine

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..type_defs import (
        CompletionData,
        DailyHistoryEntry,
        StatisticsSummary,
        TaskData,
    )


class StatisticsEngine:
    """Stateless statistics over tasks and completions."""

    @staticmethod
    def daily_points(completions: Sequence[CompletionData], day: str) -> int:
        """Return the snapshotted points earned on `day`."""
        return sum(
            entry[const.DATA_COMPLETION_POINTS]
            for entry in completions_by_day(completions).get(day, [])
        )

    @staticmethod
    def points_history(
        completions: Sequence[CompletionData],
        days: int = const.DEFAULT_HISTORY_DAYS,
        as_of: str | None = None,
    ) -> list[DailyHistoryEntry]:
        """Return per-day points and completion counts, oldest first.

        Args:
            completions: The completion log
            days: Window length ending at as_of (inclusive)
            as_of: Last day of the window (defaults to today)
        """
        end = as_of or dt_utils.dt_today_key()
        start = dt_utils.add_days(end, -(days - 1))
        grouped = completions_by_day(completions)

        history: list[DailyHistoryEntry] = []
        for day in dt_utils.iter_day_keys(start, end):
            entries = grouped.get(day, [])
            history.append(
                {
                    "date": day,
                    "points": sum(
                        entry[const.DATA_COMPLETION_POINTS] for entry in entries
                    ),
                    "completions": len(entries),
                }
            )
        return history

    @staticmethod
    def summarize(
        tasks: Sequence[TaskData],
        completions: Sequence[CompletionData],
        as_of: str | None = None,
        days: int = const.DEFAULT_HISTORY_DAYS,
    ) -> StatisticsSummary:
        """Build the full statistics summary.

        completion_rate is completions / catalog size * 100 (0 for an empty
        catalog), matching the long-standing dashboard figure; it can exceed
        100 for repeatable tasks.
        """
        as_of = as_of or dt_utils.dt_today_key()
        history = StatisticsEngine.points_history(completions, days, as_of)
        window_points = sum(entry["points"] for entry in history)

        category_by_task = {
            task[const.DATA_TASK_ID]: task.get(const.DATA_TASK_CATEGORY)
            for task in tasks
        }
        mandatory_completions = 0
        optional_completions = 0
        for entry in completions:
            category = category_by_task.get(entry[const.DATA_COMPLETION_TASK_ID])
            if category == const.TASK_CATEGORY_MANDATORY:
                mandatory_completions += 1
            elif category == const.TASK_CATEGORY_OPTIONAL:
                optional_completions += 1

        return {
            "total_completions": len(completions),
            "completion_rate": calculate_percentage(len(completions), len(tasks)),
            "average_points_per_day": round(window_points / days, 2) if days else 0.0,
            "best_streak": StreakEngine.best_streak(completions, tasks),
            "current_streak": StreakEngine.current_streak(completions, tasks, as_of),
            "mandatory_completions": mandatory_completions,
            "optional_completions": optional_completions,
            "mandatory_tasks": sum(
                1
                for category in category_by_task.values()
                if category == const.TASK_CATEGORY_MANDATORY
            ),
            "optional_tasks": sum(
                1
                for category in category_by_task.values()
                if category == const.TASK_CATEGORY_OPTIONAL
            ),
            "points_history": history,
        }
