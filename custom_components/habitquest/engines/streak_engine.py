"""Streak Engine - Pure consecutive-day calculations over the completion log.

A day "qualifies" when at least one mandatory task exists AND every mandatory
task has a completion on that local day. A day with zero mandatory tasks
does NOT qualify, so it breaks a streak in progress.

Streaks are recomputed from scratch on every call rather than maintained
incrementally, so deletes and backdated data never leave a stale count.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils import dt_utils
from .completion_index import mandatory_tasks, task_ids_by_day

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ..type_defs import CompletionData, TaskData


class StreakEngine:
    """Pure logic engine for streak calculation.

    All methods are static - no instance state.
    """

    @staticmethod
    def is_day_satisfied(
        mandatory_ids: set[str], completed_ids: set[str] | None
    ) -> bool:
        """Return True when the day has mandatory tasks and all were completed."""
        if not mandatory_ids:
            return False
        return mandatory_ids <= (completed_ids or set())

    @staticmethod
    def current_streak(
        completions: Iterable[CompletionData],
        tasks: Sequence[TaskData],
        as_of: str | None = None,
        horizon: int = const.STREAK_SCAN_HORIZON_DAYS,
    ) -> int:
        """Count consecutive qualifying days ending at `as_of`.

        Args:
            completions: The completion log
            tasks: The task catalog (current mandatory set applies to every day)
            as_of: Day key to start from (defaults to today's local day)
            horizon: Maximum number of days to scan

        Returns:
            Length of the unbroken run of qualifying days ending at as_of
        """
        day = as_of or dt_utils.dt_today_key()
        mandatory_ids = {task[const.DATA_TASK_ID] for task in mandatory_tasks(tasks)}
        if not mandatory_ids:
            return 0

        completed_by_day = task_ids_by_day(completions)
        streak = 0
        while streak < horizon:
            if not StreakEngine.is_day_satisfied(
                mandatory_ids, completed_by_day.get(day)
            ):
                break
            streak += 1
            day = dt_utils.add_days(day, -1)
        return streak

    @staticmethod
    def best_streak(
        completions: Iterable[CompletionData],
        tasks: Sequence[TaskData],
    ) -> int:
        """Return the longest run of qualifying days anywhere in the log.

        Only days that have completions can qualify, so the scan walks the
        distinct completion days in order instead of the whole calendar.
        """
        mandatory_ids = {task[const.DATA_TASK_ID] for task in mandatory_tasks(tasks)}
        if not mandatory_ids:
            return 0

        completed_by_day = task_ids_by_day(completions)
        qualifying_days = sorted(
            dt_utils.parse_day_key(day)
            for day, completed_ids in completed_by_day.items()
            if StreakEngine.is_day_satisfied(mandatory_ids, completed_ids)
        )

        best = 0
        run = 0
        previous = None
        for day in qualifying_days:
            if previous is not None and (day - previous).days == 1:
                run += 1
            else:
                run = 1
            best = max(best, run)
            previous = day
        return best
