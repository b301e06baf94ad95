"""Penalty Engine - Pure assessment of a day's unmet mandatory tasks.

The engine only computes what a day owes. Applying it to the progression
state (and guaranteeing each day is applied at most once) is the job of
ProgressionManager.apply_daily_penalty / reconcile.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from .completion_index import completions_on, mandatory_tasks
from .reward_engine import RewardEngine

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..type_defs import CompletionData, DayAssessment, TaskData


class PenaltyEngine:
    """Pure logic engine for daily penalty assessment."""

    @staticmethod
    def unmet_mandatory_tasks(
        tasks: Sequence[TaskData],
        completions: Sequence[CompletionData],
        day: str,
    ) -> list[TaskData]:
        """Return the mandatory tasks with no completion on `day`, in catalog order."""
        completed_ids = {
            entry[const.DATA_COMPLETION_TASK_ID]
            for entry in completions_on(completions, day)
        }
        return [
            task
            for task in mandatory_tasks(tasks)
            if task[const.DATA_TASK_ID] not in completed_ids
        ]

    @staticmethod
    def assess_day(
        tasks: Sequence[TaskData],
        completions: Sequence[CompletionData],
        day: str,
    ) -> DayAssessment:
        """Sum the miss penalties owed for `day`.

        Returns:
            DayAssessment with zero totals and empty lists when every
            mandatory task was completed (or none exist).
        """
        unmet = PenaltyEngine.unmet_mandatory_tasks(tasks, completions, day)
        point_penalty = 0
        health_penalty = 0
        for task in unmet:
            penalty = RewardEngine.penalty_for_miss(task[const.DATA_TASK_DIFFICULTY])
            point_penalty += penalty["points"]
            health_penalty += penalty["health_delta"]

        return {
            "day": day,
            "point_penalty": point_penalty,
            "health_penalty": health_penalty,
            "unmet_task_ids": [task[const.DATA_TASK_ID] for task in unmet],
            "unmet_task_names": [task[const.DATA_TASK_NAME] for task in unmet],
        }
