"""Shared day-bucketing of the completion log for the pure engines.

All grouping goes through dt_utils.day_key so a completion recorded late in
the evening west of UTC lands on the viewer's local day.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from .. import const
from ..utils import dt_utils

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import CompletionData, TaskData


def completion_day(completion: CompletionData) -> str | None:
    """Return the local day key of a completion, or None if its timestamp is unusable."""
    try:
        return dt_utils.day_key(completion[const.DATA_COMPLETION_COMPLETED_AT])
    except (KeyError, TypeError, ValueError):
        const.LOGGER.warning(
            "WARNING: Skipping completion %s with invalid timestamp %r",
            completion.get(const.DATA_COMPLETION_ID),
            completion.get(const.DATA_COMPLETION_COMPLETED_AT),
        )
        return None


def completions_by_day(
    completions: Iterable[CompletionData],
) -> dict[str, list[CompletionData]]:
    """Group completions by local day key."""
    grouped: dict[str, list[CompletionData]] = defaultdict(list)
    for completion in completions:
        key = completion_day(completion)
        if key is not None:
            grouped[key].append(completion)
    return dict(grouped)


def task_ids_by_day(completions: Iterable[CompletionData]) -> dict[str, set[str]]:
    """Map each local day key to the set of task ids completed that day."""
    return {
        key: {entry[const.DATA_COMPLETION_TASK_ID] for entry in entries}
        for key, entries in completions_by_day(completions).items()
    }


def completions_on(
    completions: Iterable[CompletionData], day: str
) -> list[CompletionData]:
    """Return the completions whose local day key equals `day`."""
    return [entry for entry in completions if completion_day(entry) == day]


def mandatory_tasks(tasks: Iterable[TaskData]) -> list[TaskData]:
    """Return the tasks whose category is mandatory."""
    return [
        task
        for task in tasks
        if task.get(const.DATA_TASK_CATEGORY) == const.TASK_CATEGORY_MANDATORY
    ]
