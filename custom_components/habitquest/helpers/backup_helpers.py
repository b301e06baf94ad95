"""Snapshot export / import helpers for HabitQuest.

Exports are pretty-printed JSON documents of the form
{tasks, completions, userData, exportDate}. Imports accept the same shape,
the older key style (task `type` / `isRepeatable`, `lastActiveDate`) and a
Home Assistant Store file ({"version": .., "data": {...}}), and are fully
validated before anything is handed back to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
import json
from typing import Any

import voluptuous as vol

from .. import const
from ..data_builders import default_settings
from ..errors import MalformedSnapshotError
from ..type_defs import AppData
from ..utils import dt_utils

# ==============================================================================
# Validators
# ==============================================================================


def _strict_int(value: Any) -> int:
    """Accept ints (not bools) and integral floats."""
    if isinstance(value, bool):
        raise vol.Invalid("expected an integer, got a boolean")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise vol.Invalid(f"expected an integer, got {type(value).__name__}")
    return value


def _timestamp(value: Any) -> str:
    """Accept ISO datetime strings that bucket into a day."""
    if not isinstance(value, str) or dt_utils.dt_parse(value) is None:
        raise vol.Invalid(f"invalid timestamp {value!r}")
    return value


def _day_key(value: Any) -> str:
    """Accept ISO dates (a datetime string is reduced to its local day)."""
    try:
        return dt_utils.day_key(value)
    except (TypeError, ValueError) as err:
        raise vol.Invalid(f"invalid date {value!r}") from err


TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_TASK_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.DATA_TASK_NAME): str,
        vol.Optional(const.DATA_TASK_DESCRIPTION): vol.Any(str, None),
        vol.Required(const.DATA_TASK_DIFFICULTY): vol.All(
            _strict_int, vol.In(const.DIFFICULTIES)
        ),
        vol.Required(const.DATA_TASK_CATEGORY): vol.In(const.TASK_CATEGORIES),
        vol.Optional(const.DATA_TASK_REPEATABLE, default=False): bool,
        vol.Optional(const.DATA_TASK_CREATED_AT): _timestamp,
        vol.Optional(const.DATA_TASK_UPDATED_AT): _timestamp,
    },
    extra=vol.ALLOW_EXTRA,
)

COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_COMPLETION_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.DATA_COMPLETION_TASK_ID): str,
        vol.Required(const.DATA_COMPLETION_COMPLETED_AT): _timestamp,
        vol.Required(const.DATA_COMPLETION_POINTS): _strict_int,
    },
    extra=vol.ALLOW_EXTRA,
)

USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_USER_TOTAL_POINTS): _strict_int,
        vol.Optional(const.DATA_USER_LEVEL): _strict_int,
        vol.Optional(const.DATA_USER_STREAK): _strict_int,
        vol.Required(const.DATA_USER_HEALTH): _strict_int,
        vol.Optional(
            const.DATA_USER_MAX_HEALTH, default=const.DEFAULT_MAX_HEALTH
        ): vol.All(_strict_int, vol.Range(min=1)),
        vol.Optional(const.DATA_USER_LAST_PROCESSED_DATE): _day_key,
        # Opaque: unknown keys must survive a round trip
        vol.Optional(const.DATA_USER_SETTINGS): vol.Schema(
            dict, extra=vol.ALLOW_EXTRA
        ),
    },
    extra=vol.ALLOW_EXTRA,
)

SNAPSHOT_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_TASKS): [TASK_SCHEMA],
        vol.Required(const.DATA_COMPLETIONS): [COMPLETION_SCHEMA],
        vol.Required(const.DATA_USER_DATA): USER_DATA_SCHEMA,
        vol.Optional(const.DATA_EXPORT_DATE): vol.Any(str, None),
    },
    extra=vol.REMOVE_EXTRA,
)


# ==============================================================================
# Legacy Normalization
# ==============================================================================


def _normalize_legacy_task(task: Any) -> Any:
    """Map `type` / `isRepeatable` onto `category` / `repeatable`."""
    if not isinstance(task, dict):
        return task
    task = dict(task)
    legacy_type = task.pop(const.LEGACY_TASK_TYPE, None)
    if const.DATA_TASK_CATEGORY not in task and legacy_type is not None:
        task[const.DATA_TASK_CATEGORY] = (
            const.TASK_CATEGORY_MANDATORY
            if legacy_type == const.LEGACY_TASK_TYPE_REQUIRED
            else legacy_type
        )
    legacy_repeatable = task.pop(const.LEGACY_TASK_IS_REPEATABLE, None)
    if const.DATA_TASK_REPEATABLE not in task and legacy_repeatable is not None:
        task[const.DATA_TASK_REPEATABLE] = legacy_repeatable
    return task


def _normalize_legacy_user_data(user_data: Any) -> Any:
    """Map `lastActiveDate` onto `lastProcessedDate`."""
    if not isinstance(user_data, dict):
        return user_data
    user_data = dict(user_data)
    legacy_date = user_data.pop(const.LEGACY_USER_LAST_ACTIVE_DATE, None)
    if const.DATA_USER_LAST_PROCESSED_DATE not in user_data and legacy_date:
        user_data[const.DATA_USER_LAST_PROCESSED_DATE] = legacy_date
    return user_data


def normalize_legacy_keys(document: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of `document` with older key names mapped to current ones.

    Also unwraps a Home Assistant Store file ({"version": 1, "data": {...}}).
    """
    if const.DATA_TASKS not in document and isinstance(document.get("data"), dict):
        const.LOGGER.debug("DEBUG: Unwrapping Store-format snapshot")
        document = document["data"]

    normalized = dict(document)
    tasks = normalized.get(const.DATA_TASKS)
    if isinstance(tasks, list):
        normalized[const.DATA_TASKS] = [_normalize_legacy_task(t) for t in tasks]
    if const.DATA_USER_DATA in normalized:
        normalized[const.DATA_USER_DATA] = _normalize_legacy_user_data(
            normalized[const.DATA_USER_DATA]
        )
    return normalized


# ==============================================================================
# Import / Export
# ==============================================================================


def parse_snapshot(
    raw: str | Mapping[str, Any],
    today: str | None = None,
) -> AppData:
    """Decode, normalize and validate a snapshot document.

    Args:
        raw: JSON text or an already-decoded mapping
        today: Day key used when the document carries no lastProcessedDate

    Returns:
        A validated AppData (a deep copy, never aliasing `raw`)

    Raises:
        MalformedSnapshotError: On any decode or validation failure
    """
    if isinstance(raw, str):
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as err:
            raise MalformedSnapshotError(f"invalid JSON ({err.msg})") from err
    elif isinstance(raw, Mapping):
        document = copy.deepcopy(dict(raw))
    else:
        raise MalformedSnapshotError(f"unsupported type {type(raw).__name__}")

    if not isinstance(document, dict):
        raise MalformedSnapshotError("top level must be an object")

    try:
        validated = SNAPSHOT_SCHEMA(normalize_legacy_keys(document))
    except vol.Invalid as err:
        raise MalformedSnapshotError(str(err)) from err

    task_ids = [task[const.DATA_TASK_ID] for task in validated[const.DATA_TASKS]]
    if len(task_ids) != len(set(task_ids)):
        raise MalformedSnapshotError("duplicate task ids")

    user_data = validated[const.DATA_USER_DATA]
    max_health = user_data[const.DATA_USER_MAX_HEALTH]
    user_data[const.DATA_USER_HEALTH] = max(
        0, min(user_data[const.DATA_USER_HEALTH], max_health)
    )
    user_data.setdefault(const.DATA_USER_STREAK, 0)
    user_data.setdefault(
        const.DATA_USER_LAST_PROCESSED_DATE, today or dt_utils.dt_today_key()
    )
    settings = default_settings()
    settings.update(user_data.get(const.DATA_USER_SETTINGS) or {})
    user_data[const.DATA_USER_SETTINGS] = settings

    validated.pop(const.DATA_EXPORT_DATE, None)
    const.LOGGER.debug(
        "DEBUG: Parsed snapshot with %s tasks and %s completions",
        len(validated[const.DATA_TASKS]),
        len(validated[const.DATA_COMPLETIONS]),
    )
    return validated


def build_export_document(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of the snapshot with `exportDate` set to now."""
    return {
        const.DATA_TASKS: copy.deepcopy(list(data.get(const.DATA_TASKS, []))),
        const.DATA_COMPLETIONS: copy.deepcopy(
            list(data.get(const.DATA_COMPLETIONS, []))
        ),
        const.DATA_USER_DATA: copy.deepcopy(dict(data.get(const.DATA_USER_DATA, {}))),
        const.DATA_EXPORT_DATE: dt_utils.dt_now_utc().isoformat(),
    }


def export_snapshot_json(data: Mapping[str, Any]) -> str:
    """Serialize the snapshot as pretty-printed JSON."""
    return json.dumps(build_export_document(data), indent=2, ensure_ascii=False)
