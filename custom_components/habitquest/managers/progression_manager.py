"""Progression Manager - Stateful owner of the habit progression document.

This manager handles every mutation of the snapshot document:
- Task completions (rewards, level-up detection, health recovery)
- Daily mandatory-task penalties and multi-day catch-up
- Task catalog CRUD (delete cascades to completions)
- Settings, full reset and validated snapshot import/export
- The "selected day" override used to simulate the passage of time

ARCHITECTURE:
- ProgressionManager = STATEFUL, owns the document and the storage handle
- RewardEngine / LevelEngine / StreakEngine / PenaltyEngine /
  StatisticsEngine = pure calculations (STATELESS)
- Storage is injected (ProgressionStorage protocol) and treated as
  fire-and-forget; a failed write is logged and surfaced through
  `storage_available`, never raised.

Public operations return a result payload or a `Rejected` value. They run
synchronously on the caller's thread; the host guarantees a single writer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines import (
    LevelEngine,
    PenaltyEngine,
    RewardEngine,
    StatisticsEngine,
    StreakEngine,
)
from ..engines.completion_index import completions_by_day, completions_on
from ..errors import (
    AlreadyCompletedError,
    MalformedSnapshotError,
    Rejected,
    StorageUnavailableError,
    TaskNotFoundError,
)
from ..helpers import backup_helpers
from ..utils import dt_utils

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from ..storage import ProgressionStorage
    from ..type_defs import (
        AppData,
        CompletionData,
        CompletionResult,
        LevelInfo,
        PenaltyResult,
        ProgressionSnapshot,
        ReconcileResult,
        StatisticsSummary,
        TaskData,
        UserData,
    )


class ProgressionManager:
    """Owns the snapshot document and applies every progression rule to it.

    Responsibilities:
    - Keep `level == level_for(totalPoints)` and `0 <= health <= maxHealth`
      after every mutation
    - Penalize each calendar day at most once (via the lastProcessedDate cursor)
    - Persist after each effective mutation

    NOT responsible for:
    - Scheduling (the host calls reconcile() on startup and periodically)
    - Surfacing Rejected results to users (the service layer does that)
    """

    def __init__(
        self,
        storage: ProgressionStorage,
        levels: Sequence[LevelInfo] = const.LEVELS,
        max_health: int | None = None,
        today_provider: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the manager and load the stored document.

        Args:
            storage: Persistence backend (load/save)
            levels: Level table used for all level resolution
            max_health: Health ceiling; None keeps the stored value
            today_provider: Returns the real calendar day key (defaults to
                dt_utils.dt_today_key); tests inject a fixed clock here

        Raises:
            ValueError: If the level table is not ascending and contiguous
        """
        if problems := LevelEngine.validate_table(levels):
            raise ValueError(f"Invalid level table: {'; '.join(problems)}")
        self._storage = storage
        self._levels = levels
        self._max_health_override = max_health
        self._today_provider = today_provider or dt_utils.dt_today_key
        self._selected_day: str | None = None
        self._level_up_listeners: list[Callable[[dict[str, Any]], None]] = []
        self.storage_available = True
        # Set when the stored document failed validation; the file is kept
        # untouched until an explicit import or reset replaces it
        self._preserve_stored = False
        self._data: AppData = self._load()

    # =========================================================================
    # Loading / persistence
    # =========================================================================

    def _load(self) -> AppData:
        """Load, normalize and validate the stored document.

        A missing, unreadable or malformed document yields fresh defaults.
        """
        today = self.today
        max_health = self._max_health_override or const.DEFAULT_MAX_HEALTH
        try:
            stored = self._storage.load()
        except StorageUnavailableError as err:
            const.LOGGER.error(
                "ERROR: Could not read stored progression, starting fresh in memory: %s",
                err,
            )
            self.storage_available = False
            stored = None

        if stored is None:
            const.LOGGER.info("INFO: No stored progression found. Initializing defaults")
            data: AppData = db.default_app_data(today, max_health)
            if self.storage_available:
                self._data = data
                self._persist()
            return data

        try:
            data = backup_helpers.parse_snapshot(stored, today=today)
        except MalformedSnapshotError as err:
            const.LOGGER.error(
                "ERROR: Stored progression is malformed, running on defaults in "
                "memory and leaving the stored document untouched: %s",
                err,
            )
            self.storage_available = False
            self._preserve_stored = True
            return db.default_app_data(today, max_health)

        if self._max_health_override is not None:
            self._apply_max_health(data[const.DATA_USER_DATA], self._max_health_override)
        self._refresh_derived(data)
        const.LOGGER.debug(
            "DEBUG: Loaded progression: %s tasks, %s completions, %s points",
            len(data[const.DATA_TASKS]),
            len(data[const.DATA_COMPLETIONS]),
            data[const.DATA_USER_DATA][const.DATA_USER_TOTAL_POINTS],
        )
        return data

    def _persist(self) -> None:
        """Hand the document to storage; record (never raise) failures."""
        if self._preserve_stored:
            const.LOGGER.debug(
                "DEBUG: Skipping save, stored document is malformed and preserved"
            )
            return
        try:
            self._storage.save(self._data)
        except StorageUnavailableError as err:
            if self.storage_available:
                const.LOGGER.error(
                    "ERROR: Failed to persist progression, continuing in memory: %s",
                    err,
                )
            self.storage_available = False
            return
        if not self.storage_available:
            const.LOGGER.info("INFO: Storage is available again")
        self.storage_available = True

    def _release_preserved(self) -> None:
        """Allow writes again after the user replaced a malformed document."""
        if self._preserve_stored:
            const.LOGGER.info(
                "INFO: Replacing the malformed stored document with new state"
            )
            self._preserve_stored = False

    @staticmethod
    def _apply_max_health(user: UserData, max_health: int) -> None:
        """Set maxHealth and re-clamp current health."""
        user[const.DATA_USER_MAX_HEALTH] = max_health
        user[const.DATA_USER_HEALTH] = RewardEngine.clamp_health(
            user[const.DATA_USER_HEALTH], max_health
        )

    def _refresh_derived(self, data: AppData | None = None) -> None:
        """Recompute level and streak from points and the completion log."""
        data = data if data is not None else self._data
        user = data[const.DATA_USER_DATA]
        user[const.DATA_USER_LEVEL] = LevelEngine.level_for(
            user[const.DATA_USER_TOTAL_POINTS], self._levels
        )[const.LEVEL_TIER]
        user[const.DATA_USER_STREAK] = StreakEngine.current_streak(
            data[const.DATA_COMPLETIONS], data[const.DATA_TASKS], self.today
        )

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def data(self) -> AppData:
        """Return the live snapshot document."""
        return self._data

    @property
    def tasks(self) -> list[TaskData]:
        """Return the task catalog in display order."""
        return self._data[const.DATA_TASKS]

    @property
    def completions(self) -> list[CompletionData]:
        """Return the completion log."""
        return self._data[const.DATA_COMPLETIONS]

    @property
    def user_data(self) -> UserData:
        """Return the progression state."""
        return self._data[const.DATA_USER_DATA]

    @property
    def levels(self) -> Sequence[LevelInfo]:
        """Return the level table in use."""
        return self._levels

    # =========================================================================
    # Selected day
    # =========================================================================

    @property
    def today(self) -> str:
        """Return the selected day, or the real calendar day when none is set."""
        return self._selected_day or self._today_provider()

    @property
    def selected_day(self) -> str | None:
        """Return the debug day override (None when following the calendar)."""
        return self._selected_day

    def set_selected_day(self, day: str | None) -> None:
        """Override "today" for completions and catch-up; None clears it.

        Does not touch lastProcessedDate; only complete_task() and
        reconcile() move the cursor.

        Raises:
            ValueError: If day is not a valid date
        """
        self._selected_day = dt_utils.day_key(day) if day is not None else None
        const.LOGGER.info("INFO: Selected day set to %s", self.today)
        self._refresh_derived()

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_level_up_listener(
        self, callback: Callable[[dict[str, Any]], None]
    ) -> Callable[[], None]:
        """Register a callback receiving the level-up payload.

        Returns:
            A function that removes the callback again
        """
        self._level_up_listeners.append(callback)

        def _remove() -> None:
            if callback in self._level_up_listeners:
                self._level_up_listeners.remove(callback)

        return _remove

    def _emit_level_up(self, payload: dict[str, Any]) -> None:
        for callback in list(self._level_up_listeners):
            callback(payload)

    # =========================================================================
    # Completion Recorder
    # =========================================================================

    def complete_task(self, task_id: str) -> CompletionResult | Rejected:
        """Record a completion of `task_id` on the selected day.

        Returns:
            CompletionResult on success. Rejected(not_found) for an unknown
            task, Rejected(already_completed) for a non-repeatable task that
            already has a completion on the selected day (nothing changes).
        """
        task = self.get_task(task_id)
        if task is None:
            const.LOGGER.warning("WARNING: Complete task - task not found: %s", task_id)
            return TaskNotFoundError(task_id).to_rejected()

        day = self.today
        if not task.get(const.DATA_TASK_REPEATABLE) and self.is_task_completed(
            task_id, day
        ):
            const.LOGGER.info(
                "INFO: Task '%s' already completed on %s", task[const.DATA_TASK_NAME], day
            )
            return AlreadyCompletedError(task[const.DATA_TASK_NAME], day).to_rejected()

        reward = RewardEngine.reward_for_completion(task[const.DATA_TASK_DIFFICULTY])
        user = self.user_data

        completion = db.build_completion(
            task_id, reward["points"], dt_utils.timestamp_for_day(day)
        )
        self.completions.append(completion)

        old_points = user[const.DATA_USER_TOTAL_POINTS]
        new_points = old_points + reward["points"]
        old_level = LevelEngine.level_for(old_points, self._levels)
        new_level = LevelEngine.level_for(new_points, self._levels)
        was_level_up = LevelEngine.is_level_up(old_points, new_points, self._levels)
        user[const.DATA_USER_TOTAL_POINTS] = new_points

        old_health = user[const.DATA_USER_HEALTH]
        user[const.DATA_USER_HEALTH] = RewardEngine.clamp_health(
            old_health + reward["health_delta"], user[const.DATA_USER_MAX_HEALTH]
        )

        # Cursor only moves forward; a backdated completion leaves it alone
        cursor = user.get(const.DATA_USER_LAST_PROCESSED_DATE)
        if not cursor or self._is_before(cursor, day):
            user[const.DATA_USER_LAST_PROCESSED_DATE] = day

        self._refresh_derived()
        self._persist()

        result: CompletionResult = {
            "completion_id": completion[const.DATA_COMPLETION_ID],
            "task_id": task_id,
            "day": day,
            "points": reward["points"],
            "health_recovered": user[const.DATA_USER_HEALTH] - old_health,
            "was_level_up": was_level_up,
            "old_level": old_level[const.LEVEL_TIER],
            "new_level": new_level[const.LEVEL_TIER],
            "streak": user[const.DATA_USER_STREAK],
        }
        const.LOGGER.debug(
            "DEBUG: Completed '%s' on %s: +%s points, +%s health, streak %s",
            task[const.DATA_TASK_NAME],
            day,
            reward["points"],
            result["health_recovered"],
            result["streak"],
        )

        if was_level_up:
            const.LOGGER.info(
                "INFO: Level up: %s -> %s (%s)",
                old_level[const.LEVEL_TIER],
                new_level[const.LEVEL_TIER],
                new_level[const.LEVEL_LABEL],
            )
            self._emit_level_up(
                {
                    "old_level": old_level[const.LEVEL_TIER],
                    "new_level": new_level[const.LEVEL_TIER],
                    "level_label": new_level[const.LEVEL_LABEL],
                    "total_points": new_points,
                }
            )
        return result

    @staticmethod
    def _is_before(first: str, second: str) -> bool:
        try:
            return dt_utils.compare_day_keys(first, second) == dt_utils.DAY_BEFORE
        except ValueError:
            return True

    # =========================================================================
    # Daily Penalty Applier
    # =========================================================================

    def apply_daily_penalty(self, day: str) -> PenaltyResult:
        """Apply the penalty owed for unmet mandatory tasks on `day`.

        Unaware of lastProcessedDate: calling it twice for one day penalizes
        twice. reconcile() is the once-per-day entry point.
        """
        return self._apply_penalty(day, self.completions, persist=True)

    def _apply_penalty(
        self,
        day: str,
        completions: Sequence[CompletionData],
        persist: bool,
    ) -> PenaltyResult:
        assessment = PenaltyEngine.assess_day(self.tasks, completions, day)
        result: PenaltyResult = {
            "day": day,
            "point_penalty": assessment["point_penalty"],
            "health_lost": assessment["health_penalty"],
            "unmet_task_names": assessment["unmet_task_names"],
        }
        if not assessment["unmet_task_ids"]:
            return result

        user = self.user_data
        old_health = user[const.DATA_USER_HEALTH]
        old_points = user[const.DATA_USER_TOTAL_POINTS]
        new_health = RewardEngine.clamp_health(
            old_health - assessment["health_penalty"],
            user[const.DATA_USER_MAX_HEALTH],
        )
        new_points = max(0, old_points - assessment["point_penalty"])

        const.LOGGER.debug(
            "DEBUG: Penalty for %s: unmet %s, health %s -> %s, points %s -> %s",
            day,
            assessment["unmet_task_names"],
            old_health,
            new_health,
            old_points,
            new_points,
        )
        if new_health == old_health and new_points == old_points:
            return result

        user[const.DATA_USER_HEALTH] = new_health
        user[const.DATA_USER_TOTAL_POINTS] = new_points
        user[const.DATA_USER_LEVEL] = LevelEngine.level_for(new_points, self._levels)[
            const.LEVEL_TIER
        ]
        if persist:
            self._persist()
        return result

    # =========================================================================
    # Catch-Up Reconciler
    # =========================================================================

    def reconcile(self) -> ReconcileResult:
        """Penalize every unprocessed past day, then move the cursor to today.

        Days strictly after lastProcessedDate through yesterday are walked in
        order. Safe to call repeatedly: once the cursor equals today the call
        is a no-op.
        """
        result: ReconcileResult = {
            "total_point_penalty": 0,
            "total_health_lost": 0,
            "days_processed": 0,
            "penalized_days": [],
        }
        today = self.today
        user = self.user_data
        cursor = user.get(const.DATA_USER_LAST_PROCESSED_DATE)

        try:
            position = dt_utils.compare_day_keys(cursor, today)
        except (TypeError, ValueError):
            const.LOGGER.warning(
                "WARNING: Invalid lastProcessedDate %r, resetting to %s without penalties",
                cursor,
                today,
            )
            user[const.DATA_USER_LAST_PROCESSED_DATE] = today
            self._persist()
            return result

        if position != dt_utils.DAY_BEFORE:
            const.LOGGER.debug("DEBUG: Reconcile - up to date (%s)", cursor)
            return result

        start = dt_utils.add_days(cursor, 1)
        end = dt_utils.add_days(today, -1)
        gap = dt_utils.days_between(start, end) + 1
        if gap > const.MAX_CATCH_UP_DAYS:
            capped_start = dt_utils.add_days(end, -(const.MAX_CATCH_UP_DAYS - 1))
            const.LOGGER.warning(
                "WARNING: Catch-up spans %s days; skipping %s through %s",
                gap,
                start,
                dt_utils.add_days(capped_start, -1),
            )
            start = capped_start

        grouped = completions_by_day(self.completions)
        for day in dt_utils.iter_day_keys(start, end):
            penalty = self._apply_penalty(day, grouped.get(day, []), persist=False)
            result["days_processed"] += 1
            if penalty["point_penalty"] or penalty["health_lost"]:
                result["total_point_penalty"] += penalty["point_penalty"]
                result["total_health_lost"] += penalty["health_lost"]
                result["penalized_days"].append(day)

        user[const.DATA_USER_LAST_PROCESSED_DATE] = today
        self._refresh_derived()
        self._persist()

        if result["penalized_days"]:
            const.LOGGER.info(
                "INFO: Catch-up penalized %s of %s days: -%s points, -%s health",
                len(result["penalized_days"]),
                result["days_processed"],
                result["total_point_penalty"],
                result["total_health_lost"],
            )
        return result

    # =========================================================================
    # Task catalog
    # =========================================================================

    def get_task(self, task_id: str) -> TaskData | None:
        """Return the task with `task_id`, or None."""
        for task in self.tasks:
            if task[const.DATA_TASK_ID] == task_id:
                return task
        return None

    def find_task_by_name(self, name: str) -> TaskData | None:
        """Return the first task whose name matches (case-insensitive)."""
        wanted = name.strip().casefold()
        for task in self.tasks:
            if task[const.DATA_TASK_NAME].casefold() == wanted:
                return task
        return None

    def add_task(
        self,
        name: str,
        difficulty: int,
        category: str = const.TASK_CATEGORY_OPTIONAL,
        repeatable: bool = False,
        description: str | None = None,
    ) -> TaskData:
        """Append a new task to the catalog.

        Raises:
            EntityValidationError: If a field is invalid
        """
        task = db.build_task(
            {
                const.DATA_TASK_NAME: name,
                const.DATA_TASK_DIFFICULTY: difficulty,
                const.DATA_TASK_CATEGORY: category,
                const.DATA_TASK_REPEATABLE: repeatable,
                const.DATA_TASK_DESCRIPTION: description,
            }
        )
        self.tasks.append(task)
        self._refresh_derived()
        self._persist()
        const.LOGGER.info("INFO: Added task '%s' (%s)", name, task[const.DATA_TASK_ID])
        return task

    def update_task(self, task_id: str, **changes: Any) -> TaskData | Rejected:
        """Update task fields; stored completion points are left unchanged.

        Raises:
            EntityValidationError: If a changed field is invalid
        """
        task = self.get_task(task_id)
        if task is None:
            return TaskNotFoundError(task_id).to_rejected()

        updated = db.build_task(changes, existing=task)
        self.tasks[self.tasks.index(task)] = updated
        self._refresh_derived()
        self._persist()
        const.LOGGER.debug(
            "DEBUG: Updated task %s fields %s", task_id, sorted(changes.keys())
        )
        return updated

    def delete_task(self, task_id: str) -> TaskData | Rejected:
        """Remove a task and every completion of it (points are kept)."""
        task = self.get_task(task_id)
        if task is None:
            return TaskNotFoundError(task_id).to_rejected()

        self.tasks.remove(task)
        kept = [
            entry
            for entry in self.completions
            if entry[const.DATA_COMPLETION_TASK_ID] != task_id
        ]
        removed = len(self.completions) - len(kept)
        self._data[const.DATA_COMPLETIONS] = kept
        self._refresh_derived()
        self._persist()
        const.LOGGER.info(
            "INFO: Deleted task '%s' and %s completions",
            task[const.DATA_TASK_NAME],
            removed,
        )
        return task

    # =========================================================================
    # Settings / reset
    # =========================================================================

    def update_settings(self, **changes: Any) -> dict[str, Any]:
        """Merge `changes` into the opaque settings object."""
        settings = self.user_data.setdefault(const.DATA_USER_SETTINGS, {})
        settings.update(changes)
        self._persist()
        return dict(settings)

    def reset_all_data(self) -> None:
        """Clear catalog, log and progression together."""
        const.LOGGER.warning("WARNING: Resetting all HabitQuest data")
        max_health = self.user_data.get(
            const.DATA_USER_MAX_HEALTH, const.DEFAULT_MAX_HEALTH
        )
        self._data = db.default_app_data(self.today, max_health)
        self._release_preserved()
        self._persist()

    # =========================================================================
    # Import / export
    # =========================================================================

    def import_snapshot(self, raw: str | Mapping[str, Any]) -> AppData | Rejected:
        """Replace all state with a validated snapshot.

        The document is parsed and validated completely first; on failure the
        current state is left exactly as it was.
        """
        try:
            data = backup_helpers.parse_snapshot(raw, today=self.today)
        except MalformedSnapshotError as err:
            const.LOGGER.warning("WARNING: Import rejected: %s", err)
            return err.to_rejected()

        if self._max_health_override is not None:
            self._apply_max_health(data[const.DATA_USER_DATA], self._max_health_override)
        self._refresh_derived(data)
        self._data = data
        self._release_preserved()
        self._persist()
        const.LOGGER.info(
            "INFO: Imported snapshot with %s tasks and %s completions",
            len(data[const.DATA_TASKS]),
            len(data[const.DATA_COMPLETIONS]),
        )
        return data

    def export_document(self) -> dict[str, Any]:
        """Return the export document (deep copy with exportDate)."""
        return backup_helpers.build_export_document(self._data)

    def export_snapshot(self) -> str:
        """Return the export document as JSON text."""
        return backup_helpers.export_snapshot_json(self._data)

    # =========================================================================
    # Queries
    # =========================================================================

    def completions_on(self, day: str) -> list[CompletionData]:
        """Return the completions recorded on local day `day`."""
        return completions_on(self.completions, day)

    def is_task_completed(self, task_id: str, day: str | None = None) -> bool:
        """Return True if `task_id` has a completion on `day` (default: today)."""
        return any(
            entry[const.DATA_COMPLETION_TASK_ID] == task_id
            for entry in self.completions_on(day or self.today)
        )

    def daily_points(self, day: str | None = None) -> int:
        """Return the points earned on `day` (default: today)."""
        return StatisticsEngine.daily_points(self.completions, day or self.today)

    def statistics(self, days: int = const.DEFAULT_HISTORY_DAYS) -> StatisticsSummary:
        """Return aggregated statistics as of the selected day."""
        return StatisticsEngine.summarize(
            self.tasks, self.completions, as_of=self.today, days=days
        )

    def snapshot(self) -> ProgressionSnapshot:
        """Return the externally observable progression state."""
        user = self.user_data
        points = user[const.DATA_USER_TOTAL_POINTS]
        health = user[const.DATA_USER_HEALTH]
        max_health = user[const.DATA_USER_MAX_HEALTH]
        level = LevelEngine.level_for(points, self._levels)
        progress = LevelEngine.progress_to_next_level(points, self._levels)
        return {
            "total_points": points,
            "level": level[const.LEVEL_TIER],
            "level_label": level[const.LEVEL_LABEL],
            "points_to_next_level": progress["points_remaining"],
            "level_progress": progress["percent_within_tier"],
            "health": health,
            "max_health": max_health,
            "health_status": RewardEngine.health_status(health, max_health),
            "health_critical": RewardEngine.is_health_critical(health, max_health),
            "streak": user[const.DATA_USER_STREAK],
            "last_processed_date": user[const.DATA_USER_LAST_PROCESSED_DATE],
            "selected_day": self.today,
            "task_count": len(self.tasks),
            "completion_count": len(self.completions),
            "storage_available": self.storage_available,
            "settings": dict(user.get(const.DATA_USER_SETTINGS, {})),
            "statistics": self.statistics(),
        }
