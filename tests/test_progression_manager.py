"""Tests for ProgressionManager - the stateful progression document owner.

These run against InMemoryStorage with a fixed clock, so no Home Assistant
instance is needed.

Test Categories:
- Completion recording (rewards, duplicates, level-up)
- Daily penalty application
- Multi-day catch-up reconciliation
- Task catalog CRUD
- Settings, reset, import/export
- Health and level bounds across mixed operation sequences
- Storage failures
"""

from __future__ import annotations

import copy
import json
import math
from typing import Any

import pytest

from custom_components.habitquest import const
from custom_components.habitquest.data_builders import EntityValidationError
from custom_components.habitquest.engines import LevelEngine
from custom_components.habitquest.errors import Rejected
from custom_components.habitquest.managers import ProgressionManager
from custom_components.habitquest.storage import InMemoryStorage
from custom_components.habitquest.utils import dt_utils
from tests.factories import TODAY, make_completion, make_document, make_task

TWO_TIERS = [
    {"tier": 1, "min_points": 0, "max_points": 199, "label": "Novice"},
    {"tier": 2, "min_points": 200, "max_points": 499, "label": "Adept"},
    {"tier": 3, "min_points": 500, "max_points": math.inf, "label": "Master"},
]


def days_ago(count: int) -> str:
    """Return the day key `count` days before TODAY."""
    return dt_utils.add_days(TODAY, -count)


def make_manager(
    document: dict[str, Any] | None = None, **kwargs: Any
) -> tuple[ProgressionManager, InMemoryStorage]:
    """Build a manager over seeded in-memory storage with the fixed clock."""
    storage = InMemoryStorage(document)
    kwargs.setdefault("today_provider", lambda: TODAY)
    return ProgressionManager(storage, **kwargs), storage


# =============================================================================
# Test: loading
# =============================================================================


class TestLoading:
    """Tests for the initial load."""

    def test_empty_storage_initializes_and_persists_defaults(self) -> None:
        """Test a fresh install writes the default document."""
        manager, storage = make_manager()

        assert manager.tasks == []
        assert manager.user_data[const.DATA_USER_HEALTH] == const.DEFAULT_MAX_HEALTH
        assert manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] == TODAY
        assert storage.save_count == 1

    def test_malformed_document_falls_back_to_defaults(self) -> None:
        """Test a corrupt stored document does not prevent startup."""
        manager, _ = make_manager({"tasks": "oops"})
        assert manager.tasks == []
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 0

    def test_malformed_document_is_never_overwritten(self) -> None:
        """Test one bad record keeps the stored history intact through mutations."""
        completions = [
            make_completion("read", days_ago(day), completion_id=f"c{day}")
            for day in range(1, 30)
        ]
        completions[5][const.DATA_COMPLETION_POINTS] = 30.5
        document = make_document([make_task("read")], completions, totalPoints=5000)
        manager, storage = make_manager(copy.deepcopy(document))

        assert manager.storage_available is False
        manager.add_task("new", 1)
        manager.complete_task("read")
        manager.update_settings(theme="dark")
        manager.reconcile()

        assert storage.save_count == 0
        assert storage.data == document
        assert manager.snapshot()["storage_available"] is False

    def test_import_replaces_preserved_malformed_document(self) -> None:
        """Test an explicit import writes over a malformed stored document."""
        manager, storage = make_manager({"tasks": "oops"})
        manager.import_snapshot(make_document([make_task("read")], totalPoints=40))

        assert storage.save_count == 1
        assert manager.storage_available is True
        assert storage.data[const.DATA_USER_DATA][const.DATA_USER_TOTAL_POINTS] == 40

    def test_reset_replaces_preserved_malformed_document(self) -> None:
        """Test an explicit reset writes fresh defaults over a malformed document."""
        manager, storage = make_manager({"tasks": "oops"})
        manager.reset_all_data()

        assert storage.save_count == 1
        assert storage.data[const.DATA_TASKS] == []
        assert manager.storage_available is True

    def test_invalid_level_table_is_refused(self) -> None:
        """Test a level table with a gap between tiers raises ValueError."""
        gapped = [
            {"tier": 1, "min_points": 0, "max_points": 199, "label": "Novice"},
            {"tier": 2, "min_points": 250, "max_points": math.inf, "label": "Adept"},
        ]
        with pytest.raises(ValueError, match="Gap or overlap"):
            make_manager(levels=gapped)

    def test_unsorted_level_table_is_refused(self) -> None:
        """Test tiers out of ascending order raise ValueError."""
        with pytest.raises(ValueError, match="Invalid level table"):
            make_manager(levels=list(reversed(TWO_TIERS)))

    def test_stored_level_is_recomputed_from_points(self) -> None:
        """Test a stale cached level is corrected on load."""
        manager, _ = make_manager(
            make_document(totalPoints=250, level=9), levels=TWO_TIERS
        )
        assert manager.user_data[const.DATA_USER_LEVEL] == 2

    def test_max_health_override_reclamps_health(self) -> None:
        """Test a configured max health applies to the loaded state."""
        manager, _ = make_manager(make_document(health=100), max_health=80)
        assert manager.user_data[const.DATA_USER_MAX_HEALTH] == 80
        assert manager.user_data[const.DATA_USER_HEALTH] == 80


# =============================================================================
# Test: complete_task
# =============================================================================


class TestCompleteTask:
    """Tests for complete_task()."""

    def test_first_completion_awards_points_without_level_up(self) -> None:
        """Test a difficulty-5 completion from zero stays in the first tier."""
        manager, storage = make_manager(
            make_document([make_task("run", difficulty=5)], health=50),
            levels=TWO_TIERS,
        )
        result = manager.complete_task("run")

        assert not isinstance(result, Rejected)
        assert result["points"] == 80
        assert result["was_level_up"] is False
        assert result["old_level"] == result["new_level"] == 1
        assert result["health_recovered"] == 6
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 80
        assert manager.user_data[const.DATA_USER_HEALTH] == 56
        assert len(manager.completions) == 1
        assert manager.completions[0][const.DATA_COMPLETION_POINTS] == 80
        assert storage.data[const.DATA_USER_DATA][const.DATA_USER_TOTAL_POINTS] == 80

    def test_health_recovery_is_clamped(self) -> None:
        """Test recovery never exceeds max health and reports the applied delta."""
        manager, _ = make_manager(
            make_document([make_task("run", difficulty=5)], health=97)
        )
        result = manager.complete_task("run")
        assert manager.user_data[const.DATA_USER_HEALTH] == 100
        assert result["health_recovered"] == 3

    def test_second_completion_same_day_is_rejected(self) -> None:
        """Test a non-repeatable task can only be completed once per day."""
        manager, storage = make_manager(make_document([make_task("read")]))
        manager.complete_task("read")
        points = manager.user_data[const.DATA_USER_TOTAL_POINTS]
        saves = storage.save_count

        result = manager.complete_task("read")

        assert isinstance(result, Rejected)
        assert result.reason == const.REJECT_ALREADY_COMPLETED
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == points
        assert len(manager.completions) == 1
        assert storage.save_count == saves

    def test_repeatable_task_can_be_completed_again(self) -> None:
        """Test a repeatable task accumulates completions on one day."""
        manager, _ = make_manager(make_document([make_task("water", repeatable=True)]))
        manager.complete_task("water")
        manager.complete_task("water")
        assert len(manager.completions) == 2
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 60

    def test_unknown_task_is_rejected(self) -> None:
        """Test an unknown id returns not_found."""
        manager, _ = make_manager()
        result = manager.complete_task("missing")
        assert isinstance(result, Rejected)
        assert result.reason == const.REJECT_NOT_FOUND

    def test_level_up_is_reported_and_emitted(self) -> None:
        """Test crossing a tier boundary reports and notifies listeners."""
        manager, _ = make_manager(
            make_document([make_task("run", difficulty=5)], totalPoints=150),
            levels=TWO_TIERS,
        )
        events: list[dict[str, Any]] = []
        remove = manager.add_level_up_listener(events.append)

        result = manager.complete_task("run")

        assert result["was_level_up"] is True
        assert result["new_level"] == 2
        assert manager.user_data[const.DATA_USER_LEVEL] == 2
        assert events == [
            {
                "old_level": 1,
                "new_level": 2,
                "level_label": "Adept",
                "total_points": 230,
            }
        ]

        remove()
        manager.update_task("run", repeatable=True)
        manager.user_data[const.DATA_USER_TOTAL_POINTS] = 490
        manager.complete_task("run")
        assert len(events) == 1

    def test_completion_updates_streak(self) -> None:
        """Test completing every mandatory task today extends the streak."""
        manager, _ = make_manager(
            make_document(
                [make_task("read")], [make_completion("read", days_ago(1))]
            )
        )
        result = manager.complete_task("read")
        assert result["streak"] == 2
        assert manager.user_data[const.DATA_USER_STREAK] == 2

    def test_completion_moves_cursor_forward_only(self) -> None:
        """Test a backdated completion leaves lastProcessedDate alone."""
        manager, _ = make_manager(
            make_document([make_task("read")], lastProcessedDate=days_ago(1))
        )
        manager.complete_task("read")
        assert manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] == TODAY

        manager.set_selected_day(days_ago(5))
        manager.complete_task("read")
        assert manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] == TODAY
        assert manager.is_task_completed("read", days_ago(5))


# =============================================================================
# Test: apply_daily_penalty
# =============================================================================


class TestApplyDailyPenalty:
    """Tests for apply_daily_penalty()."""

    def test_penalty_reduces_health_and_points(self) -> None:
        """Test unmet mandatory tasks subtract their penalties."""
        manager, _ = make_manager(
            make_document(
                [
                    make_task("read", difficulty=3),
                    make_task("stretch", category=const.TASK_CATEGORY_OPTIONAL),
                ],
                totalPoints=100,
            )
        )
        result = manager.apply_daily_penalty(days_ago(1))

        assert result == {
            "day": days_ago(1),
            "point_penalty": 15,
            "health_lost": 15,
            "unmet_task_names": ["Read"],
        }
        assert manager.user_data[const.DATA_USER_HEALTH] == 85
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 85

    def test_completed_day_is_unchanged(self) -> None:
        """Test a day with every mandatory task done costs nothing."""
        manager, storage = make_manager(
            make_document([make_task("read")], [make_completion("read", days_ago(1))])
        )
        saves = storage.save_count
        result = manager.apply_daily_penalty(days_ago(1))
        assert result["point_penalty"] == 0
        assert manager.user_data[const.DATA_USER_HEALTH] == 100
        assert storage.save_count == saves

    def test_health_and_points_floor_at_zero(self) -> None:
        """Test penalties never push health or points below zero."""
        manager, _ = make_manager(
            make_document([make_task("run", difficulty=5)], health=10, totalPoints=5)
        )
        result = manager.apply_daily_penalty(days_ago(1))
        assert result["health_lost"] == 40
        assert manager.user_data[const.DATA_USER_HEALTH] == 0
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 0

    def test_penalty_can_drop_level(self) -> None:
        """Test the cached level follows points down."""
        manager, _ = make_manager(
            make_document([make_task("run", difficulty=5)], totalPoints=210),
            levels=TWO_TIERS,
        )
        manager.apply_daily_penalty(days_ago(1))
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 170
        assert manager.user_data[const.DATA_USER_LEVEL] == 1


# =============================================================================
# Test: reconcile
# =============================================================================


class TestReconcile:
    """Tests for reconcile()."""

    def test_three_missed_days_are_each_penalized(self) -> None:
        """Test three unprocessed days of a missed difficulty-3 task."""
        manager, _ = make_manager(
            make_document(
                [make_task("read", difficulty=3)],
                totalPoints=100,
                lastProcessedDate=days_ago(4),
            )
        )
        result = manager.reconcile()

        assert result["days_processed"] == 3
        assert result["total_health_lost"] == 45
        assert result["total_point_penalty"] == 45
        assert result["penalized_days"] == [days_ago(3), days_ago(2), days_ago(1)]
        assert manager.user_data[const.DATA_USER_HEALTH] == 55
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 55
        assert manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] == TODAY

    def test_health_clamps_during_catch_up(self) -> None:
        """Test starting health below the total loss ends at zero."""
        manager, _ = make_manager(
            make_document(
                [make_task("read", difficulty=3)],
                health=20,
                lastProcessedDate=days_ago(4),
            )
        )
        result = manager.reconcile()
        assert result["total_health_lost"] == 45
        assert manager.user_data[const.DATA_USER_HEALTH] == 0

    def test_second_call_is_a_no_op(self) -> None:
        """Test no day is ever penalized twice."""
        manager, storage = make_manager(
            make_document([make_task("read")], lastProcessedDate=days_ago(3))
        )
        manager.reconcile()
        health = manager.user_data[const.DATA_USER_HEALTH]
        saves = storage.save_count

        result = manager.reconcile()

        assert result["days_processed"] == 0
        assert result["penalized_days"] == []
        assert manager.user_data[const.DATA_USER_HEALTH] == health
        assert storage.save_count == saves

    def test_completed_days_are_processed_but_not_penalized(self) -> None:
        """Test only days with unmet mandatory tasks are listed."""
        manager, _ = make_manager(
            make_document(
                [make_task("read")],
                [make_completion("read", days_ago(2))],
                lastProcessedDate=days_ago(3),
            )
        )
        result = manager.reconcile()
        assert result["days_processed"] == 2
        assert result["penalized_days"] == [days_ago(1)]

    def test_today_is_never_penalized(self) -> None:
        """Test the current day is left for the user to finish."""
        manager, _ = make_manager(
            make_document([make_task("read")], lastProcessedDate=days_ago(1))
        )
        result = manager.reconcile()
        assert result["days_processed"] == 0
        assert manager.user_data[const.DATA_USER_HEALTH] == 100
        assert manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] == TODAY

    def test_future_cursor_is_left_alone(self) -> None:
        """Test a cursor ahead of today does nothing."""
        tomorrow = dt_utils.add_days(TODAY, 1)
        manager, _ = make_manager(
            make_document([make_task("read")], lastProcessedDate=tomorrow)
        )
        result = manager.reconcile()
        assert result["days_processed"] == 0
        assert manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] == tomorrow

    def test_invalid_cursor_resets_without_penalty(self) -> None:
        """Test a cursor that is not a date is reset to today."""
        manager, _ = make_manager(make_document([make_task("read")]))
        manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] = "someday"

        result = manager.reconcile()

        assert result["days_processed"] == 0
        assert manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] == TODAY
        assert manager.user_data[const.DATA_USER_HEALTH] == 100

    def test_catch_up_is_capped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test only the most recent days are walked after a very long absence."""
        monkeypatch.setattr(const, "MAX_CATCH_UP_DAYS", 5)
        manager, _ = make_manager(
            make_document([make_task("read", difficulty=1)], lastProcessedDate=days_ago(30))
        )
        result = manager.reconcile()
        assert result["days_processed"] == 5
        assert result["penalized_days"][0] == days_ago(5)
        assert manager.user_data[const.DATA_USER_HEALTH] == 75

    def test_selected_day_drives_catch_up(self) -> None:
        """Test a debug-selected day is treated as today."""
        manager, _ = make_manager(make_document([make_task("read")]))
        manager.set_selected_day(dt_utils.add_days(TODAY, 3))

        result = manager.reconcile()

        assert result["days_processed"] == 2
        assert manager.user_data[const.DATA_USER_LAST_PROCESSED_DATE] == (
            dt_utils.add_days(TODAY, 3)
        )


# =============================================================================
# Test: task catalog
# =============================================================================


class TestTaskCatalog:
    """Tests for add/update/delete."""

    def test_add_task(self) -> None:
        """Test a task is appended and persisted."""
        manager, storage = make_manager()
        task = manager.add_task("Read", 2, const.TASK_CATEGORY_MANDATORY)
        assert manager.get_task(task[const.DATA_TASK_ID]) == task
        assert manager.find_task_by_name("READ") == task
        assert storage.data[const.DATA_TASKS] == [task]

    def test_add_invalid_task_raises(self) -> None:
        """Test validation errors propagate to the caller."""
        manager, _ = make_manager()
        with pytest.raises(EntityValidationError):
            manager.add_task("Read", 9)
        assert manager.tasks == []

    def test_update_keeps_snapshotted_points(self) -> None:
        """Test changing difficulty does not rewrite past completions."""
        manager, _ = make_manager(
            make_document([make_task("read", difficulty=3)], [make_completion("read", TODAY)])
        )
        updated = manager.update_task("read", difficulty=5)
        assert updated[const.DATA_TASK_DIFFICULTY] == 5
        assert manager.completions[0][const.DATA_COMPLETION_POINTS] == 30

    def test_update_unknown_task(self) -> None:
        """Test updating an unknown id is rejected."""
        manager, _ = make_manager()
        assert isinstance(manager.update_task("nope", name="x"), Rejected)

    def test_delete_cascades_to_completions(self) -> None:
        """Test deleting a task removes its completions but keeps points."""
        manager, _ = make_manager(
            make_document(
                [make_task("read"), make_task("run")],
                [make_completion("read", TODAY), make_completion("run", TODAY)],
                totalPoints=60,
            )
        )
        manager.delete_task("read")

        assert [t[const.DATA_TASK_ID] for t in manager.tasks] == ["run"]
        assert [c[const.DATA_COMPLETION_TASK_ID] for c in manager.completions] == [
            "run"
        ]
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 60
        assert isinstance(manager.delete_task("read"), Rejected)


# =============================================================================
# Test: settings, reset, import/export
# =============================================================================


class TestSettingsAndSnapshots:
    """Tests for settings, reset and snapshot import/export."""

    def test_settings_round_trip(self) -> None:
        """Test unknown settings keys survive storage and export."""
        manager, storage = make_manager()
        manager.update_settings(theme="dark", fontScale=1.5)

        reloaded = ProgressionManager(storage, today_provider=lambda: TODAY)
        settings = reloaded.user_data[const.DATA_USER_SETTINGS]
        assert settings["theme"] == "dark"
        assert settings["fontScale"] == 1.5
        exported = json.loads(reloaded.export_snapshot())
        assert exported["userData"]["settings"]["fontScale"] == 1.5

    def test_reset_all_data(self) -> None:
        """Test reset clears everything but keeps max health."""
        manager, _ = make_manager(
            make_document(
                [make_task("read")],
                [make_completion("read", TODAY)],
                totalPoints=500,
                health=40,
                maxHealth=120,
            )
        )
        manager.reset_all_data()
        assert manager.tasks == []
        assert manager.completions == []
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 0
        assert manager.user_data[const.DATA_USER_HEALTH] == 120

    def test_invalid_import_leaves_state_untouched(self) -> None:
        """Test a shape-invalid document changes nothing."""
        manager, storage = make_manager(
            make_document([make_task("read")], [make_completion("read", TODAY)], totalPoints=30)
        )
        before = copy.deepcopy(manager.data)
        saves = storage.save_count

        result = manager.import_snapshot(json.dumps({"tasks": [], "completions": []}))

        assert isinstance(result, Rejected)
        assert result.reason == const.REJECT_MALFORMED_SNAPSHOT
        assert manager.data == before
        assert storage.save_count == saves

    def test_import_replaces_state(self) -> None:
        """Test a valid document replaces catalog, log and progression."""
        manager, storage = make_manager(make_document([make_task("old")]))
        document = make_document([make_task("new")], totalPoints=260)

        result = manager.import_snapshot(document)

        assert not isinstance(result, Rejected)
        assert [t[const.DATA_TASK_ID] for t in manager.tasks] == ["new"]
        assert manager.user_data[const.DATA_USER_LEVEL] == 2
        assert storage.data[const.DATA_TASKS][0][const.DATA_TASK_ID] == "new"

    def test_export_import_round_trip(self) -> None:
        """Test exporting then importing reproduces the same state."""
        manager, _ = make_manager(
            make_document([make_task("read")], [make_completion("read", TODAY)], totalPoints=30)
        )
        exported = manager.export_snapshot()
        other, _ = make_manager()
        other.import_snapshot(exported)
        assert other.data == manager.data


# =============================================================================
# Test: bounds over mixed operation sequences
# =============================================================================

SEQUENCES = {
    "penalties_then_recovery": [
        ("penalty", 3),
        ("penalty", 2),
        ("penalty", 1),
        ("complete", "run"),
        ("complete", "water"),
        ("complete", "water"),
        ("complete", "water"),
    ],
    "recovery_at_full_health": [
        ("complete", "water"),
        ("complete", "run"),
        ("complete", "water"),
        ("reconcile", None),
        ("complete", "water"),
    ],
    "long_catch_up_then_debug_days": [
        ("reconcile", None),
        ("select", 2),
        ("complete", "run"),
        ("penalty", 4),
        ("select", None),
        ("reconcile", None),
        ("complete", "water"),
    ],
    "debug_day_walk": [
        ("select", 8),
        ("reconcile", None),
        ("select", 4),
        ("reconcile", None),
        ("complete", "water"),
        ("select", 1),
        ("penalty", 1),
        ("select", None),
        ("reconcile", None),
        ("penalty", 0),
    ],
}


class TestBoundsOverSequences:
    """Tests that health and level stay consistent across mixed operations."""

    @pytest.mark.parametrize("start_health", [5, 60, 100])
    @pytest.mark.parametrize("steps", SEQUENCES.values(), ids=SEQUENCES.keys())
    def test_health_and_level_hold_after_every_step(
        self, steps: list[tuple[str, Any]], start_health: int
    ) -> None:
        """Test 0 <= health <= maxHealth and level == level_for(points) throughout."""
        manager, _ = make_manager(
            make_document(
                [
                    make_task("run", difficulty=5),
                    make_task("read", difficulty=3),
                    make_task(
                        "water",
                        difficulty=2,
                        category=const.TASK_CATEGORY_OPTIONAL,
                        repeatable=True,
                    ),
                ],
                totalPoints=190,
                health=start_health,
                lastProcessedDate=days_ago(10),
            ),
            levels=TWO_TIERS,
        )

        for action, arg in steps:
            if action == "complete":
                manager.complete_task(arg)
            elif action == "penalty":
                manager.apply_daily_penalty(days_ago(arg))
            elif action == "select":
                manager.set_selected_day(days_ago(arg) if arg is not None else None)
            else:
                manager.reconcile()

            user = manager.user_data
            points = user[const.DATA_USER_TOTAL_POINTS]
            assert 0 <= user[const.DATA_USER_HEALTH] <= user[const.DATA_USER_MAX_HEALTH]
            assert points >= 0
            assert (
                user[const.DATA_USER_LEVEL]
                == LevelEngine.level_for(points, TWO_TIERS)[const.LEVEL_TIER]
            )
            assert manager.snapshot()["level"] == user[const.DATA_USER_LEVEL]


# =============================================================================
# Test: storage failures
# =============================================================================


class TestStorageFailures:
    """Tests for a storage backend that cannot write."""

    def test_operations_continue_in_memory(self) -> None:
        """Test a failed save is reported, not raised."""
        manager, storage = make_manager(make_document([make_task("read")]))
        storage.available = False

        result = manager.complete_task("read")

        assert not isinstance(result, Rejected)
        assert manager.user_data[const.DATA_USER_TOTAL_POINTS] == 30
        assert manager.storage_available is False
        assert manager.snapshot()["storage_available"] is False

        storage.available = True
        manager.update_settings(theme="dark")
        assert manager.storage_available is True
        assert storage.data[const.DATA_USER_DATA][const.DATA_USER_TOTAL_POINTS] == 30

    def test_unreadable_storage_starts_fresh_without_writing(self) -> None:
        """Test an unreadable backend is not overwritten with defaults."""
        storage = InMemoryStorage(make_document([make_task("read")]))
        storage.available = False
        manager = ProgressionManager(storage, today_provider=lambda: TODAY)

        assert manager.tasks == []
        assert manager.storage_available is False
        assert storage.save_count == 0


# =============================================================================
# Test: queries
# =============================================================================


class TestQueries:
    """Tests for read-only queries."""

    def test_snapshot(self) -> None:
        """Test the observable state."""
        manager, _ = make_manager(
            make_document([make_task("read")], totalPoints=250, health=25),
            levels=TWO_TIERS,
        )
        snapshot = manager.snapshot()
        assert snapshot["level"] == 2
        assert snapshot["level_label"] == "Adept"
        assert snapshot["points_to_next_level"] == 250
        assert snapshot["health_critical"] is True
        assert snapshot["health_status"] == const.HEALTH_STATUS_WARNING
        assert snapshot["selected_day"] == TODAY
        assert snapshot["task_count"] == 1

    def test_daily_points_and_statistics(self) -> None:
        """Test per-day points and the statistics summary."""
        manager, _ = make_manager(
            make_document(
                [make_task("read")],
                [make_completion("read", TODAY, points=30)],
            )
        )
        assert manager.daily_points() == 30
        assert manager.daily_points(days_ago(1)) == 0
        stats = manager.statistics()
        assert stats["total_completions"] == 1
        assert stats["current_streak"] == 1
        assert manager.snapshot()["statistics"] == stats

    def test_set_selected_day_rejects_bad_input(self) -> None:
        """Test an unparseable day raises ValueError."""
        manager, _ = make_manager()
        with pytest.raises(ValueError):
            manager.set_selected_day("not-a-day")
        manager.set_selected_day(days_ago(2))
        assert manager.today == days_ago(2)
        manager.set_selected_day(None)
        assert manager.today == TODAY
