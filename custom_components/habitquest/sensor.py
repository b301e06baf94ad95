# File: sensor.py
"""Sensors for the HabitQuest integration.

Exposes the observable progression state:
1. PointsSensor - cumulative points, with level progress attributes
2. LevelSensor - current level tier, with its label
3. HealthSensor - health as a percentage of max health, with status band
4. StreakSensor - consecutive qualifying days, with best streak
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, UnitOfTime
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import HabitQuestDataCoordinator
from .entity import HabitQuestCoordinatorEntity
from .helpers.device_helpers import create_progression_device_info
from .utils.math_utils import format_points


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for HabitQuest integration."""
    coordinator: HabitQuestDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    async_add_entities(
        [
            PointsSensor(coordinator, entry),
            LevelSensor(coordinator, entry),
            HealthSensor(coordinator, entry),
            StreakSensor(coordinator, entry),
        ]
    )


class HabitQuestSensor(HabitQuestCoordinatorEntity, SensorEntity):
    """Shared wiring for the progression sensors."""

    _attr_has_entity_name = True
    _uid_suffix: str = ""

    def __init__(
        self, coordinator: HabitQuestDataCoordinator, entry: ConfigEntry
    ) -> None:
        """Initialize the sensor.

        Args:
            coordinator: HabitQuestDataCoordinator instance for data access.
            entry: ConfigEntry for this integration instance.
        """
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}{self._uid_suffix}"
        self._attr_device_info = create_progression_device_info(entry)

    @property
    def _snapshot(self) -> dict[str, Any]:
        return self.coordinator.data or self.coordinator.manager.snapshot()


class PointsSensor(HabitQuestSensor):
    """Sensor for cumulative points."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_POINTS
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:star-four-points"
    _uid_suffix = const.SENSOR_UID_SUFFIX_POINTS

    @property
    def native_value(self) -> int:
        """Return the point total."""
        return self._snapshot["total_points"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose level progress and today's earnings."""
        snapshot = self._snapshot
        return {
            const.ATTR_LEVEL: snapshot["level"],
            const.ATTR_LEVEL_LABEL: snapshot["level_label"],
            const.ATTR_POINTS_TO_NEXT_LEVEL: snapshot["points_to_next_level"],
            const.ATTR_LEVEL_PROGRESS: snapshot["level_progress"],
            const.ATTR_FORMATTED_POINTS: format_points(snapshot["total_points"]),
            const.ATTR_DAILY_POINTS: self.coordinator.manager.daily_points(),
        }


class LevelSensor(HabitQuestSensor):
    """Sensor for the current level tier."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_LEVEL
    _attr_icon = "mdi:trophy-award"
    _uid_suffix = const.SENSOR_UID_SUFFIX_LEVEL

    @property
    def native_value(self) -> int:
        """Return the level tier."""
        return self._snapshot["level"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the label and progress within the tier."""
        snapshot = self._snapshot
        return {
            const.ATTR_LEVEL_LABEL: snapshot["level_label"],
            const.ATTR_POINTS_TO_NEXT_LEVEL: snapshot["points_to_next_level"],
            const.ATTR_LEVEL_PROGRESS: snapshot["level_progress"],
        }


class HealthSensor(HabitQuestSensor):
    """Sensor for health as a percentage of max health."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_HEALTH
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = PERCENTAGE
    _uid_suffix = const.SENSOR_UID_SUFFIX_HEALTH

    @property
    def native_value(self) -> float:
        """Return health percentage."""
        snapshot = self._snapshot
        if not snapshot["max_health"]:
            return 0.0
        return round(snapshot["health"] / snapshot["max_health"] * 100, 1)

    @property
    def icon(self) -> str:
        """Return an icon matching the health band."""
        if self._snapshot["health_critical"]:
            return "mdi:heart-broken"
        if self._snapshot["health_status"] == const.HEALTH_STATUS_HEALTHY:
            return "mdi:heart"
        return "mdi:heart-half-full"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose raw health and the catch-up cursor."""
        snapshot = self._snapshot
        return {
            const.ATTR_HEALTH: snapshot["health"],
            const.ATTR_MAX_HEALTH: snapshot["max_health"],
            const.ATTR_HEALTH_STATUS: snapshot["health_status"],
            const.ATTR_HEALTH_CRITICAL: snapshot["health_critical"],
            const.ATTR_LAST_PROCESSED_DATE: snapshot["last_processed_date"],
            const.ATTR_SELECTED_DAY: snapshot["selected_day"],
            const.ATTR_STORAGE_AVAILABLE: snapshot["storage_available"],
        }


class StreakSensor(HabitQuestSensor):
    """Sensor for consecutive days with every mandatory task completed."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_STREAK
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfTime.DAYS
    _attr_icon = "mdi:fire"
    _uid_suffix = const.SENSOR_UID_SUFFIX_STREAK

    @property
    def native_value(self) -> int:
        """Return the current streak."""
        return self._snapshot["streak"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the best streak and completion statistics."""
        stats = self._snapshot["statistics"]
        return {
            const.ATTR_BEST_STREAK: stats["best_streak"],
            const.ATTR_TOTAL_COMPLETIONS: stats["total_completions"],
            const.ATTR_COMPLETION_RATE: stats["completion_rate"],
            const.ATTR_AVERAGE_POINTS_PER_DAY: stats["average_points_per_day"],
        }
