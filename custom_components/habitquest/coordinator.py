# File: coordinator.py
"""Coordinator for the HabitQuest integration.

Owns the ProgressionManager for one config entry. The periodic refresh runs
the catch-up reconciler, so a day rollover is penalized while Home Assistant
keeps running, and hands the observable snapshot to the sensors.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from . import const
from .errors import Rejected
from .managers import ProgressionManager
from .store import HabitQuestStore
from .type_defs import ProgressionSnapshot

_ResultT = TypeVar("_ResultT")


class HabitQuestDataCoordinator(DataUpdateCoordinator[ProgressionSnapshot]):
    """Coordinator for HabitQuest integration."""

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: HabitQuestStore,
    ) -> None:
        """Initialize the HabitQuestDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store
        self.manager = ProgressionManager(
            store,
            max_health=config_entry.options.get(const.CONF_MAX_HEALTH),
        )
        self.manager.add_level_up_listener(self._on_level_up)

    def _on_level_up(self, payload: dict[str, Any]) -> None:
        """Fire a bus event so automations can react to a level-up."""
        self.hass.bus.async_fire(
            const.EVENT_LEVEL_UP,
            {**payload, "entry_id": self.config_entry.entry_id},
        )

    async def _async_update_data(self) -> ProgressionSnapshot:
        """Periodic update: catch up on missed days, then publish the snapshot."""
        result = self.manager.reconcile()
        if result["days_processed"]:
            const.LOGGER.debug("DEBUG: Periodic reconcile result: %s", result)
        return self.manager.snapshot()

    def run(self, operation: Callable[..., _ResultT], *args: Any, **kwargs: Any) -> _ResultT:
        """Run a manager operation and publish the new snapshot to entities.

        Rejected results leave state unchanged, so listeners are only
        notified for accepted operations.
        """
        result = operation(*args, **kwargs)
        if not isinstance(result, Rejected):
            self.async_set_updated_data(self.manager.snapshot())
        return result
