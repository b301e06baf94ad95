"""Diagnostics support for HabitQuest integration.

The diagnostics JSON returns the raw snapshot document, the same shape as an
export, so it can be pasted straight into the import_data service.
"""

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .coordinator import HabitQuestDataCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: HabitQuestDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    return coordinator.manager.export_document()
