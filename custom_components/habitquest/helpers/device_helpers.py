# File: helpers/device_helpers.py
"""Device registry helper functions for HabitQuest.

Functions that construct DeviceInfo objects for Home Assistant's device registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_progression_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create device info grouping the progression sensors of one entry.

    Args:
        config_entry: Config entry for this integration instance

    Returns:
        DeviceInfo dict for the progression device
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, config_entry.entry_id)},
        name=config_entry.title,
        manufacturer=const.HABITQUEST_TITLE,
        model="Habit Progression",
        entry_type=DeviceEntryType.SERVICE,
    )
