# File: helpers/__init__.py
"""Helper functions for HabitQuest.

Submodules:
    - backup_helpers: Snapshot export, legacy key mapping and validated import
    - device_helpers: DeviceInfo construction (Home Assistant bound)

Usage:
    from .helpers import backup_helpers
    from .helpers.device_helpers import create_progression_device_info
"""

from . import backup_helpers, device_helpers

__all__ = ["backup_helpers", "device_helpers"]
