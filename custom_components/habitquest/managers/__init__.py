"""Manager modules for HabitQuest integration.

Managers own state and coordinate between engines.
"""

from .progression_manager import ProgressionManager

__all__ = [
    "ProgressionManager",
]
