"""Base entity classes for HabitQuest integration."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import HabitQuestDataCoordinator


class HabitQuestCoordinatorEntity(CoordinatorEntity[HabitQuestDataCoordinator]):
    """Base entity class for HabitQuest sensors with typed coordinator access."""

    @property
    def coordinator(self) -> HabitQuestDataCoordinator:
        """Return typed coordinator.

        Uses object.__getattribute__ to access the private _coordinator attribute
        set by the parent CoordinatorEntity class.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: HabitQuestDataCoordinator) -> None:
        """Set coordinator with proper typing.

        Args:
            value: The HabitQuestDataCoordinator instance to set.
        """
        object.__setattr__(self, "_coordinator", value)
