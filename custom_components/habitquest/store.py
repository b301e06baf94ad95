# File: store.py
"""Handles persistent data storage for the HabitQuest integration.

Uses Home Assistant's Storage helper to save and load the progression
snapshot (task catalog, completion log and progression state) so it is
preserved across restarts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from . import const
from .errors import StorageUnavailableError

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class HabitQuestStore:
    """Persistent storage for the HabitQuest snapshot document.

    Thin wrapper around Home Assistant's Store API. Implements the
    synchronous ProgressionStorage protocol used by ProgressionManager:
    `save()` schedules a delayed write on the event loop and returns
    immediately.

    If the stored file cannot be read at startup the store marks itself
    unavailable and refuses writes, so the unreadable file is never
    overwritten with fresh defaults.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).

        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] | None = None
        self.available = True

    async def async_initialize(self) -> None:
        """Load data from storage during startup."""
        const.LOGGER.debug("DEBUG: HabitQuestStore: Loading data from storage")
        try:
            existing_data = await self._store.async_load()
        except (HomeAssistantError, OSError) as err:
            const.LOGGER.error(
                "ERROR: Failed to read storage %s: %s. Running in memory only",
                self._store.path,
                err,
            )
            self.available = False
            return

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            return

        self._data = existing_data
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "tasks": len(existing_data.get(const.DATA_TASKS, [])),
                "completions": len(existing_data.get(const.DATA_COMPLETIONS, [])),
                "total_keys": len(existing_data.keys()),
            },
        )

    @property
    def data(self) -> dict[str, Any] | None:
        """Retrieve the in-memory data cache."""
        return self._data

    def get_storage_path(self) -> str:
        """Get the storage file path.

        Returns:
            str: The absolute path to the storage file.
        """
        return self._store.path

    # ------------------------------------------------------------------
    # ProgressionStorage protocol
    # ------------------------------------------------------------------

    def load(self) -> dict[str, Any] | None:
        """Return the document loaded by async_initialize()."""
        if not self.available:
            raise StorageUnavailableError(f"could not read {self._store.path}")
        return self._data

    def save(self, data: dict[str, Any]) -> None:
        """Replace the cached document and schedule a delayed write."""
        if not self.available:
            raise StorageUnavailableError(f"could not read {self._store.path}")
        self._data = data
        self._store.async_delay_save(self._data_to_save, const.STORAGE_SAVE_DELAY_SECONDS)

    def _data_to_save(self) -> dict[str, Any]:
        return self._data or {}

    # ------------------------------------------------------------------
    # Direct writes
    # ------------------------------------------------------------------

    async def async_save(self) -> None:
        """Save the current data structure to storage immediately.

        Raises:
            No exceptions raised - errors are logged but do not stop execution.
            OSError: Logged when file system issues prevent saving.
            TypeError: Logged when data contains non-serializable types.
            ValueError: Logged when data is invalid for JSON serialization.
        """
        if not self.available or self._data is None:
            return
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s", err
            )

    async def async_delete_storage(self) -> None:
        """Clear the in-memory cache and remove the storage file."""
        const.LOGGER.warning("WARNING: Removing all HabitQuest stored data")
        self._data = None
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s", self._store.path
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
