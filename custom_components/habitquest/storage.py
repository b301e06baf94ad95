"""Storage interface for the progression engine.

The ProgressionManager never touches Home Assistant storage directly; it is
handed an object with synchronous `load()` / `save(data)`. HabitQuestStore
(store.py) implements it on top of Home Assistant's Store, and
InMemoryStorage below backs tests and standalone use.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol

from . import const
from .errors import StorageUnavailableError


class ProgressionStorage(Protocol):
    """Persistence backend for the snapshot document."""

    def load(self) -> dict[str, Any] | None:
        """Return the stored document, or None when nothing was saved yet."""

    def save(self, data: dict[str, Any]) -> None:
        """Persist the document.

        Raises:
            StorageUnavailableError: When the backend cannot write
        """


class InMemoryStorage:
    """Deep-copying in-memory backend.

    Set `available = False` to make every load/save raise
    StorageUnavailableError.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """Initialize the backend, optionally pre-seeded with a document."""
        self._data = copy.deepcopy(data) if data is not None else None
        self.available = True
        self.save_count = 0

    @property
    def data(self) -> dict[str, Any] | None:
        """Return the last saved document (not a copy)."""
        return self._data

    def load(self) -> dict[str, Any] | None:
        """Return a copy of the stored document."""
        if not self.available:
            raise StorageUnavailableError("in-memory storage marked unavailable")
        return copy.deepcopy(self._data) if self._data is not None else None

    def save(self, data: dict[str, Any]) -> None:
        """Store a copy of the document."""
        if not self.available:
            raise StorageUnavailableError("in-memory storage marked unavailable")
        self._data = copy.deepcopy(data)
        self.save_count += 1
        const.LOGGER.debug("DEBUG: In-memory snapshot saved (#%s)", self.save_count)
