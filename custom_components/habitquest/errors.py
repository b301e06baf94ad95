"""Error taxonomy and rejection results for HabitQuest.

Engine and manager operations never let these exceptions escape their public
boundary: they are caught and turned into a `Rejected` value (or, for
storage, logged and reported through `storage_available`). Only the Home
Assistant service layer converts a `Rejected` into a HomeAssistantError.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import const


class HabitQuestError(Exception):
    """Base class for HabitQuest errors.

    Attributes:
        reason: One of the const.REJECT_* codes
    """

    reason: str = ""

    def to_rejected(self) -> Rejected:
        """Convert the error into a discriminated rejection result."""
        return Rejected(reason=self.reason, message=str(self))


class TaskNotFoundError(HabitQuestError):
    """Raised when a task id does not exist in the catalog."""

    reason = const.REJECT_NOT_FOUND

    def __init__(self, task_id: str) -> None:
        """Initialize TaskNotFoundError.

        Args:
            task_id: The unknown task id
        """
        self.task_id = task_id
        super().__init__(const.ERROR_TASK_NOT_FOUND_FMT.format(task_id))


class AlreadyCompletedError(HabitQuestError):
    """Raised when a non-repeatable task is completed twice on one day."""

    reason = const.REJECT_ALREADY_COMPLETED

    def __init__(self, task_name: str, day: str) -> None:
        """Initialize AlreadyCompletedError.

        Args:
            task_name: Display name of the task
            day: Day key the task was already completed on
        """
        self.task_name = task_name
        self.day = day
        super().__init__(const.ERROR_TASK_ALREADY_COMPLETED_FMT.format(task_name, day))


class MalformedSnapshotError(HabitQuestError):
    """Raised when an imported snapshot fails to parse or validate."""

    reason = const.REJECT_MALFORMED_SNAPSHOT

    def __init__(self, detail: str) -> None:
        """Initialize MalformedSnapshotError.

        Args:
            detail: Human-readable parse/validation failure
        """
        self.detail = detail
        super().__init__(const.ERROR_MALFORMED_SNAPSHOT_FMT.format(detail))


class StorageUnavailableError(HabitQuestError):
    """Raised by a storage backend that cannot read or write."""

    reason = const.REJECT_STORAGE_UNAVAILABLE

    def __init__(self, detail: str) -> None:
        """Initialize StorageUnavailableError.

        Args:
            detail: Description of the underlying I/O failure
        """
        self.detail = detail
        super().__init__(const.ERROR_STORAGE_UNAVAILABLE_FMT.format(detail))


@dataclass(frozen=True)
class Rejected:
    """Discriminated failure result returned by manager operations.

    Attributes:
        reason: One of the const.REJECT_* codes
        message: User-facing explanation
    """

    reason: str
    message: str
