from __future__ import annotations

from typing import Optional


class TaskTrackerError(Exception):
    """Base class for all errors raised by the task tracker core."""


# PUBLIC_INTERFACE
class ValidationError(TaskTrackerError):
    """
    A draft failed validation.

    Attributes:
    - field: serialized name of the offending field ("title", "dueDate", "priority", ...)
    - message: human readable reason
    """

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        self.message = message or f"{field} is invalid"
        super().__init__(self.message)


# PUBLIC_INTERFACE
class NotFoundError(TaskTrackerError):
    """An operation referenced a task id that is not in the collection."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


# PUBLIC_INTERFACE
class InvalidCriterionError(TaskTrackerError):
    """Unsupported filter criterion."""

    def __init__(self, criterion: object) -> None:
        self.criterion = criterion
        super().__init__(f"Unsupported filter criterion: {criterion!r}")


# PUBLIC_INTERFACE
class CorruptStateError(TaskTrackerError):
    """Persisted state exists but cannot be decoded into a task collection."""


class StorageError(TaskTrackerError):
    """Storage adapter I/O failure."""


# PUBLIC_INTERFACE
class StorageReadError(StorageError):
    """Reading persisted state failed."""


# PUBLIC_INTERFACE
class StorageWriteError(StorageError):
    """Writing persisted state failed."""
