"""
Task Tracker package.

Core API: TaskStore (CRUD/toggle with persistence), filter_tasks/stats (query
engine) and the storage adapters. The FastAPI app lives in task_tracker.main.
"""

from .errors import (  # noqa: F401
    CorruptStateError,
    InvalidCriterionError,
    NotFoundError,
    StorageReadError,
    StorageWriteError,
    TaskTrackerError,
    ValidationError,
)
from .models import Priority, Task, TaskDraft, TaskStats, TaskStatus  # noqa: F401
from .query import FilterCriterion, filter_tasks, stats  # noqa: F401
from .storage import InMemoryStorage, JSONFileStorage, StorageAdapter  # noqa: F401
from .store import TaskStore  # noqa: F401
