from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from threading import RLock
from typing import Callable, List, Optional

from .codec import deserialize, serialize
from .errors import NotFoundError
from .models import Task, TaskDraft, TaskStatus
from .schemas import clean_draft
from .settings import get_settings
from .storage import StorageAdapter, get_storage

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]

_MAX_ID_ATTEMPTS = 16


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


# PUBLIC_INTERFACE
class TaskStore:
    """
    Single source of truth for the task collection.

    Every successful mutation writes the complete collection through the
    storage adapter before returning. The in-memory collection is replaced only
    after the write succeeded, so a failed mutation leaves both the collection
    and persisted state untouched.

    All operations run under one re-entrant lock and are atomic with respect
    to each other.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        *,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self._storage = storage
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_id
        self._lock = RLock()
        self._tasks: List[Task] = []
        self.reload()
        logger.info(
            "TaskStore ready backend=%s total=%d", getattr(storage, "name", "?"), len(self._tasks)
        )

    @property
    def storage(self) -> StorageAdapter:
        return self._storage

    # ---- helpers ----

    def reload(self) -> None:
        """
        Replace the in-memory collection with persisted state.

        Raises StorageReadError on adapter failure and CorruptStateError when
        the stored value cannot be decoded; the current collection is kept in
        both cases.
        """
        with self._lock:
            raw = self._storage.load()
            if raw is None:
                self._tasks = []
                return
            self._tasks = deserialize(raw)
            logger.debug("Loaded %d tasks", len(self._tasks))

    def _index_of(self, task_id: str) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        raise NotFoundError(task_id)

    def _stamp(self, previous: Optional[datetime] = None) -> datetime:
        now = self._clock()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    def _allocate_id(self) -> str:
        taken = {t.id for t in self._tasks}
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate and candidate not in taken:
                return candidate
        raise RuntimeError("id factory failed to produce a unique id")

    def _commit(self, tasks: List[Task]) -> None:
        self._storage.save(serialize(tasks))
        self._tasks = tasks

    # ---- public API ----

    def list(self) -> List[Task]:
        """Return the full collection in insertion order."""
        with self._lock:
            return list(self._tasks)

    def get(self, task_id: str) -> Task:
        with self._lock:
            return self._tasks[self._index_of(task_id)]

    def create(self, draft: TaskDraft) -> Task:
        """
        Validate the draft and append a new pending task.

        Raises:
            ValidationError: title empty or dueDate missing/unparsable.
            StorageWriteError: the collection could not be persisted.
        """
        clean = clean_draft(draft)
        with self._lock:
            now = self._stamp()
            task = Task(
                id=self._allocate_id(),
                title=clean.title,
                description=clean.description,
                priority=clean.priority,
                due_date=clean.due_date,
                status=TaskStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self._commit([*self._tasks, task])
            logger.debug("Task created id=%s priority=%s due=%s", task.id, task.priority.value, task.due_date)
            return task

    def update(self, task_id: str, draft: TaskDraft) -> Task:
        """
        Replace title, description, priority and due date of an existing task.

        Raises:
            ValidationError, NotFoundError, StorageWriteError
        """
        clean = clean_draft(draft)
        with self._lock:
            idx = self._index_of(task_id)
            current = self._tasks[idx]
            updated = current.model_copy(
                update={
                    "title": clean.title,
                    "description": clean.description,
                    "priority": clean.priority,
                    "due_date": clean.due_date,
                    "updated_at": self._stamp(current.updated_at),
                }
            )
            tasks = list(self._tasks)
            tasks[idx] = updated
            self._commit(tasks)
            logger.debug("Task updated id=%s", task_id)
            return updated

    def toggle_status(self, task_id: str) -> Task:
        """
        Flip pending <-> completed.

        Raises:
            NotFoundError, StorageWriteError
        """
        with self._lock:
            idx = self._index_of(task_id)
            current = self._tasks[idx]
            updated = current.model_copy(
                update={
                    "status": current.status.toggled(),
                    "updated_at": self._stamp(current.updated_at),
                }
            )
            tasks = list(self._tasks)
            tasks[idx] = updated
            self._commit(tasks)
            logger.debug("Task toggled id=%s status=%s", task_id, updated.status.value)
            return updated

    def delete(self, task_id: str) -> None:
        """
        Remove a task permanently.

        Raises:
            NotFoundError, StorageWriteError
        """
        with self._lock:
            idx = self._index_of(task_id)
            self._commit(self._tasks[:idx] + self._tasks[idx + 1:])
            logger.debug("Task deleted id=%s", task_id)


# PUBLIC_INTERFACE
@lru_cache(maxsize=None)
def get_task_store() -> TaskStore:
    """
    Return the process-wide TaskStore bound to the configured storage backend.

    Raises CorruptStateError / StorageReadError if persisted state cannot be restored.
    """
    return TaskStore(get_storage(get_settings()))
