from __future__ import annotations

import contextlib
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from threading import RLock
from typing import TYPE_CHECKING, Optional, Union

from .errors import StorageReadError, StorageWriteError

if TYPE_CHECKING:
    from .settings import Settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class StorageAdapter(ABC):
    """
    Abstract contract for the single persistent slot holding the task collection.
    """

    name: str = "abstract"

    @abstractmethod
    def load(self) -> Optional[str]:
        """
        Return the previously saved raw state, or None if nothing was saved yet.

        Raises StorageReadError on I/O failure only.
        """

    @abstractmethod
    def save(self, raw: str) -> None:
        """
        Persist raw state, overwriting any prior value.

        Raises StorageWriteError on I/O failure.
        """


class InMemoryStorage(StorageAdapter):
    """
    Process-local slot suitable for testing and ephemeral runs.
    """

    name = "memory"

    def __init__(self, initial: Optional[str] = None) -> None:
        self._lock = RLock()
        self._value = initial

    def load(self) -> Optional[str]:
        with self._lock:
            return self._value

    def save(self, raw: str) -> None:
        with self._lock:
            self._value = raw


class JSONFileStorage(StorageAdapter):
    """
    One UTF-8 JSON file.

    Writes go to a sibling .tmp file which is fsynced and then renamed over
    the target, so a crash mid-write never leaves a truncated collection behind.
    """

    name = "file"

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read tasks file %s: %s", self._path, exc)
            raise StorageReadError(f"Cannot read {self._path}: {exc}") from exc

    def save(self, raw: str) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            data = raw.encode("utf-8")
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
        except (OSError, UnicodeError) as exc:
            logger.error("Failed to write tasks file %s: %s", self._path, exc)
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StorageWriteError(f"Cannot write {self._path}: {exc}") from exc


# PUBLIC_INTERFACE
def get_storage(settings: "Settings") -> StorageAdapter:
    """
    Build the configured storage adapter.
    - memory: InMemoryStorage
    - file: JSONFileStorage at settings.tasks_file_path
    - sqlite: SQLiteStorage at settings.sqlite_db_path, keyed by settings.storage_key
    """
    if settings.persistence_backend == "memory":
        return InMemoryStorage()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteStorage

        return SQLiteStorage(settings.sqlite_db_path, key=settings.storage_key)
    return JSONFileStorage(settings.tasks_file_path)
