from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Optional

from .errors import StorageReadError, StorageWriteError
from .storage import StorageAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "kv"
    key: str = "key"
    value: str = "value"


_COLS = _Cols()


class SQLiteStorage(StorageAdapter):
    """
    Local key-value store backed by a single SQLite table.

    The whole task collection lives under one key, so every save is a single
    upsert inside one transaction.
    """

    name = "sqlite"

    def __init__(self, db_path: str, key: str = "tasks") -> None:
        self._db_path = db_path
        self._key = key
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as exc:
            raise StorageReadError(f"Cannot open SQLite store {db_path}: {exc}") from exc

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL
                )
                """
            )

    def load(self) -> Optional[str]:
        try:
            with self._conn() as conn:
                row = conn.execute(
                    f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?",
                    (self._key,),
                ).fetchone()
        except sqlite3.Error as exc:
            logger.error("Failed to read key %s from %s: %s", self._key, self._db_path, exc)
            raise StorageReadError(f"Cannot read {self._db_path}: {exc}") from exc
        return None if row is None else str(row[0])

    def save(self, raw: str) -> None:
        try:
            with self._conn() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value})
                    VALUES (?, ?)
                    ON CONFLICT({_COLS.key}) DO UPDATE SET {_COLS.value} = excluded.{_COLS.value}
                    """,
                    (self._key, raw),
                )
        except (sqlite3.Error, UnicodeError) as exc:
            logger.error("Failed to write key %s to %s: %s", self._key, self._db_path, exc)
            raise StorageWriteError(f"Cannot write {self._db_path}: {exc}") from exc
