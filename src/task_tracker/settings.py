from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

_BACKENDS = {"memory", "file", "sqlite"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'file' (default), 'sqlite' or 'memory'
    - TASKS_FILE_PATH: JSON file for the 'file' backend. Default './data/tasks.json'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - STORAGE_KEY: key the collection is stored under in sqlite. Default 'tasks'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: console log level name. Default 'INFO'
    - LOG_FILE: optional path of a full DEBUG log file
    - HOST / PORT: bind address for the local API server. Default 127.0.0.1:8000
    """

    persistence_backend: str
    tasks_file_path: str
    sqlite_db_path: str
    storage_key: str
    cors_allow_origins: List[str]
    log_level: str
    log_file: Optional[str]
    host: str
    port: int


def _env(name: str, default: str) -> str:
    """Stripped value of an env var; unset or blank means default."""
    value = (os.getenv(name) or "").strip()
    return value or default


def _env_int(name: str, default: int) -> int:
    try:
        return int(_env(name, str(default)))
    except ValueError:
        logger.warning("Ignoring non-integer %s, using %d", name, default)
        return default


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _env("PERSISTENCE_BACKEND", "file").lower()
    if backend not in _BACKENDS:
        logger.warning("Unsupported PERSISTENCE_BACKEND=%r, using 'file'", backend)
        backend = "file"

    return Settings(
        persistence_backend=backend,
        tasks_file_path=_env("TASKS_FILE_PATH", "./data/tasks.json"),
        sqlite_db_path=_env("SQLITE_DB_PATH", "./data/tasks.db"),
        storage_key=_env("STORAGE_KEY", "tasks"),
        cors_allow_origins=_csv(_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        log_file=_env("LOG_FILE", "") or None,
        host=_env("HOST", "127.0.0.1"),
        port=_env_int("PORT", 8000),
    )
