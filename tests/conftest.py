# tests/conftest.py

from __future__ import annotations

import os

import pytest

# The app reads settings at import time; never touch ./data from tests.
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from task_tracker.store import TaskStore  # noqa: E402

from .fakes import FlakyStorage, StepClock  # noqa: E402


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture()
def store(storage: FlakyStorage, clock: StepClock) -> TaskStore:
    """
    Fresh store over in-memory storage with a deterministic clock.
    """
    return TaskStore(storage, clock=clock)
