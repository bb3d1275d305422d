from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from task_tracker.codec import deserialize
from task_tracker.errors import (
    CorruptStateError,
    NotFoundError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from task_tracker.models import Priority, TaskDraft, TaskStatus
from task_tracker.query import filter_tasks
from task_tracker.storage import InMemoryStorage
from task_tracker.store import TaskStore

from .fakes import FlakyStorage, StepClock


def draft(title="Buy milk", due_date="2024-06-01", priority="low", description=""):
    return TaskDraft(title=title, description=description, priority=priority, due_date=due_date)


class TestInitialization:
    def test_no_prior_state_starts_empty(self):
        store = TaskStore(InMemoryStorage())
        assert store.list() == []

    def test_restores_persisted_collection(self, store, storage, clock):
        a = store.create(draft(title="A"))
        b = store.create(draft(title="B"))

        reopened = TaskStore(storage, clock=clock)
        assert reopened.list() == [a, b]

    def test_corrupt_state_is_fatal(self):
        with pytest.raises(CorruptStateError):
            TaskStore(InMemoryStorage("{not json"))

    def test_read_failure_propagates(self):
        storage = FlakyStorage()
        storage.fail_reads = True
        with pytest.raises(StorageReadError):
            TaskStore(storage)


class TestCreate:
    def test_buy_milk_scenario(self, store):
        task = store.create(draft())
        assert task.status is TaskStatus.PENDING
        assert task.priority is Priority.LOW
        assert task.due_date == date(2024, 6, 1)
        assert task in filter_tasks(store.list(), "pending")

        toggled = store.toggle_status(task.id)
        assert toggled.status is TaskStatus.COMPLETED
        assert any(t.id == task.id for t in filter_tasks(store.list(), "completed"))
        assert all(t.id != task.id for t in filter_tasks(store.list(), "pending"))

    def test_new_task_fields(self, store):
        task = store.create(draft(title="  Write report  ", description="Q2", priority="HIGH"))
        assert task.title == "Write report"
        assert task.description == "Q2"
        assert task.priority is Priority.HIGH
        assert task.created_at == task.updated_at
        assert task.created_at.tzinfo is not None

    def test_ids_are_unique_and_order_is_insertion(self, store):
        created = [store.create(draft(title=f"T{i}")) for i in range(20)]
        ids = [t.id for t in created]
        assert len(set(ids)) == len(ids)
        assert [t.id for t in store.list()] == ids

    def test_priority_defaults_to_medium(self, store):
        assert store.create(TaskDraft(title="x", due_date="2024-06-01")).priority is Priority.MEDIUM
        assert store.create(draft(priority=None)).priority is Priority.MEDIUM

    def test_accepts_date_and_datetime(self, store):
        assert store.create(draft(due_date=date(2024, 7, 4))).due_date == date(2024, 7, 4)
        late = datetime(2024, 7, 4, 23, 30, tzinfo=timezone.utc)
        assert store.create(draft(due_date=late)).due_date == date(2024, 7, 4)

    def test_none_description_stored_empty(self, store):
        assert store.create(draft(description=None)).description == ""

    @pytest.mark.parametrize("title", ["", "   ", "\n\t"])
    def test_empty_title_rejected(self, store, storage, title):
        with pytest.raises(ValidationError) as excinfo:
            store.create(draft(title=title))
        assert excinfo.value.field == "title"
        assert store.list() == []
        assert storage.load() is None

    @pytest.mark.parametrize("due", [None, "", "  ", "not-a-date", "2024-13-01", 20240601])
    def test_bad_due_date_rejected(self, store, due):
        with pytest.raises(ValidationError) as excinfo:
            store.create(draft(due_date=due))
        assert excinfo.value.field == "dueDate"
        assert store.list() == []

    def test_title_checked_before_due_date(self, store):
        with pytest.raises(ValidationError) as excinfo:
            store.create(TaskDraft(title=""))
        assert excinfo.value.field == "title"

    @pytest.mark.parametrize(
        "field, overrides",
        [("title", {"title": "Buy \ud800milk"}), ("description", {"description": "\udfff"})],
    )
    def test_unencodable_text_rejected(self, store, storage, field, overrides):
        with pytest.raises(ValidationError) as excinfo:
            store.create(draft(**overrides))
        assert excinfo.value.field == field
        assert store.list() == []
        assert storage.load() is None

    def test_unknown_priority_rejected(self, store):
        with pytest.raises(ValidationError) as excinfo:
            store.create(draft(priority="urgent"))
        assert excinfo.value.field == "priority"

    def test_write_failure_leaves_collection_unchanged(self, store, storage):
        store.create(draft(title="kept"))
        before = storage.load()
        storage.fail_writes = True
        with pytest.raises(StorageWriteError):
            store.create(draft(title="lost"))
        assert [t.title for t in store.list()] == ["kept"]
        assert storage.load() == before

    def test_id_collisions_are_retried(self, storage, clock):
        ids = iter(["a", "a", "b"])
        store = TaskStore(storage, clock=clock, id_factory=lambda: next(ids))
        assert store.create(draft()).id == "a"
        assert store.create(draft()).id == "b"


class TestUpdate:
    def test_replaces_fields_in_place(self, store):
        first = store.create(draft(title="first"))
        second = store.create(draft(title="second"))
        third = store.create(draft(title="third"))
        store.toggle_status(second.id)

        updated = store.update(
            second.id, draft(title="changed", description="d", priority="high", due_date="2025-01-31")
        )
        assert updated.id == second.id
        assert updated.status is TaskStatus.COMPLETED
        assert updated.title == "changed"
        assert updated.description == "d"
        assert updated.priority is Priority.HIGH
        assert updated.due_date == date(2025, 1, 31)
        assert updated.created_at == second.created_at
        assert updated.updated_at > second.updated_at
        assert [t.id for t in store.list()] == [first.id, second.id, third.id]
        assert store.get(second.id) == updated

    def test_unknown_id(self, store):
        with pytest.raises(NotFoundError) as excinfo:
            store.update("missing", draft())
        assert excinfo.value.task_id == "missing"

    def test_empty_title_rejected_and_unchanged(self, store, storage):
        task = store.create(draft())
        before = storage.load()
        with pytest.raises(ValidationError) as excinfo:
            store.update(task.id, draft(title=" "))
        assert excinfo.value.field == "title"
        assert store.list() == [task]
        assert storage.load() == before

    def test_unencodable_title_rejected_and_unchanged(self, store, storage):
        task = store.create(draft())
        before = storage.load()
        with pytest.raises(ValidationError) as excinfo:
            store.update(task.id, draft(title="\ud83d"))
        assert excinfo.value.field == "title"
        assert store.list() == [task]
        assert storage.load() == before

    def test_missing_due_date_rejected(self, store):
        task = store.create(draft())
        with pytest.raises(ValidationError) as excinfo:
            store.update(task.id, draft(due_date=None))
        assert excinfo.value.field == "dueDate"
        assert store.get(task.id) == task


class TestToggle:
    def test_toggle_twice_restores_status_and_advances_timestamp(self, store):
        task = store.create(draft())
        once = store.toggle_status(task.id)
        twice = store.toggle_status(task.id)
        assert once.status is TaskStatus.COMPLETED
        assert twice.status is TaskStatus.PENDING
        assert task.updated_at < once.updated_at < twice.updated_at
        assert twice.created_at == task.created_at

    def test_updated_at_advances_with_frozen_clock(self, storage):
        frozen = datetime(2024, 1, 1, tzinfo=timezone.utc)
        store = TaskStore(storage, clock=lambda: frozen)
        task = store.create(draft())
        once = store.toggle_status(task.id)
        twice = store.toggle_status(task.id)
        assert task.updated_at < once.updated_at < twice.updated_at

    def test_unknown_id(self, store):
        store.create(draft())
        with pytest.raises(NotFoundError):
            store.toggle_status("missing")

    def test_persists_each_toggle(self, store, storage):
        task = store.create(draft())
        store.toggle_status(task.id)
        assert deserialize(storage.load())[0].status is TaskStatus.COMPLETED


class TestDelete:
    def test_removes_without_reordering(self, store, storage, clock):
        a, b, c = (store.create(draft(title=t)) for t in "abc")
        assert store.delete(b.id) is None
        assert store.list() == [a, c]
        assert TaskStore(storage, clock=clock).list() == [a, c]
        with pytest.raises(NotFoundError):
            store.get(b.id)

    def test_unknown_id_leaves_persisted_bytes_unchanged(self, store, storage):
        store.create(draft())
        before = storage.load()
        saves = storage.saves
        with pytest.raises(NotFoundError):
            store.delete("missing")
        assert storage.load() == before
        assert storage.saves == saves

    def test_write_failure_keeps_task(self, store, storage):
        task = store.create(draft())
        storage.fail_writes = True
        with pytest.raises(StorageWriteError):
            store.delete(task.id)
        assert store.list() == [task]


class TestList:
    def test_returns_a_copy(self, store):
        store.create(draft())
        snapshot = store.list()
        snapshot.clear()
        assert len(store.list()) == 1

    def test_reload_picks_up_external_writes(self, store, storage):
        other = TaskStore(storage, clock=StepClock())
        other.create(draft(title="from elsewhere"))
        assert store.list() == []
        store.reload()
        assert [t.title for t in store.list()] == ["from elsewhere"]

    def test_reload_keeps_collection_on_corrupt_state(self, store, storage):
        task = store.create(draft())
        storage.save("[1, 2, 3]")
        with pytest.raises(CorruptStateError):
            store.reload()
        assert store.list() == [task]
