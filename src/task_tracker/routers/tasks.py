from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from ..models import Task
from ..query import filter_tasks, stats
from ..schemas import TaskIn, TaskListOut, TaskStatsOut
from ..store import TaskStore, get_task_store

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)

_NOT_FOUND = {"description": "Task not found"}
_INVALID = {"description": "Validation error"}


def _get_store(store: TaskStore = Depends(get_task_store)) -> TaskStore:
    """
    Dependency wrapper for the task store to keep signatures clean.
    """
    return store


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=Task,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Validate the draft, append a new pending task and return it.",
    responses={201: {"description": "Task created"}, 422: _INVALID},
)
def create_task(payload: TaskIn, store: TaskStore = Depends(_get_store)) -> Task:
    return store.create(payload.to_draft())


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TaskListOut,
    summary="List Tasks",
    description=(
        "List tasks in insertion order, optionally filtered.\n\n"
        "Query parameters:\n"
        "- filter: one of all (default), pending, completed, highPriority"
    ),
    responses={400: {"description": "Unsupported filter"}},
)
def list_tasks(
    criterion: str = Query("all", alias="filter", description="all, pending, completed or highPriority"),
    store: TaskStore = Depends(_get_store),
) -> TaskListOut:
    items = filter_tasks(store.list(), criterion)
    return TaskListOut(items=items, total=len(items), filter=criterion)


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=TaskStatsOut,
    summary="Task Statistics",
    description="Total, completed, pending and high priority counts over the whole collection.",
)
def task_stats(store: TaskStore = Depends(_get_store)) -> TaskStatsOut:
    return TaskStatsOut.from_stats(stats(store.list()))


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=Task,
    summary="Get Task",
    responses={404: _NOT_FOUND},
)
def get_task(task_id: str, store: TaskStore = Depends(_get_store)) -> Task:
    return store.get(task_id)


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=Task,
    summary="Update Task",
    description="Replace title, description, priority and due date. Status and id are kept.",
    responses={404: _NOT_FOUND, 422: _INVALID},
)
def update_task(task_id: str, payload: TaskIn, store: TaskStore = Depends(_get_store)) -> Task:
    return store.update(task_id, payload.to_draft())


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=Task,
    summary="Toggle Task Status",
    description="Flip the task between pending and completed.",
    responses={404: _NOT_FOUND},
)
def toggle_task(task_id: str, store: TaskStore = Depends(_get_store)) -> Task:
    return store.toggle_status(task_id)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete Task",
    responses={204: {"description": "Task deleted"}, 404: _NOT_FOUND},
)
def delete_task(task_id: str, store: TaskStore = Depends(_get_store)) -> None:
    store.delete(task_id)
