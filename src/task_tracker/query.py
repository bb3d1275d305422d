from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Union

from .errors import InvalidCriterionError
from .models import Priority, Task, TaskStats, TaskStatus


class FilterCriterion(str, Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    HIGH_PRIORITY = "highPriority"

    @classmethod
    def parse(cls, value: Union["FilterCriterion", str]) -> "FilterCriterion":
        """
        Resolve a criterion value. 'high' is accepted as an alias of 'highPriority'.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value == "high":
                return cls.HIGH_PRIORITY
            try:
                return cls(value)
            except ValueError:
                pass
        raise InvalidCriterionError(value)


def _matches(task: Task, criterion: FilterCriterion) -> bool:
    if criterion is FilterCriterion.PENDING:
        return task.status is TaskStatus.PENDING
    if criterion is FilterCriterion.COMPLETED:
        return task.status is TaskStatus.COMPLETED
    if criterion is FilterCriterion.HIGH_PRIORITY:
        return task.priority is Priority.HIGH
    return True


# PUBLIC_INTERFACE
def filter_tasks(
    tasks: Iterable[Task], criterion: Union[FilterCriterion, str] = FilterCriterion.ALL
) -> List[Task]:
    """
    Return the tasks matching criterion, in their original order.

    Raises:
        InvalidCriterionError: criterion is not one of all, pending, completed, highPriority.
    """
    resolved = FilterCriterion.parse(criterion)
    return [t for t in tasks if _matches(t, resolved)]


# PUBLIC_INTERFACE
def stats(tasks: Iterable[Task]) -> TaskStats:
    """Count total, completed, pending and high priority tasks in one pass."""
    total = completed = pending = high = 0
    for t in tasks:
        total += 1
        if t.status is TaskStatus.COMPLETED:
            completed += 1
        else:
            pending += 1
        if t.priority is Priority.HIGH:
            high += 1
    return TaskStats(total=total, completed=completed, pending=pending, high_priority=high)
