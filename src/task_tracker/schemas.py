from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .errors import ValidationError
from .models import DueDateInput, Priority, PriorityInput, Task, TaskDraft, TaskStats


def _parse_due_date(value: DueDateInput) -> date:
    """
    Normalize a due date input into a calendar date.
    - date: returned as-is
    - datetime: its calendar date, no time zone conversion
    - str: ISO 'YYYY-MM-DD' (surrounding whitespace ignored)
    """
    if value is None:
        raise ValueError("dueDate is required")

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("dueDate is required")
        try:
            return date.fromisoformat(s)
        except ValueError as e:
            raise ValueError(
                "Invalid dueDate format. Use an ISO date string (e.g., '2024-06-01')."
            ) from e

    raise ValueError("Invalid type for dueDate; expected date or ISO date string.")


def _encodable(value: str, field: str) -> str:
    # Lone surrogates survive str handling but cannot be written as UTF-8.
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError(f"{field} contains characters that cannot be stored") from e
    return value


class CleanDraft(BaseModel):
    """
    A validated draft. Built only through clean_draft().
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: date

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        """
        Strip whitespace; reject empty or whitespace-only titles.
        """
        if not isinstance(v, str) or not v.strip():
            raise ValueError("title is required")
        return _encodable(v.strip(), "title")

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("description must be text")
        return _encodable(v, "description")

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v: PriorityInput) -> Priority:
        if v is None:
            return Priority.MEDIUM
        if isinstance(v, Priority):
            return v
        if isinstance(v, str):
            try:
                return Priority(v.strip().lower())
            except ValueError:
                pass
        raise ValueError("priority must be one of: low, medium, high")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: DueDateInput) -> date:
        return _parse_due_date(v)


_FIELD_NAMES = {
    "title": "title",
    "description": "description",
    "priority": "priority",
    "due_date": "dueDate",
    "dueDate": "dueDate",
}


# PUBLIC_INTERFACE
def clean_draft(draft: TaskDraft) -> CleanDraft:
    """
    Validate a caller draft.

    Raises:
        ValidationError: for the first failing field, in the order
        title, description, priority, dueDate.
    """
    try:
        return CleanDraft.model_validate(
            {
                "title": draft.title,
                "description": draft.description,
                "priority": draft.priority,
                "dueDate": draft.due_date,
            }
        )
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        loc = str(first["loc"][0]) if first["loc"] else "draft"
        field = _FIELD_NAMES.get(loc, loc)
        message = str(first["msg"]).removeprefix("Value error, ")
        raise ValidationError(field, message) from exc


# PUBLIC_INTERFACE
class TaskIn(BaseModel):
    """
    Request body for creating or replacing a task.

    Fields are deliberately loose so that the core reports validation failures
    with its own field names.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Two litres",
                "priority": "low",
                "dueDate": "2024-06-01",
            }
        },
    )

    title: str = Field(default="", description="Short title for the task")
    description: Optional[str] = Field(default="", description="Optional detailed description")
    priority: Optional[str] = Field(default=None, description="low, medium (default) or high")
    due_date: Optional[str] = Field(default=None, description="Due date as YYYY-MM-DD")

    def to_draft(self) -> TaskDraft:
        return TaskDraft(
            title=self.title,
            description=self.description,
            priority=self.priority,
            due_date=self.due_date,
        )


# PUBLIC_INTERFACE
class TaskListOut(BaseModel):
    """
    Filtered view of the collection.
    """

    items: List[Task] = Field(..., description="Tasks matching the filter, in collection order")
    total: int = Field(..., description="Number of items in this view")
    filter: str = Field(..., description="Criterion applied")


# PUBLIC_INTERFACE
class TaskStatsOut(BaseModel):
    """
    Aggregate counts over the whole collection.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    total: int
    completed: int
    pending: int
    high_priority: int

    @classmethod
    def from_stats(cls, stats: TaskStats) -> "TaskStatsOut":
        return cls(
            total=stats.total,
            completed=stats.completed,
            pending=stats.pending,
            high_priority=stats.high_priority,
        )
