from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> "TaskStatus":
        return TaskStatus.COMPLETED if self is TaskStatus.PENDING else TaskStatus.PENDING


# Raw caller input accepted for draft fields; normalized by schemas.clean_draft
DueDateInput = Union[date, datetime, str, None]
PriorityInput = Union[Priority, str, None]


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A single to-do item.

    Instances are immutable; the store replaces a task with an updated copy on
    every mutation. Field names serialize in camelCase (dueDate, createdAt,
    updatedAt) which is the persisted record format.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        json_schema_extra={
            "example": {
                "id": "5f0c6c1d2b7e4d1fa3c0a9b8e7d6c5b4",
                "title": "Buy milk",
                "description": "Two litres, semi-skimmed",
                "priority": "low",
                "dueDate": "2024-06-01",
                "status": "pending",
                "createdAt": "2024-05-30T10:15:30.123456Z",
                "updatedAt": "2024-05-30T10:15:30.123456Z",
            }
        },
    )

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    title: str = Field(..., description="Short title, never empty")
    description: str = Field(default="", description="Optional longer description")
    priority: Priority = Field(default=Priority.MEDIUM, description="low, medium or high")
    due_date: date = Field(..., description="Calendar due date")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="pending or completed")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last mutation timestamp (UTC)")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be empty")
        return v

    @model_validator(mode="after")
    def check_timestamps(self) -> "Task":
        if self.created_at > self.updated_at:
            raise ValueError("createdAt must not be later than updatedAt")
        return self


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskDraft:
    """
    Caller-supplied fields for create/update.

    Values are taken as given and validated by the store, so a draft with an
    empty title or a bad due date can be constructed and is rejected only when
    it is applied.
    """

    title: str = ""
    description: Optional[str] = ""
    priority: PriorityInput = Priority.MEDIUM
    due_date: DueDateInput = None


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskStats:
    """Aggregate counts over a full task collection."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    high_priority: int = 0
