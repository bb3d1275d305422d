"""
Raw state encoding for the task collection.

The persisted value is a JSON array of task records using the camelCase
field names of Task (id, title, description, priority, dueDate, status,
createdAt, updatedAt). Every record must carry all of them.
"""
from __future__ import annotations

import json
from typing import List, Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import CorruptStateError
from .models import Task

_TASK_LIST = TypeAdapter(List[Task])

RECORD_FIELDS = frozenset(
    f.alias or name for name, f in Task.model_fields.items()
)


# PUBLIC_INTERFACE
def serialize(tasks: Sequence[Task]) -> str:
    """Encode the full collection as JSON text, preserving order."""
    records = [t.model_dump(mode="json", by_alias=True) for t in tasks]
    return json.dumps(records, ensure_ascii=False)


# PUBLIC_INTERFACE
def deserialize(raw: str) -> List[Task]:
    """
    Decode JSON text produced by serialize().

    Records are validated in strict mode: no field is defaulted and no value
    is coerced (an integer dueDate or timestamp is rejected, not read as epoch
    seconds).

    Raises:
        CorruptStateError: if the text is not JSON, is not an array, contains a
        record that is not a complete valid task, or repeats an id.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise CorruptStateError(f"Persisted tasks are not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise CorruptStateError(
            f"Persisted tasks must be a JSON array, got {type(data).__name__}"
        )

    for i, record in enumerate(data):
        if not isinstance(record, dict):
            raise CorruptStateError(f"Persisted task #{i} is not an object")
        missing = RECORD_FIELDS - record.keys()
        if missing:
            raise CorruptStateError(
                f"Persisted task #{i} is missing fields: {', '.join(sorted(missing))}"
            )

    try:
        tasks = _TASK_LIST.validate_json(raw, strict=True)
    except PydanticValidationError as exc:
        raise CorruptStateError(f"Persisted tasks failed validation: {exc}") from exc

    seen: set[str] = set()
    for task in tasks:
        if task.id in seen:
            raise CorruptStateError(f"Duplicate task id in persisted state: {task.id}")
        seen.add(task.id)
    return tasks
