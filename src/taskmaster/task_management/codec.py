"""JSON encoding of the task collection.

Field names are part of the persisted layout and must stay stable:
``id, title, description, dueDate, isCompleted, priority, category,
reminderEnabled``. Every field except ``id``, ``title`` and ``dueDate`` is
optional on decode so blobs written before a field existed still load.
"""

import json
import math
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from .config import APPLE_REFERENCE_DATE
from .exceptions import DecodeError, EncodeError
from .models import Task, TaskCategory, TaskPriority, to_local_naive


def task_to_dict(task: Task) -> dict[str, Any]:
    """
    Convert a task to its JSON-ready form.

    Raises:
        EncodeError: If the task has no id or an invalid due date
    """
    if task.id is None:
        raise EncodeError(f"Cannot encode task without an id: {task.title!r}")
    if not isinstance(task.due_date, datetime):
        raise EncodeError(f"Task {task.id} has invalid due date {task.due_date!r}")

    return {
        "id": str(task.id),
        "title": task.title,
        "description": task.description,
        "dueDate": task.due_date.isoformat(),
        "isCompleted": task.is_completed,
        "priority": TaskPriority(task.priority).value,
        "category": TaskCategory(task.category).value,
        "reminderEnabled": task.reminder_enabled,
    }


def encode_tasks(tasks: list[Task] | tuple[Task, ...]) -> bytes:
    """
    Serialize a task sequence to UTF-8 JSON bytes.

    Raises:
        EncodeError: If any task cannot be serialized
    """
    try:
        payload = [task_to_dict(task) for task in tasks]
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")
    except EncodeError:
        raise
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Failed to encode tasks: {e}") from e


def _require(raw: dict[str, Any], key: str, expected: type) -> Any:
    if key not in raw:
        raise DecodeError(f"Missing required field {key!r}")
    value = raw[key]
    if not isinstance(value, expected):
        raise DecodeError(f"Field {key!r} has unexpected type {type(value).__name__}")
    return value


def _optional(raw: dict[str, Any], key: str, expected: type, default: Any) -> Any:
    value = raw.get(key, default)
    if value is None:
        return default
    if not isinstance(value, expected):
        raise DecodeError(f"Field {key!r} has unexpected type {type(value).__name__}")
    return value


def _parse_due_date(value: Any) -> datetime:
    # bool is an int subclass and never a valid timestamp
    if isinstance(value, bool):
        raise DecodeError("Field 'dueDate' has unexpected type bool")
    if isinstance(value, (int, float)):
        try:
            if not math.isfinite(value):
                raise DecodeError(f"Invalid dueDate {value!r}")
            moment = APPLE_REFERENCE_DATE + timedelta(seconds=value)
            return to_local_naive(moment)
        except (OverflowError, ValueError) as e:
            raise DecodeError(f"dueDate {value!r} is out of range") from e
    if isinstance(value, str):
        try:
            return to_local_naive(datetime.fromisoformat(value))
        except (OverflowError, ValueError) as e:
            raise DecodeError(f"Invalid dueDate {value!r}") from e
    raise DecodeError(f"Field 'dueDate' has unexpected type {type(value).__name__}")


def task_from_dict(raw: Any) -> Task:
    """
    Build a task from its decoded JSON form.

    Raises:
        DecodeError: If required fields are missing or any field is invalid
    """
    if not isinstance(raw, dict):
        raise DecodeError(f"Task record must be an object, got {type(raw).__name__}")

    try:
        task_id = UUID(_require(raw, "id", str))
    except ValueError as e:
        raise DecodeError(f"Invalid task id {raw.get('id')!r}") from e

    if "dueDate" not in raw:
        raise DecodeError("Missing required field 'dueDate'")

    try:
        priority = TaskPriority(_optional(raw, "priority", str, TaskPriority.MEDIUM.value))
        category = TaskCategory(_optional(raw, "category", str, TaskCategory.PERSONAL.value))
    except ValueError as e:
        raise DecodeError(str(e)) from e

    return Task(
        id=task_id,
        title=_require(raw, "title", str),
        description=_optional(raw, "description", str, ""),
        due_date=_parse_due_date(raw["dueDate"]),
        is_completed=_optional(raw, "isCompleted", bool, False),
        priority=priority,
        category=category,
        reminder_enabled=_optional(raw, "reminderEnabled", bool, False),
    )


def decode_tasks(blob: bytes) -> list[Task]:
    """
    Deserialize a task sequence from JSON bytes.

    Raises:
        DecodeError: If the blob is not a JSON array of valid task records
    """
    try:
        data = json.loads(blob)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"Stored tasks are not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise DecodeError(f"Stored tasks must be a list, got {type(data).__name__}")

    return [task_from_dict(raw) for raw in data]
