"""Persistence bridge between the store and durable storage.

The whole collection of task lists is kept as one JSON document under a
single storage key:

    [{"id": 1, "name": "Groceries",
      "tasks": [{"id": 2, "text": "Milk", "completed": false,
                 "dueDate": "2024-01-05"}]}]

Edit state is never written; tasks always come back in viewing mode.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, List, Optional, Sequence, Tuple

from tasklists.models import Task, TaskList
from tasklists.storage import Storage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "taskLists"


class PersistedStateError(ValueError):
    """Raised when a persisted document does not have the expected shape."""


def serialize(task_lists: Sequence[TaskList]) -> str:
    """Serialize task lists to the JSON storage document."""
    return json.dumps(
        [
            {
                "id": task_list.id,
                "name": task_list.name,
                "tasks": [
                    {
                        "id": task.id,
                        "text": task.text,
                        "completed": task.completed,
                        "dueDate": task.due_date.isoformat() if task.due_date else None,
                    }
                    for task in task_list.tasks
                ],
            }
            for task_list in task_lists
        ]
    )


def parse_due_date(value: Any) -> Optional[date]:
    """Rehydrate a serialized due date.

    Accepts plain ISO dates ("2024-01-05") and full ISO timestamps such as
    "2024-01-05T00:00:00.000Z", keeping only the calendar date in the
    timestamp's own offset. Timestamps written in UTC by a client east of
    Greenwich therefore land on the previous day: "2024-01-04T23:00:00.000Z"
    loads as 2024-01-04 even if it was picked as January 5 in UTC+1.

    Raises:
        PersistedStateError: If the value is neither null nor a parseable string
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise PersistedStateError(f"dueDate must be a string or null, got {type(value).__name__}")
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value).date()
    except ValueError as e:
        raise PersistedStateError(f"Invalid dueDate {value!r}") from e


def _require(data: dict, key: str, kind: type, where: str) -> Any:
    if key not in data:
        raise PersistedStateError(f"{where} is missing '{key}'")
    value = data[key]
    # bool is an int subclass; ids must be real integers
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise PersistedStateError(f"{where} has invalid '{key}' of type {type(value).__name__}")
    return value


def _parse_task(data: Any) -> Task:
    if not isinstance(data, dict):
        raise PersistedStateError(f"Task entry must be an object, got {type(data).__name__}")
    completed = data.get("completed", False)
    if not isinstance(completed, bool):
        raise PersistedStateError(f"Task has invalid 'completed' of type {type(completed).__name__}")
    return Task(
        id=_require(data, "id", int, "Task"),
        text=_require(data, "text", str, "Task"),
        completed=completed,
        due_date=parse_due_date(data.get("dueDate")),
    )


def deserialize(text: str) -> Tuple[TaskList, ...]:
    """Parse a JSON storage document back into task lists.

    Raises:
        PersistedStateError: If the document is not valid JSON or does not
            have the expected shape
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise PersistedStateError(f"Stored task lists are not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise PersistedStateError("Stored task lists must be a JSON array")

    task_lists: List[TaskList] = []
    for entry in data:
        if not isinstance(entry, dict):
            raise PersistedStateError(f"Task list entry must be an object, got {type(entry).__name__}")
        tasks = _require(entry, "tasks", list, "Task list")
        task_lists.append(
            TaskList(
                id=_require(entry, "id", int, "Task list"),
                name=_require(entry, "name", str, "Task list"),
                tasks=tuple(_parse_task(task) for task in tasks),
            )
        )
    return tuple(task_lists)


class PersistenceBridge:
    """Loads task lists from storage and writes them back after changes.

    Attributes:
        storage: Key-value storage backend
        key: Storage key holding the serialized document
    """

    def __init__(self, storage: Storage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> Tuple[TaskList, ...]:
        """Load the persisted task lists.

        Returns:
            The stored task lists, or an empty tuple when nothing is stored
            or the stored document cannot be read.
        """
        raw = self.storage.get(self.key)
        if raw is None:
            logger.info("No stored task lists under %r", self.key)
            return ()
        try:
            task_lists = deserialize(raw)
        except PersistedStateError:
            logger.exception("Failed to parse task lists from storage key %r", self.key)
            return ()
        logger.info("Loaded %d task list(s) from %r", len(task_lists), self.key)
        return task_lists

    def persist(self, task_lists: Sequence[TaskList]) -> bool:
        """Write task lists to storage.

        An empty collection is never written, so a store that has not yet
        received the loaded data cannot clobber what is on disk.

        Returns:
            True if the collection was written, False if it was skipped
        """
        if not task_lists:
            logger.debug("Skipping persist of empty task list collection")
            return False
        self.storage.set(self.key, serialize(task_lists))
        logger.debug("Persisted %d task list(s) under %r", len(task_lists), self.key)
        return True
