from __future__ import annotations

from typing import List, Sequence

from pydantic import TypeAdapter, ValidationError

from .models import Task

_TASK_LIST = TypeAdapter(List[Task])


class MalformedSnapshotError(ValueError):
    """Raised when a persisted snapshot is not a JSON array of tasks."""


# PUBLIC_INTERFACE
def encode_snapshot(tasks: Sequence[Task]) -> str:
    """
    Serialize tasks into the persisted snapshot format: a compact JSON array
    of ``{id, text, done, createdAt?}`` objects. ``createdAt`` is omitted when
    unknown.
    """
    return _TASK_LIST.dump_json(list(tasks), by_alias=True, exclude_none=True).decode("utf-8")


# PUBLIC_INTERFACE
def decode_snapshot(raw: str) -> List[Task]:
    """
    Parse a persisted snapshot.

    Both the current schema and the legacy one without ``createdAt`` are
    accepted; unknown fields are ignored.

    Raises:
        MalformedSnapshotError: invalid JSON, a non-array document, an element
        missing ``id``/``text``/``done`` or of the wrong type, blank text, or
        duplicate ids.
    """
    try:
        tasks = _TASK_LIST.validate_json(raw)
    except ValidationError as e:
        raise MalformedSnapshotError(f"snapshot does not match task list shape: {e.error_count()} error(s)") from e

    seen = set()
    for task in tasks:
        if task.id in seen:
            raise MalformedSnapshotError(f"duplicate task id in snapshot: {task.id!r}")
        seen.add(task.id)
    return tasks
