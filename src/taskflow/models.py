from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Whitespace and line terminators as trimmed by browsers (String.prototype.trim).
# Differs from str.strip(): includes U+FEFF, excludes \x1c-\x1f and U+0085.
_TRIM_CHARS = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def trim_text(text: str) -> str:
    """Trim leading and trailing whitespace the way the browser client does."""
    return text.strip(_TRIM_CHARS)


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A single to-do item.

    Fields:
    - id: Opaque unique identifier, generated at creation and never changed
    - text: Non-empty, whitespace-trimmed label
    - done: Completion flag
    - created_at: Creation time in epoch milliseconds; serialized as
      ``createdAt`` and absent for tasks written by the legacy schema

    Tasks are frozen; toggling or completing produces an updated copy.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "0d6f4c1e-7d0c-4a5e-9a3b-2f1d8f0b6c11",
                "text": "Buy milk",
                "done": False,
                "createdAt": 1735689600000,
            }
        },
    )

    id: str = Field(..., min_length=1, description="Unique identifier of the task")
    text: str = Field(..., description="Task label, trimmed and non-empty")
    done: bool = Field(..., description="Completion status flag")
    created_at: Optional[int] = Field(
        default=None,
        alias="createdAt",
        description="Creation timestamp in epoch milliseconds",
    )

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """
        Strip whitespace and reject blank text.
        """
        s = trim_text(v)
        if not s:
            raise ValueError("text must not be blank")
        return s


# PUBLIC_INTERFACE
class TaskFilter(str, Enum):
    """View predicate over the task collection."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    def matches(self, task: Task) -> bool:
        if self is TaskFilter.ACTIVE:
            return not task.done
        if self is TaskFilter.COMPLETED:
            return task.done
        return True


# PUBLIC_INTERFACE
class TaskStats(BaseModel):
    """
    Aggregates derived from the current collection. Never persisted.
    """

    model_config = ConfigDict(frozen=True)

    total: int = Field(..., description="Number of tasks")
    completed: int = Field(..., description="Number of tasks marked done")
    remaining: int = Field(..., description="Number of tasks not yet done")
    progress: int = Field(..., description="Completed share as a whole percentage (0..100)")
