from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import Task, TaskFilter, TaskStats


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for submitting a new task. Blank text is accepted and ignored by the
    store, the same as submitting an empty input box.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"text": "Buy milk"}})

    text: str = Field(..., description="Text of the task to add; surrounding whitespace is trimmed")


# PUBLIC_INTERFACE
class BoardOut(BaseModel):
    """
    Schema returned by every task command: the visible tasks for the requested
    filter plus the derived statistics and the flags a client needs to render
    its controls.
    """

    items: List[Task] = Field(..., description="Tasks matching the filter, newest first")
    filter: TaskFilter = Field(..., description="Filter applied to items")
    stats: TaskStats = Field(..., description="Statistics over the whole collection")
    can_complete_all: bool = Field(..., description="True while any task remains open")
    can_clear_completed: bool = Field(..., description="True while any task is done")
    empty_hint: Optional[str] = Field(
        default=None, description="Message to show when items is empty, otherwise null"
    )
