from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..models import TaskFilter, TaskStats
from ..schemas import BoardOut, TaskCreate
from ..store import TaskListStore, get_store
from ..utils import board_envelope

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)


def _get_store(store: TaskListStore = Depends(get_store)) -> TaskListStore:
    """
    Dependency wrapper for the store to keep signatures clean.
    """
    return store


def _board(store: TaskListStore, task_filter: TaskFilter) -> BoardOut:
    envelope = board_envelope(
        items=store.visible(task_filter),
        task_filter=task_filter,
        stats=store.stats(),
    )
    return BoardOut(**envelope)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=BoardOut,
    summary="List Tasks",
    description="Return the tasks visible under the filter, newest first, with statistics.",
)
def list_tasks(
    filter: TaskFilter = Query(TaskFilter.ALL, description="Which tasks to return: all, active or completed"),
    store: TaskListStore = Depends(_get_store),
) -> BoardOut:
    """
    Read the board without changing anything.
    """
    return _board(store, filter)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=BoardOut,
    summary="Add Task",
    description="Prepend a new open task. Blank text leaves the board unchanged.",
)
def add_task(
    payload: TaskCreate,
    filter: TaskFilter = Query(TaskFilter.ALL, description="Which tasks to return: all, active or completed"),
    store: TaskListStore = Depends(_get_store),
) -> BoardOut:
    """
    Add a task from submitted text.
    """
    store.add(payload.text)
    return _board(store, filter)


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=TaskStats,
    summary="Task Statistics",
    description="Total, completed, remaining and progress percentage over all tasks.",
)
def task_stats(store: TaskListStore = Depends(_get_store)) -> TaskStats:
    return store.stats()


# PUBLIC_INTERFACE
@router.post(
    "/clear-completed",
    response_model=BoardOut,
    summary="Clear Completed",
    description="Remove every task marked done.",
)
def clear_completed(
    filter: TaskFilter = Query(TaskFilter.ALL, description="Which tasks to return: all, active or completed"),
    store: TaskListStore = Depends(_get_store),
) -> BoardOut:
    store.clear_completed()
    return _board(store, filter)


# PUBLIC_INTERFACE
@router.post(
    "/complete-all",
    response_model=BoardOut,
    summary="Complete All",
    description="Mark every task as done.",
)
def complete_all(
    filter: TaskFilter = Query(TaskFilter.ALL, description="Which tasks to return: all, active or completed"),
    store: TaskListStore = Depends(_get_store),
) -> BoardOut:
    store.complete_all()
    return _board(store, filter)


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=BoardOut,
    summary="Toggle Task",
    description="Flip the done flag of a task. Unknown ids leave the board unchanged.",
)
def toggle_task(
    task_id: str,
    filter: TaskFilter = Query(TaskFilter.ALL, description="Which tasks to return: all, active or completed"),
    store: TaskListStore = Depends(_get_store),
) -> BoardOut:
    store.toggle(task_id)
    return _board(store, filter)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=BoardOut,
    summary="Delete Task",
    description="Remove a task. Unknown ids leave the board unchanged.",
)
def delete_task(
    task_id: str,
    filter: TaskFilter = Query(TaskFilter.ALL, description="Which tasks to return: all, active or completed"),
    store: TaskListStore = Depends(_get_store),
) -> BoardOut:
    store.delete(task_id)
    return _board(store, filter)
