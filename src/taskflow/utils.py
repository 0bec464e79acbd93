from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .models import Task, TaskFilter, TaskStats

EMPTY_LIST_HINT = "No tasks yet. Start with one above."
EMPTY_FILTER_HINT = "No tasks in this filter."


# PUBLIC_INTERFACE
def board_envelope(
    items: Union[Sequence[Task], Iterable[Task]],
    task_filter: TaskFilter,
    stats: TaskStats,
) -> Dict[str, Any]:
    """
    Build the standard board envelope returned by task endpoints.

    Args:
        items: Tasks visible under task_filter.
        task_filter: The filter that produced items.
        stats: Statistics over the whole collection, not just items.

    Returns:
        Dict with keys: items, filter, stats, can_complete_all,
        can_clear_completed, empty_hint.
    """
    materialized: List[Task] = list(items) if not isinstance(items, list) else items
    hint: Optional[str] = None
    if not materialized:
        hint = EMPTY_LIST_HINT if stats.total == 0 else EMPTY_FILTER_HINT
    return {
        "items": materialized,
        "filter": task_filter,
        "stats": stats,
        "can_complete_all": stats.remaining > 0,
        "can_clear_completed": stats.completed > 0,
        "empty_hint": hint,
    }
