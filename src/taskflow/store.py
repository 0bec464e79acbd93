from __future__ import annotations

import logging
import math
import time
from threading import Lock, RLock
from typing import Callable, List, Optional, Union
from uuid import uuid4

from .models import Task, TaskFilter, TaskStats, trim_text
from .settings import DEFAULT_STORAGE_KEY, get_settings
from .snapshot import MalformedSnapshotError, decode_snapshot, encode_snapshot
from .storage import SnapshotStorage, get_snapshot_storage

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid4())


def _now_ms() -> int:
    return int(time.time() * 1000)


def _progress(completed: int, total: int) -> int:
    if total == 0:
        return 0
    # Half rounds up, as in the browser client.
    return int(math.floor(completed / total * 100 + 0.5))


# PUBLIC_INTERFACE
class TaskListStore:
    """
    Ordered task collection kept in sync with a persisted snapshot.

    The collection is newest first. Every command except a blank ``add``
    rewrites the snapshot, whether or not anything changed. Call ``load``
    once before issuing commands.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        key: str = DEFAULT_STORAGE_KEY,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._id_factory = id_factory or _new_id
        self._clock = clock or _now_ms
        self._lock = RLock()
        self._tasks: List[Task] = []

    @property
    def tasks(self) -> List[Task]:
        with self._lock:
            return list(self._tasks)

    def load(self) -> List[Task]:
        """
        Replace the collection with the persisted snapshot.

        A missing snapshot yields an empty collection. A malformed one is
        discarded and also yields an empty collection; the bad value stays in
        storage until the next command overwrites it.
        """
        with self._lock:
            raw = self._storage.get_item(self._key)
            if not raw:
                self._tasks = []
                return []
            try:
                self._tasks = decode_snapshot(raw)
            except MalformedSnapshotError as e:
                logger.debug("discarding snapshot %r: %s", self._key, e)
                self._tasks = []
            else:
                logger.debug("loaded %d task(s) from %r", len(self._tasks), self._key)
            return list(self._tasks)

    def persist(self) -> None:
        with self._lock:
            self._storage.set_item(self._key, encode_snapshot(self._tasks))

    def add(self, text: str) -> Optional[Task]:
        """Prepend a new open task. Blank text is ignored and returns None."""
        trimmed = trim_text(text)
        if not trimmed:
            return None
        task = Task(id=self._id_factory(), text=trimmed, done=False, created_at=self._clock())
        with self._lock:
            self._tasks.insert(0, task)
            self.persist()
        return task

    def toggle(self, task_id: str) -> None:
        with self._lock:
            self._tasks = [
                t.model_copy(update={"done": not t.done}) if t.id == task_id else t for t in self._tasks
            ]
            self.persist()

    def delete(self, task_id: str) -> None:
        with self._lock:
            self._tasks = [t for t in self._tasks if t.id != task_id]
            self.persist()

    def clear_completed(self) -> None:
        with self._lock:
            self._tasks = [t for t in self._tasks if not t.done]
            self.persist()

    def complete_all(self) -> None:
        with self._lock:
            self._tasks = [t if t.done else t.model_copy(update={"done": True}) for t in self._tasks]
            self.persist()

    def visible(self, task_filter: Union[TaskFilter, str] = TaskFilter.ALL) -> List[Task]:
        """
        Return the tasks matching the filter in collection order.

        Raises:
            ValueError: if task_filter is not 'all', 'active' or 'completed'.
        """
        predicate = TaskFilter(task_filter)
        with self._lock:
            return [t for t in self._tasks if predicate.matches(t)]

    def stats(self) -> TaskStats:
        with self._lock:
            total = len(self._tasks)
            completed = sum(1 for t in self._tasks if t.done)
        return TaskStats(
            total=total,
            completed=completed,
            remaining=total - completed,
            progress=_progress(completed, total),
        )


_default_store: Optional[TaskListStore] = None
_default_store_lock = Lock()


# PUBLIC_INTERFACE
def get_store() -> TaskListStore:
    """
    Return the process-wide store, built from settings and loaded on first use.

    The first build happens under a lock; every caller, from any worker
    thread, gets the same instance.
    """
    global _default_store
    store = _default_store
    if store is not None:
        return store
    with _default_store_lock:
        if _default_store is None:
            settings = get_settings()
            built = TaskListStore(get_snapshot_storage(settings), key=settings.storage_key)
            built.load()
            _default_store = built
        return _default_store
