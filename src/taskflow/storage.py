from __future__ import annotations

from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Mapping, Optional

from .settings import Settings, get_settings


# PUBLIC_INTERFACE
class SnapshotStorage(ABC):
    """
    Abstract local key-value store holding serialized snapshots, modelled on
    browser local storage: string keys, string values, whole-value overwrite.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""


class InMemorySnapshotStorage(SnapshotStorage):
    """
    Thread-safe in-memory storage suitable for testing and default runtime.
    """

    def __init__(self, items: Optional[Mapping[str, str]] = None) -> None:
        self._lock = RLock()
        self._items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value


# PUBLIC_INTERFACE
def get_snapshot_storage(settings: Optional[Settings] = None) -> SnapshotStorage:
    """
    Factory to return the configured snapshot storage based on settings.
    - memory: InMemorySnapshotStorage
    - sqlite: SQLiteSnapshotStorage backed by settings.sqlite_db_path
    """
    settings = settings or get_settings()
    if settings.storage_backend == "sqlite":
        from .db import SQLiteSnapshotStorage

        return SQLiteSnapshotStorage(settings.sqlite_db_path)
    return InMemorySnapshotStorage()
