"""
TaskFlow task list package.

The core is :class:`taskflow.store.TaskListStore`; the FastAPI app lives in
``taskflow.main`` and is imported explicitly so the store can be used without
the web stack being configured.
"""

__version__ = "0.1.0"
