from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

DEFAULT_STORAGE_KEY = "todos-v2"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - TASKFLOW_STORAGE_BACKEND: 'memory' (default) or 'sqlite'
    - TASKFLOW_SQLITE_PATH: path to the sqlite key-value file. Default './data/taskflow.db'
    - TASKFLOW_STORAGE_KEY: key the task snapshot is stored under. Default 'todos-v2'
    - TASKFLOW_LOG_LEVEL: logging level name for the app. Default 'INFO'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    """

    storage_backend: str
    sqlite_db_path: str
    storage_key: str
    log_level: str
    cors_allow_origins: List[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if isinstance(logging.getLevelName(level), int):
        return level
    return "INFO"


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("TASKFLOW_STORAGE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        backend = "memory"

    return Settings(
        storage_backend=backend,
        sqlite_db_path=_get_env("TASKFLOW_SQLITE_PATH", "./data/taskflow.db").strip(),
        storage_key=_get_env("TASKFLOW_STORAGE_KEY", DEFAULT_STORAGE_KEY).strip(),
        log_level=_parse_log_level(_get_env("TASKFLOW_LOG_LEVEL", "INFO")),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
    )
