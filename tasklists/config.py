"""Settings for tasklists, loaded from environment variables."""

import logging
import os
from dataclasses import dataclass

from tasklists.persistence import DEFAULT_STORAGE_KEY
from tasklists.storage import DEFAULT_DB_PATH

DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Env vars:
    - TASKLISTS_DB_PATH: JSON storage file. Default 'tasklists.json'
    - TASKLISTS_STORAGE_KEY: key holding the task lists. Default 'taskLists'
    - TASKLISTS_LOG_LEVEL: console log level name. Default 'WARNING'
    """

    db_path: str
    storage_key: str
    log_level: int


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default).strip()
    return value or default


def _parse_level(value: str) -> int:
    level = logging.getLevelName(value.upper())
    if isinstance(level, int):
        return level
    return logging.getLevelName(DEFAULT_LOG_LEVEL)


def get_settings() -> Settings:
    """Return settings loaded from environment variables."""
    return Settings(
        db_path=_get_env("TASKLISTS_DB_PATH", DEFAULT_DB_PATH),
        storage_key=_get_env("TASKLISTS_STORAGE_KEY", DEFAULT_STORAGE_KEY),
        log_level=_parse_level(_get_env("TASKLISTS_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
    )
