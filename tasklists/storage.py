"""Storage layer for tasklists.

This module provides an abstract key-value storage interface and concrete
implementations. Values are opaque strings; the persistence bridge decides
what goes in them. The JsonStorage implementation keeps every key in one
JSON file and uses fcntl-based file locking around reads and writes.
"""

import fcntl
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "tasklists.json"


class Storage(ABC):
    """Abstract base class for string key-value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under `key`.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove `key`. Removing an absent key does nothing."""
        pass


class MemoryStorage(Storage):
    """In-process storage, mostly useful for tests."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove(self, key: str) -> None:
        self.items.pop(key, None)


class JsonStorage(Storage):
    """JSON file-based storage implementation with file locking.

    The file holds a single JSON object mapping keys to string values.

    Attributes:
        file_path: Path to the JSON storage file
    """

    def __init__(self, file_path: Optional[str] = None):
        """Initialize JsonStorage with a file path.

        Args:
            file_path: Path to the JSON file for storage. If None, uses
                      DEFAULT_DB_PATH; callers pick the configured path
                      through config.get_settings()
        """
        self.file_path = Path(file_path or DEFAULT_DB_PATH)

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        if value is not None and not isinstance(value, str):
            # Written by something else; hand it back as JSON text.
            value = json.dumps(value)
        return value

    def set(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove(self, key: str) -> None:
        items = self._read()
        if key in items:
            del items[key]
            self._write(items)

    def _read(self) -> dict:
        """Read the whole key-value object from disk.

        Returns:
            Dictionary of stored items. Empty if the file doesn't exist, is
            empty, or does not hold a JSON object.
        """
        if not self.file_path.exists():
            return {}

        with open(self.file_path, "rb") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            try:
                raw = f.read()
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        try:
            content = raw.decode("utf-8").strip()
            if not content:
                return {}
            data = json.loads(content)
        except (ValueError, RecursionError):
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            logger.exception("Storage file %s is not valid JSON; treating it as empty", self.file_path)
            return {}
        if not isinstance(data, dict):
            logger.error("Storage file %s does not hold a JSON object; treating it as empty", self.file_path)
            return {}
        return data

    def _write(self, items: dict) -> None:
        # Ensure parent directory exists
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        # Truncate only once the lock is held
        with open(self.file_path, "a+", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.seek(0)
                f.truncate()
                json.dump(items, f, indent=2)
                f.flush()
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
