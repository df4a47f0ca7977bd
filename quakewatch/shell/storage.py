"""Key-value storage - Imperative Shell.

This module persists zones and settings as JSON values under fixed keys,
the way a browser client uses local storage. The core never touches
storage directly; it receives a Repository bound to one key.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol


logger = logging.getLogger(__name__)


# Fixed keys
ZONES_KEY = "alert_zones"
SETTINGS_KEY = "settings"


class KeyValueStore(Protocol):
    """Storage backend interface."""

    def get(self, key: str) -> Any | None:
        """Return the stored value or None."""
        ...

    def set(self, key: str, value: Any) -> bool:
        """Store a JSON-serializable value. Returns True on success."""
        ...


class JsonFileStore:
    """Key-value store backed by one JSON document on disk.

    Writes go to a temporary file that replaces the document, so a crash
    never leaves a half-written file.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize file store.

        Args:
            path: JSON file location (created on first write)
        """
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to read %s: %s", self.path, str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top-level value is not an object", self.path)
            return {}
        return data

    def get(self, key: str) -> Any | None:
        """Read a value.

        This method performs file I/O.
        """
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> bool:
        """Write a value, replacing the previous one.

        This method performs file I/O.

        Returns:
            True if the write succeeded
        """
        data = self._read_all()
        data[key] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, str(e))
            return False

        logger.debug("Saved key %s to %s", key, self.path)
        return True


class MemoryStore:
    """In-process store for tests and ephemeral runs."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> bool:
        self.data[key] = value
        return True


class Repository:
    """A store bound to one key: load() once, save(value) on every mutation."""

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self.store = store
        self.key = key

    def load(self) -> Any | None:
        """Load the stored value, None if absent."""
        return self.store.get(self.key)

    def save(self, value: Any) -> bool:
        """Replace the stored value."""
        ok = self.store.set(self.key, value)
        if not ok:
            logger.error("Failed to persist %s", self.key)
        return ok
