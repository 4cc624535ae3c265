# =============================================================================
# lib/storage.py - Credential Persistence Slot
# =============================================================================
# Where the SessionStore keeps the current Credential between restarts.
# Storage is a key/value slot holding an opaque string; the SessionStore
# serializes the Credential to JSON before handing it over.
#
# - MemoryStorage: process-local, used in tests and when no path is configured
# - FileStorage:   one JSON document on disk, keys at the top level
# =============================================================================

import json
import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialStorage(Protocol):
    """Scoped key/value slot for the persisted session."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """In-memory slot; lost when the process exits."""

    def __init__(self):
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """
    JSON-file slot.

    Writes go to a temporary file that replaces the original, so a crash
    mid-write never leaves a truncated document. The file is created with
    0600 permissions since it holds a refresh token.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable credential file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
