"""
Device-local key/value storage.

Backs two things that must survive a process restart: the Supabase auth
session (the SDK calls get_item/set_item/remove_item on whatever storage it
is given) and the last active role preference.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .config import get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """String key/value storage with the Supabase auth storage surface."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStore:
    """In-process store. Nothing survives a restart."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JSONFileStore:
    """
    Key/value store persisted to a single JSON file.

    Every write rewrites the whole file through a temporary file and an
    atomic rename, so a crash mid-write leaves the previous contents intact.
    A missing file reads as empty; an unreadable one is logged and also
    treated as empty so the app can still start.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read()
            items[key] = value
            self._write(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._read()
            if key in items:
                del items[key]
                self._write(items)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            logger.warning(f"Ignoring unreadable storage file: {self._path}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed storage file: {self._path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".storage-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


# Module-level store cache
_device_store: Optional[JSONFileStore] = None


def get_device_store() -> JSONFileStore:
    """Get the store at the configured storage path."""
    global _device_store
    if _device_store is None:
        _device_store = JSONFileStore(get_settings().storage_path)
    return _device_store


def reset_device_store() -> None:
    """Reset the cached device store (for testing)."""
    global _device_store
    _device_store = None
