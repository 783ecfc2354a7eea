"""Small key-value stores holding encrypted credentials and the master key."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from gitbridge.logging import get_logger
from gitbridge.utils.atomic import atomic_write_json

logger = get_logger(__name__)

__all__ = ["JsonFileKeyValueStore", "KeyValueStore", "MemoryKeyValueStore"]


@runtime_checkable
class KeyValueStore(Protocol):
    """String-to-string persistence in the shape of a browser cookie jar."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None:
        """Remove *key*; missing keys are ignored."""
        ...

    def keys(self) -> list[str]: ...


class MemoryKeyValueStore:
    """Process-local :class:`KeyValueStore`."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileKeyValueStore:
    """:class:`KeyValueStore` persisted as one JSON object on disk.

    The file is read once on first access and rewritten atomically on every
    change. Writes are serialized with a lock, so concurrent writers get
    last-writer-wins semantics without tearing the file.

    Args:
        path: Location of the JSON file. Created on first write.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data

        loaded: object = {}
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
            except ValueError:
                logger.warning("key_store_unreadable", path=str(self.path))
        if not isinstance(loaded, dict):
            loaded = {}
        self._data = {str(k): str(v) for k, v in loaded.items()}
        return self._data

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            atomic_write_json(self.path, data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                atomic_write_json(self.path, data)

    def keys(self) -> list[str]:
        return list(self._load())
