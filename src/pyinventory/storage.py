"""Persisted key/value store backing the local mirror.

Values are JSON-compatible (dicts, lists, strings, numbers). Each
resource owns exactly one key; see ``pyinventory._constants`` for the
key names.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

from pyinventory.exceptions import InventoryConfigError

_logger = logging.getLogger(__name__)


class LocalStore(Protocol):
    """Structural interface for the local mirror.

    Having a protocol here lets tests and embedders swap in their own
    persistence while the library ships :class:`MemoryStore` and
    :class:`JsonFileStore`.
    """

    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """Process-local store. Contents are lost on exit."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore:
    """Store persisted as a single JSON object on disk.

    Every write rewrites the file through a temporary sibling and an
    atomic rename, so a crash never leaves a half-written mirror.
    A missing file is an empty store; a corrupt one is logged and
    treated as empty.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._data: dict[str, Any] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            loaded = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            _logger.warning("Local store %s is not valid JSON; starting empty", self._path)
            return {}
        except OSError as exc:
            raise InventoryConfigError(f"Cannot read local store {self._path}: {exc}") from exc
        if not isinstance(loaded, dict):
            _logger.warning("Local store %s does not hold an object; starting empty", self._path)
            return {}
        return loaded

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(f"{self._path.suffix}.tmp")
        tmp.write_text(json.dumps(self._data, separators=(",", ":")), encoding="utf-8")
        os.replace(tmp, self._path)

    def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()


def open_store(path: str | None) -> LocalStore:
    """Return a file-backed store for *path*, or an in-memory one for ``None``."""
    if path is None:
        return MemoryStore()
    return JsonFileStore(path)
