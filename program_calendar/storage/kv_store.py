"""Persisted JSON key-value store that never raises on read or write."""
from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Protocol

from program_calendar.util.logging_utils import get_logger


class KeyValueStore(Protocol):
    def get_json(self, key: str, default: Any) -> Any:
        ...

    def set_json(self, key: str, value: Any) -> bool:
        ...


class MemoryStore:
    """Dict-backed store; values are round-tripped through JSON like the file store."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get_json(self, key: str, default: Any) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set_json(self, key: str, value: Any) -> bool:
        self._data[key] = json.dumps(value)
        return True


class JsonFileStore:
    """All keys live in one JSON object on disk.

    Reads fall back to ``default`` when the file is missing or corrupt; writes
    go through a temp file and report failure instead of raising.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._logger = get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            self._logger.warning("Failed to read %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            self._logger.warning("Ignoring %s: top level is not an object", self._path)
            return {}
        return data

    def get_json(self, key: str, default: Any) -> Any:
        return self._read_all().get(key, default)

    def set_json(self, key: str, value: Any) -> bool:
        data = self._read_all()
        data[key] = value
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            self._logger.warning("Failed to write %s (key: %s): %s", self._path, key, exc)
            return False
        return True


__all__ = ["KeyValueStore", "MemoryStore", "JsonFileStore"]
