"""Keyed storage backends for templates and preferences."""

from __future__ import annotations

import copy
import json
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStorage(ABC):
    """
    Durable get/set/delete by key. Values are JSON-compatible.

    Last write wins on the whole value; no transactions.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored value, None if absent. Corrupt data raises ValueError."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...


class MemoryStorage(KeyValueStorage):
    """In-process storage. Values are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None


class JsonFileStorage(KeyValueStorage):
    """
    One JSON file per key.

    Directory layout::

        {directory}/
            page_templates.json
            customization_preferences.json
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key {key!r}")
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Any | None:
        try:
            with open(self._path(key), encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(value, f, indent=2)
        os.replace(tmp, path)

    def delete(self, key: str) -> bool:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            return False
        return True
