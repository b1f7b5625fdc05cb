"""
Client-local key-value storage.

A small JSON file holds string values by key. Any read or write failure is
raised as LocalStorageError; callers decide whether to degrade or propagate.
"""

import json
import os
from pathlib import Path
from typing import Optional, Protocol

from core.errors import LocalStorageError


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class FileStorage:
    """Key-value storage persisted as one JSON object in a file."""

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise LocalStorageError(f"Failed to read {self.path}") from e

        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise LocalStorageError(f"Corrupt storage file {self.path}") from e
        if not isinstance(data, dict):
            raise LocalStorageError(f"Corrupt storage file {self.path}")
        return data

    def _save(self, data: dict[str, str]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise LocalStorageError(f"Failed to write {self.path}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)
