from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

KEY_PREFIX = "sticker_village_"


class KeyValueStore(Protocol):
    def save(self, key: str, value: object) -> None: ...

    def load(self, key: str, default: object = None) -> object: ...

    def exists(self, key: str) -> bool: ...

    def remove(self, key: str) -> None: ...

    def clear_all(self) -> None: ...


@dataclass
class JsonFileStore:
    """One JSON file per key under ``directory``.

    Unreadable or corrupt entries are logged and answered with the default.
    """

    directory: Path

    def _path(self, key: str) -> Path:
        return self.directory / f"{KEY_PREFIX}{key}.json"

    def save(self, key: str, value: object) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")

    def load(self, key: str, default: object = None) -> object:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("failed to load %s: %s", path, e)
            return default

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def clear_all(self) -> None:
        if not self.directory.exists():
            return
        for path in self.directory.glob(f"{KEY_PREFIX}*.json"):
            path.unlink()


@dataclass
class MemoryStore:
    data: dict[str, str] = field(default_factory=dict)

    def save(self, key: str, value: object) -> None:
        # Stored serialized so callers never share mutable state with the store.
        self.data[key] = json.dumps(value)

    def load(self, key: str, default: object = None) -> object:
        raw = self.data.get(key)
        return default if raw is None else json.loads(raw)

    def exists(self, key: str) -> bool:
        return key in self.data

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def clear_all(self) -> None:
        self.data.clear()
