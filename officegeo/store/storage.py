"""Key-value persistence strategies behind the record stores."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from officegeo.common.config_loader import Settings
from officegeo.common.errors import StorageError
from officegeo.common.fs import write_text_atomic

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self) -> None:
        self.items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage:
    """One ``<key>.json`` file per key. Unreadable files read as absent."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("could not read %s: %s", path, exc)
            return None

    def set_item(self, key: str, value: str) -> None:
        try:
            write_text_atomic(self._path(key), value)
        except OSError as exc:
            raise StorageError(f"Could not write {self._path(key)}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def build_storage(settings: Settings) -> KeyValueStorage:
    if settings.storage_backend == "memory":
        return MemoryStorage()
    return JsonFileStorage(settings.storage_directory)
