from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Protocol

from pydantic_core import to_jsonable_python

LOGGER = logging.getLogger(__name__)

DATA_DIR_ENV = "BRUTALYTICS_DATA_DIR"
DEFAULT_DATA_DIR = Path(".data") / "brutalytics"
DEFAULT_STATE_FILENAME = "brutalytics_state.json"
LOCAL_STORAGE_FILENAME = "local_storage.json"


class StorageBackend(Protocol):
    """Abstraction for persisting and restoring state."""

    def load_state(self) -> Mapping[str, object]:
        """Return a mapping representing the stored state."""

    def save_state(self, state: Mapping[str, object]) -> None:
        """Persist the provided state mapping."""


def resolve_data_directory(path: str | Path | None = None, *, env: Mapping[str, str] | None = None) -> Path:
    """Explicit path first, then ``BRUTALYTICS_DATA_DIR``, then ``.data/brutalytics``."""

    if path is not None:
        explicit_path = Path(path).expanduser()
        if explicit_path.suffix:
            return explicit_path.parent
        return explicit_path

    env_map: Mapping[str, str] = env if env is not None else os.environ
    configured = env_map.get(DATA_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return DEFAULT_DATA_DIR


def resolve_state_file_path(
    path: str | Path | None = None,
    *,
    filename: str = DEFAULT_STATE_FILENAME,
    env: Mapping[str, str] | None = None,
) -> Path:
    if path is not None:
        explicit_path = Path(path).expanduser()
        if explicit_path.is_dir() or not explicit_path.suffix:
            return explicit_path / filename
        return explicit_path

    return resolve_data_directory(env=env) / filename


class FileStorageBackend:
    """Persist state to a JSON file on disk."""

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        filename: str = DEFAULT_STATE_FILENAME,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.path = resolve_state_file_path(path, filename=filename, env=env)
        self._last_fingerprint: str | None = None

    def load_state(self) -> Mapping[str, object]:
        if not self.path.exists():
            return {}

        with self.path.open("r", encoding="utf-8") as file_handle:
            return json.load(file_handle)

    def save_state(self, state: Mapping[str, object]) -> None:
        serialized = json.dumps(state, default=to_jsonable_python, ensure_ascii=False, sort_keys=True)
        if serialized == self._last_fingerprint:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as file_handle:
            file_handle.write(serialized)

        self._last_fingerprint = serialized


class MemoryStorageBackend:
    """Keep state in a dict; used for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Mapping[str, object]] = None) -> None:
        self.state: dict[str, object] = dict(initial or {})
        self.save_count = 0

    def load_state(self) -> Mapping[str, object]:
        return dict(self.state)

    def save_state(self, state: Mapping[str, object]) -> None:
        self.state = json.loads(json.dumps(state, default=to_jsonable_python))
        self.save_count += 1


class LocalStorage:
    """String key-value store over a backend, mirroring browser ``localStorage``."""

    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend
        self._items: MutableMapping[str, str] = {}
        loaded = backend.load_state()
        for key, value in loaded.items():
            if isinstance(value, str):
                self._items[key] = value
            else:
                LOGGER.warning("Ignorando entrada no textual en el almacenamiento local: %s", key)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self.backend.save_state(dict(self._items))

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self.backend.save_state(dict(self._items))

    def keys(self) -> list[str]:
        return list(self._items)


__all__ = [
    "DATA_DIR_ENV",
    "DEFAULT_DATA_DIR",
    "DEFAULT_STATE_FILENAME",
    "FileStorageBackend",
    "LOCAL_STORAGE_FILENAME",
    "LocalStorage",
    "MemoryStorageBackend",
    "StorageBackend",
    "resolve_data_directory",
    "resolve_state_file_path",
]
