"""Mini README: Key-value persistence for serialised ledgers.

Structure:
    * StoreError - raised when the backing medium cannot be read or written.
    * KeyValueStore - abstract ``get``/``set`` interface used by the engine.
    * InMemoryStore - process-local store, handy for tests and demos.
    * JsonFileStore - one JSON document on disk holding every key.

Values are JSON-compatible dictionaries. Both implementations copy values
through ``json`` on the way in and out, so callers never share mutable state
with the store and anything that would not survive serialisation fails early.
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class StoreError(RuntimeError):
    """Raised when a store cannot complete a read or write."""


def _copy(value: object) -> object:
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as error:
        raise StoreError(f"Value is not JSON serialisable: {error}") from error


class KeyValueStore(ABC):
    """Minimal persistence interface keyed by namespaced strings."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, object]]:
        """Return the stored value or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Dict[str, object]) -> None:
        """Store ``value`` under ``key``, raising StoreError on failure."""


class InMemoryStore(KeyValueStore):
    """Dictionary-backed store living for the duration of the process."""

    def __init__(self, initial: Optional[Dict[str, Dict[str, object]]] = None) -> None:
        self._values: Dict[str, object] = {
            key: _copy(value) for key, value in (initial or {}).items()
        }

    def get(self, key: str) -> Optional[Dict[str, object]]:
        if key not in self._values:
            return None
        return _copy(self._values[key])

    def set(self, key: str, value: Dict[str, object]) -> None:
        self._values[key] = _copy(value)


class JsonFileStore(KeyValueStore):
    """Persist every key in a single JSON file, replaced atomically on write."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as error:
            raise StoreError(f"Could not read {self.path}: {error}") from error
        if not isinstance(data, dict):
            raise StoreError(f"{self.path} does not contain a JSON object")
        return data

    def _write_all(self, data: Dict[str, object]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            descriptor, temp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, indent=2, ensure_ascii=False)
                os.replace(temp_name, self.path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as error:
            raise StoreError(f"Could not write {self.path}: {error}") from error
        LOGGER.debug("Wrote %s keys to %s", len(data), self.path)

    def get(self, key: str) -> Optional[Dict[str, object]]:
        return self._read_all().get(key)

    def set(self, key: str, value: Dict[str, object]) -> None:
        data = self._read_all()
        data[key] = _copy(value)
        self._write_all(data)
