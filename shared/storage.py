"""
Key-value persistence for the five state collections.

Each collection lives under its own key and is stored as JSON text, the same
way the browser build kept them in localStorage.

Design decisions:
- load() returns the supplied default when a key is missing, unreadable or
  fails validation. That fallback is the contract, and it is logged
- Values are validated through a pydantic TypeAdapter on the way in and
  dumped by alias on the way out
- Two backends: MemoryStore (dict of strings) and JsonFileStore (one file
  per key under a data directory)
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger("storage")

T = TypeVar("T")


class StorageKeys:
    """Names of the persisted slots."""
    CATEGORIES = "pos-categories"
    PRODUCTS = "pos-products"
    SALES = "pos-sales"
    NOTIFICATIONS = "pos-notifications"
    SETTINGS = "pos-settings"

    ALL = (CATEGORIES, PRODUCTS, SALES, NOTIFICATIONS, SETTINGS)


class StateStore(Protocol):
    """What the engine needs from a persistence backend."""

    def load(self, key: str, default: T, schema: Any) -> T:
        ...

    def save(self, key: str, value: T, schema: Any) -> None:
        ...


# Adapters are cheap to build but are reused for every save
_adapters: dict[Any, TypeAdapter] = {}


def _adapter_for(schema: Any) -> TypeAdapter:
    adapter = _adapters.get(schema)
    if adapter is None:
        adapter = TypeAdapter(schema)
        _adapters[schema] = adapter
    return adapter


def encode(value: Any, schema: Any) -> str:
    """Serialize a value to JSON text using camelCase aliases."""
    return _adapter_for(schema).dump_json(value, by_alias=True).decode("utf-8")


def decode(raw: str, schema: Any) -> Any:
    """
    Parse and validate JSON text.

    Raises:
        ValidationError: If the text is not valid JSON or does not match the schema
    """
    return _adapter_for(schema).validate_json(raw)


class _TextStore:
    """
    Shared load/save logic. Subclasses only move raw strings around.
    """

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, raw: str) -> None:
        raise NotImplementedError

    def load(self, key: str, default: T, schema: Any) -> T:
        """
        Load the value stored under key.

        Args:
            key: Slot name (see StorageKeys)
            default: Returned when the slot is missing or unusable
            schema: Type the value must validate against (e.g. list[Product])

        Returns:
            The stored value, or default
        """
        try:
            raw = self._read(key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read '{key}', using default: {e}")
            return default

        if raw is None:
            logger.debug(f"No saved value for '{key}', using default")
            return default

        try:
            return decode(raw, schema)
        except ValidationError as e:
            logger.warning(
                f"Saved value for '{key}' is invalid ({e.error_count()} errors), using default"
            )
            return default

    def save(self, key: str, value: T, schema: Any) -> None:
        """
        Store a value under key.

        Raises:
            OSError: If the backend cannot be written
        """
        self._write(key, encode(value, schema))
        logger.debug(f"Saved '{key}'")


class MemoryStore(_TextStore):
    """
    In-process store holding JSON strings, like window.localStorage.

    Useful for tests and for running without a data directory.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write(self, key: str, raw: str) -> None:
        self._data[key] = raw

    def raw(self, key: str) -> Optional[str]:
        """Get the stored text for a key (for inspection in tests)."""
        return self._data.get(key)

    def set_raw(self, key: str, raw: str) -> None:
        """Put arbitrary text under a key, bypassing validation."""
        self._data[key] = raw

    def keys(self) -> list[str]:
        return list(self._data)

    def clear(self) -> None:
        self._data.clear()


class JsonFileStore(_TextStore):
    """
    File-backed store: one <key>.json file per slot under data_dir.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the file store.

        Args:
            data_dir: Directory holding the JSON files.
                     Defaults to ./data relative to project root.
        """
        if data_dir is None:
            data_dir = Path(__file__).parent.parent / "data"

        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        filepath = self.path_for(key)
        if not filepath.exists():
            return None
        with open(filepath, "r", encoding="utf-8") as f:
            return f.read()

    def _write(self, key: str, raw: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        # Write next to the target then swap, so a crash never leaves half a file
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(raw)
            os.replace(tmp_path, target)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def dump_all(self) -> dict[str, Any]:
        """Read every known slot as plain JSON (for inspection)."""
        result = {}
        for key in StorageKeys.ALL:
            raw = self._read(key)
            if raw is not None:
                result[key] = json.loads(raw)
        return result
