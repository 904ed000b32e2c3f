"""
library_store.py
----------------
Durable store of saved plans ("Minha Biblioteca").

Notes:
- The whole collection is one JSON array under a single well-known key of a
  key-value storage port. Every mutation reads the full collection, changes
  it and writes it back.
- Newest records come first.
- save and delete hold a process-wide lock across their read, change and
  write, so concurrent callers sharing a storage never drop each other's records.
- Reads degrade: missing, unreadable or corrupt data is an empty library.
  Writes do not: a failing write raises StorageWriteError.
"""

import abc
import json
import logging
import sqlite3
import threading
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from escola360.core.config import LIBRARY_KEY
from escola360.models.library_model import LibraryItem, LibraryItemType
from escola360.models.planning_model import BimesterPlan
from escola360.utils.date_utils import utc_timestamp

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

_library_items = TypeAdapter(List[LibraryItem])


# -------------------------
# Exceptions
# -------------------------
class StorageError(RuntimeError):
    pass


class StorageUnavailableError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


# -------------------------
# Storage port and adapters
# -------------------------
class KeyValueStorage(abc.ABC):
    """String key to string value, like a browser's localStorage."""

    @abc.abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None. Raises StorageUnavailableError."""

    @abc.abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key. Raises StorageWriteError."""


class InMemoryKeyValueStorage(KeyValueStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value


class SqliteKeyValueStorage(KeyValueStorage):
    """Single-table SQLite key-value file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        """Create a connection, ensuring the parent directory exists."""

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def _ensure_schema(self) -> None:
        with self._connect() as con:
            con.execute("CREATE TABLE IF NOT EXISTS kv_store (key TEXT PRIMARY KEY, value TEXT NOT NULL)")

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self._connect() as con:
                row = con.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except (sqlite3.Error, OSError) as exc:
            raise StorageUnavailableError(f"Cannot read '{key}' from {self.db_path}: {exc}") from exc
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        try:
            with self._connect() as con:
                con.execute(
                    "INSERT INTO kv_store(key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
                con.commit()
        except (sqlite3.Error, OSError) as exc:
            raise StorageWriteError(f"Cannot write '{key}' to {self.db_path}: {exc}") from exc


# -------------------------
# Library
# -------------------------
class LibraryStore:
    _lock = threading.Lock()

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = LIBRARY_KEY,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self.storage = storage
        self.key = key
        self._id_factory = id_factory
        self._clock = clock

    def _read(self) -> List[LibraryItem]:
        try:
            raw = self.storage.get_item(self.key)
        except StorageUnavailableError as exc:
            logger.warning("Library storage unavailable, treating library as empty: %s", exc)
            return []
        if not raw:
            return []
        try:
            return _library_items.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Library data under '%s' is corrupt, treating library as empty: %s", self.key, exc)
            return []

    def _write(self, items: List[LibraryItem]) -> None:
        payload = json.dumps(
            [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in items],
            ensure_ascii=False,
        )
        self.storage.set_item(self.key, payload)

    def _new_id(self, taken: set) -> str:
        new_id = self._id_factory()
        while not new_id or new_id in taken:
            new_id = self._id_factory()
        return new_id

    def save(
        self,
        type: LibraryItemType,
        title: str,
        content: BimesterPlan,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> LibraryItem:
        """Prepend a new record holding a copy of `content` and persist the collection."""
        with self._lock:
            library = self._read()
            item = LibraryItem(
                id=self._new_id({existing.id for existing in library}),
                type=type,
                title=title,
                created_at=self._clock(),
                content=content.model_copy(deep=True),
                metadata=dict(metadata) if metadata is not None else None,
            )
            library.insert(0, item)
            self._write(library)
        logger.info("Saved library item %s ('%s')", item.id, title)
        return item.model_copy(deep=True)

    def list(self) -> List[LibraryItem]:
        return self._read()

    def get(self, item_id: str) -> Optional[LibraryItem]:
        return next((item for item in self._read() if item.id == item_id), None)

    def delete(self, item_id: str) -> None:
        with self._lock:
            library = self._read()
            remaining = [item for item in library if item.id != item_id]
            if len(remaining) == len(library):
                return
            self._write(remaining)
        logger.info("Deleted library item %s", item_id)
