"""Key/value persistence for ioc-pivot.

The catalog, the search history and the preferences each keep one JSON
document under a fixed key. Only round-trip fidelity matters, not the byte
format.

The sqlite store is intentionally simple:
- key -> blob + timestamps
- no schema per document type
"""

from __future__ import annotations

import logging
import os
import sqlite3
import time
from dataclasses import dataclass, field
from typing import Optional

log = logging.getLogger(__name__)

CATALOG_KEY = "enabledServices"
HISTORY_KEY = "searchHistory"
PREFERENCES_KEY = "userPreferences"


def default_store_path() -> str:
    base = os.getenv("XDG_DATA_HOME") or os.path.expanduser("~/.local/share")
    return os.path.join(base, "ioc-pivot", "state.sqlite")


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


class KeyValueStore:
    """Base interface for the persistence port."""

    def load(self, key: str) -> Optional[bytes]:
        """Return the stored bytes for key, or None when nothing was saved."""
        raise NotImplementedError

    def save(self, key: str, value: bytes) -> None:
        raise NotImplementedError


@dataclass
class MemoryStore(KeyValueStore):
    data: dict[str, bytes] = field(default_factory=dict)

    def load(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def save(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)


@dataclass
class SqliteStore(KeyValueStore):
    path: str

    def __post_init__(self) -> None:
        _ensure_parent_dir(self.path)
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    def load(self, key: str) -> Optional[bytes]:
        with self._connect() as con:
            row = con.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if not row:
            return None
        value = row[0]
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def save(self, key: str, value: bytes) -> None:
        now = time.time()
        with self._connect() as con:
            con.execute(
                """
                INSERT INTO kv (key, value, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value=excluded.value,
                    updated_at=excluded.updated_at
                """,
                (key, sqlite3.Binary(value), now, now),
            )
            con.commit()


def safe_load(store: KeyValueStore, key: str) -> Optional[bytes]:
    """Load a key, logging and returning None on store errors."""
    try:
        return store.load(key)
    except (sqlite3.Error, OSError) as e:
        log.warning("Could not read %r from store: %s", key, e)
        return None


def safe_save(store: KeyValueStore, key: str, value: bytes) -> bool:
    """Best-effort save: the caller's in-memory state stays authoritative."""
    try:
        store.save(key, value)
        return True
    except (sqlite3.Error, OSError) as e:
        log.warning("Could not write %r to store: %s", key, e)
        return False
