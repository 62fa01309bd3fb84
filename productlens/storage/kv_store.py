# productlens/storage/kv_store.py

"""Async key-value stores backing the price history tracker."""

import asyncio
import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Protocol

from productlens.config.settings import Settings

logger = logging.getLogger("productlens.storage")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS kv (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class KeyValueStore(Protocol):
    """Durable string-keyed store with async access."""

    async def get(self, key: str) -> Any | None:
        """Return the value for ``key`` or ``None`` if absent."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` (JSON-serialisable) under ``key``."""
        ...


class InMemoryStore:
    """Process-local store; values are copied through JSON like SQLite's."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        return sorted(self._data)


class SQLiteStore:
    """SQLite-backed store with JSON-encoded values.

    Blocking sqlite calls run in a worker thread so the event loop is
    never held up; a lock serialises access to the shared connection.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        path = db_path or Settings.STORE_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        self._lock = threading.Lock()
        logger.debug("SQLiteStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ── Blocking primitives ──────────────────────────────

    def get_sync(self, key: str) -> Any | None:
        """Blocking lookup of ``key``."""
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (key,),
            ).fetchone()
        return json.loads(row[0]) if row else None

    def set_sync(self, key: str, value: Any) -> None:
        """Blocking upsert of ``key``."""
        encoded = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET "
                "value=excluded.value, updated_at=datetime('now')",
                (key, encoded),
            )
            self._conn.commit()

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT key FROM kv ORDER BY key",
            ).fetchall()
        return [r[0] for r in rows]

    # ── Async interface ──────────────────────────────────

    async def get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self.get_sync, key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self.set_sync, key, value)
