from __future__ import annotations

import logging
import sqlite3
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


class KeyValueStore(Protocol):
    """Persisted string key/value storage (cache entries and the token)."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SQLiteStore:
    """Durable :class:`KeyValueStore` kept in a single SQLite table."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self.init_db()

    def init_db(self) -> None:
        logger.info("Initializing key/value store at %s", self.db_path)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(SCHEMA)

    def get(self, key: str) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key=?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        logger.debug("Writing %s", key)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                (key, value),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM kv_store WHERE key=?", (key,))
            conn.commit()


class MemoryStore:
    """In-process store, handy for tests."""

    def __init__(self, data: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


__all__ = ["KeyValueStore", "SQLiteStore", "MemoryStore"]
