"""
Storage transports - Durable key-value persistence for reader state.

Provides:
- StorageTransport: the read/write/delete protocol the stores depend on
- SQLiteStorage: per-user key-value rows in ~/.guidedbook/progress.db
- MemoryStorage: process-local dict, for tests and anonymous sessions

Transports raise on failure; the stores built on top decide how to degrade.
"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

from guidedbook.config import DEFAULT_DATA_DIR


DEFAULT_STORAGE_DB = DEFAULT_DATA_DIR / "progress.db"


class StorageTransport(Protocol):
    def read_key(self, key: str) -> Optional[str]: ...

    def write_key(self, key: str, value: str) -> None: ...

    def delete_key(self, key: str) -> None: ...


class MemoryStorage:
    """In-memory transport. Optionally fails writes to simulate quota errors."""

    def __init__(self, initial: Optional[dict[str, str]] = None, fail_writes: bool = False):
        self.data: dict[str, str] = dict(initial or {})
        self.fail_writes = fail_writes

    def read_key(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write_key(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("storage quota exceeded")
        self.data[key] = value

    def delete_key(self, key: str) -> None:
        self.data.pop(key, None)


class SQLiteStorage:
    """
    Key-value transport backed by SQLite.

    Rows are namespaced by user so several readers can share one
    data directory without seeing each other's answers.
    """

    def __init__(self, db_path: Optional[Path] = None, user_id: str = "default"):
        """
        Initialize storage.

        Args:
            db_path: Path to progress.db (default: ~/.guidedbook/progress.db)
            user_id: Namespace for this reader's keys
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_STORAGE_DB
        self.user_id = user_id
        self._ensure_database()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    user_id TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, key)
                );
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def read_key(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT value FROM kv_store WHERE user_id = ? AND key = ?",
                (self.user_id, key)
            )
            row = cursor.fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def write_key(self, key: str, value: str) -> None:
        conn = self._get_connection()
        try:
            now = datetime.now().isoformat()
            conn.execute(
                """INSERT INTO kv_store (user_id, key, value, updated_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(user_id, key) DO UPDATE SET
                     value = excluded.value,
                     updated_at = excluded.updated_at""",
                (self.user_id, key, value, now)
            )
            conn.commit()
        finally:
            conn.close()

    def delete_key(self, key: str) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                "DELETE FROM kv_store WHERE user_id = ? AND key = ?",
                (self.user_id, key)
            )
            conn.commit()
        finally:
            conn.close()

    def list_keys(self) -> list[str]:
        """All keys stored for this user."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT key FROM kv_store WHERE user_id = ? ORDER BY key",
                (self.user_id,)
            )
            return [row["key"] for row in cursor.fetchall()]
        finally:
            conn.close()
