"""
SQLite storage backend.

Persists raw values in a single ``kv`` table through aiosqlite. Keys
enumerate in rowid order; updates keep the original rowid, so enumeration
order is first-insertion order like the memory backend.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

import aiosqlite

from relcache.backends.base import StorageBackend
from relcache.exceptions import BackendError
from relcache.logging import get_logger

logger = get_logger(__name__)


class SQLiteBackend(StorageBackend):
    """aiosqlite-backed key-value table.

    Call ``init()`` before use and ``close()`` when done. Driver errors are
    re-raised as BackendError with the operation and key in context.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the backend.

        Args:
            db_path: Path to the SQLite database file. ``":memory:"`` is
                accepted for a throwaway database.
        """
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self._db: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Open the connection and create the schema."""
        if self._db is not None:
            return

        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._guard("init"):
            self._db = await aiosqlite.connect(self.db_path)
            await self._db.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            await self._db.commit()

        logger.info("SQLite backend initialized", db_path=str(self.db_path))

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    @contextmanager
    def _guard(self, operation: str, key: str | None = None) -> Generator[None, None, None]:
        """Translate driver errors into BackendError."""
        try:
            yield
        except aiosqlite.Error as e:
            context: dict[str, Any] = {"backend": "sqlite", "operation": operation}
            if key is not None:
                context["key"] = key
            raise BackendError(f"SQLite operation failed: {e}", context=context) from e

    def _conn(self) -> aiosqlite.Connection:
        if not self._db:
            raise RuntimeError("SQLiteBackend not initialized. Call init() first.")
        return self._db

    async def get_item(self, key: str) -> Any | None:
        db = self._conn()
        with self._guard("get_item", key):
            async with db.execute("SELECT value FROM kv WHERE key = ?", (key,)) as cursor:
                row = await cursor.fetchone()
        return row[0] if row else None

    async def set_item(self, key: str, value: Any) -> None:
        db = self._conn()
        with self._guard("set_item", key):
            await db.execute(
                """
                INSERT INTO kv (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            await db.commit()

    async def remove_item(self, key: str) -> None:
        db = self._conn()
        with self._guard("remove_item", key):
            await db.execute("DELETE FROM kv WHERE key = ?", (key,))
            await db.commit()

    async def has_item(self, key: str) -> bool:
        db = self._conn()
        with self._guard("has_item", key):
            async with db.execute("SELECT 1 FROM kv WHERE key = ?", (key,)) as cursor:
                row = await cursor.fetchone()
        return row is not None

    async def get_keys(self, prefix: str = "") -> list[str]:
        db = self._conn()
        with self._guard("get_keys"):
            async with db.execute(
                "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY rowid",
                (len(prefix), prefix),
            ) as cursor:
                rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def clear(self, prefix: str = "") -> None:
        db = self._conn()
        with self._guard("clear"):
            await db.execute(
                "DELETE FROM kv WHERE substr(key, 1, ?) = ?", (len(prefix), prefix)
            )
            await db.commit()
