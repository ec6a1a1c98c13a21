"""SQLite-backed storage implementation for pyblockflow.

Design Pattern: Adapter Pattern
SqliteKeyValueStore adapts an SQLite database to the KeyValueStore interface.

Implementation details:
- aiosqlite for async operations
- WAL mode for concurrent reads
- One table, JSON text values, upsert on write
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import aiosqlite

from pyblockflow.storage.base import (
    KeyValueStore,
    StorageError,
    decode_value,
    encode_value,
    normalize_keys,
)


class SqliteKeyValueStore(KeyValueStore):
    """SQLite-backed durable key/value storage.

    After __init__, the instance is not yet usable. Call connect() first.

    Usage:
        store = SqliteKeyValueStore("pyblockflow.db")
        await store.connect()
        try:
            await store.set({"shortcuts": {}})
        finally:
            await store.close()
    """

    def __init__(self, db_path: str):
        """Initialize storage (connection not opened yet).

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()  # Serialize access to shared connection
        self._change_notify = asyncio.Event()

    @classmethod
    async def in_memory(cls) -> SqliteKeyValueStore:
        """
        Create an in-memory SQLite store for testing.

        Returns:
            Connected in-memory storage instance

        Example:
            store = await SqliteKeyValueStore.in_memory()
        """
        instance = cls(":memory:")
        await instance.connect()
        return instance

    def __repr__(self) -> str:
        if self.db_path == ":memory:":
            return "SqliteKeyValueStore(in-memory)"
        return f"SqliteKeyValueStore({self.db_path})"

    async def connect(self) -> None:
        """Open database connection and initialize schema.

        Pattern: Template Method
        Fixed initialization sequence:
        1. Open connection
        2. Enable WAL mode
        3. Create table
        """
        if self._connection is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(
            self.db_path,
            timeout=5.0,
            isolation_level=None,  # Autocommit mode
        )

        # In-memory databases report "memory" and don't support WAL
        cursor = await self._connection.execute("PRAGMA journal_mode=WAL")
        result = await cursor.fetchone()
        await cursor.close()

        if result:
            mode = result[0].upper()
            if mode not in ("WAL", "MEMORY"):
                raise StorageError(f"Failed to enable WAL mode, got: {result[0]}")

        await self._connection.execute("PRAGMA synchronous=NORMAL")
        await self._connection.execute("PRAGMA busy_timeout=5000")

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)

        await self._connection.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    def _check_connected(self) -> aiosqlite.Connection:
        """Guard clause: Ensure connection is open."""
        if self._connection is None:
            raise StorageError("Not connected. Call connect() first.")
        return self._connection

    async def get(self, keys: str | Iterable[str]) -> dict[str, Any]:
        connection = self._check_connected()
        key_list = normalize_keys(keys)
        if not key_list:
            return {}

        placeholders = ", ".join("?" for _ in key_list)
        async with self._lock:
            cursor = await connection.execute(
                f"SELECT key, value FROM kv_store WHERE key IN ({placeholders})",
                key_list,
            )
            rows = await cursor.fetchall()
            await cursor.close()

        return {row[0]: decode_value(row[0], row[1]) for row in rows}

    async def set(self, items: Mapping[str, Any]) -> None:
        connection = self._check_connected()
        rows = [(key, encode_value(key, value)) for key, value in items.items()]

        async with self._lock:
            await connection.execute("BEGIN IMMEDIATE")
            try:
                await connection.executemany(
                    """
                    INSERT INTO kv_store (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    rows,
                )
                await connection.execute("COMMIT")
            except Exception:
                await connection.execute("ROLLBACK")
                raise

        self._change_notify.set()

    async def remove(self, keys: str | Iterable[str]) -> None:
        connection = self._check_connected()
        key_list = normalize_keys(keys)

        async with self._lock:
            await connection.executemany(
                "DELETE FROM kv_store WHERE key = ?",
                [(key,) for key in key_list],
            )
            await connection.commit()

        self._change_notify.set()

    async def reset(self) -> None:
        """Delete every row (testing)."""
        connection = self._check_connected()
        async with self._lock:
            await connection.execute("DELETE FROM kv_store")
            await connection.commit()

    def change_notify(self) -> asyncio.Event:
        """Return event for change notifications (ChangeNotificationSource protocol)."""
        return self._change_notify
