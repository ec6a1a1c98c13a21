"""Redis-based key/value store implementation.

Lets several engine processes share one trigger state (shortcut map,
visit-web list, alarms, workflow queue) across machines.

Data Structures:
- pyblockflow:kv:{key} (STRING): JSON-encoded value

Key Features:
- Batched reads with MGET
- Atomic batched writes with MULTI/EXEC pipelines
- Connection pooling: redis-py connection pool for concurrent access

Design: Adapter Pattern
Implements the KeyValueStore protocol for Redis.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

import redis.asyncio as redis

from pyblockflow.storage.base import (
    KeyValueStore,
    StorageError,
    decode_value,
    encode_value,
    normalize_keys,
)

KEY_PREFIX = "pyblockflow:kv:"


class RedisKeyValueStore(KeyValueStore):
    """Redis key/value store using connection pooling.

    All dependencies (Redis connection) passed explicitly.

    Usage:
        store = RedisKeyValueStore("redis://localhost:6379")
        await store.connect()

        await store.set({"shortcuts": {"trigger:wf:1": "ctrl+k"}})
        shortcuts = await store.get_value("shortcuts", {})
    """

    def __init__(self, redis_url: str = "redis://localhost:6379", max_connections: int = 16):
        """Initialize Redis store.

        Default redis_url works for local development.

        Args:
            redis_url: Redis connection URL
            max_connections: Maximum pool size
        """
        self._redis_url = redis_url
        self._max_connections = max_connections
        self._redis: redis.Redis | None = None
        self._change_notify = asyncio.Event()

    def __repr__(self) -> str:
        return f"RedisKeyValueStore({self._redis_url})"

    async def connect(self) -> None:
        """Establish Redis connection pool."""
        self._redis = redis.from_url(
            self._redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=self._max_connections,
        )

    async def close(self) -> None:
        """Close Redis connection pool."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    def _check_connected(self) -> redis.Redis:
        """Ensure connection established.

        Raises immediately if not connected.
        """
        if self._redis is None:
            raise StorageError("Not connected. Call connect() first.")
        return self._redis

    @staticmethod
    def _key(key: str) -> str:
        """Build namespaced Redis key."""
        return f"{KEY_PREFIX}{key}"

    async def get(self, keys: str | Iterable[str]) -> dict[str, Any]:
        client = self._check_connected()
        key_list = normalize_keys(keys)
        if not key_list:
            return {}

        try:
            raw_values = await client.mget([self._key(key) for key in key_list])
        except redis.RedisError as e:
            raise StorageError(f"Redis get failed: {e}") from e

        return {
            key: decode_value(key, raw)
            for key, raw in zip(key_list, raw_values, strict=True)
            if raw is not None
        }

    async def set(self, items: Mapping[str, Any]) -> None:
        client = self._check_connected()
        encoded = {self._key(key): encode_value(key, value) for key, value in items.items()}
        if not encoded:
            return

        try:
            async with client.pipeline(transaction=True) as pipe:
                pipe.mset(encoded)
                await pipe.execute()
        except redis.RedisError as e:
            raise StorageError(f"Redis set failed: {e}") from e

        self._change_notify.set()

    async def remove(self, keys: str | Iterable[str]) -> None:
        client = self._check_connected()
        key_list = normalize_keys(keys)
        if not key_list:
            return

        try:
            await client.delete(*(self._key(key) for key in key_list))
        except redis.RedisError as e:
            raise StorageError(f"Redis remove failed: {e}") from e

        self._change_notify.set()

    async def reset(self) -> None:
        """Delete every pyblockflow key (testing)."""
        client = self._check_connected()
        keys = [key async for key in client.scan_iter(match=f"{KEY_PREFIX}*")]
        if keys:
            await client.delete(*keys)

    def change_notify(self) -> asyncio.Event:
        """Return event for change notifications (ChangeNotificationSource protocol).

        Only reflects writes made through this process's store instance.
        """
        return self._change_notify
