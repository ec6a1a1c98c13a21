"""In-memory storage implementation for pyblockflow.

Design Pattern: Adapter Pattern
InMemoryKeyValueStore adapts an in-memory dictionary to the KeyValueStore
interface.

Instance is immediately usable after __init__.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from pyblockflow.storage.base import (
    KeyValueStore,
    decode_value,
    encode_value,
    normalize_keys,
)


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory storage for testing and single-process use.

    Can be substituted for SqliteKeyValueStore without changing client code.
    Values are kept as JSON text so the store behaves exactly like the
    durable backends (no shared mutable references, same serialization
    errors).

    Usage:
        store = InMemoryKeyValueStore()
        await store.set({"shortcuts": {}})
    """

    def __init__(self, initial: Mapping[str, Any] | None = None):
        """Initialize storage with change notification support.

        Args:
            initial: Optional values to seed the store with
        """
        # Storage: {key: json_text}
        self._data: dict[str, str] = {}

        self._lock = asyncio.Lock()

        # Notification event (implements ChangeNotificationSource)
        self._change_notify = asyncio.Event()

        for key, value in (initial or {}).items():
            self._data[key] = encode_value(key, value)

    def __repr__(self) -> str:
        """Return string representation of storage instance."""
        return "InMemoryKeyValueStore"

    async def get(self, keys: str | Iterable[str]) -> dict[str, Any]:
        async with self._lock:
            return {
                key: decode_value(key, self._data[key])
                for key in normalize_keys(keys)
                if key in self._data
            }

    async def set(self, items: Mapping[str, Any]) -> None:
        # Encode everything first so a bad value leaves the store untouched
        encoded = {key: encode_value(key, value) for key, value in items.items()}

        async with self._lock:
            self._data.update(encoded)

        self._change_notify.set()

    async def remove(self, keys: str | Iterable[str]) -> None:
        async with self._lock:
            for key in normalize_keys(keys):
                self._data.pop(key, None)

        self._change_notify.set()

    async def keys(self) -> list[str]:
        """Return every stored key (debugging and tests)."""
        async with self._lock:
            return list(self._data)

    async def reset(self) -> None:
        """Clear all data."""
        async with self._lock:
            self._data.clear()

    def change_notify(self) -> asyncio.Event:
        """Return event for change notifications (ChangeNotificationSource protocol)."""
        return self._change_notify
