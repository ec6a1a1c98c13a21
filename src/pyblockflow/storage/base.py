"""
KeyValueStore protocol - Abstract interface for durable key/value backends.

Design Pattern: Adapter Pattern
KeyValueStore defines the target interface that all storage adapters implement.
Different backends (SQLite, Redis, Memory) adapt to this common interface.

Design Principle: Dependency Inversion (SOLID)
The trigger registry, strategies, and clock depend on this abstraction,
not on concrete storage implementations. Tests use InMemoryKeyValueStore.

Values are JSON-compatible: dicts, lists, strings, numbers, booleans, None.
Every read hands back a fresh copy, so callers may mutate what they get
without touching stored state until they call set().
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "KeyValueStore",
    "StorageError",
    "ChangeNotificationSource",
    "encode_value",
    "decode_value",
    "normalize_keys",
]


class StorageError(Exception):
    """
    Storage operation failed.

    Custom exception with context, not generic Exception.
    """

    pass


def encode_value(key: str, value: Any) -> str:
    """Serialize a value to JSON text.

    Raises:
        StorageError: If the value is not JSON-compatible
    """
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Value for key {key!r} is not JSON-serializable: {e}") from e


def decode_value(key: str, raw: str | bytes) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Corrupt value stored under key {key!r}: {e}") from e


def normalize_keys(keys: str | Iterable[str]) -> list[str]:
    """Accept a single key or an iterable of keys."""
    if isinstance(keys, str):
        return [keys]
    return list(keys)


class KeyValueStore(ABC):
    """
    Abstract process-durable mapping from string keys to JSON values.

    Mirrors the extension storage contract: get/set/remove on batches of
    keys. Missing keys are simply absent from get() results.

    Pattern Benefits:
    - Open-Closed Principle: Add new backends without modifying clients
    - Testability: Easy to substitute InMemoryKeyValueStore
    - Flexibility: Switch storage at runtime (SQLite <-> Redis <-> Memory)
    """

    @abstractmethod
    async def get(self, keys: str | Iterable[str]) -> dict[str, Any]:
        """
        Read one or more keys.

        Args:
            keys: A single key or an iterable of keys

        Returns:
            Mapping of the keys that exist to copies of their values

        Raises:
            StorageError: If the backend fails
        """
        pass

    @abstractmethod
    async def set(self, items: Mapping[str, Any]) -> None:
        """
        Write every key in ``items``, replacing existing values.

        Raises:
            StorageError: If a value is not JSON-serializable or the backend fails
        """
        pass

    @abstractmethod
    async def remove(self, keys: str | Iterable[str]) -> None:
        """
        Delete one or more keys. Missing keys are ignored.
        """
        pass

    async def get_value(self, key: str, default: Any = None) -> Any:
        """Convenience wrapper returning a single value (or ``default``)."""
        result = await self.get(key)
        return result.get(key, default)

    async def reset(self) -> None:
        """
        Remove every key (testing and maintenance).

        Default implementation does nothing; backends override.
        """
        pass

    async def close(self) -> None:
        """
        Release backend resources. Idempotent.
        """
        pass


@runtime_checkable
class ChangeNotificationSource(Protocol):
    """
    Protocol for stores that signal when their contents change.

    **Pattern**: Interface Segregation Principle (SOLID)
    Not every backend can notify. Consumers check with isinstance() and
    fall back to polling otherwise.

    **Usage**:
    ```python
    if isinstance(store, ChangeNotificationSource):
        await asyncio.wait_for(store.change_notify().wait(), timeout=poll_interval)
    else:
        await asyncio.sleep(poll_interval)
    ```
    """

    def change_notify(self) -> asyncio.Event:
        """
        Return event that is set whenever set() or remove() completes.

        Returns:
            asyncio.Event that watchers wait on
        """
        ...
