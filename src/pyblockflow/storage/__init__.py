"""Key/value storage backends for durable trigger state.

Provides multiple storage implementations behind a common interface:
    - KeyValueStore: Abstract interface
    - SqliteKeyValueStore: SQLite-backed storage
    - RedisKeyValueStore: Redis-backed distributed storage
    - InMemoryKeyValueStore: In-memory storage for testing

Design: Adapter Pattern + Dependency Inversion (SOLID)
    All storage implementations adapt to the KeyValueStore interface.
    Clients depend on abstraction, not concrete implementations,
    enabling easy swapping between storage backends.
"""

from pyblockflow.storage.base import (
    ChangeNotificationSource,
    KeyValueStore,
    StorageError,
)
from pyblockflow.storage.memory import InMemoryKeyValueStore

# Lazy imports: the sqlite and redis backends pull in their drivers only
# when actually requested.


def __getattr__(name: str):
    """Lazy import optional storage implementations."""
    if name == "RedisKeyValueStore":
        from pyblockflow.storage.redis import RedisKeyValueStore

        return RedisKeyValueStore
    elif name == "SqliteKeyValueStore":
        from pyblockflow.storage.sqlite import SqliteKeyValueStore

        return SqliteKeyValueStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "KeyValueStore",
    "StorageError",
    "ChangeNotificationSource",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    "RedisKeyValueStore",
]
