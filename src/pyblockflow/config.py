"""
Engine configuration read from the environment.

Variables:
    PYBLOCKFLOW_STORAGE: ``memory`` (default), ``sqlite`` or ``redis``
    PYBLOCKFLOW_SQLITE_PATH: SQLite database file (default ``pyblockflow.db``)
    PYBLOCKFLOW_REDIS_URL: Redis URL (default ``redis://localhost:6379``)
    PYBLOCKFLOW_KEY_MATCH: ``substring`` (default) or ``segment``
    PYBLOCKFLOW_LOG_LEVEL: logging level name (default ``INFO``)
    PYBLOCKFLOW_ALARM_POLL_INTERVAL: alarm watcher poll interval in seconds

Example:
    # $ export PYBLOCKFLOW_STORAGE=sqlite
    # $ export PYBLOCKFLOW_SQLITE_PATH=/var/lib/pyblockflow/state.db
    config = EngineConfig.from_env()
    store = await create_store(config)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from pyblockflow.storage import InMemoryKeyValueStore, KeyValueStore
from pyblockflow.triggers.registry import KEY_MATCHERS

logger = logging.getLogger(__name__)

__all__ = ["EngineConfig", "ConfigError", "create_store", "configure_logging", "STORAGE_BACKENDS"]

ENV_PREFIX = "PYBLOCKFLOW_"
STORAGE_BACKENDS = ("memory", "sqlite", "redis")


class ConfigError(Exception):
    """An environment variable holds an invalid value."""

    pass


@dataclass(frozen=True)
class EngineConfig:
    """Settings for assembling an Engine."""

    storage: str = "memory"
    sqlite_path: str = "pyblockflow.db"
    redis_url: str = "redis://localhost:6379"
    key_match: str = "substring"
    log_level: str = "INFO"
    alarm_poll_interval: float = 1.0

    def __post_init__(self):
        if self.storage not in STORAGE_BACKENDS:
            raise ConfigError(
                f"Unknown storage backend '{self.storage}', expected one of {STORAGE_BACKENDS}"
            )
        if self.key_match not in KEY_MATCHERS:
            raise ConfigError(
                f"Unknown key match mode '{self.key_match}', expected one of {sorted(KEY_MATCHERS)}"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"Unknown log level '{self.log_level}'")
        if self.alarm_poll_interval <= 0:
            raise ConfigError(
                f"Alarm poll interval must be positive, got {self.alarm_poll_interval}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """
        Build a config from ``PYBLOCKFLOW_*`` environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Raises:
            ConfigError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def read(name: str, default: str) -> str:
            return env.get(ENV_PREFIX + name, default).strip()

        raw_interval = read("ALARM_POLL_INTERVAL", str(defaults.alarm_poll_interval))
        try:
            interval = float(raw_interval)
        except ValueError:
            raise ConfigError(
                f"{ENV_PREFIX}ALARM_POLL_INTERVAL must be a number, got '{raw_interval}'"
            ) from None

        return cls(
            storage=read("STORAGE", defaults.storage).lower(),
            sqlite_path=read("SQLITE_PATH", defaults.sqlite_path),
            redis_url=read("REDIS_URL", defaults.redis_url),
            key_match=read("KEY_MATCH", defaults.key_match).lower(),
            log_level=read("LOG_LEVEL", defaults.log_level).upper(),
            alarm_poll_interval=interval,
        )


async def create_store(config: EngineConfig) -> KeyValueStore:
    """Create and connect the store the config names."""
    if config.storage == "sqlite":
        from pyblockflow.storage.sqlite import SqliteKeyValueStore

        store = SqliteKeyValueStore(config.sqlite_path)
        await store.connect()
        logger.info(f"Using SQLite store at {config.sqlite_path}")
        return store

    if config.storage == "redis":
        from pyblockflow.storage.redis import RedisKeyValueStore

        store = RedisKeyValueStore(config.redis_url)
        await store.connect()
        logger.info(f"Using Redis store at {config.redis_url}")
        return store

    logger.info("Using in-memory store")
    return InMemoryKeyValueStore()


def configure_logging(config: EngineConfig) -> None:
    """Apply the configured level to the root logger."""
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
