"""Tests for environment configuration and store creation."""

import pytest

from pyblockflow.config import ConfigError, EngineConfig, create_store
from pyblockflow.storage import InMemoryKeyValueStore, SqliteKeyValueStore


def test_defaults_when_environment_is_empty():
    config = EngineConfig.from_env({})

    assert config == EngineConfig()
    assert config.storage == "memory"
    assert config.key_match == "substring"
    assert config.alarm_poll_interval == 1.0


def test_reads_prefixed_variables():
    config = EngineConfig.from_env(
        {
            "PYBLOCKFLOW_STORAGE": "SQLite",
            "PYBLOCKFLOW_SQLITE_PATH": "/tmp/flows.db",
            "PYBLOCKFLOW_KEY_MATCH": "segment",
            "PYBLOCKFLOW_LOG_LEVEL": "debug",
            "PYBLOCKFLOW_ALARM_POLL_INTERVAL": "0.25",
            "UNRELATED": "ignored",
        }
    )

    assert config.storage == "sqlite"
    assert config.sqlite_path == "/tmp/flows.db"
    assert config.key_match == "segment"
    assert config.log_level == "DEBUG"
    assert config.alarm_poll_interval == 0.25


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("PYBLOCKFLOW_REDIS_URL", "redis://cache:6380/2")
    assert EngineConfig.from_env().redis_url == "redis://cache:6380/2"


@pytest.mark.parametrize(
    "name, value",
    [
        ("PYBLOCKFLOW_STORAGE", "postgres"),
        ("PYBLOCKFLOW_KEY_MATCH", "regex"),
        ("PYBLOCKFLOW_LOG_LEVEL", "LOUD"),
        ("PYBLOCKFLOW_ALARM_POLL_INTERVAL", "soon"),
        ("PYBLOCKFLOW_ALARM_POLL_INTERVAL", "0"),
    ],
)
def test_invalid_values_raise_config_error(name, value):
    with pytest.raises(ConfigError):
        EngineConfig.from_env({name: value})


@pytest.mark.asyncio
async def test_create_memory_store():
    store = await create_store(EngineConfig())
    assert isinstance(store, InMemoryKeyValueStore)


@pytest.mark.asyncio
async def test_create_sqlite_store(temp_db_path):
    store = await create_store(EngineConfig(storage="sqlite", sqlite_path=str(temp_db_path)))
    try:
        assert isinstance(store, SqliteKeyValueStore)
        await store.set({"a": 1})
        assert await store.get_value("a") == 1
    finally:
        await store.close()
