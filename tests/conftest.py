"""
Pytest configuration and fixtures for pyblockflow tests.

Provides stores, a clock pinned to a fixed moment, menu hosts, registries
and hypothesis strategies for trigger configurations.
"""

import shutil
import tempfile
from collections.abc import AsyncGenerator
from datetime import datetime
from pathlib import Path

import pytest
from hypothesis import strategies as st

from pyblockflow.clients import InMemoryTabularClient
from pyblockflow.executor import BlockExecutor, GoogleSheetsBlock, TriggerBlock
from pyblockflow.host import InMemoryMenuHost, KeyValueClock
from pyblockflow.storage import InMemoryKeyValueStore, SqliteKeyValueStore
from pyblockflow.triggers import TriggerRegistry

# Wednesday, noon
FIXED_NOW = datetime(2024, 5, 8, 12, 0, 0)


def pytest_sessionfinish(session, exitstatus):
    """Force cleanup after all tests complete to prevent CI hanging."""
    import os

    if os.getenv("CI") or os.getenv("GITHUB_ACTIONS"):
        os._exit(exitstatus)


class RecordingClock(KeyValueClock):
    """KeyValueClock that records the arguments of every create_alarm call."""

    def __init__(self, store, now_func=lambda: FIXED_NOW):
        super().__init__(store, now_func=now_func)
        self.create_calls: list[dict] = []

    async def create_alarm(
        self, name, when=None, period_in_minutes=None, delay_in_minutes=None
    ):
        self.create_calls.append(
            {
                "name": name,
                "when": when,
                "period_in_minutes": period_in_minutes,
                "delay_in_minutes": delay_in_minutes,
            }
        )
        return await super().create_alarm(
            name,
            when=when,
            period_in_minutes=period_in_minutes,
            delay_in_minutes=delay_in_minutes,
        )


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
async def memory_store() -> AsyncGenerator[InMemoryKeyValueStore, None]:
    """Async in-memory store fixture with automatic cleanup."""
    store = InMemoryKeyValueStore()
    yield store
    await store.reset()


@pytest.fixture
async def sqlite_memory_store() -> AsyncGenerator[SqliteKeyValueStore, None]:
    """Async SQLite in-memory store fixture with automatic cleanup."""
    store = SqliteKeyValueStore(":memory:")
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
def temp_db_path():
    """Temporary database file path with automatic cleanup."""
    tmpdir = Path(tempfile.mkdtemp())
    db_path = tmpdir / "test.db"
    yield db_path
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture(params=["memory", "sqlite"])
async def kv_store(request) -> AsyncGenerator:
    """Every local store backend, for tests that must hold for all of them."""
    if request.param == "memory":
        store = InMemoryKeyValueStore()
        yield store
        await store.reset()
    else:
        store = await SqliteKeyValueStore.in_memory()
        yield store
        await store.close()


@pytest.fixture
def clock(memory_store) -> RecordingClock:
    """Clock pinned to FIXED_NOW that records alarm creation."""
    return RecordingClock(memory_store)


@pytest.fixture
def menu_host() -> InMemoryMenuHost:
    return InMemoryMenuHost()


@pytest.fixture
def registry(clock, memory_store, menu_host) -> TriggerRegistry:
    return TriggerRegistry(clock, memory_store, menu_host)


@pytest.fixture
def sheets_client() -> InMemoryTabularClient:
    return InMemoryTabularClient(
        {
            "sheet-1": {
                "Sheet1!A1:B3": [["name", "price"], ["apple", "3"], ["pear", "5"]],
            }
        }
    )


@pytest.fixture
def block_executor(sheets_client) -> BlockExecutor:
    return BlockExecutor([TriggerBlock(), GoogleSheetsBlock(sheets_client)])


# Hypothesis strategies for property-based testing

workflow_ids = st.text(
    min_size=1, max_size=12, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"))
)
trigger_ids = st.text(
    min_size=1, max_size=8, alphabet=st.characters(whitelist_categories=("Ll", "Nd"))
)


@st.composite
def trigger_entry_strategy(draw):
    """Strategy for one list-form trigger entry of any schedulable kind."""
    kind = draw(
        st.sampled_from(
            ["interval", "date", "specific-day", "visit-web", "context-menu", "keyboard-shortcut"]
        )
    )

    if kind == "interval":
        data = {
            "interval": draw(st.integers(min_value=1, max_value=120)),
            "delay": draw(st.integers(min_value=0, max_value=30)),
            "fixedDelay": draw(st.booleans()),
        }
    elif kind == "date":
        data = {
            "date": draw(st.sampled_from(["", "2024-06-01", "2025-01-15"])),
            "time": draw(st.sampled_from(["08:00", "13:30:15"])),
        }
    elif kind == "specific-day":
        days = draw(st.lists(st.integers(min_value=0, max_value=6), max_size=3, unique=True))
        data = {"days": [{"id": day, "times": ["09:00:00"]} for day in days]}
    elif kind == "visit-web":
        data = {"url": draw(st.sampled_from(["example.com", "https://a.test/*"])), "isUrlRegex": False}
    elif kind == "context-menu":
        data = {"contextMenuName": "Run", "contextTypes": ["page"]}
    else:
        data = {"shortcut": draw(st.sampled_from(["mod+shift+a", "alt+k"]))}

    return {"type": kind, "data": data}


@st.composite
def trigger_config_strategy(draw):
    """Strategy for a list-form trigger configuration with unique trigger ids."""
    ids = draw(st.lists(trigger_ids, max_size=4, unique=True))
    return {"triggers": [{"id": tid, **draw(trigger_entry_strategy())} for tid in ids]}


# Register strategies for easy import
pytest.trigger_config_strategy = trigger_config_strategy
pytest.workflow_ids = workflow_ids
