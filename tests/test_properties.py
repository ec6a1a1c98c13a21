"""
Property-based tests for pyblockflow using Hypothesis.

These tests generate many trigger configurations to check:
- Registration idempotence
- Clean-up isolation between workflows
- Registration key round-trips
- Weekly schedules always landing in the future
- Stores agreeing with each other
"""

from datetime import datetime, timedelta

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from pyblockflow.host import InMemoryMenuHost, KeyValueClock
from pyblockflow.models import DayEntry, SpecificDayParams, parse_registration_key, registration_key
from pyblockflow.storage import InMemoryKeyValueStore, SqliteKeyValueStore
from pyblockflow.triggers import TriggerRegistry, WorkflowQueue, segment_match
from pyblockflow.triggers.schedule import next_specific_day_time

NOW = datetime(2024, 5, 8, 12, 0)


def make_registry(key_match: str = "substring"):
    store = InMemoryKeyValueStore()
    clock = KeyValueClock(store, now_func=lambda: NOW)
    menu_host = InMemoryMenuHost()
    return TriggerRegistry(clock, store, menu_host, key_match=key_match), store, menu_host


async def external_state(store: InMemoryKeyValueStore, menu_host: InMemoryMenuHost) -> tuple:
    values = await store.get(await store.keys())
    menu = sorted((entry.id, entry.parent_id, entry.title) for entry in menu_host.entries())
    return values, menu


# ==============================================================================
# PROPERTY 1: Registration is idempotent
# ==============================================================================


@pytest.mark.property
@pytest.mark.asyncio
@given(workflow_id=pytest.workflow_ids, config=pytest.trigger_config_strategy())
@settings(max_examples=50, deadline=None)
async def test_register_twice_equals_register_once(workflow_id, config):
    """
    Property: register(wf, c); register(wf, c) leaves the same external state
    as a single register(wf, c).
    """
    registry, store, menu_host = make_registry()

    await registry.register_workflow_trigger(workflow_id, config)
    once = await external_state(store, menu_host)

    await registry.register_workflow_trigger(workflow_id, config)
    twice = await external_state(store, menu_host)

    assert once == twice


# ==============================================================================
# PROPERTY 2: Clean-up only touches the cleaned workflow
# ==============================================================================


@pytest.mark.property
@pytest.mark.asyncio
@given(
    workflow_id=pytest.workflow_ids,
    other_id=pytest.workflow_ids,
    config=pytest.trigger_config_strategy(),
    other_config=pytest.trigger_config_strategy(),
)
@settings(max_examples=50, deadline=None)
async def test_clean_leaves_other_workflows_untouched(workflow_id, other_id, config, other_config):
    """
    Property: after clean(wf), no alarm, shortcut, visit-web entry or queue
    entry mentions wf, and everything belonging to an unrelated workflow
    survives.
    """
    # Substring matching links workflows whose keys contain the cleaned id
    other_keys = [registration_key(other_id, item["id"]) for item in other_config["triggers"]]
    assume(workflow_id not in other_id)
    assume(all(workflow_id not in key for key in other_keys))

    registry, store, _ = make_registry()
    await registry.register_workflow_trigger(other_id, other_config)
    other_state = await store.get(["shortcuts", "visitWebTriggers", "alarms"])

    await registry.register_workflow_trigger(workflow_id, config)
    await registry.queue.push(workflow_id)
    await registry.queue.push(other_id)

    await registry.clean_workflow_triggers(workflow_id)

    after = await store.get(["shortcuts", "visitWebTriggers", "alarms"])
    assert all(workflow_id not in key for key in after.get("alarms", {}))
    assert all(workflow_id not in key for key in after.get("shortcuts", {}))
    assert all(workflow_id not in item["id"] for item in after.get("visitWebTriggers", []))
    assert await registry.queue.entries() == [other_id]
    for key, empty in (("shortcuts", {}), ("visitWebTriggers", []), ("alarms", {})):
        assert after.get(key, empty) == other_state.get(key, empty)


# ==============================================================================
# PROPERTY 3: Registration keys round-trip
# ==============================================================================


@pytest.mark.property
@given(
    workflow_id=st.text(min_size=1, max_size=20).filter(lambda s: ":" not in s),
    trigger_id=st.one_of(st.none(), st.text(min_size=1, max_size=20)),
)
def test_registration_key_roundtrip(workflow_id, trigger_id):
    """Property: parse(registration_key(wf, t)) == (wf, t) for colon-free workflow ids."""
    key = registration_key(workflow_id, trigger_id)

    assert parse_registration_key(key) == (workflow_id, trigger_id)
    assert segment_match(key, workflow_id)


# ==============================================================================
# PROPERTY 4: Weekly schedules
# ==============================================================================


@pytest.mark.property
@given(
    days=st.lists(st.integers(min_value=0, max_value=6), min_size=1, max_size=7, unique=True),
    hour=st.integers(min_value=0, max_value=23),
    minute=st.integers(min_value=0, max_value=59),
    offset_minutes=st.integers(min_value=0, max_value=7 * 24 * 60),
)
def test_next_specific_day_time_is_future_and_within_a_week(days, hour, minute, offset_minutes):
    """Property: the chosen fire time is after now and at most 7 days away."""
    now = datetime(2024, 5, 5, 0, 0) + timedelta(minutes=offset_minutes)
    time_str = f"{hour:02d}:{minute:02d}"
    params = SpecificDayParams(days=tuple(DayEntry(id=day, times=(time_str,)) for day in days))

    fire_time = next_specific_day_time(params, now)

    assert fire_time > now
    assert fire_time - now <= timedelta(days=7)
    assert (fire_time.weekday() + 1) % 7 in days
    assert (fire_time.hour, fire_time.minute) == (hour, minute)


# ==============================================================================
# PROPERTY 5: Stores agree
# ==============================================================================

json_values = st.recursive(
    st.none() | st.booleans() | st.integers(min_value=-(2**53), max_value=2**53) | st.text(max_size=10),
    lambda children: st.lists(children, max_size=3)
    | st.dictionaries(st.text(max_size=5), children, max_size=3),
    max_leaves=10,
)
store_keys = st.text(
    min_size=1, max_size=8, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"))
)


@pytest.mark.property
@pytest.mark.asyncio
@given(
    items=st.dictionaries(store_keys, json_values, max_size=5),
    removed=st.lists(store_keys, max_size=3),
)
@settings(max_examples=30, deadline=None)
async def test_memory_and_sqlite_stores_agree(items, removed):
    """Property: the same set/remove sequence yields the same contents in every backend."""
    memory = InMemoryKeyValueStore()
    sqlite = await SqliteKeyValueStore.in_memory()
    try:
        for store in (memory, sqlite):
            await store.set(items)
            await store.remove(removed)

        keys = list(items) + removed
        assert await memory.get(keys) == await sqlite.get(keys)
    finally:
        await sqlite.close()


# ==============================================================================
# PROPERTY 6: Queue clean-up removes every matching entry
# ==============================================================================


@pytest.mark.property
@pytest.mark.asyncio
@given(entries=st.lists(st.sampled_from(["wf1", "wf2", "wf1-copy", "other"]), max_size=10))
@settings(max_examples=50, deadline=None)
async def test_queue_remove_matching_removes_all(entries):
    queue = WorkflowQueue(InMemoryKeyValueStore())
    for entry in entries:
        await queue.push(entry)

    removed = await queue.remove_matching("wf1", lambda key, wf: wf in key)

    remaining = await queue.entries()
    assert removed == sum(1 for entry in entries if "wf1" in entry)
    assert remaining == [entry for entry in entries if "wf1" not in entry]
