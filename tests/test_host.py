"""Tests for the key/value backed clock and the in-memory menu hosts."""

from datetime import datetime, timedelta

import pytest

from pyblockflow.host import (
    ALARMS_KEY,
    AlarmNotificationSource,
    InMemoryMenuHost,
    KeyValueClock,
    NotFoundError,
    RefreshableMenuHost,
    SchedulingConflictError,
    StaticMenuHost,
)
from pyblockflow.models import MenuEntry
from pyblockflow.storage import InMemoryKeyValueStore

NOW = datetime(2024, 5, 8, 12, 0)


class MutableNow:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# =============================================================================
# KeyValueClock
# =============================================================================


@pytest.mark.asyncio
async def test_create_alarm_first_fire_time_rules():
    clock = KeyValueClock(InMemoryKeyValueStore(), now_func=lambda: NOW)

    at = await clock.create_alarm("a", when=NOW + timedelta(hours=1))
    delayed = await clock.create_alarm("b", period_in_minutes=10, delay_in_minutes=3)
    periodic = await clock.create_alarm("c", period_in_minutes=10)

    assert at.scheduled_time == NOW + timedelta(hours=1)
    assert delayed.scheduled_time == NOW + timedelta(minutes=3)
    assert periodic.scheduled_time == NOW + timedelta(minutes=10)
    assert periodic.is_periodic and not at.is_periodic


@pytest.mark.asyncio
async def test_create_alarm_requires_a_time():
    clock = KeyValueClock(InMemoryKeyValueStore(), now_func=lambda: NOW)
    with pytest.raises(ValueError):
        await clock.create_alarm("a")


@pytest.mark.asyncio
async def test_alarms_survive_a_new_clock_on_the_same_store():
    store = InMemoryKeyValueStore()
    await KeyValueClock(store, now_func=lambda: NOW).create_alarm("wf1", period_in_minutes=5)

    alarms = await KeyValueClock(store, now_func=lambda: NOW).get_all_alarms()

    assert [alarm.name for alarm in alarms] == ["wf1"]
    assert "wf1" in await store.get_value(ALARMS_KEY)


@pytest.mark.asyncio
async def test_same_name_replaces_alarm():
    clock = KeyValueClock(InMemoryKeyValueStore(), now_func=lambda: NOW)
    await clock.create_alarm("wf1", period_in_minutes=5)
    await clock.create_alarm("wf1", when=NOW + timedelta(days=1))

    alarms = await clock.get_all_alarms()

    assert len(alarms) == 1
    assert alarms[0].period_in_minutes is None


@pytest.mark.asyncio
async def test_clear_alarm_reports_whether_it_existed():
    clock = KeyValueClock(InMemoryKeyValueStore(), now_func=lambda: NOW)
    await clock.create_alarm("wf1", period_in_minutes=5)

    assert await clock.clear_alarm("wf1") is True
    assert await clock.clear_alarm("wf1") is False
    assert await clock.get_all_alarms() == []


@pytest.mark.asyncio
async def test_acknowledge_rearms_periodic_and_drops_one_shot():
    now = MutableNow(NOW)
    clock = KeyValueClock(InMemoryKeyValueStore(), now_func=now)
    await clock.create_alarm("periodic", period_in_minutes=10)
    await clock.create_alarm("once", when=NOW + timedelta(minutes=5))

    now.now = NOW + timedelta(minutes=12)
    expired = await clock.get_expired_alarms(now.now)
    assert [alarm.name for alarm in expired] == ["once", "periodic"]

    for alarm in expired:
        await clock.acknowledge(alarm, now.now)

    remaining = await clock.get_all_alarms()
    assert [alarm.name for alarm in remaining] == ["periodic"]
    assert remaining[0].scheduled_time == NOW + timedelta(minutes=20)
    assert await clock.get_next_fire_time() == NOW + timedelta(minutes=20)


@pytest.mark.asyncio
async def test_acknowledge_leaves_replaced_alarm_alone():
    clock = KeyValueClock(InMemoryKeyValueStore(), now_func=lambda: NOW)
    old = await clock.create_alarm("wf1", when=NOW)
    replacement = await clock.create_alarm("wf1", when=NOW + timedelta(days=1))

    await clock.acknowledge(old, NOW)

    assert await clock.get_all_alarms() == [replacement]


@pytest.mark.asyncio
async def test_clock_signals_alarm_changes():
    clock = KeyValueClock(InMemoryKeyValueStore(), now_func=lambda: NOW)
    assert isinstance(clock, AlarmNotificationSource)

    event = clock.alarm_notify()
    event.clear()
    await clock.create_alarm("wf1", period_in_minutes=1)

    assert event.is_set()


# =============================================================================
# Menu hosts
# =============================================================================


@pytest.mark.asyncio
async def test_menu_child_requires_existing_parent():
    host = StaticMenuHost()

    with pytest.raises(SchedulingConflictError) as exc_info:
        await host.create_menu_entry(MenuEntry(id="leaf", title="Leaf", parent_id="root"))

    assert exc_info.value.parent_id == "root"
    assert host.get("leaf") is None


@pytest.mark.asyncio
async def test_menu_remove_takes_subtree():
    host = StaticMenuHost()
    await host.create_menu_entry(MenuEntry(id="root", title="Root"))
    await host.create_menu_entry(MenuEntry(id="leaf", title="Leaf", parent_id="root"))
    await host.create_menu_entry(MenuEntry(id="other", title="Other"))

    await host.remove_menu_entry("root")

    assert [entry.id for entry in host.entries()] == ["other"]


@pytest.mark.asyncio
async def test_menu_remove_unknown_raises_not_found():
    with pytest.raises(NotFoundError):
        await StaticMenuHost().remove_menu_entry("nope")


@pytest.mark.asyncio
async def test_only_in_memory_host_is_refreshable():
    assert isinstance(InMemoryMenuHost(), RefreshableMenuHost)
    assert not isinstance(StaticMenuHost(), RefreshableMenuHost)

    host = InMemoryMenuHost()
    await host.refresh()
    assert host.refresh_count == 1
