"""
Durable clock service backed by the key/value store.

Alarms are persisted under a single store key, so they survive process
restarts just like the rest of the trigger state. The alarm watcher polls
``get_expired_alarms()`` and acknowledges each fired alarm; periodic
alarms are re-armed, one-shot alarms disappear.

Stored format (key ``alarms``)::

    {"<name>": {"name": "<name>", "scheduledTime": "<iso>", "periodInMinutes": 5}}
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from pyblockflow.host.base import ClockService
from pyblockflow.models import AlarmInfo
from pyblockflow.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

ALARMS_KEY = "alarms"


class KeyValueClock(ClockService):
    """Clock service persisting alarms in a KeyValueStore.

    Usage:
        store = InMemoryKeyValueStore()
        clock = KeyValueClock(store)
        await clock.create_alarm("wf1", period_in_minutes=5)

    Tests inject ``now_func`` to pin the current time.
    """

    def __init__(
        self,
        store: KeyValueStore,
        now_func: Callable[[], datetime] = datetime.now,
        key: str = ALARMS_KEY,
    ):
        """Initialize the clock.

        Args:
            store: Store the alarm table lives in
            now_func: Source of the current time
            key: Store key holding the alarm table
        """
        self._store = store
        self._now_func = now_func
        self._key = key
        self._lock = asyncio.Lock()
        self._alarm_notify = asyncio.Event()

    def __repr__(self) -> str:
        return f"KeyValueClock({self._store!r})"

    def now(self) -> datetime:
        return self._now_func()

    async def _load(self) -> dict[str, AlarmInfo]:
        raw = await self._store.get_value(self._key) or {}
        return {name: AlarmInfo.from_dict(data) for name, data in raw.items()}

    async def _save(self, alarms: dict[str, AlarmInfo]) -> None:
        await self._store.set({self._key: {name: a.to_dict() for name, a in alarms.items()}})

    async def create_alarm(
        self,
        name: str,
        when: datetime | None = None,
        period_in_minutes: float | None = None,
        delay_in_minutes: float | None = None,
    ) -> AlarmInfo:
        now = self.now()

        if when is not None:
            scheduled_time = when
        elif delay_in_minutes is not None:
            scheduled_time = now + timedelta(minutes=delay_in_minutes)
        elif period_in_minutes is not None:
            scheduled_time = now + timedelta(minutes=period_in_minutes)
        else:
            raise ValueError("create_alarm requires when, period_in_minutes or delay_in_minutes")

        alarm = AlarmInfo(
            name=name,
            scheduled_time=scheduled_time,
            period_in_minutes=period_in_minutes,
        )

        async with self._lock:
            alarms = await self._load()
            alarms[name] = alarm
            await self._save(alarms)

        logger.debug(f"Alarm created: {alarm!r}")
        self._alarm_notify.set()
        return alarm

    async def get_all_alarms(self) -> list[AlarmInfo]:
        async with self._lock:
            alarms = await self._load()
        return list(alarms.values())

    async def clear_alarm(self, name: str) -> bool:
        async with self._lock:
            alarms = await self._load()
            if name not in alarms:
                return False
            del alarms[name]
            await self._save(alarms)

        logger.debug(f"Alarm cleared: {name}")
        self._alarm_notify.set()
        return True

    async def get_expired_alarms(self, now: datetime) -> list[AlarmInfo]:
        alarms = await self.get_all_alarms()
        expired = [alarm for alarm in alarms if alarm.scheduled_time <= now]
        return sorted(expired, key=lambda alarm: alarm.scheduled_time)

    async def acknowledge(self, alarm: AlarmInfo, now: datetime) -> None:
        async with self._lock:
            alarms = await self._load()
            current = alarms.get(alarm.name)

            # Replaced or cleared since it was fetched; leave the new state alone
            if current is None or current != alarm:
                return

            if alarm.is_periodic:
                alarms[alarm.name] = alarm.next_occurrence(now)
            else:
                del alarms[alarm.name]
            await self._save(alarms)

        self._alarm_notify.set()

    def alarm_notify(self) -> asyncio.Event:
        """Return event for alarm changes (AlarmNotificationSource protocol)."""
        return self._alarm_notify
