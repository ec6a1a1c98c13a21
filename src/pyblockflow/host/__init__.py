"""Host services the trigger registry schedules against.

    - ClockService: named alarms at absolute times or on a period
    - MenuHost: hierarchical command menu (per-workflow leaf entries)

Concrete hosts:
    - KeyValueClock: alarms persisted in a KeyValueStore
    - InMemoryMenuHost / StaticMenuHost: in-process menu trees with and
      without refresh support
"""

from pyblockflow.host.base import (
    AlarmNotificationSource,
    ClockService,
    MenuHost,
    MenuHostError,
    NotFoundError,
    RefreshableMenuHost,
    SchedulingConflictError,
)
from pyblockflow.host.clock import ALARMS_KEY, KeyValueClock
from pyblockflow.host.menu import InMemoryMenuHost, StaticMenuHost

__all__ = [
    "ClockService",
    "MenuHost",
    "RefreshableMenuHost",
    "AlarmNotificationSource",
    "MenuHostError",
    "SchedulingConflictError",
    "NotFoundError",
    "KeyValueClock",
    "ALARMS_KEY",
    "InMemoryMenuHost",
    "StaticMenuHost",
]
