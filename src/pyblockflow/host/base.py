"""
Host service interfaces: the clock service and the command-menu host.

Design Principle: Dependency Inversion (SOLID)
Trigger strategies receive these collaborators through their constructors
instead of reaching for ambient browser APIs, so every strategy can be
exercised against in-memory hosts.

Error kinds raised by hosts:
- MenuHostError: the menu host rejected an entry
- SchedulingConflictError: a menu entry named a parent that does not exist
- NotFoundError: clearing an alarm or removing a menu entry that is not there
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Protocol, runtime_checkable

from pyblockflow.models import AlarmInfo, MenuEntry

__all__ = [
    "ClockService",
    "MenuHost",
    "RefreshableMenuHost",
    "AlarmNotificationSource",
    "MenuHostError",
    "SchedulingConflictError",
    "NotFoundError",
]


class MenuHostError(Exception):
    """Menu host rejected an operation."""

    pass


class SchedulingConflictError(MenuHostError):
    """Menu entry references a parent entry that does not exist."""

    def __init__(self, parent_id: str):
        super().__init__(f"Cannot find menu item with id {parent_id}")
        self.parent_id = parent_id


class NotFoundError(Exception):
    """Alarm or menu entry does not exist."""

    pass


class ClockService(ABC):
    """
    Schedules named wake-ups at absolute times or on a repeating period.

    Alarm names are registration keys. Creating an alarm under an existing
    name replaces it.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Current local time as seen by this clock."""
        pass

    @abstractmethod
    async def create_alarm(
        self,
        name: str,
        when: datetime | None = None,
        period_in_minutes: float | None = None,
        delay_in_minutes: float | None = None,
    ) -> AlarmInfo:
        """
        Schedule an alarm.

        First fire time is ``when`` if given, otherwise ``now + delay``,
        otherwise ``now + period``.

        Args:
            name: Alarm name (registration key)
            when: Absolute fire time for one-shot alarms
            period_in_minutes: Repeat period
            delay_in_minutes: Offset of the first fire for periodic alarms

        Returns:
            The scheduled alarm
        """
        pass

    @abstractmethod
    async def get_all_alarms(self) -> list[AlarmInfo]:
        """Return every scheduled alarm."""
        pass

    @abstractmethod
    async def clear_alarm(self, name: str) -> bool:
        """
        Remove an alarm.

        Returns:
            True if an alarm was removed, False if none had that name
        """
        pass

    @abstractmethod
    async def get_expired_alarms(self, now: datetime) -> list[AlarmInfo]:
        """Return alarms whose scheduled time is at or before ``now``."""
        pass

    @abstractmethod
    async def acknowledge(self, alarm: AlarmInfo, now: datetime) -> None:
        """
        Mark an expired alarm as fired.

        Periodic alarms are re-armed for their next period, one-shot
        alarms are removed.
        """
        pass

    async def get_next_fire_time(self) -> datetime | None:
        """Earliest scheduled fire time, or None when nothing is scheduled."""
        alarms = await self.get_all_alarms()
        if not alarms:
            return None
        return min(alarm.scheduled_time for alarm in alarms)


class MenuHost(ABC):
    """
    Hierarchical command menu with one reserved root and per-workflow leaves.
    """

    @abstractmethod
    async def create_menu_entry(self, entry: MenuEntry) -> None:
        """
        Create (or replace) a menu entry.

        Raises:
            SchedulingConflictError: If ``entry.parent_id`` does not exist
            MenuHostError: For any other rejection
        """
        pass

    @abstractmethod
    async def remove_menu_entry(self, entry_id: str) -> None:
        """
        Remove a menu entry and its children.

        Raises:
            NotFoundError: If no entry has that id
        """
        pass


@runtime_checkable
class RefreshableMenuHost(Protocol):
    """
    Protocol for menu hosts that need an explicit refresh after changes.

    Not every host supports it; strategies check with isinstance().
    """

    async def refresh(self) -> None:
        """Redraw the menu with its current entries."""
        ...


@runtime_checkable
class AlarmNotificationSource(Protocol):
    """
    Protocol for clocks that signal when their alarm set changes.

    Lets the alarm watcher sleep until the next alarm and still wake up
    early when a sooner one is scheduled.

    **Usage**:
    ```python
    if isinstance(clock, AlarmNotificationSource):
        await asyncio.wait_for(clock.alarm_notify().wait(), timeout=sleep_for)
    ```
    """

    def alarm_notify(self) -> asyncio.Event:
        """Return event that is set when alarms are created or cleared."""
        ...
