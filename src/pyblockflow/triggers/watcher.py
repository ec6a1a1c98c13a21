"""Alarm watcher: turns fired clock alarms into workflow activations.

The clock only records when alarms are due. The watcher polls for expired
alarms, acknowledges them (periodic alarms re-arm, one-shot alarms go
away) and hands an Activation to the engine's callback.

Features:
- Sleeps until the next alarm is due, capped at the poll interval
- Wakes early on clock change notifications when the clock supports them
- A failing activation callback is logged and does not stop the others
- Graceful shutdown
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from pyblockflow.host.base import AlarmNotificationSource, ClockService
from pyblockflow.models import parse_registration_key

logger = logging.getLogger(__name__)

__all__ = ["Activation", "AlarmWatcher", "ActivationCallback"]


@dataclass(frozen=True)
class Activation:
    """A workflow start requested by a fired alarm."""

    workflow_id: str
    trigger_id: str | None
    alarm_name: str
    fired_at: datetime


ActivationCallback = Callable[[Activation], Awaitable[None]]


class AlarmWatcher:
    """Observes a ClockService and dispatches activations.

    Usage:
        async def on_activation(activation):
            await engine.run_workflow(activation.workflow_id)

        watcher = AlarmWatcher(clock, on_activation, poll_interval=1.0)
        await watcher.start()
        ...
        await watcher.shutdown()
    """

    def __init__(
        self,
        clock: ClockService,
        on_activation: ActivationCallback,
        poll_interval: float = 1.0,
    ):
        self._clock = clock
        self._on_activation = on_activation
        self._poll_interval = poll_interval
        self._shutdown_event = asyncio.Event()
        self._task: asyncio.Task | None = None

        if isinstance(clock, AlarmNotificationSource):
            self._alarm_notify: asyncio.Event | None = clock.alarm_notify()
            logger.debug("Alarm watcher: event-driven alarm notifications enabled")
        else:
            self._alarm_notify = None
            logger.debug("Alarm watcher: polling-based alarm detection (no notifications)")

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def process_due_alarms(self, now: datetime | None = None) -> list[Activation]:
        """
        Fire every alarm due at ``now``.

        Args:
            now: Evaluation time, defaults to the clock's current time

        Returns:
            Activations dispatched, in fire-time order
        """
        now = now or self._clock.now()
        expired = await self._clock.get_expired_alarms(now)

        if expired:
            logger.debug(f"Processing {len(expired)} expired alarms")

        activations: list[Activation] = []
        for alarm in expired:
            await self._clock.acknowledge(alarm, now)

            workflow_id, trigger_id = parse_registration_key(alarm.name)
            activation = Activation(
                workflow_id=workflow_id,
                trigger_id=trigger_id,
                alarm_name=alarm.name,
                fired_at=now,
            )
            logger.info(f"Alarm fired: {alarm.name} (workflow={workflow_id})")

            try:
                await self._on_activation(activation)
            except Exception as e:
                logger.error(f"Activation of workflow {workflow_id} failed: {e}")

            activations.append(activation)

        return activations

    async def start(self) -> None:
        """Start the background loop. Returns immediately."""
        if self.is_running():
            return
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._run())

    async def shutdown(self) -> None:
        """Stop the loop and wait for it to exit."""
        self._shutdown_event.set()
        if self._task is not None:
            await self._task
            self._task = None

    async def _run(self) -> None:
        logger.info("Alarm watcher started")
        try:
            while not self._shutdown_event.is_set():
                try:
                    await self.process_due_alarms()
                    timeout = await self._sleep_duration()
                except Exception as e:
                    logger.error(f"Alarm watcher error: {e}")
                    timeout = self._poll_interval

                await self._wait(timeout)
        finally:
            logger.info("Alarm watcher stopped")

    async def _sleep_duration(self) -> float:
        """Seconds until the next alarm, capped at the poll interval."""
        next_fire = await self._clock.get_next_fire_time()
        if next_fire is None:
            return self._poll_interval

        seconds = (next_fire - self._clock.now()).total_seconds()
        return max(0.0, min(seconds, self._poll_interval))

    async def _wait(self, timeout: float) -> None:
        """Sleep for ``timeout`` or until shutdown / an alarm change."""
        events = [self._shutdown_event]
        if self._alarm_notify is not None:
            events.append(self._alarm_notify)

        waiters = [asyncio.create_task(event.wait()) for event in events]
        try:
            await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()

        if self._alarm_notify is not None:
            self._alarm_notify.clear()
