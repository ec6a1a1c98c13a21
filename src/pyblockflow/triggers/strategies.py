"""
Trigger strategies: one per trigger kind.

Design Pattern: Strategy Pattern
Each strategy translates one kind's parameters into calls on the external
services (clock, menu host, key/value store). The registry picks the
strategy by kind and never inspects parameters itself.

Strategies do not diff against existing state. The registry always clears
a workflow's scheduled state before registering, so every strategy only
ever writes onto a clean slate.

Store keys written here:
- ``shortcuts``: {registration_key: shortcut}
- ``visitWebTriggers``: [{"id", "url", "isRegex"}], newest first
- ``contextMenuTriggers``: [registration_key] of menu leaves created
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, assert_never

from pyblockflow.host.base import (
    ClockService,
    MenuHost,
    RefreshableMenuHost,
    SchedulingConflictError,
)
from pyblockflow.models import (
    ContextMenuParams,
    IntervalParams,
    KeyboardShortcutParams,
    MenuEntry,
    OnStartupParams,
    SpecificDateParams,
    SpecificDayParams,
    TriggerKind,
    TriggerParams,
    VisitWebParams,
)
from pyblockflow.storage.base import KeyValueStore
from pyblockflow.triggers.schedule import next_specific_day_time, specific_date_time

logger = logging.getLogger(__name__)

SHORTCUTS_KEY = "shortcuts"
VISIT_WEB_TRIGGERS_KEY = "visitWebTriggers"
ON_STARTUP_TRIGGERS_KEY = "onStartupTriggers"
CONTEXT_MENU_TRIGGERS_KEY = "contextMenuTriggers"

CONTEXT_MENU_PARENT_ID = "automaContextMenu"
CONTEXT_MENU_PARENT_TITLE = "Run Automa workflow"
DOCUMENT_URL_PATTERNS = ("https://*/*", "http://*/*")


class TriggerError(Exception):
    """Trigger could not be registered."""

    pass


def normalize_shortcuts(value: Any) -> dict[str, str]:
    """Older releases stored the shortcut map as a list; treat that as empty."""
    if isinstance(value, dict):
        return dict(value)
    return {}


class TriggerStrategy(ABC):
    """Registers one kind of trigger against the external services."""

    kind: ClassVar[TriggerKind]

    @abstractmethod
    async def register(self, key: str, params: Any) -> None:
        """
        Create the scheduled activation for one trigger.

        Args:
            key: Registration key (``trigger:<wf>:<id>`` or ``<wf>``)
            params: Parsed parameters for this strategy's kind

        Raises:
            TriggerError: If the parameters cannot be scheduled
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class IntervalStrategy(TriggerStrategy):
    """Repeating alarm every ``interval`` minutes.

    A positive ``delay`` postpones the first fire, unless ``fixed_delay`` says
    the period already accounts for it.
    """

    kind = TriggerKind.INTERVAL

    def __init__(self, clock: ClockService):
        self._clock = clock

    async def register(self, key: str, params: IntervalParams) -> None:
        if params.interval <= 0:
            raise TriggerError(f"Interval must be greater than 0, got {params.interval}")

        delay_in_minutes = None
        if params.delay > 0 and not params.fixed_delay:
            delay_in_minutes = params.delay

        await self._clock.create_alarm(
            key,
            period_in_minutes=params.interval,
            delay_in_minutes=delay_in_minutes,
        )


class SpecificDateStrategy(TriggerStrategy):
    """One-shot alarm at a calendar date and time."""

    kind = TriggerKind.SPECIFIC_DATE

    def __init__(self, clock: ClockService):
        self._clock = clock

    async def register(self, key: str, params: SpecificDateParams) -> None:
        try:
            when = specific_date_time(params.date, params.time, self._clock.now())
        except ValueError as e:
            raise TriggerError(f"Invalid date trigger for {key}: {e}") from e

        await self._clock.create_alarm(key, when=when)


class SpecificDayStrategy(TriggerStrategy):
    """One-shot alarm at the next matching weekday and time."""

    kind = TriggerKind.SPECIFIC_DAY

    def __init__(self, clock: ClockService):
        self._clock = clock

    async def register(self, key: str, params: SpecificDayParams) -> None:
        if not params.days:
            return

        try:
            when = next_specific_day_time(params, self._clock.now())
        except ValueError as e:
            raise TriggerError(f"Invalid specific-day trigger for {key}: {e}") from e

        if when is None:
            return

        await self._clock.create_alarm(key, when=when)


class VisitWebStrategy(TriggerStrategy):
    """Upserts the URL pattern the passive URL matcher consults."""

    kind = TriggerKind.VISIT_WEB

    def __init__(self, store: KeyValueStore):
        self._store = store

    async def register(self, key: str, params: VisitWebParams) -> None:
        if params.url.strip() == "":
            return

        triggers = list(await self._store.get_value(VISIT_WEB_TRIGGERS_KEY) or [])
        payload = {"id": key, "url": params.url, "isRegex": params.is_url_regex}

        for index, item in enumerate(triggers):
            if item.get("id") == key:
                triggers[index] = payload
                break
        else:
            triggers.insert(0, payload)

        await self._store.set({VISIT_WEB_TRIGGERS_KEY: triggers})


class ContextMenuStrategy(TriggerStrategy):
    """Menu leaf under the reserved workflow menu.

    The reserved parent is created lazily: when the host reports it missing,
    it is created and the leaf is retried exactly once.
    """

    kind = TriggerKind.CONTEXT_MENU

    def __init__(self, menu_host: MenuHost | None, store: KeyValueStore):
        self._menu_host = menu_host
        self._store = store

    async def register(self, key: str, params: ContextMenuParams) -> None:
        if self._menu_host is None:
            raise TriggerError("Don't have context menu permission")

        entry = MenuEntry(
            id=key,
            title=params.context_menu_name,
            contexts=params.context_types or ("all",),
            document_url_patterns=DOCUMENT_URL_PATTERNS,
            parent_id=CONTEXT_MENU_PARENT_ID,
        )

        try:
            await self._menu_host.create_menu_entry(entry)
        except SchedulingConflictError:
            logger.info(f"Creating missing menu parent {CONTEXT_MENU_PARENT_ID!r}")
            await self._menu_host.create_menu_entry(
                MenuEntry(
                    id=CONTEXT_MENU_PARENT_ID,
                    title=CONTEXT_MENU_PARENT_TITLE,
                    contexts=("all",),
                    document_url_patterns=DOCUMENT_URL_PATTERNS,
                )
            )
            await self._menu_host.create_menu_entry(entry)

        if isinstance(self._menu_host, RefreshableMenuHost):
            await self._menu_host.refresh()

        keys = list(await self._store.get_value(CONTEXT_MENU_TRIGGERS_KEY) or [])
        if key not in keys:
            keys.append(key)
            await self._store.set({CONTEXT_MENU_TRIGGERS_KEY: keys})


class KeyboardShortcutStrategy(TriggerStrategy):
    """Binds a shortcut to the registration key in the durable shortcut map."""

    kind = TriggerKind.KEYBOARD_SHORTCUT

    def __init__(self, store: KeyValueStore):
        self._store = store

    async def register(self, key: str, params: KeyboardShortcutParams) -> None:
        shortcuts = normalize_shortcuts(await self._store.get_value(SHORTCUTS_KEY))
        shortcuts[key] = params.shortcut
        await self._store.set({SHORTCUTS_KEY: shortcuts})


class OnStartupStrategy(TriggerStrategy):
    """Nothing to schedule: startup activations come from the host's startup event."""

    kind = TriggerKind.ON_STARTUP

    async def register(self, key: str, params: OnStartupParams) -> None:
        logger.debug(f"On-startup trigger {key} needs no scheduling")


def build_strategy(
    kind: TriggerKind,
    clock: ClockService,
    store: KeyValueStore,
    menu_host: MenuHost | None = None,
) -> TriggerStrategy:
    """Construct the strategy for one kind. Exhaustive over TriggerKind."""
    match kind:
        case TriggerKind.INTERVAL:
            return IntervalStrategy(clock)
        case TriggerKind.SPECIFIC_DATE:
            return SpecificDateStrategy(clock)
        case TriggerKind.SPECIFIC_DAY:
            return SpecificDayStrategy(clock)
        case TriggerKind.VISIT_WEB:
            return VisitWebStrategy(store)
        case TriggerKind.CONTEXT_MENU:
            return ContextMenuStrategy(menu_host, store)
        case TriggerKind.KEYBOARD_SHORTCUT:
            return KeyboardShortcutStrategy(store)
        case TriggerKind.ON_STARTUP:
            return OnStartupStrategy()
        case _:
            assert_never(kind)


def default_strategies(
    clock: ClockService,
    store: KeyValueStore,
    menu_host: MenuHost | None = None,
) -> dict[TriggerKind, TriggerStrategy]:
    """
    Build the kind → strategy table injected into the TriggerRegistry.

    Example:
        strategies = default_strategies(clock, store, menu_host)
        registry = TriggerRegistry(clock, store, menu_host, strategies=strategies)
    """
    return {kind: build_strategy(kind, clock, store, menu_host) for kind in TriggerKind}


__all__ = [
    "TriggerError",
    "TriggerStrategy",
    "TriggerParams",
    "IntervalStrategy",
    "SpecificDateStrategy",
    "SpecificDayStrategy",
    "VisitWebStrategy",
    "ContextMenuStrategy",
    "KeyboardShortcutStrategy",
    "OnStartupStrategy",
    "build_strategy",
    "default_strategies",
    "normalize_shortcuts",
    "SHORTCUTS_KEY",
    "VISIT_WEB_TRIGGERS_KEY",
    "ON_STARTUP_TRIGGERS_KEY",
    "CONTEXT_MENU_TRIGGERS_KEY",
    "CONTEXT_MENU_PARENT_ID",
    "CONTEXT_MENU_PARENT_TITLE",
    "DOCUMENT_URL_PATTERNS",
]
