"""
TriggerRegistry - makes external scheduling state match a workflow's triggers.

Design Principle: Single Responsibility (SOLID)
The registry owns the lifecycle (clean, then register) and the dispatch by
kind. What each kind schedules is the strategies' job.

Registration is replace-all, never additive:

1. Clean every piece of scheduled state belonging to the workflow.
2. Register each list-form entry under ``trigger:<wf>:<id>``, or the legacy
   single trigger under ``<wf>``.

Clean-up always finishes (or fails open) before any registration starts,
so a freshly created alarm can never be deleted by a clean-up that is
still running. Calling register twice leaves the same state as calling it
once.

Failure policy:
- Registration failures are logged and re-raised. Entries registered
  before the failure stay in place until the next clean-up.
- Clean-up failures are logged and swallowed so they never block a
  subsequent registration.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pyblockflow.host.base import ClockService, MenuHost, MenuHostError, NotFoundError
from pyblockflow.models import TriggerConfiguration, TriggerKind, parse_registration_key
from pyblockflow.storage.base import KeyValueStore
from pyblockflow.triggers.queue import WorkflowQueue
from pyblockflow.triggers.strategies import (
    CONTEXT_MENU_TRIGGERS_KEY,
    ON_STARTUP_TRIGGERS_KEY,
    SHORTCUTS_KEY,
    VISIT_WEB_TRIGGERS_KEY,
    TriggerError,
    TriggerStrategy,
    default_strategies,
    normalize_shortcuts,
)

logger = logging.getLogger(__name__)

KeyMatcher = Callable[[str, str], bool]


def substring_match(key: str, workflow_id: str) -> bool:
    """True if ``workflow_id`` occurs anywhere in ``key``.

    Over-matches when one workflow id is a substring of another.
    """
    return workflow_id in key


def segment_match(key: str, workflow_id: str) -> bool:
    """True if ``key`` is ``workflow_id`` or a ``trigger:<workflow_id>:...`` key."""
    return parse_registration_key(key)[0] == workflow_id


KEY_MATCHERS: dict[str, KeyMatcher] = {
    "substring": substring_match,
    "segment": segment_match,
}


def get_key_matcher(name: str) -> KeyMatcher:
    try:
        return KEY_MATCHERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown key match mode {name!r}, expected one of {sorted(KEY_MATCHERS)}"
        ) from None


class TriggerRegistry:
    """
    Registers and tears down a workflow's scheduled activations.

    All collaborators are passed explicitly. The kind → strategy table is
    built by default_strategies() unless one is injected.

    Usage:
        store = InMemoryKeyValueStore()
        clock = KeyValueClock(store)
        registry = TriggerRegistry(clock, store, InMemoryMenuHost())

        await registry.register_workflow_trigger(
            "wf1",
            {"triggers": [{"id": "t1", "type": "interval", "data": {"interval": 5}}]},
        )
        await registry.clean_workflow_triggers("wf1")
    """

    def __init__(
        self,
        clock: ClockService,
        store: KeyValueStore,
        menu_host: MenuHost | None = None,
        strategies: Mapping[TriggerKind, TriggerStrategy] | None = None,
        key_match: str = "substring",
    ):
        """
        Args:
            clock: Clock service alarms are scheduled on
            store: Key/value store holding shortcut, visit-web and queue state
            menu_host: Command-menu host, None when menus are unavailable
            strategies: Kind → strategy table (default_strategies() if None)
            key_match: ``substring`` or ``segment`` workflow-id matching
        """
        self._clock = clock
        self._store = store
        self._menu_host = menu_host
        self._strategies = (
            dict(strategies)
            if strategies is not None
            else default_strategies(clock, store, menu_host)
        )
        self._matches = get_key_matcher(key_match)
        self._queue = WorkflowQueue(store)

    @property
    def strategies(self) -> dict[TriggerKind, TriggerStrategy]:
        return dict(self._strategies)

    @property
    def queue(self) -> WorkflowQueue:
        return self._queue

    async def register_workflow_trigger(
        self,
        workflow_id: str,
        config: Mapping[str, Any] | TriggerConfiguration | None,
    ) -> list[str]:
        """
        Replace the workflow's scheduled state with its declared triggers.

        Args:
            workflow_id: Workflow identifier
            config: Trigger block data (legacy or list form) or a parsed configuration

        Returns:
            Registration keys that were handed to a strategy

        Raises:
            TriggerError: If a trigger's parameters are invalid
            Exception: Whatever a collaborator raised, after logging
        """
        try:
            await self.clean_workflow_triggers(workflow_id)

            if isinstance(config, TriggerConfiguration):
                configuration = config
            else:
                configuration = TriggerConfiguration.from_dict(config)

            registered: list[str] = []
            for entry in configuration.entries:
                kind = entry.kind
                strategy = self._strategies.get(kind) if kind is not None else None
                if strategy is None:
                    logger.debug(
                        f"No strategy for trigger type {entry.kind_tag!r} "
                        f"(workflow {workflow_id}), skipping"
                    )
                    continue

                key = entry.registration_key(workflow_id)
                try:
                    params = entry.params()
                except (TypeError, ValueError, KeyError) as e:
                    raise TriggerError(f"Invalid {entry.kind_tag} trigger {key}: {e}") from e

                await strategy.register(key, params)
                registered.append(key)
                logger.info(f"Registered {kind} trigger {key}")

            return registered

        except Exception as e:
            logger.error(f"Failed to register triggers for workflow {workflow_id}: {e}")
            raise

    async def clean_workflow_triggers(self, workflow_id: str) -> None:
        """
        Remove every scheduled activation belonging to ``workflow_id``.

        Clears matching alarms, filters the shortcut map, visit-web list,
        startup list and workflow queue, and removes menu entries. Never
        raises: failures are logged and the clean-up stops where it failed.
        """
        try:
            for alarm in await self._clock.get_all_alarms():
                if self._matches(alarm.name, workflow_id):
                    await self._clock.clear_alarm(alarm.name)
                    logger.debug(f"Cleared alarm {alarm.name}")

            stored = await self._store.get(
                [
                    SHORTCUTS_KEY,
                    VISIT_WEB_TRIGGERS_KEY,
                    ON_STARTUP_TRIGGERS_KEY,
                    CONTEXT_MENU_TRIGGERS_KEY,
                ]
            )

            shortcuts = {
                key: shortcut
                for key, shortcut in normalize_shortcuts(stored.get(SHORTCUTS_KEY)).items()
                if not self._matches(key, workflow_id)
            }
            startup_triggers = [
                key
                for key in stored.get(ON_STARTUP_TRIGGERS_KEY) or []
                if not self._matches(key, workflow_id)
            ]
            visit_web_triggers = [
                item
                for item in stored.get(VISIT_WEB_TRIGGERS_KEY) or []
                if not self._matches(item["id"], workflow_id)
            ]
            menu_keys = stored.get(CONTEXT_MENU_TRIGGERS_KEY) or []
            doomed_menu_keys = [key for key in menu_keys if self._matches(key, workflow_id)]

            await self._queue.remove_matching(workflow_id, self._matches)

            await self._store.set(
                {
                    SHORTCUTS_KEY: shortcuts,
                    ON_STARTUP_TRIGGERS_KEY: startup_triggers,
                    VISIT_WEB_TRIGGERS_KEY: visit_web_triggers,
                    CONTEXT_MENU_TRIGGERS_KEY: [
                        key for key in menu_keys if key not in doomed_menu_keys
                    ],
                }
            )

            for entry_id in dict.fromkeys([workflow_id, *doomed_menu_keys]):
                await self._remove_menu_entry(entry_id)

        except Exception as e:
            logger.error(f"Failed to clean triggers for workflow {workflow_id}: {e}")

    async def _remove_menu_entry(self, entry_id: str) -> None:
        """Best-effort menu removal; a missing entry is the normal case."""
        if self._menu_host is None:
            return

        try:
            await self._menu_host.remove_menu_entry(entry_id)
            logger.debug(f"Removed menu entry {entry_id}")
        except NotFoundError:
            pass
        except MenuHostError as e:
            logger.warning(f"Could not remove menu entry {entry_id}: {e}")


__all__ = [
    "TriggerRegistry",
    "TriggerError",
    "KeyMatcher",
    "KEY_MATCHERS",
    "get_key_matcher",
    "substring_match",
    "segment_match",
]
