"""Trigger scheduling: when does a workflow start.

    - TriggerRegistry: clean-before-register lifecycle per workflow
    - Trigger strategies: one per trigger kind, built by default_strategies()
    - WorkflowQueue: durable queue of parked workflow instances
    - AlarmWatcher: turns fired alarms into workflow activations
"""

from pyblockflow.triggers.queue import WORKFLOW_QUEUE_KEY, WorkflowQueue
from pyblockflow.triggers.registry import (
    KEY_MATCHERS,
    TriggerRegistry,
    get_key_matcher,
    segment_match,
    substring_match,
)
from pyblockflow.triggers.strategies import (
    CONTEXT_MENU_PARENT_ID,
    CONTEXT_MENU_TRIGGERS_KEY,
    ON_STARTUP_TRIGGERS_KEY,
    SHORTCUTS_KEY,
    VISIT_WEB_TRIGGERS_KEY,
    ContextMenuStrategy,
    IntervalStrategy,
    KeyboardShortcutStrategy,
    OnStartupStrategy,
    SpecificDateStrategy,
    SpecificDayStrategy,
    TriggerError,
    TriggerStrategy,
    VisitWebStrategy,
    build_strategy,
    default_strategies,
)
from pyblockflow.triggers.watcher import Activation, AlarmWatcher

__all__ = [
    "TriggerRegistry",
    "TriggerError",
    "TriggerStrategy",
    "IntervalStrategy",
    "SpecificDateStrategy",
    "SpecificDayStrategy",
    "VisitWebStrategy",
    "ContextMenuStrategy",
    "KeyboardShortcutStrategy",
    "OnStartupStrategy",
    "build_strategy",
    "default_strategies",
    "KEY_MATCHERS",
    "get_key_matcher",
    "substring_match",
    "segment_match",
    "WorkflowQueue",
    "WORKFLOW_QUEUE_KEY",
    "Activation",
    "AlarmWatcher",
    "SHORTCUTS_KEY",
    "VISIT_WEB_TRIGGERS_KEY",
    "ON_STARTUP_TRIGGERS_KEY",
    "CONTEXT_MENU_TRIGGERS_KEY",
    "CONTEXT_MENU_PARENT_ID",
]
