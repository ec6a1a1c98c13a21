"""Core data models for trigger scheduling and block execution.

Defines trigger configuration, alarm and menu entries held by external
services, and the block graph the executor walks.

Design: Dependency-Free Models
These types have no dependencies on storage, host, or executor modules to
prevent circular imports and enable clean layering.
"""

from pyblockflow.models.alarm import AlarmInfo
from pyblockflow.models.block import (
    DEFAULT_OUTPUT,
    TRIGGER_BLOCK_KIND,
    Block,
    BlockGraph,
    Connection,
)
from pyblockflow.models.menu import MenuEntry
from pyblockflow.models.trigger import (
    REGISTRATION_KEY_PREFIX,
    ContextMenuParams,
    DayEntry,
    IntervalParams,
    KeyboardShortcutParams,
    OnStartupParams,
    SpecificDateParams,
    SpecificDayParams,
    TriggerConfiguration,
    TriggerEntry,
    TriggerKind,
    TriggerParams,
    VisitWebParams,
    parse_registration_key,
    registration_key,
)

__all__ = [
    "AlarmInfo",
    "MenuEntry",
    "Block",
    "BlockGraph",
    "Connection",
    "DEFAULT_OUTPUT",
    "TRIGGER_BLOCK_KIND",
    "TriggerKind",
    "TriggerEntry",
    "TriggerConfiguration",
    "TriggerParams",
    "IntervalParams",
    "SpecificDateParams",
    "SpecificDayParams",
    "DayEntry",
    "VisitWebParams",
    "ContextMenuParams",
    "KeyboardShortcutParams",
    "OnStartupParams",
    "REGISTRATION_KEY_PREFIX",
    "registration_key",
    "parse_registration_key",
]
