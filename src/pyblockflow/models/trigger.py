"""Trigger configuration models.

A workflow's trigger block carries either a single legacy trigger
(``{"type": "interval", "interval": 5, ...}``) or a list of trigger entries
(``{"triggers": [{"id": "abc", "type": "interval", "data": {...}}]}``).
The list form takes precedence whenever it is present.

Each trigger kind owns its own parameter shape. Parameters are parsed into
frozen dataclasses so strategies never read raw dictionaries.

Registration keys are the join point between every external service that
holds scheduled state (alarms, shortcut map, visit-web list). Their format
is persisted and must stay stable:

    trigger:<workflow_id>:<trigger_id>   (list form)
    <workflow_id>                        (legacy form)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "TriggerKind",
    "IntervalParams",
    "SpecificDateParams",
    "DayEntry",
    "SpecificDayParams",
    "VisitWebParams",
    "ContextMenuParams",
    "KeyboardShortcutParams",
    "OnStartupParams",
    "TriggerParams",
    "TriggerEntry",
    "TriggerConfiguration",
    "REGISTRATION_KEY_PREFIX",
    "registration_key",
    "parse_registration_key",
]

REGISTRATION_KEY_PREFIX = "trigger"


class TriggerKind(Enum):
    """Trigger kinds understood by the registry.

    Values are the tags stored in workflow documents.
    """

    INTERVAL = "interval"
    SPECIFIC_DATE = "date"
    SPECIFIC_DAY = "specific-day"
    VISIT_WEB = "visit-web"
    CONTEXT_MENU = "context-menu"
    KEYBOARD_SHORTCUT = "keyboard-shortcut"
    ON_STARTUP = "on-startup"

    @classmethod
    def parse(cls, tag: Any) -> TriggerKind | None:
        """Return the kind for a stored tag, or None for unknown tags.

        Unknown tags (manual triggers, kinds added by newer editors) are
        not errors: the registry simply has nothing to schedule for them.
        """
        try:
            return cls(tag)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


@dataclass(frozen=True)
class IntervalParams:
    """Repeat every ``interval`` minutes, optionally delaying the first fire."""

    interval: float
    delay: float = 0.0
    fixed_delay: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IntervalParams:
        return cls(
            interval=_as_float(data.get("interval")),
            delay=_as_float(data.get("delay")),
            fixed_delay=bool(data.get("fixedDelay", False)),
        )


@dataclass(frozen=True)
class SpecificDateParams:
    """Fire once at ``date`` + ``time``; no date means "a minute from now"."""

    date: str | None = None
    time: str = "00:00:00"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SpecificDateParams:
        return cls(date=data.get("date") or None, time=data.get("time") or "00:00:00")


@dataclass(frozen=True)
class DayEntry:
    """A weekday (0=Sunday .. 6=Saturday) with its own list of times."""

    id: int
    times: tuple[str, ...] = ()


@dataclass(frozen=True)
class SpecificDayParams:
    """Weekly schedule.

    ``days`` holds plain weekday ids (paired with ``time``) or DayEntry
    objects carrying their own ``times``.
    """

    days: tuple[int | DayEntry, ...] = ()
    time: str = "00:00:00"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SpecificDayParams:
        days: list[int | DayEntry] = []
        for item in data.get("days") or []:
            if isinstance(item, Mapping):
                days.append(DayEntry(id=int(item["id"]), times=tuple(item.get("times") or ())))
            else:
                days.append(int(item))

        return cls(days=tuple(days), time=data.get("time") or "00:00:00")


@dataclass(frozen=True)
class VisitWebParams:
    url: str = ""
    is_url_regex: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VisitWebParams:
        return cls(url=data.get("url") or "", is_url_regex=bool(data.get("isUrlRegex", False)))


@dataclass(frozen=True)
class ContextMenuParams:
    """Menu leaf title and page contexts (empty means every context)."""

    context_menu_name: str = ""
    context_types: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContextMenuParams:
        return cls(
            context_menu_name=data.get("contextMenuName") or "",
            context_types=tuple(data.get("contextTypes") or ()),
        )


@dataclass(frozen=True)
class KeyboardShortcutParams:
    shortcut: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> KeyboardShortcutParams:
        return cls(shortcut=data.get("shortcut") or "")


@dataclass(frozen=True)
class OnStartupParams:
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OnStartupParams:
        return cls()


TriggerParams = (
    IntervalParams
    | SpecificDateParams
    | SpecificDayParams
    | VisitWebParams
    | ContextMenuParams
    | KeyboardShortcutParams
    | OnStartupParams
)

_PARAMS_BY_KIND: dict[TriggerKind, type] = {
    TriggerKind.INTERVAL: IntervalParams,
    TriggerKind.SPECIFIC_DATE: SpecificDateParams,
    TriggerKind.SPECIFIC_DAY: SpecificDayParams,
    TriggerKind.VISIT_WEB: VisitWebParams,
    TriggerKind.CONTEXT_MENU: ContextMenuParams,
    TriggerKind.KEYBOARD_SHORTCUT: KeyboardShortcutParams,
    TriggerKind.ON_STARTUP: OnStartupParams,
}


@dataclass(frozen=True)
class TriggerEntry:
    """One trigger to register.

    ``id`` is None for the legacy single-trigger form.
    """

    kind_tag: str
    data: Mapping[str, Any] = field(default_factory=dict)
    id: str | None = None

    @property
    def kind(self) -> TriggerKind | None:
        return TriggerKind.parse(self.kind_tag)

    def params(self) -> TriggerParams:
        """Parse ``data`` into the parameter dataclass for this kind.

        Raises:
            ValueError: If the kind is unknown or a field is malformed
        """
        kind = self.kind
        if kind is None:
            raise ValueError(f"Unknown trigger type: {self.kind_tag!r}")
        return _PARAMS_BY_KIND[kind].from_dict(self.data)

    def registration_key(self, workflow_id: str) -> str:
        return registration_key(workflow_id, self.id)


@dataclass(frozen=True)
class TriggerConfiguration:
    """A workflow's declared triggers, normalized from either stored form."""

    entries: tuple[TriggerEntry, ...] = ()
    is_legacy: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TriggerConfiguration:
        if not data:
            return cls()

        triggers = data.get("triggers")
        if triggers is not None:
            entries = tuple(
                TriggerEntry(
                    kind_tag=item.get("type", ""),
                    data=item.get("data") or {},
                    id=str(item.get("id", "")),
                )
                for item in triggers
            )
            return cls(entries=entries, is_legacy=False)

        if "type" in data:
            return cls(entries=(TriggerEntry(kind_tag=data["type"], data=data),), is_legacy=True)

        return cls()

    def __len__(self) -> int:
        return len(self.entries)


def registration_key(workflow_id: str, trigger_id: str | None = None) -> str:
    """Build the registration key for a trigger.

    Example:
        >>> registration_key("wf1", "t1")
        'trigger:wf1:t1'
        >>> registration_key("wf1")
        'wf1'
    """
    if trigger_id is None:
        return workflow_id
    return f"{REGISTRATION_KEY_PREFIX}:{workflow_id}:{trigger_id}"


def parse_registration_key(key: str) -> tuple[str, str | None]:
    """Split a registration key into ``(workflow_id, trigger_id)``."""
    prefix = f"{REGISTRATION_KEY_PREFIX}:"
    if key.startswith(prefix):
        workflow_id, sep, trigger_id = key[len(prefix) :].partition(":")
        if sep:
            return workflow_id, trigger_id
    return key, None
