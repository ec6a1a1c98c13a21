"""Alarm metadata held by the clock service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any

__all__ = ["AlarmInfo"]


@dataclass(frozen=True)
class AlarmInfo:
    """A named wake-up scheduled with the clock service.

    Immutable: frozen=True prevents modification after creation. Re-arming a
    periodic alarm produces a new instance via ``next_occurrence()``.
    """

    name: str
    """Registration key the alarm was created under."""

    scheduled_time: datetime
    """When the alarm fires next."""

    period_in_minutes: float | None = None
    """Repeat period, None for one-shot alarms."""

    @property
    def is_periodic(self) -> bool:
        return self.period_in_minutes is not None and self.period_in_minutes > 0

    @property
    def epoch_ms(self) -> int:
        """Fire time as epoch milliseconds."""
        return int(self.scheduled_time.timestamp() * 1000)

    def next_occurrence(self, now: datetime) -> AlarmInfo:
        """Return this alarm re-armed for its first period boundary after ``now``."""
        if not self.is_periodic:
            raise ValueError(f"Alarm {self.name!r} is not periodic")

        period = timedelta(minutes=self.period_in_minutes)
        next_time = self.scheduled_time + period
        while next_time <= now:
            next_time += period
        return replace(self, scheduled_time=next_time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "scheduledTime": self.scheduled_time.isoformat(),
            "periodInMinutes": self.period_in_minutes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AlarmInfo:
        return cls(
            name=data["name"],
            scheduled_time=datetime.fromisoformat(data["scheduledTime"]),
            period_in_minutes=data.get("periodInMinutes"),
        )

    def __repr__(self) -> str:
        period_str = f", period={self.period_in_minutes}m" if self.is_periodic else ""
        return (
            f"AlarmInfo(name={self.name!r}, "
            f"scheduled_time={self.scheduled_time.isoformat()}{period_str})"
        )
