"""Run-scoped reference data shared by every block of one workflow run.

Design: Single Owner
    A RunContext belongs to exactly one run. The runner creates it, passes
    the same instance to every block in sequence, and drops it when the run
    ends. Blocks never execute concurrently within a run, so no locking is
    needed.

Data is organised by namespace: each handler picks one (``googleSheets``,
``variables``, ...) and stores whatever payloads it likes there. The
``table`` namespace is special: it holds the rows the workflow has
collected so far, as a list of dicts.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

__all__ = ["RunContext", "TABLE_NAMESPACE"]

TABLE_NAMESPACE = "table"


class RunContext:
    """Mutable reference data for one workflow run.

    Usage:
        ```python
        context = RunContext()
        context.set_reference("googleSheets", "prices", [["a", "b"]])
        context.get_reference("googleSheets", "prices")
        context.table.append({"name": "apple", "price": 3})
        ```
    """

    def __init__(self, initial: Mapping[str, Any] | None = None):
        """Initialize the context.

        Args:
            initial: Optional namespaces to seed the run with
        """
        self._data: dict[str, Any] = dict(initial or {})

    def __repr__(self) -> str:
        return f"RunContext(namespaces={sorted(self._data)})"

    def __contains__(self, namespace: str) -> bool:
        return namespace in self._data

    def namespace(self, name: str) -> dict[str, Any]:
        """Return the namespace's mapping, creating it on first use."""
        value = self._data.setdefault(name, {})
        if not isinstance(value, dict):
            raise TypeError(f"Namespace {name!r} holds {type(value).__name__}, not a mapping")
        return value

    def set_reference(self, namespace: str, key: str, value: Any) -> None:
        self.namespace(namespace)[key] = value

    def get_reference(self, namespace: str, key: str, default: Any = None) -> Any:
        value = self._data.get(namespace)
        if not isinstance(value, dict):
            return default
        return value.get(key, default)

    @property
    def table(self) -> list[dict[str, Any]]:
        """Rows collected by the workflow so far (mutable, shared)."""
        return self._data.setdefault(TABLE_NAMESPACE, [])

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of every namespace, safe to keep after the run moves on."""
        return copy.deepcopy(self._data)
