"""In-memory command-menu host.

Behaves like the browser's context-menu API: entries form a tree, a child
must name an existing parent, and removing an entry removes its subtree.
"""

from __future__ import annotations

import asyncio

from pyblockflow.host.base import MenuHost, NotFoundError, SchedulingConflictError
from pyblockflow.models import MenuEntry


class StaticMenuHost(MenuHost):
    """Menu host without a refresh operation."""

    def __init__(self):
        self._entries: dict[str, MenuEntry] = {}
        self._lock = asyncio.Lock()
        self.create_calls: list[MenuEntry] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entries={len(self._entries)})"

    async def create_menu_entry(self, entry: MenuEntry) -> None:
        async with self._lock:
            self.create_calls.append(entry)
            if entry.parent_id is not None and entry.parent_id not in self._entries:
                raise SchedulingConflictError(entry.parent_id)
            self._entries[entry.id] = entry

    async def remove_menu_entry(self, entry_id: str) -> None:
        async with self._lock:
            if entry_id not in self._entries:
                raise NotFoundError(f"Cannot find menu item with id {entry_id}")

            doomed = {entry_id}
            changed = True
            while changed:
                changed = False
                for entry in self._entries.values():
                    if entry.parent_id in doomed and entry.id not in doomed:
                        doomed.add(entry.id)
                        changed = True

            for doomed_id in doomed:
                del self._entries[doomed_id]

    def get(self, entry_id: str) -> MenuEntry | None:
        return self._entries.get(entry_id)

    def entries(self) -> list[MenuEntry]:
        return list(self._entries.values())

    def children(self, parent_id: str) -> list[MenuEntry]:
        return [entry for entry in self._entries.values() if entry.parent_id == parent_id]


class InMemoryMenuHost(StaticMenuHost):
    """Menu host for tests and headless engines.

    Supports refresh(); ``refresh_count`` records how many times it ran so
    callers can verify the host was redrawn.
    """

    def __init__(self):
        super().__init__()
        self.refresh_count = 0

    async def refresh(self) -> None:
        self.refresh_count += 1
