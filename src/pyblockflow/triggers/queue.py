"""Durable queue of workflow instances waiting to run.

When a workflow fires while an instance of it is still running, the
activation is parked here. Entries are strings that embed the workflow id,
so clean-up finds them with the same key matching it uses for alarms.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pyblockflow.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

WORKFLOW_QUEUE_KEY = "workflowQueue"


class WorkflowQueue:
    """FIFO list of queued workflow entries stored under ``workflowQueue``."""

    def __init__(self, store: KeyValueStore, key: str = WORKFLOW_QUEUE_KEY):
        self._store = store
        self._key = key

    async def entries(self) -> list[str]:
        return list(await self._store.get_value(self._key) or [])

    async def push(self, entry: str) -> None:
        queue = await self.entries()
        queue.append(entry)
        await self._store.set({self._key: queue})

    async def pop(self) -> str | None:
        """Remove and return the oldest entry."""
        queue = await self.entries()
        if not queue:
            return None
        entry = queue.pop(0)
        await self._store.set({self._key: queue})
        return entry

    async def remove_matching(self, workflow_id: str, matches: Callable[[str, str], bool]) -> int:
        """
        Drop every entry belonging to ``workflow_id``.

        Args:
            workflow_id: Workflow whose entries should go
            matches: Key matcher ``(entry, workflow_id) -> bool``

        Returns:
            Number of entries removed
        """
        queue = await self.entries()
        kept = [entry for entry in queue if not matches(entry, workflow_id)]
        removed = len(queue) - len(kept)

        if removed:
            await self._store.set({self._key: kept})
            logger.debug(f"Removed {removed} queued entries for workflow {workflow_id}")

        return removed
