"""Trigger block: the entry point of every workflow graph."""

from __future__ import annotations

from pyblockflow.executor.context import RunContext
from pyblockflow.executor.handler import BlockHandler
from pyblockflow.models import TRIGGER_BLOCK_KIND, Block


class TriggerBlock(BlockHandler):
    """Passes straight through; scheduling already happened at registration."""

    kind = TRIGGER_BLOCK_KIND

    async def run(self, block: Block, context: RunContext) -> None:
        return None
