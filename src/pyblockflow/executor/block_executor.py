"""
BlockExecutor - runs a single block through its handler.

The executor owns the protocol around every handler:

1. Resolve the continuation (first connection of ``output-1``) before the
   handler does anything, so success and failure both know where the run
   goes next.
2. Run the handler.
3. On success, publish the result under the block's ``refKey`` in the
   handler's RunContext namespace, when both are set and the result is not
   None.
4. On failure, raise ``BlockExecutionError`` carrying the continuation id,
   with the handler's exception chained as ``__cause__``.

Errors are never swallowed here; whether to stop or skip is the runner's
decision.

Usage:
    executor = BlockExecutor([TriggerBlock(), GoogleSheetsBlock(client)])
    result = await executor.execute(block, context)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from pyblockflow.executor.context import RunContext
from pyblockflow.executor.handler import REF_KEY_FIELD, BlockHandler
from pyblockflow.executor.outcome import BlockError, BlockExecutionError, BlockResult
from pyblockflow.models import Block
from pyblockflow.utils import is_whitespace

logger = logging.getLogger(__name__)

__all__ = ["BlockExecutor", "UNKNOWN_BLOCK_KIND", "UNEXPECTED_ERROR_KIND"]

UNKNOWN_BLOCK_KIND = "unknown-block"
UNEXPECTED_ERROR_KIND = "unexpected"


class BlockExecutor:
    """Dispatches blocks to handlers by kind via an explicit table."""

    def __init__(self, handlers: Mapping[str, BlockHandler] | Iterable[BlockHandler]):
        """
        Initialize the executor.

        Args:
            handlers: Either a ``{kind: handler}`` table or handlers keyed by
                their own ``kind``
        """
        if isinstance(handlers, Mapping):
            self._handlers: dict[str, BlockHandler] = dict(handlers)
        else:
            self._handlers = {handler.kind: handler for handler in handlers}

    @property
    def kinds(self) -> list[str]:
        return sorted(self._handlers)

    def handler_for(self, kind: str) -> BlockHandler | None:
        return self._handlers.get(kind)

    async def execute(self, block: Block, context: RunContext) -> BlockResult:
        """
        Execute one block.

        Args:
            block: Block to run
            context: The run's reference data

        Returns:
            BlockResult with the continuation id and the handler's data

        Raises:
            BlockExecutionError: If there is no handler or the handler fails
        """
        next_block_id = block.connection(1)

        handler = self._handlers.get(block.kind)
        if handler is None:
            raise BlockExecutionError(
                block.id, next_block_id, UNKNOWN_BLOCK_KIND, f"No handler for block kind '{block.kind}'"
            )

        try:
            data = await handler.run(block, context)
        except BlockError as e:
            logger.debug(f"Block {block.id} ({block.kind}) failed: {e.kind}: {e.message}")
            raise BlockExecutionError(block.id, next_block_id, e.kind, e.message) from e
        except Exception as e:
            logger.error(f"Block {block.id} ({block.kind}) raised {type(e).__name__}: {e}")
            raise BlockExecutionError(block.id, next_block_id, UNEXPECTED_ERROR_KIND, str(e)) from e

        ref_key = block.data.get(REF_KEY_FIELD)
        if handler.namespace and data is not None and not is_whitespace(ref_key):
            context.set_reference(handler.namespace, ref_key, data)

        return BlockResult(next_block_id=next_block_id, data=data)
