"""
WorkflowRunner - sequential driver for one workflow graph.

Starts at the trigger block (or an explicit start block), executes each
block through the BlockExecutor, and follows the continuation id each
result or error carries.

Error policy:
    - ``stop`` (default): the first BlockExecutionError ends the run with
      ``Failed``; ``Failed.continuation_id`` tells where it was heading
    - ``continue``: the failure is recorded as a step and the run resumes at
      the error's ``next_block_id``

Usage:
    runner = WorkflowRunner(BlockExecutor([TriggerBlock(), GoogleSheetsBlock(client)]))
    outcome = await runner.run(BlockGraph.from_dict(workflow["drawflow"]))

    match outcome:
        case Completed(steps=steps):
            print(f"Ran {len(steps)} blocks")
        case Failed(error=error):
            print(f"Block {error.block_id} failed: {error.message}")
"""

from __future__ import annotations

import logging

from uuid_extensions import uuid7

from pyblockflow.executor.block_executor import BlockExecutor
from pyblockflow.executor.context import RunContext
from pyblockflow.executor.outcome import (
    BlockExecutionError,
    Completed,
    Failed,
    RunOutcome,
    StepRecord,
)
from pyblockflow.models import BlockGraph

logger = logging.getLogger(__name__)

__all__ = ["WorkflowRunner", "WorkflowRunError", "ON_ERROR_STOP", "ON_ERROR_CONTINUE"]

ON_ERROR_STOP = "stop"
ON_ERROR_CONTINUE = "continue"


class WorkflowRunError(Exception):
    """The graph cannot be driven (no start block, dangling successor, step limit)."""

    pass


class WorkflowRunner:
    """Drives a BlockGraph to completion, one block at a time."""

    def __init__(
        self,
        executor: BlockExecutor,
        on_error: str = ON_ERROR_STOP,
        max_steps: int = 1000,
    ):
        """
        Initialize the runner.

        Args:
            executor: Executes individual blocks
            on_error: ``stop`` or ``continue``
            max_steps: Upper bound on executed blocks per run (guards cycles)

        Raises:
            ValueError: If on_error or max_steps is invalid
        """
        if on_error not in (ON_ERROR_STOP, ON_ERROR_CONTINUE):
            raise ValueError(f"on_error must be 'stop' or 'continue', got {on_error!r}")
        if max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {max_steps}")

        self._executor = executor
        self._on_error = on_error
        self._max_steps = max_steps

    @property
    def executor(self) -> BlockExecutor:
        return self._executor

    async def run(
        self,
        graph: BlockGraph,
        context: RunContext | None = None,
        start_block_id: str | None = None,
    ) -> RunOutcome:
        """
        Execute the graph.

        Args:
            graph: Blocks to run
            context: Reference data to thread through the run (fresh if None)
            start_block_id: Block to start at, defaults to the trigger block

        Returns:
            Completed or Failed

        Raises:
            WorkflowRunError: If the graph cannot be driven
        """
        run_id = str(uuid7())
        context = context if context is not None else RunContext()

        if start_block_id is None:
            trigger = graph.trigger_block()
            if trigger is None:
                raise WorkflowRunError("Workflow has no trigger block")
            start_block_id = trigger.id

        logger.info(f"Run {run_id} started at block {start_block_id}")

        steps: list[StepRecord] = []
        block_id: str | None = start_block_id
        while block_id is not None:
            if len(steps) >= self._max_steps:
                raise WorkflowRunError(f"Run {run_id} exceeded {self._max_steps} steps")

            block = graph.get(block_id)
            if block is None:
                raise WorkflowRunError(f"Block {block_id} not found in workflow")

            try:
                result = await self._executor.execute(block, context)
            except BlockExecutionError as e:
                steps.append(StepRecord(block_id=block.id, next_block_id=e.next_block_id, error=e))
                logger.warning(f"Run {run_id}: block {block.id} failed ({e.kind}): {e.message}")

                if self._on_error == ON_ERROR_STOP:
                    return Failed(run_id=run_id, steps=tuple(steps), error=e, context=context)

                block_id = e.next_block_id
                continue

            steps.append(
                StepRecord(block_id=block.id, next_block_id=result.next_block_id, data=result.data)
            )
            block_id = result.next_block_id

        logger.info(f"Run {run_id} completed after {len(steps)} blocks")
        return Completed(run_id=run_id, steps=tuple(steps), context=context)
