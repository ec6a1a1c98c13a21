"""
Block execution.

This module provides:
- BlockExecutor: runs one block through its handler
- BlockHandler: interface for block kinds
- RunContext: run-scoped reference data
- WorkflowRunner: sequential driver over a BlockGraph
- Outcome types: BlockResult, BlockExecutionError, Completed, Failed
"""

from pyblockflow.executor.block_executor import BlockExecutor
from pyblockflow.executor.blocks import GoogleSheetsBlock, TriggerBlock
from pyblockflow.executor.context import TABLE_NAMESPACE, RunContext
from pyblockflow.executor.handler import REF_KEY_FIELD, BlockHandler
from pyblockflow.executor.outcome import (
    BlockError,
    BlockExecutionError,
    BlockResult,
    Completed,
    ExternalServiceError,
    Failed,
    RunOutcome,
    StepRecord,
    ValidationError,
    is_completed,
    is_failed,
)
from pyblockflow.executor.runner import WorkflowRunError, WorkflowRunner

__all__ = [
    "BlockExecutor",
    "BlockHandler",
    "RunContext",
    "TABLE_NAMESPACE",
    "REF_KEY_FIELD",
    "BlockResult",
    "BlockError",
    "ValidationError",
    "ExternalServiceError",
    "BlockExecutionError",
    "StepRecord",
    "Completed",
    "Failed",
    "RunOutcome",
    "is_completed",
    "is_failed",
    "GoogleSheetsBlock",
    "TriggerBlock",
    "WorkflowRunner",
    "WorkflowRunError",
]
