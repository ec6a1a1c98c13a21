"""
Block results, block errors, and run outcomes.

A block execution ends in exactly one of two ways:

- ``BlockResult(next_block_id, data)`` on success
- ``BlockExecutionError`` on failure, carrying the ``next_block_id`` that was
  resolved before the block did any work

The continuation id on the error is a first-class field, so a runner can
skip the failed block and carry on, or report exactly where the run was
heading when it stopped.

Handlers raise the narrower ``BlockError`` kinds (``ValidationError``,
``ExternalServiceError``). The executor wraps them into
``BlockExecutionError`` with the original chained as ``__cause__``.

Run outcomes follow the same union-type approach:

    match outcome:
        case Completed(steps=steps):
            ...
        case Failed(error=error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pyblockflow.executor.context import RunContext

__all__ = [
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
]


@dataclass(frozen=True)
class BlockResult:
    """Successful execution of one block."""

    next_block_id: str | None
    """Successor block, None when the block is the last one."""

    data: Any = None
    """Whatever the block produced."""


# =============================================================================
# Block Errors
# =============================================================================


class BlockError(Exception):
    """
    Base class for failures raised by block handlers.

    ``kind`` is a stable tag the runner and the UI can branch on; the
    message is meant for humans.
    """

    kind = "block-error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlockError):
    """A required block field is blank or malformed (raised before any external call)."""

    kind = "validation"


class ExternalServiceError(BlockError):
    """A collaborator reported a non-success status; its message is passed through."""

    kind = "external-service"


class BlockExecutionError(Exception):
    """
    A block failed. Carries where the run was heading.

    Attributes:
        block_id: Block that failed
        next_block_id: Successor resolved before the failure (continuation token)
        kind: Error kind tag (``validation``, ``external-service``, ...)
        message: Human-readable message
    """

    def __init__(self, block_id: str, next_block_id: str | None, kind: str, message: str):
        super().__init__(message)
        self.block_id = block_id
        self.next_block_id = next_block_id
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return (
            f"BlockExecutionError(block_id={self.block_id!r}, "
            f"next_block_id={self.next_block_id!r}, kind={self.kind!r}, "
            f"message={self.message!r})"
        )


# =============================================================================
# Run Outcomes
# =============================================================================


@dataclass(frozen=True)
class StepRecord:
    """One block execution within a run."""

    block_id: str
    next_block_id: str | None
    data: Any = None
    error: BlockExecutionError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class Completed:
    """
    Run reached the end of the graph.

    With skip-and-continue error handling some steps may still have
    failed; see ``errors``.
    """

    run_id: str
    steps: tuple[StepRecord, ...]
    context: RunContext = field(repr=False)

    @property
    def errors(self) -> list[BlockExecutionError]:
        return [step.error for step in self.steps if step.error is not None]


@dataclass(frozen=True)
class Failed:
    """Run stopped at a failing block."""

    run_id: str
    steps: tuple[StepRecord, ...]
    error: BlockExecutionError
    context: RunContext = field(repr=False)

    @property
    def failed_block_id(self) -> str:
        return self.error.block_id

    @property
    def continuation_id(self) -> str | None:
        """Where the run would have gone next; resume point for a retry."""
        return self.error.next_block_id


RunOutcome = Completed | Failed


def is_completed(outcome: RunOutcome) -> bool:
    return isinstance(outcome, Completed)


def is_failed(outcome: RunOutcome) -> bool:
    return isinstance(outcome, Failed)
