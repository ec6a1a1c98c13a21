"""Block handler interface.

Design Pattern: Strategy Pattern
Each block kind has one handler. The executor looks handlers up in an
explicit table and owns the protocol around them (continuation id,
reference data, error wrapping); handlers only do the block's work.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pyblockflow.executor.context import RunContext
from pyblockflow.models import Block

__all__ = ["BlockHandler", "REF_KEY_FIELD"]

REF_KEY_FIELD = "refKey"
"""Block data field naming where the result is stored in the handler's namespace."""


class BlockHandler(ABC):
    """
    Runs one kind of block.

    Attributes:
        kind: Block kind tag this handler serves
        namespace: RunContext namespace results are published to when the
            block sets a reference key, None if the handler never publishes
    """

    kind: ClassVar[str]
    namespace: ClassVar[str | None] = None

    @abstractmethod
    async def run(self, block: Block, context: RunContext) -> Any:
        """
        Execute the block.

        Validate required fields before calling any collaborator.

        Args:
            block: Block with its declared parameters
            context: The run's shared reference data

        Returns:
            The block's result data (None if it produces nothing)

        Raises:
            ValidationError: If a required field is blank or malformed
            ExternalServiceError: If a collaborator reports failure
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r})"
