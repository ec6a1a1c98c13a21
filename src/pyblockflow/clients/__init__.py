"""External service clients used by block handlers."""

from pyblockflow.clients.tabular import (
    DEFAULT_VALUE_INPUT_OPTION,
    InMemoryTabularClient,
    TabularResourceClient,
    TabularResponse,
)

__all__ = [
    "TabularResourceClient",
    "TabularResponse",
    "InMemoryTabularClient",
    "DEFAULT_VALUE_INPUT_OPTION",
]
