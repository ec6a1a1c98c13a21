"""
pyblockflow: trigger scheduling and block execution for workflow automation.

Design Pattern: Façade Pattern
This module exposes the pieces most callers need: the Engine, the trigger
registry, the block executor, and the storage backends.

Example:
    ```python
    import asyncio
    from pyblockflow import BlockGraph, Engine, EngineConfig

    async def main():
        engine = await Engine.from_config(EngineConfig(storage="sqlite"))

        engine.add_workflow("wf1", BlockGraph.from_dict(workflow["drawflow"]))
        await engine.register(
            "wf1",
            {"triggers": [{"id": "t1", "type": "interval", "data": {"interval": 5}}]},
        )
        await engine.start()
        ...
        await engine.close()

    asyncio.run(main())
    ```
"""

# Models
from pyblockflow.models import (
    AlarmInfo,
    Block,
    BlockGraph,
    Connection,
    MenuEntry,
    TriggerConfiguration,
    TriggerEntry,
    TriggerKind,
    parse_registration_key,
    registration_key,
)

# Storage (Adapter pattern)
from pyblockflow.storage import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqliteKeyValueStore,
    StorageError,
)

# External collaborators
from pyblockflow.host import (
    ClockService,
    InMemoryMenuHost,
    KeyValueClock,
    MenuHost,
    MenuHostError,
    NotFoundError,
    SchedulingConflictError,
    StaticMenuHost,
)
from pyblockflow.clients import InMemoryTabularClient, TabularResourceClient, TabularResponse

# Triggers
from pyblockflow.triggers import (
    Activation,
    AlarmWatcher,
    TriggerError,
    TriggerRegistry,
    WorkflowQueue,
    default_strategies,
)

# Execution
from pyblockflow.executor import (
    BlockError,
    BlockExecutionError,
    BlockExecutor,
    BlockHandler,
    BlockResult,
    Completed,
    ExternalServiceError,
    Failed,
    GoogleSheetsBlock,
    RunContext,
    RunOutcome,
    TriggerBlock,
    ValidationError,
    WorkflowRunError,
    WorkflowRunner,
    is_completed,
    is_failed,
)

# Configuration and façade
from pyblockflow.config import ConfigError, EngineConfig, create_store
from pyblockflow.engine import Engine, EngineError

# Version
__version__ = "0.1.0"

__all__ = [
    # Models
    "AlarmInfo",
    "Block",
    "BlockGraph",
    "Connection",
    "MenuEntry",
    "TriggerConfiguration",
    "TriggerEntry",
    "TriggerKind",
    "registration_key",
    "parse_registration_key",

    # Storage
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    "StorageError",

    # Host services
    "ClockService",
    "KeyValueClock",
    "MenuHost",
    "StaticMenuHost",
    "InMemoryMenuHost",
    "MenuHostError",
    "SchedulingConflictError",
    "NotFoundError",

    # Tabular client
    "TabularResourceClient",
    "TabularResponse",
    "InMemoryTabularClient",

    # Triggers
    "TriggerRegistry",
    "TriggerError",
    "WorkflowQueue",
    "AlarmWatcher",
    "Activation",
    "default_strategies",

    # Execution
    "BlockExecutor",
    "BlockHandler",
    "BlockResult",
    "BlockError",
    "ValidationError",
    "ExternalServiceError",
    "BlockExecutionError",
    "RunContext",
    "RunOutcome",
    "Completed",
    "Failed",
    "is_completed",
    "is_failed",
    "GoogleSheetsBlock",
    "TriggerBlock",
    "WorkflowRunner",
    "WorkflowRunError",

    # Engine
    "Engine",
    "EngineError",
    "EngineConfig",
    "ConfigError",
    "create_store",

    # Metadata
    "__version__",
]
