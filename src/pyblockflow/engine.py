"""
Engine - wires the trigger side and the execution side together.

    Engine
      ├── KeyValueStore      (memory / sqlite / redis)
      ├── KeyValueClock      (alarms persisted in the store)
      ├── MenuHost           (context-menu entries)
      ├── TriggerRegistry    (register / clean triggers)
      ├── WorkflowRunner     (BlockExecutor with trigger + sheets blocks)
      └── AlarmWatcher       (fired alarms -> run_workflow)

Usage:
    engine = await Engine.from_config(EngineConfig.from_env())
    engine.add_workflow("wf1", BlockGraph.from_dict(workflow["drawflow"]))
    await engine.register("wf1", workflow["trigger"])
    await engine.start()
    ...
    await engine.close()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pyblockflow.clients import InMemoryTabularClient, TabularResourceClient
from pyblockflow.config import EngineConfig, create_store
from pyblockflow.executor import (
    BlockExecutor,
    GoogleSheetsBlock,
    RunContext,
    RunOutcome,
    TriggerBlock,
    WorkflowRunner,
)
from pyblockflow.host import InMemoryMenuHost, KeyValueClock, MenuHost
from pyblockflow.models import BlockGraph, TriggerConfiguration, TriggerKind
from pyblockflow.storage import KeyValueStore
from pyblockflow.triggers import Activation, AlarmWatcher, TriggerRegistry

logger = logging.getLogger(__name__)

__all__ = ["Engine", "EngineError"]


class EngineError(Exception):
    """The engine was asked to run a workflow it does not know."""

    pass


class Engine:
    """Facade over trigger registration, alarm watching and workflow runs."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: KeyValueClock,
        registry: TriggerRegistry,
        runner: WorkflowRunner,
        menu_host: MenuHost | None = None,
        poll_interval: float = 1.0,
    ):
        self._store = store
        self._clock = clock
        self._registry = registry
        self._runner = runner
        self._menu_host = menu_host
        self._workflows: dict[str, BlockGraph] = {}
        self._outcomes: dict[str, RunOutcome] = {}
        self._trigger_configs: dict[str, TriggerConfiguration] = {}
        self._watcher = AlarmWatcher(clock, self._on_activation, poll_interval=poll_interval)

    @classmethod
    async def from_config(
        cls,
        config: EngineConfig | None = None,
        tabular_client: TabularResourceClient | None = None,
        menu_host: MenuHost | None = None,
    ) -> Engine:
        """
        Assemble an engine from configuration.

        Args:
            config: Settings, EngineConfig.from_env() if None
            tabular_client: Client for spreadsheet blocks (in-memory if None)
            menu_host: Menu host for context-menu triggers (in-memory if None)
        """
        config = config or EngineConfig.from_env()
        logging.getLogger("pyblockflow").setLevel(config.log_level)

        store = await create_store(config)
        clock = KeyValueClock(store)
        menu_host = menu_host if menu_host is not None else InMemoryMenuHost()
        registry = TriggerRegistry(clock, store, menu_host, key_match=config.key_match)
        executor = BlockExecutor(
            [TriggerBlock(), GoogleSheetsBlock(tabular_client or InMemoryTabularClient())]
        )
        return cls(
            store=store,
            clock=clock,
            registry=registry,
            runner=WorkflowRunner(executor),
            menu_host=menu_host,
            poll_interval=config.alarm_poll_interval,
        )

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def clock(self) -> KeyValueClock:
        return self._clock

    @property
    def registry(self) -> TriggerRegistry:
        return self._registry

    @property
    def watcher(self) -> AlarmWatcher:
        return self._watcher

    @property
    def menu_host(self) -> MenuHost | None:
        return self._menu_host

    def add_workflow(self, workflow_id: str, graph: BlockGraph) -> None:
        """Make a workflow's graph runnable by id (e.g. from a fired alarm)."""
        self._workflows[workflow_id] = graph

    def last_outcome(self, workflow_id: str) -> RunOutcome | None:
        return self._outcomes.get(workflow_id)

    async def register(
        self,
        workflow_id: str,
        config: Mapping[str, Any] | TriggerConfiguration,
    ) -> list[str]:
        """Replace the workflow's triggers with those in ``config``.

        The parsed configuration is kept so weekly triggers can be
        re-armed after they fire.
        """
        if isinstance(config, TriggerConfiguration):
            configuration = config
        else:
            configuration = TriggerConfiguration.from_dict(config)

        self._trigger_configs.pop(workflow_id, None)
        keys = await self._registry.register_workflow_trigger(workflow_id, configuration)
        self._trigger_configs[workflow_id] = configuration
        return keys

    async def clean(self, workflow_id: str) -> None:
        """Remove every scheduled activation of the workflow."""
        self._trigger_configs.pop(workflow_id, None)
        await self._registry.clean_workflow_triggers(workflow_id)

    async def run_workflow(
        self,
        workflow_id: str,
        context: RunContext | None = None,
    ) -> RunOutcome:
        """
        Run a workflow added with add_workflow().

        Raises:
            EngineError: If the workflow is unknown
            WorkflowRunError: If its graph cannot be driven
        """
        graph = self._workflows.get(workflow_id)
        if graph is None:
            raise EngineError(f"Workflow {workflow_id} is not loaded")

        outcome = await self._runner.run(graph, context)
        self._outcomes[workflow_id] = outcome
        return outcome

    async def start(self) -> None:
        """Start watching alarms."""
        await self._watcher.start()

    async def close(self) -> None:
        """Stop the watcher and close the store."""
        await self._watcher.shutdown()
        await self._store.close()

    async def _rearm_weekly(self, activation: Activation) -> None:
        """Schedule the next occurrence of a fired specific-day trigger."""
        configuration = self._trigger_configs.get(activation.workflow_id)
        strategy = self._registry.strategies.get(TriggerKind.SPECIFIC_DAY)
        if configuration is None or strategy is None:
            return

        for entry in configuration.entries:
            if entry.kind is not TriggerKind.SPECIFIC_DAY:
                continue
            if entry.registration_key(activation.workflow_id) != activation.alarm_name:
                continue

            await strategy.register(activation.alarm_name, entry.params())
            logger.debug(f"Re-armed weekly trigger {activation.alarm_name}")

    async def _on_activation(self, activation: Activation) -> None:
        # Re-arm before the run; a failed run must not drop the schedule
        await self._rearm_weekly(activation)

        if activation.workflow_id not in self._workflows:
            logger.warning(
                f"Alarm {activation.alarm_name} fired for unknown workflow {activation.workflow_id}"
            )
            return
        await self.run_workflow(activation.workflow_id)
