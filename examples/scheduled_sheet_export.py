"""
Scheduled Spreadsheet Read

A workflow that reads a price list from a spreadsheet every minute.
The trigger block declares an interval trigger; the engine registers it,
the alarm watcher fires it, and the runner executes the graph.

Scenario:
- Engine configured from PYBLOCKFLOW_* environment variables
- One interval trigger with a fixed first delay
- The sheet rows end up in the run's ``googleSheets.prices`` reference

Run:
    PYBLOCKFLOW_STORAGE=sqlite PYTHONPATH=src python examples/scheduled_sheet_export.py
"""

import asyncio
import logging
from datetime import timedelta

from pyblockflow import BlockGraph, Completed, Engine, EngineConfig, InMemoryTabularClient
from pyblockflow.config import configure_logging

logger = logging.getLogger(__name__)

WORKFLOW = {
    "drawflow": {
        "Home": {
            "data": {
                "trigger": {
                    "id": "trigger",
                    "name": "trigger",
                    "data": {
                        "triggers": [
                            {"id": "every-minute", "type": "interval", "data": {"interval": 1}},
                        ]
                    },
                    "outputs": {"output-1": {"connections": [{"node": "read-prices"}]}},
                },
                "read-prices": {
                    "id": "read-prices",
                    "name": "google-sheets",
                    "data": {
                        "spreadsheetId": "prices",
                        "range": "Sheet1!A1:B3",
                        "type": "get",
                        "firstRowAsKey": True,
                        "refKey": "prices",
                    },
                },
            }
        }
    }
}


async def main():
    config = EngineConfig.from_env()
    configure_logging(config)

    client = InMemoryTabularClient(
        {"prices": {"Sheet1!A1:B3": [["item", "price"], ["apple", "3"], ["pear", "5"]]}}
    )
    engine = await Engine.from_config(config, tabular_client=client)

    graph = BlockGraph.from_dict(WORKFLOW)
    engine.add_workflow("price-watch", graph)
    keys = await engine.register("price-watch", graph.trigger_block().data)
    logger.info(f"Registered triggers: {keys}")

    # Fire once right away instead of waiting a full minute
    await engine.clock.create_alarm(keys[0], when=engine.clock.now() - timedelta(seconds=1))
    await engine.watcher.process_due_alarms()

    outcome = engine.last_outcome("price-watch")
    if isinstance(outcome, Completed):
        print(f"Prices: {outcome.context.get_reference('googleSheets', 'prices')}")

    await engine.clean("price-watch")
    await engine.close()


if __name__ == "__main__":
    asyncio.run(main())
