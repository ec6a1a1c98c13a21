import asyncio
import logging

from pyblockflow import InMemoryMenuHost, KeyValueClock, TriggerRegistry
from pyblockflow.storage.sqlite import SqliteKeyValueStore

logging.basicConfig(level=logging.INFO)


async def main():
    store = SqliteKeyValueStore("data/triggers.db")
    await store.connect()
    await store.reset()

    clock = KeyValueClock(store)
    menu_host = InMemoryMenuHost()
    registry = TriggerRegistry(clock, store, menu_host)

    await registry.register_workflow_trigger(
        "newsletter",
        {
            "triggers": [
                {"id": "mon", "type": "specific-day", "data": {"days": [{"id": 1, "times": ["09:00"]}]}},
                {"id": "menu", "type": "context-menu", "data": {"contextMenuName": "Send newsletter"}},
                {"id": "keys", "type": "keyboard-shortcut", "data": {"shortcut": "mod+alt+n"}},
                {"id": "site", "type": "visit-web", "data": {"url": "https://mail.example.com/*"}},
            ]
        },
    )

    for alarm in await clock.get_all_alarms():
        print(f"Alarm: {alarm}")
    print(f"Menu: {[entry.id for entry in menu_host.entries()]}")
    print(f"Shortcuts: {await store.get_value('shortcuts')}")

    await registry.clean_workflow_triggers("newsletter")
    print(f"After clean-up: {await clock.get_all_alarms()}")

    await store.close()


if __name__ == "__main__":
    asyncio.run(main())
