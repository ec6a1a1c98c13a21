"""Block graph models.

Only the traversal contract matters here: a block has a kind, validated
parameters, and named output ports connected to successor blocks.

The editor stores graphs in its drawing format::

    {"drawflow": {"Home": {"data": {
        "<id>": {
            "id": "<id>",
            "name": "google-sheets",
            "data": {...},
            "outputs": {"output-1": {"connections": [{"node": "<next>", "output": "input-1"}]}}
        }
    }}}}
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

__all__ = ["Connection", "Block", "BlockGraph", "DEFAULT_OUTPUT", "TRIGGER_BLOCK_KIND"]

DEFAULT_OUTPUT = "output-1"
TRIGGER_BLOCK_KIND = "trigger"


@dataclass(frozen=True)
class Connection:
    """Edge from an output port to a successor block's input port."""

    node: str
    input: str = "input-1"


@dataclass(frozen=True)
class Block:
    """One executable step of a workflow graph."""

    id: str
    kind: str
    data: Mapping[str, Any] = field(default_factory=dict)
    outputs: Mapping[str, tuple[Connection, ...]] = field(default_factory=dict)

    def connection(self, index: int = 1) -> str | None:
        """Return the first successor id on output port ``output-<index>``."""
        connections = self.outputs.get(f"output-{index}", ())
        if not connections:
            return None
        return connections[0].node

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Block:
        outputs: dict[str, tuple[Connection, ...]] = {}
        for port, port_data in (data.get("outputs") or {}).items():
            connections = port_data.get("connections", []) if isinstance(port_data, Mapping) else []
            # Drawflow stores the target's input port under "output"
            outputs[port] = tuple(
                Connection(node=str(conn["node"]), input=conn.get("output", "input-1"))
                for conn in connections
            )

        return cls(
            id=str(data["id"]),
            kind=data.get("name") or data.get("kind") or "",
            data=data.get("data") or {},
            outputs=outputs,
        )


@dataclass
class BlockGraph:
    """Blocks of one workflow, indexed by id."""

    blocks: dict[str, Block] = field(default_factory=dict)

    @classmethod
    def from_blocks(cls, blocks: list[Block]) -> BlockGraph:
        return cls(blocks={block.id: block for block in blocks})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | list) -> BlockGraph:
        """Build a graph from the editor's drawing format or a plain block list."""
        if isinstance(data, list):
            return cls.from_blocks([Block.from_dict(item) for item in data])

        drawflow = data.get("drawflow", data)
        nodes = drawflow.get("Home", {}).get("data", {})
        return cls.from_blocks([Block.from_dict(item) for item in nodes.values()])

    def get(self, block_id: str) -> Block | None:
        return self.blocks.get(block_id)

    def trigger_block(self) -> Block | None:
        """Return the graph's start block, if it has one."""
        for block in self.blocks.values():
            if block.kind == TRIGGER_BLOCK_KIND:
                return block
        return None

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks.values())

    def __len__(self) -> int:
        return len(self.blocks)
