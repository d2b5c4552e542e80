"""Free-roam adventure model: grid positions, nodes, areas, and player progress.

Concepts:
- GridPos: an (x, y) cell on the 7x7 grid. Used as the in-memory map key; the
  string form ``node_<x>_<y>`` only appears at the storage/caller boundary.
- Node: one explorable cell. Type, position, and connections are fixed when
  the area is generated; only the unlocked/completed flags change later.
- Area: one generated map owned by a player, numbered 1, 2, 3... per owner.
- Progress: where the player currently stands plus lifetime counters.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set

from constants import GRID_SIZE, NODE_ID_PREFIX, TOTAL_NODES


@dataclass(frozen=True, order=True)
class GridPos:
    x: int
    y: int

    def in_bounds(self) -> bool:
        return 0 <= self.x < GRID_SIZE and 0 <= self.y < GRID_SIZE

    def neighbors(self) -> List["GridPos"]:
        """Orthogonal neighbours that lie inside the grid."""
        out = [GridPos(self.x + dx, self.y + dy) for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1))]
        return [p for p in out if p.in_bounds()]

    def manhattan(self, other: "GridPos") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def to_node_id(self) -> str:
        return f"{NODE_ID_PREFIX}_{self.x}_{self.y}"

    @staticmethod
    def from_node_id(node_id: str) -> Optional["GridPos"]:
        """Parse ``node_<x>_<y>``; returns None for anything else."""
        if not isinstance(node_id, str):
            return None
        parts = node_id.split("_")
        if len(parts) != 3 or parts[0] != NODE_ID_PREFIX:
            return None
        try:
            pos = GridPos(int(parts[1]), int(parts[2]))
        except ValueError:
            return None
        return pos if pos.in_bounds() else None


class NodeType(Enum):
    START = "START"
    BOSS = "BOSS"
    SHOP = "SHOP"
    COMBAT = "COMBAT"
    TREASURE = "TREASURE"
    EVENT = "EVENT"


@dataclass
class Node:
    pos: GridPos
    type: NodeType = NodeType.COMBAT
    connections: Set[GridPos] = field(default_factory=set)
    unlocked: bool = False
    completed: bool = False

    @property
    def node_id(self) -> str:
        return self.pos.to_node_id()

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "x": self.pos.x,
            "y": self.pos.y,
            "type": self.type.value,
            "connections": [p.to_node_id() for p in sorted(self.connections)],
            "unlocked": self.unlocked,
            "completed": self.completed,
        }

    @staticmethod
    def from_dict(data: dict) -> "Node":
        pos = GridPos(int(data.get("x", 0)), int(data.get("y", 0)))
        try:
            node_type = NodeType(str(data.get("type", "COMBAT")).upper())
        except ValueError:
            node_type = NodeType.COMBAT
        connections: Set[GridPos] = set()
        for raw in data.get("connections", []) or []:
            other = GridPos.from_node_id(raw)
            if other is not None:
                connections.add(other)
        return Node(
            pos=pos,
            type=node_type,
            connections=connections,
            unlocked=bool(data.get("unlocked", False)),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class Area:
    owner_id: str
    area_number: int
    theme: str
    nodes: Dict[GridPos, Node] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    total_nodes: int = TOTAL_NODES
    nodes_explored: int = 0
    completed: bool = False

    def node(self, node_id: str) -> Optional[Node]:
        pos = GridPos.from_node_id(node_id)
        return self.nodes.get(pos) if pos is not None else None

    def iter_type(self, node_type: NodeType) -> Iterator[Node]:
        return (n for n in self.nodes.values() if n.type == node_type)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "area_number": self.area_number,
            "theme": self.theme,
            "total_nodes": self.total_nodes,
            "nodes_explored": self.nodes_explored,
            "completed": self.completed,
            "nodes": {pos.to_node_id(): n.to_dict() for pos, n in sorted(self.nodes.items())},
        }

    @staticmethod
    def from_dict(data: dict) -> "Area":
        area = Area(
            id=data.get("id") or str(uuid.uuid4()),
            owner_id=str(data.get("owner_id", "")),
            area_number=int(data.get("area_number", 1)),
            theme=data.get("theme", "stone"),
            total_nodes=int(data.get("total_nodes", TOTAL_NODES)),
            nodes_explored=int(data.get("nodes_explored", 0)),
            completed=bool(data.get("completed", False)),
        )
        raw_nodes = data.get("nodes", {}) or {}
        values = raw_nodes.values() if isinstance(raw_nodes, dict) else raw_nodes
        for ndata in values:
            if isinstance(ndata, dict):
                node = Node.from_dict(ndata)
                area.nodes[node.pos] = node
        return area


@dataclass
class Progress:
    owner_id: str
    current_area_id: Optional[str] = None
    current_node: Optional[GridPos] = None
    total_areas_completed: int = 0
    total_nodes_explored: int = 0
    total_bosses_defeated: int = 0

    def to_dict(self) -> dict:
        return {
            "owner_id": self.owner_id,
            "current_area_id": self.current_area_id,
            "current_node_id": self.current_node.to_node_id() if self.current_node else None,
            "total_areas_completed": self.total_areas_completed,
            "total_nodes_explored": self.total_nodes_explored,
            "total_bosses_defeated": self.total_bosses_defeated,
        }

    @staticmethod
    def from_dict(data: dict) -> "Progress":
        raw_node = data.get("current_node_id")
        return Progress(
            owner_id=str(data.get("owner_id", "")),
            current_area_id=data.get("current_area_id"),
            current_node=GridPos.from_node_id(raw_node) if raw_node else None,
            total_areas_completed=int(data.get("total_areas_completed", 0)),
            total_nodes_explored=int(data.get("total_nodes_explored", 0)),
            total_bosses_defeated=int(data.get("total_bosses_defeated", 0)),
        )
