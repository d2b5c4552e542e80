"""World path model: levels laid out in lanes between checkpoints.

A world path is a left-to-right sequence of positions 1..level_count. Each
position holds one or more parallel levels (lanes); every level at position
i connects to every level at position i+1, which is what gives the path its
diamond shape. The mini-boss and boss positions always hold a single lane.

Level status moves one way: locked -> unlocked -> completed.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from objective_model import Objective


class LevelType(Enum):
    REGULAR = "regular"
    MINI_BOSS = "mini_boss"
    BOSS = "boss"


class LevelStatus(Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMPLETED = "completed"


def slot_key(position: int, lane: int, lane_count: int) -> str:
    """``"<pos>"`` for a single lane, ``"<pos>_<lane>"`` otherwise."""
    return str(position) if lane_count == 1 else f"{position}_{lane}"


@dataclass
class Level:
    id: int
    slot_key: str
    position: int
    lane: int
    lane_count: int
    type: LevelType
    name: str
    description: str
    objectives: List[Objective] = field(default_factory=list)
    reward: int = 0
    status: LevelStatus = LevelStatus.LOCKED
    x: int = 0
    y: int = 0
    branch_id: Optional[str] = None
    theme: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slot_key": self.slot_key,
            "position": self.position,
            "lane": self.lane,
            "lane_count": self.lane_count,
            "type": self.type.value,
            "name": self.name,
            "description": self.description,
            "objectives": [o.to_dict() for o in self.objectives],
            "reward": self.reward,
            "status": self.status.value,
            "x": self.x,
            "y": self.y,
            "branch_id": self.branch_id,
            "theme": self.theme,
        }

    @staticmethod
    def from_dict(data: dict) -> "Level":
        try:
            level_type = LevelType(data.get("type", "regular"))
        except ValueError:
            level_type = LevelType.REGULAR
        try:
            status = LevelStatus(data.get("status", "locked"))
        except ValueError:
            status = LevelStatus.LOCKED
        position = int(data.get("position", 1))
        lane = int(data.get("lane", 0))
        lane_count = int(data.get("lane_count", 1))
        return Level(
            id=int(data.get("id", 0)),
            slot_key=data.get("slot_key") or slot_key(position, lane, lane_count),
            position=position,
            lane=lane,
            lane_count=lane_count,
            type=level_type,
            name=data.get("name", ""),
            description=data.get("description", ""),
            objectives=[Objective.from_dict(o) for o in data.get("objectives", []) or []],
            reward=int(data.get("reward", 0)),
            status=status,
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
            branch_id=data.get("branch_id"),
            theme=data.get("theme", ""),
        )


@dataclass
class WorldPath:
    owner_id: str
    world_number: int
    level_count: int
    mini_boss_position: int
    levels: Dict[str, Level] = field(default_factory=dict)  # slot key -> Level, generation order
    connections: List[Tuple[str, str]] = field(default_factory=list)
    branch_points: List[dict] = field(default_factory=list)
    convergence_points: List[dict] = field(default_factory=list)
    completed: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def levels_at(self, position: int) -> List[Level]:
        return [lv for lv in self.levels.values() if lv.position == position]

    def level_by_id(self, level_id: int) -> Optional[Level]:
        for lv in self.levels.values():
            if lv.id == level_id:
                return lv
        return None

    def lane_counts(self) -> Dict[int, int]:
        counts: Dict[int, int] = {}
        for lv in self.levels.values():
            counts[lv.position] = counts.get(lv.position, 0) + 1
        return dict(sorted(counts.items()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "world_number": self.world_number,
            "level_count": self.level_count,
            "mini_boss_position": self.mini_boss_position,
            "levels": [lv.to_dict() for lv in self.levels.values()],
            "connections": [{"from": a, "to": b} for a, b in self.connections],
            "branch_points": list(self.branch_points),
            "convergence_points": list(self.convergence_points),
            "completed": self.completed,
        }

    @staticmethod
    def from_dict(data: dict) -> "WorldPath":
        path = WorldPath(
            id=data.get("id") or str(uuid.uuid4()),
            owner_id=str(data.get("owner_id", "")),
            world_number=int(data.get("world_number", 1)),
            level_count=int(data.get("level_count", 0)),
            mini_boss_position=int(data.get("mini_boss_position", 0)),
            branch_points=list(data.get("branch_points", []) or []),
            convergence_points=list(data.get("convergence_points", []) or []),
            completed=bool(data.get("completed", False)),
        )
        for ldata in data.get("levels", []) or []:
            if isinstance(ldata, dict):
                level = Level.from_dict(ldata)
                path.levels[level.slot_key] = level
        for conn in data.get("connections", []) or []:
            if isinstance(conn, dict) and "from" in conn and "to" in conn:
                path.connections.append((str(conn["from"]), str(conn["to"])))
            elif isinstance(conn, (list, tuple)) and len(conn) == 2:
                path.connections.append((str(conn[0]), str(conn[1])))
        return path


@dataclass
class WorldProgress:
    """Which worlds an owner has cleared."""
    owner_id: str
    current_world: int = 1
    completed_worlds: List[int] = field(default_factory=list)

    def is_completed(self, world_number: int) -> bool:
        return world_number in self.completed_worlds

    def to_dict(self) -> dict:
        return {
            "owner_id": self.owner_id,
            "current_world": self.current_world,
            "completed_worlds": sorted(self.completed_worlds),
        }

    @staticmethod
    def from_dict(data: dict) -> "WorldProgress":
        return WorldProgress(
            owner_id=str(data.get("owner_id", "")),
            current_world=int(data.get("current_world", 1)),
            completed_worlds=[int(n) for n in data.get("completed_worlds", []) or []],
        )
