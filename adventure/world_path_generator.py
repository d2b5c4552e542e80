"""Procedural generator for world paths.

A world path is a left-to-right run of 8-12 positions. Some positions fan
out into 2-4 parallel lanes; every lane at one position joins every lane at
the next, so branches reconverge into diamonds. The mini-boss and the final
boss always stand alone in their position.

Lane count per position (first matching rule wins):
    position <= 2, the mini-boss, or the last position  -> 1
    first 30% of the world                              -> 2..3
    up to 60% of the world                              -> 2..4
    right before the mini-boss                          -> 1
    after the mini-boss, before the last two positions  -> 2..3
    otherwise                                           -> 1

The whole path is built in memory and returned; world_path_service stores it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from constants import (
    COMPLEX_LEVEL_BASE_CHANCE,
    EARLY_SECTION_END,
    LAYOUT_X_SPACING,
    LAYOUT_Y_CENTER,
    LAYOUT_Y_SPACING,
    LEVEL_COUNT_MAX,
    LEVEL_COUNT_MIN,
    LEVEL_REWARD_BASE,
    MAX_PARALLEL_LANES,
    MID_SECTION_END,
    MINI_BOSS_END_MARGIN,
    MINI_BOSS_MIN_POSITION,
    MIN_PARALLEL_LANES,
)
from objective_model import Objective, generic_objective
from objective_service import build_task_objectives, filter_tasks_by_affinity, task_objective
from rng_utils import RandomSource, round_half_up
from task_model import Task, coerce_tasks
from theme_catalog import WorldDefinition, mini_boss_challenge
from world_path_model import Level, LevelStatus, LevelType, WorldPath, slot_key

logger = logging.getLogger(__name__)

LEVEL_NAMES: Dict[str, Tuple[str, ...]] = {
    'personal': ('Cozy Cottage', 'Village Square', 'Home Garden', 'Peaceful Path'),
    'work': ('Office Tower', 'Business District', 'Conference Hall', 'Project Hub'),
    'fitness': ('Mountain Trail', 'Athletic Field', 'Training Ground', 'Summit Challenge'),
    'creative': ('Art Studio', 'Magic Workshop', 'Inspiration Grove', 'Creative Haven'),
    'routine': ('Discipline Hall', 'Order Temple', 'Habit Haven', 'Structure Shrine'),
    'social': ('Community Center', 'Connection Bridge', 'Social Square', 'Fellowship Hall'),
    'urgent': ('Crisis Center', 'Emergency Ward', 'Urgent Alert', 'Priority Plaza'),
}
DEFAULT_LEVEL_NAMES = ('Challenge Level', 'Task Center', 'Goal Point', 'Mission Hub')


@dataclass(frozen=True)
class Slot:
    position: int
    lane: int
    lane_count: int
    x: int
    y: int

    @property
    def key(self) -> str:
        return slot_key(self.position, self.lane, self.lane_count)

    @property
    def branch_id(self) -> Optional[str]:
        return f"{self.position}_branch" if self.lane_count > 1 else None


def lane_count(rng: RandomSource, position: int, level_count: int, mini_boss_position: int) -> int:
    if position <= 2 or position == mini_boss_position or position == level_count:
        return 1
    fraction = position / level_count
    if fraction < EARLY_SECTION_END:
        return rng.randint(MIN_PARALLEL_LANES, 3)
    if fraction < MID_SECTION_END:
        return rng.randint(MIN_PARALLEL_LANES, MAX_PARALLEL_LANES)
    if position == mini_boss_position - 1:
        return 1
    if mini_boss_position < position < level_count - 2:
        return rng.randint(MIN_PARALLEL_LANES, 3)
    return 1


def build_structure(rng: RandomSource, level_count: int, mini_boss_position: int) -> List[Slot]:
    """Slots for every position, lanes centred vertically around the path line."""
    slots: List[Slot] = []
    for position in range(1, level_count + 1):
        lanes = lane_count(rng, position, level_count, mini_boss_position)
        top = LAYOUT_Y_CENTER - (lanes - 1) * LAYOUT_Y_SPACING // 2
        for lane in range(lanes):
            slots.append(Slot(position, lane, lanes, position * LAYOUT_X_SPACING, top + lane * LAYOUT_Y_SPACING))
    return slots


def _by_position(slots: List[Slot]) -> Dict[int, List[Slot]]:
    grouped: Dict[int, List[Slot]] = {}
    for s in slots:
        grouped.setdefault(s.position, []).append(s)
    return dict(sorted(grouped.items()))


def build_connections(slots: List[Slot]) -> List[Tuple[str, str]]:
    """Join every slot at position i to every slot at position i+1."""
    grouped = _by_position(slots)
    positions = list(grouped)
    out: List[Tuple[str, str]] = []
    for here, nxt in zip(positions, positions[1:]):
        for a in grouped[here]:
            for b in grouped[nxt]:
                out.append((a.key, b.key))
    return out


def branch_points(slots: List[Slot]) -> List[dict]:
    return [{'position': pos, 'lane_count': len(group)}
            for pos, group in _by_position(slots).items() if len(group) > 1]


def convergence_points(slots: List[Slot]) -> List[dict]:
    grouped = _by_position(slots)
    positions = list(grouped)
    out: List[dict] = []
    for prev, pos in zip(positions, positions[1:]):
        if len(grouped[pos]) < len(grouped[prev]):
            out.append({'position': pos, 'from_lanes': len(grouped[prev]), 'to_lanes': len(grouped[pos])})
    return out


def level_reward(level_type: LevelType, difficulty_modifier: float) -> int:
    return round_half_up(LEVEL_REWARD_BASE[level_type.value] * difficulty_modifier)


def _regular_content(world: WorldDefinition, slot: Slot, open_tasks: List[Task],
                     rng: RandomSource) -> Tuple[str, str, List[Objective]]:
    focus = world.task_affinity
    relevant = filter_tasks_by_affinity(open_tasks, focus)
    chance = COMPLEX_LEVEL_BASE_CHANCE * world.difficulty_modifier
    is_complex = slot.lane_count > 2 or rng.randint(1, 100) < chance

    if is_complex and len(relevant) >= 2:
        objectives = build_task_objectives(relevant, min(rng.randint(2, 3), len(relevant)), rng)
        return "Multi-Challenge Level", f"Complete {len(objectives)} {focus} tasks", objectives

    pool = relevant or open_tasks
    name = rng.choice(LEVEL_NAMES.get(focus, DEFAULT_LEVEL_NAMES))
    if not pool:
        return name, "Complete any task", [generic_objective()]
    return name, f"Complete the {focus} task", [task_objective(rng.choice(pool))]


def _build_level(level_id: int, slot: Slot, level_type: LevelType, world: WorldDefinition,
                 open_tasks: List[Task], rng: RandomSource) -> Level:
    if level_type == LevelType.BOSS:
        name, description = world.boss.name, world.boss.description
        objectives = [Objective.from_dict(world.boss.objective_dict())]
    elif level_type == LevelType.MINI_BOSS:
        challenge = mini_boss_challenge(rng, world.difficulty_modifier, slot.position)
        name, description = challenge.name, challenge.description
        objectives = [Objective.from_dict(challenge.objective_dict())]
    else:
        name, description, objectives = _regular_content(world, slot, open_tasks, rng)

    return Level(
        id=level_id,
        slot_key=slot.key,
        position=slot.position,
        lane=slot.lane,
        lane_count=slot.lane_count,
        type=level_type,
        name=name,
        description=description,
        objectives=objectives,
        reward=level_reward(level_type, world.difficulty_modifier),
        status=LevelStatus.UNLOCKED if slot.position == 1 else LevelStatus.LOCKED,
        x=slot.x,
        y=slot.y,
        branch_id=slot.branch_id,
        theme=world.theme,
    )


def check_path_invariants(path: WorldPath) -> None:
    counts = path.lane_counts()
    assert sorted(counts) == list(range(1, path.level_count + 1)), "positions must be contiguous"
    assert counts[path.mini_boss_position] == 1, "mini-boss position must hold one lane"
    assert counts[path.level_count] == 1, "boss position must hold one lane"
    assert all(1 <= n <= MAX_PARALLEL_LANES for n in counts.values()), "lane count out of range"
    assert all(lv.objectives for lv in path.levels.values()), "every level needs an objective"


def generate_world_path(world: WorldDefinition, available_tasks: Any, rng: RandomSource,
                        level_count: Optional[int] = None, mini_boss_position: Optional[int] = None,
                        owner_id: str = "") -> WorldPath:
    """Build a complete world path for ``world``.

    ``level_count`` and ``mini_boss_position`` are drawn from the RNG unless
    given; a given mini-boss position must leave at least three positions
    before it and two after it.
    """
    if level_count is None:
        level_count = rng.randint(LEVEL_COUNT_MIN, LEVEL_COUNT_MAX)
    if not LEVEL_COUNT_MIN <= level_count <= LEVEL_COUNT_MAX:
        raise ValueError(f"level count {level_count} outside {LEVEL_COUNT_MIN}..{LEVEL_COUNT_MAX}")
    if mini_boss_position is None:
        mini_boss_position = rng.randint(MINI_BOSS_MIN_POSITION, level_count - MINI_BOSS_END_MARGIN)
    if not MINI_BOSS_MIN_POSITION <= mini_boss_position <= level_count - MINI_BOSS_END_MARGIN:
        raise ValueError(f"mini-boss position {mini_boss_position} invalid for {level_count} levels")

    open_tasks = [t for t in coerce_tasks(available_tasks) if not t.completed]
    slots = build_structure(rng, level_count, mini_boss_position)

    path = WorldPath(
        owner_id=owner_id,
        world_number=world.number,
        level_count=level_count,
        mini_boss_position=mini_boss_position,
        connections=build_connections(slots),
        branch_points=branch_points(slots),
        convergence_points=convergence_points(slots),
    )
    for level_id, slot in enumerate(slots, start=1):
        if slot.position == level_count:
            level_type = LevelType.BOSS
        elif slot.position == mini_boss_position:
            level_type = LevelType.MINI_BOSS
        else:
            level_type = LevelType.REGULAR
        path.levels[slot.key] = _build_level(level_id, slot, level_type, world, open_tasks, rng)

    check_path_invariants(path)
    logger.debug(f"Generated world {world.number} path: {level_count} positions, "
                 f"mini-boss at {mini_boss_position}, lanes {path.lane_counts()}")
    return path
