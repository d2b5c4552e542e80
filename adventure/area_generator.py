"""Procedural generator for free-roam adventure areas.

Builds a 7x7 grid graph in a local arena (a plain dict of GridPos -> Node)
and hands the finished graph back to the caller, which persists it in one
batch. Steps:

1. Place the anchors: START (0,3), BOSS (6,3), SHOP (3,0).
2. Walk from START to BOSS with a weighted random walk (main path).
3. Walk from the main-path node nearest to SHOP over to SHOP.
4. Grow 8-12 branch nodes off random existing nodes (50 attempts max).
5. Shuffle the non-anchor nodes and hand out the 30/8/8 type quotas.

Every edge joins two orthogonally adjacent cells and is stored on both ends.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Set, Tuple

from constants import (
    BOSS_POS,
    BRANCH_MAX_ATTEMPTS,
    BRANCH_NODES_MAX,
    BRANCH_NODES_MIN,
    DEFAULT_MAX_WALK_STEPS,
    NODE_TYPE_QUOTAS,
    SHOP_POS,
    START_POS,
    WALK_WEIGHT_ADJACENT,
    WALK_WEIGHT_X,
    WALK_WEIGHT_Y,
)
from grid_model import GridPos, Node, NodeType
from rng_utils import RandomSource, weighted_choice

logger = logging.getLogger(__name__)

START = GridPos(*START_POS)
BOSS = GridPos(*BOSS_POS)
SHOP = GridPos(*SHOP_POS)
ANCHORS = {START: NodeType.START, BOSS: NodeType.BOSS, SHOP: NodeType.SHOP}


def _step_toward(a: int, b: int) -> int:
    return a + (1 if b > a else -1)


def _direct_move(current: GridPos, target: GridPos) -> GridPos:
    if current.x != target.x:
        return GridPos(_step_toward(current.x, target.x), current.y)
    return GridPos(current.x, _step_toward(current.y, target.y))


def _walk_candidates(current: GridPos, target: GridPos, visited: Set[GridPos]) -> List[Tuple[GridPos, int]]:
    """Weighted moves from ``current``; the x-axis move toward the target comes first."""
    moves: List[Tuple[GridPos, int]] = []
    if current.x != target.x:
        moves.append((GridPos(_step_toward(current.x, target.x), current.y), WALK_WEIGHT_X))
    if current.y != target.y:
        moves.append((GridPos(current.x, _step_toward(current.y, target.y)), WALK_WEIGHT_Y))
    for adj in current.neighbors():
        if adj not in visited:
            moves.append((adj, WALK_WEIGHT_ADJACENT))
    return moves


def weighted_walk(rng: RandomSource, start: GridPos, target: GridPos,
                  max_steps: int = DEFAULT_MAX_WALK_STEPS) -> List[GridPos]:
    """Return every cell the walk stands on, in order, starting with ``start``.

    Cells may repeat when the walk doubles back; consecutive entries are
    always grid-adjacent. After ``max_steps`` sampled steps the walk stops
    sampling and moves straight to the target, x first.
    """
    steps = [start]
    visited = {start}
    current = start
    while current != target:
        if len(steps) > max_steps:
            nxt = _direct_move(current, target)
        else:
            nxt = weighted_choice(rng, _walk_candidates(current, target, visited))
        steps.append(nxt)
        visited.add(nxt)
        current = nxt
    if len(steps) > max_steps + 1:
        logger.debug(f"Walk {start} -> {target} hit the step cap ({max_steps}); finished directly")
    return steps


def unique_path(steps: Iterable[GridPos]) -> List[GridPos]:
    """First-visit order of the cells in a walk."""
    seen: Set[GridPos] = set()
    out: List[GridPos] = []
    for pos in steps:
        if pos not in seen:
            seen.add(pos)
            out.append(pos)
    return out


def _connect(nodes: Dict[GridPos, Node], a: GridPos, b: GridPos) -> None:
    if a == b:
        return
    nodes[a].connections.add(b)
    nodes[b].connections.add(a)


def _ensure_node(nodes: Dict[GridPos, Node], pos: GridPos) -> Node:
    node = nodes.get(pos)
    if node is None:
        node = Node(pos=pos, type=NodeType.COMBAT)
        nodes[pos] = node
    return node


def _lay_walk(nodes: Dict[GridPos, Node], steps: List[GridPos]) -> None:
    for pos in steps:
        _ensure_node(nodes, pos)
    for prev, nxt in zip(steps, steps[1:]):
        _connect(nodes, prev, nxt)


def nearest_on_path(path: List[GridPos], target: GridPos) -> GridPos:
    """Closest path cell by Manhattan distance; the earliest wins ties."""
    best = path[0]
    best_dist = best.manhattan(target)
    for pos in path[1:]:
        dist = pos.manhattan(target)
        if dist < best_dist:
            best, best_dist = pos, dist
    return best


def _grow_branches(nodes: Dict[GridPos, Node], rng: RandomSource) -> int:
    wanted = rng.randint(BRANCH_NODES_MIN, BRANCH_NODES_MAX)
    added = 0
    attempts = 0
    while added < wanted and attempts < BRANCH_MAX_ATTEMPTS:
        attempts += 1
        source = rng.choice(sorted(nodes))
        options = source.neighbors()
        rng.shuffle(options)
        for cell in options:
            if cell not in nodes:
                _ensure_node(nodes, cell)
                _connect(nodes, source, cell)
                added += 1
                break
    if added < wanted:
        logger.debug(f"Branch growth stopped at {added}/{wanted} after {attempts} attempts")
    return added


def _assign_types(nodes: Dict[GridPos, Node], rng: RandomSource) -> None:
    for pos, node_type in ANCHORS.items():
        nodes[pos].type = node_type
    pool = sorted(pos for pos in nodes if pos not in ANCHORS)
    rng.shuffle(pool)
    index = 0
    for type_name, quota in NODE_TYPE_QUOTAS:
        for pos in pool[index:index + quota]:
            nodes[pos].type = NodeType[type_name]
        index += quota
    # Leftovers past the quotas keep the COMBAT default


def reachable_from(nodes: Dict[GridPos, Node], origin: GridPos) -> Set[GridPos]:
    """Breadth-first set of cells reachable from ``origin``."""
    seen = {origin}
    queue = deque([origin])
    while queue:
        pos = queue.popleft()
        for nxt in nodes[pos].connections:
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return seen


def check_area_invariants(nodes: Dict[GridPos, Node]) -> None:
    """Assert the structural guarantees of a generated area."""
    for pos, node in nodes.items():
        assert node.pos == pos, f"node keyed at {pos} reports {node.pos}"
        for other in node.connections:
            assert other in nodes, f"{pos} connects to missing {other}"
            assert pos in nodes[other].connections, f"edge {pos}->{other} is one-way"
            assert pos.manhattan(other) == 1, f"edge {pos}->{other} is not grid-adjacent"
    assert sum(1 for n in nodes.values() if n.type == NodeType.START) == 1
    assert sum(1 for n in nodes.values() if n.type == NodeType.BOSS) == 1
    assert BOSS in reachable_from(nodes, START), "BOSS unreachable from START"


def generate_area_graph(rng: RandomSource, max_walk_steps: Optional[int] = None) -> Dict[GridPos, Node]:
    """Build a complete area graph; START unlocked, everything else locked."""
    max_steps = max_walk_steps if max_walk_steps is not None else DEFAULT_MAX_WALK_STEPS
    nodes: Dict[GridPos, Node] = {pos: Node(pos=pos, type=t) for pos, t in ANCHORS.items()}

    main_steps = weighted_walk(rng, START, BOSS, max_steps)
    _lay_walk(nodes, main_steps)
    main_path = unique_path(main_steps)

    shop_from = nearest_on_path(main_path, SHOP)
    _lay_walk(nodes, weighted_walk(rng, shop_from, SHOP, max_steps))

    branches = _grow_branches(nodes, rng)
    _assign_types(nodes, rng)
    nodes[START].unlocked = True

    check_area_invariants(nodes)
    logger.debug(f"Generated area graph: {len(nodes)} nodes, main path {len(main_path)}, "
                 f"{branches} branch nodes")
    return nodes
