import random

import pytest

from area_generator import (
    BOSS,
    SHOP,
    START,
    check_area_invariants,
    generate_area_graph,
    nearest_on_path,
    reachable_from,
    unique_path,
    weighted_walk,
)
from grid_model import GridPos, NodeType


def test_always_x_walk_is_the_straight_row(first_choice_rng):
    steps = weighted_walk(first_choice_rng, START, BOSS)
    assert steps == [GridPos(x, 3) for x in range(7)]
    assert len(unique_path(steps)) == 7


def test_walk_steps_are_adjacent_and_end_on_target():
    for seed in range(100):
        steps = weighted_walk(random.Random(seed), START, BOSS)
        assert steps[0] == START and steps[-1] == BOSS
        for a, b in zip(steps, steps[1:]):
            assert a.manhattan(b) == 1
            assert a.in_bounds() and b.in_bounds()


def test_step_cap_forces_direct_moves(last_choice_rng):
    # Always taking the last (wandering) option would stall; the cap finishes the walk
    steps = weighted_walk(last_choice_rng, START, BOSS, max_steps=5)
    assert steps[-1] == BOSS
    tail = steps[6:]
    for a, b in zip(tail, tail[1:]):
        # forced moves only ever close the distance
        assert b.manhattan(BOSS) == a.manhattan(BOSS) - 1


def test_nearest_on_path_prefers_earliest_on_ties():
    path = [GridPos(2, 1), GridPos(4, 1), GridPos(3, 3)]
    assert nearest_on_path(path, SHOP) == GridPos(2, 1)


@pytest.mark.parametrize("seed", range(60))
def test_generated_area_invariants(seed):
    nodes = generate_area_graph(random.Random(seed))
    check_area_invariants(nodes)

    # BOSS reachable, every node reachable, one START/BOSS/SHOP
    assert set(reachable_from(nodes, START)) == set(nodes)
    types = [n.type for n in nodes.values()]
    assert types.count(NodeType.START) == 1
    assert types.count(NodeType.BOSS) == 1
    assert types.count(NodeType.SHOP) == 1

    # Symmetric edges and unique coordinates
    for pos, node in nodes.items():
        for other in node.connections:
            assert pos in nodes[other].connections
    assert len({(n.pos.x, n.pos.y) for n in nodes.values()}) == len(nodes)

    # Only START starts unlocked; nothing is completed
    assert [n.pos for n in nodes.values() if n.unlocked] == [START]
    assert not any(n.completed for n in nodes.values())


def test_scripted_area_layout(first_choice_rng):
    nodes = generate_area_graph(first_choice_rng)
    row = [GridPos(x, 3) for x in range(7)]
    shop_spur = [GridPos(3, 2), GridPos(3, 1)]
    assert all(p in nodes for p in row + shop_spur + [SHOP])
    assert GridPos(3, 2) in nodes[GridPos(3, 3)].connections
    assert SHOP in nodes[GridPos(3, 1)].connections
    # Branches grow from the lowest cell in (x, y) order until it is boxed in at (0,0)
    branches = {GridPos(0, 4), GridPos(0, 2), GridPos(1, 2), GridPos(0, 1),
                GridPos(1, 1), GridPos(0, 0), GridPos(1, 0)}
    assert set(nodes) == set(row + shop_spur + [SHOP]) | branches
    assert GridPos(1, 2) in nodes[GridPos(0, 2)].connections


def test_type_quotas_leave_leftovers_as_combat():
    nodes = generate_area_graph(random.Random(5))
    others = [n for n in nodes.values() if n.type not in (NodeType.START, NodeType.BOSS, NodeType.SHOP)]
    treasure = sum(1 for n in others if n.type == NodeType.TREASURE)
    event = sum(1 for n in others if n.type == NodeType.EVENT)
    combat = sum(1 for n in others if n.type == NodeType.COMBAT)
    assert treasure <= 8 and event <= 8
    assert combat == len(others) - treasure - event
    assert combat >= min(30, len(others))
