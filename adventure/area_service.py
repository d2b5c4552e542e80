"""Free-roam area operations.

Caller-facing helpers for generating an owner's next area and walking its
grid. Every function returns (ok, err, payload) per service_contract and
runs inside the owner's lock so Progress can never point at an area or node
that was not written.
"""

from __future__ import annotations

import logging

from area_generator import START, generate_area_graph
from concurrency_utils import atomic, owner_key
from constants import (
    ERROR_NO_ACTIVE_AREA,
    ERROR_NODE_COMPLETED,
    ERROR_NODE_LOCKED,
    ERROR_NODE_NOT_CONNECTED,
    ERROR_NODE_NOT_FOUND,
)
from grid_model import Area, NodeType, Progress
from service_context import ServiceContext
from service_contract import ServiceReturn, error, success
import theme_catalog

logger = logging.getLogger(__name__)


def _map_payload(area: Area, progress: Progress) -> dict:
    return {
        'area': area.to_dict(),
        'current_node_id': progress.current_node.to_node_id() if progress.current_node else None,
        'colors': theme_catalog.theme_colors(area.theme),
    }


def generate_area(ctx: ServiceContext, owner_id: str, theme_key: str) -> ServiceReturn:
    """Generate the owner's next area and move them to its START node.

    The graph is built off to the side first; the area and the updated
    Progress record are then written together under the owner's lock.
    """
    theme = theme_catalog.get_theme(theme_key)
    with atomic(owner_key(owner_id)):
        nodes = generate_area_graph(ctx.rng, ctx.max_walk_steps)
        area = Area(
            owner_id=owner_id,
            area_number=ctx.store.next_area_number(owner_id),
            theme=theme.key,
            nodes=nodes,
        )
        progress = ctx.store.progress.get(owner_id) or Progress(owner_id=owner_id)
        progress.current_area_id = area.id
        progress.current_node = START
        ctx.store.write_area(area, progress)
        ctx.persist()
        logger.info(f"Generated area {area.area_number} ({theme.key}) for {owner_id}: {len(nodes)} nodes")
        return success(_map_payload(area, progress))


def get_current_map(ctx: ServiceContext, owner_id: str) -> ServiceReturn:
    with atomic(owner_key(owner_id)):
        area = ctx.store.current_area(owner_id)
        if area is None:
            return error(ERROR_NO_ACTIVE_AREA)
        return success(_map_payload(area, ctx.store.progress[owner_id]))


def get_progress(ctx: ServiceContext, owner_id: str) -> ServiceReturn:
    with atomic(owner_key(owner_id)):
        progress = ctx.store.progress.get(owner_id) or Progress(owner_id=owner_id)
        return success({'progress': progress.to_dict()})


def move_to_node(ctx: ServiceContext, owner_id: str, node_id: str) -> ServiceReturn:
    """Move the owner onto an unlocked node connected to where they stand.

    Errors: no active area, unknown node, locked node, or not connected.
    Rejections leave every record untouched.
    """
    with atomic(owner_key(owner_id)):
        area = ctx.store.current_area(owner_id)
        if area is None:
            return error(ERROR_NO_ACTIVE_AREA)
        target = area.node(node_id)
        if target is None:
            return error(ERROR_NODE_NOT_FOUND)
        if not target.unlocked:
            logger.debug(f"{owner_id} tried to enter locked node {node_id}")
            return error(ERROR_NODE_LOCKED)
        progress = ctx.store.progress[owner_id]
        current = area.nodes.get(progress.current_node) if progress.current_node else None
        if current is not None and target.pos not in current.connections:
            logger.debug(f"{owner_id} tried to jump from {current.node_id} to {node_id}")
            return error(ERROR_NODE_NOT_CONNECTED)

        progress.current_node = target.pos
        ctx.persist()
        return success({'node': target.to_dict(), 'current_node_id': target.node_id})


def complete_node(ctx: ServiceContext, owner_id: str, node_id: str) -> ServiceReturn:
    """Resolve a node: mark it completed and unlock every neighbour.

    Completing the BOSS node also completes the area and bumps the owner's
    areas-completed and bosses-defeated totals.
    """
    with atomic(owner_key(owner_id)):
        area = ctx.store.current_area(owner_id)
        if area is None:
            return error(ERROR_NO_ACTIVE_AREA)
        node = area.node(node_id)
        if node is None:
            return error(ERROR_NODE_NOT_FOUND)
        if not node.unlocked:
            return error(ERROR_NODE_LOCKED)
        if node.completed:
            return error(ERROR_NODE_COMPLETED)

        node.completed = True
        unlocked = []
        for pos in sorted(node.connections):
            neighbour = area.nodes[pos]
            if not neighbour.unlocked:
                neighbour.unlocked = True
                unlocked.append(neighbour.node_id)

        progress = ctx.store.progress[owner_id]
        area.nodes_explored += 1
        progress.total_nodes_explored += 1
        if node.type == NodeType.BOSS:
            area.completed = True
            progress.total_areas_completed += 1
            progress.total_bosses_defeated += 1
            logger.info(f"{owner_id} defeated the boss of area {area.area_number}")

        ctx.persist()
        return success({
            'node': node.to_dict(),
            'unlocked': unlocked,
            'area_completed': area.completed,
            'progress': progress.to_dict(),
        })


def get_node_encounter(ctx: ServiceContext, owner_id: str, node_id: str) -> ServiceReturn:
    """Describe what waits at a node, drawn from the area's age theme."""
    with atomic(owner_key(owner_id)):
        area = ctx.store.current_area(owner_id)
        if area is None:
            return error(ERROR_NO_ACTIVE_AREA)
        node = area.node(node_id)
        if node is None:
            return error(ERROR_NODE_NOT_FOUND)

        theme = theme_catalog.get_theme(area.theme)
        if node.type == NodeType.COMBAT:
            encounter = {'type': 'combat', 'enemy': theme_catalog.random_enemy(ctx.rng, theme.key)}
        elif node.type == NodeType.BOSS:
            encounter = {'type': 'boss', 'enemy': theme_catalog.get_boss(theme.key)}
        elif node.type == NodeType.TREASURE:
            encounter = {'type': 'treasure', 'reward': theme_catalog.random_treasure(ctx.rng, theme.key)}
        elif node.type == NodeType.EVENT:
            encounter = {'type': 'event', 'event': theme_catalog.random_event(ctx.rng, theme.key)}
        elif node.type == NodeType.SHOP:
            encounter = {'type': 'shop', 'message': f"A merchant of the {theme.display_name} offers their wares."}
        else:
            encounter = {'type': 'start', 'message': f"Your journey through the {theme.display_name} begins here."}
        return success({'node': node.to_dict(), 'encounter': encounter})
