"""World path operations.

Contract: every function returns (ok, err, payload) and runs under the
owner's lock. World 1 is always open; world n opens once the boss of world
n-1 has been defeated.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from adventure_store import AdventureStore
from concurrency_utils import atomic, owner_key
from constants import (
    ERROR_INVALID_PATH_SHAPE,
    ERROR_LEVEL_COMPLETED,
    ERROR_LEVEL_LOCKED,
    ERROR_LEVEL_NOT_FOUND,
    ERROR_OBJECTIVES_INCOMPLETE,
    ERROR_WORLD_LOCKED,
    ERROR_WORLD_NOT_FOUND,
    ERROR_WORLD_UNKNOWN,
    LEVEL_COUNT_MAX,
    LEVEL_COUNT_MIN,
    MINI_BOSS_END_MARGIN,
    MINI_BOSS_MIN_POSITION,
)
from objective_service import check_objective_completion, regenerate_objective
from service_context import ServiceContext
from service_contract import ServiceReturn, error, success
from task_model import UserStats, coerce_tasks
from theme_catalog import get_world, world_count
from world_path_generator import generate_world_path
from world_path_model import LevelStatus, LevelType

logger = logging.getLogger(__name__)


def is_world_unlocked(store: AdventureStore, owner_id: str, world_number: int) -> bool:
    if world_number == 1:
        return True
    progress = store.world_progress.get(owner_id)
    return progress is not None and progress.is_completed(world_number - 1)


def _known_world(world_number: int) -> bool:
    return 1 <= world_number <= world_count()


def _valid_shape(level_count: Optional[int], mini_boss_position: Optional[int]) -> bool:
    """Requested level count and mini-boss position fit the generator's bounds."""
    if level_count is not None and not LEVEL_COUNT_MIN <= level_count <= LEVEL_COUNT_MAX:
        return False
    if mini_boss_position is None:
        return True
    # Without a level count the mini-boss must fit the longest path
    last = level_count if level_count is not None else LEVEL_COUNT_MAX
    return MINI_BOSS_MIN_POSITION <= mini_boss_position <= last - MINI_BOSS_END_MARGIN


def create_world_path(ctx: ServiceContext, owner_id: str, world_number: int, available_tasks: Any,
                      level_count: Optional[int] = None, mini_boss_position: Optional[int] = None,
                      regenerate: bool = False) -> ServiceReturn:
    """Generate (or return the existing) path for an unlocked world.

    An existing path is returned as-is unless ``regenerate`` is set, so
    repeated calls do not wipe a player's level progress.
    """
    if not _known_world(world_number):
        return error(ERROR_WORLD_UNKNOWN)
    if not _valid_shape(level_count, mini_boss_position):
        return error(ERROR_INVALID_PATH_SHAPE)
    with atomic(owner_key(owner_id)):
        if not is_world_unlocked(ctx.store, owner_id, world_number):
            return error(ERROR_WORLD_LOCKED)
        existing = ctx.store.get_world_path(owner_id, world_number)
        if existing is not None and not regenerate:
            return success({'world': get_world(world_number).to_dict(), 'path': existing.to_dict()})

        if mini_boss_position is not None and level_count is None:
            level_count = ctx.rng.randint(max(LEVEL_COUNT_MIN, mini_boss_position + MINI_BOSS_END_MARGIN),
                                          LEVEL_COUNT_MAX)
        world = get_world(world_number)
        path = generate_world_path(world, coerce_tasks(available_tasks), ctx.rng,
                                   level_count=level_count, mini_boss_position=mini_boss_position,
                                   owner_id=owner_id)
        ctx.store.write_world_path(path)
        ctx.store.world_progress_for(owner_id).current_world = world_number
        ctx.persist()
        logger.info(f"Generated world {world_number} path for {owner_id}: {len(path.levels)} levels")
        return success({'world': world.to_dict(), 'path': path.to_dict()})


def get_world_path(ctx: ServiceContext, owner_id: str, world_number: int) -> ServiceReturn:
    with atomic(owner_key(owner_id)):
        path = ctx.store.get_world_path(owner_id, world_number)
        if path is None:
            return error(ERROR_WORLD_NOT_FOUND)
        return success({'world': get_world(world_number).to_dict(), 'path': path.to_dict()})


def complete_level(ctx: ServiceContext, owner_id: str, world_number: int, level_id: int,
                   tasks: Any, stats: Optional[UserStats] = None) -> ServiceReturn:
    """Clear a level once every objective on it is met.

    Unlocks all levels at the next position. Clearing the boss completes the
    world and opens the next one.
    """
    with atomic(owner_key(owner_id)):
        path = ctx.store.get_world_path(owner_id, world_number)
        if path is None:
            return error(ERROR_WORLD_NOT_FOUND)
        level = path.level_by_id(level_id)
        if level is None:
            return error(ERROR_LEVEL_NOT_FOUND)
        if level.status == LevelStatus.COMPLETED:
            return error(ERROR_LEVEL_COMPLETED)
        if level.status == LevelStatus.LOCKED:
            return error(ERROR_LEVEL_LOCKED)

        today = ctx.today()
        task_list = coerce_tasks(tasks)
        if not all(check_objective_completion(o, task_list, stats, today) for o in level.objectives):
            logger.debug(f"{owner_id} tried to clear level {level_id} of world {world_number} early")
            return error(ERROR_OBJECTIVES_INCOMPLETE)

        level.status = LevelStatus.COMPLETED
        unlocked = []
        for nxt in path.levels_at(level.position + 1):
            if nxt.status == LevelStatus.LOCKED:
                nxt.status = LevelStatus.UNLOCKED
                unlocked.append(nxt.slot_key)

        if level.type == LevelType.BOSS:
            path.completed = True
            progress = ctx.store.world_progress_for(owner_id)
            if world_number not in progress.completed_worlds:
                progress.completed_worlds.append(world_number)
            progress.current_world = min(world_number + 1, world_count())
            logger.info(f"{owner_id} completed world {world_number}")

        ctx.persist()
        return success({
            'level': level.to_dict(),
            'unlocked': unlocked,
            'reward': level.reward,
            'world_completed': path.completed,
        })


def refresh_level_objectives(ctx: ServiceContext, owner_id: str, world_number: int,
                             available_tasks: Any, stats: Optional[UserStats] = None) -> ServiceReturn:
    """Replace objectives that can no longer be achieved on unfinished regular levels.

    Objectives already met are kept so finished work still clears the level.
    Boss and mini-boss challenges are fixed and left alone.
    """
    with atomic(owner_key(owner_id)):
        path = ctx.store.get_world_path(owner_id, world_number)
        if path is None:
            return error(ERROR_WORLD_NOT_FOUND)
        world = get_world(world_number)
        today = ctx.today()
        task_list = coerce_tasks(available_tasks)
        replaced = 0
        for level in path.levels.values():
            if level.type != LevelType.REGULAR or level.status == LevelStatus.COMPLETED:
                continue
            fresh = [o if check_objective_completion(o, task_list, stats, today)
                     else regenerate_objective(o, task_list, world.task_affinity, world.difficulty_modifier,
                                               ctx.rng, stats, today)
                     for o in level.objectives]
            replaced += sum(1 for old, new in zip(level.objectives, fresh) if old is not new)
            level.objectives = fresh
        if replaced:
            ctx.persist()
            logger.info(f"Refreshed {replaced} objective(s) in world {world_number} for {owner_id}")
        return success({'replaced': replaced, 'path': path.to_dict()})
