"""Objective engine: validate, check, and regenerate level/node goals.

All three public operations are pure functions of their inputs. They run on
every graph read, so they never raise: a rule that blows up on a malformed
record is logged once (see safe_utils) and counts as "not valid" / "not
complete", and regeneration falls back to the generic single-task goal.

Rules per objective type (validate = still achievable, check = met):
    complete_task       task exists and is open     / task exists and is done
    daily_quantity      >= count open tasks         / >= count done today
    category_diversity  >= n categories among open  / >= n among done
    priority_clear      an open task at priority    / some exist, all done
    streak              any task (in category)      / current streak >= days
    quantity_time       >= count matching tasks     / >= count done in window
    overdue_clear       an open overdue task        / some overdue, all done
    master_challenge    >= count tasks              / >= count done in window
                                                      over >= min_categories
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from constants import (
    AFFINITY_MIXED,
    REGEN_BASE_COUNT,
    REGEN_CATEGORY_MAX,
    REGEN_CATEGORY_MIN,
    REGEN_DAILY_MAX,
)
from objective_model import (
    CategoryDiversityObjective,
    CompleteTaskObjective,
    DailyQuantityObjective,
    MasterChallengeObjective,
    Objective,
    OverdueClearObjective,
    PriorityClearObjective,
    QuantityTimeObjective,
    StreakObjective,
    as_objective,
    generic_objective,
)
from rng_utils import RandomSource, make_rng, round_half_up
from safe_utils import safe_call_with_default
from task_model import Task, UserStats, coerce_tasks

logger = logging.getLogger(__name__)

# Affinity tag -> (title keywords, category keywords). A task matches when any
# keyword occurs in its lowercased title or category.
AFFINITY_KEYWORDS: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    'personal': (('personal',), ('personal',)),
    'work': (('work', 'meeting', 'project'), ('work',)),
    'fitness': (('gym', 'exercise', 'workout', 'run'), ('health', 'fitness')),
    'creative': (('draw', 'paint', 'write', 'design', 'music', 'craft', 'creative'),
                 ('creative', 'art', 'hobby')),
    'routine': (('daily', 'routine', 'clean', 'laundry', 'habit', 'chore'),
                ('routine', 'household', 'chore')),
    'social': (('call', 'friend', 'family', 'party', 'visit', 'email'),
               ('social', 'family', 'friend')),
    'urgent': (('urgent', 'asap', 'deadline'), ('urgent',)),
}

PRIORITY_ORDER = ('high', 'medium', 'low')


def _matches_affinity(task: Task, tag: str) -> bool:
    keywords = AFFINITY_KEYWORDS.get(tag)
    if keywords is None:
        return True
    title = task.title.lower()
    category = task.category.lower()
    if tag == 'urgent' and task.priority == 'high':
        return True
    title_words, category_words = keywords
    return any(w in title for w in title_words) or any(w in category for w in category_words)


def filter_tasks_by_affinity(tasks: Iterable[Any], tag: Optional[str]) -> List[Task]:
    """Tasks that fit a world's focus; 'mixed' and unknown tags keep everything."""
    records = coerce_tasks(tasks)
    tag = (tag or AFFINITY_MIXED).lower()
    if tag == AFFINITY_MIXED or tag not in AFFINITY_KEYWORDS:
        return records
    return [t for t in records if _matches_affinity(t, tag)]


def _category_matches(task: Task, category: Optional[str]) -> bool:
    if not category or category == AFFINITY_MIXED:
        return True
    return task.category.lower() == category.lower()


def _open(tasks: List[Task]) -> List[Task]:
    return [t for t in tasks if not t.completed]


def _done(tasks: List[Task]) -> List[Task]:
    return [t for t in tasks if t.completed]


def _done_since(tasks: List[Task], since: date) -> List[Task]:
    return [t for t in tasks if t.completed and t.completed_date is not None
            and t.completed_date.date() >= since]


# --- validate rules ---------------------------------------------------------

def _valid_complete_task(obj: CompleteTaskObjective, tasks, stats, today) -> bool:
    return any(t.id == obj.task_id and not t.completed for t in tasks)


def _valid_daily_quantity(obj: DailyQuantityObjective, tasks, stats, today) -> bool:
    return len(_open(tasks)) >= obj.count


def _valid_category_diversity(obj: CategoryDiversityObjective, tasks, stats, today) -> bool:
    return len({t.category for t in _open(tasks)}) >= obj.category_count


def _valid_priority_clear(obj: PriorityClearObjective, tasks, stats, today) -> bool:
    return any(t.priority == obj.priority for t in _open(tasks))


def _valid_streak(obj: StreakObjective, tasks, stats, today) -> bool:
    return any(_category_matches(t, obj.category) for t in tasks)


def _valid_quantity_time(obj: QuantityTimeObjective, tasks, stats, today) -> bool:
    return len([t for t in tasks if _category_matches(t, obj.category)]) >= obj.count


def _valid_overdue_clear(obj: OverdueClearObjective, tasks, stats, today) -> bool:
    return any(t.is_overdue(today) for t in _open(tasks))


def _valid_master_challenge(obj: MasterChallengeObjective, tasks, stats, today) -> bool:
    return len(tasks) >= obj.count


# --- completion rules -------------------------------------------------------

def _done_complete_task(obj: CompleteTaskObjective, tasks, stats, today) -> bool:
    return any(t.id == obj.task_id and t.completed for t in tasks)


def _done_daily_quantity(obj: DailyQuantityObjective, tasks, stats, today) -> bool:
    done_today = [t for t in _done_since(tasks, today) if t.completed_date.date() == today]
    return len(done_today) >= obj.count


def _done_category_diversity(obj: CategoryDiversityObjective, tasks, stats, today) -> bool:
    return len({t.category for t in _done(tasks)}) >= obj.category_count


def _done_priority_clear(obj: PriorityClearObjective, tasks, stats, today) -> bool:
    at_priority = [t for t in tasks if t.priority == obj.priority]
    return bool(at_priority) and all(t.completed for t in at_priority)


def _done_streak(obj: StreakObjective, tasks, stats: UserStats, today) -> bool:
    return stats.current_streak >= obj.days


def _done_quantity_time(obj: QuantityTimeObjective, tasks, stats, today) -> bool:
    recent = _done_since(tasks, today - timedelta(days=obj.days))
    return len([t for t in recent if _category_matches(t, obj.category)]) >= obj.count


def _done_overdue_clear(obj: OverdueClearObjective, tasks, stats, today) -> bool:
    overdue = [t for t in tasks if t.is_overdue(today)]
    return bool(overdue) and all(t.completed for t in overdue)


def _done_master_challenge(obj: MasterChallengeObjective, tasks, stats, today) -> bool:
    recent = _done_since(tasks, today - timedelta(days=obj.days))
    return len(recent) >= obj.count and len({t.category for t in recent}) >= obj.min_categories


Rule = Callable[[Any, List[Task], UserStats, date], bool]

_VALIDATE_RULES: Dict[type, Rule] = {
    CompleteTaskObjective: _valid_complete_task,
    DailyQuantityObjective: _valid_daily_quantity,
    CategoryDiversityObjective: _valid_category_diversity,
    PriorityClearObjective: _valid_priority_clear,
    StreakObjective: _valid_streak,
    QuantityTimeObjective: _valid_quantity_time,
    OverdueClearObjective: _valid_overdue_clear,
    MasterChallengeObjective: _valid_master_challenge,
}

_COMPLETION_RULES: Dict[type, Rule] = {
    CompleteTaskObjective: _done_complete_task,
    DailyQuantityObjective: _done_daily_quantity,
    CategoryDiversityObjective: _done_category_diversity,
    PriorityClearObjective: _done_priority_clear,
    StreakObjective: _done_streak,
    QuantityTimeObjective: _done_quantity_time,
    OverdueClearObjective: _done_overdue_clear,
    MasterChallengeObjective: _done_master_challenge,
}


def _run_rule(rules: Dict[type, Rule], objective: Any, tasks: Any,
              stats: Optional[UserStats], today: Optional[date]) -> bool:
    obj = as_objective(objective)
    rule = rules.get(type(obj))
    if rule is None:
        logger.debug(f"No rule for objective type {obj.to_dict().get('type')!r}")
        return False
    stats = stats if isinstance(stats, UserStats) else UserStats.from_dict(stats)
    return bool(rule(obj, coerce_tasks(tasks), stats, today or date.today()))


def validate_objective(objective: Any, available_tasks: Any,
                       stats: Optional[UserStats] = None, today: Optional[date] = None) -> bool:
    """True while the objective can still be achieved with the given tasks."""
    return safe_call_with_default(_run_rule, False, _VALIDATE_RULES, objective, available_tasks, stats, today)


def check_objective_completion(objective: Any, tasks: Any,
                               stats: Optional[UserStats] = None, today: Optional[date] = None) -> bool:
    """True once the objective's goal has been met."""
    return safe_call_with_default(_run_rule, False, _COMPLETION_RULES, objective, tasks, stats, today)


# --- regeneration -----------------------------------------------------------

def scaled_daily_count(difficulty_modifier: float) -> int:
    return min(REGEN_DAILY_MAX, max(1, round_half_up(REGEN_BASE_COUNT * difficulty_modifier)))


def scaled_category_count(difficulty_modifier: float) -> int:
    count = round_half_up(REGEN_BASE_COUNT * difficulty_modifier)
    return max(REGEN_CATEGORY_MIN, min(REGEN_CATEGORY_MAX, count))


def task_objective(task: Task) -> CompleteTaskObjective:
    return CompleteTaskObjective(description=f"Complete: {task.title}", task_id=task.id, task_title=task.title)


def _regenerate_task_objective(tasks: List[Task], theme_tag: str, rng: RandomSource,
                               exclude_id: Optional[str] = None) -> Objective:
    candidates = [t for t in _open(tasks) if t.id != exclude_id]
    if not candidates:
        return generic_objective()
    themed = filter_tasks_by_affinity(candidates, theme_tag)
    pool = themed or candidates
    return task_objective(rng.choice(pool))


def _generate_similar(obj: Objective, tasks: List[Task], theme_tag: str,
                      difficulty_modifier: float, rng: RandomSource) -> Objective:
    if isinstance(obj, DailyQuantityObjective):
        count = scaled_daily_count(difficulty_modifier)
        noun = "task" if count == 1 else "tasks"
        return DailyQuantityObjective(description=f"Complete {count} {noun} today", count=count)
    if isinstance(obj, CategoryDiversityObjective):
        count = scaled_category_count(difficulty_modifier)
        return CategoryDiversityObjective(
            description=f"Complete tasks from {count} different categories", category_count=count)
    if isinstance(obj, PriorityClearObjective):
        open_priorities = {t.priority for t in _open(tasks)}
        for priority in PRIORITY_ORDER:
            if priority in open_priorities:
                return PriorityClearObjective(
                    description=f"Complete all {priority}-priority tasks", priority=priority)
    exclude = obj.task_id if isinstance(obj, CompleteTaskObjective) else None
    return _regenerate_task_objective(tasks, theme_tag, rng, exclude_id=exclude)


def regenerate_objective(objective: Any, available_tasks: Any, theme_tag: Optional[str] = AFFINITY_MIXED,
                         difficulty_modifier: float = 1.0, rng: Optional[RandomSource] = None,
                         stats: Optional[UserStats] = None, today: Optional[date] = None) -> Objective:
    """Return the objective unchanged while valid, else a replacement of the same family.

    A complete_task goal is re-pointed at a different open task (theme
    matches preferred); daily_quantity and category_diversity get counts
    scaled by ``difficulty_modifier``; everything else, unknown types
    included, falls back to a task goal or the generic "complete 1 task".
    Never returns None.
    """
    obj = safe_call_with_default(as_objective, generic_objective(), objective)
    if validate_objective(obj, available_tasks, stats, today):
        return obj
    tasks = safe_call_with_default(coerce_tasks, [], available_tasks)
    rng = rng or make_rng()
    replacement = safe_call_with_default(
        _generate_similar, generic_objective(), obj, tasks, theme_tag or AFFINITY_MIXED,
        difficulty_modifier, rng)
    logger.debug(f"Regenerated objective {obj.to_dict().get('type')!r} -> {replacement.type!r}")
    return replacement


def build_task_objectives(tasks: Iterable[Any], count: int, rng: RandomSource) -> List[Objective]:
    """Up to ``count`` complete_task goals for distinct tasks drawn at random."""
    records = coerce_tasks(tasks)
    if not records or count <= 0:
        return []
    picked = rng.sample(records, min(count, len(records)))
    return [task_objective(t) for t in picked]
