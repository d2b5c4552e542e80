from __future__ import annotations
"""Pytest shared fixtures.

Every test starts from a clean slate: adventure env vars removed, the
once-per-type exception log forgotten, and the persistence façade's cached
savers dropped, so one test's saver cannot write another test's store.
"""
import random
from datetime import date

import pytest

from persistence_utils import reset_persistence_state
from safe_utils import reset_seen_exceptions
from service_context import ServiceContext

ENV_VARS = (
    'QUEST_STATE_PATH',
    'QUEST_SAVE_DEBOUNCE_MS',
    'QUEST_MAX_WALK_STEPS',
    'QUEST_RNG_SEED',
    'QUEST_LOG_LEVEL',
    'QUEST_LOG_FORMAT',
    'DEBUG_RAISE_EXCEPTIONS',
)

TODAY = date(2025, 3, 10)


class ScriptedRandom:
    """Random stand-in that always takes the first option (or the last, with pick_last)."""

    def __init__(self, pick_last: bool = False):
        self.pick_last = pick_last

    def randint(self, a, b):
        return b if self.pick_last else a

    def choice(self, seq):
        return seq[-1] if self.pick_last else seq[0]

    def shuffle(self, x):
        return None

    def sample(self, population, k):
        return list(population)[:k]


@pytest.fixture(autouse=True)
def clean_adventure_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_seen_exceptions()
    reset_persistence_state()
    yield
    reset_persistence_state()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def first_choice_rng():
    return ScriptedRandom()


@pytest.fixture
def last_choice_rng():
    return ScriptedRandom(pick_last=True)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def ctx(tmp_path, rng):
    return ServiceContext(
        state_path=str(tmp_path / "adventure_state.json"),
        debounced_saves=False,
        rng=rng,
        today_fn=lambda: TODAY,
    )


@pytest.fixture
def sample_tasks():
    return [
        {'id': 1, 'title': 'Gym session', 'category': 'health', 'priority': 'high',
         'completed': False, 'due_date': '2025-03-08'},
        {'id': 2, 'title': 'Write project report', 'category': 'work', 'priority': 'medium',
         'completed': False, 'due_date': '2025-03-20'},
        {'id': 3, 'title': 'Call grandma', 'category': 'family', 'priority': 'low',
         'completed': False},
        {'id': 4, 'title': 'Personal budget review', 'category': 'personal', 'priority': 'medium',
         'completed': True, 'completed_date': '2025-03-10T09:30:00'},
        {'id': 5, 'title': 'Team meeting notes', 'category': 'work', 'priority': 'high',
         'completed': True, 'completed_date': '2025-03-07T16:00:00'},
    ]
