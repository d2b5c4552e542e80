from __future__ import annotations

"""Shared service context.

Services receive a ServiceContext instead of reaching for module globals:
the store, where it is saved, the random source used by the generators, and
the clock used by objective checks. Tests build one with a seeded Random and
a fixed date; config.build_context() builds the production one from the
environment.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

from adventure_store import AdventureStore
from constants import DEFAULT_MAX_WALK_STEPS, DEFAULT_STATE_FILE
from persistence_utils import save_store
from rng_utils import RandomSource, make_rng


@dataclass(slots=True)
class ServiceContext:
    # Core state + persistence
    store: AdventureStore = field(default_factory=AdventureStore)
    state_path: str = DEFAULT_STATE_FILE
    debounced_saves: bool = True

    # Injected randomness and clock
    rng: RandomSource = field(default_factory=make_rng)
    today_fn: Callable[[], date] = date.today

    # Generator limits
    max_walk_steps: int = DEFAULT_MAX_WALK_STEPS

    def today(self) -> date:
        return self.today_fn()

    def persist(self, debounced: Optional[bool] = None) -> None:
        save_store(self.store, self.state_path,
                   debounced=self.debounced_saves if debounced is None else debounced)
