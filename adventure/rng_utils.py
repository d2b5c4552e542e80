"""Injected random source helpers.

Generators never touch the module-level ``random`` functions; they take an
object with the ``random.Random`` interface so tests can pass a seeded
instance or a scripted stand-in. Only the methods listed on RandomSource are
used anywhere in the generators.
"""

from __future__ import annotations

import random
from typing import Any, List, MutableSequence, Optional, Protocol, Sequence, Tuple, TypeVar

T = TypeVar('T')


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...
    def choice(self, seq: Sequence[Any]) -> Any: ...
    def shuffle(self, x: MutableSequence[Any]) -> None: ...
    def sample(self, population: Sequence[Any], k: int) -> List[Any]: ...


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Return a private Random instance (seeded when ``seed`` is given)."""
    return random.Random(seed)


def weighted_choice(rng: RandomSource, options: Sequence[Tuple[T, int]]) -> T:
    """Pick one value by cumulative weight.

    Draws ``rng.randint(1, total)`` and returns the first option whose running
    weight reaches the draw, so a draw of 1 always selects the first option.
    """
    assert options, "weighted_choice needs at least one option"
    total = sum(w for _, w in options)
    roll = rng.randint(1, total)
    cumulative = 0
    for value, weight in options:
        cumulative += weight
        if roll <= cumulative:
            return value
    return options[-1][0]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (3 * 1.5 -> 5)."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
