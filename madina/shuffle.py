"""
Injectable shuffling.

Every randomised choice in the engine (MCQ option order, collocation
selection, weakness practice) goes through a Shuffle so tests can pin it.
"""

from __future__ import annotations
import random
from typing import Callable, Optional, Sequence, TypeVar


T = TypeVar("T")

Shuffle = Callable[[Sequence[T]], list[T]]

# Shared generator behind the default shuffle
_default_rng = random.Random()


def seed_default_shuffle(seed: Optional[int]) -> None:
    """Reseed the generator used when no rng is passed."""
    _default_rng.seed(seed)


def fisher_yates_shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """
    Return a uniformly shuffled copy of items (input is not modified).

    Uses random.Random; not suitable for anything security related.
    """
    rng = rng or _default_rng
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def seeded_shuffle(seed: int) -> Shuffle:
    """Build a reproducible shuffle backed by its own Random(seed)."""
    rng = random.Random(seed)

    def shuffle(items: Sequence[T]) -> list[T]:
        return fisher_yates_shuffle(items, rng)

    return shuffle
