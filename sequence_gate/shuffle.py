from __future__ import annotations

import random
from collections.abc import Iterable
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        """Return an integer in [a, b] inclusive."""
        ...


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._seed = int(seed)
        self._rng = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)


def shuffled(items: Iterable[T], rng: RandomSource) -> list[T]:
    """Return the items in a uniformly random order, leaving the input untouched.

    Fisher-Yates: walk from the last index down, swapping each position with
    a uniformly chosen position at or below it.
    """

    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(rng.randint(0, i))
        out[i], out[j] = out[j], out[i]
    return out
