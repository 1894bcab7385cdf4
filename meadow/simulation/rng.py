"""Randomer — the single seeded random source of a run.

Every random decision made while building and running a park goes through
one ``Randomer`` so that two runs with the same seed produce the same world.
The wrapper exists to give the generator the vocabulary the world code
speaks (inclusive ranges, per-mille chances, element picks) while keeping
NumPy's ``Generator`` underneath.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.random import Generator

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SEED_CEILING = 2**31 - 1


class Randomer:
    """Seeded pseudorandom source.

    Attributes:
        seed: The seed this instance was built from.  When no seed is given
            one is drawn from OS entropy so the run can still be replayed.
    """

    def __init__(self, seed: int | None = None) -> None:
        """Create a generator.

        Args:
            seed: Integer seed, or None to draw a fresh one.
        """
        if seed is None:
            seed = int(np.random.default_rng().integers(0, _SEED_CEILING))
            logger.debug("No seed configured, drew %d", seed)
        self.seed = seed
        self._gen: Generator = np.random.default_rng(seed)

    def next_int(self, low: int, high: int) -> int:
        """Return a uniform integer in ``low..high`` (both inclusive)."""
        return int(self._gen.integers(low, high, endpoint=True))

    def below(self, n: int) -> int:
        """Return a uniform integer in ``0..n-1``."""
        return int(self._gen.integers(0, n))

    def random(self) -> float:
        """Return a uniform float in ``[0, 1)``."""
        return float(self._gen.random())

    def next_double(self, low: float, high: float) -> float:
        """Return a uniform float in ``[low, high)``."""
        return low + self.random() * (high - low)

    def chance(self, p: float) -> bool:
        """Return True with probability ``p``.

        Probabilities outside ``[0, 1]`` are clamped: ``p <= 0`` is never
        true and ``p >= 1`` is always true (no draw is made in either case).
        """
        if p <= 0:
            return False
        if p >= 1:
            return True
        return self.random() < p

    def chance_per_mille(self, n: int) -> bool:
        """Return True with probability ``n / 1000``."""
        return self.below(1000) < n

    def choice(self, items: Sequence[T]) -> T:
        """Return a uniformly chosen element of ``items``.

        Raises:
            ValueError: If ``items`` is empty.
        """
        if not items:
            msg = "cannot choose from an empty sequence"
            raise ValueError(msg)
        return items[self.below(len(items))]

    def sample(self, items: Sequence[T], n: int) -> list[T]:
        """Return ``n`` distinct elements of ``items`` in random order.

        Raises:
            ValueError: If ``n`` is negative or larger than ``len(items)``.
        """
        if not 0 <= n <= len(items):
            msg = f"cannot sample {n} of {len(items)} items"
            raise ValueError(msg)
        order = self._gen.permutation(len(items))
        return [items[int(i)] for i in order[:n]]
