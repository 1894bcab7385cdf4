"""Aroma — one flower's scent reading on one tile.

Intensity falls off with the square of the BFS distance (plus one) from the
flower.  ``MAXIMUM_STEPS`` bounds how far a scent is spread; with the
default ceiling the detectability threshold is far below anything a finite
grid produces, so in practice every positive aroma is kept.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from meadow.world.flower import AROMA_INTENSITY

if TYPE_CHECKING:
    from meadow.world.flower import Flower

MAXIMUM_STEPS = sys.maxsize


def intensity_at(strength: float, steps: int) -> float:
    """Return the aroma of a flower of ``strength`` seen ``steps`` tiles away."""
    return strength / ((steps + 1.0) * (steps + 1.0))


def min_intensity(
    strength: float = AROMA_INTENSITY,
    max_steps: int = MAXIMUM_STEPS,
) -> float:
    """Return the weakest aroma still worth materializing."""
    if max_steps <= 0:
        return 0.0
    return strength / (float(max_steps) ** 2)


@dataclass
class Aroma:
    """A scent reading.

    Attributes:
        intensity: Current strength (>= 0 outside of a wind pass).
        flower: The flower that produced it.
    """

    intensity: float
    flower: Flower

    def __post_init__(self) -> None:
        """Clamp a negative starting intensity to zero."""
        self.intensity = max(0.0, self.intensity)

    @property
    def flower_id(self) -> int:
        """Id of the flower that produced this aroma."""
        return self.flower.flower_id

    def zero(self) -> None:
        """Raise a negative intensity back to zero."""
        self.intensity = max(0.0, self.intensity)

    def __str__(self) -> str:
        return f"{self.flower_id}:{self.intensity:.1f}"
