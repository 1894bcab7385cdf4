"""Flower — a scent-emitting entity the butterfly has to find."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meadow.world.grid import Location

# Default intrinsic aroma strength of a flower.
AROMA_INTENSITY = 1e6

# Flower images are numbered flower_1 .. flower_100.
FLOWER_NUMBERS = tuple(range(1, 101))

# Ids are unique for the lifetime of the process, never reused.
_flower_ids = itertools.count()


@dataclass(frozen=True, order=True)
class Flower:
    """A flower planted on a flyable tile.

    Two flowers are equal exactly when their ids are equal; the remaining
    fields are descriptive only.

    Attributes:
        flower_id: Unique, monotonically increasing id.
        name: Display name, e.g. ``"flower_17"``.
        location: Where the flower was planted.
        aroma_intensity: Intrinsic aroma strength at the flower's own tile.
    """

    flower_id: int
    name: str = field(compare=False)
    location: Location = field(compare=False)
    aroma_intensity: float = field(default=AROMA_INTENSITY, compare=False)

    @classmethod
    def plant(
        cls,
        name: str,
        location: Location,
        aroma_intensity: float = AROMA_INTENSITY,
    ) -> Flower:
        """Create a flower with the next free id.

        Negative intensities are raised to zero.
        """
        return cls(
            flower_id=next(_flower_ids),
            name=name,
            location=location,
            aroma_intensity=max(0.0, aroma_intensity),
        )

    @property
    def short_name(self) -> str:
        """The digits of the flower's name (``"17"`` for ``"flower_17"``)."""
        return "".join(ch for ch in self.name if ch.isdigit())
