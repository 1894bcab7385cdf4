"""Speed — how fast the butterfly flies, trading turns for power."""

from __future__ import annotations

from enum import Enum


class Speed(Enum):
    """Flight speeds as ``(slow_down, power_cost)``.

    Flying slowly costs an extra turn but restores power; flying fast saves
    a turn at a power cost.
    """

    SLOW = (1, -3)
    NORMAL = (0, 0)
    FAST = (-1, 3)

    @property
    def slow_down(self) -> int:
        """Turns added to (or, when negative, removed from) a move."""
        return self.value[0]

    @property
    def power_cost(self) -> int:
        """Power drained by a move; negative values restore power."""
        return self.value[1]
