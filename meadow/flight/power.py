"""Power — the butterfly's energy reserve."""

from __future__ import annotations

from dataclasses import dataclass

from meadow.errors import PowerExhaustedError

MAX_POWER = 100
MIN_POWER = 0


@dataclass
class Power:
    """Energy between ``MIN_POWER`` and ``MAX_POWER``.

    Gains are capped at ``MAX_POWER``.  A drain that would fall below
    ``MIN_POWER`` raises ``PowerExhaustedError`` and leaves the value as it
    was.  With ``infinite`` set the value is pinned at ``MAX_POWER``.

    Attributes:
        value: Current power.
        infinite: Ignore every change and stay at full power.
    """

    value: int = MAX_POWER
    infinite: bool = False

    def __post_init__(self) -> None:
        """Clamp the starting value into range."""
        if self.infinite:
            self.value = MAX_POWER
        else:
            self.value = max(MIN_POWER, min(MAX_POWER, self.value))

    def drain(self, amount: int) -> None:
        """Subtract ``amount``; a negative amount is a gain.

        Raises:
            PowerExhaustedError: If the result would be below ``MIN_POWER``.
        """
        if self.infinite:
            self.value = MAX_POWER
            return
        remaining = self.value - amount
        if remaining < MIN_POWER:
            msg = f"needs {amount} power, has {self.value}"
            raise PowerExhaustedError(msg)
        self.value = min(remaining, MAX_POWER)

    def gain(self, amount: int) -> None:
        """Add ``amount``, capped at ``MAX_POWER``."""
        self.drain(-amount)

    def can_afford(self, amount: int) -> bool:
        """Whether draining ``amount`` would succeed."""
        return self.infinite or self.value - amount >= MIN_POWER

    def __int__(self) -> int:
        return self.value
