"""Butterfly — the base class every agent derives from.

An agent implements the four abstract methods; everything it does to the
park goes through the helpers here, which forward to the run's
``FlightResolver``.  The engine binds the resolver before calling
``learn``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

from meadow.flight.speed import Speed

if TYPE_CHECKING:
    from meadow.flight.resolver import FlightResolver
    from meadow.world.direction import Direction
    from meadow.world.flower import Flower
    from meadow.world.grid import Location
    from meadow.world.tile import TileState

LearnedMap = Sequence[Sequence["TileState | None"]]


class Butterfly(ABC):
    """Base interface for agents."""

    def __init__(self) -> None:
        self._resolver: FlightResolver | None = None

    def bind(self, resolver: FlightResolver) -> None:
        """Attach the butterfly to the resolver of a run."""
        self._resolver = resolver
        resolver.seat(self)

    @property
    def resolver(self) -> FlightResolver:
        """The bound resolver.

        Raises:
            RuntimeError: If the butterfly has not been bound to a run.
        """
        if self._resolver is None:
            msg = f"{type(self).__name__} is not bound to a run"
            raise RuntimeError(msg)
        return self._resolver

    # ---- Agent contract ----------------------------------------------- #

    @abstractmethod
    def learn(self) -> LearnedMap | None:
        """Explore the park and return a ``[row][col]`` map of tile states."""
        ...

    @abstractmethod
    def run(self, required_ids: Sequence[int]) -> None:
        """Collect exactly the flowers whose ids are in ``required_ids``."""
        ...

    @abstractmethod
    def flower_list(self) -> list[Flower]:
        """Return every flower the butterfly knows about."""
        ...

    @abstractmethod
    def flower_location(self, flower: Flower | int) -> Location | None:
        """Return where the butterfly believes ``flower`` is."""
        ...

    # ---- Actions ------------------------------------------------------ #

    def fly(self, direction: Direction, speed: Speed = Speed.NORMAL) -> None:
        """Fly one tile; raises on collisions."""
        self.resolver.fly(direction, speed)

    def fly_safe(self, direction: Direction, speed: Speed = Speed.NORMAL) -> bool:
        """Fly one tile; a collision leaves the butterfly in place.

        Returns:
            True if the butterfly moved.
        """
        return self.resolver.fly(direction, speed, safe=True)

    def land(self) -> None:
        """Spend a turn on the current tile soaking up light."""
        self.resolver.land()

    def collect(self, flower: Flower | int) -> bool:
        """Collect ``flower`` from the current tile."""
        return self.resolver.collect(flower)

    def refresh_state(self) -> TileState:
        """Pay to read the current tile's state."""
        return self.resolver.refresh_state()

    # ---- Queries ------------------------------------------------------ #

    @property
    def power(self) -> int:
        """Current power."""
        return self.resolver.power.value

    @property
    def location(self) -> Location:
        """Current location."""
        return self.resolver.location

    @property
    def map_height(self) -> int:
        """Rows of the park."""
        return self.resolver.grid.height

    @property
    def map_width(self) -> int:
        """Columns of the park."""
        return self.resolver.grid.width
