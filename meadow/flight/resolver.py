"""FlightResolver — applies the butterfly's actions to the park.

Every action the butterfly takes goes through the resolver, which charges
its turn, power and slow-down costs, updates the run statistics, moves the
butterfly between tiles and notifies the observer.  Collisions and power
exhaustion surface as exceptions the butterfly is expected to handle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from meadow.errors import (
    CliffCollisionError,
    ObstacleCollisionError,
    PrematureCollectionError,
    WaterCollisionError,
)
from meadow.flight.power import Power
from meadow.flight.speed import Speed
from meadow.simulation.observer import HeadlessObserver, Observer
from meadow.simulation.stats import MoveEvent, Phase, RunStats
from meadow.world.tile import TileKind

if TYPE_CHECKING:
    from meadow.agents.base import Butterfly
    from meadow.world.direction import Direction
    from meadow.world.flower import Flower
    from meadow.world.grid import Grid, Location, Position
    from meadow.world.tile import Tile, TileState

logger = logging.getLogger(__name__)

REFRESH_STATE_POWER_COST = 5
WRONG_COLLECT_POWER_COST = 50

_COLLISIONS: dict[TileKind, type[ObstacleCollisionError]] = {
    TileKind.CLIFF: CliffCollisionError,
    TileKind.WATER: WaterCollisionError,
}


@dataclass
class FlightResolver:
    """Resolves flights, landings, collections and state refreshes.

    Attributes:
        grid: The park.
        position: Where the butterfly is.
        stats: Run counters updated by every action.
        power: The butterfly's power.
        observer: Receives a notification after every action.
        occupant: The butterfly recorded on its current tile.
    """

    grid: Grid
    position: Position
    stats: RunStats = field(default_factory=RunStats)
    power: Power = field(default_factory=Power)
    observer: Observer = field(default_factory=HeadlessObserver)
    occupant: Butterfly | None = None

    def __post_init__(self) -> None:
        """Put the butterfly on its starting tile."""
        tile = self.tile
        tile.state.occupant = self.occupant
        if tile.state.turn_entered < 0:
            tile.state.turn_entered = 0
            self.stats.explored_tiles += 1

    def seat(self, occupant: Butterfly) -> None:
        """Record ``occupant`` as the butterfly on the current tile."""
        self.occupant = occupant
        self.tile.state.occupant = occupant

    @property
    def tile(self) -> Tile:
        """The tile the butterfly is on."""
        tile = self.grid.at(self.position)
        if tile is None:
            msg = f"no tile at {self.position}"
            raise LookupError(msg)
        return tile

    @property
    def location(self) -> Location:
        """The butterfly's location."""
        return self.grid.location_of(self.position)

    def fly(
        self,
        direction: Direction,
        speed: Speed = Speed.NORMAL,
        *,
        safe: bool = False,
    ) -> bool:
        """Fly one tile in ``direction``.

        The turn is charged first.  Flying into water or a cliff counts a
        collision and charges its cost, then either leaves the butterfly in
        place (``safe``) or raises.

        Returns:
            True if the butterfly moved.

        Raises:
            CliffCollisionError: On an unsafe flight into a cliff.
            WaterCollisionError: On an unsafe flight into water.
            PowerExhaustedError: If the butterfly cannot pay for the flight;
                nothing beyond the turn (and any collision) is charged.
        """
        stats = self.stats
        stats.turn += 1
        source = self.position
        destination = self.grid.step(source, direction)
        if destination is None:
            self._notify(0, None, source)
            return False

        tile = self.grid.at(destination)
        if tile is None:
            msg = f"no tile at {destination}"
            raise LookupError(msg)

        collision = _COLLISIONS.get(tile.kind)
        if collision is not None:
            if collision is CliffCollisionError:
                stats.cliff_collisions += 1
            else:
                stats.water_collisions += 1
            stats.slow_turns += collision.slow_down
            self._drain(collision.power_cost)
            if safe:
                self._notify(0, None, source)
                return False
            where = tile.state.location
            msg = f"flew {direction.name} into {tile.kind.name.lower()} at {where}"
            raise collision(msg)

        self._drain(tile.power_cost + speed.power_cost)
        slow_down = tile.slow_down + speed.slow_down
        stats.slow_turns += slow_down
        self._gain(tile.state.light)

        if tile.state.turn_entered < 0:
            stats.explored_tiles += 1
        self.tile.state.occupant = None
        tile.state.occupant = self.occupant
        tile.state.turn_entered = stats.turn
        self.position = destination
        self._notify(slow_down, direction, source)
        return True

    def land(self) -> None:
        """Spend a turn on the current tile soaking up its light."""
        self.stats.turn += 1
        self._gain(self.tile.state.light)
        self._notify(0, None, self.position)

    def collect(self, flower: Flower | int) -> bool:
        """Try to collect ``flower`` from the current tile.

        Returns:
            True if the flower was on the tile.

        Raises:
            PrematureCollectionError: During the learning phase.
            PowerExhaustedError: If the flower is not here and the butterfly
                cannot pay the penalty.
        """
        if self.stats.phase is Phase.LEARNING:
            msg = "flowers cannot be collected while learning"
            raise PrematureCollectionError(msg)
        flower_id = flower if isinstance(flower, int) else flower.flower_id
        present = any(f.flower_id == flower_id for f in self.tile.state.flowers)
        try:
            if present:
                self.stats.found_flowers.add(flower_id)
            else:
                logger.debug("Flower %d is not at %s", flower_id, self.location)
                self._drain(WRONG_COLLECT_POWER_COST)
        finally:
            self.observer.on_update(self.stats)
        return present

    def refresh_state(self) -> TileState:
        """Pay for and return a fresh snapshot of the current tile."""
        self._drain(REFRESH_STATE_POWER_COST)
        return self.tile.state.snapshot()

    def _drain(self, amount: int) -> None:
        self.power.drain(amount)
        self.stats.record_drain(amount)

    def _gain(self, amount: int) -> None:
        self.power.gain(amount)
        self.stats.record_gain(amount)

    def _notify(
        self,
        slow_down: int,
        direction: Direction | None,
        source: Position,
    ) -> None:
        event = MoveEvent(
            turn=self.stats.turn,
            slow_down=slow_down,
            direction=direction,
            source=self.grid.location_of(source),
            destination=self.location,
            power=self.power.value,
        )
        self.observer.on_move(event)
