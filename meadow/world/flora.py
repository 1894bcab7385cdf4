"""Flora — per-tile values drawn from a park's map settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from meadow.errors import WindFormatError
from meadow.world.direction import Direction
from meadow.world.flower import FLOWER_NUMBERS, Flower
from meadow.world.tile import TileState, Wind

if TYPE_CHECKING:
    from meadow.simulation.config import MapSettings
    from meadow.simulation.rng import Randomer
    from meadow.world.grid import Location

logger = logging.getLogger(__name__)


class Flora:
    """Hands out light, wind, aroma strengths and flowers for new tiles.

    Each value is either the configured default or, when the setting's
    ``random`` flag is on, a draw from ``[min, max]`` made through the run's
    single ``Randomer``.
    """

    def __init__(self, settings: MapSettings, rng: Randomer) -> None:
        self.settings = settings
        self.rng = rng
        try:
            self.default_wind = Wind.parse(settings.wind.default)
        except WindFormatError:
            logger.warning("Invalid default wind %r, using calm", settings.wind.default)
            self.default_wind = Wind()

    def light(self) -> int:
        """Return a tile's light."""
        light = self.settings.light
        if not light.random:
            return light.default
        return self.rng.next_int(min(light.min, light.max), max(light.min, light.max))

    def wind(self) -> Wind:
        """Return a tile's wind."""
        wind = self.settings.wind
        if not wind.random:
            return self.default_wind
        intensity = self.rng.next_int(min(wind.min, wind.max), max(wind.min, wind.max))
        return Wind(intensity=intensity, direction=self.rng.choice(list(Direction)))

    def aroma_intensity(self) -> float:
        """Return the intrinsic strength of a new flower."""
        aroma = self.settings.aroma
        if not aroma.random:
            return aroma.default
        low, high = min(aroma.min, aroma.max), max(aroma.min, aroma.max)
        return self.rng.next_double(low, high)

    def flower(self, location: Location) -> Flower:
        """Plant a randomly named flower at ``location``."""
        number = self.rng.choice(FLOWER_NUMBERS)
        return Flower.plant(f"flower_{number}", location, self.aroma_intensity())

    def tile_state(self, location: Location) -> TileState:
        """Return a flowerless tile state for ``location``."""
        return TileState(location=location, light=self.light(), wind=self.wind())
