"""World — the park: its grid, its flowers and where the butterfly starts.

The World owns the tile grid together with the two flower registries (the
flowers present while learning and the flowers added for the run) and
provides the map-level operations the engine drives: generation or
loading, aroma normalization, reflowering between phases and grading of a
butterfly's learned map.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from meadow.scent.aroma import MAXIMUM_STEPS
from meadow.scent.diffusion import spread_aromas, spread_wind
from meadow.world.flora import Flora
from meadow.world.grid import Grid, Position
from meadow.world.mapfile import load_map
from meadow.world.terrain import TerrainGenerator
from meadow.world.tile import TileKind

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from meadow.simulation.config import MapSettings, SimulationConfig
    from meadow.simulation.rng import Randomer
    from meadow.world.flower import Flower
    from meadow.world.mapfile import MapDescription
    from meadow.world.tile import TileState

logger = logging.getLogger(__name__)

START_PROBES = 100


@dataclass
class World:
    """A park ready for a butterfly.

    Attributes:
        grid: The tiles.
        settings: Light, wind, flower and aroma settings of the park.
        flora: Value source used for new flowers.
        rng: The run's random source.
        learning_flowers: Flowers present from the start.
        running_flowers: Flowers added when the run begins.
        start: Where the butterfly starts.
        max_aroma_steps: How far aromas spread.
    """

    grid: Grid
    settings: MapSettings
    flora: Flora
    rng: Randomer
    learning_flowers: list[Flower] = field(default_factory=list)
    running_flowers: list[Flower] = field(default_factory=list)
    start: Position = field(default_factory=lambda: Position(0, 0))
    max_aroma_steps: int = MAXIMUM_STEPS

    @classmethod
    def generate(
        cls,
        config: SimulationConfig,
        rng: Randomer,
        settings: MapSettings | None = None,
    ) -> World:
        """Grow a random park of the configured size.

        Args:
            config: Run configuration (size, terrain constants).
            rng: The run's random source.
            settings: Per-tile settings; the config's when None.
        """
        settings = settings or config.map
        grid = Grid(height=config.world_height, width=config.world_width)
        flora = Flora(settings, rng)
        expected = settings.flowers.expected_learning if settings.flowers.random else 0
        generator = TerrainGenerator(grid, config.terrain, flora, rng, expected)
        flowers = generator.generate()
        world = cls(
            grid=grid,
            settings=settings,
            flora=flora,
            rng=rng,
            learning_flowers=flowers,
            max_aroma_steps=config.max_aroma_steps,
        )
        world.start = world.random_start()
        world.normalize()
        return world

    @classmethod
    def from_map_file(
        cls,
        path: str | Path,
        config: SimulationConfig,
        rng: Randomer,
    ) -> World:
        """Load a park from a map file.

        A file without tiles yields a generated park using the file's
        settings.
        """
        description = load_map(path, rng)
        if description.grid is None:
            logger.info("Map file %s has no tiles, generating a park", path)
            return cls.generate(config, rng, description.settings)
        return cls.from_description(description, config, rng)

    @classmethod
    def from_description(
        cls,
        description: MapDescription,
        config: SimulationConfig,
        rng: Randomer,
    ) -> World:
        """Build a park from a parsed map description with tiles."""
        if description.grid is None:
            msg = "map description has no tiles"
            raise ValueError(msg)
        world = cls(
            grid=description.grid,
            settings=description.settings,
            flora=description.flora,
            rng=rng,
            learning_flowers=list(description.flowers),
            max_aroma_steps=config.max_aroma_steps,
        )
        start = description.start
        if start is None:
            world.start = world.random_start()
        else:
            tile = world.grid.at(start)
            if tile is not None and not tile.flyable:
                logger.warning("Start %s is not flyable, making it land", start)
                world.grid.set(start, tile.transplant(TileKind.LAND))
            world.start = start
        world.normalize()
        return world

    @property
    def flowers(self) -> list[Flower]:
        """Every flower on the map, learning flowers first."""
        return self.learning_flowers + self.running_flowers

    def flower(self, flower_id: int) -> Flower | None:
        """Return the flower with ``flower_id``, if it is on the map."""
        for flower in self.flowers:
            if flower.flower_id == flower_id:
                return flower
        return None

    def random_start(self) -> Position:
        """Pick a random flyable tile for the butterfly.

        After ``START_PROBES`` misses the last probed tile is turned into
        land and used anyway.
        """
        position = Position(0, 0)
        for _ in range(START_PROBES):
            position = self._random_position()
            tile = self.grid.at(position)
            if tile is not None and tile.flyable:
                return position
        tile = self.grid.at(position)
        if tile is not None:
            logger.warning("No flyable start found, turning %s into land", position)
            self.grid.set(position, tile.transplant(TileKind.LAND))
        return position

    def _random_position(self) -> Position:
        row = self.rng.below(self.grid.height)
        col = self.rng.below(self.grid.width)
        return Position(row, col)

    def normalize(self) -> None:
        """Spread the learning flowers' aromas and blow them with the wind."""
        spread_aromas(self.grid, self.learning_flowers, self.max_aroma_steps)
        spread_wind(self.grid, self.learning_flowers)

    def reflower(self) -> list[Flower]:
        """Plant the run's extra flowers on random flyable tiles.

        Each of ``expected_running`` probes plants a flower when it hits a
        flyable tile.  Nothing is planted when random flowers are off.

        Returns:
            The flowers planted by this call.
        """
        planted: list[Flower] = []
        if not self.settings.flowers.random:
            return planted
        for _ in range(self.settings.flowers.expected_running):
            position = self._random_position()
            tile = self.grid.at(position)
            if tile is None or not tile.flyable:
                continue
            flower = self.flora.flower(tile.state.location)
            tile.state.add_flower(flower)
            planted.append(flower)
        self.running_flowers.extend(planted)
        logger.debug("Reflowered %d flowers", len(planted))
        return planted

    def begin_running(self) -> list[Flower]:
        """Reflower and spread the new flowers' aromas and wind.

        Returns:
            The flowers added for the run.
        """
        planted = self.reflower()
        spread_aromas(self.grid, planted, self.max_aroma_steps)
        spread_wind(self.grid, planted)
        return planted

    def grade(self, learned: Sequence[Sequence[TileState | None]] | None) -> float:
        """Score a learned map against the park, in percent.

        Only the overlap of the two grids is compared.  Tiles the butterfly
        cannot enter always count as correct; every other tile counts when
        its learned state equals the real one.
        """
        if not learned:
            return 0.0
        grid = self.grid
        points = 0
        for row in range(min(grid.height, len(learned))):
            learned_row = learned[row] or ()
            for col in range(min(grid.width, len(learned_row))):
                tile = grid.at(Position(row, col))
                if tile is None:
                    continue
                if not tile.flyable or learned_row[col] == tile.state:
                    points += 1
        return points / (grid.height * grid.width) * 100.0
