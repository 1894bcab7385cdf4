"""Terrain generation — grow a connected park on an empty grid.

Generation runs in four stages, all driven by one ``Randomer``:

1. **Frontier growth.**  Starting from a land tile in the middle of the
   grid, tiles are grown outward by picking a *frontiersman* from one of
   two frontiers: the *free* frontier (tiles with many unassigned cross
   neighbours) or the *cramped* one.  Each new tile is land, forest or
   cliff; only flyable tiles join a frontier, so the flyable region stays
   connected through cross adjacency.
2. **Water.**  Every tile still unassigned becomes water.
3. **Forest growth.**  Seeded forests spread breadth-first over adjacent
   land up to a global cap.  Forests stay flyable, so this stage cannot
   disconnect anything.
4. **Cliff growth.**  Each seeded cliff extends into a run of cliffs in one
   compound direction.  A tile only turns into cliff when doing so keeps
   its flyable neighbours connected to each other, which keeps the whole
   flyable region connected.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from meadow.world.direction import COMPOUND_DIRECTIONS, CROSS, EAST_WEST, NORTH_SOUTH
from meadow.world.grid import Position, is_flyable, is_land, is_obstacle, is_unset
from meadow.world.tile import Tile, TileKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from meadow.simulation.config import TerrainSettings
    from meadow.simulation.rng import Randomer
    from meadow.world.direction import Direction
    from meadow.world.flora import Flora
    from meadow.world.flower import Flower
    from meadow.world.grid import Grid

logger = logging.getLogger(__name__)

# Offsets of the eight tiles around a centre tile.
_RING = tuple((dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0))


def flyable_regions(grid: Grid) -> int:
    """Count the 8-connected components of flyable tiles."""
    seen: set[Position] = set()
    regions = 0
    for start in grid.positions():
        if start in seen or not is_flyable(grid.at(start)):
            continue
        regions += 1
        seen.add(start)
        stack = [start]
        while stack:
            current = stack.pop()
            for neighbour in grid.neighbours(current, is_flyable):
                if neighbour not in seen:
                    seen.add(neighbour)
                    stack.append(neighbour)
    return regions


@dataclass
class TerrainGenerator:
    """Grows terrain, forests, cliffs and learning flowers on a grid.

    Attributes:
        grid: The grid to fill; expected to start fully unassigned.
        settings: Growth constants.
        flora: Source of tile states and flowers.
        rng: The run's random source.
        expected_flowers: Expected number of flowers planted while growing.
        flowers: Flowers planted so far, in planting order.
        forests: Positions of forest tiles seeded during frontier growth.
        cliffs: Positions of cliff tiles seeded during frontier growth.
    """

    grid: Grid
    settings: TerrainSettings
    flora: Flora
    rng: Randomer
    expected_flowers: int
    flowers: list[Flower] = field(default_factory=list)
    forests: list[Position] = field(default_factory=list)
    cliffs: list[Position] = field(default_factory=list)

    @property
    def max_land(self) -> int:
        """Tiles assigned by frontier growth before it stops."""
        return int(self.grid.height * self.grid.width * self.settings.land_fraction)

    @property
    def max_forests(self) -> int:
        """Cap on the number of forest tiles."""
        return int(self.max_land * self.settings.forest_fraction)

    def cliff_length_range(self) -> tuple[int, int]:
        """Return the inclusive ``(min, max)`` length of a cliff run."""
        seed = self.settings.cliff_seed / 1000.0
        average = int(self.settings.cliff_fraction / seed) if seed > 0 else 0
        delta = average * self.settings.cliff_length_delta
        return int(average - delta), int(average + delta)

    def generate(self) -> list[Flower]:
        """Run all four stages.

        Returns:
            The flowers planted during growth, in planting order.
        """
        self.grow_frontier()
        filled = self.grid.fill_unset(TileKind.WATER)
        logger.debug("Filled %d unassigned tiles with water", filled)
        self.grow_forests()
        self.grow_cliffs()
        logger.debug(
            "Terrain done: %d flyable tiles, %d flowers",
            self.grid.flyable_count(),
            len(self.flowers),
        )
        return self.flowers

    # ------------------------------------------------------------------
    # Frontier growth
    # ------------------------------------------------------------------

    def grow_frontier(self) -> None:
        """Grow land, forest and cliff tiles out from the grid centre."""
        grid = self.grid
        settings = self.settings
        max_land = self.max_land
        horizontal_per_mille = int(1000 / (grid.height / grid.width + 1))
        flower_per_mille = (
            int(1000 * self.expected_flowers / max_land) if max_land > 0 else 0
        )
        forest_threshold = settings.cliff_seed + settings.forest_seed

        root = Position(grid.height // 2, grid.width // 2)
        root_state = self.flora.tile_state(grid.location_of(root))
        grid.set(root, Tile(TileKind.LAND, root_state))
        free: list[Position] = [root]
        cramped: list[Position] = []
        assigned = 1

        while (free or cramped) and assigned < max_land:
            if not cramped or (free and self.rng.chance(settings.free_probability)):
                frontier = free
            else:
                frontier = cramped
            frontiersman = self.rng.choice(frontier)

            horizontal = grid.neighbours(frontiersman, is_unset, EAST_WEST)
            vertical = grid.neighbours(frontiersman, is_unset, NORTH_SOUTH)
            # About to fill the last free side, or nothing left to fill.
            if len(horizontal) + len(vertical) <= 1:
                frontier.remove(frontiersman)
                if not horizontal and not vertical:
                    continue

            if not vertical or (
                horizontal and self.rng.chance_per_mille(horizontal_per_mille)
            ):
                target = self.rng.choice(horizontal)
            else:
                target = self.rng.choice(vertical)

            draw = self.rng.next_int(1, 1000)
            if draw <= settings.cliff_seed:
                kind = TileKind.CLIFF
                self.cliffs.append(target)
            elif draw <= forest_threshold:
                kind = TileKind.FOREST
                self.forests.append(target)
            else:
                kind = TileKind.LAND
            tile = Tile(kind, self.flora.tile_state(grid.location_of(target)))
            grid.set(target, tile)

            if tile.flyable:
                if self.rng.chance_per_mille(flower_per_mille):
                    flower = self.flora.flower(tile.state.location)
                    tile.state.add_flower(flower)
                    self.flowers.append(flower)
                open_sides = len(grid.neighbours(target, is_unset, CROSS))
                if open_sides >= settings.null_neighbour_threshold:
                    free.append(target)
                else:
                    cramped.append(target)
            assigned += 1

        logger.debug(
            "Frontier growth assigned %d tiles (%d forest seeds, %d cliff seeds)",
            assigned,
            len(self.forests),
            len(self.cliffs),
        )

    # ------------------------------------------------------------------
    # Forests
    # ------------------------------------------------------------------

    def grow_forests(self) -> int:
        """Spread the seeded forests over adjacent land.

        Returns:
            The number of forest tiles after growth.
        """
        cap = self.max_forests
        count = len(self.forests)
        queue = deque(self.forests)
        while queue and count < cap:
            seed = queue.popleft()
            for neighbour in self.grid.neighbours(seed, is_land):
                if count >= cap:
                    break
                if self.rng.chance(self.settings.forest_grow_probability):
                    self._convert(neighbour, TileKind.FOREST)
                    queue.append(neighbour)
                    count += 1
        logger.debug("Forest growth reached %d of %d forest tiles", count, cap)
        return count

    # ------------------------------------------------------------------
    # Cliffs
    # ------------------------------------------------------------------

    def grow_cliffs(self) -> None:
        """Extend every seeded cliff into a run of cliffs."""
        low, high = self.cliff_length_range()
        for seed in self.cliffs:
            length = self.rng.next_int(low, high) if high >= low else 0
            directions = self.rng.choice(COMPOUND_DIRECTIONS)
            self.grow_cliff(seed, length, directions)

    def grow_cliff(
        self,
        source: Position,
        length: int,
        directions: Iterable[Direction],
    ) -> int:
        """Grow up to ``length`` cliffs from ``source`` along ``directions``.

        Returns:
            How many tiles turned into cliff.
        """
        grown = 0
        candidates = self.cliff_candidates(source, directions)
        while candidates and grown < length:
            source = self.rng.choice(candidates)
            self._convert(source, TileKind.CLIFF)
            grown += 1
            candidates = self.cliff_candidates(source, directions)
        return grown

    def cliff_candidates(
        self,
        source: Position,
        directions: Iterable[Direction],
    ) -> list[Position]:
        """Return neighbours of ``source`` that may safely become cliff.

        A candidate is a flowerless flyable tile whose only obstacle
        neighbour not shared with ``source`` is ``source`` itself, and whose
        flyable neighbours remain connected around it once it is blocked.
        """
        grid = self.grid
        source_obstacles = set(grid.neighbours(source, is_obstacle))

        def is_candidate(tile: Tile | None) -> bool:
            if tile is None or not tile.flyable or tile.state.flowers:
                return False
            position = grid.position_of(tile.state.location)
            extra = set(grid.neighbours(position, is_obstacle)) - source_obstacles
            extra.discard(source)
            return not extra and self._ring_connected(position)

        return grid.neighbours(source, is_candidate, directions)

    def _ring_connected(self, centre: Position) -> bool:
        """Whether the flyable tiles around ``centre`` connect without it."""
        grid = self.grid
        open_offsets = [
            (dr, dc)
            for dr, dc in _RING
            if grid.wrap(centre.row + dr, centre.col + dc) != centre
            and is_flyable(grid.at(grid.wrap(centre.row + dr, centre.col + dc)))
        ]
        if not open_offsets:
            return False
        if len(open_offsets) == 1:
            return True
        reached = {open_offsets[0]}
        stack = [open_offsets[0]]
        while stack:
            dr, dc = stack.pop()
            for other in open_offsets:
                if other in reached:
                    continue
                if max(abs(other[0] - dr), abs(other[1] - dc)) <= 1:
                    reached.add(other)
                    stack.append(other)
        return len(reached) == len(open_offsets)

    def _convert(self, position: Position, kind: TileKind) -> None:
        tile = self.grid.at(position)
        if tile is not None:
            self.grid.set(position, tile.transplant(kind))
