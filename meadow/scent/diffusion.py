"""Aroma spreading and wind advection over the park grid.

``spread_aroma`` radiates one flower's scent outward with a breadth-first
search over flyable tiles, so the intensity a tile receives depends on the
shortest flyable path to the flower.  ``spread_wind`` then pushes scent
along each tile's wind.  Both only touch the aromas of the flowers they are
given, so they can be re-run for flowers added later without disturbing
the rest of the field.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

import numpy as np

from meadow.scent.aroma import MAXIMUM_STEPS, Aroma, intensity_at, min_intensity
from meadow.world.grid import is_flyable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from meadow.world.flower import Flower
    from meadow.world.grid import Grid

logger = logging.getLogger(__name__)

_UNVISITED = -1


def aroma_steps(
    grid: Grid,
    flower: Flower,
    max_steps: int = MAXIMUM_STEPS,
) -> np.ndarray:
    """Return the flyable BFS distance of every tile from ``flower``.

    Args:
        grid: The park grid.
        flower: Source of the search.
        max_steps: Tiles further than this are left unvisited.

    Returns:
        An integer array shaped like the grid; unreached tiles hold -1.
    """
    steps = np.full((grid.height, grid.width), _UNVISITED, dtype=np.int64)
    origin = grid.position_of(flower.location)
    steps[origin.row, origin.col] = 0
    frontier = deque([origin])
    while frontier:
        current = frontier.popleft()
        distance = int(steps[current.row, current.col])
        if distance >= max_steps:
            continue
        for neighbour in grid.neighbours(current, is_flyable):
            if steps[neighbour.row, neighbour.col] == _UNVISITED:
                steps[neighbour.row, neighbour.col] = distance + 1
                frontier.append(neighbour)
    return steps


def spread_aroma(grid: Grid, flower: Flower, max_steps: int = MAXIMUM_STEPS) -> int:
    """Give every tile reached from ``flower`` a fresh aroma.

    Aromas are added in BFS order; readings below the detectability
    threshold are not materialized.

    Returns:
        The number of aromas added.
    """
    steps = aroma_steps(grid, flower, max_steps)
    threshold = min_intensity(flower.aroma_intensity, max_steps)
    origin = grid.position_of(flower.location)
    added = 0
    frontier = deque([origin])
    queued = {origin}
    while frontier:
        current = frontier.popleft()
        distance = int(steps[current.row, current.col])
        intensity = intensity_at(flower.aroma_intensity, distance)
        tile = grid.at(current)
        if tile is not None and intensity >= threshold:
            tile.state.add_aroma(Aroma(intensity, flower))
            added += 1
        for neighbour in grid.neighbours(current, is_flyable):
            if neighbour in queued:
                continue
            if steps[neighbour.row, neighbour.col] == distance + 1:
                queued.add(neighbour)
                frontier.append(neighbour)
    return added


def spread_aromas(
    grid: Grid,
    flowers: Iterable[Flower],
    max_steps: int = MAXIMUM_STEPS,
) -> None:
    """Spread the aroma of each flower in ``flowers``."""
    count = 0
    for flower in flowers:
        spread_aroma(grid, flower, max_steps)
        count += 1
    logger.debug("Spread aromas of %d flowers", count)


def spread_wind(grid: Grid, flowers: Iterable[Flower]) -> None:
    """Carry the aromas of ``flowers`` along each tile's wind.

    Tiles are visited once in row-major order.  A tile with wind of
    intensity ``i`` loses ``i`` from each of its aromas of ``flowers`` and
    the tile downwind gains ``i`` on its aromas of the same flowers.  The
    transfer is sequential, so a tile's readings may already include wind
    from tiles visited before it.  Negative readings are clamped to zero
    once every tile has been visited.
    """
    subset = frozenset(flowers)
    if not subset:
        return
    for position in grid.positions():
        source = grid.at(position)
        if source is None or source.state.wind.intensity == 0:
            continue
        wind = source.state.wind
        target_position = grid.step(position, wind.direction)
        if target_position is None:
            continue
        target = grid.at(target_position)
        source.state.shift_aromas(subset, -wind.intensity)
        if target is not None:
            target.state.shift_aromas(subset, wind.intensity)
    for position in grid.positions():
        tile = grid.at(position)
        if tile is not None:
            tile.state.zero_aromas()
    logger.debug("Spread wind for %d flowers", len(subset))
