"""Shared fixtures for the Meadow test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from meadow.flight.resolver import FlightResolver
from meadow.simulation.config import FlowerSettings, MapSettings, SimulationConfig
from meadow.simulation.observer import RecordingObserver
from meadow.simulation.rng import Randomer
from meadow.world.grid import Grid, Position
from meadow.world.tile import TileKind

POND_MAP = Path(__file__).resolve().parent.parent / "maps" / "pond.yaml"

GridFactory = Callable[..., Grid]


def build_grid(height: int, width: int, kind: TileKind = TileKind.LAND) -> Grid:
    """A grid filled with bare tiles of one kind."""
    grid = Grid(height=height, width=width)
    grid.fill_unset(kind)
    return grid


def set_kind(grid: Grid, position: Position, kind: TileKind) -> None:
    """Change the kind of the tile at ``position``, keeping its state."""
    tile = grid.at(position)
    assert tile is not None
    grid.set(position, tile.transplant(kind))


@pytest.fixture
def rng() -> Randomer:
    """A deterministic random source for reproducible tests."""
    return Randomer(seed=42)


@pytest.fixture
def make_grid() -> GridFactory:
    """Factory for uniform grids."""
    return build_grid


@pytest.fixture
def land_grid() -> Grid:
    """A 3x3 all-land torus."""
    return build_grid(3, 3)


@pytest.fixture
def observer() -> RecordingObserver:
    """An observer that keeps every notification."""
    return RecordingObserver()


@pytest.fixture
def resolver(land_grid: Grid, observer: RecordingObserver) -> FlightResolver:
    """A resolver with the butterfly in the middle of ``land_grid``."""
    return FlightResolver(grid=land_grid, position=Position(1, 1), observer=observer)


@pytest.fixture
def small_config() -> SimulationConfig:
    """A 16x16 park with a handful of flowers and unlimited power."""
    return SimulationConfig(
        seed=7,
        world_width=16,
        world_height=16,
        infinite_energy=True,
        map=MapSettings(
            flowers=FlowerSettings(
                random=True,
                expected_learning=6,
                expected_running=3,
            ),
        ),
    )


@pytest.fixture
def pond_map() -> Path:
    """Path to the bundled sample map."""
    return POND_MAP
