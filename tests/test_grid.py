"""Tests for meadow.world.grid and meadow.world.direction."""

import pytest

from conftest import GridFactory, set_kind
from meadow.errors import DirectionFormatError
from meadow.world.direction import CROSS, EAST_WEST, Direction
from meadow.world.grid import Grid, Location, Position, is_flyable, is_unset
from meadow.world.tile import TileKind


class TestDirection:
    """Tests for compass headings."""

    def test_offsets(self) -> None:
        assert (Direction.N.d_row, Direction.N.d_col) == (-1, 0)
        assert (Direction.SE.d_row, Direction.SE.d_col) == (1, 1)

    def test_opposite(self) -> None:
        assert Direction.NE.opposite is Direction.SW
        assert Direction.W.opposite is Direction.E
        for direction in Direction:
            assert direction.opposite.opposite is direction

    def test_parse_is_lenient(self) -> None:
        assert Direction.parse("n") is Direction.N
        assert Direction.parse(" sw ") is Direction.SW
        assert Direction.parse("Ne") is Direction.NE

    def test_parse_rejects_garbage(self) -> None:
        with pytest.raises(DirectionFormatError):
            Direction.parse("up")
        with pytest.raises(ValueError):
            Direction.parse("")


class TestAddressing:
    """Tests for positions, locations and wrapping."""

    def test_location_round_trip(self, make_grid: GridFactory) -> None:
        grid = make_grid(3, 5)
        position = Position(2, 4)
        location = grid.location_of(position)
        assert location == Location(x=4, y=2)
        assert grid.position_of(location) == position

    def test_position_of_out_of_bounds(self, make_grid: GridFactory) -> None:
        grid = make_grid(3, 5)
        with pytest.raises(IndexError):
            grid.position_of(Location(5, 0))
        with pytest.raises(IndexError):
            grid.position_of(Location(0, -1))

    def test_wrap(self, make_grid: GridFactory) -> None:
        grid = make_grid(3, 4)
        assert grid.wrap(-1, -1) == Position(2, 3)
        assert grid.wrap(3, 4) == Position(0, 0)

    def test_step_wraps(self, make_grid: GridFactory) -> None:
        grid = make_grid(3, 3)
        assert grid.step(Position(0, 0), Direction.NW) == Position(2, 2)

    def test_step_onto_itself_is_none(self, make_grid: GridFactory) -> None:
        grid = make_grid(1, 1)
        for direction in Direction:
            assert grid.step(Position(0, 0), direction) is None

    def test_step_on_single_row(self, make_grid: GridFactory) -> None:
        grid = make_grid(1, 3)
        assert grid.step(Position(0, 1), Direction.N) is None
        assert grid.step(Position(0, 1), Direction.NE) == Position(0, 2)

    def test_empty_grid_rejected(self) -> None:
        with pytest.raises(ValueError):
            Grid(height=0, width=3)

    def test_location_str(self) -> None:
        assert str(Location(3, 7)) == "(3, 7)"


class TestNeighbours:
    """Tests for the neighbour query."""

    def test_all_eight(self, make_grid: GridFactory) -> None:
        grid = make_grid(3, 3)
        assert len(grid.neighbours(Position(1, 1))) == 8

    def test_distinct_on_tiny_torus(self, make_grid: GridFactory) -> None:
        grid = make_grid(2, 2)
        neighbours = grid.neighbours(Position(0, 0))
        assert sorted(neighbours) == [Position(0, 1), Position(1, 0), Position(1, 1)]

    def test_single_tile_has_none(self, make_grid: GridFactory) -> None:
        grid = make_grid(1, 1)
        assert grid.neighbours(Position(0, 0)) == []

    def test_direction_filter(self, make_grid: GridFactory) -> None:
        grid = make_grid(5, 5)
        assert len(grid.neighbours(Position(2, 2), directions=CROSS)) == 4
        assert grid.neighbours(Position(2, 2), directions=EAST_WEST) == [
            Position(2, 3),
            Position(2, 1),
        ]

    def test_tile_filter(self, make_grid: GridFactory) -> None:
        grid = make_grid(3, 3)
        set_kind(grid, Position(0, 1), TileKind.WATER)
        set_kind(grid, Position(1, 2), TileKind.CLIFF)
        flyable = grid.neighbours(Position(1, 1), is_flyable)
        assert len(flyable) == 6
        assert Position(0, 1) not in flyable

    def test_unset_filter(self) -> None:
        grid = Grid(height=3, width=3)
        assert len(grid.neighbours(Position(1, 1), is_unset)) == 8


class TestGridContents:
    """Tests for filling, counting and rendering."""

    def test_fill_unset(self) -> None:
        grid = Grid(height=2, width=3)
        assert grid.fill_unset(TileKind.WATER) == 6
        assert grid.fill_unset(TileKind.LAND) == 0
        assert grid.flyable_count() == 0

    def test_filled_tiles_know_their_location(self, make_grid: GridFactory) -> None:
        grid = make_grid(2, 3)
        tile = grid.at(Position(1, 2))
        assert tile is not None
        assert tile.state.location == Location(2, 1)

    def test_positions_row_major(self) -> None:
        grid = Grid(height=2, width=2)
        assert list(grid.positions()) == [
            Position(0, 0),
            Position(0, 1),
            Position(1, 0),
            Position(1, 1),
        ]

    def test_render(self) -> None:
        grid = Grid(height=2, width=2)
        grid.fill_unset(TileKind.LAND)
        set_kind(grid, Position(0, 1), TileKind.WATER)
        set_kind(grid, Position(1, 0), TileKind.CLIFF)
        grid.set(Position(1, 1), None)
        assert grid.render() == " ~\n^?"
