"""Grid — toroidal tile storage and wrap-aware addressing.

The grid owns ``tiles[row][col]``; a ``None`` entry marks a tile not yet
assigned during terrain generation.  Both axes wrap, so every step has a
destination.  Neighbour queries go through a single ``neighbours`` method
filtered by plain tile predicates and direction groups.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from meadow.world.direction import Direction
from meadow.world.tile import Tile, TileKind, TileState

TileFilter = Callable[[Tile | None], bool]


@dataclass(frozen=True, order=True)
class Position:
    """Internal grid address ``(row, col)``."""

    row: int
    col: int


@dataclass(frozen=True, order=True)
class Location:
    """Agent-visible Cartesian address: ``x`` is the column, ``y`` the row."""

    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


def is_unset(tile: Tile | None) -> bool:
    """True for a tile not yet assigned."""
    return tile is None


def is_flyable(tile: Tile | None) -> bool:
    """True for an assigned tile the butterfly may enter."""
    return tile is not None and tile.flyable


def is_obstacle(tile: Tile | None) -> bool:
    """True for an assigned tile the butterfly collides with."""
    return tile is not None and not tile.flyable


def is_land(tile: Tile | None) -> bool:
    """True for a plain land tile."""
    return tile is not None and tile.kind is TileKind.LAND


@dataclass
class Grid:
    """A ``height x width`` torus of tiles.

    Attributes:
        height: Number of rows.
        width: Number of columns.
        tiles: 2D list indexed as ``tiles[row][col]``.
    """

    height: int
    width: int
    tiles: list[list[Tile | None]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Start with every tile unassigned."""
        if self.height < 1 or self.width < 1:
            msg = f"grid must be at least 1x1, got {self.height}x{self.width}"
            raise ValueError(msg)
        self.tiles = [[None] * self.width for _ in range(self.height)]

    def wrap(self, row: int, col: int) -> Position:
        """Return the in-range position for any ``(row, col)``."""
        return Position(row % self.height, col % self.width)

    def step(self, position: Position, direction: Direction) -> Position | None:
        """Return the position one step from ``position``.

        Returns None when the wrapped step lands back on ``position``, which
        only happens on a grid of size 1 along the stepping axes.
        """
        target = self.wrap(
            position.row + direction.d_row,
            position.col + direction.d_col,
        )
        if target == position:
            return None
        return target

    def at(self, position: Position) -> Tile | None:
        """Return the tile at ``position``."""
        return self.tiles[position.row][position.col]

    def set(self, position: Position, tile: Tile | None) -> None:
        """Place ``tile`` at ``position``."""
        self.tiles[position.row][position.col] = tile

    def positions(self) -> Iterator[Position]:
        """Yield every position in row-major order."""
        for row in range(self.height):
            for col in range(self.width):
                yield Position(row, col)

    def neighbours(
        self,
        position: Position,
        tile_filter: TileFilter | None = None,
        directions: Iterable[Direction] | None = None,
    ) -> list[Position]:
        """Return the distinct neighbours of ``position``.

        Args:
            position: Centre of the query.
            tile_filter: Predicate a neighbour's tile must satisfy.
            directions: Headings to consider; all eight when None.

        Returns:
            Matching neighbour positions in compass order.
        """
        allowed = Direction if directions is None else frozenset(directions)
        result: list[Position] = []
        for direction in Direction:
            if direction not in allowed:
                continue
            target = self.step(position, direction)
            if target is None or target in result:
                continue
            if tile_filter is not None and not tile_filter(self.at(target)):
                continue
            result.append(target)
        return result

    def contains(self, location: Location) -> bool:
        """Whether ``location`` addresses a tile of this grid."""
        return 0 <= location.x < self.width and 0 <= location.y < self.height

    def position_of(self, location: Location) -> Position:
        """Convert an agent location to a grid position.

        Raises:
            IndexError: If ``location`` is outside the grid.
        """
        if not self.contains(location):
            msg = f"{location} out of bounds for {self.height}x{self.width}"
            raise IndexError(msg)
        return Position(location.y, location.x)

    def location_of(self, position: Position) -> Location:
        """Convert a grid position to an agent location."""
        return Location(position.col, position.row)

    def flyable_count(self) -> int:
        """Number of tiles the butterfly may enter."""
        return sum(1 for row in self.tiles for tile in row if is_flyable(tile))

    def fill_unset(self, kind: TileKind) -> int:
        """Turn every unassigned tile into a bare tile of ``kind``.

        Returns:
            How many tiles were filled.
        """
        filled = 0
        for position in self.positions():
            if self.at(position) is None:
                state = TileState(location=self.location_of(position))
                self.set(position, Tile(kind=kind, state=state))
                filled += 1
        return filled

    def render(self) -> str:
        """Return an ASCII picture of the grid, one line per row."""
        return "\n".join(
            "".join("?" if tile is None else tile.glyph() for tile in row)
            for row in self.tiles
        )
