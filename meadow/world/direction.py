"""Direction — the eight compass headings of the grid.

Rows grow southward and columns grow eastward, so north is ``(-1, 0)``.
The named groups below are the direction filters used by terrain growth.
"""

from __future__ import annotations

from enum import Enum

from meadow.errors import DirectionFormatError


class Direction(Enum):
    """A compass heading with its ``(d_row, d_col)`` offset."""

    N = (-1, 0)
    NE = (-1, 1)
    E = (0, 1)
    SE = (1, 1)
    S = (1, 0)
    SW = (1, -1)
    W = (0, -1)
    NW = (-1, -1)

    @property
    def d_row(self) -> int:
        """Row offset of one step in this direction."""
        return self.value[0]

    @property
    def d_col(self) -> int:
        """Column offset of one step in this direction."""
        return self.value[1]

    @property
    def opposite(self) -> Direction:
        """The direction pointing back the way this one came."""
        return Direction((-self.d_row, -self.d_col))

    @classmethod
    def parse(cls, text: str) -> Direction:
        """Parse ``"n"``, ``"NE"``, ``" sw "`` and friends.

        Raises:
            DirectionFormatError: If ``text`` names no direction.
        """
        try:
            return cls[text.strip().upper()]
        except KeyError:
            msg = f"not a direction: {text!r}"
            raise DirectionFormatError(msg) from None


CROSS = frozenset({Direction.N, Direction.E, Direction.S, Direction.W})
EAST_WEST = frozenset({Direction.E, Direction.W})
NORTH_SOUTH = frozenset({Direction.N, Direction.S})
CORNERS = frozenset({Direction.NE, Direction.SE, Direction.SW, Direction.NW})

# Compound directions: each spans the five headings of a half-plane.
UP = frozenset({Direction.W, Direction.NW, Direction.N, Direction.NE, Direction.E})
RIGHT = frozenset({Direction.N, Direction.NE, Direction.E, Direction.SE, Direction.S})
DOWN = frozenset({Direction.W, Direction.SW, Direction.S, Direction.SE, Direction.E})
LEFT = frozenset({Direction.N, Direction.NW, Direction.W, Direction.SW, Direction.S})

COMPOUND_DIRECTIONS = (UP, RIGHT, DOWN, LEFT)
