"""Tile — a single square of the park.

A tile's *kind* is fixed (land, water, forest or cliff) and decides its
physical constants through the ``TILE_TRAITS`` table.  Everything that
changes during a run lives in the tile's ``TileState``: light, wind, aromas,
flowers, the butterfly sitting on it and the turn it was last entered.
Changing a tile's kind during terrain growth goes through
``Tile.transplant``, which keeps a copy of the state.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from meadow.errors import DirectionFormatError, WindFormatError
from meadow.scent.aroma import Aroma
from meadow.world.direction import Direction

if TYPE_CHECKING:
    from collections.abc import Collection

    from meadow.agents.base import Butterfly
    from meadow.world.flower import Flower
    from meadow.world.grid import Location

# Slow-down / power cost of a tile that can never be entered.
IMPASSABLE = sys.maxsize

NEVER_ENTERED = -1


class TileKind(Enum):
    """The four kinds of terrain, valued by their map-file token."""

    LAND = "#"
    WATER = "~"
    FOREST = "|"
    CLIFF = "^"


@dataclass(frozen=True)
class TileTraits:
    """Physical constants shared by every tile of one kind.

    Attributes:
        flyable: Whether the butterfly may enter the tile.
        slow_down: Slow turns charged for entering.
        power_cost: Power drained for entering.
        glyph: Character used in ASCII renderings.
    """

    flyable: bool
    slow_down: int
    power_cost: int
    glyph: str


TILE_TRAITS: dict[TileKind, TileTraits] = {
    TileKind.LAND: TileTraits(flyable=True, slow_down=0, power_cost=0, glyph=" "),
    TileKind.FOREST: TileTraits(flyable=True, slow_down=1, power_cost=0, glyph="|"),
    TileKind.WATER: TileTraits(
        flyable=False,
        slow_down=IMPASSABLE,
        power_cost=IMPASSABLE,
        glyph="~",
    ),
    TileKind.CLIFF: TileTraits(
        flyable=False,
        slow_down=IMPASSABLE,
        power_cost=IMPASSABLE,
        glyph="^",
    ),
}

_WIND_INTENSITY = re.compile(r"-?\d+")
_WIND_DIRECTION = re.compile(r"[neswNESW]+")


@dataclass(frozen=True)
class Wind:
    """A wind reading: a non-negative intensity blowing in one direction."""

    intensity: int = 0
    direction: Direction = Direction.N

    def __post_init__(self) -> None:
        """Clamp negative intensities to zero."""
        if self.intensity < 0:
            object.__setattr__(self, "intensity", 0)

    @classmethod
    def parse(cls, text: str) -> Wind:
        """Parse ``"30 N"``, ``"N 30"``, ``"30N"`` or ``"N30"``.

        Raises:
            WindFormatError: If either the intensity or the direction is
                missing or invalid.
        """
        intensity = _WIND_INTENSITY.search(text)
        direction = _WIND_DIRECTION.search(text)
        if intensity is None or direction is None:
            msg = f"not a wind: {text!r}"
            raise WindFormatError(msg)
        try:
            heading = Direction.parse(direction.group())
        except DirectionFormatError as exc:
            raise WindFormatError(str(exc)) from exc
        return cls(intensity=max(0, int(intensity.group())), direction=heading)

    def __str__(self) -> str:
        return f"{self.intensity} {self.direction.name}"


@dataclass
class TileState:
    """The dynamic state of a tile.

    Equality compares what an agent can observe about a tile (location,
    light, wind, aromas and flowers); the occupant, the entry turn and the
    kind tag are bookkeeping and do not take part.

    Attributes:
        location: Where the tile sits.
        light: Power gained by a butterfly entering or landing here.
        wind: Wind blowing across the tile.
        aromas: Scent readings, one per flower whose aroma reached here.
        flowers: Flowers planted on the tile.
        occupant: The butterfly on the tile, if any.
        turn_entered: Turn the tile was last entered, -1 if never.
        kind: Kind of the tile owning this state.
    """

    location: Location
    light: int = 0
    wind: Wind = field(default_factory=Wind)
    aromas: list[Aroma] = field(default_factory=list)
    flowers: list[Flower] = field(default_factory=list)
    occupant: Butterfly | None = field(default=None, compare=False, repr=False)
    turn_entered: int = field(default=NEVER_ENTERED, compare=False)
    kind: TileKind | None = field(default=None, compare=False)

    def add_flower(self, flower: Flower) -> None:
        """Plant ``flower`` on this tile."""
        self.flowers.append(flower)

    def add_aroma(self, aroma: Aroma) -> None:
        """Record a scent reading on this tile."""
        self.aromas.append(aroma)

    def shift_aromas(self, flowers: Collection[Flower], delta: float) -> None:
        """Add ``delta`` to every aroma produced by one of ``flowers``.

        The result may go negative; ``zero_aromas`` cleans up afterwards.
        """
        for aroma in self.aromas:
            if aroma.flower in flowers:
                aroma.intensity += delta

    def zero_aromas(self) -> None:
        """Clamp every negative aroma back to zero."""
        for aroma in self.aromas:
            aroma.zero()

    def aroma_of(self, flower_id: int) -> Aroma | None:
        """Return the aroma produced by flower ``flower_id``, if any."""
        for aroma in self.aromas:
            if aroma.flower_id == flower_id:
                return aroma
        return None

    def snapshot(self) -> TileState:
        """Return an independent copy safe to hand to an agent."""
        return TileState(
            location=self.location,
            light=self.light,
            wind=self.wind,
            aromas=[Aroma(a.intensity, a.flower) for a in self.aromas],
            flowers=list(self.flowers),
            occupant=self.occupant,
            turn_entered=self.turn_entered,
            kind=self.kind,
        )


@dataclass
class Tile:
    """A square of terrain and its state.

    Attributes:
        kind: The tile's terrain kind.
        state: The tile's dynamic state.
    """

    kind: TileKind
    state: TileState

    def __post_init__(self) -> None:
        """Tag the state with the owning kind."""
        self.state.kind = self.kind

    @property
    def traits(self) -> TileTraits:
        """Constants for this tile's kind."""
        return TILE_TRAITS[self.kind]

    @property
    def flyable(self) -> bool:
        """Whether the butterfly may enter this tile."""
        return TILE_TRAITS[self.kind].flyable

    @property
    def slow_down(self) -> int:
        """Slow turns charged for entering this tile."""
        return TILE_TRAITS[self.kind].slow_down

    @property
    def power_cost(self) -> int:
        """Power drained for entering this tile."""
        return TILE_TRAITS[self.kind].power_cost

    def transplant(self, kind: TileKind) -> Tile:
        """Return a tile of ``kind`` carrying a copy of this tile's state."""
        return Tile(kind=kind, state=self.state.snapshot())

    def glyph(self) -> str:
        """Return the ASCII picture of this tile."""
        if self.state.occupant is not None:
            return "B"
        if self.state.flowers:
            return "*"
        return TILE_TRAITS[self.kind].glyph
