"""Errors — every failure the simulation can signal.

Collision and exhaustion errors are ordinary per-move signals: an agent is
expected to catch them and react (land, turn around).  Premature collection
is a programming error in the agent and is allowed to end the run.  The
format errors are raised by the small parsers in ``meadow.world``; the map
parser catches them and falls back to defaults.
"""

from __future__ import annotations

from typing import ClassVar


class MeadowError(Exception):
    """Base class for all simulation errors."""


class ObstacleCollisionError(MeadowError):
    """The butterfly flew into a tile it cannot enter.

    Attributes:
        power_cost: Power drained by the collision.
        slow_down: Slow turns charged by the collision.
    """

    power_cost: ClassVar[int] = 0
    slow_down: ClassVar[int] = 0


class CliffCollisionError(ObstacleCollisionError):
    """The butterfly flew into a cliff."""

    power_cost: ClassVar[int] = 5
    slow_down: ClassVar[int] = 0


class WaterCollisionError(ObstacleCollisionError):
    """The butterfly tried to fly over water."""

    power_cost: ClassVar[int] = 10
    slow_down: ClassVar[int] = 0


class PowerExhaustedError(MeadowError):
    """A power drain would take the butterfly below its minimum power.

    The butterfly's power is left untouched; landing on a lit tile is the
    way to recover.
    """


class PrematureCollectionError(MeadowError):
    """A flower was collected while the park was still in the learning phase."""


class MapFormatError(MeadowError, ValueError):
    """A map description is missing something that cannot be defaulted."""


class WindFormatError(MeadowError, ValueError):
    """A wind string could not be parsed."""


class DirectionFormatError(MeadowError, ValueError):
    """A direction string could not be parsed."""
