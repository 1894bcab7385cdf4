"""Run statistics, move events and the end-of-run summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meadow.world.direction import Direction
    from meadow.world.grid import Location


class Phase(Enum):
    """The two phases of a run, in order."""

    LEARNING = "learning"
    RUNNING = "running"


@dataclass
class RunStats:
    """Counters shared by the engine, the resolver and observers.

    Attributes:
        phase: Current phase; only ever moves from learning to running.
        turn: Turns taken so far (moves, landings and collisions).
        slow_turns: Extra turns charged by terrain and speed.
        explored_tiles: Distinct tiles the butterfly has entered.
        flyable_tiles: Tiles the butterfly could enter.
        power_spent: Total power drained.
        power_consumed: Total power gained.
        cliff_collisions: Attempts to fly into a cliff.
        water_collisions: Attempts to fly into water.
        all_flowers: Flowers on the map.
        required_flowers: Ids the butterfly must collect.
        found_flowers: Ids collected so far.
    """

    phase: Phase = Phase.LEARNING
    turn: int = 0
    slow_turns: int = 0
    explored_tiles: int = 0
    flyable_tiles: int = 0
    power_spent: int = 0
    power_consumed: int = 0
    cliff_collisions: int = 0
    water_collisions: int = 0
    all_flowers: int = 0
    required_flowers: set[int] = field(default_factory=set)
    found_flowers: set[int] = field(default_factory=set)

    @property
    def total_turns(self) -> int:
        """Turns plus slow turns."""
        return self.turn + self.slow_turns

    def begin_running(self) -> None:
        """Move from the learning phase to the running phase.

        Raises:
            RuntimeError: If the run is already in the running phase.
        """
        if self.phase is not Phase.LEARNING:
            msg = f"cannot start running from phase {self.phase.value}"
            raise RuntimeError(msg)
        self.phase = Phase.RUNNING

    def record_drain(self, amount: int) -> None:
        """Account for a power change requested as a drain of ``amount``."""
        if amount >= 0:
            self.power_spent += amount
        else:
            self.power_consumed -= amount

    def record_gain(self, amount: int) -> None:
        """Account for a power change requested as a gain of ``amount``."""
        self.record_drain(-amount)


@dataclass(frozen=True)
class MoveEvent:
    """One resolved move, as handed to observers.

    Attributes:
        turn: Turn the move happened on.
        slow_down: Slow turns the move cost (0 for collisions and landings).
        direction: Heading flown, None for landings and blocked moves.
        source: Where the butterfly was.
        destination: Where the butterfly is now.
        power: Butterfly power after the move.
    """

    turn: int
    slow_down: int
    direction: Direction | None
    source: Location
    destination: Location
    power: int


@dataclass(frozen=True)
class RunSummary:
    """Everything reported at the end of a run."""

    seed: int
    won: bool
    turns: int
    slow_turns: int
    learning_time: float
    running_time: float
    learning_score: float
    found: int
    required: int
    explored_tiles: int
    flyable_tiles: int

    @property
    def total_turns(self) -> int:
        """Turns plus slow turns."""
        return self.turns + self.slow_turns

    @property
    def total_time(self) -> float:
        """Wall-clock seconds spent in both phases."""
        return self.learning_time + self.running_time

    @property
    def adjusted_time(self) -> float:
        """Total time scaled up by the share of slow turns."""
        if self.turns == 0:
            return self.total_time
        return self.total_time / self.turns * self.total_turns


def format_summary(summary: RunSummary) -> str:
    """Render ``summary`` as aligned ``label : value`` lines."""
    rows = [
        ("Result", "WIN" if summary.won else "LOSE"),
        ("Seed", str(summary.seed)),
        ("Turns", str(summary.turns)),
        ("Slow Turns", str(summary.slow_turns)),
        ("Total Turns", str(summary.total_turns)),
        ("Learning Time", f"{summary.learning_time:.3f}s"),
        ("Running Time", f"{summary.running_time:.3f}s"),
        ("Total Time", f"{summary.total_time:.3f}s"),
        ("Adjusted Time", f"{summary.adjusted_time:.3f}s"),
        ("Learning Score", f"{summary.learning_score:.2f}%"),
        ("Flowers Found", f"{summary.found}/{summary.required}"),
        ("Tiles Explored", f"{summary.explored_tiles}/{summary.flyable_tiles}"),
    ]
    return "\n".join(f"{label:<20} : {value}" for label, value in rows)
