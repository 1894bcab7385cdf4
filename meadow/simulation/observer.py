"""Observer — the hooks a renderer implements to watch a run.

The core calls these hooks synchronously: after every resolved move the
resolver calls ``on_move`` and only carries on once it returns, so a
renderer sees the run one move at a time.  Every hook is a no-op here;
subclasses override the ones they care about.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meadow.simulation.stats import MoveEvent, Phase, RunStats, RunSummary
    from meadow.world.grid import Grid


class Observer:
    """Base observer; ignores every notification."""

    def on_start(self, grid: Grid, stats: RunStats) -> None:
        """Called once the park is built, before the butterfly acts."""
        return None

    def on_move(self, event: MoveEvent) -> None:
        """Called after every fly, blocked fly or landing."""
        return None

    def on_update(self, stats: RunStats) -> None:
        """Called when counters change outside of a move (collections)."""
        return None

    def on_phase(self, phase: Phase, stats: RunStats) -> None:
        """Called when a phase starts."""
        return None

    def on_retile(self, grid: Grid) -> None:
        """Called when the map's flowers change between phases."""
        return None

    def on_finish(self, summary: RunSummary) -> None:
        """Called once the run is graded."""
        return None


class HeadlessObserver(Observer):
    """Observer used when nothing is watching."""


class RecordingObserver(Observer):
    """Keeps every notification it receives, in order.

    Attributes:
        started: Whether ``on_start`` was called.
        moves: Move events received.
        phases: Phases started.
        updates: Number of ``on_update`` calls.
        retiles: Number of ``on_retile`` calls.
        summary: The final summary, once received.
    """

    def __init__(self) -> None:
        self.started = False
        self.moves: list[MoveEvent] = []
        self.phases: list[Phase] = []
        self.updates = 0
        self.retiles = 0
        self.summary: RunSummary | None = None

    def on_start(self, grid: Grid, stats: RunStats) -> None:
        self.started = True

    def on_move(self, event: MoveEvent) -> None:
        self.moves.append(event)

    def on_update(self, stats: RunStats) -> None:
        self.updates += 1

    def on_phase(self, phase: Phase, stats: RunStats) -> None:
        self.phases.append(phase)

    def on_retile(self, grid: Grid) -> None:
        self.retiles += 1

    def on_finish(self, summary: RunSummary) -> None:
        self.summary = summary
