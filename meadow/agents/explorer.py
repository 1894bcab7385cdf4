"""Explorer — a depth-first reference butterfly.

The explorer walks the whole reachable park depth-first, reading every tile
it enters.  While learning it records what it reads; while running it walks
the park again, collecting required flowers as it finds them, and stops as
soon as it holds them all.  The walk keeps its own stack instead of
recursing so large parks do not hit the recursion limit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from meadow.agents.base import Butterfly
from meadow.agents.registry import register_agent
from meadow.errors import PowerExhaustedError
from meadow.world.direction import Direction
from meadow.world.grid import Location

if TYPE_CHECKING:
    from meadow.world.flower import Flower
    from meadow.world.tile import TileState

logger = logging.getLogger(__name__)

# Returns True to end the walk early.
Visitor = Callable[["TileState"], bool]


@register_agent("explorer")
class Explorer(Butterfly):
    """Depth-first explorer.

    Attributes:
        states: Tile states read so far, by location.
        obstacles: Locations the explorer bumped into.
        flowers: Flowers seen so far, by id.
    """

    def __init__(self) -> None:
        super().__init__()
        self.states: dict[Location, TileState] = {}
        self.obstacles: set[Location] = set()
        self.flowers: dict[int, Flower] = {}

    def learn(self) -> list[list[TileState | None]]:
        self._walk(self._record)
        learned: list[list[TileState | None]] = [
            [None] * self.map_width for _ in range(self.map_height)
        ]
        for location, state in self.states.items():
            learned[location.y][location.x] = state
        logger.info(
            "Explorer learned %d tiles and %d flowers",
            len(self.states),
            len(self.flowers),
        )
        return learned

    def run(self, required_ids: Sequence[int]) -> None:
        wanted = set(required_ids)
        if not wanted:
            return

        def visit(state: TileState) -> bool:
            self._record(state)
            for flower in state.flowers:
                if flower.flower_id in wanted and self.collect(flower.flower_id):
                    wanted.discard(flower.flower_id)
            return not wanted

        self._walk(visit)
        if wanted:
            logger.warning("Explorer could not find flowers %s", sorted(wanted))

    def flower_list(self) -> list[Flower]:
        return sorted(self.flowers.values())

    def flower_location(self, flower: Flower | int) -> Location | None:
        flower_id = flower if isinstance(flower, int) else flower.flower_id
        known = self.flowers.get(flower_id)
        return None if known is None else known.location

    # ------------------------------------------------------------------

    def _record(self, state: TileState) -> bool:
        self.states[state.location] = state
        for flower in state.flowers:
            self.flowers[flower.flower_id] = flower
        return False

    def _neighbour(self, here: Location, direction: Direction) -> Location:
        return Location(
            (here.x + direction.d_col) % self.map_width,
            (here.y + direction.d_row) % self.map_height,
        )

    def _read(self) -> TileState:
        """Read the current tile, landing once if power runs short."""
        try:
            return self.refresh_state()
        except PowerExhaustedError:
            self.land()
            return self.refresh_state()

    def _walk(self, visit: Visitor) -> None:
        """Depth-first walk over every reachable tile, calling ``visit``.

        Ends early when ``visit`` returns True or the butterfly runs out of
        power.
        """
        seen: set[Location] = {self.location}
        # Each frame: direction flown to get here, directions left to try.
        stack: list[tuple[Direction | None, list[Direction]]] = [
            (None, list(Direction)),
        ]
        try:
            if visit(self._read()):
                return
            while stack:
                came_by, options = stack[-1]
                if not options:
                    stack.pop()
                    if came_by is not None:
                        self.fly_safe(came_by.opposite)
                    continue
                direction = options.pop()
                target = self._neighbour(self.location, direction)
                if target in seen or target in self.obstacles:
                    continue
                seen.add(target)
                if not self.fly_safe(direction):
                    self.obstacles.add(target)
                    continue
                stack.append((direction, list(Direction)))
                if visit(self._read()):
                    return
        except PowerExhaustedError:
            logger.warning("Explorer ran out of power at %s", self.location)
