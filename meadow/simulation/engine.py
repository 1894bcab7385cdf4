"""SimulationEngine — drives a butterfly through one run of a park.

A run has two phases, always in this order:

1. **Learning.**  The butterfly explores and returns its map of the park,
   which is graded against the real tile states.
2. **Running.**  Extra flowers are planted, a random subset of all flowers
   is required, and the butterfly must collect exactly that subset.

The engine owns the run's random source, world, statistics and flight
resolver; the butterfly only ever touches the park through the resolver.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from meadow.agents.registry import resolve_agent
from meadow.errors import ObstacleCollisionError, PowerExhaustedError
from meadow.flight.power import Power
from meadow.flight.resolver import FlightResolver
from meadow.simulation.observer import HeadlessObserver, Observer
from meadow.simulation.rng import Randomer
from meadow.simulation.stats import Phase, RunStats, RunSummary
from meadow.world.world import World

if TYPE_CHECKING:
    from meadow.agents.base import Butterfly
    from meadow.simulation.config import SimulationConfig

logger = logging.getLogger(__name__)


@dataclass
class SimulationEngine:
    """Runs the learning and running phases of one park.

    Attributes:
        config: Loaded simulation configuration.
        agent: The butterfly; resolved from ``config.agent`` when None.
        observer: Receives every notification of the run.
        rng: The run's seeded random source.
        world: The park.
        stats: Run counters.
        resolver: Applies the butterfly's actions.
        learning_score: Grade of the learned map, in percent.
        learning_time: Seconds spent in ``learn``.
        running_time: Seconds spent in ``run``.
        required: Ids the butterfly must collect, once chosen.
    """

    config: SimulationConfig
    agent: Butterfly | None = None
    observer: Observer = field(default_factory=HeadlessObserver)
    rng: Randomer = field(init=False)
    world: World = field(init=False)
    stats: RunStats = field(init=False)
    resolver: FlightResolver = field(init=False)
    learning_score: float = 0.0
    learning_time: float = 0.0
    running_time: float = 0.0
    required: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Build the RNG, the park, the resolver and the butterfly."""
        self.rng = Randomer(self.config.seed)
        logger.info("Seed %d", self.rng.seed)
        if self.config.map_file:
            path = self.config.map_file
            self.world = World.from_map_file(path, self.config, self.rng)
        else:
            self.world = World.generate(self.config, self.rng)
        self.stats = RunStats(
            flyable_tiles=self.world.grid.flyable_count(),
            all_flowers=len(self.world.flowers),
        )
        self.resolver = FlightResolver(
            grid=self.world.grid,
            position=self.world.start,
            stats=self.stats,
            power=Power(infinite=self.config.infinite_energy),
            observer=self.observer,
        )
        self.observer.on_start(self.world.grid, self.stats)
        if self.agent is None:
            self.agent = resolve_agent(self.config.agent)()
        self.agent.bind(self.resolver)

    @property
    def butterfly(self) -> Butterfly:
        """The bound butterfly."""
        if self.agent is None:
            msg = "engine has no butterfly"
            raise RuntimeError(msg)
        return self.agent

    @property
    def phase(self) -> Phase:
        """The current phase."""
        return self.stats.phase

    def learn(self) -> float:
        """Run the learning phase and grade the learned map.

        Returns:
            The learning score, in percent.
        """
        self.observer.on_phase(Phase.LEARNING, self.stats)
        started = time.perf_counter()
        learned = None
        try:
            learned = self.butterfly.learn()
        except (ObstacleCollisionError, PowerExhaustedError) as exc:
            logger.warning("Learning ended early: %s", exc)
        self.learning_time = time.perf_counter() - started
        self.learning_score = self.world.grade(learned)
        logger.info("Learning score %.2f%%", self.learning_score)
        return self.learning_score

    def begin_running(self) -> list[int]:
        """Switch to the running phase and choose the required flowers.

        Raises:
            RuntimeError: If the run is already in the running phase.

        Returns:
            The ids the butterfly must collect.
        """
        self.stats.begin_running()
        self.world.begin_running()
        self.stats.all_flowers = len(self.world.flowers)
        self.observer.on_retile(self.world.grid)
        self.required = self.choose_required()
        self.stats.required_flowers = set(self.required)
        self.observer.on_phase(Phase.RUNNING, self.stats)
        logger.info(
            "Running: %d of %d flowers required",
            len(self.required),
            self.stats.all_flowers,
        )
        return self.required

    def choose_required(self) -> list[int]:
        """Sample the required flower ids.

        The sample size is drawn between the configured fractions of all
        flowers on the map.
        """
        flowers = self.world.flowers
        count = len(flowers)
        low = int(self.config.min_required_fraction * count)
        high = int(self.config.max_required_fraction * count)
        size = self.rng.next_int(min(low, high), max(low, high))
        return [flower.flower_id for flower in self.rng.sample(flowers, size)]

    def run(self, required: list[int]) -> bool:
        """Run the running phase.

        Returns:
            True if the butterfly collected exactly the required flowers.
        """
        started = time.perf_counter()
        try:
            self.butterfly.run(list(required))
        except (ObstacleCollisionError, PowerExhaustedError) as exc:
            logger.warning("Running ended early: %s", exc)
        self.running_time = time.perf_counter() - started

        found = self.stats.found_flowers
        wanted = set(required)
        extra = found - wanted
        missing = wanted - found
        if extra:
            logger.warning("Collected unrequired flowers: %s", sorted(extra))
        if missing:
            logger.warning("Required flowers not collected: %s", sorted(missing))
        return not extra and not missing

    def simulate(self) -> RunSummary:
        """Run both phases and return the summary."""
        self.learn()
        required = self.begin_running()
        won = self.run(required)
        summary = self.summary(won)
        logger.info("Run %s in %d turns", "won" if won else "lost", summary.total_turns)
        self.observer.on_finish(summary)
        return summary

    def summary(self, won: bool) -> RunSummary:
        """Build the run summary from the current statistics."""
        stats = self.stats
        return RunSummary(
            seed=self.rng.seed,
            won=won,
            turns=stats.turn,
            slow_turns=stats.slow_turns,
            learning_time=self.learning_time,
            running_time=self.running_time,
            learning_score=self.learning_score,
            found=len(stats.found_flowers & stats.required_flowers),
            required=len(stats.required_flowers),
            explored_tiles=stats.explored_tiles,
            flyable_tiles=stats.flyable_tiles,
        )
