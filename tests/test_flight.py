"""Tests for meadow.flight — power, speed and the flight resolver."""

import pytest

from conftest import GridFactory, set_kind
from meadow.errors import (
    CliffCollisionError,
    PowerExhaustedError,
    PrematureCollectionError,
    WaterCollisionError,
)
from meadow.flight.power import MAX_POWER, Power
from meadow.flight.resolver import (
    REFRESH_STATE_POWER_COST,
    WRONG_COLLECT_POWER_COST,
    FlightResolver,
)
from meadow.flight.speed import Speed
from meadow.simulation.observer import RecordingObserver
from meadow.world.direction import Direction
from meadow.world.flower import Flower
from meadow.world.grid import Grid, Location, Position
from meadow.world.tile import TileKind


def _tile(grid: Grid, position: Position):
    tile = grid.at(position)
    assert tile is not None
    return tile


def _resolver(grid: Grid, power: Power) -> FlightResolver:
    return FlightResolver(grid=grid, position=Position(1, 1), power=power)


class TestPower:
    """Tests for the power reserve."""

    def test_clamped_on_creation(self) -> None:
        assert Power(value=150).value == MAX_POWER
        assert Power(value=-5).value == 0

    def test_drain_and_gain(self) -> None:
        power = Power(value=50)
        power.drain(20)
        assert power.value == 30
        power.gain(100)
        assert power.value == MAX_POWER

    def test_overdraw_leaves_value(self) -> None:
        power = Power(value=4)
        with pytest.raises(PowerExhaustedError):
            power.drain(5)
        assert power.value == 4
        assert not power.can_afford(5)
        assert power.can_afford(4)

    def test_negative_drain_is_gain(self) -> None:
        power = Power(value=10)
        power.drain(-3)
        assert int(power) == 13

    def test_infinite(self) -> None:
        power = Power(value=10, infinite=True)
        assert power.value == MAX_POWER
        power.drain(1000)
        assert power.value == MAX_POWER
        assert power.can_afford(1000)


class TestSpeed:
    """Tests for speed constants."""

    def test_costs(self) -> None:
        assert (Speed.SLOW.slow_down, Speed.SLOW.power_cost) == (1, -3)
        assert (Speed.NORMAL.slow_down, Speed.NORMAL.power_cost) == (0, 0)
        assert (Speed.FAST.slow_down, Speed.FAST.power_cost) == (-1, 3)


class TestFly:
    """Tests for moving between tiles."""

    def test_start_counts_as_explored(self, resolver: FlightResolver) -> None:
        assert resolver.stats.explored_tiles == 1
        assert resolver.tile.state.turn_entered == 0

    def test_move(self, resolver: FlightResolver) -> None:
        assert resolver.fly(Direction.E)
        assert resolver.position == Position(1, 2)
        assert resolver.location == Location(2, 1)
        assert resolver.stats.turn == 1
        assert resolver.stats.explored_tiles == 2
        assert resolver.tile.state.turn_entered == 1

    def test_revisit_not_explored_twice(self, resolver: FlightResolver) -> None:
        resolver.fly(Direction.E)
        resolver.fly(Direction.W)
        assert resolver.stats.explored_tiles == 2
        assert resolver.stats.turn == 2

    def test_wrap_returns_home(self, resolver: FlightResolver) -> None:
        start = resolver.location
        for _ in range(3):
            resolver.fly(Direction.NE)
        assert resolver.location == start

    def test_occupant_follows(self, resolver: FlightResolver, land_grid: Grid) -> None:
        butterfly = object()
        resolver.seat(butterfly)  # type: ignore[arg-type]
        resolver.fly(Direction.S)
        assert _tile(land_grid, Position(1, 1)).state.occupant is None
        assert _tile(land_grid, Position(2, 1)).state.occupant is butterfly

    def test_single_tile_park(self, make_grid: GridFactory) -> None:
        resolver = FlightResolver(grid=make_grid(1, 1), position=Position(0, 0))
        assert not resolver.fly(Direction.N)
        assert resolver.stats.turn == 1
        assert resolver.position == Position(0, 0)

    def test_water_collision(self, resolver: FlightResolver, land_grid: Grid) -> None:
        set_kind(land_grid, Position(1, 2), TileKind.WATER)
        with pytest.raises(WaterCollisionError):
            resolver.fly(Direction.E)
        assert resolver.position == Position(1, 1)
        assert resolver.power.value == MAX_POWER - WaterCollisionError.power_cost
        assert resolver.stats.water_collisions == 1
        assert resolver.stats.turn == 1

    def test_cliff_collision(self, resolver: FlightResolver, land_grid: Grid) -> None:
        set_kind(land_grid, Position(0, 1), TileKind.CLIFF)
        with pytest.raises(CliffCollisionError):
            resolver.fly(Direction.N)
        assert resolver.power.value == MAX_POWER - CliffCollisionError.power_cost
        assert resolver.stats.cliff_collisions == 1

    def test_safe_collision(self, resolver: FlightResolver, land_grid: Grid) -> None:
        set_kind(land_grid, Position(1, 2), TileKind.WATER)
        assert not resolver.fly(Direction.E, safe=True)
        assert resolver.position == Position(1, 1)
        assert resolver.power.value == MAX_POWER - WaterCollisionError.power_cost
        assert resolver.stats.water_collisions == 1

    def test_exhausted_fast_flight(self, land_grid: Grid) -> None:
        resolver = _resolver(land_grid, Power(0))
        with pytest.raises(PowerExhaustedError):
            resolver.fly(Direction.E, Speed.FAST)
        assert resolver.power.value == 0
        assert resolver.position == Position(1, 1)

    def test_exhausted_collision(self, land_grid: Grid) -> None:
        set_kind(land_grid, Position(1, 2), TileKind.WATER)
        resolver = _resolver(land_grid, Power(5))
        with pytest.raises(PowerExhaustedError):
            resolver.fly(Direction.E, safe=True)
        assert resolver.power.value == 5

    def test_forest_slows(self, resolver: FlightResolver, land_grid: Grid) -> None:
        set_kind(land_grid, Position(1, 2), TileKind.FOREST)
        resolver.fly(Direction.E)
        assert resolver.stats.slow_turns == 1
        assert resolver.stats.total_turns == 2

    def test_slow_flight_restores_power(self, land_grid: Grid) -> None:
        resolver = _resolver(land_grid, Power(50))
        resolver.fly(Direction.E, Speed.SLOW)
        assert resolver.power.value == 53
        assert resolver.stats.slow_turns == 1
        assert resolver.stats.power_consumed == 3

    def test_fast_flight_costs_power(self, resolver: FlightResolver) -> None:
        resolver.fly(Direction.E, Speed.FAST)
        assert resolver.power.value == MAX_POWER - 3
        assert resolver.stats.slow_turns == -1
        assert resolver.stats.power_spent == 3

    def test_light_restores_power(self, land_grid: Grid) -> None:
        _tile(land_grid, Position(1, 2)).state.light = 7
        resolver = _resolver(land_grid, Power(50))
        resolver.fly(Direction.E)
        assert resolver.power.value == 57

    def test_observer_sees_moves(
        self,
        resolver: FlightResolver,
        observer: RecordingObserver,
        land_grid: Grid,
    ) -> None:
        set_kind(land_grid, Position(0, 2), TileKind.WATER)
        resolver.fly(Direction.E)
        resolver.fly(Direction.N, safe=True)
        assert len(observer.moves) == 2
        first, blocked = observer.moves
        assert first.direction is Direction.E
        assert first.source == Location(1, 1)
        assert first.destination == Location(2, 1)
        assert blocked.direction is None
        assert blocked.source == blocked.destination


class TestLandAndRefresh:
    """Tests for landing and reading tiles."""

    def test_land(self, land_grid: Grid) -> None:
        _tile(land_grid, Position(1, 1)).state.light = 5
        resolver = _resolver(land_grid, Power(50))
        resolver.land()
        assert resolver.power.value == 55
        assert resolver.stats.turn == 1
        assert resolver.stats.power_consumed == 5

    def test_refresh_state(self, resolver: FlightResolver) -> None:
        state = resolver.refresh_state()
        assert resolver.power.value == MAX_POWER - REFRESH_STATE_POWER_COST
        assert state == resolver.tile.state
        assert state is not resolver.tile.state

    def test_refresh_when_exhausted(self, land_grid: Grid) -> None:
        resolver = _resolver(land_grid, Power(2))
        with pytest.raises(PowerExhaustedError):
            resolver.refresh_state()
        assert resolver.power.value == 2


class TestCollect:
    """Tests for collecting flowers."""

    def test_premature(self, resolver: FlightResolver) -> None:
        with pytest.raises(PrematureCollectionError):
            resolver.collect(0)

    def test_collect_present(
        self,
        resolver: FlightResolver,
        observer: RecordingObserver,
    ) -> None:
        flower = Flower.plant("flower_7", resolver.location)
        resolver.tile.state.add_flower(flower)
        resolver.stats.begin_running()
        assert resolver.collect(flower)
        assert resolver.stats.found_flowers == {flower.flower_id}
        assert resolver.power.value == MAX_POWER
        assert observer.updates == 1

    def test_collect_absent(self, resolver: FlightResolver) -> None:
        resolver.stats.begin_running()
        assert not resolver.collect(10_000_000)
        assert resolver.stats.found_flowers == set()
        assert resolver.power.value == MAX_POWER - WRONG_COLLECT_POWER_COST

    def test_collect_absent_when_exhausted(self, land_grid: Grid) -> None:
        resolver = _resolver(land_grid, Power(10))
        resolver.stats.begin_running()
        with pytest.raises(PowerExhaustedError):
            resolver.collect(10_000_000)
        assert resolver.power.value == 10
