"""Tests for meadow.simulation.rng."""

import pytest

from meadow.simulation.rng import Randomer


class TestRandomer:
    """Tests for the seeded random source."""

    def test_same_seed_same_draws(self) -> None:
        a = Randomer(seed=3)
        b = Randomer(seed=3)
        assert [a.next_int(0, 100) for _ in range(20)] == [
            b.next_int(0, 100) for _ in range(20)
        ]

    def test_missing_seed_is_drawn(self) -> None:
        rng = Randomer()
        assert isinstance(rng.seed, int)
        assert rng.seed >= 0

    def test_next_int_is_inclusive(self, rng: Randomer) -> None:
        draws = {rng.next_int(1, 3) for _ in range(200)}
        assert draws == {1, 2, 3}

    def test_next_int_single_value(self, rng: Randomer) -> None:
        assert rng.next_int(5, 5) == 5

    def test_below_range(self, rng: Randomer) -> None:
        assert all(0 <= rng.below(4) < 4 for _ in range(100))

    def test_next_double_range(self, rng: Randomer) -> None:
        assert all(2.0 <= rng.next_double(2.0, 3.0) < 3.0 for _ in range(100))

    def test_chance_extremes(self, rng: Randomer) -> None:
        assert not any(rng.chance(0.0) for _ in range(50))
        assert all(rng.chance(1.0) for _ in range(50))
        assert not any(rng.chance(-1.0) for _ in range(10))

    def test_chance_per_mille_extremes(self, rng: Randomer) -> None:
        assert not any(rng.chance_per_mille(0) for _ in range(50))
        assert all(rng.chance_per_mille(1000) for _ in range(50))

    def test_choice(self, rng: Randomer) -> None:
        assert rng.choice(["only"]) == "only"
        with pytest.raises(ValueError):
            rng.choice([])

    def test_sample_is_distinct(self, rng: Randomer) -> None:
        items = list(range(10))
        picked = rng.sample(items, 6)
        assert len(picked) == 6
        assert len(set(picked)) == 6
        assert set(picked) <= set(items)

    def test_sample_bounds(self, rng: Randomer) -> None:
        assert rng.sample([1, 2], 0) == []
        with pytest.raises(ValueError):
            rng.sample([1, 2], 3)
