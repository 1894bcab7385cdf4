"""Config — load simulation parameters from YAML files.

Everything a run depends on (world size, terrain growth constants, the
per-tile light/wind/flower/aroma defaults, the agent to drive) lives in YAML
and is parsed into typed dataclasses here.  A config is built once per run
and handed down explicitly; nothing reads process-wide settings.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import yaml

from meadow.scent.aroma import MAXIMUM_STEPS
from meadow.world.flower import AROMA_INTENSITY

logger = logging.getLogger(__name__)

T = TypeVar("T", int, float)

_FALSE_WORDS = frozenset({"no", "false", "off"})


def _flag(data: dict[str, Any], key: str, default: bool) -> bool:
    """Read a yes/no setting; "no", "false" and "off" strings mean False."""
    value = data.get(key, default)
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_WORDS
    return bool(value)


def _number(data: dict[str, Any], key: str, default: T, cast: Callable[[Any], T]) -> T:
    """Read a non-negative number, falling back to ``default`` when malformed."""
    value = data.get(key, default)
    try:
        return max(cast(0), cast(value))
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r, using %s", key, value, default)
        return default


@dataclass
class LightSettings:
    """How much light a tile carries.

    Attributes:
        random: Draw each tile's light from ``[min, max]``.
        default: Light used when ``random`` is off.
        min: Lower bound of random draws.
        max: Upper bound of random draws.
    """

    random: bool = False
    default: int = 0
    min: int = 0
    max: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> LightSettings:
        """Build settings from a YAML mapping, keeping defaults for gaps."""
        data = data or {}
        return cls(
            random=_flag(data, "random", cls.random),
            default=_number(data, "default", cls.default, int),
            min=_number(data, "min", cls.min, int),
            max=_number(data, "max", cls.max, int),
        )


@dataclass
class WindSettings:
    """How wind is assigned to tiles.

    Attributes:
        random: Draw each tile's wind intensity from ``[min, max]`` and its
            direction uniformly.
        default: Wind used when ``random`` is off, e.g. ``"0 N"``.
        min: Lower intensity bound of random draws.
        max: Upper intensity bound of random draws.
    """

    random: bool = False
    default: str = "0 N"
    min: int = 0
    max: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> WindSettings:
        """Build settings from a YAML mapping, keeping defaults for gaps."""
        data = data or {}
        return cls(
            random=_flag(data, "random", cls.random),
            default=str(data.get("default", cls.default)),
            min=_number(data, "min", cls.min, int),
            max=_number(data, "max", cls.max, int),
        )


@dataclass
class FlowerSettings:
    """How flowers are spawned.

    Attributes:
        random: Spawn flowers randomly on tiles that do not list any.
        expected_learning: Expected flower count of the learning phase.
        expected_running: Expected count of flowers added for the run.
    """

    random: bool = True
    expected_learning: int = 50
    expected_running: int = 10

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> FlowerSettings:
        """Build settings from a YAML mapping, keeping defaults for gaps."""
        data = data or {}
        return cls(
            random=_flag(data, "random", cls.random),
            expected_learning=_number(
                data,
                "expected_learning",
                cls.expected_learning,
                int,
            ),
            expected_running=_number(
                data,
                "expected_running",
                cls.expected_running,
                int,
            ),
        )


@dataclass
class AromaSettings:
    """Intrinsic aroma strength of new flowers.

    Attributes:
        random: Draw each flower's strength from ``[min, max]``.
        default: Strength used when ``random`` is off.
        min: Lower bound of random draws.
        max: Upper bound of random draws.
    """

    random: bool = False
    default: float = AROMA_INTENSITY
    min: float = AROMA_INTENSITY
    max: float = AROMA_INTENSITY

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AromaSettings:
        """Build settings from a YAML mapping, keeping defaults for gaps."""
        data = data or {}
        return cls(
            random=_flag(data, "random", cls.random),
            default=_number(data, "default", cls.default, float),
            min=_number(data, "min", cls.min, float),
            max=_number(data, "max", cls.max, float),
        )


@dataclass
class MapSettings:
    """The per-tile defaults block shared by configs and map files."""

    light: LightSettings = field(default_factory=LightSettings)
    wind: WindSettings = field(default_factory=WindSettings)
    flowers: FlowerSettings = field(default_factory=FlowerSettings)
    aroma: AromaSettings = field(default_factory=AromaSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> MapSettings:
        """Build settings from a YAML mapping, keeping defaults for gaps."""
        data = data or {}
        return cls(
            light=LightSettings.from_dict(data.get("light")),
            wind=WindSettings.from_dict(data.get("wind")),
            flowers=FlowerSettings.from_dict(data.get("flowers")),
            aroma=AromaSettings.from_dict(data.get("aroma")),
        )


@dataclass
class TerrainSettings:
    """Constants of random terrain growth.

    Attributes:
        land_fraction: Share of the map grown as flyable or cliff tiles;
            the rest becomes water.
        free_probability: Chance of growing from the free frontier rather
            than the cramped one.
        null_neighbour_threshold: Unassigned cross neighbours a tile needs
            to count as free.
        cliff_seed: Per-mille chance a new tile is a cliff.
        forest_seed: Per-mille chance a new tile is a forest.
        cliff_fraction: Target share of cliffs, sets the average cliff length.
        cliff_length_delta: Relative spread of cliff lengths around the
            average.
        forest_fraction: Cap on forests as a share of the land budget.
        forest_grow_probability: Chance a forest spreads to an adjacent
            land tile.
    """

    land_fraction: float = 0.6
    free_probability: float = 0.8
    null_neighbour_threshold: int = 3
    cliff_seed: int = 20
    forest_seed: int = 10
    cliff_fraction: float = 0.1
    cliff_length_delta: float = 0.25
    forest_fraction: float = 0.3
    forest_grow_probability: float = 0.625

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TerrainSettings:
        """Build settings from a YAML mapping, keeping defaults for gaps."""
        data = data or {}
        return cls(
            land_fraction=data.get("land_fraction", cls.land_fraction),
            free_probability=data.get("free_probability", cls.free_probability),
            null_neighbour_threshold=data.get(
                "null_neighbour_threshold",
                cls.null_neighbour_threshold,
            ),
            cliff_seed=data.get("cliff_seed", cls.cliff_seed),
            forest_seed=data.get("forest_seed", cls.forest_seed),
            cliff_fraction=data.get("cliff_fraction", cls.cliff_fraction),
            cliff_length_delta=data.get(
                "cliff_length_delta",
                cls.cliff_length_delta,
            ),
            forest_fraction=data.get("forest_fraction", cls.forest_fraction),
            forest_grow_probability=data.get(
                "forest_grow_probability",
                cls.forest_grow_probability,
            ),
        )


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed for deterministic replay; None draws a fresh one.
        world_width: Number of grid columns of a generated park.
        world_height: Number of grid rows of a generated park.
        map_file: Park description to load instead of generating one.
        agent: Registry name of the butterfly to drive.
        headless: Run without opening a window.
        infinite_energy: Pin the butterfly's power at its maximum.
        max_aroma_steps: How far aromas spread from their flower.
        min_required_fraction: Lower bound of the share of flowers the
            butterfly must collect.
        max_required_fraction: Upper bound of that share.
        terrain: Terrain growth constants.
        map: Per-tile light, wind, flower and aroma defaults.
    """

    seed: int | None = None
    world_width: int = 80
    world_height: int = 80
    map_file: str | None = None
    agent: str = "explorer"
    headless: bool = True
    infinite_energy: bool = False
    max_aroma_steps: int = MAXIMUM_STEPS
    min_required_fraction: float = 0.25
    max_required_fraction: float = 0.75

    terrain: TerrainSettings = field(default_factory=TerrainSettings)
    map: MapSettings = field(default_factory=MapSettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            seed=data.get("seed", cls.seed),
            world_width=data.get("world_width", cls.world_width),
            world_height=data.get("world_height", cls.world_height),
            map_file=data.get("map_file", cls.map_file),
            agent=data.get("agent", cls.agent),
            headless=data.get("headless", cls.headless),
            infinite_energy=data.get("infinite_energy", cls.infinite_energy),
            max_aroma_steps=data.get("max_aroma_steps", cls.max_aroma_steps),
            min_required_fraction=data.get(
                "min_required_fraction",
                cls.min_required_fraction,
            ),
            max_required_fraction=data.get(
                "max_required_fraction",
                cls.max_required_fraction,
            ),
            terrain=TerrainSettings.from_dict(data.get("terrain")),
            map=MapSettings.from_dict(data.get("map")),
        )
