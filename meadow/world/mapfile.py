"""Map files — read and write park descriptions.

A map file is a YAML document with an optional ``settings`` block (the same
light/wind/flowers/aroma block a config carries) and an optional ``tiles``
text.  The tiles text lists rows separated by ``;``.  Each tile is a type
token (``#`` land, ``~`` water, ``|`` forest, ``^`` cliff, optionally with a
``B`` marking the butterfly's start) followed by ``.``-separated fields::

    #.2.1N.7-8.100-50 ~ |B ^ ;
    # # # # ;

The fields are light, wind, flower name suffixes and aroma intensities, in
that order; flowers and aromas are ``-``-separated lists paired by index.
Absent fields take the settings' values, malformed fields fall back to them
with a warning.  Only a tile without a type token is an error.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from meadow.errors import MapFormatError, WindFormatError
from meadow.simulation.config import MapSettings
from meadow.world.flora import Flora
from meadow.world.flower import Flower
from meadow.world.grid import Grid, Position
from meadow.world.tile import Tile, TileKind, Wind

if TYPE_CHECKING:
    from meadow.simulation.rng import Randomer
    from meadow.world.grid import Location
    from meadow.world.world import World

logger = logging.getLogger(__name__)

BUTTERFLY_TOKEN = "B"
FLOWER_PREFIX = "flower_"

_TOKENS = re.escape("".join(kind.value for kind in TileKind))
_TILE = re.compile(rf"[{_TOKENS}][^\s,{_TOKENS}]*")
_ROW_SEPARATOR = re.compile(r"\s*;\s*")
_FIELD_SEPARATOR = re.compile(r"\s*\.\s*")
_LIST_SEPARATOR = re.compile(r"\s*-\s*")

TYPE_FIELD, LIGHT_FIELD, WIND_FIELD, FLOWER_FIELD, AROMA_FIELD = range(5)


@dataclass
class MapDescription:
    """The result of reading a map file.

    Attributes:
        settings: The document's settings block.
        flora: Value source built from ``settings``.
        grid: The parsed tiles, or None when the document has no tiles.
        flowers: Flowers found on flyable tiles, in reading order.
        start: Where the butterfly starts, if a tile was marked.
    """

    settings: MapSettings
    flora: Flora
    grid: Grid | None = None
    flowers: list[Flower] = field(default_factory=list)
    start: Position | None = None


def load_map(path: str | Path, rng: Randomer) -> MapDescription:
    """Read a map file from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        MapFormatError: If the document is not a mapping or a tile has no
            type token.
    """
    path = Path(path)
    with path.open("r") as f:
        data = yaml.safe_load(f) or {}
    logger.debug("Loaded map file %s", path)
    return parse_map(data, rng)


def parse_map(data: dict[str, Any], rng: Randomer) -> MapDescription:
    """Build a map description from a loaded YAML document."""
    if not isinstance(data, dict):
        msg = f"map document must be a mapping, got {type(data).__name__}"
        raise MapFormatError(msg)
    settings = MapSettings.from_dict(data.get("settings"))
    description = MapDescription(settings=settings, flora=Flora(settings, rng))
    text = str(data.get("tiles") or "").strip()
    if text:
        _parse_tiles(text, description, rng)
    return description


def _split_rows(text: str) -> list[str]:
    rows = _ROW_SEPARATOR.split(text.strip())
    if rows and not rows[-1]:
        rows.pop()
    return rows


def _parse_tiles(text: str, description: MapDescription, rng: Randomer) -> None:
    rows = _split_rows(text)
    width = max((len(_TILE.findall(row)) for row in rows), default=0)
    if not rows or width == 0:
        msg = "map tiles contain no tile tokens"
        raise MapFormatError(msg)

    grid = Grid(height=len(rows), width=width)
    expected = description.settings.flowers.expected_learning
    flower_per_mille = int(1000 * expected / (grid.height * grid.width))

    for row, row_text in enumerate(rows):
        _check_stray_text(row, row_text)
        for col, match in enumerate(_TILE.finditer(row_text)):
            position = Position(row, col)
            fields = _FIELD_SEPARATOR.split(match.group())
            while len(fields) > 1 and not fields[-1]:
                fields.pop()
            tile = _parse_tile(
                fields,
                position,
                grid,
                description,
                rng,
                flower_per_mille,
            )
            grid.set(position, tile)
            if tile.flyable:
                description.flowers.extend(tile.state.flowers)

    grid.fill_unset(TileKind.WATER)
    description.grid = grid
    logger.debug(
        "Parsed %dx%d map with %d flowers",
        grid.height,
        grid.width,
        len(description.flowers),
    )


def _check_stray_text(row: int, row_text: str) -> None:
    """Reject text in a row that belongs to no tile."""
    stray = _TILE.sub(" ", row_text).replace(",", " ").split()
    if stray:
        msg = f"row {row}: tile without a type token: {stray[0]!r}"
        raise MapFormatError(msg)


def _field(fields: list[str], index: int) -> str | None:
    if index >= len(fields) or not fields[index]:
        return None
    return fields[index]


def _parse_tile(
    fields: list[str],
    position: Position,
    grid: Grid,
    description: MapDescription,
    rng: Randomer,
    flower_per_mille: int,
) -> Tile:
    flora = description.flora
    location = grid.location_of(position)
    token = fields[TYPE_FIELD].strip()
    if BUTTERFLY_TOKEN in token:
        description.start = position
        token = token.replace(BUTTERFLY_TOKEN, "")

    state = flora.tile_state(location)
    state.light = _parse_light(_field(fields, LIGHT_FIELD), flora)
    state.wind = _parse_wind(_field(fields, WIND_FIELD), flora)
    intensities = _parse_intensities(_field(fields, AROMA_FIELD))
    flower_field = _field(fields, FLOWER_FIELD)
    if flower_field is None:
        random_flowers = description.settings.flowers.random
        if random_flowers and rng.chance_per_mille(flower_per_mille):
            state.add_flower(flora.flower(location))
    else:
        for flower in _parse_flowers(flower_field, intensities, location, flora):
            state.add_flower(flower)

    try:
        kind = TileKind(token)
    except ValueError:
        logger.warning("Invalid tile token %r at %s, using land", token, location)
        kind = TileKind.LAND
    tile = Tile(kind=kind, state=state)
    if not tile.flyable:
        state.flowers = []
    return tile


def _parse_light(text: str | None, flora: Flora) -> int:
    if text is None:
        return flora.light()
    try:
        return max(0, int(text))
    except ValueError:
        logger.warning("Invalid light %r, using the settings value", text)
        return flora.light()


def _parse_wind(text: str | None, flora: Flora) -> Wind:
    if text is None:
        return flora.wind()
    try:
        return Wind.parse(text)
    except WindFormatError:
        logger.warning("Invalid wind %r, using the settings value", text)
        return flora.wind()


def _parse_intensities(text: str | None) -> list[float]:
    if text is None:
        return []
    intensities: list[float] = []
    for item in _LIST_SEPARATOR.split(text):
        try:
            intensities.append(max(0.0, float(item)))
        except ValueError:
            logger.warning("Invalid aroma intensity %r, skipped", item)
    return intensities


def _parse_flowers(
    text: str,
    intensities: list[float],
    location: Location,
    flora: Flora,
) -> list[Flower]:
    flowers: list[Flower] = []
    suffixes = [s for s in _LIST_SEPARATOR.split(text) if s]
    for index, suffix in enumerate(suffixes):
        if index < len(intensities):
            intensity = intensities[index]
        else:
            intensity = flora.aroma_intensity()
        flowers.append(Flower.plant(FLOWER_PREFIX + suffix, location, intensity))
    return flowers


def _encode_tile(tile: Tile, is_start: bool) -> str:
    state = tile.state
    token = tile.kind.value + (BUTTERFLY_TOKEN if is_start else "")
    wind = f"{state.wind.intensity}{state.wind.direction.name}"
    fields = [token, str(state.light), wind]
    if state.flowers:
        suffixes = (f.name.removeprefix(FLOWER_PREFIX) for f in state.flowers)
        fields.append("-".join(suffixes))
        # Intensities are written whole: "." and "-" are separators.
        fields.append("-".join(f"{f.aroma_intensity:.0f}" for f in state.flowers))
    return ".".join(fields)


def dump_map(world: World) -> str:
    """Render ``world`` as a map document.

    The document reproduces the world's tiles, lights, winds, flowers and
    butterfly start; random flowers are switched off so loading it rebuilds
    the same park.
    """
    grid = world.grid
    rows = []
    for row in range(grid.height):
        cells = []
        for col in range(grid.width):
            position = Position(row, col)
            tile = grid.at(position)
            if tile is not None:
                cells.append(_encode_tile(tile, position == world.start))
        rows.append(" ".join(cells) + " ;")
    settings = asdict(world.settings)
    settings["flowers"]["random"] = False
    document = {"settings": settings, "tiles": "\n".join(rows) + "\n"}
    return yaml.safe_dump(document, sort_keys=False)
