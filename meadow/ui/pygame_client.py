"""Pygame 2D visualization for the Meadow simulation.

Renders the park, its flowers, the aroma field and the butterfly in a
window.  The renderer is an observer: the engine calls it after every move
and waits for it to return, so each move is drawn before the next one is
resolved.  Moves that cost slow turns are held on screen for longer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

from meadow.simulation.observer import Observer
from meadow.simulation.stats import Phase
from meadow.world.tile import TileKind

if TYPE_CHECKING:
    from meadow.simulation.stats import MoveEvent, RunStats, RunSummary
    from meadow.world.grid import Grid, Location

# Colour palette
_BG = (20, 24, 16)
_TILE_COLOURS: dict[TileKind, tuple[int, int, int]] = {
    TileKind.LAND: (96, 140, 64),
    TileKind.FOREST: (34, 84, 40),
    TileKind.WATER: (40, 80, 160),
    TileKind.CLIFF: (120, 110, 100),
}
_FLOWER = (250, 120, 200)
_BUTTERFLY = (255, 200, 40)
_TEXT = (200, 200, 200)

# Aroma overlay colour (warm glow)
_AROMA_COLOUR = np.array([255, 180, 80], dtype=np.float64)


class PygameObserver(Observer):
    """Draws a run into a Pygame window, one frame per move.

    Attributes:
        cell_size: Pixel size of each tile.
        moves_per_second: Playback speed.
        screen: The Pygame display surface, once the park is known.
    """

    # Speed presets: moves per second
    _SPEED_STEPS: ClassVar[list[float]] = [
        1.0,
        3.0,
        5.0,
        10.0,
        30.0,
        60.0,
        120.0,
        600.0,
    ]

    def __init__(self, cell_size: int = 8, moves_per_second: float = 30.0) -> None:
        """Initialise the renderer.

        Args:
            cell_size: Pixel width/height per tile.
            moves_per_second: Moves drawn per real-time second.
        """
        self.cell_size = cell_size
        self.moves_per_second = moves_per_second
        self._speed_index = self._nearest_speed(moves_per_second)
        self._panel_width = 240
        self._grid: Grid | None = None
        self._stats: RunStats | None = None
        self._butterfly: Location | None = None
        self._aroma: np.ndarray | None = None
        self.screen: pygame.Surface | None = None
        self.clock: pygame.time.Clock | None = None
        self.font: pygame.font.Font | None = None
        self.running = True
        self.paused = False

    def _nearest_speed(self, mps: float) -> int:
        """Return the index of the closest speed preset."""
        diffs = [abs(s - mps) for s in self._SPEED_STEPS]
        return diffs.index(min(diffs))

    # ---- Observer hooks ----------------------------------------------- #

    def on_start(self, grid: Grid, stats: RunStats) -> None:
        self._grid = grid
        self._stats = stats
        self._refresh_aroma()
        pygame.init()
        size = (
            grid.width * self.cell_size + self._panel_width,
            grid.height * self.cell_size,
        )
        self.screen = pygame.display.set_mode(size)
        pygame.display.set_caption("Meadow")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self._draw()

    def on_move(self, event: MoveEvent) -> None:
        self._butterfly = event.destination
        # A slow move stays on screen for one extra frame per slow turn.
        self._present(frames=1 + max(0, event.slow_down))

    def on_update(self, stats: RunStats) -> None:
        self._present(frames=1)

    def on_phase(self, phase: Phase, stats: RunStats) -> None:
        self._present(frames=1)

    def on_retile(self, grid: Grid) -> None:
        self._refresh_aroma()
        self._present(frames=1)

    def on_finish(self, summary: RunSummary) -> None:
        if self.screen is None:
            return
        while self.running:
            self._handle_events()
            self._draw(footer="WIN" if summary.won else "LOSE")
            if self.clock is not None:
                self.clock.tick(30)
        pygame.quit()

    # ---- Drawing ------------------------------------------------------ #

    def _present(self, frames: int) -> None:
        """Handle input and draw ``frames`` frames at the current speed."""
        if self.screen is None or not self.running:
            return
        for _ in range(frames):
            self._handle_events()
            while self.paused and self.running:
                self._handle_events()
                self._draw()
                if self.clock is not None:
                    self.clock.tick(30)
            if not self.running:
                return
            self._draw()
            if self.clock is not None:
                self.clock.tick(int(self.moves_per_second))

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._speed_index = min(
                        len(self._SPEED_STEPS) - 1,
                        self._speed_index + 1,
                    )
                    self.moves_per_second = self._SPEED_STEPS[self._speed_index]
                elif event.key == pygame.K_MINUS:
                    self._speed_index = max(0, self._speed_index - 1)
                    self.moves_per_second = self._SPEED_STEPS[self._speed_index]

    def _refresh_aroma(self) -> None:
        """Cache the strongest aroma on each tile, scaled to 0..1."""
        grid = self._grid
        if grid is None:
            return
        field = np.zeros((grid.height, grid.width), dtype=np.float64)
        for position in grid.positions():
            tile = grid.at(position)
            if tile is not None and tile.state.aromas:
                strongest = max(a.intensity for a in tile.state.aromas)
                field[position.row, position.col] = strongest
        peak = field.max()
        # Square root keeps the faint tails of the falloff visible.
        self._aroma = np.sqrt(field / peak) if peak > 0 else field

    def _draw(self, footer: str | None = None) -> None:
        """Render one frame."""
        if self.screen is None:
            return
        self.screen.fill(_BG)
        self._draw_tiles()
        self._draw_butterfly()
        self._draw_info_panel(footer)
        pygame.display.flip()

    def _draw_tiles(self) -> None:
        """Draw terrain tinted by aroma, and flowers as dots."""
        grid = self._grid
        if grid is None or self.screen is None:
            return
        cs = self.cell_size
        radius = max(1, cs // 4)
        for position in grid.positions():
            tile = grid.at(position)
            if tile is None:
                continue
            colour = np.array(_TILE_COLOURS[tile.kind], dtype=np.float64)
            if self._aroma is not None and tile.flyable:
                t = float(self._aroma[position.row, position.col]) * 0.5
                colour = colour + t * (_AROMA_COLOUR - colour)
            x, y = position.col * cs, position.row * cs
            pygame.draw.rect(self.screen, colour.astype(int).tolist(), (x, y, cs, cs))
            if tile.state.flowers:
                centre = (x + cs // 2, y + cs // 2)
                pygame.draw.circle(self.screen, _FLOWER, centre, radius)

    def _draw_butterfly(self) -> None:
        """Draw the butterfly as a bright dot."""
        if self._butterfly is None or self.screen is None:
            return
        cs = self.cell_size
        centre = (self._butterfly.x * cs + cs // 2, self._butterfly.y * cs + cs // 2)
        pygame.draw.circle(self.screen, _BUTTERFLY, centre, max(2, cs // 2))

    def _draw_info_panel(self, footer: str | None) -> None:
        """Draw a stats panel on the right side of the window."""
        if self._grid is None or self._stats is None or self.screen is None:
            return
        if self.font is None:
            return
        stats = self._stats
        panel_x = self._grid.width * self.cell_size + 10
        y = 10

        lines = [
            f"Phase: {stats.phase.value}",
            f"Speed: {self.moves_per_second:.0f} moves/s",
            f"{'PAUSED' if self.paused else 'PLAYING'}",
            "",
            "--- Run ---",
            f"Turn: {stats.turn}",
            f"Slow turns: {stats.slow_turns}",
            f"Explored: {stats.explored_tiles}/{stats.flyable_tiles}",
            f"Power spent: {stats.power_spent}",
            f"Power gained: {stats.power_consumed}",
            f"Cliff hits: {stats.cliff_collisions}",
            f"Water hits: {stats.water_collisions}",
            f"Flowers: {stats.all_flowers}",
        ]
        if stats.phase is Phase.RUNNING:
            found = len(stats.found_flowers & stats.required_flowers)
            lines.append(f"Collected: {found}/{len(stats.required_flowers)}")
        if footer:
            lines += ["", f"*** {footer} ***"]
        lines += [
            "",
            "--- Controls ---",
            "SPACE: pause",
            "+/-: speed",
            "ESC: stop drawing",
        ]

        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (panel_x, y))
            y += 18
