"""Pygame 2D view of the world around the player.

Draws the visible neighbourhood as a grid centred on the player (north
up), labels tokens, and routes mouse clicks back into the session by
cell.  Arrow keys or WASD step the player; ``T`` toggles playback of a
recorded geolocation track.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

from latticecraft.movement.sources import Direction, GeolocationMovementSource
from latticecraft.simulation.persistence import save_snapshot
from latticecraft.world.coords import CellCoord, GeoPoint, cell_bounds

if TYPE_CHECKING:
    from latticecraft.simulation.engine import GameSession

logger = logging.getLogger(__name__)

# Colour palette
_BG = (235, 235, 230)
_GRID_LINE = (150, 150, 150)
_INTERACTIVE = (200, 220, 255)
_DISTANT = (215, 215, 215)
_PLAYER = (220, 60, 60)
_TEXT = (40, 40, 40)
_WIN = (20, 140, 40)

# Token colour ramp by log2(value) (pale yellow -> deep orange)
_TOKEN_LO = np.array([255, 240, 170], dtype=np.float64)
_TOKEN_HI = np.array([230, 90, 20], dtype=np.float64)


def token_colour(value: int, goal: int) -> list[int]:
    """Blend the token ramp by how close ``value`` is to ``goal`` in doublings."""
    t = min(math.log2(value) / max(math.log2(goal), 1.0), 1.0)
    colour = _TOKEN_LO + t * (_TOKEN_HI - _TOKEN_LO)
    return colour.astype(int).tolist()


class PygameRenderer:
    """Renders a GameSession into a Pygame window.

    Attributes:
        session: The game session to display and drive.
        cell_size: Pixel size of each grid cell.
        save_path: Where ``P`` and quitting write the snapshot, if anywhere.
    """

    _KEY_DIRECTIONS: ClassVar[dict[int, Direction]] = {
        pygame.K_UP: Direction.NORTH,
        pygame.K_w: Direction.NORTH,
        pygame.K_DOWN: Direction.SOUTH,
        pygame.K_s: Direction.SOUTH,
        pygame.K_RIGHT: Direction.EAST,
        pygame.K_d: Direction.EAST,
        pygame.K_LEFT: Direction.WEST,
        pygame.K_a: Direction.WEST,
    }

    def __init__(
        self,
        session: GameSession,
        cell_size: int = 36,
        save_path: Path | None = None,
        track: list[GeoPoint] | None = None,
        fixes_per_second: float = 1.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            session: The session to render.
            cell_size: Pixel width/height per grid cell.
            save_path: Snapshot file written on ``P`` and on quit.
            track: Recorded geolocation fixes played back with ``T``.
            fixes_per_second: Playback rate of the recorded track.
        """
        self.session = session
        self.cell_size = cell_size
        self.save_path = save_path
        self.track = track or []
        self.fixes_per_second = fixes_per_second
        self.message = ""
        self._track_index = 0
        self._fix_accumulator = 0.0
        config = session.config
        self._geolocation = GeolocationMovementSource(
            origin=config.origin,
            tile_degrees=config.tile_degrees,
        )

        self._span = 2 * config.neighborhood_radius + 1
        self._panel_height = 100
        self._win_w = self._span * cell_size
        self._win_h = self._span * cell_size + self._panel_height

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Latticecraft")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.token_font = pygame.font.SysFont("monospace", max(10, cell_size // 2), bold=True)
        self.running = True

    @property
    def _playing_track(self) -> bool:
        return self.session.movement.source is self._geolocation

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, feed track fixes, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0
            self._handle_events()
            if self._playing_track:
                self._advance_track(dt)
            self._draw()

        self.session.movement.stop()
        self._save()
        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                coord = self._cell_at_pixel(*event.pos)
                if coord is not None:
                    self.message = self.session.click(coord).message
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key in self._KEY_DIRECTIONS:
                    self.session.move(self._KEY_DIRECTIONS[event.key])
                elif event.key == pygame.K_t:
                    self._toggle_track()
                elif event.key == pygame.K_p:
                    self._save()

    def _toggle_track(self) -> None:
        if self._playing_track:
            self.session.use_step_movement()
            self.message = "Manual movement."
        elif not self.track:
            self.message = "No recorded track loaded."
        else:
            self.session.use_movement(self._geolocation)
            self._track_index = 0
            self._fix_accumulator = 0.0
            self.message = "Following recorded track."

    def _advance_track(self, dt: float) -> None:
        self._fix_accumulator += self.fixes_per_second * dt
        while self._fix_accumulator >= 1.0 and self._track_index < len(self.track):
            self._fix_accumulator -= 1.0
            self._geolocation.push_fix(self.track[self._track_index])
            self._track_index += 1

    def _save(self) -> None:
        if self.save_path is None:
            return
        save_snapshot(self.save_path, self.session.snapshot())
        logger.info("saved game to %s", self.save_path)
        self.message = f"Saved to {self.save_path}."

    def _cell_at_pixel(self, px: int, py: int) -> CellCoord | None:
        """Map a window pixel back to the cell drawn there."""
        col, row = px // self.cell_size, py // self.cell_size
        if not (0 <= col < self._span and 0 <= row < self._span):
            return None
        radius = self.session.config.neighborhood_radius
        center = self.session.position
        return CellCoord(i=center.i + radius - row, j=center.j + col - radius)

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_cells()
        self._draw_player()
        self._draw_status_panel()
        pygame.display.flip()

    def _draw_cells(self) -> None:
        """Draw each visible cell and its token label."""
        cs = self.cell_size
        radius = self.session.config.neighborhood_radius
        center = self.session.position
        for view in self.session.cells():
            col = view.coord.j - center.j + radius
            row = radius - (view.coord.i - center.i)
            rect = pygame.Rect(col * cs, row * cs, cs, cs)
            fill = _INTERACTIVE if view.interactive else _DISTANT
            if view.content is not None:
                fill = self._token_colour(view.content)
            pygame.draw.rect(self.screen, fill, rect)
            pygame.draw.rect(self.screen, _GRID_LINE, rect, 1)
            if view.content is not None:
                label = self.token_font.render(str(view.content), True, _TEXT)
                self.screen.blit(label, label.get_rect(center=rect.center))

    def _token_colour(self, value: int) -> list[int]:
        return token_colour(value, self.session.config.goal_value)

    def _position_label(self) -> str:
        """Describe the player cell and its south-west corner."""
        config = self.session.config
        position = self.session.position
        south_west, _ = cell_bounds(position, config.origin, config.tile_degrees)
        return f"Cell {position.key} at ({south_west.lat:.5f}, {south_west.lng:.5f})"

    def _draw_player(self) -> None:
        cs = self.cell_size
        radius = self.session.config.neighborhood_radius
        centre = (radius * cs + cs // 2, radius * cs + cs // 2)
        pygame.draw.circle(self.screen, _PLAYER, centre, max(3, cs // 5), 2)

    def _draw_status_panel(self) -> None:
        """Draw inventory, last message and controls under the grid."""
        y = self._span * self.cell_size + 6
        held = self.session.held_token
        lines: list[tuple[str, tuple[int, int, int]]] = [
            (
                "Inventory: Empty" if held is None else f"Inventory: Token of value {held}",
                _TEXT,
            ),
            (self._position_label(), _TEXT),
            (self.message, _TEXT),
        ]
        if self.session.has_won:
            best = held if held is not None else self.session.config.goal_value
            lines.append((f"YOU WIN! You crafted a token of value {best}!", _WIN))
        else:
            lines.append(("Arrows/WASD: move  T: track  P: save  ESC: quit", _TEXT))

        for text, colour in lines:
            surf = self.font.render(text, True, colour)
            self.screen.blit(surf, (8, y))
            y += 20
