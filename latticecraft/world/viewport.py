"""Viewport — the window of cells materialized around the player.

The viewport is a pure render cache.  On every position change it diffs
the new neighbourhood against the previous one, drops descriptors for
cells that left, resolves content for cells that entered, and rebuilds
the interactive flag for everything still visible.  It only ever reads
from the world state: tearing down render handles must never touch the
player's overrides, otherwise emptied cells would respawn their tokens
on the next visit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from latticecraft.world.coords import CellCoord, chebyshev
from latticecraft.world.overrides import Content
from latticecraft.world.state import WorldState

logger = logging.getLogger(__name__)


def compute_neighborhood(center: CellCoord, radius: int) -> frozenset[CellCoord]:
    """Return every cell within Chebyshev distance ``radius`` of ``center``.

    Raises:
        ValueError: If ``radius`` is negative.
    """
    if radius < 0:
        msg = f"radius must be >= 0, got {radius}"
        raise ValueError(msg)
    span = range(-radius, radius + 1)
    return frozenset(center.offset(di, dj) for di in span for dj in span)


@dataclass(frozen=True)
class CellView:
    """Renderable descriptor for one visible cell.

    Attributes:
        coord: Cell location.
        content: Token value, or None for an empty cell.
        interactive: Whether clicks on this cell are accepted.
    """

    coord: CellCoord
    content: Content
    interactive: bool


@dataclass(frozen=True)
class ViewportDiff:
    """Cells that entered, left, and stayed in view after an update."""

    entered: frozenset[CellCoord]
    exited: frozenset[CellCoord]
    retained: frozenset[CellCoord]


@dataclass
class Viewport:
    """Tracks the visible neighbourhood and its cell descriptors.

    Attributes:
        world: World state to resolve content from (read-only here).
        neighborhood_radius: Chebyshev radius of the rendered square.
        interaction_radius: Chebyshev radius within which cells are clickable.
    """

    world: WorldState
    neighborhood_radius: int = 8
    interaction_radius: int = 6
    center: CellCoord | None = field(default=None, init=False)
    _views: dict[CellCoord, CellView] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if not 0 <= self.interaction_radius <= self.neighborhood_radius:
            msg = (
                f"interaction radius {self.interaction_radius} must be within "
                f"0..{self.neighborhood_radius}"
            )
            raise ValueError(msg)

    def __len__(self) -> int:
        return len(self._views)

    def __contains__(self, coord: object) -> bool:
        return coord in self._views

    def is_interactive(self, coord: CellCoord) -> bool:
        """Return True if ``coord`` is within reach of the current center."""
        if self.center is None:
            return False
        return chebyshev(self.center, coord) <= self.interaction_radius

    def update(self, center: CellCoord) -> ViewportDiff:
        """Move the viewport to ``center`` and rebuild its descriptors.

        Args:
            center: New player position.

        Returns:
            Which cells entered, left, and stayed in view.
        """
        previous = frozenset(self._views)
        current = compute_neighborhood(center, self.neighborhood_radius)
        diff = ViewportDiff(
            entered=current - previous,
            exited=previous - current,
            retained=current & previous,
        )
        self.center = center

        for coord in diff.exited:
            del self._views[coord]
        for coord in diff.retained:
            self._views[coord] = CellView(
                coord=coord,
                content=self._views[coord].content,
                interactive=self.is_interactive(coord),
            )
        for coord in diff.entered:
            self._views[coord] = self._describe(coord)

        logger.debug(
            "viewport at %s: +%d -%d =%d",
            center.key,
            len(diff.entered),
            len(diff.exited),
            len(diff.retained),
        )
        return diff

    def refresh(self, coord: CellCoord) -> CellView | None:
        """Re-resolve one visible cell, e.g. after a click mutated it.

        Returns:
            The new descriptor, or None if ``coord`` is not in view.
        """
        if coord not in self._views:
            return None
        view = self._describe(coord)
        self._views[coord] = view
        return view

    def view(self, coord: CellCoord) -> CellView | None:
        """Return the descriptor for ``coord`` if it is in view."""
        return self._views.get(coord)

    def cells(self) -> list[CellView]:
        """Return all visible descriptors ordered by coordinate."""
        return [self._views[coord] for coord in sorted(self._views)]

    def clear(self) -> None:
        """Drop every render handle.  World state is unaffected."""
        self._views.clear()
        self.center = None

    def _describe(self, coord: CellCoord) -> CellView:
        return CellView(
            coord=coord,
            content=self.world.resolve(coord),
            interactive=self.is_interactive(coord),
        )
