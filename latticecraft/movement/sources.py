"""Movement sources — where player position changes come from.

Every source offers the same capabilities (current position, start and
stop tracking) so the rest of the game never branches on which one is
active.  Two variants exist:

- ``StepMovementSource`` moves one cell per directional command.
- ``GeolocationMovementSource`` follows external latitude/longitude fixes,
  converted with the shared :func:`latticecraft.world.coords.latlng_to_cell`.

``MovementController`` owns the active source and hands the current
position over when switching between them.
"""

from __future__ import annotations

import csv
import logging
import threading
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import Protocol

from latticecraft.world.coords import CellCoord, GeoPoint, latlng_to_cell

logger = logging.getLogger(__name__)

PositionListener = Callable[[CellCoord], None]


class Direction(Enum):
    """Step directions as ``(di, dj)`` offsets."""

    NORTH = (1, 0)
    SOUTH = (-1, 0)
    EAST = (0, 1)
    WEST = (0, -1)


class MovementSource(Protocol):
    """Capabilities shared by every movement variant."""

    def get_current_position(self) -> CellCoord: ...

    def set_position(self, coord: CellCoord) -> None: ...

    def start_tracking(self, on_change: PositionListener) -> None: ...

    def stop_tracking(self) -> None: ...


class StepMovementSource:
    """Discrete movement driven by explicit direction commands."""

    def __init__(self, start: CellCoord | None = None) -> None:
        self._position = start if start is not None else CellCoord(0, 0)
        self._listener: PositionListener | None = None

    def get_current_position(self) -> CellCoord:
        return self._position

    def set_position(self, coord: CellCoord) -> None:
        self._position = coord

    def start_tracking(self, on_change: PositionListener) -> None:
        self._listener = on_change

    def stop_tracking(self) -> None:
        self._listener = None

    def step(self, direction: Direction) -> CellCoord:
        """Move one cell in ``direction`` and notify the listener.

        Returns:
            The new position.
        """
        di, dj = direction.value
        self._position = self._position.offset(di, dj)
        if self._listener is not None:
            self._listener(self._position)
        return self._position


class GeolocationMovementSource:
    """Continuous movement following external positioning fixes.

    Fixes may arrive from another thread.  After :meth:`stop_tracking`
    returns, no further position changes are emitted.
    """

    def __init__(
        self,
        origin: GeoPoint,
        tile_degrees: float,
        start: CellCoord | None = None,
    ) -> None:
        self.origin = origin
        self.tile_degrees = tile_degrees
        self._position = start if start is not None else CellCoord(0, 0)
        self._listener: PositionListener | None = None
        # Serializes emission against start/stop; position reads stay lock-free.
        self._lock = threading.Lock()

    def get_current_position(self) -> CellCoord:
        return self._position

    def set_position(self, coord: CellCoord) -> None:
        self._position = coord

    def start_tracking(self, on_change: PositionListener) -> None:
        with self._lock:
            self._listener = on_change

    def stop_tracking(self) -> None:
        with self._lock:
            self._listener = None

    @property
    def is_tracking(self) -> bool:
        """Return True while fixes are being forwarded."""
        with self._lock:
            return self._listener is not None

    def push_fix(self, point: GeoPoint) -> CellCoord | None:
        """Accept one positioning fix.

        Fixes received while not tracking are ignored.

        Returns:
            The resulting cell, or None if the fix was ignored.
        """
        coord = latlng_to_cell(point, self.origin, self.tile_degrees)
        with self._lock:
            listener = self._listener
            if listener is None:
                return None
            self._position = coord
            # Emitted under the lock so stop_tracking() cannot interleave.
            listener(coord)
        return coord

    def replay(self, points: Iterable[GeoPoint]) -> int:
        """Feed a recorded track of fixes in order.

        Returns:
            Number of fixes that were accepted.
        """
        accepted = 0
        for point in points:
            if self.push_fix(point) is not None:
                accepted += 1
        return accepted


class MovementController:
    """Owns the active movement source and the player's position.

    Attributes:
        source: The currently active movement source.
    """

    def __init__(self, source: MovementSource, on_change: PositionListener) -> None:
        self.source = source
        self._on_change = on_change
        self.source.start_tracking(self._on_change)

    @property
    def position(self) -> CellCoord:
        """Current authoritative player position."""
        return self.source.get_current_position()

    def switch_to(self, source: MovementSource) -> None:
        """Make ``source`` active, keeping the current position.

        The previous source stops tracking before the new one starts.
        """
        if source is self.source:
            return
        position = self.position
        self.source.stop_tracking()
        source.set_position(position)
        self.source = source
        source.start_tracking(self._on_change)
        logger.info(
            "movement switched to %s at %s",
            type(source).__name__,
            position.key,
        )

    def teleport(self, coord: CellCoord) -> None:
        """Set the position directly (used when restoring a save)."""
        self.source.set_position(coord)
        self._on_change(coord)

    def stop(self) -> None:
        """Stop tracking on the active source."""
        self.source.stop_tracking()


def read_track(path: str | Path) -> list[GeoPoint]:
    """Load a recorded track of ``lat,lng`` rows for replay.

    Blank lines and lines starting with ``#`` are skipped.

    Raises:
        ValueError: If a row does not hold two numbers.
    """
    path = Path(path)
    points: list[GeoPoint] = []
    with path.open("r", newline="") as f:
        for row in csv.reader(f):
            if not row or row[0].lstrip().startswith("#"):
                continue
            if len(row) != 2:
                msg = f"{path}: expected 'lat,lng', got {row!r}"
                raise ValueError(msg)
            points.append(GeoPoint(lat=float(row[0]), lng=float(row[1])))
    return points
