"""Coordinates — integer lattice cells and their geographic footprint.

Every world lookup is keyed by a ``CellCoord``.  The geo helpers here are
the only place latitude/longitude is turned into a cell, so every movement
source rounds positions the same way.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class CellCoord:
    """A tile in the infinite integer lattice.

    Attributes:
        i: Row index (grows northward with latitude).
        j: Column index (grows eastward with longitude).
    """

    i: int
    j: int

    @property
    def key(self) -> str:
        """Canonical string encoding, e.g. ``"3,-2"``."""
        return f"{self.i},{self.j}"

    def offset(self, di: int, dj: int) -> CellCoord:
        """Return the cell shifted by ``(di, dj)``."""
        return CellCoord(self.i + di, self.j + dj)


def chebyshev(a: CellCoord, b: CellCoord) -> int:
    """Chessboard distance between two cells."""
    return max(abs(a.i - b.i), abs(a.j - b.j))


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in degrees."""

    lat: float
    lng: float


def latlng_to_cell(point: GeoPoint, origin: GeoPoint, tile_degrees: float) -> CellCoord:
    """Convert a geographic position into the cell that contains it.

    Args:
        point: Position to convert.
        origin: Geographic position of the south-west corner of cell (0, 0).
        tile_degrees: Edge length of one cell in degrees.

    Returns:
        The containing cell.  Positions exactly on an edge belong to the
        cell to their north/east.
    """
    i = math.floor((point.lat - origin.lat) / tile_degrees)
    j = math.floor((point.lng - origin.lng) / tile_degrees)
    return CellCoord(i=i, j=j)


def cell_bounds(
    cell: CellCoord,
    origin: GeoPoint,
    tile_degrees: float,
) -> tuple[GeoPoint, GeoPoint]:
    """Return the (south-west, north-east) corners of a cell."""
    south_west = GeoPoint(
        lat=origin.lat + cell.i * tile_degrees,
        lng=origin.lng + cell.j * tile_degrees,
    )
    north_east = GeoPoint(
        lat=origin.lat + (cell.i + 1) * tile_degrees,
        lng=origin.lng + (cell.j + 1) * tile_degrees,
    )
    return south_west, north_east
