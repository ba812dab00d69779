"""Override store — the sparse record of cells the player has touched.

Only modified cells live here; everything else is derived from the
deterministic field on demand.  A stored ``None`` means "explicitly
emptied" and must never be regenerated.  Entries are never removed during
play, so the store's size tracks how many cells the player touched rather
than how far they travelled.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from latticecraft.world.coords import CellCoord

Content = int | None
OverrideEntry = tuple[CellCoord, Content]


class StateLoadError(Exception):
    """Raised when persisted world state cannot be loaded."""


def is_valid_content(content: object) -> bool:
    """Return True for ``None`` or a positive power-of-two integer."""
    if content is None:
        return True
    if isinstance(content, bool) or not isinstance(content, int):
        return False
    return content > 0 and content & (content - 1) == 0


@dataclass
class OverrideStore:
    """Mapping from modified cells to their authoritative content."""

    _cells: dict[CellCoord, Content] = field(default_factory=dict, repr=False)

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, coord: object) -> bool:
        return coord in self._cells

    def __iter__(self) -> Iterator[CellCoord]:
        return iter(self._cells)

    def is_overridden(self, coord: CellCoord) -> bool:
        """Return True if the player has ever mutated ``coord``."""
        return coord in self._cells

    def get(self, coord: CellCoord) -> Content:
        """Return the recorded content for an overridden cell.

        Raises:
            KeyError: If ``coord`` was never overridden.  Callers must check
                :meth:`is_overridden` first.
        """
        try:
            return self._cells[coord]
        except KeyError:
            msg = f"cell {coord.key} has no override"
            raise KeyError(msg) from None

    def set(self, coord: CellCoord, content: Content) -> None:
        """Mark ``coord`` as overridden with ``content`` (may be None)."""
        self._cells[coord] = content

    def serialize(self) -> list[OverrideEntry]:
        """Return every override, ordered by coordinate."""
        return sorted(self._cells.items())

    def deserialize(self, entries: Iterable[OverrideEntry]) -> None:
        """Replace the store contents with ``entries``.

        The store is left untouched if any entry is malformed.

        Raises:
            StateLoadError: On a non-coordinate key or invalid content.
        """
        loaded: dict[CellCoord, Content] = {}
        for entry in entries:
            try:
                coord, content = entry
            except (TypeError, ValueError) as exc:
                msg = f"malformed override entry: {entry!r}"
                raise StateLoadError(msg) from exc
            if not isinstance(coord, CellCoord):
                msg = f"override key is not a cell: {coord!r}"
                raise StateLoadError(msg)
            if not is_valid_content(content):
                msg = f"invalid content {content!r} for cell {coord.key}"
                raise StateLoadError(msg)
            loaded[coord] = content
        self._cells = loaded
