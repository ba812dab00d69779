"""World state — the single read/write API for cell content.

``WorldState`` composes the deterministic field with the override store.
It is the only writer of cell content; viewports and the interaction
rules go through :meth:`WorldState.resolve` and :meth:`WorldState.mutate`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from latticecraft.world.coords import CellCoord
from latticecraft.world.field import DeterministicField
from latticecraft.world.overrides import (
    Content,
    OverrideEntry,
    OverrideStore,
    is_valid_content,
)

logger = logging.getLogger(__name__)


@dataclass
class WorldState:
    """Lazily generated world with sparse player overrides.

    Attributes:
        source: Source of natural content for untouched cells.
        spawn_probability: Chance that an untouched cell holds a token.
    """

    source: DeterministicField
    spawn_probability: float = 0.3
    _store: OverrideStore = field(default_factory=OverrideStore, repr=False)

    def resolve(self, coord: CellCoord) -> Content:
        """Return the current content of ``coord``.

        Overridden cells return their recorded content.  Untouched cells
        are computed from the field and not stored.
        """
        if self._store.is_overridden(coord):
            return self._store.get(coord)
        return self.source.natural_content(coord, self.spawn_probability)

    def mutate(self, coord: CellCoord, content: Content) -> None:
        """Record ``content`` as the authoritative value of ``coord``.

        Raises:
            ValueError: If ``content`` is not None or a power-of-two token.
        """
        if not is_valid_content(content):
            msg = f"invalid token value {content!r}"
            raise ValueError(msg)
        self._store.set(coord, content)
        logger.debug("cell %s -> %s", coord.key, content)

    def is_modified(self, coord: CellCoord) -> bool:
        """Return True if ``coord`` carries a player override."""
        return self._store.is_overridden(coord)

    @property
    def override_count(self) -> int:
        """Number of cells the player has touched."""
        return len(self._store)

    def export_overrides(self) -> list[OverrideEntry]:
        """Return the override delta for snapshotting."""
        return self._store.serialize()

    def import_overrides(self, entries: Iterable[OverrideEntry]) -> None:
        """Replace the override delta from a snapshot.

        Raises:
            StateLoadError: If any entry is malformed.
        """
        self._store.deserialize(entries)
        logger.debug("loaded %d overrides", len(self._store))
