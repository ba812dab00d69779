"""Deterministic field — the procedural source of natural cell content.

The field maps a string key to a reproducible number in ``[0, 1)``.  Keys
are hashed with SHA-256 (Python's builtin ``hash`` is salted per process)
and the top 53 bits of the digest become the draw, so the same key gives
the same value on every run, platform, and library version.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from latticecraft.world.coords import CellCoord

_MANTISSA_BITS = 53


@dataclass(frozen=True)
class DeterministicField:
    """Pure key -> ``[0, 1)`` function.

    Attributes:
        seed: World seed mixed into every key.  ``0`` leaves keys untouched.
    """

    seed: int = 0

    def value(self, key: str) -> float:
        """Return the reproducible draw for ``key``."""
        if self.seed:
            key = f"{self.seed}:{key}"
        digest = hashlib.sha256(key.encode("utf-8")).digest()
        bits = int.from_bytes(digest[:8], byteorder="big") >> (64 - _MANTISSA_BITS)
        return bits / (1 << _MANTISSA_BITS)

    def natural_content(self, coord: CellCoord, spawn_probability: float) -> int | None:
        """Return the generated token for ``coord``, or None if it spawns empty.

        Presence and value come from two independently keyed draws so they
        are not correlated.
        """
        if self.value(coord.key) >= spawn_probability:
            return None
        return 1 if self.value(f"{coord.key},value") < 0.5 else 2
