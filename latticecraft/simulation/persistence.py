"""Persistence — the snapshot contract and a JSON file adapter.

A snapshot holds exactly the override delta plus the player's hand and
position.  Cells the player never touched are not in it, so its size
depends on how much the player changed, not on how far they walked.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from latticecraft.world.coords import CellCoord
from latticecraft.world.overrides import (
    OverrideEntry,
    StateLoadError,
    is_valid_content,
)


class InvalidSnapshot(StateLoadError):
    """Raised when a snapshot is malformed or missing fields."""


@dataclass(frozen=True)
class GameSnapshot:
    """Serializable game state.

    Attributes:
        held_token: Value in the player's hand, or None.
        player_position: The player's cell.
        overrides: Every overridden cell and its content.
    """

    held_token: int | None
    player_position: CellCoord
    overrides: tuple[OverrideEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation."""
        return {
            "held_token": self.held_token,
            "player_position": [self.player_position.i, self.player_position.j],
            "overrides": [
                [coord.i, coord.j, content] for coord, content in self.overrides
            ],
        }

    @classmethod
    def from_dict(cls, data: Any) -> GameSnapshot:
        """Build a snapshot from :meth:`to_dict` output.

        Raises:
            InvalidSnapshot: On missing fields or malformed values.
        """
        if not isinstance(data, dict):
            msg = f"snapshot must be a mapping, got {type(data).__name__}"
            raise InvalidSnapshot(msg)
        try:
            held = data["held_token"]
            position = _parse_cell(data["player_position"])
            raw_overrides = data["overrides"]
        except KeyError as exc:
            msg = f"snapshot is missing field {exc.args[0]!r}"
            raise InvalidSnapshot(msg) from exc

        if not is_valid_content(held):
            msg = f"invalid held token {held!r}"
            raise InvalidSnapshot(msg)
        if not isinstance(raw_overrides, list):
            msg = "overrides must be a list"
            raise InvalidSnapshot(msg)

        overrides: list[OverrideEntry] = []
        for raw in raw_overrides:
            if not isinstance(raw, list) or len(raw) != 3:
                msg = f"malformed override {raw!r}"
                raise InvalidSnapshot(msg)
            coord = _parse_cell(raw[:2])
            if not is_valid_content(raw[2]):
                msg = f"invalid content {raw[2]!r} for cell {coord.key}"
                raise InvalidSnapshot(msg)
            overrides.append((coord, raw[2]))

        return cls(
            held_token=held,
            player_position=position,
            overrides=tuple(overrides),
        )


def _parse_cell(raw: Any) -> CellCoord:
    if (
        not isinstance(raw, list)
        or len(raw) != 2
        or not all(isinstance(v, int) and not isinstance(v, bool) for v in raw)
    ):
        msg = f"malformed cell {raw!r}"
        raise InvalidSnapshot(msg)
    return CellCoord(i=raw[0], j=raw[1])


def save_snapshot(path: str | Path, snapshot: GameSnapshot) -> None:
    """Write ``snapshot`` to ``path`` as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(snapshot.to_dict(), f, sort_keys=True, indent=2)


def load_snapshot(path: str | Path) -> GameSnapshot:
    """Read a snapshot written by :func:`save_snapshot`.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        InvalidSnapshot: If the file is not valid snapshot JSON.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError both land here.
            msg = f"{path} is not valid snapshot JSON: {exc}"
            raise InvalidSnapshot(msg) from exc
    return GameSnapshot.from_dict(data)
