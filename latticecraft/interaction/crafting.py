"""Crafting — the pickup / place / combine rules for a single click.

The player has a one-slot ``Hand``.  Each click on a cell is resolved by
:func:`interact` against the cell's current content, in this priority
order:

1. Out of reach -> rejected (``TOO_FAR``).
2. Empty cell, empty hand -> nothing happens.
3. Token in cell, empty hand -> pick it up; the cell is emptied.
4. Empty cell, token in hand -> place it.
5. Equal tokens -> combine into one token of double value in the cell.
6. Different tokens -> rejected (``VALUE_MISMATCH``).

Rejections are returned as results, never raised, so the caller decides
how to show them.  Winning is only an observation on the produced value;
play continues afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from latticecraft.world.coords import CellCoord
    from latticecraft.world.overrides import Content
    from latticecraft.world.state import WorldState


class Outcome(Enum):
    """What a click did."""

    PICKED_UP = auto()
    PLACED = auto()
    COMBINED = auto()
    NOTHING = auto()
    TOO_FAR = auto()
    VALUE_MISMATCH = auto()


_REJECTIONS = frozenset({Outcome.TOO_FAR, Outcome.VALUE_MISMATCH})


@dataclass
class Hand:
    """The player's single inventory slot.

    Attributes:
        token: Value of the held token, or None when empty-handed.
    """

    token: int | None = None

    @property
    def is_empty(self) -> bool:
        """Return True if nothing is held."""
        return self.token is None


@dataclass(frozen=True)
class InteractionResult:
    """Outcome of one click, reported back to the rendering layer.

    Attributes:
        outcome: Which transition fired.
        coord: The clicked cell.
        held: Held token after the click.
        cell_content: Cell content after the click.
        victory: True if this click produced a value at or above the goal.
        message: Human-readable status text; empty for silent no-ops.
    """

    outcome: Outcome
    coord: CellCoord
    held: int | None
    cell_content: Content
    victory: bool = False
    message: str = ""

    @property
    def rejected(self) -> bool:
        """True for the too-far and value-mismatch outcomes."""
        return self.outcome in _REJECTIONS

    @property
    def accepted(self) -> bool:
        """True if the click changed the world or the hand."""
        return not self.rejected and self.outcome is not Outcome.NOTHING


def interact(
    world: WorldState,
    hand: Hand,
    coord: CellCoord,
    *,
    nearby: bool,
    goal_value: int,
) -> InteractionResult:
    """Apply one click at ``coord``, mutating ``world`` and ``hand``.

    Args:
        world: World state holding the clicked cell.
        hand: The player's inventory, updated in place.
        coord: The clicked cell.
        nearby: Whether ``coord`` is within interaction range.
        goal_value: Token value that counts as a win.

    Returns:
        The transition taken and the resulting hand/cell state.
    """
    cell = world.resolve(coord)
    held = hand.token

    if not nearby:
        return InteractionResult(
            outcome=Outcome.TOO_FAR,
            coord=coord,
            held=held,
            cell_content=cell,
            message="Too far away! Move closer to interact with this cell.",
        )

    if cell is None and held is None:
        return InteractionResult(
            outcome=Outcome.NOTHING,
            coord=coord,
            held=None,
            cell_content=None,
        )

    if held is None:
        hand.token = cell
        world.mutate(coord, None)
        return InteractionResult(
            outcome=Outcome.PICKED_UP,
            coord=coord,
            held=cell,
            cell_content=None,
            victory=cell >= goal_value,
            message=f"Picked up a token of value {cell}.",
        )

    if cell is None:
        world.mutate(coord, held)
        hand.token = None
        return InteractionResult(
            outcome=Outcome.PLACED,
            coord=coord,
            held=None,
            cell_content=held,
            victory=held >= goal_value,
            message=f"Placed a token of value {held}.",
        )

    if cell == held:
        crafted = cell * 2
        world.mutate(coord, crafted)
        hand.token = None
        return InteractionResult(
            outcome=Outcome.COMBINED,
            coord=coord,
            held=None,
            cell_content=crafted,
            victory=crafted >= goal_value,
            message=f"Crafted a token of value {crafted}!",
        )

    return InteractionResult(
        outcome=Outcome.VALUE_MISMATCH,
        coord=coord,
        held=held,
        cell_content=cell,
        message=(
            f"Cannot combine! Cell has {cell}, you have {held}. "
            "Values must match to combine."
        ),
    )
