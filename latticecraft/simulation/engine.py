"""GameSession — owns all game state and routes events through it.

One session is created per run with :meth:`GameSession.init`.  Events are
processed to completion one at a time:

1. A movement source reports a new position.
2. The viewport re-centres and resolves newly visible cells.
3. Clicks run the crafting rules against the world state and refresh the
   clicked cell.

The session holds a single re-entrant lock so events delivered from a
positioning thread never interleave with clicks.
"""

from __future__ import annotations

import logging
import threading

from latticecraft.interaction.crafting import Hand, InteractionResult, interact
from latticecraft.movement.sources import (
    Direction,
    MovementController,
    MovementSource,
    StepMovementSource,
)
from latticecraft.simulation.config import GameConfig
from latticecraft.simulation.persistence import GameSnapshot, InvalidSnapshot
from latticecraft.world.coords import CellCoord
from latticecraft.world.field import DeterministicField
from latticecraft.world.overrides import StateLoadError, is_valid_content
from latticecraft.world.state import WorldState
from latticecraft.world.viewport import CellView, Viewport

logger = logging.getLogger(__name__)


class GameSession:
    """The single owner of world, hand, viewport, and movement state.

    Attributes:
        config: Fixed game configuration.
        world: Field plus override store.
        viewport: Render cache around the player.
        hand: The player's one-slot inventory.
        stepper: The direction-driven movement source.
        movement: Controller for whichever source is active.
        has_won: Latched once any produced value reaches the goal.
    """

    def __init__(
        self,
        config: GameConfig,
        field: DeterministicField | None = None,
    ) -> None:
        self.config = config
        self._lock = threading.RLock()
        self.world = WorldState(
            source=field if field is not None else DeterministicField(config.seed),
            spawn_probability=config.spawn_probability,
        )
        self.viewport = Viewport(
            world=self.world,
            neighborhood_radius=config.neighborhood_radius,
            interaction_radius=config.interaction_radius,
        )
        self.hand = Hand()
        self.has_won = False
        self.stepper = StepMovementSource()
        self.movement = MovementController(self.stepper, self._on_position_changed)
        self.viewport.update(self.movement.position)

    @classmethod
    def init(
        cls,
        config: GameConfig,
        snapshot: GameSnapshot | None = None,
        *,
        field: DeterministicField | None = None,
    ) -> GameSession:
        """Create a session, optionally restoring a saved game.

        Args:
            config: Game configuration.
            snapshot: Saved state to resume from.
            field: Override the deterministic field (mainly for tests).

        Returns:
            A ready-to-play session.
        """
        session = cls(config, field=field)
        if snapshot is not None:
            session.restore(snapshot)
        logger.info(
            "session started at %s with %d overrides",
            session.position.key,
            session.world.override_count,
        )
        return session

    # -- Read-only views -----------------------------------------------------

    @property
    def position(self) -> CellCoord:
        """The player's current cell."""
        return self.movement.position

    @property
    def held_token(self) -> int | None:
        """Value in the player's hand, or None."""
        return self.hand.token

    def cells(self) -> list[CellView]:
        """Renderable descriptors for every visible cell."""
        with self._lock:
            return self.viewport.cells()

    # -- Events --------------------------------------------------------------

    def click(self, coord: CellCoord) -> InteractionResult:
        """Handle a click on ``coord``.

        Returns:
            What happened; rejections are reported, not raised.
        """
        with self._lock:
            result = interact(
                self.world,
                self.hand,
                coord,
                nearby=self.viewport.is_interactive(coord),
                goal_value=self.config.goal_value,
            )
            if result.accepted:
                self.viewport.refresh(coord)
            held = self.hand.token
            if result.victory or (held is not None and held >= self.config.goal_value):
                if not self.has_won:
                    logger.info("goal of %d reached", self.config.goal_value)
                self.has_won = True
            logger.debug("click %s: %s", coord.key, result.outcome.name)
            return result

    def move(self, direction: Direction) -> CellCoord:
        """Step the player one cell using the direction-driven source.

        Ignored while another movement source is active.

        Returns:
            The player's position afterwards.
        """
        if self.movement.source is not self.stepper:
            logger.info("step %s ignored: step movement is not active", direction.name)
            return self.position
        return self.stepper.step(direction)

    def use_movement(self, source: MovementSource) -> None:
        """Switch the active movement source, keeping the current position.

        Not called under the session lock: a positioning thread may be
        waiting on it while holding the outgoing source's emit lock.
        """
        self.movement.switch_to(source)

    def use_step_movement(self) -> None:
        """Return control to the direction-driven source."""
        self.use_movement(self.stepper)

    def _on_position_changed(self, coord: CellCoord) -> None:
        with self._lock:
            self.viewport.update(coord)

    # -- Persistence ---------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        """Capture the override delta, hand, and position."""
        with self._lock:
            return GameSnapshot(
                held_token=self.hand.token,
                player_position=self.position,
                overrides=tuple(self.world.export_overrides()),
            )

    def restore(self, snapshot: GameSnapshot) -> bool:
        """Replace the current state with ``snapshot``.

        A snapshot that fails to load resets the game to a fresh start
        instead of raising.

        Returns:
            True if the snapshot was applied, False if the game was reset.
        """
        with self._lock:
            try:
                self._apply(snapshot)
            except StateLoadError as exc:
                logger.warning("could not restore snapshot, starting fresh: %s", exc)
                self._apply(GameSnapshot(held_token=None, player_position=CellCoord(0, 0)))
                return False
            logger.info(
                "restored %d overrides at %s",
                self.world.override_count,
                self.position.key,
            )
            return True

    def _apply(self, snapshot: GameSnapshot) -> None:
        if not isinstance(snapshot, GameSnapshot):
            msg = f"expected GameSnapshot, got {type(snapshot).__name__}"
            raise InvalidSnapshot(msg)
        if not is_valid_content(snapshot.held_token):
            msg = f"invalid held token {snapshot.held_token!r}"
            raise InvalidSnapshot(msg)
        position = snapshot.player_position
        if not isinstance(position, CellCoord) or not all(
            isinstance(v, int) and not isinstance(v, bool) for v in (position.i, position.j)
        ):
            msg = f"invalid player position {position!r}"
            raise InvalidSnapshot(msg)
        # Leaves the store untouched if any entry is bad, so nothing below
        # runs against a half-loaded world.
        self.world.import_overrides(snapshot.overrides)
        self.hand.token = snapshot.held_token
        self.has_won = self._reached_goal(snapshot)
        # Handles from the previous state may show stale content.
        self.viewport.clear()
        self.movement.teleport(position)

    def _reached_goal(self, snapshot: GameSnapshot) -> bool:
        goal = self.config.goal_value
        stored = (content for _, content in self.world.export_overrides())
        values = [snapshot.held_token, *stored]
        return any(v is not None and v >= goal for v in values)
