"""Shared fixtures for the Latticecraft test suite."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from latticecraft.simulation.config import GameConfig
from latticecraft.simulation.engine import GameSession
from latticecraft.world.coords import CellCoord
from latticecraft.world.field import DeterministicField
from latticecraft.world.state import WorldState


@dataclass(frozen=True)
class FixedField(DeterministicField):
    """A field whose natural content is given explicitly per cell."""

    contents: dict[CellCoord, int] = field(default_factory=dict)

    def natural_content(self, coord: CellCoord, spawn_probability: float) -> int | None:
        return self.contents.get(coord)


@pytest.fixture
def default_config() -> GameConfig:
    """Default game config (no YAML file needed)."""
    return GameConfig()


@pytest.fixture
def small_config() -> GameConfig:
    """A small window for fast tests: radius 3, reach 2."""
    return GameConfig(neighborhood_radius=3, interaction_radius=2)


@pytest.fixture
def fixed_field() -> FixedField:
    """Natural tokens: 1 at (2, 2), 2 at (1, 1) and (0, 2), 1 at (-1, 0)."""
    return FixedField(
        contents={
            CellCoord(2, 2): 1,
            CellCoord(1, 1): 2,
            CellCoord(0, 2): 2,
            CellCoord(-1, 0): 1,
        },
    )


@pytest.fixture
def fixed_world(fixed_field: FixedField) -> WorldState:
    """World state backed by the fixed field."""
    return WorldState(source=fixed_field)


@pytest.fixture
def session(default_config: GameConfig, fixed_field: FixedField) -> GameSession:
    """A fresh session at (0, 0) over the fixed field."""
    return GameSession.init(default_config, field=fixed_field)
