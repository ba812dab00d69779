"""Config — load game parameters from YAML files.

All tunables (tile size, radii, spawn rate, goal) live in YAML and are
parsed into a typed dataclass here.  They are fixed for the lifetime of
a session.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from latticecraft.world.coords import GeoPoint


@dataclass(frozen=True)
class GameConfig:
    """Top-level game configuration.

    Attributes:
        origin_lat: Latitude of the south-west corner of cell (0, 0).
        origin_lng: Longitude of the south-west corner of cell (0, 0).
        tile_degrees: Edge length of one cell in degrees.
        neighborhood_radius: Chebyshev radius of the rendered window.
        interaction_radius: Chebyshev radius within which cells are clickable.
        spawn_probability: Chance an untouched cell holds a token.
        goal_value: Token value that counts as a win.
        seed: World seed mixed into the deterministic field.
    """

    origin_lat: float = 36.997936938057016
    origin_lng: float = -122.05703507501151
    tile_degrees: float = 1e-4
    neighborhood_radius: int = 8
    interaction_radius: int = 6
    spawn_probability: float = 0.3
    goal_value: int = 64
    seed: int = 0

    def __post_init__(self) -> None:
        """Reject values the world cannot run with."""
        if self.tile_degrees <= 0:
            msg = f"tile_degrees must be positive, got {self.tile_degrees}"
            raise ValueError(msg)
        if not 0 <= self.interaction_radius <= self.neighborhood_radius:
            msg = (
                "interaction_radius must be between 0 and neighborhood_radius, "
                f"got {self.interaction_radius} > {self.neighborhood_radius}"
            )
            raise ValueError(msg)
        if not 0.0 <= self.spawn_probability <= 1.0:
            msg = f"spawn_probability must be in [0, 1], got {self.spawn_probability}"
            raise ValueError(msg)
        if self.goal_value <= 0:
            msg = f"goal_value must be positive, got {self.goal_value}"
            raise ValueError(msg)

    @property
    def origin(self) -> GeoPoint:
        """Geographic anchor of the lattice."""
        return GeoPoint(lat=self.origin_lat, lng=self.origin_lng)

    @classmethod
    def from_yaml(cls, path: str | Path) -> GameConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated GameConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If a value is out of range.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            origin_lat=data.get("origin_lat", cls.origin_lat),
            origin_lng=data.get("origin_lng", cls.origin_lng),
            tile_degrees=data.get("tile_degrees", cls.tile_degrees),
            neighborhood_radius=data.get(
                "neighborhood_radius",
                cls.neighborhood_radius,
            ),
            interaction_radius=data.get(
                "interaction_radius",
                cls.interaction_radius,
            ),
            spawn_probability=data.get(
                "spawn_probability",
                cls.spawn_probability,
            ),
            goal_value=data.get("goal_value", cls.goal_value),
            seed=data.get("seed", cls.seed),
        )
