"""Entry point for ``python -m latticecraft``.

Loads the YAML config, resumes a saved game if one exists, and opens a
Pygame window around the player.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from latticecraft.movement.sources import read_track
from latticecraft.simulation.config import GameConfig
from latticecraft.simulation.engine import GameSession
from latticecraft.simulation.persistence import InvalidSnapshot, load_snapshot
from latticecraft.ui.pygame_client import PygameRenderer

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

logger = logging.getLogger("latticecraft")


def load_config(path: pathlib.Path, default: pathlib.Path = _DEFAULT_CONFIG) -> GameConfig:
    """Load ``path``, or built-in defaults if the bundled file is absent.

    Only the default path may be missing; an explicit ``--config`` that
    does not exist still raises ``FileNotFoundError``.
    """
    if path == default and not path.exists():
        logger.info("no %s found, using built-in defaults", path)
        return GameConfig()
    return GameConfig.from_yaml(path)


def main() -> None:
    """Parse CLI args, create session, launch renderer."""
    parser = argparse.ArgumentParser(
        prog="latticecraft",
        description="Latticecraft - collect and craft tokens on an endless map",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--save",
        type=pathlib.Path,
        default=None,
        help="Snapshot file to resume from and save to",
    )
    parser.add_argument(
        "--track",
        type=pathlib.Path,
        default=None,
        help="CSV of lat,lng fixes to replay with the T key",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=36,
        help="Pixel size per grid cell (default: 36)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    snapshot = None
    if args.save is not None and args.save.exists():
        try:
            snapshot = load_snapshot(args.save)
        except InvalidSnapshot as exc:
            logger.warning("ignoring unreadable save %s: %s", args.save, exc)
    session = GameSession.init(config, snapshot)

    track = read_track(args.track) if args.track is not None else None

    renderer = PygameRenderer(
        session=session,
        cell_size=args.cell_size,
        save_path=args.save,
        track=track,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
