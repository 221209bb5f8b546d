from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict

from . import __version__
from .config import GenerationSettings
from .dungeon.generator import DungeonGenerator, GeneratedLevel, GenerationExhausted
from .exceptions import ConfigError
from .session import SEED_PER_LEVEL

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slidemaze",
        description="Generate a solvable slide-maze dungeon and print it",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", default=None, help="YAML file with generation settings")
    parser.add_argument("--width", type=int, default=None, help="Grid width in tiles")
    parser.add_argument("--height", type=int, default=None, help="Grid height in tiles")
    seed = parser.add_mutually_exclusive_group()
    seed.add_argument("--seed", type=int, default=None, help="Base seed")
    seed.add_argument("--level", type=int, default=None, help=f"Game level; uses base seed level*{SEED_PER_LEVEL}")
    parser.add_argument("--max-attempts", type=int, default=None, help="Attempts before giving up")
    parser.add_argument("--json", action="store_true", help="Print a JSON summary instead of the ASCII map")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    return parser


def build_settings(args: argparse.Namespace) -> GenerationSettings:
    """Config file (or SLIDEMAZE_* environment) first, then CLI flags on top."""
    base = GenerationSettings.from_yaml(args.config) if args.config else GenerationSettings.from_env()
    seed = args.seed
    if args.level is not None:
        seed = args.level * SEED_PER_LEVEL
    return base.with_overrides(
        width=args.width,
        height=args.height,
        seed=seed,
        max_attempts=args.max_attempts,
    )


def level_summary(level: GeneratedLevel) -> Dict[str, Any]:
    return {
        "seed": level.seed,
        "attempts": level.attempts,
        "width": level.width,
        "height": level.height,
        "start": [level.start.x, level.start.y],
        "exit": [level.exit.x, level.exit.y],
        "item": [level.item.x, level.item.y] if level.item else None,
        "exit_distance": level.exit_distance,
        "hazards": level.hazards,
        "rooms": [
            {
                "rect": [r.rect.x, r.rect.y, r.rect.w, r.rect.h],
                "doors": [[d.x, d.y] for d in r.doors],
            }
            for r in level.rooms
        ],
        "tiles": level.to_map().to_str_lines(),
    }


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        settings = build_settings(args)
    except (ConfigError, ValueError) as e:
        parser.error(str(e))

    outcome = DungeonGenerator(settings).generate()
    if isinstance(outcome, GenerationExhausted):
        print(
            f"error: no solvable dungeon after {outcome.attempts} attempt(s) from seed {outcome.base_seed}",
            file=sys.stderr,
        )
        return 1

    if args.json:
        print(json.dumps(level_summary(outcome), indent=2, sort_keys=True))
    else:
        print(outcome.render())
    return 0


if __name__ == "__main__":
    sys.exit(main())
