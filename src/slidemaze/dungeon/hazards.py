from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import List

from .map import DungeonMap, Point, TileType
from .reachability import find_reachable

logger = logging.getLogger(__name__)

HAZARD_FRACTION = 0.05
OPEN_TILES = (TileType.FLOOR, TileType.EXIT, TileType.COIN)


@dataclass(frozen=True)
class HazardReport:
    candidates: int
    attempted: int
    placed: List[Point]

    @property
    def rolled_back(self) -> int:
        return self.attempted - len(self.placed)


def hazard_candidates(dmap: DungeonMap) -> List[Point]:
    """Inner wall tiles touching at least one open tile (4-neighbourhood), row-major.

    The exit and a coin are open ground for this test, so marking them does not
    shrink the candidate set.
    """
    out: List[Point] = []
    for y in range(1, dmap.height - 1):
        for x in range(1, dmap.width - 1):
            if dmap.get_tile(x, y) is not TileType.WALL:
                continue
            if any(dmap[n] in OPEN_TILES for n in dmap.neighbors_4(x, y)):
                out.append(Point(x, y))
    return out


def place_hazards(
    dmap: DungeonMap,
    rng: random.Random,
    start: Point,
    exit_point: Point,
    fraction: float = HAZARD_FRACTION,
) -> HazardReport:
    """
    Turn a random share of the floor-facing walls into hazards.

    Each hazard is committed on its own and rolled back straight away if it
    cuts the exit off from the start, so the exit stays reachable after every
    single placement.
    """
    candidates = hazard_candidates(dmap)
    target = math.floor(len(candidates) * fraction)
    rng.shuffle(candidates)

    placed: List[Point] = []
    for pos in candidates[:target]:
        dmap[pos] = TileType.HAZARD
        if exit_point in find_reachable(dmap, start):
            placed.append(pos)
        else:
            dmap[pos] = TileType.WALL
            logger.debug("Hazard at %s would block the exit; reverted", pos)

    logger.debug("Hazards: %d candidates, %d attempted, %d placed", len(candidates), target, len(placed))
    return HazardReport(candidates=len(candidates), attempted=target, placed=placed)
