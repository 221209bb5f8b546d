from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Union

from .map import DungeonMap, Point, TileType
from .reachability import find_reachable

logger = logging.getLogger(__name__)

MIN_EXIT_DISTANCE = 5
COIN_CHANCE = 0.2


@dataclass(frozen=True)
class Placement:
    start: Point
    exit: Point
    distance: int


@dataclass(frozen=True)
class Unsolvable:
    """The layout has no exit far enough from the chosen start. Expected and frequent; the caller retries."""

    reason: str
    best_distance: int = 0


PlacementResult = Union[Placement, Unsolvable]


def select_start_and_exit(
    dmap: DungeonMap,
    rng: random.Random,
    min_distance: int = MIN_EXIT_DISTANCE,
) -> PlacementResult:
    """
    Pick a random floor tile as the start and mark the exit on one of the
    tiles that takes the most slides to reach from it.
    """
    floor_tiles = dmap.points_of(TileType.FLOOR)
    if not floor_tiles:
        return Unsolvable("no floor tiles")
    rng.shuffle(floor_tiles)
    start = floor_tiles[0]

    reach = find_reachable(dmap, start)
    max_distance = 0
    furthest: List[Point] = []
    for p, d in reach.distances.items():
        if d < min_distance or p == start:
            continue
        if d > max_distance:
            max_distance = d
            furthest = [p]
        elif d == max_distance:
            furthest.append(p)

    if max_distance < min_distance or not furthest:
        best = max(reach.distances.values())
        logger.debug("Start %s: furthest slide distance %d < %d", start, best, min_distance)
        return Unsolvable(f"furthest reachable tile is {best} slide(s) away", best_distance=best)

    exit_point = rng.choice(furthest)
    dmap[exit_point] = TileType.EXIT
    return Placement(start=start, exit=exit_point, distance=max_distance)


def place_coin(
    dmap: DungeonMap,
    rng: random.Random,
    start: Point,
    exit_point: Point,
    chance: float = COIN_CHANCE,
) -> Optional[Point]:
    """Maybe drop a bonus coin on a floor tile the player can stop on. Returns None when no coin was placed."""
    if rng.random() >= chance:
        return None
    candidates = [p for p in dmap.points_of(TileType.FLOOR) if p != start and p != exit_point]
    rng.shuffle(candidates)
    reach = find_reachable(dmap, start)
    for p in candidates:
        if p in reach:
            dmap[p] = TileType.COIN
            return p
    logger.debug("No reachable tile left for a coin")
    return None
