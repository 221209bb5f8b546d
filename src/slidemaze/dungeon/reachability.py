"""
Slide-move reachability.

A token never stops on its own: each move pushes it in one cardinal
direction until the next tile is a wall, a stone, a hazard or the edge of the
map. One such slide counts as one step no matter how many tiles it crosses.
A slide that would end against a hazard is not a move at all, since the token
would touch the hazard and die.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Set

from .map import DIRECTIONS, DungeonMap, Point, TileType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReachabilityResult:
    origin: Point
    distances: Dict[Point, int]

    @property
    def visited(self) -> Set[Point]:
        return set(self.distances)

    def __contains__(self, p: Point) -> bool:
        return p in self.distances

    def distance_to(self, p: Point) -> Optional[int]:
        return self.distances.get(p)


def slide_destination(dmap: DungeonMap, origin: Point, dx: int, dy: int) -> Optional[Point]:
    """
    Where a slide from ``origin`` in direction (dx, dy) comes to rest.

    Returns None when the token cannot move at all, or when the tile that
    stops it is a hazard.
    """
    x, y = origin.x, origin.y
    while True:
        nx, ny = x + dx, y + dy
        if not dmap.in_bounds(nx, ny):
            break
        tile = dmap.get_tile(nx, ny)
        if tile is TileType.HAZARD:
            return None
        if tile.blocks_slide:
            break
        x, y = nx, ny
    if (x, y) == (origin.x, origin.y):
        return None
    return Point(x, y)


def slide_neighbors(dmap: DungeonMap, origin: Point) -> Iterator[Point]:
    for dx, dy in DIRECTIONS:
        dest = slide_destination(dmap, origin, dx, dy)
        if dest is not None:
            yield dest


def find_reachable(dmap: DungeonMap, origin: Point) -> ReachabilityResult:
    """
    Breadth-first search over the slide-move graph from ``origin``.

    Distances are the minimum number of slides. Nothing is cached: every call
    walks the grid as it is right now, so callers may mutate the map between
    calls freely.
    """
    distances: Dict[Point, int] = {origin: 0}
    dq = deque([origin])
    while dq:
        p = dq.popleft()
        d = distances[p]
        for n in slide_neighbors(dmap, p):
            if n in distances:
                continue
            distances[n] = d + 1
            dq.append(n)
    return ReachabilityResult(origin, distances)


def is_reachable(dmap: DungeonMap, start: Point, goal: Point) -> bool:
    return goal in find_reachable(dmap, start)
