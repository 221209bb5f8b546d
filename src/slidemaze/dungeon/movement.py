from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .map import DIRECTIONS, DungeonMap, Point, TileType


class SlideOutcome(Enum):
    BLOCKED = auto()   # could not move at all
    STOPPED = auto()   # slid and came to rest against a wall, stone or the edge
    DIED = auto()      # ran into a hazard
    EXITED = auto()    # reached the exit


@dataclass
class SlideResult:
    new_pos: Point
    outcome: SlideOutcome
    tiles_moved: int
    coin: Optional[Point] = None

    @property
    def moved(self) -> bool:
        return self.tiles_moved > 0


def slide_player(dmap: DungeonMap, pos: Point, dx: int, dy: int) -> SlideResult:
    """
    Slide the player from ``pos`` in direction (dx, dy) until something stops
    them. Only cardinal unit directions are accepted. The exit ends the slide
    the moment it is entered, a hazard kills on contact, and a coin on the way
    is picked up (the tile becomes floor). Out-of-bounds tiles are never read.
    """
    if (dx, dy) not in DIRECTIONS:
        return SlideResult(new_pos=pos, outcome=SlideOutcome.BLOCKED, tiles_moved=0)

    current = pos
    moved = 0
    coin: Optional[Point] = None
    while True:
        nxt = current.offset(dx, dy)
        if not dmap.in_bounds(nxt.x, nxt.y):
            break
        tile = dmap[nxt]
        if tile is TileType.HAZARD:
            return SlideResult(new_pos=current, outcome=SlideOutcome.DIED, tiles_moved=moved, coin=coin)
        if tile.blocks_slide:
            break
        current = nxt
        moved += 1
        if tile is TileType.COIN:
            dmap[current] = TileType.FLOOR
            coin = current
        elif tile is TileType.EXIT:
            return SlideResult(new_pos=current, outcome=SlideOutcome.EXITED, tiles_moved=moved, coin=coin)

    outcome = SlideOutcome.STOPPED if moved else SlideOutcome.BLOCKED
    return SlideResult(new_pos=current, outcome=outcome, tiles_moved=moved, coin=coin)
