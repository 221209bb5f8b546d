from __future__ import annotations

import logging
import random
from typing import List, Optional

from .bsp import RegionTree, Room
from .map import DungeonMap, Point, TileType

logger = logging.getLogger(__name__)


class RoomConnector:
    """Connects sibling subtrees of a BSP tree with one L-shaped corridor each, bottom-up."""

    def connect(self, tree: RegionTree, dmap: DungeonMap, rng: random.Random) -> int:
        """Carve all corridors for ``tree``. Returns the number of corridors carved."""
        return self._connect_children(tree, tree.root, dmap, rng)

    def _connect_children(self, tree: RegionTree, region_id: int, dmap: DungeonMap, rng: random.Random) -> int:
        region = tree[region_id]
        if region.left is None or region.right is None:
            return 0
        carved = self._connect_children(tree, region.left, dmap, rng)
        carved += self._connect_children(tree, region.right, dmap, rng)
        left_room = self.representative_room(tree, region.left, rng)
        right_room = self.representative_room(tree, region.right, rng)
        if left_room and right_room:
            connect_rooms(left_room, right_room, dmap, rng)
            carved += 1
        return carved

    def representative_room(self, tree: RegionTree, region_id: int, rng: random.Random) -> Optional[Room]:
        """Room standing in for the whole subtree rooted at ``region_id``."""
        region = tree[region_id]
        if region.is_leaf():
            return tree.rooms[region.room] if region.room is not None else None
        rooms: List[Room] = []
        for child in (region.left, region.right):
            if child is None:
                continue
            r = self.representative_room(tree, child, rng)
            if r:
                rooms.append(r)
        if not rooms:
            return None
        return rng.choice(rooms)


def connect_rooms(a: Room, b: Room, dmap: DungeonMap, rng: random.Random) -> None:
    door_a = rng.choice(a.door_candidates())
    door_b = rng.choice(b.door_candidates())
    a.doors.append(door_a)
    b.doors.append(door_b)

    if rng.random() < 0.5:
        # horizontal then vertical
        dmap.carve_h_corridor(door_a.x, door_b.x, door_a.y)
        dmap.carve_v_corridor(door_a.y, door_b.y, door_b.x)
    else:
        # vertical then horizontal
        dmap.carve_v_corridor(door_a.y, door_b.y, door_a.x)
        dmap.carve_h_corridor(door_a.x, door_b.x, door_b.y)

    place_door_stone(a, door_a, dmap)
    place_door_stone(b, door_b, dmap)
    logger.debug("Corridor %s -> %s", door_a, door_b)


def inward_step(room: Room, door: Point) -> Optional[Point]:
    """
    Tile one step into ``room`` from ``door``, perpendicular to the wall the
    door sits on. Corner doors have no single wall, so they yield None.
    """
    r = room.rect
    if door in r.corners():
        return None
    if door.y == r.y:
        return door.offset(0, 1)
    if door.y == r.bottom() - 1:
        return door.offset(0, -1)
    if door.x == r.x:
        return door.offset(1, 0)
    if door.x == r.right() - 1:
        return door.offset(-1, 0)
    raise ValueError(f"Door {door} is not on the edge of room {r}")


def place_door_stone(room: Room, door: Point, dmap: DungeonMap) -> Optional[Point]:
    """Drop a sight-blocking stone just inside a non-corner door. Returns where it went."""
    stone = inward_step(room, door)
    if stone is None:
        return None
    dmap[stone] = TileType.STONE
    return stone
