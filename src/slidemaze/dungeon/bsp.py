"""
BSP (Binary Space Partition) partitioning and room carving.

The region tree is stored as an arena: every Region lives in
``RegionTree.regions`` and refers to its parent, children and room by integer
id. Rooms are returned to the caller instead of being collected in module
state, so each generation attempt owns its own list.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .map import DungeonMap, Point, Rect

logger = logging.getLogger(__name__)

MIN_LEAF_SIZE = 6
MAX_LEAF_SIZE = 20
SPLIT_CHANCE = 0.75
ASPECT_LIMIT = 1.25
ROOM_MIN_SIZE = 4
ROOM_MARGIN = 1


def door_slots(r: Rect) -> Tuple[Point, ...]:
    """Eight fixed door slots on a room's edge, two per side, one tile in from each corner."""
    last_x = r.right() - 1
    last_y = r.bottom() - 1
    return (
        Point(r.x + 1, r.y),
        Point(last_x - 1, r.y),
        Point(r.x + 1, last_y),
        Point(last_x - 1, last_y),
        Point(r.x, r.y + 1),
        Point(r.x, last_y - 1),
        Point(last_x, r.y + 1),
        Point(last_x, last_y - 1),
    )


@dataclass
class Room:
    rect: Rect
    doors: List[Point] = field(default_factory=list)

    @property
    def center(self) -> Point:
        return self.rect.center()

    def door_candidates(self) -> Tuple[Point, ...]:
        return door_slots(self.rect)

    def freeze(self) -> "RoomLayout":
        return RoomLayout(rect=self.rect, doors=tuple(self.doors))


@dataclass(frozen=True)
class RoomLayout:
    """A room as it stands once corridors are carved. Hashable; doors can no longer change."""

    rect: Rect
    doors: Tuple[Point, ...] = ()

    def door_candidates(self) -> Tuple[Point, ...]:
        return door_slots(self.rect)


@dataclass
class Region:
    id: int
    rect: Rect
    depth: int = 0
    parent: Optional[int] = None
    left: Optional[int] = None
    right: Optional[int] = None
    room: Optional[int] = None

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


@dataclass
class RegionTree:
    regions: List[Region]
    rooms: List[Room]
    root: int = 0

    def __getitem__(self, region_id: int) -> Region:
        return self.regions[region_id]

    def leaves(self) -> List[Region]:
        return [r for r in self.regions if r.is_leaf()]

    @property
    def depth(self) -> int:
        return max(r.depth for r in self.regions)


class BSPPartitioner:
    """
    Splits the grid into leaf regions and carves one room per leaf.

    Guarantees:
    - Always terminates; the worst case is a single root leaf with one room
    - Every room keeps a wall margin inside its leaf, so the outer border of
      the grid is never carved
    """

    def __init__(
        self,
        min_leaf_size: int = MIN_LEAF_SIZE,
        max_leaf_size: int = MAX_LEAF_SIZE,
        split_chance: float = SPLIT_CHANCE,
        room_min_size: int = ROOM_MIN_SIZE,
    ) -> None:
        self.min_leaf_size = min_leaf_size
        self.max_leaf_size = max_leaf_size
        self.split_chance = split_chance
        self.room_min_size = room_min_size

    def partition(self, dmap: DungeonMap, rng: random.Random) -> RegionTree:
        tree = RegionTree(regions=[Region(0, Rect(0, 0, dmap.width, dmap.height))], rooms=[])
        leaves: List[int] = [tree.root]

        did_split = True
        while did_split:
            did_split = False
            next_leaves: List[int] = []
            for leaf_id in leaves:
                leaf = tree[leaf_id]
                wants_split = (
                    leaf.rect.w > self.max_leaf_size
                    or leaf.rect.h > self.max_leaf_size
                    or rng.random() < self.split_chance
                )
                if wants_split and self._split(tree, leaf, rng):
                    next_leaves.extend((leaf.left, leaf.right))  # type: ignore[arg-type]
                    did_split = True
                else:
                    next_leaves.append(leaf_id)
            leaves = next_leaves

        self._create_rooms(tree, tree.root, dmap, rng)
        logger.debug(
            "BSP partition: %d regions, %d rooms, depth %d", len(tree.regions), len(tree.rooms), tree.depth
        )
        return tree

    def _split(self, tree: RegionTree, leaf: Region, rng: random.Random) -> bool:
        rect = leaf.rect
        split_horiz = rng.choice([True, False])
        if rect.w / rect.h > ASPECT_LIMIT:
            split_horiz = False
        elif rect.h / rect.w > ASPECT_LIMIT:
            split_horiz = True

        max_split = (rect.h if split_horiz else rect.w) - self.min_leaf_size
        if max_split <= self.min_leaf_size:
            return False

        split = rng.randint(self.min_leaf_size, max_split)
        if split_horiz:
            left_rect = Rect(rect.x, rect.y, rect.w, split)
            right_rect = Rect(rect.x, rect.y + split, rect.w, rect.h - split)
        else:
            left_rect = Rect(rect.x, rect.y, split, rect.h)
            right_rect = Rect(rect.x + split, rect.y, rect.w - split, rect.h)

        leaf.left = self._add_region(tree, left_rect, leaf)
        leaf.right = self._add_region(tree, right_rect, leaf)
        return True

    @staticmethod
    def _add_region(tree: RegionTree, rect: Rect, parent: Region) -> int:
        region_id = len(tree.regions)
        tree.regions.append(Region(region_id, rect, depth=parent.depth + 1, parent=parent.id))
        return region_id

    def _create_rooms(self, tree: RegionTree, region_id: int, dmap: DungeonMap, rng: random.Random) -> None:
        region = tree[region_id]
        if not region.is_leaf():
            if region.left is not None:
                self._create_rooms(tree, region.left, dmap, rng)
            if region.right is not None:
                self._create_rooms(tree, region.right, dmap, rng)
            return

        leaf = region.rect
        max_w = max(self.room_min_size, leaf.w - 2 * ROOM_MARGIN)
        max_h = max(self.room_min_size, leaf.h - 2 * ROOM_MARGIN)
        w = rng.randint(self.room_min_size, max_w)
        h = rng.randint(self.room_min_size, max_h)
        x = rng.randint(leaf.x + ROOM_MARGIN, max(leaf.x + ROOM_MARGIN, leaf.right() - w - ROOM_MARGIN))
        y = rng.randint(leaf.y + ROOM_MARGIN, max(leaf.y + ROOM_MARGIN, leaf.bottom() - h - ROOM_MARGIN))

        room = Room(Rect(x, y, w, h))
        dmap.carve_room(room.rect)
        region.room = len(tree.rooms)
        tree.rooms.append(room)
