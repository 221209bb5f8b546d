from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Tuple

logger = logging.getLogger(__name__)


class TileType(Enum):
    WALL = 0
    FLOOR = 1
    STONE = 2
    HAZARD = 3
    COIN = 4
    EXIT = 5

    @property
    def blocks_slide(self) -> bool:
        """True for tiles that stop a sliding token before it enters them."""
        return self in (TileType.WALL, TileType.STONE, TileType.HAZARD)

    @property
    def glyph(self) -> str:
        return _GLYPHS[self]


_GLYPHS = {
    TileType.WALL: '#',
    TileType.FLOOR: '.',
    TileType.STONE: 'o',
    TileType.HAZARD: '!',
    TileType.COIN: '$',
    TileType.EXIT: '>',
}

# Ordered for deterministic traversal: up, right, down, left
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Point":
        return Point(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    def right(self) -> int:
        return self.x + self.w

    def bottom(self) -> int:
        return self.y + self.h

    def center(self) -> Point:
        return Point(self.x + self.w // 2, self.y + self.h // 2)

    def contains(self, p: Point) -> bool:
        return (self.x <= p.x < self.right()) and (self.y <= p.y < self.bottom())

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        last_x = self.right() - 1
        last_y = self.bottom() - 1
        return (
            Point(self.x, self.y),
            Point(last_x, self.y),
            Point(self.x, last_y),
            Point(last_x, last_y),
        )


TileSnapshot = Tuple[Tuple[int, ...], ...]


class DungeonMap:
    """
    Mutable tile grid owned by a single generation attempt. All tile access is
    bounds-checked; reads outside the grid raise, writes outside the grid are
    logged and ignored so a carving bug can never corrupt memory or wrap around.
    """

    def __init__(self, width: int, height: int, default: TileType = TileType.WALL) -> None:
        if width < 3 or height < 3:
            raise ValueError(f"Grid must be at least 3x3, got {width}x{height}")
        self.width = width
        self.height = height
        self._tiles: List[List[TileType]] = [
            [default for _ in range(width)] for _ in range(height)
        ]

    @classmethod
    def from_snapshot(cls, snapshot: TileSnapshot) -> "DungeonMap":
        height = len(snapshot)
        width = len(snapshot[0]) if height else 0
        dmap = cls(width, height)
        for y, row in enumerate(snapshot):
            for x, value in enumerate(row):
                dmap._tiles[y][x] = TileType(value)
        return dmap

    @classmethod
    def from_str_lines(cls, lines: Iterable[str]) -> "DungeonMap":
        """Build a map from glyph rows (see TileType.glyph). Handy for hand-made test layouts."""
        by_glyph = {t.glyph: t for t in TileType}
        rows = [line for line in lines if line]
        dmap = cls(len(rows[0]), len(rows))
        for y, line in enumerate(rows):
            if len(line) != dmap.width:
                raise ValueError(f"Row {y} has width {len(line)}, expected {dmap.width}")
            for x, ch in enumerate(line):
                dmap._tiles[y][x] = by_glyph[ch]
        return dmap

    # ---- Bounds ----------------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_border(self, x: int, y: int) -> bool:
        return x in (0, self.width - 1) or y in (0, self.height - 1)

    def get_tile(self, x: int, y: int) -> TileType:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x},{y}) is outside the {self.width}x{self.height} grid")
        return self._tiles[y][x]

    def set_tile(self, x: int, y: int, t: TileType) -> None:
        if not self.in_bounds(x, y):
            logger.error("Ignoring write of %s outside the grid at (%d,%d)", t.name, x, y)
            return
        self._tiles[y][x] = t

    def __getitem__(self, p: Point) -> TileType:
        return self.get_tile(p.x, p.y)

    def __setitem__(self, p: Point, t: TileType) -> None:
        self.set_tile(p.x, p.y, t)

    # ---- Lookups ---------------------------------------------------------
    def neighbors_4(self, x: int, y: int) -> Iterator[Point]:
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield Point(nx, ny)

    def points_of(self, tile: TileType) -> List[Point]:
        """All coordinates holding ``tile``, in row-major order."""
        return [
            Point(x, y)
            for y in range(self.height)
            for x in range(self.width)
            if self._tiles[y][x] is tile
        ]

    def count(self, tile: TileType) -> int:
        return sum(row.count(tile) for row in self._tiles)

    # ---- Carving ---------------------------------------------------------
    def carve_room(self, rect: Rect) -> None:
        for yy in range(rect.y, rect.bottom()):
            for xx in range(rect.x, rect.right()):
                self.set_tile(xx, yy, TileType.FLOOR)

    def carve_h_corridor(self, x1: int, x2: int, y: int) -> None:
        if x2 < x1:
            x1, x2 = x2, x1
        for xx in range(x1, x2 + 1):
            self._carve_wall(xx, y)

    def carve_v_corridor(self, y1: int, y2: int, x: int) -> None:
        if y2 < y1:
            y1, y2 = y2, y1
        for yy in range(y1, y2 + 1):
            self._carve_wall(x, yy)

    def _carve_wall(self, x: int, y: int) -> None:
        # Corridors only open walls; stones and floor already on the path stay as they are.
        if self.get_tile(x, y) is TileType.WALL:
            self._tiles[y][x] = TileType.FLOOR

    # ---- Output ----------------------------------------------------------
    def to_str_lines(self, start: Point | None = None) -> List[str]:
        lines: List[str] = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                if start is not None and start.x == x and start.y == y:
                    row.append('@')
                else:
                    row.append(self._tiles[y][x].glyph)
            lines.append(''.join(row))
        return lines

    def snapshot(self) -> TileSnapshot:
        """
        Deterministic, hashable snapshot of the tiles for equality tests and for
        handing the finished grid to renderers.
        """
        return tuple(tuple(self._tiles[y][x].value for x in range(self.width)) for y in range(self.height))
