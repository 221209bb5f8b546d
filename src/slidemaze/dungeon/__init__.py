"""
Dungeon systems for slidemaze.

Contains BSP room generation, corridor carving, slide-move reachability,
hazard and exit placement, and the seeded generator that ties them together
and retries until a level is solvable.
"""
from .bsp import BSPPartitioner, Region, RegionTree, Room, RoomLayout
from .generator import DungeonGenerator, GeneratedLevel, GenerationExhausted, generate_level
from .map import DungeonMap, Point, Rect, TileType
from .reachability import ReachabilityResult, find_reachable

__all__ = [
    "BSPPartitioner",
    "DungeonGenerator",
    "DungeonMap",
    "GeneratedLevel",
    "GenerationExhausted",
    "Point",
    "ReachabilityResult",
    "Rect",
    "Region",
    "RegionTree",
    "Room",
    "RoomLayout",
    "TileType",
    "find_reachable",
    "generate_level",
]
