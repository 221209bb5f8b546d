import random

import pytest

from slidemaze.dungeon.bsp import BSPPartitioner, Room
from slidemaze.dungeon.corridors import RoomConnector, connect_rooms, inward_step, place_door_stone
from slidemaze.dungeon.map import DungeonMap, Point, Rect, TileType


@pytest.fixture
def room_map():
    dmap = DungeonMap(10, 10)
    room = Room(Rect(2, 3, 5, 4))
    dmap.carve_room(room.rect)
    return dmap, room


@pytest.mark.parametrize("corner", [Point(2, 3), Point(6, 3), Point(2, 6), Point(6, 6)])
def test_corner_door_gets_no_stone(room_map, corner):
    dmap, room = room_map
    assert place_door_stone(room, corner, dmap) is None
    assert dmap.count(TileType.STONE) == 0


@pytest.mark.parametrize(
    "door, stone",
    [
        (Point(3, 3), Point(3, 4)),  # top wall -> one step down
        (Point(5, 6), Point(5, 5)),  # bottom wall -> one step up
        (Point(2, 5), Point(3, 5)),  # left wall -> one step right
        (Point(6, 4), Point(5, 4)),  # right wall -> one step left
    ],
)
def test_side_door_gets_exactly_one_stone_inside(room_map, door, stone):
    dmap, room = room_map
    assert place_door_stone(room, door, dmap) == stone
    assert dmap.points_of(TileType.STONE) == [stone]
    assert room.rect.contains(stone)


def test_door_off_the_room_edge_is_rejected(room_map):
    _dmap, room = room_map
    with pytest.raises(ValueError):
        inward_step(room, Point(4, 5))


def test_connect_rooms_records_doors_and_links_them(flood):
    dmap = DungeonMap(30, 20)
    a = Room(Rect(2, 2, 6, 5))
    b = Room(Rect(18, 11, 7, 6))
    dmap.carve_room(a.rect)
    dmap.carve_room(b.rect)

    connect_rooms(a, b, dmap, random.Random(11))

    assert len(a.doors) == 1 and len(b.doors) == 1
    assert a.doors[0] in a.door_candidates()
    assert b.doors[0] in b.door_candidates()
    assert dmap.count(TileType.STONE) == 2
    assert b.doors[0] in flood(dmap, a.doors[0])


@pytest.mark.parametrize("seed", [3, 21, 1000, 5150])
def test_every_room_is_connected(seed, flood):
    dmap = DungeonMap(40, 40)
    rng = random.Random(seed)
    tree = BSPPartitioner().partition(dmap, rng)
    carved = RoomConnector().connect(tree, dmap, rng)

    # One corridor per internal node
    assert carved == len(tree.regions) - len(tree.leaves())
    component = flood(dmap, tree.rooms[0].rect.corners()[0])
    for room in tree.rooms:
        assert room.rect.corners()[0] in component
    for p in dmap.points_of(TileType.FLOOR):
        assert p in component, f"Floor tile {p} is cut off from the rooms"


def test_representative_room_comes_from_subtree():
    dmap = DungeonMap(40, 40)
    rng = random.Random(5)
    tree = BSPPartitioner().partition(dmap, rng)
    connector = RoomConnector()
    root = tree[tree.root]
    assert root.left is not None

    def rooms_under(region_id):
        region = tree[region_id]
        if region.is_leaf():
            return [tree.rooms[region.room]]
        return rooms_under(region.left) + rooms_under(region.right)

    for child in (root.left, root.right):
        rep = connector.representative_room(tree, child, rng)
        assert any(rep is r for r in rooms_under(child))
