import math
import random

import pytest

from slidemaze.dungeon.bsp import BSPPartitioner
from slidemaze.dungeon.corridors import RoomConnector
from slidemaze.dungeon.hazards import hazard_candidates, place_hazards
from slidemaze.dungeon.map import DungeonMap, Point, TileType
from slidemaze.dungeon.placement import Placement, select_start_and_exit
from slidemaze.dungeon.reachability import find_reachable


def _layout_with_exit(first_seed):
    """Partition + corridors + start/exit on the first seed (from first_seed) that is solvable."""
    for seed in range(first_seed, first_seed + 50):
        rng = random.Random(seed)
        dmap = DungeonMap(40, 40)
        tree = BSPPartitioner().partition(dmap, rng)
        RoomConnector().connect(tree, dmap, rng)
        placement = select_start_and_exit(dmap, rng)
        if isinstance(placement, Placement):
            return dmap, rng, placement
    pytest.fail("no solvable layout in 50 seeds")


def test_candidates_are_inner_walls_facing_floor(grid_from):
    dmap = grid_from(
        "######",
        "#..###",
        "######",
        "######",
    )
    assert hazard_candidates(dmap) == [Point(3, 1), Point(1, 2), Point(2, 2)]


def test_wall_touching_only_exit_or_coin_is_a_candidate(grid_from):
    dmap = grid_from(
        "########",
        "#..>#$##",
        "########",
    )
    assert hazard_candidates(dmap) == [Point(4, 1), Point(6, 1)]


def test_wall_behind_exit_is_tried_and_rolled_back(grid_from):
    dmap = grid_from(
        "#######",
        "#...>##",
        "#######",
    )
    assert hazard_candidates(dmap) == [Point(5, 1)]
    report = place_hazards(dmap, random.Random(2), Point(1, 1), Point(4, 1), fraction=1.0)
    # The slide to the exit rests against (5,1), so a hazard there is reverted
    assert report.attempted == 1
    assert report.placed == []
    assert dmap.get_tile(5, 1) == TileType.WALL


def test_blocking_hazard_is_rolled_back(grid_from):
    dmap = grid_from(
        "########",
        "#.....##",
        "########",
    )
    report = place_hazards(dmap, random.Random(1), Point(1, 1), Point(5, 1), fraction=1.0)
    # (6,1) is the only inner wall; a hazard there would kill the slide that reaches the exit
    assert report.candidates == 1
    assert report.attempted == 1
    assert report.placed == []
    assert report.rolled_back == 1
    assert dmap.get_tile(6, 1) == TileType.WALL


def test_harmless_hazard_is_kept(grid_from):
    dmap = grid_from(
        "#######",
        "#....##",
        "#.#####",
        "#>#####",
        "#######",
    )
    # None of the open-facing walls ends the two slides from (4,1) to the exit
    report = place_hazards(dmap, random.Random(4), Point(4, 1), Point(1, 3), fraction=1.0)
    assert report.attempted == 5
    assert report.rolled_back == 0
    assert set(report.placed) == {Point(5, 1), Point(2, 2), Point(3, 2), Point(4, 2), Point(2, 3)}
    assert find_reachable(dmap, Point(4, 1)).distance_to(Point(1, 3)) == 2


@pytest.mark.parametrize("seed", [1000, 2000, 3000])
def test_target_count_and_exit_still_reachable(seed):
    dmap, rng, placement = _layout_with_exit(seed)
    candidates = hazard_candidates(dmap)
    report = place_hazards(dmap, rng, placement.start, placement.exit)

    assert report.candidates == len(candidates)
    assert report.attempted == math.floor(len(candidates) * 0.05)
    assert set(report.placed) <= set(candidates)
    assert dmap.count(TileType.HAZARD) == len(report.placed)
    assert placement.exit in find_reachable(dmap, placement.start)


@pytest.mark.parametrize("seed", [1000, 7000])
def test_every_commit_keeps_exit_reachable(seed):
    dmap, rng, placement = _layout_with_exit(seed)
    before = dmap.snapshot()
    report = place_hazards(dmap, rng, placement.start, placement.exit, fraction=0.3)

    # Replay the committed hazards one at a time on the untouched layout
    replay = DungeonMap.from_snapshot(before)
    for pos in report.placed:
        replay[pos] = TileType.HAZARD
        assert placement.exit in find_reachable(replay, placement.start), f"Commit at {pos} cut off the exit"
    assert replay.snapshot() == dmap.snapshot()


def test_hazards_never_on_border():
    dmap, rng, placement = _layout_with_exit(42)
    place_hazards(dmap, rng, placement.start, placement.exit, fraction=0.5)
    for p in dmap.points_of(TileType.HAZARD):
        assert not dmap.is_border(p.x, p.y)


def test_same_seed_same_hazards():
    d1, rng1, p1 = _layout_with_exit(1234)
    d2, rng2, p2 = _layout_with_exit(1234)
    r1 = place_hazards(d1, rng1, p1.start, p1.exit)
    r2 = place_hazards(d2, rng2, p2.start, p2.exit)
    assert r1.placed == r2.placed
    assert d1.snapshot() == d2.snapshot()
