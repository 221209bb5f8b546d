from slidemaze.dungeon.generator import DungeonGenerator
from slidemaze.dungeon.map import Point
from slidemaze.dungeon.reachability import find_reachable, is_reachable, slide_destination, slide_neighbors

LOOP = (
    "#######",
    "#.....#",
    "#.###.#",
    "#.....#",
    "#######",
)


def test_each_slide_counts_as_one_step(grid_from):
    dmap = grid_from(*LOOP)
    reach = find_reachable(dmap, Point(1, 1))
    assert reach.distances == {
        Point(1, 1): 0,
        Point(5, 1): 1,
        Point(1, 3): 1,
        Point(5, 3): 2,
    }
    # Tiles passed over mid-slide are not stopping points
    assert Point(3, 1) not in reach


def test_slide_into_hazard_is_not_a_move(grid_from):
    rows = list(LOOP)
    rows[1] = "#.....!"
    dmap = grid_from(*rows)
    assert slide_destination(dmap, Point(1, 1), 1, 0) is None
    reach = find_reachable(dmap, Point(1, 1))
    # (5,1) is now only reachable by coming up the right-hand side
    assert reach.distance_to(Point(5, 1)) == 3


def test_stone_stops_a_slide_like_a_wall(grid_from):
    dmap = grid_from(
        "#######",
        "#..o..#",
        "#######",
    )
    assert slide_destination(dmap, Point(1, 1), 1, 0) == Point(2, 1)
    assert not is_reachable(dmap, Point(1, 1), Point(5, 1))


def test_slide_stops_at_map_edge(grid_from):
    dmap = grid_from(
        "....",
        "####",
        "####",
    )
    assert slide_destination(dmap, Point(0, 0), 1, 0) == Point(3, 0)
    assert slide_destination(dmap, Point(0, 0), -1, 0) is None
    assert slide_destination(dmap, Point(0, 0), 0, -1) is None


def test_coin_and_exit_do_not_stop_a_slide(grid_from):
    dmap = grid_from(
        "#######",
        "#.$.>.#",
        "#######",
    )
    assert slide_destination(dmap, Point(1, 1), 1, 0) == Point(5, 1)


def test_origin_is_visited_at_distance_zero(grid_from):
    dmap = grid_from("###", "#.#", "###")
    reach = find_reachable(dmap, Point(1, 1))
    assert reach.visited == {Point(1, 1)}
    assert reach.distance_to(Point(1, 1)) == 0
    assert reach.distance_to(Point(0, 0)) is None


def test_repeated_queries_on_unchanged_map_are_identical():
    level = DungeonGenerator().generate(1000).unwrap()
    dmap = level.to_map()
    first = find_reachable(dmap, level.start)
    second = find_reachable(dmap, level.start)
    assert first.visited == second.visited
    assert first.distances == second.distances


def test_distances_are_shortest(grid_from):
    dmap = grid_from(
        "#########",
        "#.......#",
        "#.#####.#",
        "#.#...#.#",
        "#.#.#.#.#",
        "#...#...#",
        "#########",
    )
    reach = find_reachable(dmap, Point(1, 1))
    for p, d in reach.distances.items():
        if d == 0:
            continue
        # Some tile one slide closer must lead here
        assert any(
            p in set(slide_neighbors(dmap, q)) for q, dq in reach.distances.items() if dq == d - 1
        )
