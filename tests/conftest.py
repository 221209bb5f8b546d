import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from slidemaze.dungeon.map import DungeonMap, TileType  # noqa: E402


@pytest.fixture
def grid_from():
    """Build a DungeonMap from glyph rows: '#' wall, '.' floor, 'o' stone, '!' hazard, '$' coin, '>' exit."""
    def _build(*rows: str) -> DungeonMap:
        return DungeonMap.from_str_lines(rows)
    return _build


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # Settings read SLIDEMAZE_* variables; keep the developer's shell out of the tests
    import os
    for key in list(os.environ):
        if key.startswith("SLIDEMAZE_"):
            monkeypatch.delenv(key, raising=False)


def walkable_component(dmap: DungeonMap, origin) -> set:
    """4-neighbour flood fill over tiles a token may stand on."""
    from collections import deque
    seen = {origin}
    q = deque([origin])
    while q:
        p = q.popleft()
        for n in dmap.neighbors_4(p.x, p.y):
            if n in seen or dmap[n] in (TileType.WALL, TileType.STONE, TileType.HAZARD):
                continue
            seen.add(n)
            q.append(n)
    return seen


@pytest.fixture
def flood():
    return walkable_component
