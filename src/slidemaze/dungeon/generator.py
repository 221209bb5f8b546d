"""
Seeded dungeon generation with bounded retries.

One attempt runs every phase against a fresh grid and a fresh
``random.Random(base_seed + attempt)``:

    PARTITIONING -> CONNECTING -> PLACEMENT_SELECTION -> HAZARD_PLACEMENT
        -> ITEM_PLACEMENT -> SUCCESS

An unsolvable layout ends the attempt and the next seed is tried. Nothing is
shared between attempts, so a given base seed always yields the same level.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple, Union

from ..config import GenerationSettings
from ..exceptions import GenerationExhaustedError
from .bsp import BSPPartitioner, Room, RoomLayout
from .corridors import RoomConnector
from .hazards import HazardReport, place_hazards
from .map import DungeonMap, Point, TileSnapshot
from .placement import Placement, Unsolvable, place_coin, select_start_and_exit

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = auto()
    PARTITIONING = auto()
    CONNECTING = auto()
    PLACEMENT_SELECTION = auto()
    HAZARD_PLACEMENT = auto()
    ITEM_PLACEMENT = auto()
    SUCCESS = auto()
    RETRY = auto()


PhaseListener = Callable[[int, Phase], None]


@dataclass(frozen=True)
class GeneratedLevel:
    """A finished, solvable level. Immutable; safe to hand to renderers and to replay after a lost life."""

    width: int
    height: int
    tiles: TileSnapshot
    start: Point
    exit: Point
    item: Optional[Point]
    rooms: Tuple[RoomLayout, ...]
    seed: int
    attempts: int
    exit_distance: int
    hazards: int

    def to_map(self) -> DungeonMap:
        """A fresh mutable copy of the tiles."""
        return DungeonMap.from_snapshot(self.tiles)

    def render(self) -> str:
        return "\n".join(self.to_map().to_str_lines(start=self.start))

    def unwrap(self) -> "GeneratedLevel":
        return self


@dataclass(frozen=True)
class GenerationExhausted:
    """Every attempt was unsolvable. The caller decides how to recover."""

    attempts: int
    base_seed: int

    def unwrap(self) -> GeneratedLevel:
        raise GenerationExhaustedError(self.attempts, self.base_seed)


GenerationOutcome = Union[GeneratedLevel, GenerationExhausted]


@dataclass
class AttemptState:
    """Everything one attempt owns. Thrown away when the attempt fails."""

    seed: int
    rng: random.Random
    dmap: DungeonMap
    rooms: List[Room]
    phase: Phase = Phase.IDLE


class DungeonGenerator:
    """
    Drives partition, corridors, start/exit, hazards and coin for up to
    ``settings.max_attempts`` consecutive seeds.
    """

    def __init__(self, settings: Optional[GenerationSettings] = None, listener: Optional[PhaseListener] = None) -> None:
        self.settings = settings or GenerationSettings()
        self.listener = listener
        self.partitioner = BSPPartitioner(
            min_leaf_size=self.settings.min_leaf_size,
            max_leaf_size=self.settings.max_leaf_size,
            split_chance=self.settings.split_chance,
            room_min_size=self.settings.room_min_size,
        )
        self.connector = RoomConnector()

    def generate(self, base_seed: Optional[int] = None) -> GenerationOutcome:
        s = self.settings
        base = s.seed if base_seed is None else base_seed
        logger.info("Generating %dx%d dungeon from base seed %d", s.width, s.height, base)
        for attempt in range(s.max_attempts):
            level = self.run_attempt(base + attempt, attempt + 1)
            if level is not None:
                logger.info(
                    "Seed %d solvable on attempt %d: exit %d slide(s) away, %d hazard(s)",
                    level.seed, level.attempts, level.exit_distance, level.hazards,
                )
                return level
        logger.warning("Dungeon generation exhausted after %d attempts (base seed %d)", s.max_attempts, base)
        return GenerationExhausted(attempts=s.max_attempts, base_seed=base)

    def run_attempt(self, seed: int, attempt_number: int = 1) -> Optional[GeneratedLevel]:
        """Run one full attempt. Returns None when the layout is unsolvable."""
        s = self.settings
        state = AttemptState(
            seed=seed,
            rng=random.Random(seed),
            dmap=DungeonMap(s.width, s.height),
            rooms=[],
        )

        self._enter(state, Phase.PARTITIONING)
        tree = self.partitioner.partition(state.dmap, state.rng)
        state.rooms = tree.rooms

        self._enter(state, Phase.CONNECTING)
        self.connector.connect(tree, state.dmap, state.rng)

        self._enter(state, Phase.PLACEMENT_SELECTION)
        placement = select_start_and_exit(state.dmap, state.rng, s.min_exit_distance)
        if isinstance(placement, Unsolvable):
            logger.debug("Seed %d unsolvable: %s", seed, placement.reason)
            self._enter(state, Phase.RETRY)
            return None

        self._enter(state, Phase.HAZARD_PLACEMENT)
        hazards = place_hazards(state.dmap, state.rng, placement.start, placement.exit, s.hazard_fraction)

        self._enter(state, Phase.ITEM_PLACEMENT)
        item = place_coin(state.dmap, state.rng, placement.start, placement.exit, s.coin_chance)

        self._enter(state, Phase.SUCCESS)
        return self._finish(state, placement, hazards, item, attempt_number)

    def _enter(self, state: AttemptState, phase: Phase) -> None:
        state.phase = phase
        if self.listener is not None:
            self.listener(state.seed, phase)

    def _finish(
        self,
        state: AttemptState,
        placement: Placement,
        hazards: HazardReport,
        item: Optional[Point],
        attempt_number: int,
    ) -> GeneratedLevel:
        return GeneratedLevel(
            width=state.dmap.width,
            height=state.dmap.height,
            tiles=state.dmap.snapshot(),
            start=placement.start,
            exit=placement.exit,
            item=item,
            rooms=tuple(room.freeze() for room in state.rooms),
            seed=state.seed,
            attempts=attempt_number,
            exit_distance=placement.distance,
            hazards=len(hazards.placed),
        )


def generate_level(settings: Optional[GenerationSettings] = None, base_seed: Optional[int] = None) -> GenerationOutcome:
    """Convenience wrapper: ``DungeonGenerator(settings).generate(base_seed)``."""
    return DungeonGenerator(settings).generate(base_seed)
