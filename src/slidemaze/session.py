from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, List, Optional

from .config import GenerationSettings
from .dungeon.generator import DungeonGenerator, GeneratedLevel, GenerationExhausted
from .dungeon.map import DungeonMap, Point
from .dungeon.movement import SlideOutcome, SlideResult, slide_player

logger = logging.getLogger(__name__)

STARTING_LIVES = 3
SEED_PER_LEVEL = 1000


class SessionEvent(Enum):
    """Events emitted by GameSession to notify UI or systems."""

    LEVEL_STARTED = auto()
    PLAYER_MOVED = auto()
    COIN_COLLECTED = auto()
    LIFE_LOST = auto()
    LEVEL_CLEARED = auto()
    GAME_OVER = auto()
    GENERATION_FAILED = auto()


class SessionState(Enum):
    TITLE = auto()
    PLAYING = auto()


SessionListener = Callable[[SessionEvent, "GameSession"], None]


class GameSession:
    """Holds the current run: level number, lives, the level's map and the player position.

    Level ``n`` is generated from base seed ``n * 1000``. Losing a life replays
    the very same level (tiles, start, exit and coin) without regenerating it;
    losing the last life, or failing to generate a level at all, sends the
    session back to the title state.
    """

    def __init__(self, settings: Optional[GenerationSettings] = None, lives: int = STARTING_LIVES) -> None:
        self._listeners: List[SessionListener] = []
        self._generator = DungeonGenerator(settings)
        self.starting_lives = lives
        self.state = SessionState.TITLE
        self.level_number = 1
        self.lives = lives
        self.coins = 0
        self._coins_at_entry = 0
        self.level: Optional[GeneratedLevel] = None
        self.map: Optional[DungeonMap] = None
        self.player: Optional[Point] = None

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as ex:  # pragma: no cover - listeners shouldn't crash the session
                logger.exception("Listener errored on %s: %s", event, ex)

    # ---- Lifecycle -------------------------------------------------------
    def start(self) -> bool:
        """Begin a new run at level 1. Returns False if the first level could not be generated."""
        self.level_number = 1
        self.lives = self.starting_lives
        self.coins = 0
        return self._load_level()

    def _load_level(self) -> bool:
        outcome = self._generator.generate(self.level_number * SEED_PER_LEVEL)
        if isinstance(outcome, GenerationExhausted):
            logger.error(
                "Level %d could not be generated after %d attempts; returning to title",
                self.level_number, outcome.attempts,
            )
            self._to_title()
            self._emit(SessionEvent.GENERATION_FAILED)
            return False
        self.level = outcome
        self._enter_level()
        return True

    def _enter_level(self) -> None:
        assert self.level is not None
        self.map = self.level.to_map()
        self.player = self.level.start
        self.state = SessionState.PLAYING
        self._coins_at_entry = self.coins
        logger.info("Level %d (seed %d), lives %d, player at %s", self.level_number, self.level.seed, self.lives, self.player)
        self._emit(SessionEvent.LEVEL_STARTED)

    def _to_title(self) -> None:
        self.state = SessionState.TITLE
        self.level_number = 1
        self.lives = self.starting_lives
        self.level = None
        self.map = None
        self.player = None

    # ---- Play ------------------------------------------------------------
    def move(self, dx: int, dy: int) -> SlideResult:
        """Slide the player one move. Death and level clear are handled here."""
        if self.state is not SessionState.PLAYING or self.map is None or self.player is None:
            raise RuntimeError("No level in progress; call start() first")
        result = slide_player(self.map, self.player, dx, dy)
        self.player = result.new_pos
        if result.moved:
            self._emit(SessionEvent.PLAYER_MOVED)
        if result.coin is not None:
            self.coins += 1
            self._emit(SessionEvent.COIN_COLLECTED)

        if result.outcome is SlideOutcome.DIED:
            logger.info("Player hit a hazard at %s", result.new_pos)
            self.lose_life()
        elif result.outcome is SlideOutcome.EXITED:
            logger.info("Level %d cleared", self.level_number)
            self._emit(SessionEvent.LEVEL_CLEARED)
            self.level_number += 1
            self._load_level()
        return result

    def lose_life(self) -> None:
        """Also used for a voluntary restart. The level is replayed unchanged while lives remain."""
        if self.state is not SessionState.PLAYING:
            raise RuntimeError("No level in progress; call start() first")
        self.lives -= 1
        # the map is rebuilt with its coin, so the pickup is undone too
        self.coins = self._coins_at_entry
        self._emit(SessionEvent.LIFE_LOST)
        if self.lives > 0:
            self._enter_level()
            return
        logger.info("Out of lives on level %d", self.level_number)
        self._to_title()
        self._emit(SessionEvent.GAME_OVER)
