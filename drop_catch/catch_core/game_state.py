"""
Game State
==========

Score, lives, level and spawn cadence, plus the NotStarted -> Running ->
GameOver state machine. Calls made in the wrong phase are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from drop_catch.catch_core.config_loader import GameConfig, get_config
from drop_catch.catch_core.falling_object import FallingObject
from drop_catch.catch_core.object_catalog import ObjectCatalog, ObjectClass, get_catalog

logger = logging.getLogger(__name__)


class GamePhase(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    GAME_OVER = "game_over"


@dataclass
class CatchEvent:
    """Record of one registered catch."""
    object_id: int
    object_class: ObjectClass
    points: int
    life_lost: bool
    leveled_up: bool
    game_over: bool

    def __repr__(self) -> str:
        if self.life_lost:
            suffix = ", game_over" if self.game_over else ""
            return f"CatchEvent(#{self.object_id} life_lost{suffix})"
        suffix = ", level_up" if self.leveled_up else ""
        return f"CatchEvent(#{self.object_id} +{self.points}{suffix})"


class GameState:
    """
    Owns score, lives, level and the spawn interval.

    Hooks:
        on_level_up(level, spawn_interval_ms): called after every level-up.
        on_game_over(final_score, final_level): called once when lives run out,
            after the phase has switched to GAME_OVER.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        on_level_up: Optional[Callable[[int, int], None]] = None,
        on_game_over: Optional[Callable[[int, int], None]] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self._leveling = config.leveling
        self._catalog: ObjectCatalog = get_catalog(config)
        self.on_level_up = on_level_up
        self.on_game_over = on_game_over

        self._phase = GamePhase.NOT_STARTED
        self._score: int = 0
        self._lives: int = self._leveling.start_lives
        self._level: int = 1
        self._spawn_interval_ms: int = self._leveling.initial_spawn_interval_ms
        self._final_score: Optional[int] = None
        self._final_level: Optional[int] = None

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def running(self) -> bool:
        return self._phase is GamePhase.RUNNING

    @property
    def is_over(self) -> bool:
        return self._phase is GamePhase.GAME_OVER

    @property
    def score(self) -> int:
        return self._score

    @property
    def lives(self) -> int:
        return self._lives

    @property
    def level(self) -> int:
        return self._level

    @property
    def spawn_interval_ms(self) -> int:
        return self._spawn_interval_ms

    @property
    def final_score(self) -> Optional[int]:
        """Score captured at game over, None before that."""
        return self._final_score

    @property
    def final_level(self) -> Optional[int]:
        return self._final_level

    def start(self) -> None:
        """Enter RUNNING with fresh score, lives, level and spawn interval."""
        self._score = 0
        self._lives = self._leveling.start_lives
        self._level = 1
        self._spawn_interval_ms = self._leveling.initial_spawn_interval_ms
        self._final_score = None
        self._final_level = None
        self._phase = GamePhase.RUNNING
        logger.info("Game started: lives=%d interval=%dms", self._lives, self._spawn_interval_ms)

    def register_catch(self, obj: FallingObject) -> Optional[CatchEvent]:
        """
        Apply the effect of catching ``obj``.

        Returns:
            CatchEvent describing the effect, or None if the game is not running.
        """
        if not self.running:
            return None

        if self._catalog.costs_life(obj.object_class):
            self._lives -= 1
            logger.debug("Caught bad object #%d, lives=%d", obj.id, self._lives)
            ended = self._lives <= 0
            if ended:
                self._end_game()
            return CatchEvent(
                object_id=obj.id,
                object_class=obj.object_class,
                points=0,
                life_lost=True,
                leveled_up=False,
                game_over=ended
            )

        previous = self._score
        self._score += obj.points
        logger.debug("Caught %s object #%d, score=%d", obj.object_class.value, obj.id, self._score)

        leveled = self._reached_level_boundary(previous, self._score)
        if leveled:
            self.level_up()

        return CatchEvent(
            object_id=obj.id,
            object_class=obj.object_class,
            points=obj.points,
            life_lost=False,
            leveled_up=leveled,
            game_over=False
        )

    def _reached_level_boundary(self, previous: int, score: int) -> bool:
        per_level = self._leveling.points_per_level
        if self._leveling.mode == "crossing":
            return score // per_level > previous // per_level
        return score > 0 and score != previous and score % per_level == 0

    def level_up(self) -> None:
        """Advance one level and shorten the spawn interval down to its floor."""
        if not self.running:
            return
        self._level += 1
        self._spawn_interval_ms = max(
            self._leveling.min_spawn_interval_ms,
            self._spawn_interval_ms - self._leveling.spawn_interval_step_ms
        )
        logger.info("Level %d! Spawn interval %dms", self._level, self._spawn_interval_ms)
        if self.on_level_up is not None:
            self.on_level_up(self._level, self._spawn_interval_ms)

    def expire(self, obj: FallingObject) -> None:
        """An object fell out of the playfield. No scoring effect in any phase."""
        logger.debug("Object #%d expired", obj.id)

    def _end_game(self) -> None:
        self._phase = GamePhase.GAME_OVER
        self._final_score = self._score
        self._final_level = self._level
        logger.info("Game over: score=%d level=%d", self._score, self._level)
        if self.on_game_over is not None:
            self.on_game_over(self._score, self._level)
