"""
Game Loop
=========

Main game orchestrator combining spawning, collision detection and game rules.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from drop_catch.catch_core.config_loader import GameConfig, get_config
from drop_catch.catch_core.collision import Catcher, CollisionDetector
from drop_catch.catch_core.falling_object import FallingObject
from drop_catch.catch_core.game_state import CatchEvent, GamePhase, GameState
from drop_catch.catch_core.object_catalog import ObjectCatalog, get_catalog
from drop_catch.catch_core.rng import RandomPolicy, SpawnDecision
from drop_catch.catch_core.scheduler import SpawnScheduler, TaskScheduler
from drop_catch.catch_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class TickResult:
    """What happened during one ``tick`` or ``advance`` call."""
    snapshot: GameSnapshot
    caught: List[CatchEvent] = field(default_factory=list)
    expired: List[int] = field(default_factory=list)
    spawned: List[int] = field(default_factory=list)
    delta_score: int = 0
    delta_lives: int = 0
    leveled_up: bool = False
    game_over: bool = False
    ticks: int = 0


class _Pending:
    """Events collected between the start and end of one public call."""

    def __init__(self, score: int, lives: int, level: int, phase: GamePhase):
        self.score = score
        self.lives = lives
        self.level = level
        self.phase = phase
        self.caught: List[CatchEvent] = []
        self.expired: List[int] = []
        self.spawned: List[int] = []
        self.ticks = 0


class GameLoop:
    """
    Main game simulation class.

    Orchestrates:
    - Spawn scheduling and the spawn policy
    - Collision detection against the catcher
    - Scoring, lives and levels (GameState)
    - Snapshots pushed to an optional render callback

    Two recurring tasks drive the game while it runs: ``spawn`` at the
    current spawn interval and ``tick`` at the configured tick interval.
    Both are fired one at a time by ``advance``, at their scheduled times.
    """

    TICK_TASK = "tick"

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
        render_callback: Optional[Callable[[GameSnapshot], None]] = None,
        rng: Optional[Any] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            clock: Monotonic clock returning milliseconds. Used when a call
                gets no explicit timestamp.
            render_callback: Called with a GameSnapshot after state changes.
            rng: Optional draw source for the spawn policy (overrides seed).
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._clock = clock or monotonic_ms
        self.render_callback = render_callback

        # Subsystems
        self._catalog: ObjectCatalog = get_catalog(config)
        self._state = GameState(
            config,
            on_level_up=self._on_level_up,
            on_game_over=self._on_game_over
        )
        self._policy = RandomPolicy(config, seed, rng)
        self._scheduler = TaskScheduler()
        self._spawner = SpawnScheduler(self._scheduler, self._spawn_task)
        self._detector = CollisionDetector(config)
        self._snapshot_builder = SnapshotBuilder(config)

        board = config.board
        self._catcher = Catcher(board.catcher_start_x, board.catcher_width)

        # Active objects, in spawn order
        self._objects: Dict[int, FallingObject] = {}
        self._next_id: int = 1
        self._now_ms: float = 0.0
        self._last_eval_ms: Optional[float] = None
        self._pending: Optional[_Pending] = None

        self._spawned_total: int = 0
        self._caught_total: int = 0
        self._expired_total: int = 0

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def catcher(self) -> Catcher:
        return self._catcher

    @property
    def detector(self) -> CollisionDetector:
        return self._detector

    @property
    def scheduler(self) -> TaskScheduler:
        return self._scheduler

    @property
    def spawner(self) -> SpawnScheduler:
        return self._spawner

    @property
    def active_objects(self) -> Tuple[FallingObject, ...]:
        return tuple(self._objects.values())

    @property
    def now_ms(self) -> float:
        """Time of the last processed event."""
        return self._now_ms

    @property
    def phase(self) -> GamePhase:
        return self._state.phase

    @property
    def running(self) -> bool:
        return self._state.running

    @property
    def is_over(self) -> bool:
        return self._state.is_over

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def lives(self) -> int:
        return self._state.lives

    @property
    def level(self) -> int:
        return self._state.level

    def _resolve_now(self, now_ms: Optional[float]) -> float:
        return self._clock() if now_ms is None else float(now_ms)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, now_ms: Optional[float] = None, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start (or restart) the game.

        Pending timers are cancelled before any state is reset.

        Args:
            now_ms: Start time. Uses the clock if None.
            seed: Reseed the spawn policy. Keeps current randomness if None.

        Returns:
            Initial game snapshot.
        """
        now = self._resolve_now(now_ms)

        self._scheduler.cancel_all()
        self._objects.clear()
        if seed is not None:
            self._seed = seed
            self._policy.reset(seed)

        self._state.start()
        self._now_ms = now
        self._last_eval_ms = None

        self._spawner.start(self._state.spawn_interval_ms, now)
        self._scheduler.add_recurring(
            self.TICK_TASK, self._config.loop.tick_ms, self._tick_task, now
        )

        snapshot = self.snapshot(now)
        self._notify(snapshot)
        return snapshot

    def restart(self, now_ms: Optional[float] = None) -> GameSnapshot:
        """Restart after game over (or mid-game)."""
        return self.start(now_ms)

    def _on_level_up(self, level: int, spawn_interval_ms: int) -> None:
        self._spawner.reconfigure(spawn_interval_ms, self._now_ms)

    def _on_game_over(self, final_score: int, final_level: int) -> None:
        # Timers first, so nothing fires into the cleared state
        self._scheduler.cancel_all()
        self._objects.clear()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def move_catcher(self, delta: float) -> float:
        """Move the catcher by ``delta`` percent. Ignored unless running."""
        if not self.running:
            return self._catcher.x
        x = self._catcher.move(delta)
        self._push(self._now_ms)
        return x

    def set_catcher_position(self, x: float) -> float:
        """Place the catcher at ``x`` percent. Ignored unless running."""
        if not self.running:
            return self._catcher.x
        x = self._catcher.set_position(x)
        self._push(self._now_ms)
        return x

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def advance(self, now_ms: Optional[float] = None) -> TickResult:
        """
        Run every spawn and tick that is due up to ``now_ms``.

        Args:
            now_ms: Target time. Uses the clock if None.

        Returns:
            TickResult aggregating all events since the previous call.
        """
        now = self._resolve_now(now_ms)
        self._begin()
        self._scheduler.run_due(now)
        self._now_ms = max(self._now_ms, now)
        return self._finish(self._now_ms)

    def run_for(self, duration_ms: float) -> TickResult:
        """Advance simulated time by ``duration_ms`` from the last processed time."""
        return self.advance(self._now_ms + duration_ms)

    def tick(self, now_ms: Optional[float] = None) -> TickResult:
        """
        Evaluate catches and expiries at ``now_ms``, outside the timers.

        Timers due up to ``now_ms`` run first, so evaluations stay in time
        order. Times earlier than the last processed event are raised to it.

        Returns:
            TickResult for everything that happened up to ``now_ms``.
        """
        now = max(self._resolve_now(now_ms), self._now_ms)
        self._begin()
        self._scheduler.run_due(now)
        self._now_ms = now
        # The tick task may already have evaluated this instant
        if self._last_eval_ms != now and self._evaluate(now):
            self._push(now)
        return self._finish(now)

    def spawn_object(
        self,
        now_ms: Optional[float] = None,
        decision: Optional[SpawnDecision] = None
    ) -> Optional[FallingObject]:
        """
        Create a falling object at ``now_ms``.

        Args:
            now_ms: Spawn time. Uses the clock if None.
            decision: What to spawn. Sampled from the spawn policy if None.

        Returns:
            The new object, or None if the game is not running.
        """
        if not self.running:
            return None

        now = self._resolve_now(now_ms)
        if decision is None:
            decision = self._policy.sample()

        obj = FallingObject(
            id=self._next_id,
            object_class=decision.object_class,
            points=self._catalog.points_for(decision.object_class),
            x=decision.x,
            fall_duration_ms=decision.fall_duration_ms,
            spawn_time_ms=now,
        )
        self._next_id += 1
        self._objects[obj.id] = obj
        self._spawned_total += 1
        if self._pending is not None:
            self._pending.spawned.append(obj.id)

        logger.debug("Spawned %r (fall %.0fms)", obj, obj.fall_duration_ms)
        self._push(max(now, self._now_ms))
        return obj

    def _spawn_task(self, due_ms: float) -> None:
        self._now_ms = due_ms
        self.spawn_object(due_ms)

    def _tick_task(self, due_ms: float) -> None:
        self._now_ms = due_ms
        if self._evaluate(due_ms):
            self._push(due_ms)

    def _evaluate(self, now_ms: float) -> bool:
        """
        One simulation tick: catches, then expiries, then pruning.

        Returns:
            False if the game was not running and nothing was evaluated.
        """
        if not self.running:
            return False

        self._last_eval_ms = now_ms
        if self._pending is not None:
            self._pending.ticks += 1

        # 1. Catches
        caught_ids = self._detector.check(self._catcher, self._objects.values(), now_ms)
        for obj_id in sorted(caught_ids):
            obj = self._objects.get(obj_id)
            # Game over clears the active set mid-loop
            if obj is None or not obj.mark_caught():
                continue
            self._caught_total += 1
            event = self._state.register_catch(obj)
            if event is not None and self._pending is not None:
                self._pending.caught.append(event)

        # 2. Expiries
        for obj in list(self._objects.values()):
            if obj.is_falling and obj.has_landed(now_ms):
                obj.mark_expired()
                self._expired_total += 1
                self._state.expire(obj)
                if self._pending is not None:
                    self._pending.expired.append(obj.id)

        # 3. Prune
        for obj_id in [o.id for o in self._objects.values() if o.is_terminal]:
            del self._objects[obj_id]

        return True

    def _begin(self) -> None:
        s = self._state
        self._pending = _Pending(s.score, s.lives, s.level, s.phase)

    def _finish(self, now_ms: float) -> TickResult:
        pending = self._pending
        self._pending = None

        return TickResult(
            snapshot=self.snapshot(now_ms),
            caught=pending.caught,
            expired=pending.expired,
            spawned=pending.spawned,
            delta_score=self._state.score - pending.score,
            delta_lives=self._state.lives - pending.lives,
            leveled_up=self._state.level > pending.level,
            game_over=self._state.is_over and pending.phase is not GamePhase.GAME_OVER,
            ticks=pending.ticks,
        )

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def snapshot(self, now_ms: Optional[float] = None) -> GameSnapshot:
        """Build the current game snapshot."""
        now = self._now_ms if now_ms is None else now_ms
        return self._snapshot_builder.build(
            state=self._state,
            catcher=self._catcher,
            objects=self._objects.values(),
            now_ms=now,
        )

    def _notify(self, snapshot: GameSnapshot) -> None:
        if self.render_callback is not None:
            self.render_callback(snapshot)

    def _push(self, now_ms: float) -> None:
        """Send the sink a snapshot at ``now_ms``, built only if a sink is set."""
        if self.render_callback is not None:
            self.render_callback(self.snapshot(now_ms))

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "phase": self._state.phase.value,
            "score": self._state.score,
            "lives": self._state.lives,
            "level": self._state.level,
            "spawn_interval_ms": self._state.spawn_interval_ms,
            "objects_count": len(self._objects),
            "spawned_total": self._spawned_total,
            "caught_total": self._caught_total,
            "expired_total": self._expired_total,
            "final_score": self._state.final_score,
            "final_level": self._state.final_level,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """Get data needed for rendering."""
        data = self.snapshot().to_render_data()
        data["board_width"] = self._config.board.width
        data["board_height"] = self._config.board.height
        data["catcher_top"] = self._config.board.catcher_top
        data["catcher_height"] = self._config.board.catcher_height
        data["object_width"] = self._config.board.object_width
        data["object_height"] = self._config.board.object_height
        return data
