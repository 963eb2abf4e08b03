"""
Catch Core - The game simulation and rules engine.

This module provides the core game simulation, a Gymnasium environment
wrapper, and all supporting systems (spawning, collision, scoring, timers).

Main exports:
- GameLoop: Per-tick orchestration of a single game
- GameState: Score, lives, level and the game state machine
- RandomPolicy: Spawn decisions
- CatchEnv: Gymnasium environment
- GameConfig: Configuration loaded from game_config.yaml
"""

from drop_catch.catch_core.config_loader import GameConfig, load_config
from drop_catch.catch_core.object_catalog import ObjectClass, ObjectCatalog
from drop_catch.catch_core.falling_object import FallingObject, ObjectStatus
from drop_catch.catch_core.rng import RandomPolicy, SpawnDecision
from drop_catch.catch_core.scheduler import RecurringTask, SpawnScheduler, TaskScheduler
from drop_catch.catch_core.collision import Catcher, CollisionDetector
from drop_catch.catch_core.game_state import CatchEvent, GamePhase, GameState
from drop_catch.catch_core.state_snapshot import GameSnapshot
from drop_catch.catch_core.game_loop import GameLoop, TickResult
from drop_catch.catch_core.env_gym import CatchEnv

__all__ = [
    "GameConfig",
    "load_config",
    "ObjectClass",
    "ObjectCatalog",
    "FallingObject",
    "ObjectStatus",
    "RandomPolicy",
    "SpawnDecision",
    "RecurringTask",
    "SpawnScheduler",
    "TaskScheduler",
    "Catcher",
    "CollisionDetector",
    "CatchEvent",
    "GamePhase",
    "GameState",
    "GameSnapshot",
    "GameLoop",
    "TickResult",
    "CatchEnv",
]
