"""
State Snapshot
==============

Immutable views of the game pushed to render sinks, and packing of those
views into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, TYPE_CHECKING
import numpy as np

from drop_catch.catch_core.config_loader import GameConfig, get_config
from drop_catch.catch_core.object_catalog import ObjectClass

if TYPE_CHECKING:
    from drop_catch.catch_core.collision import Catcher
    from drop_catch.catch_core.falling_object import FallingObject
    from drop_catch.catch_core.game_state import GameState

# Class ids used in observation arrays; -1 marks an empty slot
CLASS_IDS = {ObjectClass.GOOD: 0, ObjectClass.BAD: 1, ObjectClass.BONUS: 2}


@dataclass(frozen=True)
class ObjectView:
    """Where one falling object is at snapshot time."""
    id: int
    object_class: ObjectClass
    x: float
    y: float
    progress: float


@dataclass(frozen=True)
class GameSnapshot:
    """Complete game state at one instant."""
    time_ms: float
    phase: str
    score: int
    lives: int
    level: int
    spawn_interval_ms: int
    catcher_x: float
    catcher_width: float
    objects: Tuple[ObjectView, ...]
    final_score: Optional[int] = None
    final_level: Optional[int] = None

    @property
    def game_over(self) -> bool:
        return self.phase == "game_over"

    @property
    def objects_count(self) -> int:
        return len(self.objects)

    def to_obs_dict(self, max_objects: int) -> Dict[str, np.ndarray]:
        """
        Convert to a Gymnasium observation dictionary.

        Objects beyond ``max_objects`` are dropped; the oldest are kept.
        """
        obj_class = np.full(max_objects, -1, dtype=np.int8)
        obj_x = np.zeros(max_objects, dtype=np.float32)
        obj_y = np.zeros(max_objects, dtype=np.float32)
        obj_progress = np.zeros(max_objects, dtype=np.float32)
        obj_mask = np.zeros(max_objects, dtype=np.int8)

        for i, view in enumerate(self.objects[:max_objects]):
            obj_class[i] = CLASS_IDS[view.object_class]
            obj_x[i] = view.x
            obj_y[i] = view.y
            obj_progress[i] = view.progress
            obj_mask[i] = 1

        return {
            "catcher_x": np.array(self.catcher_x, dtype=np.float32),
            "score": np.array(self.score, dtype=np.int64),
            "lives": np.array(self.lives, dtype=np.int32),
            "level": np.array(self.level, dtype=np.int32),
            "spawn_interval_ms": np.array(self.spawn_interval_ms, dtype=np.int32),
            "objects_count": np.array(min(self.objects_count, max_objects), dtype=np.int32),
            "obj_class": obj_class,
            "obj_x": obj_x,
            "obj_y": obj_y,
            "obj_progress": obj_progress,
            "obj_mask": obj_mask,
        }

    def to_render_data(self) -> Dict[str, Any]:
        """Plain dict for renderers."""
        return {
            "time_ms": self.time_ms,
            "phase": self.phase,
            "score": self.score,
            "lives": self.lives,
            "level": self.level,
            "spawn_interval_ms": self.spawn_interval_ms,
            "catcher_x": self.catcher_x,
            "catcher_width": self.catcher_width,
            "game_over": self.game_over,
            "final_score": self.final_score,
            "final_level": self.final_level,
            "objects": [
                {
                    "id": view.id,
                    "class": view.object_class.value,
                    "x": view.x,
                    "y": view.y,
                }
                for view in self.objects
            ],
        }


class SnapshotBuilder:
    """Builds game snapshots from live game objects."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._board_height = config.board.height

    def build(
        self,
        state: "GameState",
        catcher: "Catcher",
        objects: Iterable["FallingObject"],
        now_ms: float
    ) -> GameSnapshot:
        views = tuple(
            ObjectView(
                id=obj.id,
                object_class=obj.object_class,
                x=obj.x,
                y=obj.vertical_position(now_ms, self._board_height),
                progress=obj.progress(now_ms),
            )
            for obj in objects
            if obj.is_falling
        )
        return GameSnapshot(
            time_ms=now_ms,
            phase=state.phase.value,
            score=state.score,
            lives=state.lives,
            level=state.level,
            spawn_interval_ms=state.spawn_interval_ms,
            catcher_x=catcher.x,
            catcher_width=catcher.width,
            objects=views,
            final_score=state.final_score,
            final_level=state.final_level,
        )
