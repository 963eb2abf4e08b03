"""
Collision Detection
===================

Catcher position handling and catcher/object overlap testing.

Object positions are computed from elapsed time rather than read back from
a renderer, so the same timestamps always give the same catches.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Set, Tuple

from drop_catch.catch_core.config_loader import GameConfig, get_config
from drop_catch.catch_core.falling_object import FallingObject

MIN_POSITION = 0.0
MAX_POSITION = 100.0


def clamp_position(x: float) -> float:
    return max(MIN_POSITION, min(MAX_POSITION, x))


@dataclass
class Catcher:
    """The player-controlled catcher. ``x`` is its left edge."""
    x: float
    width: float

    def __post_init__(self):
        self.x = clamp_position(self.x)

    def move(self, delta: float) -> float:
        """Move by ``delta``, clamped to [0, 100]. Returns the new position."""
        self.x = clamp_position(self.x + delta)
        return self.x

    def set_position(self, x: float) -> float:
        self.x = clamp_position(x)
        return self.x

    @property
    def span(self) -> Tuple[float, float]:
        """Horizontal extent (left, right)."""
        return (self.x, self.x + self.width)


class CollisionDetector:
    """
    Axis-aligned overlap test between the catcher band and falling objects.

    Vertically the object center moves linearly from the top of the board
    to the bottom over its fall duration; it is caught while its extent
    touches the catcher band and its horizontal extent overlaps the catcher.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        board = config.board
        self._board_height = board.height
        self._band_top = board.catcher_top
        self._band_bottom = board.catcher_bottom
        self._half_width = board.object_width / 2.0
        self._half_height = board.object_height / 2.0

    @property
    def band(self) -> Tuple[float, float]:
        return (self._band_top, self._band_bottom)

    def object_extent(self, obj: FallingObject, now_ms: float) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) of an object at ``now_ms``."""
        y = obj.vertical_position(now_ms, self._board_height)
        return (
            obj.x - self._half_width,
            y - self._half_height,
            obj.x + self._half_width,
            y + self._half_height,
        )

    def overlaps(self, catcher: Catcher, obj: FallingObject, now_ms: float) -> bool:
        left, top, right, bottom = self.object_extent(obj, now_ms)

        if bottom < self._band_top or top > self._band_bottom:
            return False

        catcher_left, catcher_right = catcher.span
        return left < catcher_right and right > catcher_left

    def check(
        self,
        catcher: Catcher,
        active_objects: Iterable[FallingObject],
        now_ms: float
    ) -> Set[int]:
        """
        Find objects overlapping the catcher.

        Args:
            catcher: Current catcher.
            active_objects: Objects to test; terminal ones are skipped.
            now_ms: Simulation time.

        Returns:
            Set of ids of falling objects now overlapping the catcher.
        """
        return {
            obj.id
            for obj in active_objects
            if obj.is_falling and self.overlaps(catcher, obj, now_ms)
        }
