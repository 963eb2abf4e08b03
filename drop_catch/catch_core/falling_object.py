"""
Falling Object
==============

State of one spawned object and its Falling -> Caught / Expired lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from drop_catch.catch_core.object_catalog import ObjectClass


class ObjectStatus(str, Enum):
    FALLING = "falling"
    CAUGHT = "caught"
    EXPIRED = "expired"


@dataclass
class FallingObject:
    """
    One falling object.

    Position is derived from time: the object falls straight down at a
    constant rate from the top of the playfield (progress 0) to the bottom
    (progress 1) over ``fall_duration_ms``.
    """
    id: int
    object_class: ObjectClass
    points: int
    x: float
    fall_duration_ms: float
    spawn_time_ms: float
    status: ObjectStatus = field(default=ObjectStatus.FALLING)

    @property
    def is_falling(self) -> bool:
        return self.status is ObjectStatus.FALLING

    @property
    def is_terminal(self) -> bool:
        return self.status is not ObjectStatus.FALLING

    def elapsed_ms(self, now_ms: float) -> float:
        return now_ms - self.spawn_time_ms

    def progress(self, now_ms: float) -> float:
        """Fraction of the fall completed, clamped to [0, 1]."""
        t = self.elapsed_ms(now_ms) / self.fall_duration_ms
        return max(0.0, min(1.0, t))

    def vertical_position(self, now_ms: float, board_height: float) -> float:
        """Center Y at ``now_ms``, 0 at the top of the playfield."""
        return self.progress(now_ms) * board_height

    def has_landed(self, now_ms: float) -> bool:
        """True once the full fall duration has elapsed."""
        return self.elapsed_ms(now_ms) >= self.fall_duration_ms

    def mark_caught(self) -> bool:
        """Transition to CAUGHT. Returns False if already terminal."""
        if self.is_terminal:
            return False
        self.status = ObjectStatus.CAUGHT
        return True

    def mark_expired(self) -> bool:
        """Transition to EXPIRED. Returns False if already terminal."""
        if self.is_terminal:
            return False
        self.status = ObjectStatus.EXPIRED
        return True

    def __repr__(self) -> str:
        return (
            f"FallingObject(#{self.id} {self.object_class.value} "
            f"x={self.x:.1f} {self.status.value})"
        )
