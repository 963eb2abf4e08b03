"""
RNG - Spawn Policy
==================

Produces spawn decisions (object class, horizontal position, fall duration)
from a single random source.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Optional

from drop_catch.catch_core.config_loader import GameConfig, get_config
from drop_catch.catch_core.object_catalog import ObjectCatalog, ObjectClass, get_catalog


@dataclass(frozen=True)
class SpawnDecision:
    """What to spawn next."""
    object_class: ObjectClass
    x: float
    fall_duration_ms: float


class RandomPolicy:
    """
    Random spawn policy.

    Each sample consumes exactly three uniform draws, in order:
    class, horizontal position, fall duration.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[Any] = None
    ):
        """
        Initialize spawn policy.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
            rng: Any object with a ``random()`` method returning floats in [0, 1).
                Overrides ``seed`` when given.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog: ObjectCatalog = get_catalog(config)
        self._rng = rng if rng is not None else random.Random(seed)

    def classify(self, draw: float) -> ObjectClass:
        """Map a uniform draw to an object class (0.6 -> BAD, 0.9 -> BONUS)."""
        return self._catalog.class_for_draw(draw)

    def sample(self) -> SpawnDecision:
        """
        Draw the next spawn decision.

        Returns:
            SpawnDecision with position in [position_min, position_max] and
            fall duration in [fall_duration_min_ms, fall_duration_max_ms).
        """
        rng_cfg = self._config.rng

        object_class = self.classify(self._rng.random())

        span = rng_cfg.position_max - rng_cfg.position_min
        x = rng_cfg.position_min + self._rng.random() * span

        duration_span = rng_cfg.fall_duration_max_ms - rng_cfg.fall_duration_min_ms
        fall_duration_ms = rng_cfg.fall_duration_min_ms + self._rng.random() * duration_span

        return SpawnDecision(
            object_class=object_class,
            x=x,
            fall_duration_ms=fall_duration_ms
        )

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reseed the policy.

        Args:
            seed: New random seed. Keeps current source if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
