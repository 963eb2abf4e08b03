"""
Object Catalog
==============

Provides convenient access to falling object classes loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Optional, Union

from drop_catch.catch_core.config_loader import (
    GameConfig,
    ObjectClassConfig,
    get_config
)


class ObjectClass(str, Enum):
    """The three kinds of falling objects."""
    GOOD = "good"
    BAD = "bad"
    BONUS = "bonus"


@dataclass
class ObjectType:
    """
    Runtime representation of an object class.

    Wraps ObjectClassConfig with the matching ObjectClass member.
    """
    config: ObjectClassConfig

    @property
    def object_class(self) -> ObjectClass:
        return ObjectClass(self.config.name)

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def points(self) -> int:
        return self.config.points

    @property
    def costs_life(self) -> bool:
        """True if catching this object loses a life instead of scoring."""
        return self.config.costs_life

    @property
    def threshold(self) -> float:
        return self.config.threshold

    @property
    def color(self) -> Tuple[int, int, int]:
        return self.config.color

    def __repr__(self) -> str:
        return f"ObjectType({self.name}: {self.points} pts)"


class ObjectCatalog:
    """
    Collection of all object classes in spawn-threshold order.

    Thresholds are cumulative: a uniform draw below the first threshold
    selects the first class, below the second the second class, and so on.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._types: Tuple[ObjectType, ...] = tuple(
            ObjectType(obj_config) for obj_config in config.objects
        )

    def __len__(self) -> int:
        return len(self._types)

    def __getitem__(self, key: Union[ObjectClass, str]) -> ObjectType:
        """Get object type by class or name."""
        name = key.value if isinstance(key, ObjectClass) else str(key).lower()
        for obj_type in self._types:
            if obj_type.name == name:
                return obj_type
        raise KeyError(f"Unknown object class: {key}")

    def __iter__(self):
        return iter(self._types)

    @property
    def all_types(self) -> Tuple[ObjectType, ...]:
        """All object types in threshold order."""
        return self._types

    def class_for_draw(self, draw: float) -> ObjectClass:
        """
        Map a uniform draw in [0, 1) to an object class.

        A draw exactly on a threshold belongs to the next class.
        """
        for obj_type in self._types:
            if draw < obj_type.threshold:
                return obj_type.object_class
        return self._types[-1].object_class

    def points_for(self, object_class: ObjectClass) -> int:
        return self[object_class].points

    def costs_life(self, object_class: ObjectClass) -> bool:
        return self[object_class].costs_life


# Module-level singleton
_cached_catalog: Optional[ObjectCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> ObjectCatalog:
    """
    Get the object catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        ObjectCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = ObjectCatalog(config)
    return _cached_catalog
