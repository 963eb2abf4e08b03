"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


LEVEL_UP_MODES = ("exact", "crossing")


@dataclass(frozen=True)
class BoardConfig:
    """Playfield geometry, in percent of the playfield."""
    width: float
    height: float
    catcher_width: float
    catcher_top: float           # Top of the catcher band
    catcher_height: float
    catcher_start_x: float
    object_width: float
    object_height: float

    @property
    def catcher_bottom(self) -> float:
        return self.catcher_top + self.catcher_height


@dataclass(frozen=True)
class ObjectClassConfig:
    """Configuration for a single falling object class."""
    id: int
    name: str
    points: int
    costs_life: bool
    threshold: float             # Cumulative upper bound of the spawn draw
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class RngConfig:
    """Spawn randomization ranges."""
    position_min: float
    position_max: float
    fall_duration_min_ms: float
    fall_duration_max_ms: float


@dataclass(frozen=True)
class LevelingConfig:
    """Lives, level progression and spawn cadence."""
    start_lives: int
    points_per_level: int
    initial_spawn_interval_ms: int
    spawn_interval_step_ms: int
    min_spawn_interval_ms: int
    mode: str


@dataclass(frozen=True)
class LoopConfig:
    """Simulation tick cadence."""
    tick_ms: int


@dataclass(frozen=True)
class InputConfig:
    """Catcher movement steps for discrete input commands."""
    key_step: float
    pointer_step: float


@dataclass(frozen=True)
class ObservationConfig:
    """Observation packing and environment stepping."""
    max_objects: int
    step_ms: int
    max_episode_ms: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    objects: Tuple[ObjectClassConfig, ...]
    rng: RngConfig
    leveling: LevelingConfig
    loop: LoopConfig
    input: InputConfig
    observation: ObservationConfig

    @property
    def num_object_classes(self) -> int:
        return len(self.objects)

    def get_object_class(self, name: str) -> ObjectClassConfig:
        """Get object class config by name."""
        for obj in self.objects:
            if obj.name == name:
                return obj
        raise KeyError(f"Unknown object class: {name}")


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_object_class(index: int, data: dict) -> ObjectClassConfig:
    return ObjectClassConfig(
        id=index,
        name=str(data["name"]),
        points=int(data.get("points", 0)),
        costs_life=bool(data.get("costs_life", False)),
        threshold=float(data["threshold"]),
        color=_parse_color(data.get("color", [255, 255, 255]))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    names = [obj.name for obj in config.objects]
    if sorted(names) != ["bad", "bonus", "good"]:
        raise ValueError(f"Object classes must be good, bad and bonus, got {names}")

    # Thresholds are compared in order, so they must increase and end at 1.0
    previous = 0.0
    for obj in config.objects:
        if obj.threshold <= previous:
            raise ValueError(
                f"Threshold for '{obj.name}' ({obj.threshold}) must exceed {previous}"
            )
        previous = obj.threshold
    if previous != 1.0:
        raise ValueError(f"Last object threshold must be 1.0, got {previous}")

    rng = config.rng
    if rng.position_min > rng.position_max:
        raise ValueError(
            f"position_min ({rng.position_min}) exceeds position_max ({rng.position_max})"
        )
    if rng.fall_duration_min_ms <= 0 or rng.fall_duration_min_ms > rng.fall_duration_max_ms:
        raise ValueError(
            f"Invalid fall duration range [{rng.fall_duration_min_ms}, {rng.fall_duration_max_ms})"
        )

    lv = config.leveling
    if lv.start_lives < 1:
        raise ValueError(f"start_lives must be at least 1, got {lv.start_lives}")
    if lv.points_per_level < 1:
        raise ValueError(f"points_per_level must be positive, got {lv.points_per_level}")
    if lv.min_spawn_interval_ms <= 0 or lv.initial_spawn_interval_ms < lv.min_spawn_interval_ms:
        raise ValueError(
            f"Spawn interval must start at or above the floor "
            f"({lv.initial_spawn_interval_ms} < {lv.min_spawn_interval_ms})"
        )
    if lv.spawn_interval_step_ms < 0:
        raise ValueError(f"spawn_interval_step_ms must be >= 0, got {lv.spawn_interval_step_ms}")
    if lv.mode not in LEVEL_UP_MODES:
        raise ValueError(f"leveling.mode must be one of {LEVEL_UP_MODES}, got '{lv.mode}'")

    if config.loop.tick_ms <= 0:
        raise ValueError(f"loop.tick_ms must be positive, got {config.loop.tick_ms}")
    if config.observation.step_ms <= 0:
        raise ValueError(f"observation.step_ms must be positive, got {config.observation.step_ms}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        width=float(board_data.get("width", 100.0)),
        height=float(board_data.get("height", 100.0)),
        catcher_width=float(board_data["catcher_width"]),
        catcher_top=float(board_data["catcher_top"]),
        catcher_height=float(board_data["catcher_height"]),
        catcher_start_x=float(board_data.get("catcher_start_x", 50.0)),
        object_width=float(board_data["object_width"]),
        object_height=float(board_data["object_height"])
    )

    objects = tuple(
        _parse_object_class(i, data) for i, data in enumerate(raw["objects"])
    )

    rng_data = raw["rng"]
    rng = RngConfig(
        position_min=float(rng_data["position_min"]),
        position_max=float(rng_data["position_max"]),
        fall_duration_min_ms=float(rng_data["fall_duration_min_ms"]),
        fall_duration_max_ms=float(rng_data["fall_duration_max_ms"])
    )

    lv_data = raw["leveling"]
    leveling = LevelingConfig(
        start_lives=int(lv_data.get("start_lives", 3)),
        points_per_level=int(lv_data.get("points_per_level", 100)),
        initial_spawn_interval_ms=int(lv_data["initial_spawn_interval_ms"]),
        spawn_interval_step_ms=int(lv_data["spawn_interval_step_ms"]),
        min_spawn_interval_ms=int(lv_data["min_spawn_interval_ms"]),
        mode=str(lv_data.get("mode", "exact"))
    )

    loop = LoopConfig(tick_ms=int(raw.get("loop", {}).get("tick_ms", 16)))

    input_data = raw.get("input", {})
    input_config = InputConfig(
        key_step=float(input_data.get("key_step", 10.0)),
        pointer_step=float(input_data.get("pointer_step", 20.0))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_objects=int(obs_data.get("max_objects", 32)),
        step_ms=int(obs_data.get("step_ms", 50)),
        max_episode_ms=int(obs_data.get("max_episode_ms", 600000))
    )

    config = GameConfig(
        board=board,
        objects=objects,
        rng=rng,
        leveling=leveling,
        loop=loop,
        input=input_config,
        observation=observation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
