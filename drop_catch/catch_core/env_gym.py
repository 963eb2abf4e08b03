"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the catcher game.
Reward is always 0.0 - agents must compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from drop_catch.catch_core.config_loader import GameConfig, load_config
from drop_catch.catch_core.game_loop import GameLoop

# Discrete actions
ACTION_STAY = 0
ACTION_LEFT = 1
ACTION_RIGHT = 2


class CatchEnv(gym.Env):
    """
    Drop Catch as a Gymnasium environment.

    Action Space:
        Discrete(3): stay, move left, move right (one key step each).

    Observation Space:
        Dict with catcher position, score, lives, level, spawn interval
        and fixed-size object arrays with a mask.

    Time runs on a virtual clock: every step advances the game by
    ``observation.step_ms`` milliseconds.
    """

    metadata = {
        "render_modes": ["rgb_array"],
        "render_fps": 20,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Already loaded config; takes precedence over config_path.
            render_mode: "rgb_array" for a numpy frame, None for headless.
            debug: If True, prints per-step debug output.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self.render_mode = render_mode
        self._debug = debug

        self._game = GameLoop(config=self._config)
        self._now_ms = 0.0
        self._step_ms = self._config.observation.step_ms
        self._max_episode_ms = self._config.observation.max_episode_ms
        self._max_objects = self._config.observation.max_objects

        self.action_space = spaces.Discrete(3)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] CatchEnv initialized")
            print(f"[DEBUG]   Step: {self._step_ms}ms, max episode: {self._max_episode_ms}ms")
            print(f"[DEBUG]   Max objects: {self._max_objects}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_obj = self._max_objects
        board = self._config.board
        leveling = self._config.leveling

        return spaces.Dict({
            "catcher_x": spaces.Box(low=0, high=100, shape=(), dtype=np.float32),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "lives": spaces.Box(low=0, high=leveling.start_lives, shape=(), dtype=np.int32),
            "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "spawn_interval_ms": spaces.Box(
                low=leveling.min_spawn_interval_ms,
                high=leveling.initial_spawn_interval_ms,
                shape=(),
                dtype=np.int32
            ),
            "objects_count": spaces.Box(low=0, high=max_obj, shape=(), dtype=np.int32),
            "obj_class": spaces.Box(low=-1, high=2, shape=(max_obj,), dtype=np.int8),
            "obj_x": spaces.Box(low=0, high=board.width, shape=(max_obj,), dtype=np.float32),
            "obj_y": spaces.Box(low=0, high=board.height, shape=(max_obj,), dtype=np.float32),
            "obj_progress": spaces.Box(low=0, high=1, shape=(max_obj,), dtype=np.float32),
            "obj_mask": spaces.MultiBinary(max_obj),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._now_ms = 0.0
        self._game.catcher.set_position(self._config.board.catcher_start_x)
        snapshot = self._game.start(now_ms=self._now_ms, seed=seed)

        obs = snapshot.to_obs_dict(self._max_objects)
        info = self._game.get_info()
        info["delta_score"] = 0
        info["delta_lives"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: 0 stay, 1 left, 2 right.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())

        step = self._config.input.key_step
        if action == ACTION_LEFT:
            self._game.move_catcher(-step)
        elif action == ACTION_RIGHT:
            self._game.move_catcher(step)

        self._now_ms += self._step_ms
        result = self._game.advance(self._now_ms)

        obs = result.snapshot.to_obs_dict(self._max_objects)

        # Reward is always 0.0 - agents compute their own
        reward = 0.0

        terminated = self._game.is_over
        truncated = not terminated and self._now_ms >= self._max_episode_ms

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["delta_lives"] = result.delta_lives
        info["caught"] = len(result.caught)
        info["expired"] = len(result.expired)
        info["time_ms"] = self._now_ms

        if self._debug:
            print(f"[DEBUG] Step: action={action}, delta_score={result.delta_score}, "
                  f"lives={info['lives']}, objects={info['objects_count']}")
            if terminated:
                print(f"[DEBUG] TERMINATED: score={info['final_score']} level={info['final_level']}")

        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode != "rgb_array":
            return None
        return self._render_to_array()

    def _render_to_array(self, width: int = 200, height: int = 200) -> np.ndarray:
        """Rasterize objects and catcher as solid rectangles."""
        board = self._config.board
        frame = np.full((height, width, 3), 30, dtype=np.uint8)
        sx = width / board.width
        sy = height / board.height

        def fill(left, top, right, bottom, color):
            x0 = int(np.clip(left * sx, 0, width))
            x1 = int(np.clip(right * sx, 0, width))
            y0 = int(np.clip(top * sy, 0, height))
            y1 = int(np.clip(bottom * sy, 0, height))
            frame[y0:y1, x0:x1] = color

        catcher = self._game.catcher
        fill(catcher.x, board.catcher_top, catcher.x + catcher.width,
             board.catcher_bottom, (139, 90, 43))

        for obj in self._game.active_objects:
            left, top, right, bottom = self._game.detector.object_extent(obj, self._now_ms)
            color = self._config.get_object_class(obj.object_class.value).color
            fill(left, top, right, bottom, color)

        return frame

    def close(self) -> None:
        """Clean up resources."""

    @property
    def game(self) -> GameLoop:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
