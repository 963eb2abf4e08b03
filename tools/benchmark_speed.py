"""
Performance Benchmark
=====================

Measures headless simulation throughput.

Usage:
    python -m tools.benchmark_speed [--steps S] [--quick]
"""

from __future__ import annotations

import argparse
import sys
import time
import numpy as np

from drop_catch.catch_core.config_loader import load_config
from drop_catch.catch_core.game_loop import GameLoop
from drop_catch.catch_core.env_gym import CatchEnv


def _track_lowest_good(game: GameLoop) -> None:
    """Simple agent: center the catcher under the lowest non-bad object."""
    targets = [
        obj for obj in game.active_objects
        if obj.object_class.value != "bad"
    ]
    if not targets:
        return
    target = max(targets, key=lambda obj: obj.progress(game.now_ms))
    game.set_catcher_position(target.x - game.catcher.width / 2)


def benchmark_core_game(
    num_steps: int = 1000,
    step_ms: int = 50,
    seed: int = 42
) -> dict:
    """
    Benchmark raw GameLoop without Gym overhead.

    Args:
        num_steps: Number of advance calls.
        step_ms: Simulated milliseconds per call.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    game = GameLoop(config=config, seed=seed)
    game.start(now_ms=0.0)

    games_played = 1
    start = time.perf_counter()

    for _ in range(num_steps):
        _track_lowest_good(game)
        game.run_for(step_ms)
        if game.is_over:
            game.restart(now_ms=game.now_ms)
            games_played += 1

    elapsed = time.perf_counter() - start

    return {
        "mode": "core_game",
        "num_steps": num_steps,
        "games_played": games_played,
        "simulated_seconds": num_steps * step_ms / 1000.0,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_env(
    num_steps: int = 1000,
    seed: int = 42
) -> dict:
    """
    Benchmark CatchEnv with random actions.

    Args:
        num_steps: Number of steps to run.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = CatchEnv()
    rng = np.random.default_rng(seed)

    env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        action = int(rng.integers(0, 3))
        _, _, terminated, truncated, _ = env.step(action)
        if terminated or truncated:
            env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "env",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def main():
    parser = argparse.ArgumentParser(description="Benchmark Drop Catch simulation speed")
    parser.add_argument("--steps", type=int, default=2000, help="Steps per benchmark")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()
    steps = 200 if args.quick else args.steps

    print("=" * 50)
    print("DROP CATCH PERFORMANCE BENCHMARK")
    print("=" * 50)

    results = [benchmark_core_game(num_steps=steps), benchmark_env(num_steps=steps)]

    print(f"{'Mode':<12} {'Steps/s':>12} {'ms/step':>10}")
    print("-" * 36)
    for r in results:
        print(f"{r['mode']:<12} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.3f}")

    core = results[0]
    print(f"\nCore: {core['simulated_seconds']:.0f}s simulated across {core['games_played']} game(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
