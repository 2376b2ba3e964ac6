"""
Performance Benchmark
=====================

Measures headless tick throughput of the core and of the Gymnasium wrapper.

Usage:
    python -m tools.benchmark_speed [--steps S] [--seed SEED]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Dict

import numpy as np

from flapgate.flap_core.config_loader import load_config
from flapgate.flap_core.env_gym import FlapEnv
from flapgate.flap_core.game import CoreGame


def follow_gap(obs: Dict[str, np.ndarray]) -> int:
    """Flap whenever the avatar has sunk below the next gap center and is falling."""
    return int(obs["next_gap_dy"] < -10 and obs["avatar_velocity"] > 0)


def benchmark_core(num_steps: int = 100_000, seed: int = 42) -> dict:
    """Benchmark raw CoreGame.step with random flaps."""
    config = load_config()
    game = CoreGame(config=config)
    rng = np.random.default_rng(seed)

    game.reset(seed=seed)
    game.start(schedule=False)

    runs = 1
    start = time.perf_counter()
    for _ in range(num_steps):
        result = game.step(flap=bool(rng.random() < 0.08))
        if result.terminated:
            game.start(schedule=False)
            runs += 1
    elapsed = time.perf_counter() - start

    return {
        "mode": "core",
        "num_steps": num_steps,
        "runs": runs,
        "best_score": game.best_score,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
    }


def benchmark_env(num_steps: int = 20_000, seed: int = 42) -> dict:
    """Benchmark FlapEnv.step with the gap-following policy."""
    env = FlapEnv()
    obs, _ = env.reset(seed=seed)

    episodes = 1
    start = time.perf_counter()
    for _ in range(num_steps):
        obs, _, terminated, truncated, _ = env.step(follow_gap(obs))
        if terminated or truncated:
            obs, _ = env.reset()
            episodes += 1
    elapsed = time.perf_counter() - start
    best = env.game.best_score
    env.close()

    return {
        "mode": "env",
        "num_steps": num_steps,
        "runs": episodes,
        "best_score": best,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
    }


def print_results(results: dict) -> None:
    print(f"\n{results['mode'].upper()}")
    print(f"  Steps:        {results['num_steps']:,}")
    print(f"  Runs:         {results['runs']:,}")
    print(f"  Best score:   {results['best_score']}")
    print(f"  Elapsed:      {results['elapsed_seconds']:.2f}s")
    print(f"  Throughput:   {results['steps_per_second']:,.0f} steps/s")


def main():
    parser = argparse.ArgumentParser(description="Benchmark Flapgate simulation speed")
    parser.add_argument("--steps", type=int, default=20_000, help="Steps per benchmark")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    print_results(benchmark_core(args.steps * 5, args.seed))
    print_results(benchmark_env(args.steps, args.seed))
    return 0


if __name__ == "__main__":
    sys.exit(main())
