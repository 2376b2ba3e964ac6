"""
Replay Recorder
===============

Records FlapEnv episodes as a seed plus one action per tick, and replays
them headlessly to check the recorded score.

Usage:
    from flapgate.flap_core import FlapEnv, ReplayRecorder

    env = FlapEnv()
    recorder = ReplayRecorder(env, agent_name="my_agent")

    obs, info = recorder.reset(seed=42)

    done = False
    while not done:
        action = your_agent(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    recorder.save("my_replay.json")
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np
import gymnasium as gym

from flapgate.flap_core.config_loader import GameConfig, get_config
from flapgate.flap_core.game import CoreGame

logger = logging.getLogger(__name__)


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Generate a timestamped replay filename.

    Format: {agent_name}_{YYYYMMDD_HHMMSS}_s{seed}.json
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if seed is not None:
        filename = f"{agent_name}_{timestamp}_s{seed}.json"
    else:
        filename = f"{agent_name}_{timestamp}.json"

    if directory:
        return Path(directory) / filename
    return Path(filename)


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Hash every parameter that affects the simulation."""
    if config is None:
        config = get_config()
    hash_data = {
        "playfield": asdict(config.playfield),
        "physics": asdict(config.physics),
        "avatar": asdict(config.avatar),
        "obstacles": asdict(config.obstacles),
    }
    return hashlib.md5(json.dumps(hash_data, sort_keys=True).encode()).hexdigest()[:8]


class ReplayRecorder:
    """
    Wrapper that records environment interactions for replay.

    Attributes:
        env: The wrapped Gymnasium environment.
        recording: Whether currently recording.
    """

    def __init__(
        self,
        env: gym.Env,
        agent_name: str = "unknown",
        auto_save_path: Optional[str] = None
    ):
        """
        Initialize the replay recorder.

        Args:
            env: The Gymnasium environment to wrap.
            agent_name: Name of the agent (stored in replay metadata).
            auto_save_path: If provided, automatically save replay on episode end.
        """
        self.env = env
        self.agent_name = agent_name
        self.auto_save_path = auto_save_path

        self._recording = False
        self._seed: Optional[int] = None
        self._actions: List[int] = []
        self._scores: List[int] = []
        self._termination_reason: str = ""
        self._config_hash = compute_config_hash(getattr(env, "config", None))

    @property
    def recording(self) -> bool:
        return self._recording

    @property
    def observation_space(self):
        return self.env.observation_space

    @property
    def action_space(self):
        return self.env.action_space

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict] = None
    ) -> Tuple[Any, Dict]:
        """
        Reset the environment and start recording.

        A replay is only reproducible from its seed, so one is drawn when
        none is given.
        """
        if seed is None:
            seed = int(np.random.default_rng().integers(2**31 - 1))
        self._actions = []
        self._scores = []
        self._termination_reason = ""
        self._seed = seed
        self._recording = True

        return self.env.reset(seed=seed, options=options)

    def step(self, action: Union[int, np.ndarray]) -> Tuple[Any, float, bool, bool, Dict]:
        """Take a step and record it."""
        if isinstance(action, np.ndarray):
            action_val = int(action.item() if action.size == 1 else action[0])
        else:
            action_val = int(action)

        obs, reward, terminated, truncated, info = self.env.step(action)

        if self._recording:
            self._actions.append(action_val)
            self._scores.append(int(info.get("score", 0)))
            if terminated or truncated:
                self._termination_reason = info.get("terminated_reason", "unknown")
                self._recording = False

        if (terminated or truncated) and self.auto_save_path:
            self.save(self.auto_save_path)

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """Get the current replay data as a dictionary."""
        return {
            "seed": self._seed,
            "agent": self.agent_name,
            "config_hash": self._config_hash,
            "actions": self._actions.copy(),
            "final_score": self._scores[-1] if self._scores else 0,
            "total_steps": len(self._actions),
            "termination_reason": self._termination_reason,
        }

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Save the replay to a JSON file.

        Args:
            path: Path to save the replay. If None, auto-generates a timestamped name.
            overwrite: If True, overwrite existing file.
            directory: Directory for auto-generated filename (only used if path is None).

        Returns:
            Path where the replay was saved.
        """
        if path is None:
            path = generate_replay_filename(
                agent_name=self.agent_name,
                seed=self._seed,
                directory=directory
            )
        else:
            path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)

        replay_data = self.get_replay_data()
        with open(path, "w") as f:
            json.dump(replay_data, f, indent=2)

        logger.info(
            "Replay saved: %s (seed=%s, steps=%d, score=%d)",
            path, self._seed, len(self._actions), replay_data["final_score"]
        )
        return path

    def close(self) -> None:
        """Close the wrapped environment."""
        self.env.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a replay JSON file."""
    with open(path, "r") as f:
        return json.load(f)


def replay_score(replay: Dict[str, Any], config: Optional[GameConfig] = None) -> int:
    """
    Re-simulate a replay headlessly and return the score it reaches.

    Raises:
        ValueError: If the replay has no seed or was recorded with a
            different config.
    """
    if config is None:
        config = get_config()

    if replay.get("seed") is None:
        raise ValueError("Replay has no seed and cannot be re-simulated")

    expected_hash = compute_config_hash(config)
    if replay.get("config_hash") != expected_hash:
        raise ValueError(
            f"Replay config hash {replay.get('config_hash')} does not match "
            f"current config {expected_hash}"
        )

    game = CoreGame(config=config)
    game.reset(seed=replay.get("seed"))
    game.start(schedule=False)

    for action in replay["actions"]:
        result = game.step(flap=int(action) == 1)
        if result.terminated:
            break
    return game.score


def verify_replay(replay: Dict[str, Any], config: Optional[GameConfig] = None) -> bool:
    """True if re-simulating the replay reproduces its recorded final score."""
    return replay_score(replay, config) == int(replay.get("final_score", 0))


def record_episode(
    env: gym.Env,
    agent_fn: Callable[[Any], int],
    seed: int,
    save_path: Optional[str] = None,
    agent_name: str = "unknown",
    max_steps: Optional[int] = None
) -> Dict[str, Any]:
    """
    Convenience function to record a single episode.

    Args:
        env: The Gymnasium environment.
        agent_fn: Function that takes observation and returns action.
        seed: Random seed for the episode.
        save_path: If provided, save replay to this path.
        agent_name: Name of the agent.
        max_steps: Stop early after this many steps.

    Returns:
        Replay data dictionary.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)

    obs, info = recorder.reset(seed=seed)

    done = False
    steps = 0
    while not done:
        action = agent_fn(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        steps += 1
        done = terminated or truncated or (max_steps is not None and steps >= max_steps)

    replay_data = recorder.get_replay_data()

    if save_path:
        recorder.save(save_path)

    return replay_data
