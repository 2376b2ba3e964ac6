"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the flap game.
Reward is the number of gates passed during the step.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from flapgate.flap_core.config_loader import GameConfig, load_config
from flapgate.flap_core.game import CoreGame
from flapgate.flap_core.state_snapshot import SnapshotBuilder

logger = logging.getLogger(__name__)

NOOP = 0
FLAP = 1


class FlapEnv(gym.Env):
    """
    Flap-through-the-gates game as a Gymnasium environment.

    Action Space:
        Discrete(2): 0 = do nothing, 1 = flap.

    Observation Space:
        Dict with avatar state, next-obstacle features and fixed-size
        obstacle arrays (masked).

    Reward:
        +1 for each obstacle passed during the step.

    Info:
        Contains score, best_score, delta_score, terminated_reason, etc.
    """

    metadata = {
        "render_modes": ["human", "rgb_array"],
        "render_fps": 60,
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
            config: Already-loaded configuration. Takes precedence over config_path.
            render_mode: "human" for window, "rgb_array" for numpy, None for headless.
            debug: If True, enables verbose debug logging from the core.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self.render_mode = render_mode
        self._debug = debug

        if self._debug:
            logging.getLogger("flapgate").setLevel(logging.DEBUG)
            logger.debug(
                "FlapEnv initialized: field %dx%d, ground %d",
                self._config.playfield.width,
                self._config.playfield.height,
                self._config.playfield.ground_height
            )

        self._game = CoreGame(config=self._config)
        self._builder = SnapshotBuilder(self._config)
        self._renderer = None

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_obs = self._config.observation.max_obstacles
        playfield = self._config.playfield

        return spaces.Dict({
            "avatar_y": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "avatar_velocity": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "next_obstacle_dx": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "next_gap_y": spaces.Box(low=0, high=playfield.height, shape=(), dtype=np.float32),
            "next_gap_dy": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "has_next_obstacle": spaces.Discrete(2),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "obstacle_x": spaces.Box(low=-np.inf, high=np.inf, shape=(max_obs,), dtype=np.float32),
            "obstacle_gap_y": spaces.Box(low=0, high=playfield.height, shape=(max_obs,), dtype=np.float32),
            "obstacle_passed": spaces.MultiBinary(max_obs),
            "obstacle_mask": spaces.MultiBinary(max_obs),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment and start a new run.

        Args:
            seed: Random seed for gap placement.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._game.reset(seed=seed)
        # Agents step explicitly; the frame clock is not used here.
        self._game.start(schedule=False)

        obs = self._builder.build(self._game.get_render_snapshot())
        info = self._game.get_info()
        info["delta_score"] = 0
        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one tick.

        Args:
            action: 0 (no-op) or 1 (flap).

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])

        result = self._game.step(flap=int(action) == FLAP)

        obs = self._builder.build(self._game.get_render_snapshot())
        reward = float(result.delta_score)

        info = self._game.get_info()
        info["delta_score"] = result.delta_score

        if result.terminated:
            logger.debug("Terminated: %s", result.collision.reason)

        if self.render_mode == "human":
            self.render()

        return obs, reward, result.terminated or self._game.is_over, False, info

    def _init_renderer(self) -> None:
        from flapgate.flap_core.render_pygame import PygameRenderer
        self._renderer = PygameRenderer(self._config)

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode is None:
            return None

        if self._renderer is None:
            self._init_renderer()

        snapshot = self._game.get_render_snapshot()
        if self.render_mode == "rgb_array":
            return self._renderer.render(snapshot)

        self._renderer.render_to_screen(snapshot)
        return None

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        return self._config
