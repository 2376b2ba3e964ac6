"""
State Snapshot
==============

Read-only views of the simulation for renderers, plus fixed-size numpy
arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from flapgate.flap_core.config_loader import GameConfig, get_config
from flapgate.flap_core.obstacles import Obstacle
from flapgate.flap_core.physics import Avatar


@dataclass(frozen=True)
class AvatarView:
    x: float
    y: float
    radius: float
    velocity: float


@dataclass(frozen=True)
class ObstacleView:
    x: float
    gap_y: float
    passed: bool


@dataclass(frozen=True)
class RenderSnapshot:
    """
    Everything a renderer needs for one frame.

    Frozen and detached from the live run, so adapters cannot write back
    into simulation state.
    """
    phase: str
    avatar: AvatarView
    obstacles: Tuple[ObstacleView, ...]
    width: float
    height: float
    ground_height: float
    gap_size: float
    obstacle_width: float
    score: int
    best_score: int
    tick: int

    @property
    def ground_y(self) -> float:
        return self.height - self.ground_height

    @property
    def is_over(self) -> bool:
        return self.phase == "over"


def build_render_snapshot(
    config: GameConfig,
    phase: str,
    avatar: Avatar,
    obstacles: Iterable[Obstacle],
    score: int,
    best_score: int,
    tick: int
) -> RenderSnapshot:
    """Copy live state into a RenderSnapshot."""
    return RenderSnapshot(
        phase=phase,
        avatar=AvatarView(avatar.x, avatar.y, avatar.radius, avatar.velocity),
        obstacles=tuple(ObstacleView(o.x, o.gap_y, o.passed) for o in obstacles),
        width=float(config.playfield.width),
        height=float(config.playfield.height),
        ground_height=float(config.playfield.ground_height),
        gap_size=config.obstacles.gap_size,
        obstacle_width=config.obstacles.width,
        score=score,
        best_score=best_score,
        tick=tick
    )


class SnapshotBuilder:
    """Builds observation dicts with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_obstacles = config.observation.max_obstacles

        # Pre-allocate arrays
        self._obs_x = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_gap_y = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_passed = np.zeros(self._max_obstacles, dtype=bool)
        self._obs_mask = np.zeros(self._max_obstacles, dtype=bool)

    @property
    def max_obstacles(self) -> int:
        return self._max_obstacles

    def _next_obstacle(self, snapshot: RenderSnapshot) -> Optional[ObstacleView]:
        """First obstacle whose trailing edge is still at or right of the avatar."""
        for obstacle in snapshot.obstacles:
            if obstacle.x + snapshot.obstacle_width >= snapshot.avatar.x - snapshot.avatar.radius:
                return obstacle
        return None

    def build(self, snapshot: RenderSnapshot) -> Dict[str, np.ndarray]:
        """Convert a render snapshot to a Gymnasium observation dictionary."""
        self._obs_x.fill(0)
        self._obs_gap_y.fill(0)
        self._obs_passed.fill(False)
        self._obs_mask.fill(False)

        count = min(len(snapshot.obstacles), self._max_obstacles)
        for i in range(count):
            obstacle = snapshot.obstacles[i]
            self._obs_x[i] = obstacle.x
            self._obs_gap_y[i] = obstacle.gap_y
            self._obs_passed[i] = obstacle.passed
            self._obs_mask[i] = True

        avatar = snapshot.avatar
        upcoming = self._next_obstacle(snapshot)
        if upcoming is not None:
            next_dx = upcoming.x - avatar.x
            next_gap_y = upcoming.gap_y
            has_next = 1
        else:
            next_dx = snapshot.width - avatar.x
            next_gap_y = snapshot.ground_y / 2
            has_next = 0

        return {
            "avatar_y": np.array(avatar.y, dtype=np.float32),
            "avatar_velocity": np.array(avatar.velocity, dtype=np.float32),
            "next_obstacle_dx": np.array(next_dx, dtype=np.float32),
            "next_gap_y": np.array(next_gap_y, dtype=np.float32),
            "next_gap_dy": np.array(next_gap_y - avatar.y, dtype=np.float32),
            "has_next_obstacle": np.array(has_next, dtype=np.int8),
            "score": np.array(snapshot.score, dtype=np.int64),
            "obstacle_x": self._obs_x.copy(),
            "obstacle_gap_y": self._obs_gap_y.copy(),
            "obstacle_passed": self._obs_passed.copy(),
            "obstacle_mask": self._obs_mask.copy(),
        }
