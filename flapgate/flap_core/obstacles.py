"""
Obstacle Manager
================

Spawns, scrolls and recycles gated obstacles, and tracks which ones the
avatar has passed.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, Optional

from flapgate.flap_core.config_loader import GameConfig, get_config
from flapgate.flap_core.rng import GapSampler

logger = logging.getLogger(__name__)


@dataclass
class Obstacle:
    """A vertical pair of solid segments with a passable gap."""
    x: float
    gap_y: float
    passed: bool = False

    def trailing_edge(self, width: float) -> float:
        """X coordinate of the obstacle's right side."""
        return self.x + width


class ObstacleManager:
    """
    Owns the ordered obstacle sequence for one run.

    Obstacles are kept in spawn order, which is also left-to-right order,
    so recycling only ever removes from the front.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        sampler: Optional[GapSampler] = None
    ):
        """
        Initialize obstacle manager.

        Args:
            config: Game configuration. Uses default if None.
            sampler: Gap-center source. A fresh unseeded sampler if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._sampler = sampler if sampler is not None else GapSampler(config)

        self._spawn_x = float(config.playfield.width)
        self._width = config.obstacles.width
        self._speed = config.obstacles.speed
        self._spacing = config.obstacles.spacing

        self._obstacles: Deque[Obstacle] = deque()
        self._distance_since_spawn: float = 0.0
        self._spawned: int = 0

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self._obstacles)

    def __len__(self) -> int:
        return len(self._obstacles)

    @property
    def obstacles(self) -> Deque[Obstacle]:
        """Live obstacle sequence, oldest first."""
        return self._obstacles

    @property
    def width(self) -> float:
        return self._width

    @property
    def distance_since_spawn(self) -> float:
        """Horizontal distance scrolled since the last spawn."""
        return self._distance_since_spawn

    @property
    def spawned_count(self) -> int:
        """Total obstacles spawned this run."""
        return self._spawned

    def spawn(self) -> Obstacle:
        """Create one obstacle at the right edge of the play-field."""
        obstacle = Obstacle(x=self._spawn_x, gap_y=self._sampler.sample())
        self._obstacles.append(obstacle)
        self._spawned += 1
        logger.debug("Spawned obstacle #%d gap_y=%.1f", self._spawned, obstacle.gap_y)
        return obstacle

    def advance(self, speed: float, avatar_x: float) -> int:
        """
        Scroll every obstacle left and mark newly passed ones.

        Args:
            speed: Horizontal distance to move this tick.
            avatar_x: Avatar's fixed X coordinate.

        Returns:
            Number of obstacles passed this tick.
        """
        passed = 0
        for obstacle in self._obstacles:
            obstacle.x -= speed
            if not obstacle.passed and obstacle.trailing_edge(self._width) < avatar_x:
                obstacle.passed = True
                passed += 1
        return passed

    def recycle(self) -> int:
        """
        Drop obstacles whose trailing edge has left the play-field.

        Returns:
            Number of obstacles removed.
        """
        removed = 0
        while self._obstacles and self._obstacles[0].trailing_edge(self._width) <= 0:
            self._obstacles.popleft()
            removed += 1
        return removed

    def apply_spacing(self) -> Optional[Obstacle]:
        """
        Spawn when enough distance has scrolled since the last spawn.

        Returns:
            The new obstacle, or None if none spawned this tick.
        """
        if self._distance_since_spawn >= self._spacing:
            self._distance_since_spawn = 0.0
            return self.spawn()
        self._distance_since_spawn += self._speed
        return None

    def update(self, avatar_x: float) -> int:
        """
        Run one tick: advance, recycle, then the spacing policy.

        Returns:
            Number of obstacles passed this tick.
        """
        passed = self.advance(self._speed, avatar_x)
        self.recycle()
        self.apply_spacing()
        return passed
