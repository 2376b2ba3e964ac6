"""
Collision Detection
===================

Pure predicates over the avatar and the obstacle sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from flapgate.flap_core.obstacles import Obstacle
from flapgate.flap_core.physics import Avatar


@dataclass(frozen=True)
class CollisionResult:
    """Outcome of a collision check."""
    hit: bool
    reason: str  # "ground", "ceiling", "obstacle" or ""

    @staticmethod
    def none() -> "CollisionResult":
        return CollisionResult(False, "")

    def __bool__(self) -> bool:
        return self.hit


def hits_obstacle(
    avatar: Avatar,
    obstacle: Obstacle,
    gap_size: float,
    obstacle_width: float
) -> bool:
    """True if the avatar overlaps either solid segment of one obstacle."""
    in_x_range = (
        avatar.x + avatar.radius > obstacle.x
        and avatar.x - avatar.radius < obstacle.x + obstacle_width
    )
    if not in_x_range:
        return False

    gap_top = obstacle.gap_y - gap_size / 2
    gap_bottom = obstacle.gap_y + gap_size / 2
    return avatar.top < gap_top or avatar.bottom > gap_bottom


def find_collision(
    avatar: Avatar,
    obstacles: Iterable[Obstacle],
    playfield_height: float,
    ground_height: float,
    gap_size: float,
    obstacle_width: float
) -> CollisionResult:
    """
    Check ground, ceiling, then every obstacle.

    Ground is checked first, so it is the reported reason whenever the
    avatar touches it, regardless of the obstacle layout.

    Args:
        avatar: The avatar to test.
        obstacles: Current obstacles (any order).
        playfield_height: Play-field height in pixels.
        ground_height: Height of the ground strip.
        gap_size: Vertical size of each obstacle's gap.
        obstacle_width: Horizontal size of each obstacle.

    Returns:
        CollisionResult naming the first surface hit.
    """
    if avatar.bottom >= playfield_height - ground_height:
        return CollisionResult(True, "ground")
    if avatar.top <= 0:
        return CollisionResult(True, "ceiling")

    for obstacle in obstacles:
        if hits_obstacle(avatar, obstacle, gap_size, obstacle_width):
            return CollisionResult(True, "obstacle")

    return CollisionResult.none()


def is_colliding(
    avatar: Avatar,
    obstacles: Iterable[Obstacle],
    playfield_height: float,
    ground_height: float,
    gap_size: float,
    obstacle_width: float
) -> bool:
    """Boolean form of find_collision."""
    return find_collision(
        avatar, obstacles, playfield_height, ground_height, gap_size, obstacle_width
    ).hit
