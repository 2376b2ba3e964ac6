"""
Avatar Physics
==============

Per-tick vertical integration and the flap impulse.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flapgate.flap_core.config_loader import GameConfig, get_config


@dataclass
class Avatar:
    """The player-controlled circle. Only y and velocity change during a run."""
    x: float
    y: float
    radius: float
    velocity: float = 0.0

    @property
    def top(self) -> float:
        return self.y - self.radius

    @property
    def bottom(self) -> float:
        return self.y + self.radius


def integrate(avatar: Avatar, gravity: float) -> None:
    """Advance one tick: v' = v + g, then y' = y + v'. No clamping."""
    avatar.velocity += gravity
    avatar.y += avatar.velocity


def flap(avatar: Avatar, impulse: float) -> None:
    """Replace the current velocity with the flap impulse."""
    avatar.velocity = impulse


class AvatarPhysics:
    """
    Binds the physics functions to the configured constants.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._gravity = config.physics.gravity
        self._impulse = config.physics.flap_impulse

    @property
    def gravity(self) -> float:
        return self._gravity

    @property
    def flap_impulse(self) -> float:
        return self._impulse

    def spawn_avatar(self) -> Avatar:
        """Create a fresh avatar at the configured start position."""
        return Avatar(
            x=self._config.avatar.x,
            y=self._config.avatar_start_y,
            radius=self._config.avatar.radius,
            velocity=0.0
        )

    def step(self, avatar: Avatar) -> None:
        """Apply gravity for one tick."""
        integrate(avatar, self._gravity)

    def flap(self, avatar: Avatar) -> None:
        """Apply the flap impulse."""
        flap(avatar, self._impulse)
