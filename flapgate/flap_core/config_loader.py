"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml


@dataclass(frozen=True)
class PlayfieldConfig:
    """Play-field geometry."""
    width: int           # Play-field width in pixels
    height: int          # Play-field height in pixels (y grows downward)
    ground_height: int   # Height of the ground strip

    @property
    def ground_y(self) -> float:
        """Y coordinate of the ground line."""
        return float(self.height - self.ground_height)


@dataclass(frozen=True)
class PhysicsConfig:
    """Avatar physics parameters."""
    gravity: float       # Velocity added per tick
    flap_impulse: float  # Velocity set by a flap (negative = upward)


@dataclass(frozen=True)
class AvatarConfig:
    """Avatar placement and size."""
    x: float
    radius: float
    start_y: Optional[float] = None  # None = half the play-field height


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle geometry and scrolling."""
    gap_size: float
    width: float
    speed: float
    spacing: float
    min_gap_margin: float


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_obstacles: int


@dataclass(frozen=True)
class RenderConfig:
    """Human-mode rendering parameters."""
    fps: int
    scale: float
    colors: Tuple[Tuple[str, Tuple[int, int, int]], ...]

    def color(self, name: str) -> Tuple[int, int, int]:
        """Look up a named color."""
        for key, value in self.colors:
            if key == name:
                return value
        raise KeyError(f"Unknown color: {name}")


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    playfield: PlayfieldConfig
    physics: PhysicsConfig
    avatar: AvatarConfig
    obstacles: ObstacleConfig
    observation: ObservationConfig
    render: RenderConfig

    @property
    def avatar_start_y(self) -> float:
        """Initial avatar Y for every run."""
        if self.avatar.start_y is None:
            return self.playfield.height / 2
        return float(self.avatar.start_y)

    @property
    def gap_y_range(self) -> Tuple[float, float]:
        """
        Raw (min, max) range for gap centers.

        May be inverted when the margin is too large for the play-field;
        callers clamp.
        """
        margin = self.obstacles.min_gap_margin
        return (margin, self.playfield.ground_y - margin)


_DEFAULT_COLORS: Dict[str, Tuple[int, int, int]] = {
    "sky_top": (143, 211, 255),
    "sky_bottom": (223, 245, 255),
    "ground": (246, 198, 91),
    "ground_shadow": (217, 158, 60),
    "pipe": (46, 204, 113),
    "pipe_shadow": (30, 159, 87),
    "bird": (255, 183, 3),
    "bird_wing": (251, 133, 0),
    "beak": (255, 103, 0),
    "eye": (29, 53, 87),
}


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_colors(colors_data: Optional[dict]) -> Tuple[Tuple[str, Tuple[int, int, int]], ...]:
    """Merge YAML colors over the defaults."""
    colors = dict(_DEFAULT_COLORS)
    for name, value in (colors_data or {}).items():
        colors[str(name)] = _parse_color(value)
    return tuple(colors.items())


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    playfield = config.playfield
    if playfield.width <= 0 or playfield.height <= 0:
        raise ValueError(
            f"Play-field size must be positive, got {playfield.width}x{playfield.height}"
        )
    if not 0 <= playfield.ground_height < playfield.height:
        raise ValueError(
            f"ground_height ({playfield.ground_height}) must be in [0, height)"
        )

    if config.physics.flap_impulse >= 0:
        raise ValueError(
            f"flap_impulse must be negative (upward), got {config.physics.flap_impulse}"
        )

    if config.avatar.radius <= 0:
        raise ValueError(f"Avatar radius must be positive, got {config.avatar.radius}")
    if not 0 <= config.avatar.x <= playfield.width:
        raise ValueError(
            f"Avatar x ({config.avatar.x}) must lie inside the play-field"
        )

    obstacles = config.obstacles
    if obstacles.speed <= 0:
        raise ValueError(f"Obstacle speed must be positive, got {obstacles.speed}")
    if obstacles.spacing <= 0:
        raise ValueError(f"Obstacle spacing must be positive, got {obstacles.spacing}")
    if obstacles.width <= 0 or obstacles.gap_size <= 0:
        raise ValueError("Obstacle width and gap_size must be positive")
    if obstacles.min_gap_margin < 0:
        raise ValueError(
            f"min_gap_margin must be non-negative, got {obstacles.min_gap_margin}"
        )

    if config.observation.max_obstacles < 1:
        raise ValueError(
            f"observation.max_obstacles must be >= 1, got {config.observation.max_obstacles}"
        )


def default_config_path() -> str:
    """Location of the bundled game_config.yaml."""
    return os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "game_config.yaml"
    )


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
        config_path = default_config_path()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    playfield_data = raw["playfield"]
    playfield = PlayfieldConfig(
        width=int(playfield_data["width"]),
        height=int(playfield_data["height"]),
        ground_height=int(playfield_data.get("ground_height", 70))
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity=float(physics_data["gravity"]),
        flap_impulse=float(physics_data["flap_impulse"])
    )

    avatar_data = raw["avatar"]
    start_y = avatar_data.get("start_y")
    avatar = AvatarConfig(
        x=float(avatar_data["x"]),
        radius=float(avatar_data["radius"]),
        start_y=None if start_y is None else float(start_y)
    )

    obstacle_data = raw["obstacles"]
    obstacles = ObstacleConfig(
        gap_size=float(obstacle_data["gap_size"]),
        width=float(obstacle_data["width"]),
        speed=float(obstacle_data["speed"]),
        spacing=float(obstacle_data["spacing"]),
        min_gap_margin=float(obstacle_data.get("min_gap_margin", 120))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_obstacles=int(obs_data.get("max_obstacles", 4))
    )

    render_data = raw.get("render", {})
    render = RenderConfig(
        fps=int(render_data.get("fps", 60)),
        scale=float(render_data.get("scale", 1.5)),
        colors=_parse_colors(render_data.get("colors"))
    )

    config = GameConfig(
        playfield=playfield,
        physics=physics,
        avatar=avatar,
        obstacles=obstacles,
        observation=observation,
        render=render
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
