"""
Flap Core - The simulation behind the game.

This module provides the per-tick game simulation, the Gymnasium
environment wrapper, and the supporting systems (physics, obstacles,
collision, scoring, frame scheduling, RNG).

Main exports:
- CoreGame: Game state machine (idle -> playing -> over)
- FlapEnv: Gymnasium environment for agents
- FrameClock: Cancellable once-per-frame scheduler
- GameConfig: Configuration loaded from game_config.yaml
"""

from flapgate.flap_core.config_loader import GameConfig, load_config, get_config
from flapgate.flap_core.physics import Avatar, AvatarPhysics
from flapgate.flap_core.obstacles import Obstacle, ObstacleManager
from flapgate.flap_core.collision import CollisionResult, find_collision, is_colliding
from flapgate.flap_core.scheduler import FrameClock, TickHandle
from flapgate.flap_core.game import CoreGame, GamePhase, TickResult
from flapgate.flap_core.state_snapshot import RenderSnapshot, SnapshotBuilder
from flapgate.flap_core.env_gym import FlapEnv
from flapgate.flap_core.replay_recorder import (
    ReplayRecorder,
    record_episode,
    load_replay,
    verify_replay,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "Avatar",
    "AvatarPhysics",
    "Obstacle",
    "ObstacleManager",
    "CollisionResult",
    "find_collision",
    "is_colliding",
    "FrameClock",
    "TickHandle",
    "CoreGame",
    "GamePhase",
    "TickResult",
    "RenderSnapshot",
    "SnapshotBuilder",
    "FlapEnv",
    "ReplayRecorder",
    "record_episode",
    "load_replay",
    "verify_replay",
    "generate_replay_filename",
]
