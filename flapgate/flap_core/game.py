"""
Core Game
=========

Game state machine combining physics, obstacles, collision and scoring.

Phases::

    idle --start/flap--> playing --collision--> over --start/flap--> playing

A flap while playing only changes the avatar's velocity. A start while
playing is ignored. Every transition out of playing cancels the pending
tick before returning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from flapgate.flap_core.collision import CollisionResult, find_collision
from flapgate.flap_core.config_loader import GameConfig, get_config
from flapgate.flap_core.obstacles import ObstacleManager
from flapgate.flap_core.physics import Avatar, AvatarPhysics
from flapgate.flap_core.rng import GapSampler
from flapgate.flap_core.scheduler import FrameClock, TickHandle
from flapgate.flap_core.scoring import ScoreListener, ScoreTracker
from flapgate.flap_core.state_snapshot import RenderSnapshot, build_render_snapshot

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    OVER = "over"


@dataclass
class Run:
    """State owned by a single run. Replaced wholesale on every start."""
    avatar: Avatar
    obstacles: ObstacleManager
    ticks: int = 0
    collision: CollisionResult = field(default_factory=CollisionResult.none)


@dataclass
class TickResult:
    """Result of a single simulation tick."""
    ticked: bool
    delta_score: int
    collision: CollisionResult
    phase: GamePhase

    @property
    def terminated(self) -> bool:
        return self.collision.hit


RenderCallback = Callable[[RenderSnapshot], None]
PhaseListener = Callable[[GamePhase, GamePhase], None]


class CoreGame:
    """
    Main game simulation class.

    Orchestrates, once per tick:
    - Avatar physics
    - Obstacle advance, recycle and spawn
    - Collision detection
    - Render notification
    - Termination

    Ticks are driven by a FrameClock. The game holds at most one pending
    tick handle and always cancels it before leaving the playing phase.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        clock: Optional[FrameClock] = None,
        render_callback: Optional[RenderCallback] = None,
        sampler: Optional[GapSampler] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for gap placement.
            clock: Frame clock driving ticks. A private clock if None.
            render_callback: Called with a RenderSnapshot after every tick.
            sampler: Gap-center source. Built from seed if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._clock = clock if clock is not None else FrameClock()
        self._render_callback = render_callback

        self._physics = AvatarPhysics(config)
        self._sampler = sampler if sampler is not None else GapSampler(config, seed)
        self._scorer = ScoreTracker()

        self._phase = GamePhase.IDLE
        self._run = self._new_run()
        self._pending: Optional[TickHandle] = None
        self._runs_started: int = 0
        self._phase_listeners: List[PhaseListener] = []

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def clock(self) -> FrameClock:
        return self._clock

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def is_playing(self) -> bool:
        return self._phase is GamePhase.PLAYING

    @property
    def is_over(self) -> bool:
        return self._phase is GamePhase.OVER

    @property
    def run(self) -> Run:
        """The current run (read access for tools and tests)."""
        return self._run

    @property
    def avatar(self) -> Avatar:
        return self._run.avatar

    @property
    def obstacles(self) -> ObstacleManager:
        return self._run.obstacles

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def best_score(self) -> int:
        return self._scorer.best_score

    @property
    def seed(self) -> Optional[int]:
        """Seed of the last reseed, if any."""
        return self._seed

    @property
    def runs_started(self) -> int:
        return self._runs_started

    @property
    def pending_tick(self) -> Optional[TickHandle]:
        """The scheduled next tick, if any."""
        return self._pending

    @property
    def termination_reason(self) -> str:
        return self._run.collision.reason

    def set_render_callback(self, callback: Optional[RenderCallback]) -> None:
        self._render_callback = callback

    def add_score_listener(self, listener: ScoreListener) -> None:
        """Register a (score, best_score) callback, called on every change."""
        self._scorer.add_listener(listener)

    def add_phase_listener(self, listener: PhaseListener) -> None:
        """Register an (old_phase, new_phase) callback."""
        self._phase_listeners.append(listener)

    def _set_phase(self, phase: GamePhase) -> None:
        old = self._phase
        self._phase = phase
        for listener in list(self._phase_listeners):
            listener(old, phase)

    def _new_run(self) -> Run:
        return Run(
            avatar=self._physics.spawn_avatar(),
            obstacles=ObstacleManager(self._config, self._sampler)
        )

    # --- Intents ---------------------------------------------------------

    def start(self, seed: Optional[int] = None, schedule: bool = True) -> bool:
        """
        Begin a new run from idle or over.

        Args:
            seed: Reseed gap placement before the run. Keeps the current
                random stream if None.
            schedule: Put the first tick on the frame clock. Headless
                callers that drive the run with step() pass False.

        Returns:
            True if a run started, False if already playing.
        """
        if self._phase is GamePhase.PLAYING:
            logger.debug("Ignoring start while playing")
            return False

        self.cancel_scheduled()
        if seed is not None:
            self._seed = seed
            self._sampler.reset(seed)

        self._run = self._new_run()
        self._scorer.reset()
        self._runs_started += 1
        self._set_phase(GamePhase.PLAYING)
        logger.info("Run %d started", self._runs_started)

        if schedule:
            self.schedule_next()
        return True

    def flap(self) -> None:
        """Flap while playing; otherwise start a run."""
        if self._phase is not GamePhase.PLAYING:
            self.start()
            return
        self._physics.flap(self._run.avatar)

    def reset(self, seed: Optional[int] = None) -> RenderSnapshot:
        """
        Return to idle with a fresh run. The best score is kept.

        Used by agents and tools that need to abandon a run in progress.

        Args:
            seed: Reseed gap placement. Keeps the current stream if None.

        Returns:
            Snapshot of the idle state.
        """
        self.cancel_scheduled()
        if seed is not None:
            self._seed = seed
            self._sampler.reset(seed)
        self._run = self._new_run()
        self._scorer.reset()
        if self._phase is not GamePhase.IDLE:
            self._set_phase(GamePhase.IDLE)
        return self.get_render_snapshot()

    # --- Frame driver ----------------------------------------------------

    def schedule_next(self) -> Optional[TickHandle]:
        """
        Schedule the next tick on the frame clock.

        Only one tick is ever pending. Does nothing outside the playing
        phase.
        """
        if self._phase is not GamePhase.PLAYING:
            return None
        if self._pending is not None and self._pending.pending:
            return self._pending
        self._pending = self._clock.schedule(self._on_frame)
        return self._pending

    def cancel_scheduled(self) -> None:
        """Cancel the pending tick, if any."""
        self._clock.cancel(self._pending)
        self._pending = None

    def _on_frame(self) -> None:
        self._pending = None
        result = self.tick()
        if not result.terminated:
            self.schedule_next()

    # --- Simulation ------------------------------------------------------

    def tick(self) -> TickResult:
        """
        Advance the simulation by one tick.

        Returns:
            TickResult. A no-op result if not playing.
        """
        if self._phase is not GamePhase.PLAYING:
            logger.debug("Ignoring tick in phase %s", self._phase.value)
            return TickResult(False, 0, CollisionResult.none(), self._phase)

        run = self._run
        avatar = run.avatar
        playfield = self._config.playfield
        obstacle_cfg = self._config.obstacles

        self._physics.step(avatar)
        passed = run.obstacles.update(avatar.x)
        delta_score = self._scorer.apply_passes(passed)
        run.ticks += 1

        collision = find_collision(
            avatar,
            run.obstacles,
            playfield.height,
            playfield.ground_height,
            obstacle_cfg.gap_size,
            obstacle_cfg.width
        )

        if self._render_callback is not None:
            self._render_callback(self.get_render_snapshot())

        if collision.hit:
            run.collision = collision
            self._end_run()

        return TickResult(True, delta_score, collision, self._phase)

    def step(self, flap: bool = False) -> TickResult:
        """
        Headless step for agents: optional flap, then one tick.

        Bypasses the frame clock: a pending tick is cancelled first, so a
        run is never advanced by both step() and the clock. Starting a run
        is left to start().
        """
        self.cancel_scheduled()
        if flap and self._phase is GamePhase.PLAYING:
            self._physics.flap(self._run.avatar)
        return self.tick()

    def _end_run(self) -> None:
        self.cancel_scheduled()
        self._scorer.finish_run()
        self._set_phase(GamePhase.OVER)
        logger.info(
            "Run %d over after %d ticks: score=%d best=%d reason=%s",
            self._runs_started, self._run.ticks, self._scorer.score,
            self._scorer.best_score, self._run.collision.reason
        )

    # --- Views -----------------------------------------------------------

    def get_render_snapshot(self) -> RenderSnapshot:
        """Detached read-only view of the current state."""
        return build_render_snapshot(
            self._config,
            self._phase.value,
            self._run.avatar,
            self._run.obstacles,
            self._scorer.score,
            self._scorer.best_score,
            self._run.ticks
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._scorer.score,
            "best_score": self._scorer.best_score,
            "phase": self._phase.value,
            "ticks": self._run.ticks,
            "obstacle_count": len(self._run.obstacles),
            "obstacles_spawned": self._run.obstacles.spawned_count,
            "terminated_reason": self._run.collision.reason,
        }
