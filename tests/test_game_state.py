"""
Tests for the game state machine.
"""

from dataclasses import replace

import pytest

from flapgate.flap_core.config_loader import load_config
from flapgate.flap_core.game import CoreGame, GamePhase
from flapgate.flap_core.scheduler import FrameClock


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def hover_config(config):
    """No gravity and a gap wider than the field: nothing can be hit."""
    return replace(
        config,
        physics=replace(config.physics, gravity=0.0),
        obstacles=replace(config.obstacles, gap_size=1000.0)
    )


@pytest.fixture
def clock():
    return FrameClock()


@pytest.fixture
def game(config, clock):
    return CoreGame(config=config, seed=42, clock=clock)


def play_until_over(game, limit=10_000):
    for _ in range(limit):
        if game.is_over:
            return
        game.clock.run_frame()
    raise AssertionError("run did not end")


class TestTransitions:
    """Test legal and ignored transitions."""

    def test_initial_phase_is_idle(self, game):
        assert game.phase is GamePhase.IDLE
        assert game.score == 0
        assert game.best_score == 0
        assert game.pending_tick is None

    def test_start_from_idle(self, game):
        assert game.start()
        assert game.phase is GamePhase.PLAYING
        assert game.pending_tick is not None
        assert game.runs_started == 1

    def test_flap_from_idle_starts(self, game):
        game.flap()
        assert game.phase is GamePhase.PLAYING
        assert game.avatar.velocity == 0.0

    def test_start_while_playing_is_ignored(self, game):
        game.start()
        run = game.run
        handle = game.pending_tick

        assert not game.start()
        assert game.run is run
        assert game.pending_tick is handle
        assert game.runs_started == 1

    def test_flap_while_playing_never_restarts(self, game, config):
        game.start()
        run = game.run

        game.flap()

        assert game.run is run
        assert game.runs_started == 1
        assert game.avatar.velocity == config.physics.flap_impulse

    def test_tick_outside_playing_is_noop(self, game):
        result = game.tick()
        assert not result.ticked
        assert game.run.ticks == 0

    def test_collision_ends_run(self, game):
        game.start()
        play_until_over(game)

        assert game.phase is GamePhase.OVER
        assert game.pending_tick is None
        assert game.clock.pending_count == 0

    def test_flap_from_over_restarts(self, game):
        game.start()
        play_until_over(game)
        old_run = game.run

        game.flap()

        assert game.phase is GamePhase.PLAYING
        assert game.run is not old_run
        assert game.runs_started == 2

    def test_phase_listener(self, game):
        seen = []
        game.add_phase_listener(lambda old, new: seen.append((old, new)))

        game.start()
        play_until_over(game)

        assert seen == [
            (GamePhase.IDLE, GamePhase.PLAYING),
            (GamePhase.PLAYING, GamePhase.OVER),
        ]


class TestFreeFall:
    """Free fall on the default 320x480 field."""

    def test_ground_collision_tick(self, game, config):
        """From y=240 at rest the avatar reaches the ground on tick 30."""
        game.start()
        g = config.physics.gravity

        play_until_over(game)

        assert game.run.ticks == 30
        assert game.termination_reason == "ground"
        assert game.avatar.y == pytest.approx(240 + sum(k * g for k in range(1, 31)))
        assert game.avatar.y + config.avatar.radius >= 410

    def test_not_over_one_tick_earlier(self, game, config):
        game.start(schedule=False)
        for _ in range(29):
            assert not game.step().terminated
        assert game.avatar.y + config.avatar.radius < 410
        assert game.step().terminated


class TestScoring:
    """Test score and best score across runs."""

    def test_score_counts_passed_obstacles(self, hover_config):
        """Spawns at ticks 71, 142, 213, 284; each passes 110 ticks later."""
        game = CoreGame(config=hover_config, seed=3)
        game.start(schedule=False)

        for _ in range(400):
            assert not game.step().terminated

        assert game.score == 4
        passed_live = sum(1 for o in game.obstacles if o.passed)
        assert passed_live <= game.score

    def test_score_listener_sees_every_change(self, hover_config):
        game = CoreGame(config=hover_config, seed=3)
        updates = []
        game.add_score_listener(lambda score, best: updates.append((score, best)))

        game.start(schedule=False)
        for _ in range(400):
            game.step()

        assert updates[0] == (0, 0)
        assert [s for s, _ in updates[1:]] == [1, 2, 3, 4]

    def test_best_score_is_max_and_never_decreases(self, hover_config):
        game = CoreGame(config=hover_config, seed=3)

        game.start(schedule=False)
        for _ in range(400):
            game.step()
        game.avatar.y = 1000.0
        assert game.step().terminated
        assert game.best_score == 4

        # A worse run leaves the best score alone
        game.start(schedule=False)
        assert game.score == 0
        game.avatar.y = 1000.0
        game.step()
        assert game.is_over
        assert game.best_score == 4

    def test_restart_resets_run_state(self, hover_config):
        game = CoreGame(config=hover_config, seed=3)
        game.start(schedule=False)
        for _ in range(250):
            game.step()
        assert game.obstacles.distance_since_spawn > 0
        assert len(game.obstacles) > 0
        game.avatar.y = 1000.0
        game.step()

        game.start()

        assert game.score == 0
        assert len(game.obstacles) == 0
        assert game.obstacles.distance_since_spawn == 0.0
        assert game.avatar.y == hover_config.playfield.height / 2
        assert game.run.ticks == 0


class TestScheduling:
    """Test ownership of the pending tick."""

    def test_one_tick_per_frame(self, game):
        game.start()
        for frame in range(1, 11):
            game.clock.run_frame()
            assert game.run.ticks == frame
            assert game.clock.pending_count == 1

    def test_reset_cancels_pending_tick(self, game):
        game.start()
        stale = game.pending_tick

        game.reset()

        assert stale.cancelled
        assert game.phase is GamePhase.IDLE
        assert game.clock.pending_count == 0

    def test_no_double_simulation_after_restart(self, game):
        """A stale tick from an abandoned run never fires against the new run."""
        game.start()
        stale = game.pending_tick
        game.reset()
        game.start()

        game.clock.run_frame()

        assert stale.cancelled
        assert game.run.ticks == 1

    def test_step_takes_over_pending_tick(self, game):
        """Stepping a clock-driven run advances it once per call, never twice."""
        game.start()
        pending = game.pending_tick

        game.step()
        game.clock.run_frame()

        assert pending.cancelled
        assert game.run.ticks == 1
        assert game.pending_tick is None
        assert game.clock.pending_count == 0

    def test_headless_start_schedules_nothing(self, game):
        game.start(schedule=False)

        assert game.is_playing
        assert game.pending_tick is None
        assert game.clock.run_frame() == 0
        assert game.run.ticks == 0

    def test_game_over_leaves_nothing_scheduled(self, game):
        game.start()
        play_until_over(game)
        frame = game.clock.frame

        assert game.clock.run_frame() == 0
        assert game.clock.frame == frame + 1

    def test_render_callback_gets_snapshot_each_tick(self, config, clock):
        snapshots = []
        game = CoreGame(config=config, seed=1, clock=clock, render_callback=snapshots.append)
        game.start()

        for _ in range(5):
            clock.run_frame()

        assert len(snapshots) == 5
        assert [s.tick for s in snapshots] == [1, 2, 3, 4, 5]
        assert all(s.phase == "playing" for s in snapshots)
