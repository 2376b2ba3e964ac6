"""
Tests for render snapshots and observation arrays.
"""

from dataclasses import FrozenInstanceError

import pytest

from flapgate.flap_core.config_loader import load_config
from flapgate.flap_core.game import CoreGame
from flapgate.flap_core.state_snapshot import SnapshotBuilder


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    game = CoreGame(config=config, seed=42)
    game.start(schedule=False)
    return game


class TestRenderSnapshot:
    """Test the read-only render view."""

    def test_snapshot_is_frozen(self, game):
        snapshot = game.get_render_snapshot()

        with pytest.raises(FrozenInstanceError):
            snapshot.avatar.y = 0.0
        with pytest.raises(FrozenInstanceError):
            snapshot.score = 99

    def test_snapshot_is_detached(self, game):
        snapshot = game.get_render_snapshot()
        game.step()

        assert snapshot.avatar.y == 240.0
        assert game.avatar.y != 240.0

    def test_snapshot_dimensions(self, game, config):
        snapshot = game.get_render_snapshot()

        assert snapshot.width == config.playfield.width
        assert snapshot.height == config.playfield.height
        assert snapshot.ground_y == 410
        assert snapshot.phase == "playing"


class TestObservationArrays:
    """Test fixed-size observation packing."""

    def test_obstacles_packed_and_masked(self, game, config):
        manager = game.obstacles
        for x in (40.0, 150.0, 260.0):
            obstacle = manager.spawn()
            obstacle.x = x

        obs = SnapshotBuilder(config).build(game.get_render_snapshot())

        assert obs["obstacle_mask"].tolist() == [True, True, True, False]
        assert obs["obstacle_x"][:3].tolist() == pytest.approx([40.0, 150.0, 260.0])

    def test_overflow_is_truncated(self, game, config):
        for _ in range(config.observation.max_obstacles + 3):
            game.obstacles.spawn()

        obs = SnapshotBuilder(config).build(game.get_render_snapshot())

        assert obs["obstacle_mask"].all()
        assert obs["obstacle_x"].shape == (config.observation.max_obstacles,)

    def test_next_obstacle_skips_passed(self, game, config):
        behind = game.obstacles.spawn()
        behind.x = -40.0
        ahead = game.obstacles.spawn()
        ahead.x = 200.0

        obs = SnapshotBuilder(config).build(game.get_render_snapshot())

        assert obs["has_next_obstacle"] == 1
        assert obs["next_obstacle_dx"] == pytest.approx(200.0 - config.avatar.x)
        assert obs["next_gap_dy"] == pytest.approx(ahead.gap_y - game.avatar.y)

    def test_no_obstacles(self, game, config):
        obs = SnapshotBuilder(config).build(game.get_render_snapshot())

        assert obs["has_next_obstacle"] == 0
        assert obs["next_obstacle_dx"] == pytest.approx(config.playfield.width - config.avatar.x)
