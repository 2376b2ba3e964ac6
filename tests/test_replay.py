"""
Tests for replay recording and verification.
"""

from dataclasses import replace

import pytest

from flapgate.flap_core.config_loader import load_config
from flapgate.flap_core.env_gym import FlapEnv
from flapgate.flap_core.game import CoreGame
from flapgate.flap_core.replay_recorder import (
    ReplayRecorder,
    compute_config_hash,
    load_replay,
    record_episode,
    replay_score,
    verify_replay,
)


def follow_gap(obs):
    return int(obs["next_gap_dy"] < -10 and obs["avatar_velocity"] > 0)


@pytest.fixture
def env():
    env = FlapEnv()
    yield env
    env.close()


class TestReplay:
    """Test recording and re-simulation."""

    def test_records_every_step(self, env):
        recorder = ReplayRecorder(env, agent_name="tester")
        recorder.reset(seed=5)

        for action in (0, 1, 0, 0, 1):
            recorder.step(action)

        data = recorder.get_replay_data()
        assert data["actions"] == [0, 1, 0, 0, 1]
        assert data["total_steps"] == 5
        assert data["seed"] == 5
        assert data["config_hash"] == compute_config_hash(env.config)

    def test_replay_reproduces_score(self, env):
        replay = record_episode(env, follow_gap, seed=11, max_steps=1500)

        assert verify_replay(replay)
        assert replay_score(replay) == replay["final_score"]

    def test_saved_replay_verifies(self, env, tmp_path):
        replay = record_episode(
            env, follow_gap, seed=3, save_path=str(tmp_path / "run.json"), max_steps=800
        )
        loaded = load_replay(tmp_path / "run.json")

        assert loaded["actions"] == replay["actions"]
        assert verify_replay(loaded)

    def test_tampered_score_fails(self, env):
        replay = record_episode(env, follow_gap, seed=11, max_steps=300)
        replay["final_score"] += 1

        assert not verify_replay(replay)

    def test_config_mismatch_rejected(self, env):
        replay = record_episode(env, lambda obs: 0, seed=2)
        replay["config_hash"] = "deadbeef"

        with pytest.raises(ValueError, match="config hash"):
            replay_score(replay)

    def test_termination_reason_recorded(self, env):
        replay = record_episode(env, lambda obs: 0, seed=2)

        assert replay["termination_reason"] == "ground"
        assert replay["total_steps"] == 30


@pytest.fixture
def calm_config():
    """No gravity and a 300 px gap: the avatar drifts through every gate."""
    config = load_config()
    return replace(
        config,
        physics=replace(config.physics, gravity=0.0),
        obstacles=replace(config.obstacles, gap_size=300.0)
    )


class TestUnseededRecording:
    """Test that a recording without an explicit seed still replays."""

    def test_seed_is_drawn_and_stored(self, env):
        recorder = ReplayRecorder(env)
        recorder.reset()
        recorder.step(0)

        assert isinstance(recorder.get_replay_data()["seed"], int)

    def test_unseeded_run_replays_same_gaps(self, calm_config):
        env = FlapEnv(config=calm_config)
        env.reset(seed=99)
        for _ in range(150):
            env.step(0)

        recorder = ReplayRecorder(env)
        recorder.reset()
        for _ in range(300):
            recorder.step(0)
        recorded_gaps = [o.gap_y for o in env.game.obstacles]
        replay = recorder.get_replay_data()
        env.close()

        game = CoreGame(config=calm_config)
        game.reset(seed=replay["seed"])
        game.start(schedule=False)
        for action in replay["actions"]:
            game.step(flap=action == 1)

        assert replay["final_score"] == 2
        assert [o.gap_y for o in game.obstacles] == recorded_gaps
        assert verify_replay(replay, config=calm_config)

    def test_replay_without_seed_rejected(self, env):
        replay = record_episode(env, lambda obs: 0, seed=2)
        replay["seed"] = None

        with pytest.raises(ValueError, match="no seed"):
            replay_score(replay)
