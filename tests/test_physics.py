"""
Tests for avatar physics.
"""

import pytest

from flapgate.flap_core.config_loader import load_config
from flapgate.flap_core.physics import Avatar, AvatarPhysics, flap, integrate


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def physics(config):
    return AvatarPhysics(config)


class TestIntegration:
    """Test per-tick integration."""

    def test_velocity_grows_by_gravity_each_tick(self, physics):
        """Without a flap, velocity increases by exactly g per tick."""
        avatar = physics.spawn_avatar()

        for k in range(1, 50):
            before = avatar.velocity
            physics.step(avatar)
            assert avatar.velocity == pytest.approx(before + physics.gravity)
            assert avatar.velocity == pytest.approx(k * physics.gravity)

    def test_position_uses_updated_velocity(self):
        """y' = y + v' (semi-implicit)."""
        avatar = Avatar(x=90, y=100.0, radius=14, velocity=2.0)
        integrate(avatar, 0.5)

        assert avatar.velocity == pytest.approx(2.5)
        assert avatar.y == pytest.approx(102.5)

    def test_free_fall_closed_form(self, physics):
        """After T ticks from rest, y = y0 + sum(k * g, k=1..T)."""
        avatar = physics.spawn_avatar()
        y0 = avatar.y

        for t in range(1, 40):
            physics.step(avatar)
            expected = y0 + sum(k * physics.gravity for k in range(1, t + 1))
            assert avatar.y == pytest.approx(expected)

    def test_no_velocity_clamp(self):
        """Velocity is never clamped."""
        avatar = Avatar(x=0, y=0, radius=1, velocity=0)
        for _ in range(10_000):
            integrate(avatar, 0.35)
        assert avatar.velocity == pytest.approx(3500.0)

    def test_x_never_changes(self, physics):
        avatar = physics.spawn_avatar()
        x = avatar.x
        for _ in range(100):
            physics.step(avatar)
        assert avatar.x == x


class TestFlap:
    """Test the flap impulse."""

    @pytest.mark.parametrize("velocity", [-20.0, -6.2, 0.0, 3.3, 55.0])
    def test_flap_overrides_velocity(self, physics, velocity):
        """Flap sets velocity to the impulse regardless of prior velocity."""
        avatar = physics.spawn_avatar()
        avatar.velocity = velocity

        physics.flap(avatar)

        assert avatar.velocity == physics.flap_impulse

    def test_flap_does_not_move_avatar(self):
        avatar = Avatar(x=90, y=200.0, radius=14, velocity=4.0)
        flap(avatar, -6.2)
        assert avatar.y == 200.0

    def test_spawn_avatar_uses_config(self, config, physics):
        avatar = physics.spawn_avatar()

        assert avatar.x == config.avatar.x
        assert avatar.y == config.playfield.height / 2
        assert avatar.radius == config.avatar.radius
        assert avatar.velocity == 0.0
