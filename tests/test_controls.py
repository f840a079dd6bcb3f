import logging

import numpy as np
import pytest

from controls import (
    AddBody, PendingBodySettings, RemoveLast, SimulationContext,
    hex_to_rgb, rgb_to_hex, screen_to_world, world_to_screen,
)
from simulation import BLUEVIOLET, InvalidMassError


def test_rgb_to_hex():
    assert rgb_to_hex((1.0, 0.0, 0.0)) == "#ff0000"
    assert rgb_to_hex((2.0, -1.0, 0.5)) == "#ff0080"


def test_hex_to_rgb():
    assert hex_to_rgb("#ff0000") == (1.0, 0.0, 0.0)
    assert hex_to_rgb("00ff00") == (0.0, 1.0, 0.0)
    with pytest.raises(ValueError):
        hex_to_rgb("#fff")


def test_add_body_from_settings():
    settings = PendingBodySettings(mass=42.0, velocity=(1.0, -2.0), color=(0.1, 0.2, 0.3))
    cmd = AddBody.from_settings((5.0, 6.0), settings)
    assert cmd == AddBody((5.0, 6.0), 42.0, (1.0, -2.0), (0.1, 0.2, 0.3))


def test_default_settings():
    settings = PendingBodySettings()
    assert settings.mass == 100.0
    assert settings.velocity == (0.0, 0.0)
    assert settings.color == BLUEVIOLET


def test_apply_add_and_remove():
    ctx = SimulationContext()
    body = ctx.apply(AddBody((1.0, 2.0), 10.0, (0.5, 0.0)))
    assert len(ctx.registry) == 1
    np.testing.assert_array_equal(body.position, [1.0, 2.0])
    np.testing.assert_array_equal(body.velocity, [0.5, 0.0])
    assert ctx.apply(RemoveLast()) is body
    assert len(ctx.registry) == 0
    assert ctx.apply(RemoveLast()) is None


def test_rejected_body_never_reaches_registry(caplog):
    ctx = SimulationContext()
    with caplog.at_level(logging.WARNING, logger="gravity_sim.controls"):
        assert ctx.apply(AddBody((0.0, 0.0), mass=0.0)) is None
    assert len(ctx.registry) == 0
    assert "Rejected body" in caplog.text


def test_add_body_raises_on_bad_mass():
    ctx = SimulationContext()
    with pytest.raises(InvalidMassError):
        ctx.add_body((0.0, 0.0), mass=-5.0)
    assert len(ctx.registry) == 0


def test_unknown_command():
    with pytest.raises(TypeError):
        SimulationContext().apply("explode")


def test_remove_logs_remaining_count(caplog):
    ctx = SimulationContext()
    ctx.add_body((0.0, 0.0))
    ctx.add_body((10.0, 0.0))
    with caplog.at_level(logging.INFO, logger="gravity_sim.controls"):
        ctx.remove_last_body()
    assert "Planets left: 1" in caplog.text


def test_submitted_commands_wait_for_step():
    ctx = SimulationContext()
    ctx.submit(AddBody((-50.0, 0.0)))
    ctx.submit(AddBody((50.0, 0.0)))
    assert len(ctx.registry) == 0

    assert ctx.step() is True
    assert len(ctx.registry) == 2
    assert ctx.frame == 1
    assert ctx.registry[0].position[0] > -50.0


def test_commands_apply_in_order():
    ctx = SimulationContext()
    ctx.submit(AddBody((0.0, 0.0)))
    ctx.submit(AddBody((1.0, 0.0)))
    ctx.submit(RemoveLast())
    assert ctx.apply_pending() == 3
    assert len(ctx.registry) == 1
    np.testing.assert_array_equal(ctx.registry[0].position, [0.0, 0.0])


def test_paused_context_applies_commands_without_stepping():
    ctx = SimulationContext(paused=True)
    ctx.submit(AddBody((-50.0, 0.0)))
    ctx.submit(AddBody((50.0, 0.0)))
    assert ctx.step() is False
    assert ctx.frame == 0
    assert len(ctx.registry) == 2
    np.testing.assert_array_equal(ctx.registry[0].position, [-50.0, 0.0])


def test_for_each_body_is_read_only():
    ctx = SimulationContext()
    ctx.add_body((3.0, 4.0), mass=7.0, color=(1.0, 0.0, 0.0))
    seen = []

    def visit(position, mass, color):
        seen.append((tuple(position), mass, color))
        position[0] = 999.0

    ctx.for_each_body(visit)
    assert seen == [((3.0, 4.0), 7.0, (1.0, 0.0, 0.0))]
    np.testing.assert_array_equal(ctx.registry[0].position, [3.0, 4.0])


def test_clear_drops_bodies_and_queue():
    ctx = SimulationContext()
    ctx.add_body((0.0, 0.0))
    ctx.submit(AddBody((1.0, 1.0)))
    ctx.clear()
    ctx.step()
    assert len(ctx.registry) == 0


def test_contexts_do_not_share_state():
    a = SimulationContext()
    b = SimulationContext()
    a.add_body((0.0, 0.0))
    a.settings.mass = 5.0
    assert len(b.registry) == 0
    assert b.settings.mass == 100.0


def test_body_with_nan_velocity_is_rejected():
    ctx = SimulationContext()
    assert ctx.apply(AddBody((0.0, 0.0), velocity=(float("nan"), 0.0))) is None
    assert len(ctx.registry) == 0


def test_screen_to_world_centre_origin_y_up():
    assert screen_to_world(256, 256, 512, 512) == (0.0, 0.0)
    assert screen_to_world(0, 0, 512, 512) == (-256.0, 256.0)
    assert screen_to_world(512, 412, 512, 512) == (256.0, -156.0)


def test_world_to_screen_inverts_screen_to_world():
    for sx, sy in [(0, 0), (10, 500), (300.5, 17.25)]:
        wx, wy = screen_to_world(sx, sy, 640, 480)
        assert world_to_screen(wx, wy, 640, 480) == (sx, sy)
