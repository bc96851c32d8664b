from __future__ import annotations

import math

import pytest
from pytest import approx

from boids.sim.systems.kinematics import integrate, normalize_speed
from boids.sim.types.arena import ArenaBounds

MIN_SPEED = 5.5
MAX_SPEED = 6.0


def test_slow_agent_is_raised_to_min_speed(make_agent):
    agent = make_agent(0, vx=3.0, vy=4.0)

    normalize_speed(agent, MIN_SPEED, MAX_SPEED)

    assert agent.velocity.x == approx(3.3)
    assert agent.velocity.y == approx(4.4)


def test_fast_agent_is_capped_at_max_speed(make_agent):
    agent = make_agent(0, vx=6.0, vy=8.0)

    normalize_speed(agent, MIN_SPEED, MAX_SPEED)

    assert agent.velocity.x == approx(3.6)
    assert agent.velocity.y == approx(4.8)


def test_speed_inside_band_is_untouched(make_agent):
    agent = make_agent(0, vx=0.0, vy=5.8)

    normalize_speed(agent, MIN_SPEED, MAX_SPEED)

    assert (agent.velocity.x, agent.velocity.y) == (0.0, 5.8)


def test_zero_velocity_is_left_alone(make_agent):
    agent = make_agent(0)

    normalize_speed(agent, MIN_SPEED, MAX_SPEED)

    assert (agent.velocity.x, agent.velocity.y) == (0.0, 0.0)
    assert not math.isnan(agent.velocity.x)


@pytest.mark.parametrize(
    ("vx", "vy"),
    [(0.001, 0.0), (-1.0, 2.0), (100.0, -100.0), (5.5, 0.0), (0.0, -6.0), (-4.0, -4.0)],
)
def test_nonzero_speed_lands_in_band(make_agent, vx, vy):
    agent = make_agent(0, vx=vx, vy=vy)
    heading = math.atan2(vy, vx)

    normalize_speed(agent, MIN_SPEED, MAX_SPEED)

    speed = agent.velocity.length()
    assert MIN_SPEED - 1e-9 <= speed <= MAX_SPEED + 1e-9
    assert math.atan2(agent.velocity.y, agent.velocity.x) == approx(heading)


def test_integrate_moves_one_velocity_step(make_agent):
    agent = make_agent(0, x=1.0, y=1.0, vx=3.0, vy=-2.0)

    integrate(agent, ArenaBounds(100.0, 80.0))

    assert (agent.position.x, agent.position.y) == (4.0, -1.0)
    assert (agent.velocity.x, agent.velocity.y) == (3.0, -2.0)


@pytest.mark.parametrize(
    ("x", "y", "vx", "vy", "expected"),
    [
        (49.0, 0.0, 5.0, 0.0, (50.0, 0.0)),
        (-49.0, 0.0, -5.0, 0.0, (-50.0, 0.0)),
        (0.0, 39.0, 0.0, 5.0, (0.0, 40.0)),
        (0.0, -39.0, 0.0, -5.0, (0.0, -40.0)),
        (48.0, 38.0, 6.0, 6.0, (50.0, 40.0)),
        (50.0, -40.0, 0.0, 0.0, (50.0, -40.0)),
    ],
)
def test_integrate_clamps_to_half_extents(make_agent, x, y, vx, vy, expected):
    agent = make_agent(0, x=x, y=y, vx=vx, vy=vy)

    integrate(agent, ArenaBounds(100.0, 80.0))

    assert (agent.position.x, agent.position.y) == expected
