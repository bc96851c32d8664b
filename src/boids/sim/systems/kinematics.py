from __future__ import annotations

from ..core.agent import Agent
from ..types.arena import ArenaBounds
from ..utils.math2d import _clamp_axis, _rescale_to_band_xy


def normalize_speed(agent: Agent, min_speed: float, max_speed: float) -> None:
    velocity = agent.velocity
    velocity.update(*_rescale_to_band_xy(velocity.x, velocity.y, min_speed, max_speed))


def integrate(agent: Agent, arena: ArenaBounds) -> None:
    """Advance one full velocity step, then clamp into the arena half-extents."""
    position = agent.position
    x = position.x + agent.velocity.x
    y = position.y + agent.velocity.y
    position.update(_clamp_axis(x, arena.half_width), _clamp_axis(y, arena.half_height))
