from __future__ import annotations

from typing import List

from pygame.math import Vector2

from ...config import SpawnConfig
from ...rng import DeterministicRng
from ..core.agent import SCOUT_LEFT, SCOUT_RIGHT, Agent, Role


def roll_role(roll: int, config: SpawnConfig) -> Role:
    if roll >= config.scout_left_threshold:
        return Role.scout(SCOUT_LEFT)
    if roll >= config.scout_right_threshold:
        return Role.scout(SCOUT_RIGHT)
    return Role.common()


def spawn_flock(config: SpawnConfig, rng: DeterministicRng) -> List[Agent]:
    """Create the initial population: random positions, zero velocity, rolled roles."""
    agents: List[Agent] = []
    for agent_id in range(config.population):
        position = Vector2(
            float(rng.next_int_inclusive(config.spawn_min, config.spawn_max)),
            float(rng.next_int_inclusive(config.spawn_min, config.spawn_max)),
        )
        role = roll_role(rng.next_int_inclusive(0, 100), config)
        agents.append(Agent(id=agent_id, position=position, velocity=Vector2(), role=role))
    return agents
