from __future__ import annotations

import math
from typing import Iterable

from ..core.agent import Agent
from ..types.metrics import PassStats, TickMetrics


def create_metrics(tick: int, stats: PassStats, agents: Iterable[Agent], duration_ms: float) -> TickMetrics:
    speed_sum = 0.0
    scouts = 0
    population = 0
    for agent in agents:
        population += 1
        speed_sum += math.hypot(agent.velocity.x, agent.velocity.y)
        if agent.role.is_scout:
            scouts += 1
    return TickMetrics(
        tick=tick,
        population=population,
        neighbor_checks=stats.neighbor_checks,
        neighbors=stats.neighbors,
        close_contacts=stats.close_contacts,
        isolated=stats.isolated,
        average_speed=speed_sum / population if population else 0.0,
        scouts=scouts,
        tick_duration_ms=duration_ms,
    )
