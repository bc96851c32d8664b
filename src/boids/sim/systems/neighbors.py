from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..core.agent import AgentView


@dataclass(slots=True)
class NeighborSummary:
    """What one agent sees of the flock during a single tick.

    ``avg_*`` hold running sums until :func:`finalize` divides them by
    ``count``. ``close_dx``/``close_dy`` are a raw displacement sum and are
    never averaged.
    """

    avg_x: float = 0.0
    avg_y: float = 0.0
    avg_vx: float = 0.0
    avg_vy: float = 0.0
    count: int = 0
    close_dx: float = 0.0
    close_dy: float = 0.0
    checks: int = 0
    close_contacts: int = 0

    @property
    def has_neighbors(self) -> bool:
        return self.count > 0


def accumulate(
    summary: NeighborSummary,
    x: float,
    y: float,
    other: AgentView,
    visual_range: float,
    protected_range: float,
) -> None:
    dx = x - other.x
    dy = y - other.y

    # Axis-aligned box gate in front of both distance bands.
    if abs(dx) < visual_range and abs(dy) < visual_range:
        summary.checks += 1
        squared_distance = dx * dx + dy * dy
        if squared_distance < protected_range * protected_range:
            summary.close_dx += dx
            summary.close_dy += dy
            summary.close_contacts += 1
        elif squared_distance < visual_range * visual_range:
            summary.avg_x += other.x
            summary.avg_y += other.y
            summary.avg_vx += other.vx
            summary.avg_vy += other.vy
            summary.count += 1


def finalize(summary: NeighborSummary) -> NeighborSummary:
    """Turn the running sums into averages. Callers must check ``count`` first."""
    count = summary.count
    if count <= 0:
        raise ValueError("cannot average an empty neighborhood")
    summary.avg_x /= count
    summary.avg_y /= count
    summary.avg_vx /= count
    summary.avg_vy /= count
    return summary


def evaluate_neighbors(
    agent: AgentView,
    snapshot: Sequence[AgentView],
    visual_range: float,
    protected_range: float,
) -> NeighborSummary:
    """Scan ``snapshot`` from ``agent``'s point of view.

    The agent's own record is skipped by id. The returned summary still holds
    sums; averages are produced by :func:`finalize` once ``count > 0``.
    """
    summary = NeighborSummary()
    x = agent.x
    y = agent.y
    agent_id = agent.id
    for other in snapshot:
        if other.id == agent_id:
            continue
        accumulate(summary, x, y, other, visual_range, protected_range)
    return summary
