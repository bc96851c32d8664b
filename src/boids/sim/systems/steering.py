from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.agent import SCOUT_LEFT, SCOUT_RIGHT, Agent, RoleKind
from .neighbors import NeighborSummary, finalize

if TYPE_CHECKING:
    from ...config import FlockConfig
    from ..types.arena import ArenaBounds


def apply_cohesion(agent: Agent, summary: NeighborSummary, centering_factor: float, matching_factor: float) -> None:
    # Pull toward the local center of mass, with a first velocity-matching term folded in.
    position = agent.position
    velocity = agent.velocity
    velocity.x += (summary.avg_x - position.x) * centering_factor + (summary.avg_vx - velocity.x) * matching_factor
    velocity.y += (summary.avg_y - position.y) * centering_factor + (summary.avg_vy - velocity.y) * matching_factor


def apply_alignment(agent: Agent, summary: NeighborSummary, matching_factor: float) -> None:
    velocity = agent.velocity
    velocity.x += (summary.avg_vx - velocity.x) * matching_factor
    velocity.y += (summary.avg_vy - velocity.y) * matching_factor


def apply_avoidance(agent: Agent, summary: NeighborSummary, avoidance_factor: float) -> None:
    velocity = agent.velocity
    velocity.x += summary.close_dx * avoidance_factor
    velocity.y += summary.close_dy * avoidance_factor


def turn_if_edge(agent: Agent, arena: ArenaBounds, margin: float, turn_factor: float) -> None:
    x = agent.position.x
    y = agent.position.y
    half_width = arena.half_width
    half_height = arena.half_height
    velocity = agent.velocity

    if x <= -half_width + margin:
        velocity.x += turn_factor
    elif x >= half_width - margin:
        velocity.x -= turn_factor

    if y <= -half_height + margin:
        velocity.y += turn_factor
    elif y >= half_height - margin:
        velocity.y -= turn_factor


def apply_bias(agent: Agent, bias: float) -> None:
    role = agent.role
    if role.kind is not RoleKind.SCOUT:
        return
    velocity = agent.velocity
    if role.group == SCOUT_RIGHT:
        velocity.x = (1.0 - bias) * velocity.x + bias
    elif role.group == SCOUT_LEFT:
        velocity.x = (1.0 - bias) * velocity.x - bias


def steer(agent: Agent, summary: NeighborSummary, arena: ArenaBounds, params: FlockConfig) -> None:
    """Apply every steering rule to ``agent.velocity`` in their fixed order.

    Cohesion, alignment and avoidance only run when the visual-range band held
    at least one neighbor. Avoidance is gated on that count too, even though
    the close offset is gathered independently. Edge-turning and role bias
    always run.
    """
    if summary.has_neighbors:
        finalize(summary)
        apply_cohesion(agent, summary, params.centering_factor, params.matching_factor)
        apply_alignment(agent, summary, params.matching_factor)
        apply_avoidance(agent, summary, params.avoidance_factor)

    turn_if_edge(agent, arena, params.edge_margin, params.turn_factor)
    apply_bias(agent, params.bias)
