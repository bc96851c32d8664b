from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pygame.math import Vector2


class RoleKind(str, Enum):
    COMMON = "Common"
    SCOUT = "Scout"


SCOUT_RIGHT = 1
SCOUT_LEFT = 2


@dataclass(frozen=True, slots=True)
class Role:
    """Tagged role variant: ``Common`` or ``Scout`` with a drift group.

    Scout group 1 drifts toward +x, group 2 toward -x.
    """

    kind: RoleKind = RoleKind.COMMON
    group: int = 0

    def __post_init__(self) -> None:
        if self.kind is RoleKind.SCOUT and self.group not in (SCOUT_RIGHT, SCOUT_LEFT):
            raise ValueError(f"Scout group must be 1 or 2, got {self.group}")
        if self.kind is RoleKind.COMMON and self.group != 0:
            raise ValueError("Common role carries no group")

    @classmethod
    def common(cls) -> "Role":
        return cls(RoleKind.COMMON, 0)

    @classmethod
    def scout(cls, group: int) -> "Role":
        return cls(RoleKind.SCOUT, group)

    @property
    def is_scout(self) -> bool:
        return self.kind is RoleKind.SCOUT


COMMON = Role.common()


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector2 = field(default_factory=Vector2)
    velocity: Vector2 = field(default_factory=Vector2)
    role: Role = COMMON


@dataclass(frozen=True, slots=True)
class AgentView:
    """Read-only copy of one agent's state, taken before a tick mutates anything."""

    id: int
    x: float
    y: float
    vx: float
    vy: float
    role: Role

    @classmethod
    def of(cls, agent: Agent) -> "AgentView":
        return cls(
            id=agent.id,
            x=agent.position.x,
            y=agent.position.y,
            vx=agent.velocity.x,
            vy=agent.velocity.y,
            role=agent.role,
        )
