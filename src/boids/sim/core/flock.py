from __future__ import annotations

from typing import Iterable, Iterator, Sequence, Tuple

from .agent import Agent, AgentView


class Flock:
    """Fixed, ordered population of agents.

    Iteration order is the insertion order and never changes, so a tick walks
    the agents deterministically. There is no way to add or remove agents once
    the flock is built.
    """

    __slots__ = ("_agents",)

    def __init__(self, agents: Iterable[Agent] = ()) -> None:
        self._agents: Tuple[Agent, ...] = tuple(agents)
        require_unique_ids(self._agents)

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[Agent]:
        return iter(self._agents)

    def __getitem__(self, index: int) -> Agent:
        return self._agents[index]

    @property
    def agents(self) -> Tuple[Agent, ...]:
        return self._agents

    def snapshot(self) -> Tuple[AgentView, ...]:
        return take_snapshot(self._agents)


def require_unique_ids(agents: Sequence[Agent]) -> None:
    seen: set[int] = set()
    for agent in agents:
        if agent.id in seen:
            raise ValueError(f"Duplicate agent id {agent.id}")
        seen.add(agent.id)


def take_snapshot(agents: Iterable[Agent]) -> Tuple[AgentView, ...]:
    return tuple(AgentView.of(agent) for agent in agents)
