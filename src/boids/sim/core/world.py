from __future__ import annotations

import logging
import math
from enum import Enum
from time import perf_counter
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from ...config import FlockConfig, SimulationConfig
from ...rng import DeterministicRng
from ..systems import kinematics, metrics as metrics_system, steering
from ..systems.neighbors import evaluate_neighbors
from ..systems.spawning import spawn_flock
from ..types.arena import ArenaBounds
from ..types.metrics import PassStats, TickMetrics
from ..types.snapshot import Snapshot, SnapshotArena, SnapshotMetadata
from ..utils.math2d import _heading_from_velocity
from .agent import Agent
from .flock import Flock, require_unique_ids, take_snapshot

logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    IDLE = "Idle"
    STEPPING = "Stepping"


def run_pass(agents: Sequence[Agent], arena: Optional[ArenaBounds], params: FlockConfig) -> PassStats:
    """Advance every agent by one tick and report what the neighbor scans saw.

    All agents are copied before any of them moves, so each one reacts to the
    same pre-tick frame of the flock. Mutation only touches the live agents.
    Without arena bounds the tick is skipped and nothing is touched. Agent ids
    must be unique, since an agent finds its own record in the frame by id.
    """
    if arena is None:
        return PassStats()
    require_unique_ids(agents)
    snapshot = take_snapshot(agents)
    visual_range = params.visual_range
    protected_range = params.protected_range
    stats = PassStats(population=len(snapshot))

    for agent, view in zip(agents, snapshot):
        summary = evaluate_neighbors(view, snapshot, visual_range, protected_range)
        stats.neighbor_checks += summary.checks
        stats.neighbors += summary.count
        stats.close_contacts += summary.close_contacts
        if summary.count == 0:
            stats.isolated += 1

        steering.steer(agent, summary, arena, params)
        kinematics.normalize_speed(agent, params.min_speed, params.max_speed)
        kinematics.integrate(agent, arena)
    return stats


def step(agents: Sequence[Agent], arena: Optional[ArenaBounds], params: FlockConfig) -> None:
    run_pass(agents, arena, params)


class World:
    """Tick driver for one flock.

    The driver is Idle while no arena bounds are known and performs no
    mutation; once bounds are set every :meth:`step` runs one full pass.
    """

    def __init__(
        self,
        config: SimulationConfig,
        arena: Optional[ArenaBounds] = None,
        agents: Optional[Iterable[Agent]] = None,
    ):
        self._config = config.validate()
        self._rng = DeterministicRng(config.seed)
        self._arena = arena if arena is not None else ArenaBounds.from_viewport(config.arena_width, config.arena_height)
        self._state = DriverState.IDLE
        self._metrics: Optional[TickMetrics] = None
        self._custom_agents = agents is not None
        if agents is not None:
            self._flock = Flock(agents)
        else:
            self._flock = Flock(spawn_flock(config.spawn, self._rng))

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def agents(self) -> Tuple[Agent, ...]:
        return self._flock.agents

    @property
    def arena(self) -> Optional[ArenaBounds]:
        return self._arena

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def metrics(self) -> Optional[TickMetrics]:
        return self._metrics

    def set_arena(self, width: Optional[float], height: Optional[float]) -> Optional[ArenaBounds]:
        self._arena = ArenaBounds.from_viewport(width, height)
        if self._arena is None:
            logger.warning("Ignoring unusable arena size %sx%s", width, height)
        return self._arena

    def clear_arena(self) -> None:
        self._arena = None

    def reset(self) -> None:
        if self._custom_agents:
            raise RuntimeError("World built from explicit agents cannot respawn them")
        self._rng.reset()
        self._flock = Flock(spawn_flock(self._config.spawn, self._rng))
        self._metrics = None
        logger.info("Flock respawned with seed %d (%d agents)", self._rng.seed, len(self._flock))

    def step(self, tick: int) -> Optional[TickMetrics]:
        arena = self._arena
        if arena is None:
            self._transition(DriverState.IDLE)
            return None
        self._transition(DriverState.STEPPING)

        start = perf_counter()
        stats = run_pass(self._flock.agents, arena, self._config.flock)
        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(tick, stats, self._flock, duration_ms)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "tick=%d neighbors=%d close=%d isolated=%d took %.3fms",
                tick,
                stats.neighbors,
                stats.close_contacts,
                stats.isolated,
                duration_ms,
            )
        return self._metrics

    def snapshot(self, tick: int) -> Snapshot:
        arena = self._arena
        return Snapshot(
            tick=tick,
            metrics=self._metrics,
            agents=[self._agent_snapshot(agent) for agent in self._flock],
            arena=None if arena is None else SnapshotArena(width=arena.width, height=arena.height),
            metadata=SnapshotMetadata(
                state=self._state.value,
                tick_rate=self._config.tick_rate,
                seed=self._config.seed,
                config_version=self._config.config_version,
                population=len(self._flock),
            ),
        )

    def _transition(self, state: DriverState) -> None:
        if state is self._state:
            return
        logger.info("Tick driver %s -> %s", self._state.value, state.value)
        self._state = state

    @staticmethod
    def _agent_snapshot(agent: Agent) -> Dict[str, Any]:
        velocity = agent.velocity
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": velocity.x,
            "vy": velocity.y,
            "speed": math.hypot(velocity.x, velocity.y),
            "heading": _heading_from_velocity(velocity),
            "role": agent.role.kind.value,
            "group": agent.role.group,
        }
