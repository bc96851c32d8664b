from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: Optional[TickMetrics]
    agents: List[Dict[str, Any]]
    arena: Optional["SnapshotArena"]
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotArena:
    width: float
    height: float


@dataclass(slots=True)
class SnapshotMetadata:
    state: str
    tick_rate: float
    seed: int
    config_version: str
    population: int
