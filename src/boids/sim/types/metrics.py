from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class PassStats:
    """Totals gathered while running one pass over the flock."""

    population: int = 0
    neighbor_checks: int = 0
    neighbors: int = 0
    close_contacts: int = 0
    isolated: int = 0


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    neighbor_checks: int
    neighbors: int
    close_contacts: int
    isolated: int
    average_speed: float
    scouts: int
    tick_duration_ms: float = 0.0
