from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class FlockConfig:
    """Tunable flocking parameters shared by every agent."""

    visual_range: float = 50.0
    protected_range: float = 10.0
    centering_factor: float = 0.0005
    matching_factor: float = 0.15
    avoidance_factor: float = 0.1
    turn_factor: float = 1.0
    edge_margin: float = 200.0
    min_speed: float = 5.5
    max_speed: float = 6.0
    bias: float = 0.05

    def validate(self) -> "FlockConfig":
        non_negative = {
            "visual_range": self.visual_range,
            "protected_range": self.protected_range,
            "centering_factor": self.centering_factor,
            "matching_factor": self.matching_factor,
            "avoidance_factor": self.avoidance_factor,
            "turn_factor": self.turn_factor,
            "edge_margin": self.edge_margin,
            "min_speed": self.min_speed,
            "max_speed": self.max_speed,
            "bias": self.bias,
        }
        for name, value in non_negative.items():
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if self.min_speed > self.max_speed:
            raise ValueError(f"min_speed ({self.min_speed}) exceeds max_speed ({self.max_speed})")
        if self.bias > 1.0:
            raise ValueError(f"bias must be within [0, 1], got {self.bias}")
        return self


@dataclass
class SpawnConfig:
    population: int = 200
    spawn_min: int = -500
    spawn_max: int = 300
    # Role roll is an integer in [0, 100]; thresholds are inclusive lower bounds.
    scout_right_threshold: int = 90
    scout_left_threshold: int = 95

    def validate(self) -> "SpawnConfig":
        if self.population < 0:
            raise ValueError(f"population must be non-negative, got {self.population}")
        if self.spawn_min > self.spawn_max:
            raise ValueError(f"spawn_min ({self.spawn_min}) exceeds spawn_max ({self.spawn_max})")
        for name in ("scout_right_threshold", "scout_left_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= 101:
                raise ValueError(f"{name} must be within [0, 101], got {value}")
        return self


@dataclass
class SimulationConfig:
    tick_rate: float = 60.0
    arena_width: Optional[float] = 1280.0
    arena_height: Optional[float] = 720.0
    seed: int = 42
    config_version: str = "v1"
    flock: FlockConfig = field(default_factory=FlockConfig)
    spawn: SpawnConfig = field(default_factory=SpawnConfig)

    def validate(self) -> "SimulationConfig":
        if self.tick_rate <= 0:
            raise ValueError(f"tick_rate must be positive, got {self.tick_rate}")
        self.flock.validate()
        self.spawn.validate()
        return self

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        logger.info("Loaded simulation config from %s", path)
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 2


def load_config(raw: dict) -> SimulationConfig:
    flock = FlockConfig(**(raw.get("flock") or {}))
    spawn = SpawnConfig(**(raw.get("spawn") or {}))
    sim_values = {k: v for k, v in raw.items() if k not in {"flock", "spawn"}}
    return SimulationConfig(flock=flock, spawn=spawn, **sim_values).validate()
