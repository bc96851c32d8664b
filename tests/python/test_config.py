from __future__ import annotations

from pathlib import Path

import pytest
from pytest import approx

from boids.config import AppConfig, FlockConfig, SimulationConfig, SpawnConfig, load_config

ROOT = Path(__file__).resolve().parents[2]


def test_flock_defaults():
    flock = FlockConfig()
    assert flock.visual_range == 50.0
    assert flock.protected_range == 10.0
    assert flock.centering_factor == approx(0.0005)
    assert flock.matching_factor == approx(0.15)
    assert flock.avoidance_factor == approx(0.1)
    assert flock.turn_factor == 1.0
    assert flock.edge_margin == 200.0
    assert flock.min_speed == 5.5
    assert flock.max_speed == 6.0
    assert flock.bias == approx(0.05)


def test_load_config_builds_nested_sections():
    config = load_config(
        {
            "seed": 9,
            "arena_width": 800,
            "arena_height": 600,
            "flock": {"visual_range": 70, "max_speed": 8.0},
            "spawn": {"population": 12},
        }
    )
    assert config.seed == 9
    assert config.arena_width == 800
    assert config.flock.visual_range == 70
    assert config.flock.max_speed == 8.0
    assert config.flock.min_speed == 5.5
    assert config.spawn.population == 12


def test_load_config_accepts_empty_sections():
    config = load_config({"seed": 3, "flock": None, "spawn": None})
    assert config.seed == 3
    assert config.flock == FlockConfig()
    assert config.spawn == SpawnConfig()


def test_load_config_rejects_unknown_keys():
    with pytest.raises(TypeError):
        load_config({"flock": {"vision": 10}})


@pytest.mark.parametrize(
    "flock",
    [
        {"min_speed": 7.0, "max_speed": 6.0},
        {"visual_range": -1.0},
        {"avoidance_factor": -0.1},
        {"bias": 1.5},
    ],
)
def test_invalid_flock_settings(flock):
    with pytest.raises(ValueError):
        load_config({"flock": flock})


@pytest.mark.parametrize(
    "spawn",
    [
        {"population": -1},
        {"spawn_min": 10, "spawn_max": 0},
        {"scout_left_threshold": 200},
    ],
)
def test_invalid_spawn_settings(spawn):
    with pytest.raises(ValueError):
        load_config({"spawn": spawn})


def test_tick_rate_must_be_positive():
    with pytest.raises(ValueError):
        SimulationConfig(tick_rate=0).validate()


def test_from_yaml(tmp_path):
    path = tmp_path / "flock.yaml"
    path.write_text("seed: 3\narena_width: null\narena_height: null\nflock:\n  bias: 0.1\nspawn:\n  population: 7\n")

    config = SimulationConfig.from_yaml(path)

    assert config.seed == 3
    assert config.arena_width is None
    assert config.flock.bias == approx(0.1)
    assert config.spawn.population == 7


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert SimulationConfig.from_yaml(path) == SimulationConfig()


def test_app_config_defaults():
    app = AppConfig()
    assert app.broadcast_interval == 2
    assert isinstance(app.simulation, SimulationConfig)


@pytest.mark.config_change
def test_shipped_yaml_matches_defaults():
    config = SimulationConfig.from_yaml(ROOT / "config" / "default.yaml")
    assert config.flock == FlockConfig()
    assert config.spawn == SpawnConfig()
    assert config.seed == SimulationConfig().seed
