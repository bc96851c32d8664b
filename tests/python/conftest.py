import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from pygame.math import Vector2  # noqa: E402

from boids.sim.core.agent import Agent, Role  # noqa: E402
from boids.sim.types.arena import ArenaBounds  # noqa: E402


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-config-tests",
        action="store_true",
        default=False,
        help="run tests that check the shipped YAML files against the dataclass defaults",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "config_change: marks tests that should only run when configuration files change",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-config-tests"):
        return

    skip_marker = pytest.mark.skip(
        reason="Run only when configuration is modified (use --run-config-tests)",
    )

    for item in items:
        if "config_change" in item.keywords:
            item.add_marker(skip_marker)


@pytest.fixture
def make_agent() -> Callable[..., Agent]:
    def _make(
        agent_id: int,
        x: float = 0.0,
        y: float = 0.0,
        vx: float = 0.0,
        vy: float = 0.0,
        role: Role | None = None,
    ) -> Agent:
        return Agent(
            id=agent_id,
            position=Vector2(x, y),
            velocity=Vector2(vx, vy),
            role=Role.common() if role is None else role,
        )

    return _make


@pytest.fixture
def wide_arena() -> ArenaBounds:
    # Edges sit at +/-1000, so agents near the origin are well clear of the turn margin.
    return ArenaBounds(2000.0, 2000.0)
