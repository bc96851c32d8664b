from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.arena import ArenaBounds
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)


_BASIC_HEADER = [
    "tick",
    "population",
    "neighbors",
    "close_contacts",
    "isolated",
    "avg_speed",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "neighbors",
    "close_contacts",
    "isolated",
    "avg_speed",
    "tick_ms",
    "neighbor_checks",
    "neighbor_checks_per_agent",
    "neighbors_per_agent",
    "isolated_ratio",
    "tick_ms_per_agent",
    "scouts",
    "min_speed",
    "max_speed",
    "avg_vx",
    "avg_vy",
    "centroid_x",
    "centroid_y",
    "spread",
    "edge_agents",
    "pinned_agents",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.neighbors,
        metrics.close_contacts,
        metrics.isolated,
        f"{metrics.average_speed:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: TickMetrics, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        neighbor_checks_per_agent = 0.0
        neighbors_per_agent = 0.0
        isolated_ratio = 0.0
        tick_ms_per_agent = 0.0
        min_speed = 0.0
        max_speed = 0.0
        avg_vx = 0.0
        avg_vy = 0.0
        centroid_x = 0.0
        centroid_y = 0.0
        spread = 0.0
        edge_agents = 0
        pinned_agents = 0
    else:
        neighbor_checks_per_agent = metrics.neighbor_checks / population
        neighbors_per_agent = metrics.neighbors / population
        isolated_ratio = metrics.isolated / population
        tick_ms_per_agent = tick_ms / population

        arena = world.arena
        margin = world.config.flock.edge_margin
        min_speed = math.inf
        max_speed = 0.0
        vx_sum = 0.0
        vy_sum = 0.0
        x_sum = 0.0
        y_sum = 0.0
        edge_agents = 0
        pinned_agents = 0

        for agent in world.agents:
            velocity = agent.velocity
            speed = math.hypot(velocity.x, velocity.y)
            min_speed = min(min_speed, speed)
            max_speed = max(max_speed, speed)
            vx_sum += velocity.x
            vy_sum += velocity.y
            x_sum += agent.position.x
            y_sum += agent.position.y
            if arena is not None:
                x = agent.position.x
                y = agent.position.y
                if abs(x) >= arena.half_width - margin or abs(y) >= arena.half_height - margin:
                    edge_agents += 1
                if abs(x) >= arena.half_width or abs(y) >= arena.half_height:
                    pinned_agents += 1

        avg_vx = vx_sum / population
        avg_vy = vy_sum / population
        centroid_x = x_sum / population
        centroid_y = y_sum / population
        spread_sq = 0.0
        for agent in world.agents:
            dx = agent.position.x - centroid_x
            dy = agent.position.y - centroid_y
            spread_sq += dx * dx + dy * dy
        spread = math.sqrt(spread_sq / population)

    return [
        metrics.tick,
        population,
        metrics.neighbors,
        metrics.close_contacts,
        metrics.isolated,
        f"{metrics.average_speed:.4f}",
        f"{tick_ms:.3f}",
        metrics.neighbor_checks,
        f"{neighbor_checks_per_agent:.4f}",
        f"{neighbors_per_agent:.4f}",
        f"{isolated_ratio:.4f}",
        f"{tick_ms_per_agent:.4f}",
        metrics.scouts,
        f"{min_speed:.4f}",
        f"{max_speed:.4f}",
        f"{avg_vx:.4f}",
        f"{avg_vy:.4f}",
        f"{centroid_x:.4f}",
        f"{centroid_y:.4f}",
        f"{spread:.4f}",
        edge_agents,
        pinned_agents,
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    total = sum(values)
    count = len(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(total / count),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p95": _percentile(sorted_values, 0.95),
        "p99": _percentile(sorted_values, 0.99),
    }


def _correlation(xs: list[float], ys: list[float]) -> float:
    if len(xs) != len(ys) or len(xs) < 2:
        return 0.0
    mean_x = sum(xs) / len(xs)
    mean_y = sum(ys) / len(ys)
    num = 0.0
    denom_x = 0.0
    denom_y = 0.0
    for x, y in zip(xs, ys):
        dx = x - mean_x
        dy = y - mean_y
        num += dx * dy
        denom_x += dx * dx
        denom_y += dy * dy
    denom = math.sqrt(denom_x * denom_y)
    if denom == 0.0:
        return 0.0
    return float(num / denom)


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 5000,
    config_path: Optional[Path] = None,
    arena: Optional[ArenaBounds] = None,
) -> World:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    world = World(config, arena=arena)
    if world.arena is None:
        raise ValueError("Headless runs need arena bounds; set arena_width/arena_height or pass --width/--height")

    logger.info(
        "Running %d ticks: %d agents, seed %d, arena %gx%g",
        steps,
        len(world.agents),
        config.seed,
        world.arena.width,
        world.arena.height,
    )

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    neighbors_series: list[int] = []
    isolated_series: list[int] = []
    speed_series: list[float] = []
    max_tick_ms = (-1.0, -1)
    max_neighbors = (-1, -1)
    max_isolated = (-1, -1)

    try:
        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms

            if summary_path:
                tick_ms_series.append(tick_ms)
                neighbors_series.append(metrics.neighbors)
                isolated_series.append(metrics.isolated)
                speed_series.append(metrics.average_speed)
                if tick_ms > max_tick_ms[0]:
                    max_tick_ms = (tick_ms, tick)
                if metrics.neighbors > max_neighbors[0]:
                    max_neighbors = (metrics.neighbors, tick)
                if metrics.isolated > max_isolated[0]:
                    max_isolated = (metrics.isolated, tick)

            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "population": len(world.agents),
            "arena": {"width": world.arena.width, "height": world.arena.height},
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "neighbors": _summary_stats([float(v) for v in neighbors_series]),
            "isolated": _summary_stats([float(v) for v in isolated_series]),
            "avg_speed": _summary_stats(speed_series),
            "correlations": {
                "tick_ms_vs_neighbors": _correlation(tick_ms_series, [float(v) for v in neighbors_series]),
                "neighbors_vs_isolated": _correlation(
                    [float(v) for v in neighbors_series], [float(v) for v in isolated_series]
                ),
            },
            "peaks": {
                "tick_ms": {"value": float(max_tick_ms[0]), "tick": max_tick_ms[1]},
                "neighbors": {"value": max_neighbors[0], "tick": max_neighbors[1]},
                "isolated": {"value": max_isolated[0], "tick": max_isolated[1]},
            },
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "neighbors": _summary_stats([float(v) for v in neighbors_series[tail_slice]]),
                "isolated": _summary_stats([float(v) for v in isolated_series[tail_slice]]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
        logger.info("Wrote run summary to %s", summary_path)

    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless boids simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--width", type=float, default=None, help="Arena width (overrides config)")
    parser.add_argument("--height", type=float, default=None, help="Arena height (overrides config)")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=5000,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level, format="[%(levelname)s] %(name)s: %(message)s")

    arena = None
    if args.width is not None or args.height is not None:
        if args.width is None or args.height is None:
            parser.error("--width and --height must be given together")
        arena = ArenaBounds.from_viewport(args.width, args.height)
        if arena is None:
            parser.error("--width and --height must be positive")

    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config_path=args.config,
        arena=arena,
    )


if __name__ == "__main__":
    main()
