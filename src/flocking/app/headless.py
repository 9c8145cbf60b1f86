from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.stepper import Stepper
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "population",
    "updated",
    "neighbor_checks",
    "avg_speed",
    "delta_time",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.updated,
        metrics.neighbor_checks,
        f"{metrics.average_speed:.4f}",
        f"{metrics.delta_time:.6f}",
        f"{tick_ms:.3f}",
    ]


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    config_path: Optional[Path] = None,
    deterministic_log: bool = False,
    solo: bool = False,
    collisions: bool = False,
) -> Stepper:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    if solo:
        config.solo = True
    if collisions:
        config.cross_flock_collisions = True
    stepper = Stepper(config)
    logger.info("Running %d steps over %d boid(s) in %d flock(s)", steps, stepper.population, len(stepper.flocks))

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    try:
        for _ in range(steps):
            metrics = stepper.advance(config.time_step)
            if writer and metrics is not None:
                tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()
    return stepper


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless boids simulation")
    parser.add_argument("--steps", type=int, default=600)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument("--solo", action="store_true", help="Only update the active flock")
    parser.add_argument("--collisions", action="store_true", help="Separate from boids of every flock")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        config_path=args.config,
        deterministic_log=args.deterministic_log,
        solo=args.solo,
        collisions=args.collisions,
    )


if __name__ == "__main__":
    main()
