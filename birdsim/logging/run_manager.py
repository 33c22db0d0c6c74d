"""
Run output for the bird simulator.

A run directory collects everything a headless run produces:

    {base_dir}/{run_name}/
        config.json        the config the run used
        metrics.csv        one KPI row per generation
        snapshots/         world state at each generation start (optional)
        summary.json       totals and best fitness, written by finalize()
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from birdsim.core.config import SimConfig, save_config
from birdsim.core.world import World
from birdsim.logging.csv_logger import CSVLogger
from birdsim.logging.snapshot import SnapshotManager
from birdsim.simulation.engine import RunResult
from birdsim.simulation.generation import GenerationStats
from birdsim.simulation.metrics import MetricsCollector


class RunManager:
    """
    Records one simulation run to disk.

    Attributes:
        config: Config of the run.
        metrics: Collector that turns generation results into KPI rows.
        run_dir: This run's output directory.
        csv_logger: Writer for metrics.csv.
        snapshot_manager: Writer for snapshots/.
    """

    def __init__(
        self,
        config: SimConfig,
        metrics: MetricsCollector,
        base_dir: Optional[str | Path] = None,
        run_name: Optional[str] = None,
    ):
        """
        Create the run directory and save the config into it.

        Args:
            config: Simulation configuration.
            metrics: KPI collector shared with the caller.
            base_dir: Parent directory. None = config.output.output_dir.
            run_name: Subdirectory name. None = timestamp.
        """
        self.config = config
        self.metrics = metrics

        base = Path(base_dir if base_dir is not None else config.output.output_dir)
        self.run_dir = base / (run_name or datetime.now().strftime("%Y%m%d_%H%M%S"))
        self.run_dir.mkdir(parents=True, exist_ok=True)

        save_config(config, self.run_dir / "config.json")
        self.csv_logger = CSVLogger(self.run_dir / "metrics.csv", columns=metrics.kpi_names())
        self.snapshot_manager = SnapshotManager(self.run_dir)

    def start(self, world: World) -> None:
        """Snapshot the initial population (generation 0)."""
        if self.config.output.snapshot_every_gen:
            self.snapshot_manager.save(world, world.generation)

    def record_generation(
        self,
        world: World,
        gen_stats: GenerationStats,
        tick_totals: dict[str, int],
    ) -> dict:
        """
        Log a completed generation and snapshot the population that replaced it.

        Args:
            world: World right after evolution.
            gen_stats: Stats of the generation that just ended.
            tick_totals: Summed tick counters for that generation.

        Returns:
            The generation's KPI dict.
        """
        kpis = self.metrics.collect(world, gen_stats, tick_totals)
        self.csv_logger.log_row(kpis)
        if self.config.output.snapshot_every_gen:
            self.snapshot_manager.save(world, world.generation)
        return kpis

    def finalize(self, result: RunResult, elapsed: float) -> dict:
        """Write summary.json from the run result and the KPI history."""
        history = self.metrics.history
        summary = {
            "seed": result.seed,
            "total_ticks": result.total_ticks,
            "total_generations": result.total_generations,
            "total_food_eaten": result.total_food_eaten,
            "best_avg_fitness": max((s.avg_fitness for s in result.generation_stats), default=0.0),
            "best_max_fitness": max((s.max_fitness for s in result.generation_stats), default=0.0),
            "final_brain_diversity": history[-1]["brain_diversity"] if history else 0.0,
            "elapsed_seconds": round(elapsed, 2),
        }
        with open(self.run_dir / "summary.json", "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2, ensure_ascii=False)
        return summary

    def __repr__(self) -> str:
        return f"RunManager(run_dir='{self.run_dir}')"
