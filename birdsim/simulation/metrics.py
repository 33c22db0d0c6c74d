"""
KPI Metrics collection for the bird simulator.

MetricsCollector gathers per-generation Key Performance Indicators (KPIs)
from generation stats, accumulated tick statistics, and the world state
right after evolution. It produces a flat dictionary per generation
suitable for CSV export and analysis.
"""

from __future__ import annotations

import numpy as np

from birdsim.core.animal import Animal
from birdsim.core.config import SimConfig
from birdsim.core.world import World
from birdsim.simulation.generation import GenerationStats


_KPI_NAMES = [
    "generation",
    "ticks",
    "population",
    "food_count",
    "food_eaten",
    "foods_respawned",
    "shared_meals",
    "food_per_tick",
    "food_per_animal",
    "min_fitness",
    "max_fitness",
    "avg_fitness",
    "median_fitness",
    "brain_diversity",
]


class MetricsCollector:
    """
    Collects and computes KPIs per generation.

    Usage:
      1. At generation end, call `collect(world, gen_stats, tick_stats_totals)`
      2. Resulting dict is appended to `history`

    Attributes:
        config: Simulation configuration.
        history: List of KPI dicts, one per generation.
    """

    def __init__(self, config: SimConfig):
        self.config = config
        self.history: list[dict] = []

    @staticmethod
    def kpi_names() -> list[str]:
        """Column order used by the CSV logger."""
        return list(_KPI_NAMES)

    def collect(
        self,
        world: World,
        gen_stats: GenerationStats,
        tick_stats_totals: dict[str, int],
    ) -> dict:
        """
        Compute all KPIs for a completed generation and append to history.

        Args:
            world: World state right after evolution (new population).
            gen_stats: Stats of the generation that just ended.
            tick_stats_totals: Accumulated tick counters for that generation
                               (from engine.get_accumulated_stats()).

        Returns:
            Dict of KPI_name → value.
        """
        kpis: dict = {}

        kpis["generation"] = gen_stats.generation
        kpis["ticks"] = gen_stats.ticks
        kpis["population"] = gen_stats.population
        kpis["food_count"] = world.food_count

        # --- Feeding ---
        kpis["food_eaten"] = gen_stats.food_eaten
        kpis["foods_respawned"] = tick_stats_totals.get("foods_respawned", 0)
        kpis["shared_meals"] = tick_stats_totals.get("shared_meals", 0)
        kpis["food_per_tick"] = (
            gen_stats.food_eaten / gen_stats.ticks if gen_stats.ticks > 0 else 0.0
        )
        kpis["food_per_animal"] = (
            gen_stats.food_eaten / gen_stats.population if gen_stats.population > 0 else 0.0
        )

        # --- Fitness ---
        kpis["min_fitness"] = gen_stats.min_fitness
        kpis["max_fitness"] = gen_stats.max_fitness
        kpis["avg_fitness"] = gen_stats.avg_fitness
        kpis["median_fitness"] = gen_stats.median_fitness

        # --- Genetic diversity of the new population ---
        kpis["brain_diversity"] = self._compute_brain_diversity(world.animals)

        self.history.append(kpis)
        return kpis

    def _compute_brain_diversity(
        self,
        animals: list[Animal],
        max_sample: int = 50,
    ) -> float:
        """
        Mean pairwise Euclidean distance between brain chromosomes (sampled).

        Args:
            animals: Current population.
            max_sample: Maximum animals to sample for pairwise comparison.

        Returns:
            Mean pairwise distance. 0.0 if < 2 animals.
        """
        if len(animals) < 2:
            return 0.0

        if len(animals) > max_sample:
            rng = np.random.default_rng(42)  # fixed seed keeps the KPI reproducible
            indices = rng.choice(len(animals), size=max_sample, replace=False)
            sampled = [animals[i] for i in indices]
        else:
            sampled = animals

        genes = np.stack([a.as_chromosome().genes for a in sampled])
        diffs = genes[:, None, :] - genes[None, :, :]
        dist = np.sqrt(np.sum(diffs * diffs, axis=-1))
        n = len(sampled)
        upper = dist[np.triu_indices(n, k=1)]
        return float(upper.mean())

    def get_history(self) -> list[dict]:
        return list(self.history)
