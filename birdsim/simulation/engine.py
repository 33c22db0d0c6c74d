"""
Simulation Engine: main tick loop for the bird simulator.

Owns the seeded random generator, the world, and the generation manager.
Each engine tick runs one world step (collisions, brains, movement) and
then lets the generation manager decide whether the generation is over.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Callable, Optional

import numpy as np

from birdsim.core.animal import reset_animal_id_counter
from birdsim.core.config import SimConfig
from birdsim.core.world import World
from birdsim.simulation.evolution import Evolver
from birdsim.simulation.generation import GenerationEvent, GenerationManager, GenerationStats
from birdsim.simulation.tick import TickStats, step


# ---------------------------------------------------------------------------
# Run result
# ---------------------------------------------------------------------------

@dataclass
class RunResult:
    """Result of a complete simulation run."""
    config: SimConfig
    seed: int
    total_ticks: int = 0
    total_generations: int = 0
    total_food_eaten: int = 0
    generation_stats: list[GenerationStats] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Simulation Engine
# ---------------------------------------------------------------------------

class SimulationEngine:
    """
    Core simulation engine.

    Attributes:
        config: Simulation configuration.
        rng: Master random generator (seeded). Every random draw goes through it.
        world: The simulation world.
        generation_manager: Ages generations and evolves the population.
        tick_stats: Statistics for the last tick.
        on_tick: Optional callback invoked after each tick(tick_number, engine).
        on_generation: Optional callback invoked after a generation boundary(gen_number, engine).
    """

    def __init__(
        self,
        config: SimConfig,
        seed: Optional[int] = None,
        evolver: Optional[Evolver] = None,
    ):
        """
        Create a simulation engine with a freshly populated world.

        Args:
            config: Simulation configuration.
            seed: Random seed override. None = use config.world.seed.
            evolver: Population evolver. None = genetic algorithm from config.
        """
        self.config = config

        if seed is not None:
            self.config.world.seed = seed

        reset_animal_id_counter()
        self.rng = np.random.default_rng(self.config.world.seed)
        self.world = World.random(self.config, self.rng)
        self.generation_manager = GenerationManager(self.config, evolver=evolver)

        self.tick_stats = TickStats()
        self._accumulated_tick_stats: list[TickStats] = []

        # Callbacks
        self.on_tick: Optional[Callable[[int, "SimulationEngine"], None]] = None
        self.on_generation: Optional[Callable[[int, "SimulationEngine"], None]] = None

    # ------------------------------------------------------------------
    # Core tick
    # ------------------------------------------------------------------

    def step(self) -> Optional[GenerationStats]:
        """
        Execute one simulation tick.

        Processing order:
          1. World step (collisions, brains, movement)
          2. Generation check (evolve when the generation is over)
          3. Callbacks

        Returns:
            GenerationStats if a generation completed on this tick, else None.
        """
        stats = step(self.world, self.rng, limits=self.config.animal)
        self.tick_stats = stats
        self._accumulated_tick_stats.append(stats)

        completed: Optional[GenerationStats] = None
        event = self.generation_manager.check(self.world, self.rng)
        if event is GenerationEvent.GENERATION_COMPLETE:
            completed = self.generation_manager.get_last_gen_stats()
            if self.on_generation is not None:
                self.on_generation(completed.generation, self)

        if self.on_tick is not None:
            self.on_tick(self.world.tick_count, self)

        return completed

    def train(self) -> GenerationStats:
        """Step until the current generation completes; return its stats."""
        while True:
            completed = self.step()
            if completed is not None:
                return completed

    # ------------------------------------------------------------------
    # Multi-tick run
    # ------------------------------------------------------------------

    def run(
        self,
        max_ticks: Optional[int] = None,
        max_generations: Optional[int] = None,
    ) -> RunResult:
        """
        Run the simulation for a number of ticks or generations.

        Stops when ANY given limit is reached. With no limits, runs exactly
        one generation.

        Args:
            max_ticks: Maximum number of ticks to simulate.
            max_generations: Maximum number of generations to complete.

        Returns:
            RunResult with summary statistics.
        """
        if max_ticks is None and max_generations is None:
            max_generations = 1

        result = RunResult(config=self.config, seed=self.config.world.seed)

        ticks_run = 0
        generations_run = 0
        food_eaten = 0
        while True:
            if max_ticks is not None and ticks_run >= max_ticks:
                break
            if max_generations is not None and generations_run >= max_generations:
                break

            completed = self.step()
            ticks_run += 1
            food_eaten += self.tick_stats.food_eaten
            if completed is not None:
                generations_run += 1
                result.generation_stats.append(completed)

        result.total_ticks = ticks_run
        result.total_generations = generations_run
        result.total_food_eaten = food_eaten
        return result

    # ------------------------------------------------------------------
    # Accumulated statistics helpers
    # ------------------------------------------------------------------

    def get_accumulated_stats(self) -> dict[str, int]:
        """
        Sum all tick stats from the current accumulation period.

        Returns:
            Dict of stat_name → total_value.
        """
        totals: dict[str, int] = {f.name: 0 for f in fields(TickStats)}
        for stats in self._accumulated_tick_stats:
            for name in totals:
                totals[name] += getattr(stats, name)
        return totals

    def reset_accumulated_stats(self) -> list[TickStats]:
        """
        Reset and return the accumulated tick stats (e.g., at generation boundary).

        Returns:
            The accumulated stats before reset.
        """
        old = self._accumulated_tick_stats
        self._accumulated_tick_stats = []
        return old

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def current_tick(self) -> int:
        """Current tick number."""
        return self.world.tick_count

    @property
    def current_generation(self) -> int:
        """Current generation number."""
        return self.generation_manager.current_generation

    @property
    def generations_completed(self) -> int:
        """Number of fully completed generations."""
        return self.generation_manager.total_generations_completed

    def __repr__(self) -> str:
        return (
            f"SimulationEngine(tick={self.current_tick}, "
            f"gen={self.current_generation}, "
            f"animals={self.world.animal_count}, "
            f"foods={self.world.food_count})"
        )
