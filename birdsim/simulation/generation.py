"""
Generation lifecycle manager for the bird simulator.

A generation lasts `gen_length` ticks. Once the age of the current
generation exceeds that, the population is scored by satiation and handed
to the evolver; the resulting birds replace the old ones, every food is
scattered to a new random position, and the next generation starts at
age 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

import numpy as np

from birdsim.core.config import SimConfig
from birdsim.core.world import World
from birdsim.simulation.evolution import Evolver, GeneticAlgorithm, evolve_animals


# ---------------------------------------------------------------------------
# Generation events
# ---------------------------------------------------------------------------

class GenerationEvent(Enum):
    """Events that can fire during a generation lifecycle."""
    NONE = auto()
    GENERATION_COMPLETE = auto()


# ---------------------------------------------------------------------------
# Generation statistics
# ---------------------------------------------------------------------------

@dataclass
class GenerationStats:
    """Statistics for one completed generation."""
    generation: int = 0
    ticks: int = 0
    population: int = 0
    food_eaten: int = 0
    min_fitness: float = 0.0
    max_fitness: float = 0.0
    avg_fitness: float = 0.0
    median_fitness: float = 0.0


# ---------------------------------------------------------------------------
# Generation Manager
# ---------------------------------------------------------------------------

class GenerationManager:
    """
    Tracks generation age and evolves the population at the boundary.

    Attributes:
        config: Simulation configuration.
        evolver: Produces the next generation's chromosomes.
        current_generation: Current generation number (0-indexed).
        age: Ticks elapsed in the current generation.
        all_gen_stats: Statistics for all completed generations.
    """

    def __init__(self, config: SimConfig, evolver: Optional[Evolver] = None):
        self.config = config
        self.evolver: Evolver = evolver or GeneticAlgorithm.from_config(config.genetics)
        self.current_generation: int = 0
        self.age: int = 0
        self.all_gen_stats: list[GenerationStats] = []

    @property
    def gen_length(self) -> int:
        return self.config.generation.gen_length

    # ------------------------------------------------------------------
    # Main check, called once per tick after the world step
    # ------------------------------------------------------------------

    def check(self, world: World, rng: np.random.Generator) -> GenerationEvent:
        """
        Age the generation by one tick and evolve it when it is over.

        Args:
            world: The simulation world.
            rng: Random generator for breeding and placement.

        Returns:
            GENERATION_COMPLETE if the population was replaced, else NONE.
        """
        self.age += 1
        if self.age > self.gen_length:
            self.evolve(world, rng)
            return GenerationEvent.GENERATION_COMPLETE
        return GenerationEvent.NONE

    def evolve(self, world: World, rng: np.random.Generator) -> GenerationStats:
        """
        Replace the population with its evolved offspring.

        Can be called directly to end a generation early.
        """
        stats = GenerationStats(
            generation=self.current_generation,
            ticks=self.age,
            population=world.animal_count,
            food_eaten=world.total_satiation(),
        )

        if world.animals:
            new_animals, evo_stats = evolve_animals(
                world.animals,
                self.evolver,
                rng,
                eye_config=self.config.eye,
                limits=self.config.animal,
            )
            world.animals = new_animals
            stats.min_fitness = evo_stats.min_fitness
            stats.max_fitness = evo_stats.max_fitness
            stats.avg_fitness = evo_stats.avg_fitness
            stats.median_fitness = evo_stats.median_fitness

        for food in world.foods:
            food.respawn(rng)

        self.all_gen_stats.append(stats)
        self.current_generation += 1
        world.generation = self.current_generation
        self.age = 0
        return stats

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def total_generations_completed(self) -> int:
        """Number of fully completed generations."""
        return len(self.all_gen_stats)

    def get_last_gen_stats(self) -> Optional[GenerationStats]:
        """Get stats for the last completed generation, or None."""
        if self.all_gen_stats:
            return self.all_gen_stats[-1]
        return None

    def __repr__(self) -> str:
        return (
            f"GenerationManager(gen={self.current_generation}, "
            f"age={self.age}/{self.gen_length})"
        )
