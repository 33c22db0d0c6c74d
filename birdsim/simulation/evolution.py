"""
Genetic algorithm for the bird simulator.

Turns a scored generation of birds into the next one:

  1. each bird becomes an `AnimalIndividual` (fitness = satiation,
     chromosome = brain weights)
  2. parents are picked by roulette-wheel selection
  3. children are bred by uniform crossover, then Gaussian-style mutation
  4. each child chromosome is restored into a fresh bird at a random spot

The tick step never touches this module; the generation manager calls it
at generation boundaries only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import numpy as np

from birdsim.core.animal import Animal
from birdsim.core.chromosome import Chromosome
from birdsim.core.config import AnimalConfig, EyeConfig, GeneticsConfig


# ---------------------------------------------------------------------------
# Individuals
# ---------------------------------------------------------------------------

class Individual(Protocol):
    """Anything the genetic algorithm can score and breed."""

    @property
    def fitness(self) -> float:
        ...

    @property
    def chromosome(self) -> Chromosome:
        ...


@dataclass
class AnimalIndividual:
    """A bird reduced to what evolution cares about."""
    fitness: float
    chromosome: Chromosome

    @classmethod
    def from_animal(cls, animal: Animal) -> AnimalIndividual:
        return cls(fitness=float(animal.satiation), chromosome=animal.as_chromosome())

    def into_animal(
        self,
        rng: np.random.Generator,
        eye_config: Optional[EyeConfig] = None,
        limits: Optional[AnimalConfig] = None,
    ) -> Animal:
        return Animal.from_chromosome(
            self.chromosome, rng, eye_config=eye_config, limits=limits,
        )


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------

class RouletteWheelSelection:
    """Fitness-proportionate selection. All-zero fitness = uniform choice."""

    def select(
        self,
        population: Sequence[Individual],
        rng: np.random.Generator,
    ) -> Individual:
        if not population:
            raise ValueError("cannot select from an empty population")

        fitness = np.array([ind.fitness for ind in population], dtype=np.float64)
        if np.any(fitness < 0):
            raise ValueError("roulette-wheel selection needs non-negative fitness")

        total = fitness.sum()
        if total <= 0:
            return population[int(rng.integers(0, len(population)))]
        return population[int(rng.choice(len(population), p=fitness / total))]


class UniformCrossover:
    """Each child gene comes from either parent with probability 0.5."""

    def crossover(
        self,
        parent_a: Chromosome,
        parent_b: Chromosome,
        rng: np.random.Generator,
    ) -> Chromosome:
        if len(parent_a) != len(parent_b):
            raise ValueError(
                f"parents must have equal length, got {len(parent_a)} and {len(parent_b)}"
            )
        take_a = rng.random(len(parent_a)) < 0.5
        return Chromosome(np.where(take_a, parent_a.genes, parent_b.genes))


class GaussianMutation:
    """
    With probability `chance`, nudge each gene by +/- coeff * U[0, 1).

    Attributes:
        chance: Per-gene mutation probability, in [0, 1].
        coeff: Maximum magnitude of a nudge.
    """

    def __init__(self, chance: float, coeff: float):
        if not (0.0 <= chance <= 1.0):
            raise ValueError(f"mutation chance must be in [0, 1], got {chance}")
        self.chance = chance
        self.coeff = coeff

    def mutate(self, chromosome: Chromosome, rng: np.random.Generator) -> None:
        """Mutate in place."""
        n = len(chromosome)
        sign = np.where(rng.random(n) < 0.5, -1.0, 1.0)
        hit = rng.random(n) < self.chance
        nudge = sign * self.coeff * rng.random(n)
        chromosome.genes += np.where(hit, nudge, 0.0)


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

@dataclass
class EvolutionStats:
    """Fitness summary of the generation that was evolved."""
    min_fitness: float = 0.0
    max_fitness: float = 0.0
    avg_fitness: float = 0.0
    median_fitness: float = 0.0

    @classmethod
    def from_population(cls, population: Sequence[Individual]) -> EvolutionStats:
        if not population:
            return cls()
        fitness = np.array([ind.fitness for ind in population], dtype=np.float64)
        return cls(
            min_fitness=float(fitness.min()),
            max_fitness=float(fitness.max()),
            avg_fitness=float(fitness.mean()),
            median_fitness=float(np.median(fitness)),
        )


# ---------------------------------------------------------------------------
# Evolver
# ---------------------------------------------------------------------------

class Evolver(Protocol):
    """Maps a scored population to the next one."""

    def evolve(
        self,
        population: Sequence[Individual],
        rng: np.random.Generator,
    ) -> tuple[list[Chromosome], EvolutionStats]:
        ...


class GeneticAlgorithm:
    """
    Selection + crossover + mutation.

    Attributes:
        selection: Parent selection method.
        crossover: Crossover method.
        mutation: Mutation method.
    """

    def __init__(
        self,
        selection: Optional[RouletteWheelSelection] = None,
        crossover: Optional[UniformCrossover] = None,
        mutation: Optional[GaussianMutation] = None,
    ):
        self.selection = selection or RouletteWheelSelection()
        self.crossover = crossover or UniformCrossover()
        self.mutation = mutation or GaussianMutation(
            GeneticsConfig.mutation_chance, GeneticsConfig.mutation_coeff,
        )

    @classmethod
    def from_config(cls, config: GeneticsConfig) -> GeneticAlgorithm:
        return cls(mutation=GaussianMutation(config.mutation_chance, config.mutation_coeff))

    def evolve(
        self,
        population: Sequence[Individual],
        rng: np.random.Generator,
    ) -> tuple[list[Chromosome], EvolutionStats]:
        """
        Breed one child chromosome per member of `population`.

        Raises:
            ValueError: If the population is empty.
        """
        if not population:
            raise ValueError("cannot evolve an empty population")

        children = []
        for _ in range(len(population)):
            parent_a = self.selection.select(population, rng).chromosome
            parent_b = self.selection.select(population, rng).chromosome
            child = self.crossover.crossover(parent_a, parent_b, rng)
            self.mutation.mutate(child, rng)
            children.append(child)

        return children, EvolutionStats.from_population(population)


def evolve_animals(
    animals: Sequence[Animal],
    evolver: Evolver,
    rng: np.random.Generator,
    eye_config: Optional[EyeConfig] = None,
    limits: Optional[AnimalConfig] = None,
) -> tuple[list[Animal], EvolutionStats]:
    """
    Evolve a generation of birds into fresh birds.

    The new birds carry evolved brains, zero satiation, random positions
    and headings, and the initial speed.
    """
    individuals = [AnimalIndividual.from_animal(a) for a in animals]
    children, stats = evolver.evolve(individuals, rng)
    new_animals = [
        AnimalIndividual(fitness=0.0, chromosome=c).into_animal(rng, eye_config, limits)
        for c in children
    ]
    return new_animals, stats
