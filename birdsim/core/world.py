"""
World (simulation environment) for the bird simulator.

A plain container for the birds and the foods on the unit torus. It holds
no physics of its own: the tick step (`birdsim.simulation.tick`) is the
only code that moves birds, feeds them, and respawns food.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from birdsim.core.animal import Animal
from birdsim.core.config import SimConfig
from birdsim.core.food import Food


class World:
    """
    The simulation world.

    Attributes:
        animals: Birds, in insertion order.
        foods: Food items, in insertion order. Their count never changes
            once the world is populated.
        generation: Current generation number.
        tick_count: Ticks simulated so far (across generations).
    """

    def __init__(
        self,
        animals: Optional[list[Animal]] = None,
        foods: Optional[list[Food]] = None,
    ):
        self.animals: list[Animal] = list(animals) if animals else []
        self.foods: list[Food] = list(foods) if foods else []
        self.generation: int = 0
        self.tick_count: int = 0

    @classmethod
    def random(cls, config: SimConfig, rng: np.random.Generator) -> World:
        """
        Populate a world with random birds and foods.

        Birds are drawn first, then foods, so the draw order is fixed for a
        given seed.
        """
        animals = [
            Animal.random(rng, eye_config=config.eye, limits=config.animal)
            for _ in range(config.world.animal_count)
        ]
        foods = [Food.random(rng) for _ in range(config.world.food_count)]
        return cls(animals=animals, foods=foods)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def animal_count(self) -> int:
        return len(self.animals)

    @property
    def food_count(self) -> int:
        return len(self.foods)

    def animal_positions(self) -> NDArray[np.float64]:
        """(N, 2) array of bird positions."""
        return np.array([a.position for a in self.animals], dtype=np.float64).reshape(-1, 2)

    def food_positions(self) -> NDArray[np.float64]:
        """(N, 2) array of food positions."""
        return np.array([f.position for f in self.foods], dtype=np.float64).reshape(-1, 2)

    def total_satiation(self) -> int:
        return sum(a.satiation for a in self.animals)

    def __repr__(self) -> str:
        return (
            f"World(gen={self.generation}, tick={self.tick_count}, "
            f"animals={self.animal_count}, foods={self.food_count})"
        )
