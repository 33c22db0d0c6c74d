"""
Food resource for the bird simulator.

Food items sit at a point in the unit arena. Eating a food does not remove
it: the item is teleported to a fresh random position, so the number of
foods in a world never changes.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from birdsim.utils.spatial import random_position


@dataclass(slots=True)
class Food:
    """
    A food item in the arena.

    Attributes:
        x: X-coordinate in [0, 1).
        y: Y-coordinate in [0, 1).
    """
    x: float
    y: float

    @classmethod
    def random(cls, rng: np.random.Generator) -> Food:
        """Create a food item at a uniformly random position."""
        x, y = random_position(rng)
        return cls(x=x, y=y)

    @property
    def position(self) -> tuple[float, float]:
        """Position as (x, y) tuple."""
        return (self.x, self.y)

    def respawn(self, rng: np.random.Generator) -> None:
        """Move this food to a new uniformly random position."""
        self.x, self.y = random_position(rng)

    def to_dict(self) -> dict:
        """Serialize food state for snapshots."""
        return {"x": round(self.x, 6), "y": round(self.y, 6)}

    def __repr__(self) -> str:
        return f"Food(pos=({self.x:.4f},{self.y:.4f}))"
