"""
Animal (bird) for the bird simulator.

Each bird has a position on the unit torus, a heading, a forward speed,
an eye, a brain, and a satiation counter (foods eaten this generation).
Only the brain is heritable: a bird's chromosome is its brain's weights,
while position, heading and speed are re-randomized on every restore.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from birdsim.core.brain import Brain
from birdsim.core.chromosome import Chromosome
from birdsim.core.config import AnimalConfig, EyeConfig
from birdsim.core.eye import Eye
from birdsim.utils.spatial import heading_vector, random_heading, random_position, wrap_angle


# Unique ID counter for animals
_next_animal_id: int = 0


def _get_next_id() -> int:
    """Generate a globally unique animal ID."""
    global _next_animal_id
    aid = _next_animal_id
    _next_animal_id += 1
    return aid


def reset_animal_id_counter() -> None:
    """Reset the ID counter (useful for tests)."""
    global _next_animal_id
    _next_animal_id = 0


class Animal:
    """
    A bird in the arena.

    Attributes:
        id: Unique identifier.
        x: X-coordinate in [0, 1).
        y: Y-coordinate in [0, 1).
        heading: Direction of travel in radians (counter-clockwise from +X).
        speed: Distance travelled per tick.
        eye: Field-of-view sensor.
        brain: Controller deciding speed and heading changes.
        satiation: Foods eaten since the start of the generation. Written
            only by the tick step.
    """

    __slots__ = ("id", "x", "y", "heading", "speed", "eye", "brain", "satiation")

    def __init__(
        self,
        x: float,
        y: float,
        heading: float,
        eye: Eye,
        brain: Brain,
        speed: float = AnimalConfig.initial_speed,
    ):
        self.id = _get_next_id()
        self.x = x
        self.y = y
        self.heading = heading
        self.speed = speed
        self.eye = eye
        self.brain = brain
        self.satiation: int = 0

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def random(
        cls,
        rng: np.random.Generator,
        eye_config: Optional[EyeConfig] = None,
        limits: Optional[AnimalConfig] = None,
    ) -> Animal:
        """Bird with a random brain, position and heading."""
        eye = Eye.from_config(eye_config or EyeConfig())
        limits = limits or AnimalConfig()
        brain = Brain.random(eye, rng, limits)
        return cls._placed(eye, brain, rng, limits)

    @classmethod
    def from_chromosome(
        cls,
        chromosome: Chromosome,
        rng: np.random.Generator,
        eye_config: Optional[EyeConfig] = None,
        limits: Optional[AnimalConfig] = None,
    ) -> Animal:
        """
        Restore a bird from a chromosome.

        The chromosome only encodes the brain, so position and heading are
        drawn from `rng` and speed starts at its initial value.
        """
        eye = Eye.from_config(eye_config or EyeConfig())
        limits = limits or AnimalConfig()
        brain = Brain.from_chromosome(chromosome, eye, limits)
        return cls._placed(eye, brain, rng, limits)

    @classmethod
    def _placed(
        cls,
        eye: Eye,
        brain: Brain,
        rng: np.random.Generator,
        limits: AnimalConfig,
    ) -> Animal:
        x, y = random_position(rng)
        return cls(
            x=x,
            y=y,
            heading=random_heading(rng),
            eye=eye,
            brain=brain,
            speed=limits.initial_speed,
        )

    def as_chromosome(self) -> Chromosome:
        return self.brain.as_chromosome()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def direction(self) -> tuple[float, float]:
        """Unit vector along the current heading."""
        return heading_vector(self.heading)

    @property
    def fitness(self) -> float:
        return float(self.satiation)

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"Animal(id={self.id}, pos=({self.x:.4f},{self.y:.4f}), "
            f"heading={wrap_angle(self.heading):.3f}, speed={self.speed:.4f}, "
            f"satiation={self.satiation})"
        )

    def to_dict(self) -> dict:
        """Serialize animal state for snapshots/logging."""
        return {
            "id": self.id,
            "x": round(self.x, 6),
            "y": round(self.y, 6),
            "heading": round(wrap_angle(self.heading), 6),
            "speed": round(self.speed, 6),
            "satiation": self.satiation,
        }
