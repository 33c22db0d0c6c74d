"""
Brain (controller) for the bird simulator.

A controller turns a sensory vector into a movement command
(speed_delta, rotation_delta). The tick step only depends on the
`Controller` protocol; `Brain` is the neural implementation every bird
carries, with topology [cells, 2 * cells, 2].
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from birdsim.core.chromosome import Chromosome
from birdsim.core.config import AnimalConfig
from birdsim.core.eye import Eye
from birdsim.core.network import LayerTopology, Network


@runtime_checkable
class Controller(Protocol):
    """Anything that maps a sensory vector to (speed_delta, rotation_delta)."""

    def decide(self, vision: NDArray[np.float64]) -> tuple[float, float]:
        ...


class Brain:
    """
    Neural controller.

    Network outputs pass through clip(r, 0, 1) - 0.5, giving commands in
    [-0.5, 0.5], and are then limited to +/- speed_accel and
    +/- rotation_accel.

    Attributes:
        network: The underlying feed-forward network.
        speed_accel: Maximum absolute speed change per tick.
        rotation_accel: Maximum absolute heading change per tick (radians).
    """

    __slots__ = ("network", "speed_accel", "rotation_accel")

    def __init__(
        self,
        network: Network,
        speed_accel: float = AnimalConfig.speed_accel,
        rotation_accel: float = AnimalConfig.rotation_accel,
    ):
        self.network = network
        self.speed_accel = speed_accel
        self.rotation_accel = rotation_accel

    @staticmethod
    def topology(eye: Eye) -> list[LayerTopology]:
        return [
            LayerTopology(neurons=eye.cells),
            LayerTopology(neurons=2 * eye.cells),
            LayerTopology(neurons=2),
        ]

    @classmethod
    def random(
        cls,
        eye: Eye,
        rng: np.random.Generator,
        limits: AnimalConfig | None = None,
    ) -> Brain:
        limits = limits or AnimalConfig()
        return cls(
            Network.random(cls.topology(eye), rng),
            speed_accel=limits.speed_accel,
            rotation_accel=limits.rotation_accel,
        )

    @classmethod
    def from_chromosome(
        cls,
        chromosome: Chromosome,
        eye: Eye,
        limits: AnimalConfig | None = None,
    ) -> Brain:
        """
        Rebuild a brain from its genome.

        Raises:
            ValueError: If the chromosome length doesn't match the eye's topology.
        """
        limits = limits or AnimalConfig()
        return cls(
            Network.from_weights(cls.topology(eye), chromosome.genes),
            speed_accel=limits.speed_accel,
            rotation_accel=limits.rotation_accel,
        )

    def as_chromosome(self) -> Chromosome:
        return Chromosome(self.network.weights())

    def decide(self, vision: NDArray[np.float64]) -> tuple[float, float]:
        response = self.network.propagate(vision)

        r0 = float(np.clip(response[0], 0.0, 1.0)) - 0.5
        r1 = float(np.clip(response[1], 0.0, 1.0)) - 0.5

        speed_delta = float(np.clip(r0, -self.speed_accel, self.speed_accel))
        rotation_delta = float(np.clip(r1, -self.rotation_accel, self.rotation_accel))
        return speed_delta, rotation_delta

    def __repr__(self) -> str:
        return f"Brain({self.network!r})"
