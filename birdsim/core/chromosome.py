"""
Chromosome (genome) for the bird simulator.

A chromosome is a fixed-length vector of real-valued genes. Birds evolve
only their brains, so a bird's chromosome is exactly its network's
flattened weights (see `birdsim.core.network`).
"""

from __future__ import annotations

from typing import Iterator, Sequence

import numpy as np
from numpy.typing import NDArray


class Chromosome:
    """
    Real-valued genome.

    Attributes:
        genes: 1-D float64 NumPy array.
    """

    __slots__ = ("genes",)

    def __init__(self, genes: Sequence[float] | NDArray[np.float64]):
        self.genes = np.array(genes, dtype=np.float64).ravel()

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self) -> Iterator[float]:
        return iter(self.genes.tolist())

    def __getitem__(self, index: int) -> float:
        return float(self.genes[index])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chromosome):
            return NotImplemented
        return bool(np.array_equal(self.genes, other.genes))

    __hash__ = None  # mutable

    def copy(self) -> Chromosome:
        """Independent copy (genes array is not shared)."""
        return Chromosome(self.genes.copy())

    def distance(self, other: Chromosome) -> float:
        """Euclidean distance between two gene vectors of equal length."""
        if len(self) != len(other):
            raise ValueError(f"chromosome lengths differ: {len(self)} vs {len(other)}")
        return float(np.linalg.norm(self.genes - other.genes))

    def __repr__(self) -> str:
        preview = ", ".join(f"{g:.3f}" for g in self.genes[:4])
        more = ", ..." if len(self) > 4 else ""
        return f"Chromosome(len={len(self)}, genes=[{preview}{more}])"
