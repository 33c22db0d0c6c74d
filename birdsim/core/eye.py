"""
Eye (field-of-view sensor) for the bird simulator.

An eye turns world geometry into a fixed-length sensory vector. The field
of view is a circular sector centred on the bird's heading:

  - fov_range: how far the eye sees (0.25 = a quarter of the arena)
  - fov_angle: total angular width of the sector (2*pi = all around;
    larger values are allowed and still mean "all around")
  - cells: number of angular buckets ("photoreceptors") across the sector

For each visible food, the cell is chosen by where the food lies across the
sector (cell 0 = the clockwise edge; last cell = the counter-clockwise
edge, with +Y pointing up), and the cell is excited by an energy that falls linearly
from 1.0 at distance 0 to 0.0 at fov_range. Several foods in the same cell
add up; nothing is clamped or normalized.

Vision is NOT toroidal: a food just across the wrap boundary looks far away.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from birdsim.core.config import EyeConfig
from birdsim.core.food import Food
from birdsim.utils.spatial import bearings, wrap_angle, wrap_angles


class Eye:
    """
    Field-of-view sensor. Immutable after construction.

    Attributes:
        fov_range: Maximum sensing distance (exclusive).
        fov_angle: Total angular width of the sensing sector, radians.
        cells: Number of sensory buckets.
    """

    __slots__ = ("_fov_range", "_fov_angle", "_cells")

    def __init__(self, fov_range: float, fov_angle: float, cells: int):
        """
        Create an eye.

        Raises:
            ValueError: If any parameter is not strictly positive.
        """
        if not fov_range > 0:
            raise ValueError(f"fov_range must be > 0, got {fov_range}")
        if not fov_angle > 0:
            raise ValueError(f"fov_angle must be > 0, got {fov_angle}")
        if int(cells) != cells or cells < 1:
            raise ValueError(f"cells must be a positive integer, got {cells}")

        self._fov_range = float(fov_range)
        self._fov_angle = float(fov_angle)
        self._cells = int(cells)

    @classmethod
    def from_config(cls, config: EyeConfig) -> Eye:
        return cls(config.fov_range, config.fov_angle, config.cells)

    @property
    def fov_range(self) -> float:
        return self._fov_range

    @property
    def fov_angle(self) -> float:
        return self._fov_angle

    @property
    def cells(self) -> int:
        return self._cells

    # ------------------------------------------------------------------
    # Vision
    # ------------------------------------------------------------------

    def process_vision(
        self,
        position: tuple[float, float],
        heading: float,
        foods: Sequence[Food],
    ) -> NDArray[np.float64]:
        """
        Compute the sensory vector seen from `position` looking along `heading`.

        Args:
            position: Observer position (x, y).
            heading: Observer heading in radians (any range).
            foods: Food items to look at.

        Returns:
            Array of length `cells`, every entry >= 0.
        """
        vision = np.zeros(self._cells, dtype=np.float64)
        if not foods:
            return vision

        food_xy = np.array([(f.x, f.y) for f in foods], dtype=np.float64)
        self._accumulate(vision, position, heading, food_xy)
        return vision

    def process_vision_array(
        self,
        position: tuple[float, float],
        heading: float,
        food_positions: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Same as `process_vision`, but takes an (N, 2) array of food positions."""
        vision = np.zeros(self._cells, dtype=np.float64)
        food_xy = np.asarray(food_positions, dtype=np.float64).reshape(-1, 2)
        if len(food_xy) == 0:
            return vision
        self._accumulate(vision, position, heading, food_xy)
        return vision

    def _accumulate(
        self,
        vision: NDArray[np.float64],
        position: tuple[float, float],
        heading: float,
        food_xy: NDArray[np.float64],
    ) -> None:
        dx = food_xy[:, 0] - position[0]
        dy = food_xy[:, 1] - position[1]
        dist = np.hypot(dx, dy)

        in_range = dist < self._fov_range
        if not np.any(in_range):
            return
        dx, dy, dist = dx[in_range], dy[in_range], dist[in_range]

        angle = wrap_angles(bearings(dx, dy) - wrap_angle(heading))

        # Shift from <-fov/2, +fov/2> to <0, fov>: 0 is the clockwise edge of the FOV.
        angle = angle + self._fov_angle / 2.0
        in_cone = (angle >= 0.0) & (angle <= self._fov_angle)
        if not np.any(in_cone):
            return
        angle, dist = angle[in_cone], dist[in_cone]

        cell = np.floor(angle / self._fov_angle * self._cells).astype(np.intp)
        # angle == fov_angle lands one past the last cell.
        cell = np.minimum(cell, self._cells - 1)

        energy = (self._fov_range - dist) / self._fov_range
        np.add.at(vision, cell, energy)

    def __repr__(self) -> str:
        return (
            f"Eye(fov_range={self._fov_range}, "
            f"fov_angle={math.degrees(self._fov_angle):.1f}deg, cells={self._cells})"
        )
