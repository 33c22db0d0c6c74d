"""
Spatial utilities for the bird simulator.

Provides the continuous geometry used by the sensor and the tick step:
angle wrapping, bearings, heading vectors, and coordinate wrapping on the
unit torus [0, 1) x [0, 1).

Angles are radians, measured counter-clockwise from the world +X axis.
Normalized angles lie in (-pi, pi].
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value to [low, high]."""
    return max(low, min(high, value))


def wrap_angle(angle: float) -> float:
    """
    Normalize an angle into (-pi, pi].

    Angles already in range are returned unchanged, so exact values such as
    pi/2 survive the round trip bit-for-bit.

    Examples:
        >>> wrap_angle(math.pi)
        3.141592653589793
        >>> wrap_angle(-math.pi)
        3.141592653589793
    """
    if -math.pi < angle <= math.pi:
        return angle
    return math.pi - (math.pi - angle) % math.tau


def wrap_angles(angles: NDArray[np.float64]) -> NDArray[np.float64]:
    """Vectorized `wrap_angle`."""
    angles = np.asarray(angles, dtype=np.float64)
    in_range = (angles > -math.pi) & (angles <= math.pi)
    wrapped = math.pi - np.mod(math.pi - angles, math.tau)
    return np.where(in_range, angles, wrapped)


def bearings(dx: NDArray[np.float64], dy: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Angle between the world +X axis and each vector (dx, dy).

    A zero-length vector has no direction; it is given bearing 0.0.
    """
    zero = (dx == 0.0) & (dy == 0.0)
    return np.where(zero, 0.0, np.arctan2(dy, dx))


def heading_vector(heading: float) -> tuple[float, float]:
    """Unit vector pointing along `heading`."""
    return math.cos(heading), math.sin(heading)


def wrap_unit(value: float) -> float:
    """
    Wrap a coordinate into [0, 1).

    Modular, not clamped: 1.001 becomes 0.001 and -0.25 becomes 0.75.
    """
    wrapped = value % 1.0
    # Tiny negatives round up to exactly 1.0 under float modulo.
    if wrapped >= 1.0:
        return 0.0
    return wrapped


def toroidal_wrap(x: float, y: float) -> tuple[float, float]:
    """
    Wrap (x, y) into the unit torus.

    Args:
        x, y: Raw coordinates (may be negative or >= 1).

    Returns:
        Wrapped (x, y) tuple within [0, 1) x [0, 1).
    """
    return wrap_unit(x), wrap_unit(y)


def random_position(rng: np.random.Generator) -> tuple[float, float]:
    """Uniformly random point in [0, 1) x [0, 1)."""
    x, y = rng.random(2)
    return float(x), float(y)


def random_heading(rng: np.random.Generator) -> float:
    """Uniformly random heading in (-pi, pi]."""
    return wrap_angle(float(rng.uniform(-math.pi, math.pi)))
