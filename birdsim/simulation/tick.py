"""
Per-tick world update for the bird simulator.

One tick runs three phases, always in this order and always all three,
even for an empty world:

  1. Collisions: every bird within COLLISION_RADIUS of a food eats it.
     Distances are measured against the food positions as they were when
     the phase started, so two birds on the same food are both credited.
     Each eaten food then respawns once, at a random position.
  2. Brains: every bird looks at the food (post-collision, pre-move) and
     its controller returns (speed_delta, rotation_delta). Speed is
     clamped to the configured limits; heading is normalized.
  3. Movement: every bird advances `speed` along its heading and wraps
     around the arena edges.

The only randomness is the food respawn position, drawn from the injected
generator, so a tick is deterministic for a given generator state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from birdsim.core.brain import Controller
from birdsim.core.config import AnimalConfig
from birdsim.core.world import World
from birdsim.utils.spatial import clamp, toroidal_wrap, wrap_angle


# Distance (inclusive) at which a bird eats a food.
COLLISION_RADIUS = 0.01


# ---------------------------------------------------------------------------
# Tick statistics
# ---------------------------------------------------------------------------

@dataclass
class TickStats:
    """Statistics collected during a single tick."""
    food_eaten: int = 0         # satiation credits handed out
    foods_respawned: int = 0    # distinct foods moved (<= food_eaten)
    shared_meals: int = 0       # extra credits from several birds on one food


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

def process_collisions(
    world: World,
    rng: np.random.Generator,
    radius: float = COLLISION_RADIUS,
) -> TickStats:
    """
    Feed birds that touch food, then respawn the eaten food.

    Birds are visited in list order and foods in list order within each
    bird; that order fixes which food respawns first (and so which random
    draw it gets).

    Returns:
        TickStats with the feeding counters filled in.
    """
    stats = TickStats()
    if not world.animals or not world.foods:
        return stats

    food_xy = world.food_positions()
    # Insertion-ordered: food index -> number of birds that ate it.
    claims: dict[int, int] = {}

    for animal in world.animals:
        dist = np.hypot(food_xy[:, 0] - animal.x, food_xy[:, 1] - animal.y)
        for idx in np.flatnonzero(dist <= radius):
            animal.satiation += 1
            claims[int(idx)] = claims.get(int(idx), 0) + 1

    for idx, count in claims.items():
        world.foods[idx].respawn(rng)
        stats.food_eaten += count
        stats.foods_respawned += 1
        stats.shared_meals += count - 1

    return stats


def process_brains(
    world: World,
    controller: Optional[Controller] = None,
    limits: Optional[AnimalConfig] = None,
) -> None:
    """
    Let each bird's controller update its speed and heading.

    Args:
        world: The simulation world.
        controller: Controller used for every bird. None = each bird's own brain.
        limits: Speed limits. None = defaults.
    """
    limits = limits or AnimalConfig()
    food_xy = world.food_positions()

    for animal in world.animals:
        vision = animal.eye.process_vision_array(animal.position, animal.heading, food_xy)
        decider = controller if controller is not None else animal.brain
        speed_delta, rotation_delta = decider.decide(vision)

        animal.speed = clamp(animal.speed + speed_delta, limits.speed_min, limits.speed_max)
        animal.heading = wrap_angle(animal.heading + rotation_delta)


def process_movements(world: World) -> None:
    """Advance every bird along its heading, wrapping at the arena edges."""
    for animal in world.animals:
        dx, dy = animal.direction
        animal.x, animal.y = toroidal_wrap(
            animal.x + dx * animal.speed,
            animal.y + dy * animal.speed,
        )


# ---------------------------------------------------------------------------
# Full tick
# ---------------------------------------------------------------------------

def step(
    world: World,
    rng: np.random.Generator,
    controller: Optional[Controller] = None,
    limits: Optional[AnimalConfig] = None,
) -> TickStats:
    """
    Advance the world by exactly one tick.

    Args:
        world: The simulation world (mutated in place).
        rng: Random generator used for food respawns.
        controller: Controller used for every bird. None = each bird's own brain.
        limits: Speed limits applied to controller commands. None = defaults.

    Returns:
        TickStats for this tick.
    """
    stats = process_collisions(world, rng)
    process_brains(world, controller, limits)
    process_movements(world)
    world.tick_count += 1
    return stats
