"""
Unit tests for the per-tick world update.

Tests cover:
- Phase order (collision, then brain, then movement)
- Collision radius (inclusive), multiple foods, shared meals
- Food respawn (once per food, in first-claim order)
- Speed clamping and heading normalization
- Toroidal movement
- Empty worlds
- Deterministic replay
"""

import math

import numpy as np
import pytest

from birdsim.core.animal import Animal, reset_animal_id_counter
from birdsim.core.brain import Brain
from birdsim.core.config import AnimalConfig, EyeConfig, SimConfig
from birdsim.core.eye import Eye
from birdsim.core.food import Food
from birdsim.core.world import World
from birdsim.simulation.tick import (
    COLLISION_RADIUS,
    TickStats,
    process_brains,
    process_collisions,
    process_movements,
    step,
)


# ---------------------------------------------------------------------------
# Fixtures and helpers
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_ids():
    reset_animal_id_counter()
    yield
    reset_animal_id_counter()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


class NullController:
    """Never changes speed or heading."""

    def decide(self, vision):
        return 0.0, 0.0


class FixedController:
    def __init__(self, speed_delta: float, rotation_delta: float):
        self.command = (speed_delta, rotation_delta)
        self.seen: list[np.ndarray] = []

    def decide(self, vision):
        self.seen.append(vision)
        return self.command


def bird(x: float, y: float, heading: float = 0.0, speed: float = 0.002) -> Animal:
    eye = Eye.from_config(EyeConfig())
    brain = Brain.random(eye, np.random.default_rng(0))
    return Animal(x=x, y=y, heading=heading, eye=eye, brain=brain, speed=speed)


# ---------------------------------------------------------------------------
# Collisions
# ---------------------------------------------------------------------------

class TestCollisions:
    def test_bird_on_food_eats(self, rng):
        world = World(animals=[bird(0.5, 0.5)], foods=[Food(0.505, 0.5)])
        stats = process_collisions(world, rng)
        assert world.animals[0].satiation == 1
        assert stats == TickStats(food_eaten=1, foods_respawned=1, shared_meals=0)
        assert world.foods[0].position != (0.505, 0.5)

    def test_far_food_not_eaten(self, rng):
        world = World(animals=[bird(0.5, 0.5)], foods=[Food(0.52, 0.5)])
        stats = process_collisions(world, rng)
        assert world.animals[0].satiation == 0
        assert stats.food_eaten == 0
        assert world.foods[0].position == (0.52, 0.5)

    def test_radius_is_inclusive(self, rng):
        world = World(animals=[bird(0.5, 0.5)], foods=[Food(0.75, 0.5)])
        process_collisions(world, rng, radius=0.25)
        assert world.animals[0].satiation == 1

    def test_default_radius(self):
        assert COLLISION_RADIUS == 0.01

    def test_two_foods_in_range(self, rng):
        world = World(
            animals=[bird(0.5, 0.5)],
            foods=[Food(0.505, 0.5), Food(0.5, 0.495), Food(0.9, 0.9)],
        )
        stats = process_collisions(world, rng)
        assert world.animals[0].satiation == 2
        assert stats.food_eaten == 2
        assert stats.foods_respawned == 2
        assert world.foods[0].position != (0.505, 0.5)
        assert world.foods[1].position != (0.5, 0.495)
        assert world.foods[2].position == (0.9, 0.9)

    def test_two_birds_share_one_food(self, rng):
        world = World(
            animals=[bird(0.5, 0.5), bird(0.505, 0.5)],
            foods=[Food(0.502, 0.5)],
        )
        stats = process_collisions(world, rng)
        assert [a.satiation for a in world.animals] == [1, 1]
        assert stats == TickStats(food_eaten=2, foods_respawned=1, shared_meals=1)

    def test_shared_food_respawns_once(self):
        world = World(
            animals=[bird(0.5, 0.5), bird(0.505, 0.5)],
            foods=[Food(0.502, 0.5)],
        )
        process_collisions(world, np.random.default_rng(5))
        expected = np.random.default_rng(5).random(2)
        assert world.foods[0].position == (float(expected[0]), float(expected[1]))

    def test_respawn_in_first_claim_order(self):
        # First bird sits on food 1, second on food 0: food 1 gets the first draw.
        world = World(
            animals=[bird(0.2, 0.2), bird(0.7, 0.7)],
            foods=[Food(0.7, 0.7), Food(0.2, 0.2)],
        )
        process_collisions(world, np.random.default_rng(8))
        expected = np.random.default_rng(8)
        first = tuple(float(v) for v in expected.random(2))
        second = tuple(float(v) for v in expected.random(2))
        assert world.foods[1].position == first
        assert world.foods[0].position == second

    def test_food_count_never_changes(self, rng):
        world = World(
            animals=[bird(0.5, 0.5)],
            foods=[Food(0.5, 0.5), Food(0.501, 0.5)],
        )
        process_collisions(world, rng)
        assert world.food_count == 2


# ---------------------------------------------------------------------------
# Brains
# ---------------------------------------------------------------------------

class TestBrains:
    def test_null_controller_keeps_state(self):
        world = World(animals=[bird(0.5, 0.5, heading=1.0, speed=0.003)])
        process_brains(world, NullController())
        assert world.animals[0].speed == 0.003
        assert world.animals[0].heading == 1.0

    def test_speed_clamped_high(self):
        world = World(animals=[bird(0.5, 0.5)])
        process_brains(world, FixedController(0.2, 0.0))
        assert world.animals[0].speed == AnimalConfig().speed_max

    def test_speed_clamped_low(self):
        world = World(animals=[bird(0.5, 0.5)])
        process_brains(world, FixedController(-0.2, 0.0))
        assert world.animals[0].speed == AnimalConfig().speed_min

    def test_custom_limits(self):
        world = World(animals=[bird(0.5, 0.5)])
        limits = AnimalConfig(speed_min=0.0, speed_max=0.01)
        process_brains(world, FixedController(0.2, 0.0), limits)
        assert world.animals[0].speed == 0.01

    def test_heading_wrapped(self):
        world = World(animals=[bird(0.5, 0.5, heading=3.0)])
        process_brains(world, FixedController(0.0, 1.0))
        assert world.animals[0].heading == pytest.approx(4.0 - 2 * math.pi)

    def test_controller_sees_every_bird(self):
        world = World(
            animals=[bird(0.1, 0.1), bird(0.5, 0.5), bird(0.9, 0.9)],
            foods=[Food(0.55, 0.5)],
        )
        controller = FixedController(0.0, 0.0)
        process_brains(world, controller)
        assert len(controller.seen) == 3
        assert all(v.shape == (Eye.from_config(EyeConfig()).cells,) for v in controller.seen)
        assert controller.seen[1].sum() > 0.0

    def test_own_brain_used_by_default(self):
        world = World(animals=[bird(0.5, 0.5)], foods=[Food(0.6, 0.5)])
        animal = world.animals[0]
        vision = animal.eye.process_vision(animal.position, animal.heading, world.foods)
        speed_delta, rotation_delta = animal.brain.decide(vision)
        limits = AnimalConfig()
        expected_speed = min(max(0.002 + speed_delta, limits.speed_min), limits.speed_max)

        process_brains(world)
        assert animal.speed == pytest.approx(expected_speed)
        assert animal.heading == pytest.approx(rotation_delta)


# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------

class TestMovement:
    def test_moves_along_heading(self):
        world = World(animals=[bird(0.5, 0.5, heading=math.pi / 2, speed=0.004)])
        process_movements(world)
        assert world.animals[0].x == pytest.approx(0.5)
        assert world.animals[0].y == pytest.approx(0.504)

    def test_wraps_right_edge(self):
        world = World(animals=[bird(0.999, 0.5)])
        process_movements(world)
        assert world.animals[0].x == pytest.approx(0.001)
        assert world.animals[0].y == pytest.approx(0.5)

    def test_wraps_bottom_edge(self):
        world = World(animals=[bird(0.5, 0.0005, heading=-math.pi / 2)])
        process_movements(world)
        assert world.animals[0].y == pytest.approx(0.9985)

    def test_stays_in_unit_square(self, rng):
        world = World(animals=[Animal.random(rng) for _ in range(20)])
        for _ in range(200):
            step(world, rng, NullController())
        for a in world.animals:
            assert 0.0 <= a.x < 1.0
            assert 0.0 <= a.y < 1.0


# ---------------------------------------------------------------------------
# Full tick
# ---------------------------------------------------------------------------

class TestStep:
    def test_tick_wraps_bird_near_edge(self, rng):
        world = World(animals=[bird(0.999, 0.5)])
        step(world, rng, NullController())
        assert world.animals[0].x == pytest.approx(0.001)

    def test_collision_happens_before_movement(self, rng):
        world = World(animals=[bird(0.489, 0.5)], foods=[Food(0.5, 0.5)])
        first = step(world, rng, NullController())
        assert first.food_eaten == 0
        assert world.animals[0].x == pytest.approx(0.491)

        second = step(world, rng, NullController())
        assert second.food_eaten == 1
        assert world.animals[0].satiation == 1

    def test_empty_world_still_ticks(self, rng):
        world = World()
        stats = step(world, rng)
        assert stats == TickStats()
        assert world.tick_count == 1

    def test_birds_without_food(self, rng):
        world = World(animals=[bird(0.5, 0.5)])
        stats = step(world, rng)
        assert stats.food_eaten == 0
        assert world.tick_count == 1

    def test_tick_count_increments(self, rng):
        world = World()
        for _ in range(5):
            step(world, rng)
        assert world.tick_count == 5

    def test_deterministic_replay(self):
        config = SimConfig()
        config.world.animal_count = 10
        config.world.food_count = 30

        def run(seed: int) -> tuple:
            reset_animal_id_counter()
            rng = np.random.default_rng(seed)
            world = World.random(config, rng)
            eaten = 0
            for _ in range(300):
                eaten += step(world, rng, limits=config.animal).food_eaten
            return world.animal_positions(), world.food_positions(), eaten

        a_pos, a_food, a_eaten = run(123)
        b_pos, b_food, b_eaten = run(123)
        np.testing.assert_array_equal(a_pos, b_pos)
        np.testing.assert_array_equal(a_food, b_food)
        assert a_eaten == b_eaten
