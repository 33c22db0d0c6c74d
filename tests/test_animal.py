"""
Unit tests for the Animal (bird).

Tests cover:
- Creation and unique IDs
- Random placement and initial state
- Chromosome restore (brain kept, placement re-randomized)
- Direction and fitness properties
- Serialization (to_dict)
"""

import math

import numpy as np
import pytest

from birdsim.core.animal import Animal, reset_animal_id_counter
from birdsim.core.brain import Brain
from birdsim.core.config import AnimalConfig, EyeConfig
from birdsim.core.eye import Eye
from birdsim.core.network import Network


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_ids():
    """Reset the animal ID counter before each test."""
    reset_animal_id_counter()
    yield
    reset_animal_id_counter()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def eye() -> Eye:
    return Eye.from_config(EyeConfig())


def make_animal(eye: Eye, rng: np.random.Generator, **kwargs) -> Animal:
    defaults = dict(x=0.5, y=0.5, heading=0.0, eye=eye, brain=Brain.random(eye, rng))
    defaults.update(kwargs)
    return Animal(**defaults)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

class TestAnimalCreation:
    def test_basic_creation(self, eye, rng):
        a = make_animal(eye, rng, x=0.1, y=0.2, heading=1.0)
        assert a.position == (0.1, 0.2)
        assert a.heading == 1.0
        assert a.speed == AnimalConfig().initial_speed
        assert a.satiation == 0

    def test_unique_ids(self, eye, rng):
        animals = [make_animal(eye, rng) for _ in range(5)]
        assert [a.id for a in animals] == [0, 1, 2, 3, 4]

    def test_reset_id_counter(self, eye, rng):
        make_animal(eye, rng)
        reset_animal_id_counter()
        assert make_animal(eye, rng).id == 0

    def test_slots(self, eye, rng):
        a = make_animal(eye, rng)
        with pytest.raises(AttributeError):
            a.energy = 1.0


class TestRandomAnimal:
    def test_in_unit_square(self, rng):
        for _ in range(50):
            a = Animal.random(rng)
            assert 0.0 <= a.x < 1.0
            assert 0.0 <= a.y < 1.0
            assert -math.pi < a.heading <= math.pi

    def test_initial_state(self, rng):
        limits = AnimalConfig(initial_speed=0.003)
        a = Animal.random(rng, limits=limits)
        assert a.speed == 0.003
        assert a.satiation == 0

    def test_eye_follows_config(self, rng):
        a = Animal.random(rng, eye_config=EyeConfig(fov_range=0.4, fov_angle=math.pi, cells=5))
        assert a.eye.cells == 5
        assert a.eye.fov_range == 0.4
        assert len(a.as_chromosome()) == Network.weight_count(Brain.topology(a.eye))

    def test_seed_deterministic(self):
        a = Animal.random(np.random.default_rng(9))
        b = Animal.random(np.random.default_rng(9))
        assert a.position == b.position
        assert a.heading == b.heading
        assert a.as_chromosome() == b.as_chromosome()


class TestChromosomeRestore:
    def test_brain_survives(self, rng):
        parent = Animal.random(rng)
        child = Animal.from_chromosome(parent.as_chromosome(), rng)
        assert child.as_chromosome() == parent.as_chromosome()

    def test_placement_is_redrawn(self, rng):
        parent = Animal.random(rng)
        parent.satiation = 7
        parent.speed = 0.005
        child = Animal.from_chromosome(parent.as_chromosome(), rng)
        assert child.position != parent.position
        assert child.satiation == 0
        assert child.speed == AnimalConfig().initial_speed
        assert child.id != parent.id


# ---------------------------------------------------------------------------
# Properties and serialization
# ---------------------------------------------------------------------------

class TestProperties:
    def test_direction(self, eye, rng):
        a = make_animal(eye, rng, heading=math.pi / 2)
        dx, dy = a.direction
        assert dx == pytest.approx(0.0, abs=1e-12)
        assert dy == pytest.approx(1.0)

    def test_fitness_is_satiation(self, eye, rng):
        a = make_animal(eye, rng)
        a.satiation = 4
        assert a.fitness == 4.0
        assert isinstance(a.fitness, float)

    def test_to_dict(self, eye, rng):
        a = make_animal(eye, rng, x=0.12345678, y=0.5, heading=3 * math.pi / 2)
        d = a.to_dict()
        assert d["id"] == 0
        assert d["x"] == 0.123457
        assert d["heading"] == pytest.approx(-math.pi / 2, abs=1e-6)
        assert d["speed"] == 0.002
        assert d["satiation"] == 0

    def test_repr(self, eye, rng):
        assert "satiation=0" in repr(make_animal(eye, rng))
