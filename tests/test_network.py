"""
Unit tests for the feed-forward network.

Tests cover:
- Random construction and shapes
- Propagation (ReLU, biases)
- Weight flattening order and restore
- Validation errors
"""

import numpy as np
import pytest

from birdsim.core.network import Layer, LayerTopology, Network


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture
def topology() -> list[LayerTopology]:
    return [LayerTopology(3), LayerTopology(4), LayerTopology(2)]


class TestLayer:
    def test_random_shapes(self, rng):
        layer = Layer.random(3, 5, rng)
        assert layer.biases.shape == (5,)
        assert layer.weights.shape == (5, 3)
        assert layer.input_size == 3
        assert layer.output_size == 5

    def test_random_in_range(self, rng):
        layer = Layer.random(10, 10, rng)
        assert np.all(layer.weights >= -1.0) and np.all(layer.weights <= 1.0)
        assert np.all(layer.biases >= -1.0) and np.all(layer.biases <= 1.0)

    def test_propagate_relu(self):
        layer = Layer(
            biases=np.array([0.0, 0.0]),
            weights=np.array([[-0.5, 0.0, 0.5], [0.1, 0.2, 0.3]]),
        )
        out = layer.propagate(np.array([0.5, 0.5, 0.5]))
        np.testing.assert_allclose(out, [0.0, 0.3])

    def test_propagate_negative_clamped_to_zero(self):
        layer = Layer(biases=np.array([-1.0]), weights=np.array([[0.5]]))
        np.testing.assert_array_equal(layer.propagate(np.array([1.0])), [0.0])

    def test_bias_shape_mismatch_raises(self):
        with pytest.raises(ValueError, match="does not match"):
            Layer(biases=np.zeros(3), weights=np.zeros((2, 4)))

    def test_flat_weights_order(self):
        layer = Layer(
            biases=np.array([0.1, 0.2]),
            weights=np.array([[1.0, 2.0], [3.0, 4.0]]),
        )
        np.testing.assert_array_equal(layer.flat_weights(), [0.1, 1.0, 2.0, 0.2, 3.0, 4.0])


class TestNetwork:
    def test_random_layers(self, rng, topology):
        net = Network.random(topology, rng)
        assert len(net.layers) == 2
        assert net.layers[0].weights.shape == (4, 3)
        assert net.layers[1].weights.shape == (2, 4)

    def test_weight_count(self, topology):
        assert Network.weight_count(topology) == 4 * (3 + 1) + 2 * (4 + 1)

    def test_propagate_output_shape(self, rng, topology):
        net = Network.random(topology, rng)
        out = net.propagate(np.array([0.1, 0.5, 0.9]))
        assert out.shape == (2,)
        assert np.all(out >= 0.0)

    def test_propagate_known_values(self):
        topology = [LayerTopology(2), LayerTopology(2), LayerTopology(1)]
        weights = [
            0.0, 1.0, 0.0,    # hidden neuron 0: bias 0, passes input 0
            0.5, 0.0, 1.0,    # hidden neuron 1: bias 0.5, passes input 1
            -0.25, 1.0, 1.0,  # output: bias -0.25, sums hidden
        ]
        net = Network.from_weights(topology, weights)
        out = net.propagate(np.array([0.2, 0.3]))
        np.testing.assert_allclose(out, [0.2 + 0.8 - 0.25])

    def test_weights_roundtrip(self, rng, topology):
        net = Network.random(topology, rng)
        restored = Network.from_weights(topology, net.weights())
        np.testing.assert_array_equal(restored.weights(), net.weights())
        x = np.array([0.3, 0.0, 0.7])
        np.testing.assert_array_equal(restored.propagate(x), net.propagate(x))

    def test_from_weights_wrong_count_raises(self, topology):
        with pytest.raises(ValueError, match="weights"):
            Network.from_weights(topology, np.zeros(5))

    def test_topology_too_short_raises(self, rng):
        with pytest.raises(ValueError, match="at least 2"):
            Network.random([LayerTopology(3)], rng)

    def test_empty_layer_raises(self, rng):
        with pytest.raises(ValueError, match="neuron"):
            Network.random([LayerTopology(3), LayerTopology(0)], rng)

    def test_restored_arrays_are_independent(self, topology):
        flat = np.zeros(Network.weight_count(topology))
        net = Network.from_weights(topology, flat)
        flat[:] = 1.0
        assert np.all(net.weights() == 0.0)

    def test_repr(self, rng, topology):
        assert repr(Network.random(topology, rng)) == "Network(topology=[3, 4, 2])"
