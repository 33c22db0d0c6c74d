"""
Feed-forward neural network used as a bird's brain.

A network is a stack of fully connected layers. Each layer holds one bias
per output neuron and a (n_out, n_in) weight matrix; propagation applies
ReLU(bias + W @ inputs) layer after layer.

Weights flatten to a single 1-D array (the genome) in a fixed order:
layer by layer, neuron by neuron, each neuron contributing its bias followed
by its input weights. `Network.from_weights` restores in the same order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class LayerTopology:
    """Number of neurons in one layer."""
    neurons: int


class Layer:
    """
    One fully connected layer.

    Attributes:
        biases: Shape (n_out,).
        weights: Shape (n_out, n_in).
    """

    __slots__ = ("biases", "weights")

    def __init__(self, biases: NDArray[np.float64], weights: NDArray[np.float64]):
        biases = np.asarray(biases, dtype=np.float64)
        weights = np.asarray(weights, dtype=np.float64)
        if weights.ndim != 2 or weights.shape[0] != biases.shape[0]:
            raise ValueError(
                f"weights shape {weights.shape} does not match {biases.shape[0]} biases"
            )
        self.biases = biases
        self.weights = weights

    @classmethod
    def random(cls, input_size: int, output_size: int, rng: np.random.Generator) -> Layer:
        """Layer with every bias and weight drawn from U[-1, 1]."""
        params = rng.uniform(-1.0, 1.0, size=(output_size, input_size + 1))
        return cls(biases=params[:, 0], weights=params[:, 1:])

    @property
    def input_size(self) -> int:
        return self.weights.shape[1]

    @property
    def output_size(self) -> int:
        return self.weights.shape[0]

    def propagate(self, inputs: NDArray[np.float64]) -> NDArray[np.float64]:
        return np.maximum(0.0, self.biases + self.weights @ inputs)

    def flat_weights(self) -> NDArray[np.float64]:
        """Per neuron: bias, then input weights."""
        return np.column_stack((self.biases, self.weights)).ravel()


class Network:
    """
    Feed-forward network built from a topology such as [9, 18, 2].

    The first topology entry is the input width; every following entry
    adds one layer.
    """

    __slots__ = ("layers",)

    def __init__(self, layers: list[Layer]):
        self.layers = layers

    @staticmethod
    def _check_topology(topology: Sequence[LayerTopology]) -> None:
        if len(topology) < 2:
            raise ValueError(f"topology needs at least 2 layers, got {len(topology)}")
        for layer in topology:
            if layer.neurons < 1:
                raise ValueError(f"every layer needs at least 1 neuron, got {layer.neurons}")

    @classmethod
    def random(cls, topology: Sequence[LayerTopology], rng: np.random.Generator) -> Network:
        cls._check_topology(topology)
        layers = [
            Layer.random(inp.neurons, out.neurons, rng)
            for inp, out in zip(topology, topology[1:])
        ]
        return cls(layers)

    @classmethod
    def from_weights(
        cls,
        topology: Sequence[LayerTopology],
        weights: Sequence[float] | NDArray[np.float64],
    ) -> Network:
        """
        Restore a network from its flattened weights.

        Raises:
            ValueError: If the number of weights doesn't fit the topology.
        """
        cls._check_topology(topology)
        flat = np.asarray(weights, dtype=np.float64).ravel()

        expected = cls.weight_count(topology)
        if len(flat) != expected:
            raise ValueError(f"got {len(flat)} weights, topology needs {expected}")

        layers = []
        offset = 0
        for inp, out in zip(topology, topology[1:]):
            size = out.neurons * (inp.neurons + 1)
            params = flat[offset:offset + size].reshape(out.neurons, inp.neurons + 1)
            layers.append(Layer(biases=params[:, 0].copy(), weights=params[:, 1:].copy()))
            offset += size

        return cls(layers)

    @staticmethod
    def weight_count(topology: Sequence[LayerTopology]) -> int:
        """Total number of parameters (biases included) for a topology."""
        return sum(
            out.neurons * (inp.neurons + 1)
            for inp, out in zip(topology, topology[1:])
        )

    def propagate(self, inputs: NDArray[np.float64]) -> NDArray[np.float64]:
        outputs = np.asarray(inputs, dtype=np.float64)
        for layer in self.layers:
            outputs = layer.propagate(outputs)
        return outputs

    def weights(self) -> NDArray[np.float64]:
        """All parameters as one flat array, in restore order."""
        if not self.layers:
            return np.empty(0, dtype=np.float64)
        return np.concatenate([layer.flat_weights() for layer in self.layers])

    def __repr__(self) -> str:
        if not self.layers:
            return "Network(topology=[])"
        sizes = [self.layers[0].input_size] + [layer.output_size for layer in self.layers]
        return f"Network(topology={sizes})"
