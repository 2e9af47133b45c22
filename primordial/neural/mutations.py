"""NEAT-style mutations of neural networks."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from primordial.neural.network import Layer, NeuralNet

_WEIGHT_LIMIT = 5.0
_NEW_WEIGHT_BOUND = 0.3
_CONNECTION_NUDGE = 0.5
_MIN_LAYER_SIZE = 2
_MAX_LAYER_SIZE = 6

_rng = np.random.default_rng()


@dataclass
class MutationConfig:
    """Configuration for mutation operations."""

    weight_mutation_rate: float = 0.05
    weight_mutation_strength: float = 0.3
    add_neuron_rate: float = 0.03
    add_connection_rate: float = 0.05
    max_neurons: int = 50


def mutate(net: NeuralNet, config: MutationConfig) -> None:
    """Apply weight and structural mutations to ``net`` according to ``config``."""
    mutate_weights(net, config.weight_mutation_rate, config.weight_mutation_strength)

    if _rng.random() < config.add_neuron_rate and net.complexity() < config.max_neurons:
        add_neuron(net)

    if _rng.random() < config.add_connection_rate:
        add_connection(net)


def _perturb(values: np.ndarray, rate: float, strength: float) -> None:
    mask = _rng.random(values.shape) < rate
    if not mask.any():
        return
    delta = _rng.uniform(-strength, strength, size=values.shape).astype(values.dtype)
    values[mask] = np.clip(values[mask] + delta[mask], -_WEIGHT_LIMIT, _WEIGHT_LIMIT)


def mutate_weights(net: NeuralNet, rate: float, strength: float) -> None:
    """Perturb each weight and bias with probability ``rate`` by up to ``strength``.

    Perturbed values are clamped to [-5, 5]; untouched values are left as they are.
    """
    if rate > 0 and strength <= 0:
        raise ValueError("mutation strength must be positive")
    for layer in net.layers:
        _perturb(layer.weights, rate, strength)
        _perturb(layer.biases, rate, strength)


def add_neuron(net: NeuralNet) -> None:
    """Append a new hidden layer of 2 to 6 neurons just before the output layer."""
    size = int(_rng.integers(_MIN_LAYER_SIZE, _MAX_LAYER_SIZE + 1))
    _insert_hidden_layer(net, len(net.hidden_sizes), size)
    net.next_node_id += size


def add_connection(net: NeuralNet) -> None:
    """Nudge one randomly chosen existing connection."""
    if not net.layers:
        return
    layer = net.layers[int(_rng.integers(len(net.layers)))]
    rows, cols = layer.weights.shape
    if rows == 0 or cols == 0:
        return
    i = int(_rng.integers(rows))
    j = int(_rng.integers(cols))
    nudged = layer.weights[i, j] + _rng.uniform(-_CONNECTION_NUDGE, _CONNECTION_NUDGE)
    layer.weights[i, j] = np.clip(nudged, -_WEIGHT_LIMIT, _WEIGHT_LIMIT)


def _random_weights(shape: tuple[int, int], dtype: np.dtype) -> np.ndarray:
    return _rng.uniform(-_NEW_WEIGHT_BOUND, _NEW_WEIGHT_BOUND, size=shape).astype(dtype)


def _insert_hidden_layer(net: NeuralNet, position: int, size: int) -> None:
    prev_size = net.n_inputs if position == 0 else net.hidden_sizes[position - 1]
    next_size = (
        net.n_outputs if position >= len(net.hidden_sizes) else net.hidden_sizes[position]
    )
    dtype = net.layers[0].weights.dtype if net.layers else np.dtype(np.float32)

    new_layer = Layer(
        weights=_random_weights((prev_size, size), dtype),
        biases=np.zeros(size, dtype=dtype),
    )

    if len(net.layers) > position:
        following = net.layers[position]
        net.layers[position] = Layer(
            weights=_random_weights((size, next_size), dtype),
            biases=following.biases.copy(),
        )

    net.layers.insert(position, new_layer)
    net.hidden_sizes.insert(position, size)