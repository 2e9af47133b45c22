import numpy as np
import pytest

from primordial.neural.mutations import (
    MutationConfig,
    add_connection,
    add_neuron,
    mutate,
    mutate_weights,
)
from primordial.neural.network import NeuralNet


def _layers_chain(net):
    sizes = [net.n_inputs, *net.hidden_sizes, net.n_outputs]
    if len(net.layers) != len(sizes) - 1:
        return False
    for layer, rows, cols in zip(net.layers, sizes, sizes[1:]):
        if layer.weights.shape != (rows, cols) or layer.biases.shape != (cols,):
            return False
    return True


def test_weight_mutation():
    net = NeuralNet.new_minimal(24, 10)
    original = net.layers[0].weights.copy()
    mutate_weights(net, 1.0, 0.1)
    changed = int(np.count_nonzero(np.abs(net.layers[0].weights - original) > 1e-10))
    assert changed > 0


def test_weight_mutation_zero_rate_leaves_weights():
    net = NeuralNet.new_minimal(24, 10)
    original = net.layers[0].weights.copy()
    mutate_weights(net, 0.0, 0.1)
    np.testing.assert_array_equal(net.layers[0].weights, original)


def test_weight_mutation_bounded_by_strength():
    net = NeuralNet.new_minimal(24, 10)
    original = net.layers[0].weights.copy()
    mutate_weights(net, 1.0, 0.1)
    largest_change = float(np.max(np.abs(net.layers[0].weights - original)))
    assert largest_change <= 0.1 + 1e-6


def test_weight_mutation_rejects_non_positive_strength():
    net = NeuralNet.new_minimal(4, 2)
    with pytest.raises(ValueError):
        mutate_weights(net, 1.0, 0.0)


def test_add_neuron():
    net = NeuralNet.new_minimal(24, 10)
    assert net.complexity() == 0
    add_neuron(net)
    assert net.complexity() > 0
    assert net.hidden_sizes


def test_add_neuron_shapes_and_node_ids():
    net = NeuralNet.new_minimal(24, 10)
    start_id = net.next_node_id
    add_neuron(net)
    size = net.hidden_sizes[0]
    assert 2 <= size <= 6
    assert net.layers[0].weights.shape == (24, size)
    assert net.layers[1].weights.shape == (size, 10)
    np.testing.assert_array_equal(net.layers[1].biases, np.zeros(10))
    assert net.next_node_id == start_id + size

    add_neuron(net)
    assert net.complexity() == 2
    assert _layers_chain(net)
    assert len(net.forward([0.5] * 24)) == 10


def test_mutation_preserves_validity():
    net = NeuralNet.new_minimal(24, 10)
    config = MutationConfig(
        weight_mutation_rate=0.5,
        weight_mutation_strength=1.0,
        add_neuron_rate=0.5,
        add_connection_rate=0.5,
        max_neurons=10,
    )
    for _ in range(100):
        mutate(net, config)
    assert net.is_valid()
    assert _layers_chain(net)
    outputs = net.forward([0.5] * 24)
    assert all(np.isfinite(outputs))


def test_weight_clamping():
    net = NeuralNet.new_minimal(24, 10)
    for _ in range(1000):
        mutate_weights(net, 1.0, 10.0)
    for layer in net.layers:
        assert float(layer.weights.max()) <= 5.0
        assert float(layer.weights.min()) >= -5.0
        assert float(layer.biases.max()) <= 5.0
        assert float(layer.biases.min()) >= -5.0


def test_max_neurons_caps_growth():
    net = NeuralNet.new_minimal(8, 4)
    config = MutationConfig(
        weight_mutation_rate=0.0,
        weight_mutation_strength=0.3,
        add_neuron_rate=1.0,
        add_connection_rate=0.0,
        max_neurons=2,
    )
    for _ in range(10):
        mutate(net, config)
    assert net.complexity() == 2


def test_mutate_with_zero_rates_changes_nothing():
    net = NeuralNet.new_minimal(8, 4)
    original = net.layers[0].weights.copy()
    config = MutationConfig(
        weight_mutation_rate=0.0,
        add_neuron_rate=0.0,
        add_connection_rate=0.0,
    )
    mutate(net, config)
    np.testing.assert_array_equal(net.layers[0].weights, original)
    assert net.complexity() == 0


def test_add_connection_touches_one_weight():
    net = NeuralNet.new_minimal(24, 10)
    original = net.layers[0].weights.copy()
    add_connection(net)
    diff = np.abs(net.layers[0].weights - original)
    assert np.count_nonzero(diff) <= 1
    assert np.all(diff < 0.5 + 1e-6)


def test_default_config_values():
    config = MutationConfig()
    assert (config.weight_mutation_rate, config.max_neurons) == (0.05, 50)