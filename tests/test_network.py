import json

import numpy as np
import pytest

from primordial.neural.hebbian import LearningConfig
from primordial.neural.network import Layer, LearningStats, NeuralNet


def test_minimal_network():
    net = NeuralNet.new_minimal(24, 10)
    assert net.n_inputs == 24
    assert net.n_outputs == 10
    assert len(net.layers) == 1
    assert net.complexity() == 0
    assert net.next_node_id == 34
    assert net.layers[0].weights.shape == (24, 10)
    assert np.all(np.abs(net.layers[0].weights) <= 0.5)


def test_forward_pass():
    net = NeuralNet.new_minimal(24, 10)
    outputs = net.forward([0.5] * 24)
    assert len(outputs) == 10
    assert all(-1.0 <= x <= 1.0 for x in outputs)


def test_forward_rejects_wrong_input_length():
    net = NeuralNet.new_minimal(24, 10)
    with pytest.raises(ValueError):
        net.forward([0.5] * 23)


def test_instinct_network():
    net = NeuralNet.new_with_instincts(24, 10)
    inputs = [0.0] * 24
    inputs[0] = 1.0
    inputs[15] = 1.0
    outputs = net.forward(inputs)
    moves = outputs[:4]
    assert moves.index(max(moves)) == 0


def test_instinct_weights():
    w = NeuralNet.new_with_instincts(24, 10).layers[0].weights
    assert w[2, 2] == pytest.approx(1.5)
    assert w[6, 4] == pytest.approx(-2.0)
    assert w[6, 5] == pytest.approx(1.5)
    assert w[4, 0] == pytest.approx(-0.5)


def test_network_validity():
    net = NeuralNet.new_minimal(24, 10)
    assert net.is_valid()
    net.layers[0].biases[3] = np.nan
    assert not net.is_valid()


def test_serialization():
    net = NeuralNet.new_with_instincts(24, 10)
    restored = NeuralNet.from_dict(json.loads(json.dumps(net.to_dict())))
    assert restored.n_inputs == net.n_inputs
    assert restored.n_outputs == net.n_outputs
    assert len(restored.layers) == len(net.layers)
    assert np.array_equal(restored.layers[0].weights, net.layers[0].weights)
    assert restored.genome_hash() == net.genome_hash()


def test_serialization_skips_learning_state():
    net = NeuralNet.new_minimal(4, 2)
    net.enable_learning(0.01)
    assert NeuralNet.from_dict(net.to_dict()).has_learning() is False


def test_layer_from_dict_rejects_bad_shape():
    with pytest.raises(ValueError):
        Layer.from_dict({"shape": [2, 2], "weights": [1.0, 2.0, 3.0], "biases": [0.0, 0.0]})


def test_layer_dict_layout():
    layer = Layer(
        weights=np.array([[1.0, 2.0], [3.0, 4.0]], dtype=np.float32),
        biases=np.array([0.5, -0.5], dtype=np.float32),
    )
    assert layer.to_dict() == {
        "shape": [2, 2],
        "weights": [1.0, 2.0, 3.0, 4.0],
        "biases": [0.5, -0.5],
    }


def test_parameter_count_and_hidden_neurons():
    net = NeuralNet.new_minimal(24, 10)
    assert net.parameter_count() == 250
    assert net.total_hidden_neurons() == 0


def test_complexity_capability_range():
    net = NeuralNet.new_minimal(24, 10)
    for _ in range(50):
        value = net.get_complexity_capability()
        assert 0.0 <= value <= 0.05
    net.hidden_sizes = [3] * 5
    for _ in range(50):
        assert 0.45 <= net.get_complexity_capability() <= 0.55


def test_genome_hash_tracks_sampled_weights():
    net = NeuralNet.new_minimal(24, 10)
    clone = net.copy()
    assert clone.genome_hash() == net.genome_hash()
    clone.layers[0].weights[0, 0] += 1.0
    assert clone.genome_hash() != net.genome_hash()
    assert 0 <= net.genome_hash() < 2**64


def test_copy_is_independent():
    net = NeuralNet.new_minimal(4, 2)
    original = float(net.layers[0].weights[0, 0])
    clone = net.copy()
    clone.layers[0].weights[0, 0] = 9.0
    assert float(clone.layers[0].weights[0, 0]) == pytest.approx(9.0)
    assert float(net.layers[0].weights[0, 0]) == original


def test_learning_disabled_by_default():
    net = NeuralNet.new_minimal(4, 2)
    assert net.has_learning() is False
    assert net.learning_stats() is None


def test_forward_with_learning_and_learn():
    net = NeuralNet.new_minimal(24, 10)
    net.enable_learning(0.1)
    plain = net.forward([0.5] * 24)
    recorded = net.forward_with_learning([0.5] * 24, 7)
    assert recorded == pytest.approx(plain)
    assert len(net.hebbian_state.activation_traces) == 1

    net.learn(1.0)
    stats = net.learning_stats()
    assert stats.update_count == 1
    assert stats.successful_updates == 1
    assert stats.failed_updates == 0
    assert stats.efficiency == pytest.approx(1.0)
    assert stats.learning_rate == pytest.approx(0.1)
    assert net.hebbian_state.activation_traces == []


def test_learn_without_traces_counts_failures():
    net = NeuralNet.new_minimal(4, 2)
    net.enable_learning(0.1)
    net.learn(1.0)
    stats = net.learning_stats()
    assert stats.update_count == 1
    assert stats.failed_adaptations() == 1


def test_enable_learning_with_config_and_update():
    config = LearningConfig(scale_with_brain=True, learning_rate=0.005, decay_rate=0.01, weight_limit=3.0)
    net = NeuralNet.new_minimal(4, 2)
    net.enable_learning_with_config(config)
    assert net.hebbian_state.learning_rate == pytest.approx(0.0005)
    assert net.hebbian_state.weight_limit == pytest.approx(3.0)
    assert net.hebbian_state.decay_rate == pytest.approx(0.01)

    net.hidden_sizes = [2] * 10
    net.update_learning_rate(config)
    assert net.hebbian_state.learning_rate == pytest.approx(0.005)


def test_learning_stats_failed_adaptations():
    stats = LearningStats(
        update_count=10, successful_updates=7, failed_updates=3, efficiency=0.7, learning_rate=0.01
    )
    assert stats.failed_adaptations() == 3