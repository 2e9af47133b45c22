"""Neural network structure and forward propagation."""

from __future__ import annotations

import copy as _copy
import hashlib
import struct
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np

from primordial.neural.hebbian import HebbianState, LearningConfig

_rng = np.random.default_rng()


@dataclass(eq=False)
class Layer:
    """A dense layer: ``weights`` has shape (inputs, outputs)."""

    weights: np.ndarray
    biases: np.ndarray

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form with the weight shape and flat row-major data."""
        rows, cols = self.weights.shape
        return {
            "shape": [int(rows), int(cols)],
            "weights": [float(w) for w in self.weights.ravel()],
            "biases": [float(b) for b in self.biases],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Layer":
        """Rebuild a layer from :meth:`to_dict` output."""
        rows, cols = data["shape"]
        flat = np.asarray(data["weights"], dtype=np.float32)
        if flat.size != rows * cols:
            raise ValueError(
                f"weight data of length {flat.size} does not fit shape ({rows}, {cols})"
            )
        return cls(
            weights=flat.reshape((rows, cols)),
            biases=np.asarray(data["biases"], dtype=np.float32),
        )


@dataclass
class LearningStats:
    """Statistics about Hebbian learning."""

    update_count: int
    successful_updates: int
    failed_updates: int
    efficiency: float
    learning_rate: float

    def failed_adaptations(self) -> int:
        """Updates that did not change any weight."""
        return max(self.update_count - self.successful_updates, 0)


def _uniform(shape: tuple[int, ...], bound: float) -> np.ndarray:
    return _rng.uniform(-bound, bound, size=shape).astype(np.float32)


@dataclass(eq=False)
class NeuralNet:
    """NEAT-style feed-forward network with tanh activations."""

    n_inputs: int
    n_outputs: int
    hidden_sizes: list[int] = field(default_factory=list)
    layers: list[Layer] = field(default_factory=list)
    next_node_id: int = 0
    hebbian_state: Optional[HebbianState] = None

    @classmethod
    def new_minimal(cls, n_inputs: int, n_outputs: int) -> "NeuralNet":
        """A network with no hidden layers and small random weights."""
        layer = Layer(
            weights=_uniform((n_inputs, n_outputs), 0.5),
            biases=np.zeros(n_outputs, dtype=np.float32),
        )
        return cls(
            n_inputs=n_inputs,
            n_outputs=n_outputs,
            hidden_sizes=[],
            layers=[layer],
            next_node_id=n_inputs + n_outputs,
        )

    @classmethod
    def new_with_instincts(cls, n_inputs: int, n_outputs: int) -> "NeuralNet":
        """A minimal network with bootstrap survival connections.

        Inputs 0-3 sense food north/east/south/west, 4 is threat count and
        6 is energy; outputs 0-3 move in those directions, 4 eats and
        5 reproduces.
        """
        net = cls.new_minimal(n_inputs, n_outputs)
        w = net.layers[0].weights
        for direction in range(4):
            w[direction, direction] = 1.5
        w[6, 4] = -2.0
        w[6, 5] = 1.5
        w[4, 0] = -0.5
        w[4, 2] = 0.5
        return net

    def copy(self) -> "NeuralNet":
        """An independent deep copy, including any learning state."""
        return _copy.deepcopy(self)

    def _input_vector(self, inputs: Sequence[float]) -> np.ndarray:
        activation = np.asarray(inputs, dtype=np.float32)
        if activation.shape != (self.n_inputs,):
            raise ValueError(
                f"expected {self.n_inputs} inputs, got {activation.size}"
            )
        return activation

    def forward(self, inputs: Sequence[float]) -> list[float]:
        """Propagate ``inputs`` through every layer."""
        activation = self._input_vector(inputs)
        for layer in self.layers:
            activation = np.tanh(activation @ layer.weights + layer.biases)
        return [float(x) for x in activation]

    def complexity(self) -> int:
        """Number of hidden layers."""
        return len(self.hidden_sizes)

    def get_complexity_capability(self) -> float:
        """Capability to handle food complexity: 0.1 per layer plus small noise, in [0, 1]."""
        base = len(self.hidden_sizes) * 0.1
        variation = float(_rng.uniform(-0.05, 0.05))
        return min(max(base + variation, 0.0), 1.0)

    def total_hidden_neurons(self) -> int:
        return sum(self.hidden_sizes)

    def parameter_count(self) -> int:
        """Total number of weights and biases."""
        return sum(layer.weights.size + layer.biases.size for layer in self.layers)

    def is_valid(self) -> bool:
        """True when no weight or bias is NaN or infinite."""
        return all(
            np.all(np.isfinite(layer.weights)) and np.all(np.isfinite(layer.biases))
            for layer in self.layers
        )

    def genome_hash(self) -> int:
        """A 64-bit hash of the structure and a sample of every tenth weight."""
        hasher = hashlib.blake2b(digest_size=8)
        hasher.update(
            struct.pack("<QQQ", self.n_inputs, self.n_outputs, len(self.hidden_sizes))
        )
        for layer in self.layers:
            sample = np.ascontiguousarray(layer.weights.ravel()[::10], dtype="<f4")
            hasher.update(sample.tobytes())
            hasher.update(struct.pack("<Q", layer.weights.size))
        return int.from_bytes(hasher.digest(), "little")

    def enable_learning(self, learning_rate: float) -> None:
        """Attach Hebbian learning with the given rate."""
        self.hebbian_state = HebbianState(learning_rate, 0.001, 5.0)

    def enable_learning_with_config(self, config: LearningConfig) -> None:
        """Attach Hebbian learning with a rate scaled by brain complexity."""
        rate = config.effective_learning_rate(self.complexity())
        self.hebbian_state = HebbianState(rate, config.decay_rate, config.weight_limit)

    def update_learning_rate(self, config: LearningConfig) -> None:
        """Recompute the learning rate after the brain has changed."""
        if self.hebbian_state is not None:
            self.hebbian_state.learning_rate = config.effective_learning_rate(
                self.complexity()
            )

    def forward_with_learning(self, inputs: Sequence[float], time: int) -> list[float]:
        """Forward pass that records activations for Hebbian learning."""
        activation = self._input_vector(inputs)
        for layer_idx, layer in enumerate(self.layers):
            pre = activation
            activation = np.tanh(activation @ layer.weights + layer.biases)
            if self.hebbian_state is not None:
                self.hebbian_state.record_activation(layer_idx, pre, activation, time)
        return [float(x) for x in activation]

    def learn(self, reward: float) -> None:
        """Apply a Hebbian update to every layer with the given reward."""
        state = self.hebbian_state
        if state is None:
            return
        for layer_idx, layer in enumerate(self.layers):
            state.apply_update(layer.weights, reward, layer_idx)
        state.clear_traces()

    def has_learning(self) -> bool:
        return self.hebbian_state is not None

    def learning_stats(self) -> Optional[LearningStats]:
        """Learning statistics, or None when learning is disabled."""
        state = self.hebbian_state
        if state is None:
            return None
        return LearningStats(
            update_count=state.update_count,
            successful_updates=state.successful_updates,
            failed_updates=max(state.update_count - state.successful_updates, 0),
            efficiency=state.learning_efficiency(),
            learning_rate=state.learning_rate,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form; learning state is not included."""
        return {
            "n_inputs": self.n_inputs,
            "n_outputs": self.n_outputs,
            "hidden_sizes": list(self.hidden_sizes),
            "layers": [layer.to_dict() for layer in self.layers],
            "next_node_id": self.next_node_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NeuralNet":
        """Rebuild a network from :meth:`to_dict` output."""
        return cls(
            n_inputs=int(data["n_inputs"]),
            n_outputs=int(data["n_outputs"]),
            hidden_sizes=[int(s) for s in data["hidden_sizes"]],
            layers=[Layer.from_dict(layer) for layer in data["layers"]],
            next_node_id=int(data["next_node_id"]),
        )