"""Hebbian learning for lifetime adaptation of neural network weights.

Implements "neurons that fire together wire together" with reward modulation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

_CHANGE_EPSILON = 1e-6


@dataclass
class ActivationTrace:
    """Pre- and post-activation values recorded for one layer."""

    layer_idx: int
    pre_activations: np.ndarray
    post_activations: np.ndarray
    timestamp: int


@dataclass
class HebbianState:
    """Hebbian learning state attached to a neural network."""

    learning_rate: float
    decay_rate: float
    weight_limit: float
    activation_traces: list[ActivationTrace] = field(default_factory=list)
    update_count: int = 0
    successful_updates: int = 0

    def record_activation(
        self,
        layer_idx: int,
        pre_activations: Sequence[float],
        post_activations: Sequence[float],
        timestamp: int,
    ) -> None:
        """Record the activations of a layer during a forward pass."""
        self.activation_traces.append(
            ActivationTrace(
                layer_idx=layer_idx,
                pre_activations=np.asarray(pre_activations, dtype=np.float32),
                post_activations=np.asarray(post_activations, dtype=np.float32),
                timestamp=timestamp,
            )
        )

    def apply_update(self, weights: np.ndarray, reward: float, layer_idx: int) -> bool:
        """Apply a reward-modulated Hebbian update to ``weights`` in place.

        The update is ``dw = rate * pre * post * reward``, preceded by decay
        towards zero and followed by clamping to the weight limit. Returns
        True if any weight received a meaningful change.
        """
        self.update_count += 1

        trace = next(
            (t for t in reversed(self.activation_traces) if t.layer_idx == layer_idx),
            None,
        )
        if trace is None:
            return False

        rows, cols = weights.shape
        pre = trace.pre_activations
        post = trace.post_activations
        if len(pre) != rows or len(post) != cols:
            return False

        delta = (np.float32(self.learning_rate) * np.outer(pre, post)) * np.float32(reward)
        weights *= np.float32(1.0 - self.decay_rate)
        weights += delta.astype(weights.dtype, copy=False)
        np.clip(weights, -self.weight_limit, self.weight_limit, out=weights)

        any_change = bool(np.any(np.abs(delta) > _CHANGE_EPSILON))
        if any_change:
            self.successful_updates += 1

        self.activation_traces = [
            t for t in self.activation_traces if t.layer_idx != layer_idx
        ]
        return any_change

    def learning_efficiency(self) -> float:
        """Fraction of updates that changed weights."""
        if self.update_count == 0:
            return 0.0
        return self.successful_updates / self.update_count

    def clear_traces(self) -> None:
        """Drop all recorded activation traces."""
        self.activation_traces.clear()


@dataclass
class LearningConfig:
    """Configuration for lifetime learning."""

    enabled: bool = False
    learning_rate: float = 0.001
    decay_rate: float = 0.001
    weight_limit: float = 5.0
    consolidation_threshold: float = 0.1
    working_memory_size: int = 100
    scale_with_brain: bool = False
    min_learning_rate: float = 0.0005
    max_learning_rate: float = 0.01

    def effective_learning_rate(self, brain_layers: int) -> float:
        """Learning rate scaled by brain layers as ``rate * layers / 10``, clamped."""
        if not self.scale_with_brain:
            return self.learning_rate
        if self.min_learning_rate > self.max_learning_rate:
            raise ValueError("min_learning_rate must not exceed max_learning_rate")
        scaled = self.learning_rate * (brain_layers / 10.0)
        return min(max(scaled, self.min_learning_rate), self.max_learning_rate)