"""Genetic crossover between neural networks."""

from __future__ import annotations

from enum import Enum

import numpy as np

from primordial.neural.network import NeuralNet

_SECONDARY_INHERIT_PROBABILITY = 0.2
_UNIFORM_PROBABILITY = 0.5

_rng = np.random.default_rng()


class CrossoverStrategy(Enum):
    """Strategy for combining two parent networks."""

    FITTER_PARENT = "fitter_parent"
    AVERAGE = "average"
    UNIFORM = "uniform"


def crossover(
    parent: NeuralNet, other: NeuralNet, fitness_self: float, fitness_other: float
) -> NeuralNet:
    """Cross two networks with the default fitter-parent strategy."""
    return crossover_with_strategy(
        parent, other, fitness_self, fitness_other, CrossoverStrategy.FITTER_PARENT
    )


def crossover_with_strategy(
    parent: NeuralNet,
    other: NeuralNet,
    fitness_self: float,
    fitness_other: float,
    strategy: CrossoverStrategy,
) -> NeuralNet:
    """Cross two networks with the given strategy; the parents are left unchanged."""
    if strategy is CrossoverStrategy.FITTER_PARENT:
        primary, secondary = (
            (parent, other) if fitness_self >= fitness_other else (other, parent)
        )
        return _mix_random(primary, secondary, _SECONDARY_INHERIT_PROBABILITY)
    if strategy is CrossoverStrategy.AVERAGE:
        return _average(parent, other)
    if strategy is CrossoverStrategy.UNIFORM:
        return _mix_random(parent, other, _UNIFORM_PROBABILITY)
    raise ValueError(f"unknown crossover strategy: {strategy!r}")


def _mix_random(base: NeuralNet, donor: NeuralNet, probability: float) -> NeuralNet:
    """Copy ``base`` and take each overlapping value from ``donor`` with ``probability``."""
    child = base.copy()
    for child_layer, donor_layer in zip(child.layers, donor.layers):
        rows = min(child_layer.weights.shape[0], donor_layer.weights.shape[0])
        cols = min(child_layer.weights.shape[1], donor_layer.weights.shape[1])
        region = child_layer.weights[:rows, :cols]
        take = _rng.random(region.shape) < probability
        region[take] = donor_layer.weights[:rows, :cols][take]

        n_biases = min(child_layer.biases.size, donor_layer.biases.size)
        biases = child_layer.biases[:n_biases]
        take = _rng.random(n_biases) < probability
        biases[take] = donor_layer.biases[:n_biases][take]
    return child


def _average(base: NeuralNet, other: NeuralNet) -> NeuralNet:
    """Copy ``base`` and average every overlapping value with ``other``."""
    child = base.copy()
    for child_layer, other_layer in zip(child.layers, other.layers):
        rows = min(child_layer.weights.shape[0], other_layer.weights.shape[0])
        cols = min(child_layer.weights.shape[1], other_layer.weights.shape[1])
        child_layer.weights[:rows, :cols] = (
            child_layer.weights[:rows, :cols] + other_layer.weights[:rows, :cols]
        ) / 2.0

        n_biases = min(child_layer.biases.size, other_layer.biases.size)
        child_layer.biases[:n_biases] = (
            child_layer.biases[:n_biases] + other_layer.biases[:n_biases]
        ) / 2.0
    return child