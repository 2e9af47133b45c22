"""Fitness-weighted crossover of neural networks for sexual reproduction."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from primordial.neural.network import Layer, NeuralNet

_DOMINANCE_RATIO = 1.2
_DOMINANT_SHARE = 0.7
_RECESSIVE_SHARE = 0.3


class _Dominance(Enum):
    PARENT1 = auto()
    PARENT2 = auto()
    EQUAL = auto()


@dataclass
class CrossoverSystem:
    """Combines parent networks and counts which parent dominated."""

    total_crossovers: int = 0
    parent1_dominant: int = 0
    parent2_dominant: int = 0
    equal_contribution: int = 0

    def crossover(
        self, net1: NeuralNet, net2: NeuralNet, fitness1: float, fitness2: float
    ) -> NeuralNet:
        """A child network with the structure of the fitter parent.

        A parent more than 20% fitter than the other dominates; otherwise the
        structure is taken from either parent at random. Weights of matching
        layers are blended 70/30 towards the dominant parent, or averaged.
        """
        self.total_crossovers += 1

        if fitness1 > fitness2 * _DOMINANCE_RATIO:
            self.parent1_dominant += 1
            dominance, dominant = _Dominance.PARENT1, net1
        elif fitness2 > fitness1 * _DOMINANCE_RATIO:
            self.parent2_dominant += 1
            dominance, dominant = _Dominance.PARENT2, net2
        else:
            self.equal_contribution += 1
            dominance = _Dominance.EQUAL
            dominant = net1 if random.random() < 0.5 else net2

        child = dominant.copy()
        _crossover_weights(child, net1, net2, dominance)
        return child

    def stats_string(self) -> str:
        return (
            f"Crossovers: {self.total_crossovers} "
            f"(P1 dom: {self.parent1_dominant}, P2 dom: {self.parent2_dominant}, "
            f"equal: {self.equal_contribution})"
        )


@dataclass
class CrossoverConfig:
    """Crossover settings."""

    enabled: bool = True
    dominance_threshold: float = 1.2
    dominant_weight: float = 0.7


def _layer_at(net: NeuralNet, index: int) -> Optional[Layer]:
    return net.layers[index] if index < len(net.layers) else None


def _crossover_weights(
    child: NeuralNet, net1: NeuralNet, net2: NeuralNet, dominance: _Dominance
) -> None:
    for index, layer in enumerate(child.layers):
        layer1 = _layer_at(net1, index)
        layer2 = _layer_at(net2, index)
        if layer1 is not None and layer2 is not None:
            _blend_layer(layer, layer1, layer2, dominance)
        elif layer1 is not None and dominance is not _Dominance.PARENT2:
            _copy_layer(layer, layer1)
        elif layer2 is not None and dominance is not _Dominance.PARENT1:
            _copy_layer(layer, layer2)


def _blend(a, b, dominance: _Dominance):
    if dominance is _Dominance.PARENT1:
        return a * _DOMINANT_SHARE + b * _RECESSIVE_SHARE
    if dominance is _Dominance.PARENT2:
        return a * _RECESSIVE_SHARE + b * _DOMINANT_SHARE
    return (a + b) / 2.0


def _blend_layer(child: Layer, layer1: Layer, layer2: Layer, dominance: _Dominance) -> None:
    shape = child.weights.shape
    if layer1.weights.shape != shape or layer2.weights.shape != shape:
        return
    child.weights[...] = _blend(layer1.weights, layer2.weights, dominance)

    n_biases = child.biases.size
    if layer1.biases.size == n_biases and layer2.biases.size == n_biases:
        child.biases[...] = _blend(layer1.biases, layer2.biases, dominance)


def _copy_layer(dest: Layer, src: Layer) -> None:
    if dest.weights.shape == src.weights.shape:
        dest.weights[...] = src.weights
    if dest.biases.size == src.biases.size:
        dest.biases[...] = src.biases