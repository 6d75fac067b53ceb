"""Backpropagation and the per-example SGD step."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .activations import silu_deriv
from .network import forward_record
from .types import Gradients, ParameterStore, TrainingExample, as_vector


def output_error(prediction, target) -> Tuple[float, np.ndarray]:
    """Return the mean squared error and the output delta ``prediction - target``."""

    diff = prediction - target
    with np.errstate(over="ignore"):
        return float(np.mean(np.square(diff))), diff


def compute_gradients(
    example: TrainingExample, params: ParameterStore
) -> Tuple[Gradients, float]:
    """Return the parameter gradients and the loss for a single example.

    The output delta is ``A[L] - y``, i.e. the gradient of
    ``0.5 * sum((A[L] - y) ** 2)``; the reported loss is the mean squared
    error over the output units.
    """

    x = as_vector(example.inputs, params.layers[0])
    y = as_vector(example.targets, params.layers[-1], what="target")
    prediction, cache = forward_record(x, params)
    loss, delta = output_error(prediction, y)

    depth = params.depth
    grad_w = [np.empty(0)] * depth
    grad_b = [np.empty(0)] * depth
    for idx in reversed(range(depth)):
        grad_w[idx] = np.outer(delta, cache.activations[idx])
        grad_b[idx] = delta
        if idx > 0:
            delta = (params.weights[idx].T @ delta) * silu_deriv(cache.pre_activations[idx - 1])
    return Gradients(weights=grad_w, biases=grad_b), loss


def apply_sgd(params: ParameterStore, grads: Gradients, learning_rate: float) -> ParameterStore:
    """Return a new store with one plain SGD step applied."""

    return ParameterStore(
        layers=params.layers,
        weights=[W - learning_rate * g for W, g in zip(params.weights, grads.weights)],
        biases=[b - learning_rate * g for b, g in zip(params.biases, grads.biases)],
    )


def backward(
    inputs, targets, params: ParameterStore, learning_rate: float
) -> Tuple[ParameterStore, float]:
    """Take exactly one gradient step on one example.

    Returns the updated store and the example's loss. ``params`` is left
    untouched.
    """

    grads, loss = compute_gradients(TrainingExample(inputs=inputs, targets=targets), params)
    return apply_sgd(params, grads, learning_rate), loss


__all__ = ["apply_sgd", "backward", "compute_gradients", "output_error"]
