"""Forward propagation through a SiLU network with a linear output layer."""

from __future__ import annotations

from typing import Tuple

from .activations import identity, silu
from .types import Array, ForwardCache, ParameterStore, as_vector


def forward_record(inputs, params: ParameterStore) -> Tuple[Array, ForwardCache]:
    """Run the forward pass and keep every activation and pre-activation.

    ``cache.activations`` has one vector per layer including the input;
    ``cache.pre_activations`` has one vector per non-input layer.
    """

    x = as_vector(inputs, params.layers[0])
    cache = ForwardCache(activations=[x], pre_activations=[])
    last_idx = params.depth - 1
    for idx, (W, b) in enumerate(zip(params.weights, params.biases)):
        z = b + W @ x
        x = silu(z) if idx < last_idx else identity(z)
        cache.pre_activations.append(z)
        cache.activations.append(x)
    return x, cache


def forward(inputs, params: ParameterStore) -> Array:
    """Return the network output for ``inputs`` without touching ``params``."""

    output, _ = forward_record(inputs, params)
    return output


__all__ = ["forward", "forward_record"]
