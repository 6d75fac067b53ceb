"""Parameter initialisation for swishfit networks."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .errors import ConfigurationError
from .types import ParameterStore, validate_topology

DEFAULT_BIAS_RANGE = 0.05


def xavier_limit(fan_in: int, fan_out: int) -> float:
    """Half-width of the Xavier/Glorot uniform range used by the reference."""

    return math.sqrt(1.0 / (fan_in + fan_out))


def xavier_uniform(
    layers: Sequence[int],
    rng: np.random.Generator | int | None = None,
    *,
    bias_range: float = DEFAULT_BIAS_RANGE,
) -> ParameterStore:
    """Return a fresh :class:`ParameterStore` for ``layers``.

    Weights of transition ``i`` are drawn from ``U[-s, s]`` with
    ``s = sqrt(1 / (layers[i] + layers[i + 1]))``; biases from
    ``U[-bias_range, bias_range]``.
    """

    dims = validate_topology(layers)
    if bias_range < 0:
        raise ConfigurationError(f"bias_range must be non-negative, got {bias_range}")
    if not isinstance(rng, np.random.Generator):
        rng = np.random.default_rng(rng)

    weights = []
    biases = []
    for in_dim, out_dim in zip(dims[:-1], dims[1:]):
        limit = xavier_limit(in_dim, out_dim)
        weights.append(rng.uniform(-limit, limit, size=(out_dim, in_dim)))
        biases.append(rng.uniform(-bias_range, bias_range, size=out_dim))
    return ParameterStore(layers=dims, weights=weights, biases=biases)


initialize = xavier_uniform

__all__ = ["DEFAULT_BIAS_RANGE", "initialize", "xavier_limit", "xavier_uniform"]
