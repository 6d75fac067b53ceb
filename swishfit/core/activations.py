"""Activation utilities for swishfit."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid ``1 / (1 + exp(-x))``."""

    # exp saturates to inf or 0 for large |x|; the limits 0.0 and 1.0 are still exact.
    with np.errstate(over="ignore", under="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def silu(x: Array) -> Array:
    """Return the SiLU/Swish activation ``x * sigmoid(x)``."""

    return x * sigmoid(x)


def silu_deriv(x: Array) -> Array:
    """Derivative of :func:`silu` evaluated at the pre-activation ``x``."""

    s = sigmoid(x)
    return s + x * s * (1.0 - s)


def identity(x: Array) -> Array:
    return x


__all__ = ["identity", "sigmoid", "silu", "silu_deriv"]
