"""Core numerical primitives for swishfit."""

from . import activations, backprop, errors, initializers, network, types

__all__ = ["activations", "backprop", "errors", "initializers", "network", "types"]
