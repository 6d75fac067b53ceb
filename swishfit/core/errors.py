"""Exceptions and warnings raised by the training engine."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised for invalid topologies, hyper-parameters or training sets."""


class DimensionMismatchError(ValueError):
    """Raised when a vector's width disagrees with the configured topology."""


class TrainingDivergedWarning(RuntimeWarning):
    """Emitted when an epoch ends with a non-finite loss."""


__all__ = ["ConfigurationError", "DimensionMismatchError", "TrainingDivergedWarning"]
