"""Core typing contracts for swishfit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError, DimensionMismatchError

Array = np.ndarray

DEFAULT_LAYERS: Tuple[int, ...] = (1, 12, 10, 8, 6, 1)
LOSS_SENTINEL = 1.0


def validate_topology(layers: Sequence[int]) -> Tuple[int, ...]:
    """Return ``layers`` as a tuple, raising for degenerate topologies."""

    dims = tuple(layers)
    if len(dims) < 2:
        raise ConfigurationError(
            f"Topology needs at least an input and an output layer, got {list(dims)}"
        )
    for idx, width in enumerate(dims):
        if isinstance(width, bool) or not isinstance(width, (int, np.integer)) or width < 1:
            raise ConfigurationError(
                f"Layer {idx} must have a positive integer width, got {width!r}"
            )
    return tuple(int(width) for width in dims)


@dataclass
class ParameterStore:
    """Weights and biases of a fully connected network.

    ``weights[i]`` has shape ``(layers[i + 1], layers[i])``: row ``j`` holds
    the weights from every neuron of layer ``i`` into neuron ``j`` of layer
    ``i + 1``. ``biases[i]`` has one entry per neuron of layer ``i + 1``.
    """

    layers: Tuple[int, ...]
    weights: List[Array]
    biases: List[Array]

    def __post_init__(self) -> None:
        self.layers = validate_topology(self.layers)
        transitions = len(self.layers) - 1
        if len(self.weights) != transitions or len(self.biases) != transitions:
            raise ConfigurationError(
                f"Expected {transitions} weight/bias pairs for layers {list(self.layers)}, "
                f"got {len(self.weights)} weights and {len(self.biases)} biases"
            )
        weights = [np.asarray(W, dtype=np.float64) for W in self.weights]
        biases = [np.asarray(b, dtype=np.float64) for b in self.biases]
        for idx, (in_dim, out_dim) in enumerate(zip(self.layers[:-1], self.layers[1:])):
            W, b = weights[idx], biases[idx]
            if W.shape != (out_dim, in_dim):
                raise ConfigurationError(
                    f"W{idx} must have shape {(out_dim, in_dim)}, got {W.shape}"
                )
            if b.shape != (out_dim,):
                raise ConfigurationError(f"b{idx} must have shape {(out_dim,)}, got {b.shape}")
        self.weights = weights
        self.biases = biases

    @property
    def depth(self) -> int:
        """Number of layer transitions."""

        return len(self.weights)

    def copy(self) -> "ParameterStore":
        return ParameterStore(
            layers=self.layers,
            weights=[W.copy() for W in self.weights],
            biases=[b.copy() for b in self.biases],
        )

    def state_dict(self) -> Mapping[str, Array]:
        state = {f"W{idx}": W.copy() for idx, W in enumerate(self.weights)}
        state.update({f"b{idx}": b.copy() for idx, b in enumerate(self.biases)})
        return state

    def to_nested(self) -> dict:
        """Return plain nested lists, e.g. for JSON reporting."""

        return {
            "layers": list(self.layers),
            "weights": [W.tolist() for W in self.weights],
            "biases": [b.tolist() for b in self.biases],
        }

    @classmethod
    def from_nested(
        cls,
        layers: Sequence[int],
        weights: Sequence[Sequence[Sequence[float]]],
        biases: Sequence[Sequence[float]],
    ) -> "ParameterStore":
        return cls(
            layers=tuple(layers),
            weights=[np.array(W, dtype=np.float64) for W in weights],
            biases=[np.array(b, dtype=np.float64) for b in biases],
        )

    def parameter_count(self) -> int:
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))


@dataclass
class Gradients:
    """Per-layer gradients with the same shapes as a :class:`ParameterStore`."""

    weights: List[Array]
    biases: List[Array]


@dataclass
class ForwardCache:
    """Intermediate values captured by the recording forward pass."""

    activations: List[Array] = field(default_factory=list)
    pre_activations: List[Array] = field(default_factory=list)


@dataclass(frozen=True)
class TrainingExample:
    """A single ``(x, y)`` regression pair."""

    inputs: Array
    targets: Array


@dataclass(frozen=True)
class ApproximationPoint:
    """One point of the approximation curve.

    ``x`` is a float for single-input networks and a tuple otherwise.
    """

    x: float | Tuple[float, ...]
    y_target: float
    y_approx: float


def as_vector(values, width: int, *, what: str = "input") -> Array:
    """Coerce ``values`` to a float64 vector of ``width`` entries."""

    vec = np.atleast_1d(np.asarray(values, dtype=np.float64))
    if vec.ndim != 1 or vec.shape[0] != width:
        raise DimensionMismatchError(
            f"Expected {what} of width {width}, got shape {vec.shape}"
        )
    return vec


def as_example(pair, layers: Sequence[int], *, index: int | None = None) -> TrainingExample:
    """Coerce an ``(x, y)`` pair or :class:`TrainingExample` for ``layers``."""

    if isinstance(pair, TrainingExample):
        x, y = pair.inputs, pair.targets
    else:
        try:
            x, y = pair
        except (TypeError, ValueError) as exc:
            raise DimensionMismatchError(
                f"Training example {index} must be an (x, y) pair, got {pair!r}"
            ) from exc
    where = f" of training example {index}" if index is not None else ""
    return TrainingExample(
        inputs=as_vector(x, layers[0], what=f"input{where}"),
        targets=as_vector(y, layers[-1], what=f"target{where}"),
    )


__all__ = [
    "Array",
    "ApproximationPoint",
    "DEFAULT_LAYERS",
    "ForwardCache",
    "Gradients",
    "LOSS_SENTINEL",
    "ParameterStore",
    "TrainingExample",
    "as_example",
    "as_vector",
    "validate_topology",
]
