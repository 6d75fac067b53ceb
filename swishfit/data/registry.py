"""Dataset registry for the sample generators that feed the trainer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping, Tuple

from ..core.types import TrainingExample


@dataclass(frozen=True)
class DatasetSpec:
    """A fixed training set plus the points the approximation is drawn on.

    Attributes
    ----------
    examples:
        Ordered ``(x, y)`` pairs the trainer learns from.
    eval_points:
        Pairs the approximation curve is evaluated on. Usually the same
        samples as ``examples``; generators may order them for plotting.
    provenance:
        Generator name and options, recorded in the run manifest.
    """

    name: str
    examples: Tuple[TrainingExample, ...]
    eval_points: Tuple[TrainingExample, ...]
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def d_in(self) -> int:
        return int(self.examples[0].inputs.shape[0])

    @property
    def d_out(self) -> int:
        return int(self.examples[0].targets.shape[0])

    def __len__(self) -> int:
        return len(self.examples)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("sine")
        def make_sine(**kwargs):
            ...

    or directly::

        register_dataset("sine", make_sine)
    """

    def _register(fn: DatasetFactory) -> DatasetFactory:
        if name in _REGISTRY:
            raise KeyError(f"Dataset {name!r} is already registered")
        _REGISTRY[name] = fn
        return fn

    if factory is not None:
        return _register(factory)
    return _register


def get_dataset(name: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` produced by the ``name`` factory."""

    if name not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset: {name}. Available datasets: {available}")
    spec = _REGISTRY[name](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if not spec.examples:
        raise ValueError(f"Dataset {spec.name!r} produced no examples")
    widths = {(ex.inputs.shape, ex.targets.shape) for ex in spec.examples + spec.eval_points}
    if len(widths) != 1:
        raise ValueError(f"Dataset {spec.name!r} mixes example shapes: {sorted(widths)}")


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
