"""Pure in-memory sample generators for one-dimensional regression targets."""

from __future__ import annotations

import math
from typing import Callable, Iterable, List, Sequence

import numpy as np

from ..core.types import TrainingExample
from .registry import DatasetSpec, register_dataset


def complex_wave(x: float) -> float:
    """``sin(x) + 0.5 * sin(3x) * x^2 / 5``."""

    return math.sin(x) + 0.5 * math.sin(3 * x) * (x * x / 5)


def _examples(xs: Iterable[float], fn: Callable[[float], float]) -> List[TrainingExample]:
    return [
        TrainingExample(
            inputs=np.array([x], dtype=np.float64),
            targets=np.array([fn(x)], dtype=np.float64),
        )
        for x in xs
    ]


def complex_wave_points(
    regular_samples: int = 40,
    boundary_samples: int = 20,
    margin: float = 0.1,
) -> List[float]:
    """Sample positions over ``[-pi - m, pi + m]`` with ``m = margin * pi``.

    ``regular_samples`` points are spread evenly over the domain. Half of
    ``boundary_samples`` are added over the leftmost ``0.4 * pi`` and half
    from ``0.6 * pi`` to the right edge, where the target swings hardest.
    """

    if regular_samples < 2:
        raise ValueError("regular_samples must be at least 2")
    if boundary_samples < 0 or boundary_samples % 2:
        raise ValueError("boundary_samples must be a non-negative even number")
    extend = margin * math.pi
    left = -math.pi - extend
    span = 2 * math.pi + 2 * extend
    xs = [left + span * i / (regular_samples - 1) for i in range(regular_samples)]
    half = boundary_samples // 2
    xs.extend(left + (i / half) * math.pi * 0.4 for i in range(half))
    xs.extend(math.pi * 0.6 + (i / half) * (math.pi * 0.4 + extend) for i in range(half))
    return xs


@register_dataset("complex_wave")
def make_complex_wave(
    regular_samples: int = 40,
    boundary_samples: int = 20,
    margin: float = 0.1,
) -> DatasetSpec:
    xs = complex_wave_points(regular_samples, boundary_samples, margin)
    examples = _examples(xs, complex_wave)
    return DatasetSpec(
        name="complex_wave",
        examples=tuple(examples),
        eval_points=tuple(sorted(examples, key=lambda ex: float(ex.inputs[0]))),
        provenance={
            "type": "complex_wave",
            "function": "sin(x) + 0.5*sin(3x)*x^2/5",
            "regular_samples": regular_samples,
            "boundary_samples": boundary_samples,
            "margin": margin,
        },
    )


@register_dataset("sine")
def make_sine(
    freq: float = 1.0,
    n_points: int = 64,
    noise: float = 0.0,
    seed: int = 0,
) -> DatasetSpec:
    if n_points < 1:
        raise ValueError("n_points must be positive")
    rng = np.random.default_rng(seed)
    x = np.linspace(-1.0, 1.0, n_points)
    y = np.sin(freq * np.pi * x) + noise * rng.standard_normal(size=x.shape)
    examples = tuple(
        TrainingExample(inputs=np.array([xi]), targets=np.array([yi])) for xi, yi in zip(x, y)
    )
    return DatasetSpec(
        name="sine",
        examples=examples,
        eval_points=examples,
        provenance={"type": "sine", "freq": freq, "n_points": n_points, "noise": noise, "seed": seed},
    )


@register_dataset("identity")
def make_identity(points: Sequence[float] = (-1.0, 0.0, 1.0)) -> DatasetSpec:
    examples = tuple(_examples([float(p) for p in points], lambda x: x))
    return DatasetSpec(
        name="identity",
        examples=examples,
        eval_points=examples,
        provenance={"type": "identity", "points": [float(p) for p in points]},
    )


__all__ = ["complex_wave", "complex_wave_points", "make_complex_wave", "make_identity", "make_sine"]
