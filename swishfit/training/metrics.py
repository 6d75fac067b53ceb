"""Regression metrics reported alongside the epoch loss."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

import numpy as np

from ..core.types import ApproximationPoint, Array


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics() -> List[str]:
    return ["mae", "rmse", "r2"]


def compute_metric(name: str, predictions: Array, targets: Array) -> MetricResult:
    key = name.lower()
    preds = np.asarray(predictions, dtype=np.float64)
    targs = np.asarray(targets, dtype=np.float64)
    with np.errstate(over="ignore", invalid="ignore"):
        if key == "mae":
            value = float(np.mean(np.abs(preds - targs)))
        elif key == "rmse":
            value = float(np.sqrt(np.mean((preds - targs) ** 2)))
        elif key == "r2":
            mean = np.mean(targs, axis=0, keepdims=True)
            ss_res = float(np.sum((targs - preds) ** 2))
            ss_tot = float(np.sum((targs - mean) ** 2))
            value = 1.0 if ss_tot == 0 else float(1 - ss_res / (ss_tot + 1e-9))
        else:
            raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str], predictions: Array, targets: Array
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, targets)
        results[metric.name] = metric.value
    return results


def curve_metrics(
    curve: Sequence[ApproximationPoint], names: Iterable[str] | None = None
) -> Mapping[str, float]:
    """Score an approximation curve against its own targets."""

    if not curve:
        return {}
    preds = np.array([point.y_approx for point in curve], dtype=np.float64)
    targs = np.array([point.y_target for point in curve], dtype=np.float64)
    return compute_metrics(names or default_metrics(), preds, targs)


__all__ = ["MetricResult", "compute_metrics", "curve_metrics", "default_metrics"]
