"""Interactive mini-batch SGD trainer for swishfit networks."""

from __future__ import annotations

import logging
import math
import threading
import warnings
from typing import Iterable, Mapping, Sequence, Tuple

import numpy as np

from ..core.backprop import backward
from ..core.errors import ConfigurationError, TrainingDivergedWarning
from ..core.initializers import DEFAULT_BIAS_RANGE, xavier_uniform
from ..core.network import forward
from ..core.types import (
    DEFAULT_LAYERS,
    LOSS_SENTINEL,
    ApproximationPoint,
    Array,
    ParameterStore,
    TrainingExample,
    as_example,
    validate_topology,
)
from .metrics import curve_metrics
from .stopping import StoppingPolicy, TrainerStatus

logger = logging.getLogger(__name__)

DEFAULT_LEARNING_RATE = 0.05
DEFAULT_BATCH_SIZE = 10


def _positive(value: float, name: str) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive finite number, got {value}")
    return value


class Trainer:
    """Own a parameter store and drive epochs of per-example SGD over it.

    The trainer never trains on its own: a driver (see
    :mod:`swishfit.training.drivers`) calls :meth:`tick` until it returns
    ``False``. Every mutation happens under ``self._lock`` so at most one
    epoch is in flight, and ticks carrying a stale run token are ignored.
    """

    def __init__(
        self,
        layers: Sequence[int] = DEFAULT_LAYERS,
        *,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        batch_size: int = DEFAULT_BATCH_SIZE,
        seed: int | None = None,
        policy: StoppingPolicy | None = None,
        bias_range: float = DEFAULT_BIAS_RANGE,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.layers = validate_topology(layers)
        if int(batch_size) < 1:
            raise ConfigurationError(f"batch_size must be at least 1, got {batch_size}")
        self.batch_size = int(batch_size)
        self.policy = policy or StoppingPolicy()
        self.bias_range = bias_range
        self.callbacks = list(callbacks or [])
        self._learning_rate = _positive(learning_rate, "learning_rate")
        self._rng = np.random.default_rng(seed)
        self._lock = threading.RLock()
        self._run_id = 0
        self._run_epochs = 0
        self._status = TrainerStatus.IDLE
        self._training_set: Tuple[TrainingExample, ...] = ()
        self._eval_points: Tuple[TrainingExample, ...] = ()
        self._approximation: Tuple[ApproximationPoint, ...] = ()
        self._initialize()

    # ------------------------------------------------------------------
    # Lifecycle

    def _initialize(self) -> None:
        """Replace the parameters with a fresh draw and reset the counters."""

        with self._lock:
            self._params = xavier_uniform(self.layers, self._rng, bias_range=self.bias_range)
            self._epoch = 0
            self._loss = LOSS_SENTINEL
            self._refresh_approximation()

    def start(
        self,
        training_set: Iterable,
        learning_rate: float | None = None,
        eval_points: Iterable | None = None,
    ) -> int:
        """Enter the running state and return the run token for drivers.

        ``training_set`` and ``eval_points`` are sequences of ``(x, y)``
        pairs. Evaluation points default to the training set.
        """

        with self._lock:
            if self._status is TrainerStatus.RUNNING:
                logger.debug("start() ignored: run %d already in progress", self._run_id)
                return self._run_id

            examples = self._coerce(training_set, "training set")
            if not examples:
                raise ConfigurationError("Cannot start training on an empty training set")
            points = examples
            if eval_points is not None:
                points = self._coerce(eval_points, "evaluation points")
            if learning_rate is not None:
                self._learning_rate = _positive(learning_rate, "learning_rate")

            self._training_set = examples
            self._eval_points = points
            self._refresh_approximation()
            self._run_id += 1
            self._run_epochs = 0
            if self.policy.exhausted(self._epoch):
                self._status = TrainerStatus.EXHAUSTED
                logger.info(
                    "Epoch ceiling %d already reached; reset() before training again",
                    self.policy.max_epochs,
                )
                return self._run_id
            self._status = TrainerStatus.RUNNING
            logger.info(
                "Run %d started: %d examples, lr=%g, batch_size=%d, epoch=%d",
                self._run_id,
                len(examples),
                self._learning_rate,
                self.batch_size,
                self._epoch,
            )
            return self._run_id

    def stop(self) -> None:
        """Return to idle; pending ticks of the current run become no-ops."""

        with self._lock:
            if self._status is TrainerStatus.RUNNING:
                logger.info("Run %d stopped at epoch %d", self._run_id, self._epoch)
                self._status = TrainerStatus.IDLE
            self._run_id += 1

    def reset(self) -> None:
        """Stop any run and reinitialise the parameters."""

        with self._lock:
            self.stop()
            self._initialize()
            self._status = TrainerStatus.IDLE
            logger.info("Network %s reinitialised", list(self.layers))

    def tick(self, run_id: int | None = None) -> bool:
        """Run one epoch if ``run_id`` names the active run.

        Returns ``True`` while the run wants more ticks.
        """

        with self._lock:
            if self._status is not TrainerStatus.RUNNING:
                return False
            if run_id is not None and run_id != self._run_id:
                return False
            with np.errstate(over="ignore", invalid="ignore"):
                metrics = self._train_epoch()
            self._emit_epoch(self._epoch, metrics)
            outcome = self.policy.check(self._epoch, self._run_epochs, self._loss)
            if outcome is None:
                return True
            self._finish(outcome)
            return False

    # ------------------------------------------------------------------
    # Observers

    @property
    def status(self) -> TrainerStatus:
        return self._status

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @learning_rate.setter
    def learning_rate(self, value: float) -> None:
        with self._lock:
            if self._status is TrainerStatus.RUNNING:
                raise RuntimeError("learning_rate cannot change while training is running")
            self._learning_rate = _positive(value, "learning_rate")

    @property
    def approximation(self) -> Tuple[ApproximationPoint, ...]:
        """Approximation curve over the evaluation points after the last epoch."""

        return self._approximation

    def current_epoch(self) -> int:
        return self._epoch

    def current_loss(self) -> float:
        return self._loss

    def is_training(self) -> bool:
        return self._status is TrainerStatus.RUNNING

    def parameters(self) -> ParameterStore:
        """Return a copy of the current parameters."""

        with self._lock:
            return self._params.copy()

    def forward(self, inputs) -> Array:
        with self._lock:
            params = self._params
        return forward(inputs, params)

    def snapshot_approximation(self, eval_points: Iterable) -> Tuple[ApproximationPoint, ...]:
        """Evaluate the current network on ``(x, y_target)`` pairs."""

        with self._lock:
            params = self._params
        return self._approximate(self._coerce(eval_points, "evaluation points"), params)

    # ------------------------------------------------------------------
    # Internal helpers

    def _coerce(self, pairs: Iterable, what: str) -> Tuple[TrainingExample, ...]:
        if pairs is None:
            raise ConfigurationError(f"{what} must not be None")
        return tuple(as_example(pair, self.layers, index=idx) for idx, pair in enumerate(pairs))

    def _train_epoch(self) -> Mapping[str, float]:
        examples = self._training_set
        order = self._rng.permutation(len(examples))
        params = self._params
        total = 0.0
        for start in range(0, len(order), self.batch_size):
            for idx in order[start : start + self.batch_size]:
                example = examples[idx]
                params, loss = backward(
                    example.inputs, example.targets, params, self._learning_rate
                )
                total += loss
        self._params = params
        self._loss = total / len(examples)
        self._epoch += 1
        self._run_epochs += 1
        self._refresh_approximation()
        metrics = {"loss": self._loss}
        metrics.update(curve_metrics(self._approximation))
        logger.debug("Epoch %d: loss=%.6g", self._epoch, self._loss)
        return metrics

    def _finish(self, outcome: TrainerStatus) -> None:
        self._status = outcome
        if outcome is TrainerStatus.DIVERGED:
            message = (
                f"Training diverged at epoch {self._epoch} (loss={self._loss}); "
                "lower the learning rate and reset()"
            )
            logger.warning(message)
            warnings.warn(message, TrainingDivergedWarning, stacklevel=3)
        else:
            logger.info(
                "Run %d finished (%s) at epoch %d with loss %.6g",
                self._run_id,
                outcome.value,
                self._epoch,
                self._loss,
            )

    def _refresh_approximation(self) -> None:
        self._approximation = self._approximate(self._eval_points, self._params)

    @staticmethod
    def _approximate(
        points: Sequence[TrainingExample], params: ParameterStore
    ) -> Tuple[ApproximationPoint, ...]:
        curve = []
        for point in points:
            x = point.inputs
            curve.append(
                ApproximationPoint(
                    x=float(x[0]) if x.shape[0] == 1 else tuple(float(v) for v in x),
                    y_target=float(point.targets[0]),
                    y_approx=float(forward(x, params)[0]),
                )
            )
        return tuple(curve)

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["DEFAULT_BATCH_SIZE", "DEFAULT_LEARNING_RATE", "Trainer"]
