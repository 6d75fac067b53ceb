"""Stopping policy for the training loop."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

from ..core.errors import ConfigurationError

LOSS_THRESHOLD = 1e-4
MIN_EPOCHS = 300
MAX_EPOCHS = 2000
RUN_MAX_EPOCHS = 1000


class TrainerStatus(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"
    DIVERGED = "diverged"


@dataclass(frozen=True)
class StoppingPolicy:
    """Decide when a run ends.

    Attributes
    ----------
    loss_threshold, min_epochs:
        The run has converged once the epoch loss drops below
        ``loss_threshold`` and at least ``min_epochs`` epochs have completed.
    max_epochs:
        Ceiling on the lifetime epoch counter of a parameter store; only
        :meth:`Trainer.reset` lifts it.
    run_max_epochs:
        Ceiling on the epochs trained by a single ``start()`` call. ``None``
        disables it.
    """

    loss_threshold: float = LOSS_THRESHOLD
    min_epochs: int = MIN_EPOCHS
    max_epochs: int = MAX_EPOCHS
    run_max_epochs: int | None = RUN_MAX_EPOCHS

    def __post_init__(self) -> None:
        if self.loss_threshold < 0:
            raise ConfigurationError("loss_threshold must be non-negative")
        if self.min_epochs < 0:
            raise ConfigurationError("min_epochs must be non-negative")
        if self.max_epochs < 1:
            raise ConfigurationError("max_epochs must be at least 1")
        if self.run_max_epochs is not None and self.run_max_epochs < 1:
            raise ConfigurationError("run_max_epochs must be at least 1 or None")

    @classmethod
    def from_config(cls, config) -> "StoppingPolicy":
        config = dict(config or {})
        unknown = set(config) - {"loss_threshold", "min_epochs", "max_epochs", "run_max_epochs"}
        if unknown:
            raise ConfigurationError(f"Unknown stopping options: {', '.join(sorted(unknown))}")
        run_max = config.get("run_max_epochs", RUN_MAX_EPOCHS)
        return cls(
            loss_threshold=float(config.get("loss_threshold", LOSS_THRESHOLD)),
            min_epochs=int(config.get("min_epochs", MIN_EPOCHS)),
            max_epochs=int(config.get("max_epochs", MAX_EPOCHS)),
            run_max_epochs=int(run_max) if run_max is not None else None,
        )

    def exhausted(self, epoch: int, run_epochs: int = 0) -> bool:
        if epoch >= self.max_epochs:
            return True
        return self.run_max_epochs is not None and run_epochs >= self.run_max_epochs

    def check(self, epoch: int, run_epochs: int, loss: float) -> TrainerStatus | None:
        """Return the terminal status reached after an epoch, or ``None``."""

        if not math.isfinite(loss):
            return TrainerStatus.DIVERGED
        if loss < self.loss_threshold and epoch >= self.min_epochs:
            return TrainerStatus.CONVERGED
        if self.exhausted(epoch, run_epochs):
            return TrainerStatus.EXHAUSTED
        return None


__all__ = ["StoppingPolicy", "TrainerStatus"]
