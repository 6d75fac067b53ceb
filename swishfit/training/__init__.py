"""Training loop, drivers and pipelines for swishfit."""

from .drivers import BackgroundDriver, FrameDriver, run_until_idle
from .stopping import StoppingPolicy, TrainerStatus
from .trainer import Trainer

__all__ = [
    "BackgroundDriver",
    "FrameDriver",
    "StoppingPolicy",
    "Trainer",
    "TrainerStatus",
    "run_until_idle",
]
