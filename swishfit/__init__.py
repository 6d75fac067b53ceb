"""swishfit public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.backprop import backward, compute_gradients
from .core.errors import ConfigurationError, DimensionMismatchError, TrainingDivergedWarning
from .core.initializers import initialize, xavier_uniform
from .core.network import forward, forward_record
from .core.types import DEFAULT_LAYERS, LOSS_SENTINEL, ParameterStore
from .training.drivers import BackgroundDriver, FrameDriver, run_until_idle
from .training.pipelines import load_preset, presets, run_pipeline
from .training.stopping import StoppingPolicy, TrainerStatus
from .training.trainer import Trainer

__version__ = "0.1.0"

__all__ = [
    "BackgroundDriver",
    "ConfigurationError",
    "DEFAULT_LAYERS",
    "DimensionMismatchError",
    "FrameDriver",
    "LOSS_SENTINEL",
    "ParameterStore",
    "StoppingPolicy",
    "Trainer",
    "TrainerStatus",
    "TrainingDivergedWarning",
    "activations",
    "backward",
    "compute_gradients",
    "forward",
    "forward_record",
    "initialize",
    "load_preset",
    "presets",
    "run_pipeline",
    "run_until_idle",
    "types",
    "xavier_uniform",
]
