"""backpropnet public API."""

from .core import activations, batching, matrix  # noqa: F401
from .core.errors import (
    ConfigurationError,
    InvalidArgumentError,
    NetworkError,
    ShapeMismatchError,
)
from .core.types import Gradients, RunResult, TrainConfig, TrainItem
from .network import Network
from .training.pipelines import load_preset, presets, run_pipeline

__all__ = [
    "Network",
    "TrainItem",
    "TrainConfig",
    "Gradients",
    "RunResult",
    "NetworkError",
    "ConfigurationError",
    "ShapeMismatchError",
    "InvalidArgumentError",
    "activations",
    "batching",
    "matrix",
    "load_preset",
    "presets",
    "run_pipeline",
]
