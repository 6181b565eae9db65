"""Core typing contracts for backpropnet."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from .errors import InvalidArgumentError, ShapeMismatchError

Array = np.ndarray


@dataclass(frozen=True, eq=False)
class TrainItem:
    """One labelled input row.

    Attributes
    ----------
    values:
        Input features stored as a ``1 x n`` float row.
    label:
        Index of the correct class.
    distinct:
        Number of distinct classes, used to build the one-hot target.
    """

    values: Array
    label: int
    distinct: int

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float64)
        if values.ndim == 2 and values.shape[0] == 1:
            values = values.copy()
        elif values.ndim == 1:
            values = values.reshape(1, -1)
        else:
            raise ShapeMismatchError(
                f"TrainItem values must be a vector, got shape {values.shape}"
            )
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "label", _as_label(self.label))
        object.__setattr__(self, "distinct", int(self.distinct))

    @classmethod
    def create(cls, values: Sequence[float], label: float, distinct: int) -> "TrainItem":
        """Build an item from raw ``values`` and a (possibly float) ``label``."""

        return cls(values=np.asarray(values, dtype=np.float64), label=label, distinct=distinct)

    @property
    def size(self) -> int:
        return int(self.values.shape[1])


def _as_label(label: object) -> int:
    value = float(label)  # type: ignore[arg-type]
    if not math.isfinite(value) or value != int(value):
        raise InvalidArgumentError(f"Label must be an integral class index, got {label!r}")
    return int(value)


@dataclass(frozen=True)
class TrainConfig:
    """Hyperparameters of a training run."""

    epochs: int
    mini_batch_size: int
    eta: float

    def validate(self) -> None:
        for name in ("epochs", "mini_batch_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
        if self.epochs <= 0:
            raise InvalidArgumentError(f"epochs must be positive, got {self.epochs}")
        if self.mini_batch_size <= 0:
            raise InvalidArgumentError(
                f"mini_batch_size must be positive, got {self.mini_batch_size}"
            )
        if not math.isfinite(self.eta) or self.eta <= 0:
            raise InvalidArgumentError(f"eta must be a positive finite number, got {self.eta}")


@dataclass
class Gradients:
    """Per-layer partial derivatives of the cost."""

    weights: List[Array] = field(default_factory=list)
    biases: List[Array] = field(default_factory=list)


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`backpropnet.training.pipelines.run_pipeline`."""

    epochs: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""


__all__ = ["Array", "TrainItem", "TrainConfig", "Gradients", "RunResult"]
