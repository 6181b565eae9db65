"""Loss registry used by the training engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from ..core.matrix import sub
from ..core.types import Array

LossFn = Callable[[Array, Array], tuple[float, Array]]


@dataclass(frozen=True)
class Loss:
    """Loss wrapper returning both the scalar loss and dC/da."""

    name: str
    fn: LossFn

    def __call__(self, predictions: Array, targets: Array) -> tuple[float, Array]:
        return self.fn(predictions, targets)


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Loss] = {}

    def register(self, name: str, fn: LossFn) -> None:
        self._registry[name] = Loss(name, fn)

    def get(self, name: str) -> Loss:
        try:
            return self._registry[name]
        except KeyError as exc:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}") from exc

    def names(self) -> Iterable[str]:
        return sorted(self._registry)


REGISTRY = LossRegistry()


def quadratic(pred: Array, target: Array) -> tuple[float, Array]:
    """Quadratic cost ``0.5 * ||a - y||^2`` and its derivative ``a - y``."""

    diff = sub(pred, target)
    loss = float(0.5 * np.sum(np.square(diff)))
    return loss, diff


REGISTRY.register("quadratic", quadratic)

__all__ = ["Loss", "LossRegistry", "REGISTRY", "quadratic"]
