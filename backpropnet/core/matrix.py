"""Dense matrix helpers with strict shape checking.

Every helper works on 2-D ``float64`` arrays; vectors are ``1 x n`` rows.
Shape disagreements raise :class:`~backpropnet.core.errors.ShapeMismatchError`
instead of relying on NumPy broadcasting.
"""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from .errors import ShapeMismatchError
from .types import Array

UnaryFn = Callable[[Array], Array]


def as_row(values: Sequence[float] | Array) -> Array:
    """Return ``values`` as a ``1 x n`` float row."""

    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim == 1:
        return arr.reshape(1, -1)
    if arr.ndim == 2 and arr.shape[0] == 1:
        return arr
    raise ShapeMismatchError(f"Expected a vector or 1 x n row, got shape {arr.shape}")


def dot(a: Array, b: Array) -> Array:
    if a.shape[1] != b.shape[0]:
        raise ShapeMismatchError(f"Cannot multiply {a.shape} by {b.shape}")
    return a @ b


def _same_shape(op: str, a: Array, b: Array) -> None:
    if a.shape != b.shape:
        raise ShapeMismatchError(f"Cannot {op} {a.shape} and {b.shape}")


def add(a: Array, b: Array) -> Array:
    _same_shape("add", a, b)
    return a + b


def sub(a: Array, b: Array) -> Array:
    _same_shape("subtract", a, b)
    return a - b


def mult(a: Array, b: Array) -> Array:
    """Element-wise (Hadamard) product."""

    _same_shape("multiply", a, b)
    return a * b


def apply(a: Array, fn: UnaryFn) -> Array:
    return fn(a)


def scale(factor: float) -> UnaryFn:
    """Return the unary function multiplying its argument by ``factor``."""

    def _scaled(a: Array) -> Array:
        return a * factor

    return _scaled


def transpose(a: Array) -> Array:
    return a.T.copy()


def argmax(row: Array) -> int:
    """Index of the largest element; ties resolve to the first occurrence."""

    if row.size == 0:
        raise ShapeMismatchError("Cannot take argmax of an empty row")
    return int(np.argmax(row))


def one_hot(length: int, index: int) -> Array:
    if not 0 <= index < length:
        raise ShapeMismatchError(f"One-hot index {index} outside [0, {length})")
    out = np.zeros((1, length), dtype=np.float64)
    out[0, index] = 1.0
    return out


def rand_init(rows: int, cols: int, rng: np.random.Generator) -> Array:
    return rng.standard_normal((rows, cols))


def zeros(rows: int, cols: int) -> Array:
    return np.zeros((rows, cols), dtype=np.float64)


def zeros_like(a: Array) -> Array:
    return zeros(*a.shape)


__all__ = [
    "as_row",
    "dot",
    "add",
    "sub",
    "mult",
    "apply",
    "scale",
    "transpose",
    "argmax",
    "one_hot",
    "rand_init",
    "zeros",
    "zeros_like",
]
