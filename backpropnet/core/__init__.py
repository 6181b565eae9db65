"""Core numerical primitives for backpropnet."""

from . import activations, batching, errors, matrix, types

__all__ = ["activations", "batching", "errors", "matrix", "types"]
