"""Exception hierarchy for backpropnet."""

from __future__ import annotations


class NetworkError(ValueError):
    """Base class for errors raised by the training engine."""


class ConfigurationError(NetworkError):
    """Raised when a topology or run configuration is invalid."""


class ShapeMismatchError(NetworkError):
    """Raised when operand shapes disagree with each other or the topology."""


class InvalidArgumentError(NetworkError):
    """Raised for empty datasets and out-of-range training arguments."""


__all__ = [
    "NetworkError",
    "ConfigurationError",
    "ShapeMismatchError",
    "InvalidArgumentError",
]
