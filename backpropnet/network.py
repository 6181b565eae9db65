"""Fully-connected sigmoid network trained with mini-batch SGD."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Sequence

import numpy as np

from .core import matrix
from .core.activations import sigmoid, sigmoid_prime
from .core.batching import shuffled_batches
from .core.errors import ConfigurationError, InvalidArgumentError, ShapeMismatchError
from .core.types import Array, Gradients, TrainConfig, TrainItem
from .training.losses import REGISTRY as LOSSES
from .training.metrics import compute_metrics, default_metrics

logger = logging.getLogger(__name__)


def _validate_topology(topology: Sequence[int]) -> tuple[int, ...]:
    layers = tuple(topology)
    if len(layers) < 2:
        raise ConfigurationError(
            f"Topology needs at least an input and an output layer, got {list(layers)}"
        )
    for size in layers:
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
            raise ConfigurationError(f"Layer sizes must be integers, got {size!r}")
        if size <= 0:
            raise ConfigurationError(f"Layer sizes must be positive, got {list(layers)}")
    return tuple(int(size) for size in layers)


class Network:
    """Feed-forward network with one weight matrix and bias row per layer.

    ``weights[i]`` has shape ``(topology[i], topology[i + 1])`` and
    ``biases[i]`` has shape ``(1, topology[i + 1])``. The instance owns these
    arrays; only :meth:`update_mini_batch` (and therefore :meth:`train`)
    replaces them. Concurrent access must be serialised by the caller.

    ``loss`` names the cost in :data:`backpropnet.training.losses.REGISTRY`;
    unknown names are a :class:`ConfigurationError`.
    """

    def __init__(
        self,
        topology: Sequence[int],
        *,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        loss: str = "quadratic",
    ) -> None:
        self._topology = _validate_topology(topology)
        try:
            self._loss = LOSSES.get(loss)
        except KeyError as exc:
            raise ConfigurationError(exc.args[0]) from exc
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        pairs = list(zip(self._topology[:-1], self._topology[1:]))
        self.weights: List[Array] = [
            matrix.rand_init(n_in, n_out, self._rng) for n_in, n_out in pairs
        ]
        self.biases: List[Array] = [matrix.rand_init(1, n_out, self._rng) for _, n_out in pairs]

    @property
    def topology(self) -> tuple[int, ...]:
        return self._topology

    @property
    def num_layers(self) -> int:
        """Number of weight layers (transitions between consecutive sizes)."""

        return len(self.weights)

    def parameter_count(self) -> int:
        return int(sum(w.size for w in self.weights) + sum(b.size for b in self.biases))

    def describe(self) -> Mapping[str, object]:
        return {
            "topology": list(self._topology),
            "loss": self._loss.name,
            "parameters": self.parameter_count(),
        }

    def __repr__(self) -> str:
        return f"Network(topology={list(self._topology)})"

    def __str__(self) -> str:
        lines = ["Neural network:", "layers: " + " ".join(str(n) for n in self._topology)]
        for idx, W in enumerate(self.weights):
            lines.append(f"weights layer {idx} to {idx + 1}:")
            lines.append(np.array2string(W, precision=4))
        for idx, b in enumerate(self.biases):
            lines.append(f"biases layer {idx + 1}:")
            lines.append(np.array2string(b, precision=4))
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Inference

    def feed_forward(self, values: Sequence[float] | Array) -> Array:
        """Return the output activations for ``values`` as a 1-D array."""

        activation = self._check_input(matrix.as_row(values))
        for W, b in zip(self.weights, self.biases):
            z = matrix.add(matrix.dot(activation, W), b)
            activation = matrix.apply(z, sigmoid)
        return activation.reshape(-1)

    def predict(self, values: Sequence[float] | Array) -> int:
        """Index of the most activated output unit."""

        return matrix.argmax(self.feed_forward(values))

    def evaluate(self, items: Sequence[TrainItem]) -> float:
        """Fraction of ``items`` whose predicted class matches the label.

        Raises :class:`InvalidArgumentError` for an empty sequence.
        """

        if len(items) == 0:
            raise InvalidArgumentError("Cannot evaluate on an empty set of examples")
        correct = sum(1 for item in items if self.predict(item.values) == item.label)
        return correct / len(items)

    def cost(self, items: Sequence[TrainItem]) -> float:
        """Mean per-example cost over ``items``."""

        if len(items) == 0:
            raise InvalidArgumentError("Cannot compute the cost of an empty set of examples")
        total = 0.0
        for item in items:
            output = matrix.as_row(self.feed_forward(item.values))
            loss, _ = self._loss(output, self._target(item))
            total += loss
        return total / len(items)

    # ------------------------------------------------------------------
    # Training

    def backprop(self, item: TrainItem) -> Gradients:
        """Gradients of the network cost on ``item`` for every parameter."""

        activation = self._check_input(item.values)
        activations = [activation]
        zs: List[Array] = []
        for W, b in zip(self.weights, self.biases):
            z = matrix.add(matrix.dot(activation, W), b)
            zs.append(z)
            activation = matrix.apply(z, sigmoid)
            activations.append(activation)

        _, error = self._loss(activations[-1], self._target(item))
        delta = matrix.mult(error, matrix.apply(zs[-1], sigmoid_prime))

        nabla_w: List[Array] = [matrix.zeros_like(W) for W in self.weights]
        nabla_b: List[Array] = [matrix.zeros_like(b) for b in self.biases]
        nabla_b[-1] = delta
        nabla_w[-1] = matrix.dot(matrix.transpose(activations[-2]), delta)

        # walk back from the second-to-last layer using the weights ahead of it
        for idx in range(self.num_layers - 2, -1, -1):
            sp = matrix.apply(zs[idx], sigmoid_prime)
            delta = matrix.mult(matrix.dot(delta, matrix.transpose(self.weights[idx + 1])), sp)
            nabla_b[idx] = delta
            nabla_w[idx] = matrix.dot(matrix.transpose(activations[idx]), delta)

        return Gradients(weights=nabla_w, biases=nabla_b)

    def update_mini_batch(self, batch: Sequence[TrainItem], eta: float) -> None:
        """Apply one averaged gradient step computed over ``batch``."""

        if len(batch) == 0:
            raise InvalidArgumentError("Mini-batch must contain at least one example")
        sum_w = [matrix.zeros_like(W) for W in self.weights]
        sum_b = [matrix.zeros_like(b) for b in self.biases]
        for item in batch:
            grads = self.backprop(item)
            sum_w = [matrix.add(acc, g) for acc, g in zip(sum_w, grads.weights)]
            sum_b = [matrix.add(acc, g) for acc, g in zip(sum_b, grads.biases)]

        step = matrix.scale(eta / len(batch))
        self.weights = [matrix.sub(W, matrix.apply(g, step)) for W, g in zip(self.weights, sum_w)]
        self.biases = [matrix.sub(b, matrix.apply(g, step)) for b, g in zip(self.biases, sum_b)]

    def train(
        self,
        items: Sequence[TrainItem],
        epochs: int,
        mini_batch_size: int,
        eta: float,
        test_data: Sequence[TrainItem] | None = None,
        *,
        rng: np.random.Generator | None = None,
        callbacks: Iterable[object] = (),
        metric_names: Sequence[str] | None = None,
    ) -> None:
        """Run ``epochs`` passes of mini-batch SGD over ``items`` in place.

        Every item (and every ``test_data`` item) is checked against the
        topology before the first update so a malformed example aborts the
        run without touching the parameters. ``rng`` drives the per-epoch
        reshuffle and defaults to the generator the network was built with.
        After each epoch the metrics computed on ``test_data`` (empty when no
        test data is given) are logged and passed to every callback exposing
        ``on_epoch(epoch, metrics)``.
        """

        config = TrainConfig(epochs=epochs, mini_batch_size=mini_batch_size, eta=float(eta))
        config.validate()
        if len(items) == 0:
            raise InvalidArgumentError("Cannot train on an empty set of examples")
        for item in items:
            self._check_item(item)
        for item in test_data or ():
            self._check_item(item)

        rng = rng if rng is not None else self._rng
        names = list(metric_names) if metric_names is not None else default_metrics()
        callbacks = list(callbacks)

        for epoch in range(config.epochs):
            for batch in shuffled_batches(items, config.mini_batch_size, rng):
                self.update_mini_batch(batch, config.eta)

            metrics: Mapping[str, float] = {}
            if test_data:
                metrics = compute_metrics(names, self, test_data)
                logger.info("Epoch %d: %f", epoch, metrics.get("accuracy", float("nan")))
            else:
                logger.info("Epoch %d finished.", epoch)
            for callback in callbacks:
                if hasattr(callback, "on_epoch"):
                    callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
                elif callable(callback):
                    callback(epoch, metrics)

    # ------------------------------------------------------------------
    # Internal helpers

    def _check_input(self, row: Array) -> Array:
        if row.shape != (1, self._topology[0]):
            raise ShapeMismatchError(
                f"Input has {row.shape[-1]} values but the network expects {self._topology[0]}"
            )
        return row

    def _check_item(self, item: TrainItem) -> None:
        self._check_input(item.values)
        self._target(item)

    def _target(self, item: TrainItem) -> Array:
        outputs = self._topology[-1]
        if item.distinct != outputs:
            raise ShapeMismatchError(
                f"Example declares {item.distinct} classes but the network has {outputs} outputs"
            )
        return matrix.one_hot(item.distinct, item.label)


__all__ = ["Network"]
