"""Pure in-memory synthetic classification datasets."""

from __future__ import annotations

import numpy as np

from ..registry import DataSpec, DatasetSpec, register_dataset
from ..utils import deterministic_split, split_items

_XOR_CORNERS = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
_XOR_LABELS = np.array([0, 1, 1, 0])


def _make_xor(n_points: int, noise: float, seed: int) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    corner = np.arange(n_points) % len(_XOR_CORNERS)
    x = _XOR_CORNERS[corner] + noise * rng.standard_normal((n_points, 2))
    return x, _XOR_LABELS[corner]


def _make_blobs(
    n_points: int, n_classes: int, n_features: int, spread: float, seed: int
) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    centers = rng.uniform(-3.0, 3.0, size=(n_classes, n_features))
    labels = np.arange(n_points) % n_classes
    x = centers[labels] + spread * rng.standard_normal((n_points, n_features))
    return x, labels


def _build(
    name: str,
    x: np.ndarray,
    y: np.ndarray,
    num_classes: int,
    *,
    val_split: float,
    test_split: float,
    seed: int,
    provenance: dict,
) -> DatasetSpec:
    splits = deterministic_split(x.shape[0], val_split=val_split, test_split=test_split, seed=seed)
    return DatasetSpec(
        name=name,
        splits=split_items(x, y, num_classes, splits),
        data_spec=DataSpec(d_in=int(x.shape[1]), num_classes=num_classes),
        provenance={**provenance, "val_split": val_split, "test_split": test_split},
    )


@register_dataset("xor")
def load_xor(
    n_points: int = 200,
    noise: float = 0.1,
    seed: int = 0,
    *,
    val_split: float = 0.0,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    """Noisy copies of the four XOR corners, two classes."""

    x, y = _make_xor(n_points, noise, seed)
    provenance = {"type": "synthetic", "name": "xor", "n_points": n_points, "noise": noise, "seed": seed}
    return _build(
        "xor", x, y, 2, val_split=val_split, test_split=test_split, seed=seed, provenance=provenance
    )


@register_dataset("blobs")
def load_blobs(
    n_points: int = 300,
    n_classes: int = 3,
    n_features: int = 2,
    spread: float = 0.5,
    seed: int = 0,
    *,
    val_split: float = 0.1,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    """Isotropic Gaussian clusters, one per class."""

    if n_classes < 2:
        raise ValueError("blobs needs at least two classes")
    x, y = _make_blobs(n_points, n_classes, n_features, spread, seed)
    provenance = {
        "type": "synthetic",
        "name": "blobs",
        "n_points": n_points,
        "n_classes": n_classes,
        "n_features": n_features,
        "spread": spread,
        "seed": seed,
    }
    return _build(
        "blobs",
        x,
        y,
        n_classes,
        val_split=val_split,
        test_split=test_split,
        seed=seed,
        provenance=provenance,
    )
