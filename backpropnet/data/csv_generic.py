"""Generic CSV loader for classification tasks."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

from .registry import DatasetSpec, DataSpec, register_dataset
from .utils import deterministic_split, split_items, standardize


def _load_csv(path: Path, target_col: str) -> tuple[np.ndarray, np.ndarray]:
    df = pd.read_csv(path)
    if target_col not in df.columns:
        raise KeyError(f"Target column {target_col!r} not found in CSV")
    y = df.pop(target_col).to_numpy()
    X = df.to_numpy(dtype=np.float64)
    return X, y


@register_dataset("csv_classification")
def load_csv_classification(
    *,
    csv_path: str | Path | None = None,
    target_col: str = "label",
    val_split: float = 0.1,
    test_split: float = 0.2,
    seed: int = 0,
    standardize_inputs: bool = True,
) -> DatasetSpec:
    """Load a classification dataset from a CSV file.

    Every column except ``target_col`` is used as a numeric feature. Labels
    of any type are mapped to ``0..k-1`` in sorted order.
    """

    if csv_path is None:
        raise KeyError("csv_classification requires `csv_path` in the data options")
    path = Path(csv_path)
    X, y_raw = _load_csv(path, target_col)

    encoder = LabelEncoder()
    y = encoder.fit_transform(y_raw).astype(np.int64)
    num_classes = int(len(encoder.classes_))

    normalization: dict[str, dict[str, list[float]]] = {}
    if standardize_inputs:
        X, mean, std = standardize(X)
        normalization["inputs"] = {
            "mean": mean.flatten().tolist(),
            "std": std.flatten().tolist(),
        }

    splits = deterministic_split(X.shape[0], val_split=val_split, test_split=test_split, seed=seed)

    data_spec = DataSpec(
        d_in=int(X.shape[1]),
        num_classes=num_classes,
        normalization=normalization,
    )

    provenance = {
        "type": "csv",
        "path": str(path),
        "target_col": target_col,
        "classes": [str(c) for c in encoder.classes_],
        "val_split": val_split,
        "test_split": test_split,
        "seed": seed,
    }

    return DatasetSpec(
        name="csv_classification",
        splits=split_items(X, y, num_classes, splits),
        data_spec=data_spec,
        provenance=provenance,
    )
