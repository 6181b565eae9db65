import numpy as np
import pytest

from backpropnet.data import registry
from backpropnet.data.utils import deterministic_split, make_items, standardize


def test_xor_dataset_splits():
    spec = registry.get_dataset("xor", n_points=200, seed=0)
    assert spec.sizes == {"train": 160, "val": 0, "test": 40}
    assert spec.data_spec.d_in == 2
    assert spec.data_spec.num_classes == 2
    item = spec.split("train")[0]
    assert item.values.shape == (1, 2)
    assert item.distinct == 2
    assert item.label in {0, 1}


def test_blobs_dataset_is_deterministic():
    first = registry.get_dataset("blobs", n_points=90, n_classes=3, n_features=4, seed=5)
    second = registry.get_dataset("blobs", n_points=90, n_classes=3, n_features=4, seed=5)
    assert first.sizes == {"train": 63, "val": 9, "test": 18}
    assert first.data_spec.d_in == 4
    for a, b in zip(first.split("train"), second.split("train")):
        assert np.array_equal(a.values, b.values)
        assert a.label == b.label
    labels = {item.label for items in first.splits.values() for item in items}
    assert labels == {0, 1, 2}


def test_csv_classification_encodes_labels(tmp_path):
    path = tmp_path / "animals.csv"
    rows = ["weight,height,species"]
    for idx in range(10):
        species = "cat" if idx % 2 else "dog"
        rows.append(f"{idx},{idx * 2 + 1},{species}")
    path.write_text("\n".join(rows) + "\n")

    spec = registry.get_dataset("csv_classification", csv_path=str(path), target_col="species")
    assert spec.data_spec.num_classes == 2
    assert spec.data_spec.d_in == 2
    assert spec.provenance["classes"] == ["cat", "dog"]
    assert sum(spec.sizes.values()) == 10
    assert "inputs" in spec.data_spec.normalization


def test_csv_classification_missing_column(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,b\n1,2\n")
    with pytest.raises(KeyError):
        registry.get_dataset("csv_classification", csv_path=str(path), target_col="label")


def test_unknown_dataset():
    with pytest.raises(KeyError):
        registry.get_dataset("imagenet")
    assert {"blobs", "csv_classification", "xor"} <= set(registry.available_datasets())


def test_split_and_standardize_helpers():
    splits = deterministic_split(20, val_split=0.1, test_split=0.2, seed=0)
    assert splits.sizes == {"train": 14, "val": 2, "test": 4}
    combined = np.concatenate([splits.train, splits.val, splits.test])
    assert sorted(combined.tolist()) == list(range(20))

    scaled, mean, std = standardize(np.array([[1.0, 5.0], [3.0, 5.0]]))
    assert np.allclose(scaled[:, 0], [-1.0, 1.0])
    assert np.allclose(scaled[:, 1], 0.0)

    items = make_items(scaled, np.array([0, 1]), 2)
    assert [item.label for item in items] == [0, 1]
