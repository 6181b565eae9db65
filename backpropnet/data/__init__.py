"""Dataset registry and loaders."""

from . import registry
from .loaders import synthetic as _synthetic  # noqa: F401
from . import csv_generic as _csv_generic  # noqa: F401
from .registry import DataSpec, DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
    "registry",
]
