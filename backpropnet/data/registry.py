"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, MutableMapping

from ..core.types import TrainItem

SPLITS = ("train", "val", "test")


@dataclass(frozen=True)
class DataSpec:
    """Structural information about a dataset.

    Attributes
    ----------
    d_in:
        Number of input features per example.
    num_classes:
        Number of distinct labels; this is the size of the network's output
        layer.
    normalization:
        Metadata describing scaling applied to the inputs. The registry does
        not interpret these values but keeping them makes runs reproducible.
    """

    d_in: int
    num_classes: int
    normalization: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """Description of a dataset registered in the system."""

    name: str
    splits: Dict[str, List[TrainItem]]
    data_spec: DataSpec
    provenance: Dict[str, Any]

    def split(self, name: str) -> List[TrainItem]:
        if name not in SPLITS:
            raise ValueError(f"Unsupported split: {name}")
        return self.splits.get(name, [])

    @property
    def sizes(self) -> Dict[str, int]:
        return {name: len(self.splits.get(name, [])) for name in SPLITS}


DatasetFactory = Callable[..., DatasetSpec]

_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly::

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` built by the factory named ``dataset``."""

    if dataset not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {dataset}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.data_spec.num_classes < 1:
        raise ValueError(f"Dataset {spec.name!r} must define at least one class")
    unknown = set(spec.splits) - set(SPLITS)
    if unknown:
        raise ValueError(f"Dataset {spec.name!r} has unknown splits: {sorted(unknown)}")
    if not spec.splits.get("train"):
        raise ValueError(f"Dataset {spec.name!r} has an empty train split")
    for split, items in spec.splits.items():
        for item in items:
            if item.size != spec.data_spec.d_in or item.distinct != spec.data_spec.num_classes:
                raise ValueError(
                    f"Split {split!r} of {spec.name!r} holds an item inconsistent with its DataSpec"
                )


__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
