"""Metric helpers evaluated on held-out examples after each epoch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Sequence

from ..core.types import TrainItem

if TYPE_CHECKING:
    from ..network import Network


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics() -> List[str]:
    return ["accuracy", "cost"]


def compute_metric(name: str, network: "Network", items: Sequence[TrainItem]) -> MetricResult:
    key = name.lower()
    if key == "accuracy":
        value = network.evaluate(items)
    elif key == "error_rate":
        value = 1.0 - network.evaluate(items)
    elif key == "cost":
        value = network.cost(items)
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=float(value))


def compute_metrics(
    names: Iterable[str], network: "Network", items: Sequence[TrainItem]
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, network, items)
        results[metric.name] = metric.value
    return results


def parse_metric_names(spec: Sequence[str] | str | None) -> List[str]:
    """Normalise a comma separated string or list of metric names."""

    if spec is None:
        return default_metrics()
    if isinstance(spec, str):
        if spec == "default" or spec.strip() == "":
            return default_metrics()
        return [m.strip() for m in spec.split(",") if m.strip()]
    names = [str(m) for m in spec]
    return names or default_metrics()


__all__ = [
    "MetricResult",
    "default_metrics",
    "compute_metric",
    "compute_metrics",
    "parse_metric_names",
]
