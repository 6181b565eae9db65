"""Run summary derived from the per-epoch metrics log.

``summary.json`` regroups the ``metrics.jsonl`` records by evaluation split
and metric name. Each metric keeps its values keyed by epoch, the final value
and the best value together with the epoch that first reached it. Accuracy
improves upwards; cost and error rate improve downwards.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Mapping

_CONTEXT_KEYS = {"epoch", "split", "seed", "sha"}
_HIGHER_IS_BETTER = {"accuracy"}


def read_records(metrics_jsonl: str | Path) -> List[Mapping[str, object]]:
    path = Path(metrics_jsonl)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def best_epoch(metric: str, by_epoch: Mapping[int, float]) -> tuple[int, float]:
    """Return ``(epoch, value)`` of the best entry; the earliest epoch wins ties."""

    if not by_epoch:
        raise ValueError(f"No values recorded for metric {metric!r}")
    choose = max if metric in _HIGHER_IS_BETTER else min
    epoch = choose(sorted(by_epoch), key=lambda e: by_epoch[e])
    return epoch, by_epoch[epoch]


def _series(records: Iterable[Mapping[str, object]]) -> Dict[str, Dict[str, Dict[int, float]]]:
    series: Dict[str, Dict[str, Dict[int, float]]] = {}
    for record in records:
        split = str(record.get("split", "none"))
        epoch = int(record["epoch"])  # type: ignore[arg-type]
        for name, value in record.items():
            if name in _CONTEXT_KEYS or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                series.setdefault(split, {}).setdefault(name, {})[epoch] = float(value)
    return series


def summarise(records: List[Mapping[str, object]]) -> Mapping[str, object]:
    splits: Dict[str, Dict[str, Mapping[str, object]]] = {}
    for split, metrics in _series(records).items():
        for name, by_epoch in metrics.items():
            epoch, value = best_epoch(name, by_epoch)
            splits.setdefault(split, {})[name] = {
                "best": value,
                "best_epoch": epoch,
                "final": by_epoch[max(by_epoch)],
                "by_epoch": {str(e): by_epoch[e] for e in sorted(by_epoch)},
            }
    epochs = {int(record["epoch"]) for record in records}  # type: ignore[arg-type]
    return {
        "version": 1,
        "records": len(records),
        "epochs": len(epochs),
        "splits": splits,
    }


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path) -> str:
    """Summarise ``metrics_jsonl`` into ``out_summary_json`` and return its path."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarise(read_records(metrics_jsonl))
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["best_epoch", "read_records", "summarise", "write_summary"]
