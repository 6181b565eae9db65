"""Pipeline assembly: dataset, network, reporting sinks and training."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core.errors import ConfigurationError
from ..core.types import RunResult, TrainItem
from ..data import registry
from ..network import Network
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .metrics import compute_metrics, parse_metric_names

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {
            "name": "xor",
            "options": {"n_points": 200, "noise": 0.1, "seed": 0},
        },
        "model": {"hidden": [4]},
        "train": {
            "epochs": 30,
            "batch_size": 10,
            "eta": 3.0,
            "seed": 7,
            "run_dir": "runs/xor",
            "enable_plots": False,
        },
    },
    "blobs": {
        "data": {
            "name": "blobs",
            "options": {"n_points": 300, "n_classes": 3, "n_features": 2, "seed": 0},
        },
        "model": {"hidden": [8]},
        "train": {
            "epochs": 10,
            "batch_size": 10,
            "eta": 3.0,
            "seed": 1,
            "run_dir": "runs/blobs",
            "enable_plots": False,
        },
    },
    "blobs-deep": {
        "data": {
            "name": "blobs",
            "options": {"n_points": 600, "n_classes": 4, "n_features": 4, "seed": 3},
        },
        "model": {"hidden_dim": 12, "depth": 2},
        "train": {
            "epochs": 20,
            "batch_size": 16,
            "eta": 2.0,
            "seed": 3,
            "run_dir": "runs/blobs-deep",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None
_REQUIRED_SECTIONS = {"data", "model", "train"}


def read_config_file(path: Path) -> Mapping[str, object]:
    """Decode a JSON or YAML configuration file into a mapping."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ConfigurationError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = _REQUIRED_SECTIONS - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise ConfigurationError(
                        f"Preset {file.name} is missing required sections: {missing_str}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


class _MetricsCapture:
    def __init__(self) -> None:
        self.history: list[tuple[int, Mapping[str, float]]] = []
        self.last: Mapping[str, float] = {}

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        payload = {k: float(v) for k, v in metrics.items()}
        self.history.append((int(epoch), payload))
        self.last = payload


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train a network as described by ``config`` and write run artifacts."""

    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise ConfigurationError(f"Config is missing sections: {', '.join(sorted(missing))}")

    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    if "name" not in data_cfg:
        raise ConfigurationError("data section requires a dataset `name`")
    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))

    hidden_dims = build_hidden(model_cfg)
    dims = build_dims(model_cfg, hidden_dims, dataset.data_spec)

    epochs = int(train_cfg.get("epochs", 1))
    batch_size = int(train_cfg.get("batch_size", 10))
    eta = float(train_cfg.get("eta", 3.0))
    seed = int(train_cfg.get("seed", 0))
    metric_names = parse_metric_names(train_cfg.get("metrics", "default"))
    eval_split, eval_items = _resolve_eval_split(dataset.splits, str(train_cfg.get("eval_split", "test")))

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    network = Network(dims, seed=seed)
    shuffle_rng = np.random.default_rng(seed + 1)

    _print_startup_summary(
        dataset_name=dataset.name,
        dims=dims,
        sizes=dataset.sizes,
        eval_split=eval_split,
        metrics=metric_names,
        epochs=epochs,
        batch_size=batch_size,
        eta=eta,
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split=eval_split or "none", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split=eval_split or "none")
    capture = _MetricsCapture()
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    network.train(
        dataset.split("train"),
        epochs,
        batch_size,
        eta,
        test_data=eval_items,
        rng=shuffle_rng,
        callbacks=[jsonl, csv_sink, capture, plots],
        metric_names=metric_names,
    )
    plots.close()

    final_metrics = {
        split: dict(compute_metrics(metric_names, network, items))
        for split, items in dataset.splits.items()
        if items
    }
    (run_dir / "metrics_final.json").write_text(json.dumps(final_metrics, indent=2, sort_keys=True))

    safe_config = _safe_config(config, hidden_dims)
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        network=network.describe(),
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        epochs=epochs,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _resolve_eval_split(
    splits: Mapping[str, List[TrainItem]], preferred: str
) -> tuple[str | None, List[TrainItem] | None]:
    for name in (preferred, "test", "val"):
        items = splits.get(name)
        if items:
            return name, items
    return None, None


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def build_hidden(model_cfg: Mapping[str, object]) -> List[int]:
    if "hidden" in model_cfg:
        return [int(h) for h in model_cfg["hidden"]]  # type: ignore[union-attr]
    hidden_dim = int(model_cfg.get("hidden_dim", 16))
    depth = int(model_cfg.get("depth", 1))
    return [hidden_dim for _ in range(depth)]


def build_dims(
    model_cfg: Mapping[str, object], hidden: Sequence[int], data_spec: registry.DataSpec
) -> List[int]:
    d_in = int(model_cfg.get("d_in", data_spec.d_in))
    d_out = int(model_cfg.get("d_out", data_spec.num_classes))
    if d_in != data_spec.d_in:
        raise ConfigurationError(f"Configured d_in={d_in} but the dataset has {data_spec.d_in}")
    if d_out != data_spec.num_classes:
        raise ConfigurationError(
            f"Configured d_out={d_out} but the dataset has {data_spec.num_classes} classes"
        )
    return [d_in, *hidden, d_out]


def _safe_config(config: Mapping[str, object], hidden_dims: Sequence[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["hidden"] = list(hidden_dims)
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: Sequence[int],
    sizes: Mapping[str, int],
    eval_split: str | None,
    metrics: Sequence[str],
    epochs: int,
    batch_size: int,
    eta: float,
    param_count: int,
) -> None:
    print("=== backpropnet run ===")
    print(f"Dataset       : {dataset_name} {dict(sizes)}")
    print(f"Topology      : {list(dims)}")
    print(f"Evaluated on  : {eval_split or '-'}")
    print(f"Metrics       : {', '.join(metrics)}")
    print(f"Epochs        : {epochs}")
    print(f"Batch size    : {batch_size}")
    print(f"Eta           : {eta}")
    print(f"Parameters    : {param_count}")
    print("=======================")


__all__ = ["build_dims", "build_hidden", "load_preset", "presets", "read_config_file", "run_pipeline"]
