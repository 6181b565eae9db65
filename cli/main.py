"""Command line entry point for backpropnet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from backpropnet.data import registry as data_registry
from backpropnet.log_init import config_logger
from backpropnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--dataset", help="Override the registered dataset name")
    parser.add_argument("--csv-path", help="Path to a CSV file for csv_classification")
    parser.add_argument("--target-col", help="Label column for csv_classification")
    parser.add_argument(
        "--hidden",
        type=int,
        nargs="+",
        help="Hidden layer sizes, e.g. --hidden 16 8",
    )
    parser.add_argument("--epochs", type=int, help="Number of training epochs")
    parser.add_argument("--batch-size", type=int, help="Mini-batch size")
    parser.add_argument("--eta", type=float, help="Learning rate")
    parser.add_argument("--seed", type=int, help="Seed for initialisation and shuffling")
    parser.add_argument("--run-dir", help="Directory receiving the run artifacts")
    parser.add_argument("--enable-plots", action="store_true", help="Write an accuracy plot")
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--list-datasets", action="store_true", help="List registered datasets and exit"
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", type=Path, help="Also write log records to this file")
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def resolve_config(args: argparse.Namespace) -> dict:
    """Build the run config from the preset, config file and flag overrides."""

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = dict(pipelines.read_config_file(args.config))
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    if args.dataset:
        config["data"] = {"name": args.dataset, "options": {}}
    options = config.setdefault("data", {}).setdefault("options", {})
    if args.csv_path:
        options["csv_path"] = args.csv_path
    if args.target_col:
        options["target_col"] = args.target_col

    if args.hidden:
        model = config.setdefault("model", {})
        model.pop("hidden_dim", None)
        model.pop("depth", None)
        model["hidden"] = list(args.hidden)

    train = config.setdefault("train", {})
    overrides = {
        "epochs": args.epochs,
        "batch_size": args.batch_size,
        "eta": args.eta,
        "seed": args.seed,
        "run_dir": args.run_dir,
    }
    train.update({key: value for key, value in overrides.items() if value is not None})
    if args.enable_plots:
        train["enable_plots"] = True
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.list_datasets:
        for name in data_registry.available_datasets():
            print(name)
        raise SystemExit(0)

    config_logger(args.log_file, level=args.log_level.upper())
    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
