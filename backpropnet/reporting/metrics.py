"""Per-epoch metric sinks for training runs.

Both sinks are :meth:`Network.train` callbacks: every epoch they receive the
metrics computed on the evaluation split and append a single row to their
file. The file is emptied when the sink is created, so a run directory only
describes the latest run written into it.
"""

from __future__ import annotations

import csv
import json
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return out.decode().strip()


class _EpochSink:
    def __init__(self, path: str | Path, *, split: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split

    def _context(self) -> Dict[str, object]:
        return {"split": self.split}

    def row(self, epoch: int, metrics: Mapping[str, float]) -> Dict[str, object]:
        """``epoch`` and the sink context followed by the metrics in name order."""

        record: Dict[str, object] = {"epoch": int(epoch)}
        record.update(self._context())
        for name in sorted(metrics):
            record[name] = float(metrics[name])
        return record

    def _append(self, record: Mapping[str, object]) -> None:
        raise NotImplementedError

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self._append(self.row(epoch, metrics))

    def __call__(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self.on_epoch(epoch, metrics)


class JsonlSink(_EpochSink):
    """One JSON object per epoch, tagged with the run seed and git revision."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "test",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__(path, split=split)
        self.seed = seed
        self.sha = sha or git_sha()

    def _context(self) -> Dict[str, object]:
        return {"split": self.split, "seed": self.seed, "sha": self.sha}

    def _append(self, record: Mapping[str, object]) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")


class CsvSink(_EpochSink):
    """CSV table of epoch metrics; the first row fixes the columns."""

    def __init__(self, path: str | Path, *, split: str = "test") -> None:
        super().__init__(path, split=split)
        self.columns: List[str] = []

    def _append(self, record: Mapping[str, object]) -> None:
        new_file = not self.columns
        if new_file:
            self.columns = list(record)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.columns, restval="")
            if new_file:
                writer.writeheader()
            writer.writerow(record)


__all__ = ["CsvSink", "JsonlSink", "git_sha"]
