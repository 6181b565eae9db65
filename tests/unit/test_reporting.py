import json

import pytest

from backpropnet.reporting.metrics import CsvSink, JsonlSink
from backpropnet.reporting.plots import PlotAdapter
from backpropnet.reporting.summary import best_epoch, write_summary


def test_sinks_write_one_record_per_epoch(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", split="test", seed=3, sha="abc")
    csv_sink = CsvSink(tmp_path / "m.csv", split="test")
    for epoch, (acc, cost) in enumerate([(0.5, 0.3), (0.75, 0.2)]):
        jsonl.on_epoch(epoch, {"cost": cost, "accuracy": acc})
        csv_sink(epoch, {"cost": cost, "accuracy": acc})
    records = [json.loads(line) for line in (tmp_path / "m.jsonl").read_text().splitlines()]
    assert records[1] == {
        "epoch": 1,
        "split": "test",
        "seed": 3,
        "sha": "abc",
        "accuracy": 0.75,
        "cost": 0.2,
    }
    lines = (tmp_path / "m.csv").read_text().splitlines()
    assert lines == ["epoch,split,accuracy,cost", "0,test,0.5,0.3", "1,test,0.75,0.2"]


def test_sinks_truncate_previous_run(tmp_path):
    path = tmp_path / "m.jsonl"
    path.write_text('{"epoch": 0}\n')
    JsonlSink(path, sha="x")
    assert path.read_text() == ""


def test_summary_groups_epoch_metrics_by_split(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", split="val", seed=0, sha="x")
    history = [(0.2, 0.40, 0.8), (0.6, 0.25, 0.4), (0.4, 0.30, 0.6)]
    for epoch, (acc, cost, err) in enumerate(history):
        jsonl.on_epoch(epoch, {"accuracy": acc, "cost": cost, "error_rate": err})
    path = write_summary(jsonl.path, tmp_path / "summary.json")
    summary = json.loads(open(path).read())

    assert summary["records"] == 3
    assert summary["epochs"] == 3
    assert set(summary["splits"]) == {"val"}
    metrics = summary["splits"]["val"]
    assert set(metrics) == {"accuracy", "cost", "error_rate"}
    assert metrics["accuracy"]["best"] == 0.6
    assert metrics["accuracy"]["best_epoch"] == 1
    assert metrics["accuracy"]["final"] == 0.4
    assert metrics["accuracy"]["by_epoch"] == {"0": 0.2, "1": 0.6, "2": 0.4}
    assert metrics["cost"]["best"] == 0.25
    assert metrics["error_rate"]["best_epoch"] == 1


def test_summary_of_run_without_evaluation(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", split="none", seed=1, sha="x")
    jsonl.on_epoch(0, {})
    jsonl.on_epoch(1, {})
    summary = json.loads(open(write_summary(jsonl.path, tmp_path / "s.json")).read())
    assert summary["records"] == 2
    assert summary["splits"] == {}


def test_best_epoch_prefers_earliest_and_respects_direction():
    assert best_epoch("accuracy", {0: 0.5, 1: 0.9, 2: 0.9}) == (1, 0.9)
    assert best_epoch("cost", {0: 0.5, 1: 0.1, 2: 0.1}) == (1, 0.1)
    assert best_epoch("error_rate", {3: 0.2, 1: 0.2}) == (1, 0.2)
    with pytest.raises(ValueError):
        best_epoch("cost", {})


def test_plot_adapter_headless(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_epoch(0, {"accuracy": 0.4})
    adapter.on_epoch(1, {"accuracy": 0.8})
    assert adapter.close() == tmp_path / "accuracy.png"
    assert (tmp_path / "accuracy.png").exists()
    assert PlotAdapter(tmp_path / "off").close() is None
