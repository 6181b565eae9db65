"""Reporting utilities: metric sinks, summaries, manifests and plots."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import summarise, write_summary

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "summarise",
    "write_manifest",
    "write_summary",
]
