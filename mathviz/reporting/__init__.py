"""Metric sinks and plotting adapters."""

from .metrics import CsvSink, JsonlSink, MetricsCapture
from .plots import PlotAdapter, plot_descent, plot_distribution

__all__ = [
    "CsvSink",
    "JsonlSink",
    "MetricsCapture",
    "PlotAdapter",
    "plot_descent",
    "plot_distribution",
]
