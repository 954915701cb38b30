"""Confusion counts, summary statistics and report rendering."""

from variantcv.metrics.confusion import AggregateMetrics, FoldMetrics
from variantcv.metrics.reporter import ClassDetails, MetricsReporter, Report, cohen_kappa, summarize
from variantcv.metrics.text import render_confusion, render_report

__all__ = [
    "AggregateMetrics",
    "FoldMetrics",
    "ClassDetails",
    "MetricsReporter",
    "Report",
    "cohen_kappa",
    "summarize",
    "render_confusion",
    "render_report",
]
