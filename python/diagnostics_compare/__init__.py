"""Compiler diagnostics parsing, delta classification and report rendering."""

from .compare import DEFAULT_THRESHOLD_MS, classify, compare_diagnostics, has_regressions
from .formatting import REPORT_MARKER, render_markdown, render_text
from .model import Metric, MetricDelta, MetricSnapshot, Status, Unit
from .parse import parse_diagnostics

__all__ = [
    "DEFAULT_THRESHOLD_MS",
    "REPORT_MARKER",
    "Metric",
    "MetricDelta",
    "MetricSnapshot",
    "Status",
    "Unit",
    "classify",
    "compare_diagnostics",
    "has_regressions",
    "parse_diagnostics",
    "render_markdown",
    "render_text",
]
