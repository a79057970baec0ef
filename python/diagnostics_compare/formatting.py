from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Iterable

from diagnostics_compare.model import Metric, MetricDelta, Number, Status

REPORT_MARKER = "Diagnostics Comparison"
REPORT_TITLE = f"## {REPORT_MARKER}:"

STATUS_SYMBOLS = {
    Status.UNCHANGED: "±",
    Status.INCREASED: "▲",
    Status.DECREASED: "▼",
}

HEADER = ["Metric", "Previous", "New", "Status"]

# Wide enough to quantize any finite float to two decimals.
_PERCENT_CONTEXT = Context(prec=400)


def _fmt_number(value: Number) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def _fmt_metric(metric: Metric) -> str:
    return f"{_fmt_number(metric.value)}{metric.unit.suffix}"


def _fmt_percentage(value: float) -> str:
    if value == 0:
        value = 0.0
    # Half-away-from-zero on the exact binary value, like Number#toFixed.
    rounded = Decimal(value).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP, context=_PERCENT_CONTEXT
    )
    sign = "+" if value >= 0 else ""
    return f"{sign}{rounded}%"


def format_status(delta: MetricDelta) -> str:
    return f"{STATUS_SYMBOLS[delta.status]} ({_fmt_percentage(delta.percentage_delta)})"


def _cells(delta: MetricDelta) -> list[str]:
    return [
        delta.name,
        _fmt_metric(delta.previous),
        _fmt_metric(delta.current),
        format_status(delta),
    ]


def render_text(deltas: Iterable[MetricDelta]) -> str:
    lines = [" | ".join(HEADER), " | ".join(["---"] * len(HEADER))]
    for delta in deltas:
        lines.append(" | ".join(_cells(delta)))
    return "\n".join(lines)


def render_markdown(deltas: Iterable[MetricDelta]) -> str:
    lines = [
        f"{REPORT_TITLE}\n",
        "<details><summary>Click to expand</summary>\n",
        "| " + " | ".join(HEADER) + " |",
        "| " + " | ".join(["---"] * len(HEADER)) + " |",
    ]
    for delta in deltas:
        lines.append("| " + " | ".join(_cells(delta)) + " |")
    lines.append("</details>\n\n")
    return "\n".join(lines)
