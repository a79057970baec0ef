from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path
from typing import Iterable

from .formatting import render_markdown, render_text
from .model import Metric, MetricDelta, MetricSnapshot, Number, Status, Unit
from .parse import parse_diagnostics

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_MS = 300
THRESHOLD_KEYWORD = "time"


def is_threshold_eligible(name: str) -> bool:
    return THRESHOLD_KEYWORD in name.lower()


def percentage_change(delta: Number, current: Number) -> float:
    if current == 0:
        return 0.0
    try:
        pct = (delta / current) * 100
    except OverflowError:
        return 0.0
    if not math.isfinite(pct):
        return 0.0
    return float(pct)


def _difference(current: Number, previous: Number) -> Number:
    try:
        return current - previous
    except OverflowError:
        # An int too large for a float met a float operand.
        return float("nan")


def classify_change(name: str, delta: Number, threshold_ms: float) -> Status:
    if delta == 0:
        return Status.UNCHANGED
    # Deltas are seconds, the threshold is milliseconds.
    if is_threshold_eligible(name) and abs(delta) * 1000 <= threshold_ms:
        return Status.UNCHANGED
    if delta > 0:
        return Status.INCREASED
    return Status.DECREASED


def classify(
    previous: MetricSnapshot,
    current: MetricSnapshot,
    threshold_ms: float = DEFAULT_THRESHOLD_MS,
) -> list[MetricDelta]:
    deltas: list[MetricDelta] = []
    for name, cur in current.items():
        prev = previous.get(name) or Metric(name=name, value=0, unit=Unit.NONE)
        delta = _difference(cur.value, prev.value)
        deltas.append(
            MetricDelta(
                name=name,
                previous=prev,
                current=cur,
                absolute_delta=delta,
                percentage_delta=percentage_change(delta, cur.value),
                status=classify_change(name, delta, threshold_ms),
            )
        )
    return deltas


def has_regressions(deltas: Iterable[MetricDelta]) -> bool:
    return any(delta.status is Status.INCREASED for delta in deltas)


def compare_diagnostics(
    previous_text: str,
    current_text: str,
    threshold_ms: float = DEFAULT_THRESHOLD_MS,
) -> str:
    previous = parse_diagnostics(previous_text)
    current = parse_diagnostics(current_text)
    return render_markdown(classify(previous, current, threshold_ms))


def _load(path: Path) -> MetricSnapshot:
    return parse_diagnostics(path.read_text(encoding="utf-8"))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compare two compiler diagnostics outputs")
    parser.add_argument("previous", type=Path)
    parser.add_argument("current", type=Path)
    parser.add_argument("--threshold-ms", type=float, default=DEFAULT_THRESHOLD_MS)
    parser.add_argument("--format", choices=["text", "markdown"], default="markdown")
    parser.add_argument("--fail-on-increase", action="store_true")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    deltas = classify(_load(args.previous), _load(args.current), threshold_ms=args.threshold_ms)
    output = render_markdown(deltas) if args.format == "markdown" else render_text(deltas)
    print(output)

    if args.fail_on_increase and has_regressions(deltas):
        logger.error("one or more metrics increased beyond tolerance")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
