from __future__ import annotations

import logging
import re
from types import MappingProxyType

from .model import Metric, MetricSnapshot, Number, Unit

logger = logging.getLogger(__name__)

_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"[+-]?\d+")


def _leading_float(raw: str) -> float:
    match = _FLOAT_PREFIX.match(raw.lstrip())
    if match is None:
        return float("nan")
    return float(match.group(0))


def _leading_int(raw: str) -> Number:
    match = _INT_PREFIX.match(raw.lstrip())
    if match is None:
        return float("nan")
    try:
        return int(match.group(0))
    except ValueError:
        # Longer than the interpreter allows for str-to-int conversion.
        return float("nan")


def parse_value(raw: str) -> tuple[Number, Unit]:
    """Parse the right-hand side of a diagnostic line.

    Only the leading numeric part of the value is read, so ``"1.5"`` parsed
    as an integer is ``1``. A value with no numeric prefix becomes NaN.
    """
    if raw.endswith(Unit.SECONDS.suffix):
        return _leading_float(raw[: -len(Unit.SECONDS.suffix)]), Unit.SECONDS
    if raw.endswith(Unit.KILO.suffix):
        return _leading_int(raw[: -len(Unit.KILO.suffix)]), Unit.KILO
    return _leading_int(raw), Unit.NONE


def parse_diagnostics(text: str) -> MetricSnapshot:
    metrics: dict[str, Metric] = {}
    for line in text.split("\n"):
        parts = line.split(":")
        # Headers, blank lines and timestamps (several colons) are not metrics.
        if len(parts) != 2:
            continue
        name = parts[0].strip()
        value, unit = parse_value(parts[1].strip())
        metrics[name] = Metric(name=name, value=value, unit=unit)
    logger.debug("parsed %d metrics: %s", len(metrics), ", ".join(metrics))
    return MappingProxyType(metrics)
