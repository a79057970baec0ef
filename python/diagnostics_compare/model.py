from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Union


class Unit(Enum):
    SECONDS = "s"
    KILO = "K"
    NONE = ""

    @property
    def suffix(self) -> str:
        return self.value


class Status(Enum):
    UNCHANGED = "unchanged"
    INCREASED = "increased"
    DECREASED = "decreased"


Number = Union[int, float]


@dataclass(frozen=True)
class Metric:
    name: str
    value: Number
    unit: Unit = Unit.NONE


# Read-only view over an insertion-ordered dict; order drives report order.
MetricSnapshot = Mapping[str, Metric]


@dataclass(frozen=True)
class MetricDelta:
    name: str
    previous: Metric
    current: Metric
    absolute_delta: Number
    percentage_delta: float
    status: Status
