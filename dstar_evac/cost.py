"""Multi-criteria evacuation cost and its mode-dependent ordering."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Dict, Iterable, List, Tuple, Union

INF = math.inf

# Weights used to collapse a Cost into one number (replanner edges, summaries).
SMOKE_WEIGHT = 1000
TIME_WEIGHT = 10
DISTANCE_WEIGHT = 1

Number = Union[int, float]


class EvacuationMode(str, Enum):
    NORMAL = "NORMAL"
    ALERT = "ALERT"
    PANIC = "PANIC"


@dataclass(frozen=True)
class Cost:
    """Accumulated (smoke, time, distance) exposure.

    A component equal to ``inf`` marks the whole cost as unreachable. The
    class deliberately has no ``<``: use :class:`CostOrder` so the current
    evacuation mode is always explicit.
    """

    smoke: Number = 0
    time: Number = 0
    distance: Number = 0

    @classmethod
    def zero(cls) -> "Cost":
        return cls(0, 0, 0)

    @classmethod
    def infinite(cls) -> "Cost":
        return cls(INF, INF, INF)

    @property
    def is_infinite(self) -> bool:
        return math.isinf(self.smoke) or math.isinf(self.time) or math.isinf(self.distance)

    def __add__(self, other: "Cost") -> "Cost":
        if not isinstance(other, Cost):
            return NotImplemented
        if self.is_infinite or other.is_infinite:
            return Cost.infinite()
        return Cost(self.smoke + other.smoke, self.time + other.time, self.distance + other.distance)

    def scalar(self) -> float:
        if self.is_infinite:
            return INF
        return float(self.smoke * SMOKE_WEIGHT + self.time * TIME_WEIGHT + self.distance * DISTANCE_WEIGHT)

    def as_dict(self) -> Dict[str, Union[Number, str]]:
        if self.is_infinite:
            return {"smoke": "inf", "time": "inf", "distance": "inf"}
        return {"smoke": self.smoke, "time": self.time, "distance": self.distance}

    def __str__(self) -> str:
        if self.is_infinite:
            return "[S:INF, T:INF, D:INF]"
        return f"[S:{self.smoke}, T:{self.time}, D:{self.distance}]"


_FIELD_ORDER: Dict[EvacuationMode, Tuple[str, str, str]] = {
    EvacuationMode.NORMAL: ("time", "distance", "smoke"),
    EvacuationMode.ALERT: ("smoke", "time", "distance"),
    EvacuationMode.PANIC: ("smoke", "time", "distance"),
}


@dataclass(frozen=True)
class CostOrder:
    """Lexicographic comparator for :class:`Cost` under a fixed mode.

    Build one per planning step and pass it to whatever needs to rank
    costs; the ordering is total only within that mode.
    """

    mode: EvacuationMode = EvacuationMode.NORMAL

    def key(self, cost: Cost) -> Tuple[Number, Number, Number]:
        return tuple(getattr(cost, name) for name in _FIELD_ORDER[self.mode])  # type: ignore[return-value]

    def compare(self, a: Cost, b: Cost) -> int:
        ka, kb = self.key(a), self.key(b)
        if ka < kb:
            return -1
        if ka > kb:
            return 1
        return 0

    def less(self, a: Cost, b: Cost) -> bool:
        return self.key(a) < self.key(b)

    def min(self, costs: Iterable[Cost]) -> Cost:
        return min(costs, key=self.key)

    def sorted(self, costs: Iterable[Cost]) -> List[Cost]:
        return sorted(costs, key=cmp_to_key(self.compare))


__all__ = [
    "INF",
    "SMOKE_WEIGHT",
    "TIME_WEIGHT",
    "DISTANCE_WEIGHT",
    "EvacuationMode",
    "Cost",
    "CostOrder",
]
