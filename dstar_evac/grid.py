"""Mutable hazard grid consumed by the evacuation planners."""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

import numpy as np

from .cost import Cost


class ConfigurationError(ValueError):
    """Raised when a scenario description cannot be turned into a Grid."""


class CellType(IntEnum):
    EMPTY = 0
    WALL = 1
    START = 2
    EXIT = 3
    SMOKE = 4
    FIRE = 5


class Position(NamedTuple):
    row: int
    col: int

    def shifted(self, dr: int, dc: int) -> "Position":
        return Position(self.row + dr, self.col + dc)

    def manhattan(self, other: Tuple[int, int]) -> int:
        return abs(self.row - other[0]) + abs(self.col - other[1])


# UP, DOWN, LEFT, RIGHT
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

FIRE_RADIUS: Dict[str, int] = {"small": 1, "medium": 2, "large": 3}
SMOKE_INTENSITIES = ("light", "heavy")
HAZARD_TYPES = ("fire", "smoke", "path_block")

BASE_COST = Cost(0, 1, 1)
SMOKE_COST: Dict[str, Cost] = {"light": Cost(5, 2, 1), "heavy": Cost(25, 4, 1)}
# Indexed by Manhattan distance to the fire source.
FIRE_COST: Tuple[Cost, ...] = (
    Cost(1000, 100, 1),
    Cost(50, 10, 1),
    Cost(25, 5, 1),
    Cost(10, 2, 1),
)

PositionLike = Union[Position, Tuple[int, int], Mapping[str, Any]]


def to_position(value: PositionLike) -> Position:
    """Accept ``Position``, ``(row, col)`` or ``{"row": r, "col": c}``."""

    try:
        if isinstance(value, Mapping):
            return Position(int(value["row"]), int(value["col"]))
        row, col = value
        return Position(int(row), int(col))
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid position: {value!r}") from exc


def _component_max(*costs: Cost) -> Cost:
    return Cost(
        max(c.smoke for c in costs),
        max(c.time for c in costs),
        max(c.distance for c in costs),
    )


@dataclass(frozen=True)
class FireSource:
    position: Position
    size: str
    radius: int


@dataclass(frozen=True)
class HazardEvent:
    type: str
    time_step: int
    position: Position
    size: Optional[str] = None
    intensity: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HazardEvent":
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Hazard event must be an object, got {data!r}")
        if "type" not in data:
            raise ConfigurationError(f"Hazard event without type: {dict(data)!r}")
        event_type = data["type"]
        if event_type not in HAZARD_TYPES:
            raise ConfigurationError(f"Unknown hazard type: {event_type!r}")
        if "position" not in data:
            raise ConfigurationError(f"Hazard event without position: {dict(data)!r}")
        try:
            time_step = int(data.get("time_step", 0))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid time_step in {dict(data)!r}") from exc
        size = data.get("size")
        if event_type == "fire":
            size = size or "small"
            if size not in FIRE_RADIUS:
                raise ConfigurationError(f"Unknown fire size: {size!r}")
        intensity = data.get("intensity")
        if event_type == "smoke":
            intensity = intensity or "light"
            if intensity not in SMOKE_INTENSITIES:
                raise ConfigurationError(f"Unknown smoke intensity: {intensity!r}")
        return cls(
            type=event_type,
            time_step=time_step,
            position=to_position(data["position"]),
            size=size,
            intensity=intensity,
        )

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "time_step": self.time_step,
            "position": {"row": self.position.row, "col": self.position.col},
        }
        if self.size is not None:
            data["size"] = self.size
        if self.intensity is not None:
            data["intensity"] = self.intensity
        return data


class Grid:
    """Rows x cols cell map with smoke intensities and active fires.

    Queries never raise on out-of-bounds positions: such cells read as
    walls with infinite move cost. Hazards are only ever added.
    """

    def __init__(self, config: Mapping[str, Any]):
        if not isinstance(config, Mapping):
            raise ConfigurationError("Grid configuration must be a mapping")
        self._config: Dict[str, Any] = dict(config)
        try:
            self.name = str(config.get("name", "grid"))
            self.rows = int(config["rows"])
            self.cols = int(config["cols"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Failed to parse grid config: {exc}") from exc
        if self.rows <= 0 or self.cols <= 0:
            raise ConfigurationError(f"Grid dimensions must be positive, got {self.rows}x{self.cols}")
        if "start" not in config:
            raise ConfigurationError("Grid config requires a start position")

        self._cells = np.full((self.rows, self.cols), CellType.EMPTY, dtype=np.int8)
        self._smoke: Dict[Position, str] = {}
        self._fires: List[FireSource] = []
        self._exits: List[Position] = []

        for raw in self._listed(config, "walls"):
            pos = self._checked(raw, "wall")
            self._cells[pos.row, pos.col] = CellType.WALL

        for raw in self._listed(config, "smoke"):
            pos = self._checked(raw, "smoke")
            if self._cells[pos.row, pos.col] == CellType.WALL:
                raise ConfigurationError(f"Smoke placed on a wall at {tuple(pos)}")
            intensity = raw.get("intensity", "light") if isinstance(raw, Mapping) else "light"
            if intensity not in SMOKE_INTENSITIES:
                raise ConfigurationError(f"Unknown smoke intensity: {intensity!r}")
            self._cells[pos.row, pos.col] = CellType.SMOKE
            self._smoke[pos] = intensity

        for raw in self._listed(config, "exits"):
            pos = self._checked(raw, "exit")
            if self._cells[pos.row, pos.col] == CellType.WALL:
                raise ConfigurationError(f"Exit placed on a wall at {tuple(pos)}")
            self._cells[pos.row, pos.col] = CellType.EXIT
            if pos not in self._exits:
                self._exits.append(pos)

        self._start = self._checked(config["start"], "start")
        if self._cells[self._start.row, self._start.col] == CellType.WALL:
            raise ConfigurationError(f"Start placed on a wall at {tuple(self._start)}")
        if self._cells[self._start.row, self._start.col] != CellType.EXIT:
            self._cells[self._start.row, self._start.col] = CellType.START

        self._events = [HazardEvent.from_dict(event) for event in self._listed(config, "dynamic_events")]

    @staticmethod
    def _listed(config: Mapping[str, Any], key: str) -> List[Any]:
        value = config.get(key)
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise ConfigurationError(f"{key} must be a list, got {type(value).__name__}")
        return list(value)

    def _checked(self, raw: PositionLike, label: str) -> Position:
        pos = to_position(raw)
        if not self.in_bounds(pos):
            raise ConfigurationError(f"{label} position {tuple(pos)} outside {self.rows}x{self.cols} grid")
        return pos

    # ------------------------------------------------------------------ queries

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @property
    def active_fires(self) -> Tuple[FireSource, ...]:
        return tuple(self._fires)

    def start_position(self) -> Position:
        return self._start

    def exit_positions(self) -> List[Position]:
        return list(self._exits)

    def dynamic_events(self) -> List[HazardEvent]:
        return list(self._events)

    def in_bounds(self, pos: Tuple[int, int]) -> bool:
        return 0 <= pos[0] < self.rows and 0 <= pos[1] < self.cols

    def cell_type(self, pos: Tuple[int, int]) -> CellType:
        if not self.in_bounds(pos):
            return CellType.WALL
        return CellType(int(self._cells[pos[0], pos[1]]))

    def is_walkable(self, pos: Tuple[int, int]) -> bool:
        return self.cell_type(pos) != CellType.WALL

    def is_exit(self, pos: Tuple[int, int]) -> bool:
        return self.cell_type(pos) == CellType.EXIT

    def smoke_intensity(self, pos: Tuple[int, int]) -> Optional[str]:
        return self._smoke.get(Position(*pos))

    def neighbors(self, pos: Tuple[int, int], walkable_only: bool = True) -> List[Position]:
        """4-connected neighbours in UP, DOWN, LEFT, RIGHT order."""

        origin = Position(*pos)
        result = []
        for dr, dc in DIRECTIONS:
            nxt = origin.shifted(dr, dc)
            if not self.in_bounds(nxt):
                continue
            if walkable_only and not self.is_walkable(nxt):
                continue
            result.append(nxt)
        return result

    def fire_distance(self, pos: Tuple[int, int]) -> Optional[int]:
        """Distance to the nearest fire whose radius covers ``pos``."""

        best: Optional[int] = None
        for fire in self._fires:
            dist = fire.position.manhattan(pos)
            if dist <= fire.radius and (best is None or dist < best):
                best = dist
        return best

    def move_cost(self, pos: Tuple[int, int]) -> Cost:
        """Cost of entering ``pos``; recomputed on every call."""

        if not self.is_walkable(pos):
            return Cost.infinite()
        parts = [BASE_COST]
        intensity = self._smoke.get(Position(*pos))
        if intensity is not None:
            parts.append(SMOKE_COST[intensity])
        dist = self.fire_distance(pos)
        if dist is not None:
            parts.append(FIRE_COST[min(dist, len(FIRE_COST) - 1)])
        if len(parts) == 1:
            return BASE_COST
        return _component_max(*parts)

    # ---------------------------------------------------------------- mutation

    def add_hazard(self, event: Union[HazardEvent, Mapping[str, Any]]) -> List[Position]:
        """Inject ``event`` and return the positions whose cost changed."""

        if not isinstance(event, HazardEvent):
            event = HazardEvent.from_dict(event)
        pos = event.position
        if not self.in_bounds(pos) or self._cells[pos.row, pos.col] == CellType.WALL:
            return []

        if event.type == "fire":
            radius = FIRE_RADIUS[event.size or "small"]
            if self._cells[pos.row, pos.col] != CellType.EXIT:
                self._cells[pos.row, pos.col] = CellType.FIRE
            self._fires.append(FireSource(position=pos, size=event.size or "small", radius=radius))
            return self._within(pos, radius)

        if event.type == "smoke":
            current = self._smoke.get(pos)
            intensity = event.intensity or "light"
            changed = False
            if current is None or (current == "light" and intensity == "heavy"):
                self._smoke[pos] = intensity
                changed = True
            if self._cells[pos.row, pos.col] in (CellType.EMPTY, CellType.START):
                self._cells[pos.row, pos.col] = CellType.SMOKE
                changed = True
            return [pos] if changed else []

        # path_block
        if self._cells[pos.row, pos.col] == CellType.EXIT:
            return []
        self._cells[pos.row, pos.col] = CellType.WALL
        return [pos]

    def _within(self, centre: Position, radius: int) -> List[Position]:
        cells = []
        for r in range(centre.row - radius, centre.row + radius + 1):
            span = radius - abs(r - centre.row)
            for c in range(centre.col - span, centre.col + span + 1):
                if self.in_bounds((r, c)):
                    cells.append(Position(r, c))
        return cells

    # ------------------------------------------------------------------ copies

    def snapshot(self) -> np.ndarray:
        return self._cells.copy()

    def copy(self) -> "Grid":
        clone = Grid.__new__(Grid)
        clone._config = self._config
        clone.name = self.name
        clone.rows = self.rows
        clone.cols = self.cols
        clone._cells = self._cells.copy()
        clone._smoke = dict(self._smoke)
        clone._fires = list(self._fires)
        clone._exits = list(self._exits)
        clone._start = self._start
        clone._events = list(self._events)
        return clone

    def __repr__(self) -> str:
        return f"Grid(name={self.name!r}, rows={self.rows}, cols={self.cols}, fires={len(self._fires)})"


__all__ = [
    "ConfigurationError",
    "CellType",
    "Position",
    "DIRECTIONS",
    "FIRE_RADIUS",
    "BASE_COST",
    "SMOKE_COST",
    "FIRE_COST",
    "FireSource",
    "HazardEvent",
    "Grid",
    "to_position",
]
