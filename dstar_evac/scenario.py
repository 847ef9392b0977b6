"""Scenario loading and synthetic scenario generation."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import numpy as np

from .config import Config
from .grid import ConfigurationError

Cell = Tuple[int, int]

FIRE_SPREAD_INTERVAL = 4
_SPREAD_STEPS = {"small": 1, "medium": 2, "large": 3}


def _cell(row: int, col: int) -> Dict[str, int]:
    return {"row": int(row), "col": int(col)}


def load_scenario(path: str) -> Dict[str, Any]:
    """Load a JSON scenario description."""

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Scenario file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Scenario file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Scenario file {path} must contain a JSON object")
    data.setdefault("name", Path(path).stem)
    return data


def _spreading_fire(origin: Cell, start_time: int, size: str, grid_size: int) -> List[Dict[str, Any]]:
    events = [{"type": "fire", "time_step": start_time, "position": _cell(*origin), "size": size}]
    row, col = origin
    for step in range(1, _SPREAD_STEPS[size] + 1):
        time_step = start_time + step * FIRE_SPREAD_INTERVAL
        for r, c in ((row - step, col), (row + step, col), (row, col - step), (row, col + step)):
            if 0 <= r < grid_size and 0 <= c < grid_size:
                events.append({"type": "fire", "time_step": time_step, "position": _cell(r, c), "size": "small"})
    return events


def _random_cells(rng: np.random.Generator, size: int, count: int, forbidden: Set[Cell]) -> List[Cell]:
    cells: List[Cell] = []
    seen: Set[Cell] = set()
    for _ in range(count):
        r, c = (int(v) for v in rng.integers(0, size, size=2))
        if (r, c) in forbidden or (r, c) in seen:
            continue
        seen.add((r, c))
        cells.append((r, c))
    return cells


def generate_scenario(size: int, name: Optional[str] = None, seed: Optional[int] = None) -> Dict[str, Any]:
    """Build a square scenario with walls, smoke, spreading fires and path blocks.

    Start sits at (1, 1) and the primary exit at (size-2, size-2); larger grids
    get extra exits on the top and left borders. A medium fire ignites near
    the middle of the start-exit diagonal a third of the way into the
    nominal trip and spreads every few ticks.
    """

    if size < 3:
        raise ConfigurationError(f"Scenario size must be at least 3, got {size}")
    rng = np.random.default_rng(seed)
    start = (1, 1)
    exits = [(size - 2, size - 2)]
    if size > 10:
        exits.append((0, size // 2))
    if size > 20:
        exits.append((size // 2, 0))
    reserved = {start, *exits}

    walls = _random_cells(rng, size, (size * size) // 5, reserved)
    wall_set = set(walls)
    smoke_cells = _random_cells(rng, size, (size * size) // 20, reserved | wall_set)
    smoke = [
        {**_cell(r, c), "intensity": "heavy" if rng.integers(0, 5) == 0 else "light"}
        for r, c in smoke_cells
    ]

    trip = abs(start[0] - exits[0][0]) + abs(start[1] - exits[0][1])
    events: List[Dict[str, Any]] = []
    events += _spreading_fire((start[0] + trip // 4, start[1] + trip // 4), trip // 3, "medium", size)
    if size > 12:
        events += _spreading_fire((size - 3, 3), trip // 2, "small", size)
    if size > 10:
        block = (start[0] + trip // 8, start[1] + trip // 8)
        events.append({"type": "path_block", "time_step": trip // 2, "position": _cell(*block)})
    if size > 20:
        events.append({"type": "path_block", "time_step": trip, "position": _cell(size - 4, 4)})

    return {
        "name": name or f"{size}x{size}",
        "rows": size,
        "cols": size,
        "start": _cell(*start),
        "exits": [_cell(*e) for e in exits],
        "walls": [_cell(*w) for w in walls],
        "smoke": smoke,
        "dynamic_events": events,
    }


def build_scenarios(config: Config) -> List[Dict[str, Any]]:
    """Scenarios selected by ``config``: one file, or one generated grid per size."""

    if config.scenario_path:
        return [load_scenario(config.scenario_path)]
    return [
        generate_scenario(size, name=f"{size}x{size}", seed=config.seed + idx)
        for idx, size in enumerate(config.grid_sizes)
    ]


__all__ = ["load_scenario", "generate_scenario", "build_scenarios", "FIRE_SPREAD_INTERVAL"]
