"""Threat assessment: derive the evacuation mode from the agent's surroundings."""
from __future__ import annotations

from typing import Tuple

from .cost import EvacuationMode
from .grid import Grid, Position

PANIC_DISTANCE = 1


def assess_mode(position: Tuple[int, int], grid: Grid) -> EvacuationMode:
    """Return PANIC, ALERT or NORMAL for an agent standing on ``position``.

    PANIC when any active fire is within Manhattan distance 1; otherwise
    ALERT when the agent is inside some fire's radius or an orthogonal
    neighbour carries heavy smoke; otherwise NORMAL.
    """

    pos = Position(*position)
    mode = EvacuationMode.NORMAL
    for fire in grid.active_fires:
        dist = fire.position.manhattan(pos)
        if dist <= PANIC_DISTANCE:
            return EvacuationMode.PANIC
        if dist <= fire.radius:
            mode = EvacuationMode.ALERT

    if mode is EvacuationMode.NORMAL:
        for neighbour in grid.neighbors(pos, walkable_only=False):
            if grid.smoke_intensity(neighbour) == "heavy":
                return EvacuationMode.ALERT
    return mode


__all__ = ["assess_mode", "PANIC_DISTANCE"]
