"""Replanning A* baseline ordered by the lexicographic, mode-dependent Cost."""
from __future__ import annotations

import heapq
import itertools
from typing import Dict, List, Optional, Tuple

from .cost import Cost, CostOrder, EvacuationMode
from .dstar_lite import NoGoalError, action_between
from .grid import Grid, Position
from .simulator import DynamicSolver, Move


def _exit_heuristic(exits: List[Position]):
    def estimate(pos: Position) -> Cost:
        h = min(pos.manhattan(exit_pos) for exit_pos in exits)
        # Each move costs at least one time unit and one distance unit.
        return Cost(0, h, h)

    return estimate


def astar_path(grid: Grid, start: Tuple[int, int], order: CostOrder) -> Tuple[List[Position], int]:
    """Cheapest path from ``start`` to the nearest exit under ``order``.

    Returns ``(path, expansions)``; the path is empty when no exit can be
    reached and is ``[start]`` when the start already is an exit.
    """

    exits = grid.exit_positions()
    start = Position(*start)
    if not exits or not grid.is_walkable(start):
        return [], 0
    estimate = _exit_heuristic(exits)
    tie = itertools.count()

    g_score: Dict[Position, Cost] = {start: Cost.zero()}
    came_from: Dict[Position, Position] = {}
    closed = set()
    open_heap = [(order.key(estimate(start)), next(tie), start)]
    expansions = 0

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if grid.is_exit(current):
            path = [current]
            while path[-1] in came_from:
                path.append(came_from[path[-1]])
            path.reverse()
            return path, expansions
        closed.add(current)
        expansions += 1

        for neighbour in grid.neighbors(current):
            if neighbour in closed:
                continue
            tentative = g_score[current] + grid.move_cost(neighbour)
            if neighbour not in g_score or order.less(tentative, g_score[neighbour]):
                g_score[neighbour] = tentative
                came_from[neighbour] = current
                heapq.heappush(open_heap, (order.key(tentative + estimate(neighbour)), next(tie), neighbour))
    return [], expansions


class DynamicAStarSolver(DynamicSolver):
    """Plans from scratch every tick under the mode assessed at that tick."""

    name = "DynamicAStarSim"

    def __init__(self, grid: Grid, **kwargs):
        super().__init__(grid, **kwargs)
        self.last_path: List[Position] = []

    def start(self, grid: Grid, agent: Position) -> None:
        if not grid.exit_positions():
            raise NoGoalError(f"Grid {grid.name!r} has no exit")

    def replan(self, grid: Grid, agent: Position, changed: List[Position]) -> None:
        # Every call to next_move searches from scratch already.
        self.last_path = []

    def next_move(self, grid: Grid, agent: Position, mode: EvacuationMode) -> Optional[Move]:
        path, expansions = astar_path(grid, agent, CostOrder(mode))
        self.expansions += expansions
        self.replans += 1
        self.last_path = path
        if len(path) < 2:
            return None
        nxt = path[1]
        return action_between(agent, nxt), nxt


__all__ = ["astar_path", "DynamicAStarSolver"]
