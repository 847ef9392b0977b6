"""Incremental D* Lite replanner over a mutable hazard grid.

Search runs backwards from the exits: ``g(v)`` estimates the cost of the
cheapest route from ``v`` to any exit and ``rhs(v)`` is the one-step
lookahead of that estimate. Edge weights are the scalar blend of the
multi-criteria move cost (see :meth:`Cost.scalar`), which keeps the
classic key arithmetic. Manhattan distance stays admissible and
consistent because the cheapest edge weighs 11.

The frontier is a binary heap with lazy deletion. Each queued vertex owns
a stamp in ``_queued``; removing a vertex forgets the stamp and any heap
entry whose stamp no longer matches is discarded when it surfaces.
"""
from __future__ import annotations

import heapq
import itertools
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .cost import INF
from .grid import DIRECTIONS, Grid, Position

Key = Tuple[float, float]
EMPTY_KEY: Key = (INF, INF)
# The heap is rebuilt from live entries once stale ones outnumber them this much.
COMPACT_FACTOR = 4
COMPACT_SLACK = 64


class NoGoalError(RuntimeError):
    """Raised when a replanner is initialized on a grid without exits."""


class Action(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    STAY = "STAY"


# Fixed enumeration order; ties go to the first move listed.
MOVES: Tuple[Tuple[Action, int, int], ...] = tuple(
    (action, dr, dc) for action, (dr, dc) in zip((Action.UP, Action.DOWN, Action.LEFT, Action.RIGHT), DIRECTIONS)
)


def action_between(current: Tuple[int, int], nxt: Tuple[int, int]) -> Action:
    delta = (nxt[0] - current[0], nxt[1] - current[1])
    for action, dr, dc in MOVES:
        if (dr, dc) == delta:
            return action
    return Action.STAY


@dataclass
class DStarNode:
    g: float = INF
    rhs: float = INF

    @property
    def consistent(self) -> bool:
        return self.g == self.rhs


def heuristic(a: Tuple[int, int], b: Tuple[int, int]) -> float:
    return float(abs(a[0] - b[0]) + abs(a[1] - b[1]))


def edge_cost(grid: Grid, target: Tuple[int, int]) -> float:
    """Scalar weight of the edge that enters ``target``."""

    return grid.move_cost(target).scalar()


class DStarLite:
    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.grid: Optional[Grid] = None
        self.start: Optional[Position] = None
        self.last_start: Optional[Position] = None
        self.goals: frozenset = frozenset()
        self.k_m = 0.0
        self._nodes: Dict[Position, DStarNode] = {}
        self._heap: List[Tuple[Key, int, Position]] = []
        self._queued: Dict[Position, int] = {}
        self._stamps = itertools.count()

    # ------------------------------------------------------------------ state

    def initialize(self, grid: Grid, start: Optional[Tuple[int, int]] = None, goal: Optional[Tuple[int, int]] = None) -> None:
        """Clear all search state and seed the frontier with the goal(s).

        Without an explicit ``goal`` every exit of ``grid`` is a goal.
        """

        self._reset()
        goals = [Position(*goal)] if goal is not None else grid.exit_positions()
        if not goals:
            raise NoGoalError(f"Grid {grid.name!r} has no exit")
        self.grid = grid
        self.start = Position(*start) if start is not None else grid.start_position()
        self.last_start = self.start
        self.goals = frozenset(goals)
        for target in goals:
            self._node(target).rhs = 0.0
            self._push(target)

    def _node(self, pos: Position) -> DStarNode:
        node = self._nodes.get(pos)
        if node is None:
            node = DStarNode()
            self._nodes[pos] = node
        return node

    def g(self, pos: Tuple[int, int]) -> float:
        node = self._nodes.get(Position(*pos))
        return node.g if node is not None else INF

    def rhs(self, pos: Tuple[int, int]) -> float:
        node = self._nodes.get(Position(*pos))
        return node.rhs if node is not None else INF

    def is_consistent(self, pos: Tuple[int, int]) -> bool:
        return self.g(pos) == self.rhs(pos)

    def values(self) -> Dict[Position, Tuple[float, float]]:
        """Materialized (g, rhs) pairs, for diagnostics and reports."""

        return {pos: (node.g, node.rhs) for pos, node in self._nodes.items()}

    def in_frontier(self, pos: Tuple[int, int]) -> bool:
        return Position(*pos) in self._queued

    @property
    def frontier_size(self) -> int:
        return len(self._queued)

    # --------------------------------------------------------------- frontier

    def calculate_key(self, pos: Tuple[int, int]) -> Key:
        best = min(self.g(pos), self.rhs(pos))
        return (best + heuristic(self.start, pos) + self.k_m, best)

    def _push(self, pos: Position) -> None:
        stamp = next(self._stamps)
        self._queued[pos] = stamp
        heapq.heappush(self._heap, (self.calculate_key(pos), stamp, pos))
        self._compact()

    def _discard(self, pos: Position) -> None:
        self._queued.pop(pos, None)

    def _compact(self) -> None:
        if len(self._heap) <= COMPACT_FACTOR * len(self._queued) + COMPACT_SLACK:
            return
        self._heap = [entry for entry in self._heap if self._queued.get(entry[2]) == entry[1]]
        heapq.heapify(self._heap)

    def _peek(self) -> Optional[Tuple[Key, int, Position]]:
        heap = self._heap
        while heap and self._queued.get(heap[0][2]) != heap[0][1]:
            heapq.heappop(heap)
        return heap[0] if heap else None

    def top_key(self) -> Key:
        top = self._peek()
        return top[0] if top is not None else EMPTY_KEY

    # ------------------------------------------------------------------ search

    def update_vertex(self, pos: Tuple[int, int]) -> None:
        grid = self.grid
        pos = Position(*pos)
        if not grid.in_bounds(pos):
            return
        if pos not in self.goals:
            if not grid.is_walkable(pos):
                best = INF
            else:
                best = INF
                for succ in grid.neighbors(pos):
                    candidate = self.g(succ) + edge_cost(grid, succ)
                    if candidate < best:
                        best = candidate
            if best != self.rhs(pos):
                self._node(pos).rhs = best
        self._discard(pos)
        if self.g(pos) != self.rhs(pos):
            self._push(pos)

    def compute_shortest_path(self, trace: Optional[List[Key]] = None) -> int:
        """Restore local consistency around the start vertex.

        Returns the number of frontier pops. When ``trace`` is given every
        popped key is appended to it. Never raises for an unreachable goal;
        ``g(start)`` is simply left infinite.
        """

        if self.grid is None:
            raise RuntimeError("compute_shortest_path() called before initialize()")
        grid = self.grid
        pops = 0
        while True:
            top = self._peek()
            if top is None:
                break
            start_key = self.calculate_key(self.start)
            if not top[0] < start_key and self.is_consistent(self.start):
                break
            k_old, _, u = heapq.heappop(self._heap)
            del self._queued[u]
            self._compact()
            pops += 1
            if trace is not None:
                trace.append(k_old)

            k_new = self.calculate_key(u)
            node = self._node(u)
            if k_old < k_new:
                self._push(u)
            elif node.g > node.rhs:
                node.g = node.rhs
                for pred in grid.neighbors(u):
                    self.update_vertex(pred)
            else:
                node.g = INF
                self.update_vertex(u)
                for pred in grid.neighbors(u):
                    self.update_vertex(pred)
        return pops

    # ------------------------------------------------------------- movement

    def step(self) -> Tuple[Action, Position]:
        """Pick the neighbour minimizing ``g + edge cost`` from the start.

        Returns ``(Action.STAY, start)`` when no neighbour offers a finite
        route.
        """

        grid = self.grid
        best = INF
        choice: Tuple[Action, Position] = (Action.STAY, self.start)
        for action, dr, dc in MOVES:
            nxt = self.start.shifted(dr, dc)
            if not grid.is_walkable(nxt):
                continue
            candidate = self.g(nxt) + edge_cost(grid, nxt)
            if candidate < best:
                best = candidate
                choice = (action, nxt)
        return choice

    def move_to(self, pos: Tuple[int, int]) -> None:
        self.start = Position(*pos)

    def notify_edge_costs_changed(self, changed: Iterable[Tuple[int, int]], trace: Optional[List[Key]] = None) -> int:
        """Repair the estimates after the costs of ``changed`` cells moved.

        ``k_m`` grows by the heuristic distance the start travelled since the
        previous repair, once per call. Every changed cell and its walkable
        neighbours are re-evaluated once before the search resumes.
        """

        changed = [Position(*pos) for pos in changed]
        if not changed:
            return 0
        self.k_m += heuristic(self.last_start, self.start)
        self.last_start = self.start

        touched = set()
        for pos in changed:
            for vertex in [pos] + self.grid.neighbors(pos):
                if vertex not in touched:
                    touched.add(vertex)
                    self.update_vertex(vertex)
        return self.compute_shortest_path(trace=trace)

    def extract_path(self, limit: Optional[int] = None) -> List[Position]:
        """Follow the greedy successor chain from the start to an exit."""

        path = [self.start]
        if self.start is None or math.isinf(self.g(self.start)):
            return path
        limit = limit if limit is not None else self.grid.rows * self.grid.cols
        current = self.start
        seen = {current}
        for _ in range(limit):
            if current in self.goals:
                break
            best = INF
            nxt = None
            for succ in self.grid.neighbors(current):
                candidate = self.g(succ) + edge_cost(self.grid, succ)
                if candidate < best:
                    best, nxt = candidate, succ
            if nxt is None or nxt in seen:
                break
            path.append(nxt)
            seen.add(nxt)
            current = nxt
        return path


__all__ = [
    "Action",
    "DStarLite",
    "DStarNode",
    "EMPTY_KEY",
    "Key",
    "MOVES",
    "NoGoalError",
    "action_between",
    "edge_cost",
    "heuristic",
]
