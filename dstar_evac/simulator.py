"""Step-synchronous evacuation driver shared by the dynamic planners."""
from __future__ import annotations

import math
import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from .assessment import assess_mode
from .cost import Cost, EvacuationMode
from .dstar_lite import Action, DStarLite, NoGoalError
from .grid import Grid, HazardEvent, Position
from .logger import SimulationLogger


class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE_NO_GOAL = "FAILURE_NO_GOAL"
    FAILURE_NO_PATH = "FAILURE_NO_PATH"
    FAILURE_TIMEOUT = "FAILURE_TIMEOUT"

    @property
    def failed(self) -> bool:
        return self is not Outcome.SUCCESS


class HazardSchedule:
    """Hazard events bucketed by the tick on which they fire."""

    def __init__(self, events: Iterable[Union[HazardEvent, Mapping[str, Any]]] = ()):
        self._buckets: Dict[int, List[HazardEvent]] = defaultdict(list)
        for event in events:
            if not isinstance(event, HazardEvent):
                event = HazardEvent.from_dict(event)
            self._buckets[event.time_step].append(event)

    def events_at(self, time_step: int) -> List[HazardEvent]:
        return list(self._buckets.get(time_step, ()))

    @property
    def horizon(self) -> int:
        return max(self._buckets) if self._buckets else -1

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())


@dataclass
class StepRecord:
    time_step: int
    grid_state: np.ndarray
    agent_pos: Position
    action: str
    total_cost: Cost
    mode: EvacuationMode

    def as_dict(self, include_grid: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "time_step": self.time_step,
            "row": self.agent_pos.row,
            "col": self.agent_pos.col,
            "action": self.action,
            "total_cost": self.total_cost.as_dict(),
            "mode": self.mode.value,
        }
        if include_grid:
            data["grid"] = self.grid_state.tolist()
        return data


@dataclass
class RunResult:
    planner: str
    scenario: str
    outcome: Outcome
    total_cost: Cost
    history: List[StepRecord] = field(default_factory=list)
    runtime_ms: float = 0.0
    replans: int = 0
    expansions: int = 0

    @property
    def succeeded(self) -> bool:
        return not self.outcome.failed

    @property
    def weighted_cost(self) -> float:
        return self.total_cost.scalar()

    @property
    def steps(self) -> int:
        return sum(1 for record in self.history if record.action in _MOVE_LABELS)

    @property
    def path(self) -> List[Position]:
        return [record.agent_pos for record in self.history]

    def summary(self) -> Dict[str, Any]:
        weighted = self.weighted_cost
        return {
            "scenario": self.scenario,
            "planner": self.planner,
            "outcome": self.outcome.value,
            "cost": self.total_cost.as_dict(),
            "weighted_cost": "inf" if math.isinf(weighted) else weighted,
            "steps": self.steps,
            "replans": self.replans,
            "expansions": self.expansions,
            "runtime_ms": round(self.runtime_ms, 3),
        }


_MOVE_LABELS = {Action.UP.value, Action.DOWN.value, Action.LEFT.value, Action.RIGHT.value}

Move = Tuple[Action, Position]


class DynamicSolver:
    """Template for planners driven tick by tick over a changing grid.

    Subclasses implement :meth:`start`, :meth:`replan` and :meth:`next_move`;
    :meth:`run` owns hazard injection, mode assessment, cost accounting and
    the terminal outcomes. Each run works on its own copy of the grid.
    """

    name = "DynamicSolver"

    def __init__(
        self,
        grid: Grid,
        max_steps: Optional[int] = None,
        step_budget_factor: int = 2,
        logger: Optional[SimulationLogger] = None,
        verbose: bool = False,
        log_every: int = 50,
    ):
        self.grid = grid
        self.max_steps = max_steps
        self.step_budget_factor = step_budget_factor
        self.logger = logger
        self.verbose = verbose
        self.log_every = max(1, log_every)
        self.replans = 0
        self.expansions = 0
        self._history: List[StepRecord] = []
        self._total_cost = Cost.zero()
        self._result: Optional[RunResult] = None

    # ------------------------------------------------------------------ hooks

    def start(self, grid: Grid, agent: Position) -> None:
        raise NotImplementedError

    def replan(self, grid: Grid, agent: Position, changed: List[Position]) -> None:
        raise NotImplementedError

    def next_move(self, grid: Grid, agent: Position, mode: EvacuationMode) -> Optional[Move]:
        """Return the chosen move, or ``None`` when no route to an exit exists."""

        raise NotImplementedError

    def moved(self, agent: Position) -> None:
        pass

    def reached(self, grid: Grid, agent: Position) -> bool:
        return grid.is_exit(agent)

    # ------------------------------------------------------------------- loop

    @property
    def label(self) -> str:
        return f"{self.name}:{self.grid.name}"

    @property
    def history(self) -> List[StepRecord]:
        return self._history

    def step_budget(self) -> int:
        if self.max_steps is not None:
            return self.max_steps
        return self.step_budget_factor * self.grid.rows * self.grid.cols

    def get_evacuation_cost(self) -> Cost:
        return self._total_cost

    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"[dstar] {self.label} | {message}", flush=True)

    def _apply_hazards(self, grid: Grid, events: List[HazardEvent], agent: Position) -> List[Position]:
        changed: List[Position] = []
        seen = set()
        for event in events:
            if event.type == "path_block" and event.position == agent:
                self._log(f"skip path_block on occupied cell {tuple(agent)}")
                continue
            for pos in grid.add_hazard(event):
                if pos not in seen:
                    seen.add(pos)
                    changed.append(pos)
        return changed

    def run(self) -> RunResult:
        grid = self.grid.copy()
        schedule = HazardSchedule(grid.dynamic_events())
        agent = grid.start_position()
        total = Cost.zero()
        history: List[StepRecord] = []
        outcome: Optional[Outcome] = None
        self.replans = 0
        self.expansions = 0
        budget = self.step_budget()
        began = time.perf_counter()

        for t in range(budget):
            changed = self._apply_hazards(grid, schedule.events_at(t), agent)
            if t == 0:
                try:
                    self.start(grid, agent)
                except NoGoalError as exc:
                    self._log(str(exc))
                    history.append(
                        StepRecord(t, grid.snapshot(), agent, Outcome.FAILURE_NO_GOAL.value, total, assess_mode(agent, grid))
                    )
                    outcome = Outcome.FAILURE_NO_GOAL
                    break
            elif changed:
                self.replan(grid, agent, changed)

            mode = assess_mode(agent, grid)
            record = StepRecord(t, grid.snapshot(), agent, "...", total, mode)
            history.append(record)

            if self.reached(grid, agent):
                record.action = Outcome.SUCCESS.value
                outcome = Outcome.SUCCESS
                break

            move = self.next_move(grid, agent, mode)
            if move is None:
                record.action = Outcome.FAILURE_NO_PATH.value
                outcome = Outcome.FAILURE_NO_PATH
                break

            action, nxt = move
            record.action = action.value
            if action is not Action.STAY:
                total = total + grid.move_cost(nxt)
                agent = nxt
                self.moved(agent)

            if t % self.log_every == 0:
                self._log(f"t={t:4d} | pos={tuple(agent)} | mode={mode.value} | cost={total}")

        if outcome is None:
            history.append(
                StepRecord(budget, grid.snapshot(), agent, Outcome.FAILURE_TIMEOUT.value, total, assess_mode(agent, grid))
            )
            outcome = Outcome.FAILURE_TIMEOUT

        if outcome.failed:
            total = Cost.infinite()

        self._history = history
        self._total_cost = total
        self._result = RunResult(
            planner=self.name,
            scenario=grid.name,
            outcome=outcome,
            total_cost=total,
            history=history,
            runtime_ms=(time.perf_counter() - began) * 1000.0,
            replans=self.replans,
            expansions=self.expansions,
        )
        if self.logger is not None:
            for entry in history:
                self.logger.record(self.label, entry)
        self._log(f"{outcome.value} after {len(history)} records, cost={total}")
        return self._result


class DStarLiteSolver(DynamicSolver):
    """Dynamic simulation driven by the incremental D* Lite replanner."""

    name = "DStarLiteSim"

    def __init__(self, grid: Grid, goal: Optional[Tuple[int, int]] = None, **kwargs):
        super().__init__(grid, **kwargs)
        self.goal = goal
        self.planner = DStarLite()

    def start(self, grid: Grid, agent: Position) -> None:
        self.planner.initialize(grid, agent, self.goal)
        self.expansions += self.planner.compute_shortest_path()
        self.replans += 1

    def replan(self, grid: Grid, agent: Position, changed: List[Position]) -> None:
        self.expansions += self.planner.notify_edge_costs_changed(changed)
        self.replans += 1

    def next_move(self, grid: Grid, agent: Position, mode: EvacuationMode) -> Optional[Move]:
        if math.isinf(self.planner.g(agent)):
            return None
        return self.planner.step()

    def moved(self, agent: Position) -> None:
        self.planner.move_to(agent)

    def reached(self, grid: Grid, agent: Position) -> bool:
        # An explicit goal replaces the exits as the destination.
        return agent in self.planner.goals


__all__ = [
    "DStarLiteSolver",
    "DynamicSolver",
    "HazardSchedule",
    "Outcome",
    "RunResult",
    "StepRecord",
]
