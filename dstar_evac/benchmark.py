"""Run several planners over the same scenarios and rank the outcomes."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type, Union

from .astar import DynamicAStarSolver
from .cost import Cost, CostOrder, EvacuationMode
from .grid import Grid
from .logger import SimulationLogger
from .simulator import DStarLiteSolver, DynamicSolver, RunResult

PLANNERS: Dict[str, Type[DynamicSolver]] = {
    "dstar_lite": DStarLiteSolver,
    "dynamic_astar": DynamicAStarSolver,
}


def make_solver(name: str, grid: Grid, **kwargs) -> DynamicSolver:
    solver_cls = PLANNERS.get(name)
    if solver_cls is None:
        raise NotImplementedError(f"Unknown algorithm: {name}")
    return solver_cls(grid, **kwargs)


@dataclass
class ComparisonRow:
    scenario: str
    planner: str
    outcome: str
    smoke: float
    time: float
    distance: float
    weighted_cost: float
    steps: int
    replans: int
    expansions: int
    runtime_ms: float
    rank: int = 0

    @classmethod
    def from_result(cls, result: RunResult) -> "ComparisonRow":
        cost = result.total_cost
        return cls(
            scenario=result.scenario,
            planner=result.planner,
            outcome=result.outcome.value,
            smoke=cost.smoke,
            time=cost.time,
            distance=cost.distance,
            weighted_cost=result.weighted_cost,
            steps=result.steps,
            replans=result.replans,
            expansions=result.expansions,
            runtime_ms=round(result.runtime_ms, 3),
        )

    @property
    def succeeded(self) -> bool:
        return self.outcome == "SUCCESS"

    @property
    def cost(self) -> Cost:
        return Cost(self.smoke, self.time, self.distance)

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, float) and math.isinf(value):
                data[key] = "inf"
        return data


def rank_rows(rows: Iterable[ComparisonRow], mode: Union[EvacuationMode, str] = EvacuationMode.NORMAL) -> List[ComparisonRow]:
    """Order rows per scenario: successes by Cost under ``mode``, failures last.

    Assigns ``rank`` (1-based, per scenario) in place and returns the rows
    grouped by scenario in first-seen order.
    """

    order = CostOrder(EvacuationMode(mode))
    grouped: Dict[str, List[ComparisonRow]] = {}
    for row in rows:
        grouped.setdefault(row.scenario, []).append(row)

    ranked: List[ComparisonRow] = []
    for scenario_rows in grouped.values():
        scenario_rows.sort(key=lambda row: (not row.succeeded, order.key(row.cost), row.runtime_ms))
        for idx, row in enumerate(scenario_rows, start=1):
            row.rank = idx
        ranked.extend(scenario_rows)
    return ranked


def run_comparison(
    scenarios: Sequence[Mapping[str, Any]],
    planners: Sequence[str] = tuple(PLANNERS),
    *,
    step_budget_factor: int = 2,
    logger: Optional[SimulationLogger] = None,
    verbose: bool = False,
    log_every: int = 50,
) -> List[RunResult]:
    """Run every planner on every scenario, each on a fresh grid."""

    results: List[RunResult] = []
    for scenario in scenarios:
        for name in planners:
            grid = Grid(scenario)
            solver = make_solver(
                name,
                grid,
                step_budget_factor=step_budget_factor,
                logger=logger,
                verbose=verbose,
                log_every=log_every,
            )
            result = solver.run()
            if verbose:
                print(
                    f"[dstar] {grid.name} | {name}: {result.outcome.value} cost={result.total_cost} "
                    f"replans={result.replans} expansions={result.expansions} runtime={result.runtime_ms:.1f}ms",
                    flush=True,
                )
            results.append(result)
    return results


__all__ = ["PLANNERS", "ComparisonRow", "make_solver", "rank_rows", "run_comparison"]
