"""Public API for the D* Lite evacuation replanner."""
from .assessment import assess_mode
from .astar import DynamicAStarSolver, astar_path
from .benchmark import PLANNERS, ComparisonRow, make_solver, rank_rows, run_comparison
from .config import Config
from .cost import Cost, CostOrder, EvacuationMode
from .dstar_lite import Action, DStarLite, DStarNode, NoGoalError
from .grid import CellType, ConfigurationError, FireSource, Grid, HazardEvent, Position
from .io_utils import ensure_dir, save_history, save_json, save_rows_csv, write_run_log, write_summary_markdown
from .logger import SimulationLogger
from .scenario import build_scenarios, generate_scenario, load_scenario
from .simulator import DStarLiteSolver, DynamicSolver, HazardSchedule, Outcome, RunResult, StepRecord

__all__ = [
    "Action",
    "CellType",
    "ComparisonRow",
    "Config",
    "ConfigurationError",
    "Cost",
    "CostOrder",
    "DStarLite",
    "DStarLiteSolver",
    "DStarNode",
    "DynamicAStarSolver",
    "DynamicSolver",
    "EvacuationMode",
    "FireSource",
    "Grid",
    "HazardEvent",
    "HazardSchedule",
    "NoGoalError",
    "Outcome",
    "PLANNERS",
    "Position",
    "RunResult",
    "SimulationLogger",
    "StepRecord",
    "assess_mode",
    "astar_path",
    "build_scenarios",
    "ensure_dir",
    "generate_scenario",
    "load_scenario",
    "make_solver",
    "rank_rows",
    "run_comparison",
    "save_history",
    "save_json",
    "save_rows_csv",
    "write_run_log",
    "write_summary_markdown",
]
