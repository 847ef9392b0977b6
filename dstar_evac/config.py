"""Configuration helpers for evacuation benchmark runs."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .cost import EvacuationMode
from .grid import ConfigurationError


def _coerce_value(value: str, current: Any) -> Any:
    """Coerce ``value`` to the type of the field's current value."""

    if isinstance(current, bool):
        return value.lower() in {"1", "true", "yes", "on"}
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    if isinstance(current, list):
        items = [item.strip() for item in value.split(",") if item.strip()]
        if current and all(isinstance(item, int) for item in current):
            return [int(item) for item in items]
        return items
    if current is None and value.lower() in {"", "none", "null"}:
        return None
    return value


@dataclass
class Config:
    """Settings for one benchmark invocation."""

    scenario_path: Optional[str] = None
    grid_sizes: List[int] = field(default_factory=lambda: [10, 20, 30])
    seed: int = 0
    planners: List[str] = field(default_factory=lambda: ["dstar_lite", "dynamic_astar"])
    step_budget_factor: int = 2
    ranking_mode: str = "NORMAL"
    output_dir: str = "artifacts"
    results_json_filename: str = "results.json"
    results_csv_filename: str = "results.csv"
    summary_md_filename: str = "summary.md"
    trajectories_filename: str = "trajectories.jsonl"
    log_filename: str = "run.json"
    gif_pattern: str = "{scenario}_{planner}.gif"
    render_gif: bool = False
    verbose: bool = True
    log_every: int = 25
    run_name: Optional[str] = None

    def ensure_output_dir(self) -> Path:
        directory = Path(self.output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def output_path(self, filename: str) -> Path:
        return self.ensure_output_dir() / filename

    def label(self) -> str:
        if self.run_name:
            return self.run_name
        if self.scenario_path:
            return f"{Path(self.scenario_path).stem}_seed{self.seed}"
        sizes = "-".join(str(size) for size in self.grid_sizes)
        return f"generated_{sizes}_seed{self.seed}"

    def mode(self) -> EvacuationMode:
        return EvacuationMode(self.ranking_mode.upper())

    def validate(self) -> "Config":
        if self.step_budget_factor < 1:
            raise ConfigurationError(f"step_budget_factor must be >= 1, got {self.step_budget_factor}")
        if self.log_every < 1:
            raise ConfigurationError(f"log_every must be >= 1, got {self.log_every}")
        if not self.planners:
            raise ConfigurationError("At least one planner is required")
        if self.scenario_path is None and not self.grid_sizes:
            raise ConfigurationError("Either scenario_path or grid_sizes must be set")
        if any(size < 3 for size in self.grid_sizes):
            raise ConfigurationError(f"Generated grids need size >= 3, got {self.grid_sizes}")
        try:
            self.mode()
        except ValueError as exc:
            raise ConfigurationError(f"Unknown ranking_mode: {self.ranking_mode!r}") from exc
        return self

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def update_from_env(self, prefix: str = "DSTAR_EVAC_") -> "Config":
        """Override configuration fields from environment variables."""

        for f in fields(self):
            env_key = f"{prefix}{f.name.upper()}"
            if env_key in os.environ:
                raw_value = os.environ[env_key]
                try:
                    coerced = _coerce_value(raw_value, getattr(self, f.name))
                except ValueError as exc:
                    raise ConfigurationError(f"Failed to parse env var {env_key}: {raw_value}") from exc
                setattr(self, f.name, coerced)
        return self


__all__ = ["Config"]
