"""JSON-Lines trajectory logger for simulated evacuation runs."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional


class SimulationLogger:
    def __init__(self, save_path: str = "logs/trajectories.jsonl"):
        Path(save_path).parent.mkdir(exist_ok=True, parents=True)
        self.path = save_path
        self.file = open(save_path, "w", encoding="utf-8")
        self.records = 0

    def record(self, run_label: str, step: Any, extra: Optional[Mapping[str, Any]] = None):
        """Append one step; ``step`` is a StepRecord or an already-built dict."""

        data = dict(step.as_dict() if hasattr(step, "as_dict") else step)
        data["run"] = run_label
        if extra:
            data.update(extra)
        self.file.write(json.dumps(data, ensure_ascii=False) + "\n")
        self.records += 1

    def close(self):
        if not self.file.closed:
            self.file.close()

    def __enter__(self) -> "SimulationLogger":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["SimulationLogger"]
