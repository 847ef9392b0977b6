"""IO utilities for evacuation benchmark artefacts."""
from __future__ import annotations

import csv
import json
import math
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence


def ensure_dir(path: str) -> Path:
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _jsonable(value: Any) -> Any:
    if isinstance(value, float) and math.isinf(value):
        return "inf"
    if isinstance(value, Mapping):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def save_json(data: Any, path: str) -> None:
    Path(path).write_text(json.dumps(_jsonable(data), indent=2, ensure_ascii=False), encoding="utf-8")


def save_history(history: Iterable[Any], path: str) -> None:
    """Write a per-tick CSV of a run's StepRecords."""

    fieldnames = ["time_step", "row", "col", "action", "mode", "smoke", "time", "distance"]
    with open(path, "w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for record in history:
            entry = record.as_dict()
            cost = entry.pop("total_cost")
            entry.update(cost)
            writer.writerow(entry)


def save_rows_csv(rows: Sequence[Mapping[str, Any]], path: str) -> None:
    if not rows:
        Path(path).write_text("", encoding="utf-8")
        return
    fieldnames: List[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)
    with open(path, "w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(_jsonable(dict(row)))


def _fmt(value: Any) -> str:
    if isinstance(value, float):
        if math.isinf(value):
            return "inf"
        return f"{value:.2f}"
    return str(value)


def write_summary_markdown(rows: Sequence[Mapping[str, Any]], path: str, title: str = "Evacuation benchmark") -> None:
    """Render ranked comparison rows as a markdown table."""

    columns = ["rank", "scenario", "planner", "outcome", "smoke", "time", "distance", "weighted_cost", "steps", "replans", "expansions", "runtime_ms"]
    lines = [f"# {title}", ""]
    if not rows:
        lines.append("_No runs recorded._")
    else:
        lines.append("| " + " | ".join(columns) + " |")
        lines.append("|" + "|".join("---" for _ in columns) + "|")
        for row in rows:
            lines.append("| " + " | ".join(_fmt(row.get(col, "")) for col in columns) + " |")
    lines.append("")
    Path(path).write_text("\n".join(lines), encoding="utf-8")


def write_run_log(path: str, *, config_dict: Mapping[str, Any], rows: Sequence[Mapping[str, Any]]) -> None:
    """Persist a JSON run log: the effective config plus per-planner tallies."""

    per_planner: dict[str, dict[str, Any]] = {}
    for row in rows:
        tally = per_planner.setdefault(str(row.get("planner")), {"runs": 0, "successes": 0, "expansions": 0})
        tally["runs"] += 1
        tally["successes"] += 1 if row.get("outcome") == "SUCCESS" else 0
        tally["expansions"] += int(row.get("expansions") or 0)

    payload = {
        "config": dict(config_dict),
        "runs": len(rows),
        "scenarios": sorted({str(row.get("scenario")) for row in rows}),
        "planners": per_planner,
        "all_succeeded": bool(rows) and all(row.get("outcome") == "SUCCESS" for row in rows),
    }
    save_json(payload, path)


__all__ = [
    "ensure_dir",
    "save_json",
    "save_history",
    "save_rows_csv",
    "write_summary_markdown",
    "write_run_log",
]
