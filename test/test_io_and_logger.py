import csv
import json

from dstar_evac.grid import Grid
from dstar_evac.io_utils import save_history, save_json, save_rows_csv, write_run_log, write_summary_markdown
from dstar_evac.logger import SimulationLogger
from dstar_evac.simulator import DStarLiteSolver


def test_save_json_serializes_infinity(tmp_path):
    path = tmp_path / "data.json"
    save_json({"cost": float("inf"), "items": [1.5, float("inf")]}, str(path))
    assert json.loads(path.read_text(encoding="utf-8")) == {"cost": "inf", "items": [1.5, "inf"]}


def test_save_history_csv(open_5x5, tmp_path):
    result = DStarLiteSolver(Grid(open_5x5)).run()
    path = tmp_path / "history.csv"
    save_history(result.history, str(path))
    with path.open(encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == len(result.history)
    assert rows[0]["action"] == "DOWN"
    assert rows[-1]["action"] == "SUCCESS"
    assert rows[-1]["time"] == "8"


def test_rows_csv_and_markdown(tmp_path):
    rows = [
        {"rank": 1, "scenario": "s", "planner": "DStarLiteSim", "outcome": "SUCCESS", "weighted_cost": 88.0},
        {"rank": 2, "scenario": "s", "planner": "DynamicAStarSim", "outcome": "FAILURE_NO_PATH", "weighted_cost": "inf"},
    ]
    csv_path = tmp_path / "rows.csv"
    save_rows_csv(rows, str(csv_path))
    assert csv_path.read_text(encoding="utf-8").splitlines()[0] == "rank,scenario,planner,outcome,weighted_cost"

    md_path = tmp_path / "summary.md"
    write_summary_markdown(rows, str(md_path), title="Demo")
    text = md_path.read_text(encoding="utf-8")
    assert text.startswith("# Demo")
    assert "| 1 | s | DStarLiteSim | SUCCESS |" in text
    assert "88.00" in text


def test_empty_summary(tmp_path):
    md_path = tmp_path / "summary.md"
    write_summary_markdown([], str(md_path))
    assert "_No runs recorded._" in md_path.read_text(encoding="utf-8")


def test_run_log_tallies_planners(tmp_path):
    rows = [
        {"scenario": "a", "planner": "DStarLiteSim", "outcome": "SUCCESS", "expansions": 10},
        {"scenario": "b", "planner": "DStarLiteSim", "outcome": "FAILURE_TIMEOUT", "expansions": 5},
    ]
    path = tmp_path / "run.json"
    write_run_log(str(path), config_dict={"seed": 1}, rows=rows)
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["runs"] == 2
    assert payload["scenarios"] == ["a", "b"]
    assert payload["planners"]["DStarLiteSim"] == {"runs": 2, "successes": 1, "expansions": 15}
    assert payload["all_succeeded"] is False


def test_logger_writes_json_lines(tmp_path):
    path = tmp_path / "logs" / "steps.jsonl"
    logger = SimulationLogger(str(path))
    logger.record("run-1", {"time_step": 0}, extra={"note": "x"})
    logger.record("run-1", {"time_step": 1})
    logger.close()
    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert lines == [{"time_step": 0, "run": "run-1", "note": "x"}, {"time_step": 1, "run": "run-1"}]
    assert logger.records == 2
