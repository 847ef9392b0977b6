import json

import pytest

from dstar_evac.config import Config
from dstar_evac.grid import CellType, ConfigurationError, Grid
from dstar_evac.scenario import build_scenarios, generate_scenario, load_scenario
from dstar_evac.simulator import DStarLiteSolver, Outcome


def test_generation_is_reproducible():
    assert generate_scenario(15, seed=4) == generate_scenario(15, seed=4)
    assert generate_scenario(15, seed=4)["walls"] != generate_scenario(15, seed=5)["walls"]


@pytest.mark.parametrize("size", [10, 20, 30])
def test_generated_scenarios_build_valid_grids(size):
    scenario = generate_scenario(size, seed=size)
    grid = Grid(scenario)
    assert grid.rows == grid.cols == size
    assert grid.start_position() == (1, 1)
    assert (size - 2, size - 2) in grid.exit_positions()
    expected_exits = 1 + (size > 10) + (size > 20)
    assert len(grid.exit_positions()) == expected_exits
    for cell in scenario["smoke"]:
        assert grid.cell_type((cell["row"], cell["col"])) == CellType.SMOKE
    assert any(event["type"] == "fire" for event in scenario["dynamic_events"])


def test_large_scenarios_schedule_path_blocks():
    small = generate_scenario(10, seed=0)["dynamic_events"]
    large = generate_scenario(25, seed=0)["dynamic_events"]
    assert not any(e["type"] == "path_block" for e in small)
    assert sum(e["type"] == "path_block" for e in large) == 2


def test_generated_scenario_runs_to_an_outcome():
    result = DStarLiteSolver(Grid(generate_scenario(12, seed=1))).run()
    assert result.outcome in set(Outcome)
    assert result.history[-1].action == result.outcome.value


def test_too_small_size_is_rejected():
    with pytest.raises(ConfigurationError):
        generate_scenario(2)


def test_load_scenario_defaults_name_to_file_stem(tmp_path):
    path = tmp_path / "corridor.json"
    path.write_text(json.dumps({"rows": 1, "cols": 3, "start": [0, 0], "exits": [[0, 2]]}), encoding="utf-8")
    scenario = load_scenario(str(path))
    assert scenario["name"] == "corridor"
    assert Grid(scenario).exit_positions() == [(0, 2)]


def test_load_scenario_errors(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_scenario(str(broken))
    with pytest.raises(ConfigurationError):
        load_scenario(str(tmp_path / "missing.json"))
    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_scenario(str(listing))


def test_build_scenarios_from_sizes():
    scenarios = build_scenarios(Config(grid_sizes=[10, 12], seed=3))
    assert [s["name"] for s in scenarios] == ["10x10", "12x12"]
    assert scenarios[0] == generate_scenario(10, name="10x10", seed=3)
