import numpy as np
import pytest

from dstar_evac.cost import Cost
from dstar_evac.grid import CellType, ConfigurationError, Grid, HazardEvent, Position

from conftest import cells, open_grid


def fire(row, col, size="small", t=0):
    return {"type": "fire", "time_step": t, "position": {"row": row, "col": col}, "size": size}


def test_baseline_wall_and_out_of_bounds_costs(open_5x5):
    grid = Grid({**open_5x5, "walls": cells((1, 1))})
    assert grid.move_cost((2, 2)) == Cost(0, 1, 1)
    assert grid.move_cost((1, 1)).is_infinite
    assert grid.move_cost((-1, 0)).is_infinite
    assert grid.cell_type((5, 5)) == CellType.WALL
    assert grid.cell_type((0, 0)) == CellType.START
    assert grid.cell_type((4, 4)) == CellType.EXIT


def test_neighbors_follow_up_down_left_right(open_5x5):
    grid = Grid({**open_5x5, "walls": cells((2, 1))})
    assert grid.neighbors((2, 2)) == [(1, 2), (3, 2), (2, 3)]
    assert grid.neighbors((2, 2), walkable_only=False) == [(1, 2), (3, 2), (2, 1), (2, 3)]
    assert grid.neighbors((0, 0)) == [(1, 0), (0, 1)]


def test_smoke_costs(open_5x5):
    smoke = [{"row": 1, "col": 0, "intensity": "light"}, {"row": 0, "col": 1, "intensity": "heavy"}]
    grid = Grid({**open_5x5, "smoke": smoke})
    assert grid.move_cost((1, 0)) == Cost(5, 2, 1)
    assert grid.move_cost((0, 1)) == Cost(25, 4, 1)
    assert grid.cell_type((1, 0)) == CellType.SMOKE


def test_small_fire_marks_radius_and_costs(open_5x5):
    grid = Grid(open_5x5)
    changed = grid.add_hazard(fire(2, 2))
    assert sorted(changed) == sorted([(1, 2), (2, 1), (2, 2), (2, 3), (3, 2)])
    assert grid.cell_type((2, 2)) == CellType.FIRE
    assert grid.move_cost((2, 2)) == Cost(1000, 100, 1)
    assert grid.move_cost((2, 3)) == Cost(50, 10, 1)
    assert grid.move_cost((0, 2)) == Cost(0, 1, 1)


def test_medium_fire_radius(open_5x5):
    grid = Grid(open_5x5)
    changed = grid.add_hazard(fire(2, 2, size="medium"))
    assert len(changed) == 13
    assert grid.move_cost((0, 2)) == Cost(25, 5, 1)


def test_overlapping_hazards_take_componentwise_max(open_5x5):
    grid = Grid({**open_5x5, "smoke": [{"row": 2, "col": 3, "intensity": "heavy"}]})
    grid.add_hazard(fire(2, 2))
    assert grid.move_cost((2, 3)) == Cost(50, 10, 1)
    grid = Grid({**open_5x5, "smoke": [{"row": 0, "col": 2, "intensity": "heavy"}]})
    grid.add_hazard(fire(2, 2, size="medium"))
    assert grid.move_cost((0, 2)) == Cost(25, 5, 1)


def test_hazards_never_lower_any_component(open_5x5):
    grid = Grid({**open_5x5, "smoke": [{"row": 1, "col": 1, "intensity": "heavy"}]})
    before = {(r, c): grid.move_cost((r, c)) for r in range(5) for c in range(5)}
    grid.add_hazard(fire(2, 2, size="large"))
    grid.add_hazard({"type": "smoke", "position": {"row": 3, "col": 3}, "intensity": "light"})
    for pos, old in before.items():
        new = grid.move_cost(pos)
        assert new.smoke >= old.smoke and new.time >= old.time and new.distance >= old.distance


def test_fire_on_exit_keeps_exit(open_5x5):
    grid = Grid(open_5x5)
    grid.add_hazard(fire(4, 4))
    assert grid.is_exit((4, 4))
    assert grid.move_cost((4, 4)) == Cost(1000, 100, 1)


def test_hazards_skip_walls(open_5x5):
    grid = Grid({**open_5x5, "walls": cells((2, 2))})
    assert grid.add_hazard(fire(2, 2)) == []
    assert grid.add_hazard({"type": "smoke", "position": {"row": 2, "col": 2}}) == []
    assert grid.active_fires == ()


def test_path_block(open_5x5):
    grid = Grid(open_5x5)
    assert grid.add_hazard({"type": "path_block", "position": {"row": 1, "col": 1}}) == [(1, 1)]
    assert not grid.is_walkable((1, 1))
    assert grid.move_cost((1, 1)).is_infinite
    assert grid.add_hazard({"type": "path_block", "position": {"row": 4, "col": 4}}) == []
    assert grid.is_exit((4, 4))


def test_smoke_only_upgrades(open_5x5):
    grid = Grid(open_5x5)
    light = {"type": "smoke", "position": {"row": 1, "col": 1}, "intensity": "light"}
    heavy = {"type": "smoke", "position": {"row": 1, "col": 1}, "intensity": "heavy"}
    assert grid.add_hazard(light) == [(1, 1)]
    assert grid.add_hazard(heavy) == [(1, 1)]
    assert grid.add_hazard(light) == []
    assert grid.smoke_intensity((1, 1)) == "heavy"


def test_copy_is_independent(open_5x5):
    grid = Grid(open_5x5)
    clone = grid.copy()
    clone.add_hazard(fire(2, 2))
    assert grid.cell_type((2, 2)) == CellType.EMPTY
    assert grid.active_fires == ()
    assert len(clone.active_fires) == 1


def test_snapshot_is_a_copy(open_5x5):
    grid = Grid(open_5x5)
    snap = grid.snapshot()
    assert snap.shape == (5, 5) and snap.dtype == np.int8
    grid.add_hazard(fire(1, 1))
    assert snap[1, 1] == CellType.EMPTY


@pytest.mark.parametrize(
    "patch",
    [
        {"rows": 0},
        {"start": None},
        {"walls": cells((9, 9))},
        {"walls": cells((4, 4))},
        {"smoke": [{"row": 1, "col": 1, "intensity": "thick"}]},
        {"dynamic_events": [{"type": "flood", "position": {"row": 1, "col": 1}}]},
        {"dynamic_events": [{"type": "fire", "position": {"row": 1, "col": 1}, "size": "huge"}]},
        {"dynamic_events": [{"time_step": 1, "position": {"row": 1, "col": 1}}]},
        {"walls": 5},
        {"smoke": "heavy"},
        {"exits": {"row": 4, "col": 4}},
        {"dynamic_events": 3},
    ],
)
def test_malformed_config_raises(open_5x5, patch):
    config = {**open_5x5, **patch}
    if patch.get("start", 0) is None:
        del config["start"]
    with pytest.raises(ConfigurationError):
        Grid(config)


def test_hazard_event_round_trip_fields():
    event = HazardEvent.from_dict({"type": "fire", "time_step": "3", "position": [1, 2]})
    assert event.time_step == 3
    assert event.position == Position(1, 2)
    assert event.size == "small"
    assert event.as_dict()["position"] == {"row": 1, "col": 2}
