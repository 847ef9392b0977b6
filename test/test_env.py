import numpy as np
import pytest

pytest.importorskip("gymnasium")

from dstar_evac.env import EvacGridEnv

from conftest import open_grid

UP, DOWN, LEFT, RIGHT, STAY = range(5)


def _env(**kwargs):
    return EvacGridEnv(open_grid(rows=3, cols=3, exits=((0, 2),)), **kwargs)


def test_reset_observation_fits_space():
    env = _env()
    obs, info = env.reset(seed=0)
    assert obs.shape == (12,)
    assert obs.dtype == np.float32
    assert env.observation_space.contains(obs)
    assert info["position"] == (0, 0)
    assert info["mode"] == "NORMAL"


def test_moves_cost_and_exit_bonus():
    env = _env()
    env.reset()
    _, reward, terminated, truncated, _ = env.step(RIGHT)
    assert reward == pytest.approx(-0.011)
    assert not terminated and not truncated
    _, reward, terminated, truncated, info = env.step(RIGHT)
    assert reward == pytest.approx(1.0 - 0.011)
    assert terminated and not truncated
    assert info["cost"] == {"smoke": 0, "time": 2, "distance": 2}


def test_bumping_a_wall_keeps_position():
    env = _env()
    env.reset()
    _, reward, _, _, info = env.step(UP)
    assert reward == 0.0
    assert info["bumped"] is True
    assert info["position"] == (0, 0)


def test_truncates_at_step_budget():
    env = _env(step_budget_factor=1)
    env.reset()
    for _ in range(env.max_steps - 1):
        _, _, terminated, truncated, _ = env.step(STAY)
        assert not terminated and not truncated
    _, _, terminated, truncated, _ = env.step(STAY)
    assert truncated and not terminated


def test_scheduled_fire_changes_mode_and_reward():
    scenario = open_grid(
        rows=3,
        cols=3,
        exits=((2, 2),),
        dynamic_events=[{"type": "fire", "time_step": 0, "position": {"row": 0, "col": 1}, "size": "small"}],
    )
    env = EvacGridEnv(scenario)
    _, info = env.reset()
    assert info["mode"] == "PANIC"
    _, reward, _, _, _ = env.step(RIGHT)
    assert reward == pytest.approx(-(1000 * 1000 + 100 * 10 + 1) / 1000.0)


def test_ansi_render():
    env = _env(render_mode="ansi")
    env.reset()
    text = env.render()
    assert text.splitlines()[0] == "A.E"
