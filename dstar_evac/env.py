"""Gymnasium environment over the evacuation hazard grid."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .assessment import assess_mode
from .cost import Cost
from .dstar_lite import MOVES, Action
from .grid import CellType, Grid
from .simulator import HazardSchedule

EXIT_BONUS = 1.0
REWARD_SCALE = 1000.0


class EvacGridEnv(gym.Env):
    """Single evacuee on a hazard grid.

    - actions: Discrete(5) [UP, DOWN, LEFT, RIGHT, STAY]
    - observation: cell codes / 5 for every cell, then row, col and t, all in [0, 1]
    - reward: -scalar(move cost) / 1000 per move, +1 on reaching an exit
    - terminated on an exit, truncated once the step budget is spent
    """

    metadata = {"render_modes": ["human", "ansi"]}

    ACTIONS = [action for action, _, _ in MOVES] + [Action.STAY]

    def __init__(self, scenario: Mapping[str, Any], step_budget_factor: int = 2, render_mode: Optional[str] = None):
        super().__init__()
        self.scenario = dict(scenario)
        self.template = Grid(self.scenario)
        self.max_steps = step_budget_factor * self.template.rows * self.template.cols
        self.render_mode = render_mode

        self.grid: Optional[Grid] = None
        self.schedule = HazardSchedule(self.template.dynamic_events())
        self.agent = self.template.start_position()
        self.t = 0
        self.total_cost = Cost.zero()

        self.action_space = spaces.Discrete(len(self.ACTIONS))
        obs_dim = self.template.rows * self.template.cols + 3
        self.observation_space = spaces.Box(
            low=np.zeros(obs_dim, dtype=np.float32),
            high=np.ones(obs_dim, dtype=np.float32),
            dtype=np.float32,
        )

    def reset(self, seed: Optional[int] = None, options=None):
        super().reset(seed=seed)
        self.grid = self.template.copy()
        self.agent = self.grid.start_position()
        self.t = 0
        self.total_cost = Cost.zero()
        self._apply_hazards()
        return self._get_obs(), self._info()

    def step(self, action: int):
        assert self.grid is not None, "reset() must be called before step()"
        chosen = self.ACTIONS[int(action)]
        reward = 0.0
        bumped = False

        if chosen is not Action.STAY:
            dr, dc = next((dr, dc) for a, dr, dc in MOVES if a is chosen)
            target = self.agent.shifted(dr, dc)
            if self.grid.is_walkable(target):
                cost = self.grid.move_cost(target)
                self.total_cost = self.total_cost + cost
                reward -= cost.scalar() / REWARD_SCALE
                self.agent = target
            else:
                bumped = True

        terminated = self.grid.is_exit(self.agent)
        if terminated:
            reward += EXIT_BONUS

        self.t += 1
        truncated = not terminated and self.t >= self.max_steps
        if not terminated:
            self._apply_hazards()

        info = self._info()
        info["bumped"] = bumped
        return self._get_obs(), float(reward), bool(terminated), bool(truncated), info

    def _apply_hazards(self) -> None:
        for event in self.schedule.events_at(self.t):
            if event.type == "path_block" and event.position == self.agent:
                continue
            self.grid.add_hazard(event)

    def _get_obs(self) -> np.ndarray:
        cells = self.grid.snapshot().astype(np.float32).ravel() / float(max(CellType))
        extras = np.array(
            [
                self.agent.row / max(1, self.grid.rows - 1),
                self.agent.col / max(1, self.grid.cols - 1),
                min(1.0, self.t / max(1, self.max_steps)),
            ],
            dtype=np.float32,
        )
        obs = np.concatenate([cells, extras]).astype(np.float32)
        assert obs.shape[0] == self.observation_space.shape[0], (
            f"Observation length {obs.shape[0]} mismatches space {self.observation_space.shape[0]}"
        )
        return obs

    def _info(self) -> Dict[str, Any]:
        return {
            "t": self.t,
            "position": tuple(self.agent),
            "mode": assess_mode(self.agent, self.grid).value,
            "cost": self.total_cost.as_dict(),
        }

    def render(self):
        symbols = {
            CellType.EMPTY: ".",
            CellType.WALL: "#",
            CellType.START: "S",
            CellType.EXIT: "E",
            CellType.SMOKE: "~",
            CellType.FIRE: "F",
        }
        lines = []
        for r in range(self.grid.rows):
            row = []
            for c in range(self.grid.cols):
                row.append("A" if (r, c) == tuple(self.agent) else symbols[self.grid.cell_type((r, c))])
            lines.append("".join(row))
        text = "\n".join(lines) + f"\nt={self.t} mode={assess_mode(self.agent, self.grid).value} cost={self.total_cost}"
        if self.render_mode == "ansi":
            return text
        print(text)
        return None


__all__ = ["EvacGridEnv", "EXIT_BONUS", "REWARD_SCALE"]
