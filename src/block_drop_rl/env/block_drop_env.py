from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_drop_rl.game import (
    COLORS,
    Action,
    BlockDropGame,
    GameConfig,
    GameStatus,
    ManualTimer,
    ScoringRules,
    TetrominoType,
)


EMPTY_COLOR = (30, 30, 36)


class BlockDropEnv(gym.Env):
    """Single-player falling-block environment.

    Each step applies one ``Action`` and then, every ``gravity_every`` steps,
    one gravity tick. The reward is the change in engine score.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 render_mode: Optional[str] = None,
                 max_episode_steps: int = 10000,
                 gravity_every: int = 1) -> None:
        super().__init__()
        self.timer = ManualTimer()
        self.game = BlockDropGame(config, rules, timer=self.timer)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)
        self.gravity_every = max(1, int(gravity_every))

        h, w = self.game.grid.height, self.game.grid.width
        n_kinds = len(TetrominoType)
        preview = self.game.config.preview_size

        # Observation: settled board + falling piece mask, preview and hold (0 = none)
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=n_kinds, shape=(h, w), dtype=np.int8),
                "active": spaces.Box(low=0, high=1, shape=(h, w), dtype=np.int8),
                "next": spaces.Box(low=0, high=n_kinds, shape=(preview,), dtype=np.int8),
                "held": spaces.Discrete(n_kinds + 1),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        snap = self.game.snapshot()
        active = np.zeros_like(snap.grid)
        if snap.active is not None:
            for x, y in snap.active.cells():
                if self.game.grid.is_inside(x, y):
                    active[y, x] = 1
        nxt = np.zeros((self.game.config.preview_size,), dtype=np.int8)
        for i, kind in enumerate(snap.next_kinds):
            nxt[i] = int(kind)
        return {
            "grid": self.game.grid.clone_state(),
            "active": active,
            "next": nxt,
            "held": int(snap.held.kind) if snap.held is not None else 0,
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "lines": self.game.lines,
            "level": self.game.level,
            "steps": self._steps,
            "can_hold": self.game.can_hold,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is None:
            # Derive the bag seed from the env RNG so episodes differ
            seed = int(self.np_random.integers(0, 2**31 - 1))
        self.game.reset(seed)
        self.game.start()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        score_before = self.game.score
        self.game.step(Action(int(action)))
        self._steps += 1
        if self._steps % self.gravity_every == 0:
            self.timer.fire()

        terminated = self.game.status is GameStatus.GAME_OVER
        truncated = not terminated and self._steps >= self.max_episode_steps
        reward = float(self.game.score - score_before)

        obs = self._get_obs()
        info = self._get_info()
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self.game.get_state()
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    v = int(grid[y, x])
                    color = COLORS[TetrominoType(v)] if v else EMPTY_COLOR
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        # human rendering delegated to external UI; noop
        return None

    def close(self) -> None:
        self.game.clock.halt()
