from __future__ import annotations

import pytest

from block_drop_rl.game import BlockDropGame, GameConfig, GameGrid, ManualTimer


def fill_row(grid: GameGrid, row: int, skip=(), value: int = 1) -> None:
    for x in range(grid.width):
        if x not in skip:
            grid.grid[row, x] = value


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def game(timer: ManualTimer) -> BlockDropGame:
    g = BlockDropGame(GameConfig(random_seed=1234), timer=timer)
    g.start()
    return g
