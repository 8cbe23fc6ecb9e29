from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .grid import GameGrid


# Horizontal offsets tried after a rotation, in priority order. Only x moves.
KICK_OFFSETS: Tuple[int, ...] = (0, -1, 1, -2, 2)


def rotate_clockwise(matrix: np.ndarray) -> np.ndarray:
    # out[r', c'] == in[rows - 1 - c', r']
    return np.rot90(matrix, 1, axes=(1, 0)).copy()


def try_rotate(grid: GameGrid, matrix: np.ndarray, x: int, y: int) -> Optional[Tuple[np.ndarray, int]]:
    """Rotate clockwise and resolve wall kicks.

    Returns the rotated matrix and the kicked column, or ``None`` when every
    offset collides.
    """
    rotated = rotate_clockwise(matrix)
    for offset in KICK_OFFSETS:
        if not grid.collides(rotated, x + offset, y):
            return rotated, x + offset
    return None
