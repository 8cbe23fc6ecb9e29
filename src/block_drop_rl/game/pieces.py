from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    T = 6
    Z = 7


Shape = np.ndarray
Color = Tuple[int, int, int]


BASE_SHAPES: Dict[TetrominoType, Shape] = {
    TetrominoType.I: np.array([[1, 1, 1, 1]], dtype=np.int8),
    TetrominoType.J: np.array([[1, 0, 0], [1, 1, 1]], dtype=np.int8),
    TetrominoType.L: np.array([[0, 0, 1], [1, 1, 1]], dtype=np.int8),
    TetrominoType.O: np.array([[1, 1], [1, 1]], dtype=np.int8),
    TetrominoType.S: np.array([[0, 1, 1], [1, 1, 0]], dtype=np.int8),
    TetrominoType.T: np.array([[0, 1, 0], [1, 1, 1]], dtype=np.int8),
    TetrominoType.Z: np.array([[1, 1, 0], [0, 1, 1]], dtype=np.int8),
}
for _shape in BASE_SHAPES.values():
    _shape.setflags(write=False)

COLORS: Dict[TetrominoType, Color] = {
    TetrominoType.I: (6, 182, 212),   # cyan
    TetrominoType.J: (59, 130, 246),  # blue
    TetrominoType.L: (245, 158, 11),  # amber
    TetrominoType.O: (250, 204, 21),  # yellow
    TetrominoType.S: (34, 197, 94),   # green
    TetrominoType.T: (217, 70, 239),  # fuchsia
    TetrominoType.Z: (244, 63, 94),   # rose
}


def canonical_shape(kind: TetrominoType) -> Shape:
    """Writable copy of the unrotated matrix for ``kind``."""
    return BASE_SHAPES[kind].copy()


def occupied_cells(matrix: Shape, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
    """Absolute (x, y) of every set cell of ``matrix`` placed at the origin."""
    h, w = matrix.shape
    cells: List[Tuple[int, int]] = []
    for dy in range(h):
        for dx in range(w):
            if matrix[dy, dx]:
                cells.append((origin_x + dx, origin_y + dy))
    return cells


@dataclass(eq=False)
class ActivePiece:
    kind: TetrominoType
    matrix: Shape
    x: int
    y: int

    @property
    def color(self) -> Color:
        return COLORS[self.kind]

    def cells(self) -> List[Tuple[int, int]]:
        return occupied_cells(self.matrix, self.x, self.y)

    def copy(self) -> "ActivePiece":
        return ActivePiece(self.kind, self.matrix.copy(), self.x, self.y)


@dataclass(frozen=True, eq=False)
class HeldPiece:
    kind: TetrominoType
    matrix: Shape

    @property
    def color(self) -> Color:
        return COLORS[self.kind]

    @classmethod
    def of(cls, kind: TetrominoType) -> "HeldPiece":
        # Held pieces always keep the unrotated orientation
        matrix = canonical_shape(kind)
        matrix.setflags(write=False)
        return cls(kind, matrix)
