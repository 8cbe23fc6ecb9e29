from __future__ import annotations

from typing import Iterable, List, Tuple

import numpy as np


class GameGrid:
    """Fixed-size playfield for falling pieces.

    The grid uses 0 for empty cells and positive integers for filled cells.
    Integer values are the ``TetrominoType`` of the piece that filled the cell,
    which renderers map to a color. Row 0 is the top of the board; rows above
    it (negative indexes) are open space that is never stored.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def collides(self, matrix: np.ndarray, offset_x: int, offset_y: int) -> bool:
        """True if ``matrix`` placed at the offset leaves the board or overlaps a block.

        Cells above the top edge are not checked against the board, so a piece
        may sit partially or fully above row 0.
        """
        h, w = matrix.shape
        for r in range(h):
            for c in range(w):
                if not matrix[r, c]:
                    continue
                x = offset_x + c
                y = offset_y + r
                if x < 0 or x >= self.width or y >= self.height:
                    return True
                if y >= 0 and self.grid[y, x] != 0:
                    return True
        return False

    def drop_distance(self, matrix: np.ndarray, offset_x: int, offset_y: int) -> int:
        """Rows the matrix can fall from the offset before it would collide."""
        distance = 0
        while not self.collides(matrix, offset_x, offset_y + distance + 1):
            distance += 1
        return distance

    def merge(self, cells: Iterable[Tuple[int, int]], value: int) -> None:
        # Cells outside the board (above the top included) are dropped.
        for x, y in cells:
            if self.is_inside(x, y):
                self.grid[y, x] = value

    def is_row_full(self, row: int) -> bool:
        return bool(np.all(self.grid[row] != 0))

    def full_rows(self) -> List[int]:
        return [r for r in range(self.height) if self.is_row_full(r)]

    def clear_and_compact(self, rows: Iterable[int]) -> Tuple[np.ndarray, int]:
        """Return a new grid without ``rows`` and the number of rows removed.

        Rows above a removed row shift down and empty rows are added at the
        top, so the result keeps the board's shape. The grid itself is not
        modified; callers commit the result.
        """
        rows = sorted(set(int(r) for r in rows))
        num = len(rows)
        if num == 0:
            return self.grid.copy(), 0
        kept = np.delete(self.grid, rows, axis=0)
        new_rows = np.zeros((num, self.width), dtype=self.grid.dtype)
        return np.vstack((new_rows, kept)), num

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
