from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from block_drop_rl.game import BASE_SHAPES, COLORS, GameStatus, Snapshot, TetrominoType


BACKGROUND = (10, 10, 14)
EMPTY = (30, 30, 36)
TEXT = (230, 230, 240)
MUTED = (150, 150, 165)

STATUS_BANNERS = {
    GameStatus.NOT_STARTED: "Press Enter to start",
    GameStatus.PAUSED: "Paused",
    GameStatus.GAME_OVER: "Game Over - press R",
}


def _color_for_value(v: int) -> Tuple[int, int, int]:
    if v == 0:
        return EMPTY
    return COLORS[TetrominoType(v)]


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, panel_width: int = 200) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    def window_size(self, rows: int, cols: int) -> Tuple[int, int]:
        width = self.margin * 3 + cols * self.cell_size + self.panel_width
        height = self.margin * 2 + rows * self.cell_size
        return width, height

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 26)
            self._big_font = pygame.font.SysFont(None, 40)
        return self._font, self._big_font

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        return pygame.Rect(
            self.margin + x * self.cell_size,
            self.margin + y * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def _grid_surface(self, state: np.ndarray) -> pygame.Surface:
        h, w = state.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill(EMPTY)
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(x * self.cell_size, y * self.cell_size, self.cell_size - 1, self.cell_size - 1)
                pygame.draw.rect(surf, _color_for_value(int(state[y, x])), rect)
        return surf

    def _draw_ghost(self, screen: pygame.Surface, snap: Snapshot) -> None:
        if snap.active is None or snap.ghost_y is None or snap.ghost_y == snap.active.y:
            return
        rows, cols = snap.grid.shape
        color = snap.active.color
        m = snap.active.matrix
        for r in range(m.shape[0]):
            for c in range(m.shape[1]):
                gx, gy = snap.active.x + c, snap.ghost_y + r
                if m[r, c] and 0 <= gy < rows and 0 <= gx < cols and snap.grid[gy, gx] == 0:
                    pygame.draw.rect(screen, color, self._cell_rect(gx, gy), 2)

    def _draw_preview(self, screen: pygame.Surface, kind: TetrominoType, matrix: np.ndarray, x0: int, y0: int) -> int:
        size = self.cell_size // 2
        for py in range(matrix.shape[0]):
            for px in range(matrix.shape[1]):
                if matrix[py, px]:
                    rect = pygame.Rect(x0 + px * size, y0 + py * size, size - 1, size - 1)
                    pygame.draw.rect(screen, COLORS[kind], rect)
        return matrix.shape[0] * size

    def _draw_panel(self, screen: pygame.Surface, snap: Snapshot) -> None:
        font, _ = self._fonts()
        rows, cols = snap.grid.shape
        x0 = self.margin * 2 + cols * self.cell_size
        y = self.margin
        for label, value in (("Score", snap.score), ("Level", snap.level), ("Lines", snap.lines)):
            screen.blit(font.render(f"{label}: {value}", True, TEXT), (x0, y))
            y += 28

        y += 12
        screen.blit(font.render("Next", True, MUTED), (x0, y))
        y += 26
        for kind in snap.next_kinds:
            y += self._draw_preview(screen, kind, BASE_SHAPES[kind], x0, y) + 10

        y += 12
        screen.blit(font.render("Hold", True, MUTED if snap.can_hold else EMPTY), (x0, y))
        y += 26
        if snap.held is not None:
            self._draw_preview(screen, snap.held.kind, snap.held.matrix, x0, y)
        else:
            screen.blit(font.render("(empty)", True, MUTED), (x0, y))

    def _draw_banner(self, screen: pygame.Surface, snap: Snapshot) -> None:
        text = STATUS_BANNERS.get(snap.status)
        if text is None:
            return
        _, big_font = self._fonts()
        rows, cols = snap.grid.shape
        msg = big_font.render(text, True, (255, 220, 220))
        center = (self.margin + cols * self.cell_size // 2, self.margin + rows * self.cell_size // 2)
        screen.blit(msg, msg.get_rect(center=center))

    def draw(self, screen: pygame.Surface, snap: Snapshot) -> None:
        grid_surf = self._grid_surface(snap.grid)
        screen.fill(BACKGROUND)
        screen.blit(grid_surf, (self.margin, self.margin))
        self._draw_ghost(screen, snap)
        self._draw_panel(screen, snap)
        self._draw_banner(screen, snap)
        pygame.display.flip()
