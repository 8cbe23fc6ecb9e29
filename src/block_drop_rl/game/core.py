from __future__ import annotations

import functools
import logging
import random
import threading
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Tuple

import numpy as np

from .bag import BagRandomizer, PieceQueue
from .clock import GameClock, ManualTimer, Timer
from .grid import GameGrid
from .pieces import ActivePiece, HeldPiece, TetrominoType, canonical_shape
from .rotation import try_rotate
from .rules import ScoreState, ScoringRules


logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    HOLD = 5
    NONE = 6


class GameStatus(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None
    queue_size: int = 5
    preview_size: int = 3

    def __post_init__(self) -> None:
        if self.width < 4 or self.height < 4:
            raise ValueError(f"board must be at least 4x4, got {self.width}x{self.height}")
        if self.queue_size < 1 or self.preview_size > self.queue_size:
            raise ValueError("queue_size must be >= 1 and >= preview_size")


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Read-only view of the game handed to renderers and agents."""

    grid: np.ndarray
    active: Optional[ActivePiece]
    ghost_y: Optional[int]
    score: int
    level: int
    lines: int
    next_kinds: Tuple[TetrominoType, ...]
    held: Optional[HeldPiece]
    can_hold: bool
    status: GameStatus
    gravity_ms: int


def _serialized(method):
    """Run the method under the engine lock so ticks and commands never interleave."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class BlockDropGame:
    """Falling-block engine: board, active piece, queue, hold slot and score.

    Gravity comes from an injected ``Timer``; each tick moves the active piece
    down a row or locks it. Player commands return ``True`` when they changed
    the game and ``False`` when they were absorbed as no-ops.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        timer: Optional[Timer] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.grid = GameGrid(self.config.width, self.config.height)
        self.scores = ScoreState(self.rules)
        self.bag = BagRandomizer(random.Random(self.config.random_seed))
        self.queue = PieceQueue(self.bag, self.config.queue_size)
        self.clock = GameClock(timer if timer is not None else ManualTimer(), self.rules, self.tick)
        self.status = GameStatus.NOT_STARTED
        self.current_piece: Optional[ActivePiece] = None
        self.held: Optional[HeldPiece] = None
        self.can_hold = True
        self._lock = threading.RLock()

    # --- derived state -------------------------------------------------

    @property
    def score(self) -> int:
        return self.scores.score

    @property
    def lines(self) -> int:
        return self.scores.lines

    @property
    def level(self) -> int:
        return self.scores.level

    @property
    def game_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    # --- lifecycle -----------------------------------------------------

    def _reinitialize(self, seed: Optional[int] = None) -> None:
        self.clock.halt()
        self.grid.reset()
        if seed is None:
            seed = self.config.random_seed
        self.bag = BagRandomizer(random.Random(seed))
        self.queue = PieceQueue(self.bag, self.config.queue_size)
        self.scores.reset()
        self.current_piece = None
        self.held = None
        self.can_hold = True

    @_serialized
    def reset(self, seed: Optional[int] = None) -> None:
        self._reinitialize(seed)
        self.status = GameStatus.NOT_STARTED
        logger.info("game reset")

    @_serialized
    def start(self) -> bool:
        if self.status not in (GameStatus.NOT_STARTED, GameStatus.GAME_OVER):
            return False
        if self.status is GameStatus.GAME_OVER:
            self._reinitialize()
        self.status = GameStatus.RUNNING
        self._spawn()
        self.clock.arm(self.level)
        logger.info("game started")
        return True

    @_serialized
    def toggle_pause(self) -> bool:
        if self.status is GameStatus.RUNNING:
            self.status = GameStatus.PAUSED
            self.clock.halt()
            logger.info("game paused")
            return True
        if self.status is GameStatus.PAUSED:
            self.status = GameStatus.RUNNING
            self.clock.arm(self.level)
            logger.info("game resumed")
            return True
        return False

    # --- spawning ------------------------------------------------------

    def _spawn(self, kind: Optional[TetrominoType] = None) -> ActivePiece:
        if kind is None:
            kind = self.queue.pop()
        matrix = canonical_shape(kind)
        h, w = matrix.shape
        # Centered, fully above the visible board
        self.current_piece = ActivePiece(kind, matrix, (self.grid.width - w) // 2, -h)
        logger.debug("spawned %s at x=%d", kind.name, self.current_piece.x)
        return self.current_piece

    @_serialized
    def spawn(self, kind: Optional[TetrominoType] = None) -> Optional[ActivePiece]:
        """Replace the active piece with ``kind`` (or the queue front) while running."""
        if self.status is not GameStatus.RUNNING:
            return None
        return self._spawn(kind)

    # --- movement ------------------------------------------------------

    def _can_act(self) -> bool:
        return self.status is GameStatus.RUNNING and self.current_piece is not None

    def _shift(self, dx: int, dy: int) -> bool:
        if not self._can_act():
            return False
        p = self.current_piece
        if self.grid.collides(p.matrix, p.x + dx, p.y + dy):
            return False
        p.x += dx
        p.y += dy
        return True

    @_serialized
    def move_left(self) -> bool:
        return self._shift(-1, 0)

    @_serialized
    def move_right(self) -> bool:
        return self._shift(1, 0)

    @_serialized
    def soft_drop(self) -> bool:
        # A blocked soft drop never locks; only gravity and hard drop do
        return self._shift(0, 1)

    @_serialized
    def rotate(self) -> bool:
        if not self._can_act():
            return False
        p = self.current_piece
        result = try_rotate(self.grid, p.matrix, p.x, p.y)
        if result is None:
            return False
        p.matrix, p.x = result
        return True

    @_serialized
    def hard_drop(self) -> bool:
        if not self._can_act():
            return False
        p = self.current_piece
        p.y += self.grid.drop_distance(p.matrix, p.x, p.y)
        self._lock_piece()
        return True

    @_serialized
    def tick(self) -> None:
        """Gravity step, called by the timer."""
        if not self._can_act():
            return
        if not self._shift(0, 1):
            self._lock_piece()

    # --- locking -------------------------------------------------------

    def _lock_piece(self) -> int:
        assert self.current_piece is not None
        piece = self.current_piece
        cells = piece.cells()
        # Decided on the piece geometry; the merge below drops these cells
        locks_above_top = any(y < 0 for _, y in cells)

        self.grid.merge(cells, int(piece.kind))
        new_grid, cleared = self.grid.clear_and_compact(self.grid.full_rows())
        self.grid.grid = new_grid

        level_before = self.level
        gained = self.scores.apply_line_clear(cleared)
        logger.debug(
            "locked %s at (%d, %d): cleared=%d gained=%d", piece.kind.name, piece.x, piece.y, cleared, gained
        )

        if locks_above_top:
            self.current_piece = None
            self.status = GameStatus.GAME_OVER
            self.clock.halt()
            logger.info("game over: score=%d lines=%d level=%d", self.score, self.lines, self.level)
            return cleared

        if self.level != level_before:
            self.clock.arm(self.level)
        self._spawn()
        self.can_hold = True
        return cleared

    # --- hold ----------------------------------------------------------

    @_serialized
    def hold(self) -> bool:
        if not self._can_act() or not self.can_hold:
            return False
        active_kind = self.current_piece.kind
        previous = self.held
        self.held = HeldPiece.of(active_kind)
        self.current_piece = None
        if previous is None:
            self._spawn()
        else:
            self._spawn(previous.kind)
        self.can_hold = False
        logger.debug("held %s", active_kind.name)
        return True

    # --- dispatch ------------------------------------------------------

    @_serialized
    def step(self, action: Action) -> bool:
        action = Action(action)
        if action == Action.LEFT:
            return self.move_left()
        elif action == Action.RIGHT:
            return self.move_right()
        elif action == Action.ROTATE:
            return self.rotate()
        elif action == Action.SOFT_DROP:
            return self.soft_drop()
        elif action == Action.HARD_DROP:
            return self.hard_drop()
        elif action == Action.HOLD:
            return self.hold()
        return False

    # --- snapshot ------------------------------------------------------

    def ghost_y(self) -> Optional[int]:
        p = self.current_piece
        if p is None:
            return None
        return p.y + self.grid.drop_distance(p.matrix, p.x, p.y)

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid
        state = self.grid.clone_state()
        if self.current_piece is not None:
            self._overlay(state, self.current_piece)
        return state

    def _overlay(self, state: np.ndarray, piece: ActivePiece) -> None:
        for x, y in piece.cells():
            if self.grid.is_inside(x, y):
                state[y, x] = int(piece.kind)

    @_serialized
    def snapshot(self) -> Snapshot:
        active = self.current_piece.copy() if self.current_piece is not None else None
        return Snapshot(
            grid=self.get_state(),
            active=active,
            ghost_y=self.ghost_y(),
            score=self.score,
            level=self.level,
            lines=self.lines,
            next_kinds=self.queue.peek(self.config.preview_size),
            held=self.held,
            can_hold=self.can_hold,
            status=self.status,
            gravity_ms=self.rules.gravity_interval_ms(self.level),
        )
