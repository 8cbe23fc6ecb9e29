"""Game module for Block Drop RL.

Exports the core game engine and supporting classes:
- GameGrid: Grid representation, collision test and line clearing
- TetrominoType / ActivePiece / HeldPiece: Piece kinds and piece records
- BagRandomizer / PieceQueue: Seven-bag piece generation and lookahead
- ScoringRules / ScoreState: Score table, levels and gravity speed
- GameClock / ManualTimer: Gravity timer management
- BlockDropGame: Main game state machine
"""

from .grid import GameGrid
from .pieces import ActivePiece, HeldPiece, TetrominoType, BASE_SHAPES, COLORS
from .bag import BagRandomizer, PieceQueue
from .rotation import KICK_OFFSETS, rotate_clockwise, try_rotate
from .rules import ScoringRules, ScoreState
from .clock import GameClock, ManualTimer, Timer
from .core import Action, BlockDropGame, GameConfig, GameStatus, Snapshot

__all__ = [
    "GameGrid",
    "ActivePiece",
    "HeldPiece",
    "TetrominoType",
    "BASE_SHAPES",
    "COLORS",
    "BagRandomizer",
    "PieceQueue",
    "KICK_OFFSETS",
    "rotate_clockwise",
    "try_rotate",
    "ScoringRules",
    "ScoreState",
    "GameClock",
    "ManualTimer",
    "Timer",
    "Action",
    "BlockDropGame",
    "GameConfig",
    "GameStatus",
    "Snapshot",
]
