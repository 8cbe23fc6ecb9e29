from __future__ import annotations

import random
from collections import deque
from typing import Deque, List, Optional, Tuple

from .pieces import TetrominoType


class BagRandomizer:
    """Endless piece sequence built from shuffled bags of all seven kinds.

    Each bag is a fresh permutation, so every run of seven draws that starts
    on a bag boundary contains each kind exactly once.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self._batch: List[TetrominoType] = []
        self._cursor = 0

    def _shuffle_batch(self) -> None:
        batch = list(TetrominoType)
        # Fisher-Yates, swapping from the end towards the front
        for i in range(len(batch) - 1, 0, -1):
            j = self.rng.randint(0, i)
            batch[i], batch[j] = batch[j], batch[i]
        self._batch = batch
        self._cursor = 0

    def next(self) -> TetrominoType:
        if self._cursor >= len(self._batch):
            self._shuffle_batch()
        kind = self._batch[self._cursor]
        self._cursor += 1
        return kind

    def __iter__(self) -> "BagRandomizer":
        return self

    def __next__(self) -> TetrominoType:
        return self.next()

    @property
    def remaining_in_batch(self) -> int:
        return len(self._batch) - self._cursor


class PieceQueue:
    """Lookahead of upcoming kinds, topped up from a ``BagRandomizer``."""

    def __init__(self, bag: BagRandomizer, min_size: int = 5) -> None:
        self.bag = bag
        self.min_size = min_size
        self._items: Deque[TetrominoType] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def refill(self) -> None:
        while len(self._items) < self.min_size:
            self._items.append(self.bag.next())

    def pop(self) -> TetrominoType:
        self.refill()
        return self._items.popleft()

    def peek(self, n: int) -> Tuple[TetrominoType, ...]:
        return tuple(self._items)[:n]
