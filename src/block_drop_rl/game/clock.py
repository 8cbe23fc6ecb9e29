from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from .rules import ScoringRules


logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Timer(Protocol):
    """Periodic callback source supplied by the host application."""

    def start(self, interval_ms: int, callback: TickCallback) -> None:
        ...

    def cancel(self) -> None:
        ...


class ManualTimer:
    """Timer whose ticks are fired explicitly by the caller.

    Used by the Gym environment (one tick per step) and by tests.
    """

    def __init__(self) -> None:
        self.interval_ms: Optional[int] = None
        self._callback: Optional[TickCallback] = None
        self.starts = 0

    @property
    def armed(self) -> bool:
        return self._callback is not None

    def start(self, interval_ms: int, callback: TickCallback) -> None:
        self.interval_ms = interval_ms
        self._callback = callback
        self.starts += 1

    def cancel(self) -> None:
        self.interval_ms = None
        self._callback = None

    def fire(self) -> bool:
        if self._callback is None:
            return False
        self._callback()
        return True


class GameClock:
    """Owns the gravity interval and the single armed timer."""

    def __init__(self, timer: Timer, rules: ScoringRules, callback: TickCallback) -> None:
        self.timer = timer
        self.rules = rules
        self.callback = callback
        self.interval_ms: Optional[int] = None

    @property
    def running(self) -> bool:
        return self.interval_ms is not None

    def arm(self, level: int) -> None:
        # Always tear down first so a stale interval never keeps firing
        self.timer.cancel()
        self.interval_ms = self.rules.gravity_interval_ms(level)
        self.timer.start(self.interval_ms, self.callback)
        logger.debug("gravity armed at %d ms (level %d)", self.interval_ms, level)

    def halt(self) -> None:
        if self.interval_ms is not None:
            logger.debug("gravity halted")
        self.timer.cancel()
        self.interval_ms = None
