from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    lines_per_level: int = 10
    base_gravity_ms: int = 800
    gravity_step_ms: int = 80
    min_gravity_ms: int = 100

    def score_for_lines(self, lines: int) -> int:
        # Only 1-4 line clears score; anything else contributes nothing
        if 1 <= lines <= len(self.line_clear_scores):
            return self.line_clear_scores[lines - 1]
        return 0

    def level_for_lines(self, lines: int) -> int:
        return lines // self.lines_per_level

    def gravity_interval_ms(self, level: int) -> int:
        return max(self.min_gravity_ms, self.base_gravity_ms - level * self.gravity_step_ms)


@dataclass
class ScoreState:
    """Score, cleared lines and the level derived from them."""

    rules: ScoringRules = field(default_factory=ScoringRules)
    score: int = 0
    lines: int = 0

    @property
    def level(self) -> int:
        return self.rules.level_for_lines(self.lines)

    def apply_line_clear(self, cleared: int) -> int:
        """Account for ``cleared`` rows and return the points awarded.

        Lines are added first and the multiplier uses the resulting level, so a
        clear that crosses a level boundary already scores at the new level.
        """
        if cleared <= 0:
            return 0
        self.lines += cleared
        gained = self.rules.score_for_lines(cleared) * (self.level + 1)
        self.score += gained
        return gained

    def reset(self) -> None:
        self.score = 0
        self.lines = 0
