"""Knowledge streak: consecutive correct answers and the damage multiplier."""
from __future__ import annotations

from dataclasses import dataclass

BASE_MULTIPLIER = 1.0


@dataclass
class KnowledgeStreak:
    """Mutable streak counter.

    ``multiplier`` is ``1 + step * current`` capped at ``cap``, so it never
    decreases while the streak grows and returns to 1.0 on a miss.
    """

    current: int = 0
    best: int = 0
    multiplier: float = BASE_MULTIPLIER
    step: float = 0.1
    cap: float = 2.0

    def record(self, correct: bool) -> None:
        if correct:
            self.current += 1
            if self.current > self.best:
                self.best = self.current
        else:
            self.current = 0
        self.multiplier = min(self.cap, BASE_MULTIPLIER + self.step * self.current)

    @property
    def bonus_percent(self) -> int:
        """Multiplier shown as a +N% bonus."""
        return round((self.multiplier - BASE_MULTIPLIER) * 100)
