"""Combat configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CombatConfig:
    """Immutable tunables for the question timer and combat resolution.

    Attributes:
        base_question_time: Seconds to answer in normal and crazy modes.
        fast_question_time: Seconds to answer in the fast modes.
        fast_modes: Modes that use ``fast_question_time``.
        reveal_delay: Ticks the result stays on screen before the outcome fires.
        min_damage: Floor for attack-minus-defense damage.
        streak_step: Multiplier gain per consecutive correct answer.
        streak_cap: Upper bound for the streak multiplier.
        log_tail: Entries returned by ``recent_log`` by default.
        elements: Elements an elemental skill can roll.
        element_bonus: Percent bonus damage per damaging element.
    """

    base_question_time: int = 5
    fast_question_time: int = 3
    fast_modes: tuple[str, ...] = ("blitz", "bloodlust")
    reveal_delay: int = 2
    min_damage: int = 1
    streak_step: float = 0.1
    streak_cap: float = 2.0
    log_tail: int = 5
    elements: tuple[str, ...] = ("burn", "freeze", "shock")
    element_bonus: tuple[tuple[str, int], ...] = (("burn", 25), ("shock", 50))

    def __post_init__(self) -> None:
        if self.base_question_time <= 0 or self.fast_question_time <= 0:
            raise ValueError("question times must be positive")
        if self.reveal_delay < 0:
            raise ValueError(f"reveal_delay must be >= 0, got {self.reveal_delay}")
        if self.min_damage < 0:
            raise ValueError(f"min_damage must be >= 0, got {self.min_damage}")
        if self.streak_cap < 1.0:
            raise ValueError(f"streak_cap must be >= 1.0, got {self.streak_cap}")

    def question_time(self, mode: str) -> int:
        """Base seconds per question for a game mode."""
        if mode in self.fast_modes:
            return self.fast_question_time
        return self.base_question_time
