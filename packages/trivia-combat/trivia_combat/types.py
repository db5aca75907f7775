"""Shared data types and errors for trivia combat."""

from __future__ import annotations

import random as _random
from dataclasses import dataclass, field
from typing import Callable, Literal

Difficulty = Literal["easy", "medium", "hard"]
Rarity = Literal["common", "rare", "epic", "legendary", "mythical"]
GameMode = Literal["normal", "blitz", "bloodlust", "crazy"]
EffectContext = Literal[
    "combat_start", "round_start", "damage_dealt", "damage_taken", "victory"
]

CONTEXTS: tuple[str, ...] = (
    "combat_start",
    "round_start",
    "damage_dealt",
    "damage_taken",
    "victory",
)


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    dt: float
    elapsed: float
    request_stop: Callable[[], None]
    random: _random.Random


class QuestionProviderError(Exception):
    """Raised when the question provider fails or returns something unusable."""


class InvalidQuestionError(ValueError):
    """Raised when a Question is constructed with inconsistent answers."""


@dataclass(frozen=True)
class Question:
    """A single trivia question. Immutable once drawn."""

    id: str
    zone: int
    category: str
    difficulty: Difficulty
    prompt: str
    answers: tuple[str, ...]
    correct_index: int

    def __post_init__(self) -> None:
        if len(self.answers) < 2:
            raise InvalidQuestionError(
                f"Question {self.id!r} needs at least 2 answers, got {len(self.answers)}"
            )
        if not 0 <= self.correct_index < len(self.answers):
            raise InvalidQuestionError(
                f"Question {self.id!r} correct_index {self.correct_index} out of range"
            )

    def is_correct(self, answer_index: int | None) -> bool:
        return answer_index is not None and answer_index == self.correct_index


@dataclass
class CombatantStats:
    """HP and combat stats for one side of an encounter."""

    hp: int
    max_hp: int
    attack: int
    defense: int

    def clamp(self) -> None:
        """Force 0 <= hp <= max_hp."""
        if self.max_hp < 0:
            self.max_hp = 0
        self.hp = max(0, min(self.hp, self.max_hp))

    def damage(self, amount: int) -> int:
        """Subtract HP and clamp. Returns HP actually lost."""
        before = self.hp
        self.hp -= amount
        self.clamp()
        return before - self.hp

    def heal(self, amount: int) -> int:
        """Add HP and clamp. Returns HP actually restored."""
        before = self.hp
        self.hp += amount
        self.clamp()
        return self.hp - before

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0


@dataclass
class Enemy:
    """Opponent of one encounter."""

    name: str
    zone: int
    stats: CombatantStats
    coin_reward: int = 0
    is_poisoned: bool = False


@dataclass(frozen=True)
class GameModeConfig:
    """Read-only game mode input."""

    current: GameMode = "normal"
    speed_mode_active: bool = False
    survival_lives: int = 0
    max_survival_lives: int = 0


@dataclass
class EffectResult:
    """Working copy of the numeric fields an effect pass may touch."""

    damage: int = 0
    heal_amount: int = 0
    atk_bonus: int = 0
    def_bonus: int = 0
    hp_bonus: int = 0
    hp_multiplier: float = 1.0
    is_crit: bool = False
    max_hp: int = 0
    hp: int = 0
    attack: int = 0
    # Outputs of the wider skill set.
    dodged: bool = False
    extra_hits: int = 0
    poison_damage: int = 0
    coin_bonus: int = 0
    elements: list[str] = field(default_factory=list)
    enemy_frozen: bool = False
    instant_kill: bool = False
    # Reactive skills ready to fire on this hit. The coordinator commits
    # them against the final damage and restarts their cooldowns.
    reflect_source: str | None = None
    revive_hp: int = 0
    revive_source: str | None = None
    freeze_seconds: int = 0
    freeze_source: str | None = None


QuestionProvider = Callable[[int], Question]
