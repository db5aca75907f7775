"""Build a complete encounter: engine, question timer and coordinator."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from trivia_combat.config import CombatConfig
from trivia_combat.coordinator import CombatCoordinator
from trivia_combat.effects import EffectHandlers
from trivia_combat.engine import Engine
from trivia_combat.skills import SkillBook
from trivia_combat.streak import KnowledgeStreak
from trivia_combat.timer import QuestionTimer, make_question_system
from trivia_combat.types import (
    CombatantStats,
    Enemy,
    GameModeConfig,
    QuestionProvider,
    TickContext,
)


@dataclass
class Encounter:
    """Holds the engine and the two per-encounter controllers."""

    engine: Engine
    timer: QuestionTimer
    coordinator: CombatCoordinator

    def answer(self, answer_index: int | None) -> bool:
        """Submit an answer for the current question."""
        return self.timer.submit(answer_index)

    @property
    def is_over(self) -> bool:
        return self.coordinator.is_over


def build_encounter(
    player: CombatantStats,
    enemy: Enemy,
    skills: SkillBook,
    provider: QuestionProvider,
    mode: GameModeConfig | None = None,
    config: CombatConfig | None = None,
    streak: KnowledgeStreak | None = None,
    combat_log: list[str] | None = None,
    seed: int | None = None,
    tps: int = 1,
    handlers: EffectHandlers | None = None,
    on_attack: Callable[[bool, str | None], None] | None = None,
    on_lose: Callable[[], None] | None = None,
    on_victory: Callable[[int], None] | None = None,
) -> Encounter:
    """Wire an encounter together.

    The engine's seeded RNG drives every probability roll. On engine start
    the coordinator runs combat_start and the first question loads; the
    timer stops as soon as an outcome ends the encounter, and the engine
    stops at the end of that tick.
    """
    engine = Engine(tps=tps, seed=seed)
    config = config if config is not None else CombatConfig()

    def _on_outcome(correct: bool, category: str | None) -> None:
        coordinator.resolve(correct, category)
        if coordinator.is_over:
            timer.stop()

    timer = QuestionTimer(
        provider, enemy.zone, skills, mode=mode, config=config, on_outcome=_on_outcome
    )
    coordinator = CombatCoordinator(
        player,
        enemy,
        skills,
        engine.random,
        combat_log=combat_log,
        streak=streak,
        config=config,
        handlers=handlers,
        on_attack=on_attack,
        on_lose=on_lose,
        on_victory=on_victory,
        on_freeze=timer.freeze,
    )

    def _start(ctx: TickContext) -> None:
        coordinator.start()
        timer.start()

    engine.on_start(_start)
    engine.add_system(make_question_system(timer, tps))
    return Encounter(engine=engine, timer=timer, coordinator=coordinator)
