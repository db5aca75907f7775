"""trivia-combat - Timed trivia combat with stackable power skills."""

from trivia_combat.catalog import EFFECT_KINDS, SKILL_DEFINITIONS, EffectDef, SkillCatalog, SkillDef
from trivia_combat.config import CombatConfig
from trivia_combat.coordinator import CombatCoordinator, RoundReport
from trivia_combat.effects import EffectHandlers, apply_effects, default_handlers
from trivia_combat.encounter import Encounter, build_encounter
from trivia_combat.engine import Engine
from trivia_combat.questions import QuestionBank
from trivia_combat.skills import EffectState, PowerSkill, SkillBook
from trivia_combat.streak import KnowledgeStreak
from trivia_combat.timer import Phase, QuestionTimer, make_question_system
from trivia_combat.types import (
    CombatantStats,
    EffectResult,
    Enemy,
    GameModeConfig,
    InvalidQuestionError,
    Question,
    QuestionProviderError,
    TickContext,
)

__all__ = [
    "Engine",
    "TickContext",
    "CombatConfig",
    "GameModeConfig",
    "Question",
    "QuestionBank",
    "QuestionProviderError",
    "InvalidQuestionError",
    "CombatantStats",
    "Enemy",
    "EffectDef",
    "SkillDef",
    "SkillCatalog",
    "SKILL_DEFINITIONS",
    "EFFECT_KINDS",
    "PowerSkill",
    "EffectState",
    "SkillBook",
    "EffectResult",
    "EffectHandlers",
    "apply_effects",
    "default_handlers",
    "KnowledgeStreak",
    "Phase",
    "QuestionTimer",
    "make_question_system",
    "CombatCoordinator",
    "RoundReport",
    "Encounter",
    "build_encounter",
]
