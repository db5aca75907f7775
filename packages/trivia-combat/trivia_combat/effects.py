"""Skill effect engine: applies active skills to one combat context."""
from __future__ import annotations

import dataclasses
import logging
import math
import random as _random_mod
from typing import Callable

from trivia_combat.config import CombatConfig
from trivia_combat.skills import EffectState, PowerSkill, SkillBook
from trivia_combat.types import EffectResult

logger = logging.getLogger(__name__)

EffectHandler = Callable[
    [PowerSkill, EffectState, str, EffectResult, _random_mod.Random, CombatConfig],
    None,
]


class EffectHandlers:
    """Maps effect kinds to the contexts they fire in and their handler."""

    def __init__(self) -> None:
        self._handlers: dict[str, tuple[frozenset[str], EffectHandler]] = {}

    def register(self, kind: str, contexts: tuple[str, ...], fn: EffectHandler) -> None:
        """Register a handler for a kind. Overwrites if already registered."""
        self._handlers[kind] = (frozenset(contexts), fn)

    def lookup(self, kind: str, context: str) -> EffectHandler | None:
        """Handler for kind if it fires in context, else None."""
        entry = self._handlers.get(kind)
        if entry is None:
            return None
        contexts, fn = entry
        return fn if context in contexts else None

    def has(self, kind: str) -> bool:
        return kind in self._handlers

    def kinds(self) -> list[str]:
        return list(self._handlers)


def _roll(rng: _random_mod.Random, percent: float) -> bool:
    return rng.random() * 100 < percent


def _add_stack(state: EffectState, max_stacks: int) -> None:
    if max_stacks == -1 or state.stacks < max_stacks:
        state.stacks += 1


# --- Built-in handlers ---


def _heal(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if state.current_cooldown == 0:
        r.heal_amount += math.floor(r.max_hp * skill.effect.value / 100)
        state.current_cooldown = skill.effect.cooldown


def _shield(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    r.damage = max(0, r.damage - int(skill.effect.value))


def _crit(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if _roll(rng, skill.effect.value):
        r.damage *= 2
        r.is_crit = True


def _vampire(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    r.heal_amount += math.floor(r.damage * skill.effect.value / 100)


def _rage(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    _add_stack(state, skill.effect.max_stacks)
    r.atk_bonus += int(skill.effect.value * state.stacks)


def _avoid(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    # lucky and dodge
    if _roll(rng, skill.effect.value):
        r.damage = 0
        r.dodged = True


def _berserker(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if r.max_hp <= 0:
        return
    missing_pct = (r.max_hp - r.hp) * 100 / r.max_hp
    r.damage = math.floor(r.damage * (1 + skill.effect.value * missing_pct / 100))


def _poison(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    r.poison_damage += max(1, math.floor(r.attack * skill.effect.value / 100))


def _fortress(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if r.hp * 2 < r.max_hp:
        r.damage = math.floor(r.damage * (100 - skill.effect.value) / 100)


def _swift(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if _roll(rng, skill.effect.value):
        r.damage += r.damage
        r.extra_hits += 1


def _midas(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    r.coin_bonus += int(skill.effect.value)


def _guardian(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if r.reflect_source is None and state.current_cooldown == 0 and r.damage > 0:
        r.reflect_source = skill.id


def _war_veteran(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if context == "combat_start":
        state.stacks = 0
        return
    _add_stack(state, skill.effect.max_stacks)
    r.atk_bonus += int(skill.effect.value * state.stacks)


def _phoenix(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if context == "combat_start":
        state.spent = False
        return
    if r.revive_source is not None or state.spent or state.current_cooldown > 0:
        return
    # Later skills only lower the damage, so a non-lethal hit stays non-lethal.
    if r.max_hp > 0 and r.hp - r.damage <= 0:
        r.revive_hp = max(1, math.floor(r.max_hp * skill.effect.value / 100))
        r.revive_source = skill.id


def _time_warp(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if context == "combat_start":
        state.spent = False
        return
    if r.freeze_source is not None or state.spent or state.current_cooldown > 0:
        return
    if (r.hp - r.damage) * 4 < r.max_hp:
        r.freeze_seconds = int(skill.effect.value)
        r.freeze_source = skill.id


def _crown(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    bonus = int(skill.effect.value)
    r.atk_bonus += bonus
    r.def_bonus += bonus
    r.hp_bonus += bonus


def _hp_boost(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    r.hp_multiplier *= skill.effect.value


def _elemental(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if not config.elements or not _roll(rng, skill.effect.value):
        return
    element = config.elements[rng.randrange(len(config.elements))]
    r.elements.append(element)
    bonus = dict(config.element_bonus).get(element, 0)
    r.damage += math.floor(r.damage * bonus / 100)
    if element == "freeze":
        r.enemy_frozen = True


def _assassin(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    if _roll(rng, skill.effect.value):
        r.instant_kill = True


def _timer_only(
    skill: PowerSkill,
    state: EffectState,
    context: str,
    r: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig,
) -> None:
    pass


def default_handlers() -> EffectHandlers:
    """Registry with every built-in effect kind.

    ``scholar`` and ``free_answer`` fire in no context; the question timer
    reads them directly.
    """
    handlers = EffectHandlers()
    handlers.register("heal", ("round_start",), _heal)
    handlers.register("shield", ("damage_taken",), _shield)
    handlers.register("crit", ("damage_dealt",), _crit)
    handlers.register("vampire", ("damage_dealt",), _vampire)
    handlers.register("rage", ("combat_start",), _rage)
    handlers.register("lucky", ("damage_taken",), _avoid)
    handlers.register("berserker", ("damage_dealt",), _berserker)
    handlers.register("poison", ("round_start",), _poison)
    handlers.register("fortress", ("damage_taken",), _fortress)
    handlers.register("swift", ("damage_dealt",), _swift)
    handlers.register("midas", ("victory",), _midas)
    handlers.register("guardian", ("damage_taken",), _guardian)
    handlers.register("war_veteran", ("combat_start", "round_start"), _war_veteran)
    handlers.register("dodge", ("damage_taken",), _avoid)
    handlers.register("phoenix", ("combat_start", "damage_taken"), _phoenix)
    handlers.register("time_warp", ("combat_start", "damage_taken"), _time_warp)
    handlers.register("crown", ("combat_start",), _crown)
    handlers.register("hp_boost", ("combat_start",), _hp_boost)
    handlers.register("elemental", ("damage_dealt",), _elemental)
    handlers.register("assassin", ("damage_dealt",), _assassin)
    handlers.register("scholar", (), _timer_only)
    handlers.register("free_answer", (), _timer_only)
    return handlers


_DEFAULT_HANDLERS = default_handlers()
_DEFAULT_CONFIG = CombatConfig()


def apply_effects(
    book: SkillBook,
    context: str,
    state: EffectResult,
    rng: _random_mod.Random,
    config: CombatConfig | None = None,
    handlers: EffectHandlers | None = None,
    tick_cooldowns: bool = True,
) -> EffectResult:
    """Run one context pass over the active skills and return the result.

    Evaluation order per active skill (activation order):
    1. Fire the kind's handler if it is registered for ``context``
    2. Decrement the skill's cooldown if above 0, unless ``tick_cooldowns``
       is False

    The input is not modified; skill counters in ``book`` are. Reactive
    kinds (guardian, phoenix, time_warp) only report that they are ready
    through the ``*_source`` fields; the caller commits them with
    ``SkillBook.trigger`` once the hit is final.
    """
    if config is None:
        config = _DEFAULT_CONFIG
    if handlers is None:
        handlers = _DEFAULT_HANDLERS

    result = dataclasses.replace(state, elements=list(state.elements))

    for skill in book.active_skills():
        counters = book.state(skill.id)
        if counters is None:
            continue

        fn = handlers.lookup(skill.effect.kind, context)
        if fn is not None:
            fn(skill, counters, context, result, rng, config)
        elif not handlers.has(skill.effect.kind):
            logger.debug("Ignoring skill %s with unknown effect kind %r",
                         skill.id, skill.effect.kind)

        if tick_cooldowns and counters.current_cooldown > 0:
            counters.current_cooldown -= 1

    return result
