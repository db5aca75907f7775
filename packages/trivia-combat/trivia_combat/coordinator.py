"""CombatCoordinator — turns answer outcomes into resolved combat events."""
from __future__ import annotations

import logging
import math
import random as _random_mod
from dataclasses import dataclass, field
from typing import Callable

from trivia_combat.config import CombatConfig
from trivia_combat.effects import EffectHandlers, apply_effects
from trivia_combat.skills import SkillBook
from trivia_combat.streak import KnowledgeStreak
from trivia_combat.types import CombatantStats, EffectResult, Enemy

logger = logging.getLogger(__name__)


@dataclass
class RoundReport:
    """What one resolved question did to both sides."""

    correct: bool
    category: str | None
    player_damage: int = 0
    enemy_damage: int = 0
    healed: int = 0
    poison_damage: int = 0
    reflected_damage: int = 0
    is_crit: bool = False
    dodged: bool = False
    revived: bool = False
    instant_kill: bool = False
    elements: list[str] = field(default_factory=list)


class CombatCoordinator:
    """Owns one encounter's HP bookkeeping, combat log and end signals.

    ``start()`` runs the combat_start pass on the base stats. Each
    ``resolve()`` call then runs, in order:
    1. round_start pass (heal, poison, war veteran stacks), the only pass
       that ticks cooldowns, so a cooldown of N means N rounds
    2. damage_dealt pass on a correct answer, damage_taken otherwise
    3. HP commit with clamping and log entries; guardian, time warp and
       phoenix fire here against the final damage
    4. streak update and ``on_attack``
    5. victory pass and ``on_victory``, or ``on_lose``
    """

    def __init__(
        self,
        player: CombatantStats,
        enemy: Enemy,
        skills: SkillBook,
        rng: _random_mod.Random,
        combat_log: list[str] | None = None,
        streak: KnowledgeStreak | None = None,
        config: CombatConfig | None = None,
        handlers: EffectHandlers | None = None,
        on_attack: Callable[[bool, str | None], None] | None = None,
        on_lose: Callable[[], None] | None = None,
        on_victory: Callable[[int], None] | None = None,
        on_freeze: Callable[[int], None] | None = None,
    ) -> None:
        self._config = config if config is not None else CombatConfig()
        self._base = CombatantStats(player.hp, player.max_hp, player.attack, player.defense)
        self._player = player
        self._enemy = enemy
        self._skills = skills
        self._rng = rng
        self._log = combat_log if combat_log is not None else []
        self._streak = (
            streak
            if streak is not None
            else KnowledgeStreak(step=self._config.streak_step, cap=self._config.streak_cap)
        )
        self._handlers = handlers
        self._on_attack = on_attack
        self._on_lose = on_lose
        self._on_victory = on_victory
        self._on_freeze = on_freeze

        self._started = False
        self._victory = False
        self._defeat = False
        self._enemy_frozen = False
        self._round_atk_bonus = 0
        self._coins = 0

    # --- Queries ---

    @property
    def player(self) -> CombatantStats:
        return self._player

    @property
    def enemy(self) -> Enemy:
        return self._enemy

    @property
    def streak(self) -> KnowledgeStreak:
        return self._streak

    @property
    def combat_log(self) -> list[str]:
        return self._log

    @property
    def is_over(self) -> bool:
        return self._victory or self._defeat

    @property
    def victory(self) -> bool:
        return self._victory

    @property
    def defeat(self) -> bool:
        return self._defeat

    @property
    def coins_earned(self) -> int:
        return self._coins

    def recent_log(self, n: int | None = None) -> list[str]:
        """Most recent log entries, oldest first."""
        if n is None:
            n = self._config.log_tail
        if n <= 0:
            return []
        return self._log[-n:]

    # --- Lifecycle ---

    def start(self) -> None:
        """Apply combat_start effects to the base player stats."""
        if self._started:
            return
        self._started = True
        base = self._base
        result = self._pass(
            "combat_start",
            EffectResult(max_hp=base.max_hp, hp=base.hp, attack=base.attack),
        )

        max_hp = math.floor(base.max_hp * (100 + result.hp_bonus) / 100 * result.hp_multiplier)
        self._player.max_hp = max(1, max_hp)
        if base.max_hp > 0:
            self._player.hp = math.floor(base.hp * self._player.max_hp / base.max_hp)
        self._player.attack = math.floor(base.attack * (100 + result.atk_bonus) / 100)
        self._player.defense = math.floor(base.defense * (100 + result.def_bonus) / 100)
        self._player.clamp()
        self._enemy.stats.clamp()

        self._append(
            f"A wild {self._enemy.name} appears in zone {self._enemy.zone}! "
            f"(HP {self._player.hp}/{self._player.max_hp}, ATK {self._player.attack}, "
            f"DEF {self._player.defense})"
        )
        logger.info("Encounter started against %s (zone %d)", self._enemy.name, self._enemy.zone)

    def resolve(self, correct: bool, category: str | None = None) -> RoundReport | None:
        """Resolve one answered (or timed out) question.

        Returns None once the encounter is over.
        """
        if self.is_over:
            return None
        if not self._started:
            self.start()

        report = RoundReport(correct=correct, category=category)
        self._round_start(report)

        if not self._enemy.stats.is_defeated:
            if correct:
                self._player_attacks(report)
            else:
                self._enemy_attacks(report)

        self._streak.record(correct)
        if self._on_attack is not None:
            self._on_attack(correct, category)

        self._check_end()
        return report

    # --- Internal helpers ---

    def _pass(self, context: str, state: EffectResult) -> EffectResult:
        # Cooldowns count rounds, so only the round_start pass ticks them.
        return apply_effects(
            self._skills, context, state, self._rng,
            config=self._config, handlers=self._handlers,
            tick_cooldowns=context == "round_start",
        )

    def _append(self, line: str) -> None:
        self._log.append(line)

    def _base_damage(self, attacker: CombatantStats, defender: CombatantStats) -> int:
        return max(self._config.min_damage, attacker.attack - defender.defense)

    def _round_start(self, report: RoundReport) -> None:
        p = self._player
        result = self._pass(
            "round_start", EffectResult(max_hp=p.max_hp, hp=p.hp, attack=p.attack)
        )
        if result.heal_amount > 0:
            report.healed += p.heal(result.heal_amount)
            self._append(f"You recover {result.heal_amount} HP.")
        if result.poison_damage > 0:
            self._enemy.is_poisoned = True
            report.poison_damage = self._enemy.stats.damage(result.poison_damage)
            self._append(f"Poison deals {result.poison_damage} damage to {self._enemy.name}.")
        # war_veteran stacks only last for this round
        self._round_atk_bonus = result.atk_bonus

    def _player_attacks(self, report: RoundReport) -> None:
        p = self._player
        attack = math.floor(p.attack * (100 + self._round_atk_bonus) / 100)
        raw = max(self._config.min_damage, attack - self._enemy.stats.defense)
        damage = math.floor(raw * self._streak.multiplier)

        result = self._pass(
            "damage_dealt",
            EffectResult(damage=damage, max_hp=p.max_hp, hp=p.hp, attack=attack),
        )
        report.is_crit = result.is_crit
        report.elements = list(result.elements)
        report.instant_kill = result.instant_kill

        if result.instant_kill:
            report.enemy_damage = self._enemy.stats.damage(self._enemy.stats.hp)
            self._append(f"Shadow strike! {self._enemy.name} is instantly defeated.")
        else:
            report.enemy_damage = self._enemy.stats.damage(result.damage)
            line = f"Correct! You hit {self._enemy.name} for {result.damage} damage"
            if result.is_crit:
                line += " (critical)"
            if result.extra_hits:
                line += f" ({result.extra_hits + 1} hits)"
            self._append(line + ".")
        for element in result.elements:
            self._append(f"Elemental {element} surges through {self._enemy.name}.")

        if result.enemy_frozen:
            self._enemy_frozen = True
        if result.heal_amount > 0:
            report.healed += p.heal(result.heal_amount)
            self._append(f"You drain {result.heal_amount} HP.")

    def _enemy_attacks(self, report: RoundReport) -> None:
        p = self._player
        if self._enemy_frozen:
            self._enemy_frozen = False
            self._append(f"Wrong answer, but {self._enemy.name} is frozen solid.")
            return

        damage = self._base_damage(self._enemy.stats, p)
        result = self._pass(
            "damage_taken",
            EffectResult(damage=damage, max_hp=p.max_hp, hp=p.hp, attack=p.attack),
        )
        report.dodged = result.dodged

        if result.dodged:
            self._append(f"Wrong answer! You dodge {self._enemy.name}'s attack.")
        else:
            report.player_damage = p.damage(result.damage)
            self._append(f"Wrong answer! {self._enemy.name} hits you for {result.damage} damage.")

        if result.dodged or result.damage <= 0:
            return
        if result.reflect_source is not None:
            report.reflected_damage = self._enemy.stats.damage(result.damage)
            self._skills.trigger(result.reflect_source)
            self._append(f"Guardian Angel reflects {result.damage} damage.")
        if result.freeze_source is not None and p.hp * 4 < p.max_hp:
            self._skills.trigger(result.freeze_source, once=True)
            self._append(f"Time freezes for {result.freeze_seconds} seconds.")
            if self._on_freeze is not None:
                self._on_freeze(result.freeze_seconds)
        if result.revive_source is not None and p.is_defeated:
            self._skills.trigger(result.revive_source, once=True)
            p.heal(result.revive_hp)
            report.revived = True
            self._append(f"You rise from the ashes with {p.hp} HP!")

    def _check_end(self) -> None:
        if self._enemy.stats.is_defeated:
            self._victory = True
            result = self._pass("victory", EffectResult())
            self._coins = math.floor(self._enemy.coin_reward * (100 + result.coin_bonus) / 100)
            self._append(f"{self._enemy.name} is defeated! You earn {self._coins} coins.")
            logger.info("Victory against %s, %d coins", self._enemy.name, self._coins)
            if self._on_victory is not None:
                self._on_victory(self._coins)
        elif self._player.is_defeated:
            self._defeat = True
            self._append(f"You were defeated by {self._enemy.name}.")
            logger.info("Defeat against %s", self._enemy.name)
            if self._on_lose is not None:
                self._on_lose()
