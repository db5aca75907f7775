"""Skill catalog: static power-skill definitions grouped by tier."""
from __future__ import annotations

import random as _random_mod
from dataclasses import dataclass

from trivia_combat.types import Rarity

EFFECT_KINDS: tuple[str, ...] = (
    "heal",
    "shield",
    "crit",
    "vampire",
    "rage",
    "lucky",
    "scholar",
    "berserker",
    "poison",
    "free_answer",
    "fortress",
    "swift",
    "midas",
    "guardian",
    "war_veteran",
    "dodge",
    "phoenix",
    "time_warp",
    "crown",
    "hp_boost",
    "elemental",
    "assassin",
)

TIER_RARITY: dict[int, Rarity] = {
    1: "common",
    2: "rare",
    3: "epic",
    4: "legendary",
    5: "mythical",
}


@dataclass(frozen=True)
class EffectDef:
    """Effect descriptor of a skill. Not serialized.

    Attributes:
        kind: Effect kind, one of ``EFFECT_KINDS``. Unknown kinds are inert.
        value: Percentage or flat magnitude, meaning fixed per kind.
        cooldown: Calls between triggers for cooldown-gated kinds (0 = none).
        max_stacks: Stack cap for stacking kinds (-1 for uncapped).
    """

    kind: str
    value: float = 0
    cooldown: int = 0
    max_stacks: int = -1

    def __post_init__(self) -> None:
        if not self.kind:
            raise ValueError("EffectDef kind must be non-empty")
        if self.cooldown < 0:
            raise ValueError(f"cooldown must be >= 0, got {self.cooldown}")
        if self.max_stacks < -1:
            raise ValueError(f"max_stacks must be >= -1, got {self.max_stacks}")


@dataclass(frozen=True)
class SkillDef:
    """Catalog entry for one power skill."""

    id: str
    name: str
    description: str
    rarity: Rarity
    tier: int
    effect: EffectDef

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("SkillDef id must be non-empty")
        if self.tier not in TIER_RARITY:
            raise ValueError(f"tier must be in 1..5, got {self.tier}")


SKILL_DEFINITIONS: tuple[SkillDef, ...] = (
    # Tier 1
    SkillDef("heal", "Healing Touch", "Restore 10% HP every 3 rounds",
             "common", 1, EffectDef("heal", 10, cooldown=3)),
    SkillDef("shield", "Iron Will", "Reduce all damage by 5",
             "common", 1, EffectDef("shield", 5)),
    SkillDef("crit", "Sharp Focus", "15% chance to deal double damage",
             "common", 1, EffectDef("crit", 15)),
    # Tier 2
    SkillDef("vampire", "Life Steal", "Heal for 20% of damage dealt",
             "rare", 2, EffectDef("vampire", 20)),
    SkillDef("rage", "Battle Fury", "ATK increases by 5% each round (max 50%)",
             "rare", 2, EffectDef("rage", 5, max_stacks=10)),
    SkillDef("lucky", "Lucky Charm", "25% chance to avoid all damage",
             "rare", 2, EffectDef("lucky", 25)),
    SkillDef("scholar", "Quick Mind", "Gain +2 seconds for answering questions",
             "rare", 2, EffectDef("scholar", 2)),
    SkillDef("berserker", "Berserker Rage", "Deal 2% more damage for every 1% HP missing",
             "rare", 2, EffectDef("berserker", 2)),
    # Tier 3
    SkillDef("poison", "Poison Dart Frog", "Deals 5% of ATK to the enemy every round",
             "epic", 3, EffectDef("poison", 5)),
    SkillDef("free_answer", "Oracle's Wisdom",
             "For the first round, the correct answer is highlighted",
             "epic", 3, EffectDef("free_answer", 1)),
    SkillDef("fortress", "Fortress Defense", "Take 30% less damage when HP is below 50%",
             "epic", 3, EffectDef("fortress", 30)),
    SkillDef("swift", "Lightning Reflexes", "40% chance to attack twice in one round",
             "epic", 3, EffectDef("swift", 40)),
    SkillDef("midas", "Midas Touch", "Gain 50% more coins from victories",
             "epic", 3, EffectDef("midas", 50)),
    # Tier 4
    SkillDef("guardian", "Guardian Angel",
             "All damage dealt to the player is inflicted back to the enemy once every 5 rounds",
             "legendary", 4, EffectDef("guardian", 0, cooldown=5)),
    SkillDef("war_veteran", "War Veteran",
             "ATK increases by 10% for every round, resets per combat",
             "legendary", 4, EffectDef("war_veteran", 10)),
    SkillDef("dodge", "Dodge++", "Every round, 30% chance to not take damage",
             "legendary", 4, EffectDef("dodge", 30)),
    SkillDef("phoenix", "Phoenix Rebirth", "Revive with 50% HP once per combat when defeated",
             "legendary", 4, EffectDef("phoenix", 50, cooldown=1)),
    SkillDef("time_warp", "Time Manipulation",
             "Freeze time for 3 seconds when HP drops below 25%",
             "legendary", 4, EffectDef("time_warp", 3, cooldown=1)),
    # Tier 5
    SkillDef("crown", "Royal Crown", "All stats +50%",
             "mythical", 5, EffectDef("crown", 50)),
    SkillDef("hp_boost", "Super HP", "Max HP and HP *3",
             "mythical", 5, EffectDef("hp_boost", 3)),
    SkillDef("elemental", "Elemental Mastery",
             "Each attack has a random elemental effect (burn, freeze, shock)",
             "mythical", 5, EffectDef("elemental", 100)),
    SkillDef("assassin", "Shadow Assassin", "10% chance to instantly defeat any enemy",
             "mythical", 5, EffectDef("assassin", 10)),
)


class SkillCatalog:
    """Registry of skill definitions. Definition order is preserved."""

    def __init__(self, definitions: tuple[SkillDef, ...] | list[SkillDef] = ()) -> None:
        self._definitions: dict[str, SkillDef] = {}
        for defn in definitions:
            self.define(defn)

    @classmethod
    def default(cls) -> SkillCatalog:
        """Catalog holding the built-in skills."""
        return cls(SKILL_DEFINITIONS)

    def define(self, skill: SkillDef) -> None:
        """Register a skill definition. Overwrites if id exists."""
        self._definitions[skill.id] = skill

    def get(self, skill_id: str) -> SkillDef:
        """Look up a definition. Raises KeyError if not defined."""
        if skill_id not in self._definitions:
            raise KeyError(skill_id)
        return self._definitions[skill_id]

    def has(self, skill_id: str) -> bool:
        return skill_id in self._definitions

    def defined_skills(self) -> list[str]:
        return list(self._definitions)

    def for_tier(self, tier: int) -> list[SkillDef]:
        """All definitions of a tier, in definition order."""
        return [d for d in self._definitions.values() if d.tier == tier]

    def draw(self, tier: int, rng: _random_mod.Random) -> SkillDef | None:
        """Pick a random definition of a tier. None if the tier is empty."""
        pool = self.for_tier(tier)
        if not pool:
            return None
        return pool[rng.randrange(len(pool))]
