"""SkillBook — the player's owned power skills and their runtime counters."""
from __future__ import annotations

import random as _random_mod
from dataclasses import dataclass

from trivia_combat.catalog import EffectDef, SkillCatalog, SkillDef
from trivia_combat.types import Rarity


@dataclass
class PowerSkill:
    """A skill held by the player. Only active skills take part in combat."""

    id: str
    name: str
    description: str
    rarity: Rarity
    tier: int
    effect: EffectDef
    is_active: bool = True

    @classmethod
    def from_def(cls, defn: SkillDef, active: bool = True) -> PowerSkill:
        return cls(
            id=defn.id,
            name=defn.name,
            description=defn.description,
            rarity=defn.rarity,
            tier=defn.tier,
            effect=defn.effect,
            is_active=active,
        )


@dataclass
class EffectState:
    """Runtime counters of one skill. Mutable, serializable."""

    skill_id: str
    current_cooldown: int = 0
    stacks: int = 0
    spent: bool = False  # once-per-combat trigger already used


class SkillBook:
    """Ordered skill collection plus a state record per skill id.

    Insertion order is activation order and decides effect evaluation
    order. Effect counters live here rather than on the skills so one
    encounter owns every mutable counter.
    """

    def __init__(self) -> None:
        self._skills: dict[str, PowerSkill] = {}
        self._order: list[str] = []
        self._states: dict[str, EffectState] = {}

    # --- Registration ---

    def add(self, skill: SkillDef | PowerSkill, active: bool = True) -> PowerSkill:
        """Add a skill. Re-adding an owned id keeps its position and counters."""
        if isinstance(skill, SkillDef):
            skill = PowerSkill.from_def(skill, active=active)
        if skill.id not in self._skills:
            self._order.append(skill.id)
            self._states[skill.id] = EffectState(skill_id=skill.id)
        self._skills[skill.id] = skill
        return skill

    def draw(
        self, tier: int, catalog: SkillCatalog, rng: _random_mod.Random
    ) -> PowerSkill | None:
        """Draw a random skill of a tier from the catalog and add it."""
        defn = catalog.draw(tier, rng)
        if defn is None:
            return None
        return self.add(defn)

    def remove(self, skill_id: str) -> None:
        """Drop a skill and its counters. Raises KeyError if not owned."""
        if skill_id not in self._skills:
            raise KeyError(skill_id)
        del self._skills[skill_id]
        del self._states[skill_id]
        self._order.remove(skill_id)

    def set_active(self, skill_id: str, active: bool) -> None:
        """Toggle participation. Raises KeyError if not owned."""
        if skill_id not in self._skills:
            raise KeyError(skill_id)
        self._skills[skill_id].is_active = active

    # --- Queries ---

    def get(self, skill_id: str) -> PowerSkill | None:
        return self._skills.get(skill_id)

    def state(self, skill_id: str) -> EffectState | None:
        """Direct access to runtime counters. None if not owned."""
        return self._states.get(skill_id)

    def skills(self) -> list[PowerSkill]:
        """All owned skills in activation order."""
        return [self._skills[sid] for sid in self._order]

    def active_skills(self) -> list[PowerSkill]:
        return [s for s in self.skills() if s.is_active]

    def find_active(self, kind: str) -> PowerSkill | None:
        """First active skill with the given effect kind."""
        for skill in self.skills():
            if skill.is_active and skill.effect.kind == kind:
                return skill
        return None

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._skills

    # --- Lifecycle ---

    def trigger(self, skill_id: str, once: bool = False) -> None:
        """Restart a skill's cooldown after it fired.

        With ``once`` the skill is also spent until the next combat_start.
        Raises KeyError if not owned.
        """
        if skill_id not in self._skills:
            raise KeyError(skill_id)
        state = self._states[skill_id]
        state.current_cooldown = self._skills[skill_id].effect.cooldown
        if once:
            state.spent = True
