"""Tests for trivia_combat.effects — apply_effects and the handler registry."""
from __future__ import annotations

from random import Random

from trivia_combat.catalog import EffectDef, SkillDef
from trivia_combat.config import CombatConfig
from trivia_combat.effects import EffectHandlers, apply_effects, default_handlers
from trivia_combat.skills import SkillBook
from trivia_combat.types import CONTEXTS, EffectResult


def _book(*effects: EffectDef) -> SkillBook:
    """SkillBook holding one skill per effect, ids '<kind>_<n>'."""
    book = SkillBook()
    for i, effect in enumerate(effects):
        book.add(SkillDef(
            id=f"{effect.kind}_{i}",
            name=effect.kind.title(),
            description="",
            rarity="common",
            tier=1,
            effect=effect,
        ))
    return book


def _rng() -> Random:
    return Random(42)


class TestNoSkills:
    def test_every_context_returns_input_unchanged(self) -> None:
        state = EffectResult(damage=7, heal_amount=1, max_hp=50, hp=20, attack=9)
        for context in CONTEXTS:
            result = apply_effects(SkillBook(), context, state, _rng())
            assert result == state
            assert result is not state

    def test_input_is_not_mutated(self) -> None:
        book = _book(EffectDef("shield", 5))
        state = EffectResult(damage=8)
        result = apply_effects(book, "damage_taken", state, _rng())
        assert result.damage == 3
        assert state.damage == 8


class TestShield:
    def test_reduces_damage_to_zero_never_negative(self) -> None:
        book = _book(EffectDef("shield", 5))
        result = apply_effects(book, "damage_taken", EffectResult(damage=3), _rng())
        assert result.damage == 0

    def test_subtracts_value(self) -> None:
        book = _book(EffectDef("shield", 5))
        result = apply_effects(book, "damage_taken", EffectResult(damage=12), _rng())
        assert result.damage == 7

    def test_ignored_outside_damage_taken(self) -> None:
        book = _book(EffectDef("shield", 5))
        result = apply_effects(book, "damage_dealt", EffectResult(damage=12), _rng())
        assert result.damage == 12


class TestHealCooldown:
    def test_heals_then_waits_out_cooldown(self) -> None:
        book = _book(EffectDef("heal", 10, cooldown=3))
        state = book.state("heal_0")
        assert state is not None

        heals = []
        cooldowns = []
        for _ in range(4):
            result = apply_effects(book, "round_start", EffectResult(max_hp=100), _rng())
            heals.append(result.heal_amount)
            cooldowns.append(state.current_cooldown)

        # Fires, sits out two calls, fires again.
        assert heals == [10, 0, 0, 10]
        assert cooldowns == [2, 1, 0, 2]

    def test_heal_floors_percentage(self) -> None:
        book = _book(EffectDef("heal", 10, cooldown=3))
        result = apply_effects(book, "round_start", EffectResult(max_hp=55), _rng())
        assert result.heal_amount == 5

    def test_cooldown_decrements_in_non_matching_context(self) -> None:
        book = _book(EffectDef("heal", 10, cooldown=3))
        apply_effects(book, "round_start", EffectResult(max_hp=100), _rng())
        state = book.state("heal_0")
        assert state is not None
        assert state.current_cooldown == 2

        apply_effects(book, "damage_dealt", EffectResult(damage=5), _rng())
        assert state.current_cooldown == 1

    def test_cooldowns_hold_when_not_ticking(self) -> None:
        book = _book(EffectDef("heal", 10, cooldown=3))
        apply_effects(book, "round_start", EffectResult(max_hp=100), _rng())
        state = book.state("heal_0")
        assert state is not None
        assert state.current_cooldown == 2

        apply_effects(
            book, "damage_taken", EffectResult(damage=5), _rng(), tick_cooldowns=False
        )
        assert state.current_cooldown == 2

    def test_cooldown_never_goes_negative(self) -> None:
        book = _book(EffectDef("heal", 10, cooldown=1))
        state = book.state("heal_0")
        assert state is not None
        for _ in range(5):
            apply_effects(book, "victory", EffectResult(), _rng())
            assert state.current_cooldown == 0


class TestCrit:
    def test_guaranteed_crit_doubles_damage(self) -> None:
        book = _book(EffectDef("crit", 100))
        for _ in range(10):
            result = apply_effects(book, "damage_dealt", EffectResult(damage=9), _rng())
            assert result.damage == 18
            assert result.is_crit is True

    def test_zero_chance_never_crits(self) -> None:
        book = _book(EffectDef("crit", 0))
        result = apply_effects(book, "damage_dealt", EffectResult(damage=9), _rng())
        assert result.damage == 9
        assert result.is_crit is False

    def test_failed_roll_still_decrements_cooldown(self) -> None:
        book = _book(EffectDef("crit", 0, cooldown=2))
        state = book.state("crit_0")
        assert state is not None
        state.current_cooldown = 2

        result = apply_effects(book, "damage_dealt", EffectResult(damage=9), _rng())
        assert result.damage == 9
        assert state.current_cooldown == 1

    def test_seeded_rolls_are_reproducible(self) -> None:
        book = _book(EffectDef("crit", 50))
        rng_a, rng_b = Random(7), Random(7)
        crits_a = [
            apply_effects(book, "damage_dealt", EffectResult(damage=4), rng_a).is_crit
            for _ in range(20)
        ]
        crits_b = [
            apply_effects(book, "damage_dealt", EffectResult(damage=4), rng_b).is_crit
            for _ in range(20)
        ]
        assert crits_a == crits_b


class TestLifeSteal:
    def test_vampire_heals_percentage_of_damage(self) -> None:
        book = _book(EffectDef("vampire", 20))
        result = apply_effects(book, "damage_dealt", EffectResult(damage=50), _rng())
        assert result.heal_amount == 10
        assert result.damage == 50

    def test_later_skills_see_earlier_changes(self) -> None:
        book = _book(EffectDef("crit", 100), EffectDef("vampire", 50))
        result = apply_effects(book, "damage_dealt", EffectResult(damage=10), _rng())
        assert result.damage == 20
        assert result.heal_amount == 10

    def test_activation_order_matters(self) -> None:
        book = _book(EffectDef("vampire", 50), EffectDef("crit", 100))
        result = apply_effects(book, "damage_dealt", EffectResult(damage=10), _rng())
        assert result.damage == 20
        assert result.heal_amount == 5


class TestStacking:
    def test_rage_stacks_to_cap_and_holds(self) -> None:
        book = _book(EffectDef("rage", 5, max_stacks=10))
        state = book.state("rage_0")
        assert state is not None

        for expected in range(1, 11):
            apply_effects(book, "combat_start", EffectResult(), _rng())
            assert state.stacks == expected

        result = apply_effects(book, "combat_start", EffectResult(), _rng())
        assert state.stacks == 10
        assert result.atk_bonus == 50

    def test_rage_bonus_recomputed_from_stacks(self) -> None:
        book = _book(EffectDef("rage", 5, max_stacks=10))
        apply_effects(book, "combat_start", EffectResult(), _rng())
        result = apply_effects(book, "combat_start", EffectResult(), _rng())
        assert result.atk_bonus == 10

    def test_rage_ignores_round_start(self) -> None:
        book = _book(EffectDef("rage", 5, max_stacks=10))
        apply_effects(book, "round_start", EffectResult(), _rng())
        state = book.state("rage_0")
        assert state is not None
        assert state.stacks == 0

    def test_war_veteran_stacks_per_round_and_resets_per_combat(self) -> None:
        book = _book(EffectDef("war_veteran", 10))
        state = book.state("war_veteran_0")
        assert state is not None

        bonuses = [
            apply_effects(book, "round_start", EffectResult(), _rng()).atk_bonus
            for _ in range(3)
        ]
        assert bonuses == [10, 20, 30]
        assert state.stacks == 3

        apply_effects(book, "combat_start", EffectResult(), _rng())
        assert state.stacks == 0

    def test_uncapped_stacks_keep_growing(self) -> None:
        book = _book(EffectDef("war_veteran", 10))
        for _ in range(25):
            apply_effects(book, "round_start", EffectResult(), _rng())
        state = book.state("war_veteran_0")
        assert state is not None
        assert state.stacks == 25


class TestCombatStart:
    def test_crown_adds_to_every_stat_bonus(self) -> None:
        book = _book(EffectDef("crown", 50))
        result = apply_effects(book, "combat_start", EffectResult(), _rng())
        assert (result.atk_bonus, result.def_bonus, result.hp_bonus) == (50, 50, 50)

    def test_two_crowns_accumulate(self) -> None:
        book = _book(EffectDef("crown", 50), EffectDef("crown", 50))
        result = apply_effects(book, "combat_start", EffectResult(), _rng())
        assert result.atk_bonus == 100

    def test_hp_boost_multiplies(self) -> None:
        book = _book(EffectDef("hp_boost", 3), EffectDef("hp_boost", 3))
        result = apply_effects(book, "combat_start", EffectResult(), _rng())
        assert result.hp_multiplier == 9


class TestDamageTaken:
    def test_lucky_guaranteed_avoids_damage(self) -> None:
        book = _book(EffectDef("lucky", 100))
        result = apply_effects(book, "damage_taken", EffectResult(damage=30), _rng())
        assert result.damage == 0
        assert result.dodged is True

    def test_dodge_zero_chance_never_avoids(self) -> None:
        book = _book(EffectDef("dodge", 0))
        result = apply_effects(book, "damage_taken", EffectResult(damage=30), _rng())
        assert result.damage == 30
        assert result.dodged is False

    def test_fortress_reduces_damage_below_half_hp(self) -> None:
        book = _book(EffectDef("fortress", 30))
        result = apply_effects(
            book, "damage_taken", EffectResult(damage=10, hp=40, max_hp=100), _rng()
        )
        assert result.damage == 7

    def test_fortress_inactive_at_half_hp(self) -> None:
        book = _book(EffectDef("fortress", 30))
        result = apply_effects(
            book, "damage_taken", EffectResult(damage=10, hp=50, max_hp=100), _rng()
        )
        assert result.damage == 10

    def test_guardian_offers_reflection_when_ready(self) -> None:
        book = _book(EffectDef("guardian", 0, cooldown=5))
        result = apply_effects(book, "damage_taken", EffectResult(damage=12), _rng())
        assert result.reflect_source == "guardian_0"
        assert result.damage == 12
        state = book.state("guardian_0")
        assert state is not None
        # Readiness alone does not start the cooldown.
        assert state.current_cooldown == 0

    def test_guardian_waits_out_cooldown(self) -> None:
        book = _book(EffectDef("guardian", 0, cooldown=5))
        state = book.state("guardian_0")
        assert state is not None
        state.current_cooldown = 3

        result = apply_effects(book, "damage_taken", EffectResult(damage=12), _rng())
        assert result.reflect_source is None
        assert state.current_cooldown == 2

    def test_guardian_ignores_zero_damage(self) -> None:
        book = _book(EffectDef("shield", 50), EffectDef("guardian", 0, cooldown=5))
        result = apply_effects(book, "damage_taken", EffectResult(damage=12), _rng())
        assert result.reflect_source is None

    def test_phoenix_offers_revive_until_spent(self) -> None:
        book = _book(EffectDef("phoenix", 50, cooldown=1))
        lethal = EffectResult(damage=10, hp=5, max_hp=100)

        first = apply_effects(book, "damage_taken", lethal, _rng())
        assert first.revive_hp == 50
        assert first.revive_source == "phoenix_0"
        state = book.state("phoenix_0")
        assert state is not None
        assert state.spent is False

        book.trigger("phoenix_0", once=True)
        second = apply_effects(book, "damage_taken", lethal, _rng())
        assert second.revive_source is None

        apply_effects(book, "combat_start", EffectResult(), _rng())
        third = apply_effects(book, "damage_taken", lethal, _rng())
        assert third.revive_source == "phoenix_0"

    def test_phoenix_ignores_non_lethal_hits(self) -> None:
        book = _book(EffectDef("phoenix", 50, cooldown=1))
        result = apply_effects(
            book, "damage_taken", EffectResult(damage=10, hp=50, max_hp=100), _rng()
        )
        assert result.revive_hp == 0
        assert result.revive_source is None

    def test_first_ready_phoenix_claims_the_revive(self) -> None:
        book = _book(EffectDef("phoenix", 50, cooldown=1), EffectDef("phoenix", 80, cooldown=1))
        result = apply_effects(
            book, "damage_taken", EffectResult(damage=10, hp=5, max_hp=100), _rng()
        )
        assert result.revive_source == "phoenix_0"
        assert result.revive_hp == 50

    def test_time_warp_offers_freeze_below_quarter_hp(self) -> None:
        book = _book(EffectDef("time_warp", 3, cooldown=1))
        state = EffectResult(damage=10, hp=30, max_hp=100)

        first = apply_effects(book, "damage_taken", state, _rng())
        assert first.freeze_seconds == 3
        assert first.freeze_source == "time_warp_0"

        book.trigger("time_warp_0", once=True)
        second = apply_effects(book, "damage_taken", state, _rng())
        assert second.freeze_source is None

    def test_time_warp_waits_for_low_hp(self) -> None:
        book = _book(EffectDef("time_warp", 3, cooldown=1))
        result = apply_effects(
            book, "damage_taken", EffectResult(damage=10, hp=100, max_hp=100), _rng()
        )
        assert result.freeze_seconds == 0
        assert result.freeze_source is None


class TestDamageDealt:
    def test_berserker_scales_with_missing_hp(self) -> None:
        book = _book(EffectDef("berserker", 2))
        result = apply_effects(
            book, "damage_dealt", EffectResult(damage=10, hp=50, max_hp=100), _rng()
        )
        assert result.damage == 20

    def test_berserker_at_full_hp_is_neutral(self) -> None:
        book = _book(EffectDef("berserker", 2))
        result = apply_effects(
            book, "damage_dealt", EffectResult(damage=10, hp=100, max_hp=100), _rng()
        )
        assert result.damage == 10

    def test_swift_adds_second_hit(self) -> None:
        book = _book(EffectDef("swift", 100))
        result = apply_effects(book, "damage_dealt", EffectResult(damage=8), _rng())
        assert result.damage == 16
        assert result.extra_hits == 1

    def test_assassin_flags_instant_kill(self) -> None:
        book = _book(EffectDef("assassin", 100))
        result = apply_effects(book, "damage_dealt", EffectResult(damage=1), _rng())
        assert result.instant_kill is True

    def test_elemental_freeze(self) -> None:
        config = CombatConfig(elements=("freeze",))
        book = _book(EffectDef("elemental", 100))
        result = apply_effects(
            book, "damage_dealt", EffectResult(damage=20), _rng(), config=config
        )
        assert result.elements == ["freeze"]
        assert result.enemy_frozen is True
        assert result.damage == 20

    def test_elemental_burn_and_shock_bonus(self) -> None:
        book = _book(EffectDef("elemental", 100))
        burn = apply_effects(
            book, "damage_dealt", EffectResult(damage=20), _rng(),
            config=CombatConfig(elements=("burn",)),
        )
        shock = apply_effects(
            book, "damage_dealt", EffectResult(damage=20), _rng(),
            config=CombatConfig(elements=("shock",)),
        )
        assert burn.damage == 25
        assert shock.damage == 30


class TestRoundAndVictory:
    def test_poison_deals_percentage_of_attack(self) -> None:
        book = _book(EffectDef("poison", 5))
        result = apply_effects(book, "round_start", EffectResult(attack=40), _rng())
        assert result.poison_damage == 2

    def test_poison_deals_at_least_one(self) -> None:
        book = _book(EffectDef("poison", 5))
        result = apply_effects(book, "round_start", EffectResult(attack=5), _rng())
        assert result.poison_damage == 1

    def test_midas_adds_coin_bonus_on_victory(self) -> None:
        book = _book(EffectDef("midas", 50))
        assert apply_effects(book, "victory", EffectResult(), _rng()).coin_bonus == 50
        assert apply_effects(book, "damage_dealt", EffectResult(), _rng()).coin_bonus == 0


class TestSkipping:
    def test_inactive_skill_does_nothing(self) -> None:
        book = _book(EffectDef("shield", 5, cooldown=2))
        book.set_active("shield_0", False)
        state = book.state("shield_0")
        assert state is not None
        state.current_cooldown = 2

        result = apply_effects(book, "damage_taken", EffectResult(damage=10), _rng())
        assert result.damage == 10
        assert state.current_cooldown == 2

    def test_unknown_kind_is_ignored(self) -> None:
        book = _book(EffectDef("meteor", 50, cooldown=2), EffectDef("shield", 5))
        state = book.state("meteor_0")
        assert state is not None
        state.current_cooldown = 2

        result = apply_effects(book, "damage_taken", EffectResult(damage=10), _rng())
        assert result.damage == 5
        assert state.current_cooldown == 1

    def test_timer_only_kinds_change_nothing(self) -> None:
        book = _book(EffectDef("scholar", 2), EffectDef("free_answer", 1))
        state = EffectResult(damage=4, max_hp=10, hp=10)
        for context in CONTEXTS:
            assert apply_effects(book, context, state, _rng()) == state


class TestEffectHandlers:
    def test_default_registry_covers_catalog_kinds(self) -> None:
        handlers = default_handlers()
        for kind in ("heal", "shield", "crit", "vampire", "crown", "hp_boost",
                     "scholar", "free_answer", "assassin"):
            assert handlers.has(kind)
        assert not handlers.has("meteor")

    def test_lookup_respects_context(self) -> None:
        handlers = default_handlers()
        assert handlers.lookup("shield", "damage_taken") is not None
        assert handlers.lookup("shield", "damage_dealt") is None
        assert handlers.lookup("meteor", "damage_taken") is None

    def test_custom_handler(self) -> None:
        handlers = EffectHandlers()

        def meteor(skill, state, context, result, rng, config) -> None:
            result.damage += int(skill.effect.value)

        handlers.register("meteor", ("damage_dealt",), meteor)
        book = _book(EffectDef("meteor", 5))

        result = apply_effects(
            book, "damage_dealt", EffectResult(damage=1), _rng(), handlers=handlers
        )
        assert result.damage == 6
        assert handlers.kinds() == ["meteor"]
