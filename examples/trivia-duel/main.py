"""Trivia Duel — scripted trivia-combat encounter.

A simulated player answers questions against a zone 2 enemy while a
handful of power skills fire. Nothing is interactive: the player picks
the right answer about 70% of the time and now and then lets the timer
run out.

Run:
    uv run python main.py
"""
from __future__ import annotations

import logging
import random

from trivia_combat import (
    CombatantStats,
    Enemy,
    GameModeConfig,
    Phase,
    QuestionBank,
    SkillBook,
    SkillCatalog,
    TickContext,
    build_encounter,
)

# ---------------------------------------------------------------------------
# Question data
# ---------------------------------------------------------------------------

QUESTIONS = [
    {"id": 1, "zone": 1, "category": "science", "difficulty": "easy",
     "question": "What gas do plants absorb?",
     "answers": ["Oxygen", "Carbon dioxide", "Helium", "Nitrogen"], "correct_answer": 1},
    {"id": 2, "zone": 1, "category": "geography", "difficulty": "easy",
     "question": "What is the capital of Japan?",
     "answers": ["Kyoto", "Osaka", "Tokyo", "Nagoya"], "correct_answer": 2},
    {"id": 3, "zone": 2, "category": "history", "difficulty": "medium",
     "question": "In which year did the Berlin Wall fall?",
     "answers": ["1987", "1989", "1991", "1993"], "correct_answer": 1},
    {"id": 4, "zone": 2, "category": "math", "difficulty": "medium",
     "question": "What is 12 squared?",
     "answers": ["124", "144", "142", "121"], "correct_answer": 1},
    {"id": 5, "zone": 2, "category": "art", "difficulty": "medium",
     "question": "Who painted the Mona Lisa?",
     "answers": ["Da Vinci", "Michelangelo", "Raphael", "Donatello"], "correct_answer": 0},
    {"id": 6, "zone": 2, "category": "science", "difficulty": "hard",
     "question": "What is the chemical symbol for tungsten?",
     "answers": ["Tu", "Tg", "W", "Wo"], "correct_answer": 2},
]


# ---------------------------------------------------------------------------
# Scripted player
# ---------------------------------------------------------------------------

def make_player_system(encounter, rng: random.Random, accuracy: float = 0.7):
    """Answer each new question after a short, random think time."""
    waiting = {"ticks": 0, "question": None}

    def player_system(ctx: TickContext) -> None:
        timer = encounter.timer
        if timer.phase is not Phase.AWAITING_ANSWER or timer.question is None:
            return
        if waiting["question"] != timer.question.id:
            waiting["question"] = timer.question.id
            waiting["ticks"] = rng.randint(1, timer.total_question_time + 1)
        waiting["ticks"] -= 1
        if waiting["ticks"] > 0:
            return  # still thinking; may time out

        q = timer.question
        if timer.revealed_answer is not None or rng.random() < accuracy:
            choice = q.correct_index
        else:
            choice = (q.correct_index + 1) % len(q.answers)
        encounter.answer(choice)
        print(f"  [T{ctx.tick_number:03d}] {q.prompt} -> {q.answers[choice]}")

    return player_system


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("  TRIVIA DUEL — scripted encounter")
    print("=" * 60)
    print()

    seed = 42
    bank = QuestionBank.from_records(QUESTIONS, random.Random(seed))

    catalog = SkillCatalog.default()
    skills = SkillBook()
    for skill_id in ("heal", "crit", "rage", "poison", "free_answer", "phoenix"):
        skills.add(catalog.get(skill_id))

    player = CombatantStats(hp=80, max_hp=100, attack=18, defense=4)
    enemy = Enemy(
        name="Cave Troll",
        zone=2,
        stats=CombatantStats(hp=120, max_hp=120, attack=16, defense=6),
        coin_reward=40,
    )

    encounter = build_encounter(
        player,
        enemy,
        skills,
        bank,
        mode=GameModeConfig(current="normal"),
        seed=seed,
        on_victory=lambda coins: print(f"\n  Victory! +{coins} coins"),
        on_lose=lambda: print("\n  Defeat..."),
    )
    encounter.engine.add_system(make_player_system(encounter, random.Random(seed + 1)))
    encounter.engine.run(600)

    coord = encounter.coordinator
    print()
    print("  --- Combat log ---")
    for line in coord.combat_log:
        print(f"    {line}")
    print()
    print(f"  Ticks:       {encounter.engine.tick_number}")
    print(f"  Player HP:   {coord.player.hp}/{coord.player.max_hp}")
    print(f"  Enemy HP:    {coord.enemy.stats.hp}/{coord.enemy.stats.max_hp}")
    print(f"  Best streak: {coord.streak.best}")


if __name__ == "__main__":
    main()
