"""QuestionBank — in-memory, zone-keyed question provider."""
from __future__ import annotations

import random as _random_mod
from typing import Any

from trivia_combat.types import Question, QuestionProviderError


class QuestionBank:
    """Stores questions per zone and draws them with a seedable RNG.

    Zones without questions of their own fall back to the highest
    lower zone that has some, so late zones can reuse earlier pools.
    """

    def __init__(self, rng: _random_mod.Random | None = None) -> None:
        self._rng = rng if rng is not None else _random_mod.Random()
        self._by_zone: dict[int, list[Question]] = {}

    def add(self, question: Question) -> None:
        self._by_zone.setdefault(question.zone, []).append(question)

    def extend(self, questions: list[Question]) -> None:
        for question in questions:
            self.add(question)

    def zones(self) -> list[int]:
        return sorted(self._by_zone)

    def count(self, zone: int | None = None) -> int:
        if zone is None:
            return sum(len(qs) for qs in self._by_zone.values())
        return len(self._by_zone.get(zone, []))

    def pool(self, zone: int) -> list[Question]:
        """Questions used for a zone, after fallback."""
        if zone in self._by_zone:
            return list(self._by_zone[zone])
        lower = [z for z in self._by_zone if z < zone]
        if not lower:
            return []
        return list(self._by_zone[max(lower)])

    def get_question_by_zone(self, zone: int) -> Question:
        """Draw a question. Raises QuestionProviderError if none is available."""
        pool = self.pool(zone)
        if not pool:
            raise QuestionProviderError(f"No questions available for zone {zone}")
        return pool[self._rng.randrange(len(pool))]

    __call__ = get_question_by_zone

    @classmethod
    def from_records(
        cls, records: list[dict[str, Any]], rng: _random_mod.Random | None = None
    ) -> QuestionBank:
        """Build a bank from plain dicts (e.g. parsed JSON).

        Each record needs ``id``, ``zone``, ``category``, ``difficulty``,
        ``question``, ``answers`` and ``correct_answer``.
        """
        bank = cls(rng)
        for rec in records:
            bank.add(Question(
                id=str(rec["id"]),
                zone=int(rec["zone"]),
                category=rec["category"],
                difficulty=rec["difficulty"],
                prompt=rec["question"],
                answers=tuple(rec["answers"]),
                correct_index=int(rec["correct_answer"]),
            ))
        return bank
