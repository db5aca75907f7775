"""Question timer: per-encounter question/countdown/reveal state machine."""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable

from trivia_combat.config import CombatConfig
from trivia_combat.skills import SkillBook
from trivia_combat.types import (
    GameModeConfig,
    Question,
    QuestionProvider,
    QuestionProviderError,
)

if TYPE_CHECKING:
    from trivia_combat.engine import System
    from trivia_combat.types import TickContext

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Phase of the question timer."""

    LOADING = "loading"
    AWAITING_ANSWER = "awaiting_answer"
    REVEALING = "revealing"
    FINISHED = "finished"


OutcomeCallback = Callable[[bool, str | None], None]
TransitionCallback = Callable[[Phase, Phase], None]


class QuestionTimer:
    """Loads questions, runs the countdown and dispatches answer outcomes.

    Phases cycle ``LOADING -> AWAITING_ANSWER -> REVEALING -> LOADING``
    until ``stop()`` moves the timer to ``FINISHED``. ``tick()`` is called
    once per second; every state change happens either there or in
    ``submit()``, so at most one outcome is produced per question.
    """

    def __init__(
        self,
        provider: QuestionProvider,
        zone: int,
        skills: SkillBook,
        mode: GameModeConfig | None = None,
        config: CombatConfig | None = None,
        on_outcome: OutcomeCallback | None = None,
        on_transition: TransitionCallback | None = None,
    ) -> None:
        self._provider = provider
        self._zone = zone
        self._skills = skills
        self._mode = mode if mode is not None else GameModeConfig()
        self._config = config if config is not None else CombatConfig()
        self._on_outcome = on_outcome
        self._on_transition = on_transition

        self._phase = Phase.LOADING
        self._started = False
        self._question: Question | None = None
        self._time_left = 0
        self._selected: int | None = None
        self._last_correct: bool | None = None
        self._show_free_answer = False
        self._reveal_remaining = 0
        self._frozen = 0

    # --- Queries ---

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def zone(self) -> int:
        return self._zone

    @property
    def question(self) -> Question | None:
        return self._question

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def selected_answer(self) -> int | None:
        return self._selected

    @property
    def last_correct(self) -> bool | None:
        return self._last_correct

    @property
    def show_free_answer(self) -> bool:
        return self._show_free_answer

    @property
    def frozen(self) -> int:
        """Seconds the countdown will hold before moving again."""
        return self._frozen

    @property
    def revealed_answer(self) -> int | None:
        """Correct index while the free-answer highlight is showing."""
        if (
            self._show_free_answer
            and self._phase is Phase.AWAITING_ANSWER
            and self._question is not None
        ):
            return self._question.correct_index
        return None

    @property
    def total_question_time(self) -> int:
        """Base time for the game mode plus any scholar bonus."""
        base = self._config.question_time(self._mode.current)
        scholar = self._skills.find_active("scholar")
        bonus = int(scholar.effect.value) if scholar is not None else 0
        return base + bonus

    # --- Control ---

    def start(self) -> None:
        """Load the first question. The free-answer highlight applies to it."""
        if self._phase is not Phase.LOADING:
            return
        self._started = True
        self._load(reveal=True)

    def reconfigure(
        self, zone: int | None = None, mode: GameModeConfig | None = None
    ) -> None:
        """Change the zone or game mode.

        While LOADING this re-acquires the question immediately; during a
        question the change only affects the next load. Call with no
        arguments after toggling scholar or free_answer skills.
        """
        if zone is not None:
            self._zone = zone
        if mode is not None:
            self._mode = mode
        if self._started and self._phase is Phase.LOADING:
            self._load(reveal=True)

    def submit(self, answer_index: int | None) -> bool:
        """Lock in an answer. ``None`` counts as a timeout.

        Returns False when the answer was ignored: the timer is not
        awaiting an answer or the index is out of range.
        """
        if self._phase is not Phase.AWAITING_ANSWER or self._question is None:
            logger.debug("Rejected answer %r in phase %s", answer_index, self._phase.value)
            return False
        if answer_index is not None and not 0 <= answer_index < len(self._question.answers):
            logger.debug("Ignored out-of-range answer %d", answer_index)
            return False
        self._resolve(answer_index)
        return True

    def freeze(self, seconds: int) -> None:
        """Hold the countdown for the given number of ticks."""
        if seconds > 0:
            self._frozen += seconds

    def stop(self) -> None:
        """End the encounter. Cancels any pending reveal."""
        if self._phase is not Phase.FINISHED:
            self._set_phase(Phase.FINISHED)

    def tick(self) -> None:
        """Advance one second."""
        if self._phase is Phase.AWAITING_ANSWER:
            if self._frozen > 0:
                self._frozen -= 1
                return
            if self._time_left <= 1:
                self._time_left = 0
                logger.debug("Question timed out in zone %d", self._zone)
                self._resolve(None)
            else:
                self._time_left -= 1
        elif self._phase is Phase.REVEALING:
            self._reveal_remaining -= 1
            if self._reveal_remaining <= 0:
                self._finish_reveal()

    # --- Internal helpers ---

    def _set_phase(self, phase: Phase) -> None:
        old = self._phase
        self._phase = phase
        logger.debug("Question timer %s -> %s", old.value, phase.value)
        if self._on_transition is not None:
            self._on_transition(old, phase)

    def _load(self, reveal: bool) -> None:
        if self._phase is not Phase.LOADING:
            self._set_phase(Phase.LOADING)
        try:
            question = self._provider(self._zone)
        except Exception as exc:
            raise QuestionProviderError(
                f"Question provider failed for zone {self._zone}"
            ) from exc
        if not isinstance(question, Question):
            raise QuestionProviderError(
                f"Question provider returned {type(question).__name__} for zone {self._zone}"
            )

        self._question = question
        self._time_left = self.total_question_time
        self._selected = None
        self._last_correct = None
        self._reveal_remaining = 0
        self._show_free_answer = reveal and self._skills.find_active("free_answer") is not None
        self._set_phase(Phase.AWAITING_ANSWER)

    def _resolve(self, answer_index: int | None) -> None:
        question = self._question
        if question is None:
            return
        self._selected = answer_index
        self._last_correct = question.is_correct(answer_index)
        self._reveal_remaining = self._config.reveal_delay
        self._set_phase(Phase.REVEALING)
        if self._reveal_remaining <= 0:
            self._finish_reveal()

    def _finish_reveal(self) -> None:
        question = self._question
        correct = bool(self._last_correct)
        if self._on_outcome is not None:
            self._on_outcome(correct, question.category if question is not None else None)
        # The outcome may have ended the encounter.
        if self._phase is Phase.FINISHED:
            return
        self._load(reveal=False)


def make_question_system(timer: QuestionTimer, tps: int = 1) -> System:
    """Return a system that ticks the question timer once per second.

    ``tps`` must match the engine; with more than one tick per second the
    timer only moves on ticks that close a whole second. The system
    requests an engine stop once the timer has finished.
    """
    if tps <= 0:
        raise ValueError("tps must be positive")

    def question_system(ctx: TickContext) -> None:
        if timer.phase is Phase.FINISHED:
            ctx.request_stop()
            return
        if ctx.tick_number % tps != 0:
            return
        timer.tick()
        if timer.phase is Phase.FINISHED:
            ctx.request_stop()

    return question_system
