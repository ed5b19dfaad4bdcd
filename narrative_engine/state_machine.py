"""Finite state machine for one alien-encounter playthrough.

INTRO -> IN_PROGRESS (begin) -> ENDED (after the last answer). ``reset``
returns to INTRO from anywhere. Actions arrive one at a time; the only
thing that runs concurrently is the ending explanation, which is tagged
with the session generation it was started for.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .explanation import ExplanationResult, TextCompleter, synthesize_explanation
from .question_bank import QUESTION_BANK, OutcomeClass, Option, Turn, get_turn, next_turn_id
from .scoring import INITIAL_SCORE, apply_delta, is_earth_spared
from .shuffle import shuffle_options

logger = logging.getLogger(__name__)


class Phase(str, enum.Enum):
    INTRO = "INTRO"
    IN_PROGRESS = "IN_PROGRESS"
    ENDED = "ENDED"


class ExplanationStatus(str, enum.Enum):
    ABSENT = "ABSENT"
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"


class SessionActionError(ValueError):
    """Raised for an action that is not valid in the session's current phase."""


@dataclass(frozen=True)
class AnswerRecord:
    turn_id: int
    chosen_option_ordinal: int  # 1..4, position as displayed
    prompt_text: str
    chosen_answer_text: str
    outcome_class: OutcomeClass
    delta: int
    score_before: int
    score_after: int


@dataclass(frozen=True)
class ExplanationState:
    status: ExplanationStatus = ExplanationStatus.ABSENT
    result: Optional[ExplanationResult] = None

    @property
    def text(self) -> Optional[str]:
        return self.result.text if self.result else None


@dataclass
class SessionState:
    """Mutable state of one playthrough. Replaced wholesale on reset."""

    generation: int = 0
    phase: Phase = Phase.INTRO
    current_turn_id: Optional[int] = None
    score: int = INITIAL_SCORE
    history: List[AnswerRecord] = field(default_factory=list)
    display_options: List[Option] = field(default_factory=list)
    explanation: ExplanationState = field(default_factory=ExplanationState)


class NarrativeSession:
    def __init__(
        self,
        bank: Sequence[Turn] = QUESTION_BANK,
        completer: Optional[TextCompleter] = None,
        rng: Optional[random.Random] = None,
        explanation_timeout_s: Optional[float] = None,
    ):
        self._bank = bank
        self._completer = completer
        self._rng = rng
        self._timeout_s = explanation_timeout_s
        self._state = SessionState()
        self._task: Optional[asyncio.Task] = None

    # --- read accessors ---

    @property
    def bank(self) -> Sequence[Turn]:
        return self._bank

    @property
    def total_turns(self) -> int:
        return len(self._bank)

    @property
    def generation(self) -> int:
        return self._state.generation

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def current_turn(self) -> Optional[Turn]:
        if self._state.phase != Phase.IN_PROGRESS:
            return None
        return get_turn(self._state.current_turn_id, self._bank)

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def history(self) -> List[AnswerRecord]:
        return list(self._state.history)

    @property
    def display_options(self) -> List[Option]:
        return list(self._state.display_options)

    @property
    def explanation(self) -> ExplanationState:
        return self._state.explanation

    @property
    def earth_spared(self) -> Optional[bool]:
        if self._state.phase != Phase.ENDED:
            return None
        return is_earth_spared(self._state.score)

    # --- actions ---

    def begin(self) -> None:
        if self._state.phase != Phase.INTRO:
            raise SessionActionError("Session has already begun; reset to start over.")
        self._state.phase = Phase.IN_PROGRESS
        self._enter_turn(self._bank[0].id if self._bank else None)

    def answer(self, chosen_option_ordinal: int) -> None:
        state = self._state
        if state.phase != Phase.IN_PROGRESS:
            raise SessionActionError("Session is not accepting answers in its current phase.")
        if not 1 <= chosen_option_ordinal <= len(state.display_options):
            raise SessionActionError(
                f"Option {chosen_option_ordinal} is out of range 1..{len(state.display_options)}."
            )

        turn = get_turn(state.current_turn_id, self._bank)
        if turn is None:
            logger.warning(f"No turn {state.current_turn_id} in question bank; ignoring answer")
            return

        option = state.display_options[chosen_option_ordinal - 1]
        score_before = state.score
        score_after = apply_delta(score_before, option.delta)
        state.score = score_after
        state.history.append(
            AnswerRecord(
                turn_id=turn.id,
                chosen_option_ordinal=chosen_option_ordinal,
                prompt_text=turn.prompt_text,
                chosen_answer_text=option.display_text,
                outcome_class=option.outcome_class,
                delta=option.delta,
                score_before=score_before,
                score_after=score_after,
            )
        )

        nxt = next_turn_id(turn, option.outcome_class)
        if get_turn(nxt, self._bank) is not None:
            self._enter_turn(nxt)
        else:
            self._end()

    def reset(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._state = SessionState(generation=self._state.generation + 1)
        logger.info(f"Session reset (generation {self._state.generation})")

    async def wait_explanation(self) -> ExplanationState:
        """Wait for a pending explanation, scheduling it once if nothing was scheduled."""
        state = self._state
        if state.explanation.status != ExplanationStatus.PENDING:
            return state.explanation
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self._synthesize(state.generation, state.score, list(state.history))
            )
        task = self._task
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            # Reset cancelled the synthesis, not us.
            if not task.cancelled():
                raise
        return self._state.explanation

    # --- internals ---

    def _enter_turn(self, turn_id: Optional[int]) -> None:
        turn = get_turn(turn_id, self._bank)
        if turn is None:
            self._end()
            return
        self._state.current_turn_id = turn.id
        self._state.display_options = shuffle_options(turn.options, self._rng)

    def _end(self) -> None:
        state = self._state
        state.phase = Phase.ENDED
        state.current_turn_id = None
        state.display_options = []
        state.explanation = ExplanationState(status=ExplanationStatus.PENDING)
        logger.info(
            f"Session ended with score {state.score} "
            f"({'Earth spared' if is_earth_spared(state.score) else 'Earth destroyed'})"
        )
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the caller drives synthesis via wait_explanation().
            return
        self._task = loop.create_task(self._synthesize(state.generation, state.score, list(state.history)))

    async def _synthesize(self, generation: int, final_score: int, history: List[AnswerRecord]) -> None:
        result = await synthesize_explanation(
            saved=is_earth_spared(final_score),
            final_score=final_score,
            history=history,
            bank=self._bank,
            completer=self._completer,
            timeout_s=self._timeout_s,
        )
        if generation != self._state.generation:
            logger.info(f"Discarding explanation for stale generation {generation}")
            return
        self._state.explanation = ExplanationState(status=ExplanationStatus.RESOLVED, result=result)
