"""Static question bank for the alien encounter (V1).

Ten hard-coded turns, each with four answers. Two answers per turn are
FAVORABLE (+1) and two are UNFAVORABLE (-1). The bank is read-only and
shared by every session in the process.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


class OutcomeClass(str, enum.Enum):
    FAVORABLE = "FAVORABLE"
    UNFAVORABLE = "UNFAVORABLE"


class QuestionBankError(AssertionError):
    """Raised when the static bank violates an authoring invariant."""


OPTIONS_PER_TURN = 4


@dataclass(frozen=True)
class Option:
    outcome_class: OutcomeClass
    delta: int
    display_text: str


@dataclass(frozen=True)
class Turn:
    id: int
    prompt_text: str
    options: Tuple[Option, ...]
    # Per-outcome successors; None ends the sequence.
    next_favorable: Optional[int] = None
    next_unfavorable: Optional[int] = None


def _fav(text: str) -> Option:
    return Option(OutcomeClass.FAVORABLE, +1, text)


def _unfav(text: str) -> Option:
    return Option(OutcomeClass.UNFAVORABLE, -1, text)


_RAW_TURNS: Sequence[Tuple[str, Tuple[Option, ...]]] = [
    (
        'The ship hums above the stadium. The alien leans closer. '
        '"I have watched your planet for one of your years. Why should I not end it today?"',
        (
            _fav("Because you haven't met us properly yet. Stay a while and ask."),
            _unfav("Because we have weapons pointed at you right now."),
            _fav("I can't promise we deserve it, but I'd like to show you why I hope so."),
            _unfav("Because humans are the most important species in the universe."),
        ),
    ),
    (
        'It turns a glowing cube over in three of its hands. '
        '"On my world we share one mind. How do you decide anything with so many?"',
        (
            _unfav("We don't. Someone in charge decides and everyone follows."),
            _fav("Slowly, badly, and by arguing. I'd love to hear how your way feels."),
            _unfav("Our way is obviously better. One mind sounds like a prison."),
            _fav("We listen to each other, sometimes. Can you teach me how you listen?"),
        ),
    ),
    (
        'A soft chime. "Your oceans are warmer than the last time I looked. '
        'Is that something you meant to do?"',
        (
            _fav("No. We made mistakes, and we're still learning how to fix them."),
            _unfav("Those are natural cycles. Humans aren't responsible."),
            _fav("Not on purpose. What did your people do when they harmed their world?"),
            _unfav("It doesn't matter. We'll just move to another planet eventually."),
        ),
    ),
    (
        'The alien points at a dog barking at the ship. '
        '"That small creature is loud. Does it belong to you?"',
        (
            _unfav("Everything on Earth belongs to humans, really."),
            _fav("Not exactly. We live together. It chose us as much as we chose it."),
            _fav("It's our friend. Would you like to meet it? It's harmless."),
            _unfav("It's just an animal. Ignore it, it doesn't matter."),
        ),
    ),
    (
        '"I brought a gift," it says, and a seed floats out of the ship. '
        '"It will grow into something you have never seen. Will you plant it?"',
        (
            _fav("Yes, and I'd like to watch it grow with you."),
            _unfav("We'd have to study it in a lab first. It could be a weapon."),
            _fav("I'd be honored, as long as it won't crowd out what already lives here."),
            _unfav("Only if it's useful to us. Can we eat it or sell it?"),
        ),
    ),
    (
        'Its skin flickers through colors. "This is how I laugh. '
        'Tell me something funny about humans."',
        (
            _fav("We put pineapple on pizza and argue about it for decades."),
            _unfav("Humans don't do jokes with strangers. State your business."),
            _fav("We invented a machine to talk across the world and mostly use it for cat pictures."),
            _unfav("Laughing is a waste of time when the fate of Earth is at stake."),
        ),
    ),
    (
        'The hum deepens. "Other visitors came before me. Your history calls them myths. '
        'What would you have done if you had known?"',
        (
            _unfav("Captured them, probably. For national security."),
            _fav("Tried to talk. Maybe that's what we're doing now, finally."),
            _unfav("Kept it secret so nobody would panic."),
            _fav("Asked them what they saw when they looked at us."),
        ),
    ),
    (
        '"I am tired," the alien admits. "My journey was long. '
        'In your culture, what do you offer a tired stranger?"',
        (
            _fav("A place to sit, something warm to drink, and no questions until you're ready."),
            _unfav("We'd check your papers first. Strangers can be dangerous."),
            _unfav("Honestly? Usually a hotel bill."),
            _fav("Whatever we have. Please rest here as long as you need."),
        ),
    ),
    (
        'It studies you for a long moment. "If I spare your world, '
        'what will you do differently tomorrow?"',
        (
            _unfav("Nothing. We were fine before you showed up."),
            _fav("Look up more often, and be kinder to whatever I find there."),
            _fav("Tell everyone that we're not alone, and that it's not something to fear."),
            _unfav("Build better defenses, in case you come back."),
        ),
    ),
    (
        'The ship begins to glow. "One last question, small one. '
        'Do you think your species deserves to continue?"',
        (
            _fav("I think we deserve the chance to keep trying, and to keep meeting others like you."),
            _unfav("Of course we do. We're at the top of the food chain."),
            _fav("I don't know. But I think we're worth getting to know."),
            _unfav("It's not your decision to make. Leave our planet alone."),
        ),
    ),
]


def _build_bank(raw: Sequence[Tuple[str, Tuple[Option, ...]]]) -> Tuple[Turn, ...]:
    total = len(raw)
    turns = []
    for idx, (prompt, options) in enumerate(raw):
        turn_id = idx + 1
        nxt = turn_id + 1 if turn_id < total else None
        turns.append(
            Turn(
                id=turn_id,
                prompt_text=prompt,
                options=options,
                next_favorable=nxt,
                next_unfavorable=nxt,
            )
        )
    return tuple(turns)


def validate_bank(bank: Sequence[Turn]) -> None:
    """Assert the authoring invariants of a question bank.

    Raises QuestionBankError on the first violation found.
    """
    ids = {t.id for t in bank}
    for expected_id, turn in enumerate(bank, start=1):
        if turn.id != expected_id:
            raise QuestionBankError(f"Turn ids must be sequential from 1; found {turn.id} at position {expected_id}.")
        if len(turn.options) != OPTIONS_PER_TURN:
            raise QuestionBankError(f"Turn {turn.id} has {len(turn.options)} options, expected {OPTIONS_PER_TURN}.")
        for opt in turn.options:
            if opt.delta not in (1, -1):
                raise QuestionBankError(f"Turn {turn.id}: delta must be +1 or -1, got {opt.delta}.")
            expected = OutcomeClass.FAVORABLE if opt.delta > 0 else OutcomeClass.UNFAVORABLE
            if opt.outcome_class != expected:
                raise QuestionBankError(
                    f"Turn {turn.id}: option '{opt.display_text}' is {opt.outcome_class.value} with delta {opt.delta:+d}."
                )
        for nxt in (turn.next_favorable, turn.next_unfavorable):
            if nxt is not None and nxt not in ids:
                raise QuestionBankError(f"Turn {turn.id}: successor {nxt} is not in the bank.")


def get_turn(turn_id: Optional[int], bank: Sequence[Turn]) -> Optional[Turn]:
    """Return the turn with the given id, or None (end of sequence)."""
    if turn_id is None:
        return None
    return next((t for t in bank if t.id == turn_id), None)


def next_turn_id(turn: Turn, outcome_class: OutcomeClass) -> Optional[int]:
    if outcome_class == OutcomeClass.FAVORABLE:
        return turn.next_favorable
    return turn.next_unfavorable


QUESTION_BANK: Tuple[Turn, ...] = _build_bank(_RAW_TURNS)
TOTAL_TURNS = len(QUESTION_BANK)

validate_bank(QUESTION_BANK)
