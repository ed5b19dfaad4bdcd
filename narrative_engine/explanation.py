"""Ending explanation synthesis.

Turns the final score and the player's answer history into an 11-section
explanation (``Q1:`` .. ``Q10:``, ``Overall:``). The text generator gets one
first pass and one repair pass; anything that still fails validation falls
back to a deterministic template that needs no network at all.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Sequence

from .question_bank import QUESTION_BANK, Turn
from .scoring import EARTH_SAVED_THRESHOLD, count_outcomes
from .text_segments import clean_prompt_text, normalize_answer_text

if TYPE_CHECKING:
    from .state_machine import AnswerRecord

logger = logging.getLogger(__name__)

SOURCE_MODEL = "model"
SOURCE_FALLBACK = "fallback"

FIRST_PASS_TEMPERATURE = 0.4
REPAIR_TEMPERATURE = 0.1

OVERALL_LABEL = "Overall:"

_LABEL_RE = re.compile(r"^[ \t]*(Q\d+:|Overall:)", re.MULTILINE)
_WS_RE = re.compile(r"\s+")

_RUBRIC = """How to read the weights:
- +1 means the answer showed openness, curiosity, humility or care toward the alien and toward other life. It made the alien like humanity more.
- -1 means the answer reflected a human-centered framing: control, fear, dominance or dismissiveness. It made the alien like humanity less.
The alien spares Earth when the final like score is at least {threshold}; otherwise Earth is destroyed."""


class TextCompleter(Protocol):
    async def complete(self, prompt: str, temperature: float) -> Optional[str]:
        """Return trimmed, non-empty text, or None on any failure."""


@dataclass(frozen=True)
class ExplanationResult:
    text: str
    source: str

    def sections(self) -> Dict[str, str]:
        return parse_sections(self.text)


def required_labels(total_turns: int = len(QUESTION_BANK)) -> List[str]:
    return [f"Q{k}:" for k in range(1, total_turns + 1)] + [OVERALL_LABEL]


REQUIRED_LABELS = tuple(required_labels())


def validate_explanation_format(text: Optional[str], total_turns: int = len(QUESTION_BANK)) -> bool:
    """Structural check only: every label once, at a line start, in order."""
    if not text:
        return False
    found = [m.group(1) for m in _LABEL_RE.finditer(text)]
    return found == required_labels(total_turns)


def parse_sections(text: str) -> Dict[str, str]:
    """Map each line-start label (without the colon) to its body text."""
    matches = list(_LABEL_RE.finditer(text or ""))
    sections: Dict[str, str] = {}
    for idx, m in enumerate(matches):
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
        sections[m.group(1).rstrip(":")] = text[m.end():end].strip()
    return sections


def _one_line(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def _records_by_turn(history: Sequence["AnswerRecord"]) -> Dict[int, "AnswerRecord"]:
    return {r.turn_id: r for r in history}


def _format_turn_block(turn: Turn, record: Optional["AnswerRecord"]) -> str:
    lines = [f"Question {turn.id}: {clean_prompt_text(turn.prompt_text)}"]
    chosen_key = normalize_answer_text(record.chosen_answer_text) if record else None
    for letter, opt in zip("ABCD", turn.options):
        marker = ""
        if chosen_key is not None and normalize_answer_text(opt.display_text) == chosen_key:
            marker = "   <-- PLAYER CHOSE"
        lines.append(f"  {letter}) [{opt.delta:+d}] {opt.display_text}{marker}")
    if record is None:
        lines.append("  (no recorded answer for this question)")
    return "\n".join(lines)


def _turn_data(history: Sequence["AnswerRecord"], bank: Sequence[Turn]) -> str:
    by_turn = _records_by_turn(history)
    return "\n\n".join(_format_turn_block(t, by_turn.get(t.id)) for t in bank)


def _outcome_line(saved: bool, final_score: int) -> str:
    ending = "Earth was spared" if saved else "Earth was destroyed"
    return f"Final like score: {final_score} (threshold {EARTH_SAVED_THRESHOLD}). Ending: {ending}."


def build_explanation_prompt(
    saved: bool,
    final_score: int,
    history: Sequence["AnswerRecord"],
    bank: Sequence[Turn] = QUESTION_BANK,
) -> str:
    labels = ", ".join(required_labels(len(bank)))
    return f"""You are the narrator of a short story game. An alien asked a human player {len(bank)} questions and decided whether to spare Earth based on the answers.

Each question lists its four possible answers with a weight in brackets. The answer the player picked is marked with "<-- PLAYER CHOSE".

{_RUBRIC.format(threshold=EARTH_SAVED_THRESHOLD)}

{_turn_data(history, bank)}

{_outcome_line(saved, final_score)}

Write the explanation now.

Output format (MUST follow):
- Exactly {len(bank) + 1} sections, in this order: {labels}
- Each label starts its own line and is followed by the text of that section.
- Each Qk: section talks about question k only: quote the player's answer and explain in 1-2 sentences why it raised or lowered the alien's opinion.
- Overall: 2-3 sentences tying the choices to the final score and the ending.
- No title, no markdown, no bullet points, no text before Q1: or after the Overall: section."""


def build_repair_prompt(
    saved: bool,
    final_score: int,
    history: Sequence["AnswerRecord"],
    bank: Sequence[Turn] = QUESTION_BANK,
    first_pass: Optional[str] = None,
) -> str:
    labels = "\n".join(required_labels(len(bank)))
    previous = first_pass.strip() if first_pass and first_pass.strip() else "(none)"
    return f"""Rewrite the explanation below so it uses the required labels exactly. Keep the content grounded in the game data.

Game data:
{_turn_data(history, bank)}

{_outcome_line(saved, final_score)}

Previous draft:
{previous}

Required labels, one per line start, in this exact order, each used once:
{labels}

Return only the {len(bank) + 1} labelled sections."""


_FAVORABLE_REASON = (
    "This increased your score because it showed openness and curiosity toward "
    "the visitor rather than fear or a need for control."
)
_UNFAVORABLE_REASON = (
    "This reduced your score because it reflected a human-centered framing that "
    "put control or self-interest ahead of understanding the visitor."
)


def fallback_explanation(
    saved: bool,
    final_score: int,
    history: Sequence["AnswerRecord"],
    total_turns: int = len(QUESTION_BANK),
    threshold: int = EARTH_SAVED_THRESHOLD,
) -> str:
    """Deterministic explanation that always satisfies the label format."""
    by_turn = _records_by_turn(history)
    lines = []
    for k in range(1, total_turns + 1):
        record = by_turn.get(k)
        if record is None:
            lines.append(f"Q{k}: No recorded answer for this question, so it did not change your score.")
            continue
        reason = _FAVORABLE_REASON if record.delta > 0 else _UNFAVORABLE_REASON
        lines.append(f'Q{k}: You answered "{_one_line(record.chosen_answer_text)}". {reason}')

    favorable, unfavorable = count_outcomes(
        [r for k, r in by_turn.items() if 1 <= k <= total_turns]
    )
    if saved:
        verdict = (
            f"at or above the threshold of {threshold}, so the alien spared Earth. "
            "Your openness outweighed your caution."
        )
    else:
        verdict = (
            f"below the threshold of {threshold}, so the alien did not spare Earth. "
            "Too many answers put humanity first instead of meeting the visitor halfway."
        )
    lines.append(
        f"{OVERALL_LABEL} You made {favorable} favorable and {unfavorable} unfavorable choices. "
        f"Your final like score was {final_score}, {verdict}"
    )
    return "\n".join(lines)


async def _attempt(
    completer: TextCompleter,
    prompt: str,
    temperature: float,
    timeout_s: Optional[float],
) -> Optional[str]:
    try:
        call = completer.complete(prompt, temperature)
        text = await asyncio.wait_for(call, timeout_s) if timeout_s else await call
    except Exception as e:
        logger.warning(f"Text generation failed ({type(e).__name__}: {str(e)[:100]})")
        return None
    if not isinstance(text, str) or not text.strip():
        return None
    return text.strip()


async def synthesize_explanation(
    saved: bool,
    final_score: int,
    history: Sequence["AnswerRecord"],
    bank: Sequence[Turn] = QUESTION_BANK,
    completer: Optional[TextCompleter] = None,
    timeout_s: Optional[float] = None,
) -> ExplanationResult:
    """Produce the ending explanation. Never raises for generator failures.

    Branches: first pass -> validate -> one repair pass -> validate ->
    deterministic fallback. Without a completer no call is made.
    """
    total = len(bank)

    def fallback() -> ExplanationResult:
        return ExplanationResult(
            fallback_explanation(saved, final_score, history, total_turns=total),
            SOURCE_FALLBACK,
        )

    if completer is None:
        logger.info("Text generator not configured - using fallback explanation")
        return fallback()

    first = await _attempt(
        completer,
        build_explanation_prompt(saved, final_score, history, bank),
        FIRST_PASS_TEMPERATURE,
        timeout_s,
    )
    if validate_explanation_format(first, total):
        logger.info("Explanation accepted on first pass")
        return ExplanationResult(first, SOURCE_MODEL)
    logger.debug(f"First pass unusable ({'no text' if first is None else 'bad format'}); requesting repair")

    repaired = await _attempt(
        completer,
        build_repair_prompt(saved, final_score, history, bank, first),
        REPAIR_TEMPERATURE,
        timeout_s,
    )
    if validate_explanation_format(repaired, total):
        logger.info("Explanation accepted after repair pass")
        return ExplanationResult(repaired, SOURCE_MODEL)

    logger.warning("Text generator output unusable after repair - using fallback explanation")
    return fallback()
