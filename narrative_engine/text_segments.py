"""Split prompt text into narration and quoted speech.

Prompt lines mix narration ("The alien leans closer.") with the alien's
quoted words. Front ends render the two differently, and the explanation
prompt wants a cleaned single-line version of the whole thing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

_OPEN_QUOTES = {'"', "“"}
_CLOSE_QUOTES = {'"', "”"}
_WS_RE = re.compile(r"\s+")
_EDGE_PUNCT = "\"'“”‘’.,!?;: "


@dataclass(frozen=True)
class Segment:
    text: str
    is_speech: bool


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def segment_prompt_text(raw: str) -> List[Segment]:
    """Return ordered narration/speech segments for ``raw``.

    Quote marks are dropped from segment text. Empty narration between two
    quotes is skipped. An unterminated quote runs to the end as speech.
    """
    segments: List[Segment] = []
    buf: List[str] = []
    in_speech = False

    def flush(is_speech: bool) -> None:
        text = _collapse("".join(buf))
        buf.clear()
        if text:
            segments.append(Segment(text=text, is_speech=is_speech))

    for ch in raw or "":
        if not in_speech and ch in _OPEN_QUOTES:
            flush(False)
            in_speech = True
        elif in_speech and ch in _CLOSE_QUOTES:
            flush(True)
            in_speech = False
        else:
            buf.append(ch)
    flush(in_speech)
    return segments


def clean_prompt_text(raw: str) -> str:
    """Single-line prompt text with curly quotes normalised."""
    text = (raw or "").replace("“", '"').replace("”", '"')
    return _collapse(text)


def normalize_answer_text(text: str) -> str:
    """Comparison key for matching answer texts (case, spacing, edge punctuation)."""
    return _collapse(text or "").strip(_EDGE_PUNCT).casefold()
