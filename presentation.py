"""Presentation lookups: image paths and audio cues for the current state.

Everything here except ``CueDeduplicator`` is a pure function of session
state. Front ends own the actual drawing and playback.
"""

import logging
from typing import Callable, Optional

from narrative_engine.scoring import is_earth_spared
from narrative_engine.state_machine import Phase

logger = logging.getLogger(__name__)

BACKGROUND_IMAGE = "/images/bg.png"
ENDING_SAFE_IMAGE = "/images/ending_safe.png"
ENDING_EXPLODE_IMAGE = "/images/ending_explode.png"


def score_to_mood(score: int) -> str:
    """5-tier alien mood for a like score."""
    if score <= -4:
        return "super_mad"
    if score <= -2:
        return "mad"
    if score >= 4:
        return "super_happy"
    if score >= 2:
        return "happy"
    return "neutral"


def alien_image_path(question_number: int, score: int) -> str:
    return f"/images/alien_q{question_number}_{score_to_mood(score)}.png"


def ending_image_path(saved: bool) -> str:
    return ENDING_SAFE_IMAGE if saved else ENDING_EXPLODE_IMAGE


def resolve_assets(phase: Phase, turn_id: Optional[int], score: int) -> dict:
    """Image identifiers for the stage: background plus alien or ending art."""
    assets = {"background": BACKGROUND_IMAGE, "alien": None, "ending": None}
    if phase == Phase.IN_PROGRESS and turn_id is not None:
        assets["alien"] = alien_image_path(turn_id, score)
    elif phase == Phase.ENDED:
        assets["ending"] = ending_image_path(is_earth_spared(score))
    return assets


def audio_cue(phase: Phase, turn_id: Optional[int], saved: Optional[bool]) -> Optional[str]:
    if phase == Phase.INTRO:
        return "intro_theme"
    if phase == Phase.IN_PROGRESS:
        return f"question_{turn_id}" if turn_id is not None else None
    if phase == Phase.ENDED:
        return "ending_safe" if saved else "ending_explode"
    return None


class CueDeduplicator:
    """Plays a cue only when it differs from the last one played.

    Playback is fire-and-forget: errors from ``play`` are logged, not raised.
    """

    def __init__(self, play: Callable[[str], None]):
        self._play = play
        self.last_cue: Optional[str] = None

    def emit(self, cue: Optional[str]) -> bool:
        if cue is None or cue == self.last_cue:
            return False
        self.last_cue = cue
        try:
            self._play(cue)
        except Exception as e:
            logger.warning(f"Audio cue '{cue}' failed: {e}")
        return True

    def clear(self) -> None:
        self.last_cue = None
