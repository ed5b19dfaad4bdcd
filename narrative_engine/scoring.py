"""Like-score accumulator for the alien encounter.

The score is a plain integer clamped to [SCORE_MIN, SCORE_MAX]. Every
answer moves it by exactly +1 or -1.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

SCORE_MIN = -10
SCORE_MAX = 10
INITIAL_SCORE = 0
EARTH_SAVED_THRESHOLD = 2


def _clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def apply_delta(score_before: int, delta: int) -> int:
    return _clamp(score_before + delta, SCORE_MIN, SCORE_MAX)


def running_scores(deltas: Iterable[int], start: int = INITIAL_SCORE) -> List[int]:
    """Score after each step of ``deltas``, in order."""
    scores = []
    score = start
    for delta in deltas:
        score = apply_delta(score, delta)
        scores.append(score)
    return scores


def is_earth_spared(score: int) -> bool:
    """Depends only on the final clamped score."""
    return score >= EARTH_SAVED_THRESHOLD


def count_outcomes(history: Iterable) -> Tuple[int, int]:
    """Return (favorable, unfavorable) counts for a sequence of answer records."""
    favorable = unfavorable = 0
    for record in history:
        if record.delta > 0:
            favorable += 1
        else:
            unfavorable += 1
    return favorable, unfavorable
