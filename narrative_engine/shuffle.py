"""Per-turn answer shuffling."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def shuffle_options(options: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a uniformly random permutation of ``options``.

    Fisher-Yates over a copy, so the caller's sequence is never mutated.
    Call once per turn entry, not once per render.
    """
    rng = rng or random
    shuffled = list(options)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
