"""Narrative session engine for the alien encounter quiz.

This package keeps the core game logic (question bank, shuffling, scoring,
state machine, ending explanations) pure and framework-agnostic so it can
be exercised from tests, the FastAPI router and the terminal front end.
"""

from . import question_bank, shuffle, scoring, text_segments, explanation, state_machine  # noqa: F401
