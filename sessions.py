"""FastAPI router for alien-encounter sessions."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

import llm
import presentation
from narrative_engine import text_segments
from narrative_engine.scoring import EARTH_SAVED_THRESHOLD, count_outcomes
from narrative_engine.state_machine import (
    AnswerRecord,
    ExplanationStatus,
    NarrativeSession,
    Phase,
    SessionActionError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Sessions live in memory only; a process restart starts everyone over.
_SESSIONS: Dict[str, NarrativeSession] = {}


class SegmentView(BaseModel):
    text: str
    is_speech: bool


class TurnView(BaseModel):
    id: int
    prompt_text: str
    segments: List[SegmentView]


class OptionView(BaseModel):
    ordinal: int
    text: str


class AnswerRecordView(BaseModel):
    turn_id: int
    chosen_option_ordinal: int
    prompt_text: str
    chosen_answer_text: str
    outcome_class: str
    delta: int
    score_before: int
    score_after: int
    recap: str


class ExplanationView(BaseModel):
    status: str
    text: Optional[str] = None
    source: Optional[str] = None
    sections: Dict[str, str] = {}


class AssetView(BaseModel):
    background: str
    alien: Optional[str] = None
    ending: Optional[str] = None
    audio_cue: Optional[str] = None


class SessionView(BaseModel):
    session_id: str
    phase: str
    score: int
    total_turns: int
    threshold: int = EARTH_SAVED_THRESHOLD
    current_turn: Optional[TurnView] = None
    display_options: List[OptionView]
    history: List[AnswerRecordView]
    earth_spared: Optional[bool] = None
    favorable_count: int = 0
    unfavorable_count: int = 0
    explanation: ExplanationView
    assets: AssetView


class AnswerRequest(BaseModel):
    ordinal: int = Field(..., ge=1, le=4, description="Position (1-4) of the chosen option as displayed.")


def _recap(record: AnswerRecord) -> str:
    return (
        f"Q{record.turn_id}: picked OPTION {record.chosen_option_ordinal} - "
        f"{record.outcome_class.value} ({record.delta:+d}), "
        f"score {record.score_before} -> {record.score_after}"
    )


def _to_record_view(record: AnswerRecord) -> AnswerRecordView:
    return AnswerRecordView(
        turn_id=record.turn_id,
        chosen_option_ordinal=record.chosen_option_ordinal,
        prompt_text=record.prompt_text,
        chosen_answer_text=record.chosen_answer_text,
        outcome_class=record.outcome_class.value,
        delta=record.delta,
        score_before=record.score_before,
        score_after=record.score_after,
        recap=_recap(record),
    )


def _to_explanation_view(session: NarrativeSession) -> ExplanationView:
    state = session.explanation
    if state.status != ExplanationStatus.RESOLVED or state.result is None:
        return ExplanationView(status=state.status.value)
    return ExplanationView(
        status=state.status.value,
        text=state.result.text,
        source=state.result.source,
        sections=state.result.sections(),
    )


def _to_view(session_id: str, session: NarrativeSession) -> SessionView:
    turn = session.current_turn
    turn_view = None
    if turn is not None:
        turn_view = TurnView(
            id=turn.id,
            prompt_text=turn.prompt_text,
            segments=[
                SegmentView(text=s.text, is_speech=s.is_speech)
                for s in text_segments.segment_prompt_text(turn.prompt_text)
            ],
        )
    turn_id = turn.id if turn else None
    history = session.history
    favorable, unfavorable = count_outcomes(history)
    assets = presentation.resolve_assets(session.phase, turn_id, session.score)
    return SessionView(
        session_id=session_id,
        phase=session.phase.value,
        score=session.score,
        total_turns=session.total_turns,
        current_turn=turn_view,
        display_options=[
            OptionView(ordinal=idx, text=opt.display_text)
            for idx, opt in enumerate(session.display_options, start=1)
        ],
        history=[_to_record_view(r) for r in history],
        earth_spared=session.earth_spared,
        favorable_count=favorable,
        unfavorable_count=unfavorable,
        explanation=_to_explanation_view(session),
        assets=AssetView(
            **assets,
            audio_cue=presentation.audio_cue(session.phase, turn_id, session.earth_spared),
        ),
    )


def _get_session_or_404(session_id: str) -> NarrativeSession:
    session = _SESSIONS.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def new_session() -> NarrativeSession:
    return NarrativeSession(
        completer=llm.get_completer(),
        explanation_timeout_s=llm.request_timeout_s(),
    )


@router.post("", response_model=SessionView)
async def create_session() -> SessionView:
    """Create a new session in the INTRO phase."""
    session_id = str(uuid.uuid4())
    _SESSIONS[session_id] = new_session()
    logger.info(f"Created session {session_id}")
    return _to_view(session_id, _SESSIONS[session_id])


@router.get("/{session_id}", response_model=SessionView)
async def get_session(session_id: str) -> SessionView:
    return _to_view(session_id, _get_session_or_404(session_id))


@router.post("/{session_id}/begin", response_model=SessionView)
async def begin_session(session_id: str) -> SessionView:
    session = _get_session_or_404(session_id)
    try:
        session.begin()
    except SessionActionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _to_view(session_id, session)


@router.post("/{session_id}/answer", response_model=SessionView)
async def answer_turn(session_id: str, req: AnswerRequest) -> SessionView:
    """Answer the current turn by displayed option position.

    After the last turn the session ends immediately; the explanation
    starts out PENDING and is filled in in the background.
    """
    session = _get_session_or_404(session_id)
    if session.phase != Phase.IN_PROGRESS:
        raise HTTPException(status_code=409, detail="Session is not accepting answers in its current phase.")
    try:
        session.answer(req.ordinal)
    except SessionActionError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _to_view(session_id, session)


@router.post("/{session_id}/reset", response_model=SessionView)
async def reset_session(session_id: str) -> SessionView:
    session = _get_session_or_404(session_id)
    session.reset()
    return _to_view(session_id, session)


@router.get("/{session_id}/explanation", response_model=ExplanationView)
async def get_explanation(session_id: str, wait: bool = False) -> ExplanationView:
    """Current explanation state. With ``wait=true``, block until a pending one resolves."""
    session = _get_session_or_404(session_id)
    if wait and session.explanation.status == ExplanationStatus.PENDING:
        # Two attempts, each bounded by the request timeout, plus slack.
        try:
            await asyncio.wait_for(session.wait_explanation(), 2 * llm.request_timeout_s() + 5)
        except asyncio.TimeoutError:
            logger.warning(f"Timed out waiting for explanation of session {session_id}")
    return _to_explanation_view(session)


@router.delete("/{session_id}")
async def delete_session(session_id: str) -> dict:
    session = _SESSIONS.pop(session_id, None)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    session.reset()
    return {"status": "deleted", "session_id": session_id}
