#!/usr/bin/env python3
"""Terminal front end for the Alien Verdict quiz.

Usage:
    python cli_play.py play [--seed=N] [--offline]          # Play one session
    python cli_play.py fallback-demo [--pattern=alternate]  # Print a scripted explanation
"""

import argparse
import asyncio
import logging
import random

import llm
import presentation
from narrative_engine.explanation import fallback_explanation
from narrative_engine.question_bank import QUESTION_BANK, OutcomeClass
from narrative_engine.scoring import EARTH_SAVED_THRESHOLD, INITIAL_SCORE, apply_delta, is_earth_spared
from narrative_engine.state_machine import AnswerRecord, NarrativeSession, Phase
from narrative_engine.text_segments import segment_prompt_text

logger = logging.getLogger(__name__)


def _print_turn(session: NarrativeSession) -> None:
    turn = session.current_turn
    print(f"\nQuestion {turn.id} / {session.total_turns}        Like score: {session.score}")
    print("-" * 60)
    for seg in segment_prompt_text(turn.prompt_text):
        if seg.is_speech:
            print(f'  ALIEN: "{seg.text}"')
        else:
            print(f"  {seg.text}")
    print()
    for idx, opt in enumerate(session.display_options, start=1):
        print(f"  [{idx}] {opt.display_text}")


async def _read_choice() -> str:
    while True:
        raw = await asyncio.to_thread(input, "\nYour answer (1-4, r=reset, q=quit): ")
        raw = raw.strip().lower()
        if raw in ("1", "2", "3", "4", "r", "q"):
            return raw
        print("Please enter 1, 2, 3, 4, r or q.")


async def _play(args) -> None:
    completer = None if args.offline else llm.get_completer()
    rng = random.Random(args.seed) if args.seed is not None else None
    session = NarrativeSession(completer=completer, rng=rng, explanation_timeout_s=llm.request_timeout_s())
    cues = presentation.CueDeduplicator(lambda cue: logger.info(f"[audio] {cue}"))

    print("\n👽 A ship has stopped over Earth. Its pilot wants to talk.")
    print(f"   Ending if like score >= {EARTH_SAVED_THRESHOLD}: Earth spared\n")
    cues.emit(presentation.audio_cue(session.phase, None, None))
    await asyncio.to_thread(input, "Press ENTER to begin...")
    session.begin()

    while session.phase == Phase.IN_PROGRESS:
        cues.emit(presentation.audio_cue(session.phase, session.current_turn.id, None))
        _print_turn(session)
        choice = await _read_choice()
        if choice == "q":
            return
        if choice == "r":
            session.reset()
            cues.clear()
            print("\n↺ Starting over.")
            session.begin()
            continue
        session.answer(int(choice))

    saved = session.earth_spared
    cues.emit(presentation.audio_cue(session.phase, None, saved))
    print("\n" + "=" * 60)
    print("GAME OVER")
    print(f"Final like score: {session.score}")
    print("✅ Earth is spared." if saved else "💥 Earth explodes.")
    print("=" * 60)

    print("\nYour answers:")
    for h in session.history:
        print(
            f"  Q{h.turn_id}: picked OPTION {h.chosen_option_ordinal}"
            f"   {h.outcome_class.value} ({h.delta:+d}) - score {h.score_before} -> {h.score_after}"
        )

    print("\nGenerating explanation...")
    state = await session.wait_explanation()
    print(f"\n📜 Explanation ({state.result.source}):\n")
    print(state.text)
    print()


def _scripted_history(pattern: str) -> list:
    records = []
    score = INITIAL_SCORE
    for idx, turn in enumerate(QUESTION_BANK):
        if pattern == "favorable":
            want = OutcomeClass.FAVORABLE
        elif pattern == "unfavorable":
            want = OutcomeClass.UNFAVORABLE
        else:
            want = OutcomeClass.FAVORABLE if idx % 2 == 0 else OutcomeClass.UNFAVORABLE
        ordinal, option = next((i, o) for i, o in enumerate(turn.options, start=1) if o.outcome_class == want)
        after = apply_delta(score, option.delta)
        records.append(
            AnswerRecord(
                turn_id=turn.id,
                chosen_option_ordinal=ordinal,
                prompt_text=turn.prompt_text,
                chosen_answer_text=option.display_text,
                outcome_class=option.outcome_class,
                delta=option.delta,
                score_before=score,
                score_after=after,
            )
        )
        score = after
    return records


def cmd_play(args):
    """Play one session interactively."""
    try:
        asyncio.run(_play(args))
    except (KeyboardInterrupt, EOFError):
        print("\nBye.")


def cmd_fallback_demo(args):
    """Print the scripted explanation for a canned answer pattern."""
    history = _scripted_history(args.pattern)
    score = history[-1].score_after if history else INITIAL_SCORE
    saved = is_earth_spared(score)
    print(f"\nPattern: {args.pattern}   Final score: {score}   {'Earth spared' if saved else 'Earth explodes'}\n")
    print(fallback_explanation(saved, score, history))
    print()


def main():
    logging.basicConfig(
        level=logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    parser = argparse.ArgumentParser(
        description="Alien Verdict terminal front end",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli_play.py play                          # Play with Gemini explanations if configured
  python cli_play.py play --offline --seed=7       # Scripted explanation, reproducible shuffles
  python cli_play.py fallback-demo --pattern=favorable
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    play_parser = subparsers.add_parser("play", help="Play one session")
    play_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for answer shuffling"
    )
    play_parser.add_argument(
        "--offline",
        action="store_true",
        help="Never call the text generator; use the scripted explanation"
    )

    demo_parser = subparsers.add_parser("fallback-demo", help="Print a scripted explanation")
    demo_parser.add_argument(
        "--pattern",
        choices=["alternate", "favorable", "unfavorable"],
        default="alternate",
        help="Which answers the scripted player picks"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    commands = {
        "play": cmd_play,
        "fallback-demo": cmd_fallback_demo,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
