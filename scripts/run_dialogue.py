#!/usr/bin/env python
"""Replay learner turns through an argumentation session.

Usage:
    python -m scripts.run_dialogue --data ./case --turns turns.jsonl
    python -m scripts.run_dialogue --data ./case --turns turns.jsonl --output events.jsonl
"""

import argparse
import asyncio
import sys
from pathlib import Path


async def replay(machine, turns: list[dict], verbose: bool) -> int:
    """Submit turns in order; return the number accepted."""
    from core.errors import StateConflict, TurnValidationError
    from core.scoring.irac_rubric import format_rubric_feedback

    accepted = 0
    for i, raw in enumerate(turns, 1):
        try:
            outcome = await machine.submit(raw)
        except TurnValidationError as e:
            print(f"  [{i}] REJECTED: {'; '.join(e.violations)}")
            continue
        except StateConflict as e:
            print(f"  [{i}] CONFLICT: {e}")
            continue

        accepted += 1
        score = outcome.score
        print(
            f"  [{i}] {outcome.turn.issue_id}: total={score.total} "
            f"({score.overall_level}) hardness={machine.session.current_hardness}"
        )
        if verbose:
            for line in format_rubric_feedback(score).splitlines():
                print(f"      {line}")
            if outcome.challenge is not None:
                print(f"      challenge ({outcome.challenge.kind}): {outcome.challenge.prompt}")
    return accepted


def main() -> int:
    """Run a session replay."""
    parser = argparse.ArgumentParser(
        description="Replay learner turns through an argumentation session"
    )
    parser.add_argument(
        "--data",
        type=Path,
        required=True,
        help="Directory containing issues.csv, facts.csv and laws.csv",
    )
    parser.add_argument(
        "--turns",
        type=Path,
        required=True,
        help="JSONL file with one Turn object per line",
    )
    parser.add_argument(
        "--case-id",
        type=str,
        default=None,
        help="Case id for the session (default: data directory name)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output JSONL file for the event stream (default: summary only)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print dimension detail and challenges for each turn",
    )
    args = parser.parse_args()

    from core.config import EngineSettings, configure_logging

    settings = EngineSettings()
    configure_logging(settings.log_level)
    case_id = args.case_id or args.data.name

    print("=" * 60)
    print("Socratic Argumentation - Session Replay")
    print("=" * 60)
    print(f"Case: {case_id}")
    print(f"Turns: {args.turns}")
    print(f"Cross-check: {'on' if settings.cross_check_enabled else 'off'}")
    if args.output:
        print(f"Output: {args.output}")
    print()

    # Load case content
    print("Loading case content...")
    try:
        from dialogue.datasets.builder import CaseCatalogBuilder
        from dialogue.datasets.loaders import load_from_local

        builder = CaseCatalogBuilder(load_from_local(args.data))
        builder.build_indexes()
        print(f"  Loaded {len(builder.issue_by_id)} issues")
        print(f"  Loaded {len(builder.fact_by_id)} facts")
        print(f"  Loaded {len(builder.law_by_id)} laws")
    except Exception as e:
        print(f"  ERROR: Failed to load case content: {e}")
        return 1

    from core.reporting.jsonl import read_turns

    try:
        turns = read_turns(args.turns)
    except Exception as e:
        print(f"  ERROR: Failed to read turns: {e}")
        return 1

    # Run session
    print()
    print("Replaying turns...")
    from dialogue.session.machine import SessionMachine

    machine = SessionMachine.start(
        case_id,
        builder.issue_by_id,
        builder.fact_by_id,
        builder.law_by_id,
        settings=settings,
    )
    accepted = asyncio.run(replay(machine, turns, args.verbose))
    machine.end()
    print(f"\n  Accepted {accepted}/{len(turns)} turns")

    if args.output:
        from core.reporting.jsonl import write_events

        count = write_events(machine.emitter.history, args.output)
        print(f"  Wrote {count} events to {args.output}")

    # Print summary
    print()
    print("Summary:")
    from core.reporting.jsonl import summarize_session

    summary = summarize_session(machine.session)
    print(f"  Turns: {summary['turn_count']}")
    print(f"  Average total: {summary['average_total']:.1f}")
    print(f"  Best total: {summary['best_total']}")
    print(f"  Element coverage: {summary['coverage_rate']:.1%}")
    print(f"  Final hardness: {summary['hardness']}")
    for level, count in summary["levels"].items():
        print(f"    {level}: {count}")

    print()
    print("=" * 60)
    print("Replay complete!")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
