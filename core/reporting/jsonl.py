"""JSON/JSONL output for argumentation sessions.

Serializes RubricScores, sessions and protocol events, writes event streams
as JSONL for replay and analysis, and computes session summaries.
Wire keys are camelCase, matching Turn.to_dict and Challenge.to_dict.
"""

import json
from collections import Counter
from pathlib import Path
from typing import IO, Any, Iterable, Mapping

from core.schemas.events import (
    ArgPatchEvent,
    ChallengeEvent,
    CoachEvent,
    ElementCheckEvent,
    EndEvent,
    Event,
    ScoreEvent,
    SummaryEvent,
    TimerEvent,
    WarningEvent,
)
from core.schemas.results import RubricScore
from core.schemas.session import ArgumentNode, SocraticSession


def rubric_score_to_dict(score: RubricScore) -> dict:
    """Convert RubricScore to serializable dict.

    Args:
        score: RubricScore to convert

    Returns:
        Dict suitable for JSON serialization
    """
    return {
        "total": score.total,
        "dims": {
            name: {"score": dim.score, "weight": dim.weight, "feedback": dim.feedback}
            for name, dim in score.dims.items()
        },
        "gaps": list(score.gaps),
        "actionable": list(score.actionable),
        "mustFix": score.must_fix,
        "overallLevel": score.overall_level,
    }


def node_to_dict(node: ArgumentNode) -> dict:
    return {
        "id": node.id,
        "kind": node.kind,
        "text": node.text,
        "parentId": node.parent_id,
        "turnId": node.turn_id,
    }


def summarize_session(session: SocraticSession) -> dict:
    """Generate summary statistics for a session.

    Args:
        session: Session to summarize

    Returns:
        Dict with turn_count, average_total, best_total, coverage_rate,
        hardness and levels (count per overall level)
    """
    totals = [score.total for score in session.scores]
    covered = sum(1 for ec in session.element_coverage if ec.covered)
    tracked = len(session.element_coverage)

    return {
        "turn_count": len(session.turns),
        "average_total": round(sum(totals) / len(totals), 2) if totals else 0.0,
        "best_total": max(totals) if totals else 0,
        "coverage_rate": round(covered / tracked, 4) if tracked else 0.0,
        "hardness": session.current_hardness,
        "levels": dict(Counter(score.overall_level for score in session.scores)),
    }


def session_to_dict(session: SocraticSession) -> dict:
    """Convert SocraticSession to serializable dict.

    Args:
        session: Session to convert

    Returns:
        Dict suitable for JSON serialization
    """
    return {
        "id": session.id,
        "caseId": session.case_id,
        "status": session.status,
        "turns": [
            dict(turn.to_dict(), id=turn_id)
            for turn_id, turn in zip(session.turn_ids, session.turns)
        ],
        "scores": [rubric_score_to_dict(score) for score in session.scores],
        "challenges": [challenge.to_dict() for challenge in session.challenges],
        "argumentTree": [node_to_dict(node) for node in session.argument_tree],
        "elementCoverage": [
            {
                "issueId": ec.issue_id,
                "element": ec.element,
                "covered": ec.covered,
                "turnIds": list(ec.turn_ids),
            }
            for ec in session.element_coverage
        ],
        "currentHardness": session.current_hardness,
        "performanceHistory": list(session.performance_history),
        "startedAt": session.started_at,
        "endedAt": session.ended_at,
        "endReason": session.end_reason,
    }


def event_payload(event: Event) -> dict:
    """The data payload of one event (its type tag excluded)."""
    if isinstance(event, CoachEvent):
        return {"tips": list(event.tips)}
    if isinstance(event, ScoreEvent):
        return {"turnId": event.turn_id, "score": rubric_score_to_dict(event.score)}
    if isinstance(event, ChallengeEvent):
        return {"challenge": event.challenge.to_dict()}
    if isinstance(event, ArgPatchEvent):
        return {"op": event.op, "nodes": [node_to_dict(node) for node in event.nodes]}
    if isinstance(event, WarningEvent):
        return {"code": event.code, "message": event.message}
    if isinstance(event, ElementCheckEvent):
        return {
            "issueId": event.issue_id,
            "covered": list(event.covered),
            "missing": list(event.missing),
        }
    if isinstance(event, SummaryEvent):
        return {
            "turnCount": event.turn_count,
            "averageTotal": event.average_total,
            "bestTotal": event.best_total,
            "coverageRate": event.coverage_rate,
            "hardness": event.hardness,
            "levels": dict(event.levels),
        }
    if isinstance(event, TimerEvent):
        return {
            "elapsedSeconds": event.elapsed_seconds,
            "remainingSeconds": event.remaining_seconds,
        }
    if isinstance(event, EndEvent):
        return {"reason": event.reason}
    raise TypeError(f"Unknown event: {event!r}")


def event_to_dict(event: Event) -> dict:
    """Convert an event to {"type", "data"}.

    Args:
        event: Event to convert

    Returns:
        Dict with the event's type tag and its payload
    """
    return {"type": event.type, "data": event_payload(event)}


def write_message(message: Mapping[str, Any], file: IO[str]) -> None:
    """Write a single event message as JSONL line.

    Args:
        message: Serialized event message
        file: Open file handle to write to
    """
    file.write(json.dumps(message, ensure_ascii=False) + "\n")


def write_events(
    messages: Iterable[Mapping[str, Any]],
    output_path: Path | str,
) -> int:
    """Write event messages to JSONL file.

    Args:
        messages: Serialized event messages (see EventEmitter.history)
        output_path: Path to output JSONL file

    Returns:
        Number of messages written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(output_path, "w", encoding="utf-8") as f:
        for message in messages:
            write_message(message, f)
            count += 1

    return count


def _read_jsonl(input_path: Path | str) -> list[tuple[int, Any]]:
    """Decoded non-blank lines of a JSONL file with their 1-based line numbers."""
    records = []
    with open(Path(input_path), "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            line = line.strip()
            if line:
                records.append((lineno, json.loads(line)))
    return records


def read_events(input_path: Path | str) -> list[dict]:
    """Read event messages from JSONL file.

    Args:
        input_path: Path to input JSONL file

    Returns:
        List of message dicts (not hydrated to event objects)
    """
    return [record for _, record in _read_jsonl(input_path)]


def read_turns(input_path: Path | str) -> list[dict]:
    """Read raw learner Turns, one JSON object per line.

    Turns are returned unvalidated; submit them through validate_turn or a
    session.

    Args:
        input_path: Path to input JSONL file

    Returns:
        List of raw Turn mappings in file order

    Raises:
        ValueError: If a line holds something other than a JSON object
    """
    turns = []
    for lineno, record in _read_jsonl(input_path):
        if not isinstance(record, dict):
            raise ValueError(
                f"{input_path}:{lineno}: expected a Turn object, got {type(record).__name__}"
            )
        turns.append(record)
    return turns
