"""Event protocol emitter.

Every message carries exactly one event kind:
    {"type": <kind>, "session_id": <id>, "seq": <n>, "data": <payload>}
`seq` starts at 1 and increases by one per message within a session.
"""

import logging
from typing import Any, Callable, Iterable, Sequence

from core.reporting.jsonl import event_to_dict
from core.schemas.challenge import Challenge
from core.schemas.events import (
    END_COMPLETE,
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
from core.schemas.session import ArgumentNode

logger = logging.getLogger(__name__)

Message = dict[str, Any]
Sink = Callable[[Message], None]


class EventEmitter:
    """Serialize events for one session and forward them to a sink."""

    def __init__(self, session_id: str, sink: Sink | None = None) -> None:
        """Initialize emitter.

        Args:
            session_id: Session the events belong to
            sink: Optional callable receiving each serialized message
        """
        self._session_id = session_id
        self._sink = sink
        self._seq = 0
        self._history: list[Message] = []

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def seq(self) -> int:
        """Sequence number of the last emitted message (0 before any)."""
        return self._seq

    @property
    def history(self) -> list[Message]:
        """Messages emitted so far, in order."""
        return list(self._history)

    def types(self) -> list[str]:
        """Event types emitted so far, in order."""
        return [message["type"] for message in self._history]

    def emit(self, event: Event) -> Message:
        """Serialize one event and forward it.

        Args:
            event: Event to emit

        Returns:
            The serialized message
        """
        body = event_to_dict(event)
        self._seq += 1
        message = {
            "type": body["type"],
            "session_id": self._session_id,
            "seq": self._seq,
            "data": body["data"],
        }
        self._history.append(message)
        logger.debug("Emit %s #%d for %s", message["type"], self._seq, self._session_id)
        if self._sink is not None:
            self._sink(message)
        return message

    def coach(self, tips: Iterable[str]) -> Message:
        return self.emit(CoachEvent(tips=tuple(tips)))

    def score(self, turn_id: str, score: RubricScore) -> Message:
        return self.emit(ScoreEvent(turn_id=turn_id, score=score))

    def challenge(self, challenge: Challenge) -> Message:
        return self.emit(ChallengeEvent(challenge=challenge))

    def arg_patch(self, nodes: Sequence[ArgumentNode]) -> Message:
        return self.emit(ArgPatchEvent(nodes=tuple(nodes)))

    def warning(self, code: str, message: str = "") -> Message:
        return self.emit(WarningEvent(code=code, message=message))

    def element_check(
        self, issue_id: str, covered: Iterable[str], missing: Iterable[str]
    ) -> Message:
        return self.emit(
            ElementCheckEvent(issue_id=issue_id, covered=tuple(covered), missing=tuple(missing))
        )

    def summary(self, stats: dict[str, Any]) -> Message:
        """Emit a summary built from core.reporting.jsonl.summarize_session output."""
        return self.emit(SummaryEvent(**stats))

    def timer(self, elapsed_seconds: float, remaining_seconds: float | None = None) -> Message:
        return self.emit(
            TimerEvent(elapsed_seconds=elapsed_seconds, remaining_seconds=remaining_seconds)
        )

    def end(self, reason: str = END_COMPLETE) -> Message:
        return self.emit(EndEvent(reason=reason))
