"""Event protocol schemas.

Each event dataclass carries exactly one payload kind, tagged by its class
level `type`. Serialization lives in core.reporting.jsonl.event_to_dict.
"""

from dataclasses import dataclass, field
from typing import ClassVar

from core.schemas.challenge import Challenge
from core.schemas.results import (
    MUST_FIX_ELEMENT_GAP,
    MUST_FIX_MISSING_CITATION,
    MUST_FIX_WRONG_RULE,
    RubricScore,
)
from core.schemas.session import ArgumentNode

EVENT_COACH = "coach"
EVENT_SCORE = "score"
EVENT_CHALLENGE = "challenge"
EVENT_ARG_PATCH = "arg_patch"
EVENT_WARNING = "warning"
EVENT_ELEMENT_CHECK = "element_check"
EVENT_SUMMARY = "summary"
EVENT_TIMER = "timer"
EVENT_END = "end"

EVENT_TYPES = frozenset(
    {
        EVENT_COACH,
        EVENT_SCORE,
        EVENT_CHALLENGE,
        EVENT_ARG_PATCH,
        EVENT_WARNING,
        EVENT_ELEMENT_CHECK,
        EVENT_SUMMARY,
        EVENT_TIMER,
        EVENT_END,
    }
)

# Warning codes: the must-fix codes plus two stream-only warnings
WARNING_OFF_TOPIC = "OFF_TOPIC"
WARNING_CIRCULAR_REASONING = "CIRCULAR_REASONING"

WARNING_CODES = frozenset(
    {
        MUST_FIX_MISSING_CITATION,
        MUST_FIX_WRONG_RULE,
        MUST_FIX_ELEMENT_GAP,
        WARNING_OFF_TOPIC,
        WARNING_CIRCULAR_REASONING,
    }
)

END_COMPLETE = "complete"
END_TIMEOUT = "timeout"
END_ABORT = "abort"

END_REASONS = frozenset({END_COMPLETE, END_TIMEOUT, END_ABORT})

PATCH_ADD = "add"


@dataclass(frozen=True)
class CoachEvent:
    """Coaching tips for the learner."""

    type: ClassVar[str] = EVENT_COACH
    tips: tuple[str, ...]


@dataclass(frozen=True)
class ScoreEvent:
    """The RubricScore of one Turn."""

    type: ClassVar[str] = EVENT_SCORE
    turn_id: str
    score: RubricScore


@dataclass(frozen=True)
class ChallengeEvent:
    """A follow-up challenge."""

    type: ClassVar[str] = EVENT_CHALLENGE
    challenge: Challenge


@dataclass(frozen=True)
class ArgPatchEvent:
    """Argument-tree delta."""

    type: ClassVar[str] = EVENT_ARG_PATCH
    nodes: tuple[ArgumentNode, ...]
    op: str = PATCH_ADD


@dataclass(frozen=True)
class WarningEvent:
    """A warning about the latest Turn."""

    type: ClassVar[str] = EVENT_WARNING
    code: str
    message: str = ""

    def __post_init__(self) -> None:
        """Validate code is one of the allowed values."""
        if self.code not in WARNING_CODES:
            raise ValueError(f"Invalid code '{self.code}'. Must be one of: {WARNING_CODES}")


@dataclass(frozen=True)
class ElementCheckEvent:
    """Element coverage of one issue."""

    type: ClassVar[str] = EVENT_ELEMENT_CHECK
    issue_id: str
    covered: tuple[str, ...]
    missing: tuple[str, ...]


@dataclass(frozen=True)
class SummaryEvent:
    """Session summary, sent before the session ends."""

    type: ClassVar[str] = EVENT_SUMMARY
    turn_count: int
    average_total: float
    best_total: int
    coverage_rate: float
    hardness: str
    levels: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class TimerEvent:
    """Elapsed and remaining session time."""

    type: ClassVar[str] = EVENT_TIMER
    elapsed_seconds: float
    remaining_seconds: float | None = None


@dataclass(frozen=True)
class EndEvent:
    """Session end."""

    type: ClassVar[str] = EVENT_END
    reason: str = END_COMPLETE

    def __post_init__(self) -> None:
        """Validate reason is one of the allowed values."""
        if self.reason not in END_REASONS:
            raise ValueError(f"Invalid reason '{self.reason}'. Must be one of: {END_REASONS}")


Event = (
    CoachEvent
    | ScoreEvent
    | ChallengeEvent
    | ArgPatchEvent
    | WarningEvent
    | ElementCheckEvent
    | SummaryEvent
    | TimerEvent
    | EndEvent
)
