"""Session-scoped schemas.

A SocraticSession owns every Turn, RubricScore and Challenge produced in it.
It is mutated only by dialogue.session.machine.SessionMachine.
"""

from dataclasses import dataclass, field

from core.ids.canonical import turn_id as make_turn_id
from core.schemas.case import HARDNESS_LEVELS, HARDNESS_MEDIUM
from core.schemas.challenge import Challenge
from core.schemas.results import RubricScore
from core.schemas.turn import Turn

STATUS_ACTIVE = "active"
STATUS_PAUSED = "paused"
STATUS_COMPLETED = "completed"

VALID_STATUSES = frozenset({STATUS_ACTIVE, STATUS_PAUSED, STATUS_COMPLETED})

NODE_CLAIM = "claim"
NODE_REASON = "reason"
NODE_EVIDENCE = "evidence"
NODE_COUNTER = "counter"

VALID_NODE_KINDS = frozenset({NODE_CLAIM, NODE_REASON, NODE_EVIDENCE, NODE_COUNTER})


@dataclass(frozen=True)
class ArgumentNode:
    """One node of the argument tree.

    Attributes:
        id: Node id (see core.ids.canonical.node_id)
        kind: "claim", "reason", "evidence" or "counter"
        text: Node text
        parent_id: Parent node id (None for claims)
        turn_id: Turn that produced the node
    """

    id: str
    kind: str
    text: str
    parent_id: str | None = None
    turn_id: str | None = None

    def __post_init__(self) -> None:
        """Validate kind is one of the allowed values."""
        if self.kind not in VALID_NODE_KINDS:
            raise ValueError(
                f"Invalid kind '{self.kind}'. Must be one of: {VALID_NODE_KINDS}"
            )


@dataclass
class ElementCoverage:
    """Coverage of one required element across the session.

    Attributes:
        issue_id: Issue the element belongs to
        element: Element text
        covered: True once any Turn covered it
        turn_ids: Turns that covered it, in submission order
    """

    issue_id: str
    element: str
    covered: bool = False
    turn_ids: list[str] = field(default_factory=list)


@dataclass
class SocraticSession:
    """Mutable state of one argumentation session.

    Attributes:
        id: Session id
        case_id: Case being argued
        status: "active", "paused" or "completed"
        turns: Recorded Turns, in submission order
        scores: RubricScore per Turn (parallel to turns)
        challenges: Challenges issued, in order
        argument_tree: Nodes linked by parent_id
        element_coverage: Per-element coverage
        current_hardness: "easy", "medium" or "hard"
        performance_history: Recent totals, oldest first, bounded window
        totals_since_adjustment: Totals recorded since the last hardness
            change (None until the first change: the whole history counts)
        started_at: Unix time the session started
        ended_at: Unix time the session completed
        end_reason: "complete", "timeout" or "abort" once completed
        time_limit_seconds: Optional time limit
    """

    id: str
    case_id: str
    status: str = STATUS_ACTIVE
    turns: list[Turn] = field(default_factory=list)
    scores: list[RubricScore] = field(default_factory=list)
    challenges: list[Challenge] = field(default_factory=list)
    argument_tree: list[ArgumentNode] = field(default_factory=list)
    element_coverage: list[ElementCoverage] = field(default_factory=list)
    current_hardness: str = HARDNESS_MEDIUM
    performance_history: list[int] = field(default_factory=list)
    totals_since_adjustment: int | None = None
    started_at: float = 0.0
    ended_at: float | None = None
    end_reason: str | None = None
    time_limit_seconds: float | None = None

    def __post_init__(self) -> None:
        """Validate status and hardness."""
        if self.status not in VALID_STATUSES:
            raise ValueError(
                f"Invalid status '{self.status}'. Must be one of: {VALID_STATUSES}"
            )
        if self.current_hardness not in HARDNESS_LEVELS:
            raise ValueError(
                f"Invalid hardness '{self.current_hardness}'. Must be one of: {HARDNESS_LEVELS}"
            )

    @property
    def turn_ids(self) -> list[str]:
        """Ids of the recorded turns."""
        return [make_turn_id(self.id, index) for index in range(len(self.turns))]

    @property
    def latest_score(self) -> RubricScore | None:
        return self.scores[-1] if self.scores else None

    def coverage_for(self, issue_id: str) -> list[ElementCoverage]:
        """Coverage records of one issue, in element order."""
        return [ec for ec in self.element_coverage if ec.issue_id == issue_id]

    def turns_for(self, issue_id: str) -> list[Turn]:
        """Recorded turns on one issue, oldest first."""
        return [turn for turn in self.turns if turn.issue_id == issue_id]
