"""Session state machine.

States:
    active -> paused -> active      (pause / resume)
    active | paused -> completed    (end; terminal)

Turns of one session are applied strictly in submission order, one at a
time. A Turn already being evaluated when the session ends is still
recorded; anything queued behind it is rejected. The closing summary and
end events wait for that Turn, so end is always the last message.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from core.config import EngineSettings
from core.errors import StateConflict, TurnValidationError
from core.ids.canonical import fact_marker, node_id, session_id, turn_id
from core.reporting.jsonl import summarize_session
from core.schemas.case import Issue, ScoringContext
from core.schemas.challenge import Challenge
from core.schemas.events import (
    END_COMPLETE,
    END_REASONS,
    END_TIMEOUT,
    WARNING_CIRCULAR_REASONING,
    WARNING_OFF_TOPIC,
)
from core.schemas.results import (
    MUST_FIX_ELEMENT_GAP,
    MUST_FIX_MISSING_CITATION,
    MUST_FIX_WRONG_RULE,
    RubricScore,
)
from core.schemas.session import (
    NODE_CLAIM,
    NODE_COUNTER,
    NODE_EVIDENCE,
    NODE_REASON,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_PAUSED,
    ArgumentNode,
    ElementCoverage,
    SocraticSession,
)
from core.schemas.turn import Turn, validate_turn
from core.scoring.irac_rubric import derive_warnings
from dialogue.challenge.generator import ChallengeGenerator
from dialogue.events.emitter import EventEmitter, Sink
from dialogue.runner.evaluator import ArgumentEvaluator
from dialogue.session.difficulty import DifficultyAdapter, DifficultyAdjustment

logger = logging.getLogger(__name__)

WARNING_MESSAGES: dict[str, str] = {
    MUST_FIX_MISSING_CITATION: "缺少事实或法条引用",
    MUST_FIX_WRONG_RULE: "法律规则存在明显错误",
    MUST_FIX_ELEMENT_GAP: "论述未触及争议点的核心要件",
    WARNING_OFF_TOPIC: "论述偏离争议焦点",
    WARNING_CIRCULAR_REASONING: "结论只是重复了争议问题，属于循环论证",
}

ALL_CLEAR_TIP = "论证结构完整，继续保持"


@dataclass(frozen=True)
class TurnOutcome:
    """Everything one accepted Turn produced.

    Attributes:
        turn_id: Id assigned to the Turn
        turn: The validated Turn
        score: Its RubricScore
        challenge: Follow-up challenge (None when generation is off)
        warnings: Warning codes emitted for the Turn
        adjustment: Difficulty check made when the Turn arrived
    """

    turn_id: str
    turn: Turn
    score: RubricScore
    challenge: Challenge | None
    warnings: tuple[str, ...]
    adjustment: DifficultyAdjustment


class SessionMachine:
    """Single writer of one SocraticSession.

    Key Design Points:
    - Status checks run before any mutation; a conflict leaves state unchanged
    - An asyncio.Lock serializes Turns; status is re-checked after acquiring it
    - Hardness adapts from the history as it stood when the Turn arrived
    - Events are emitted one kind per message in a fixed order per Turn
    """

    def __init__(
        self,
        session: SocraticSession,
        evaluator: ArgumentEvaluator,
        issues: Mapping[str, Issue],
        facts: Mapping[str, str] | None = None,
        laws: Mapping[str, str] | None = None,
        settings: EngineSettings | None = None,
        emitter: EventEmitter | None = None,
        challenge_generator: ChallengeGenerator | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize state machine.

        Args:
            session: Session to drive
            evaluator: Turn evaluator
            issues: Issue id -> Issue for the case
            facts: Fact id -> fact content
            laws: Law id -> law content
            settings: Engine settings (defaults from the environment)
            emitter: Event emitter (a silent one is created when omitted)
            challenge_generator: Challenge generator
            clock: Time source in seconds
        """
        self._session = session
        self._evaluator = evaluator
        self._issues = dict(issues)
        self._facts = dict(facts or {})
        self._laws = dict(laws or {})
        self._settings = settings or EngineSettings()
        self._emitter = emitter or EventEmitter(session.id)
        self._challenges = challenge_generator or ChallengeGenerator()
        self._difficulty = DifficultyAdapter.from_settings(self._settings)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._in_flight: set[str] = set()
        self._pending_end: str | None = None

        if not session.element_coverage:
            session.element_coverage = [
                ElementCoverage(issue_id=issue.id, element=element)
                for issue in self._issues.values()
                for element in issue.elements
            ]

    @classmethod
    def start(
        cls,
        case_id: str,
        issues: Mapping[str, Issue],
        facts: Mapping[str, str] | None = None,
        laws: Mapping[str, str] | None = None,
        settings: EngineSettings | None = None,
        sink: Sink | None = None,
        evaluator: ArgumentEvaluator | None = None,
        token: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> "SessionMachine":
        """Create an active session and its machine.

        Args:
            case_id: Case being argued
            issues: Issue id -> Issue
            facts: Fact id -> fact content
            laws: Law id -> law content
            settings: Engine settings (initial hardness, time limit)
            sink: Optional event sink
            evaluator: Turn evaluator (built from settings when omitted)
            token: Fixed session token (random when omitted)
            clock: Time source in seconds

        Returns:
            SessionMachine over a new active session
        """
        settings = settings or EngineSettings()
        session = SocraticSession(
            id=session_id(case_id, token),
            case_id=case_id,
            current_hardness=settings.initial_hardness,
            started_at=clock(),
            time_limit_seconds=settings.time_limit_seconds,
        )
        logger.info("Session %s started at hardness %s", session.id, session.current_hardness)
        return cls(
            session,
            evaluator or ArgumentEvaluator(settings=settings),
            issues,
            facts,
            laws,
            settings=settings,
            emitter=EventEmitter(session.id, sink),
            clock=clock,
        )

    @property
    def session(self) -> SocraticSession:
        return self._session

    @property
    def emitter(self) -> EventEmitter:
        return self._emitter

    @property
    def next_turn_index(self) -> int:
        """Index the next submitted Turn will get, counting queued ones."""
        return len(self._session.turns) + len(self._in_flight)

    # ==================== Transitions ====================

    def pause(self) -> None:
        """Suspend an active session."""
        self._require_status(STATUS_ACTIVE, "pause")
        self._session.status = STATUS_PAUSED
        logger.info("Session %s paused", self._session.id)

    def resume(self) -> None:
        """Resume a paused session."""
        self._require_status(STATUS_PAUSED, "resume")
        self._session.status = STATUS_ACTIVE
        logger.info("Session %s resumed", self._session.id)

    def end(self, reason: str = END_COMPLETE) -> None:
        """Complete the session and emit summary then end.

        The status changes at once. While a Turn is being evaluated the two
        closing events are held back until it has been recorded.

        Args:
            reason: "complete", "timeout" or "abort"

        Raises:
            ValueError: If reason is unknown
            StateConflict: If the session is already completed
        """
        if reason not in END_REASONS:
            raise ValueError(f"Invalid reason '{reason}'. Must be one of: {END_REASONS}")
        if self._session.status == STATUS_COMPLETED:
            raise StateConflict(f"Session {self._session.id} already completed")

        self._session.status = STATUS_COMPLETED
        self._session.ended_at = self._clock()
        self._session.end_reason = reason
        logger.info("Session %s completed (%s)", self._session.id, reason)

        self._pending_end = reason
        if not self._lock.locked():
            self._emit_end()

    def _emit_end(self) -> None:
        if self._pending_end is None:
            return
        reason, self._pending_end = self._pending_end, None
        self._emitter.summary(summarize_session(self._session))
        self._emitter.end(reason)

    def tick(self, now: float | None = None) -> float | None:
        """Emit a timer event; end the session once its time limit passes.

        Args:
            now: Current time in seconds (defaults to the clock)

        Returns:
            Remaining seconds, or None without a time limit
        """
        if self._session.status == STATUS_COMPLETED:
            raise StateConflict(f"Session {self._session.id} already completed")

        now = self._clock() if now is None else now
        elapsed = max(0.0, now - self._session.started_at)
        limit = self._session.time_limit_seconds
        remaining = None if limit is None else max(0.0, limit - elapsed)

        self._emitter.timer(elapsed, remaining)
        if remaining is not None and remaining <= 0:
            self.end(END_TIMEOUT)
        return remaining

    # ==================== Turns ====================

    async def submit(
        self, raw: Mapping[str, Any] | Turn, expected_turn_index: int | None = None
    ) -> TurnOutcome:
        """Evaluate and record one Turn.

        Args:
            raw: Raw Turn mapping or a built Turn
            expected_turn_index: Index the client believes this Turn has

        Returns:
            TurnOutcome for the recorded Turn

        Raises:
            StateConflict: Session not active, Turn out of order, or a Turn
                for the same issue already in flight
            TurnValidationError: If the submission is malformed
        """
        self._require_status(STATUS_ACTIVE, "submit")

        if expected_turn_index is not None and expected_turn_index != self.next_turn_index:
            raise StateConflict(
                f"Out-of-order turn: expected index {self.next_turn_index}, "
                f"got {expected_turn_index}"
            )

        turn = validate_turn(raw)
        issue = self._issues.get(turn.issue_id)
        if issue is None:
            raise TurnValidationError([f"issueId: unknown issue '{turn.issue_id}'"])

        if turn.issue_id in self._in_flight:
            raise StateConflict(f"Duplicate turn: issue {turn.issue_id} already in flight")

        self._in_flight.add(turn.issue_id)
        try:
            async with self._lock:
                self._require_status(STATUS_ACTIVE, "submit")
                try:
                    return await self._apply(turn, issue)
                finally:
                    self._emit_end()
        finally:
            self._in_flight.discard(turn.issue_id)

    async def _apply(self, turn: Turn, issue: Issue) -> TurnOutcome:
        session = self._session
        ctx = ScoringContext(
            issue=issue,
            facts=self._facts,
            laws=self._laws,
            previous_turns=tuple(session.turns_for(issue.id)),
        )
        score = await self._evaluator.evaluate(turn, ctx)

        tid = turn_id(session.id, len(session.turns))
        session.turns.append(turn)
        session.scores.append(score)
        self._update_coverage(issue, score, tid)

        adjustment = self._difficulty.adapt(session)
        self._difficulty.record(session, score.total)

        challenge = None
        if self._settings.generate_challenges:
            challenge = self._challenges.generate(
                score, session.current_hardness, turn, ctx, session.challenges
            )
            session.challenges.append(challenge)

        nodes = self._grow_tree(turn, tid, challenge)
        warnings = derive_warnings(turn, score)
        self._emit_turn(issue, tid, score, warnings, challenge, nodes)

        logger.debug(
            "Session %s recorded %s: total=%d hardness=%s",
            session.id,
            tid,
            score.total,
            session.current_hardness,
        )
        return TurnOutcome(
            turn_id=tid,
            turn=turn,
            score=score,
            challenge=challenge,
            warnings=tuple(warnings),
            adjustment=adjustment,
        )

    def _update_coverage(self, issue: Issue, score: RubricScore, tid: str) -> None:
        for ec in self._session.coverage_for(issue.id):
            if ec.element not in score.gaps:
                ec.covered = True
                ec.turn_ids.append(tid)

    def _grow_tree(
        self, turn: Turn, tid: str, challenge: Challenge | None
    ) -> list[ArgumentNode]:
        claim = ArgumentNode(
            id=node_id(tid, NODE_CLAIM, 0),
            kind=NODE_CLAIM,
            text=turn.conclusion,
            turn_id=tid,
        )
        reason = ArgumentNode(
            id=node_id(tid, NODE_REASON, 0),
            kind=NODE_REASON,
            text=turn.rule,
            parent_id=claim.id,
            turn_id=tid,
        )
        nodes = [claim, reason]

        for n, fact in enumerate(turn.cited_facts):
            nodes.append(
                ArgumentNode(
                    id=node_id(tid, NODE_EVIDENCE, n),
                    kind=NODE_EVIDENCE,
                    text=self._facts.get(fact) or fact_marker(fact),
                    parent_id=reason.id,
                    turn_id=tid,
                )
            )

        if challenge is not None:
            nodes.append(
                ArgumentNode(
                    id=node_id(tid, NODE_COUNTER, 0),
                    kind=NODE_COUNTER,
                    text=challenge.prompt,
                    parent_id=claim.id,
                    turn_id=tid,
                )
            )

        self._session.argument_tree.extend(nodes)
        return nodes

    def _emit_turn(
        self,
        issue: Issue,
        tid: str,
        score: RubricScore,
        warnings: list[str],
        challenge: Challenge | None,
        nodes: list[ArgumentNode],
    ) -> None:
        coverage = self._session.coverage_for(issue.id)

        self._emitter.score(tid, score)
        self._emitter.element_check(
            issue.id,
            covered=[ec.element for ec in coverage if ec.covered],
            missing=[ec.element for ec in coverage if not ec.covered],
        )
        self._emitter.coach(score.actionable or (ALL_CLEAR_TIP,))
        for code in warnings:
            self._emitter.warning(code, WARNING_MESSAGES[code])
        if challenge is not None:
            self._emitter.challenge(challenge)
        self._emitter.arg_patch(nodes)

    def _require_status(self, status: str, operation: str) -> None:
        if self._session.status != status:
            raise StateConflict(
                f"Cannot {operation}: session {self._session.id} is {self._session.status}"
            )
