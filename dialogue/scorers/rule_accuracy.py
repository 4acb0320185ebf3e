"""Rule accuracy: is the stated rule grounded in real, correctly read law?

Scoring:
- Start at 100
- -30 once if any cited law id does not resolve
- Cap at 60 if the rule statement is under 20 characters
- Optional AI cross-check of the rule against the cited law text: cap at
  70 on mismatch; a skipped check (disabled, timeout, error) changes nothing
- Floor at 0
"""

import asyncio
import logging

from core.errors import ExternalCheckTimeout
from core.schemas.case import ScoringContext
from core.schemas.results import (
    CHECK_ACCURATE,
    CHECK_INACCURATE,
    DIM_RULE,
    CrossCheckResult,
    RubricDimension,
)
from core.schemas.turn import Turn
from core.scoring.citation_verify import first_unresolved
from dialogue.backends.base import Backend
from dialogue.scorers.base import DimensionScorer

logger = logging.getLogger(__name__)

UNRESOLVED_LAW_PENALTY = 30
MIN_RULE_LENGTH = 20
SHORT_RULE_CAP = 60
MISMATCH_CAP = 70

# Cross-check runs only while the score is above this
CROSS_CHECK_FLOOR = 60

RULE_CHECK_PROMPT = """判断以下法律规则描述是否准确：
法条原文：{law_content}
学生描述：{rule}
仅回答：准确/不准确"""


def parse_cross_check(raw_response: str) -> CrossCheckResult:
    """Interpret the model's verdict.

    Args:
        raw_response: Raw model output

    Returns:
        accurate / inaccurate, or skipped when the verdict is unrecognised
    """
    text = raw_response.strip().lower()
    if "不准确" in text or "inaccurate" in text:
        return CrossCheckResult(status=CHECK_INACCURATE)
    if "准确" in text or "accurate" in text:
        return CrossCheckResult(status=CHECK_ACCURATE)
    return CrossCheckResult.skipped(f"unrecognised verdict: {raw_response[:40]!r}")


class RuleCrossChecker:
    """Compare a stated rule with the cited law text using an LLM backend.

    The backend call runs in a worker thread under an explicit timeout.
    Any timeout or backend failure yields a skipped result.
    """

    def __init__(self, backend: Backend, timeout_seconds: float = 3.0) -> None:
        self._backend = backend
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def check(self, rule: str, law_content: str) -> CrossCheckResult:
        """Run the cross-check.

        Args:
            rule: Rule as stated by the learner
            law_content: Text of the cited laws

        Returns:
            CrossCheckResult (never raises)
        """
        prompt = RULE_CHECK_PROMPT.format(law_content=law_content, rule=rule)
        try:
            raw_response = await self._complete(prompt)
        except ExternalCheckTimeout as e:
            logger.warning("Rule cross-check skipped: %s", e)
            return CrossCheckResult.skipped(str(e))
        except Exception as e:
            logger.warning(
                "Rule cross-check skipped: %s backend failed: %s", self._backend.model_id, e
            )
            return CrossCheckResult.skipped(f"backend error: {e}")

        result = parse_cross_check(raw_response)
        logger.debug("Rule cross-check via %s: %s", self._backend.model_id, result.status)
        return result

    async def _complete(self, prompt: str) -> str:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._backend.complete, prompt),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ExternalCheckTimeout(
                f"no answer within {self._timeout_seconds:.2f}s"
            ) from e


class RuleAccuracyScorer(DimensionScorer):
    """Accuracy of the stated rule and the law citations behind it."""

    def __init__(self, cross_checker: RuleCrossChecker | None = None) -> None:
        """Initialize scorer.

        Args:
            cross_checker: Optional AI cross-check (None disables it)
        """
        self._cross_checker = cross_checker

    @property
    def dimension(self) -> str:
        return DIM_RULE

    def score(
        self,
        turn: Turn,
        ctx: ScoringContext,
        cross_check: CrossCheckResult | None = None,
    ) -> RubricDimension:
        """Score the rule dimension.

        Args:
            turn: Validated Turn
            ctx: Scoring context (laws lookup)
            cross_check: Result of the AI cross-check, if one ran

        Returns:
            RubricDimension for "rule"
        """
        score = 100
        feedback = "法律规则引用准确"

        invalid_law = first_unresolved(turn.cited_laws, ctx.laws)
        if invalid_law is not None:
            score -= UNRESOLVED_LAW_PENALTY
            feedback = f"引用了不存在的法条: {invalid_law}"

        if len(turn.rule) < MIN_RULE_LENGTH:
            score = min(score, SHORT_RULE_CAP)
            feedback = "法律规则描述过于简略，请展开说明"

        if cross_check is not None and cross_check.is_mismatch:
            score = min(score, MISMATCH_CAP)
            feedback = "法律规则理解有偏差，请仔细对照法条原文"

        return self.create_dimension(max(0, score), feedback)

    def needs_cross_check(self, turn: Turn, base: RubricDimension) -> bool:
        """Whether the AI cross-check should run for this Turn."""
        return (
            self._cross_checker is not None
            and bool(turn.cited_laws)
            and base.score > CROSS_CHECK_FLOOR
        )

    async def evaluate(self, turn: Turn, ctx: ScoringContext) -> RubricDimension:
        base = self.score(turn, ctx)
        if not self.needs_cross_check(turn, base):
            return base

        law_content = "\n".join(ctx.law_content(turn.cited_laws))
        if not law_content:
            return base
        result = await self._cross_checker.check(turn.rule, law_content)
        return self.score(turn, ctx, cross_check=result)
