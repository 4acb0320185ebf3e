"""Argument evaluator: validate, score five dimensions, aggregate.

The evaluator is the only caller of the scorers. It runs them concurrently,
turns any scorer failure into a zero-score dimension, and hands the five
results to the rubric aggregator.
"""

import asyncio
import logging
from typing import Any, Mapping, Sequence

from core.config import EngineSettings
from core.schemas.case import ScoringContext
from core.schemas.results import DIMENSIONS, RubricDimension, RubricScore
from core.schemas.turn import Turn, validate_turn
from core.scoring.irac_rubric import aggregate
from dialogue.backends.openai_backend import OpenAIBackend
from dialogue.scorers.application_depth import ApplicationDepthScorer
from dialogue.scorers.base import DimensionScorer
from dialogue.scorers.citation_quality import CitationQualityScorer
from dialogue.scorers.conclusion_clarity import ConclusionClarityScorer
from dialogue.scorers.relevance import RelevanceScorer
from dialogue.scorers.rule_accuracy import RuleAccuracyScorer, RuleCrossChecker

logger = logging.getLogger(__name__)

FAILED_FEEDBACK = "该维度评估失败，按0分计"
MISSING_FEEDBACK = "该维度未评估，按0分计"


def default_scorers(cross_checker: RuleCrossChecker | None = None) -> list[DimensionScorer]:
    """The five production scorers in canonical dimension order."""
    return [
        RelevanceScorer(),
        RuleAccuracyScorer(cross_checker=cross_checker),
        ApplicationDepthScorer(),
        CitationQualityScorer(),
        ConclusionClarityScorer(),
    ]


def cross_checker_from_settings(settings: EngineSettings) -> RuleCrossChecker | None:
    """Build the rule cross-checker when enabled in settings."""
    if not settings.cross_check_enabled:
        return None
    backend = OpenAIBackend.from_settings(settings)
    return RuleCrossChecker(backend, timeout_seconds=settings.cross_check_timeout_seconds)


class ArgumentEvaluator:
    """Evaluate one Turn into a RubricScore.

    Key Design Points:
    - Validation happens first; a rejected Turn reaches no scorer
    - Scorers run concurrently and never see each other's output
    - Every validated Turn yields a RubricScore
    """

    def __init__(
        self,
        scorers: Sequence[DimensionScorer] | None = None,
        cross_checker: RuleCrossChecker | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        """Initialize evaluator.

        Args:
            scorers: Dimension scorers (defaults to the five production scorers)
            cross_checker: Rule cross-checker for the default rule scorer
            settings: Engine settings; builds the cross-checker when enabled
                and none is given
        """
        if cross_checker is None and settings is not None:
            cross_checker = cross_checker_from_settings(settings)
        self._scorers = list(scorers) if scorers is not None else default_scorers(cross_checker)

    @property
    def scorers(self) -> list[DimensionScorer]:
        return list(self._scorers)

    async def evaluate(
        self, raw: Mapping[str, Any] | Turn, ctx: ScoringContext
    ) -> RubricScore:
        """Validate and score a submission.

        Args:
            raw: Raw Turn mapping or an already built Turn
            ctx: Issue, facts, laws and prior turns

        Returns:
            RubricScore for the Turn

        Raises:
            TurnValidationError: If the submission is malformed
        """
        turn = validate_turn(raw)
        scored = await self.score_dimensions(turn, ctx)
        score = aggregate(turn, scored, ctx.elements)
        logger.debug(
            "Evaluated turn on %s: total=%d level=%s must_fix=%s",
            turn.issue_id,
            score.total,
            score.overall_level,
            score.must_fix,
        )
        return score

    async def score_dimensions(
        self, turn: Turn, ctx: ScoringContext
    ) -> dict[str, RubricDimension]:
        """Run all scorers concurrently; failed or missing dimensions score 0.

        Args:
            turn: Validated Turn
            ctx: Scoring context

        Returns:
            Dimension name -> RubricDimension for all five dimensions
        """
        results = await asyncio.gather(
            *(scorer.evaluate(turn, ctx) for scorer in self._scorers),
            return_exceptions=True,
        )

        scored: dict[str, RubricDimension] = {}
        for scorer, result in zip(self._scorers, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    "Scorer %s failed, scoring 0: %r", scorer.dimension, result
                )
                scored[scorer.dimension] = RubricDimension(score=0, feedback=FAILED_FEEDBACK)
            else:
                scored[scorer.dimension] = result

        for name in DIMENSIONS:
            if name not in scored:
                logger.warning("No scorer for dimension %s, scoring 0", name)
                scored[name] = RubricDimension(score=0, feedback=MISSING_FEEDBACK)

        return scored
