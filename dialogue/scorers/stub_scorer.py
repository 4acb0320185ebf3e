"""Stub scorer for testing evaluator and session logic."""

from core.schemas.case import ScoringContext
from core.schemas.results import RubricDimension
from core.schemas.turn import Turn
from dialogue.scorers.base import DimensionScorer


class StubScorer(DimensionScorer):
    """Fixed-score stand-in for one rubric dimension.

    Every call returns `score_value` for `dimension`, or raises `error` when
    one is given. `call_count` lets tests assert that a rejected Turn never
    reached the scorers.

    Example:
        # Rule scorer that always returns 90
        rule = StubScorer("rule", score_value=90)

        # Application scorer that blows up
        broken = StubScorer("application", error=RuntimeError("boom"))
    """

    def __init__(
        self,
        dimension: str,
        score_value: int = 80,
        feedback: str = "",
        error: Exception | None = None,
    ) -> None:
        """Initialize stub scorer.

        Args:
            dimension: Dimension name (e.g., "relevance")
            score_value: Score to return (0-100)
            feedback: Feedback to return
            error: Exception raised instead of scoring
        """
        self._dimension = dimension
        self._score_value = score_value
        self._feedback = feedback or f"[STUB FEEDBACK for {dimension}]"
        self._error = error
        self.call_count = 0

    @property
    def dimension(self) -> str:
        return self._dimension

    def score(self, turn: Turn, ctx: ScoringContext) -> RubricDimension:
        """Return configured score, or raise the configured error."""
        self.call_count += 1
        if self._error is not None:
            raise self._error
        return self.create_dimension(self._score_value, self._feedback)
