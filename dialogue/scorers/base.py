"""DimensionScorer ABC for the argumentation engine."""

from abc import ABC, abstractmethod

from core.schemas.case import ScoringContext
from core.schemas.results import RubricDimension
from core.schemas.turn import Turn


class DimensionScorer(ABC):
    """Abstract base class for rubric dimension scorers.

    Each of the five dimensions (relevance, rule, application, citation,
    conclusion) implements this interface. The evaluator calls evaluate()
    on all scorers concurrently and only the aggregator combines them.

    Key Design Points:
    - score() is a pure function of (turn, ctx); same input, same output
    - Scorers never read another scorer's output
    - evaluate() may do I/O (the rule cross-check) and defaults to score()
    - Unresolved citations lower the score, they never raise
    """

    @property
    @abstractmethod
    def dimension(self) -> str:
        """Return the dimension this scorer produces.

        Returns:
            Dimension name (e.g., "relevance", "rule")
        """
        pass

    @abstractmethod
    def score(self, turn: Turn, ctx: ScoringContext) -> RubricDimension:
        """Score one dimension of a Turn.

        Args:
            turn: Validated Turn
            ctx: Issue, facts, laws and prior turns

        Returns:
            RubricDimension with weight 0.0 (the aggregator sets weights)
        """
        pass

    async def evaluate(self, turn: Turn, ctx: ScoringContext) -> RubricDimension:
        """Score asynchronously; override when the dimension needs I/O.

        Args:
            turn: Validated Turn
            ctx: Issue, facts, laws and prior turns

        Returns:
            RubricDimension for this scorer's dimension
        """
        return self.score(turn, ctx)

    def create_dimension(self, score: float, feedback: str) -> RubricDimension:
        """Create a RubricDimension with the score clamped to 0-100.

        Args:
            score: Raw score
            feedback: Learner-facing feedback

        Returns:
            RubricDimension with weight 0.0
        """
        return RubricDimension(score=int(min(100, max(0, round(score)))), feedback=feedback)
