"""Application depth: are the issue's required elements worked through?

Coverage is the fraction of required elements present in the application
(exact substring or loose character-subset match), mapped onto bands with
linear interpolation:
- coverage >= 0.8 -> 85-100
- coverage >= 0.5 -> 70-84
- otherwise       -> 50-69
A fact-grounded application (cited facts resolve to content and the
application is longer than 50 characters) earns up to +10, capped at 100.
"""

from core.schemas.case import ScoringContext
from core.schemas.results import DIM_APPLICATION, RubricDimension
from core.schemas.turn import Turn
from core.scoring.text_match import covered_elements, interpolate
from dialogue.scorers.base import DimensionScorer

BASE_SCORE = 60
FULL_COVERAGE = 0.8
PARTIAL_COVERAGE = 0.5
FACT_BONUS = 10
MIN_GROUNDED_LENGTH = 50


def element_coverage(application: str, elements: tuple[str, ...]) -> float:
    """Fraction of elements found in the application (0.0 when none configured)."""
    if not elements:
        return 0.0
    return len(covered_elements(application, elements)) / len(elements)


class ApplicationDepthScorer(DimensionScorer):
    """Depth of the rule-to-facts application."""

    @property
    def dimension(self) -> str:
        return DIM_APPLICATION

    def score(self, turn: Turn, ctx: ScoringContext) -> RubricDimension:
        score = BASE_SCORE
        elements = ctx.elements

        if not elements:
            feedback = "本争议点未设置要件，按基础分评估"
        else:
            coverage = element_coverage(turn.application, elements)
            if coverage >= FULL_COVERAGE:
                score = interpolate(coverage, FULL_COVERAGE, 1.0, 85, 100)
                feedback = "要件分析全面深入"
            elif coverage >= PARTIAL_COVERAGE:
                score = min(84, interpolate(coverage, PARTIAL_COVERAGE, FULL_COVERAGE, 70, 85))
                feedback = f"已覆盖{round(coverage * 100)}%要件，继续补充其他要件分析"
            else:
                score = min(69, interpolate(coverage, 0.0, PARTIAL_COVERAGE, 50, 70))
                feedback = "要件分析不足，请逐一对照法条要件进行论证"

        if ctx.fact_content(turn.cited_facts) and len(turn.application) > MIN_GROUNDED_LENGTH:
            score = min(100, score + FACT_BONUS)
            feedback += "；事实与要件结合紧密"

        return self.create_dimension(score, feedback)
