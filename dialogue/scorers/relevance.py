"""Relevance: does the Turn stay on the disputed issue?

Keyword overlap (Jaccard) between the active issue and the Turn's issue +
application text, mapped onto score bands with linear interpolation:
- overlap > 0.7 -> 90-100
- overlap > 0.4 -> 70-90
- otherwise     -> 40-70
"""

from core.schemas.case import ScoringContext
from core.schemas.results import DIM_RELEVANCE, RubricDimension
from core.schemas.turn import Turn
from core.scoring.text_match import extract_keywords, interpolate, jaccard
from dialogue.scorers.base import DimensionScorer

HIGH_OVERLAP = 0.7
MEDIUM_OVERLAP = 0.4

FEEDBACK_FOCUSED = "论述高度聚焦核心争议点"
FEEDBACK_PARTIAL = "基本围绕争议点，但部分内容偏离主题"
FEEDBACK_OFF_TOPIC = "论述偏离核心争议，请重新聚焦问题"


def keyword_overlap(issue_text: str, turn: Turn) -> float:
    """Jaccard overlap of issue keywords and the Turn's issue + application keywords."""
    issue_keywords = extract_keywords(issue_text)
    turn_keywords = extract_keywords(turn.issue + " " + turn.application)
    return jaccard(issue_keywords, turn_keywords)


class RelevanceScorer(DimensionScorer):
    """Relevance of the Turn to the active issue."""

    @property
    def dimension(self) -> str:
        return DIM_RELEVANCE

    def score(self, turn: Turn, ctx: ScoringContext) -> RubricDimension:
        overlap = keyword_overlap(ctx.issue.text, turn)

        if overlap > HIGH_OVERLAP:
            value = interpolate(overlap, HIGH_OVERLAP, 1.0, 90, 100)
            return self.create_dimension(value, FEEDBACK_FOCUSED)

        if overlap > MEDIUM_OVERLAP:
            value = interpolate(overlap, MEDIUM_OVERLAP, HIGH_OVERLAP, 70, 90)
            return self.create_dimension(value, FEEDBACK_PARTIAL)

        value = interpolate(overlap, 0.0, MEDIUM_OVERLAP, 40, 70)
        return self.create_dimension(value, FEEDBACK_OFF_TOPIC)
