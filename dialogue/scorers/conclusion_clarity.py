"""Conclusion clarity: concise, consistent with the stance, reasoned.

Scoring:
- Start at 80; 60 if under 10 characters; 70 if over 200 characters
- +10 (cap 100) for a causal connective
- Cap at 50 when stance markers contradict the declared stance
"""

from core.schemas.case import ScoringContext
from core.schemas.results import DIM_CONCLUSION, RubricDimension
from core.schemas.turn import STANCE_CON, STANCE_PRO, Turn
from core.scoring.text_match import contains_any
from dialogue.scorers.base import DimensionScorer

BASE_SCORE = 80
MIN_LENGTH = 10
MAX_LENGTH = 200
SHORT_SCORE = 60
LONG_SCORE = 70
CONTRADICTION_CAP = 50
CAUSAL_BONUS = 10

# Negated forms come first: they are stripped before pro markers are searched
CON_MARKERS = ("不构成", "不应", "反对", "缺乏", "should not", "does not constitute", "oppose", "lacks")
PRO_MARKERS = ("支持", "赞成", "应当", "构成", "support", "should", "constitutes")
CAUSAL_MARKERS = ("因此", "所以", "故", "therefore", "thus", "hence")


def stance_markers(conclusion: str) -> tuple[bool, bool]:
    """Detect support and opposition markers.

    Returns:
        (has_pro, has_con)
    """
    has_con = contains_any(conclusion, CON_MARKERS)
    remainder = conclusion.lower()
    for marker in CON_MARKERS:
        remainder = remainder.replace(marker.lower(), " ")
    has_pro = contains_any(remainder, PRO_MARKERS)
    return has_pro, has_con


def contradicts_stance(turn: Turn) -> bool:
    """Check if the conclusion argues the other side of the declared stance."""
    has_pro, has_con = stance_markers(turn.conclusion)
    if turn.stance == STANCE_PRO:
        return has_con and not has_pro
    if turn.stance == STANCE_CON:
        return has_pro and not has_con
    return False


class ConclusionClarityScorer(DimensionScorer):
    """Clarity and consistency of the conclusion."""

    @property
    def dimension(self) -> str:
        return DIM_CONCLUSION

    def score(self, turn: Turn, ctx: ScoringContext) -> RubricDimension:
        score = BASE_SCORE
        feedback = ""
        conclusion = turn.conclusion

        if len(conclusion) < MIN_LENGTH:
            score = SHORT_SCORE
            feedback = "结论过于简略"
        elif len(conclusion) > MAX_LENGTH:
            score = LONG_SCORE
            feedback = "结论冗长，请简明扼要"

        if contains_any(conclusion, CAUSAL_MARKERS):
            score = min(100, score + CAUSAL_BONUS)
            feedback = feedback or "结论逻辑清晰"

        # A contradicting conclusion never exceeds the cap, bonus included
        if contradicts_stance(turn):
            score = min(score, CONTRADICTION_CAP)
            feedback = "结论与所选立场不一致"

        if score >= BASE_SCORE:
            feedback = feedback or "结论明确有力"

        return self.create_dimension(score, feedback)
