"""Citation quality: are facts and laws cited, valid, and used inline?

Scoring:
- Start at 100
- No fact citations -> 0; exactly one -> 70
- No law citations -> 0
- Any unresolved fact or law id -> -30 (floor 0)
- Positive score but no cited fact referenced in the application
  (as [Fx] or by raw id) -> -20 (floor 50)
"""

from core.schemas.case import ScoringContext
from core.schemas.results import DIM_CITATION, RubricDimension
from core.schemas.turn import Turn
from core.scoring.citation_verify import (
    KIND_FACT,
    KIND_LAW,
    is_cited_inline,
    verify_all_citations,
)
from dialogue.scorers.base import DimensionScorer

SINGLE_FACT_SCORE = 70
UNRESOLVED_PENALTY = 30
NOT_INLINE_PENALTY = 20
NOT_INLINE_FLOOR = 50
STRONG_SCORE = 90


class CitationQualityScorer(DimensionScorer):
    """Quantity, validity and inline use of citations."""

    @property
    def dimension(self) -> str:
        return DIM_CITATION

    def score(self, turn: Turn, ctx: ScoringContext) -> RubricDimension:
        score = 100
        feedback = ""

        if len(turn.cited_facts) == 0:
            score = 0
            feedback = "未引用任何事实证据"
        elif len(turn.cited_facts) == 1:
            score = SINGLE_FACT_SCORE
            feedback = "建议引用更多相关事实增强论证"

        if len(turn.cited_laws) == 0:
            score = 0
            feedback = "未引用任何法律依据"

        _, facts_valid = verify_all_citations(turn.cited_facts, ctx.facts, KIND_FACT)
        _, laws_valid = verify_all_citations(turn.cited_laws, ctx.laws, KIND_LAW)
        if not (facts_valid and laws_valid):
            score = max(0, score - UNRESOLVED_PENALTY)
            feedback = "存在无效引用，请检查引用标识"

        mentioned = any(is_cited_inline(turn.application, ref) for ref in turn.cited_facts)
        if score > 0 and not mentioned:
            score = max(NOT_INLINE_FLOOR, score - NOT_INLINE_PENALTY)
            feedback = (feedback + "；" if feedback else "") + "引用未在论述中体现，请明确标注"

        if score >= STRONG_SCORE:
            feedback = "引用充分且准确，论证有力"

        return self.create_dimension(score, feedback)
