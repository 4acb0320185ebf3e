"""IRAC rubric aggregation.

Combines the five dimension scores of one Turn into a RubricScore: weighted
total, performance level, element gaps, prioritised suggestions and the
must-fix flag. Also derives the warning codes streamed to the client.
"""

import math
from typing import Mapping, Sequence

from core.schemas.events import WARNING_CIRCULAR_REASONING, WARNING_OFF_TOPIC
from core.schemas.results import (
    DIM_APPLICATION,
    DIM_CITATION,
    DIM_CONCLUSION,
    DIM_RELEVANCE,
    DIM_RULE,
    DIMENSIONS,
    LEVEL_EXCELLENT,
    LEVEL_FAIR,
    LEVEL_GOOD,
    LEVEL_POOR,
    MUST_FIX_ELEMENT_GAP,
    MUST_FIX_MISSING_CITATION,
    MUST_FIX_WRONG_RULE,
    RubricDimension,
    RubricDims,
    RubricScore,
)
from core.schemas.turn import Turn
from core.scoring.text_match import char_ngrams, jaccard, missing_elements

# Dimension weights (must sum to 1.0)
DIMENSION_WEIGHTS: dict[str, float] = {
    DIM_RELEVANCE: 0.20,
    DIM_RULE: 0.20,
    DIM_APPLICATION: 0.30,
    DIM_CITATION: 0.20,
    DIM_CONCLUSION: 0.10,
}

# (minimum total, level), checked top-down
LEVEL_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (85, LEVEL_EXCELLENT),
    (70, LEVEL_GOOD),
    (55, LEVEL_FAIR),
)

# Dimensions scoring below this get a suggestion
ACTIONABLE_THRESHOLD = 70
MAX_ACTIONABLE = 3

WRONG_RULE_THRESHOLD = 50
ELEMENT_GAP_THRESHOLD = 40
OFF_TOPIC_THRESHOLD = 50

# Conclusion/issue bigram overlap at which the conclusion just restates the issue
CIRCULAR_OVERLAP = 0.8

ACTIONABLE_TEMPLATES: dict[str, str] = {
    DIM_RELEVANCE: "请重新阅读争议焦点，确保论述紧扣核心问题",
    DIM_RULE: "请准确引用法条原文，避免主观解读",
    DIM_APPLICATION: "请补充论证以下要件：{gaps}",
    DIM_CITATION: "请在论述中明确标注引用的事实和法条，如[F1]、[L2]",
    DIM_CONCLUSION: "请用一句话明确表达你的立场和理由",
}

APPLICATION_FALLBACK = "请逐一对照法条要件展开论证"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5 + 1e-9))


def weighted_total(dims: RubricDims) -> int:
    """Weighted sum of the dimension scores, rounded and clamped to 0-100."""
    raw = sum(dim.score * DIMENSION_WEIGHTS[name] for name, dim in dims.items())
    return min(100, max(0, round_half_up(raw)))


def overall_level(total: int) -> str:
    """Classify a total as excellent, good, fair or poor."""
    for minimum, level in LEVEL_THRESHOLDS:
        if total >= minimum:
            return level
    return LEVEL_POOR


def identify_gaps(turn: Turn, elements: Sequence[str]) -> list[str]:
    """Required elements found nowhere in issue + rule + application.

    Args:
        turn: The evaluated Turn
        elements: Required elements of the issue

    Returns:
        Missing elements, in element order
    """
    return missing_elements(turn.argument_text, elements)


def actionable_feedback(dims: RubricDims, gaps: Sequence[str]) -> list[str]:
    """One suggestion per weak dimension, worst first, at most three.

    Args:
        dims: Scored dimensions
        gaps: Missing elements (named in the application suggestion)

    Returns:
        Up to MAX_ACTIONABLE suggestions sorted by ascending dimension score
    """
    suggestions: list[tuple[int, str]] = []

    for name, dim in dims.items():
        if dim.score >= ACTIONABLE_THRESHOLD:
            continue
        if name == DIM_APPLICATION:
            text = (
                ACTIONABLE_TEMPLATES[name].format(gaps="、".join(gaps[:2]))
                if gaps
                else APPLICATION_FALLBACK
            )
        else:
            text = ACTIONABLE_TEMPLATES[name]
        suggestions.append((dim.score, text))

    # Stable sort: ties keep canonical dimension order
    suggestions.sort(key=lambda item: item[0])
    return [text for _, text in suggestions[:MAX_ACTIONABLE]]


def identify_must_fix(turn: Turn, dims: RubricDims) -> str | None:
    """Highest-priority blocking problem, or None.

    Priority: MISSING_CITATION, WRONG_RULE, ELEMENT_GAP.
    """
    if not turn.cited_facts or not turn.cited_laws:
        return MUST_FIX_MISSING_CITATION
    if dims.rule.score < WRONG_RULE_THRESHOLD:
        return MUST_FIX_WRONG_RULE
    if dims.relevance.score < ELEMENT_GAP_THRESHOLD:
        return MUST_FIX_ELEMENT_GAP
    return None


def build_dims(scored: Mapping[str, RubricDimension]) -> RubricDims:
    """Annotate each dimension with its canonical weight.

    Args:
        scored: Dimension name -> RubricDimension for all five dimensions

    Raises:
        KeyError: If a dimension is missing
    """
    return RubricDims(
        **{name: scored[name].with_weight(DIMENSION_WEIGHTS[name]) for name in DIMENSIONS}
    )


def aggregate(
    turn: Turn,
    scored: Mapping[str, RubricDimension],
    elements: Sequence[str],
) -> RubricScore:
    """Compose five dimension results into one RubricScore.

    Args:
        turn: The evaluated Turn
        scored: Dimension name -> RubricDimension for all five dimensions
        elements: Required elements of the issue

    Returns:
        RubricScore for the Turn
    """
    dims = build_dims(scored)
    gaps = identify_gaps(turn, elements)
    total = weighted_total(dims)

    return RubricScore(
        total=total,
        dims=dims,
        gaps=tuple(gaps),
        actionable=tuple(actionable_feedback(dims, gaps)),
        must_fix=identify_must_fix(turn, dims),
        overall_level=overall_level(total),
    )


def is_circular(turn: Turn) -> bool:
    """Check if the conclusion merely restates the issue."""
    conclusion = char_ngrams(turn.conclusion)
    if not conclusion:
        return False
    return jaccard(conclusion, char_ngrams(turn.issue)) >= CIRCULAR_OVERLAP


def derive_warnings(turn: Turn, score: RubricScore) -> list[str]:
    """Warning codes for the event stream, most severe first.

    Args:
        turn: The evaluated Turn
        score: Its RubricScore

    Returns:
        Warning codes (must-fix code, OFF_TOPIC, CIRCULAR_REASONING)
    """
    warnings = []
    if score.must_fix is not None:
        warnings.append(score.must_fix)
    if score.dims.relevance.score < OFF_TOPIC_THRESHOLD:
        warnings.append(WARNING_OFF_TOPIC)
    if is_circular(turn):
        warnings.append(WARNING_CIRCULAR_REASONING)
    return warnings


def format_rubric_feedback(score: RubricScore) -> str:
    """Generate human-readable rubric feedback.

    Args:
        score: RubricScore to format

    Returns:
        Formatted feedback string
    """
    lines = [f"Total: {score.total} ({score.overall_level})", ""]

    for name, dim in score.dims.items():
        status = "[OK]" if dim.score >= ACTIONABLE_THRESHOLD else "[WEAK]"
        lines.append(f"  {status} {name.upper()}: {dim.score} x {dim.weight:.2f}  {dim.feedback}")

    if score.gaps:
        lines.append("")
        lines.append(f"Missing elements: {', '.join(score.gaps)}")

    if score.must_fix:
        lines.append(f"Must fix: {score.must_fix}")

    return "\n".join(lines)
