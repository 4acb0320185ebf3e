"""Rubric result schemas.

One RubricDimension per scored dimension, combined into one RubricScore per
evaluated Turn. Both are built fresh per evaluation and never mutated.
"""

from dataclasses import dataclass, replace
from typing import Iterator

# Dimension names, in canonical order
DIM_RELEVANCE = "relevance"
DIM_RULE = "rule"
DIM_APPLICATION = "application"
DIM_CITATION = "citation"
DIM_CONCLUSION = "conclusion"

DIMENSIONS = (DIM_RELEVANCE, DIM_RULE, DIM_APPLICATION, DIM_CITATION, DIM_CONCLUSION)

# Must-fix codes, in priority order
MUST_FIX_MISSING_CITATION = "MISSING_CITATION"
MUST_FIX_WRONG_RULE = "WRONG_RULE"
MUST_FIX_ELEMENT_GAP = "ELEMENT_GAP"

VALID_MUST_FIX = frozenset(
    {MUST_FIX_MISSING_CITATION, MUST_FIX_WRONG_RULE, MUST_FIX_ELEMENT_GAP}
)

LEVEL_EXCELLENT = "excellent"
LEVEL_GOOD = "good"
LEVEL_FAIR = "fair"
LEVEL_POOR = "poor"

VALID_LEVELS = frozenset({LEVEL_EXCELLENT, LEVEL_GOOD, LEVEL_FAIR, LEVEL_POOR})

# Cross-check outcomes
CHECK_ACCURATE = "accurate"
CHECK_INACCURATE = "inaccurate"
CHECK_SKIPPED = "skipped"

VALID_CHECK_STATUSES = frozenset({CHECK_ACCURATE, CHECK_INACCURATE, CHECK_SKIPPED})


@dataclass(frozen=True)
class RubricDimension:
    """Score and feedback for one rubric dimension.

    Attributes:
        score: Integer score 0-100
        weight: Canonical weight (0.0 until the aggregator annotates it)
        feedback: Short learner-facing feedback
    """

    score: int
    weight: float = 0.0
    feedback: str = ""

    def __post_init__(self) -> None:
        """Validate score range."""
        if not 0 <= self.score <= 100:
            raise ValueError(f"Invalid score {self.score}. Must be within 0-100")

    def with_weight(self, weight: float) -> "RubricDimension":
        """Copy of this dimension annotated with its weight."""
        return replace(self, weight=weight)


@dataclass(frozen=True)
class RubricDims:
    """The fixed set of five dimensions."""

    relevance: RubricDimension
    rule: RubricDimension
    application: RubricDimension
    citation: RubricDimension
    conclusion: RubricDimension

    def items(self) -> Iterator[tuple[str, RubricDimension]]:
        """Yield (name, dimension) pairs in canonical order."""
        for name in DIMENSIONS:
            yield name, getattr(self, name)


@dataclass(frozen=True)
class RubricScore:
    """Aggregate evaluation of one Turn.

    Attributes:
        total: Weighted sum of dimension scores, rounded, 0-100
        dims: The five weighted dimensions
        gaps: Required elements not found in the argument, in element order
        actionable: At most 3 suggestions, most severe first
        must_fix: Highest-priority blocking problem, or None
        overall_level: "excellent", "good", "fair" or "poor"
    """

    total: int
    dims: RubricDims
    gaps: tuple[str, ...] = ()
    actionable: tuple[str, ...] = ()
    must_fix: str | None = None
    overall_level: str = LEVEL_POOR

    def __post_init__(self) -> None:
        """Validate enumerated fields."""
        if self.must_fix is not None and self.must_fix not in VALID_MUST_FIX:
            raise ValueError(
                f"Invalid must_fix '{self.must_fix}'. Must be one of: {VALID_MUST_FIX}"
            )
        if self.overall_level not in VALID_LEVELS:
            raise ValueError(
                f"Invalid overall_level '{self.overall_level}'. Must be one of: {VALID_LEVELS}"
            )


@dataclass(frozen=True)
class CrossCheckResult:
    """Outcome of the optional AI rule cross-check.

    A skipped check carries the reason (disabled, timeout, backend error)
    and has no effect on the score.
    """

    status: str
    reason: str = ""

    def __post_init__(self) -> None:
        """Validate status is one of the allowed values."""
        if self.status not in VALID_CHECK_STATUSES:
            raise ValueError(
                f"Invalid status '{self.status}'. Must be one of: {VALID_CHECK_STATUSES}"
            )

    @classmethod
    def skipped(cls, reason: str) -> "CrossCheckResult":
        return cls(status=CHECK_SKIPPED, reason=reason)

    @property
    def is_mismatch(self) -> bool:
        return self.status == CHECK_INACCURATE
