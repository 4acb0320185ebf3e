"""Case-content schemas.

Issues, facts and laws are reference data owned by the case-content store.
The engine only reads them.
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from core.schemas.turn import Turn

HARDNESS_EASY = "easy"
HARDNESS_MEDIUM = "medium"
HARDNESS_HARD = "hard"

# Ordered from least to most demanding
HARDNESS_LEVELS = (HARDNESS_EASY, HARDNESS_MEDIUM, HARDNESS_HARD)


@dataclass(frozen=True)
class Issue:
    """A disputed issue learners argue about.

    Attributes:
        id: Issue id (e.g., "I1")
        text: Statement of the disputed question
        elements: Required substantive elements (e.g., 要约, 承诺)
        related_laws: Law ids relevant to the issue
        difficulty: "easy", "medium" or "hard"
    """

    id: str
    text: str
    elements: tuple[str, ...] = ()
    related_laws: tuple[str, ...] = ()
    difficulty: str = HARDNESS_MEDIUM

    def __post_init__(self) -> None:
        """Validate difficulty is one of the allowed values."""
        if self.difficulty not in HARDNESS_LEVELS:
            raise ValueError(
                f"Invalid difficulty '{self.difficulty}'. Must be one of: {HARDNESS_LEVELS}"
            )


@dataclass(frozen=True)
class ScoringContext:
    """Read-only inputs to one Turn evaluation.

    Attributes:
        issue: The active issue
        facts: Fact id -> fact content
        laws: Law id -> law content
        previous_turns: Earlier turns on the same issue, oldest first. The
            built-in scorers do not read it, so a Turn scores the same
            whatever came before; it is carried for custom scorers.
    """

    issue: Issue
    facts: Mapping[str, str] = field(default_factory=dict)
    laws: Mapping[str, str] = field(default_factory=dict)
    previous_turns: tuple[Turn, ...] = ()

    @property
    def elements(self) -> tuple[str, ...]:
        """Required elements of the active issue."""
        return self.issue.elements

    def fact_content(self, fact_ids: Iterable[str]) -> list[str]:
        """Non-empty contents of the given facts, skipping unresolved ids."""
        return [self.facts[ref] for ref in fact_ids if self.facts.get(ref)]

    def law_content(self, law_ids: Iterable[str]) -> list[str]:
        """Non-empty contents of the given laws, skipping unresolved ids."""
        return [self.laws[ref] for ref in law_ids if self.laws.get(ref)]
