"""Case catalog builder.

Builds id lookups from the loaded case tables and reports how well issue
law references resolve.
"""

from dataclasses import dataclass

import pandas as pd

from core.schemas.case import HARDNESS_LEVELS, HARDNESS_MEDIUM, Issue
from dialogue.datasets.loaders import LIST_SEPARATOR, CaseBundle


@dataclass
class CoverageReport:
    """Resolution statistics for the case catalog.

    Attributes:
        total_issues: Issues in the catalog
        issues_with_elements: Issues defining at least one required element
        related_laws: Law references across all issues
        related_laws_resolved: References found in laws.csv
        issues_fully_resolved: Issues whose every law reference resolves
    """

    total_issues: int
    issues_with_elements: int
    related_laws: int
    related_laws_resolved: int
    issues_fully_resolved: int

    @property
    def resolved_percent(self) -> float:
        """Percentage of law references resolved."""
        if self.related_laws == 0:
            return 0.0
        return 100.0 * self.related_laws_resolved / self.related_laws

    def __str__(self) -> str:
        """Format coverage report for display."""
        return (
            f"Issues:                    {self.total_issues:,}\n"
            f"Issues with elements:      {self.issues_with_elements:,}\n"
            f"Related-law references:    {self.related_laws:,}\n"
            f"References resolved:       {self.related_laws_resolved:,} ({self.resolved_percent:.1f}%)\n"
            f"Issues fully resolved:     {self.issues_fully_resolved:,}"
        )


def split_list(value) -> tuple[str, ...]:
    """Split a "|"-separated cell into stripped, non-empty items."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ()
    return tuple(item.strip() for item in str(value).split(LIST_SEPARATOR) if item.strip())


class CaseCatalogBuilder:
    """Build lookups from raw case tables.

    Indexes:
        issue_by_id: Map issue id -> Issue
        fact_by_id: Map fact id -> fact content
        law_by_id: Map law id -> law content
    """

    def __init__(self, bundle: CaseBundle) -> None:
        """Initialize builder with case bundle.

        Args:
            bundle: CaseBundle containing the raw tables
        """
        self._bundle = bundle
        self._issue_by_id: dict[str, Issue] = {}
        self._fact_by_id: dict[str, str] = {}
        self._law_by_id: dict[str, str] = {}
        self._built = False

    def build_indexes(self) -> None:
        """Build all indexes from raw tables."""
        self._fact_by_id = self._build_text_index(self._bundle.facts)
        self._law_by_id = self._build_text_index(self._bundle.laws)
        self._build_issue_index()
        self._built = True

    @staticmethod
    def _build_text_index(frame: pd.DataFrame) -> dict[str, str]:
        index = {}
        for _, row in frame.iterrows():
            ref = row.get("id")
            if pd.isna(ref) or not str(ref).strip():
                continue
            content = row.get("content")
            index[str(ref).strip()] = "" if pd.isna(content) else str(content)
        return index

    def _build_issue_index(self) -> None:
        for _, row in self._bundle.issues.iterrows():
            ref = row.get("id")
            if pd.isna(ref) or not str(ref).strip():
                continue

            difficulty = row.get("difficulty", HARDNESS_MEDIUM)
            if pd.isna(difficulty) or difficulty not in HARDNESS_LEVELS:
                difficulty = HARDNESS_MEDIUM

            issue = Issue(
                id=str(ref).strip(),
                text=str(row.get("text", "")),
                elements=split_list(row.get("elements")),
                related_laws=split_list(row.get("related_laws")),
                difficulty=difficulty,
            )
            self._issue_by_id[issue.id] = issue

    @property
    def issue_by_id(self) -> dict[str, Issue]:
        """Get issue index (build first if needed)."""
        if not self._built:
            self.build_indexes()
        return self._issue_by_id

    @property
    def fact_by_id(self) -> dict[str, str]:
        """Get fact index (build first if needed)."""
        if not self._built:
            self.build_indexes()
        return self._fact_by_id

    @property
    def law_by_id(self) -> dict[str, str]:
        """Get law index (build first if needed)."""
        if not self._built:
            self.build_indexes()
        return self._law_by_id

    def compute_coverage(self) -> CoverageReport:
        """Compute resolution statistics.

        Returns:
            CoverageReport with all statistics
        """
        issues = self.issue_by_id.values()
        laws = self.law_by_id

        related = 0
        resolved = 0
        fully_resolved = 0
        for issue in issues:
            hits = sum(1 for ref in issue.related_laws if ref in laws)
            related += len(issue.related_laws)
            resolved += hits
            if hits == len(issue.related_laws):
                fully_resolved += 1

        return CoverageReport(
            total_issues=len(issues),
            issues_with_elements=sum(1 for issue in issues if issue.elements),
            related_laws=related,
            related_laws_resolved=resolved,
            issues_fully_resolved=fully_resolved,
        )
