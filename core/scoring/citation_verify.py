"""Citation resolution for fact and law references.

A Turn cites facts and laws by id. Ids are resolved against the read-only
lookup tables supplied by the case-content store; unresolved ids lower
scores rather than aborting an evaluation.
"""

from dataclasses import dataclass
from typing import Mapping, Sequence

from core.errors import CitationLookupError
from core.ids.canonical import fact_marker, law_marker

KIND_FACT = "fact"
KIND_LAW = "law"


@dataclass(frozen=True)
class CitationResult:
    """Result of resolving a single citation.

    Attributes:
        ref_id: The cited id as submitted
        kind: "fact" or "law"
        marker: Inline marker for the id (e.g., "[F1]")
        exists: Whether the id resolves in the lookup table
        content: Resolved content ("" when unresolved)
    """

    ref_id: str
    kind: str
    marker: str
    exists: bool
    content: str = ""


def resolve_citation(
    ref_id: str,
    table: Mapping[str, str],
    kind: str = KIND_FACT,
    strict: bool = False,
) -> CitationResult:
    """Resolve one cited id.

    Args:
        ref_id: Cited id
        table: Id -> content lookup
        kind: "fact" or "law"
        strict: Raise instead of reporting exists=False

    Returns:
        CitationResult with resolution details

    Raises:
        CitationLookupError: If strict and the id does not resolve
    """
    exists = ref_id in table
    if strict and not exists:
        raise CitationLookupError(kind, ref_id)

    marker = law_marker(ref_id) if kind == KIND_LAW else fact_marker(ref_id)
    return CitationResult(
        ref_id=ref_id,
        kind=kind,
        marker=marker,
        exists=exists,
        content=table.get(ref_id, "") or "",
    )


def verify_all_citations(
    ref_ids: Sequence[str],
    table: Mapping[str, str],
    kind: str = KIND_FACT,
) -> tuple[list[CitationResult], bool]:
    """Resolve all citations and determine if all are valid.

    Args:
        ref_ids: Cited ids
        table: Id -> content lookup
        kind: "fact" or "law"

    Returns:
        Tuple of (list of CitationResult, all_valid bool)
    """
    results = []
    all_valid = True

    for ref_id in ref_ids:
        result = resolve_citation(ref_id, table, kind)
        results.append(result)
        if not result.exists:
            all_valid = False

    return results, all_valid


def first_unresolved(ref_ids: Sequence[str], table: Mapping[str, str]) -> str | None:
    """Return the first id that does not resolve, or None."""
    for ref_id in ref_ids:
        if ref_id not in table:
            return ref_id
    return None


def is_cited_inline(text: str, fact_id: str) -> bool:
    """Check if a fact is referenced in text by marker or by raw id.

    Examples:
        >>> is_cited_inline("根据[F1]，甲方已付款", "F1")
        True
        >>> is_cited_inline("甲方已付款", "F1")
        False
    """
    return fact_marker(fact_id) in text or fact_id in text
