"""Shared fixtures: one contract-formation case and a well-argued Turn.

The strong Turn scores, with no cross-check:
    relevance 51, rule 100, application 100, citation 100, conclusion 90
    total 89 (excellent), no gaps, must_fix None
"""

from dataclasses import replace

import pytest

from core.schemas.case import Issue, ScoringContext
from core.schemas.turn import STANCE_PRO, Turn

ISSUE_TEXT = "甲乙之间的买卖合同是否成立"

FACTS = {
    "F1": "甲于三月一日向乙发出书面要约，载明货物名称与数量",
    "F2": "乙于三月三日回函表示同意全部条款",
    "F3": "",
}

LAWS = {
    "L1": "民法典第四百七十一条：当事人订立合同，可以采取要约、承诺方式或者其他方式。",
    "L2": "民法典第四百八十三条：承诺生效时合同成立。",
}


# =============================================================================
# Case material
# =============================================================================


@pytest.fixture
def facts() -> dict[str, str]:
    """Fact lookup (F3 resolves to empty content)."""
    return dict(FACTS)


@pytest.fixture
def laws() -> dict[str, str]:
    """Law lookup."""
    return dict(LAWS)


@pytest.fixture
def issue() -> Issue:
    """Contract formation issue with three required elements."""
    return Issue(
        id="I1",
        text=ISSUE_TEXT,
        elements=("要约", "承诺", "意思表示一致"),
        related_laws=("L1", "L2"),
    )


@pytest.fixture
def ctx(issue: Issue, facts: dict[str, str], laws: dict[str, str]) -> ScoringContext:
    """Scoring context for the contract formation issue."""
    return ScoringContext(issue=issue, facts=facts, laws=laws)


# =============================================================================
# Turns
# =============================================================================


@pytest.fixture
def strong_turn() -> Turn:
    """Well-argued pro Turn covering every element with inline citations."""
    return Turn(
        issue_id="I1",
        stance=STANCE_PRO,
        issue=ISSUE_TEXT,
        rule="依据[L1]与[L2]，合同经要约与承诺而成立，承诺生效时合同成立",
        application=(
            "根据[F1]，甲向乙发出了内容具体确定的要约；"
            "根据[F2]，乙作出了同意全部条款的承诺，双方意思表示一致。"
        ),
        conclusion="因此，甲乙之间的买卖合同已经成立",
        cited_facts=("F1", "F2"),
        cited_laws=("L1", "L2"),
    )


@pytest.fixture
def strong_raw(strong_turn: Turn) -> dict:
    """Wire form of the strong Turn."""
    return strong_turn.to_dict()


@pytest.fixture
def make_turn(strong_turn: Turn):
    """Factory: the strong Turn with selected fields replaced."""

    def _make(**changes) -> Turn:
        return replace(strong_turn, **changes)

    return _make
