"""Tests for core scoring: text heuristics, citation resolution, rubric aggregation.

Exit Criteria:
- total == round(sum of weighted dimension scores), always within 0-100
- actionable has at most 3 entries, ordered by ascending dimension score
- must_fix priority: MISSING_CITATION > WRONG_RULE > ELEMENT_GAP > None
- Gaps are searched across issue + rule + application
"""

import pytest

from core.errors import CitationLookupError
from core.schemas.results import (
    LEVEL_EXCELLENT,
    LEVEL_FAIR,
    LEVEL_GOOD,
    LEVEL_POOR,
    MUST_FIX_ELEMENT_GAP,
    MUST_FIX_MISSING_CITATION,
    MUST_FIX_WRONG_RULE,
    RubricDimension,
)
from core.schemas.turn import Turn
from core.scoring.citation_verify import (
    KIND_LAW,
    first_unresolved,
    is_cited_inline,
    resolve_citation,
    verify_all_citations,
)
from core.scoring.irac_rubric import (
    ACTIONABLE_TEMPLATES,
    APPLICATION_FALLBACK,
    DIMENSION_WEIGHTS,
    aggregate,
    build_dims,
    derive_warnings,
    format_rubric_feedback,
    identify_gaps,
    is_circular,
    overall_level,
    round_half_up,
    weighted_total,
)
from core.scoring.text_match import (
    char_ngrams,
    contains_any,
    covered_elements,
    extract_keywords,
    fuzzy_match,
    interpolate,
    jaccard,
    missing_elements,
)


def _scored(**scores: int) -> dict[str, RubricDimension]:
    """Five dimensions at 80 unless overridden."""
    values = {name: 80 for name in DIMENSION_WEIGHTS}
    values.update(scores)
    return {name: RubricDimension(score=value) for name, value in values.items()}


# =============================================================================
# Test: core/scoring/text_match.py
# =============================================================================


class TestTextMatch:
    """Tests for keyword and element heuristics."""

    def test_extract_keywords_mixed(self) -> None:
        assert extract_keywords("合同是否成立？Offer and acceptance") == {
            "合同是否成立",
            "offer",
            "and",
            "acceptance",
        }

    def test_extract_keywords_ignores_single_chars(self) -> None:
        assert extract_keywords("甲 a 乙 b") == set()

    def test_jaccard(self) -> None:
        assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
        assert jaccard(set(), set()) == 0.0

    def test_fuzzy_match_ignores_order(self) -> None:
        assert fuzzy_match("承诺后约定要件", "要约")
        assert not fuzzy_match("承诺", "要约")
        assert not fuzzy_match("anything", "  ")

    def test_covered_and_missing_partition(self) -> None:
        elements = ["要约", "承诺", "标的"]
        text = "甲发出要约，乙作出承诺"
        assert covered_elements(text, elements) == ["要约", "承诺"]
        assert missing_elements(text, elements) == ["标的"]

    def test_interpolate(self) -> None:
        assert interpolate(0.55, 0.4, 0.7, 70, 90) == 80
        assert interpolate(2.0, 0.4, 0.7, 70, 90) == 90
        assert interpolate(-1.0, 0.4, 0.7, 70, 90) == 70

    def test_contains_any_case_insensitive(self) -> None:
        assert contains_any("Therefore the contract stands", ["therefore"])
        assert not contains_any("the contract stands", ["therefore"])

    def test_char_ngrams(self) -> None:
        assert char_ngrams("合同成立") == {"合同", "同成", "成立"}
        assert char_ngrams("合") == {"合"}
        assert char_ngrams("，。") == set()


# =============================================================================
# Test: core/scoring/citation_verify.py
# =============================================================================


class TestCitationVerify:
    """Tests for citation resolution."""

    def test_resolve_existing(self, laws: dict[str, str]) -> None:
        result = resolve_citation("L1", laws, KIND_LAW)
        assert result.exists
        assert result.marker == "[L1]"
        assert result.content == laws["L1"]

    def test_resolve_missing_non_strict(self, laws: dict[str, str]) -> None:
        result = resolve_citation("L9", laws, KIND_LAW)
        assert not result.exists
        assert result.content == ""

    def test_resolve_missing_strict_raises(self, laws: dict[str, str]) -> None:
        with pytest.raises(CitationLookupError) as exc_info:
            resolve_citation("L9", laws, KIND_LAW, strict=True)
        assert exc_info.value.ref_id == "L9"
        assert exc_info.value.kind == "law"

    def test_verify_all(self, facts: dict[str, str]) -> None:
        results, all_valid = verify_all_citations(["F1", "F9"], facts)
        assert [r.exists for r in results] == [True, False]
        assert not all_valid

    def test_verify_all_empty_is_valid(self, facts: dict[str, str]) -> None:
        assert verify_all_citations([], facts) == ([], True)

    def test_first_unresolved(self, laws: dict[str, str]) -> None:
        assert first_unresolved(["L1", "L8", "L9"], laws) == "L8"
        assert first_unresolved(["L1"], laws) is None

    def test_is_cited_inline(self) -> None:
        assert is_cited_inline("根据[F1]，甲方已付款", "F1")
        assert is_cited_inline("根据[F1]，甲方已付款", "1")
        assert is_cited_inline("fact F2 shows", "F2")
        assert not is_cited_inline("甲方已付款", "F1")


# =============================================================================
# Test: core/scoring/irac_rubric.py - totals and levels
# =============================================================================


class TestTotalsAndLevels:
    """Tests for weighted_total and overall_level."""

    def test_weights_sum_to_one(self) -> None:
        assert sum(DIMENSION_WEIGHTS.values()) == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "scores",
        [
            dict(relevance=51, rule=100, application=100, citation=100, conclusion=90),
            dict(relevance=0, rule=0, application=0, citation=0, conclusion=0),
            dict(relevance=100, rule=100, application=100, citation=100, conclusion=100),
            dict(relevance=33, rule=67, application=71, citation=49, conclusion=55),
            dict(relevance=45, rule=45, application=45, citation=45, conclusion=50),
        ],
    )
    def test_total_is_rounded_weighted_sum(self, scores: dict[str, int]) -> None:
        dims = build_dims(_scored(**scores))
        expected = round_half_up(
            sum(scores[name] * weight for name, weight in DIMENSION_WEIGHTS.items())
        )
        total = weighted_total(dims)
        assert total == expected
        assert 0 <= total <= 100

    def test_round_half_up(self) -> None:
        assert round_half_up(45.5) == 46
        assert round_half_up(89.2) == 89
        assert round_half_up(0.0) == 0

    def test_build_dims_sets_weights(self) -> None:
        dims = build_dims(_scored())
        assert dims.application.weight == 0.30
        assert dims.conclusion.weight == 0.10

    def test_build_dims_missing_dimension(self) -> None:
        scored = _scored()
        del scored["rule"]
        with pytest.raises(KeyError):
            build_dims(scored)

    @pytest.mark.parametrize(
        "total,level",
        [
            (100, LEVEL_EXCELLENT),
            (85, LEVEL_EXCELLENT),
            (84, LEVEL_GOOD),
            (70, LEVEL_GOOD),
            (69, LEVEL_FAIR),
            (55, LEVEL_FAIR),
            (54, LEVEL_POOR),
            (0, LEVEL_POOR),
        ],
    )
    def test_overall_level_thresholds(self, total: int, level: str) -> None:
        assert overall_level(total) == level


# =============================================================================
# Test: core/scoring/irac_rubric.py - aggregate
# =============================================================================


class TestAggregate:
    """Tests for gaps, actionable feedback and must_fix."""

    def test_strong_turn_aggregate(self, strong_turn: Turn) -> None:
        score = aggregate(strong_turn, _scored(), ("要约", "承诺", "意思表示一致"))
        assert score.total == 80
        assert score.gaps == ()
        assert score.actionable == ()
        assert score.must_fix is None
        assert score.overall_level == LEVEL_GOOD

    def test_gaps_searched_across_issue_rule_application(self, make_turn) -> None:
        """An element named only in the rule is not a gap."""
        turn = make_turn(
            rule="合同经要约与承诺而成立，须有意思表示一致",
            application="甲发出要约，乙随即作出承诺，合同因此订立完毕。",
        )
        assert identify_gaps(turn, ("要约", "承诺", "意思表示一致")) == []

    def test_gaps_in_element_order(self, make_turn) -> None:
        turn = make_turn(
            issue="甲乙之间的合同是否已经订立",
            rule="合同的订立需要双方当事人的合意存在",
            application="甲方发出了报价，乙方回复同意，合同由此订立完毕。",
        )
        assert identify_gaps(turn, ("要约", "承诺", "标的")) == ["要约", "承诺", "标的"]

    def test_actionable_at_most_three_sorted_ascending(self, strong_turn: Turn) -> None:
        scored = _scored(relevance=60, rule=20, application=40, citation=10, conclusion=30)
        score = aggregate(strong_turn, scored, ())
        assert len(score.actionable) == 3
        assert score.actionable == (
            ACTIONABLE_TEMPLATES["citation"],
            ACTIONABLE_TEMPLATES["rule"],
            ACTIONABLE_TEMPLATES["conclusion"],
        )

    def test_actionable_ties_keep_dimension_order(self, strong_turn: Turn) -> None:
        scored = _scored(relevance=50, citation=50)
        score = aggregate(strong_turn, scored, ())
        assert score.actionable == (
            ACTIONABLE_TEMPLATES["relevance"],
            ACTIONABLE_TEMPLATES["citation"],
        )

    def test_actionable_none_at_threshold(self, strong_turn: Turn) -> None:
        score = aggregate(strong_turn, _scored(relevance=70, rule=70), ())
        assert score.actionable == ()

    def test_application_suggestion_names_two_gaps(self, make_turn) -> None:
        turn = make_turn(
            issue="甲乙之间的合同是否已经订立",
            rule="合同的订立需要双方当事人的合意存在",
            application="甲方发出了报价，乙方回复同意，合同由此订立完毕。",
        )
        score = aggregate(turn, _scored(application=50), ("要约", "承诺", "标的"))
        assert score.actionable == ("请补充论证以下要件：要约、承诺",)

    def test_application_suggestion_fallback_without_gaps(self, strong_turn: Turn) -> None:
        score = aggregate(strong_turn, _scored(application=50), ())
        assert score.actionable == (APPLICATION_FALLBACK,)

    def test_must_fix_missing_facts_beats_everything(self, make_turn) -> None:
        turn = make_turn(cited_facts=())
        score = aggregate(turn, _scored(rule=10, relevance=10), ())
        assert score.must_fix == MUST_FIX_MISSING_CITATION

    def test_must_fix_missing_laws(self, make_turn) -> None:
        score = aggregate(make_turn(cited_laws=()), _scored(), ())
        assert score.must_fix == MUST_FIX_MISSING_CITATION

    def test_must_fix_wrong_rule_before_element_gap(self, strong_turn: Turn) -> None:
        score = aggregate(strong_turn, _scored(rule=49, relevance=10), ())
        assert score.must_fix == MUST_FIX_WRONG_RULE

    def test_must_fix_element_gap(self, strong_turn: Turn) -> None:
        score = aggregate(strong_turn, _scored(relevance=39), ())
        assert score.must_fix == MUST_FIX_ELEMENT_GAP

    def test_must_fix_none_at_thresholds(self, strong_turn: Turn) -> None:
        score = aggregate(strong_turn, _scored(rule=50, relevance=40), ())
        assert score.must_fix is None


# =============================================================================
# Test: core/scoring/irac_rubric.py - warnings and formatting
# =============================================================================


class TestWarnings:
    """Tests for derive_warnings and format_rubric_feedback."""

    def test_no_warnings_for_strong_turn(self, strong_turn: Turn) -> None:
        score = aggregate(strong_turn, _scored(), ())
        assert derive_warnings(strong_turn, score) == []

    def test_off_topic_and_must_fix(self, make_turn) -> None:
        turn = make_turn(cited_laws=())
        score = aggregate(turn, _scored(relevance=45), ())
        assert derive_warnings(turn, score) == ["MISSING_CITATION", "OFF_TOPIC"]

    def test_circular_reasoning(self, make_turn) -> None:
        turn = make_turn(conclusion="甲乙之间的买卖合同是否成立")
        assert is_circular(turn)
        score = aggregate(turn, _scored(), ())
        assert "CIRCULAR_REASONING" in derive_warnings(turn, score)

    def test_distinct_conclusion_not_circular(self, strong_turn: Turn) -> None:
        assert not is_circular(strong_turn)

    def test_format_rubric_feedback(self, strong_turn: Turn) -> None:
        score = aggregate(strong_turn, _scored(rule=40), ("不存在的要件",))
        text = format_rubric_feedback(score)
        assert text.startswith(f"Total: {score.total} ({score.overall_level})")
        assert "[WEAK] RULE: 40" in text
        assert "Missing elements: 不存在的要件" in text
        assert "Must fix: WRONG_RULE" in text
