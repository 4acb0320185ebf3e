"""Tests for case-content loaders and the catalog builder.

Exit Criteria:
- issues.csv, facts.csv and laws.csv load from a directory
- Missing files and missing columns are reported
- issue_by_id, fact_by_id and law_by_id indexes built
- "|"-separated list cells and invalid difficulties handled
- Law-reference coverage computed
"""

import pandas as pd
import pytest

from core.schemas.case import Issue
from dialogue.datasets.builder import CaseCatalogBuilder, CoverageReport, split_list
from dialogue.datasets.loaders import CaseBundle, load_from_local, validate_datasets


# =============================================================================
# Fixtures: Mock DataFrames
# =============================================================================


@pytest.fixture
def mock_issues() -> pd.DataFrame:
    """Mock issues table with 3 issues."""
    return pd.DataFrame(
        {
            "id": ["I1", "I2", "I3"],
            "text": [
                "甲乙之间的买卖合同是否成立",
                "乙方迟延交货是否构成违约",
                "甲方能否主张解除合同",
            ],
            "elements": ["要约|承诺|意思表示一致", "违约行为| 损害 ", None],
            "related_laws": ["L1|L2", "L3", None],
            "difficulty": ["easy", "extreme", None],
        }
    )


@pytest.fixture
def mock_facts() -> pd.DataFrame:
    """Mock facts table with 3 facts (F3 has no content)."""
    return pd.DataFrame(
        {
            "id": ["F1", "F2", "F3"],
            "content": ["甲于三月一日向乙发出书面要约", "乙于三月三日回函表示同意", None],
        }
    )


@pytest.fixture
def mock_laws() -> pd.DataFrame:
    """Mock laws table with 2 articles."""
    return pd.DataFrame(
        {
            "id": ["L1", "L2"],
            "content": ["当事人订立合同，可以采取要约、承诺方式。", "承诺生效时合同成立。"],
            "title": ["民法典第四百七十一条", "民法典第四百八十三条"],
        }
    )


@pytest.fixture
def mock_bundle(mock_issues, mock_facts, mock_laws) -> CaseBundle:
    """Complete mock bundle."""
    return CaseBundle(issues=mock_issues, facts=mock_facts, laws=mock_laws)


# =============================================================================
# Test: Loading
# =============================================================================


class TestLoadFromLocal:
    """Tests for loading CSVs from a directory."""

    def test_loads_all_tables(self, tmp_path, mock_bundle: CaseBundle) -> None:
        """All 3 CSVs load with string ids."""
        mock_bundle.issues.to_csv(tmp_path / "issues.csv", index=False)
        mock_bundle.facts.to_csv(tmp_path / "facts.csv", index=False)
        mock_bundle.laws.to_csv(tmp_path / "laws.csv", index=False)

        bundle = load_from_local(tmp_path)

        assert len(bundle.issues) == 3
        assert len(bundle.facts) == 3
        assert len(bundle.laws) == 2
        assert list(bundle.facts["id"]) == ["F1", "F2", "F3"]

    def test_numeric_ids_stay_strings(self, tmp_path) -> None:
        """Ids like "01" are not coerced to integers."""
        (tmp_path / "issues.csv").write_text(
            "id,text,elements,related_laws\n01,争议,要约,1\n", encoding="utf-8"
        )
        (tmp_path / "facts.csv").write_text("id,content\n01,事实\n", encoding="utf-8")
        (tmp_path / "laws.csv").write_text("id,content\n1,法条\n", encoding="utf-8")

        builder = CaseCatalogBuilder(load_from_local(tmp_path))

        assert "01" in builder.issue_by_id
        assert "01" in builder.fact_by_id

    def test_missing_file(self, tmp_path, mock_bundle: CaseBundle) -> None:
        """Missing laws.csv raises FileNotFoundError."""
        mock_bundle.issues.to_csv(tmp_path / "issues.csv", index=False)
        mock_bundle.facts.to_csv(tmp_path / "facts.csv", index=False)

        with pytest.raises(FileNotFoundError, match="laws.csv"):
            load_from_local(tmp_path)


# =============================================================================
# Test: CaseBundle Validation
# =============================================================================


class TestValidateDatasets:
    """Tests for column validation."""

    def test_validate_datasets_all_pass(self, mock_bundle: CaseBundle) -> None:
        """All tables pass validation."""
        assert validate_datasets(mock_bundle) == {"issues": True, "facts": True, "laws": True}

    def test_validate_datasets_missing_column(self, mock_bundle: CaseBundle) -> None:
        """Validation fails when a required column is missing."""
        bundle = CaseBundle(
            issues=mock_bundle.issues.drop(columns=["elements"]),
            facts=mock_bundle.facts,
            laws=pd.DataFrame({"wrong_column": [1, 2]}),
        )
        results = validate_datasets(bundle)
        assert results["issues"] is False
        assert results["facts"] is True
        assert results["laws"] is False


# =============================================================================
# Test: Index Building
# =============================================================================


class TestIndexBuilding:
    """Tests for CaseCatalogBuilder index construction."""

    def test_issue_by_id_built(self, mock_bundle: CaseBundle) -> None:
        """issue_by_id index built with Issue values."""
        builder = CaseCatalogBuilder(mock_bundle)
        builder.build_indexes()

        assert set(builder.issue_by_id) == {"I1", "I2", "I3"}
        issue = builder.issue_by_id["I1"]
        assert isinstance(issue, Issue)
        assert issue.elements == ("要约", "承诺", "意思表示一致")
        assert issue.related_laws == ("L1", "L2")
        assert issue.difficulty == "easy"

    def test_list_cells_stripped(self, mock_bundle: CaseBundle) -> None:
        builder = CaseCatalogBuilder(mock_bundle)
        assert builder.issue_by_id["I2"].elements == ("违约行为", "损害")
        assert builder.issue_by_id["I3"].elements == ()

    def test_invalid_difficulty_defaults_to_medium(self, mock_bundle: CaseBundle) -> None:
        builder = CaseCatalogBuilder(mock_bundle)
        assert builder.issue_by_id["I2"].difficulty == "medium"
        assert builder.issue_by_id["I3"].difficulty == "medium"

    def test_fact_and_law_indexes(self, mock_bundle: CaseBundle) -> None:
        """Empty content is kept as an empty string."""
        builder = CaseCatalogBuilder(mock_bundle)
        assert builder.fact_by_id["F2"] == "乙于三月三日回函表示同意"
        assert builder.fact_by_id["F3"] == ""
        assert set(builder.law_by_id) == {"L1", "L2"}

    def test_lazy_build(self, mock_bundle: CaseBundle) -> None:
        """Accessing an index builds all indexes."""
        builder = CaseCatalogBuilder(mock_bundle)
        assert len(builder.law_by_id) == 2
        assert len(builder.issue_by_id) == 3


# =============================================================================
# Test: Coverage Report
# =============================================================================


class TestCoverageReport:
    """Tests for coverage computation."""

    def test_coverage_report_fields(self, mock_bundle: CaseBundle) -> None:
        coverage = CaseCatalogBuilder(mock_bundle).compute_coverage()

        assert isinstance(coverage, CoverageReport)
        assert coverage.total_issues == 3
        assert coverage.issues_with_elements == 2
        assert coverage.related_laws == 3
        assert coverage.related_laws_resolved == 2
        # I3 has no references, so it counts as fully resolved
        assert coverage.issues_fully_resolved == 2

    def test_coverage_percent(self, mock_bundle: CaseBundle) -> None:
        coverage = CaseCatalogBuilder(mock_bundle).compute_coverage()
        assert coverage.resolved_percent == pytest.approx(200 / 3)

    def test_coverage_percent_no_references(self) -> None:
        assert CoverageReport(0, 0, 0, 0, 0).resolved_percent == 0.0

    def test_coverage_str_format(self, mock_bundle: CaseBundle) -> None:
        output = str(CaseCatalogBuilder(mock_bundle).compute_coverage())
        assert "Issues:" in output
        assert "References resolved:" in output
        assert "(66.7%)" in output


# =============================================================================
# Test: Edge Cases
# =============================================================================


class TestEdgeCases:
    """Tests for edge cases."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, ()),
            (float("nan"), ()),
            ("", ()),
            ("要约", ("要约",)),
            ("要约| 承诺 ||", ("要约", "承诺")),
        ],
    )
    def test_split_list(self, value, expected) -> None:
        assert split_list(value) == expected

    def test_empty_tables(self) -> None:
        bundle = CaseBundle(
            issues=pd.DataFrame(columns=["id", "text", "elements", "related_laws"]),
            facts=pd.DataFrame(columns=["id", "content"]),
            laws=pd.DataFrame(columns=["id", "content"]),
        )
        builder = CaseCatalogBuilder(bundle)

        assert builder.issue_by_id == {}
        assert builder.compute_coverage().total_issues == 0

    def test_rows_without_id_skipped(self) -> None:
        bundle = CaseBundle(
            issues=pd.DataFrame(
                {
                    "id": ["I1", None],
                    "text": ["争议", "无编号"],
                    "elements": [None, None],
                    "related_laws": [None, None],
                }
            ),
            facts=pd.DataFrame({"id": ["F1", " "], "content": ["事实", "空白编号"]}),
            laws=pd.DataFrame({"id": [None], "content": ["无编号法条"]}),
        )
        builder = CaseCatalogBuilder(bundle)

        assert list(builder.issue_by_id) == ["I1"]
        assert list(builder.fact_by_id) == ["F1"]
        assert builder.law_by_id == {}
