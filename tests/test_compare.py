"""Tests for ID presence comparisons."""

import pandas as pd
import pytest
from openpyxl import load_workbook

from core.services.compare import compare_files, compare_metrics, write_comparisons


@pytest.fixture
def ours():
    return pd.DataFrame({"id": [1, 2, 2, 3], "status": ["open", "closed", "closed", "open"]})


@pytest.fixture
def theirs():
    return pd.DataFrame({"id": [2, 3, 4], "status": ["closed", "closed", "open"]})


class TestCompareFiles:
    """Test presence flags between two frames."""

    def test_one_row_per_distinct_id(self, ours, theirs):
        result = compare_files(ours, theirs, "id")
        assert result["id"].tolist() == [1, 2, 3, 4]

    def test_presence_flags(self, ours, theirs):
        result = compare_files(ours, theirs, "id")

        assert result["in_df1"].tolist() == [True, True, True, False]
        assert result["in_df2"].tolist() == [False, True, True, True]
        assert result["in_both"].tolist() == [False, True, True, False]

    def test_custom_labels(self, ours, theirs):
        result = compare_files(ours, theirs, ["id"], df1_label="ours", df2_label="state")
        assert list(result.columns) == ["id", "in_ours", "in_state", "in_both"]

    def test_composite_keys(self):
        a = pd.DataFrame({"id": [1, 1], "period": ["Q1", "Q2"]})
        b = pd.DataFrame({"id": [1], "period": ["Q2"]})
        result = compare_files(a, b, ["id", "period"])

        assert result["in_both"].tolist() == [False, True]

    def test_identical_labels_are_rejected(self, ours, theirs):
        with pytest.raises(ValueError):
            compare_files(ours, theirs, "id", df1_label="x", df2_label="x")


class TestCompareMetrics:
    """Test per-metric comparisons."""

    def test_query_string_and_callable_filters(self, ours, theirs):
        sheets, summary = compare_metrics(
            ours,
            theirs,
            "id",
            {"all": lambda d: d["id"] > 0, "open": "status == 'open'"},
        )

        assert list(sheets) == ["all", "open"]
        assert sheets["open"]["id"].tolist() == [1, 3, 4]
        assert summary.to_dict("records") == [
            {"metric": "all", "in_df1": 3, "in_df2": 3},
            {"metric": "open", "in_df1": 2, "in_df2": 1},
        ]

    def test_bad_filter_type(self, ours, theirs):
        with pytest.raises(TypeError):
            compare_metrics(ours, theirs, "id", {"bad": 42})


class TestWriteComparisons:
    """Test the comparison workbook."""

    def test_one_sheet_per_metric(self, tmp_path, ours, theirs):
        out_path = tmp_path / "cmp" / "comparison.xlsx"
        summary = write_comparisons(
            ours,
            theirs,
            "id",
            {"all": lambda d: d["id"] > 0, "open/active": "status == 'open'"},
            out_path,
        )

        workbook = load_workbook(out_path)
        assert workbook.sheetnames == ["all", "open-active"]
        assert workbook["all"]["A1"].value == "id"
        assert len(summary) == 2
