"""
Unit tests for the exporter (csvinfer.export).

Tests dtype mapping, extra-column handling, CSV / Parquet writing and
error handling using pytest's tmp_path fixture.
"""

from __future__ import annotations

import math

import pandas as pd
import pyarrow as pa
import pytest

from csvinfer.config import ParserOptions
from csvinfer.exceptions import ExportError
from csvinfer.export import export_result, to_arrow, to_dataframe
from csvinfer.parsers.batch import BatchParser


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _result(text: str, **options):
    return BatchParser(ParserOptions(**options)).parse(text)


MIXED_CSV = (
    "name,age,score,active,joined\n"
    "John,30,1.5,true,2024-01-15\n"
    "Jane,,2.25,false,2024-02-01\n"
)


# ---------------------------------------------------------------------------
# DataFrame conversion
# ---------------------------------------------------------------------------

class TestToDataFrame:
    """Tests for to_dataframe()."""

    def test_dtypes_follow_column_types(self):
        df = to_dataframe(_result(MIXED_CSV))
        assert list(df.columns) == ["name", "age", "score", "active", "joined"]
        assert df["name"].dtype == "string"
        assert df["age"].dtype == "Int64"
        assert df["score"].dtype == "float64"
        assert df["active"].dtype == "boolean"
        assert df["joined"].dtype == "string"

    def test_empty_cells_become_missing(self):
        df = to_dataframe(_result(MIXED_CSV))
        assert df["age"].tolist()[0] == 30
        assert pd.isna(df["age"].iloc[1])

    def test_integer_column_with_fraction_becomes_float(self):
        """The column stays integer-typed; the frame must not truncate 2.5."""
        df = to_dataframe(_result("v\n1\n2.5"))
        assert df["v"].dtype == "float64"
        assert df["v"].tolist() == [1.0, 2.5]

    def test_text_in_number_column_is_missing(self):
        df = to_dataframe(_result("v\n1\nn/a"))
        assert df["v"].dtype == "Int64"
        assert pd.isna(df["v"].iloc[1])

    def test_infinity_in_integer_column_becomes_float(self):
        df = to_dataframe(_result("v\n1\nInfinity"))
        assert df["v"].dtype == "float64"
        assert df["v"].iloc[0] == 1.0
        assert math.isinf(df["v"].iloc[1])

    def test_integer_beyond_int64_becomes_float(self):
        df = to_dataframe(_result("v\n99999999999999999999"))
        assert df["v"].dtype == "float64"
        assert df["v"].iloc[0] == pytest.approx(1e20)

    def test_extra_column_name_avoids_header_name(self):
        df = to_dataframe(_result("column_3,b\n1,2,3"))
        assert list(df.columns) == ["column_3", "b", "column_3.1"]
        assert df["column_3"].tolist() == [1]
        assert df["column_3.1"].tolist() == ["3"]

    def test_extra_cells_get_synthesized_columns(self):
        df = to_dataframe(_result("a,b\n1,2\n3,4,5"))
        assert list(df.columns) == ["a", "b", "column_3"]
        assert pd.isna(df["column_3"].iloc[0])
        assert df["column_3"].iloc[1] == "5"

    def test_object_rows(self):
        df = to_dataframe(_result(MIXED_CSV, row_mode="object"))
        assert df["name"].tolist() == ["John", "Jane"]
        assert df["active"].tolist() == [True, False]

    def test_empty_result(self):
        df = to_dataframe(_result(""))
        assert df.empty
        assert list(df.columns) == []

    def test_header_only(self):
        df = to_dataframe(_result("a,b"))
        assert list(df.columns) == ["a", "b"]
        assert len(df) == 0


class TestToArrow:
    """Tests for to_arrow()."""

    def test_schema(self):
        table = to_arrow(_result(MIXED_CSV))
        schema = table.schema
        assert schema.field("age").type == pa.int64()
        assert schema.field("score").type == pa.float64()
        assert schema.field("active").type == pa.bool_()
        name_type = schema.field("name").type
        assert pa.types.is_string(name_type) or pa.types.is_large_string(name_type)
        assert table.num_rows == 2


# ---------------------------------------------------------------------------
# File export
# ---------------------------------------------------------------------------

class TestExportResult:
    """Tests for export_result()."""

    def test_csv(self, tmp_path):
        path = export_result(_result(MIXED_CSV), tmp_path / "out.csv")
        loaded = pd.read_csv(path)
        assert loaded["name"].tolist() == ["John", "Jane"]
        assert loaded["score"].tolist() == [1.5, 2.25]

    def test_parquet_round_trip(self, tmp_path):
        path = export_result(_result(MIXED_CSV), tmp_path / "out.parquet", "parquet")
        loaded = pd.read_parquet(path)
        assert loaded["age"].dtype == "Int64"
        assert loaded["active"].tolist() == [True, False]

    def test_creates_parent_directory(self, tmp_path):
        target = tmp_path / "nested" / "deeper" / "out.csv"
        export_result(_result("a\n1"), target)
        assert target.exists()

    def test_non_integer_values_in_integer_column_export(self, tmp_path):
        path = export_result(_result("v\n1\nInfinity"), tmp_path / "out.parquet", "parquet")
        loaded = pd.read_parquet(path)
        assert math.isinf(loaded["v"].iloc[1])

    def test_unsupported_format(self, tmp_path):
        with pytest.raises(ExportError, match="Unsupported output format"):
            export_result(_result("a\n1"), tmp_path / "out.xlsx", "xlsx")

    def test_write_failure_is_wrapped(self, tmp_path):
        target = tmp_path / "is_a_dir"
        target.mkdir()
        with pytest.raises(ExportError, match="Failed to write"):
            export_result(_result("a\n1"), target)
