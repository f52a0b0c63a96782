"""Tests for tabular loading and wide-row flattening."""

from __future__ import annotations

import math

import pytest

from chartlayout.core.exceptions import DataError
from chartlayout.data.loaders import flatten_wide_rows, parse_number, read_delimited


class TestParseNumber:
    @pytest.mark.parametrize(
        "text,expected",
        [("1,234,567", 1234567.0), (" 42 ", 42.0), ("-3.5", -3.5), (7, 7.0), (2.5, 2.5)],
    )
    def test_numbers(self, text, expected):
        assert parse_number(text) == expected

    @pytest.mark.parametrize("text", ["", "n/a", "  ", None, True])
    def test_non_numbers_are_nan(self, text):
        assert math.isnan(parse_number(text))


class TestReadDelimited:
    def test_csv_with_quoted_numbers(self, movies_csv):
        rows = read_delimited(movies_csv)

        assert len(rows) == 3
        assert rows[0]["name"] == "Avatar"
        assert rows[0]["production_budget"] == "425,000,000"

    def test_tsv_delimiter_from_suffix(self, edges_tsv):
        rows = read_delimited(edges_tsv)

        assert rows[0] == {
            "SOURCE_SUBREDDIT": "askreddit",
            "TARGET_SUBREDDIT": "funny",
            "LINK_SENTIMENT": "1",
        }

    def test_explicit_delimiter(self, tmp_path):
        path = tmp_path / "data.txt"
        path.write_text("a;b\n1;2\n", encoding="utf-8")

        assert read_delimited(path, delimiter=";") == [{"a": "1", "b": "2"}]


class TestFlattenWideRows:
    """Wide rows become one {name, field, value} record per measure."""

    def test_flatten_with_labels(self, movie_rows):
        records = flatten_wide_rows(
            movie_rows,
            "name",
            {"production_budget": "production budget", "worldwide_box_office": "box office"},
            scale=1e6,
        )

        assert len(records) == 6
        assert records[0] == {"name": "Avatar", "field": "production budget", "value": 425.0}
        assert records[1]["field"] == "box office"
        assert records[1]["value"] == pytest.approx(2776.345279)

    def test_flatten_with_column_names(self, movie_rows):
        records = flatten_wide_rows(movie_rows, "name", ["production_budget"])

        assert [r["field"] for r in records] == ["production_budget"] * 3
        assert records[2]["value"] == 12_000_000.0

    def test_missing_column_raises(self, movie_rows):
        with pytest.raises(DataError) as exc_info:
            flatten_wide_rows(movie_rows, "name", ["gross"])
        assert exc_info.value.context["missing"] == ["gross"]

    def test_non_numeric_value_becomes_nan(self):
        records = flatten_wide_rows([{"name": "A", "v": "unknown"}], "name", ["v"])

        assert math.isnan(records[0]["value"])

    def test_zero_scale_raises(self, movie_rows):
        with pytest.raises(DataError):
            flatten_wide_rows(movie_rows, "name", ["production_budget"], scale=0)
