"""Tests for header resolution and cell coercion."""

import math

import pytest

from campaign_dashboard.services.pipeline import (
    NOT_FOUND,
    FieldSpec,
    RawTable,
    build_column_map,
    normalize_date,
    normalize_rows,
    parse_integer,
    parse_number,
    find_containing,
    resolve_any,
    resolve_column,
)

HEADERS = ["Date", "Campaign name", "Ad group name", "Ad name", "Video URL", "Impressions", "Clicks", "Cost"]


class TestResolveColumn:
    def test_exact_match_is_case_insensitive_and_trimmed(self):
        assert resolve_column(["  IMPRESSIONS ", "Clicks"], "impressions") == 0

    def test_exact_match_beats_earlier_partial(self):
        headers = ["Link clicks", "Clicks"]
        assert resolve_column(headers, "Clicks") == 1

    def test_partial_fallback(self):
        assert resolve_column(["Date", "Total video views"], "video views") == 1

    def test_not_found(self):
        assert resolve_column(HEADERS, "Reach") == NOT_FOUND

    def test_empty_headers_are_skipped(self):
        assert resolve_column([None, "", "Cost"], "cost") == 2

    def test_exact_only_disables_partial(self):
        assert resolve_column(["Link clicks"], "clicks", exact_only=True) == NOT_FOUND

    def test_synonyms_first_hit_wins(self):
        headers = ["Dia", "Data"]
        assert resolve_any(headers, ["Date", "Data", "Dia"]) == 1

    def test_build_column_map(self):
        cmap = build_column_map(HEADERS, {"date": ["Date"], "reach": ["Reach", "Alcance"]})
        assert cmap == {"date": 0, "reach": NOT_FOUND}

    def test_find_containing_takes_first_partial(self):
        headers = ["CPM bruto", "CPM"]
        assert find_containing(headers, "cpm") == 0
        assert resolve_column(headers, "cpm") == 1
        assert find_containing(headers, "ctr") == NOT_FOUND


class TestParseNumber:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("100,50", 100.5),
            ("R$ 1.234,56", 1234.56),
            ("1.000", 1000.0),
            ("100.50", 100.5),
            ("12,5%", 12.5),
            ("(100)", -100.0),
            (42, 42.0),
            (3.25, 3.25),
        ],
    )
    def test_locale_inputs(self, raw, expected):
        assert parse_number(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "   ", "-", "abc", "1,2,3", float("nan"), float("inf")])
    def test_garbage_is_zero(self, raw):
        value = parse_number(raw)
        assert value == 0.0
        assert math.isfinite(value)

    def test_integer_parse(self):
        assert parse_integer("1.234") == 1234
        assert parse_integer("12,9") == 12
        assert parse_integer(7.8) == 7
        assert parse_integer("n/a") == 0


class TestNormalizeDate:
    def test_day_first_slash_triple(self):
        assert normalize_date("15/01/2025") == "2025-01-15"
        assert normalize_date("5/1/2025") == "2025-01-05"

    @pytest.mark.parametrize(
        "raw",
        ["15/01/2025 10:30:00", "15/01/2025 10:30", "15/01/2025T10:30:00", " 15/01/2025 "],
    )
    def test_day_first_with_time_part(self, raw):
        assert normalize_date(raw) == "2025-01-15"

    def test_other_slash_forms(self):
        assert normalize_date("01/2025") is None
        assert normalize_date("15/01/2025/1") is None

    def test_iso(self):
        assert normalize_date("2025-01-15") == "2025-01-15"
        assert normalize_date("2025-01-15T10:30:00") == "2025-01-15"

    def test_generic_fallback(self):
        assert normalize_date("Jan 15 2025") == "2025-01-15"

    def test_impossible_dates(self):
        assert normalize_date("31/02/2025") is None
        assert normalize_date("2025-13-01") is None

    @pytest.mark.parametrize("raw", [None, "", "not a date", 45150])
    def test_unparseable(self, raw):
        assert normalize_date(raw) is None


def test_normalize_rows_drops_blank_identity_and_defaults_missing_columns():
    table = RawTable.from_values(
        [
            HEADERS,
            ["15/01/2025", "Campaign A", "Group A", "Ad 1", "", "1000", "50", "100,50"],
            ["16/01/2025", "Campaign A", "Group A", "   ", "", "10", "1", "1,00"],
            ["17/01/2025", "Campaign A", "Group A", "Ad 2"],
        ]
    )
    fields = {
        "date": FieldSpec(("Date",), "date"),
        "ad_name": FieldSpec(("Ad name",)),
        "impressions": FieldSpec(("Impressions",), "integer"),
        "cost": FieldSpec(("Cost",), "number"),
        "reach": FieldSpec(("Reach",), "integer"),
    }

    df = normalize_rows(table, fields, required=("ad_name",))

    assert list(df["ad_name"]) == ["Ad 1", "Ad 2"]
    first = df.iloc[0].to_dict()
    assert first["date"] == "2025-01-15"
    assert first["impressions"] == 1000
    assert first["cost"] == pytest.approx(100.5)
    assert first["reach"] == 0
    # short row: missing cells fall back to defaults
    assert df.iloc[1]["impressions"] == 0


def test_raw_table_accepts_nested_payload():
    nested = RawTable.from_payload({"data": {"values": [["A"], ["1"]]}})
    flat = RawTable.from_payload({"values": [["A"], ["1"]]})
    assert nested == flat
    assert nested.headers == ("A",)
    assert RawTable.from_payload({"unexpected": True}).is_empty
