"""
Tests for the inventory, graph and target normalization pipelines.
"""

import pytest

from offseason.parsers import decode_inventory_row
from offseason.pipeline import process_rows
from offseason.pipelines.graph import derive_year, normalize_graph_rows, source_year_for
from offseason.pipelines.inventory import normalize_inventory_rows, reference_year_for
from offseason.pipelines.target import normalize_target_rows
from offseason.schemas import CategoryType, GraphRecordRaw, SourceYear, YearBucket
from offseason.seasons import is_off_season_fw


class TestInventoryNormalization:
    """End-to-end PY / CY inventory normalization."""

    def test_same_code_classified_per_source_year(self, inventory_csv):
        py_text = inventory_csv(
            [{"period": "2412", "Country": "HK", "ITEM CODE": "A1", "SEASON": "24F",
              "Gross Sales ($)": "1000", "Net Sales ($)": "900"}]
        )
        cy_text = inventory_csv(
            [{"period": "2512", "Country": "HK", "ITEM CODE": "A1", "SEASON": "24F",
              "Gross Sales ($)": "1100", "Net Sales ($)": "950"}]
        )

        result = normalize_inventory_rows(py_text, cy_text, 25)

        assert len(result) == 2
        assert result.skipped == 0
        py_row, cy_row = result.records

        assert py_row.source_year == SourceYear.PY
        assert py_row.season_info.year_bucket == YearBucket.IN_SEASON
        assert py_row.discount_rate_month == pytest.approx(0.1)
        assert not is_off_season_fw(py_row)

        assert cy_row.source_year == SourceYear.CY
        assert cy_row.season_info.year_bucket == YearBucket.Y1
        assert cy_row.discount_rate_month == pytest.approx(1 - 950 / 1100)
        assert is_off_season_fw(cy_row)

    def test_prior_year_rows_come_first(self, inventory_csv):
        py_text = inventory_csv([{"ITEM CODE": "P1"}, {"ITEM CODE": "P2"}])
        cy_text = inventory_csv([{"ITEM CODE": "C1"}])

        result = normalize_inventory_rows(py_text, cy_text, 25)

        assert [r.item_code for r in result.records] == ["P1", "P2", "C1"]

    def test_empty_extract_yields_no_rows(self, inventory_csv):
        result = normalize_inventory_rows("", inventory_csv([{"ITEM CODE": "C1"}]), 25)
        assert [r.source_year for r in result.records] == [SourceYear.CY]

    def test_foreign_currency_row(self, inventory_csv):
        cy_text = inventory_csv(
            [{"Country": "MC", "SEASON": "23F", "CATEGORY": "OUT",
              "Gross Sales ($)": "1,030", "Stock Price ($)": "2060"}]
        )

        (row,) = normalize_inventory_rows("", cy_text, 25).records

        assert row.gross_sales_fx == pytest.approx(1000.0)
        assert row.stock_price_fx == pytest.approx(2000.0)
        assert row.mapped_category == CategoryType.OUTER
        assert row.season_info.year_bucket == YearBucket.Y2

    def test_reference_year(self):
        assert reference_year_for(SourceYear.PY, 25) == 24
        assert reference_year_for(SourceYear.CY, 25) == 25


class TestProcessRows:
    def test_bad_row_is_skipped_and_recorded(self):
        rows = [{"ITEM CODE": "A1"}, "not a row", {"ITEM CODE": "A3"}]

        result = process_rows(
            rows, lambda row: decode_inventory_row(row, SourceYear.CY), "CY inventory"
        )

        assert [r.item_code for r in result.records] == ["A1", "A3"]
        assert result.skipped == 1
        failure = result.failures[0]
        assert failure.source == "CY inventory"
        assert failure.index == 1
        assert failure.reason.startswith("TypeError")

    def test_failure_keeps_the_row(self):
        def explode(row):
            raise ValueError("boom")

        result = process_rows([{"A": "1"}], explode, "graph")

        assert len(result) == 0
        assert result.failures[0].row == {"A": "1"}


class TestGraphNormalization:
    def test_rows_framed_by_their_period(self, graph_csv):
        text = graph_csv(
            [
                {"Period": "2412", "Season_Code": "24F", "Country": "HK",
                 "Gross_Sales": "1000", "Net_Sales": "800", "Category": "INNER"},
                {"Period": "2512", "Season_Code": "24F", "Country": "mc",
                 "Gross_Sales": "103", "Net_Sales": "0", "Category": "BOT"},
            ]
        )

        result = normalize_graph_rows(text, 25)

        py_row, cy_row = result.records
        assert (py_row.year, py_row.source_year) == (2024, SourceYear.PY)
        assert py_row.season_info.year_bucket == YearBucket.IN_SEASON
        assert py_row.discount_rate == pytest.approx(0.2)
        assert py_row.mapped_category == CategoryType.INNER

        assert (cy_row.year, cy_row.source_year) == (2025, SourceYear.CY)
        assert cy_row.season_info.year_bucket == YearBucket.Y1
        assert cy_row.country == "MC"
        assert cy_row.gross_sales_fx == pytest.approx(100.0)
        assert cy_row.discount_rate == pytest.approx(1.0)
        assert cy_row.mapped_category == CategoryType.BOTTOM

    def test_derive_year_fallbacks(self):
        assert derive_year(GraphRecordRaw(period="2406"), 25) == 2024
        assert derive_year(GraphRecordRaw(period="", year_label="2023"), 25) == 2023
        assert derive_year(GraphRecordRaw(period="Total", year_label="FY"), 25) == 2025

    def test_source_year_for(self):
        assert source_year_for(2024, 25) == SourceYear.PY
        assert source_year_for(2025, 25) == SourceYear.CY
        assert source_year_for(2023, 25) == SourceYear.CY


class TestTargetNormalization:
    def test_amount_layout(self, make_csv):
        text = make_csv(
            ["PERIOD", "SEASON_NAME", "SEASON", "CATEGORY", "AMOUNT"],
            [{"PERIOD": "Dec-25", "SEASON_NAME": "FW24", "SEASON": "24F",
              "CATEGORY": "INNER", "AMOUNT": "5,000"}],
        )

        (row,) = normalize_target_rows(text, 25).records

        assert row.period_month == "2025-12"
        assert row.tag_sales == 5000.0
        assert row.mapped_category == CategoryType.INNER
        assert row.season_info.year_bucket == YearBucket.Y1

    def test_tag_sales_layout(self, make_csv):
        text = make_csv(
            ["PERIOD", "SEASON", "CATEGORY", "TAG_SALES", "NET_SALES", "DISCOUNT_RATE"],
            [{"PERIOD": "2025-12", "SEASON": "22F", "CATEGORY": "OUTER",
              "TAG_SALES": "4000", "NET_SALES": "2000", "DISCOUNT_RATE": "0.5"}],
        )

        (row,) = normalize_target_rows(text, 25).records

        assert row.period_month == "2025-12"
        assert row.tag_sales == 4000.0
        assert row.discount_rate == 0.5
        assert row.season_info.year_bucket == YearBucket.Y3_PLUS
