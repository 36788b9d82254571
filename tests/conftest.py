"""
Shared fixtures: small CSV builders for the three source layouts.
"""

import pytest

INVENTORY_COLUMNS = [
    "period",
    "Country",
    "ITEM CODE",
    "ITEM DESC2",
    "SEASON",
    "CATEGORY",
    "CATEGORY NAME",
    "SUBCATEGORY",
    "SUBCATEGORY NAME",
    "Gross Sales ($)",
    "Net Sales ($)",
    "COGS ($)",
    "Stock Cost ($)",
    "Stock Price ($)",
]

GRAPH_COLUMNS = [
    "Period",
    "Year",
    "Season_Code",
    "Gross_Sales",
    "Net_Sales",
    "Stock_Price",
    "Stock_Cost",
    "Country",
    "Category",
]


def _cell(value) -> str:
    text = "" if value is None else str(value)
    if "," in text or '"' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def build_csv(columns: list[str], rows: list[dict]) -> str:
    lines = [",".join(_cell(c) for c in columns)]
    for row in rows:
        lines.append(",".join(_cell(row.get(c, "")) for c in columns))
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_csv():
    """Returns a builder: make_csv(columns, rows) -> CSV text."""
    return build_csv


@pytest.fixture
def inventory_csv():
    """Returns a builder for merged-inventory extracts: inventory_csv(rows) -> CSV text."""

    def _build(rows: list[dict]) -> str:
        return build_csv(INVENTORY_COLUMNS, rows)

    return _build


@pytest.fixture
def graph_csv():
    """Returns a builder for time-series extracts: graph_csv(rows) -> CSV text."""

    def _build(rows: list[dict]) -> str:
        return build_csv(GRAPH_COLUMNS, rows)

    return _build
