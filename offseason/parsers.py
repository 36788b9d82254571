from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from . import settings
from .schemas import (
    CategoryType,
    GraphRecordRaw,
    InventoryRecordRaw,
    SourceYear,
    TargetRecordRaw,
)
from .utils import first_present, parse_number, parse_string

# Alternate spellings of inventory columns, tried in order. Older exports keep
# the line break that wraps these header cells.
INVENTORY_COLUMN_ALTERNATES = {
    "ac_sales_cost": [
        "AC Sales\n(Cost)",
        "AC Sales (Cost)",
        "AC Sales\r\n(Cost)",
    ],
    "ac_sales_net_amount": [
        "AC Sales\n(Net Amount)",
        "AC Sales (Net Amount)",
        "AC Sales\r\n(Net Amount)",
    ],
    "ac_sales_gross": [
        "AC Sales\n(Gross Sales)",
        "AC Sales (Gross Sales)",
        "AC Sales\r\n(Gross Sales)",
    ],
}


def _decode_fields(
    model: type[BaseModel],
    row: Mapping[str, str],
    column_alternates: dict[str, list[str]] | None = None,
) -> dict[str, Any]:
    """
    A reusable helper that reads every aliased field of `model` from a
    header-keyed CSV row.
    - Numeric fields go through parse_number, text fields through parse_string.
    - Fields without an alias are not CSV columns and are left to the caller.
    - Unknown columns in the row are ignored.
    """
    if not isinstance(row, Mapping):
        raise TypeError(f"Expected a header-keyed row, got {type(row).__name__}")

    column_alternates = column_alternates or {}
    values: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        if info.alias is None:
            continue
        raw = first_present(row, column_alternates.get(name, info.alias))
        if info.annotation is float:
            values[name] = parse_number(raw)
        else:
            values[name] = parse_string(raw)
    return values


def map_category(*codes: str) -> CategoryType:
    """
    Returns the reporting category for the first recognized code or name.
    Anything unrecognized falls into WEAR_ETC.
    """
    for code in codes:
        mapped = settings.CATEGORY_MAP.get(parse_string(code).upper())
        if mapped:
            return CategoryType(mapped)
    return CategoryType.WEAR_ETC


def decode_inventory_row(
    row: Mapping[str, str], source_year: SourceYear
) -> InventoryRecordRaw:
    """Decodes one merged-inventory CSV row, tagging it with its source extract."""
    values = _decode_fields(InventoryRecordRaw, row, INVENTORY_COLUMN_ALTERNATES)
    values["country"] = values["country"].upper()
    return InventoryRecordRaw(source_year=source_year, **values)


def decode_graph_row(row: Mapping[str, str]) -> GraphRecordRaw:
    """Decodes one time-series CSV row. The Category column is optional."""
    values = _decode_fields(GraphRecordRaw, row)
    values["country"] = values["country"].upper()
    return GraphRecordRaw(**values)


def decode_target_row(row: Mapping[str, str]) -> TargetRecordRaw:
    """
    Decodes one target CSV row in either layout.
    When the file has no TAG_SALES column, the single AMOUNT is the tag-price
    sales target.
    """
    values = _decode_fields(TargetRecordRaw, row)
    if "TAG_SALES" not in row:
        values["tag_sales"] = values["amount"]
    return TargetRecordRaw(**values)
