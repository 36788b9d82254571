"""
Past-season aggregates over normalized rows.

Every function here reads normalized InventoryRow / GraphRow / TargetRow
objects and returns a pandas DataFrame; nothing is mutated. Ratios that have
no meaningful denominator (no sales, no stock, no COGS) are NaN rather than 0.
"""

import math
from collections.abc import Iterable, Sequence

import pandas as pd

from . import settings
from .schemas import CategoryType, SourceYear, YearBucket
from .seasons import OFF_SEASON_BUCKETS, is_off_season_fw

BUCKET_ORDER = [YearBucket.Y1.value, YearBucket.Y2.value, YearBucket.Y3_PLUS.value]
CATEGORY_ORDER = [c.value for c in CategoryType]

_SEASON_COLUMNS = ["season_type", "year_bucket", "off_season"]


def to_frame(rows: Iterable) -> pd.DataFrame:
    """
    Flattens normalized rows into a DataFrame. Season info is expanded into
    'season_type', 'year_bucket' and 'off_season' columns; enums become their values.
    """
    records = []
    for row in rows:
        record = row.model_dump(mode="json", exclude={"season_info"})
        record["season_type"] = row.season_info.season_type.value
        record["year_bucket"] = row.season_info.year_bucket.value
        record["off_season"] = is_off_season_fw(row)
        records.append(record)
    if not records:
        return pd.DataFrame(columns=_SEASON_COLUMNS)
    return pd.DataFrame(records)


def _off_season_frame(rows: Iterable, countries: Sequence[str] | None) -> pd.DataFrame:
    """Normalized rows from the reporting countries that pass the off-season FW filter."""
    countries = countries if countries is not None else settings.REPORTING_COUNTRIES
    frame = to_frame(rows)
    if frame.empty:
        return frame
    return frame[frame["off_season"] & frame["country"].isin(countries)].copy()


def _ratio(numerator: float, denominator: float) -> float | None:
    if denominator > 0:
        return float(numerator) / float(denominator)
    return None


def _discount(gross: float, net: float) -> float | None:
    share = _ratio(net, gross)
    return None if share is None else 1 - share


def _yoy(cy_value: float, py_value: float) -> float | None:
    """Current year as a percentage of prior year (110.0 == +10%)."""
    share = _ratio(cy_value, py_value)
    return None if share is None else share * 100


def _pp_change(cy_rate: float | None, py_rate: float | None) -> float | None:
    if cy_rate is None or py_rate is None:
        return None
    return (cy_rate - py_rate) * 100


def _inventory_days(stock_cost: float, cogs: float) -> int | None:
    share = _ratio(stock_cost, cogs)
    if share is None:
        return None
    # Half-up rounding to whole days.
    return math.floor(share * settings.INVENTORY_DAYS_FACTOR + 0.5)


def _column_sum(frame: pd.DataFrame, column: str) -> float:
    if frame.empty or column not in frame:
        return 0.0
    return float(frame[column].sum())


def off_season_summary(rows: Iterable, countries: Sequence[str] | None = None) -> pd.DataFrame:
    """
    PY vs CY past-season KPIs from normalized inventory rows, one line per
    bucket (Y1, Y2, Y3Plus) plus 'Total'.

    Columns: py_sales / cy_sales (tag-price gross sales), sales_yoy,
    py_discount / cy_discount, discount_change_pp, py_stock / cy_stock
    (ending stock at tag price), stock_yoy, inventory_days (CY stock cost
    over CY monthly COGS, in days).
    """
    frame = _off_season_frame(rows, countries)

    summary = []
    for bucket in [*BUCKET_ORDER, "Total"]:
        scope = frame if bucket == "Total" or frame.empty else frame[frame["year_bucket"] == bucket]
        if scope.empty:
            py = cy = scope
        else:
            py = scope[scope["source_year"] == SourceYear.PY.value]
            cy = scope[scope["source_year"] == SourceYear.CY.value]

        py_sales = _column_sum(py, "gross_sales_fx")
        cy_sales = _column_sum(cy, "gross_sales_fx")
        py_discount = _discount(py_sales, _column_sum(py, "net_sales_fx"))
        cy_discount = _discount(cy_sales, _column_sum(cy, "net_sales_fx"))
        py_stock = _column_sum(py, "stock_price_fx")
        cy_stock = _column_sum(cy, "stock_price_fx")

        summary.append(
            {
                "bucket": bucket,
                "py_sales": py_sales,
                "cy_sales": cy_sales,
                "sales_yoy": _yoy(cy_sales, py_sales),
                "py_discount": py_discount,
                "cy_discount": cy_discount,
                "discount_change_pp": _pp_change(cy_discount, py_discount),
                "py_stock": py_stock,
                "cy_stock": cy_stock,
                "stock_yoy": _yoy(cy_stock, py_stock),
                "inventory_days": _inventory_days(
                    _column_sum(cy, "stock_cost_fx"), _column_sum(cy, "cogs_fx")
                ),
            }
        )

    return pd.DataFrame(summary).set_index("bucket")


def period_code(fiscal_year: int, month: int) -> str:
    return f"{fiscal_year % 100:02d}{month:02d}"


def monthly_sales_trend(
    graph_rows: Iterable,
    current_fiscal_year: int,
    months: Sequence[int] | None = None,
    countries: Sequence[str] | None = None,
) -> pd.DataFrame:
    """
    Month-by-month past-season sales, prior fiscal year vs current fiscal year.
    Each row of the time-series was already classified against its own year,
    so the same month compares like-for-like buckets.
    """
    months = months if months is not None else settings.TREND_MONTHS
    frame = _off_season_frame(graph_rows, countries)

    trend = []
    for month in months:
        py_period = period_code(current_fiscal_year - 1, month)
        cy_period = period_code(current_fiscal_year, month)
        py = frame[frame["period"] == py_period] if not frame.empty else frame
        cy = frame[frame["period"] == cy_period] if not frame.empty else frame

        py_sales = _column_sum(py, "gross_sales_fx")
        cy_sales = _column_sum(cy, "gross_sales_fx")
        py_discount = _discount(py_sales, _column_sum(py, "net_sales_fx"))
        cy_discount = _discount(cy_sales, _column_sum(cy, "net_sales_fx"))

        trend.append(
            {
                "month": month,
                "py_period": py_period,
                "cy_period": cy_period,
                "py_sales": py_sales,
                "cy_sales": cy_sales,
                "py_discount": py_discount,
                "cy_discount": cy_discount,
                "sales_yoy": _yoy(cy_sales, py_sales),
                "discount_change_pp": _pp_change(cy_discount, py_discount),
            }
        )

    return pd.DataFrame(trend).set_index("month")


def monthly_stock_by_bucket(
    graph_rows: Iterable,
    current_fiscal_year: int,
    months: Sequence[int] | None = None,
    countries: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Current-year past-season ending stock (tag price) per month and bucket, plus 'total'."""
    months = list(months if months is not None else settings.TREND_MONTHS)
    periods = [period_code(current_fiscal_year, m) for m in months]
    frame = _off_season_frame(graph_rows, countries)
    if not frame.empty:
        frame = frame[frame["period"].isin(periods)]

    if frame.empty:
        stock = pd.DataFrame(0.0, index=periods, columns=BUCKET_ORDER)
    else:
        stock = (
            frame.groupby(["period", "year_bucket"])["stock_price_fx"]
            .sum()
            .unstack(fill_value=0.0)
            .reindex(index=periods, columns=BUCKET_ORDER, fill_value=0.0)
            .fillna(0.0)
            .astype(float)
        )

    stock["total"] = stock[BUCKET_ORDER].sum(axis="columns")
    stock.index = pd.Index(months, name="month")
    stock.columns.name = None
    return stock


def item_analysis(rows: Iterable, countries: Sequence[str] | None = None) -> pd.DataFrame:
    """
    Current-year past-season inventory aggregated per item code.
    - Item attributes (bucket, category, descriptions) come from the item's first row.
    - sell_through = monthly gross / stock (0 without stock).
    - stagnant items have stock but sell below STAGNANT_RATIO_THRESHOLD.
    Sorted by bucket (Y1, Y2, Y3Plus), then by stock, largest first.
    """
    frame = _off_season_frame(rows, countries)
    if not frame.empty:
        frame = frame[frame["source_year"] == SourceYear.CY.value]

    columns = [
        "item_code", "year_bucket", "season", "mapped_category", "subcategory",
        "subcategory_name", "item_desc2", "stock", "gross_sales", "net_sales",
        "cogs", "sell_through", "discount_rate", "inventory_days", "stagnant",
    ]
    if frame.empty:
        return pd.DataFrame(columns=columns)

    items = (
        frame.groupby("item_code", sort=False)
        .agg(
            year_bucket=("year_bucket", "first"),
            season=("season", "first"),
            mapped_category=("mapped_category", "first"),
            subcategory=("subcategory", "first"),
            subcategory_name=("subcategory_name", "first"),
            item_desc2=("item_desc2", "first"),
            stock=("stock_price_fx", "sum"),
            gross_sales=("gross_sales_fx", "sum"),
            net_sales=("net_sales_fx", "sum"),
            cogs=("cogs_fx", "sum"),
        )
        .reset_index()
    )

    has_stock = items["stock"] > 0
    has_sales = items["gross_sales"] > 0
    has_cogs = items["cogs"] > 0

    items["sell_through"] = (items["gross_sales"] / items["stock"].where(has_stock)).fillna(0.0)
    items["discount_rate"] = 1 - items["net_sales"] / items["gross_sales"].where(has_sales)
    items["inventory_days"] = (
        items["stock"] / items["cogs"].where(has_cogs) * settings.INVENTORY_DAYS_FACTOR
    )
    items["stagnant"] = has_stock & (items["sell_through"] < settings.STAGNANT_RATIO_THRESHOLD)

    items["year_bucket"] = pd.Categorical(
        items["year_bucket"], categories=BUCKET_ORDER, ordered=True
    )
    items = items.sort_values(
        ["year_bucket", "stock"], ascending=[True, False], kind="stable"
    )
    items["year_bucket"] = items["year_bucket"].astype(str)
    return items[columns].reset_index(drop=True)


def category_target_analysis(
    graph_rows: Iterable,
    target_rows: Iterable,
    period: str,
    opening_period: str,
    target_period: str,
    countries: Sequence[str] | None = None,
) -> pd.DataFrame:
    """
    Actual vs target per (bucket, category) for one closing month.

    - Actuals come from the time-series rows at `period`; opening stock from
      `opening_period`.
    - Targets are those whose normalized month equals `target_period` ('2025-12'),
      matched to buckets through their own season code.
    - ending_stock_target = opening_stock - tag_sales_target.
    """
    keys = ["year_bucket", "mapped_category"]

    # Template so every bucket x category pair is present, even without data.
    result = pd.DataFrame(
        [(bucket, category) for bucket in BUCKET_ORDER for category in CATEGORY_ORDER],
        columns=keys,
    )

    frame = _off_season_frame(graph_rows, countries)
    closing = frame[frame["period"] == period] if not frame.empty else frame
    if not closing.empty:
        actuals = closing.groupby(keys, as_index=False).agg(
            tag_sales_actual=("gross_sales_fx", "sum"),
            net_sales_actual=("net_sales_fx", "sum"),
            ending_stock_actual=("stock_price_fx", "sum"),
        )
        result = pd.merge(result, actuals, on=keys, how="left")

    opening = frame[frame["period"] == opening_period] if not frame.empty else frame
    if not opening.empty:
        opening_stock = opening.groupby(keys, as_index=False).agg(
            opening_stock=("stock_price_fx", "sum")
        )
        result = pd.merge(result, opening_stock, on=keys, how="left")

    targets = to_frame(target_rows)
    if not targets.empty:
        targets = targets[
            (targets["period_month"] == target_period)
            & targets["year_bucket"].isin([b.value for b in OFF_SEASON_BUCKETS])
        ]
    if not targets.empty:
        planned = targets.groupby(keys, as_index=False).agg(
            tag_sales_target=("tag_sales", "sum"),
            discount_rate_target=("discount_rate", "last"),
        )
        result = pd.merge(result, planned, on=keys, how="left")

    result = result.set_index(keys).reindex(
        columns=[
            "opening_stock",
            "tag_sales_actual",
            "net_sales_actual",
            "ending_stock_actual",
            "tag_sales_target",
            "discount_rate_target",
        ]
    )
    amount_columns = [c for c in result.columns if c != "discount_rate_target"]
    result[amount_columns] = result[amount_columns].astype(float).fillna(0.0)

    has_sales = result["tag_sales_actual"] > 0
    result["discount_rate_actual"] = (
        1 - result["net_sales_actual"] / result["tag_sales_actual"].where(has_sales)
    )
    result["ending_stock_target"] = result["opening_stock"] - result["tag_sales_target"]
    return result
