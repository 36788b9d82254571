from . import settings
from .parsers import map_category
from .schemas import InventoryRecordRaw, InventoryRow, SeasonInfo

# Normalized field -> local-currency source field.
INVENTORY_FX_FIELDS = {
    "gross_sales_fx": "gross_sales_month",
    "net_sales_fx": "net_sales_month",
    "stock_price_fx": "stock_price_tag",
    "stock_cost_fx": "stock_cost",
    "ac_sales_gross_fx": "ac_sales_gross",
    "net_acp_p_fx": "net_acp_p",
    "ac_sales_cost_fx": "ac_sales_cost",
    "ac_sales_net_amount_fx": "ac_sales_net_amount",
    "cogs_fx": "cogs_month",
}


def fx_rate_for(country: str) -> float:
    """Returns the fixed rate for a country code; unknown codes use DEFAULT_FX_RATE."""
    return settings.FX_RATES.get(country, settings.DEFAULT_FX_RATE)


def convert(value: float, country: str) -> float:
    """Converts a local-currency amount into the reporting currency."""
    if country == settings.BASE_CURRENCY_COUNTRY:
        return value
    return value / fx_rate_for(country)


def discount_rate(gross_sales: float, net_sales: float) -> float | None:
    """
    1 - net / gross. Returns None when there are no gross sales, so that
    "no sales" is never reported as a 0% discount.
    """
    if gross_sales > 0:
        return 1 - (net_sales / gross_sales)
    return None


def apply_fx(raw: InventoryRecordRaw, season_info: SeasonInfo) -> InventoryRow:
    """Builds the normalized inventory row: raw fields kept, FX fields and season attached."""
    converted = {
        target: convert(getattr(raw, source), raw.country)
        for target, source in INVENTORY_FX_FIELDS.items()
    }
    return InventoryRow(
        **raw.model_dump(),
        **converted,
        fx_rate=fx_rate_for(raw.country),
        discount_rate_month=discount_rate(
            converted["gross_sales_fx"], converted["net_sales_fx"]
        ),
        season_info=season_info,
        mapped_category=map_category(raw.category, raw.category_name),
    )
