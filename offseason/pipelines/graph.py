import logging
import re

from offseason import data_handler, settings
from offseason.data_handler import Location
from offseason.fx import convert, discount_rate, fx_rate_for
from offseason.parsers import decode_graph_row, map_category
from offseason.pipeline import DataPipeline, process_rows
from offseason.pipelines.inventory import reference_year_for
from offseason.schemas import BatchResult, GraphRecordRaw, GraphRow, SourceYear
from offseason.seasons import parse_season
from offseason.tokenizer import parse_csv

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"\d+")
_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def derive_year(raw: GraphRecordRaw, current_fiscal_year: int) -> int:
    """
    Calendar year of a time-series row.
    The 'YYMM' Period is preferred ('2406' -> 2024); the Year column is the
    fallback, and 2000 + current_fiscal_year the last resort.
    """
    period_match = _LEADING_DIGITS.match(raw.period[:2])
    if period_match:
        return 2000 + int(period_match.group())

    year_match = _LEADING_INT.match(raw.year_label)
    year = int(year_match.group()) if year_match else 0
    return year or 2000 + current_fiscal_year


def source_year_for(year: int, current_fiscal_year: int) -> SourceYear:
    """Rows from the prior fiscal year form the PY frame; everything else is CY."""
    if year - 2000 == current_fiscal_year - 1:
        return SourceYear.PY
    return SourceYear.CY


def normalize_graph_row(raw: GraphRecordRaw, current_fiscal_year: int) -> GraphRow:
    """
    Converts a time-series row to the reporting currency and classifies its
    season against the fiscal year of the row's own period.
    """
    year = derive_year(raw, current_fiscal_year)
    source_year = source_year_for(year, current_fiscal_year)
    season_info = parse_season(
        raw.season_code, reference_year_for(source_year, current_fiscal_year)
    )

    gross_sales_fx = convert(raw.gross_sales, raw.country)
    net_sales_fx = convert(raw.net_sales, raw.country)

    return GraphRow(
        **raw.model_dump(),
        year=year,
        source_year=source_year,
        fx_rate=fx_rate_for(raw.country),
        gross_sales_fx=gross_sales_fx,
        net_sales_fx=net_sales_fx,
        stock_price_fx=convert(raw.stock_price, raw.country),
        stock_cost_fx=convert(raw.stock_cost, raw.country),
        discount_rate=discount_rate(gross_sales_fx, net_sales_fx),
        season_info=season_info,
        mapped_category=map_category(raw.category),
    )


def normalize_graph_rows(text: str, current_fiscal_year: int) -> BatchResult[GraphRow]:
    """Tokenizes and normalizes the time-series extract."""
    return process_rows(
        parse_csv(text),
        lambda row: normalize_graph_row(decode_graph_row(row), current_fiscal_year),
        "graph",
    )


class GraphPipeline(DataPipeline):
    def __init__(self, source: Location | None = None, current_fiscal_year: int | None = None):
        super().__init__("graph", current_fiscal_year)
        self.source = source or settings.GRAPH_SOURCE

    def extract(self) -> dict[str, str]:
        logger.info(f"--- Loading Time-Series Extract: {self.source} ---")
        return {"graph": data_handler.load_source_text(self.source)}

    def transform(self, texts: dict[str, str]) -> BatchResult[GraphRow]:
        return normalize_graph_rows(texts["graph"], self.current_fiscal_year)
