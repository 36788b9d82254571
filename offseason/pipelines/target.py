import logging

from offseason import data_handler, settings
from offseason.data_handler import Location
from offseason.parsers import decode_target_row, map_category
from offseason.pipeline import DataPipeline, process_rows
from offseason.schemas import BatchResult, TargetRecordRaw, TargetRow
from offseason.seasons import parse_season
from offseason.tokenizer import parse_csv
from offseason.utils import normalize_period_label

logger = logging.getLogger(__name__)


def normalize_target_row(raw: TargetRecordRaw, current_fiscal_year: int) -> TargetRow:
    # Targets carry no FX conversion; they are planned in the reporting currency.
    return TargetRow(
        **raw.model_dump(),
        period_month=normalize_period_label(raw.period),
        mapped_category=map_category(raw.category),
        season_info=parse_season(raw.season, current_fiscal_year),
    )


def normalize_target_rows(text: str, current_fiscal_year: int) -> BatchResult[TargetRow]:
    """Tokenizes and normalizes the past-season target file."""
    return process_rows(
        parse_csv(text),
        lambda row: normalize_target_row(decode_target_row(row), current_fiscal_year),
        "target",
    )


class TargetPipeline(DataPipeline):
    def __init__(self, source: Location | None = None, current_fiscal_year: int | None = None):
        super().__init__("target", current_fiscal_year)
        self.source = source or settings.TARGET_SOURCE

    def extract(self) -> dict[str, str]:
        logger.info(f"--- Loading Target File: {self.source} ---")
        return {"target": data_handler.load_source_text(self.source)}

    def transform(self, texts: dict[str, str]) -> BatchResult[TargetRow]:
        return normalize_target_rows(texts["target"], self.current_fiscal_year)
