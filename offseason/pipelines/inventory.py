import logging

from offseason import data_handler, settings
from offseason.data_handler import Location, SourceUnavailableError
from offseason.fx import apply_fx
from offseason.parsers import decode_inventory_row
from offseason.pipeline import DataPipeline, process_rows
from offseason.schemas import BatchResult, InventoryRow, SourceYear
from offseason.seasons import parse_season
from offseason.tokenizer import parse_csv

logger = logging.getLogger(__name__)


def reference_year_for(source_year: SourceYear, current_fiscal_year: int) -> int:
    """
    The fiscal year a source extract's season codes are read against.
    The prior-year extract sits one fiscal year back, so '24F' is in-season
    there but one year past in the current-year extract.
    """
    if source_year == SourceYear.PY:
        return current_fiscal_year - 1
    return current_fiscal_year


def normalize_inventory_text(
    text: str, source_year: SourceYear, current_fiscal_year: int
) -> BatchResult[InventoryRow]:
    """Tokenizes and normalizes one merged-inventory extract."""
    reference_year = reference_year_for(source_year, current_fiscal_year)

    def convert(row) -> InventoryRow:
        raw = decode_inventory_row(row, source_year)
        return apply_fx(raw, parse_season(raw.season, reference_year))

    return process_rows(parse_csv(text), convert, f"{source_year.value} inventory")


def normalize_inventory_rows(
    py_text: str, cy_text: str, current_fiscal_year: int
) -> BatchResult[InventoryRow]:
    """
    Normalizes the prior-year and current-year extracts into one collection,
    PY rows first. The two passes share no state.
    """
    py_result = normalize_inventory_text(py_text, SourceYear.PY, current_fiscal_year)
    cy_result = normalize_inventory_text(cy_text, SourceYear.CY, current_fiscal_year)
    return py_result.merge(cy_result)


class InventoryPipeline(DataPipeline):
    def __init__(
        self,
        py_source: Location | None = None,
        cy_source: Location | None = None,
        current_fiscal_year: int | None = None,
    ):
        super().__init__("inventory", current_fiscal_year)
        self.sources = {
            SourceYear.PY.value: py_source or settings.PY_INVENTORY_SOURCE,
            SourceYear.CY.value: cy_source or settings.CY_INVENTORY_SOURCE,
        }

    def extract(self) -> dict[str, str]:
        logger.info("--- Loading PY / CY Inventory Extracts ---")

        # Both extracts are fetched together and joined before decoding.
        texts = data_handler.fetch_sources(self.sources)
        missing = [key for key, text in texts.items() if text is None]
        if missing:
            locations = ", ".join(str(self.sources[key]) for key in missing)
            raise SourceUnavailableError(locations, f"missing {', '.join(missing)} extract")
        return texts

    def transform(self, texts: dict[str, str]) -> BatchResult[InventoryRow]:
        logger.info(
            f"\n--- Normalizing Inventory (CY={self.current_fiscal_year}, "
            f"PY={self.current_fiscal_year - 1}) ---"
        )
        return normalize_inventory_rows(
            texts[SourceYear.PY.value],
            texts[SourceYear.CY.value],
            self.current_fiscal_year,
        )
