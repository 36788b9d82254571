import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from offseason import settings
from offseason.schemas import BatchResult, RowFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def process_rows(
    rows: Iterable[Mapping[str, str]],
    convert: Callable[[Mapping[str, str]], T],
    source: str,
) -> BatchResult[T]:
    """
    Applies `convert` to every tokenized row, best-effort.
    A row that raises is logged and recorded as a RowFailure; the batch continues.
    """
    records: list[T] = []
    failures: list[RowFailure] = []

    for index, row in enumerate(rows):
        try:
            records.append(convert(row))
        except Exception as e:
            logger.warning(f"  > ⚠️  Skipping {source} row {index}: {e}")
            failures.append(
                RowFailure(
                    source=source,
                    index=index,
                    reason=f"{type(e).__name__}: {e}",
                    row=dict(row) if isinstance(row, Mapping) else {},
                )
            )

    return BatchResult(records=records, failures=failures)


class DataPipeline(ABC):
    """
    Abstract base class for the record pipelines (Inventory, Graph, Target).
    Follows an Extract -> Transform pattern; nothing is persisted.
    """

    def __init__(self, report_type: str, current_fiscal_year: int | None = None):
        self.report_type = report_type
        # Use provided fiscal year or default to settings.CURRENT_FISCAL_YEAR
        self.current_fiscal_year = (
            current_fiscal_year
            if current_fiscal_year is not None
            else settings.CURRENT_FISCAL_YEAR
        )

    def run(self) -> BatchResult[Any]:
        """
        Orchestrates the pipeline execution.
        Acquisition failures (SourceUnavailableError) propagate to the caller.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} DATA")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        texts = self.extract()

        # --- 2. TRANSFORM ---
        result = self.transform(texts)

        logger.info(
            f"✅ {self.report_type.capitalize()} Pipeline Finished: "
            f"{len(result)} records, {result.skipped} skipped."
        )
        logger.info("=" * 60)
        return result

    @abstractmethod
    def extract(self) -> dict[str, str]:
        """
        Responsible for acquiring the raw CSV text of every source this pipeline reads.
        Raises SourceUnavailableError when a source cannot be read.
        """
        pass

    @abstractmethod
    def transform(self, texts: dict[str, str]) -> BatchResult[Any]:
        """
        Responsible for tokenizing, decoding, season classification and FX normalization.
        Returns the normalized records and per-row diagnostics.
        """
        pass
