"""
Builds the three normalized collections consumed by reporting.

The PY and CY inventory extracts are primary: if either cannot be read, or
yields no rows at all, loading fails. The time-series and target files are
supplementary and fall back to empty collections.
"""

import logging

from .data_handler import Location, SourceUnavailableError
from .pipeline import DataPipeline
from .pipelines.graph import GraphPipeline
from .pipelines.inventory import InventoryPipeline
from .pipelines.target import TargetPipeline
from .schemas import BatchResult, ReportData, SourceYear

logger = logging.getLogger(__name__)


class PrimarySourceError(SourceUnavailableError):
    """A primary inventory extract is missing or empty."""


def _run_optional(pipeline: DataPipeline) -> BatchResult:
    try:
        return pipeline.run()
    except SourceUnavailableError as e:
        logger.warning(
            f"⚠️ No {pipeline.report_type} data available ({e.reason}). Using an empty collection."
        )
        return BatchResult()


def load_report_data(
    py_source: Location | None = None,
    cy_source: Location | None = None,
    graph_source: Location | None = None,
    target_source: Location | None = None,
    current_fiscal_year: int | None = None,
) -> ReportData:
    """
    Loads and normalizes every source. Unset locations and fiscal year fall
    back to settings.
    Raises PrimarySourceError when a primary inventory extract is unusable.
    """
    inventory_pipeline = InventoryPipeline(py_source, cy_source, current_fiscal_year)
    try:
        inventory = inventory_pipeline.run()
    except SourceUnavailableError as e:
        logger.error(f"❌ Primary inventory extract unavailable: {e}")
        raise PrimarySourceError(e.location, e.reason) from e

    # Both extracts must contribute rows; a file that tokenizes to nothing is
    # treated like a missing one.
    for source_year in SourceYear:
        if not any(
            r.source_year == source_year for r in inventory.records
        ) and not any(f.source.startswith(source_year.value) for f in inventory.failures):
            location = inventory_pipeline.sources[source_year.value]
            logger.error(f"❌ {source_year.value} inventory extract has no rows: {location}")
            raise PrimarySourceError(location, f"{source_year.value} extract has no rows")

    graph = _run_optional(GraphPipeline(graph_source, current_fiscal_year))
    target = _run_optional(TargetPipeline(target_source, current_fiscal_year))

    return ReportData(inventory=inventory, graph=graph, target=target)
