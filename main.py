import logging
import sys

import pandas as pd

from offseason import metrics, settings
from offseason.loader import PrimarySourceError, load_report_data
from offseason.logger import PACKAGE_LOGGER, setup_logger

logger = logging.getLogger(f"{PACKAGE_LOGGER}.main")


def run_process() -> int:
    """Main orchestration function: load, normalize and summarize the past-season data."""
    setup_logger(log_level=settings.LOG_LEVEL)
    cfy = settings.CURRENT_FISCAL_YEAR
    logger.info(f"--- Starting Off-Season Inventory Process (FY{cfy:02d}) ---")

    try:
        data = load_report_data(current_fiscal_year=cfy)
    except PrimarySourceError as e:
        logger.error(f"❌ {e}. Aborting.")
        return 1

    for name, batch in (
        ("inventory", data.inventory),
        ("graph", data.graph),
        ("target", data.target),
    ):
        logger.info(f"{name.capitalize()}: {len(batch)} records, {batch.skipped} skipped.")
        for failure in batch.failures:
            logger.debug(f"  > {failure.source} row {failure.index}: {failure.reason}")

    with pd.option_context("display.width", 200, "display.max_columns", None):
        logger.info("\n--- Off-Season FW Summary ---")
        logger.info(metrics.off_season_summary(data.inventory.records).to_string())

        if data.graph.records:
            logger.info("\n--- Monthly Sales Trend (PY vs CY) ---")
            logger.info(metrics.monthly_sales_trend(data.graph.records, cfy).to_string())

            logger.info("\n--- Monthly Ending Stock by Bucket ---")
            logger.info(metrics.monthly_stock_by_bucket(data.graph.records, cfy).to_string())

        if data.graph.records and data.target.records:
            logger.info("\n--- Category Actual vs Target ---")
            analysis = metrics.category_target_analysis(
                data.graph.records,
                data.target.records,
                period=metrics.period_code(cfy, 12),
                opening_period=metrics.period_code(cfy, 11),
                target_period=f"{2000 + cfy % 100}-12",
            )
            logger.info(analysis.to_string())

    logger.info("\n--- Process Finished Successfully ---")
    return 0


if __name__ == "__main__":
    sys.exit(run_process())
